from __future__ import annotations

import pytest

from identirec.domain.resolution import (
    Cluster,
    IdentityFragment,
    InvariantViolationError,
    candidate_primary_ids,
    collect_primaries,
    select_canonical,
)
from tests.helpers.contacts import FakeUnitOfWork, make_contact, seed


def test_candidate_primary_ids_follow_one_hop() -> None:
    uow = FakeUnitOfWork()
    (primary,) = seed(uow, make_contact(email="a@x.com"))
    (secondary,) = seed(uow, make_contact(phone_number="111", linked_to=primary, age_days=1))
    (other,) = seed(uow, make_contact(email="b@x.com", age_days=2))

    assert candidate_primary_ids([secondary, other]) == {primary.id, other.id}


def test_candidate_primary_ids_reject_unlinked_secondary() -> None:
    uow = FakeUnitOfWork()
    (primary,) = seed(uow, make_contact(email="a@x.com"))
    (secondary,) = seed(uow, make_contact(phone_number="111", linked_to=primary))
    secondary.linked_id = None

    with pytest.raises(InvariantViolationError):
        candidate_primary_ids([secondary])


def test_collect_primaries_rejects_chained_links() -> None:
    uow = FakeUnitOfWork()
    (primary,) = seed(uow, make_contact(email="a@x.com"))
    (secondary,) = seed(uow, make_contact(phone_number="111", linked_to=primary, age_days=1))
    assert secondary.id is not None

    with pytest.raises(InvariantViolationError) as exc:
        collect_primaries({secondary.id}, [primary, secondary])

    assert exc.value.contact_id == secondary.id


def test_collect_primaries_rejects_missing_primary() -> None:
    with pytest.raises(InvariantViolationError, match="missing or deleted"):
        collect_primaries({42}, [])


def test_select_canonical_prefers_oldest_then_smallest_id() -> None:
    uow = FakeUnitOfWork()
    newer, older, twin = seed(
        uow,
        make_contact(email="new@x.com", age_days=5),
        make_contact(email="old@x.com", age_days=1),
        make_contact(email="twin@x.com", age_days=1),
    )

    assert select_canonical([newer, twin, older]) is older


def test_cluster_projection_orders_primary_first_and_deduplicates() -> None:
    uow = FakeUnitOfWork()
    (primary,) = seed(uow, make_contact(email="lorraine@x.com", phone_number="123456"))
    late, early = seed(
        uow,
        make_contact(email="mcfly@x.com", phone_number="123456", linked_to=primary, age_days=3),
        make_contact(email="lorraine@x.com", phone_number="555", linked_to=primary, age_days=2),
    )
    assert primary.id is not None

    cluster = Cluster.from_rows(primary.id, [late, primary, early])
    view = cluster.to_view()

    assert view.primary_contact_id == primary.id
    assert view.emails == ("lorraine@x.com", "mcfly@x.com")
    assert view.phone_numbers == ("123456", "555")
    assert view.secondary_contact_ids == (late.id, early.id)


def test_cluster_projection_skips_missing_primary_fields() -> None:
    uow = FakeUnitOfWork()
    (primary,) = seed(uow, make_contact(phone_number="111"))
    (secondary,) = seed(uow, make_contact(email="a@x.com", linked_to=primary, age_days=1))
    assert primary.id is not None

    view = Cluster.from_rows(primary.id, [primary, secondary]).to_view()

    assert view.emails == ("a@x.com",)
    assert view.phone_numbers == ("111",)


def test_cluster_without_primary_is_an_invariant_violation() -> None:
    uow = FakeUnitOfWork()
    (primary,) = seed(uow, make_contact(email="a@x.com"))
    (secondary,) = seed(uow, make_contact(phone_number="1", linked_to=primary))
    assert primary.id is not None

    with pytest.raises(InvariantViolationError, match="no primary"):
        Cluster.from_rows(primary.id, [secondary])


@pytest.mark.parametrize(
    ("email", "phone_number", "expected"),
    [
        ("a@x.com", "111", False),
        ("a@x.com", None, False),
        (None, "222", False),
        ("a@x.com", "222", False),
        ("c@x.com", "111", True),
        (None, "333", True),
    ],
)
def test_cluster_novelty_uses_email_and_phone_sets(
    email: str | None,
    phone_number: str | None,
    expected: bool,  # noqa: FBT001
) -> None:
    uow = FakeUnitOfWork()
    (primary,) = seed(uow, make_contact(email="a@x.com", phone_number="111"))
    (secondary,) = seed(
        uow, make_contact(email="b@x.com", phone_number="222", linked_to=primary, age_days=1)
    )
    cluster = Cluster(primary=primary, secondaries=[secondary])

    assert cluster.is_novel(IdentityFragment(email=email, phone_number=phone_number)) is expected
