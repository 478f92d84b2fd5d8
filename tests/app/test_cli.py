from __future__ import annotations

import json

import pytest

from identirec.domain.resolution import (
    ClusterViolation,
    ConsolidatedContact,
    IdentityFragment,
    StoreUnavailableError,
)
from identirec.ui import cli

VIEW = ConsolidatedContact(
    primary_contact_id=1,
    emails=("a@x.com", "b@x.com"),
    phone_numbers=("111",),
    secondary_contact_ids=(2,),
)


@pytest.fixture
def captured(monkeypatch: pytest.MonkeyPatch) -> list[IdentityFragment]:
    fragments: list[IdentityFragment] = []

    def fake_identify(fragment: IdentityFragment) -> ConsolidatedContact:
        fragments.append(fragment)
        return VIEW

    monkeypatch.setattr(cli, "identify_contact", fake_identify)
    return fragments


def test_identify_prints_response_envelope(
    captured: list[IdentityFragment], capsys: pytest.CaptureFixture[str]
) -> None:
    cli.main(["identify", "--email", "a@x.com", "--phone", "111"])

    assert captured == [IdentityFragment(email="a@x.com", phone_number="111")]
    body = json.loads(capsys.readouterr().out)
    assert body == {
        "contact": {
            "primaryContactId": 1,
            "emails": ["a@x.com", "b@x.com"],
            "phoneNumbers": ["111"],
            "secondaryContactIds": [2],
        }
    }


def test_identify_accepts_raw_json_body(captured: list[IdentityFragment]) -> None:
    cli.main(["identify", "--json", '{"phoneNumber": 111}'])

    assert captured == [IdentityFragment(phone_number="111")]


@pytest.mark.parametrize(
    "argv",
    [
        ["identify"],
        ["identify", "--email", "not-an-email"],
        ["identify", "--phone", "12-34"],
        ["identify", "--json", "{not json"],
        ["identify", "--json", "{}", "--email", "a@x.com"],
    ],
)
def test_identify_rejects_invalid_requests(
    captured: list[IdentityFragment], argv: list[str]
) -> None:
    with pytest.raises(SystemExit) as excinfo:
        cli.main(argv)

    assert excinfo.value.code == 2
    assert captured == []


def test_identify_store_failure_exits_with_error(monkeypatch: pytest.MonkeyPatch) -> None:
    def failing_identify(_fragment: IdentityFragment) -> ConsolidatedContact:
        raise StoreUnavailableError("store down")

    monkeypatch.setattr(cli, "identify_contact", failing_identify)

    with pytest.raises(SystemExit) as excinfo:
        cli.main(["identify", "--email", "a@x.com"])

    assert excinfo.value.code == 1


def test_audit_clean_store_exits_normally(
    monkeypatch: pytest.MonkeyPatch, capsys: pytest.CaptureFixture[str]
) -> None:
    monkeypatch.setattr(cli, "audit_contact_store", list)

    cli.main(["audit"])

    assert capsys.readouterr().out == ""


def test_audit_reports_violations(
    monkeypatch: pytest.MonkeyPatch, capsys: pytest.CaptureFixture[str]
) -> None:
    violations = [ClusterViolation(contact_id=3, message="secondary has no linked id")]
    monkeypatch.setattr(cli, "audit_contact_store", lambda: violations)

    with pytest.raises(SystemExit) as excinfo:
        cli.main(["audit"])

    assert excinfo.value.code == 1
    assert "contact 3: secondary has no linked id" in capsys.readouterr().out


def test_missing_command_is_usage_error() -> None:
    with pytest.raises(SystemExit) as excinfo:
        cli.main([])

    assert excinfo.value.code == 2
