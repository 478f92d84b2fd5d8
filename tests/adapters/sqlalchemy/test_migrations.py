from __future__ import annotations

from typing import TYPE_CHECKING

from sqlalchemy import inspect, text

from identirec.adapters.sqlalchemy.migrations import upgrade_head

if TYPE_CHECKING:
    from sqlalchemy.engine import Engine


def test_upgrade_head_creates_contact_tables(sqlite_engine: Engine) -> None:
    inspector = inspect(sqlite_engine)

    assert {"contact", "contact_merge", "alembic_version"} <= set(inspector.get_table_names())
    columns = {column["name"] for column in inspector.get_columns("contact")}
    assert columns == {
        "id",
        "email",
        "phone_number",
        "link_precedence",
        "linked_id",
        "created_at",
        "updated_at",
        "deleted_at",
    }


def test_upgrade_head_creates_partial_unique_index(sqlite_engine: Engine) -> None:
    with sqlite_engine.connect() as connection:
        sql = connection.execute(
            text("SELECT sql FROM sqlite_master WHERE type = 'index' AND name = :name"),
            {"name": "uq_contact_email_phone_live"},
        ).scalar_one()

    assert "UNIQUE" in sql.upper()
    assert "deleted_at IS NULL" in sql


def test_upgrade_head_is_idempotent(sqlite_engine: Engine) -> None:
    upgrade_head(engine=sqlite_engine)

    with sqlite_engine.connect() as connection:
        version = connection.execute(text("SELECT version_num FROM alembic_version")).scalar_one()
    assert version == "0001"
