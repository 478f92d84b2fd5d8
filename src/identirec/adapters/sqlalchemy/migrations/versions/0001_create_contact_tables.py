"""create contact tables

Revision ID: 0001
Revises:
Create Date: 2026-10-16 12:00:00.000000

"""

from __future__ import annotations

import sqlalchemy as sa
from alembic import op

from identirec.adapters.sqlalchemy.mappings import UTCDateTime

# revision identifiers, used by Alembic.
revision = "0001"
down_revision = None
branch_labels = None
depends_on = None


def upgrade() -> None:
    op.create_table(
        "contact",
        sa.Column("id", sa.Integer(), autoincrement=True, nullable=False),
        sa.Column("email", sa.String(length=255), nullable=True),
        sa.Column("phone_number", sa.String(length=32), nullable=True),
        sa.Column(
            "link_precedence",
            sa.Enum("primary", "secondary", name="linkprecedence", native_enum=False),
            nullable=False,
        ),
        sa.Column("linked_id", sa.Integer(), nullable=True),
        sa.Column("created_at", UTCDateTime(), nullable=False),
        sa.Column("updated_at", UTCDateTime(), nullable=False),
        sa.Column("deleted_at", UTCDateTime(), nullable=True),
        sa.CheckConstraint(
            "email IS NOT NULL OR phone_number IS NOT NULL",
            name=op.f("ck_contact_contact_info_required"),
        ),
        sa.CheckConstraint(
            "(link_precedence = 'primary' AND linked_id IS NULL) OR "
            "(link_precedence = 'secondary' AND linked_id IS NOT NULL)",
            name=op.f("ck_contact_secondary_requires_linked_id"),
        ),
        sa.ForeignKeyConstraint(
            ["linked_id"],
            ["contact.id"],
            name=op.f("fk_contact_linked_id_contact"),
        ),
        sa.PrimaryKeyConstraint("id", name=op.f("pk_contact")),
    )
    op.create_index("ix_contact_email", "contact", ["email"])
    op.create_index("ix_contact_phone_number", "contact", ["phone_number"])
    op.create_index("ix_contact_linked_id", "contact", ["linked_id"])
    op.create_index(
        "uq_contact_email_phone_live",
        "contact",
        [sa.text("coalesce(email, '')"), sa.text("coalesce(phone_number, '')")],
        unique=True,
        sqlite_where=sa.text("deleted_at IS NULL"),
        postgresql_where=sa.text("deleted_at IS NULL"),
    )

    op.create_table(
        "contact_merge",
        sa.Column("id", sa.Integer(), autoincrement=True, nullable=False),
        sa.Column("source_id", sa.Integer(), nullable=False),
        sa.Column("target_id", sa.Integer(), nullable=False),
        sa.Column(
            "reason",
            sa.Enum(
                "shared_email",
                "shared_phone",
                "shared_email_and_phone",
                name="mergereason",
                native_enum=False,
            ),
            nullable=False,
        ),
        sa.Column("relinked", sa.Integer(), nullable=False),
        sa.Column("created_at", UTCDateTime(), nullable=False),
        sa.ForeignKeyConstraint(
            ["source_id"],
            ["contact.id"],
            name=op.f("fk_contact_merge_source_id_contact"),
        ),
        sa.ForeignKeyConstraint(
            ["target_id"],
            ["contact.id"],
            name=op.f("fk_contact_merge_target_id_contact"),
        ),
        sa.PrimaryKeyConstraint("id", name=op.f("pk_contact_merge")),
    )
    op.create_index("ix_contact_merge_target_id", "contact_merge", ["target_id"])


def downgrade() -> None:
    op.drop_index("ix_contact_merge_target_id", table_name="contact_merge")
    op.drop_table("contact_merge")
    op.drop_index("uq_contact_email_phone_live", table_name="contact")
    op.drop_index("ix_contact_linked_id", table_name="contact")
    op.drop_index("ix_contact_phone_number", table_name="contact")
    op.drop_index("ix_contact_email", table_name="contact")
    op.drop_table("contact")
