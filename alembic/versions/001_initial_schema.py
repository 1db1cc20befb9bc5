"""Initial schema - permission, permission_set and their assignment tables.

Revision ID: 001
Revises:
Create Date: 2026-10-19

"""

from collections.abc import Sequence

from alembic import op
import sqlalchemy as sa

# revision identifiers, used by Alembic.
revision: str = "001"
down_revision: str | None = None
branch_labels: str | Sequence[str] | None = None
depends_on: str | Sequence[str] | None = None

# user and member rows belong to the identity service; only their ids are stored here
_PRINCIPAL_LINKS = (
    ("user_permission", "user_id", "permission_id", "permission"),
    ("member_permission", "member_id", "permission_id", "permission"),
    ("user_permission_set", "user_id", "permission_set_id", "permission_set"),
    ("member_permission_set", "member_id", "permission_set_id", "permission_set"),
)


def upgrade() -> None:
    op.create_table(
        "permission",
        sa.Column("id", sa.String(255), primary_key=True),
        sa.Column("name", sa.String(255), nullable=False),
        # plain verb, or JSON array of verbs
        sa.Column("action", sa.Text(), nullable=False),
        sa.Column("subject", sa.Text(), nullable=True),
        sa.Column("inverted", sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.Column("fields", sa.Text(), nullable=True),
        sa.Column("conditions", sa.Text(), nullable=True),
        sa.Column("reason", sa.Text(), nullable=True),
        sa.Column("organization_id", sa.String(255), nullable=True),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False),
        sa.Column("updated_at", sa.DateTime(timezone=True), nullable=True),
        sa.Column("expires_at", sa.DateTime(timezone=True), nullable=True),
    )
    op.create_index("ix_permission_name", "permission", ["name"])
    op.create_index("ix_permission_organization_id", "permission", ["organization_id"])
    op.create_index("ix_permission_created_at", "permission", ["created_at"])

    op.create_table(
        "permission_set",
        sa.Column("id", sa.String(255), primary_key=True),
        sa.Column("name", sa.String(255), nullable=False),
        sa.Column("description", sa.Text(), nullable=True),
        sa.Column("organization_id", sa.String(255), nullable=True),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False),
        sa.Column("updated_at", sa.DateTime(timezone=True), nullable=True),
    )
    op.create_index("ix_permission_set_name", "permission_set", ["name"])
    op.create_index(
        "ix_permission_set_organization_id", "permission_set", ["organization_id"]
    )

    op.create_table(
        "permission_permission_set",
        sa.Column(
            "permission_set_id",
            sa.String(255),
            sa.ForeignKey("permission_set.id"),
            primary_key=True,
        ),
        sa.Column(
            "permission_id", sa.String(255), sa.ForeignKey("permission.id"), primary_key=True
        ),
    )
    op.create_index(
        "ix_permission_permission_set_permission_id",
        "permission_permission_set",
        ["permission_id"],
    )

    for table, principal_column, target_column, target in _PRINCIPAL_LINKS:
        op.create_table(
            table,
            sa.Column(principal_column, sa.String(255), primary_key=True),
            sa.Column(
                target_column,
                sa.String(255),
                sa.ForeignKey(f"{target}.id"),
                primary_key=True,
            ),
        )
        op.create_index(f"ix_{table}_{target_column}", table, [target_column])


def downgrade() -> None:
    for table, _, target_column, _ in reversed(_PRINCIPAL_LINKS):
        op.drop_index(f"ix_{table}_{target_column}", table_name=table)
        op.drop_table(table)
    op.drop_index(
        "ix_permission_permission_set_permission_id", table_name="permission_permission_set"
    )
    op.drop_table("permission_permission_set")
    op.drop_index("ix_permission_set_organization_id", table_name="permission_set")
    op.drop_index("ix_permission_set_name", table_name="permission_set")
    op.drop_table("permission_set")
    op.drop_index("ix_permission_created_at", table_name="permission")
    op.drop_index("ix_permission_organization_id", table_name="permission")
    op.drop_index("ix_permission_name", table_name="permission")
    op.drop_table("permission")
