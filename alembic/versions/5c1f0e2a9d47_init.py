"""init

Revision ID: 5c1f0e2a9d47
Revises:
Create Date: 2026-10-19 10:42:08.118204

"""

from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa


# revision identifiers, used by Alembic.
revision: str = "5c1f0e2a9d47"
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    op.create_table(
        "metas",
        sa.Column("address", sa.String(512), primary_key=True),
        sa.Column("version", sa.Integer, nullable=False),
        sa.Column("key", sa.JSON, nullable=False),
        sa.Column("seed", sa.String(512), nullable=True),
        sa.Column("fingerprint", sa.String(1024), nullable=True),
    )

    op.create_table(
        "profiles",
        sa.Column("address", sa.String(512), primary_key=True),
        sa.Column("identifier", sa.String(512), nullable=False),
        sa.Column("data", sa.Text, nullable=False),
        sa.Column("signature", sa.String(1024), nullable=False),
        sa.Column("expires", sa.BigInteger, nullable=True),
    )

    op.create_table(
        "private_keys",
        sa.Column("address", sa.String(512), primary_key=True),
        sa.Column("thumbprint", sa.String(128), primary_key=True),
        sa.Column("jwk", sa.JSON, nullable=False),
        sa.Column("sign", sa.Boolean, nullable=False),
        sa.Column("decrypt", sa.Boolean, nullable=False),
    )

    op.create_table(
        "contacts",
        sa.Column("id", sa.Integer, primary_key=True, autoincrement=True),
        sa.Column("user_address", sa.String(512), nullable=False),
        sa.Column("contact_address", sa.String(512), nullable=False),
        sa.Column("contact_id", sa.String(512), nullable=False),
    )
    op.create_index(
        "idx_contacts_user_contact",
        "contacts",
        ["user_address", "contact_address"],
        unique=True,
    )

    op.create_table(
        "groups",
        sa.Column("address", sa.String(512), primary_key=True),
        sa.Column("founder", sa.String(512), nullable=True),
        sa.Column("owner", sa.String(512), nullable=True),
    )

    op.create_table(
        "group_members",
        sa.Column("id", sa.Integer, primary_key=True, autoincrement=True),
        sa.Column("group_address", sa.String(512), nullable=False),
        sa.Column("member_address", sa.String(512), nullable=False),
        sa.Column("member_id", sa.String(512), nullable=False),
    )
    op.create_index(
        "idx_group_members_group_member",
        "group_members",
        ["group_address", "member_address"],
        unique=True,
    )

    op.create_table(
        "local_users",
        sa.Column("id", sa.Integer, primary_key=True, autoincrement=True),
        sa.Column("address", sa.String(512), nullable=False),
        sa.Column("identifier", sa.String(512), nullable=False),
        sa.Column("current", sa.Boolean, nullable=False),
    )
    op.create_index("idx_local_users_address", "local_users", ["address"], unique=True)

    op.create_table(
        "aliases",
        sa.Column("guid", sa.String(512), primary_key=True),
        sa.Column("name", sa.String(512), nullable=False),
        sa.Column("identifier", sa.String(512), nullable=False),
        sa.Column("address", sa.String(512), nullable=False),
    )
    op.create_index("idx_aliases_name", "aliases", ["name"], unique=True)
    op.create_index("idx_aliases_address", "aliases", ["address"])


def downgrade() -> None:
    op.drop_table("aliases")
    op.drop_table("local_users")
    op.drop_table("group_members")
    op.drop_table("groups")
    op.drop_table("contacts")
    op.drop_table("private_keys")
    op.drop_table("profiles")
    op.drop_table("metas")
