"""create users, relationships and microposts tables"""

from alembic import op
import sqlalchemy as sa


# revision identifiers, used by Alembic.
revision = "identity_20261019"
down_revision = None
branch_labels = None
depends_on = None


def upgrade():
    op.create_table(
        "users",
        sa.Column("id", sa.Integer(), primary_key=True),
        sa.Column("email", sa.String(length=255), nullable=False),
        sa.Column("password_hash", sa.String(length=255), nullable=False),
        sa.Column("first_name", sa.String(length=50), nullable=False),
        sa.Column("last_name", sa.String(length=50), nullable=False),
        sa.Column("admin", sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.Column("activated", sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.Column("activation_digest", sa.String(length=64), nullable=True),
        sa.Column("activation_sent_at", sa.DateTime(), nullable=True),
        sa.Column("activated_at", sa.DateTime(), nullable=True),
        sa.Column("remember_digest", sa.String(length=64), nullable=True),
        sa.Column("reset_digest", sa.String(length=64), nullable=True),
        sa.Column("reset_sent_at", sa.DateTime(), nullable=True),
        sa.Column("created_at", sa.DateTime(), nullable=False, server_default=sa.func.now()),
        sa.Column("updated_at", sa.DateTime(), nullable=False, server_default=sa.func.now()),
        sa.UniqueConstraint("email", name="uq_users_email"),
    )

    op.create_table(
        "relationships",
        sa.Column("id", sa.Integer(), primary_key=True),
        sa.Column("follower_id", sa.Integer(), sa.ForeignKey("users.id"), nullable=False),
        sa.Column("followed_id", sa.Integer(), sa.ForeignKey("users.id"), nullable=False),
        sa.Column("created_at", sa.DateTime(), nullable=False, server_default=sa.func.now()),
        sa.UniqueConstraint("follower_id", "followed_id", name="uq_relationships_pair"),
        sa.CheckConstraint("follower_id <> followed_id", name="ck_relationships_no_self"),
    )
    op.create_index("ix_relationships_followed_id", "relationships", ["followed_id"])

    op.create_table(
        "microposts",
        sa.Column("id", sa.Integer(), primary_key=True),
        sa.Column("user_id", sa.Integer(), sa.ForeignKey("users.id"), nullable=False),
        sa.Column("content", sa.String(length=140), nullable=False),
        sa.Column("created_at", sa.DateTime(), nullable=False, server_default=sa.func.now()),
    )
    op.create_index(
        "ix_microposts_user_id_created_at", "microposts", ["user_id", "created_at"]
    )


def downgrade():
    op.drop_index("ix_microposts_user_id_created_at", table_name="microposts")
    op.drop_table("microposts")
    op.drop_index("ix_relationships_followed_id", table_name="relationships")
    op.drop_table("relationships")
    op.drop_table("users")
