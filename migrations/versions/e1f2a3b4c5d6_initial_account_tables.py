"""initial account, confirmation and comment tables

Revision ID: e1f2a3b4c5d6
Revises:
Create Date: 2026-10-18 00:00:00.000000

"""
from alembic import op
import sqlalchemy as sa


# revision identifiers, used by Alembic.
revision = "e1f2a3b4c5d6"
down_revision = None
branch_labels = None
depends_on = None


def upgrade():
    op.create_table(
        "logins",
        sa.Column("id", sa.Integer(), nullable=False),
        sa.Column("name", sa.String(length=64), nullable=False),
        sa.Column("password_hash", sa.String(length=255), nullable=False),
        sa.Column("email", sa.String(length=255), nullable=False),
        sa.Column("confirmed", sa.Boolean(), nullable=False),
        sa.Column("created_at", sa.DateTime(), nullable=False),
        sa.PrimaryKeyConstraint("id"),
    )
    with op.batch_alter_table("logins", schema=None) as batch_op:
        batch_op.create_index(batch_op.f("ix_logins_name"), ["name"], unique=True)
        batch_op.create_index(batch_op.f("ix_logins_email"), ["email"], unique=False)

    op.create_table(
        "ecodes",
        sa.Column("id", sa.Integer(), nullable=False),
        sa.Column("login_id", sa.Integer(), nullable=False),
        sa.Column("code", sa.String(length=16), nullable=False),
        sa.Column("created_at", sa.DateTime(), nullable=False),
        sa.ForeignKeyConstraint(["login_id"], ["logins.id"]),
        sa.PrimaryKeyConstraint("id"),
    )
    with op.batch_alter_table("ecodes", schema=None) as batch_op:
        batch_op.create_index(batch_op.f("ix_ecodes_login_id"), ["login_id"], unique=False)
        batch_op.create_index(batch_op.f("ix_ecodes_code"), ["code"], unique=True)

    op.create_table(
        "nonces",
        sa.Column("ecode_id", sa.Integer(), nullable=False),
        sa.Column("secret_code", sa.String(length=64), nullable=False),
        sa.Column("expires_at", sa.DateTime(), nullable=False),
        sa.ForeignKeyConstraint(["ecode_id"], ["ecodes.id"]),
        sa.PrimaryKeyConstraint("ecode_id"),
    )

    op.create_table(
        "comments",
        sa.Column("id", sa.Integer(), nullable=False),
        sa.Column("content", sa.Text(), nullable=False),
        sa.Column("thread_id", sa.Integer(), nullable=True),
        sa.Column("login_id", sa.Integer(), nullable=False),
        sa.Column("created_at", sa.DateTime(), nullable=False),
        sa.ForeignKeyConstraint(["thread_id"], ["comments.id"]),
        sa.ForeignKeyConstraint(["login_id"], ["logins.id"]),
        sa.PrimaryKeyConstraint("id"),
    )
    with op.batch_alter_table("comments", schema=None) as batch_op:
        batch_op.create_index(batch_op.f("ix_comments_thread_id"), ["thread_id"], unique=False)
        batch_op.create_index(batch_op.f("ix_comments_login_id"), ["login_id"], unique=False)

    op.create_table(
        "audit_logs",
        sa.Column("id", sa.Integer(), nullable=False),
        sa.Column("login_id", sa.Integer(), nullable=True),
        sa.Column("action", sa.String(length=80), nullable=False),
        sa.Column("entity", sa.String(length=80), nullable=True),
        sa.Column("entity_id", sa.String(length=80), nullable=True),
        sa.Column("ip", sa.String(length=64), nullable=True),
        sa.Column("user_agent", sa.String(length=255), nullable=True),
        sa.Column("metadata_json", sa.Text(), nullable=True),
        sa.Column("timestamp", sa.DateTime(), nullable=False),
        sa.PrimaryKeyConstraint("id"),
    )

    op.create_table(
        "ip_rate_limits",
        sa.Column("id", sa.Integer(), nullable=False),
        sa.Column("ip", sa.String(length=64), nullable=False),
        sa.Column("scope", sa.String(length=32), nullable=False),
        sa.Column("window_start", sa.DateTime(), nullable=False),
        sa.Column("count", sa.Integer(), nullable=False),
        sa.Column("updated_at", sa.DateTime(), nullable=False),
        sa.PrimaryKeyConstraint("id"),
        sa.UniqueConstraint("ip", "scope", name="uq_ip_rate_limits_ip_scope"),
    )
    with op.batch_alter_table("ip_rate_limits", schema=None) as batch_op:
        batch_op.create_index(batch_op.f("ix_ip_rate_limits_ip"), ["ip"], unique=False)


def downgrade():
    with op.batch_alter_table("ip_rate_limits", schema=None) as batch_op:
        batch_op.drop_index(batch_op.f("ix_ip_rate_limits_ip"))
    op.drop_table("ip_rate_limits")

    op.drop_table("audit_logs")

    with op.batch_alter_table("comments", schema=None) as batch_op:
        batch_op.drop_index(batch_op.f("ix_comments_login_id"))
        batch_op.drop_index(batch_op.f("ix_comments_thread_id"))
    op.drop_table("comments")

    op.drop_table("nonces")

    with op.batch_alter_table("ecodes", schema=None) as batch_op:
        batch_op.drop_index(batch_op.f("ix_ecodes_code"))
        batch_op.drop_index(batch_op.f("ix_ecodes_login_id"))
    op.drop_table("ecodes")

    with op.batch_alter_table("logins", schema=None) as batch_op:
        batch_op.drop_index(batch_op.f("ix_logins_email"))
        batch_op.drop_index(batch_op.f("ix_logins_name"))
    op.drop_table("logins")
