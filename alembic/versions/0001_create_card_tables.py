"""create card tables

Revision ID: 0001_create_card_tables
Revises:
Create Date: 2026-10-19

"""

from alembic import op
import sqlalchemy as sa

revision = "0001_create_card_tables"
down_revision = None
branch_labels = None
depends_on = None


def upgrade():
    counter = op.create_table(
        "card_counter",
        sa.Column("id", sa.String(32), primary_key=True),
        sa.Column("counter", sa.Integer, nullable=False, server_default="0"),
    )

    op.create_table(
        "user_cards",
        sa.Column("id", sa.String(32), primary_key=True),
        sa.Column("username", sa.Text, nullable=False, unique=True),
        sa.Column("displayName", sa.Text, nullable=False),
        sa.Column("userNumber", sa.Integer, nullable=False, unique=True),
        sa.Column("profileImage", sa.Text),
        sa.Column("bio", sa.Text),
        sa.Column("followers", sa.BigInteger),
        sa.Column("following", sa.BigInteger),
        sa.Column("verified", sa.Boolean, nullable=False, server_default=sa.false()),
        sa.Column("location", sa.Text),
        sa.Column("createdAt", sa.DateTime(timezone=True), nullable=False, server_default=sa.func.now()),
        sa.Column("updatedAt", sa.DateTime(timezone=True), nullable=False, server_default=sa.func.now()),
        sa.CheckConstraint('"userNumber" > 0', name="ck_user_cards_user_number_positive"),
    )

    # fila única del contador
    op.bulk_insert(counter, [{"id": "singleton", "counter": 0}])


def downgrade():
    op.drop_table("user_cards")
    op.drop_table("card_counter")
