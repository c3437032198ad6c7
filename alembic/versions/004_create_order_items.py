"""004: create order_items table

Revision ID: 004
Revises: 003
Create Date: 2026-10-01
"""
from typing import Sequence, Union
from alembic import op

revision: str = "004"
down_revision: Union[str, None] = "003"
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    # No foreign key on product_id: lines are snapshots that outlive
    # catalog edits and deletions.
    op.execute("""
        CREATE TABLE order_items (
            id              VARCHAR(32)     PRIMARY KEY,
            order_id        VARCHAR(32)     NOT NULL REFERENCES orders(id) ON DELETE CASCADE,
            product_id      VARCHAR(64)     NOT NULL,
            product_title   VARCHAR(200)    NOT NULL,
            product_brand   VARCHAR(100),
            unit_price      BIGINT          NOT NULL,
            quantity        INT             NOT NULL,
            line_total      BIGINT          NOT NULL,
            created_at      TIMESTAMPTZ     NOT NULL DEFAULT NOW(),
            CONSTRAINT ck_order_items_quantity    CHECK (quantity > 0),
            CONSTRAINT ck_order_items_unit_price  CHECK (unit_price >= 0),
            CONSTRAINT ck_order_items_line_total  CHECK (line_total = unit_price * quantity),
            CONSTRAINT uq_order_items_product     UNIQUE (order_id, product_id)
        );
    """)
    op.execute("CREATE INDEX idx_order_items_order ON order_items (order_id);")


def downgrade() -> None:
    op.execute("DROP TABLE IF EXISTS order_items CASCADE;")
