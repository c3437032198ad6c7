"""003: create orders table

Revision ID: 003
Revises: 002
Create Date: 2026-10-01
"""
from typing import Sequence, Union
from alembic import op

revision: str = "003"
down_revision: Union[str, None] = "002"
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    op.execute("""
        CREATE TABLE orders (
            id                  VARCHAR(32)     PRIMARY KEY,
            order_number        VARCHAR(32)     NOT NULL,
            buyer_id            VARCHAR(64)     NOT NULL,
            subtotal            BIGINT          NOT NULL,
            discount_code       VARCHAR(32),
            discount_amount     BIGINT          NOT NULL DEFAULT 0,
            total               BIGINT          NOT NULL,
            currency            CHAR(3)         NOT NULL,
            status              VARCHAR(20)     NOT NULL DEFAULT 'PENDING',
            payment_auth_id     VARCHAR(64),
            fulfilled_at        TIMESTAMPTZ,
            cancelled_at        TIMESTAMPTZ,
            status_history      JSONB           NOT NULL DEFAULT '[]'::jsonb,
            created_at          TIMESTAMPTZ     NOT NULL DEFAULT NOW(),
            updated_at          TIMESTAMPTZ     NOT NULL DEFAULT NOW(),
            CONSTRAINT uq_orders_order_number       UNIQUE (order_number),
            CONSTRAINT ck_orders_subtotal           CHECK (subtotal >= 0),
            CONSTRAINT ck_orders_discount_range     CHECK (discount_amount >= 0 AND discount_amount <= subtotal),
            CONSTRAINT ck_orders_total_consistency  CHECK (total = subtotal - discount_amount),
            CONSTRAINT ck_orders_status             CHECK (
                status IN ('PENDING', 'CONFIRMED', 'FULFILLED', 'CANCELLED')
            ),
            CONSTRAINT ck_orders_paid_before_confirm CHECK (
                status NOT IN ('CONFIRMED', 'FULFILLED') OR payment_auth_id IS NOT NULL
            ),
            CONSTRAINT ck_orders_history_is_array   CHECK (jsonb_typeof(status_history) = 'array')
        );
    """)
    op.execute("CREATE INDEX idx_orders_buyer ON orders (buyer_id, id DESC);")
    op.execute("""
        CREATE TRIGGER trg_orders_updated_at
            BEFORE UPDATE ON orders
            FOR EACH ROW EXECUTE FUNCTION fn_touch_updated_at();
    """)
    op.execute("COMMENT ON TABLE orders IS 'Buyer orders; status_history is append-only';")


def downgrade() -> None:
    op.execute("DROP TABLE IF EXISTS orders CASCADE;")
