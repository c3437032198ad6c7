"""002: create inventory_items table

Revision ID: 002
Revises: 001
Create Date: 2026-10-01
"""
from typing import Sequence, Union
from alembic import op

revision: str = "002"
down_revision: Union[str, None] = "001"
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    op.execute("""
        CREATE TABLE inventory_items (
            id              VARCHAR(64)     PRIMARY KEY,
            seller_id       VARCHAR(64)     NOT NULL,
            title           VARCHAR(200)    NOT NULL,
            brand           VARCHAR(100),
            category        VARCHAR(50)     NOT NULL,
            condition       VARCHAR(20)     NOT NULL,
            original_price  BIGINT          NOT NULL,
            resale_price    BIGINT,
            currency        CHAR(3)         NOT NULL DEFAULT 'ZAR',
            quantity        INT             NOT NULL DEFAULT 1,
            status          VARCHAR(10)     NOT NULL DEFAULT 'DRAFT',
            created_at      TIMESTAMPTZ     NOT NULL DEFAULT NOW(),
            updated_at      TIMESTAMPTZ     NOT NULL DEFAULT NOW(),
            CONSTRAINT ck_inventory_quantity_gte_0   CHECK (quantity >= 0),
            CONSTRAINT ck_inventory_original_price   CHECK (original_price >= 0),
            CONSTRAINT ck_inventory_resale_price     CHECK (resale_price IS NULL OR resale_price >= 0),
            CONSTRAINT ck_inventory_status           CHECK (status IN ('DRAFT', 'PRICED', 'LISTED')),
            CONSTRAINT ck_inventory_listed_is_priced CHECK (status <> 'LISTED' OR resale_price IS NOT NULL),
            CONSTRAINT ck_inventory_condition        CHECK (
                condition IN ('NEW', 'LIKE_NEW', 'GOOD', 'FAIR')
            )
        );
    """)
    op.execute("""
        CREATE INDEX idx_inventory_listed
        ON inventory_items (category, created_at DESC)
        WHERE status = 'LISTED';
    """)
    op.execute("CREATE INDEX idx_inventory_seller ON inventory_items (seller_id, status);")
    op.execute("""
        CREATE TRIGGER trg_inventory_items_updated_at
            BEFORE UPDATE ON inventory_items
            FOR EACH ROW EXECUTE FUNCTION fn_touch_updated_at();
    """)
    op.execute(
        "COMMENT ON TABLE inventory_items IS "
        "'Seller stock; quantity only ever decremented by a conditional UPDATE';"
    )


def downgrade() -> None:
    op.execute("DROP TABLE IF EXISTS inventory_items CASCADE;")
