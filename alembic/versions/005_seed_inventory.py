"""005: seed sample inventory

Revision ID: 005
Revises: 004
Create Date: 2026-10-01
"""

from typing import Sequence, Union

from alembic import op

revision: str = "005"
down_revision: Union[str, None] = "004"
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    # Prices in cents (ZAR). One DRAFT and one PRICED item to exercise availability checks.
    op.execute("""
        INSERT INTO inventory_items (
            id, seller_id, title, brand, category, condition,
            original_price, resale_price, currency, quantity, status
        ) VALUES
            ('ITEM-DENIM-JACKET', 'seller-demo', 'Denim Trucker Jacket', 'Levi''s',
             'Jackets', 'GOOD', 120000, 63000, 'ZAR', 5, 'LISTED'),
            ('ITEM-WOOL-COAT', 'seller-demo', 'Wool Overcoat', 'Woolworths',
             'Outerwear', 'LIKE_NEW', 250000, 165000, 'ZAR', 2, 'LISTED'),
            ('ITEM-TEE-BASIC', 'seller-demo', 'Basic Cotton Tee', 'Cotton On',
             'Tops', 'GOOD', 37500, 15000, 'ZAR', 20, 'LISTED'),
            ('ITEM-LAST-SNEAKER', 'seller-demo', 'Court Sneakers', 'Adidas',
             'Shoes', 'NEW', 180000, 119700, 'ZAR', 1, 'LISTED'),
            ('ITEM-DRAFT-SCARF', 'seller-demo', 'Silk Scarf', NULL,
             'Accessories', 'FAIR', 40000, NULL, 'ZAR', 3, 'DRAFT'),
            ('ITEM-PRICED-DRESS', 'seller-demo', 'Linen Dress', 'Zara',
             'Dresses', 'GOOD', 90000, 45000, 'ZAR', 4, 'PRICED');
    """)


def downgrade() -> None:
    op.execute("DELETE FROM inventory_items WHERE seller_id = 'seller-demo';")
