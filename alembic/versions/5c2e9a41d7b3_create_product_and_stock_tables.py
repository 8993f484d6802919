# 📄 alembic/versions/5c2e9a41d7b3_create_product_and_stock_tables.py
from alembic import op
import sqlalchemy as sa

# revision identifiers, used by Alembic.
revision = "5c2e9a41d7b3"
down_revision = None
branch_labels = None
depends_on = None


def upgrade():
    op.create_table(
        "product",
        sa.Column("id", sa.Integer(), primary_key=True, nullable=False),
        sa.Column("sku", sa.String(50), nullable=True, unique=True),
        sa.Column("name", sa.String(200), nullable=True),
        sa.Column("created_at", sa.DateTime(), nullable=False, server_default=sa.func.now()),
        sa.Column("updated_at", sa.DateTime(), nullable=False, server_default=sa.func.now()),
    )
    # stock.id는 운영자가 입력 → autoincrement 없음, 상품당 재고 1건
    op.create_table(
        "stock",
        sa.Column("id", sa.Integer(), primary_key=True, autoincrement=False, nullable=False),
        sa.Column("product_id", sa.Integer(), sa.ForeignKey("product.id"), nullable=False, unique=True),
        sa.Column("quantity", sa.Integer(), nullable=False, server_default=sa.text("0")),
        sa.Column("created_at", sa.DateTime(), nullable=False, server_default=sa.func.now()),
        sa.Column("updated_at", sa.DateTime(), nullable=False, server_default=sa.func.now()),
        sa.CheckConstraint("quantity >= 0", name="ck_stock_quantity_nonneg"),
    )


def downgrade():
    op.drop_table("stock")
    op.drop_table("product")
