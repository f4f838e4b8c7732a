from alembic import op

revision = '0002_add_order_status_index'
down_revision = '0001_init'
branch_labels = None
depends_on = None

def upgrade():
    # Order list filters and dashboard status counts group on this column
    op.create_index('ix_orders_status', 'orders', ['status'])

def downgrade():
    op.drop_index('ix_orders_status', table_name='orders')
