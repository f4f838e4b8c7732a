from alembic import op
import sqlalchemy as sa

revision = '0001_init'
down_revision = None
branch_labels = None
depends_on = None

MEASUREMENT_COLUMNS = (
    'chest', 'waist', 'hip', 'shoulder_width', 'arm_length', 'bicep', 'neck',
    'wrist', 'thigh', 'inseam', 'outseam', 'knee', 'calf', 'ankle',
    'back_length', 'front_length', 'coat_length', 'waistcoat_length',
    'sherwani_length', 'pant_length',
)

def upgrade():
    op.create_table(
        'customers',
        sa.Column('id', sa.Integer, primary_key=True),
        sa.Column('name', sa.String(length=100), nullable=False),
        sa.Column('phone', sa.String(length=20), nullable=False),
        sa.Column('address', sa.String(length=500), nullable=True),
        sa.Column('created_at', sa.DateTime, nullable=False),
        sa.Column('updated_at', sa.DateTime, nullable=False),
    )
    op.create_index('ix_customers_phone', 'customers', ['phone'], unique=True)

    op.create_table(
        'measurements',
        sa.Column('id', sa.Integer, primary_key=True),
        sa.Column('customer_id', sa.Integer, sa.ForeignKey('customers.id'), nullable=False),
        sa.Column('name', sa.String(length=255), nullable=False),
        *[sa.Column(name, sa.Numeric(6, 2), nullable=True) for name in MEASUREMENT_COLUMNS],
        sa.Column('is_default', sa.Boolean, nullable=False, server_default=sa.false()),
        sa.Column('notes', sa.Text, nullable=True),
        sa.Column('created_at', sa.DateTime, nullable=False),
        sa.Column('updated_at', sa.DateTime, nullable=False),
    )
    op.create_index('ix_measurements_customer_id', 'measurements', ['customer_id'])
    op.create_index(
        'uq_measurements_customer_default', 'measurements', ['customer_id'],
        unique=True,
        postgresql_where=sa.text('is_default'),
        sqlite_where=sa.text('is_default'),
    )

    op.create_table(
        'orders',
        sa.Column('id', sa.Integer, primary_key=True),
        sa.Column('order_number', sa.String(length=20), nullable=False),
        sa.Column('customer_id', sa.Integer, sa.ForeignKey('customers.id'), nullable=False),
        sa.Column('booking_date', sa.Date, nullable=False),
        sa.Column('delivery_date', sa.Date, nullable=False),
        sa.Column('status', sa.String(length=20), nullable=False, server_default='In Process'),
        sa.Column('comments', sa.Text, nullable=True),
        sa.Column('total_amount', sa.Numeric(12, 2), nullable=False, server_default='0'),
        sa.Column('advance_paid', sa.Numeric(12, 2), nullable=False, server_default='0'),
        sa.Column('balance', sa.Numeric(12, 2), nullable=False, server_default='0'),
        sa.Column('payment_method', sa.String(length=20), nullable=False, server_default='other'),
        sa.Column('measurement_id', sa.Integer, sa.ForeignKey('measurements.id', ondelete='SET NULL'), nullable=True),
        sa.Column('fitting_preferences', sa.Text, nullable=True),
        sa.Column('created_at', sa.DateTime, nullable=False),
        sa.Column('updated_at', sa.DateTime, nullable=False),
    )
    op.create_index('ix_orders_order_number', 'orders', ['order_number'], unique=True)
    op.create_index('ix_orders_customer_id', 'orders', ['customer_id'])

    op.create_table(
        'order_items',
        sa.Column('id', sa.Integer, primary_key=True),
        sa.Column('order_id', sa.Integer, sa.ForeignKey('orders.id', ondelete='CASCADE'), nullable=False),
        sa.Column('order_type', sa.String(length=20), nullable=False),
        sa.Column('description', sa.Text, nullable=False, server_default=''),
        sa.UniqueConstraint('order_id', 'order_type', name='uq_order_items_order_type'),
    )

    op.create_table(
        'payments',
        sa.Column('id', sa.Integer, primary_key=True),
        sa.Column('order_id', sa.Integer, sa.ForeignKey('orders.id', ondelete='CASCADE'), nullable=False),
        sa.Column('customer_id', sa.Integer, sa.ForeignKey('customers.id'), nullable=False),
        sa.Column('amount', sa.Numeric(12, 2), nullable=False),
        sa.Column('payment_method', sa.String(length=20), nullable=False, server_default='other'),
        sa.Column('payment_date', sa.Date, nullable=False),
        sa.Column('notes', sa.Text, nullable=True),
        sa.Column('created_at', sa.DateTime, nullable=False),
    )
    op.create_index('ix_payments_order_id', 'payments', ['order_id'])
    op.create_index('ix_payments_customer_id', 'payments', ['customer_id'])

    counters = op.create_table(
        'counters',
        sa.Column('id', sa.Integer, primary_key=True),
        sa.Column('value', sa.Integer, nullable=False, server_default='0'),
    )
    op.bulk_insert(counters, [{'id': 1, 'value': 0}])

def downgrade():
    op.drop_table('counters')
    op.drop_index('ix_payments_customer_id', table_name='payments')
    op.drop_index('ix_payments_order_id', table_name='payments')
    op.drop_table('payments')
    op.drop_table('order_items')
    op.drop_index('ix_orders_customer_id', table_name='orders')
    op.drop_index('ix_orders_order_number', table_name='orders')
    op.drop_table('orders')
    op.drop_index('uq_measurements_customer_default', table_name='measurements')
    op.drop_index('ix_measurements_customer_id', table_name='measurements')
    op.drop_table('measurements')
    op.drop_index('ix_customers_phone', table_name='customers')
    op.drop_table('customers')
