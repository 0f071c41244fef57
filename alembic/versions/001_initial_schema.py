"""Initial schema - products table and sync ledger

Revision ID: 001_initial_schema
Revises:
Create Date: 2026-10-19

"""
from typing import Sequence, Union

from alembic import op

# revision identifiers, used by Alembic.
revision: str = '001_initial_schema'
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    # Table: products
    op.execute('''CREATE TABLE IF NOT EXISTS products (
    sku text NOT NULL,
    name text,
    category text,
    "desc" text,
    price double precision,
    qty bigint,
    image text,
    CONSTRAINT products_pkey PRIMARY KEY (sku)
);''')

    # Table: sync_logs
    op.execute('''CREATE TABLE IF NOT EXISTS sync_logs (
    id bigserial NOT NULL,
    sync_type text NOT NULL,
    products_synced integer DEFAULT 0,
    errors text[],
    started_at timestamp with time zone NOT NULL,
    completed_at timestamp with time zone NOT NULL,
    status text NOT NULL,
    CONSTRAINT sync_logs_pkey PRIMARY KEY (id)
);''')

    # Indexes
    op.execute('''CREATE INDEX IF NOT EXISTS ix_products_name ON public.products USING btree (name)''')
    op.execute('''CREATE INDEX IF NOT EXISTS ix_products_category ON public.products USING btree (category)''')
    op.execute('''CREATE INDEX IF NOT EXISTS ix_sync_logs_started_at ON public.sync_logs USING btree (started_at)''')
    # Watermark lookup
    op.execute('''CREATE INDEX IF NOT EXISTS ix_sync_logs_status_completed_at ON public.sync_logs USING btree (status, completed_at DESC)''')


def downgrade() -> None:
    op.drop_table('sync_logs')
    op.drop_table('products')
