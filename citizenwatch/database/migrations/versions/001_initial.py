"""
Initial migration - Create the reports table

Revision ID: 001_initial
Create Date: 2026-10-17
"""

from alembic import op
import sqlalchemy as sa
from geoalchemy2 import Geometry

# Revision identifiers
revision = '001_initial'
down_revision = None
branch_labels = None
depends_on = None


def upgrade() -> None:
    """Create the reports table and its indexes."""

    # Enable PostGIS extension
    op.execute("CREATE EXTENSION IF NOT EXISTS postgis")

    report_status = sa.Enum('pending', 'investigating', 'resolved', name='report_status')

    op.create_table(
        'reports',
        sa.Column('id', sa.String(32), primary_key=True),
        sa.Column('location', Geometry('POINT', srid=4326, spatial_index=False), nullable=False),
        sa.Column('latitude', sa.Float(), nullable=False),
        sa.Column('longitude', sa.Float(), nullable=False),
        sa.Column('address', sa.Text(), server_default=''),
        sa.Column('description', sa.Text(), nullable=False),
        sa.Column('photo_url', sa.String(1024), nullable=False),
        sa.Column('reporter_note', sa.String(200), server_default='Anonymous'),
        sa.Column('status', report_status, nullable=False, server_default='pending'),
        sa.Column('submitted_at', sa.DateTime(timezone=True), nullable=False, server_default=sa.func.now()),
    )

    op.create_index('idx_report_location', 'reports', ['location'], postgresql_using='gist')
    op.create_index('idx_report_status', 'reports', ['status'])
    op.create_index('idx_report_submitted_at', 'reports', ['submitted_at'])


def downgrade() -> None:
    """Drop the reports table."""
    op.drop_index('idx_report_submitted_at', table_name='reports')
    op.drop_index('idx_report_status', table_name='reports')
    op.drop_index('idx_report_location', table_name='reports')
    op.drop_table('reports')
    sa.Enum(name='report_status').drop(op.get_bind(), checkfirst=True)
