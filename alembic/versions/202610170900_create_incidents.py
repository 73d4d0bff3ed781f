"""Create incidents table with enum checks and lookup indexes

Revision ID: 202610170900
Revises:
Create Date: 2026-10-17 09:00:00.000000

"""
from alembic import op
import sqlalchemy as sa

# revision identifiers, used by Alembic.
revision = '202610170900'
down_revision = None
branch_labels = None
depends_on = None


def upgrade() -> None:
    # ------------------------------
    # Create incidents table
    # ------------------------------
    op.create_table(
        'incidents',
        sa.Column('id', sa.String(36), primary_key=True, nullable=False),
        sa.Column('title', sa.Text(), nullable=False),
        sa.Column('service', sa.Text(), nullable=False),
        sa.Column('severity', sa.String(8), nullable=False),
        sa.Column('status', sa.String(16), nullable=False),
        sa.Column('owner', sa.Text(), nullable=True),
        sa.Column('summary', sa.Text(), nullable=True),
        sa.Column('createdAt', sa.String(32), nullable=False),
        sa.Column('updatedAt', sa.String(32), nullable=False),
        sa.CheckConstraint(
            "severity IN ('SEV1', 'SEV2', 'SEV3', 'SEV4')",
            name='ck_incidents_severity',
        ),
        sa.CheckConstraint(
            "status IN ('OPEN', 'MITIGATED', 'RESOLVED')",
            name='ck_incidents_status',
        ),
    )

    # ------------------------------
    # Filter / sort indexes
    # ------------------------------
    op.create_index('idx_service', 'incidents', ['service'])
    op.create_index('idx_status', 'incidents', ['status'])
    op.create_index('idx_severity', 'incidents', ['severity'])
    op.create_index('idx_createdAt', 'incidents', ['createdAt'])


def downgrade() -> None:
    op.drop_index('idx_createdAt', table_name='incidents')
    op.drop_index('idx_severity', table_name='incidents')
    op.drop_index('idx_status', table_name='incidents')
    op.drop_index('idx_service', table_name='incidents')
    op.drop_table('incidents')
