"""Initial review pool tables

Revision ID: 001_initial_schema
Revises:
Create Date: 2025-11-10

Creates:
- teams
- users (member of exactly one team)
- pull_requests (owning team frozen at creation)
- pr_reviewers (one row per assignment)
"""

from alembic import op
import sqlalchemy as sa

# revision identifiers, used by Alembic.
revision = '001_initial_schema'
down_revision = None
branch_labels = None
depends_on = None


def upgrade() -> None:
    # ==========================================================================
    # teams / users
    # ==========================================================================
    op.create_table(
        'teams',
        sa.Column('team_name', sa.String(length=255), nullable=False),
        sa.PrimaryKeyConstraint('team_name'),
    )

    op.create_table(
        'users',
        sa.Column('user_id', sa.String(length=255), nullable=False),
        sa.Column('username', sa.String(length=255), nullable=False),
        sa.Column('team_name', sa.String(length=255), nullable=False),
        sa.Column('is_active', sa.Boolean(), nullable=False, server_default=sa.true()),
        sa.ForeignKeyConstraint(['team_name'], ['teams.team_name'], ondelete='CASCADE'),
        sa.PrimaryKeyConstraint('user_id'),
    )

    # ==========================================================================
    # pull_requests / pr_reviewers
    # ==========================================================================
    op.create_table(
        'pull_requests',
        sa.Column('pull_request_id', sa.String(length=255), nullable=False),
        sa.Column('pull_request_name', sa.String(length=255), nullable=False),
        sa.Column('author_id', sa.String(length=255), nullable=False),
        sa.Column('team_name', sa.String(length=255), nullable=False),
        sa.Column('status', sa.String(length=10), nullable=False, server_default='OPEN'),
        sa.Column('created_at', sa.DateTime(timezone=True), server_default=sa.text('CURRENT_TIMESTAMP'), nullable=False),
        sa.Column('merged_at', sa.DateTime(timezone=True), nullable=True),
        sa.ForeignKeyConstraint(['author_id'], ['users.user_id'], ondelete='CASCADE'),
        sa.ForeignKeyConstraint(['team_name'], ['teams.team_name'], ondelete='CASCADE'),
        sa.PrimaryKeyConstraint('pull_request_id'),
    )

    op.create_table(
        'pr_reviewers',
        sa.Column('pr_reviewers_id', sa.Integer(), autoincrement=True, nullable=False),
        sa.Column('pull_request_id', sa.String(length=255), nullable=False),
        sa.Column('user_id', sa.String(length=255), nullable=False),
        sa.ForeignKeyConstraint(['pull_request_id'], ['pull_requests.pull_request_id'], ondelete='CASCADE'),
        sa.ForeignKeyConstraint(['user_id'], ['users.user_id'], ondelete='CASCADE'),
        sa.PrimaryKeyConstraint('pr_reviewers_id'),
        sa.UniqueConstraint('pull_request_id', 'user_id', name='uq_pr_reviewers_pr_user'),
    )


def downgrade() -> None:
    op.drop_table('pr_reviewers')
    op.drop_table('pull_requests')
    op.drop_table('users')
    op.drop_table('teams')
