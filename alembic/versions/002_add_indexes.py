"""Add lookup indexes

Revision ID: 002_add_indexes
Revises: 001_initial_schema
Create Date: 2025-11-12

Adds:
- users by team, and by (team, is_active) for candidate pools
- pr_reviewers by pull request and by user
- pull_requests by team and by created_at for review listings
"""

from alembic import op

# revision identifiers, used by Alembic.
revision = '002_add_indexes'
down_revision = '001_initial_schema'
branch_labels = None
depends_on = None


def upgrade() -> None:
    op.create_index('ix_users_team_name', 'users', ['team_name'])
    op.create_index('idx_users_team_name_is_active', 'users', ['team_name', 'is_active'])

    op.create_index('ix_pr_reviewers_pull_request_id', 'pr_reviewers', ['pull_request_id'])
    op.create_index('ix_pr_reviewers_user_id', 'pr_reviewers', ['user_id'])

    op.create_index('ix_pull_requests_created_at', 'pull_requests', ['created_at'])
    op.create_index('ix_pull_requests_team_name', 'pull_requests', ['team_name'])


def downgrade() -> None:
    op.drop_index('ix_pull_requests_team_name', table_name='pull_requests')
    op.drop_index('ix_pull_requests_created_at', table_name='pull_requests')
    op.drop_index('ix_pr_reviewers_user_id', table_name='pr_reviewers')
    op.drop_index('ix_pr_reviewers_pull_request_id', table_name='pr_reviewers')
    op.drop_index('idx_users_team_name_is_active', table_name='users')
    op.drop_index('ix_users_team_name', table_name='users')
