"""initial schema

Revision ID: 3b9e1f2a7c41
Revises: 
Create Date: 2025-12-02 10:14:08.412593

"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa


# revision identifiers, used by Alembic.
revision: str = '3b9e1f2a7c41'
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    op.create_table(
        'users',
        sa.Column('uid', sa.String(length=64), primary_key=True),
        sa.Column('name', sa.String(), nullable=False),
        sa.Column('email', sa.String(), nullable=False),
        sa.Column('hashed_password', sa.String(), nullable=False),
        sa.Column('role', sa.String(), nullable=False, server_default='developer'),
        sa.Column('managers', sa.JSON(), nullable=False),
        sa.Column('team_leads', sa.JSON(), nullable=False),
        sa.Column('created_at', sa.DateTime(timezone=True), server_default=sa.func.now()),
    )
    op.create_index('ix_users_uid', 'users', ['uid'])
    op.create_index('ix_users_email', 'users', ['email'], unique=True)

    op.create_table(
        'criteria_sets',
        sa.Column('id', sa.Integer(), primary_key=True),
        sa.Column('role', sa.String(), nullable=False),
        sa.Column('criteria', sa.JSON(), nullable=False),
        sa.Column('created_at', sa.DateTime(timezone=True), server_default=sa.func.now()),
        sa.Column('updated_at', sa.DateTime(timezone=True), nullable=True),
    )
    op.create_index('ix_criteria_sets_id', 'criteria_sets', ['id'])
    op.create_index('ix_criteria_sets_role', 'criteria_sets', ['role'], unique=True)

    # No foreign keys on given_by / given_to: ratings are kept when a user is deleted
    op.create_table(
        'ratings',
        sa.Column('id', sa.Integer(), primary_key=True),
        sa.Column('given_by', sa.String(length=64), nullable=False),
        sa.Column('given_to', sa.String(length=64), nullable=False),
        sa.Column('month', sa.String(length=7), nullable=False),
        sa.Column('criteria', sa.JSON(), nullable=False),
        sa.Column('average_score', sa.Integer(), nullable=False),
        sa.Column('remarks', sa.Text(), nullable=False),
        sa.Column('role_of_given_to', sa.String(), nullable=False),
        sa.Column('created_at', sa.DateTime(timezone=True), server_default=sa.func.now()),
        sa.Column('updated_at', sa.DateTime(timezone=True), nullable=True),
    )
    op.create_index('ix_ratings_id', 'ratings', ['id'])
    op.create_index('ix_ratings_given_by', 'ratings', ['given_by'])
    op.create_index('ix_ratings_given_to', 'ratings', ['given_to'])
    op.create_index('ix_ratings_month', 'ratings', ['month'])
    op.create_index('ix_ratings_rater_ratee_month', 'ratings', ['given_by', 'given_to', 'month'])


def downgrade() -> None:
    op.drop_table('ratings')
    op.drop_table('criteria_sets')
    op.drop_table('users')
