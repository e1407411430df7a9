"""create contest, artwork, vote and cooldown tables

Revision ID: 3b1f0c9e7a21
Revises:
Create Date: 2026-10-19 10:02:11.318204

"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa


# revision identifiers, used by Alembic.
revision: str = '3b1f0c9e7a21'
down_revision: Union[str, Sequence[str], None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


contest_status = sa.Enum('scheduled', 'active', 'archived', name='contest_status')


def upgrade() -> None:
    op.create_table(
        'contests',
        sa.Column('id', sa.String(), nullable=False),
        sa.Column('title', sa.String(), nullable=False),
        sa.Column('week_number', sa.Integer(), nullable=False),
        sa.Column('year', sa.Integer(), nullable=False),
        sa.Column('start_date', sa.DateTime(timezone=True), nullable=False),
        sa.Column('end_date', sa.DateTime(timezone=True), nullable=False),
        sa.Column('status', contest_status, nullable=False),
        sa.Column('winner_artwork_id', sa.String(), nullable=True),
        sa.Column('archived_at', sa.DateTime(timezone=True), nullable=True),
        sa.Column('created_at', sa.DateTime(timezone=True), nullable=False),
        sa.Column('updated_at', sa.DateTime(timezone=True), nullable=False),
        sa.CheckConstraint('end_date > start_date', name='check_contest_window'),
        sa.PrimaryKeyConstraint('id'),
    )
    op.create_table(
        'artworks',
        sa.Column('id', sa.String(), nullable=False),
        sa.Column('contest_id', sa.String(), nullable=False),
        sa.Column('title', sa.String(), nullable=False),
        sa.Column('description', sa.Text(), nullable=True),
        sa.Column('image_url', sa.String(), nullable=False),
        sa.Column('prompt', sa.Text(), nullable=True),
        sa.Column('artist_name', sa.String(), nullable=True),
        sa.Column('position', sa.Integer(), nullable=False),
        sa.Column('created_at', sa.DateTime(timezone=True), nullable=False),
        sa.ForeignKeyConstraint(['contest_id'], ['contests.id'], ondelete='CASCADE'),
        sa.PrimaryKeyConstraint('id'),
    )
    # contests <-> artworks reference each other
    with op.batch_alter_table('contests') as batch_op:
        batch_op.create_foreign_key(
            'fk_contests_winner_artwork_id', 'artworks',
            ['winner_artwork_id'], ['id'], ondelete='SET NULL'
        )
    op.create_table(
        'votes',
        sa.Column('id', sa.String(), nullable=False),
        sa.Column('artwork_id', sa.String(), nullable=False),
        sa.Column('contest_id', sa.String(), nullable=False),
        sa.Column('voter_key', sa.String(), nullable=False),
        sa.Column('scope_key', sa.String(), nullable=False),
        sa.Column('sequence', sa.Integer(), nullable=False),
        sa.Column('user_id', sa.String(), nullable=True),
        sa.Column('ip_hash', sa.String(), nullable=True),
        sa.Column('user_agent', sa.String(), nullable=True),
        sa.Column('voted_at', sa.DateTime(timezone=True), nullable=False),
        sa.ForeignKeyConstraint(['artwork_id'], ['artworks.id'], ondelete='CASCADE'),
        sa.ForeignKeyConstraint(['contest_id'], ['contests.id'], ondelete='CASCADE'),
        sa.PrimaryKeyConstraint('id'),
        sa.UniqueConstraint('voter_key', 'scope_key', 'sequence', name='uq_votes_voter_scope_sequence'),
    )
    op.create_table(
        'vote_cooldowns',
        sa.Column('voter_key', sa.String(), nullable=False),
        sa.Column('scope_key', sa.String(), nullable=False),
        sa.Column('last_vote_at', sa.DateTime(timezone=True), nullable=False),
        sa.Column('vote_count', sa.Integer(), nullable=False),
        sa.Column('created_at', sa.DateTime(timezone=True), nullable=False),
        sa.PrimaryKeyConstraint('voter_key', 'scope_key'),
    )

    # Indexes
    op.create_index('idx_contests_window', 'contests', ['start_date', 'end_date'])
    op.create_index('idx_contests_status', 'contests', ['status'])
    op.create_index('idx_artworks_contest_id', 'artworks', ['contest_id'])
    op.create_index('idx_votes_artwork_id', 'votes', ['artwork_id'])
    op.create_index('idx_votes_contest_id', 'votes', ['contest_id'])


def downgrade() -> None:
    # reverse order
    op.drop_index('idx_votes_contest_id', table_name='votes')
    op.drop_index('idx_votes_artwork_id', table_name='votes')
    op.drop_index('idx_artworks_contest_id', table_name='artworks')
    op.drop_index('idx_contests_status', table_name='contests')
    op.drop_index('idx_contests_window', table_name='contests')
    op.drop_table('vote_cooldowns')
    op.drop_table('votes')
    with op.batch_alter_table('contests') as batch_op:
        batch_op.drop_constraint('fk_contests_winner_artwork_id', type_='foreignkey')
    op.drop_table('artworks')
    op.drop_table('contests')
    contest_status.drop(op.get_bind(), checkfirst=True)
