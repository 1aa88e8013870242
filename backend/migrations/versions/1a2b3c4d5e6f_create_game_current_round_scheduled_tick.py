"""create game, current_round and scheduled_tick

Revision ID: 1a2b3c4d5e6f
Revises:
Create Date: 2026-10-18 00:00:00

"""
from alembic import op
import sqlalchemy as sa


# revision identifiers, used by Alembic.
revision = '1a2b3c4d5e6f'
down_revision = None
branch_labels = None
depends_on = None


def upgrade():
    op.create_table(
        'game',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('join_code', sa.String(length=8), nullable=False),
        sa.Column('started', sa.Boolean(), nullable=False),
        sa.Column('rounds_remaining', sa.Integer(), nullable=False),
        sa.Column('seconds_per_question', sa.Integer(), nullable=False),
        sa.Column('players', sa.Text(), nullable=False),
        sa.Column('finished_rounds', sa.Text(), nullable=False),
        sa.Column('created_at', sa.Float(), nullable=False),
        sa.PrimaryKeyConstraint('id'),
    )
    op.create_index(op.f('ix_game_join_code'), 'game', ['join_code'], unique=True)

    op.create_table(
        'current_round',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('game_id', sa.Integer(), nullable=False),
        sa.Column('question', sa.Text(), nullable=False),
        sa.Column('guesses', sa.Text(), nullable=False),
        sa.Column('deadline', sa.Float(), nullable=False),
        sa.ForeignKeyConstraint(['game_id'], ['game.id']),
        sa.PrimaryKeyConstraint('id'),
    )
    op.create_index(op.f('ix_current_round_game_id'), 'current_round', ['game_id'], unique=True)

    op.create_table(
        'scheduled_tick',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('game_id', sa.Integer(), nullable=False),
        sa.Column('fire_at', sa.Float(), nullable=False),
        sa.Column('attempts', sa.Integer(), nullable=False),
        sa.PrimaryKeyConstraint('id'),
    )
    op.create_index(op.f('ix_scheduled_tick_game_id'), 'scheduled_tick', ['game_id'], unique=False)
    op.create_index(op.f('ix_scheduled_tick_fire_at'), 'scheduled_tick', ['fire_at'], unique=False)


def downgrade():
    op.drop_index(op.f('ix_scheduled_tick_fire_at'), table_name='scheduled_tick')
    op.drop_index(op.f('ix_scheduled_tick_game_id'), table_name='scheduled_tick')
    op.drop_table('scheduled_tick')
    op.drop_index(op.f('ix_current_round_game_id'), table_name='current_round')
    op.drop_table('current_round')
    op.drop_index(op.f('ix_game_join_code'), table_name='game')
    op.drop_table('game')
