"""initial_schema

Creates the five tables of the outreach sequencer: prospects, tov_configs,
message_sequences, sequence_messages and ai_generations.

JSON columns use JSONB on PostgreSQL and plain JSON elsewhere, matching
the models. The sequence status is stored as a non-native enum (a short
string) so the same migration runs on SQLite.

Revision ID: 5f2c9a1d7e40
Revises:
Create Date: 2026-10-19 09:12:44.118203

"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa
from sqlalchemy.dialects import postgresql


# revision identifiers, used by Alembic.
revision: str = '5f2c9a1d7e40'
down_revision: Union[str, Sequence[str], None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def _json() -> sa.types.TypeEngine:
    return sa.JSON().with_variant(postgresql.JSONB(), 'postgresql')


def upgrade() -> None:
    """Upgrade schema - create all tables."""
    op.create_table(
        'prospects',
        sa.Column('id', sa.Uuid(), nullable=False, comment='Unique prospect ID'),
        sa.Column('linkedin_url', sa.String(length=500), nullable=False, comment='Normalized LinkedIn profile URL'),
        sa.Column('linkedin_username', sa.String(length=255), nullable=True, comment='LinkedIn handle'),
        sa.Column('full_name', sa.String(length=255), nullable=True),
        sa.Column('headline', sa.String(length=500), nullable=True),
        sa.Column('summary', sa.Text(), nullable=True),
        sa.Column('current_company', sa.String(length=255), nullable=True),
        sa.Column('current_position', sa.String(length=255), nullable=True),
        sa.Column('location', sa.String(length=255), nullable=True),
        sa.Column('industry', sa.String(length=255), nullable=True),
        sa.Column('profile_data', _json(), nullable=True, comment='Structured profile blob (experiences, education)'),
        sa.Column('created_at', sa.DateTime(timezone=True), nullable=False),
        sa.Column('updated_at', sa.DateTime(timezone=True), nullable=False),
        sa.PrimaryKeyConstraint('id'),
        sa.UniqueConstraint('linkedin_url', name='prospects_linkedin_url_key'),
    )

    op.create_table(
        'tov_configs',
        sa.Column('id', sa.Uuid(), nullable=False, comment='Unique tone config ID'),
        sa.Column('name', sa.String(length=255), nullable=False),
        sa.Column('formality', sa.Float(), nullable=False),
        sa.Column('warmth', sa.Float(), nullable=False),
        sa.Column('directness', sa.Float(), nullable=False),
        sa.Column('humor', sa.Float(), nullable=True),
        sa.Column('enthusiasm', sa.Float(), nullable=True),
        sa.Column('custom_instructions', sa.Text(), nullable=True),
        sa.Column('created_at', sa.DateTime(timezone=True), nullable=False),
        sa.Column('updated_at', sa.DateTime(timezone=True), nullable=False),
        sa.PrimaryKeyConstraint('id'),
    )

    op.create_table(
        'message_sequences',
        sa.Column('id', sa.Uuid(), nullable=False, comment='Unique sequence ID'),
        sa.Column('prospect_id', sa.Uuid(), nullable=False, comment='Prospect the sequence targets'),
        sa.Column('tov_config_id', sa.Uuid(), nullable=False, comment='Tone configuration used for pass 2'),
        sa.Column('company_context', sa.Text(), nullable=False),
        sa.Column('sequence_length', sa.Integer(), nullable=False),
        sa.Column(
            'status',
            sa.Enum('pending', 'generating', 'completed', 'failed', name='sequence_status_enum', native_enum=False),
            nullable=False,
            comment='Current status: pending, generating, completed, failed'
        ),
        sa.Column('prospect_analysis', _json(), nullable=True, comment='Normalized prospect analysis from pass 1'),
        sa.Column('overall_confidence', sa.Float(), nullable=True),
        sa.Column('error_message', sa.Text(), nullable=True, comment='Error details if status is failed'),
        sa.Column('created_at', sa.DateTime(timezone=True), nullable=False),
        sa.Column('updated_at', sa.DateTime(timezone=True), nullable=False),
        sa.ForeignKeyConstraint(['prospect_id'], ['prospects.id']),
        sa.ForeignKeyConstraint(['tov_config_id'], ['tov_configs.id']),
        sa.PrimaryKeyConstraint('id'),
    )
    op.create_index('ix_message_sequences_created_at', 'message_sequences', ['created_at'])
    op.create_index('ix_message_sequences_status', 'message_sequences', ['status'])

    op.create_table(
        'sequence_messages',
        sa.Column('id', sa.Uuid(), nullable=False),
        sa.Column('sequence_id', sa.Uuid(), nullable=False),
        sa.Column('step_number', sa.Integer(), nullable=False),
        sa.Column(
            'message_type',
            sa.String(length=50),
            nullable=False,
            comment='connection_request, follow_up_value, case_study, social_proof, direct_ask, breakup'
        ),
        sa.Column('subject', sa.String(length=500), nullable=True),
        sa.Column('body', sa.Text(), nullable=False),
        sa.Column('thinking_process', sa.Text(), nullable=True),
        sa.Column('confidence_score', sa.Float(), nullable=True),
        sa.Column('personalization_points', _json(), nullable=True, comment='List of {point, source, reasoning}'),
        sa.Column('created_at', sa.DateTime(timezone=True), nullable=False),
        sa.ForeignKeyConstraint(['sequence_id'], ['message_sequences.id'], ondelete='CASCADE'),
        sa.PrimaryKeyConstraint('id'),
        sa.UniqueConstraint('sequence_id', 'step_number', name='uq_sequence_messages_step'),
    )
    op.create_index('ix_sequence_messages_sequence_id', 'sequence_messages', ['sequence_id'])

    op.create_table(
        'ai_generations',
        sa.Column('id', sa.Uuid(), nullable=False),
        sa.Column('sequence_id', sa.Uuid(), nullable=False),
        sa.Column('generation_type', sa.String(length=50), nullable=False, comment='profile_analysis | sequence_generation'),
        sa.Column('model', sa.String(length=255), nullable=False),
        sa.Column('prompt_tokens', sa.Integer(), nullable=True),
        sa.Column('completion_tokens', sa.Integer(), nullable=True),
        sa.Column('total_tokens', sa.Integer(), nullable=True),
        sa.Column('estimated_cost_usd', sa.Float(), nullable=True),
        sa.Column('latency_ms', sa.Integer(), nullable=True),
        sa.Column('raw_prompt', sa.Text(), nullable=True, comment='JSON-encoded chat messages sent'),
        sa.Column('raw_response', sa.Text(), nullable=True, comment='Raw model output'),
        sa.Column('status', sa.String(length=20), nullable=False, comment='success | error | timeout'),
        sa.Column('error_message', sa.Text(), nullable=True),
        sa.Column('created_at', sa.DateTime(timezone=True), nullable=False),
        sa.ForeignKeyConstraint(['sequence_id'], ['message_sequences.id'], ondelete='CASCADE'),
        sa.PrimaryKeyConstraint('id'),
    )
    op.create_index('ix_ai_generations_sequence_id', 'ai_generations', ['sequence_id'])


def downgrade() -> None:
    """Downgrade schema - drop all tables."""
    op.drop_index('ix_ai_generations_sequence_id', table_name='ai_generations')
    op.drop_table('ai_generations')
    op.drop_index('ix_sequence_messages_sequence_id', table_name='sequence_messages')
    op.drop_table('sequence_messages')
    op.drop_index('ix_message_sequences_status', table_name='message_sequences')
    op.drop_index('ix_message_sequences_created_at', table_name='message_sequences')
    op.drop_table('message_sequences')
    op.drop_table('tov_configs')
    op.drop_table('prospects')
