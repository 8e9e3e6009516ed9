"""Create articles, tags and article_tags tables

Revision ID: 001_archive_tables
Revises:
Create Date: 2026-10-18

"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa


# revision identifiers, used by Alembic.
revision: str = '001_archive_tables'
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    op.create_table(
        'articles',
        sa.Column('id', sa.Integer(), primary_key=True),
        sa.Column('slug', sa.String(255), nullable=False, unique=True),
        sa.Column('title', sa.Text(), nullable=False),
        sa.Column('url', sa.String(2000), nullable=False, unique=True),
        sa.Column('thumbnail_url', sa.Text(), nullable=True),
        sa.Column('content_type', sa.String(20), nullable=False),
        sa.Column('short_summary', sa.String(200), nullable=False),
        sa.Column('extended_summary', sa.Text(), nullable=True),
        sa.Column('markdown_content', sa.Text(), nullable=True),
        sa.Column('transcription', sa.Text(), nullable=True),
        sa.Column('week_start_date', sa.String(10), nullable=False),
        sa.Column('created_at', sa.DateTime(), server_default=sa.func.current_timestamp()),
        sa.Column('updated_at', sa.DateTime(), server_default=sa.func.current_timestamp()),
    )

    op.create_table(
        'tags',
        sa.Column('id', sa.Integer(), primary_key=True),
        sa.Column('name', sa.String(100), nullable=False, unique=True),
        sa.Column('created_at', sa.DateTime(), server_default=sa.func.current_timestamp()),
    )

    op.create_table(
        'article_tags',
        sa.Column(
            'article_id',
            sa.Integer(),
            sa.ForeignKey('articles.id', ondelete='CASCADE'),
            primary_key=True,
        ),
        sa.Column(
            'tag_id',
            sa.Integer(),
            sa.ForeignKey('tags.id', ondelete='CASCADE'),
            primary_key=True,
        ),
        sa.Column('position', sa.Integer(), nullable=False, server_default='0'),
    )

    # Create indexes
    op.create_index('ix_articles_week_start_date', 'articles', ['week_start_date'])
    op.create_index('ix_articles_content_type', 'articles', ['content_type'])
    op.create_index('ix_article_tags_tag_id', 'article_tags', ['tag_id'])


def downgrade() -> None:
    op.drop_index('ix_article_tags_tag_id', table_name='article_tags')
    op.drop_index('ix_articles_content_type', table_name='articles')
    op.drop_index('ix_articles_week_start_date', table_name='articles')
    op.drop_table('article_tags')
    op.drop_table('tags')
    op.drop_table('articles')
