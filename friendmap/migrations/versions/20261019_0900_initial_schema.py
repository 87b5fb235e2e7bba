"""Initial schema: people, tags, visited locations, country/city pairs

Revision ID: 3f1c0a7d9b21
Revises:
Create Date: 2026-10-19 09:00:00

"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa


# revision identifiers, used by Alembic.
revision: str = '3f1c0a7d9b21'
down_revision: Union[str, Sequence[str], None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    """Create all tables."""
    op.create_table(
        'country_cities',
        sa.Column('id', sa.Integer(), autoincrement=True, nullable=False),
        sa.Column('country', sa.String(length=255), nullable=False),
        sa.Column('city', sa.String(length=255), nullable=False),
        sa.Column('country_key', sa.String(length=255), nullable=False),
        sa.Column('city_key', sa.String(length=255), nullable=False),
        sa.CheckConstraint("country != ''", name='ck_non_empty_country'),
        sa.CheckConstraint("city != ''", name='ck_non_empty_city'),
        sa.PrimaryKeyConstraint('id'),
        sa.UniqueConstraint('country_key', 'city_key', name='uq_country_city'),
    )
    with op.batch_alter_table('country_cities', schema=None) as batch_op:
        batch_op.create_index('ix_country_cities_country_key', ['country_key'], unique=False)
        batch_op.create_index('ix_country_cities_city_key', ['city_key'], unique=False)

    op.create_table(
        'tags',
        sa.Column('id', sa.Integer(), autoincrement=True, nullable=False),
        sa.Column('tag', sa.String(length=255), nullable=False),
        sa.Column('key', sa.String(length=255), nullable=False),
        sa.CheckConstraint("tag != ''", name='ck_non_empty_tag'),
        sa.PrimaryKeyConstraint('id'),
    )
    with op.batch_alter_table('tags', schema=None) as batch_op:
        batch_op.create_index('ix_tags_key', ['key'], unique=True)

    op.create_table(
        'visited_locations',
        sa.Column('id', sa.Integer(), autoincrement=True, nullable=False),
        sa.Column('location', sa.String(length=255), nullable=False),
        sa.Column('key', sa.String(length=255), nullable=False),
        sa.CheckConstraint("location != ''", name='ck_non_empty_location'),
        sa.PrimaryKeyConstraint('id'),
    )
    with op.batch_alter_table('visited_locations', schema=None) as batch_op:
        batch_op.create_index('ix_visited_locations_key', ['key'], unique=True)

    op.create_table(
        'people',
        sa.Column('id', sa.Integer(), autoincrement=True, nullable=False),
        sa.Column('name', sa.String(length=255), nullable=False),
        sa.Column('country', sa.String(length=255), nullable=True),
        sa.Column('city', sa.String(length=255), nullable=True),
        sa.Column('country_city_id', sa.Integer(), nullable=True),
        sa.Column('is_starred', sa.Boolean(), server_default='0', nullable=False),
        sa.Column('created_at', sa.DateTime(timezone=True), nullable=False),
        sa.Column('updated_at', sa.DateTime(timezone=True), nullable=False),
        sa.CheckConstraint("trim(name) != ''", name='ck_person_non_empty_name'),
        sa.ForeignKeyConstraint(
            ['country_city_id'], ['country_cities.id'], ondelete='SET NULL'
        ),
        sa.PrimaryKeyConstraint('id'),
    )
    with op.batch_alter_table('people', schema=None) as batch_op:
        batch_op.create_index('ix_people_name', ['name'], unique=False)
        batch_op.create_index('ix_people_country_city_id', ['country_city_id'], unique=False)
        batch_op.create_index('ix_people_is_starred', ['is_starred'], unique=False)

    op.create_table(
        'person_tags',
        sa.Column('person_id', sa.Integer(), nullable=False),
        sa.Column('tag_id', sa.Integer(), nullable=False),
        sa.ForeignKeyConstraint(['person_id'], ['people.id'], ondelete='CASCADE'),
        sa.ForeignKeyConstraint(['tag_id'], ['tags.id'], ondelete='CASCADE'),
        sa.PrimaryKeyConstraint('person_id', 'tag_id'),
    )
    with op.batch_alter_table('person_tags', schema=None) as batch_op:
        batch_op.create_index('ix_person_tags_tag_id', ['tag_id'], unique=False)

    op.create_table(
        'person_visited_locations',
        sa.Column('person_id', sa.Integer(), nullable=False),
        sa.Column('location_id', sa.Integer(), nullable=False),
        sa.ForeignKeyConstraint(['person_id'], ['people.id'], ondelete='CASCADE'),
        sa.ForeignKeyConstraint(
            ['location_id'], ['visited_locations.id'], ondelete='CASCADE'
        ),
        sa.PrimaryKeyConstraint('person_id', 'location_id'),
    )
    with op.batch_alter_table('person_visited_locations', schema=None) as batch_op:
        batch_op.create_index(
            'ix_person_visited_locations_location_id', ['location_id'], unique=False
        )


def downgrade() -> None:
    """Drop all tables."""
    op.drop_table('person_visited_locations')
    op.drop_table('person_tags')
    op.drop_table('people')
    op.drop_table('visited_locations')
    op.drop_table('tags')
    op.drop_table('country_cities')
