"""initial schema

Revision ID: a1f0c3d2b9e4
Revises:
Create Date: 2026-10-19 10:12:41.208311

"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa
import sqlmodel


# revision identifiers, used by Alembic.
revision: str = 'a1f0c3d2b9e4'
down_revision: Union[str, Sequence[str], None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None

user_role = sa.Enum(
    'USER', 'HOST', 'ADMIN', 'SUPER_ADMIN', name='userrole'
)
host_status = sa.Enum(
    'PENDING', 'ACTIVE', 'INACTIVE', 'REJECTED', 'SUSPENDED', name='hoststatus'
)
host_type = sa.Enum(
    'FARM', 'HOSTEL', 'HOMESTAY', 'NGO', 'ECO_VILLAGE', 'OTHER', name='hosttype'
)
opportunity_status = sa.Enum(
    'DRAFT', 'PENDING', 'ACTIVE', 'PAUSED', 'ADMIN_PAUSED', 'REJECTED',
    'EXPIRED', 'FILLED', 'ARCHIVED', 'DELETED',
    name='opportunitystatus',
)
opportunity_type = sa.Enum(
    'FARMING', 'HOSPITALITY', 'CONSERVATION', 'EDUCATION', 'COMMUNITY',
    'CREATIVE', 'OTHER',
    name='opportunitytype',
)
application_status = sa.Enum(
    'DRAFT', 'PENDING', 'REVIEWING', 'ACCEPTED', 'REJECTED', 'CONFIRMED',
    'CANCELLED', 'COMPLETED', 'WITHDRAWN',
    name='applicationstatus',
)
email_provider = sa.Enum('BREVO', 'MAILERLITE', name='emailprovider')


def upgrade() -> None:
    """Upgrade schema."""
    op.create_table(
        'user',
        sa.Column('username', sqlmodel.sql.sqltypes.AutoString(length=50), nullable=False),
        sa.Column('email', sqlmodel.sql.sqltypes.AutoString(), nullable=False),
        sa.Column('name', sqlmodel.sql.sqltypes.AutoString(length=100), nullable=False),
        sa.Column('id_user', sa.Integer(), nullable=False),
        sa.Column('role', user_role, nullable=False),
        sa.Column('hashed_password', sqlmodel.sql.sqltypes.AutoString(), nullable=False),
        sa.Column('is_active', sa.Boolean(), nullable=False),
        sa.Column('password_reset_token', sqlmodel.sql.sqltypes.AutoString(length=64), nullable=True),
        sa.Column('password_reset_expires', sa.DateTime(), nullable=True),
        sa.Column('date_creation', sa.DateTime(), nullable=False),
        sa.PrimaryKeyConstraint('id_user')
    )
    op.create_index(op.f('ix_user_username'), 'user', ['username'], unique=True)
    op.create_index(op.f('ix_user_email'), 'user', ['email'], unique=True)
    op.create_index(op.f('ix_user_role'), 'user', ['role'], unique=False)
    op.create_index(op.f('ix_user_password_reset_token'), 'user', ['password_reset_token'], unique=False)

    op.create_table(
        'host',
        sa.Column('name', sqlmodel.sql.sqltypes.AutoString(length=100), nullable=False),
        sa.Column('description', sqlmodel.sql.sqltypes.AutoString(length=3000), nullable=False),
        sa.Column('host_type', host_type, nullable=False),
        sa.Column('city', sqlmodel.sql.sqltypes.AutoString(length=50), nullable=False),
        sa.Column('district', sqlmodel.sql.sqltypes.AutoString(length=50), nullable=True),
        sa.Column('contact_email', sqlmodel.sql.sqltypes.AutoString(), nullable=True),
        sa.Column('contact_phone', sqlmodel.sql.sqltypes.AutoString(length=30), nullable=True),
        sa.Column('id_host', sa.Integer(), nullable=False),
        sa.Column('id_user', sa.Integer(), nullable=False),
        sa.Column('slug', sqlmodel.sql.sqltypes.AutoString(length=120), nullable=False),
        sa.Column('status', host_status, nullable=False),
        sa.Column('status_note', sqlmodel.sql.sqltypes.AutoString(), nullable=True),
        sa.Column('verified', sa.Boolean(), nullable=False),
        sa.Column('verified_at', sa.DateTime(), nullable=True),
        sa.Column('date_creation', sa.DateTime(), nullable=False),
        sa.ForeignKeyConstraint(['id_user'], ['user.id_user']),
        sa.PrimaryKeyConstraint('id_host'),
        sa.UniqueConstraint('id_user')
    )
    op.create_index(op.f('ix_host_name'), 'host', ['name'], unique=False)
    op.create_index(op.f('ix_host_slug'), 'host', ['slug'], unique=True)
    op.create_index(op.f('ix_host_status'), 'host', ['status'], unique=False)

    op.create_table(
        'hoststatushistory',
        sa.Column('id_history', sa.Integer(), nullable=False),
        sa.Column('id_host', sa.Integer(), nullable=False),
        sa.Column('status', host_status, nullable=False),
        sa.Column('status_note', sqlmodel.sql.sqltypes.AutoString(), nullable=True),
        sa.Column('changed_by', sa.Integer(), nullable=False),
        sa.Column('changed_at', sa.DateTime(), nullable=False),
        sa.ForeignKeyConstraint(['id_host'], ['host.id_host']),
        sa.ForeignKeyConstraint(['changed_by'], ['user.id_user']),
        sa.PrimaryKeyConstraint('id_history')
    )
    op.create_index(op.f('ix_hoststatushistory_id_host'), 'hoststatushistory', ['id_host'], unique=False)

    op.create_table(
        'opportunity',
        sa.Column('title', sqlmodel.sql.sqltypes.AutoString(length=100), nullable=False),
        sa.Column('description', sqlmodel.sql.sqltypes.AutoString(length=5000), nullable=False),
        sa.Column('short_description', sqlmodel.sql.sqltypes.AutoString(length=200), nullable=False),
        sa.Column('opportunity_type', opportunity_type, nullable=False),
        sa.Column('city', sqlmodel.sql.sqltypes.AutoString(length=50), nullable=False),
        sa.Column('work_hours_per_week', sa.Integer(), nullable=False),
        sa.Column('minimum_stay_days', sa.Integer(), nullable=False),
        sa.Column('max_applications', sa.Integer(), nullable=True),
        sa.Column('id_opportunity', sa.Integer(), nullable=False),
        sa.Column('id_host', sa.Integer(), nullable=False),
        sa.Column('slug', sqlmodel.sql.sqltypes.AutoString(length=150), nullable=False),
        sa.Column('status', opportunity_status, nullable=False),
        sa.Column('status_note', sqlmodel.sql.sqltypes.AutoString(), nullable=True),
        sa.Column('published_at', sa.DateTime(), nullable=True),
        sa.Column('date_creation', sa.DateTime(), nullable=False),
        sa.Column('date_update', sa.DateTime(), nullable=False),
        sa.ForeignKeyConstraint(['id_host'], ['host.id_host']),
        sa.PrimaryKeyConstraint('id_opportunity')
    )
    op.create_index(op.f('ix_opportunity_id_host'), 'opportunity', ['id_host'], unique=False)
    op.create_index(op.f('ix_opportunity_slug'), 'opportunity', ['slug'], unique=True)
    op.create_index(op.f('ix_opportunity_status'), 'opportunity', ['status'], unique=False)

    op.create_table(
        'opportunitystatushistory',
        sa.Column('id_history', sa.Integer(), nullable=False),
        sa.Column('id_opportunity', sa.Integer(), nullable=False),
        sa.Column('status', opportunity_status, nullable=False),
        sa.Column('reason', sqlmodel.sql.sqltypes.AutoString(length=1000), nullable=True),
        sa.Column('changed_by', sa.Integer(), nullable=False),
        sa.Column('changed_at', sa.DateTime(), nullable=False),
        sa.ForeignKeyConstraint(['id_opportunity'], ['opportunity.id_opportunity']),
        sa.ForeignKeyConstraint(['changed_by'], ['user.id_user']),
        sa.PrimaryKeyConstraint('id_history')
    )
    op.create_index(
        op.f('ix_opportunitystatushistory_id_opportunity'),
        'opportunitystatushistory', ['id_opportunity'], unique=False
    )

    op.create_table(
        'application',
        sa.Column('message', sqlmodel.sql.sqltypes.AutoString(length=3000), nullable=False),
        sa.Column('start_date', sa.Date(), nullable=False),
        sa.Column('end_date', sa.Date(), nullable=True),
        sa.Column('duration_days', sa.Integer(), nullable=False),
        sa.Column('id_application', sa.Integer(), nullable=False),
        sa.Column('id_applicant', sa.Integer(), nullable=False),
        sa.Column('id_opportunity', sa.Integer(), nullable=False),
        sa.Column('id_host', sa.Integer(), nullable=False),
        sa.Column('status', application_status, nullable=False),
        sa.Column('status_note', sqlmodel.sql.sqltypes.AutoString(), nullable=True),
        sa.Column('date_creation', sa.DateTime(), nullable=False),
        sa.Column('date_update', sa.DateTime(), nullable=False),
        sa.Column('reviewed_by', sa.Integer(), nullable=True),
        sa.Column('reviewed_at', sa.DateTime(), nullable=True),
        sa.Column('review_notes', sqlmodel.sql.sqltypes.AutoString(), nullable=True),
        sa.Column('confirmed_by', sa.Integer(), nullable=True),
        sa.Column('confirmed_at', sa.DateTime(), nullable=True),
        sa.Column('cancelled_by', sa.Integer(), nullable=True),
        sa.Column('cancelled_at', sa.DateTime(), nullable=True),
        sa.Column('cancellation_reason', sqlmodel.sql.sqltypes.AutoString(), nullable=True),
        sa.Column('cancellation_initiated_by', sqlmodel.sql.sqltypes.AutoString(length=10), nullable=True),
        sa.Column('completed_at', sa.DateTime(), nullable=True),
        sa.ForeignKeyConstraint(['id_applicant'], ['user.id_user']),
        sa.ForeignKeyConstraint(['id_opportunity'], ['opportunity.id_opportunity']),
        sa.ForeignKeyConstraint(['id_host'], ['host.id_host']),
        sa.ForeignKeyConstraint(['reviewed_by'], ['user.id_user']),
        sa.ForeignKeyConstraint(['confirmed_by'], ['user.id_user']),
        sa.ForeignKeyConstraint(['cancelled_by'], ['user.id_user']),
        sa.PrimaryKeyConstraint('id_application'),
        sa.UniqueConstraint('id_applicant', 'id_opportunity', name='uq_application_applicant_opportunity')
    )
    op.create_index(op.f('ix_application_id_applicant'), 'application', ['id_applicant'], unique=False)
    op.create_index(op.f('ix_application_id_opportunity'), 'application', ['id_opportunity'], unique=False)
    op.create_index(op.f('ix_application_id_host'), 'application', ['id_host'], unique=False)
    op.create_index(op.f('ix_application_status'), 'application', ['status'], unique=False)

    op.create_table(
        'review',
        sa.Column('id_host', sa.Integer(), nullable=False),
        sa.Column('id_opportunity', sa.Integer(), nullable=True),
        sa.Column('rating', sa.Integer(), nullable=False),
        sa.Column('comment', sqlmodel.sql.sqltypes.AutoString(length=2000), nullable=False),
        sa.Column('id_review', sa.Integer(), nullable=False),
        sa.Column('id_author', sa.Integer(), nullable=False),
        sa.Column('is_public', sa.Boolean(), nullable=False),
        sa.Column('date_creation', sa.DateTime(), nullable=False),
        sa.ForeignKeyConstraint(['id_host'], ['host.id_host']),
        sa.ForeignKeyConstraint(['id_opportunity'], ['opportunity.id_opportunity']),
        sa.ForeignKeyConstraint(['id_author'], ['user.id_user']),
        sa.PrimaryKeyConstraint('id_review'),
        sa.UniqueConstraint('id_author', 'id_host', 'id_opportunity', name='uq_review_author_target')
    )
    op.create_index(op.f('ix_review_id_host'), 'review', ['id_host'], unique=False)
    op.create_index(op.f('ix_review_id_author'), 'review', ['id_author'], unique=False)

    op.create_table(
        'image',
        sa.Column('alt_text', sqlmodel.sql.sqltypes.AutoString(length=200), nullable=True),
        sa.Column('id_image', sa.Integer(), nullable=False),
        sa.Column('id_owner', sa.Integer(), nullable=False),
        sa.Column('object_name', sqlmodel.sql.sqltypes.AutoString(length=255), nullable=False),
        sa.Column('content_type', sqlmodel.sql.sqltypes.AutoString(length=100), nullable=False),
        sa.Column('size', sa.Integer(), nullable=False),
        sa.Column('date_creation', sa.DateTime(), nullable=False),
        sa.ForeignKeyConstraint(['id_owner'], ['user.id_user']),
        sa.PrimaryKeyConstraint('id_image'),
        sa.UniqueConstraint('object_name')
    )
    op.create_index(op.f('ix_image_id_owner'), 'image', ['id_owner'], unique=False)

    op.create_table(
        'email_usage',
        sa.Column('id_usage', sa.Integer(), nullable=False),
        sa.Column('provider', email_provider, nullable=False),
        sa.Column('usage_date', sa.Date(), nullable=False),
        sa.Column('count', sa.Integer(), nullable=False),
        sa.Column('last_reset', sa.DateTime(), nullable=False),
        sa.PrimaryKeyConstraint('id_usage'),
        sa.UniqueConstraint('provider', 'usage_date', name='uq_email_usage_provider_date')
    )
    op.create_index(op.f('ix_email_usage_provider'), 'email_usage', ['provider'], unique=False)

    op.create_table(
        'bookmark',
        sa.Column('id_user', sa.Integer(), nullable=False),
        sa.Column('id_opportunity', sa.Integer(), nullable=False),
        sa.Column('created_at', sa.DateTime(), nullable=False),
        sa.ForeignKeyConstraint(['id_user'], ['user.id_user']),
        sa.ForeignKeyConstraint(['id_opportunity'], ['opportunity.id_opportunity']),
        sa.PrimaryKeyConstraint('id_user', 'id_opportunity')
    )


def downgrade() -> None:
    """Downgrade schema."""
    op.drop_table('bookmark')
    op.drop_table('email_usage')
    op.drop_table('image')
    op.drop_table('review')
    op.drop_table('application')
    op.drop_table('opportunitystatushistory')
    op.drop_table('opportunity')
    op.drop_table('hoststatushistory')
    op.drop_table('host')
    op.drop_table('user')

    bind = op.get_bind()
    for enum_type in (
        email_provider,
        application_status,
        opportunity_status,
        opportunity_type,
        host_type,
        host_status,
        user_role,
    ):
        enum_type.drop(bind, checkfirst=True)
