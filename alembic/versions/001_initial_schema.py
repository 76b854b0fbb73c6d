"""Initial EMHR schema

Revision ID: 001
Revises:
Create Date: 2026-10-19 00:00:00.000000

"""
from alembic import op
import sqlalchemy as sa

# revision identifiers, used by Alembic.
revision = '001'
down_revision = None
branch_labels = None
depends_on = None


def upgrade() -> None:
    # Create users table
    op.create_table(
        'users',
        sa.Column('id', sa.Integer(), autoincrement=True, nullable=False),
        sa.Column('username', sa.String(length=50), nullable=False),
        sa.Column('password_hash', sa.String(length=255), nullable=False),
        sa.Column('email', sa.String(length=255), nullable=True),
        sa.Column('fname', sa.String(length=100), nullable=False),
        sa.Column('lname', sa.String(length=100), nullable=False),
        sa.Column('title', sa.String(length=50), nullable=True),
        sa.Column('npi', sa.String(length=20), nullable=True),
        sa.Column('user_type', sa.Enum('ADMIN', 'USER', 'SOCIAL_WORKER', name='usertype'), nullable=False),
        sa.Column('is_provider', sa.Boolean(), nullable=False),
        sa.Column('is_supervisor', sa.Boolean(), nullable=False),
        sa.Column('is_social_worker', sa.Boolean(), nullable=False),
        sa.Column('failed_login_attempts', sa.Integer(), nullable=False),
        sa.Column('locked_until', sa.DateTime(), nullable=True),
        sa.Column('last_login', sa.DateTime(), nullable=True),
        sa.Column('is_active', sa.Boolean(), nullable=False),
        sa.Column('deleted_at', sa.DateTime(), nullable=True),
        sa.Column('created_at', sa.DateTime(), nullable=True),
        sa.Column('updated_at', sa.DateTime(), nullable=True),
        sa.PrimaryKeyConstraint('id'),
    )
    op.create_index('ix_users_username', 'users', ['username'], unique=True)

    # Create user_sessions table
    op.create_table(
        'user_sessions',
        sa.Column('id', sa.Integer(), autoincrement=True, nullable=False),
        sa.Column('user_id', sa.Integer(), nullable=False),
        sa.Column('session_token', sa.String(length=255), nullable=False),
        sa.Column('ip_address', sa.String(length=45), nullable=True),
        sa.Column('user_agent', sa.String(length=500), nullable=True),
        sa.Column('is_active', sa.Boolean(), nullable=False),
        sa.Column('expires_at', sa.DateTime(), nullable=False),
        sa.Column('created_at', sa.DateTime(), nullable=True),
        sa.Column('last_accessed_at', sa.DateTime(), nullable=True),
        sa.ForeignKeyConstraint(['user_id'], ['users.id'], ondelete='CASCADE'),
        sa.PrimaryKeyConstraint('id'),
    )
    op.create_index('ix_user_sessions_user_id', 'user_sessions', ['user_id'], unique=False)
    op.create_index('ix_user_sessions_session_token', 'user_sessions', ['session_token'], unique=True)

    # Create user_supervisors table
    op.create_table(
        'user_supervisors',
        sa.Column('id', sa.Integer(), autoincrement=True, nullable=False),
        sa.Column('user_id', sa.Integer(), nullable=False),
        sa.Column('supervisor_id', sa.Integer(), nullable=False),
        sa.Column('started_at', sa.Date(), nullable=False),
        sa.Column('ended_at', sa.Date(), nullable=True),
        sa.Column('created_at', sa.DateTime(), nullable=True),
        sa.ForeignKeyConstraint(['user_id'], ['users.id']),
        sa.ForeignKeyConstraint(['supervisor_id'], ['users.id']),
        sa.PrimaryKeyConstraint('id'),
    )
    op.create_index('ix_user_supervisors_user_id', 'user_supervisors', ['user_id'], unique=False)
    op.create_index('ix_user_supervisors_supervisor_id', 'user_supervisors', ['supervisor_id'], unique=False)

    # Create clients table
    op.create_table(
        'clients',
        sa.Column('id', sa.Integer(), autoincrement=True, nullable=False),
        sa.Column('fname', sa.String(length=100), nullable=False),
        sa.Column('mname', sa.String(length=100), nullable=True),
        sa.Column('lname', sa.String(length=100), nullable=False),
        sa.Column('preferred_name', sa.String(length=100), nullable=True),
        sa.Column('dob', sa.Date(), nullable=False),
        sa.Column('sex', sa.String(length=20), nullable=True),
        sa.Column('gender_identity', sa.String(length=50), nullable=True),
        sa.Column('pronouns', sa.String(length=30), nullable=True),
        sa.Column('ssn_encrypted', sa.Text(), nullable=True),
        sa.Column('phone_cell', sa.String(length=30), nullable=True),
        sa.Column('phone_home', sa.String(length=30), nullable=True),
        sa.Column('email', sa.String(length=255), nullable=True),
        sa.Column('street', sa.String(length=255), nullable=True),
        sa.Column('city', sa.String(length=100), nullable=True),
        sa.Column('state', sa.String(length=50), nullable=True),
        sa.Column('postal_code', sa.String(length=20), nullable=True),
        sa.Column('emergency_contact_name', sa.String(length=200), nullable=True),
        sa.Column('emergency_contact_phone', sa.String(length=30), nullable=True),
        sa.Column('emergency_contact_relationship', sa.String(length=50), nullable=True),
        sa.Column('care_team_status', sa.Enum('ACTIVE', 'INACTIVE', 'DISCHARGED', name='careteamstatus'), nullable=False),
        sa.Column('created_by', sa.Integer(), nullable=True),
        sa.Column('created_at', sa.DateTime(), nullable=True),
        sa.Column('updated_at', sa.DateTime(), nullable=True),
        sa.Column('deleted_at', sa.DateTime(), nullable=True),
        sa.ForeignKeyConstraint(['created_by'], ['users.id']),
        sa.PrimaryKeyConstraint('id'),
    )
    op.create_index('ix_clients_lname', 'clients', ['lname'], unique=False)

    # Create client_providers table
    op.create_table(
        'client_providers',
        sa.Column('id', sa.Integer(), autoincrement=True, nullable=False),
        sa.Column('client_id', sa.Integer(), nullable=False),
        sa.Column('provider_id', sa.Integer(), nullable=False),
        sa.Column(
            'role',
            sa.Enum('PRIMARY_CLINICIAN', 'CLINICIAN', 'SOCIAL_WORKER', 'SUPERVISOR', 'INTERN', name='careteamrole'),
            nullable=False,
        ),
        sa.Column('assigned_at', sa.Date(), nullable=False),
        sa.Column('ended_at', sa.Date(), nullable=True),
        sa.Column('assigned_by', sa.Integer(), nullable=True),
        sa.ForeignKeyConstraint(['client_id'], ['clients.id']),
        sa.ForeignKeyConstraint(['provider_id'], ['users.id']),
        sa.ForeignKeyConstraint(['assigned_by'], ['users.id']),
        sa.PrimaryKeyConstraint('id'),
    )
    op.create_index('ix_client_providers_provider_id', 'client_providers', ['provider_id'], unique=False)
    op.create_index(
        'ix_client_providers_client_provider', 'client_providers', ['client_id', 'provider_id'], unique=False
    )

    # Create calendar_categories table
    op.create_table(
        'calendar_categories',
        sa.Column('id', sa.Integer(), autoincrement=True, nullable=False),
        sa.Column('name', sa.String(length=100), nullable=False),
        sa.Column('color', sa.String(length=10), nullable=True),
        sa.Column('description', sa.Text(), nullable=True),
        sa.Column('category_type', sa.Integer(), nullable=False),
        sa.Column('default_duration', sa.Integer(), nullable=False),
        sa.Column('is_billable', sa.Boolean(), nullable=True),
        sa.Column('is_active', sa.Boolean(), nullable=False),
        sa.Column('sort_order', sa.Integer(), nullable=True),
        sa.Column('created_at', sa.DateTime(), nullable=True),
        sa.PrimaryKeyConstraint('id'),
        sa.UniqueConstraint('name'),
    )

    # Create appointments table
    op.create_table(
        'appointments',
        sa.Column('id', sa.Integer(), autoincrement=True, nullable=False),
        sa.Column('patient_id', sa.Integer(), nullable=True),
        sa.Column('provider_id', sa.Integer(), nullable=False),
        sa.Column('category_id', sa.Integer(), nullable=False),
        sa.Column('event_date', sa.Date(), nullable=False),
        sa.Column('start_time', sa.Time(), nullable=False),
        sa.Column('end_time', sa.Time(), nullable=False),
        sa.Column('duration', sa.Integer(), nullable=False),
        sa.Column('title', sa.String(length=255), nullable=True),
        sa.Column('comments', sa.Text(), nullable=True),
        sa.Column(
            'status',
            sa.Enum(
                'SCHEDULED', 'CONFIRMED', 'ARRIVED', 'IN_SESSION', 'COMPLETED', 'CANCELLED', 'NO_SHOW',
                name='appointmentstatus'
            ),
            nullable=False,
        ),
        sa.Column('room', sa.String(length=50), nullable=True),
        sa.Column('facility_id', sa.Integer(), nullable=True),
        sa.Column('recurrence_id', sa.String(length=36), nullable=True),
        sa.Column('recurrence_rule', sa.String(length=100), nullable=True),
        sa.Column('clinical_note_id', sa.Integer(), nullable=True),
        sa.Column('created_by', sa.Integer(), nullable=True),
        sa.Column('created_at', sa.DateTime(), nullable=True),
        sa.Column('updated_at', sa.DateTime(), nullable=True),
        sa.ForeignKeyConstraint(['patient_id'], ['clients.id']),
        sa.ForeignKeyConstraint(['provider_id'], ['users.id']),
        sa.ForeignKeyConstraint(['category_id'], ['calendar_categories.id']),
        sa.ForeignKeyConstraint(['created_by'], ['users.id']),
        sa.PrimaryKeyConstraint('id'),
    )
    op.create_index('ix_appointments_patient_id', 'appointments', ['patient_id'], unique=False)
    op.create_index('ix_appointments_provider_id', 'appointments', ['provider_id'], unique=False)
    op.create_index('ix_appointments_event_date', 'appointments', ['event_date'], unique=False)
    op.create_index('ix_appointments_recurrence_id', 'appointments', ['recurrence_id'], unique=False)
    op.create_index('ix_appointments_clinical_note_id', 'appointments', ['clinical_note_id'], unique=False)

    # Create clinical_notes table
    op.create_table(
        'clinical_notes',
        sa.Column('id', sa.Integer(), autoincrement=True, nullable=False),
        sa.Column('note_uuid', sa.String(length=36), nullable=False),
        sa.Column('patient_id', sa.Integer(), nullable=False),
        sa.Column('provider_id', sa.Integer(), nullable=False),
        sa.Column('appointment_id', sa.Integer(), nullable=True),
        sa.Column('billing_id', sa.Integer(), nullable=True),
        sa.Column(
            'note_type',
            sa.Enum(
                'PROGRESS', 'INTAKE', 'DIAGNOSIS', 'TREATMENT_PLAN', 'CRISIS', 'DISCHARGE',
                'CASE_MANAGEMENT', 'GROUP', 'COLLATERAL',
                name='notetype'
            ),
            nullable=False,
        ),
        sa.Column('template_type', sa.String(length=30), nullable=False),
        sa.Column('service_date', sa.Date(), nullable=False),
        sa.Column('service_duration', sa.Integer(), nullable=True),
        sa.Column('service_location', sa.String(length=100), nullable=True),
        sa.Column('behavior_problem', sa.Text(), nullable=True),
        sa.Column('intervention', sa.Text(), nullable=True),
        sa.Column('response', sa.Text(), nullable=True),
        sa.Column('plan', sa.Text(), nullable=True),
        sa.Column('risk_present', sa.Boolean(), nullable=True),
        sa.Column('risk_assessment', sa.Text(), nullable=True),
        sa.Column('goals_addressed', sa.JSON(), nullable=True),
        sa.Column('interventions_selected', sa.JSON(), nullable=True),
        sa.Column('client_presentation', sa.JSON(), nullable=True),
        sa.Column('diagnosis_codes', sa.JSON(), nullable=True),
        sa.Column('presenting_concerns', sa.Text(), nullable=True),
        sa.Column('clinical_observations', sa.Text(), nullable=True),
        sa.Column('mental_status_exam', sa.JSON(), nullable=True),
        sa.Column('symptoms_reported', sa.Text(), nullable=True),
        sa.Column('symptoms_observed', sa.Text(), nullable=True),
        sa.Column('clinical_justification', sa.Text(), nullable=True),
        sa.Column('differential_diagnosis', sa.Text(), nullable=True),
        sa.Column('severity_specifiers', sa.Text(), nullable=True),
        sa.Column('functional_impairment', sa.Text(), nullable=True),
        sa.Column('duration_of_symptoms', sa.String(length=100), nullable=True),
        sa.Column('previous_diagnoses', sa.Text(), nullable=True),
        sa.Column(
            'status',
            sa.Enum('DRAFT', 'IN_PROGRESS', 'PENDING_REVIEW', 'SIGNED', name='notestatus'),
            nullable=False,
        ),
        sa.Column('is_locked', sa.Boolean(), nullable=False),
        sa.Column('signed_at', sa.DateTime(), nullable=True),
        sa.Column('signed_by', sa.Integer(), nullable=True),
        sa.Column('signature_data', sa.JSON(), nullable=True),
        sa.Column('locked_at', sa.DateTime(), nullable=True),
        sa.Column('supervisor_review_required', sa.Boolean(), nullable=False),
        sa.Column(
            'supervisor_review_status',
            sa.Enum('PENDING', 'APPROVED', 'REJECTED', name='supervisorreviewstatus'),
            nullable=True,
        ),
        sa.Column('submitted_for_review_at', sa.DateTime(), nullable=True),
        sa.Column('supervisor_signed_by', sa.Integer(), nullable=True),
        sa.Column('supervisor_signed_at', sa.DateTime(), nullable=True),
        sa.Column('supervisor_comments', sa.Text(), nullable=True),
        sa.Column('is_addendum', sa.Boolean(), nullable=False),
        sa.Column('parent_note_id', sa.Integer(), nullable=True),
        sa.Column('addendum_reason', sa.Text(), nullable=True),
        sa.Column('last_autosave_at', sa.DateTime(), nullable=True),
        sa.Column('created_at', sa.DateTime(), nullable=True),
        sa.Column('updated_at', sa.DateTime(), nullable=True),
        sa.ForeignKeyConstraint(['patient_id'], ['clients.id']),
        sa.ForeignKeyConstraint(['provider_id'], ['users.id']),
        sa.ForeignKeyConstraint(['appointment_id'], ['appointments.id'], ondelete='SET NULL'),
        sa.ForeignKeyConstraint(['signed_by'], ['users.id']),
        sa.ForeignKeyConstraint(['supervisor_signed_by'], ['users.id']),
        sa.ForeignKeyConstraint(['parent_note_id'], ['clinical_notes.id']),
        sa.PrimaryKeyConstraint('id'),
    )
    op.create_index('ix_clinical_notes_note_uuid', 'clinical_notes', ['note_uuid'], unique=True)
    op.create_index('ix_clinical_notes_patient_id', 'clinical_notes', ['patient_id'], unique=False)
    op.create_index('ix_clinical_notes_provider_id', 'clinical_notes', ['provider_id'], unique=False)
    op.create_index('ix_clinical_notes_service_date', 'clinical_notes', ['service_date'], unique=False)
    op.create_index('ix_clinical_notes_status', 'clinical_notes', ['status'], unique=False)
    op.create_index('ix_clinical_notes_parent_note_id', 'clinical_notes', ['parent_note_id'], unique=False)

    # Create note_drafts table
    op.create_table(
        'note_drafts',
        sa.Column('id', sa.Integer(), autoincrement=True, nullable=False),
        sa.Column('note_id', sa.Integer(), nullable=True),
        sa.Column('provider_id', sa.Integer(), nullable=False),
        sa.Column('patient_id', sa.Integer(), nullable=False),
        sa.Column('appointment_id', sa.Integer(), nullable=True),
        sa.Column('note_type', sa.String(length=50), nullable=True),
        sa.Column('service_date', sa.Date(), nullable=True),
        sa.Column('draft_content', sa.JSON(), nullable=False),
        sa.Column('saved_at', sa.DateTime(), nullable=False),
        sa.Column('created_at', sa.DateTime(), nullable=True),
        sa.ForeignKeyConstraint(['note_id'], ['clinical_notes.id'], ondelete='CASCADE'),
        sa.ForeignKeyConstraint(['provider_id'], ['users.id']),
        sa.ForeignKeyConstraint(['patient_id'], ['clients.id']),
        sa.ForeignKeyConstraint(['appointment_id'], ['appointments.id'], ondelete='SET NULL'),
        sa.PrimaryKeyConstraint('id'),
    )
    op.create_index('ix_note_drafts_note_id', 'note_drafts', ['note_id'], unique=False)
    op.create_index('ix_note_drafts_provider_id', 'note_drafts', ['provider_id'], unique=False)
    op.create_index('ix_note_drafts_patient_id', 'note_drafts', ['patient_id'], unique=False)

    # Create diagnoses table (problem list)
    op.create_table(
        'diagnoses',
        sa.Column('id', sa.Integer(), autoincrement=True, nullable=False),
        sa.Column('patient_id', sa.Integer(), nullable=False),
        sa.Column('code', sa.String(length=20), nullable=False),
        sa.Column('title', sa.String(length=255), nullable=False),
        sa.Column('begdate', sa.Date(), nullable=False),
        sa.Column('enddate', sa.Date(), nullable=True),
        sa.Column('activity', sa.Boolean(), nullable=False),
        sa.Column('is_primary', sa.Boolean(), nullable=False),
        sa.Column('comments', sa.Text(), nullable=True),
        sa.Column('source_note_id', sa.Integer(), nullable=True),
        sa.Column('created_by', sa.Integer(), nullable=True),
        sa.Column('created_at', sa.DateTime(), nullable=True),
        sa.Column('updated_at', sa.DateTime(), nullable=True),
        sa.ForeignKeyConstraint(['patient_id'], ['clients.id']),
        sa.ForeignKeyConstraint(['source_note_id'], ['clinical_notes.id'], ondelete='SET NULL'),
        sa.ForeignKeyConstraint(['created_by'], ['users.id']),
        sa.PrimaryKeyConstraint('id'),
    )
    op.create_index('ix_diagnoses_patient_id', 'diagnoses', ['patient_id'], unique=False)
    op.create_index('ix_diagnoses_code', 'diagnoses', ['code'], unique=False)

    # Create treatment_goals table
    op.create_table(
        'treatment_goals',
        sa.Column('id', sa.Integer(), autoincrement=True, nullable=False),
        sa.Column('patient_id', sa.Integer(), nullable=False),
        sa.Column('goal_text', sa.Text(), nullable=False),
        sa.Column('goal_category', sa.String(length=100), nullable=True),
        sa.Column('target_date', sa.Date(), nullable=True),
        sa.Column(
            'status',
            sa.Enum('ACTIVE', 'ACHIEVED', 'REVISED', 'DISCONTINUED', name='goalstatus'),
            nullable=False,
        ),
        sa.Column('achieved_at', sa.DateTime(), nullable=True),
        sa.Column('created_by', sa.Integer(), nullable=True),
        sa.Column('created_at', sa.DateTime(), nullable=True),
        sa.Column('updated_at', sa.DateTime(), nullable=True),
        sa.ForeignKeyConstraint(['patient_id'], ['clients.id']),
        sa.ForeignKeyConstraint(['created_by'], ['users.id']),
        sa.PrimaryKeyConstraint('id'),
    )
    op.create_index('ix_treatment_goals_patient_id', 'treatment_goals', ['patient_id'], unique=False)

    # Create intervention_library table
    op.create_table(
        'intervention_library',
        sa.Column('id', sa.Integer(), autoincrement=True, nullable=False),
        sa.Column('intervention_name', sa.String(length=200), nullable=False),
        sa.Column('intervention_tier', sa.Integer(), nullable=False),
        sa.Column('modality', sa.String(length=100), nullable=True),
        sa.Column('description', sa.Text(), nullable=True),
        sa.Column('is_active', sa.Boolean(), nullable=False),
        sa.Column('sort_order', sa.Integer(), nullable=True),
        sa.Column('created_at', sa.DateTime(), nullable=True),
        sa.PrimaryKeyConstraint('id'),
    )

    # Create intervention_favorites table
    op.create_table(
        'intervention_favorites',
        sa.Column('id', sa.Integer(), autoincrement=True, nullable=False),
        sa.Column('user_id', sa.Integer(), nullable=False),
        sa.Column('intervention_id', sa.Integer(), nullable=False),
        sa.Column('created_at', sa.DateTime(), nullable=True),
        sa.ForeignKeyConstraint(['user_id'], ['users.id']),
        sa.ForeignKeyConstraint(['intervention_id'], ['intervention_library.id'], ondelete='CASCADE'),
        sa.PrimaryKeyConstraint('id'),
        sa.UniqueConstraint('user_id', 'intervention_id', name='uq_intervention_favorite'),
    )
    op.create_index('ix_intervention_favorites_user_id', 'intervention_favorites', ['user_id'], unique=False)

    # Create settings tables
    op.create_table(
        'settings',
        sa.Column('id', sa.Integer(), autoincrement=True, nullable=False),
        sa.Column('setting_key', sa.String(length=100), nullable=False),
        sa.Column('setting_value', sa.Text(), nullable=True),
        sa.Column('setting_type', sa.String(length=20), nullable=False),
        sa.Column('category', sa.String(length=50), nullable=False),
        sa.Column('description', sa.Text(), nullable=True),
        sa.Column('is_editable', sa.Boolean(), nullable=False),
        sa.Column('updated_by', sa.Integer(), nullable=True),
        sa.Column('created_at', sa.DateTime(), nullable=True),
        sa.Column('updated_at', sa.DateTime(), nullable=True),
        sa.PrimaryKeyConstraint('id'),
    )
    op.create_index('ix_settings_setting_key', 'settings', ['setting_key'], unique=True)
    op.create_index('ix_settings_category', 'settings', ['category'], unique=False)

    op.create_table(
        'clinical_settings',
        sa.Column('id', sa.Integer(), autoincrement=True, nullable=False),
        sa.Column('setting_key', sa.String(length=100), nullable=False),
        sa.Column('setting_value', sa.Text(), nullable=True),
        sa.Column('setting_type', sa.String(length=20), nullable=False),
        sa.Column('description', sa.Text(), nullable=True),
        sa.Column('created_at', sa.DateTime(), nullable=True),
        sa.Column('updated_at', sa.DateTime(), nullable=True),
        sa.PrimaryKeyConstraint('id'),
    )
    op.create_index('ix_clinical_settings_setting_key', 'clinical_settings', ['setting_key'], unique=True)

    # Create billing tables
    op.create_table(
        'cpt_codes',
        sa.Column('id', sa.Integer(), autoincrement=True, nullable=False),
        sa.Column('code', sa.String(length=10), nullable=False),
        sa.Column('category', sa.String(length=50), nullable=False),
        sa.Column('type', sa.String(length=50), nullable=True),
        sa.Column('description', sa.Text(), nullable=False),
        sa.Column('standard_duration_minutes', sa.Integer(), nullable=True),
        sa.Column('standard_fee', sa.Numeric(precision=10, scale=2), nullable=True),
        sa.Column('is_active', sa.Boolean(), nullable=False),
        sa.Column('is_addon', sa.Boolean(), nullable=False),
        sa.Column('requires_primary_code', sa.Boolean(), nullable=False),
        sa.Column('sort_order', sa.Integer(), nullable=True),
        sa.Column('created_at', sa.DateTime(), nullable=True),
        sa.Column('updated_at', sa.DateTime(), nullable=True),
        sa.PrimaryKeyConstraint('id'),
    )
    op.create_index('ix_cpt_codes_code', 'cpt_codes', ['code'], unique=True)

    op.create_table(
        'billing_modifiers',
        sa.Column('id', sa.Integer(), autoincrement=True, nullable=False),
        sa.Column('code', sa.String(length=5), nullable=False),
        sa.Column('description', sa.String(length=255), nullable=False),
        sa.Column('modifier_type', sa.String(length=50), nullable=True),
        sa.Column('is_active', sa.Boolean(), nullable=False),
        sa.Column('sort_order', sa.Integer(), nullable=True),
        sa.Column('created_at', sa.DateTime(), nullable=True),
        sa.Column('updated_at', sa.DateTime(), nullable=True),
        sa.PrimaryKeyConstraint('id'),
        sa.UniqueConstraint('code'),
    )

    op.create_table(
        'billing_charges',
        sa.Column('id', sa.Integer(), autoincrement=True, nullable=False),
        sa.Column('patient_id', sa.Integer(), nullable=False),
        sa.Column('service_date', sa.Date(), nullable=False),
        sa.Column('code_type', sa.String(length=15), nullable=False),
        sa.Column('code', sa.String(length=20), nullable=False),
        sa.Column('modifier', sa.String(length=12), nullable=True),
        sa.Column('units', sa.Integer(), nullable=False),
        sa.Column('fee', sa.Numeric(precision=10, scale=2), nullable=False),
        sa.Column('justify', sa.String(length=255), nullable=True),
        sa.Column('note_id', sa.Integer(), nullable=True),
        sa.Column('appointment_id', sa.Integer(), nullable=True),
        sa.Column('posted_by', sa.Integer(), nullable=True),
        sa.Column('created_at', sa.DateTime(), nullable=True),
        sa.ForeignKeyConstraint(['patient_id'], ['clients.id']),
        sa.ForeignKeyConstraint(['note_id'], ['clinical_notes.id'], ondelete='SET NULL'),
        sa.ForeignKeyConstraint(['appointment_id'], ['appointments.id'], ondelete='SET NULL'),
        sa.ForeignKeyConstraint(['posted_by'], ['users.id']),
        sa.PrimaryKeyConstraint('id'),
    )
    op.create_index('ix_billing_charges_patient_id', 'billing_charges', ['patient_id'], unique=False)

    op.create_table(
        'billing_payments',
        sa.Column('id', sa.Integer(), autoincrement=True, nullable=False),
        sa.Column('patient_id', sa.Integer(), nullable=False),
        sa.Column('payment_date', sa.Date(), nullable=False),
        sa.Column('amount', sa.Numeric(precision=10, scale=2), nullable=False),
        sa.Column('method', sa.String(length=30), nullable=False),
        sa.Column('reference', sa.String(length=100), nullable=True),
        sa.Column('memo', sa.Text(), nullable=True),
        sa.Column('posted_by', sa.Integer(), nullable=True),
        sa.Column('created_at', sa.DateTime(), nullable=True),
        sa.ForeignKeyConstraint(['patient_id'], ['clients.id']),
        sa.ForeignKeyConstraint(['posted_by'], ['users.id']),
        sa.PrimaryKeyConstraint('id'),
    )
    op.create_index('ix_billing_payments_patient_id', 'billing_payments', ['patient_id'], unique=False)

    # Create insurance tables
    op.create_table(
        'insurance_providers',
        sa.Column('id', sa.Integer(), autoincrement=True, nullable=False),
        sa.Column('name', sa.String(length=255), nullable=False),
        sa.Column('payer_id', sa.String(length=50), nullable=True),
        sa.Column('phone', sa.String(length=30), nullable=True),
        sa.Column('fax', sa.String(length=30), nullable=True),
        sa.Column('email', sa.String(length=255), nullable=True),
        sa.Column('website', sa.String(length=255), nullable=True),
        sa.Column('address_line1', sa.String(length=255), nullable=True),
        sa.Column('address_line2', sa.String(length=255), nullable=True),
        sa.Column('city', sa.String(length=100), nullable=True),
        sa.Column('state', sa.String(length=50), nullable=True),
        sa.Column('zip', sa.String(length=20), nullable=True),
        sa.Column('claims_address', sa.String(length=255), nullable=True),
        sa.Column('claims_phone', sa.String(length=30), nullable=True),
        sa.Column('claims_email', sa.String(length=255), nullable=True),
        sa.Column('insurance_type', sa.String(length=30), nullable=False),
        sa.Column('is_active', sa.Boolean(), nullable=False),
        sa.Column('created_at', sa.DateTime(), nullable=True),
        sa.Column('updated_at', sa.DateTime(), nullable=True),
        sa.PrimaryKeyConstraint('id'),
        sa.UniqueConstraint('name'),
    )

    op.create_table(
        'client_insurance',
        sa.Column('id', sa.Integer(), autoincrement=True, nullable=False),
        sa.Column('patient_id', sa.Integer(), nullable=False),
        sa.Column('provider_id', sa.Integer(), nullable=False),
        sa.Column(
            'coverage_type',
            sa.Enum('PRIMARY', 'SECONDARY', 'TERTIARY', name='coveragetype'),
            nullable=False,
        ),
        sa.Column('policy_number', sa.String(length=100), nullable=True),
        sa.Column('group_number', sa.String(length=100), nullable=True),
        sa.Column('subscriber_fname', sa.String(length=100), nullable=True),
        sa.Column('subscriber_lname', sa.String(length=100), nullable=True),
        sa.Column('subscriber_dob', sa.Date(), nullable=True),
        sa.Column('subscriber_relationship', sa.String(length=30), nullable=True),
        sa.Column('effective_date', sa.Date(), nullable=True),
        sa.Column('end_date', sa.Date(), nullable=True),
        sa.Column('copay', sa.Numeric(precision=10, scale=2), nullable=True),
        sa.Column('created_at', sa.DateTime(), nullable=True),
        sa.Column('updated_at', sa.DateTime(), nullable=True),
        sa.ForeignKeyConstraint(['patient_id'], ['clients.id']),
        sa.ForeignKeyConstraint(['provider_id'], ['insurance_providers.id']),
        sa.PrimaryKeyConstraint('id'),
    )
    op.create_index('ix_client_insurance_patient_id', 'client_insurance', ['patient_id'], unique=False)

    # Create document tables
    op.create_table(
        'document_categories',
        sa.Column('id', sa.Integer(), autoincrement=True, nullable=False),
        sa.Column('name', sa.String(length=100), nullable=False),
        sa.Column('parent_id', sa.Integer(), nullable=True),
        sa.Column('is_active', sa.Boolean(), nullable=False),
        sa.Column('created_at', sa.DateTime(), nullable=True),
        sa.ForeignKeyConstraint(['parent_id'], ['document_categories.id']),
        sa.PrimaryKeyConstraint('id'),
        sa.UniqueConstraint('name'),
    )

    op.create_table(
        'client_documents',
        sa.Column('id', sa.Integer(), autoincrement=True, nullable=False),
        sa.Column('patient_id', sa.Integer(), nullable=False),
        sa.Column('category_id', sa.Integer(), nullable=True),
        sa.Column('file_name', sa.String(length=255), nullable=False),
        sa.Column('storage_path', sa.String(length=500), nullable=False),
        sa.Column('mime_type', sa.String(length=100), nullable=True),
        sa.Column('file_size', sa.Integer(), nullable=False),
        sa.Column('sha256', sa.String(length=64), nullable=False),
        sa.Column('description', sa.Text(), nullable=True),
        sa.Column('uploaded_by', sa.Integer(), nullable=False),
        sa.Column('created_at', sa.DateTime(), nullable=True),
        sa.Column('deleted_at', sa.DateTime(), nullable=True),
        sa.ForeignKeyConstraint(['patient_id'], ['clients.id']),
        sa.ForeignKeyConstraint(['category_id'], ['document_categories.id']),
        sa.ForeignKeyConstraint(['uploaded_by'], ['users.id']),
        sa.PrimaryKeyConstraint('id'),
    )
    op.create_index('ix_client_documents_patient_id', 'client_documents', ['patient_id'], unique=False)

    # Create audit_logs table
    op.create_table(
        'audit_logs',
        sa.Column('id', sa.Integer(), autoincrement=True, nullable=False),
        sa.Column('action', sa.String(length=50), nullable=False),
        sa.Column('resource_type', sa.String(length=50), nullable=False),
        sa.Column('resource_id', sa.Integer(), nullable=True),
        sa.Column('details', sa.JSON(), nullable=True),
        sa.Column('user_id', sa.Integer(), nullable=True),
        sa.Column('username', sa.String(length=50), nullable=True),
        sa.Column('ip_address', sa.String(length=45), nullable=True),
        sa.Column('user_agent', sa.String(length=500), nullable=True),
        sa.Column('request_id', sa.String(length=64), nullable=True),
        sa.Column('created_at', sa.DateTime(), nullable=True),
        sa.ForeignKeyConstraint(['user_id'], ['users.id']),
        sa.PrimaryKeyConstraint('id'),
    )
    op.create_index('ix_audit_logs_action', 'audit_logs', ['action'], unique=False)
    op.create_index('ix_audit_logs_resource_type', 'audit_logs', ['resource_type'], unique=False)
    op.create_index('ix_audit_logs_resource_id', 'audit_logs', ['resource_id'], unique=False)
    op.create_index('ix_audit_logs_user_id', 'audit_logs', ['user_id'], unique=False)
    op.create_index('ix_audit_logs_username', 'audit_logs', ['username'], unique=False)
    op.create_index('ix_audit_logs_created_at', 'audit_logs', ['created_at'], unique=False)


def downgrade() -> None:
    # Drop tables in reverse dependency order
    op.drop_table('audit_logs')
    op.drop_table('client_documents')
    op.drop_table('document_categories')
    op.drop_table('client_insurance')
    op.drop_table('insurance_providers')
    op.drop_table('billing_payments')
    op.drop_table('billing_charges')
    op.drop_table('billing_modifiers')
    op.drop_table('cpt_codes')
    op.drop_table('clinical_settings')
    op.drop_table('settings')
    op.drop_table('intervention_favorites')
    op.drop_table('intervention_library')
    op.drop_table('treatment_goals')
    op.drop_table('diagnoses')
    op.drop_table('note_drafts')
    op.drop_table('clinical_notes')
    op.drop_table('appointments')
    op.drop_table('calendar_categories')
    op.drop_table('client_providers')
    op.drop_table('clients')
    op.drop_table('user_supervisors')
    op.drop_table('user_sessions')
    op.drop_table('users')

    # Drop enum types (no-op outside PostgreSQL)
    bind = op.get_bind()
    for enum_name in (
        'coveragetype', 'goalstatus', 'supervisorreviewstatus', 'notestatus', 'notetype',
        'appointmentstatus', 'careteamrole', 'careteamstatus', 'usertype',
    ):
        sa.Enum(name=enum_name).drop(bind, checkfirst=True)
