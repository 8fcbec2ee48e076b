"""profiles + children, project databases, search logs

Revision ID: 20261018_01_stuntpitch_initial
Revises:
Create Date: 2026-10-18 00:00:00.000000
"""
from alembic import op
import sqlalchemy as sa
from sqlalchemy.dialects import postgresql
from pgvector.sqlalchemy import Vector

# revision identifiers, used by Alembic.
revision = "20261018_01_stuntpitch_initial"
down_revision = None
branch_labels = None
depends_on = None


def _timestamps():
    return [
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.text("now()"), nullable=False),
        sa.Column("updated_at", sa.DateTime(timezone=True), server_default=sa.text("now()"), nullable=False),
    ]


def upgrade():
    op.execute("CREATE EXTENSION IF NOT EXISTS vector;")

    op.create_table(
        "profiles",
        sa.Column("id", postgresql.UUID(as_uuid=True), primary_key=True),
        sa.Column("user_id", sa.Text(), nullable=False),
        sa.Column("full_name", sa.Text(), nullable=False),
        sa.Column("bio", sa.Text(), nullable=True),
        sa.Column("location", sa.Text(), nullable=True),
        sa.Column("secondary_location", sa.Text(), nullable=True),
        sa.Column("primary_location_structured", sa.String(64), nullable=True),
        sa.Column("secondary_location_structured", sa.String(64), nullable=True),
        sa.Column("height_feet", sa.Integer(), nullable=True),
        sa.Column("height_inches", sa.Integer(), nullable=True),
        sa.Column("weight_lbs", sa.Integer(), nullable=True),
        sa.Column("hair_color", sa.String(32), nullable=True),
        sa.Column("eye_color", sa.String(32), nullable=True),
        sa.Column("ethnicity", sa.String(32), nullable=True),
        sa.Column("gender", sa.String(32), nullable=True),
        sa.Column("phone", sa.Text(), nullable=True),
        sa.Column("email", sa.Text(), nullable=False),
        sa.Column("website", sa.Text(), nullable=True),
        sa.Column("imdb_url", sa.Text(), nullable=True),
        sa.Column("reel_url", sa.Text(), nullable=True),
        sa.Column("resume_url", sa.Text(), nullable=True),
        sa.Column("resume_filename", sa.Text(), nullable=True),
        sa.Column("resume_file_size", sa.Integer(), nullable=True),
        sa.Column("resume_uploaded_at", sa.DateTime(timezone=True), nullable=True),
        sa.Column("resume_text", sa.Text(), nullable=True),
        sa.Column("union_status", sa.String(32), nullable=True),
        sa.Column("availability_status", sa.String(32), nullable=True),
        sa.Column("travel_radius", sa.String(32), nullable=True),
        sa.Column("subscription_tier", sa.String(16), nullable=False, server_default="free"),
        sa.Column("subscription_expires_at", sa.DateTime(timezone=True), nullable=True),
        sa.Column("profile_views", sa.Integer(), nullable=False, server_default="0"),
        sa.Column("is_public", sa.Boolean(), nullable=False, server_default=sa.text("true")),
        sa.Column("embedding", Vector(1536), nullable=True),
        *_timestamps(),
    )
    op.create_index("ix_profiles_user_id", "profiles", ["user_id"])
    op.create_index("ix_profiles_gender", "profiles", ["gender"])
    op.create_index("ix_profiles_primary_location_structured", "profiles", ["primary_location_structured"])

    op.create_table(
        "profile_skills",
        sa.Column("id", postgresql.UUID(as_uuid=True), primary_key=True),
        sa.Column("profile_id", postgresql.UUID(as_uuid=True), nullable=False),
        sa.Column("skill_id", sa.String(64), nullable=False),
        sa.Column("proficiency_level", sa.String(32), nullable=True),
        sa.Column("years_experience", sa.Integer(), nullable=True),
        sa.ForeignKeyConstraint(["profile_id"], ["profiles.id"], ondelete="CASCADE"),
    )
    op.create_index("ix_profile_skills_profile_id", "profile_skills", ["profile_id"])
    op.create_index("ix_profile_skills_skill_id", "profile_skills", ["skill_id"])

    op.create_table(
        "profile_certifications",
        sa.Column("id", postgresql.UUID(as_uuid=True), primary_key=True),
        sa.Column("profile_id", postgresql.UUID(as_uuid=True), nullable=False),
        sa.Column("certification_id", sa.String(64), nullable=False),
        sa.Column("date_obtained", sa.Date(), nullable=True),
        sa.Column("expiration_date", sa.Date(), nullable=True),
        sa.Column("certification_number", sa.Text(), nullable=True),
        sa.ForeignKeyConstraint(["profile_id"], ["profiles.id"], ondelete="CASCADE"),
    )
    op.create_index("ix_profile_certifications_profile_id", "profile_certifications", ["profile_id"])

    op.create_table(
        "profile_photos",
        sa.Column("id", postgresql.UUID(as_uuid=True), primary_key=True),
        sa.Column("profile_id", postgresql.UUID(as_uuid=True), nullable=False),
        sa.Column("file_path", sa.Text(), nullable=False),
        sa.Column("file_name", sa.Text(), nullable=True),
        sa.Column("is_primary", sa.Boolean(), nullable=False, server_default=sa.text("false")),
        sa.Column("sort_order", sa.Integer(), nullable=False, server_default="0"),
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.text("now()"), nullable=False),
        sa.ForeignKeyConstraint(["profile_id"], ["profiles.id"], ondelete="CASCADE"),
    )
    op.create_index("ix_profile_photos_profile_id", "profile_photos", ["profile_id"])

    op.create_table(
        "project_databases",
        sa.Column("id", postgresql.UUID(as_uuid=True), primary_key=True),
        sa.Column("name", sa.Text(), nullable=False),
        sa.Column("description", sa.Text(), nullable=True),
        sa.Column("creator_user_id", sa.Text(), nullable=False),
        *_timestamps(),
    )
    op.create_index("ix_project_databases_creator_user_id", "project_databases", ["creator_user_id"])

    op.create_table(
        "project_submissions",
        sa.Column("id", postgresql.UUID(as_uuid=True), primary_key=True),
        sa.Column("project_id", postgresql.UUID(as_uuid=True), nullable=False),
        sa.Column("profile_id", postgresql.UUID(as_uuid=True), nullable=False),
        sa.Column("note", sa.Text(), nullable=True),
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.text("now()"), nullable=False),
        sa.ForeignKeyConstraint(["project_id"], ["project_databases.id"], ondelete="CASCADE"),
        sa.ForeignKeyConstraint(["profile_id"], ["profiles.id"], ondelete="CASCADE"),
        sa.UniqueConstraint("project_id", "profile_id", name="uq_project_submission_project_profile"),
    )
    op.create_index("ix_project_submissions_project_id", "project_submissions", ["project_id"])

    op.create_table(
        "search_logs",
        sa.Column("id", postgresql.UUID(as_uuid=True), primary_key=True),
        sa.Column("query", sa.Text(), nullable=False, server_default=""),
        sa.Column("filters", postgresql.JSONB(astext_type=sa.Text()), nullable=True),
        sa.Column("results_count", sa.Integer(), nullable=False, server_default="0"),
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.text("now()"), nullable=False),
    )

    # Cosine ANN index for the vector fallback
    op.execute("""
        CREATE INDEX IF NOT EXISTS idx_profiles_embedding_ivf
        ON profiles USING ivfflat (embedding vector_cosine_ops)
        WITH (lists = 100);
    """)

    op.execute("""
    CREATE OR REPLACE FUNCTION touch_updated_at() RETURNS TRIGGER AS $$
    BEGIN
      NEW.updated_at = now();
      RETURN NEW;
    END; $$ LANGUAGE plpgsql;
    """)
    for table in ("profiles", "project_databases"):
        op.execute(f"""
        CREATE TRIGGER trg_{table}_updated_at
        BEFORE UPDATE ON {table}
        FOR EACH ROW EXECUTE FUNCTION touch_updated_at();
        """)


def downgrade():
    for table in ("profiles", "project_databases"):
        op.execute(f"DROP TRIGGER IF EXISTS trg_{table}_updated_at ON {table};")
    op.execute("DROP FUNCTION IF EXISTS touch_updated_at();")
    op.execute("DROP INDEX IF EXISTS idx_profiles_embedding_ivf;")
    op.drop_table("search_logs")
    op.drop_table("project_submissions")
    op.drop_table("project_databases")
    op.drop_table("profile_photos")
    op.drop_table("profile_certifications")
    op.drop_table("profile_skills")
    op.drop_table("profiles")
