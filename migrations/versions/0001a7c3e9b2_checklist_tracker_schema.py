"""checklist_tracker_schema

Create the tracker tables: projects, module library, project checklists,
testers and result attachments.

Revision ID: 0001a7c3e9b2
Revises:
Create Date: 2026-10-19 09:00:00.000000
"""

from alembic import op
import sqlalchemy as sa
from sqlalchemy import inspect as sa_inspect


# revision identifiers, used by Alembic.
revision = "0001a7c3e9b2"
down_revision = None
branch_labels = None
depends_on = None


def _timestamps():
    return [
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False),
        sa.Column("updated_at", sa.DateTime(timezone=True), nullable=False),
    ]


def upgrade():
    bind = op.get_bind()
    inspector = sa_inspect(bind)
    existing_tables = set(inspector.get_table_names())

    if "projects" not in existing_tables:
        op.create_table(
            "projects",
            sa.Column("id", sa.String(length=36), nullable=False),
            sa.Column("name", sa.String(length=255), nullable=False),
            sa.Column("description", sa.Text(), nullable=True),
            sa.Column("version", sa.String(length=50), nullable=True),
            sa.Column("platform", sa.String(length=100), nullable=True),
            sa.Column("status", sa.String(length=20), nullable=False, server_default="Draft"),
            sa.Column("priority", sa.String(length=10), nullable=False, server_default="Medium"),
            sa.Column("due_date", sa.Date(), nullable=True),
            sa.Column("created_by", sa.String(length=255), nullable=True),
            sa.Column("deleted_at", sa.DateTime(timezone=True), nullable=True),
            sa.Column("deleted_by", sa.String(length=255), nullable=True),
            *_timestamps(),
            sa.PrimaryKeyConstraint("id"),
            sa.UniqueConstraint("name"),
        )
        op.create_index("ix_projects_deleted_at", "projects", ["deleted_at"])

    if "modules" not in existing_tables:
        op.create_table(
            "modules",
            sa.Column("id", sa.String(length=36), nullable=False),
            sa.Column("name", sa.String(length=255), nullable=False),
            sa.Column("description", sa.Text(), nullable=True),
            sa.Column("thumbnail_url", sa.String(length=1000), nullable=True),
            sa.Column("thumbnail_file_name", sa.String(length=255), nullable=True),
            sa.Column("tags", sa.JSON(), nullable=False),
            sa.Column("created_by", sa.String(length=255), nullable=True),
            sa.Column("order_index", sa.Integer(), nullable=False, server_default="0"),
            *_timestamps(),
            sa.PrimaryKeyConstraint("id"),
            sa.UniqueConstraint("name"),
        )

    if "testcases" not in existing_tables:
        op.create_table(
            "testcases",
            sa.Column("id", sa.String(length=36), nullable=False),
            sa.Column("module_id", sa.String(length=36), nullable=False),
            sa.Column("title", sa.String(length=255), nullable=False),
            sa.Column("description", sa.Text(), nullable=True),
            sa.Column("priority", sa.String(length=10), nullable=False, server_default="Medium"),
            sa.Column("order_index", sa.Integer(), nullable=False, server_default="0"),
            sa.Column("image_url", sa.String(length=1000), nullable=True),
            sa.Column("image_file_name", sa.String(length=255), nullable=True),
            *_timestamps(),
            sa.ForeignKeyConstraint(["module_id"], ["modules.id"], ondelete="CASCADE"),
            sa.PrimaryKeyConstraint("id"),
        )
        op.create_index("ix_testcases_module_id", "testcases", ["module_id"])
        op.create_index("ix_testcases_module_order", "testcases", ["module_id", "order_index"])

    if "testers" not in existing_tables:
        op.create_table(
            "testers",
            sa.Column("id", sa.String(length=36), nullable=False),
            sa.Column("name", sa.String(length=100), nullable=False),
            sa.Column("email", sa.String(length=255), nullable=True),
            sa.Column("color", sa.String(length=7), nullable=False, server_default="#FF6B35"),
            *_timestamps(),
            sa.PrimaryKeyConstraint("id"),
            sa.UniqueConstraint("email"),
        )

    if "project_testers" not in existing_tables:
        op.create_table(
            "project_testers",
            sa.Column("id", sa.String(length=36), nullable=False),
            sa.Column("project_id", sa.String(length=36), nullable=False),
            sa.Column("tester_id", sa.String(length=36), nullable=False),
            sa.Column("assigned_at", sa.DateTime(timezone=True), nullable=False),
            sa.ForeignKeyConstraint(["project_id"], ["projects.id"], ondelete="CASCADE"),
            sa.ForeignKeyConstraint(["tester_id"], ["testers.id"], ondelete="CASCADE"),
            sa.PrimaryKeyConstraint("id"),
            sa.UniqueConstraint("project_id", "tester_id", name="uq_project_testers_project_tester"),
        )
        op.create_index("ix_project_testers_project_id", "project_testers", ["project_id"])
        op.create_index("ix_project_testers_tester_id", "project_testers", ["tester_id"])

    if "project_checklist_modules" not in existing_tables:
        op.create_table(
            "project_checklist_modules",
            sa.Column("id", sa.String(length=36), nullable=False),
            sa.Column("project_id", sa.String(length=36), nullable=False),
            sa.Column("module_id", sa.String(length=36), nullable=True),
            sa.Column("module_name", sa.String(length=255), nullable=False),
            sa.Column("module_description", sa.Text(), nullable=True),
            sa.Column("is_custom", sa.Boolean(), nullable=False, server_default=sa.false()),
            sa.Column("instance_label", sa.String(length=100), nullable=True),
            sa.Column("instance_number", sa.Integer(), nullable=False, server_default="1"),
            sa.Column("order_index", sa.Integer(), nullable=False, server_default="0"),
            *_timestamps(),
            sa.ForeignKeyConstraint(["project_id"], ["projects.id"], ondelete="CASCADE"),
            sa.ForeignKeyConstraint(["module_id"], ["modules.id"], ondelete="SET NULL"),
            sa.PrimaryKeyConstraint("id"),
        )
        op.create_index("ix_project_checklist_modules_project_id", "project_checklist_modules", ["project_id"])
        op.create_index("ix_project_checklist_modules_module_id", "project_checklist_modules", ["module_id"])
        op.create_index("ix_pcm_project_order", "project_checklist_modules", ["project_id", "order_index"])

    if "checklist_custom_testcases" not in existing_tables:
        op.create_table(
            "checklist_custom_testcases",
            sa.Column("id", sa.String(length=36), nullable=False),
            sa.Column("checklist_module_id", sa.String(length=36), nullable=False),
            sa.Column("title", sa.String(length=200), nullable=False),
            sa.Column("description", sa.Text(), nullable=True),
            sa.Column("priority", sa.String(length=10), nullable=False, server_default="Medium"),
            sa.Column("order_index", sa.Integer(), nullable=False, server_default="0"),
            *_timestamps(),
            sa.ForeignKeyConstraint(
                ["checklist_module_id"], ["project_checklist_modules.id"], ondelete="CASCADE"
            ),
            sa.PrimaryKeyConstraint("id"),
        )
        op.create_index(
            "ix_checklist_custom_testcases_checklist_module_id",
            "checklist_custom_testcases", ["checklist_module_id"],
        )

    if "checklist_test_results" not in existing_tables:
        op.create_table(
            "checklist_test_results",
            sa.Column("id", sa.String(length=36), nullable=False),
            sa.Column("checklist_module_id", sa.String(length=36), nullable=False),
            sa.Column("testcase_id", sa.String(length=36), nullable=True),
            sa.Column("custom_testcase_id", sa.String(length=36), nullable=True),
            sa.Column("tester_id", sa.String(length=36), nullable=False),
            sa.Column("status", sa.String(length=10), nullable=False, server_default="Pending"),
            sa.Column("notes", sa.Text(), nullable=True),
            sa.Column("tested_by", sa.String(length=255), nullable=True),
            sa.Column("tested_at", sa.DateTime(timezone=True), nullable=True),
            sa.Column("display_order", sa.Integer(), nullable=False, server_default="0"),
            *_timestamps(),
            sa.ForeignKeyConstraint(
                ["checklist_module_id"], ["project_checklist_modules.id"], ondelete="CASCADE"
            ),
            sa.ForeignKeyConstraint(["testcase_id"], ["testcases.id"], ondelete="CASCADE"),
            sa.ForeignKeyConstraint(
                ["custom_testcase_id"], ["checklist_custom_testcases.id"], ondelete="CASCADE"
            ),
            sa.ForeignKeyConstraint(["tester_id"], ["testers.id"], ondelete="CASCADE"),
            sa.PrimaryKeyConstraint("id"),
            sa.UniqueConstraint(
                "checklist_module_id", "testcase_id", "tester_id",
                name="uq_ctr_instance_testcase_tester",
            ),
            sa.UniqueConstraint(
                "checklist_module_id", "custom_testcase_id", "tester_id",
                name="uq_ctr_instance_custom_tester",
            ),
        )
        for col in ("checklist_module_id", "testcase_id", "custom_testcase_id", "tester_id"):
            op.create_index(f"ix_checklist_test_results_{col}", "checklist_test_results", [col])

    if "test_case_attachments" not in existing_tables:
        op.create_table(
            "test_case_attachments",
            sa.Column("id", sa.String(length=36), nullable=False),
            sa.Column("test_result_id", sa.String(length=36), nullable=False),
            sa.Column("file_name", sa.String(length=255), nullable=False),
            sa.Column("file_type", sa.String(length=100), nullable=False),
            sa.Column("file_size", sa.Integer(), nullable=False),
            sa.Column("file_url", sa.String(length=1000), nullable=False),
            sa.Column("storage_path", sa.String(length=500), nullable=False),
            sa.Column("uploaded_at", sa.DateTime(timezone=True), nullable=False),
            sa.ForeignKeyConstraint(
                ["test_result_id"], ["checklist_test_results.id"], ondelete="CASCADE"
            ),
            sa.PrimaryKeyConstraint("id"),
        )
        op.create_index(
            "ix_test_case_attachments_test_result_id", "test_case_attachments", ["test_result_id"]
        )


def downgrade():
    for table in (
        "test_case_attachments",
        "checklist_test_results",
        "checklist_custom_testcases",
        "project_checklist_modules",
        "project_testers",
        "testers",
        "testcases",
        "modules",
        "projects",
    ):
        op.drop_table(table)
