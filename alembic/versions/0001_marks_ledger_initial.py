"""marks ledger initial schema

Revision ID: 0001_marks_ledger
Revises:
Create Date: 2026-10-17 09:00:00.000000

"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa


# revision identifiers, used by Alembic.
revision: str = '0001_marks_ledger'
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None

component_type = sa.Enum('TH', 'IN', 'PR', name='componenttype')
overall_method = sa.Enum('SIMPLE_AVG', 'CREDIT_WEIGHTED', name='overallmethod')
rule_type = sa.Enum('SUBJECT_GPA', 'SUBJECT_GRADE', 'FINAL_GRADE', name='ruletype')


def _base_columns():
    return [
        sa.Column('id', sa.Uuid(), nullable=False),
        sa.Column('created_at', sa.DateTime(timezone=True), server_default=sa.text('now()')),
        sa.Column('updated_at', sa.DateTime(timezone=True), server_default=sa.text('now()')),
    ]


def upgrade() -> None:
    op.create_table(
        'subjects',
        *_base_columns(),
        sa.Column('name', sa.String(length=150), nullable=False),
        sa.PrimaryKeyConstraint('id')
    )
    op.create_index('ix_subjects_id', 'subjects', ['id'])

    op.create_table(
        'subject_components',
        *_base_columns(),
        sa.Column('subject_id', sa.Uuid(), sa.ForeignKey('subjects.id'), nullable=False),
        sa.Column('component_type', component_type, nullable=False),
        sa.Column('component_code', sa.String(length=20), nullable=False),
        sa.Column('title', sa.String(length=150)),
        sa.Column('credit_hour', sa.Numeric(5, 2)),
        sa.PrimaryKeyConstraint('id'),
        sa.UniqueConstraint('component_code')
    )
    op.create_index('ix_subject_components_id', 'subject_components', ['id'])
    op.create_index('ix_subject_components_subject_id', 'subject_components', ['subject_id'])

    op.create_table(
        'catalog_groups',
        *_base_columns(),
        sa.Column('academic_year_id', sa.Uuid(), nullable=False),
        sa.Column('class_id', sa.Uuid(), nullable=False),
        sa.Column('faculty_id', sa.Uuid()),
        sa.Column('name', sa.String(length=50), nullable=False),
        sa.Column('sort_order', sa.Integer(), nullable=False),
        sa.PrimaryKeyConstraint('id')
    )
    op.create_index('ix_catalog_groups_id', 'catalog_groups', ['id'])
    op.create_index('ix_catalog_groups_academic_year_id', 'catalog_groups', ['academic_year_id'])
    op.create_index('ix_catalog_groups_class_id', 'catalog_groups', ['class_id'])

    op.create_table(
        'catalog_group_subjects',
        *_base_columns(),
        sa.Column('catalog_group_id', sa.Uuid(), sa.ForeignKey('catalog_groups.id'), nullable=False),
        sa.Column('subject_id', sa.Uuid(), sa.ForeignKey('subjects.id'), nullable=False),
        sa.Column('sort_order', sa.Integer(), nullable=False),
        sa.PrimaryKeyConstraint('id'),
        sa.UniqueConstraint('catalog_group_id', 'subject_id')
    )
    op.create_index('ix_catalog_group_subjects_id', 'catalog_group_subjects', ['id'])
    op.create_index('ix_catalog_group_subjects_catalog_group_id', 'catalog_group_subjects', ['catalog_group_id'])
    op.create_index('ix_catalog_group_subjects_subject_id', 'catalog_group_subjects', ['subject_id'])

    op.create_table(
        'grading_schemes',
        *_base_columns(),
        sa.Column('name', sa.String(length=100), nullable=False),
        sa.Column('overall_method', overall_method, nullable=False),
        sa.PrimaryKeyConstraint('id')
    )
    op.create_index('ix_grading_schemes_id', 'grading_schemes', ['id'])

    op.create_table(
        'grading_rules',
        *_base_columns(),
        sa.Column('scheme_id', sa.Uuid(), sa.ForeignKey('grading_schemes.id'), nullable=False),
        sa.Column('rule_type', rule_type, nullable=False),
        sa.Column('min_value', sa.Numeric(6, 2), nullable=False),
        sa.Column('grade', sa.String(length=5)),
        sa.Column('gpa', sa.Numeric(4, 2)),
        sa.PrimaryKeyConstraint('id')
    )
    op.create_index('ix_grading_rules_id', 'grading_rules', ['id'])
    op.create_index('ix_grading_rules_scheme_id', 'grading_rules', ['scheme_id'])

    op.create_table(
        'exams',
        *_base_columns(),
        sa.Column('campus_id', sa.Uuid(), nullable=False),
        sa.Column('academic_year_id', sa.Uuid(), nullable=False),
        sa.Column('class_id', sa.Uuid(), nullable=False),
        sa.Column('faculty_id', sa.Uuid()),
        sa.Column('name', sa.String(length=150), nullable=False),
        sa.Column('exam_type', sa.String(length=20), nullable=False),
        sa.Column('grading_scheme_id', sa.Uuid(), sa.ForeignKey('grading_schemes.id')),
        sa.Column('is_locked', sa.Boolean(), nullable=False),
        sa.Column('published_at', sa.DateTime(timezone=True)),
        sa.PrimaryKeyConstraint('id')
    )
    op.create_index('ix_exams_id', 'exams', ['id'])
    op.create_index('ix_exams_campus_id', 'exams', ['campus_id'])
    op.create_index('ix_exams_academic_year_id', 'exams', ['academic_year_id'])
    op.create_index('ix_exams_class_id', 'exams', ['class_id'])

    op.create_table(
        'exam_component_configs',
        *_base_columns(),
        sa.Column('exam_id', sa.Uuid(), sa.ForeignKey('exams.id'), nullable=False),
        sa.Column('component_code', sa.String(length=20), nullable=False),
        sa.Column('full_marks', sa.Numeric(8, 2), nullable=False),
        sa.Column('pass_marks', sa.Numeric(8, 2)),
        sa.Column('is_enabled', sa.Boolean(), nullable=False),
        sa.PrimaryKeyConstraint('id'),
        sa.UniqueConstraint('exam_id', 'component_code')
    )
    op.create_index('ix_exam_component_configs_id', 'exam_component_configs', ['id'])
    op.create_index('ix_exam_component_configs_exam_id', 'exam_component_configs', ['exam_id'])

    op.create_table(
        'students',
        *_base_columns(),
        sa.Column('full_name', sa.String(length=150), nullable=False),
        sa.Column('dob', sa.Date()),
        sa.Column('symbol_no', sa.String(length=30)),
        sa.Column('regd_no', sa.String(length=30)),
        sa.Column('roll_no', sa.String(length=20)),
        sa.PrimaryKeyConstraint('id')
    )
    op.create_index('ix_students_id', 'students', ['id'])
    op.create_index('ix_students_symbol_no', 'students', ['symbol_no'])

    op.create_table(
        'student_enrollments',
        *_base_columns(),
        sa.Column('student_id', sa.Uuid(), sa.ForeignKey('students.id'), nullable=False),
        sa.Column('campus_id', sa.Uuid(), nullable=False),
        sa.Column('academic_year_id', sa.Uuid(), nullable=False),
        sa.Column('class_id', sa.Uuid(), nullable=False),
        sa.Column('faculty_id', sa.Uuid()),
        sa.Column('section_id', sa.Uuid()),
        sa.PrimaryKeyConstraint('id')
    )
    op.create_index('ix_student_enrollments_id', 'student_enrollments', ['id'])
    op.create_index('ix_student_enrollments_student_id', 'student_enrollments', ['student_id'])
    op.create_index('ix_student_enrollments_campus_id', 'student_enrollments', ['campus_id'])
    op.create_index('ix_student_enrollments_academic_year_id', 'student_enrollments', ['academic_year_id'])
    op.create_index('ix_student_enrollments_class_id', 'student_enrollments', ['class_id'])

    op.create_table(
        'student_optional_choices',
        *_base_columns(),
        sa.Column('enrollment_id', sa.Uuid(), sa.ForeignKey('student_enrollments.id'), nullable=False),
        sa.Column('group_name', sa.String(length=50), nullable=False),
        sa.Column('subject_id', sa.Uuid(), sa.ForeignKey('subjects.id'), nullable=False),
        sa.PrimaryKeyConstraint('id')
    )
    op.create_index('ix_student_optional_choices_id', 'student_optional_choices', ['id'])
    op.create_index('ix_student_optional_choices_enrollment_id', 'student_optional_choices', ['enrollment_id'])

    op.create_table(
        'marks',
        *_base_columns(),
        sa.Column('exam_id', sa.Uuid(), sa.ForeignKey('exams.id'), nullable=False),
        sa.Column('enrollment_id', sa.Uuid(), sa.ForeignKey('student_enrollments.id'), nullable=False),
        sa.Column('component_code', sa.String(length=20), nullable=False),
        sa.Column('marks_obtained', sa.Numeric(8, 2)),
        sa.Column('is_absent', sa.Boolean(), nullable=False),
        sa.Column('entered_by', sa.Uuid()),
        sa.Column('updated_by', sa.Uuid()),
        sa.PrimaryKeyConstraint('id'),
        sa.UniqueConstraint('exam_id', 'enrollment_id', 'component_code', name='uq_marks_exam_enrollment_code')
    )
    op.create_index('ix_marks_id', 'marks', ['id'])
    op.create_index('ix_marks_exam_id', 'marks', ['exam_id'])
    op.create_index('ix_marks_enrollment_id', 'marks', ['enrollment_id'])

    op.create_table(
        'result_snapshots',
        *_base_columns(),
        sa.Column('exam_id', sa.Uuid(), sa.ForeignKey('exams.id'), nullable=False),
        sa.Column('enrollment_id', sa.Uuid(), sa.ForeignKey('student_enrollments.id'), nullable=False),
        sa.Column('overall_gpa', sa.Numeric(4, 2)),
        sa.Column('final_grade', sa.String(length=5)),
        sa.Column('result_status', sa.String(length=10)),
        sa.Column('payload_json', sa.Text(), nullable=False),
        sa.Column('generated_by', sa.Uuid()),
        sa.Column('generated_at', sa.DateTime(timezone=True)),
        sa.Column('published_at', sa.DateTime(timezone=True)),
        sa.PrimaryKeyConstraint('id'),
        sa.UniqueConstraint('exam_id', 'enrollment_id', name='uq_snapshot_exam_enrollment')
    )
    op.create_index('ix_result_snapshots_id', 'result_snapshots', ['id'])
    op.create_index('ix_result_snapshots_exam_id', 'result_snapshots', ['exam_id'])
    op.create_index('ix_result_snapshots_enrollment_id', 'result_snapshots', ['enrollment_id'])


def downgrade() -> None:
    for table in (
        'result_snapshots', 'marks', 'student_optional_choices', 'student_enrollments',
        'students', 'exam_component_configs', 'exams', 'grading_rules', 'grading_schemes',
        'catalog_group_subjects', 'catalog_groups', 'subject_components', 'subjects',
    ):
        op.drop_table(table)
    rule_type.drop(op.get_bind(), checkfirst=True)
    overall_method.drop(op.get_bind(), checkfirst=True)
    component_type.drop(op.get_bind(), checkfirst=True)
