"""initial schema

Revision ID: 0001_initial
Revises:
Create Date: 2026-10-18 09:00:00.000000

"""
from alembic import op
import sqlalchemy as sa

# revision identifiers, used by Alembic.
revision = '0001_initial'
down_revision = None
branch_labels = None
depends_on = None

# SQLAlchemy persists Python enums by member name
user_role = sa.Enum('ADMIN', 'TEACHER', 'PARENT', 'STUDENT', name='userrole')
account_status = sa.Enum('PENDING', 'APPROVED', 'SUSPENDED', name='accountstatus')
lesson_category = sa.Enum('MATH', 'READING', 'SCIENCE', 'ART', 'MUSIC', 'PHYSICAL', 'SOCIAL',
                          name='lessoncategory')
lesson_difficulty = sa.Enum('BEGINNER', 'INTERMEDIATE', 'ADVANCED', name='lessondifficulty')
progress_status = sa.Enum('NOT_STARTED', 'IN_PROGRESS', 'COMPLETED', name='progressstatus')
assignment_type = sa.Enum('HOMEWORK', 'QUIZ', 'PROJECT', 'READING', 'PRACTICE', name='assignmenttype')
submission_status = sa.Enum('DRAFT', 'SUBMITTED', 'GRADED', 'RETURNED', name='submissionstatus')
message_type = sa.Enum('GENERAL', 'PROGRESS_UPDATE', 'ASSIGNMENT_NOTIFICATION', 'MEETING_REQUEST',
                       'ANNOUNCEMENT', name='messagetype')
message_priority = sa.Enum('LOW', 'MEDIUM', 'HIGH', 'URGENT', name='messagepriority')
parent_relationship = sa.Enum('MOTHER', 'FATHER', 'GUARDIAN', 'GRANDMOTHER', 'GRANDFATHER', 'OTHER',
                              name='parentrelationship')
achievement_type = sa.Enum('COMPLETION', 'STREAK', 'SCORE', 'PARTICIPATION', 'IMPROVEMENT', 'SPECIAL',
                           name='achievementtype')


def upgrade():
    op.create_table(
        'users',
        sa.Column('id', sa.Integer(), primary_key=True),
        sa.Column('first_name', sa.String(50), nullable=False),
        sa.Column('last_name', sa.String(50), nullable=False),
        sa.Column('email', sa.String(255), nullable=False),
        sa.Column('hashed_password', sa.String(255), nullable=False),
        sa.Column('role', user_role, nullable=False),
        sa.Column('account_status', account_status, nullable=False),
        sa.Column('is_active', sa.Boolean(), nullable=False),
        sa.Column('age', sa.Integer()),
        sa.Column('grade', sa.String(20)),
        sa.Column('parent_email', sa.String(255)),
        sa.Column('last_login', sa.DateTime()),
        sa.Column('created_at', sa.DateTime()),
        sa.Column('updated_at', sa.DateTime()),
    )
    op.create_index('ix_users_id', 'users', ['id'])
    op.create_index('ix_users_email', 'users', ['email'], unique=True)

    op.create_table(
        'lessons',
        sa.Column('id', sa.Integer(), primary_key=True),
        sa.Column('title', sa.String(200), nullable=False),
        sa.Column('description', sa.Text()),
        sa.Column('content', sa.Text()),
        sa.Column('category', lesson_category, nullable=False),
        sa.Column('difficulty', lesson_difficulty, nullable=False),
        sa.Column('age_group', sa.String(20), nullable=False),
        sa.Column('duration', sa.Integer()),
        sa.Column('image_url', sa.String(1000)),
        sa.Column('video_url', sa.String(1000)),
        sa.Column('is_active', sa.Boolean(), nullable=False),
        sa.Column('created_by', sa.Integer(), sa.ForeignKey('users.id'), nullable=False),
        sa.Column('created_at', sa.DateTime()),
        sa.Column('updated_at', sa.DateTime()),
    )
    op.create_index('ix_lessons_id', 'lessons', ['id'])

    op.create_table(
        'progress',
        sa.Column('id', sa.Integer(), primary_key=True),
        sa.Column('user_id', sa.Integer(), sa.ForeignKey('users.id'), nullable=False),
        sa.Column('lesson_id', sa.Integer(), sa.ForeignKey('lessons.id'), nullable=False),
        sa.Column('status', progress_status, nullable=False),
        sa.Column('score', sa.Float()),
        sa.Column('time_spent', sa.Integer(), nullable=False),
        sa.Column('completed_at', sa.DateTime()),
        sa.Column('notes', sa.Text()),
        sa.Column('created_at', sa.DateTime()),
        sa.Column('updated_at', sa.DateTime()),
        sa.UniqueConstraint('user_id', 'lesson_id', name='uq_progress_user_lesson'),
    )
    op.create_index('ix_progress_id', 'progress', ['id'])
    op.create_index('ix_progress_user_id', 'progress', ['user_id'])
    op.create_index('ix_progress_lesson_id', 'progress', ['lesson_id'])
    op.create_index('ix_progress_status', 'progress', ['status'])

    op.create_table(
        'assignments',
        sa.Column('id', sa.Integer(), primary_key=True),
        sa.Column('title', sa.String(100), nullable=False),
        sa.Column('description', sa.Text(), nullable=False),
        sa.Column('instructions', sa.Text()),
        sa.Column('lesson_id', sa.Integer(), sa.ForeignKey('lessons.id'), nullable=True),
        sa.Column('teacher_id', sa.Integer(), sa.ForeignKey('users.id'), nullable=False),
        sa.Column('due_date', sa.DateTime(), nullable=False),
        sa.Column('max_points', sa.Integer(), nullable=False),
        sa.Column('assignment_type', assignment_type, nullable=False),
        sa.Column('attachments', sa.JSON(), nullable=False),
        sa.Column('is_active', sa.Boolean(), nullable=False),
        sa.Column('created_at', sa.DateTime()),
        sa.Column('updated_at', sa.DateTime()),
    )
    op.create_index('ix_assignments_id', 'assignments', ['id'])
    op.create_index('ix_assignments_teacher_id', 'assignments', ['teacher_id'])

    op.create_table(
        'assignment_assignees',
        sa.Column('id', sa.Integer(), primary_key=True),
        sa.Column('assignment_id', sa.Integer(), sa.ForeignKey('assignments.id'), nullable=False),
        sa.Column('student_id', sa.Integer(), sa.ForeignKey('users.id'), nullable=False),
        sa.UniqueConstraint('assignment_id', 'student_id', name='uq_assignee_assignment_student'),
    )
    op.create_index('ix_assignment_assignees_id', 'assignment_assignees', ['id'])
    op.create_index('ix_assignment_assignees_assignment_id', 'assignment_assignees', ['assignment_id'])
    op.create_index('ix_assignment_assignees_student_id', 'assignment_assignees', ['student_id'])

    op.create_table(
        'submissions',
        sa.Column('id', sa.Integer(), primary_key=True),
        sa.Column('assignment_id', sa.Integer(), sa.ForeignKey('assignments.id'), nullable=False),
        sa.Column('student_id', sa.Integer(), sa.ForeignKey('users.id'), nullable=False),
        sa.Column('content', sa.Text()),
        sa.Column('attachments', sa.JSON(), nullable=False),
        sa.Column('status', submission_status, nullable=False),
        sa.Column('score', sa.Float()),
        sa.Column('feedback', sa.Text()),
        sa.Column('submitted_at', sa.DateTime()),
        sa.Column('graded_at', sa.DateTime()),
        sa.Column('graded_by', sa.Integer(), sa.ForeignKey('users.id')),
        sa.Column('time_spent', sa.Integer()),
        sa.Column('created_at', sa.DateTime()),
        sa.Column('updated_at', sa.DateTime()),
        sa.UniqueConstraint('assignment_id', 'student_id', name='uq_submission_assignment_student'),
    )
    op.create_index('ix_submissions_id', 'submissions', ['id'])
    op.create_index('ix_submissions_assignment_id', 'submissions', ['assignment_id'])
    op.create_index('ix_submissions_student_id', 'submissions', ['student_id'])
    op.create_index('ix_submissions_status', 'submissions', ['status'])

    op.create_table(
        'messages',
        sa.Column('id', sa.Integer(), primary_key=True),
        sa.Column('sender_id', sa.Integer(), sa.ForeignKey('users.id'), nullable=False),
        sa.Column('receiver_id', sa.Integer(), sa.ForeignKey('users.id'), nullable=False),
        sa.Column('subject', sa.String(200)),
        sa.Column('content', sa.Text(), nullable=False),
        sa.Column('message_type', message_type, nullable=False),
        sa.Column('priority', message_priority, nullable=False),
        sa.Column('is_read', sa.Boolean(), nullable=False),
        sa.Column('read_at', sa.DateTime()),
        sa.Column('attachments', sa.JSON(), nullable=False),
        sa.Column('related_student_id', sa.Integer(), sa.ForeignKey('users.id'), nullable=True),
        sa.Column('created_at', sa.DateTime()),
    )
    op.create_index('ix_messages_id', 'messages', ['id'])
    op.create_index('ix_messages_sender_id', 'messages', ['sender_id'])
    op.create_index('ix_messages_receiver_id', 'messages', ['receiver_id'])
    op.create_index('ix_messages_is_read', 'messages', ['is_read'])
    op.create_index('ix_messages_related_student_id', 'messages', ['related_student_id'])

    op.create_table(
        'student_parents',
        sa.Column('id', sa.Integer(), primary_key=True),
        sa.Column('student_id', sa.Integer(), sa.ForeignKey('users.id'), nullable=False),
        sa.Column('parent_id', sa.Integer(), sa.ForeignKey('users.id'), nullable=False),
        sa.Column('relationship', parent_relationship, nullable=False),
        sa.Column('is_primary', sa.Boolean(), nullable=False),
        sa.Column('can_receive_messages', sa.Boolean(), nullable=False),
        sa.Column('can_view_progress', sa.Boolean(), nullable=False),
        sa.Column('created_at', sa.DateTime()),
        sa.UniqueConstraint('student_id', 'parent_id', name='uq_student_parent'),
    )
    op.create_index('ix_student_parents_id', 'student_parents', ['id'])
    op.create_index('ix_student_parents_student_id', 'student_parents', ['student_id'])
    op.create_index('ix_student_parents_parent_id', 'student_parents', ['parent_id'])

    op.create_table(
        'achievements',
        sa.Column('id', sa.Integer(), primary_key=True),
        sa.Column('user_id', sa.Integer(), sa.ForeignKey('users.id'), nullable=False),
        sa.Column('title', sa.String(100), nullable=False),
        sa.Column('description', sa.Text(), nullable=False),
        sa.Column('badge_icon', sa.String(255)),
        sa.Column('badge_color', sa.String(20)),
        sa.Column('achievement_type', achievement_type, nullable=False),
        sa.Column('category', sa.String(50)),
        sa.Column('points', sa.Integer(), nullable=False),
        sa.Column('earned_at', sa.DateTime(), nullable=False),
        sa.Column('related_lesson_id', sa.Integer(), sa.ForeignKey('lessons.id'), nullable=True),
        sa.Column('related_assignment_id', sa.Integer(), sa.ForeignKey('assignments.id'), nullable=True),
    )
    op.create_index('ix_achievements_id', 'achievements', ['id'])
    op.create_index('ix_achievements_user_id', 'achievements', ['user_id'])


def downgrade():
    op.drop_table('achievements')
    op.drop_table('student_parents')
    op.drop_table('messages')
    op.drop_table('submissions')
    op.drop_table('assignment_assignees')
    op.drop_table('assignments')
    op.drop_table('progress')
    op.drop_table('lessons')
    op.drop_table('users')
