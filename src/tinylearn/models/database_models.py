"""
SQLAlchemy database models for TinyLearn
"""
import enum
from sqlalchemy import (
    Column, Integer, String, Text, DateTime, ForeignKey, Float, Boolean, JSON, Enum, UniqueConstraint
)
from sqlalchemy.orm import declarative_base, relationship

from tinylearn.utils.timeutils import utcnow

Base = declarative_base()

# ============= USER MANAGEMENT =============

class UserRole(str, enum.Enum):
    ADMIN = "admin"
    TEACHER = "teacher"
    PARENT = "parent"
    STUDENT = "student"

class AccountStatus(str, enum.Enum):
    PENDING = "pending"
    APPROVED = "approved"
    SUSPENDED = "suspended"

class User(Base):
    __tablename__ = "users"

    id = Column(Integer, primary_key=True, index=True)
    first_name = Column(String(50), nullable=False)
    last_name = Column(String(50), nullable=False)
    email = Column(String(255), unique=True, index=True, nullable=False)
    hashed_password = Column(String(255), nullable=False)
    role = Column(Enum(UserRole), nullable=False, default=UserRole.STUDENT)
    account_status = Column(Enum(AccountStatus), nullable=False, default=AccountStatus.APPROVED)
    is_active = Column(Boolean, nullable=False, default=True)
    age = Column(Integer)
    grade = Column(String(20))
    parent_email = Column(String(255))
    last_login = Column(DateTime)
    created_at = Column(DateTime, default=utcnow)
    updated_at = Column(DateTime, default=utcnow, onupdate=utcnow)

    lessons_created = relationship("Lesson", back_populates="creator")
    assignments_created = relationship("Assignment", back_populates="teacher")

    @property
    def full_name(self) -> str:
        return f"{self.first_name} {self.last_name}"

# ============= LESSONS =============

class LessonCategory(str, enum.Enum):
    MATH = "math"
    READING = "reading"
    SCIENCE = "science"
    ART = "art"
    MUSIC = "music"
    PHYSICAL = "physical"
    SOCIAL = "social"

class LessonDifficulty(str, enum.Enum):
    BEGINNER = "beginner"
    INTERMEDIATE = "intermediate"
    ADVANCED = "advanced"

class Lesson(Base):
    __tablename__ = "lessons"

    id = Column(Integer, primary_key=True, index=True)
    title = Column(String(200), nullable=False)
    description = Column(Text)
    content = Column(Text)
    category = Column(Enum(LessonCategory), nullable=False)
    difficulty = Column(Enum(LessonDifficulty), nullable=False, default=LessonDifficulty.BEGINNER)
    age_group = Column(String(20), nullable=False)
    duration = Column(Integer)
    image_url = Column(String(1000))
    video_url = Column(String(1000))
    is_active = Column(Boolean, nullable=False, default=True)
    created_by = Column(Integer, ForeignKey("users.id"), nullable=False)
    created_at = Column(DateTime, default=utcnow)
    updated_at = Column(DateTime, default=utcnow, onupdate=utcnow)

    creator = relationship("User", back_populates="lessons_created")

# ============= PROGRESS =============

class ProgressStatus(str, enum.Enum):
    NOT_STARTED = "not_started"
    IN_PROGRESS = "in_progress"
    COMPLETED = "completed"

    @property
    def rank(self) -> int:
        return list(ProgressStatus).index(self)

class Progress(Base):
    __tablename__ = "progress"
    __table_args__ = (UniqueConstraint("user_id", "lesson_id", name="uq_progress_user_lesson"),)

    id = Column(Integer, primary_key=True, index=True)
    user_id = Column(Integer, ForeignKey("users.id"), nullable=False, index=True)
    lesson_id = Column(Integer, ForeignKey("lessons.id"), nullable=False, index=True)
    status = Column(Enum(ProgressStatus), nullable=False, default=ProgressStatus.NOT_STARTED, index=True)
    score = Column(Float)
    time_spent = Column(Integer, nullable=False, default=0)
    completed_at = Column(DateTime)
    notes = Column(Text)
    created_at = Column(DateTime, default=utcnow)
    updated_at = Column(DateTime, default=utcnow, onupdate=utcnow)

    user = relationship("User")
    lesson = relationship("Lesson")

# ============= ASSIGNMENTS =============

class AssignmentType(str, enum.Enum):
    HOMEWORK = "homework"
    QUIZ = "quiz"
    PROJECT = "project"
    READING = "reading"
    PRACTICE = "practice"

class Assignment(Base):
    __tablename__ = "assignments"

    id = Column(Integer, primary_key=True, index=True)
    title = Column(String(100), nullable=False)
    description = Column(Text, nullable=False)
    instructions = Column(Text)
    lesson_id = Column(Integer, ForeignKey("lessons.id"), nullable=True)
    teacher_id = Column(Integer, ForeignKey("users.id"), nullable=False, index=True)
    due_date = Column(DateTime, nullable=False)
    max_points = Column(Integer, nullable=False, default=100)
    assignment_type = Column(Enum(AssignmentType), nullable=False, default=AssignmentType.HOMEWORK)
    attachments = Column(JSON, nullable=False, default=list)
    is_active = Column(Boolean, nullable=False, default=True)
    created_at = Column(DateTime, default=utcnow)
    updated_at = Column(DateTime, default=utcnow, onupdate=utcnow)

    teacher = relationship("User", back_populates="assignments_created")
    lesson = relationship("Lesson")
    assignees = relationship("AssignmentAssignee", back_populates="assignment", cascade="all, delete-orphan")
    submissions = relationship("Submission", back_populates="assignment")

    @property
    def assigned_to(self) -> list:
        return sorted(a.student_id for a in self.assignees)

    def is_assigned(self, student_id: int) -> bool:
        return any(a.student_id == student_id for a in self.assignees)

class AssignmentAssignee(Base):
    __tablename__ = "assignment_assignees"
    __table_args__ = (UniqueConstraint("assignment_id", "student_id", name="uq_assignee_assignment_student"),)

    id = Column(Integer, primary_key=True, index=True)
    assignment_id = Column(Integer, ForeignKey("assignments.id"), nullable=False, index=True)
    student_id = Column(Integer, ForeignKey("users.id"), nullable=False, index=True)

    assignment = relationship("Assignment", back_populates="assignees")
    student = relationship("User")

# ============= SUBMISSIONS =============

class SubmissionStatus(str, enum.Enum):
    DRAFT = "draft"
    SUBMITTED = "submitted"
    GRADED = "graded"
    RETURNED = "returned"

    @property
    def is_final(self) -> bool:
        return self in (SubmissionStatus.GRADED, SubmissionStatus.RETURNED)

class Submission(Base):
    __tablename__ = "submissions"
    __table_args__ = (UniqueConstraint("assignment_id", "student_id", name="uq_submission_assignment_student"),)

    id = Column(Integer, primary_key=True, index=True)
    assignment_id = Column(Integer, ForeignKey("assignments.id"), nullable=False, index=True)
    student_id = Column(Integer, ForeignKey("users.id"), nullable=False, index=True)
    content = Column(Text)
    attachments = Column(JSON, nullable=False, default=list)
    status = Column(Enum(SubmissionStatus), nullable=False, default=SubmissionStatus.DRAFT, index=True)
    score = Column(Float)
    feedback = Column(Text)
    submitted_at = Column(DateTime)
    graded_at = Column(DateTime)
    graded_by = Column(Integer, ForeignKey("users.id"))
    time_spent = Column(Integer, default=0)
    created_at = Column(DateTime, default=utcnow)
    updated_at = Column(DateTime, default=utcnow, onupdate=utcnow)

    assignment = relationship("Assignment", back_populates="submissions")
    student = relationship("User", foreign_keys=[student_id])
    grader = relationship("User", foreign_keys=[graded_by])

# ============= MESSAGING =============

class MessageType(str, enum.Enum):
    GENERAL = "general"
    PROGRESS_UPDATE = "progress_update"
    ASSIGNMENT_NOTIFICATION = "assignment_notification"
    MEETING_REQUEST = "meeting_request"
    ANNOUNCEMENT = "announcement"

class MessagePriority(str, enum.Enum):
    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"
    URGENT = "urgent"

class Message(Base):
    __tablename__ = "messages"

    id = Column(Integer, primary_key=True, index=True)
    sender_id = Column(Integer, ForeignKey("users.id"), nullable=False, index=True)
    receiver_id = Column(Integer, ForeignKey("users.id"), nullable=False, index=True)
    subject = Column(String(200))
    content = Column(Text, nullable=False)
    message_type = Column(Enum(MessageType), nullable=False, default=MessageType.GENERAL)
    priority = Column(Enum(MessagePriority), nullable=False, default=MessagePriority.MEDIUM)
    is_read = Column(Boolean, nullable=False, default=False, index=True)
    read_at = Column(DateTime)
    attachments = Column(JSON, nullable=False, default=list)
    related_student_id = Column(Integer, ForeignKey("users.id"), nullable=True, index=True)
    created_at = Column(DateTime, default=utcnow)

    sender = relationship("User", foreign_keys=[sender_id])
    receiver = relationship("User", foreign_keys=[receiver_id])
    related_student = relationship("User", foreign_keys=[related_student_id])

# ============= FAMILY LINKS =============

class ParentRelationship(str, enum.Enum):
    MOTHER = "mother"
    FATHER = "father"
    GUARDIAN = "guardian"
    GRANDMOTHER = "grandmother"
    GRANDFATHER = "grandfather"
    OTHER = "other"

class StudentParent(Base):
    __tablename__ = "student_parents"
    __table_args__ = (UniqueConstraint("student_id", "parent_id", name="uq_student_parent"),)

    id = Column(Integer, primary_key=True, index=True)
    student_id = Column(Integer, ForeignKey("users.id"), nullable=False, index=True)
    parent_id = Column(Integer, ForeignKey("users.id"), nullable=False, index=True)
    relationship_type = Column("relationship", Enum(ParentRelationship), nullable=False,
                               default=ParentRelationship.GUARDIAN)
    is_primary = Column(Boolean, nullable=False, default=False)
    can_receive_messages = Column(Boolean, nullable=False, default=True)
    can_view_progress = Column(Boolean, nullable=False, default=True)
    created_at = Column(DateTime, default=utcnow)

    student = relationship("User", foreign_keys=[student_id])
    parent = relationship("User", foreign_keys=[parent_id])

# ============= ACHIEVEMENTS =============

class AchievementType(str, enum.Enum):
    COMPLETION = "completion"
    STREAK = "streak"
    SCORE = "score"
    PARTICIPATION = "participation"
    IMPROVEMENT = "improvement"
    SPECIAL = "special"

class Achievement(Base):
    __tablename__ = "achievements"

    id = Column(Integer, primary_key=True, index=True)
    user_id = Column(Integer, ForeignKey("users.id"), nullable=False, index=True)
    title = Column(String(100), nullable=False)
    description = Column(Text, nullable=False)
    badge_icon = Column(String(255))
    badge_color = Column(String(20), default="#3B82F6")
    achievement_type = Column(Enum(AchievementType), nullable=False)
    category = Column(String(50))
    points = Column(Integer, nullable=False, default=10)
    earned_at = Column(DateTime, nullable=False, default=utcnow)
    related_lesson_id = Column(Integer, ForeignKey("lessons.id"), nullable=True)
    related_assignment_id = Column(Integer, ForeignKey("assignments.id"), nullable=True)
