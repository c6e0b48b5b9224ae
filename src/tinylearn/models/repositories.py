"""
Repository classes for CRUD operations, one per entity.
Services receive these through their constructors.
"""
from datetime import datetime
from sqlalchemy.orm import Session
from sqlalchemy import and_, or_, func
from typing import Dict, Iterable, List, Optional
from loguru import logger

from .database_models import (
    User, UserRole, AccountStatus, Lesson, Progress, Assignment,
    AssignmentAssignee, Submission, SubmissionStatus, Message, MessagePriority,
    StudentParent, Achievement
)
from tinylearn.utils.pagination import Page, paginate


class BaseRepository:
    def __init__(self, db: Session):
        self.db = db

    def save(self, entity):
        self.db.add(entity)
        self.db.commit()
        self.db.refresh(entity)
        return entity

    def rollback(self):
        self.db.rollback()


class UserRepository(BaseRepository):
    def get_by_id(self, user_id: int) -> Optional[User]:
        return self.db.query(User).filter(User.id == user_id).first()

    def get_by_email(self, email: str) -> Optional[User]:
        return self.db.query(User).filter(User.email == email).first()

    def get_many(self, user_ids: Iterable[int]) -> List[User]:
        ids = list(set(user_ids))
        if not ids:
            return []
        return self.db.query(User).filter(User.id.in_(ids)).all()

    def create(self, **fields) -> User:
        user = User(**fields)
        self.save(user)
        logger.info(f"User created: {user.email} (ID: {user.id}, role: {user.role.value})")
        return user

    def list_users(self, role: Optional[UserRole] = None, active_only: bool = False,
                   exclude_id: Optional[int] = None) -> List[User]:
        query = self.db.query(User)
        if role is not None:
            query = query.filter(User.role == role)
        if active_only:
            query = query.filter(User.is_active.is_(True))
        if exclude_id is not None:
            query = query.filter(User.id != exclude_id)
        return query.order_by(User.created_at.desc(), User.id.desc()).all()

    def count_by_role(self) -> Dict[str, int]:
        rows = self.db.query(User.role, func.count(User.id)).group_by(User.role).all()
        return {role.value: count for role, count in rows}

    def count_by_status(self, status: AccountStatus) -> int:
        return self.db.query(User).filter(User.account_status == status).count()


class LessonRepository(BaseRepository):
    def get_by_id(self, lesson_id: int) -> Optional[Lesson]:
        return self.db.query(Lesson).filter(Lesson.id == lesson_id).first()

    def create(self, **fields) -> Lesson:
        lesson = Lesson(**fields)
        self.save(lesson)
        logger.info(f"Lesson created: {lesson.title} (ID: {lesson.id})")
        return lesson

    def list_active(self, page: int, limit: int, category=None, difficulty=None, age_group=None) -> Page:
        query = self.db.query(Lesson).filter(Lesson.is_active.is_(True))
        if category is not None:
            query = query.filter(Lesson.category == category)
        if difficulty is not None:
            query = query.filter(Lesson.difficulty == difficulty)
        if age_group:
            query = query.filter(Lesson.age_group == age_group)
        query = query.order_by(Lesson.created_at.desc(), Lesson.id.desc())
        return paginate(query, page, limit)

    def count_active(self) -> int:
        return self.db.query(Lesson).filter(Lesson.is_active.is_(True)).count()


class AssignmentRepository(BaseRepository):
    def get_by_id(self, assignment_id: int) -> Optional[Assignment]:
        return self.db.query(Assignment).filter(Assignment.id == assignment_id).first()

    def get_owned(self, assignment_id: int, teacher_id: int) -> Optional[Assignment]:
        return self.db.query(Assignment).filter(
            and_(Assignment.id == assignment_id, Assignment.teacher_id == teacher_id)
        ).first()

    def create(self, assigned_to: Iterable[int], **fields) -> Assignment:
        assignment = Assignment(**fields)
        assignment.assignees = [AssignmentAssignee(student_id=sid) for sid in sorted(set(assigned_to))]
        self.save(assignment)
        logger.info(f"Assignment created: {assignment.title} (ID: {assignment.id}) "
                    f"for {len(assignment.assignees)} students")
        return assignment

    def replace_assignees(self, assignment: Assignment, assigned_to: Iterable[int]) -> None:
        wanted = set(assigned_to)
        assignment.assignees = [a for a in assignment.assignees if a.student_id in wanted]
        existing = {a.student_id for a in assignment.assignees}
        for sid in sorted(wanted - existing):
            assignment.assignees.append(AssignmentAssignee(student_id=sid))

    def list_by_teacher(self, teacher_id: int, page: int, limit: int, is_active: Optional[bool] = None) -> Page:
        query = self.db.query(Assignment).filter(Assignment.teacher_id == teacher_id)
        if is_active is not None:
            query = query.filter(Assignment.is_active.is_(is_active))
        query = query.order_by(Assignment.created_at.desc(), Assignment.id.desc())
        return paginate(query, page, limit)

    def list_for_student(self, student_id: int, page: int, limit: int) -> Page:
        query = (
            self.db.query(Assignment)
            .join(AssignmentAssignee, AssignmentAssignee.assignment_id == Assignment.id)
            .filter(and_(AssignmentAssignee.student_id == student_id, Assignment.is_active.is_(True)))
            .order_by(Assignment.due_date.asc(), Assignment.id.asc())
        )
        return paginate(query, page, limit)

    def list_all(self, page: int, limit: int) -> Page:
        query = self.db.query(Assignment).order_by(Assignment.created_at.desc(), Assignment.id.desc())
        return paginate(query, page, limit)


class SubmissionRepository(BaseRepository):
    def get_by_id(self, submission_id: int) -> Optional[Submission]:
        return self.db.query(Submission).filter(Submission.id == submission_id).first()

    def get_for(self, assignment_id: int, student_id: int) -> Optional[Submission]:
        return self.db.query(Submission).filter(
            and_(Submission.assignment_id == assignment_id, Submission.student_id == student_id)
        ).first()

    def insert(self, submission: Submission) -> Submission:
        """Insert a new row; raises IntegrityError if the (assignment, student) pair exists."""
        return self.save(submission)

    def max_score(self, assignment_id: int) -> Optional[float]:
        return self.db.query(func.max(Submission.score)).filter(
            and_(Submission.assignment_id == assignment_id, Submission.score.isnot(None))
        ).scalar()

    def list_by_student(self, student_id: int, page: int, limit: int,
                        status: Optional[SubmissionStatus] = None,
                        assignment_id: Optional[int] = None) -> Page:
        query = self.db.query(Submission).filter(Submission.student_id == student_id)
        if status is not None:
            query = query.filter(Submission.status == status)
        if assignment_id is not None:
            query = query.filter(Submission.assignment_id == assignment_id)
        query = query.order_by(Submission.submitted_at.desc(), Submission.id.desc())
        return paginate(query, page, limit)

    def list_by_assignment(self, assignment_id: int, page: int, limit: int,
                           status: Optional[SubmissionStatus] = None) -> Page:
        query = self.db.query(Submission).filter(Submission.assignment_id == assignment_id)
        if status is not None:
            query = query.filter(Submission.status == status)
        query = query.order_by(Submission.submitted_at.desc(), Submission.id.desc())
        return paginate(query, page, limit)

    def by_assignment_for_student(self, student_id: int, assignment_ids: Iterable[int]) -> Dict[int, Submission]:
        ids = list(assignment_ids)
        if not ids:
            return {}
        rows = self.db.query(Submission).filter(
            and_(Submission.student_id == student_id, Submission.assignment_id.in_(ids))
        ).all()
        return {s.assignment_id: s for s in rows}


class ProgressRepository(BaseRepository):
    def get(self, user_id: int, lesson_id: int) -> Optional[Progress]:
        return self.db.query(Progress).filter(
            and_(Progress.user_id == user_id, Progress.lesson_id == lesson_id)
        ).first()

    def insert(self, progress: Progress) -> Progress:
        """Insert a new row; raises IntegrityError if the (user, lesson) pair exists."""
        return self.save(progress)

    def list_by_user(self, user_id: int) -> List[Progress]:
        return (
            self.db.query(Progress)
            .filter(Progress.user_id == user_id)
            .order_by(Progress.updated_at.desc(), Progress.id.desc())
            .all()
        )

    def list_all(self, page: int, limit: int) -> Page:
        query = self.db.query(Progress).order_by(Progress.updated_at.desc(), Progress.id.desc())
        return paginate(query, page, limit)


class MessageRepository(BaseRepository):
    def get_by_id(self, message_id: int) -> Optional[Message]:
        return self.db.query(Message).filter(Message.id == message_id).first()

    def create(self, **fields) -> Message:
        message = Message(**fields)
        self.save(message)
        logger.info(f"Message created: {message.id} ({message.sender_id} -> {message.receiver_id})")
        return message

    def list_received(self, user_id: int, page: int, limit: int, is_read: Optional[bool] = None,
                      message_type=None, priority=None) -> Page:
        query = self.db.query(Message).filter(Message.receiver_id == user_id)
        if is_read is not None:
            query = query.filter(Message.is_read.is_(is_read))
        if message_type is not None:
            query = query.filter(Message.message_type == message_type)
        if priority is not None:
            query = query.filter(Message.priority == priority)
        query = query.order_by(Message.created_at.desc(), Message.id.desc())
        return paginate(query, page, limit)

    def list_sent(self, user_id: int, page: int, limit: int, message_type=None) -> Page:
        query = self.db.query(Message).filter(Message.sender_id == user_id)
        if message_type is not None:
            query = query.filter(Message.message_type == message_type)
        query = query.order_by(Message.created_at.desc(), Message.id.desc())
        return paginate(query, page, limit)

    def list_between(self, user_id: int, other_id: int, page: int, limit: int) -> Page:
        query = self.db.query(Message).filter(or_(
            and_(Message.sender_id == user_id, Message.receiver_id == other_id),
            and_(Message.sender_id == other_id, Message.receiver_id == user_id),
        )).order_by(Message.created_at.asc(), Message.id.asc())
        return paginate(query, page, limit)

    def list_involving(self, user_id: int) -> List[Message]:
        return (
            self.db.query(Message)
            .filter(or_(Message.sender_id == user_id, Message.receiver_id == user_id))
            .order_by(Message.created_at.desc(), Message.id.desc())
            .all()
        )

    def unread_counts_by_sender(self, receiver_id: int) -> Dict[int, int]:
        rows = (
            self.db.query(Message.sender_id, func.count(Message.id))
            .filter(and_(Message.receiver_id == receiver_id, Message.is_read.is_(False)))
            .group_by(Message.sender_id)
            .all()
        )
        return {sender_id: count for sender_id, count in rows}

    def mark_read_from(self, sender_id: int, receiver_id: int, read_at: datetime) -> int:
        updated = self.db.query(Message).filter(and_(
            Message.sender_id == sender_id,
            Message.receiver_id == receiver_id,
            Message.is_read.is_(False),
        )).update({Message.is_read: True, Message.read_at: read_at}, synchronize_session="fetch")
        self.db.commit()
        return updated

    def count(self, sender_id: Optional[int] = None, receiver_id: Optional[int] = None,
              is_read: Optional[bool] = None, priority: Optional[MessagePriority] = None) -> int:
        query = self.db.query(Message)
        if sender_id is not None:
            query = query.filter(Message.sender_id == sender_id)
        if receiver_id is not None:
            query = query.filter(Message.receiver_id == receiver_id)
        if is_read is not None:
            query = query.filter(Message.is_read.is_(is_read))
        if priority is not None:
            query = query.filter(Message.priority == priority)
        return query.count()


class StudentParentRepository(BaseRepository):
    def get(self, student_id: int, parent_id: int) -> Optional[StudentParent]:
        return self.db.query(StudentParent).filter(
            and_(StudentParent.student_id == student_id, StudentParent.parent_id == parent_id)
        ).first()

    def create(self, **fields) -> StudentParent:
        link = StudentParent(**fields)
        self.save(link)
        logger.info(f"Parent {link.parent_id} linked to student {link.student_id}")
        return link

    def list_by_parent(self, parent_id: int) -> List[StudentParent]:
        return self.db.query(StudentParent).filter(StudentParent.parent_id == parent_id).all()


class AchievementRepository(BaseRepository):
    def create(self, **fields) -> Achievement:
        achievement = Achievement(**fields)
        self.save(achievement)
        return achievement

    def list_by_user(self, user_id: int) -> List[Achievement]:
        return (
            self.db.query(Achievement)
            .filter(Achievement.user_id == user_id)
            .order_by(Achievement.earned_at.desc(), Achievement.id.desc())
            .all()
        )

    def total_points(self, user_id: int) -> int:
        total = self.db.query(func.sum(Achievement.points)).filter(Achievement.user_id == user_id).scalar()
        return int(total or 0)
