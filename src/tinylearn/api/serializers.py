"""
ORM entity -> JSON-ready dict conversion
"""
from typing import Optional

from tinylearn.models.database_models import (
    Achievement, Assignment, Lesson, Message, Progress, StudentParent, Submission, User
)
from tinylearn.services.assignments import StudentAssignmentView, TeacherAssignmentView
from tinylearn.services.messaging import ConversationSummary
from tinylearn.utils.timeutils import isoformat_utc


def user_brief(user: Optional[User]) -> Optional[dict]:
    if user is None:
        return None
    return {
        "id": user.id,
        "first_name": user.first_name,
        "last_name": user.last_name,
        "role": user.role.value,
    }


def user_to_dict(user: User) -> dict:
    return {
        "id": user.id,
        "first_name": user.first_name,
        "last_name": user.last_name,
        "email": user.email,
        "role": user.role.value,
        "account_status": user.account_status.value,
        "is_active": user.is_active,
        "age": user.age,
        "grade": user.grade,
        "parent_email": user.parent_email,
        "last_login": isoformat_utc(user.last_login),
        "created_at": isoformat_utc(user.created_at),
    }


def lesson_to_dict(lesson: Lesson) -> dict:
    return {
        "id": lesson.id,
        "title": lesson.title,
        "description": lesson.description,
        "content": lesson.content,
        "category": lesson.category.value,
        "difficulty": lesson.difficulty.value,
        "age_group": lesson.age_group,
        "duration": lesson.duration,
        "image_url": lesson.image_url,
        "video_url": lesson.video_url,
        "is_active": lesson.is_active,
        "created_by": lesson.created_by,
        "creator": user_brief(lesson.creator),
        "created_at": isoformat_utc(lesson.created_at),
    }


def assignment_to_dict(assignment: Assignment) -> dict:
    return {
        "id": assignment.id,
        "title": assignment.title,
        "description": assignment.description,
        "instructions": assignment.instructions,
        "lesson_id": assignment.lesson_id,
        "lesson": {"id": assignment.lesson.id, "title": assignment.lesson.title} if assignment.lesson else None,
        "teacher_id": assignment.teacher_id,
        "teacher": user_brief(assignment.teacher),
        "assigned_to": assignment.assigned_to,
        "due_date": isoformat_utc(assignment.due_date),
        "max_points": assignment.max_points,
        "assignment_type": assignment.assignment_type.value,
        "attachments": assignment.attachments or [],
        "is_active": assignment.is_active,
        "created_at": isoformat_utc(assignment.created_at),
    }


def teacher_assignment_to_dict(view: TeacherAssignmentView) -> dict:
    data = assignment_to_dict(view.assignment)
    data["submission_stats"] = {
        "total": view.stats.total,
        "submitted": view.stats.submitted,
        "graded": view.stats.graded,
        "pending": view.stats.pending,
    }
    return data


def student_assignment_to_dict(view: StudentAssignmentView) -> dict:
    data = assignment_to_dict(view.assignment)
    data["submission"] = submission_to_dict(view.submission) if view.submission else None
    data["is_overdue"] = view.is_overdue
    data["days_until_due"] = view.days_until_due
    return data


def submission_to_dict(submission: Submission) -> dict:
    assignment = submission.assignment
    return {
        "id": submission.id,
        "assignment_id": submission.assignment_id,
        "assignment": {
            "id": assignment.id,
            "title": assignment.title,
            "due_date": isoformat_utc(assignment.due_date),
            "max_points": assignment.max_points,
        } if assignment else None,
        "student_id": submission.student_id,
        "student": user_brief(submission.student),
        "content": submission.content,
        "attachments": submission.attachments or [],
        "status": submission.status.value,
        "score": submission.score,
        "feedback": submission.feedback,
        "time_spent": submission.time_spent,
        "submitted_at": isoformat_utc(submission.submitted_at),
        "graded_at": isoformat_utc(submission.graded_at),
        "graded_by": submission.graded_by,
    }


def progress_to_dict(progress: Progress) -> dict:
    lesson = progress.lesson
    return {
        "id": progress.id,
        "user_id": progress.user_id,
        "lesson_id": progress.lesson_id,
        "lesson": {
            "id": lesson.id,
            "title": lesson.title,
            "category": lesson.category.value,
            "difficulty": lesson.difficulty.value,
        } if lesson else None,
        "status": progress.status.value,
        "score": progress.score,
        "time_spent": progress.time_spent,
        "completed_at": isoformat_utc(progress.completed_at),
        "notes": progress.notes,
        "updated_at": isoformat_utc(progress.updated_at),
    }


def message_to_dict(message: Message) -> dict:
    return {
        "id": message.id,
        "sender_id": message.sender_id,
        "receiver_id": message.receiver_id,
        "sender": user_brief(message.sender),
        "receiver": user_brief(message.receiver),
        "subject": message.subject,
        "content": message.content,
        "message_type": message.message_type.value,
        "priority": message.priority.value,
        "is_read": message.is_read,
        "read_at": isoformat_utc(message.read_at),
        "attachments": message.attachments or [],
        "related_student_id": message.related_student_id,
        "created_at": isoformat_utc(message.created_at),
    }


def conversation_to_dict(summary: ConversationSummary) -> dict:
    return {
        "partner": user_brief(summary.partner),
        "last_message": message_to_dict(summary.last_message),
        "unread_count": summary.unread_count,
    }


def link_to_dict(link: StudentParent) -> dict:
    return {
        "id": link.id,
        "student": user_brief(link.student),
        "parent_id": link.parent_id,
        "relationship": link.relationship_type.value,
        "is_primary": link.is_primary,
        "can_receive_messages": link.can_receive_messages,
        "can_view_progress": link.can_view_progress,
    }


def achievement_to_dict(achievement: Achievement) -> dict:
    return {
        "id": achievement.id,
        "title": achievement.title,
        "description": achievement.description,
        "badge_icon": achievement.badge_icon,
        "badge_color": achievement.badge_color,
        "achievement_type": achievement.achievement_type.value,
        "category": achievement.category,
        "points": achievement.points,
        "earned_at": isoformat_utc(achievement.earned_at),
        "related_lesson_id": achievement.related_lesson_id,
        "related_assignment_id": achievement.related_assignment_id,
    }
