"""
Request bodies for the API routes
"""
from datetime import datetime
from typing import List, Optional
from pydantic import BaseModel, Field, field_validator

from tinylearn.models.database_models import (
    AccountStatus, AssignmentType, LessonCategory, LessonDifficulty, MessagePriority,
    MessageType, ParentRelationship, ProgressStatus
)


class AssignmentCreate(BaseModel):
    title: str = Field(..., min_length=1, max_length=100)
    description: str = Field(..., min_length=1)
    instructions: Optional[str] = None
    lesson_id: Optional[int] = None
    assigned_to: List[int]
    due_date: datetime
    max_points: int = 100
    assignment_type: AssignmentType = AssignmentType.HOMEWORK
    attachments: List[str] = []


class AssignmentUpdate(BaseModel):
    title: Optional[str] = Field(None, min_length=1, max_length=100)
    description: Optional[str] = None
    instructions: Optional[str] = None
    lesson_id: Optional[int] = None
    assigned_to: Optional[List[int]] = None
    due_date: Optional[datetime] = None
    max_points: Optional[int] = None
    assignment_type: Optional[AssignmentType] = None
    attachments: Optional[List[str]] = None
    is_active: Optional[bool] = None


class SubmissionUpsert(BaseModel):
    assignment_id: int
    content: Optional[str] = None
    attachments: Optional[List[str]] = None
    time_spent: Optional[int] = None


class GradeRequest(BaseModel):
    score: float
    feedback: Optional[str] = None


class ProgressUpdate(BaseModel):
    status: Optional[ProgressStatus] = None
    score: Optional[float] = None
    time_spent: Optional[int] = None
    notes: Optional[str] = None


class CompleteRequest(BaseModel):
    score: Optional[float] = None
    notes: Optional[str] = None


class MessageCreate(BaseModel):
    receiver_id: int
    content: str
    subject: Optional[str] = Field(None, max_length=200)
    message_type: Optional[MessageType] = None
    priority: Optional[MessagePriority] = None
    attachments: Optional[List[str]] = None
    related_student_id: Optional[int] = None

    @field_validator('content')
    @classmethod
    def validate_content(cls, v):
        if not v.strip():
            raise ValueError('Message content is required')
        return v


class LessonCreate(BaseModel):
    title: str = Field(..., min_length=1, max_length=200)
    category: LessonCategory
    age_group: str = Field(..., min_length=1)
    difficulty: Optional[LessonDifficulty] = None
    description: Optional[str] = None
    content: Optional[str] = None
    duration: Optional[int] = None
    image_url: Optional[str] = None
    video_url: Optional[str] = None


class LessonUpdate(BaseModel):
    title: Optional[str] = Field(None, min_length=1, max_length=200)
    category: Optional[LessonCategory] = None
    age_group: Optional[str] = None
    difficulty: Optional[LessonDifficulty] = None
    description: Optional[str] = None
    content: Optional[str] = None
    duration: Optional[int] = None
    image_url: Optional[str] = None
    video_url: Optional[str] = None
    is_active: Optional[bool] = None


class ProfileUpdate(BaseModel):
    first_name: Optional[str] = Field(None, min_length=2, max_length=50)
    last_name: Optional[str] = Field(None, min_length=2, max_length=50)
    age: Optional[int] = Field(None, ge=1, le=120)
    grade: Optional[str] = None
    parent_email: Optional[str] = None


class AccountStatusUpdate(BaseModel):
    account_status: AccountStatus


class ParentLinkRequest(BaseModel):
    parent_id: int
    student_id: int
    relationship: ParentRelationship = ParentRelationship.GUARDIAN
    is_primary: bool = False
    can_receive_messages: bool = True
    can_view_progress: bool = True
