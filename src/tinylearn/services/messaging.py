"""
Messaging relay
Messages are persisted first; the real-time notification afterwards is fire and forget.
"""
from dataclasses import dataclass
from typing import Dict, List, Optional

from loguru import logger

from tinylearn.models.database_models import (
    Message, MessagePriority, MessageType, User, UserRole
)
from tinylearn.models.repositories import MessageRepository, StudentParentRepository, UserRepository
from tinylearn.services.errors import forbidden, not_found, validation
from tinylearn.services.notifications import Notifier, NullNotifier
from tinylearn.utils.pagination import Page
from tinylearn.utils.timeutils import Clock, isoformat_utc, utcnow

NEW_MESSAGE_EVENT = "new_message"


@dataclass
class ConversationSummary:
    partner: User
    last_message: Message
    unread_count: int


@dataclass
class MessageStats:
    unread_count: int
    total_received: int
    total_sent: int
    urgent_count: int


class MessagingService:
    def __init__(self, messages: MessageRepository, users: UserRepository,
                 links: StudentParentRepository, notifier: Optional[Notifier] = None,
                 clock: Clock = utcnow):
        self.messages = messages
        self.users = users
        self.links = links
        self.notifier = notifier or NullNotifier()
        self.clock = clock

    def _check_parent_may_message(self, sender: User, related_student_id: Optional[int]) -> None:
        links = self.links.list_by_parent(sender.id)
        if related_student_id is not None:
            links = [l for l in links if l.student_id == related_student_id]
        if not links:
            raise forbidden("You can only message teachers of your children")

    def send_message(self, sender: User, receiver_id: int, content: str, subject: Optional[str] = None,
                     message_type: Optional[MessageType] = None, priority: Optional[MessagePriority] = None,
                     attachments: Optional[List[str]] = None,
                     related_student_id: Optional[int] = None) -> Message:
        if not content or not content.strip():
            raise validation("Message content is required")

        receiver = self.users.get_by_id(receiver_id)
        if receiver is None:
            raise not_found("Receiver not found")

        if sender.role == UserRole.PARENT and receiver.role == UserRole.TEACHER:
            self._check_parent_may_message(sender, related_student_id)

        message = self.messages.create(
            sender_id=sender.id,
            receiver_id=receiver.id,
            subject=subject,
            content=content,
            message_type=message_type or MessageType.GENERAL,
            priority=priority or MessagePriority.MEDIUM,
            attachments=list(attachments or []),
            related_student_id=related_student_id,
        )
        self._notify(message, sender)
        return message

    def _notify(self, message: Message, sender: User) -> None:
        payload = {
            "id": message.id,
            "sender_id": sender.id,
            "sender_name": sender.full_name,
            "subject": message.subject,
            "content": message.content,
            "priority": message.priority.value,
            "created_at": isoformat_utc(message.created_at),
        }
        try:
            self.notifier.notify(message.receiver_id, NEW_MESSAGE_EVENT, payload)
        except Exception as e:
            # The message is already stored; delivery of the live event is optional
            logger.warning(f"Notification for message {message.id} failed: {e}")

    # ---------- queries ----------

    def get_conversations(self, user: User) -> List[ConversationSummary]:
        latest: Dict[int, Message] = {}
        for message in self.messages.list_involving(user.id):
            partner_id = message.receiver_id if message.sender_id == user.id else message.sender_id
            if partner_id not in latest:
                latest[partner_id] = message

        partners = {u.id: u for u in self.users.get_many(latest.keys())}
        unread = self.messages.unread_counts_by_sender(user.id)
        return [
            ConversationSummary(partner=partners[pid], last_message=msg, unread_count=unread.get(pid, 0))
            for pid, msg in latest.items()
            if pid in partners
        ]

    def get_conversation(self, user: User, other_user_id: int, page: int = 1, limit: int = 20) -> Page:
        if self.users.get_by_id(other_user_id) is None:
            raise not_found("User not found")
        result = self.messages.list_between(user.id, other_user_id, page, limit)
        self.messages.mark_read_from(other_user_id, user.id, self.clock())
        return result

    def list_received(self, user: User, page: int = 1, limit: int = 10, is_read: Optional[bool] = None,
                      message_type: Optional[MessageType] = None,
                      priority: Optional[MessagePriority] = None) -> Page:
        return self.messages.list_received(user.id, page, limit, is_read, message_type, priority)

    def list_sent(self, user: User, page: int = 1, limit: int = 10,
                  message_type: Optional[MessageType] = None) -> Page:
        return self.messages.list_sent(user.id, page, limit, message_type)

    def mark_as_read(self, user: User, message_id: int) -> Message:
        message = self.messages.get_by_id(message_id)
        if message is None or message.receiver_id != user.id:
            raise not_found("Message not found")
        if not message.is_read:
            message.is_read = True
            message.read_at = self.clock()
            self.messages.save(message)
        return message

    def get_message(self, user: User, message_id: int) -> Message:
        message = self.messages.get_by_id(message_id)
        if message is None:
            raise not_found("Message not found")
        if user.id not in (message.sender_id, message.receiver_id):
            raise forbidden("You do not have permission to view this message")
        if message.receiver_id == user.id and not message.is_read:
            message.is_read = True
            message.read_at = self.clock()
            self.messages.save(message)
        return message

    def get_stats(self, user: User) -> MessageStats:
        return MessageStats(
            unread_count=self.messages.count(receiver_id=user.id, is_read=False),
            total_received=self.messages.count(receiver_id=user.id),
            total_sent=self.messages.count(sender_id=user.id),
            urgent_count=self.messages.count(receiver_id=user.id, is_read=False,
                                             priority=MessagePriority.URGENT),
        )

    def get_contacts(self, user: User) -> List[User]:
        if user.role == UserRole.PARENT:
            return self.users.list_users(role=UserRole.TEACHER, active_only=True)
        if user.role == UserRole.TEACHER:
            return self.users.list_users(role=UserRole.PARENT, active_only=True)
        if user.role == UserRole.ADMIN:
            return self.users.list_users(active_only=True, exclude_id=user.id)
        return []
