"""
Messaging routes
Send, conversations, inbox/outbox, read receipts and contacts
"""
from typing import Optional
from fastapi import APIRouter

from tinylearn.api.dependencies import CurrentUser, Messaging
from tinylearn.api.responses import page_payload, success_response
from tinylearn.api.schemas import MessageCreate
from tinylearn.api.serializers import conversation_to_dict, message_to_dict, user_brief
from tinylearn.models.database_models import MessagePriority, MessageType

router = APIRouter(prefix="/api/messages", tags=["Messages"])


@router.post("")
async def send_message(payload: MessageCreate, current_user: CurrentUser, service: Messaging):
    message = service.send_message(current_user, **payload.model_dump())
    return success_response({"message": message_to_dict(message)},
                            "Message sent successfully", status_code=201)


@router.get("/conversations")
async def get_conversations(current_user: CurrentUser, service: Messaging):
    """Latest message and unread count per conversation partner"""
    conversations = service.get_conversations(current_user)
    return success_response({"conversations": [conversation_to_dict(c) for c in conversations]},
                            "Conversations retrieved successfully")


@router.get("/conversation/{user_id}")
async def get_conversation(user_id: int, current_user: CurrentUser, service: Messaging,
                           page: int = 1, limit: int = 20):
    """Messages exchanged with another user; received ones are marked as read"""
    result = service.get_conversation(current_user, user_id, page, limit)
    return success_response(page_payload(result, "messages", message_to_dict),
                            "Conversation retrieved successfully")


@router.get("/received")
async def list_received(current_user: CurrentUser, service: Messaging, page: int = 1, limit: int = 10,
                        is_read: Optional[bool] = None, message_type: Optional[MessageType] = None,
                        priority: Optional[MessagePriority] = None):
    result = service.list_received(current_user, page, limit, is_read, message_type, priority)
    return success_response(page_payload(result, "messages", message_to_dict),
                            "Messages retrieved successfully")


@router.get("/sent")
async def list_sent(current_user: CurrentUser, service: Messaging, page: int = 1, limit: int = 10,
                    message_type: Optional[MessageType] = None):
    result = service.list_sent(current_user, page, limit, message_type)
    return success_response(page_payload(result, "messages", message_to_dict),
                            "Messages retrieved successfully")


@router.get("/stats")
async def get_message_stats(current_user: CurrentUser, service: Messaging):
    stats = service.get_stats(current_user)
    return success_response({
        "unread_count": stats.unread_count,
        "total_received": stats.total_received,
        "total_sent": stats.total_sent,
        "urgent_count": stats.urgent_count,
    }, "Message statistics retrieved successfully")


@router.get("/contacts")
async def get_contacts(current_user: CurrentUser, service: Messaging):
    contacts = service.get_contacts(current_user)
    return success_response({"contacts": [user_brief(u) for u in contacts]},
                            "Contacts retrieved successfully")


@router.get("/{message_id}")
async def get_message(message_id: int, current_user: CurrentUser, service: Messaging):
    message = service.get_message(current_user, message_id)
    return success_response({"message": message_to_dict(message)}, "Message retrieved successfully")


@router.patch("/{message_id}/read")
async def mark_as_read(message_id: int, current_user: CurrentUser, service: Messaging):
    message = service.mark_as_read(current_user, message_id)
    return success_response({"message": message_to_dict(message)}, "Message marked as read")
