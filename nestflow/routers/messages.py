"""Messages router - direct messages between center members."""

from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session

from nestflow.core.deps import get_current_session, get_db
from nestflow.schemas.auth import UserSession
from nestflow.schemas.message import MessageCreate, MessageRead, UnreadCountResponse
from nestflow.services import message_service

router = APIRouter()


@router.get("", response_model=list[MessageRead])
def list_messages(
    conversation_with: str | None = Query(None, alias="conversationWith"),
    session: UserSession = Depends(get_current_session),
    db: Session = Depends(get_db),
):
    """Messages the caller sent or received, optionally with one counterpart."""
    messages = message_service.list_messages(
        db, session.center_id, session.user_id, conversation_with=conversation_with
    )
    return [message_service.to_message_read(m) for m in messages]


@router.get("/unread-count", response_model=UnreadCountResponse)
def unread_count(
    session: UserSession = Depends(get_current_session),
    db: Session = Depends(get_db),
):
    return UnreadCountResponse(
        count=message_service.count_unread(db, session.center_id, session.user_id)
    )


@router.post("", response_model=MessageRead, status_code=201)
def send_message(
    data: MessageCreate,
    session: UserSession = Depends(get_current_session),
    db: Session = Depends(get_db),
):
    message = message_service.send_message(db, session.center_id, session.user_id, data)
    return message_service.to_message_read(message)


@router.patch("/{message_id}/read", response_model=MessageRead)
def mark_read(
    message_id: str,
    session: UserSession = Depends(get_current_session),
    db: Session = Depends(get_db),
):
    """Only the recipient can mark a message read."""
    message = message_service.mark_read(db, session.center_id, session.user_id, message_id)
    return message_service.to_message_read(message)
