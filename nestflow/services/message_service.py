"""Message service - direct messages between center members."""

from sqlalchemy import or_
from sqlalchemy.orm import Session, joinedload

from nestflow.db.models import Child, Message, User
from nestflow.schemas.message import MessageCreate, MessageRead
from nestflow.services.errors import InvalidInputError, NotFoundError
from nestflow.utils.presentation import display_name


def list_messages(
    db: Session,
    center_id: str,
    user_id: str,
    conversation_with: str | None = None,
) -> list[Message]:
    """Messages the user sent or received, newest first."""
    query = db.query(Message).options(
        joinedload(Message.sender),
        joinedload(Message.recipient),
    ).filter(
        Message.center_id == center_id,
        or_(Message.sender_id == user_id, Message.recipient_id == user_id),
    )
    if conversation_with:
        query = query.filter(
            or_(
                Message.sender_id == conversation_with,
                Message.recipient_id == conversation_with,
            )
        )
    return query.order_by(Message.created_at.desc()).all()


def send_message(
    db: Session,
    center_id: str,
    sender_id: str,
    data: MessageCreate,
) -> Message:
    """
    Send a message to another member of the center.

    Raises:
        InvalidInputError: recipient or content missing
        NotFoundError: recipient or child not in this center
    """
    if not data.recipient_id or not (data.content or "").strip():
        raise InvalidInputError("recipientId and content are required")

    recipient = db.query(User.id).filter(
        User.id == data.recipient_id,
        User.center_id == center_id,
    ).first()
    if not recipient:
        raise NotFoundError("Recipient not found")

    if data.child_id:
        child = db.query(Child.id).filter(
            Child.id == data.child_id,
            Child.center_id == center_id,
        ).first()
        if not child:
            raise NotFoundError("Child not found")

    message = Message(
        center_id=center_id,
        sender_id=sender_id,
        recipient_id=data.recipient_id,
        child_id=data.child_id or None,
        content=data.content,
    )
    db.add(message)
    db.commit()
    db.refresh(message)
    return message


def mark_read(db: Session, center_id: str, user_id: str, message_id: str) -> Message:
    """
    Mark a received message as read. Read stays read.

    Raises:
        NotFoundError: message missing or the user is not its recipient
    """
    message = db.query(Message).filter(
        Message.id == message_id,
        Message.center_id == center_id,
        Message.recipient_id == user_id,
    ).first()
    if not message:
        raise NotFoundError("Message not found")

    if not message.is_read:
        message.is_read = True
        db.commit()
        db.refresh(message)
    return message


def count_unread(db: Session, center_id: str, user_id: str) -> int:
    return db.query(Message).filter(
        Message.center_id == center_id,
        Message.recipient_id == user_id,
        Message.is_read.is_(False),
    ).count()


def to_message_read(message: Message) -> MessageRead:
    """Convert Message model to MessageRead schema."""
    sender = message.sender
    recipient = message.recipient
    return MessageRead(
        id=message.id,
        center_id=message.center_id,
        sender_id=message.sender_id,
        recipient_id=message.recipient_id,
        child_id=message.child_id,
        content=message.content,
        is_read=message.is_read,
        created_at=message.created_at,
        sender_name=display_name(sender.first_name, sender.last_name) if sender else None,
        sender_avatar=sender.avatar_url if sender else None,
        recipient_name=(
            display_name(recipient.first_name, recipient.last_name) if recipient else None
        ),
    )
