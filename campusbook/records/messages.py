"""Functions for direct messages between students and teachers."""

import structlog

from campusbook.common.exceptions import NotFoundError, PermissionDeniedError
from campusbook.docstore.protocol import DocumentStore
from campusbook.docstore.query import DESCENDING
from campusbook.models.documents import Message, UserProfile
from campusbook.records.users import get_user_profile

logger = structlog.get_logger(__name__)

MESSAGES = "messages"


async def send_message(
    store: DocumentStore,
    sender: UserProfile,
    receiver_id: str,
    subject: str,
    content: str,
    reply_to: str | None = None,
) -> Message:
    """Stores a new unread message.

    Args:
        store: The document store.
        sender: Profile of the sending user.
        receiver_id: uid of the receiving user.
        subject: Message subject.
        content: Message body.
        reply_to: Id of the message being answered, if any.

    Returns:
        The stored Message, with its id.

    Raises:
        NotFoundError: The receiver does not exist.
    """
    receiver = await get_user_profile(store, receiver_id)
    if receiver is None:
        raise NotFoundError(f"users/{receiver_id}", f"User not found: {receiver_id}")

    message = Message(
        sender_id=sender.uid,
        sender_name=sender.name,
        sender_email=sender.email,
        receiver_id=receiver.uid,
        receiver_name=receiver.name,
        subject=subject,
        content=content,
        reply_to=reply_to,
    )
    ref = await store.collection(MESSAGES).add(message.to_document())
    logger.info("Message sent", message_id=ref.id, sender_id=sender.uid, receiver_id=receiver.uid)
    return message.model_copy(update={"id": ref.id})


async def list_inbox(store: DocumentStore, uid: str, unread_only: bool = False) -> list[Message]:
    """Messages received by uid, newest first."""
    query = store.collection(MESSAGES).where("receiverId", "==", uid)
    if unread_only:
        query = query.where("read", "==", False)
    snapshot = await query.order_by("createdAt", DESCENDING).get()
    return [Message.from_document(doc.data()) for doc in snapshot]


async def list_sent(store: DocumentStore, uid: str) -> list[Message]:
    """Messages sent by uid, newest first."""
    snapshot = await (
        store.collection(MESSAGES).where("senderId", "==", uid).order_by("createdAt", DESCENDING).get()
    )
    return [Message.from_document(doc.data()) for doc in snapshot]


async def mark_as_read(store: DocumentStore, message_id: str) -> None:
    """Flags a message as read. Raises NotFoundError if it does not exist."""
    await store.collection(MESSAGES).doc(message_id).update({"read": True})


async def reply_to_message(
    store: DocumentStore,
    teacher: UserProfile,
    message_id: str,
    content: str,
) -> Message:
    """Teacher answers a message they received.

    The reply is a new message to the original sender; the original is
    marked read.

    Raises:
        NotFoundError: The original message does not exist.
        PermissionDeniedError: The replier is not a teacher or not the receiver.
    """
    ref = store.collection(MESSAGES).doc(message_id)
    snapshot = await ref.get()
    if not snapshot.exists():
        raise NotFoundError(ref.path, f"Message not found: {message_id}")

    original = Message.from_document(snapshot.data())
    if teacher.role != "teacher" or original.receiver_id != teacher.uid:
        raise PermissionDeniedError(
            "Only the receiving teacher can reply to this message",
            {"uid": teacher.uid, "message_id": message_id},
        )

    subject = original.subject if original.subject.startswith("Re: ") else f"Re: {original.subject}"
    reply = await send_message(store, teacher, original.sender_id, subject[:200], content, reply_to=message_id)
    await ref.update({"read": True})
    return reply
