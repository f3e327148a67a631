# Direct messages between users
import logging
from livestock import db
from livestock.models import Conversation, ConversationParticipant, Message, User, Profile
from livestock.models.base_model import utcnow

logger = logging.getLogger(__name__)


def format_message(message):
    return {
        'id': message.id,
        'conversation_id': message.conversation_id,
        'sender_id': message.sender_id,
        'message_text': message.message_text,
        'is_read': message.is_read,
        'created_at': message.created_at.isoformat()
    }


def _display_name(user_id):
    profile = db.session.get(Profile, user_id)
    if profile:
        return profile.full_name
    user = db.session.get(User, user_id)
    return user.email if user else None


def format_conversation(conversation, user_id):
    others = [p.user_id for p in conversation.participants if p.user_id != user_id]
    last = conversation.messages[-1] if conversation.messages else None
    return {
        'id': conversation.id,
        'participants': [{'user_id': uid, 'name': _display_name(uid)} for uid in others],
        'last_message': format_message(last) if last else None,
        'unread_count': sum(1 for m in conversation.messages if not m.is_read and m.sender_id != user_id),
        'updated_at': conversation.updated_at.isoformat()
    }


def list_conversations(user_id):
    return (Conversation.query.join(ConversationParticipant)
            .filter(ConversationParticipant.user_id == user_id)
            .order_by(Conversation.updated_at.desc()).all())


def is_participant(conversation, user_id):
    return any(p.user_id == user_id for p in conversation.participants)


def get_conversation(conversation_id, user_id):
    """Participants only. Returns (conversation, error, status)."""
    conversation = db.session.get(Conversation, conversation_id)
    if conversation is None or not is_participant(conversation, user_id):
        return None, {'message': 'Conversation not found'}, 404
    return conversation, None, 200


def find_direct_conversation(user_id, other_id):
    for conversation in list_conversations(user_id):
        members = {p.user_id for p in conversation.participants}
        if members == {user_id, other_id}:
            return conversation
    return None


def start_conversation(user_id, recipient_id, message_text=None):
    """Reuse the existing one-to-one conversation if there is one. Returns (conversation, error, status)."""
    if recipient_id == user_id:
        return None, {'message': 'You cannot message yourself'}, 400
    if db.session.get(User, recipient_id) is None:
        return None, {'message': 'Recipient not found'}, 404

    conversation = find_direct_conversation(user_id, recipient_id)
    status = 200
    if conversation is None:
        conversation = Conversation()
        db.session.add(conversation)
        db.session.flush()
        db.session.add_all([
            ConversationParticipant(conversation_id=conversation.id, user_id=user_id),
            ConversationParticipant(conversation_id=conversation.id, user_id=recipient_id)
        ])
        status = 201
        logger.info(f"User {user_id} started conversation {conversation.id} with {recipient_id}")
    if message_text:
        db.session.add(Message(conversation_id=conversation.id, sender_id=user_id, message_text=message_text))
        conversation.updated_at = utcnow()
    db.session.commit()
    return conversation, None, status


def send_message(conversation, sender_id, message_text):
    message = Message(conversation_id=conversation.id, sender_id=sender_id, message_text=message_text)
    db.session.add(message)
    conversation.updated_at = utcnow()
    db.session.commit()
    return message


def read_messages(conversation, reader_id):
    """All messages oldest first; marks those from other participants as read."""
    changed = False
    for message in conversation.messages:
        if message.sender_id != reader_id and not message.is_read:
            message.is_read = True
            changed = True
    if changed:
        db.session.commit()
    return conversation.messages
