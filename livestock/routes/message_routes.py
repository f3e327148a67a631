import logging
from flask import request
from flask_restx import Namespace, Resource, fields
from sqlalchemy.exc import SQLAlchemyError
from livestock import db
from livestock.schemas.message_schema import ConversationStartSchema, MessageSchema, AiChatSchema
from livestock.services import message_service, ai_chat_service
from livestock.utils.session import current_session
from livestock.utils.util import login_required
from livestock.utils.validation import validate

logger = logging.getLogger(__name__)

message_ns = Namespace('messages', description='Direct messages', path='/messages')
ai_chat_ns = Namespace('ai-chat', description='AI veterinary assistant', path='/ai-chat')

conversation_model = message_ns.model('ConversationStart', {
    'recipient_id': fields.String(required=True),
    'message_text': fields.String(description='Optional first message')
})

message_model = message_ns.model('Message', {
    'message_text': fields.String(required=True)
})

ai_chat_model = ai_chat_ns.model('AiChat', {
    'message': fields.String(required=True, description='Question for the assistant'),
    'symptoms': fields.String(),
    'animal_id': fields.String(description='Own animal the question is about')
})


@message_ns.route('/conversations')
class ConversationList(Resource):
    @login_required
    @message_ns.doc(security='BearerAuth')
    def get(self):
        """Own conversations with their last message"""
        user_id = current_session().user_id
        try:
            conversations = message_service.list_conversations(user_id)
            return [message_service.format_conversation(c, user_id) for c in conversations], 200
        except SQLAlchemyError as e:
            logger.error(f"Error fetching conversations for user {user_id}: {e}")
            return {'message': 'Error fetching conversations', 'error': str(e)}, 500

    @login_required
    @message_ns.expect(conversation_model)
    @message_ns.doc(security='BearerAuth')
    def post(self):
        """Start (or reopen) a conversation with another user"""
        data = validate(ConversationStartSchema, request.get_json(silent=True))
        user_id = current_session().user_id
        try:
            conversation, error, status = message_service.start_conversation(
                user_id, data['recipient_id'], data.get('message_text'))
            if error:
                return error, status
            return message_service.format_conversation(conversation, user_id), status
        except SQLAlchemyError as e:
            db.session.rollback()
            logger.error(f"Error starting conversation for user {user_id}: {e}")
            return {'message': 'Error starting conversation', 'error': str(e)}, 500


@message_ns.route('/conversations/<string:conversation_id>')
class ConversationMessages(Resource):
    @login_required
    @message_ns.doc(security='BearerAuth')
    def get(self, conversation_id):
        """Messages in a conversation, oldest first"""
        user_id = current_session().user_id
        conversation, error, status = message_service.get_conversation(conversation_id, user_id)
        if error:
            return error, status
        try:
            messages = message_service.read_messages(conversation, user_id)
            return [message_service.format_message(m) for m in messages], 200
        except SQLAlchemyError as e:
            db.session.rollback()
            logger.error(f"Error reading conversation {conversation_id}: {e}")
            return {'message': 'Error fetching messages', 'error': str(e)}, 500

    @login_required
    @message_ns.expect(message_model)
    @message_ns.doc(security='BearerAuth')
    def post(self, conversation_id):
        """Send a message"""
        user_id = current_session().user_id
        conversation, error, status = message_service.get_conversation(conversation_id, user_id)
        if error:
            return error, status
        data = validate(MessageSchema, request.get_json(silent=True))
        try:
            message = message_service.send_message(conversation, user_id, data['message_text'])
            return message_service.format_message(message), 201
        except SQLAlchemyError as e:
            db.session.rollback()
            logger.error(f"Error sending message in conversation {conversation_id}: {e}")
            return {'message': 'Error sending message', 'error': str(e)}, 500


@ai_chat_ns.route('')
class AiChat(Resource):
    @login_required
    @ai_chat_ns.expect(ai_chat_model)
    @ai_chat_ns.doc(security='BearerAuth')
    def post(self):
        """Ask the AI assistant"""
        data = validate(AiChatSchema, request.get_json(silent=True))
        user_id = current_session().user_id
        try:
            entry, error, status = ai_chat_service.ask(user_id, data)
            if error:
                return error, status
            return ai_chat_service.format_chat_message(entry), 201
        except SQLAlchemyError as e:
            db.session.rollback()
            logger.error(f"Error saving AI chat for user {user_id}: {e}")
            return {'message': 'Error saving chat message', 'error': str(e)}, 500


@ai_chat_ns.route('/history')
class AiChatHistory(Resource):
    @login_required
    @ai_chat_ns.doc(security='BearerAuth')
    def get(self):
        """Own conversation with the assistant"""
        entries = ai_chat_service.history(current_session().user_id)
        return [ai_chat_service.format_chat_message(e) for e in entries], 200
