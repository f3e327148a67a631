from livestock import db
from livestock.models.base_model import new_id, utcnow


class Conversation(db.Model):
    __tablename__ = 'conversations'
    id = db.Column(db.String(36), primary_key=True, default=new_id)
    created_at = db.Column(db.DateTime, nullable=False, default=utcnow)
    updated_at = db.Column(db.DateTime, nullable=False, default=utcnow, onupdate=utcnow)
    participants = db.relationship('ConversationParticipant', backref='conversation', lazy=True,
                                   cascade='all, delete-orphan')
    messages = db.relationship('Message', backref='conversation', lazy=True, cascade='all, delete-orphan',
                               order_by='Message.created_at')


class ConversationParticipant(db.Model):
    __tablename__ = 'conversation_participants'
    __table_args__ = (db.UniqueConstraint('conversation_id', 'user_id', name='uq_conversation_participant'),)
    id = db.Column(db.String(36), primary_key=True, default=new_id)
    conversation_id = db.Column(db.String(36), db.ForeignKey('conversations.id'), nullable=False, index=True)
    user_id = db.Column(db.String(36), db.ForeignKey('users.id'), nullable=False, index=True)
    joined_at = db.Column(db.DateTime, nullable=False, default=utcnow)


class Message(db.Model):
    __tablename__ = 'messages'
    id = db.Column(db.String(36), primary_key=True, default=new_id)
    conversation_id = db.Column(db.String(36), db.ForeignKey('conversations.id'), nullable=False, index=True)
    sender_id = db.Column(db.String(36), db.ForeignKey('users.id'), nullable=False)
    message_text = db.Column(db.Text, nullable=False)
    is_read = db.Column(db.Boolean, nullable=False, default=False)
    created_at = db.Column(db.DateTime, nullable=False, default=utcnow)

    def __repr__(self):
        return f'<Message {self.id} from User {self.sender_id}>'


class AiChatMessage(db.Model):
    __tablename__ = 'ai_chat_history'
    id = db.Column(db.String(36), primary_key=True, default=new_id)
    user_id = db.Column(db.String(36), db.ForeignKey('users.id'), nullable=False, index=True)
    animal_id = db.Column(db.String(36), db.ForeignKey('animals.id', ondelete='SET NULL'), nullable=True)
    message = db.Column(db.Text, nullable=False)
    symptoms = db.Column(db.Text)
    response = db.Column(db.Text)
    created_at = db.Column(db.DateTime, nullable=False, default=utcnow)

    def __repr__(self):
        return f'<AiChatMessage {self.id} from User {self.user_id}>'
