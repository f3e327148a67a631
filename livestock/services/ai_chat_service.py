# AI veterinary assistant
import logging
from flask import current_app
from openai import OpenAI, OpenAIError
from livestock import db
from livestock.models import AiChatMessage, Animal

logger = logging.getLogger(__name__)

SYSTEM_PROMPT = (
    "You are a veterinary assistant for smallholder livestock farmers. "
    "Give practical, friendly first-aid and husbandry advice, and recommend "
    "contacting a veterinary officer for anything serious."
)

STUB_REPLY = (
    "Thank you for describing the problem. Keep the animal separated, make sure it has "
    "clean water and shade, and contact your local veterinary officer if the symptoms "
    "persist or get worse."
)


def build_prompt(message, symptoms=None, animal=None):
    parts = []
    if animal is not None:
        parts.append(f"Animal: {animal.species.value}"
                     + (f", breed {animal.breed}" if animal.breed else "")
                     + f", health status {animal.health_status.value}.")
    if symptoms:
        parts.append(f"Observed symptoms: {symptoms}.")
    parts.append(message)
    return "\n".join(parts)


def get_ai_reply(message, symptoms=None, animal=None):
    """Reply from the OpenAI chat API, or the fixed reply when no key is configured or the call fails."""
    api_key = current_app.config.get('OPENAI_API_KEY')
    if not api_key:
        return STUB_REPLY
    try:
        client = OpenAI(api_key=api_key)
        response = client.chat.completions.create(
            model=current_app.config['OPENAI_MODEL'],
            messages=[
                {"role": "system", "content": SYSTEM_PROMPT},
                {"role": "user", "content": build_prompt(message, symptoms, animal)}
            ],
            temperature=0.7,
            max_tokens=500
        )
        return response.choices[0].message.content
    except OpenAIError as e:
        logger.error(f"OpenAI error: {e}")
        return STUB_REPLY


def format_chat_message(entry):
    return {
        'id': entry.id,
        'animal_id': entry.animal_id,
        'message': entry.message,
        'symptoms': entry.symptoms,
        'response': entry.response,
        'created_at': entry.created_at.isoformat()
    }


def ask(user_id, data):
    """Returns (entry, error, status)."""
    animal = None
    if data.get('animal_id'):
        animal = db.session.get(Animal, data['animal_id'])
        if animal is None or animal.owner_id != user_id:
            return None, {'message': 'Animal not found'}, 404
    reply = get_ai_reply(data['message'], data.get('symptoms'), animal)
    entry = AiChatMessage(user_id=user_id, animal_id=data.get('animal_id'), message=data['message'],
                          symptoms=data.get('symptoms'), response=reply)
    db.session.add(entry)
    db.session.commit()
    return entry, None, 201


def history(user_id, limit=50):
    """The latest ``limit`` exchanges, oldest first."""
    latest = (AiChatMessage.query.filter_by(user_id=user_id)
              .order_by(AiChatMessage.created_at.desc()).limit(limit).all())
    return list(reversed(latest))
