import uuid
from datetime import datetime, timezone


def new_id():
    return str(uuid.uuid4())


def utcnow():
    """Naive UTC timestamp, the form stored in every DateTime column."""
    return datetime.now(timezone.utc).replace(tzinfo=None)


def enum_values(enum_cls):
    # persist the lowercase values ('cattle'), not the member names
    return [member.value for member in enum_cls]
