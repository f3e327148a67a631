import logging
from pydantic import ValidationError

logger = logging.getLogger(__name__)


class ValidationFailure(Exception):
    """A form payload failed its schema; ``message`` is the first violation."""

    def __init__(self, message, errors=None):
        super().__init__(message)
        self.message = message
        self.errors = errors or []


def first_violation(errors):
    error = errors[0]
    if error.get('type') == 'value_error' and 'error' in error.get('ctx', {}):
        return str(error['ctx']['error'])
    field = '.'.join(str(part) for part in error.get('loc', ()))
    return f"{field}: {error['msg']}" if field else error['msg']


def validate(schema, data, partial=False):
    """Parse ``data`` with a pydantic schema or raise ValidationFailure.

    With ``partial=True`` only the fields present in ``data`` are returned.
    """
    try:
        parsed = schema.model_validate(data or {})
    except ValidationError as e:
        errors = e.errors()
        message = first_violation(errors)
        logger.info(f"{schema.__name__} rejected: {message}")
        raise ValidationFailure(message, errors)
    return parsed.model_dump(exclude_unset=partial)


def validate_changes(schema, row, data):
    """Validate an edit of ``row``: the stored values overlaid with ``data``
    must satisfy ``schema``. Only the fields present in ``data`` are returned.
    """
    data = data or {}
    if not isinstance(data, dict):
        raise ValidationFailure('Request body must be a JSON object')
    stored = {}
    for name in schema.model_fields:
        value = getattr(row, name, None)
        if value is not None:
            stored[name] = value
    parsed = validate(schema, {**stored, **data})
    return {name: value for name, value in parsed.items() if name in data}
