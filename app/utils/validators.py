import uuid
from app.utils.errors import InvalidInput


def ensure_valid_id(value: str, label: str = "id") -> str:
    """Reject identifiers that are not canonical uuid strings before touching the store"""
    try:
        parsed = uuid.UUID(str(value))
    except (ValueError, AttributeError, TypeError):
        raise InvalidInput(f"Invalid {label}")
    if str(parsed) != str(value).lower():
        raise InvalidInput(f"Invalid {label}")
    return str(parsed)


def new_id() -> str:
    return str(uuid.uuid4())


def normalize_email(email: str) -> str:
    return email.strip().lower()
