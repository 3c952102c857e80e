from carservice.errors import ValidationError


def require_text(value):
    """Reject empty or whitespace-only strings."""
    if value is None or not str(value).strip():
        raise ValueError("must not be empty")
    return value


def require_fields(fields: dict, message: str = None):
    """Raise ``ValidationError`` unless every value in ``fields`` is present and non-blank."""
    missing = [name for name, value in fields.items() if value is None or (isinstance(value, str) and not value.strip())]
    if missing:
        raise ValidationError(message or "All required fields must be provided")
