import uuid
from typing import Any

from projecthub.core.exceptions import InvalidArgument


def parse_identifier(value: Any, label: str = "ID") -> uuid.UUID:
    """Parse a path identifier without touching the database."""
    if isinstance(value, uuid.UUID):
        return value
    if value is None or str(value).strip() == "":
        raise InvalidArgument(f"{label} is required")
    try:
        return uuid.UUID(str(value))
    except ValueError:
        raise InvalidArgument(f"Invalid {label} format: '{value}'") from None
