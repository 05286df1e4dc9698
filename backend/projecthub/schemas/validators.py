from typing import Optional


def required_text(value: str, field: str = "title", max_length: int = 255) -> str:
    trimmed = value.strip()
    if not trimmed:
        raise ValueError(f"{field} must not be empty or contain only whitespace")
    if len(trimmed) > max_length:
        raise ValueError(f"{field} must be at most {max_length} characters long")
    return trimmed


def optional_text(value: Optional[str]) -> Optional[str]:
    if value is None:
        return None
    return value.strip()
