"""
Identifier normalization.

Ids reach the core from URLs, JSON bodies, JWT claims and QR payloads in
whatever case and format the caller used. They are parsed into
``uuid.UUID`` once, at the boundary, and compared as UUIDs from then on.
"""

import uuid
from typing import Optional, Union

from .exceptions import InvalidIdentifierError

IdLike = Union[str, uuid.UUID]


def normalize_id(value: IdLike) -> uuid.UUID:
    """
    Parse an id into a UUID.

    Accepts UUID instances and strings in any case, with or without
    hyphens or braces.

    Raises:
        InvalidIdentifierError: If the value is not a valid UUID
    """
    if isinstance(value, uuid.UUID):
        return value
    if not isinstance(value, str):
        raise InvalidIdentifierError(f"Invalid identifier: {value!r}")
    try:
        return uuid.UUID(value.strip())
    except ValueError:
        raise InvalidIdentifierError(f"Invalid identifier: {value!r}")


def normalize_optional_id(value: Optional[IdLike]) -> Optional[uuid.UUID]:
    if value is None or value == '':
        return None
    return normalize_id(value)
