"""ID generation and validation.

Every field, group, cross-validator, and form gets a random 16-hex-char
identifier at creation time.

INVARIANT: IDs are permanent. Once assigned, an entity's ID never changes
(patches that try to overwrite ``id`` are ignored by the store).
"""

from __future__ import annotations

import re
import secrets

ID_LENGTH = 16
ID_PATTERN: re.Pattern[str] = re.compile(r"^[0-9a-f]{16}$")


def generate_id() -> str:
    """Return a fresh random identifier."""
    return secrets.token_hex(ID_LENGTH // 2)


def validate_id(entity_id: str) -> bool:
    """Check whether *entity_id* looks like an ID produced by :func:`generate_id`."""
    return ID_PATTERN.match(entity_id) is not None
