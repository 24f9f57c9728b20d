from __future__ import annotations

import secrets
import string
from typing import Callable

_ALPHABET = string.ascii_uppercase + string.digits


def random_code(length: int) -> str:
    """Upper-case alphanumeric code from a CSPRNG."""
    return "".join(secrets.choice(_ALPHABET) for _ in range(length))


def generate_unique_code(length: int, exists: Callable[[str], bool], *, attempts: int = 20) -> str:
    for _ in range(attempts):
        code = random_code(length)
        if not exists(code):
            return code
    raise RuntimeError(f"Could not generate a unique {length}-character code")
