from __future__ import annotations

import random
import string

CODE_ALPHABET = string.ascii_uppercase + string.digits


def generate_session_code(length: int = 6, rng: random.Random | None = None) -> str:
    """Random uppercase alphanumeric session code.

    Uniqueness is not checked here; the registry retries on collision.
    """

    chooser = rng or random.SystemRandom()
    return "".join(chooser.choice(CODE_ALPHABET) for _ in range(length))


def normalize_session_code(code: str) -> str:
    return code.strip().upper()
