"""Random code generator for canonical identifiers."""

import logging
import random
import secrets
from typing import Optional

from canonid.core.codec import ALPHABET
from canonid.core.config import settings

logger = logging.getLogger(__name__)

DEFAULT_CODE_LENGTH = 8


def generate_code(
    length: int = DEFAULT_CODE_LENGTH, secure: Optional[bool] = None
) -> str:
    """Generate a random code over ALPHABET.

    Args:
        length: number of characters, 8 by default (36^8 ~ 2.8e12 codes)
        secure: use ``secrets`` instead of ``random``; defaults to the
            ``secure_codes`` setting

    Returns:
        String like "k3x9a0qz". Not unique by itself: callers must run the
        collision check before persisting.
    """
    if length < 1:
        raise ValueError(f"Code length must be positive, got {length}")
    if secure is None:
        secure = settings.secure_codes
    choice = secrets.choice if secure else random.choice
    code = "".join(choice(ALPHABET) for _ in range(length))
    logger.debug(f"Generated code of length {length} (secure={secure})")
    return code
