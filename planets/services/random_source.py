"""Seeds and random streams.

Two kinds of randomness never mix here: world shape comes from a
``random.Random`` seeded with the FNV-1a 64 hash of the run seed, while seeds,
default run names and OAuth state tokens come from ``secrets``.
"""

import logging
import random
import secrets

from planets.errors import AppError

logger = logging.getLogger(__name__)

FNV64_OFFSET_BASIS = 0xCBF29CE484222325
FNV64_PRIME = 0x100000001B3
_MASK_64 = 0xFFFFFFFFFFFFFFFF

SEED_MIN_LENGTH = 3
SEED_MAX_LENGTH = 32


def fnv1a_64(text: str) -> int:
    """Return the unsigned 64-bit FNV-1a hash of the UTF-8 bytes of ``text``."""
    h = FNV64_OFFSET_BASIS
    for byte in text.encode("utf-8"):
        h ^= byte
        h = (h * FNV64_PRIME) & _MASK_64
    return h


def _random_hex(n_bytes: int) -> str:
    try:
        return secrets.token_bytes(n_bytes).hex()
    except OSError as exc:
        logger.error("OS random source failed: %s", exc)
        raise AppError.wrap_internal("failed to read random bytes", exc)


def generate_seed() -> str:
    """16 hex characters from 8 cryptographic random bytes."""
    return _random_hex(8)


def generate_run_name() -> str:
    return _random_hex(4)


def validate_seed(seed: str) -> None:
    """Seed bounds are in UTF-8 bytes, the same bytes the hash runs over."""
    size = len(seed.encode("utf-8"))
    if size < SEED_MIN_LENGTH or size > SEED_MAX_LENGTH:
        raise AppError.validation(
            f"seed must be between {SEED_MIN_LENGTH} and {SEED_MAX_LENGTH} bytes of UTF-8"
        )


def resolve_seed(seed: str | None) -> str:
    """Return ``seed`` after validation, or a fresh one when none was supplied."""
    if not seed:
        return generate_seed()
    validate_seed(seed)
    return seed


def seeded_random(seed: str) -> random.Random:
    return random.Random(fnv1a_64(seed))
