"""
Identifier and Card Number Generators

Token and record IDs come from uuid4. Card numbers and CVVs come from a
non-cryptographic PRNG re-seeded from the clock on every call; that source is
isolated here so a stronger one can be swapped in without touching callers.
"""

import random
import time
import uuid


def generate_id() -> str:
    """Generate a new opaque record ID"""
    return str(uuid.uuid4())


class TokenGenerator:
    """Mints opaque session tokens (122 bits of randomness)"""

    def new_token(self) -> str:
        return str(uuid.uuid4())


class CardNumberGenerator:
    """
    Generates virtual card numbers and CVVs.

    Numbers are a fixed 4-digit prefix followed by 12 random digits; CVVs are
    3 random digits. Not suitable for real card issuance.
    """

    def __init__(self, prefix: str = "4532"):
        self.prefix = prefix

    def _random_digits(self, n: int) -> str:
        rng = random.Random(time.time_ns())
        return "".join(str(rng.randrange(10)) for _ in range(n))

    def card_number(self) -> str:
        return self.prefix + self._random_digits(16 - len(self.prefix))

    def cvv(self) -> str:
        return self._random_digits(3)
