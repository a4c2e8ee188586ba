"""Token estimation strategy used for chunk budgeting."""

import math
from abc import ABC, abstractmethod


class TokenEstimator(ABC):
    """Port for counting (or approximating) tokens in a string."""

    @abstractmethod
    def estimate(self, text: str) -> int:
        """Return the token count for ``text``. Must be 0 for ``""``."""
        ...


class CharacterTokenEstimator(TokenEstimator):
    """Rough approximation: ~4 characters per token for English text."""

    def __init__(self, chars_per_token: int = 4):
        self._chars_per_token = chars_per_token

    def estimate(self, text: str) -> int:
        return math.ceil(len(text) / self._chars_per_token)
