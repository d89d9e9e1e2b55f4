"""Document ID generation with collision checks."""

import secrets
from typing import Callable

from ..lib.config import ID_ALPHABET, ID_LENGTH, ID_MAX_ATTEMPTS
from ..lib.exceptions import ExhaustedError
from ..lib.logging import get_logger

logger = get_logger(__name__)


class IdGenerator:
    """
    Generates short random document IDs.

    IDs are drawn from a cryptographically secure source so they cannot be
    predicted or enumerated from the time of the save.
    """

    def __init__(
        self,
        length: int = ID_LENGTH,
        alphabet: str = ID_ALPHABET,
        max_attempts: int = ID_MAX_ATTEMPTS,
    ):
        """
        Initialize ID generator.

        Args:
            length: Number of characters per ID
            alphabet: Characters to draw from
            max_attempts: Collision retries before giving up
        """
        self.length = length
        self.alphabet = alphabet
        self.max_attempts = max_attempts

    def new_candidate(self) -> str:
        return "".join(secrets.choice(self.alphabet) for _ in range(self.length))

    def generate(self, exists_check: Callable[[str], bool]) -> str:
        """
        Generate an ID not yet used by a stored record.

        Args:
            exists_check: Returns True if a record already uses the ID

        Returns:
            Unused document ID

        Raises:
            ExhaustedError: If every attempt collided
        """
        for attempt in range(1, self.max_attempts + 1):
            candidate = self.new_candidate()
            if not exists_check(candidate):
                return candidate
            logger.warning("document_id_collision", attempt=attempt, max_attempts=self.max_attempts)

        logger.error("document_id_exhausted", max_attempts=self.max_attempts)
        raise ExhaustedError(f"Failed to generate unique ID after {self.max_attempts} attempts")


def create_id_generator(max_attempts: int = ID_MAX_ATTEMPTS) -> IdGenerator:
    """
    Create an ID generator instance.

    Args:
        max_attempts: Collision retries before giving up

    Returns:
        IdGenerator instance
    """
    return IdGenerator(max_attempts=max_attempts)
