# Runtime configuration for the Pontifex tools
#
# Values come from the environment, optionally seeded from a .env file in the
# working directory. Nothing here is mutated after import.

import os
from dataclasses import dataclass

from dotenv import load_dotenv

from errors import MalformedInputError

load_dotenv()

# Debug mode - set via environment variable
DEBUG_MODE = os.environ.get('DEBUG', 'false').lower() == 'true'

# Keystream cycles per output letter for the CLI (1 = Schneier's algorithm)
DEFAULT_ROUNDS = int(os.environ.get('PONTIFEX_ROUNDS', 1))

# Passwords with fewer letters than this trigger a weak-key warning
MIN_PASSWORD_LETTERS = int(os.environ.get('PONTIFEX_MIN_PASSWORD', 64))


@dataclass(frozen=True)
class CipherOptions:
    """
    Options for applying the keystream algorithm.

    rounds: number of full move-jokers/triple-cut/count-cut cycles performed
            before a keystream value is read off the deck. Raising it makes
            hand computation slower and breaks compatibility with the
            published test vectors, which all use 1.
    """
    rounds: int = 1

    def __post_init__(self):
        if isinstance(self.rounds, bool) or not isinstance(self.rounds, int):
            raise MalformedInputError(f"rounds must be an integer, got {self.rounds!r}")
        if self.rounds < 1:
            raise MalformedInputError(f"rounds must be at least 1, got {self.rounds}")
