# Error taxonomy for the Pontifex cipher
#
# MalformedInputError covers anything a caller handed us that cannot be
# parsed (key text, message frames, stream counts). InternalStateError means
# a deck is no longer a valid permutation and the algorithm cannot continue.
# Advisory conditions are logged as warnings and never raised.


class PontifexError(Exception):
    """Base class for all cipher errors"""


class MalformedInputError(PontifexError, ValueError):
    """Input that the caller may fix and retry with"""


class KeyFormatError(MalformedInputError):
    """Key text is not 54 two-digit card numbers"""


class MessageFormatError(MalformedInputError):
    """Message frame markers are missing or out of order"""


class InternalStateError(PontifexError, RuntimeError):
    """A deck invariant was violated (missing joker, card out of range)"""
