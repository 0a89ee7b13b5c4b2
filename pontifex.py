# Solitaire (Pontifex) stream cipher
#
# Bruce Schneier's hand cipher: the keystream comes from repeatedly
# permuting a 54-card deck, and each message letter is shifted by one
# keystream value mod 26. Keys are never modified; every operation works on
# a scratch copy that is wiped before the call returns or raises.

import logging

from deck import (
    Deck,
    JOKER_A,
    card_to_letter,
    count_cut,
    is_letter,
    letter_to_card,
    move_jokers,
    relocate_jokers as _relocate_jokers,
    triple_cut,
)
from errors import MalformedInputError
from settings import MIN_PASSWORD_LETTERS, CipherOptions

PAD_LETTER = 'X'
GROUP_SIZE = 5

logger = logging.getLogger(__name__)


# ============================================================================
# KEYSTREAM
# ============================================================================

def next_card(deck: Deck, rounds: int = 1, log=None) -> int:
    """
    Advance the deck and return the next keystream value (1..52).

    One draw performs `rounds` full cycles of move-jokers, triple-cut and
    count-cut, then uses the top card's value as an index into the deck.
    If that index lands on a joker the draw produces nothing and the cycle
    runs again.
    """
    log = log or logger
    while True:
        for _ in range(rounds):
            move_jokers(deck, log)
            triple_cut(deck, log)
            count_cut(deck, log=log)

        # both jokers have the count value of 53
        offset = min(deck[0], JOKER_A)
        card = deck[offset]
        if card <= 52:
            log.debug("Output: top card %i, taking %i from index %i.", deck[0], card, offset)
            return card
        log.debug("Skipping output: %i", card)


def substitute(message_letter: int, keystream: int, decrypt: bool = False) -> int:
    """
    Shift one message letter (1..26) by one keystream value (1..52).
    Letters are 1-based, so a remainder of 0 stands for Z (26).
    """
    if not (1 <= message_letter <= 26):
        raise ValueError(f"message letter must be in [1..26], got {message_letter}")
    if not (1 <= keystream <= 52):
        raise ValueError(f"keystream value must be in [1..52], got {keystream}")

    if decrypt:
        result = (52 + message_letter - keystream) % 26
    else:
        result = (message_letter + keystream) % 26
    return result or 26


# ============================================================================
# CIPHER
# ============================================================================

def _cipher(key: Deck, message: str, length, options, decrypt: bool, log) -> str:
    log = log or logger
    options = options or CipherOptions()
    if length is not None:
        if isinstance(length, bool) or not isinstance(length, int) or length < 0:
            raise MalformedInputError(f"message length must be a non-negative integer, got {length!r}")
        message = message[:length]

    output = []
    with key.scratch() as deck:
        for ch in message:
            if not is_letter(ch):
                continue
            k = next_card(deck, options.rounds, log)
            output.append(substitute(letter_to_card(ch), k, decrypt))

        if not output:
            log.warning("Empty input, nothing to %s.", "decrypt" if decrypt else "encrypt")
            return ''

        # padding with X
        pad = letter_to_card(PAD_LETTER)
        while len(output) % GROUP_SIZE:
            k = next_card(deck, options.rounds, log)
            output.append(substitute(pad, k, decrypt))

    return ''.join(chr(c + 0x40) for c in output)


def encrypt(key: Deck, message: str, length: int = None, options: CipherOptions = None, log=None) -> str:
    """
    Encrypt the letters of message with key.

    Non-letters are skipped, letters are case-folded. The ciphertext is
    padded with encrypted X's to a multiple of 5 letters. Only the first
    `length` characters of message are considered when length is given.
    """
    return _cipher(key, message, length, options, False, log)


def decrypt(key: Deck, message: str, length: int = None, options: CipherOptions = None, log=None) -> str:
    """
    Decrypt the letters of message with key.

    Padding is not stripped: a padded ciphertext decrypts to the original
    letters followed by literal X's.
    """
    return _cipher(key, message, length, options, True, log)


def stream(key: Deck, count: int, options: CipherOptions = None, log=None) -> str:
    """Return the first `count` keystream values of key as letters A..Z"""
    if isinstance(count, bool) or not isinstance(count, int) or count < 0:
        raise MalformedInputError(f"stream length must be a non-negative integer, got {count!r}")
    log = log or logger
    options = options or CipherOptions()

    letters = []
    with key.scratch() as deck:
        for _ in range(count):
            letters.append(card_to_letter(next_card(deck, options.rounds, log)))
    return ''.join(letters)


# ============================================================================
# KEY DERIVATION
# ============================================================================

def password_letters(password: str) -> int:
    """Number of password characters that key derivation actually consumes"""
    return sum(1 for ch in password if is_letter(ch))


def keygen(password: str, relocate_jokers: bool = False, log=None, min_letters: int = None) -> Deck:
    """
    Derive a key from a passphrase.

    Starting from the unkeyed deck, every letter of the password runs
    move-jokers, triple-cut, a normal count cut, and a second count cut by
    the letter's value (A=1 .. Z=26). With relocate_jokers the jokers are
    then placed by the values of the two bottom cards.
    Non-letters are skipped. Short passwords only produce a warning.
    """
    log = log or logger
    if min_letters is None:
        min_letters = MIN_PASSWORD_LETTERS

    key = Deck.identity()
    consumed = 0
    for ch in password:
        if not is_letter(ch):
            continue
        consumed += 1
        move_jokers(key, log)
        triple_cut(key, log)
        count_cut(key, log=log)
        count_cut(key, letter_to_card(ch), log)
        if relocate_jokers:
            _relocate_jokers(key, log)

    if consumed < min_letters:
        log.warning("Potentially weak password! At least %i letters are recommended, got %i.",
                    min_letters, consumed)
    return key.check()
