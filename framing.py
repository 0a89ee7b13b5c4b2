# Text formats for messages and keys
#
# Messages travel as 5-letter groups, 8 groups per line, optionally framed by
# BEGIN/END PONTIFEX MESSAGE marker lines. Keys travel as 54 two-digit card
# numbers, optionally framed by BEGIN/END PONTIFEX KEY marker lines.

import logging
from collections import Counter

from deck import DECK_SIZE, Deck, is_letter
from errors import KeyFormatError, MessageFormatError

MESSAGE_BEGIN = '-----BEGIN PONTIFEX MESSAGE-----'
MESSAGE_END = '-----END PONTIFEX MESSAGE-----'
KEY_BEGIN = '-----BEGIN PONTIFEX KEY-----'
KEY_END = '-----END PONTIFEX KEY-----'

GROUP_SIZE = 5
GROUPS_PER_LINE = 8
LINE_SIZE = GROUP_SIZE * GROUPS_PER_LINE

# Only these are skipped around a key; anything else after it is reported
KEY_WHITESPACE = ' \r\n'

logger = logging.getLogger(__name__)


def group_letters(text: str) -> str:
    """Lay out text in groups of 5, 8 groups per line. Every line ends with a newline."""
    lines = []
    for start in range(0, len(text), LINE_SIZE):
        line = text[start:start + LINE_SIZE]
        lines.append(' '.join(line[i:i + GROUP_SIZE] for i in range(0, len(line), GROUP_SIZE)))
    return ''.join(line + '\n' for line in lines)


def only_letters(text: str) -> str:
    """Upper-cased ASCII letters of text, everything else dropped"""
    return ''.join(ch.upper() for ch in text if is_letter(ch))


def format_message(ciphertext: str, raw: bool = False) -> str:
    body = group_letters(ciphertext)
    if raw:
        return body
    return f"{MESSAGE_BEGIN}\n\n{body}\n{MESSAGE_END}\n"


def parse_message(text: str, raw: bool = False) -> str:
    """
    Extract the ciphertext letters from a message.

    In framed mode the letters are taken from between the begin marker and
    the first end marker after it; a missing marker is a MessageFormatError.
    An empty frame is a valid, empty message.
    """
    if raw:
        return only_letters(text)

    begin = text.find(MESSAGE_BEGIN)
    if begin == -1:
        raise MessageFormatError("Message begin marker not found")

    start = begin + len(MESSAGE_BEGIN)
    end = text.find(MESSAGE_END, start)
    if end == -1:
        if MESSAGE_END in text:
            raise MessageFormatError("Message end marker precedes the begin marker")
        raise MessageFormatError("Message end marker not found")

    return only_letters(text[start:end])


def format_key(key, raw: bool = True) -> str:
    digits = ''.join(f"{card:02d}" for card in key)
    if raw:
        return digits + '\n'
    return f"{KEY_BEGIN}\n{digits}\n{KEY_END}\n"


def parse_key(text: str, log=None) -> Deck:
    """
    Read a key written as 54 two-digit card numbers (01..54).

    Leading spaces and line breaks are skipped, and so are key marker lines
    if present. Anything that is not a two-digit card number, or text that
    runs out before the 54th card, is a KeyFormatError. Repeated cards and
    trailing data only produce warnings; the key is returned as read.
    """
    log = log or logger

    begin = text.find(KEY_BEGIN)
    if begin != -1:
        start = begin + len(KEY_BEGIN)
        end = text.find(KEY_END, start)
        if end == -1:
            raise KeyFormatError("Key end marker not found")
        text = text[start:end]

    body = text.lstrip(KEY_WHITESPACE)

    cards = []
    for i in range(DECK_SIZE):
        field = body[i * 2:i * 2 + 2]
        if len(field) < 2:
            raise KeyFormatError(f"Key too short! It ends at card #{i + 1}.")
        if not (field.isascii() and field.isdigit()):
            raise KeyFormatError(f"Key not numeric! Bad symbol at card #{i + 1}.")

        card = int(field)
        if not (1 <= card <= DECK_SIZE):
            raise KeyFormatError(f"Invalid card number: {card}")
        cards.append(card)

    for card, count in sorted(Counter(cards).items()):
        if count > 1:
            log.warning("The card %i occurs more than once!", card)

    rest = body[DECK_SIZE * 2:].lstrip(KEY_WHITESPACE)
    if rest:
        log.warning("Data after key starting with %r. Ignoring remainder.", rest[0])

    return Deck(cards)
