# Deck model and the Solitaire round primitives
#
# Cards are the integers 1..54. 1..52 are the ordinary cards (bridge order:
# clubs, diamonds, hearts, spades), 53 is joker A and 54 is joker B.
# All rounds mutate the Deck they are given in place and return it. Callers
# that must not disturb a key work on a scratch copy (see Deck.scratch).

import logging
from contextlib import contextmanager

from errors import InternalStateError

DECK_SIZE = 54
JOKER_A = 53
JOKER_B = 54
LAST_INDEX = DECK_SIZE - 1

logger = logging.getLogger(__name__)


def is_letter(ch: str) -> bool:
    """ASCII letters only - everything else is dropped from messages and passwords"""
    return ch.isascii() and ch.isalpha()


def letter_to_card(ch: str) -> int:
    """A/a -> 1 ... Z/z -> 26"""
    if not is_letter(ch):
        raise ValueError(f"not an ASCII letter: {ch!r}")
    return ord(ch.upper()) - 0x40


def card_to_letter(card: int) -> str:
    """
    1..26 -> A..Z and 27..52 -> A..Z again (the second half of the deck
    repeats the alphabet). Jokers have no letter.
    """
    if not (1 <= card <= 52):
        raise InternalStateError(f"card {card} has no letter representation")
    return chr((card - 26 if card > 26 else card) + 0x40)


class Deck:
    """
    A fixed-length, exclusively owned sequence of 54 cards.

    A Deck built from parsed key text may contain duplicates (the parser only
    warns about them); use check() or is_permutation() before trusting it.
    The storage is never shared: copy() and scratch() always allocate.
    """

    __slots__ = ('_cards',)

    def __init__(self, cards):
        cards = list(cards)
        if len(cards) != DECK_SIZE:
            raise ValueError(f"a deck holds exactly {DECK_SIZE} cards, got {len(cards)}")
        for card in cards:
            if isinstance(card, bool) or not isinstance(card, int) or not (1 <= card <= DECK_SIZE):
                raise ValueError(f"card must be in [1..{DECK_SIZE}], got {card!r}")
        self._cards = cards

    @classmethod
    def identity(cls):
        """Unkeyed deck: card i+1 at index i"""
        return cls(range(1, DECK_SIZE + 1))

    def __len__(self):
        return DECK_SIZE

    def __getitem__(self, index):
        return self._cards[index]

    def __iter__(self):
        return iter(tuple(self._cards))

    def __eq__(self, other):
        if isinstance(other, Deck):
            return self._cards == other._cards
        if isinstance(other, (list, tuple)):
            return self._cards == list(other)
        return NotImplemented

    def __repr__(self):
        return f"Deck({self._cards!r})"

    def cards(self) -> tuple:
        return tuple(self._cards)

    def index(self, card: int) -> int:
        """Position of card, or InternalStateError if it is not in the deck"""
        try:
            return self._cards.index(card)
        except ValueError:
            raise InternalStateError(f"could not locate card {card} in the deck") from None

    def is_permutation(self) -> bool:
        return sorted(self._cards) == list(range(1, DECK_SIZE + 1))

    def check(self):
        if not self.is_permutation():
            raise InternalStateError("deck is not a permutation of 1..54")
        return self

    def copy(self):
        return Deck(self._cards)

    def wipe(self):
        """Overwrite every slot with zero. The deck is unusable afterwards."""
        for i in range(len(self._cards)):
            self._cards[i] = 0

    @contextmanager
    def scratch(self):
        """
        Yield a private working copy of this deck and wipe it on exit,
        whether the block returns or raises.
        """
        work = self.copy()
        try:
            yield work
        finally:
            work.wipe()


# ============================================================================
# ROUNDS
# ============================================================================

def _move(cards, old, new):
    """Take the card at old out and reinsert it at new, shifting the cards between"""
    if old != new:
        cards.insert(new, cards.pop(old))


def move_jokers(deck, log=None):
    """
    Round 1: joker A one card down, joker B two cards down.

    A joker at the bottom wraps to index 1 (below the top card), never to
    index 0. B's second step starts from where its first step left it.
    """
    log = log or logger
    cards = deck._cards

    old = deck.index(JOKER_A)
    new = (old % 53) + 1
    log.debug("Joker A from %i to %i.", old, new)
    _move(cards, old, new)

    old = deck.index(JOKER_B)
    new = (old % 53) + 1
    new = (new % 53) + 1
    log.debug("Joker B from %i to %i.", old, new)
    _move(cards, old, new)

    return deck


def triple_cut(deck, log=None):
    """
    Round 2: swap the cards above the first joker with the cards below the
    second joker. The jokers and everything between them stay in place
    relative to each other.
    """
    log = log or logger
    ja = deck.index(JOKER_A)
    jb = deck.index(JOKER_B)
    j1, j2 = min(ja, jb), max(ja, jb)

    cards = deck._cards
    top, middle, bottom = cards[:j1], cards[j1:j2 + 1], cards[j2 + 1:]
    log.debug("Triple cut: j1 %i, j2 %i, lengths %i, %i, %i.",
              j1, j2, len(top), len(middle), len(bottom))
    cards[:] = bottom + middle + top
    return deck


def count_cut(deck, count=None, log=None):
    """
    Round 3: cut `count` cards off the top and put them back just above the
    bottom card. The bottom card never moves.

    count defaults to the value of the bottom card; key derivation passes the
    password letter instead. Both jokers count as 53. Card values are 1-based
    while indices are 0-based, so cards[count:53] is exactly the block that
    moves to the front.
    """
    log = log or logger
    cards = deck._cards
    if count is None:
        count = cards[LAST_INDEX]
    if not (1 <= count <= DECK_SIZE):
        raise InternalStateError(f"count cut value out of range: {count}")
    count = min(count, JOKER_A)

    log.debug("Count cut: moving %i cards from the top to position %i.", count, 53 - count)
    cards[:] = cards[count:LAST_INDEX] + cards[:count] + cards[LAST_INDEX:]
    return deck


def relocate_jokers(deck, log=None):
    """
    Optional key-strengthening step: joker A ends at the index named by the
    second-to-last card and joker B at the index named by the last card
    (joker values count as 53). Both targets are read before anything moves.

    A is moved first, then B. When B's move passes over A, A slides one slot
    off its target and is shifted back, so both jokers end where the two
    bottom cards said. The targets only coincide when the jokers are the two
    bottom cards; then B takes the bottom and A sits directly above it.
    """
    log = log or logger
    cards = deck._cards
    target_a = min(cards[LAST_INDEX - 1], JOKER_A)
    target_b = min(cards[LAST_INDEX], JOKER_A)

    old_a = deck.index(JOKER_A)
    log.debug("Relocate joker A from %i to %i.", old_a, target_a)
    _move(cards, old_a, target_a)

    old_b = deck.index(JOKER_B)
    log.debug("Relocate joker B from %i to %i.", old_b, target_b)
    _move(cards, old_b, target_b)

    if target_a != target_b:
        shifted_a = deck.index(JOKER_A)
        if shifted_a != target_a:
            log.debug("Joker B passed joker A, shifting A back from %i to %i.", shifted_a, target_a)
            _move(cards, shifted_a, target_a)

    return deck
