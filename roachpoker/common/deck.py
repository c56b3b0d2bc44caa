"""
This module contains the Deck class, which represents the 24-card creature deck,
and the helpers that shuffle and deal it.

>>> deck = Deck()
>>> deck.size
24
>>> dealt = deck.shuffled(seed=7).deal()
>>> len(dealt.hand1), len(dealt.hand2), len(dealt.hidden)
(9, 9, 6)
"""

import random
from dataclasses import dataclass
from typing import List, Optional, Tuple, Union

from roachpoker.common.card import CARDS_PER_CREATURE, Card, CreatureType
from roachpoker.errors import DeckSizeMismatchError

TOTAL_CARDS = len(CreatureType) * CARDS_PER_CREATURE
CARDS_PER_PLAYER = 9
CARDS_HIDDEN = TOTAL_CARDS - CARDS_PER_PLAYER * 2


@dataclass(frozen=True)
class DealResult:
    """
    The three piles produced by a deal.

    Attributes:
        hand1: Cards for the first participant
        hand2: Cards for the second participant
        hidden: Cards set aside face down for the whole game
    """

    hand1: Tuple[Card, ...]
    hand2: Tuple[Card, ...]
    hidden: Tuple[Card, ...]


class Deck:
    """
    A class representing the Cockroach Poker deck.
    """

    # Precompute the canonical deck
    _default_deck = [
        Card.create(creature, number)
        for creature in CreatureType
        for number in range(1, CARDS_PER_CREATURE + 1)
    ]

    def __init__(self, cards: Union[List[Card], None] = None):
        """
        Initialize a Deck instance.

        :param cards: A list of Card instances to populate the deck (optional).
                      If not provided, the canonical 24-card deck is built.
        >>> Deck().size
        24
        """
        if cards is None:
            self.cards: List[Card] = self.initialize_default_deck()
        else:
            self.cards = list(cards)

    def initialize_default_deck(self) -> List[Card]:
        """
        Construct the canonical deck: every creature type, cards 1 to 6.

        :return: A list of Card instances in a fixed order.
        """
        return self._default_deck.copy()

    def shuffled(
        self, seed: Optional[int] = None, rng: Optional[random.Random] = None
    ) -> "Deck":
        """
        Return a new deck holding a uniform random permutation of this one.

        The deck itself is left untouched. Pass ``seed`` or ``rng`` to make the
        permutation reproducible.

        :param seed: Seed for a fresh random.Random (ignored when rng is given)
        :param rng: Random source to draw from
        :return: A new Deck instance.
        >>> deck = Deck()
        >>> deck.shuffled(seed=1).cards == deck.shuffled(seed=1).cards
        True
        """
        source = rng if rng is not None else random.Random(seed)
        cards = list(self.cards)
        # Fisher-Yates, walking down from the last position
        for i in range(len(cards) - 1, 0, -1):
            j = source.randint(0, i)
            cards[i], cards[j] = cards[j], cards[i]
        return Deck(cards)

    def deal(self) -> DealResult:
        """
        Split the deck into two hands and the hidden pile.

        Positions [0, 9) go to the first hand, [9, 18) to the second and
        [18, 24) stay hidden.

        :raises DeckSizeMismatchError: if the deck does not hold 24 cards.
        """
        if len(self.cards) != TOTAL_CARDS:
            raise DeckSizeMismatchError(
                f"Deck must contain exactly {TOTAL_CARDS} cards, got {len(self.cards)}"
            )
        return DealResult(
            hand1=tuple(self.cards[:CARDS_PER_PLAYER]),
            hand2=tuple(self.cards[CARDS_PER_PLAYER : CARDS_PER_PLAYER * 2]),
            hidden=tuple(self.cards[CARDS_PER_PLAYER * 2 :]),
        )

    @property
    def size(self) -> int:
        """
        Return the number of cards in the deck.
        """
        return len(self.cards)

    def is_canonical(self) -> bool:
        """Check that the deck holds exactly the 24 canonical cards."""
        return len(self.cards) == TOTAL_CARDS and set(self.cards) == set(
            self._default_deck
        )

    def __repr__(self) -> str:
        return f"Deck({[card.id for card in self.cards]})"

    def __str__(self) -> str:
        return f"Deck of {len(self.cards)} cards"


def build_deck() -> Deck:
    """Build the canonical 24-card deck."""
    return Deck()


def shuffle(
    deck: Deck, rng_seed: Optional[int] = None, rng: Optional[random.Random] = None
) -> Deck:
    """Return a shuffled copy of ``deck``."""
    return deck.shuffled(seed=rng_seed, rng=rng)


def deal(deck: Deck) -> DealResult:
    """Deal ``deck`` into two hands and the hidden pile."""
    return deck.deal()
