"""
This module defines the `CreatureType` and `Card` classes, which are used to
represent the creature cards of Cockroach Poker.

- `CreatureType`: An enum representing the four creatures printed on the
cards: Cockroach, Mouse, Bat and Frog.

- `Card`: An immutable value representing one physical card. A card has an
id, a creature type and a number (1-6) within its creature type.

This module is part of the `roachpoker` package.
"""

from dataclasses import dataclass
from enum import Enum, unique

CARDS_PER_CREATURE = 6


@unique
class CreatureType(Enum):
    """
    Enum for the creatures in a Cockroach Poker deck.
    """

    COCKROACH = "cockroach"
    MOUSE = "mouse"
    BAT = "bat"
    FROG = "frog"

    @property
    def display_name(self) -> str:
        """English name of the creature."""
        return self.name.capitalize()

    @property
    def japanese_name(self) -> str:
        """Japanese name of the creature, as printed on the original box."""
        return _JAPANESE_NAMES[self]

    @classmethod
    def parse(cls, value) -> "CreatureType":
        """
        Convert a value to a CreatureType.

        Accepts a CreatureType, its value ("frog") or its name ("FROG").

        >>> CreatureType.parse("Frog")
        <CreatureType.FROG: 'frog'>
        """
        if isinstance(value, cls):
            return value
        if isinstance(value, str):
            key = value.strip().lower()
            for creature in cls:
                if creature.value == key:
                    return creature
        raise ValueError(f"Invalid creature type: {value!r}")

    def __str__(self) -> str:
        return self.display_name


_JAPANESE_NAMES = {
    CreatureType.COCKROACH: "ゴキブリ",
    CreatureType.MOUSE: "ネズミ",
    CreatureType.BAT: "コウモリ",
    CreatureType.FROG: "カエル",
}


@dataclass(frozen=True)
class Card:
    """
    Class representing one creature card.

    >>> card = Card.create(CreatureType.FROG, 2)
    >>> card.id
    'frog_2'
    >>> print(card)
    Frog #2
    """

    id: str
    creature_type: CreatureType
    card_number: int

    def __post_init__(self):
        if not isinstance(self.creature_type, CreatureType):
            raise TypeError(f"Invalid creature type: {self.creature_type}")
        if not 1 <= self.card_number <= CARDS_PER_CREATURE:
            raise ValueError(f"Invalid card number: {self.card_number}")

    @classmethod
    def create(cls, creature_type: CreatureType, card_number: int) -> "Card":
        """Create a card with its canonical id."""
        return cls(
            id=f"{creature_type.value}_{card_number}",
            creature_type=creature_type,
            card_number=card_number,
        )

    @classmethod
    def from_id(cls, card_id: str) -> "Card":
        """
        Rebuild a card from its canonical id.

        >>> Card.from_id("bat_6").creature_type
        <CreatureType.BAT: 'bat'>
        """
        creature, _, number = card_id.rpartition("_")
        if not creature or not number.isdigit():
            raise ValueError(f"Invalid card id: {card_id!r}")
        return cls.create(CreatureType.parse(creature), int(number))

    def __str__(self) -> str:
        return f"{self.creature_type.display_name} #{self.card_number}"
