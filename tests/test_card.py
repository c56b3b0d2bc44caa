from dataclasses import FrozenInstanceError

import pytest

from roachpoker.common.card import CARDS_PER_CREATURE, Card, CreatureType


@pytest.mark.parametrize(
    "value, expected",
    [
        ("frog", CreatureType.FROG),
        ("FROG", CreatureType.FROG),
        (" Cockroach ", CreatureType.COCKROACH),
        (CreatureType.BAT, CreatureType.BAT),
    ],
)
def test_creature_type_parse(value, expected):
    assert CreatureType.parse(value) is expected


@pytest.mark.parametrize("value", ["dragon", "", None, 3])
def test_creature_type_parse_rejects_unknown(value):
    with pytest.raises(ValueError):
        CreatureType.parse(value)


def test_creature_type_names():
    assert CreatureType.MOUSE.display_name == "Mouse"
    assert str(CreatureType.COCKROACH) == "Cockroach"
    assert CreatureType.FROG.japanese_name == "カエル"
    assert len(CreatureType) == 4


def test_card_create():
    card = Card.create(CreatureType.FROG, 2)
    assert card.id == "frog_2"
    assert card.creature_type == CreatureType.FROG
    assert card.card_number == 2


def test_card_str():
    assert str(Card.create(CreatureType.BAT, 6)) == "Bat #6"


def test_card_from_id():
    assert Card.from_id("mouse_4") == Card.create(CreatureType.MOUSE, 4)


@pytest.mark.parametrize("card_id", ["mouse", "mouse_", "_4", "dragon_1", "frog_9"])
def test_card_from_id_rejects_malformed(card_id):
    with pytest.raises(ValueError):
        Card.from_id(card_id)


@pytest.mark.parametrize("number", [0, CARDS_PER_CREATURE + 1])
def test_card_number_out_of_range(number):
    with pytest.raises(ValueError):
        Card.create(CreatureType.FROG, number)


def test_card_requires_creature_type():
    with pytest.raises(TypeError):
        Card(id="frog_1", creature_type="frog", card_number=1)


def test_card_is_immutable():
    card = Card.create(CreatureType.FROG, 1)
    with pytest.raises(FrozenInstanceError):
        card.card_number = 2


def test_cards_are_hashable_values():
    assert len({Card.from_id("bat_1"), Card.create(CreatureType.BAT, 1)}) == 1
