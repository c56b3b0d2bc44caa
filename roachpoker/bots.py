"""
Automated players for simulations and tests.

This module provides a non-interactive player that picks legal actions at
random from a seeded random source. It only reads what its seat could know:
its own hand and the public claim of the round in play.
"""

from typing import Optional
import random

from roachpoker.common.card import CreatureType
from roachpoker.game.actions import Action, PlayCard, Respond
from roachpoker.game.state import GameState, Response


class RandomBot:
    """
    Random player for simulations.

    The bot plays a random card, lies about it with probability ``bluff_rate``,
    passes a card back with probability ``pass_rate`` while passes remain and
    otherwise believes a claim with probability ``believe_rate``.
    """

    def __init__(
        self,
        player_id: str,
        rng: Optional[random.Random] = None,
        bluff_rate: float = 0.3,
        pass_rate: float = 0.2,
        believe_rate: float = 0.5,
    ):
        """
        Initialize the bot.

        Args:
            player_id: Seat the bot plays for
            rng: Random source (a fresh unseeded one if None)
            bluff_rate: Probability of claiming a creature the card is not
            pass_rate: Probability of passing a card back when allowed
            believe_rate: Probability of believing a claim when judging
        """
        for name, value in (
            ("bluff_rate", bluff_rate),
            ("pass_rate", pass_rate),
            ("believe_rate", believe_rate),
        ):
            if not 0.0 <= value <= 1.0:
                raise ValueError(f"{name} must be between 0 and 1, got {value}")

        self.player_id = player_id
        self.rng = rng or random.Random()
        self.bluff_rate = bluff_rate
        self.pass_rate = pass_rate
        self.believe_rate = believe_rate

    def choose_play(self, state: GameState) -> PlayCard:
        """
        Pick a card, a claim and the target for a new round.

        Raises:
            ValueError: if the bot has no card to play
        """
        me = state.get_player(self.player_id)
        if me is None or not me.hand:
            raise ValueError(f"Player {self.player_id} has no card to play")

        card = self.rng.choice(me.hand)
        claim = card.creature_type
        if self.rng.random() < self.bluff_rate:
            claim = self.rng.choice([c for c in CreatureType if c != card.creature_type])

        opponent = state.opponent_of(self.player_id)
        return PlayCard(
            player_id=self.player_id,
            card_id=card.id,
            claim=claim,
            target_player_id=opponent.id,
        )

    def choose_response(self, state: GameState) -> Respond:
        """Answer the round the bot is the target of."""
        current = state.active_round
        if current is None:
            raise ValueError("No round is waiting for a response")

        if (
            current.pass_count < state.rules.max_passes
            and self.rng.random() < self.pass_rate
        ):
            response = Response.PASS_BACK
        elif self.rng.random() < self.believe_rate:
            response = Response.BELIEVE
        else:
            response = Response.DISBELIEVE
        return Respond(player_id=self.player_id, response=response, round_id=current.id)

    def act(self, state: GameState) -> Optional[Action]:
        """
        Pick the bot's next action, or None if it is not the bot's move.
        """
        if not state.is_in_progress:
            return None
        current = state.active_round
        if current is not None:
            if current.target_player_id == self.player_id:
                return self.choose_response(state)
            return None
        if state.current_turn_player_id == self.player_id:
            return self.choose_play(state)
        return None
