"""Invariant checks for Cockroach Poker game states"""

from collections import Counter
from dataclasses import dataclass, field
from typing import List, Optional, Sequence

from roachpoker.common.card import CreatureType
from roachpoker.common.deck import TOTAL_CARDS, Deck
from roachpoker.game.penalties import check_loss
from roachpoker.game.state import PLAYERS_PER_GAME, GameState, GameStatus, PlayerState


@dataclass(frozen=True)
class ValidationReport:
    """Outcome of validating a game state."""

    valid: bool
    errors: List[str] = field(default_factory=list)


class GameStateValidator:
    """
    Cross-checks game state invariants.

    Used for diagnostics and tests; it never blocks gameplay.
    """

    @staticmethod
    def validate(
        state: GameState, players: Optional[Sequence[PlayerState]] = None
    ) -> ValidationReport:
        """
        Check a game against its invariants.

        Args:
            state: The game to check
            players: Player records loaded separately (defaults to state.players)

        Returns:
            A report listing every violation found
        """
        players = list(state.players if players is None else players)
        errors: List[str] = []

        errors.extend(GameStateValidator._check_players(state, players))
        errors.extend(GameStateValidator._check_turn(state, players))
        errors.extend(GameStateValidator._check_rounds(state))
        errors.extend(GameStateValidator._check_losses(state, players))
        if state.status != GameStatus.WAITING:
            errors.extend(GameStateValidator._check_cards(state, players))

        return ValidationReport(valid=not errors, errors=errors)

    @staticmethod
    def _check_players(state: GameState, players: List[PlayerState]) -> List[str]:
        errors = []
        if len(players) != PLAYERS_PER_GAME:
            errors.append(
                f"Player count mismatch: expected {PLAYERS_PER_GAME}, got {len(players)}"
            )
        ids = [player.id for player in players]
        for player_id in state.player_ids:
            if player_id not in ids:
                errors.append(f"Player {player_id} not found in players array")
        for player_id in ids:
            if player_id not in state.player_ids:
                errors.append(f"Player {player_id} is not a participant of this game")
        return errors

    @staticmethod
    def _check_turn(state: GameState, players: List[PlayerState]) -> List[str]:
        turn = state.current_turn_player_id
        if turn is None:
            if state.status == GameStatus.IN_PROGRESS:
                return ["Game is in progress but no player holds the turn"]
            return []
        if not any(player.id == turn for player in players):
            return [f"Current turn player {turn} not found"]
        return []

    @staticmethod
    def _check_rounds(state: GameState) -> List[str]:
        errors = []
        active = [r for r in state.rounds if r.is_active]
        if active:
            errors.append(f"{len(active)} active round(s) found in resolved history")
        current = state.active_round
        if current is not None:
            if current.target_player_id != state.current_turn_player_id:
                errors.append(
                    f"Round target {current.target_player_id} does not hold the turn"
                )
            if current.pass_count > state.rules.max_passes:
                errors.append(
                    f"Round passed {current.pass_count} times, "
                    f"limit is {state.rules.max_passes}"
                )
        return errors

    @staticmethod
    def _check_losses(state: GameState, players: List[PlayerState]) -> List[str]:
        errors = []
        for player in players:
            loss = check_loss(player, state.rules.win_condition)
            if loss.has_lost and state.status == GameStatus.IN_PROGRESS:
                errors.append(
                    f"Player {player.id} should have lost but game is still in progress"
                )
        if state.status == GameStatus.ENDED and state.winner_id is None:
            errors.append("Game ended without a winner")
        return errors

    @staticmethod
    def _check_cards(state: GameState, players: List[PlayerState]) -> List[str]:
        errors = []
        cards = list(state.hidden_cards)
        penalties = 0
        for player in players:
            cards.extend(player.hand)
            for creature in CreatureType:
                pile = player.pile(creature)
                penalties += len(pile)
                if any(card.creature_type != creature for card in pile):
                    errors.append(
                        f"Player {player.id} has a misfiled card in the {creature.value} pile"
                    )
                cards.extend(pile)
        if state.active_round is not None:
            cards.append(state.active_round.card_in_play)

        if penalties > TOTAL_CARDS:
            errors.append(f"{penalties} penalty cards exceed the deck size")

        duplicates = [card.id for card, n in Counter(cards).items() if n > 1]
        if duplicates:
            errors.append(f"Duplicate cards: {sorted(duplicates)}")
        if set(cards) != set(Deck().cards):
            errors.append(
                f"Card conservation violated: {len(set(cards))} distinct cards accounted for"
            )
        return errors


def validate_game_state(
    state: GameState, players: Optional[Sequence[PlayerState]] = None
) -> ValidationReport:
    """Validate ``state`` (and optionally separately loaded ``players``)."""
    return GameStateValidator.validate(state, players)
