"""
Per-game statistics for Cockroach Poker.

This module summarises the resolved rounds of a game: how long rounds took,
how honest each claimant was and how well each player judged claims.
"""

from dataclasses import dataclass, field
from typing import Any, Dict, List

import numpy as np
import pandas as pd

from roachpoker.game.state import GameState, Response

ROUND_COLUMNS = [
    "round_id",
    "round_number",
    "original_claimant_id",
    "claiming_player_id",
    "responder_id",
    "card_id",
    "actual_creature_type",
    "claimed_creature_type",
    "actual_is_truthful",
    "response",
    "pass_count",
    "penalty_receiver_id",
    "duration",
]


@dataclass
class PlayerPerformance:
    """Counters for one player."""

    rounds_won: int = 0
    rounds_lost: int = 0
    cards_played: int = 0
    accurate_beliefs: int = 0
    accurate_disbeliefs: int = 0
    passes: int = 0

    def to_dict(self) -> Dict[str, int]:
        return {
            "rounds_won": self.rounds_won,
            "rounds_lost": self.rounds_lost,
            "cards_played": self.cards_played,
            "accurate_beliefs": self.accurate_beliefs,
            "accurate_disbeliefs": self.accurate_disbeliefs,
            "passes": self.passes,
        }


@dataclass
class GameStatistics:
    """
    Summary of one game.

    Attributes:
        total_rounds: Resolved rounds
        average_round_duration: Mean seconds per resolved round
        longest_round: Longest resolved round in seconds
        shortest_round: Shortest resolved round in seconds
        total_passes: Pass-backs across all rounds
        claim_accuracy: Per original claimant, claims made and how many were true
        player_performance: Per player counters
    """

    total_rounds: int = 0
    average_round_duration: float = 0.0
    longest_round: float = 0.0
    shortest_round: float = 0.0
    total_passes: int = 0
    claim_accuracy: Dict[str, Dict[str, int]] = field(default_factory=dict)
    player_performance: Dict[str, PlayerPerformance] = field(default_factory=dict)

    def honesty_rate(self, player_id: str) -> float:
        """Share of the player's claims that were true (0.0 without claims)."""
        accuracy = self.claim_accuracy.get(player_id)
        if not accuracy or not accuracy["total"]:
            return 0.0
        return accuracy["truthful"] / accuracy["total"]

    def to_dict(self) -> Dict[str, Any]:
        return {
            "total_rounds": self.total_rounds,
            "average_round_duration": self.average_round_duration,
            "longest_round": self.longest_round,
            "shortest_round": self.shortest_round,
            "total_passes": self.total_passes,
            "claim_accuracy": {k: dict(v) for k, v in self.claim_accuracy.items()},
            "player_performance": {
                k: v.to_dict() for k, v in self.player_performance.items()
            },
        }


def calculate_game_statistics(state: GameState) -> GameStatistics:
    """
    Calculate statistics from the resolved rounds of ``state``.

    Cards played counts the round currently in play as well, since it has
    already left its owner's hand.
    """
    stats = GameStatistics(total_rounds=len(state.rounds))
    stats.player_performance = {pid: PlayerPerformance() for pid in state.player_ids}
    stats.claim_accuracy = {
        pid: {"total": 0, "truthful": 0} for pid in state.player_ids
    }

    durations: List[float] = []
    for round_ in state.rounds:
        if round_.duration is not None:
            durations.append(round_.duration)

        receiver = round_.penalty_receiver_id
        for pid, perf in stats.player_performance.items():
            if pid == receiver:
                perf.rounds_lost += 1
            else:
                perf.rounds_won += 1
            perf.passes += round_.passed_by.count(pid)

        claimant = round_.original_claimant_id or round_.claiming_player_id
        accuracy = stats.claim_accuracy.setdefault(
            claimant, {"total": 0, "truthful": 0}
        )
        accuracy["total"] += 1
        if round_.actual_is_truthful:
            accuracy["truthful"] += 1

        responder = stats.player_performance.get(round_.responder_id)
        if responder is not None:
            if round_.response == Response.BELIEVE and round_.actual_is_truthful:
                responder.accurate_beliefs += 1
            elif round_.response == Response.DISBELIEVE:
                if not round_.actual_is_truthful:
                    responder.accurate_disbeliefs += 1

        stats.total_passes += round_.pass_count

    played = list(state.rounds)
    if state.active_round is not None:
        played.append(state.active_round)
    for round_ in played:
        claimant = round_.original_claimant_id or round_.claiming_player_id
        if claimant in stats.player_performance:
            stats.player_performance[claimant].cards_played += 1

    if durations:
        values = np.asarray(durations, dtype=float)
        stats.average_round_duration = float(np.mean(values))
        stats.longest_round = float(np.max(values))
        stats.shortest_round = float(np.min(values))

    return stats


def rounds_frame(state: GameState) -> pd.DataFrame:
    """
    Tabulate the resolved rounds of ``state``, one row per round.

    Returns:
        DataFrame with the columns in ROUND_COLUMNS
    """
    rows = [
        {
            "round_id": r.id,
            "round_number": r.round_number,
            "original_claimant_id": r.original_claimant_id,
            "claiming_player_id": r.claiming_player_id,
            "responder_id": r.responder_id,
            "card_id": r.card_in_play.id,
            "actual_creature_type": r.card_in_play.creature_type.value,
            "claimed_creature_type": r.claimed_creature_type.value,
            "actual_is_truthful": r.actual_is_truthful,
            "response": r.response.value if r.response else None,
            "pass_count": r.pass_count,
            "penalty_receiver_id": r.penalty_receiver_id,
            "duration": r.duration,
        }
        for r in state.rounds
    ]
    return pd.DataFrame(rows, columns=ROUND_COLUMNS)
