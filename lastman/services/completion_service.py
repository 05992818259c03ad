"""
Competition completion check

Runs at the end of every settlement pass. A competition finishes when at
most one player is still active.
"""

import logging
from dataclasses import dataclass

from lastman import db
from lastman.models import Competition

logger = logging.getLogger(__name__)

CAUSE_ALL_ELIMINATED = "all eliminated"
CAUSE_SINGLE_SURVIVOR = "single survivor"


@dataclass
class CompletionResult:
    complete: bool
    cause: str = None
    active_players: int = 0
    # True only for the call that flipped the competition to COMPLETE
    newly_completed: bool = False


def evaluate_completion(competition):
    """
    Flip a competition to COMPLETE once one or no players remain active.

    Args:
        competition: Competition instance (changes are left uncommitted)

    Returns:
        CompletionResult
    """
    active_players = competition.count_active_players()

    if active_players > 1:
        return CompletionResult(complete=False, active_players=active_players)

    cause = CAUSE_ALL_ELIMINATED if active_players == 0 else CAUSE_SINGLE_SURVIVOR
    newly_completed = competition.mark_complete()

    if newly_completed:
        logger.info(
            f"Competition {competition.id} complete: {cause} "
            f"({active_players} active)"
        )

    return CompletionResult(
        complete=True,
        cause=cause,
        active_players=active_players,
        newly_completed=newly_completed,
    )


def evaluate_completion_by_id(competition_id):
    """Look up a competition and evaluate it; None if it does not exist"""
    competition = db.session.get(Competition, competition_id)
    if competition is None:
        return None
    return evaluate_completion(competition)
