"""
Round Settlement Service for Last Man Standing

Turns fixture results into pick outcomes, life deductions, eliminations and
no-pick penalties, then checks whether the competition has finished.

Every pass runs inside one database transaction and is safe to repeat:
  - a fixture contributes picks only to the pass that claims it
    (processed IS NULL -> timestamp)
  - a pick is settled only while its outcome IS NULL
  - the no-pick penalty runs only for the pass that flips
    Round.no_pick_processed from false to true
A second pass over an already settled round changes nothing and reports
zero counts.
"""

import logging
from collections import Counter
from dataclasses import dataclass
from datetime import datetime, timezone

from sqlalchemy.exc import SQLAlchemyError

from lastman import db
from lastman.models import (
    AuditLog,
    CompetitionPlayer,
    Fixture,
    Pick,
    PlayerProgress,
    Round,
)
from lastman.services.completion_service import evaluate_completion
from lastman.services.errors import (
    AccessDeniedError,
    RoundNotFoundError,
    SettlementError,
    SettlementServerError,
    UnauthorizedError,
    validate_id,
)
from lastman.utils.outcome import LOSE, NO_PICK, WIN, calculate_outcome, is_draw
from lastman.utils.performance import timer

logger = logging.getLogger(__name__)


@dataclass
class SettlementSummary:
    round_id: int
    round_number: int
    winners: int = 0
    # Draws are counted here as well as in draws
    losers: int = 0
    draws: int = 0
    processed: int = 0
    players_eliminated: int = 0
    no_pick_processed: int = 0
    total: int = 0
    active_players: int = 0
    competition_complete: bool = False

    def to_dict(self):
        """Convert summary to the API results payload"""
        return {
            "round_id": self.round_id,
            "round_number": self.round_number,
            "winners": self.winners,
            "losers": self.losers,
            "draws": self.draws,
            "processed": self.processed,
            "playersEliminated": self.players_eliminated,
            "noPickProcessed": self.no_pick_processed,
            "total": self.total,
            "activePlayers": self.active_players,
            "competitionComplete": self.competition_complete,
        }


@timer
def settle_round(round_id, caller_id):
    """
    Settle a round on behalf of its competition organiser.

    Args:
        round_id: Round primary key
        caller_id: id of the authenticated user

    Returns:
        SettlementSummary

    Raises:
        ValidationError, RoundNotFoundError, UnauthorizedError before any write;
        SettlementServerError if the database fails (nothing is committed)
    """
    validate_id(round_id, "Round ID")

    try:
        round_ = Round.get_for_settlement(round_id)
        if round_ is None:
            raise RoundNotFoundError()

        competition = round_.competition
        if not competition.is_organiser(caller_id):
            raise UnauthorizedError(
                "Only the competition organiser can calculate results"
            )

        summary = _run_settlement(round_, competition, caller_id)
        db.session.commit()

    except SettlementError:
        db.session.rollback()
        raise
    except SQLAlchemyError as e:
        db.session.rollback()
        logger.error(f"Settlement of round {round_id} failed: {e}", exc_info=True)
        raise SettlementServerError() from e

    logger.info(
        f"Settled round {summary.round_number} of competition {round_.competition_id}: "
        f"{summary.winners} won, {summary.losers} lost, "
        f"{summary.no_pick_processed} no pick, "
        f"{summary.players_eliminated} eliminated, "
        f"{summary.active_players} still active"
    )
    return summary


def _run_settlement(round_, competition, caller_id):
    now = datetime.now(timezone.utc)
    summary = SettlementSummary(round_id=round_.id, round_number=round_.round_number)

    players = {
        player.user_id: player
        for player in CompetitionPlayer.query.filter_by(competition_id=competition.id)
        .with_for_update()
        .all()
    }
    eliminated = set()

    settled_picks = _settle_fixtures(round_, now, summary)
    _deduct_lives(settled_picks, players, eliminated)

    if round_.is_fully_resulted() and not round_.no_pick_processed:
        summary.no_pick_processed = _apply_no_pick_penalty(
            round_, competition, players, eliminated
        )

    _populate_history(round_, competition)

    completion = evaluate_completion(competition)

    summary.processed = summary.winners + summary.losers + summary.no_pick_processed
    summary.total = summary.processed
    summary.players_eliminated = len(eliminated)
    summary.active_players = completion.active_players
    summary.competition_complete = completion.complete

    AuditLog.log_results_calculated(caller_id, round_, summary)
    if completion.newly_completed:
        AuditLog.log_competition_complete(caller_id, competition, round_, completion)

    db.session.flush()
    return summary


def _settle_fixtures(round_, now, summary):
    """Claim resulted fixtures and settle their pending picks"""
    claimed = {}
    for fixture in Fixture.get_resulted_unprocessed(round_.id):
        result = fixture.result
        if fixture.claim_for_settlement(now):
            claimed[fixture.id] = result
        else:
            logger.debug(f"Fixture {fixture.id} already claimed by another pass")

    settled = []
    for pick in Pick.get_pending_for_fixtures(list(claimed)):
        result = claimed[pick.fixture_id]
        outcome = calculate_outcome(result, pick.team)
        pick.settle(outcome)
        settled.append(pick)

        if outcome == WIN:
            summary.winners += 1
        else:
            summary.losers += 1
            if is_draw(result):
                summary.draws += 1

    db.session.flush()
    return settled


def _deduct_lives(settled_picks, players, eliminated):
    """Take one life per LOSE outcome settled in this pass"""
    losses = Counter(pick.user_id for pick in settled_picks if pick.outcome == LOSE)

    for user_id, count in losses.items():
        player = players.get(user_id)
        if player is None:
            logger.warning(f"Losing pick for user {user_id} who is not in the competition")
            continue
        if player.lose_lives(count):
            eliminated.add(user_id)

    db.session.flush()


def _apply_no_pick_penalty(round_, competition, players, eliminated):
    """Penalise active players with no pick in a fully resulted round"""
    if not round_.claim_no_pick_processing():
        return 0

    picked = {
        row.user_id
        for row in db.session.query(Pick.user_id).filter(Pick.round_id == round_.id)
    }

    penalised = 0
    for user_id, player in sorted(players.items()):
        if not player.is_active or user_id in picked:
            continue

        Pick.create_no_pick(round_.id, user_id)
        PlayerProgress.record(
            player_id=user_id,
            competition_id=competition.id,
            round_id=round_.id,
            outcome=NO_PICK,
        )
        if player.lose_lives(1):
            eliminated.add(user_id)
        penalised += 1

    db.session.flush()
    return penalised


def _populate_history(round_, competition):
    """Snapshot every settled pick that has no history row yet"""
    recorded = PlayerProgress.get_recorded_player_ids(round_.id)

    picks = (
        Pick.query.filter(
            Pick.round_id == round_.id,
            Pick.outcome.is_not(None),
            Pick.outcome != NO_PICK,
        )
        .order_by(Pick.id)
        .all()
    )

    for pick in picks:
        if pick.user_id in recorded:
            continue
        PlayerProgress.record(
            player_id=pick.user_id,
            competition_id=competition.id,
            round_id=round_.id,
            fixture_id=pick.fixture_id,
            chosen_team=pick.team,
            outcome=pick.outcome,
        )
        recorded.add(pick.user_id)

    db.session.flush()


def get_round_status(round_id, user_id):
    """
    Settlement progress for a round, visible to its organiser and players.

    Returns:
        dict with round info and the fixtures already settled
    """
    validate_id(round_id, "Round ID")

    round_ = db.session.get(Round, round_id)
    if round_ is None:
        raise RoundNotFoundError("Round not found or does not exist")

    competition = round_.competition
    if not (competition.is_organiser(user_id) or competition.is_participant(user_id)):
        raise AccessDeniedError()

    fixtures = Fixture.get_processed_for_round(round_.id)
    info = round_.to_dict(include_counts=True)
    info["competition_name"] = competition.name

    return {
        "round_info": info,
        "calculated_fixture_ids": [fixture.id for fixture in fixtures],
        "calculated_fixtures": [fixture.to_dict() for fixture in fixtures],
    }
