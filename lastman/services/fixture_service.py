"""Organiser actions on fixtures that feed settlement"""

import logging

from sqlalchemy.exc import SQLAlchemyError

from lastman import db
from lastman.models import AuditLog, Fixture
from lastman.services.errors import (
    FixtureAlreadyProcessedError,
    FixtureNotFoundError,
    SettlementError,
    SettlementServerError,
    UnauthorizedError,
    ValidationError,
    validate_id,
)

logger = logging.getLogger(__name__)


def set_fixture_result(fixture_id, kind, caller_id):
    """
    Record a fixture result on behalf of the competition organiser.

    Args:
        fixture_id: Fixture primary key
        kind: home_win, away_win or draw
        caller_id: id of the authenticated user

    Returns:
        The updated Fixture
    """
    validate_id(fixture_id, "Fixture ID")
    if kind not in Fixture.RESULT_KINDS:
        raise ValidationError("Result must be 'home_win', 'away_win', or 'draw'")

    try:
        fixture = db.session.get(Fixture, fixture_id)
        if fixture is None:
            raise FixtureNotFoundError()

        round_ = fixture.round
        if not round_.competition.is_organiser(caller_id):
            raise UnauthorizedError(
                "Only the competition organiser can set fixture results"
            )

        if fixture.state == Fixture.STATE_SETTLED:
            raise FixtureAlreadyProcessedError(
                "Results for this fixture have already been calculated"
            )

        fixture.record_result(kind)
        AuditLog.log_fixture_result(caller_id, fixture, round_)
        db.session.commit()

    except SettlementError:
        db.session.rollback()
        raise
    except SQLAlchemyError as e:
        db.session.rollback()
        logger.error(f"Setting result for fixture {fixture_id} failed: {e}", exc_info=True)
        raise SettlementServerError() from e

    logger.info(f"Fixture {fixture.id} result set to {fixture.result}")
    return fixture
