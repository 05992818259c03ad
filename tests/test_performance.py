import logging

import pytest

from lastman.services.errors import RoundNotFoundError, UnauthorizedError
from lastman.services.settlement_service import settle_round
from lastman.utils.logging_config import setup_logging
from lastman.utils.performance import timer


def error_records(caplog):
    return [r for r in caplog.records if r.levelno >= logging.ERROR]


def test_domain_rejection_is_not_an_error(app, factory, caplog):
    user = factory.user()

    with caplog.at_level(logging.DEBUG, logger="lastman.utils.performance"):
        with pytest.raises(RoundNotFoundError):
            settle_round(404, user.id)

    assert error_records(caplog) == []
    assert any("rejected" in r.getMessage() for r in caplog.records)


def test_unexpected_failure_is_logged(app, caplog):
    @timer
    def explode():
        raise ValueError("boom")

    with pytest.raises(ValueError):
        explode()

    assert [r.getMessage().split(" after")[0] for r in error_records(caplog)] == [
        "explode failed"
    ]


def test_slow_call_warns(app, caplog):
    app.config["SLOW_FUNCTION_THRESHOLD"] = -1

    @timer
    def quick():
        return 42

    assert quick() == 42
    assert any(
        r.levelno == logging.WARNING and "Slow call quick" in r.getMessage()
        for r in caplog.records
    )


def test_settlement_log_file(app, factory, tmp_path):
    app.config.update(LOG_TO_FILE=True, LOG_DIR=str(tmp_path))
    setup_logging(app)
    try:
        organiser = factory.user()
        competition = factory.competition(organiser=organiser)
        round_ = factory.round(competition)
        factory.players(competition, 2)
        factory.fixture(round_, result="ARS")

        settle_round(round_.id, organiser.id)
        with pytest.raises(UnauthorizedError):
            settle_round(round_.id, organiser.id + 1000)
    finally:
        app.config["LOG_TO_FILE"] = False
        setup_logging(app)

    assert "Settled round 1" in (tmp_path / "settlement.log").read_text()
    assert (tmp_path / "errors.log").read_text() == ""
