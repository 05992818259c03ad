import json

import pytest
import sqlalchemy as sa
from click.testing import CliRunner

from lastman.models import Competition, CompetitionPlayer, Fixture, Pick, User
from lastman.services.settlement_service import settle_round
from manage import cli


@pytest.fixture
def runner(app):
    return CliRunner()


def invoke(runner, *args, **kwargs):
    result = runner.invoke(cli, [str(arg) for arg in args], **kwargs)
    assert result.exception is None, result.output
    return result


def test_user_create_prints_token(runner):
    result = invoke(runner, "user", "create", "alice", "alice@example.com")

    alice = User.query.filter_by(username="alice").one()
    assert "Created user alice" in result.output
    assert alice.api_token in result.output


def test_duplicate_user_reported(runner, factory):
    factory.user("bob")

    result = invoke(runner, "user", "create", "bob", "bob@example.com")

    assert "already exists" in result.output
    assert User.query.filter_by(username="bob").count() == 1


def test_competition_setup_flow(runner, factory):
    organiser = factory.user()
    player = factory.user()

    invoke(runner, "competition", "create", "Office League", "--organiser", organiser.id, "--lives", 2)
    comp = Competition.query.filter_by(name="Office League").one()
    invoke(runner, "competition", "join", comp.id, player.id)
    invoke(runner, "round", "create", comp.id)
    result = invoke(runner, "competition", "players", comp.id)

    membership = CompetitionPlayer.query.filter_by(competition_id=comp.id).one()
    assert membership.lives_remaining == 2
    assert f"user {player.id}: 2 lives" in result.output
    assert comp.rounds.count() == 1


def test_competition_defaults_lives_from_config(app, runner, factory):
    organiser = factory.user()

    invoke(runner, "competition", "create", "Default League", "--organiser", organiser.id)

    comp = Competition.query.filter_by(name="Default League").one()
    assert comp.lives_per_player == app.config["DEFAULT_LIVES_PER_PLAYER"]


def test_fixture_pick_and_settle(runner, factory):
    organiser = factory.user()
    comp = factory.competition(organiser=organiser, lives=1)
    winner, loser = factory.players(comp, 2)
    round_ = factory.round(comp)

    invoke(runner, "fixture", "add", round_.id, "Arsenal", "ars", "Chelsea", "che")
    fixture = Fixture.query.filter_by(round_id=round_.id).one()
    invoke(runner, "pick", "set", fixture.id, winner.user_id, "ars")
    invoke(runner, "pick", "set", fixture.id, loser.user_id, "che")
    invoke(runner, "fixture", "result", fixture.id, "home_win", "--organiser", organiser.id)
    result = invoke(runner, "settle", round_.id, "--organiser", organiser.id)

    assert fixture.home_team_short == "ARS"
    assert Pick.query.filter_by(user_id=winner.user_id).one().outcome == "WIN"
    assert "Winners: 1" in result.output
    assert "Competition complete" in result.output


def test_pick_for_team_not_in_fixture(runner, factory):
    comp = factory.competition()
    player = factory.player(comp)
    fixture = factory.fixture(factory.round(comp), "ARS", "CHE")

    result = invoke(runner, "pick", "set", fixture.id, player.user_id, "LIV")

    assert "not playing" in result.output
    assert Pick.query.count() == 0


def test_settle_reports_domain_errors(runner, factory):
    comp = factory.competition()
    round_ = factory.round(comp)
    stranger = factory.user()

    result = invoke(runner, "settle", round_.id, "--organiser", stranger.id)

    assert "UNAUTHORIZED" in result.output


def test_round_status(runner, factory):
    organiser = factory.user()
    comp = factory.competition(organiser=organiser)
    round_ = factory.round(comp)
    factory.fixture(round_, result="ARS")
    factory.fixture(round_, "LIV", "MCI")

    result = invoke(runner, "round", "status", round_.id, "--user", organiser.id)

    assert "1/2 resulted" in result.output
    assert "0 calculated" in result.output


def test_db_reset_can_be_cancelled(runner, factory):
    factory.user()

    result = invoke(runner, "db", "reset", input="n\n")

    assert "Cancelled" in result.output
    assert User.query.count() == 1


def test_players_listing_as_json(runner, factory):
    comp = factory.competition(lives=2)
    player = factory.player(comp)
    player.user.set_display_name("Alice")
    player.lose_lives(1)
    factory.db.session.commit()

    result = invoke(runner, "competition", "players", comp.id, "--json")

    players = json.loads(result.output)
    assert players[0]["user_id"] == player.user_id
    assert players[0]["lives_remaining"] == 1
    assert players[0]["user"]["display_name"] == "Alice"


def test_audit_and_history_after_settlement(runner, factory):
    organiser = factory.user()
    comp = factory.competition(organiser=organiser, lives=2)
    picker, lazy = factory.players(comp, 2)
    round_ = factory.round(comp)
    fixture = factory.fixture(round_, result="ARS")
    factory.pick(picker, fixture, "ARS")
    invoke(runner, "settle", round_.id, "--organiser", organiser.id)

    audit = invoke(runner, "competition", "audit", comp.id)
    history = invoke(runner, "round", "history", round_.id)

    assert "Results Calculated: Calculated outcomes for Round 1" in audit.output
    assert f"user {picker.user_id}: ARS WIN" in history.output
    assert f"user {lazy.user_id}: - NO_PICK" in history.output


class TestMigrations:
    TABLES = {
        "users",
        "competitions",
        "competition_players",
        "rounds",
        "fixtures",
        "picks",
        "player_progress",
        "audit_log",
    }

    def table_names(self, db):
        return set(sa.inspect(db.engine).get_table_names())

    def test_upgrade_builds_a_schema_settlement_can_use(self, runner, db, factory):
        db.session.remove()
        db.drop_all()

        result = invoke(runner, "db", "upgrade")

        assert "Migrations applied to head" in result.output
        assert self.TABLES | {"alembic_version"} <= self.table_names(db)

        organiser = factory.user()
        comp = factory.competition(organiser=organiser)
        winner, loser = factory.players(comp, 2)
        fixture = factory.fixture(factory.round(comp), result="ARS")
        factory.pick(winner, fixture, "ARS")
        factory.pick(loser, fixture, "CHE")

        summary = settle_round(fixture.round_id, organiser.id)

        assert summary.competition_complete is True

    def test_downgrade_to_base_drops_tables(self, runner, db):
        db.session.remove()
        db.drop_all()
        invoke(runner, "db", "upgrade")

        invoke(runner, "db", "downgrade", "--revision", "base")

        assert self.table_names(db) & self.TABLES == set()

    def test_init_migrations_creates_repository(self, runner, tmp_path):
        directory = tmp_path / "migrations"

        result = invoke(runner, "db", "init-migrations", "--directory", directory)
        again = invoke(runner, "db", "init-migrations", "--directory", directory)

        assert "initialized" in result.output
        assert (directory / "env.py").exists()
        assert (directory / "alembic.ini").exists()
        assert "already exists" in again.output
