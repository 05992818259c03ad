from datetime import datetime, timezone

import pytest

from lastman.models import Competition, CompetitionPlayer, Fixture, Pick, Round
from lastman.utils.outcome import DRAW, LOSE, NO_PICK, WIN


class TestCompetitionPlayer:
    def test_lose_lives_clamps_at_zero(self, factory):
        competition = factory.competition(lives=2)
        player = factory.player(competition)

        eliminated = player.lose_lives(5)

        assert eliminated is True
        assert player.lives_remaining == 0
        assert player.status == CompetitionPlayer.STATUS_OUT
        assert player.eliminated_at is not None

    def test_lose_lives_keeps_player_active_with_lives_left(self, factory):
        competition = factory.competition(lives=3)
        player = factory.player(competition)

        assert player.lose_lives(1) is False
        assert player.lives_remaining == 2
        assert player.is_active

    def test_already_out_player_is_not_eliminated_twice(self, factory):
        competition = factory.competition(lives=1)
        player = factory.player(competition)

        assert player.lose_lives(1) is True
        assert player.lose_lives(1) is False
        assert player.lives_remaining == 0

    def test_zero_losses_changes_nothing(self, factory):
        competition = factory.competition(lives=1)
        player = factory.player(competition)

        assert player.lose_lives(0) is False
        assert player.lives_remaining == 1
        assert player.is_active

    def test_negative_deduction_rejected(self, factory):
        competition = factory.competition()
        player = factory.player(competition)

        with pytest.raises(ValueError):
            player.lose_lives(-1)

    def test_join_uses_competition_lives(self, factory):
        competition = factory.competition(lives=3)
        player = factory.player(competition)

        assert player.lives_remaining == 3


class TestCompetition:
    def test_mark_complete_is_one_directional(self, factory):
        competition = factory.competition()

        assert competition.mark_complete() is True
        assert competition.status == Competition.STATUS_COMPLETE
        assert competition.mark_complete() is False
        assert competition.is_complete

    def test_organiser_and_participant_checks(self, factory):
        organiser = factory.user()
        competition = factory.competition(organiser=organiser)
        player = factory.player(competition)
        outsider = factory.user()

        assert competition.is_organiser(organiser.id)
        assert not competition.is_organiser(player.user_id)
        assert competition.is_participant(player.user_id)
        assert not competition.is_participant(outsider.id)


class TestRound:
    def test_round_numbers_increase(self, factory):
        competition = factory.competition()

        first = factory.round(competition)
        second = factory.round(competition)

        assert first.round_number == 1
        assert second.round_number == 2

    def test_state_moves_from_open_to_fully_resulted(self, factory):
        competition = factory.competition()
        round_ = factory.round(competition)
        fixture = factory.fixture(round_)

        assert round_.state == Round.STATE_OPEN

        fixture.record_result(Fixture.HOME_WIN)
        assert round_.state == Round.STATE_FULLY_RESULTED

    def test_round_without_fixtures_is_never_fully_resulted(self, factory):
        competition = factory.competition()
        round_ = factory.round(competition)

        assert not round_.is_fully_resulted()

    def test_no_pick_claim_succeeds_once(self, db, factory):
        competition = factory.competition()
        round_ = factory.round(competition)

        assert round_.claim_no_pick_processing() is True
        assert round_.claim_no_pick_processing() is False
        assert round_.no_pick_processed is True
        assert round_.state == Round.STATE_NO_PICK_SETTLED


class TestFixture:
    def test_record_result_maps_kinds(self, factory):
        competition = factory.competition()
        round_ = factory.round(competition)
        home = factory.fixture(round_, "ARS", "CHE")
        away = factory.fixture(round_, "LIV", "MCI")
        drawn = factory.fixture(round_, "TOT", "EVE")

        assert home.record_result(Fixture.HOME_WIN) == "ARS"
        assert away.record_result(Fixture.AWAY_WIN) == "MCI"
        assert drawn.record_result(Fixture.DRAW_RESULT) == DRAW
        assert drawn.is_draw

    def test_record_result_rejects_unknown_kind(self, factory):
        competition = factory.competition()
        fixture = factory.fixture(factory.round(competition))

        with pytest.raises(ValueError):
            fixture.record_result("abandoned")

    def test_state_transitions(self, db, factory):
        competition = factory.competition()
        fixture = factory.fixture(factory.round(competition))

        assert fixture.state == Fixture.STATE_UNRESULTED
        fixture.record_result(Fixture.HOME_WIN)
        db.session.commit()
        assert fixture.state == Fixture.STATE_RESULTED

        assert fixture.claim_for_settlement(datetime.now(timezone.utc)) is True
        assert fixture.state == Fixture.STATE_SETTLED

    def test_claim_requires_result_and_happens_once(self, db, factory):
        competition = factory.competition()
        fixture = factory.fixture(factory.round(competition))
        now = datetime.now(timezone.utc)

        assert fixture.claim_for_settlement(now) is False

        fixture.record_result(Fixture.AWAY_WIN)
        db.session.commit()

        assert fixture.claim_for_settlement(now) is True
        assert fixture.claim_for_settlement(now) is False

    def test_settled_fixture_result_cannot_change(self, db, factory):
        competition = factory.competition()
        fixture = factory.fixture(factory.round(competition), result="ARS")
        fixture.claim_for_settlement(datetime.now(timezone.utc))

        with pytest.raises(ValueError):
            fixture.record_result(Fixture.AWAY_WIN)


class TestPick:
    def test_settle_once(self, factory):
        competition = factory.competition()
        player = factory.player(competition)
        fixture = factory.fixture(factory.round(competition))
        pick = factory.pick(player, fixture, "ARS")

        assert pick.state == Pick.STATE_PENDING
        pick.settle(WIN)
        assert pick.state == Pick.STATE_SETTLED

        with pytest.raises(ValueError):
            pick.settle(LOSE)

    def test_settle_rejects_unknown_outcome(self, factory):
        competition = factory.competition()
        player = factory.player(competition)
        fixture = factory.fixture(factory.round(competition))
        pick = factory.pick(player, fixture, "ARS")

        with pytest.raises(ValueError):
            pick.settle("DRAW")

    def test_create_pick_validates_team_and_replaces(self, db, factory):
        competition = factory.competition()
        player = factory.player(competition)
        round_ = factory.round(competition)
        first = factory.fixture(round_, "ARS", "CHE")
        second = factory.fixture(round_, "LIV", "MCI")

        pick, message = Pick.create_pick(round_, player.user_id, first, "LIV")
        assert pick is None
        assert "not playing" in message

        pick, _ = Pick.create_pick(round_, player.user_id, first, "ARS")
        db.session.commit()
        replaced, message = Pick.create_pick(round_, player.user_id, second, "MCI")
        db.session.commit()

        assert replaced.id == pick.id
        assert replaced.team == "MCI"
        assert message == "Pick updated successfully"
        assert Pick.query.filter_by(round_id=round_.id).count() == 1

    def test_create_pick_rejects_resulted_fixture(self, factory):
        competition = factory.competition()
        player = factory.player(competition)
        round_ = factory.round(competition)
        fixture = factory.fixture(round_, result="ARS")

        pick, message = Pick.create_pick(round_, player.user_id, fixture, "ARS")

        assert pick is None
        assert message == "Fixture already has a result"

    def test_no_pick_row_is_settled_on_insert(self, db, factory):
        competition = factory.competition()
        player = factory.player(competition)
        round_ = factory.round(competition)

        pick = Pick.create_no_pick(round_.id, player.user_id)
        db.session.commit()

        assert pick.outcome == NO_PICK
        assert pick.fixture_id is None
        assert pick.state == Pick.STATE_SETTLED
