import pytest

from lastman import create_app
from lastman import db as _db
from lastman.models import (
    Competition,
    CompetitionPlayer,
    Fixture,
    Pick,
    Round,
    User,
)


@pytest.fixture
def app():
    """Application on an in-memory SQLite database."""
    app = create_app("testing")
    with app.app_context():
        yield app
        _db.session.remove()
        _db.drop_all()


@pytest.fixture
def db(app):
    return _db


@pytest.fixture
def client(app):
    return app.test_client()


class Factory:
    """Builds and commits competition data for tests."""

    def __init__(self, db):
        self.db = db
        self._users = 0

    def user(self, username=None):
        self._users += 1
        username = username or f"user{self._users}"
        user = User(username=username, email=f"{username}@example.com")
        user.generate_api_token()
        self.db.session.add(user)
        self.db.session.commit()
        return user

    def competition(self, organiser=None, lives=1, name="Test League"):
        organiser = organiser or self.user()
        competition = Competition(
            name=name, organiser_id=organiser.id, lives_per_player=lives
        )
        self.db.session.add(competition)
        self.db.session.commit()
        return competition

    def player(self, competition, user=None, lives=None):
        user = user or self.user()
        player = competition.add_player(user.id, lives=lives)
        self.db.session.commit()
        return player

    def players(self, competition, count, lives=None):
        return [self.player(competition, lives=lives) for _ in range(count)]

    def round(self, competition):
        round_ = Round.create_round(competition)
        self.db.session.commit()
        return round_

    def fixture(self, round_, home="ARS", away="CHE", result=None):
        fixture = Fixture(
            round_id=round_.id,
            home_team=f"{home} FC",
            away_team=f"{away} FC",
            home_team_short=home,
            away_team_short=away,
            result=result,
        )
        self.db.session.add(fixture)
        self.db.session.commit()
        return fixture

    def pick(self, player, fixture, team):
        pick = Pick(
            round_id=fixture.round_id,
            user_id=player.user_id,
            fixture_id=fixture.id,
            team=team,
        )
        self.db.session.add(pick)
        self.db.session.commit()
        return pick


@pytest.fixture
def factory(db):
    return Factory(db)


def reload_player(db, player):
    return db.session.get(CompetitionPlayer, player.id)


def auth_headers(user):
    return {"Authorization": f"Bearer {user.api_token}"}
