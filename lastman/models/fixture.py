from datetime import datetime, timezone

from sqlalchemy import update

from lastman import db
from lastman.utils.outcome import DRAW


class Fixture(db.Model):
    __tablename__ = "fixtures"

    # Derived states
    STATE_UNRESULTED = "unresulted"
    STATE_RESULTED = "resulted"
    STATE_SETTLED = "settled"

    # Result kinds accepted from organisers
    HOME_WIN = "home_win"
    AWAY_WIN = "away_win"
    DRAW_RESULT = "draw"
    RESULT_KINDS = (HOME_WIN, AWAY_WIN, DRAW_RESULT)

    id = db.Column(db.Integer, primary_key=True)
    round_id = db.Column(db.Integer, db.ForeignKey("rounds.id"), nullable=False)

    # Teams
    home_team = db.Column(db.String(100), nullable=False)
    away_team = db.Column(db.String(100), nullable=False)
    home_team_short = db.Column(db.String(20), nullable=False)
    away_team_short = db.Column(db.String(20), nullable=False)

    kickoff_time = db.Column(db.DateTime)

    # Winning short code or DRAW, written by the organiser
    result = db.Column(db.String(100))

    # Stamped once by settlement
    processed = db.Column(db.DateTime)

    # Timestamps
    created_at = db.Column(db.DateTime, default=lambda: datetime.now(timezone.utc))

    # Relationships
    picks = db.relationship("Pick", backref="fixture", lazy="dynamic")

    # Indexes
    __table_args__ = (
        db.Index("idx_fixture_round", "round_id"),
        db.Index("idx_fixture_round_processed", "round_id", "processed"),
        db.CheckConstraint(
            "home_team_short != away_team_short", name="different_teams"
        ),
    )

    def __repr__(self):
        return f"<Fixture {self.home_team_short} v {self.away_team_short} round_id={self.round_id}>"

    @property
    def state(self):
        if self.processed is not None:
            return self.STATE_SETTLED
        if self.result is not None:
            return self.STATE_RESULTED
        return self.STATE_UNRESULTED

    @property
    def is_draw(self):
        return self.result == DRAW

    def involves(self, team_short):
        """Check if a team plays in this fixture"""
        return team_short in (self.home_team_short, self.away_team_short)

    def record_result(self, kind):
        """
        Record the fixture result from an organiser's choice.

        Args:
            kind: one of home_win, away_win, draw

        Returns:
            The stored result string (winning short code or DRAW)
        """
        if kind not in self.RESULT_KINDS:
            raise ValueError(f"Result must be one of {', '.join(self.RESULT_KINDS)}")

        if self.state == self.STATE_SETTLED:
            raise ValueError("Fixture has already been processed")

        if kind == self.HOME_WIN:
            self.result = self.home_team_short
        elif kind == self.AWAY_WIN:
            self.result = self.away_team_short
        else:
            self.result = DRAW

        return self.result

    def claim_for_settlement(self, processed_at):
        """
        Move a resulted fixture to settled.

        Compare-and-set on processed IS NULL, so of any number of concurrent
        callers exactly one gets True.
        """
        statement = (
            update(Fixture)
            .where(
                Fixture.id == self.id,
                Fixture.result.is_not(None),
                Fixture.processed.is_(None),
            )
            .values(processed=processed_at)
            .execution_options(synchronize_session=False)
        )
        claimed = db.session.execute(statement).rowcount == 1
        db.session.expire(self, ["processed"])
        return claimed

    @staticmethod
    def get_resulted_unprocessed(round_id):
        """Get fixtures in a round that have a result but were not settled yet"""
        return (
            Fixture.query.filter(
                Fixture.round_id == round_id,
                Fixture.result.is_not(None),
                Fixture.processed.is_(None),
            )
            .order_by(Fixture.id)
            .all()
        )

    @staticmethod
    def get_processed_for_round(round_id):
        """Get settled fixtures in kickoff order"""
        return (
            Fixture.query.filter(
                Fixture.round_id == round_id, Fixture.processed.is_not(None)
            )
            .order_by(Fixture.kickoff_time, Fixture.id)
            .all()
        )

    def to_dict(self):
        """Convert fixture to dictionary for API responses"""
        return {
            "id": self.id,
            "round_id": self.round_id,
            "home_team": self.home_team,
            "away_team": self.away_team,
            "home_team_short": self.home_team_short,
            "away_team_short": self.away_team_short,
            "kickoff_time": self.kickoff_time.isoformat() if self.kickoff_time else None,
            "result": self.result,
            "processed_at": self.processed.isoformat() if self.processed else None,
            "state": self.state,
        }
