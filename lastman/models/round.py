from datetime import datetime, timezone

from sqlalchemy import update

from lastman import db


class Round(db.Model):
    __tablename__ = "rounds"

    # Derived states
    STATE_OPEN = "open"
    STATE_FULLY_RESULTED = "fully_resulted"
    STATE_NO_PICK_SETTLED = "no_pick_settled"

    id = db.Column(db.Integer, primary_key=True)
    competition_id = db.Column(
        db.Integer, db.ForeignKey("competitions.id"), nullable=False
    )
    round_number = db.Column(db.Integer, nullable=False)

    # Picks close at lock_time
    lock_time = db.Column(db.DateTime)

    # Set once by settlement, never reverted
    no_pick_processed = db.Column(db.Boolean, nullable=False, default=False)

    # Timestamps
    created_at = db.Column(db.DateTime, default=lambda: datetime.now(timezone.utc))

    # Relationships
    fixtures = db.relationship(
        "Fixture", backref="round", lazy="dynamic", cascade="all, delete-orphan"
    )
    picks = db.relationship(
        "Pick", backref="round", lazy="dynamic", cascade="all, delete-orphan"
    )

    # Constraints
    __table_args__ = (
        db.UniqueConstraint(
            "competition_id", "round_number", name="unique_competition_round"
        ),
    )

    def __repr__(self):
        return f"<Round {self.round_number} competition_id={self.competition_id}>"

    def get_fixture_counts(self):
        """Return (total fixtures, fixtures with a result, processed fixtures)"""
        from .fixture import Fixture

        total = self.fixtures.count()
        resulted = self.fixtures.filter(Fixture.result.is_not(None)).count()
        processed = self.fixtures.filter(Fixture.processed.is_not(None)).count()
        return total, resulted, processed

    def is_fully_resulted(self):
        """Every fixture has a result (a round with no fixtures never is)"""
        total, resulted, _ = self.get_fixture_counts()
        return total > 0 and total == resulted

    @property
    def state(self):
        if self.no_pick_processed:
            return self.STATE_NO_PICK_SETTLED
        if self.is_fully_resulted():
            return self.STATE_FULLY_RESULTED
        return self.STATE_OPEN

    def claim_no_pick_processing(self):
        """
        Set no_pick_processed from false to true.

        Compare-and-set, so only one caller ever gets True for a round.
        """
        statement = (
            update(Round)
            .where(Round.id == self.id, Round.no_pick_processed.is_(False))
            .values(no_pick_processed=True)
            .execution_options(synchronize_session=False)
        )
        claimed = db.session.execute(statement).rowcount == 1
        db.session.expire(self, ["no_pick_processed"])
        return claimed

    @staticmethod
    def get_for_settlement(round_id):
        """Load a round and lock its row for the rest of the transaction"""
        return Round.query.filter_by(id=round_id).with_for_update().first()

    @staticmethod
    def create_round(competition, lock_time=None):
        """Create the next round for a competition"""
        latest = (
            Round.query.filter_by(competition_id=competition.id)
            .order_by(Round.round_number.desc())
            .first()
        )
        round_ = Round(
            competition_id=competition.id,
            round_number=(latest.round_number + 1) if latest else 1,
            lock_time=lock_time,
        )
        db.session.add(round_)
        return round_

    def to_dict(self, include_counts=False):
        """Convert round to dictionary for API responses"""
        data = {
            "id": self.id,
            "competition_id": self.competition_id,
            "round_number": self.round_number,
            "lock_time": self.lock_time.isoformat() if self.lock_time else None,
            "no_pick_processed": self.no_pick_processed,
        }

        if include_counts:
            total, resulted, processed = self.get_fixture_counts()
            data["total_fixtures"] = total
            data["fixtures_with_results"] = resulted
            data["calculated_fixtures"] = processed
            data["state"] = self.state

        return data
