from datetime import datetime, timezone

from lastman import db
from lastman.utils.outcome import NO_PICK, PICK_OUTCOMES


class Pick(db.Model):
    __tablename__ = "picks"

    # Derived states
    STATE_PENDING = "pending"
    STATE_SETTLED = "settled"

    id = db.Column(db.Integer, primary_key=True)

    # Pick identification
    round_id = db.Column(db.Integer, db.ForeignKey("rounds.id"), nullable=False)
    user_id = db.Column(db.Integer, db.ForeignKey("users.id"), nullable=False)
    fixture_id = db.Column(db.Integer, db.ForeignKey("fixtures.id"), nullable=True)

    # Pick details (both null for NO_PICK rows)
    team = db.Column(db.String(100))

    # WIN, LOSE or NO_PICK once settled
    outcome = db.Column(db.String(10))

    # Organiser who entered the pick on the player's behalf
    set_by_admin = db.Column(db.Integer, db.ForeignKey("users.id"), nullable=True)

    # Timestamps
    created_at = db.Column(db.DateTime, default=lambda: datetime.now(timezone.utc))

    # Relationships
    user = db.relationship("User", foreign_keys=[user_id])

    # Constraints and indexes
    __table_args__ = (
        db.UniqueConstraint("round_id", "user_id", name="unique_round_user_pick"),
        db.Index("idx_pick_fixture_outcome", "fixture_id", "outcome"),
        db.Index("idx_pick_round", "round_id"),
    )

    def __repr__(self):
        return f"<Pick user_id={self.user_id} round_id={self.round_id} team={self.team or 'NONE'} outcome={self.outcome}>"

    @property
    def state(self):
        return self.STATE_PENDING if self.outcome is None else self.STATE_SETTLED

    def settle(self, outcome):
        """Write the outcome. A pick is settled exactly once."""
        if outcome not in PICK_OUTCOMES:
            raise ValueError(f"Unknown outcome: {outcome}")
        if self.state == self.STATE_SETTLED:
            raise ValueError(f"Pick {self.id} already settled as {self.outcome}")
        self.outcome = outcome

    @staticmethod
    def get_pending_for_fixtures(fixture_ids):
        """Get unsettled picks attached to the given fixtures"""
        if not fixture_ids:
            return []
        return (
            Pick.query.filter(
                Pick.fixture_id.in_(fixture_ids), Pick.outcome.is_(None)
            )
            .order_by(Pick.id)
            .all()
        )

    @staticmethod
    def create_pick(round_, user_id, fixture, team, set_by_admin=None):
        """Create or replace a player's pick for a round"""
        if fixture.round_id != round_.id:
            return None, "Fixture is not part of this round"

        if not fixture.involves(team):
            return None, f"{team} is not playing in this fixture"

        if fixture.result is not None:
            return None, "Fixture already has a result"

        existing = Pick.query.filter_by(round_id=round_.id, user_id=user_id).first()
        if existing:
            if existing.outcome is not None:
                return None, "Pick has already been settled"
            existing.fixture_id = fixture.id
            existing.team = team
            existing.set_by_admin = set_by_admin
            return existing, "Pick updated successfully"

        pick = Pick(
            round_id=round_.id,
            user_id=user_id,
            fixture_id=fixture.id,
            team=team,
            set_by_admin=set_by_admin,
        )
        db.session.add(pick)
        return pick, "Pick created successfully"

    @staticmethod
    def create_no_pick(round_id, user_id):
        """Insert the synthetic row for a player who never picked"""
        pick = Pick(round_id=round_id, user_id=user_id, outcome=NO_PICK)
        db.session.add(pick)
        return pick
