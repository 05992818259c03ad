from datetime import datetime, timezone

from lastman import db


class CompetitionPlayer(db.Model):
    __tablename__ = "competition_players"

    STATUS_ACTIVE = "active"
    STATUS_OUT = "OUT"

    id = db.Column(db.Integer, primary_key=True)
    competition_id = db.Column(
        db.Integer, db.ForeignKey("competitions.id"), nullable=False
    )
    user_id = db.Column(db.Integer, db.ForeignKey("users.id"), nullable=False)

    # Survival state
    lives_remaining = db.Column(db.Integer, nullable=False, default=1)
    status = db.Column(db.String(20), nullable=False, default=STATUS_ACTIVE)

    # Timestamps
    joined_at = db.Column(db.DateTime, default=lambda: datetime.now(timezone.utc))
    eliminated_at = db.Column(db.DateTime)

    # Constraints
    __table_args__ = (
        db.UniqueConstraint("competition_id", "user_id", name="unique_competition_user"),
        db.Index("idx_competition_players_status", "competition_id", "status"),
        db.CheckConstraint("lives_remaining >= 0", name="non_negative_lives"),
    )

    def __repr__(self):
        return (
            f"<CompetitionPlayer user_id={self.user_id} "
            f"competition_id={self.competition_id} lives={self.lives_remaining} {self.status}>"
        )

    @property
    def is_active(self):
        return self.status == self.STATUS_ACTIVE

    def lose_lives(self, count):
        """
        Deduct lives, clamped at zero.

        Returns True only when this call moved the player from active to OUT.
        """
        if count < 0:
            raise ValueError("Cannot deduct a negative number of lives")
        if count == 0:
            return False

        was_active = self.is_active
        self.lives_remaining = max(0, (self.lives_remaining or 0) - count)

        if self.lives_remaining == 0:
            self.status = self.STATUS_OUT
            if was_active:
                self.eliminated_at = datetime.now(timezone.utc)
                return True
        return False

    def to_dict(self):
        """Convert membership to dictionary for API responses"""
        return {
            "user_id": self.user_id,
            "competition_id": self.competition_id,
            "user": self.user.to_dict() if self.user else None,
            "lives_remaining": self.lives_remaining,
            "status": self.status,
            "joined_at": self.joined_at.isoformat() if self.joined_at else None,
        }
