"""Player Progress Model - display-only history of each player's rounds"""

from datetime import datetime, timezone

from lastman import db


class PlayerProgress(db.Model):
    """Append-only snapshot of a player's pick and outcome for one round"""

    __tablename__ = "player_progress"

    id = db.Column(db.Integer, primary_key=True)

    player_id = db.Column(db.Integer, db.ForeignKey("users.id"), nullable=False)
    competition_id = db.Column(
        db.Integer, db.ForeignKey("competitions.id"), nullable=False
    )
    round_id = db.Column(db.Integer, db.ForeignKey("rounds.id"), nullable=False)
    fixture_id = db.Column(db.Integer, db.ForeignKey("fixtures.id"), nullable=True)

    chosen_team = db.Column(db.String(100))
    outcome = db.Column(db.String(20), nullable=False)

    # Timestamps
    created_at = db.Column(db.DateTime, default=lambda: datetime.now(timezone.utc))

    # Constraints
    __table_args__ = (
        db.UniqueConstraint("player_id", "round_id", name="unique_player_round_progress"),
        db.Index("idx_progress_competition", "competition_id"),
    )

    def __repr__(self):
        return f"<PlayerProgress player_id={self.player_id} round_id={self.round_id} {self.outcome}>"

    @staticmethod
    def record(player_id, competition_id, round_id, outcome, fixture_id=None, chosen_team=None):
        """Append a snapshot row"""
        progress = PlayerProgress(
            player_id=player_id,
            competition_id=competition_id,
            round_id=round_id,
            fixture_id=fixture_id,
            chosen_team=chosen_team,
            outcome=outcome,
        )
        db.session.add(progress)
        return progress

    @staticmethod
    def get_recorded_player_ids(round_id):
        """Players that already have a snapshot for a round"""
        rows = (
            db.session.query(PlayerProgress.player_id)
            .filter(PlayerProgress.round_id == round_id)
            .all()
        )
        return {row.player_id for row in rows}

    def to_dict(self):
        return {
            "player_id": self.player_id,
            "competition_id": self.competition_id,
            "round_id": self.round_id,
            "fixture_id": self.fixture_id,
            "chosen_team": self.chosen_team,
            "outcome": self.outcome,
            "created_at": self.created_at.isoformat() if self.created_at else None,
        }
