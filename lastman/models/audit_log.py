from datetime import datetime, timezone

from lastman import db


class AuditLog(db.Model):
    __tablename__ = "audit_log"

    ACTION_RESULTS_CALCULATED = "Results Calculated"
    ACTION_COMPETITION_COMPLETE = "Competition Complete"
    ACTION_FIXTURE_RESULT_SET = "Fixture Result Set"

    id = db.Column(db.Integer, primary_key=True)

    # Action details
    competition_id = db.Column(
        db.Integer, db.ForeignKey("competitions.id"), nullable=True
    )
    user_id = db.Column(db.Integer, db.ForeignKey("users.id"), nullable=False)
    action = db.Column(db.String(100), nullable=False)
    details = db.Column(db.Text)

    # Additional context data (JSON)
    action_metadata = db.Column(db.JSON, nullable=True)

    # Timestamps
    created_at = db.Column(db.DateTime, default=lambda: datetime.now(timezone.utc))

    # Relationships
    user = db.relationship("User", foreign_keys=[user_id])
    competition = db.relationship(
        "Competition",
        backref=db.backref("audit_entries", lazy="dynamic", cascade="all, delete-orphan"),
    )

    # Indexes
    __table_args__ = (
        db.Index("idx_audit_competition", "competition_id"),
        db.Index("idx_audit_action", "action"),
        db.Index("idx_audit_created", "created_at"),
    )

    def __repr__(self):
        return f"<AuditLog {self.action} competition_id={self.competition_id}>"

    @staticmethod
    def log_action(competition_id, user_id, action, details, action_metadata=None):
        """Log an action"""
        entry = AuditLog(
            competition_id=competition_id,
            user_id=user_id,
            action=action,
            details=details,
            action_metadata=action_metadata or {},
        )

        db.session.add(entry)
        return entry

    @staticmethod
    def log_results_calculated(user_id, round_, summary):
        """Convenience method for logging a settlement pass"""
        description = (
            f"Calculated outcomes for Round {round_.round_number}: "
            f"{summary.processed} picks processed "
            f"({summary.winners} won, {summary.losers} lost, "
            f"{summary.no_pick_processed} no pick, "
            f"{summary.players_eliminated} eliminated)"
        )

        return AuditLog.log_action(
            competition_id=round_.competition_id,
            user_id=user_id,
            action=AuditLog.ACTION_RESULTS_CALCULATED,
            details=description,
            action_metadata={
                "round_id": round_.id,
                "round_number": round_.round_number,
                "winners": summary.winners,
                "losers": summary.losers,
                "draws": summary.draws,
                "no_pick": summary.no_pick_processed,
                "eliminated": summary.players_eliminated,
            },
        )

    @staticmethod
    def log_competition_complete(user_id, competition, round_, completion):
        """Convenience method for logging the competition finishing"""
        description = (
            f"Competition complete after Round {round_.round_number}: "
            f"{completion.cause}"
        )

        return AuditLog.log_action(
            competition_id=competition.id,
            user_id=user_id,
            action=AuditLog.ACTION_COMPETITION_COMPLETE,
            details=description,
            action_metadata={
                "round_id": round_.id,
                "cause": completion.cause,
                "active_players": completion.active_players,
            },
        )

    @staticmethod
    def log_fixture_result(user_id, fixture, round_):
        """Convenience method for logging a fixture result"""
        description = (
            f"Set result for {fixture.home_team} vs {fixture.away_team} "
            f"in Round {round_.round_number}: {fixture.result}"
        )

        return AuditLog.log_action(
            competition_id=round_.competition_id,
            user_id=user_id,
            action=AuditLog.ACTION_FIXTURE_RESULT_SET,
            details=description,
            action_metadata={"fixture_id": fixture.id, "result": fixture.result},
        )

    def to_dict(self):
        """Convert entry to dictionary for API responses"""
        return {
            "id": self.id,
            "competition_id": self.competition_id,
            "user_id": self.user_id,
            "action": self.action,
            "details": self.details,
            "action_metadata": self.action_metadata,
            "created_at": self.created_at.isoformat() if self.created_at else None,
        }
