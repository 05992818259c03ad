from datetime import datetime, timezone

from lastman import db


class Competition(db.Model):
    __tablename__ = "competitions"

    STATUS_OPEN = "OPEN"
    STATUS_COMPLETE = "COMPLETE"

    id = db.Column(db.Integer, primary_key=True)
    name = db.Column(db.String(200), nullable=False)
    description = db.Column(db.Text)

    # Ownership
    organiser_id = db.Column(db.Integer, db.ForeignKey("users.id"), nullable=False)

    # Rules
    lives_per_player = db.Column(db.Integer, nullable=False, default=1)

    # Lifecycle
    status = db.Column(db.String(20), nullable=False, default=STATUS_OPEN)
    completed_at = db.Column(db.DateTime)

    # Timestamps
    created_at = db.Column(db.DateTime, default=lambda: datetime.now(timezone.utc))

    # Relationships
    players = db.relationship(
        "CompetitionPlayer",
        backref="competition",
        lazy="dynamic",
        cascade="all, delete-orphan",
    )
    rounds = db.relationship(
        "Round", backref="competition", lazy="dynamic", cascade="all, delete-orphan"
    )

    __table_args__ = (
        db.Index("idx_competition_organiser", "organiser_id"),
        db.CheckConstraint("lives_per_player >= 1", name="positive_lives_per_player"),
    )

    def __repr__(self):
        return f"<Competition {self.name} ({self.status})>"

    @property
    def is_complete(self):
        return self.status == self.STATUS_COMPLETE

    def is_organiser(self, user_id):
        """Check whether a user organises this competition"""
        return user_id is not None and self.organiser_id == user_id

    def is_participant(self, user_id):
        """Check whether a user has joined this competition"""
        from .competition_player import CompetitionPlayer

        return (
            CompetitionPlayer.query.filter_by(
                competition_id=self.id, user_id=user_id
            ).first()
            is not None
        )

    def mark_complete(self):
        """Flip the competition to COMPLETE. Returns False if it already was."""
        if self.is_complete:
            return False
        self.status = self.STATUS_COMPLETE
        self.completed_at = datetime.now(timezone.utc)
        return True

    def add_player(self, user_id, lives=None):
        """Join a player with the competition's starting lives"""
        from .competition_player import CompetitionPlayer

        player = CompetitionPlayer(
            competition_id=self.id,
            user_id=user_id,
            lives_remaining=self.lives_per_player if lives is None else lives,
        )
        db.session.add(player)
        return player

    def count_active_players(self):
        """Count players still in the competition"""
        from .competition_player import CompetitionPlayer

        return self.players.filter_by(status=CompetitionPlayer.STATUS_ACTIVE).count()
