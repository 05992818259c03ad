import secrets
from datetime import datetime, timezone

from flask_login import UserMixin

from lastman import db


class User(UserMixin, db.Model):
    __tablename__ = "users"

    id = db.Column(db.Integer, primary_key=True)
    username = db.Column(db.String(80), unique=True, nullable=False, index=True)
    email = db.Column(db.String(120), unique=True, nullable=False, index=True)
    display_name = db.Column(db.String(100))

    # Bearer token for the JSON API
    api_token = db.Column(db.String(100), unique=True, nullable=True, index=True)

    # Account status
    is_active = db.Column(db.Boolean, default=True)

    # Timestamps
    created_at = db.Column(db.DateTime, default=lambda: datetime.now(timezone.utc))

    # Relationships
    memberships = db.relationship(
        "CompetitionPlayer", backref="user", lazy="dynamic", cascade="all, delete-orphan"
    )
    organised_competitions = db.relationship(
        "Competition", backref="organiser", lazy="dynamic"
    )

    def __repr__(self):
        return f"<User {self.username}>"

    def set_display_name(self, display_name):
        """Set display name with sanitization"""
        import html

        if display_name:
            self.display_name = html.escape(display_name.strip())
        else:
            self.display_name = display_name

    def generate_api_token(self):
        """Generate a new API token, replacing any existing one"""
        self.api_token = secrets.token_urlsafe(32)
        return self.api_token

    @staticmethod
    def get_by_api_token(token):
        """Resolve an active user from an API token"""
        if not token:
            return None
        return User.query.filter_by(api_token=token, is_active=True).first()

    def to_dict(self):
        """Convert user to dictionary for API responses"""
        return {
            "id": self.id,
            "username": self.username,
            "display_name": self.display_name or self.username,
        }
