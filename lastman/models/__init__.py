from lastman import db  # noqa: F401 - imported for model imports

from .audit_log import AuditLog
from .competition import Competition
from .competition_player import CompetitionPlayer
from .fixture import Fixture
from .pick import Pick
from .player_progress import PlayerProgress
from .round import Round
from .user import User

__all__ = [
    "User",
    "Competition",
    "CompetitionPlayer",
    "Round",
    "Fixture",
    "Pick",
    "PlayerProgress",
    "AuditLog",
]
