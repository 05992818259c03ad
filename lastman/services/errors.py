"""Domain errors surfaced to API callers as return codes"""


class SettlementError(Exception):
    """Base error carrying a caller-facing return code and message"""

    return_code = "SERVER_ERROR"
    default_message = "Internal server error"

    def __init__(self, message=None):
        self.message = message or self.default_message
        super().__init__(self.message)

    def to_dict(self):
        return {"return_code": self.return_code, "message": self.message}


class ValidationError(SettlementError):
    return_code = "VALIDATION_ERROR"
    default_message = "Invalid request"


class RoundNotFoundError(SettlementError):
    return_code = "ROUND_NOT_FOUND"
    default_message = "Round not found"


class FixtureNotFoundError(SettlementError):
    return_code = "FIXTURE_NOT_FOUND"
    default_message = "Fixture not found"


class UnauthorizedError(SettlementError):
    return_code = "UNAUTHORIZED"
    default_message = "Only the competition organiser can do this"


class AccessDeniedError(SettlementError):
    return_code = "COMPETITION_ACCESS_DENIED"
    default_message = "You do not have access to this competition"


class FixtureAlreadyProcessedError(SettlementError):
    return_code = "FIXTURE_ALREADY_PROCESSED"
    default_message = "Fixture has already been processed"


class SettlementServerError(SettlementError):
    """Persistence failure; the transaction has been rolled back"""

    return_code = "SERVER_ERROR"
    default_message = "Internal server error"


def validate_id(value, name):
    """Require a positive integer id (bools are rejected)"""
    if isinstance(value, bool) or not isinstance(value, int) or value <= 0:
        raise ValidationError(f"{name} is required and must be a number")
    return value
