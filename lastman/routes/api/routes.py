import logging
from functools import wraps

from flask import current_app, jsonify, request
from flask_login import current_user, login_required

from lastman import limiter
from lastman.routes.api import bp
from lastman.services.errors import SettlementError
from lastman.services.fixture_service import set_fixture_result
from lastman.services.settlement_service import get_round_status, settle_round

logger = logging.getLogger(__name__)


def add_security_headers(f):
    """Add security headers to API responses"""

    @wraps(f)
    def decorated_function(*args, **kwargs):
        response = f(*args, **kwargs)
        if hasattr(response, "headers"):
            response.headers["Cache-Control"] = (
                "no-store, no-cache, must-revalidate, max-age=0"
            )
        return response

    return decorated_function


def structured_errors(f):
    """Turn domain and unexpected errors into return_code payloads"""

    @wraps(f)
    def decorated_function(*args, **kwargs):
        try:
            return f(*args, **kwargs)
        except SettlementError as e:
            return jsonify(e.to_dict())
        except Exception:
            logger.exception(f"Unhandled error in {request.path}")
            return jsonify(
                {"return_code": "SERVER_ERROR", "message": "Internal server error"}
            )

    return decorated_function


def settlement_rate_limit():
    return current_app.config.get("SETTLEMENT_RATE_LIMIT", "30 per minute")


@bp.route("/calculate-results", methods=["POST"])
@limiter.limit(settlement_rate_limit)
@login_required
@add_security_headers
@structured_errors
def calculate_results():
    """Settle a round's picks from its fixture results"""
    data = request.get_json(silent=True) or {}

    summary = settle_round(data.get("round_id"), current_user.id)

    return jsonify(
        {
            "return_code": "SUCCESS",
            "message": "Pick outcomes calculated successfully",
            "results": summary.to_dict(),
        }
    )


@bp.route("/set-fixture-result", methods=["POST"])
@login_required
@add_security_headers
@structured_errors
def fixture_result():
    """Record a fixture result"""
    data = request.get_json(silent=True) or {}

    fixture = set_fixture_result(
        data.get("fixture_id"), data.get("result"), current_user.id
    )

    return jsonify(
        {
            "return_code": "SUCCESS",
            "message": "Fixture result set successfully",
            "fixture": fixture.to_dict(),
        }
    )


@bp.route("/get-calculated-fixtures", methods=["POST"])
@login_required
@add_security_headers
@structured_errors
def calculated_fixtures():
    """Get settlement progress for a round"""
    data = request.get_json(silent=True) or {}

    status = get_round_status(data.get("round_id"), current_user.id)

    return jsonify(
        {
            "return_code": "SUCCESS",
            "message": "Calculated fixtures retrieved successfully",
            **status,
        }
    )
