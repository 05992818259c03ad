"""Bearer token authentication for the JSON API"""

from flask import jsonify


def load_user_from_request(request):
    """Resolve the caller from an 'Authorization: Bearer <token>' header"""
    from lastman.models import User

    auth_header = request.headers.get("Authorization", "")
    if not auth_header.startswith("Bearer "):
        return None

    token = auth_header[len("Bearer "):].strip()
    return User.get_by_api_token(token)


def unauthorized_response():
    """JSON body for requests without a valid token"""
    return (
        jsonify({"return_code": "UNAUTHORIZED", "message": "No valid token provided"}),
        401,
    )
