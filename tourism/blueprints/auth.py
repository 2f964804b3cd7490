from flask import Blueprint, current_app, jsonify, request

from ..errors import STATUS_BY_REASON
from . import services, signed_in_session

auth_bp = Blueprint("auth", __name__, url_prefix="/api/auth")


def _auth_response(result, success_status=200):
    if result.session is not None:
        return jsonify(result.to_dict()), success_status
    return jsonify(result.to_dict()), STATUS_BY_REASON.get(result.error["reason"], 500)


@auth_bp.post("/signup")
def signup():
    data = request.get_json(silent=True) or {}
    email = data.get("email")
    password = data.get("password") or ""
    username = data.get("username")

    min_length = current_app.config["MIN_PASSWORD_LENGTH"]
    if not isinstance(password, str) or len(password) < min_length:
        return jsonify({
            "session": None,
            "error": {
                "message": f"Password must be at least {min_length} characters",
                "reason": "validation",
            },
        }), 400

    result = services().accounts.sign_up(email, password, username)
    return _auth_response(result, success_status=201)


@auth_bp.post("/signin")
def signin():
    data = request.get_json(silent=True) or {}
    result = services().accounts.sign_in(data.get("email"), data.get("password") or "")
    return _auth_response(result)


@auth_bp.post("/signout")
def signout():
    result = services().accounts.sign_out()
    if not result.success:
        return jsonify(result.to_dict()), 500
    return jsonify({"message": "Signed out"}), 200


@auth_bp.get("/session")
def current_session():
    session = signed_in_session()
    if session is None:
        return jsonify({"session": None}), 200
    return jsonify({"session": session.to_dict()}), 200
