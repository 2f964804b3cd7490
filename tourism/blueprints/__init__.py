from flask import current_app, jsonify

from ..errors import STATUS_BY_REASON


def services():
    return current_app.extensions["tourism"]


def signed_in_session():
    """The stored session, after checking its account still exists."""
    return services().verifier.current()


def unauthorized():
    return jsonify({"error": "Unauthorized"}), 401


def result_response(result, success_status=200):
    if result.success:
        return jsonify(result.to_dict()), success_status
    return jsonify(result.to_dict()), STATUS_BY_REASON.get(result.reason, 500)
