from dataclasses import asdict

from flask import Blueprint, jsonify, request

from ..models import LocationSnapshot
from . import result_response, services, signed_in_session, unauthorized

main_bp = Blueprint("main", __name__, url_prefix="/api")


@main_bp.post("/saved")
def save_location():
    session = signed_in_session()
    if session is None:
        return unauthorized()

    data = request.get_json(silent=True) or {}
    snapshot = LocationSnapshot(
        id=str(data.get("id") or ""),
        name=data.get("name") or "",
        image_url=data.get("image_url"),
        rating=data.get("rating"),
        description=data.get("description"),
    )
    result = services().saved.save(session.account.id, snapshot)
    return result_response(result, success_status=201)


@main_bp.get("/saved")
def list_saved():
    session = signed_in_session()
    if session is None:
        return unauthorized()

    saved = services().saved.list_for_account(session.account.id)
    return jsonify({"saved": [asdict(s) for s in saved], "count": len(saved)}), 200


@main_bp.get("/saved/<location_id>")
def is_saved(location_id):
    session = signed_in_session()
    if session is None:
        return unauthorized()
    return jsonify({"saved": services().saved.is_saved(session.account.id, location_id)}), 200


@main_bp.delete("/saved/<location_id>")
def remove_saved(location_id):
    session = signed_in_session()
    if session is None:
        return unauthorized()
    return result_response(services().saved.remove(session.account.id, location_id))


@main_bp.post("/visits")
def save_visit():
    session = signed_in_session()
    if session is None:
        return unauthorized()

    data = request.get_json(silent=True) or {}
    result = services().visits.save_visit_and_review(
        session.account.id,
        data.get("location_id"),
        data.get("location_name"),
        data.get("image_url"),
        data.get("rating"),
        data.get("review_text"),
        latitude=data.get("latitude"),
        longitude=data.get("longitude"),
    )
    return result_response(result)


@main_bp.get("/visits")
def list_visits():
    session = signed_in_session()
    if session is None:
        return unauthorized()

    visited = services().visits.list_visited(session.account.id)
    return jsonify({"visited": [asdict(v) for v in visited], "count": len(visited)}), 200


@main_bp.get("/visits/<location_id>")
def is_visited(location_id):
    session = signed_in_session()
    if session is None:
        return unauthorized()
    return jsonify({"visited": services().visits.is_visited(session.account.id, location_id)}), 200


@main_bp.get("/locations/<location_id>/reviews")
def location_reviews(location_id):
    reviews = services().visits.reviews_for_location(location_id)
    return jsonify({"reviews": reviews, "count": len(reviews)}), 200


@main_bp.get("/profile/stats")
def profile_stats():
    session = signed_in_session()
    if session is None:
        return unauthorized()

    stats = services().visits.stats(session.account.id)
    return jsonify({
        "username": session.account.username,
        "email": session.email,
        **asdict(stats),
    }), 200
