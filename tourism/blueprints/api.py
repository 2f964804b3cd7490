from dataclasses import asdict

from flask import Blueprint, current_app, jsonify, request

from . import result_response, services

api_bp = Blueprint("api", __name__, url_prefix="/api")


@api_bp.get("/health")
def health():
    return jsonify({"status": "ok", "message": "Local store is running"})


@api_bp.post("/sync/enabled")
def set_sync_enabled():
    data = request.get_json(silent=True) or {}
    enabled = bool(data.get("enabled"))
    services().sync.set_sync_enabled(enabled)
    return jsonify({"enabled": enabled})


@api_bp.get("/sync/status")
def sync_status():
    sync = services().sync
    last = sync.last_sync_time()
    return jsonify({
        "enabled": sync.is_sync_enabled(),
        "last_sync": last.isoformat() if last else None,
    })


@api_bp.post("/sync/push")
def sync_push():
    svc = services()
    result = svc.sync.sync_all_to_server(svc.database)
    if not result.success:
        current_app.logger.info("Sync push skipped: %s", result.error)
    return result_response(result)


@api_bp.post("/sync/pull")
def sync_pull():
    svc = services()
    result = svc.sync.sync_from_server(svc.locations)
    if not result.success:
        current_app.logger.info("Sync pull skipped: %s", result.error)
    return result_response(result)


@api_bp.get("/admin/stats")
def admin_stats():
    return jsonify(services().database.stats())


@api_bp.get("/admin/accounts")
def admin_accounts():
    accounts = services().accounts.list_all()
    return jsonify({"accounts": [asdict(a) for a in accounts], "count": len(accounts)})


@api_bp.get("/admin/locations")
def admin_locations():
    locations = services().locations.list_all()
    return jsonify({"locations": locations, "count": len(locations)})


@api_bp.get("/admin/reviews")
def admin_reviews():
    reviews = services().database.all_reviews()
    return jsonify({"reviews": reviews, "count": len(reviews)})
