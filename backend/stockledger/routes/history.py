# Overview: Flask API route for the transaction log; read-only.

from flask import Blueprint, request, current_app

from ..models import ActionType
from ..services.transaction_log_service import get_history

history_bp = Blueprint("history", __name__, url_prefix="/api/history")


@history_bp.get("")
def list_history_route():
    default_limit = current_app.config.get("HISTORY_LIMIT", 500)
    limit = request.args.get("limit", default=default_limit, type=int)
    limit = max(1, min(limit, default_limit))

    action = None
    action_raw = request.args.get("action")
    if action_raw:
        action = ActionType.parse(action_raw)
        if action is ActionType.UNKNOWN:
            return {"error": f"Unknown action: {action_raw}", "code": "invalid_argument"}, 400

    rows = get_history(limit=limit, action=action)
    return {"items": rows, "count": len(rows)}
