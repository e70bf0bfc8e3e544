# Overview: Request decorators for API routes.

from functools import wraps
from flask import request, jsonify, g

from .errors import ValidationError
from .validation import require_actor


ACTOR_HEADER = "X-Actor"


def require_actor_identity(f):
    """
    Establish the acting user for ledger mutations.

    Authentication is handled upstream; the authenticated username arrives in
    the X-Actor header. Clients without that proxy may send "actor_name" in the
    JSON body instead.

    Sets g.actor_name. Returns 401 if neither is present.
    """
    @wraps(f)
    def decorated_function(*args, **kwargs):
        raw = request.headers.get(ACTOR_HEADER)
        if not raw:
            payload = request.get_json(silent=True) or {}
            if isinstance(payload, dict):
                raw = payload.get("actor_name")

        try:
            g.actor_name = require_actor(raw)
        except ValidationError:
            return jsonify({"error": "Authentication required", "code": "unauthenticated"}), 401

        return f(*args, **kwargs)

    return decorated_function
