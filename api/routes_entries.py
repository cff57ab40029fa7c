"""
api.routes_entries - /api/v1/entries read-only listing.
"""

from flask import request, jsonify

from api import api_bp
from db import get_session
from services.entries_service import EntriesService
import config


@api_bp.route("/entries")
def list_entries():
    """
    GET /api/v1/entries?type=MOVIE&limit=100&offset=0
    """
    media_type = request.args.get("type", "").strip().upper() or None
    if media_type and media_type not in config.MEDIA_TYPES:
        return jsonify({"error": f"unknown media type {media_type}"}), 400
    limit  = min(int(request.args.get("limit", config.API_DEFAULT_LIMIT)),
                 config.API_MAX_LIMIT)
    offset = int(request.args.get("offset", 0))

    session = get_session()
    try:
        entries = EntriesService.list_entries(session, media_type, limit=limit, offset=offset)
        return jsonify({
            "total": EntriesService.count(session, media_type),
            "offset": offset,
            "limit": limit,
            "entries": [e.to_dict() for e in entries],
        })
    finally:
        session.close()
