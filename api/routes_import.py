"""
api.routes_import - /api/v1/import/* endpoints.

One flow per uploaded file: upload → preview/selection → start →
(pause → resume | keep | discard) → close.  Batch runs happen in the
background; clients poll GET /import/flows/<id> for progress.
"""

from flask import current_app, jsonify, request

import config
from api import api_bp
from import_engine.flow import FlowStage
from import_engine.batch import ImportStateError


def _runner():
    return current_app.extensions["import_runner"]


def _page() -> int:
    try:
        return max(int(request.args.get("page", 1)), 1)
    except ValueError:
        return 1


def _snapshot(flow_id: str, flow, status: int = 200, **extra):
    data = flow.snapshot(_page())
    data.update(extra)
    data["id"] = flow_id
    data["media_type"] = _runner().media_type(flow_id)
    data["busy"] = _runner().is_busy(flow_id)
    return jsonify(data), status


@api_bp.route("/import/<media_type>", methods=["POST"])
def import_upload(media_type: str):
    """
    POST /api/v1/import/{MOVIE|SERIES|ANIME|BOOK|GAME}

    Multipart: field name 'file'.  Creates a flow and returns its
    first preview page (parse warnings included).
    """
    media_type = media_type.upper()
    if media_type not in config.MEDIA_TYPES:
        return jsonify({"error": f"unknown media type {media_type}"}), 404

    f = request.files.get("file")
    if not f or not f.filename:
        return jsonify({"error": "no file in upload"}), 400

    flow_id, flow = _runner().create(media_type)
    flow.load_file(f.read(), f.filename)
    return _snapshot(flow_id, flow, 201)


@api_bp.route("/import/flows/<flow_id>")
def import_status(flow_id: str):
    """GET /api/v1/import/flows/{id}?page=N"""
    return _snapshot(flow_id, _runner().get(flow_id))


@api_bp.route("/import/flows/<flow_id>/rows/<int:index>/toggle", methods=["POST"])
def import_toggle_row(flow_id: str, index: int):
    flow = _runner().get(flow_id)
    if flow.stage != FlowStage.PREVIEW:
        raise ImportStateError(f"selection is locked while {flow.stage.value}")
    try:
        flow.preview.toggle_row(index)
    except IndexError:
        return jsonify({"error": f"row {index} not found"}), 404
    return _snapshot(flow_id, flow)


@api_bp.route("/import/flows/<flow_id>/toggle_all", methods=["POST"])
def import_toggle_all(flow_id: str):
    flow = _runner().get(flow_id)
    if flow.stage != FlowStage.PREVIEW:
        raise ImportStateError(f"selection is locked while {flow.stage.value}")
    flow.preview.toggle_all()
    return _snapshot(flow_id, flow)


@api_bp.route("/import/flows/<flow_id>/back", methods=["POST"])
def import_back(flow_id: str):
    """Drop the parsed file; the flow waits for a new upload."""
    flow = _runner().get(flow_id)
    flow.back()
    return _snapshot(flow_id, flow)


@api_bp.route("/import/flows/<flow_id>/file", methods=["POST"])
def import_replace_file(flow_id: str):
    """Load another file into an existing flow (after /back)."""
    flow = _runner().get(flow_id)
    if flow.stage != FlowStage.SELECT:
        raise ImportStateError(f"cannot load a file while {flow.stage.value}")
    f = request.files.get("file")
    if not f or not f.filename:
        return jsonify({"error": "no file in upload"}), 400
    flow.load_file(f.read(), f.filename)
    return _snapshot(flow_id, flow)


@api_bp.route("/import/flows/<flow_id>/start", methods=["POST"])
def import_start(flow_id: str):
    """Commit the selected rows in the background."""
    flow = _runner().get(flow_id)
    if flow.stage != FlowStage.PREVIEW:
        raise ImportStateError(f"cannot start while {flow.stage.value}")
    if not flow.preview.can_import:
        return jsonify({"error": "no rows selected"}), 409
    _runner().submit(flow_id, lambda fl: fl.confirm_import())
    return _snapshot(flow_id, flow, 202)


@api_bp.route("/import/flows/<flow_id>/pause", methods=["POST"])
def import_pause(flow_id: str):
    """Request a stop at the next row boundary."""
    flow = _runner().get(flow_id)
    requested = flow.request_pause()
    return _snapshot(flow_id, flow, pause_requested=requested)


@api_bp.route("/import/flows/<flow_id>/resume", methods=["POST"])
def import_resume(flow_id: str):
    flow = _runner().get(flow_id)
    if flow.stage != FlowStage.PAUSED:
        raise ImportStateError(f"cannot resume while {flow.stage.value}")
    _runner().submit(flow_id, lambda fl: fl.resume())
    return _snapshot(flow_id, flow, 202)


@api_bp.route("/import/flows/<flow_id>/keep", methods=["POST"])
def import_keep(flow_id: str):
    """Accept the rows committed before the pause."""
    flow = _runner().get(flow_id)
    flow.keep_imported()
    return _snapshot(flow_id, flow)


@api_bp.route("/import/flows/<flow_id>/discard", methods=["POST"])
def import_discard(flow_id: str):
    """Delete every row this flow committed."""
    flow = _runner().get(flow_id)
    if flow.stage != FlowStage.PAUSED:
        raise ImportStateError(f"cannot discard while {flow.stage.value}")
    _runner().submit(flow_id, lambda fl: fl.discard_all())
    return _snapshot(flow_id, flow, 202)


@api_bp.route("/import/flows/<flow_id>", methods=["DELETE"])
def import_close(flow_id: str):
    _runner().close(flow_id)
    return jsonify({"closed": flow_id})
