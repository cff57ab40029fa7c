"""
api.errors - JSON error handlers for the API blueprint.
"""

from flask import jsonify
from api import api_bp
from import_engine.batch import ImportStateError
from services.import_runner import FlowNotFound


@api_bp.errorhandler(FlowNotFound)
def api_flow_not_found(e):
    return jsonify({"error": f"import flow {e.args[0]} not found"}), 404


@api_bp.errorhandler(ImportStateError)
def api_state_conflict(e):
    return jsonify({"error": str(e)}), 409


@api_bp.errorhandler(404)
def api_not_found(_e):
    return jsonify({"error": "not found"}), 404


@api_bp.errorhandler(400)
def api_bad_request(_e):
    return jsonify({"error": "bad request"}), 400


@api_bp.errorhandler(413)
def api_too_large(_e):
    return jsonify({"error": "file too large"}), 413


@api_bp.errorhandler(500)
def api_server_error(_e):
    return jsonify({"error": "internal server error"}), 500
