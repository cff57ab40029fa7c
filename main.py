#!/usr/bin/env python3
"""
MediaDash - Media tracking import service
==========================================

Single-command run:  python main.py

See config.py for all environment-variable tunables.
"""

import logging

from flask import Flask, jsonify

import config
from db import init_db, get_session
from api import api_bp
from services.entries_service import EntriesService, make_insert_operation
from services.import_runner import ImportRunner


def create_app(db_url: str = None) -> Flask:
    """Flask application factory."""

    app = Flask(__name__)
    app.secret_key = config.SECRET
    app.config["MAX_CONTENT_LENGTH"] = config.MAX_UPLOAD_BYTES

    # ── Initialise database ─────────────────────────────────────────
    init_db(db_url or config.DB_URL)

    # ── Live import flows ───────────────────────────────────────────
    app.extensions["import_runner"] = ImportRunner()

    # ── Register blueprints ─────────────────────────────────────────
    app.register_blueprint(api_bp)

    @app.route("/health")
    def health():
        return jsonify({"ok": True})

    # ── Error handlers ──────────────────────────────────────────────
    @app.errorhandler(404)
    def _404(e):
        return jsonify({"error": "not found"}), 404

    @app.errorhandler(500)
    def _500(e):
        return jsonify({"error": "internal server error"}), 500

    return app


def _seed_if_empty():
    """Auto-import the seed file when the database is empty."""
    session = get_session()
    count = EntriesService.count(session)
    session.close()

    if count > 0:
        print(f"\n  Database has {count} entries.")
        return

    if not config.SEED_PATH.exists():
        print(f"\n  No seed file at {config.SEED_PATH} - starting empty.")
        return

    print(f"\n  Database empty → importing {config.SEED_PATH.name} as {config.SEED_TYPE} …")
    from import_engine import run_import

    with open(config.SEED_PATH, "rb") as fh:
        result, state = run_import(fh.read(), config.SEED_PATH.name,
                                   make_insert_operation(config.SEED_TYPE))

    print(f"  Done: {state.imported_count} imported, "
          f"{len(result.errors)} skipped")
    if result.errors:
        print(f"  First warnings (max 10):")
        for err in result.errors[:10]:
            print(f"    {err}")


def main():
    logging.basicConfig(
        level=config.LOG_LEVEL,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    print("=" * 56)
    print("  MediaDash - Import Service")
    print("=" * 56)

    app = create_app()
    print(f"  Database: {config.DB_URL}")
    _seed_if_empty()

    print(f"\n  http://{config.HOST}:{config.PORT}")
    print("=" * 56)

    app.run(host=config.HOST, port=config.PORT, debug=config.DEBUG)


if __name__ == "__main__":
    main()
