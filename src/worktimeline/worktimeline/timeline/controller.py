from __future__ import annotations

import logging

from flask import Flask, jsonify, request, send_file

from ..container import Container
from ..core.exceptions import DomainError, EmptyOperationSetError, InconsistentChainStateError, FormulaMirrorGapError
from ..history.model import row_to_dict
from .requests import parse_timeline_request

logger = logging.getLogger(__name__)

XLSX_MIMETYPE = "application/vnd.openxmlformats-officedocument.spreadsheetml.sheet"


def _session_json(s) -> dict:
    return {"id": s.session_id, "name": s.name, "created_at": s.created_at.isoformat()}


def _entry_json(entry) -> dict:
    return {
        "title": entry.title,
        "chain": entry.chain,
        "time_mode": entry.time_mode.value,
        "lunch": entry.lunch.to_dict() if entry.lunch else None,
        "rows": [row_to_dict(r) for r in entry.rows],
        "report_lines": list(entry.report_lines),
    }


def _error(message: str, status: int):
    return jsonify({"success": False, "message": message}), status


def register(app: Flask, container: Container) -> None:
    settings = container.settings

    @app.errorhandler(DomainError)
    def domain_error(e: DomainError):
        if isinstance(e, EmptyOperationSetError):
            return _error(str(e), 422)
        if isinstance(e, (InconsistentChainStateError, FormulaMirrorGapError)):
            return _error(str(e), 409)
        return _error(str(e), 400)

    @app.route("/api/sessions", methods=["GET"], endpoint="list_sessions")
    def list_sessions():
        sessions = container.history_repo.list_sessions()
        return jsonify({"success": True, "sessions": [_session_json(s) for s in sessions]})

    @app.route("/api/sessions", methods=["POST"], endpoint="create_session")
    def create_session():
        data = request.get_json(silent=True) or {}
        name = str(data.get("name") or "").strip() or "Session"
        created = container.history_repo.create_session(name)
        return jsonify({"success": True, "session": _session_json(created)}), 201

    @app.route("/api/sessions/<session_id>", methods=["PATCH"], endpoint="rename_session")
    def rename_session(session_id: str):
        data = request.get_json(silent=True) or {}
        name = str(data.get("name") or "").strip()
        if not name:
            return _error("Name is required", 400)
        if not container.history_repo.rename_session(session_id=session_id, name=name):
            return _error("Session not found", 404)
        return jsonify({"success": True})

    @app.route("/api/sessions/<session_id>", methods=["DELETE"], endpoint="delete_session")
    def delete_session(session_id: str):
        if not container.history_repo.delete_session(session_id):
            return _error("Session not found", 404)
        return jsonify({"success": True})

    @app.route("/api/sessions/<session_id>/timeline", methods=["POST"], endpoint="generate_timeline")
    def generate_timeline(session_id: str):
        payload = parse_timeline_request(
            request.get_json(silent=True),
            max_operations=settings.max_operations,
            max_workers=settings.max_workers,
            default_lunch_start=settings.default_lunch_start,
            default_lunch_duration=settings.default_lunch_duration,
        )
        entry = container.timeline_service.generate(session_id, payload)
        if entry is None:
            return _error("A timeline is already being generated", 409)
        return jsonify({"success": True, "entry": _entry_json(entry)}), 201

    @app.route("/api/sessions/<session_id>/history", methods=["GET"], endpoint="get_history")
    def get_history(session_id: str):
        if not container.history_repo.get_session(session_id):
            return _error("Session not found", 404)
        entries = container.history_repo.list_entries(session_id)
        return jsonify({"success": True, "entries": [_entry_json(e) for e in entries]})

    @app.route("/api/sessions/<session_id>/history", methods=["DELETE"], endpoint="clear_history")
    def clear_history(session_id: str):
        if not container.history_repo.get_session(session_id):
            return _error("Session not found", 404)
        removed = container.history_repo.clear_entries(session_id)
        return jsonify({"success": True, "removed": removed})

    @app.route("/api/sessions/<session_id>/export", methods=["GET"], endpoint="export_session")
    def export_session(session_id: str):
        if not container.history_repo.get_session(session_id):
            return _error("Session not found", 404)
        try:
            out = container.export_service.export(session_id)
        except DomainError:
            # Left to the registered DomainError handler, not the 500 below.
            raise
        except Exception:
            logger.exception("Export of session %s failed", session_id)
            return _error("Export failed", 500)
        if out is None:
            return _error("An export is already running", 409)
        return send_file(out, mimetype=XLSX_MIMETYPE, as_attachment=True, download_name="timeline.xlsx")
