from __future__ import annotations

from flask import Flask, jsonify, request

from ..common.http import fail, json_body, json_endpoint
from ..container import Container


def register(app: Flask, container: Container) -> None:
    @app.route("/api/scan", methods=["POST"], endpoint="api_scan")
    @json_endpoint
    def api_scan():
        """Kiosk scan: auto-detect check-in or check-out from the current session."""
        code = str(json_body().get("code") or "").strip()
        if not code:
            return fail("QR code is empty", 400)

        # Denials are normal results, so every decision is a 200.
        decision = container.access_service.process_scan(code)
        return jsonify(decision.to_dict()), 200

    @app.route("/api/checkin/<member_id>", methods=["POST"], endpoint="api_checkin")
    @json_endpoint
    def api_checkin(member_id: str):
        decision = container.access_service.process_check_in(member_id)
        return jsonify(decision.to_dict()), 200

    @app.route("/api/checkout/<member_id>", methods=["POST"], endpoint="api_checkout")
    @json_endpoint
    def api_checkout(member_id: str):
        decision = container.access_service.process_check_out(member_id)
        return jsonify(decision.to_dict()), 200

    @app.route("/api/sessions", methods=["GET"], endpoint="api_sessions")
    @json_endpoint
    def api_sessions():
        sessions = container.access_service.list_active_sessions()
        return jsonify([s.to_dict() for s in sessions])

    @app.route("/api/sessions/<member_id>", methods=["GET"], endpoint="api_session")
    @json_endpoint
    def api_session(member_id: str):
        container.member_service.get_member(member_id)
        session = container.access_service.get_active_session(member_id)
        return jsonify({"member_id": member_id, "checked_in": session is not None, "session": session.to_dict() if session else None})

    @app.route("/api/logs", methods=["GET"], endpoint="api_logs")
    @json_endpoint
    def api_logs():
        today_only = request.args.get("scope") == "today"
        logs = container.report_service.list_logs(today_only=today_only)
        return jsonify([e.to_dict() for e in logs])
