from __future__ import annotations

from flask import Flask, jsonify

from ..common.http import date_arg, json_endpoint
from ..core.exceptions import ValidationError
from ..container import Container


def register(app: Flask, container: Container) -> None:
    @app.route("/api/reports/gym-hours", methods=["GET"], endpoint="report_gym_hours")
    @json_endpoint
    def report_gym_hours():
        start = date_arg("start")
        end = date_arg("end")
        if start and end and end < start:
            raise ValidationError("end must be on or after start")
        return jsonify(container.report_service.gym_hours(start=start, end=end))

    @app.route("/api/reports/summary", methods=["GET"], endpoint="report_summary")
    @json_endpoint
    def report_summary():
        return jsonify(container.report_service.attendance_summary())

    @app.route("/api/reports/dashboard", methods=["GET"], endpoint="report_dashboard")
    @json_endpoint
    def report_dashboard():
        return jsonify(container.report_service.dashboard_stats())
