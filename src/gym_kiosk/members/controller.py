from __future__ import annotations

from flask import Flask, jsonify, request

from ..common.http import date_arg, json_body, json_endpoint
from ..core.exceptions import ValidationError
from ..container import Container


def _int(value, field_name: str) -> int:
    try:
        return int(value)
    except (TypeError, ValueError):
        raise ValidationError(f"{field_name} must be a whole number")


def register(app: Flask, container: Container) -> None:
    @app.route("/api/members", methods=["GET"], endpoint="list_members")
    @json_endpoint
    def list_members():
        profiles = container.member_service.list_profiles(request.args.get("search"))
        return jsonify([p.to_dict() for p in profiles])

    @app.route("/api/members", methods=["POST"], endpoint="add_member")
    @json_endpoint
    def add_member():
        data = json_body()
        member = container.member_service.register_member(
            name=str(data.get("name", "")),
            email=str(data.get("email", "")),
            phone=str(data.get("phone", "")),
            height_cm=data.get("height_cm"),
            weight_kg=data.get("weight_kg"),
            plan_months=_int(data.get("plan_months", 1), "plan_months"),
            start=date_arg("start_date", data.get("start_date")),
        )
        return jsonify(container.member_service.get_profile(member.member_id).to_dict()), 201

    @app.route("/api/members/<member_id>", methods=["GET"], endpoint="view_member")
    @json_endpoint
    def view_member(member_id: str):
        return jsonify(container.member_service.get_profile(member_id).to_dict())

    @app.route("/api/members/<member_id>", methods=["PATCH"], endpoint="edit_member")
    @json_endpoint
    def edit_member(member_id: str):
        data = json_body()
        member = container.member_service.update_member(
            member_id,
            name=data.get("name"),
            email=data.get("email"),
            phone=data.get("phone"),
            height_cm=data.get("height_cm"),
            weight_kg=data.get("weight_kg"),
        )
        return jsonify(member.to_dict())

    @app.route("/api/members/<member_id>", methods=["DELETE"], endpoint="delete_member")
    @json_endpoint
    def delete_member(member_id: str):
        container.member_service.delete_member(member_id)
        return jsonify({"success": True, "member_id": member_id})

    @app.route("/api/members/import", methods=["POST"], endpoint="import_members")
    @json_endpoint
    def import_members():
        upload = request.files.get("file")
        text = upload.read().decode("utf-8-sig") if upload else request.get_data(as_text=True)
        result = container.member_service.import_members(text)
        return jsonify(result.to_dict()), 200 if result.success else 400

    @app.route("/api/members/<member_id>/renew", methods=["POST"], endpoint="renew_member")
    @json_endpoint
    def renew_member(member_id: str):
        data = json_body()
        plan = str(data.get("plan") or "monthly")
        service = container.subscription_service

        if plan == "monthly":
            subscription = service.renew(member_id, _int(data.get("months", 1), "months"))
        elif plan == "daily":
            subscription = service.renew_daily(member_id)
        elif plan == "walk-in":
            start_date = date_arg("start_date", data.get("start_date") or "")
            end_date = date_arg("end_date", data.get("end_date") or "")
            if not start_date or not end_date:
                raise ValidationError("start_date and end_date are required")
            subscription = service.renew_walk_in(member_id, start_date=start_date, end_date=end_date)
        else:
            raise ValidationError(f"Unknown plan {plan!r}")

        return jsonify(subscription.to_dict())

    @app.route("/api/members/<member_id>/subscription-history", methods=["GET"], endpoint="subscription_history")
    @json_endpoint
    def subscription_history(member_id: str):
        records = container.subscription_service.history(member_id)
        return jsonify([r.to_dict() for r in records])

    @app.route("/api/members/<member_id>/scans", methods=["GET"], endpoint="member_scans")
    @json_endpoint
    def member_scans(member_id: str):
        container.member_service.get_member(member_id)
        return jsonify([e.to_dict() for e in container.report_service.member_scans(member_id)])

    @app.route("/api/subscriptions/expiring", methods=["GET"], endpoint="expiring_subscriptions")
    @json_endpoint
    def expiring_subscriptions():
        days = request.args.get("days")
        threshold = _int(days, "days") if days else None
        return jsonify({"member_ids": container.subscription_service.expiring_member_ids(threshold)})
