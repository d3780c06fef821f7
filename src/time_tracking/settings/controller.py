from __future__ import annotations

from flask import Flask, g, jsonify, request

from ..common.web import json_body, login_required
from ..container import Container
from ..core.constants import API_BASE_PATH
from ..core.enums import Permission
from ..core.exceptions import NotFoundError, ValidationError
from ..users.permissions import require_permission, require_self_or_permission
from .model import TrackingSettings

_API_TO_FIELD = {
    "roundingMinutes": "rounding_minutes",
    "maxBreakMinutes": "max_break_minutes",
    "enforceMaxBreak": "enforce_max_break",
    "timezone": "timezone",
    "maxReportDays": "max_report_days",
}


def settings_to_dict(settings: TrackingSettings) -> dict:
    return {api: getattr(settings, field) for api, field in _API_TO_FIELD.items()}


def register(app: Flask, container: Container) -> None:
    service = container.settings_service

    @app.route(f"{API_BASE_PATH}/settings", methods=["GET"], endpoint="tt_settings_get")
    @login_required
    def settings_get():
        user_id = (request.args.get("userId") or "").strip() or g.identity.user_id
        require_self_or_permission(container.access, g.identity, user_id, Permission.VIEW_ALL_SESSIONS)
        return jsonify(
            {
                "userId": user_id,
                "global": settings_to_dict(service.get_global()),
                "effective": settings_to_dict(service.get_effective(user_id)),
            }
        )

    @app.route(f"{API_BASE_PATH}/settings", methods=["PUT"], endpoint="tt_settings_put")
    @login_required
    def settings_put():
        require_permission(container.access, g.identity, Permission.MANAGE_SETTINGS)

        body = dict(json_body())
        user_id = body.pop("userId", None)
        if user_id is not None:
            user_id = str(user_id)
            if container.users.get(user_id) is None:
                raise NotFoundError(f"User {user_id} not found")

        unknown = set(body) - set(_API_TO_FIELD)
        if unknown:
            raise ValidationError(f"Unknown settings: {', '.join(sorted(unknown))}")

        updated = service.update({_API_TO_FIELD[k]: v for k, v in body.items()}, user_id=user_id)
        return jsonify({"userId": user_id, "effective": settings_to_dict(updated)})
