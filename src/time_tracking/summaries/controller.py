from __future__ import annotations

from flask import Flask, g, jsonify, request

from ..common.web import login_required
from ..container import Container
from ..core.constants import API_BASE_PATH
from ..core.enums import Permission
from ..core.exceptions import NotFoundError
from ..users.permissions import require_self_or_permission
from .serializers import summary_to_dict


def register(app: Flask, container: Container) -> None:
    @app.route(f"{API_BASE_PATH}/daily-summaries", methods=["GET"], endpoint="tt_daily_summaries")
    @login_required
    def daily_summaries():
        user_id = (request.args.get("userId") or "").strip() or g.identity.user_id
        require_self_or_permission(container.access, g.identity, user_id, Permission.VIEW_ALL_SESSIONS)
        if user_id != g.identity.user_id and container.users.get(user_id) is None:
            raise NotFoundError(f"User {user_id} not found")

        settings = container.settings_service.get_effective(user_id)
        today = container.clock.now().astimezone(settings.zone).date()
        year = request.args.get("year") or today.year
        month = request.args.get("month") or today.month

        summaries = container.aggregator.summarize_month(user_id, year, month)
        return jsonify(
            {
                "userId": user_id,
                "year": int(year),
                "month": int(month),
                "timezone": settings.timezone,
                "items": [summary_to_dict(s, settings) for s in summaries],
            }
        )
