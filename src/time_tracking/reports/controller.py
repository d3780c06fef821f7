from __future__ import annotations

from flask import Flask, Response, g, jsonify

from ..common.datetime_utils import format_hhmm, parse_iso_date
from ..common.validators import require_non_empty
from ..common.web import json_body, login_required
from ..container import Container
from ..core.constants import API_BASE_PATH
from ..core.enums import Permission
from ..core.exceptions import ValidationError
from ..sessions.serializers import user_to_dict
from ..summaries.serializers import summary_to_dict
from ..users.permissions import require_permission


def register(app: Flask, container: Container) -> None:
    generator = container.report_generator

    def _build_report():
        body = json_body()
        user_ids = body.get("userIds")
        if not isinstance(user_ids, list):
            raise ValidationError("userIds must be a list of user ids")
        user_ids = [uid for uid in (str(u).strip() for u in user_ids) if uid]

        start = parse_iso_date(require_non_empty(body.get("startDate"), "startDate"))
        end = parse_iso_date(require_non_empty(body.get("endDate"), "endDate"))

        if any(uid != g.identity.user_id for uid in user_ids):
            require_permission(container.access, g.identity, Permission.VIEW_REPORTS)

        return generator.generate(user_ids, start, end), start, end

    @app.route(f"{API_BASE_PATH}/report", methods=["POST"], endpoint="tt_report")
    @login_required
    def report():
        data, start, end = _build_report()
        users = generator.users_for(data)

        rows = {}
        totals = {}
        for uid, summaries in data.items():
            settings = container.settings_service.get_effective(uid)
            rows[uid] = [summary_to_dict(s, settings) for s in summaries]
            worked = settings.round_seconds(sum(s.worked_seconds for s in summaries))
            totals[uid] = {
                "workedSeconds": worked,
                "breakSeconds": settings.round_seconds(sum(s.break_seconds for s in summaries)),
                "workedHours": format_hhmm(worked),
                "sessionCount": sum(s.session_count for s in summaries),
            }

        return jsonify(
            {
                "startDate": start.isoformat(),
                "endDate": end.isoformat(),
                "users": {uid: user_to_dict(users.get(uid)) for uid in data},
                "report": rows,
                "totals": totals,
            }
        )

    @app.route(f"{API_BASE_PATH}/report/export", methods=["POST"], endpoint="tt_report_export")
    @login_required
    def report_export():
        data, start, end = _build_report()
        filename = f"time_report_{start.strftime('%Y%m%d')}_{end.strftime('%Y%m%d')}.csv"
        return Response(
            generator.export_csv(data),
            mimetype="text/csv",
            headers={"Content-Disposition": f"attachment; filename={filename}"},
        )
