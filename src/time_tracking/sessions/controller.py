from __future__ import annotations

from flask import Flask, g, jsonify, request

from ..common.datetime_utils import parse_bound
from ..common.web import json_body, login_required, parse_status
from ..container import Container
from ..core.constants import API_BASE_PATH
from ..core.enums import Permission
from ..core.exceptions import NotFoundError
from ..users.permissions import require_permission, require_self_or_permission
from .model import SessionFilter
from .serializers import break_to_dict, page_to_dict, session_to_dict


def register(app: Flask, container: Container) -> None:
    manager = container.session_manager
    registry = container.session_registry

    def _filter_from_args(*, with_status: bool = False, with_search: bool = False) -> SessionFilter:
        tz = container.settings_service.get_effective(g.identity.user_id).zone
        return SessionFilter(
            started_from=parse_bound(request.args.get("from"), tz, upper=False),
            started_to=parse_bound(request.args.get("to"), tz, upper=True),
            status=parse_status(request.args.get("status")) if with_status else None,
            search_term=request.args.get("searchTerm") if with_search else None,
        )

    def _history(user_id: str):
        page = registry.list_user_sessions(
            user_id,
            page=request.args.get("page"),
            page_size=request.args.get("limit"),
            session_filter=_filter_from_args(with_status=True),
        )
        return jsonify(page_to_dict(page, container.clock.now()))

    @app.route(f"{API_BASE_PATH}/sessions/start", methods=["POST"], endpoint="tt_session_start")
    @login_required
    def session_start():
        session = manager.start_session(g.identity.user_id, json_body())
        return jsonify(session_to_dict(session, container.clock.now())), 201

    @app.route(f"{API_BASE_PATH}/sessions/end", methods=["POST"], endpoint="tt_session_end")
    @login_required
    def session_end():
        session = manager.end_session(g.identity.user_id, notes=json_body().get("notes"))
        return jsonify(session_to_dict(session, container.clock.now()))

    @app.route(f"{API_BASE_PATH}/sessions/current", methods=["GET"], endpoint="tt_session_current")
    @login_required
    def session_current():
        session = manager.get_current_session(g.identity.user_id)
        now = container.clock.now()
        return jsonify(
            {
                "session": session_to_dict(session, now) if session else None,
                "state": manager.get_state(g.identity.user_id).value,
            }
        )

    @app.route(f"{API_BASE_PATH}/sessions/active/all", methods=["GET"], endpoint="tt_sessions_active")
    @login_required
    def sessions_active():
        require_permission(container.access, g.identity, Permission.VIEW_ALL_SESSIONS)
        sessions = registry.list_active(_filter_from_args(with_search=True))
        now = container.clock.now()
        return jsonify({"items": [session_to_dict(s, now) for s in sessions], "total": len(sessions)})

    @app.route(f"{API_BASE_PATH}/sessions", methods=["GET"], endpoint="tt_sessions_mine")
    @login_required
    def sessions_mine():
        return _history(g.identity.user_id)

    @app.route(f"{API_BASE_PATH}/sessions/user/<user_id>", methods=["GET"], endpoint="tt_sessions_for_user")
    @login_required
    def sessions_for_user(user_id: str):
        require_self_or_permission(container.access, g.identity, user_id, Permission.VIEW_ALL_SESSIONS)
        if user_id != g.identity.user_id and container.users.get(user_id) is None:
            raise NotFoundError(f"User {user_id} not found")
        return _history(user_id)

    @app.route(f"{API_BASE_PATH}/sessions/<int:session_id>/notes", methods=["PUT"], endpoint="tt_session_notes")
    @login_required
    def session_notes(session_id: int):
        session = manager.update_notes(session_id, json_body().get("notes"), g.identity)
        return jsonify(session_to_dict(session, container.clock.now()))

    @app.route(f"{API_BASE_PATH}/breaks/start", methods=["POST"], endpoint="tt_break_start")
    @login_required
    def break_start():
        brk = manager.start_break(g.identity.user_id)
        return jsonify(break_to_dict(brk, container.clock.now())), 201

    @app.route(f"{API_BASE_PATH}/breaks/end", methods=["POST"], endpoint="tt_break_end")
    @login_required
    def break_end():
        brk = manager.end_break(g.identity.user_id)
        return jsonify(break_to_dict(brk, container.clock.now()))
