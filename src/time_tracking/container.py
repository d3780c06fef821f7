from __future__ import annotations

from dataclasses import dataclass
from typing import Optional

from .common.clock import Clock, SystemClock
from .core.constants import DEFAULT_MAX_REPORT_DAYS, DEFAULT_TIMEZONE
from .database.connection import DBConfig, DatabaseConnection
from .notifications.events import NotificationEventSink, NullEventSink, SessionEventSink
from .notifications.mysql_notification_repository import MySQLNotificationRepository
from .reports.service import ReportGenerator
from .sessions.manager import SessionManager
from .sessions.memory_session_store import InMemorySessionStore
from .sessions.mysql_session_store import MySQLSessionStore
from .sessions.registry import ActiveSessionRegistry
from .sessions.store import SessionStore
from .settings.model import TrackingSettings
from .settings.mysql_settings_repository import MySQLSettingsRepository
from .settings.repository import InMemorySettingsRepository, SettingsRepository
from .settings.service import SettingsService
from .summaries.aggregator import Aggregator
from .users.directory import InMemoryUserDirectory, UserDirectory
from .users.mysql_user_directory import MySQLUserDirectory
from .users.permissions import AccessPolicy, RoleAccessPolicy


@dataclass(frozen=True)
class Container:
    clock: Clock
    access: AccessPolicy
    users: UserDirectory
    session_store: SessionStore
    events: SessionEventSink

    settings_service: SettingsService
    session_manager: SessionManager
    session_registry: ActiveSessionRegistry
    aggregator: Aggregator
    report_generator: ReportGenerator


def build_container(
    *,
    db_config: Optional[dict] = None,
    storage_backend: str = "mysql",
    clock: Optional[Clock] = None,
    users: Optional[UserDirectory] = None,
    access: Optional[AccessPolicy] = None,
    events: Optional[SessionEventSink] = None,
    default_timezone: str = DEFAULT_TIMEZONE,
    default_max_report_days: int = DEFAULT_MAX_REPORT_DAYS,
    notifications_enabled: bool = True,
) -> Container:
    clock = clock or SystemClock()
    access = access or RoleAccessPolicy()

    settings_repo: SettingsRepository
    if storage_backend == "memory":
        session_store: SessionStore = InMemorySessionStore()
        settings_repo = InMemorySettingsRepository()
        users = users or InMemoryUserDirectory()
        events = events or NullEventSink()
    elif storage_backend == "mysql":
        if db_config is None:
            raise ValueError("db_config is required for the mysql storage backend")
        conn = DatabaseConnection(DBConfig.from_dict(db_config))
        session_store = MySQLSessionStore(conn)
        settings_repo = MySQLSettingsRepository(conn)
        users = users or MySQLUserDirectory(conn)
        if events is None:
            events = NotificationEventSink(MySQLNotificationRepository(conn)) if notifications_enabled else NullEventSink()
    else:
        raise ValueError(f"Unknown storage backend: {storage_backend!r}")

    settings_service = SettingsService(
        settings_repo,
        defaults=TrackingSettings(timezone=default_timezone, max_report_days=int(default_max_report_days)),
    )
    session_manager = SessionManager(session_store, settings_service, clock=clock, access=access, events=events)
    session_registry = ActiveSessionRegistry(session_store, users)
    aggregator = Aggregator(session_store, settings_service, clock=clock)
    report_generator = ReportGenerator(aggregator, users, settings_service)

    return Container(
        clock=clock,
        access=access,
        users=users,
        session_store=session_store,
        events=events,
        settings_service=settings_service,
        session_manager=session_manager,
        session_registry=session_registry,
        aggregator=aggregator,
        report_generator=report_generator,
    )
