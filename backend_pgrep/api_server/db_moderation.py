"""
pgrep moderation store — SQLAlchemy-backed profiles, overwatch reports,
notifications and visitor presence.

Uses DATABASE_URL for PostgreSQL when set; otherwise falls back to SQLite
(PGREP_DB_PATH or pgrep.db). Profiles keep the last trust rating and the
auto-flag timestamp; reports go pending -> approved | declined; users keep
the last heartbeat time for the active-user counts.
"""

from __future__ import annotations

import os
import time
from contextlib import contextmanager
from datetime import datetime, timezone
from typing import Any, Iterator
from urllib.parse import urlsplit

from sqlalchemy import Column, Integer, String, create_engine, func
from sqlalchemy.orm import Session, declarative_base, sessionmaker

from backend_pgrep.core.exceptions import (
    ReportConflictError,
    ReportNotFoundError,
    ReportValidationError,
)
from backend_pgrep.pgrep_logging import get_logger
from backend_pgrep.upstream.signal_builder import parse_timestamp

logger = get_logger(__name__)

Base = declarative_base()

# Scores strictly below this mark a profile as auto-flagged ("Highly Suspicious")
AUTO_FLAG_THRESHOLD = 40

ALLOWED_CHEAT_TYPES = frozenset(
    {"Aim", "Wallhack", "Triggerbot", "Rage hacking", "Spinbot", "Macro", "Other"}
)
STATUS_PENDING = "pending"
STATUS_APPROVED = "approved"
STATUS_DECLINED = "declined"
RESOLVED_STATUSES = frozenset({STATUS_APPROVED, STATUS_DECLINED})

# Users seen within this window count as active
ACTIVE_WINDOW_SEC = 5 * 60


def _iso(ts: int | None) -> str | None:
    if ts is None:
        return None
    return datetime.fromtimestamp(ts, tz=timezone.utc).isoformat()


# -----------------------------------------------------------------------------
# SQLAlchemy models
# -----------------------------------------------------------------------------


class PlayerProfile(Base):
    """One row per viewed player: display info, last trust rating, auto-flag time."""

    __tablename__ = "pgrep_profiles"

    steam_id = Column(String(32), primary_key=True)
    persona_name = Column(String(256), nullable=True)
    avatar_url = Column(String(512), nullable=True)
    trust_rating = Column(Integer, nullable=True)  # NULL = insufficient data, never 0
    auto_flagged_at = Column(Integer, nullable=True, index=True)  # Unix timestamp
    last_seen_at = Column(Integer, nullable=False)

    def to_dict(self) -> dict[str, Any]:
        return {
            "steam_id": self.steam_id,
            "persona_name": self.persona_name,
            "avatar_url": self.avatar_url,
            "trust_rating": self.trust_rating,
            "auto_flagged_at": _iso(self.auto_flagged_at),
            "last_seen_at": _iso(self.last_seen_at),
        }


class OverwatchReport(Base):
    """Community cheating report against a player; resolved by an admin."""

    __tablename__ = "overwatch_reports"

    id = Column(Integer, primary_key=True, autoincrement=True)
    target_steam_id = Column(String(32), nullable=False, index=True)
    target_persona_name = Column(String(256), nullable=True)
    reporter_steam_id = Column(String(32), nullable=False, index=True)
    reporter_persona_name = Column(String(256), nullable=True)
    demo_url = Column(String(1024), nullable=False)
    cheat_type = Column(String(32), nullable=False)
    occurred_at = Column(Integer, nullable=False)
    status = Column(String(16), nullable=False, default=STATUS_PENDING, index=True)
    created_at = Column(Integer, nullable=False)
    resolved_at = Column(Integer, nullable=True)
    resolved_by = Column(String(32), nullable=True)

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "target_steam_id": self.target_steam_id,
            "target_persona_name": self.target_persona_name,
            "reporter_steam_id": self.reporter_steam_id,
            "reporter_persona_name": self.reporter_persona_name,
            "demo_url": self.demo_url,
            "cheat_type": self.cheat_type,
            "occurred_at": _iso(self.occurred_at),
            "status": self.status,
            "created_at": _iso(self.created_at),
            "resolved_at": _iso(self.resolved_at),
            "resolved_by": self.resolved_by,
        }


class Notification(Base):
    """Message to a reporter when their report is resolved."""

    __tablename__ = "pgrep_notifications"

    id = Column(Integer, primary_key=True, autoincrement=True)
    recipient_steam_id = Column(String(32), nullable=False, index=True)
    message = Column(String(512), nullable=False)
    created_at = Column(Integer, nullable=False)
    read_at = Column(Integer, nullable=True)

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "recipient_steam_id": self.recipient_steam_id,
            "message": self.message,
            "created_at": _iso(self.created_at),
            "read_at": _iso(self.read_at),
        }


class SiteUser(Base):
    """Signed-in visitor; last_seen_at is refreshed by the heartbeat."""

    __tablename__ = "pgrep_users"

    steam_id = Column(String(32), primary_key=True)
    persona_name = Column(String(256), nullable=True)
    last_path = Column(String(512), nullable=True)
    last_seen_at = Column(Integer, nullable=False, index=True)  # Unix timestamp

    def to_dict(self) -> dict[str, Any]:
        return {
            "steam_id": self.steam_id,
            "persona_name": self.persona_name,
            "last_path": self.last_path,
            "last_seen_at": _iso(self.last_seen_at),
        }


# -----------------------------------------------------------------------------
# Engine and session (DATABASE_URL -> Postgres, else SQLite)
# -----------------------------------------------------------------------------

DEFAULT_SQLITE_PATH = "pgrep.db"


def _get_database_url() -> str:
    """Return DATABASE_URL if set; else SQLite at PGREP_DB_PATH or the default path."""
    url = (os.getenv("DATABASE_URL") or "").strip()
    if url:
        return url
    path = (os.getenv("PGREP_DB_PATH") or "").strip() or DEFAULT_SQLITE_PATH
    return f"sqlite:///{path}"


_engine = None
_SessionLocal: sessionmaker | None = None


def _get_engine():
    """Create or return cached engine."""
    global _engine
    if _engine is None:
        url = _get_database_url()
        connect_args = {}
        if url.startswith("sqlite"):
            connect_args["check_same_thread"] = False
        _engine = create_engine(url, connect_args=connect_args, pool_pre_ping=True)
        logger.info("moderation_db_engine", url=url.split("?")[0].split("//")[-1])
    return _engine


def _get_session_factory() -> sessionmaker:
    global _SessionLocal
    if _SessionLocal is None:
        _SessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=_get_engine())
    return _SessionLocal


@contextmanager
def _session_scope() -> Iterator[Session]:
    """Context manager for a single session. Commits on success, rolls back on error."""
    factory = _get_session_factory()
    session = factory()
    try:
        yield session
        session.commit()
    except Exception:
        session.rollback()
        raise
    finally:
        session.close()


def init_db() -> None:
    """Create moderation tables if they do not exist. Safe to call on every startup."""
    try:
        Base.metadata.create_all(bind=_get_engine())
        logger.info("moderation_init_db", url=_get_database_url().split("?")[0].split("//")[-1])
    except Exception as e:
        logger.exception("moderation_init_db_failed", error=str(e))
        raise


def reset_engine_for_test() -> None:
    """Clear cached engine and session factory. For tests only; use with a new PGREP_DB_PATH."""
    global _engine, _SessionLocal
    if _engine is not None:
        _engine.dispose()
    _engine = None
    _SessionLocal = None


# -----------------------------------------------------------------------------
# Profiles and auto-flags
# -----------------------------------------------------------------------------


def upsert_profile(
    steam_id: str,
    persona_name: str | None = None,
    avatar_url: str | None = None,
    trust_rating: int | None = None,
    *,
    now: int | None = None,
) -> dict[str, Any]:
    """
    Insert or update a profile with its latest trust rating.

    A rating below AUTO_FLAG_THRESHOLD sets auto_flagged_at (first flag time is
    kept); a rating at or above it clears the flag; None leaves it untouched.
    """
    steam_id = (steam_id or "").strip()
    if not steam_id:
        raise ValueError("steam_id must be non-empty")
    ts = now if now is not None else int(time.time())
    try:
        with _session_scope() as session:
            row = session.get(PlayerProfile, steam_id)
            if row is None:
                row = PlayerProfile(steam_id=steam_id, last_seen_at=ts)
                session.add(row)
            row.persona_name = persona_name
            row.avatar_url = avatar_url
            row.trust_rating = trust_rating
            row.last_seen_at = ts
            if trust_rating is not None:
                if trust_rating < AUTO_FLAG_THRESHOLD:
                    if row.auto_flagged_at is None:
                        row.auto_flagged_at = ts
                        logger.info("profile_auto_flagged", steam_id=steam_id, trust_rating=trust_rating)
                elif row.auto_flagged_at is not None:
                    row.auto_flagged_at = None
                    logger.info("profile_auto_flag_cleared", steam_id=steam_id, trust_rating=trust_rating)
            session.flush()
            return row.to_dict()
    except Exception as e:
        logger.exception("profile_upsert_failed", steam_id=steam_id, error=str(e))
        raise


def get_profile(steam_id: str) -> dict[str, Any] | None:
    steam_id = (steam_id or "").strip()
    if not steam_id:
        return None
    with _session_scope() as session:
        row = session.get(PlayerProfile, steam_id)
        return row.to_dict() if row else None


def list_auto_flagged(limit: int = 200) -> list[dict[str, Any]]:
    """Auto-flagged profiles, most recently flagged first."""
    with _session_scope() as session:
        rows = (
            session.query(PlayerProfile)
            .filter(PlayerProfile.auto_flagged_at.isnot(None))
            .order_by(PlayerProfile.auto_flagged_at.desc())
            .limit(limit)
            .all()
        )
        return [r.to_dict() for r in rows]


# -----------------------------------------------------------------------------
# Overwatch reports
# -----------------------------------------------------------------------------


def _validate_demo_url(demo_url: str) -> str:
    parts = urlsplit(demo_url.strip())
    if parts.scheme not in ("http", "https") or not parts.netloc:
        raise ReportValidationError("Invalid demo URL.")
    return parts.geturl()


def is_overwatch_banned(steam_id: str) -> bool:
    """True if the player has at least one approved report."""
    with _session_scope() as session:
        row = (
            session.query(OverwatchReport.id)
            .filter(
                OverwatchReport.target_steam_id == steam_id,
                OverwatchReport.status == STATUS_APPROVED,
            )
            .first()
        )
        return row is not None


def add_report(
    target_steam_id: str,
    reporter_steam_id: str,
    demo_url: str,
    cheat_type: str,
    occurred_at: str,
    *,
    target_persona_name: str | None = None,
    reporter_persona_name: str | None = None,
) -> int:
    """
    Insert a pending report. Returns the new report id.

    Raises ReportValidationError for missing fields, unknown cheat type, bad
    date or demo URL; ReportConflictError when the target is already banned.
    """
    target_steam_id = (target_steam_id or "").strip()
    reporter_steam_id = (reporter_steam_id or "").strip()
    if not (target_steam_id and reporter_steam_id and demo_url and cheat_type and occurred_at):
        raise ReportValidationError("Missing required fields.")
    if cheat_type not in ALLOWED_CHEAT_TYPES:
        raise ReportValidationError("Invalid cheat type.")
    occurred = parse_timestamp(occurred_at)
    if occurred is None:
        raise ReportValidationError("Invalid date.")
    demo = _validate_demo_url(demo_url)
    if is_overwatch_banned(target_steam_id):
        raise ReportConflictError("Player is already overwatch banned.")

    with _session_scope() as session:
        report = OverwatchReport(
            target_steam_id=target_steam_id,
            target_persona_name=target_persona_name,
            reporter_steam_id=reporter_steam_id,
            reporter_persona_name=reporter_persona_name,
            demo_url=demo,
            cheat_type=cheat_type,
            occurred_at=int(occurred.timestamp()),
            status=STATUS_PENDING,
            created_at=int(time.time()),
        )
        session.add(report)
        session.flush()
        report_id = report.id
    logger.info(
        "report_submitted",
        report_id=report_id,
        target_steam_id=target_steam_id,
        reporter_steam_id=reporter_steam_id,
        cheat_type=cheat_type,
    )
    return report_id


def resolve_report(report_id: int, status: str, resolved_by: str | None = None) -> dict[str, Any]:
    """
    Approve or decline a report and notify the reporter.

    Raises ReportValidationError for an unknown status and ReportNotFoundError
    for an unknown id.
    """
    if status not in RESOLVED_STATUSES:
        raise ReportValidationError("Invalid status.")
    now = int(time.time())
    with _session_scope() as session:
        report = session.get(OverwatchReport, report_id)
        if report is None:
            raise ReportNotFoundError("Report not found.")
        report.status = status
        report.resolved_at = now
        report.resolved_by = resolved_by
        target_label = report.target_persona_name or report.target_steam_id
        session.add(
            Notification(
                recipient_steam_id=report.reporter_steam_id,
                message=f"Report for {target_label} is {status}.",
                created_at=now,
            )
        )
        session.flush()
        result = report.to_dict()
    logger.info("report_resolved", report_id=report_id, status=status, resolved_by=resolved_by)
    return result


def list_reports(status: str | None = None, limit: int = 200) -> list[dict[str, Any]]:
    """Reports newest first, optionally filtered by status."""
    with _session_scope() as session:
        q = session.query(OverwatchReport)
        if status:
            q = q.filter(OverwatchReport.status == status)
        rows = q.order_by(OverwatchReport.id.desc()).limit(limit).all()
        return [r.to_dict() for r in rows]


def list_notifications(steam_id: str, limit: int = 50) -> list[dict[str, Any]]:
    with _session_scope() as session:
        rows = (
            session.query(Notification)
            .filter(Notification.recipient_steam_id == steam_id)
            .order_by(Notification.id.desc())
            .limit(limit)
            .all()
        )
        return [r.to_dict() for r in rows]


# -----------------------------------------------------------------------------
# Presence and site stats
# -----------------------------------------------------------------------------


def touch_user(
    steam_id: str,
    persona_name: str | None = None,
    last_path: str | None = None,
    *,
    now: int | None = None,
) -> None:
    """Record a heartbeat for a signed-in user (insert or refresh last_seen_at)."""
    steam_id = (steam_id or "").strip()
    if not steam_id:
        raise ValueError("steam_id must be non-empty")
    ts = now if now is not None else int(time.time())
    with _session_scope() as session:
        row = session.get(SiteUser, steam_id)
        if row is None:
            row = SiteUser(steam_id=steam_id, last_seen_at=ts)
            session.add(row)
        if persona_name:
            row.persona_name = persona_name
        row.last_path = last_path
        row.last_seen_at = ts


def list_active_users(
    window_sec: int = ACTIVE_WINDOW_SEC,
    limit: int = 200,
    *,
    now: int | None = None,
) -> list[dict[str, Any]]:
    """Users seen within window_sec, most recent first."""
    cutoff = (now if now is not None else int(time.time())) - window_sec
    with _session_scope() as session:
        rows = (
            session.query(SiteUser)
            .filter(SiteUser.last_seen_at >= cutoff)
            .order_by(SiteUser.last_seen_at.desc())
            .limit(limit)
            .all()
        )
        return [r.to_dict() for r in rows]


def list_indexed_profiles(limit: int = 200) -> list[dict[str, Any]]:
    """Scored profiles, most recently viewed first."""
    with _session_scope() as session:
        rows = (
            session.query(PlayerProfile)
            .order_by(PlayerProfile.last_seen_at.desc())
            .limit(limit)
            .all()
        )
        return [r.to_dict() for r in rows]


def home_stats(window_sec: int = ACTIVE_WINDOW_SEC, *, now: int | None = None) -> dict[str, int]:
    """Counts for the landing page: indexed players, active users, reports, auto-flags."""
    cutoff = (now if now is not None else int(time.time())) - window_sec
    with _session_scope() as session:
        return {
            "players_indexed": session.query(func.count(PlayerProfile.steam_id)).scalar() or 0,
            "active_users": (
                session.query(func.count(SiteUser.steam_id))
                .filter(SiteUser.last_seen_at >= cutoff)
                .scalar()
                or 0
            ),
            "reports_submitted": session.query(func.count(OverwatchReport.id)).scalar() or 0,
            "ai_auto_flagged": (
                session.query(func.count(PlayerProfile.steam_id))
                .filter(PlayerProfile.auto_flagged_at.isnot(None))
                .scalar()
                or 0
            ),
        }
