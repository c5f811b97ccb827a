import os

from fastapi import Request
from sqlalchemy import create_engine, event, text
from sqlalchemy.engine import Engine
from sqlalchemy.orm import Session, declarative_base, sessionmaker
from sqlalchemy.pool import StaticPool

DATABASE_URL = (os.getenv("SIGNAGE_DATABASE_URL", "sqlite:///./signage.db") or "").strip()

Base = declarative_base()


def _is_memory_sqlite(url: str) -> bool:
    return url in {"sqlite://", "sqlite:///:memory:"}


class Database:
    """Engine plus session factory, opened at start-up and disposed at shutdown."""

    def __init__(self, url: str = DATABASE_URL) -> None:
        self.url = url
        kwargs: dict = {}
        if url.startswith("sqlite"):
            kwargs["connect_args"] = {"check_same_thread": False}
            if _is_memory_sqlite(url):
                # One shared connection, otherwise every session sees an empty database.
                kwargs["poolclass"] = StaticPool
        self.engine: Engine = create_engine(url, **kwargs)
        if url.startswith("sqlite"):
            event.listen(self.engine, "connect", _enable_sqlite_foreign_keys)
        self.session_factory = sessionmaker(bind=self.engine, autocommit=False, autoflush=False)

    def create_all(self) -> None:
        # Model modules must be imported so their tables are registered on Base.
        from signage_cms.models import customer, layout, player, schedule, site  # noqa: F401

        Base.metadata.create_all(bind=self.engine)
        ensure_sqlite_schema(self.engine)

    def session(self) -> Session:
        return self.session_factory()

    def dispose(self) -> None:
        self.engine.dispose()


def _enable_sqlite_foreign_keys(dbapi_connection, _record) -> None:
    cursor = dbapi_connection.cursor()
    cursor.execute("PRAGMA foreign_keys=ON")
    cursor.close()


def get_db(request: Request):
    db = request.app.state.database.session()
    try:
        yield db
    finally:
        db.close()


def ensure_sqlite_schema(engine: Engine) -> None:
    """
    Lightweight runtime schema patching for SQLite.

    `Base.metadata.create_all()` won't add new columns to existing tables.
    Older installs stored schedules against playlists and had no per-site time
    zone; this brings such files up to the current shape without Alembic.
    """
    if not str(engine.url).startswith("sqlite"):
        return

    with engine.begin() as conn:
        schedule_cols = conn.execute(text("PRAGMA table_info(schedule)")).fetchall()
        schedule_col_names = {row[1] for row in schedule_cols}  # (cid, name, type, notnull, dflt_value, pk)
        if schedule_cols and "layout_id" not in schedule_col_names:
            conn.execute(text("ALTER TABLE schedule ADD COLUMN layout_id INTEGER"))
        if schedule_cols and "priority" not in schedule_col_names:
            conn.execute(text("ALTER TABLE schedule ADD COLUMN priority INTEGER DEFAULT 50"))
        if schedule_cols:
            conn.execute(text("UPDATE schedule SET priority=50 WHERE priority IS NULL"))
            conn.execute(
                text(
                    "UPDATE schedule SET days_of_week=NULL "
                    "WHERE days_of_week IS NOT NULL AND trim(days_of_week)=''"
                )
            )

        site_cols = conn.execute(text("PRAGMA table_info(site)")).fetchall()
        site_col_names = {row[1] for row in site_cols}
        if site_cols and "time_zone" not in site_col_names:
            conn.execute(text("ALTER TABLE site ADD COLUMN time_zone VARCHAR(64) DEFAULT 'UTC'"))
        if site_cols and "default_layout_id" not in site_col_names:
            conn.execute(text("ALTER TABLE site ADD COLUMN default_layout_id INTEGER"))
        if site_cols:
            conn.execute(
                text(
                    "UPDATE site SET time_zone='UTC' "
                    "WHERE time_zone IS NULL OR trim(time_zone)=''"
                )
            )

        player_cols = conn.execute(text("PRAGMA table_info(player)")).fetchall()
        player_col_names = {row[1] for row in player_cols}
        if player_cols and "default_layout_id" not in player_col_names:
            conn.execute(text("ALTER TABLE player ADD COLUMN default_layout_id INTEGER"))
