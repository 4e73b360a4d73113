from __future__ import annotations
from pathlib import Path
import sqlalchemy as db


### COMMENTS
# ==========================================================
# SQL schema shared by the task and user adapters (adapters/sql/schema.py).
# ==========================================================
# - `tasks.assigned_to` / `tasks.created_by` hold bare user ids (no denormalized names).
# - `created_at` is ISO 8601 UTC with fixed microseconds and a 'Z' suffix,
#   so string order == time order.
# - `due_date` is a DATE column.

metadata = db.MetaData()

tasks = db.Table(
    "tasks",
    metadata,
    db.Column("task_id", db.String(36), primary_key=True),
    db.Column("title", db.String, nullable=False),
    db.Column("description", db.String, nullable=False),
    db.Column("due_date", db.Date, nullable=False),
    db.Column("priority", db.String(16), nullable=False),   # 'high'/'medium'/'low'
    db.Column("status", db.String(16), nullable=False),     # 'pending'/'completed'
    db.Column("assigned_to", db.String(36), nullable=False, index=True),
    db.Column("created_by", db.String(36), nullable=False),
    db.Column("created_at", db.String(32), nullable=False, index=True),
)

users = db.Table(
    "users",
    metadata,
    db.Column("user_id", db.String(36), primary_key=True),
    db.Column("name", db.String, nullable=False),
    db.Column("email", db.String, nullable=False, unique=True),
    db.Column("role", db.String(16), nullable=False),
)


def database_url(url: str | Path) -> str:
    """
    url: e.g. 'sqlite:///data/tasks.db' or a Path to a file (turned into a sqlite URL)
    """
    if isinstance(url, Path):
        url.parent.mkdir(parents=True, exist_ok=True)
        # absolute path -> sqlite:////abs/path.db
        return f"sqlite:///{url}"
    return url


def build_engine(url: str | Path) -> db.Engine:
    """Creates the engine and any missing tables."""
    engine = db.create_engine(database_url(url), future=True)
    metadata.create_all(engine)
    return engine
