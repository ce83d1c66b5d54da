from __future__ import annotations

import json
import logging
import sqlite3
from datetime import datetime, timezone
from pathlib import Path
from typing import Any, Dict, List, Optional, Type

from .config import get_settings
from .rng import Rng, RngBase


logger = logging.getLogger(__name__)


def _resolve(db_path: Optional[Path]) -> Path:
    return Path(db_path) if db_path is not None else get_settings().db_path


def _get_conn(db_path: Path) -> sqlite3.Connection:
    conn = sqlite3.connect(db_path)
    conn.row_factory = sqlite3.Row
    return conn


def init_db(db_path: Optional[Path] = None) -> None:
    db_path = _resolve(db_path)
    db_path.parent.mkdir(parents=True, exist_ok=True)
    with _get_conn(db_path) as conn:
        conn.executescript(
            """
            CREATE TABLE IF NOT EXISTS rng_states (
              id INTEGER PRIMARY KEY AUTOINCREMENT,
              name TEXT NOT NULL,
              seed TEXT NOT NULL,
              version TEXT NOT NULL,
              created_at TEXT NOT NULL
            );

            CREATE INDEX IF NOT EXISTS idx_rng_states_name ON rng_states(name);
            """
        )


def save_state(name: str, rng: RngBase, db_path: Optional[Path] = None) -> int:
    """Store ``rng.serialize()`` under ``name``; returns the row id."""
    db_path = _resolve(db_path)
    init_db(db_path)
    state = rng.serialize()
    now = datetime.now(timezone.utc).isoformat()

    with _get_conn(db_path) as conn:
        cur = conn.execute(
            "INSERT INTO rng_states (name, seed, version, created_at) VALUES (?, ?, ?, ?)",
            # JSON keeps ints and floats distinct and holds seeds beyond 64 bits
            (name, json.dumps(state["seed"]), str(state["version"]), now),
        )
        row_id = int(cur.lastrowid)
    logger.info("Saved RNG state %r (id %d, seed %s) to %s", name, row_id, state["seed"], db_path)
    return row_id


def load_state(
    name: str,
    cls: Type[RngBase] = Rng,
    force: bool = False,
    db_path: Optional[Path] = None,
) -> RngBase:
    """Rebuild the most recently saved generator for ``name``.

    Raises ``KeyError`` when nothing is stored under ``name``.
    """
    db_path = _resolve(db_path)
    init_db(db_path)
    with _get_conn(db_path) as conn:
        row = conn.execute(
            "SELECT seed, version FROM rng_states WHERE name = ? ORDER BY id DESC LIMIT 1",
            (name,),
        ).fetchone()

    if row is None:
        raise KeyError(name)
    logger.info("Loaded RNG state %r (version %s) from %s", name, row["version"], db_path)
    return cls.unserialize({"seed": json.loads(row["seed"]), "version": row["version"]}, force=force)


def load_state_by_id(
    row_id: int,
    cls: Type[RngBase] = Rng,
    force: bool = False,
    db_path: Optional[Path] = None,
) -> RngBase:
    """Rebuild the generator saved in row ``row_id``, as listed by ``list_states``."""
    db_path = _resolve(db_path)
    init_db(db_path)
    with _get_conn(db_path) as conn:
        row = conn.execute("SELECT seed, version FROM rng_states WHERE id = ?", (row_id,)).fetchone()

    if row is None:
        raise KeyError(row_id)
    logger.info("Loaded RNG state #%d (version %s) from %s", row_id, row["version"], db_path)
    return cls.unserialize({"seed": json.loads(row["seed"]), "version": row["version"]}, force=force)


def list_states(limit: int = 25, db_path: Optional[Path] = None) -> List[Dict[str, Any]]:
    db_path = _resolve(db_path)
    init_db(db_path)
    with _get_conn(db_path) as conn:
        rows = conn.execute(
            "SELECT * FROM rng_states ORDER BY id DESC LIMIT ?",
            (int(limit),),
        ).fetchall()

    out = [dict(r) for r in rows]
    for r in out:
        r["seed"] = json.loads(r["seed"])
    return out
