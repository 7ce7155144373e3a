"""SQLite storage for flow documents.

One row per flow holding the full JSON document. Updates are guarded by
the ``version`` column so a concurrent save is detected instead of lost.
"""

import os
import sqlite3
from pathlib import Path

from flowgraph.errors import FlowNotFoundError, FlowVersionConflictError
from flowgraph.models.flow import Flow
from flowgraph.utils.identifiers import utc_timestamp

DEFAULT_DB_PATH = Path(__file__).parent / "data" / "flowgraph.db"
FLOW_DB_PATH = Path(os.getenv("FLOW_DB_PATH", str(DEFAULT_DB_PATH)))


def _connect(db_path: Path = FLOW_DB_PATH) -> sqlite3.Connection:
    db_path.parent.mkdir(parents=True, exist_ok=True)
    conn = sqlite3.connect(db_path)
    conn.row_factory = sqlite3.Row
    return conn


def init_db(db_path: Path = FLOW_DB_PATH) -> None:
    with _connect(db_path) as conn:
        conn.execute(
            """
            create table if not exists flows (
                flow_id text primary key,
                app_id text,
                name text not null,
                version integer not null default 0,
                flow_json text not null,
                created_at text not null,
                updated_at text not null
            )
            """
        )
        conn.execute("create index if not exists idx_flows_app_id on flows(app_id)")
        conn.commit()


def insert_flow(flow: Flow, db_path: Path = FLOW_DB_PATH) -> None:
    """insert a new flow document."""
    with _connect(db_path) as conn:
        conn.execute(
            """
            insert into flows (flow_id, app_id, name, version, flow_json, created_at, updated_at)
            values (?, ?, ?, ?, ?, ?, ?)
            """,
            (
                flow.flow_id,
                flow.app_id,
                flow.name,
                flow.version,
                flow.model_dump_json(),
                flow.created_at,
                flow.updated_at,
            ),
        )
        conn.commit()


def update_flow(flow: Flow, expected_version: int, db_path: Path = FLOW_DB_PATH) -> bool:
    """overwrite a flow document if its stored version is still expected_version.

    Returns False when no row matched (missing flow or stale version).
    """
    with _connect(db_path) as conn:
        cursor = conn.execute(
            """
            update flows
            set app_id = ?, name = ?, version = ?, flow_json = ?, updated_at = ?
            where flow_id = ? and version = ?
            """,
            (
                flow.app_id,
                flow.name,
                flow.version,
                flow.model_dump_json(),
                flow.updated_at,
                flow.flow_id,
                expected_version,
            ),
        )
        conn.commit()
    return cursor.rowcount == 1


def get_flow_version(flow_id: str, db_path: Path = FLOW_DB_PATH) -> int | None:
    with _connect(db_path) as conn:
        row = conn.execute(
            "select version from flows where flow_id = ?",
            (flow_id,),
        ).fetchone()
    return row["version"] if row else None


def get_flow(flow_id: str, db_path: Path = FLOW_DB_PATH) -> Flow | None:
    with _connect(db_path) as conn:
        row = conn.execute(
            "select flow_json from flows where flow_id = ?",
            (flow_id,),
        ).fetchone()
    if not row:
        return None
    return Flow.model_validate_json(row["flow_json"])


def list_flows(app_id: str | None = None, db_path: Path = FLOW_DB_PATH) -> list[Flow]:
    with _connect(db_path) as conn:
        if app_id is None:
            rows = conn.execute(
                "select flow_json from flows order by updated_at desc"
            ).fetchall()
        else:
            rows = conn.execute(
                "select flow_json from flows where app_id = ? order by updated_at desc",
                (app_id,),
            ).fetchall()
    return [Flow.model_validate_json(row["flow_json"]) for row in rows]


def delete_flow(flow_id: str, db_path: Path = FLOW_DB_PATH) -> None:
    with _connect(db_path) as conn:
        conn.execute("delete from flows where flow_id = ?", (flow_id,))
        conn.commit()


class SqliteFlowStore:
    """FlowStore backed by the flows table."""

    def __init__(self, db_path: Path = FLOW_DB_PATH) -> None:
        self.db_path = Path(db_path)
        init_db(self.db_path)

    def load(self, flow_id: str) -> Flow | None:
        return get_flow(flow_id, self.db_path)

    def save(self, flow: Flow) -> Flow:
        saved = flow.model_copy(
            update={"version": flow.version + 1, "updated_at": utc_timestamp()}
        )
        if update_flow(saved, flow.version, self.db_path):
            return saved
        actual = get_flow_version(flow.flow_id, self.db_path)
        if actual is None:
            raise FlowNotFoundError(flow.flow_id)
        raise FlowVersionConflictError(flow.flow_id, flow.version, actual)

    def create(self, flow: Flow) -> Flow:
        insert_flow(flow, self.db_path)
        return flow

    def list_flows(self, app_id: str | None = None) -> list[Flow]:
        return list_flows(app_id, self.db_path)

    def delete(self, flow_id: str) -> None:
        delete_flow(flow_id, self.db_path)
