"""Persistent upload history backed by SQLite.

The database lives in the platform app-data directory alongside
settings.json.  Failed entries can be looked up again to queue a retry.
"""
from __future__ import annotations

import sqlite3
import uuid
from datetime import datetime, timezone
from pathlib import Path

from .models import FileMetadata, HistoryItem
from .settings import app_data_dir

DB_FILENAME = "upload_history.db"

_COLUMNS = (
    "id, original_name, full_path, proposed, media_type, series, "
    "uploaded_at, upload_status, error_message, is_retry"
)


def _row_to_item(row: tuple) -> HistoryItem:
    (item_id, original_name, full_path, proposed, media_type, series,
     uploaded_at, upload_status, error_message, is_retry) = row
    return HistoryItem(
        id=item_id,
        original_name=original_name,
        full_path=full_path,
        proposed=proposed,
        media_type=media_type,
        series=series,
        uploaded_at=uploaded_at,
        upload_status=upload_status,
        error_message=error_message,
        is_retry=bool(is_retry),
    )


class UploadHistory:
    """SQLite-backed upload history.

    Usage::

        history = UploadHistory()
        item = history.record(entry, success=False, error="HTTP 500")
        for failed in history.failed():
            ...
    """

    def __init__(self, db_path: Path | None = None):
        self._db_path = db_path or app_data_dir() / DB_FILENAME
        self._conn: sqlite3.Connection | None = None
        self._ensure_schema()

    # -- connection management -------------------------------------

    def _get_conn(self) -> sqlite3.Connection:
        if self._conn is None:
            self._conn = sqlite3.connect(
                str(self._db_path),
                check_same_thread=False,
            )
            self._conn.execute("PRAGMA journal_mode=WAL")
        return self._conn

    def _ensure_schema(self) -> None:
        conn = self._get_conn()
        conn.executescript("""
            CREATE TABLE IF NOT EXISTS uploads (
                id              TEXT PRIMARY KEY,
                original_name   TEXT NOT NULL,
                full_path       TEXT NOT NULL,
                proposed        TEXT,
                media_type      TEXT NOT NULL,
                series          TEXT NOT NULL,
                uploaded_at     TEXT NOT NULL,
                upload_status   TEXT NOT NULL,
                error_message   TEXT,
                is_retry        INTEGER NOT NULL DEFAULT 0
            );

            CREATE INDEX IF NOT EXISTS idx_uploads_status
                ON uploads(upload_status);
        """)
        conn.commit()

    def close(self) -> None:
        if self._conn is not None:
            self._conn.close()
            self._conn = None

    # -- public API ------------------------------------------------

    def record(
        self,
        entry: FileMetadata,
        success: bool,
        error: str | None = None,
    ) -> HistoryItem:
        """Persist the outcome of one upload and return the stored item."""
        item = HistoryItem(
            id=uuid.uuid4().hex[:12],
            original_name=entry.original_name,
            full_path=entry.full_path,
            proposed=entry.proposed,
            media_type=entry.parsed.media_type,
            series=entry.parsed.series,
            uploaded_at=datetime.now(timezone.utc).isoformat(timespec="seconds"),
            upload_status="success" if success else "failed",
            error_message=None if success else error,
            is_retry=entry.retry_id is not None,
        )
        conn = self._get_conn()
        conn.execute(
            f"INSERT INTO uploads ({_COLUMNS}) VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?, ?)",
            (
                item.id, item.original_name, item.full_path, item.proposed,
                item.media_type, item.series, item.uploaded_at,
                item.upload_status, item.error_message, int(item.is_retry),
            ),
        )
        conn.commit()
        return item

    def get(self, item_id: str) -> HistoryItem | None:
        conn = self._get_conn()
        row = conn.execute(
            f"SELECT {_COLUMNS} FROM uploads WHERE id = ?",
            (item_id,),
        ).fetchone()
        return _row_to_item(row) if row else None

    def all(self, limit: int = 50) -> list[HistoryItem]:
        """Return recent items, newest first."""
        conn = self._get_conn()
        rows = conn.execute(
            f"SELECT {_COLUMNS} FROM uploads "
            "ORDER BY uploaded_at DESC, rowid DESC LIMIT ?",
            (limit,),
        ).fetchall()
        return [_row_to_item(r) for r in rows]

    def failed(self) -> list[HistoryItem]:
        conn = self._get_conn()
        rows = conn.execute(
            f"SELECT {_COLUMNS} FROM uploads WHERE upload_status = 'failed' "
            "ORDER BY uploaded_at DESC, rowid DESC"
        ).fetchall()
        return [_row_to_item(r) for r in rows]

    def clear(self) -> None:
        conn = self._get_conn()
        conn.execute("DELETE FROM uploads")
        conn.commit()
