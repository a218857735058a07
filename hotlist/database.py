"""SQLite storage for hotlist reference fingerprints.

Hotlist databases hold two tables:

- ``tracks``: one row per reference track (file, class, fingerprint
  count, length in milliseconds)
- ``fingers``: one row per reference fingerprint (owning track, time code,
  hash), indexed by hash for batch lookup

The column names are those of the existing hotlist files so they can be
read unchanged.
"""

from __future__ import annotations

import logging
import sqlite3
from collections.abc import Iterable
from dataclasses import dataclass
from pathlib import Path
from typing import Any

from .constants import DEFAULT_HOTLIST_DIR, ContentClass
from .errors import IndexUnavailable

logger = logging.getLogger(__name__)

# Stay well below SQLITE_MAX_VARIABLE_NUMBER on old builds (999)
LOOKUP_CHUNK_SIZE = 500


@dataclass(frozen=True, slots=True)
class ReferenceMatch:
    """One occurrence in the hotlist of a queried hash."""

    hash: int
    track: str
    content_class: ContentClass
    ref_time_code: int


@dataclass(frozen=True, slots=True)
class TrackMeta:
    """Static information about a reference track."""

    track: str
    content_class: ContentClass
    fingerprint_count: int
    duration_ms: int

    @property
    def duration_seconds(self) -> float:
        return self.duration_ms / 1000


def default_db_path(country: str, name: str, directory: Path | str = DEFAULT_HOTLIST_DIR) -> Path:
    """Return the conventional hotlist path for a radio.

    Args:
        country: Country of the radio, e.g. "France"
        name: Radio name, e.g. "RTL"
        directory: Directory holding hotlist databases

    Returns:
        Path like ``predictor-db/hotlist/France_RTL.sqlite``
    """
    return Path(directory) / f"{country}_{name}.sqlite"


class HotlistDB:
    """Reference fingerprint index backed by a SQLite hotlist file.

    Opened read-only for matching. ``create()`` opens a writable database
    and initializes the schema, for building hotlists.
    """

    def __init__(self, db_path: Path | str, readonly: bool = True):
        """Initialize database handle (not connected yet).

        Args:
            db_path: Path to SQLite database
            readonly: Open without write access
        """
        self.db_path = Path(db_path)
        self.readonly = readonly
        self.conn: sqlite3.Connection | None = None

    @classmethod
    def open(cls, db_path: Path | str) -> HotlistDB:
        """Open an existing hotlist for matching.

        Raises:
            IndexUnavailable: If the file is missing or is not a hotlist
        """
        db = cls(db_path, readonly=True)
        db.connect()
        return db

    @classmethod
    def create(cls, db_path: Path | str) -> HotlistDB:
        """Open (creating if needed) a writable hotlist with its schema."""
        db = cls(db_path, readonly=False)
        db.connect()
        db.initialize_schema()
        return db

    def connect(self) -> None:
        """Connect to the database.

        Raises:
            IndexUnavailable: If a read-only database can't be opened
        """
        if self.readonly:
            if not self.db_path.is_file():
                raise IndexUnavailable(str(self.db_path), "file not found")
            uri = self.db_path.resolve().as_uri() + "?mode=ro"
            conn = sqlite3.connect(uri, uri=True, check_same_thread=False)
            try:
                conn.execute("SELECT 1 FROM tracks LIMIT 1").fetchall()
                conn.execute("SELECT 1 FROM fingers LIMIT 1").fetchall()
            except sqlite3.Error as e:
                conn.close()
                raise IndexUnavailable(str(self.db_path), str(e)) from e
        else:
            self.db_path.parent.mkdir(parents=True, exist_ok=True)
            conn = sqlite3.connect(str(self.db_path), check_same_thread=False)

        conn.row_factory = sqlite3.Row
        self.conn = conn
        logger.info("Opened hotlist %s (readonly=%s)", self.db_path, self.readonly)

    def close(self) -> None:
        """Close the connection, if any."""
        if self.conn is not None:
            self.conn.close()
            self.conn = None
            logger.info("Closed hotlist %s", self.db_path)

    @property
    def _conn(self) -> sqlite3.Connection:
        if self.conn is None:
            raise RuntimeError("Database not connected")
        return self.conn

    # ========== Schema Management ==========

    def initialize_schema(self) -> None:
        """Create hotlist tables if they don't exist."""
        conn = self._conn

        conn.execute("""
            CREATE TABLE IF NOT EXISTS tracks (
                id INTEGER PRIMARY KEY AUTOINCREMENT,
                file TEXT NOT NULL UNIQUE,
                class INTEGER NOT NULL,
                fingersCount INTEGER NOT NULL DEFAULT 0,
                length INTEGER NOT NULL DEFAULT 0
            )
        """)

        conn.execute("""
            CREATE TABLE IF NOT EXISTS fingers (
                track_id INTEGER NOT NULL,
                dt INTEGER NOT NULL,
                finger INTEGER NOT NULL,
                FOREIGN KEY (track_id) REFERENCES tracks(id) ON DELETE CASCADE
            )
        """)

        # Index on hash for fast lookup during matching
        conn.execute("CREATE INDEX IF NOT EXISTS idx_fingers_finger ON fingers(finger)")

        conn.commit()

    # ========== Reference Index ==========

    def list_tracks(self) -> list[TrackMeta]:
        """Get metadata of all reference tracks."""
        rows = self._conn.execute(
            "SELECT file, class, fingersCount, length FROM tracks ORDER BY id"
        ).fetchall()
        return [
            TrackMeta(
                track=row["file"],
                content_class=ContentClass(row["class"]),
                fingerprint_count=row["fingersCount"] or 0,
                duration_ms=row["length"] or 0,
            )
            for row in rows
        ]

    def lookup(self, hashes: Iterable[int]) -> list[ReferenceMatch]:
        """Find all hotlist occurrences of the given hashes.

        Rows are ordered by the position of their hash in ``hashes`` (first
        occurrence), then by storage order within the hotlist.

        Args:
            hashes: Query hashes; duplicates are looked up once

        Returns:
            One ReferenceMatch per (hash, reference occurrence) pair
        """
        positions: dict[int, int] = {}
        for h in hashes:
            positions.setdefault(int(h), len(positions))
        if not positions:
            return []

        keys = list(positions)
        found: list[tuple[int, int, ReferenceMatch]] = []
        for start in range(0, len(keys), LOOKUP_CHUNK_SIZE):
            chunk = keys[start : start + LOOKUP_CHUNK_SIZE]
            placeholders = ",".join("?" * len(chunk))
            rows = self._conn.execute(
                f"""
                SELECT f.rowid AS rid, f.finger, f.dt, t.file, t.class
                FROM fingers f
                INNER JOIN tracks t ON t.id = f.track_id
                WHERE f.finger IN ({placeholders})
                """,
                chunk,
            ).fetchall()
            for row in rows:
                found.append((
                    positions[row["finger"]],
                    row["rid"],
                    ReferenceMatch(
                        hash=row["finger"],
                        track=row["file"],
                        content_class=ContentClass(row["class"]),
                        ref_time_code=row["dt"],
                    ),
                ))

        found.sort(key=lambda item: (item[0], item[1]))
        return [match for _, _, match in found]

    # ========== Hotlist Building ==========

    def add_track(
        self,
        file: str,
        content_class: ContentClass | int,
        fingerprints: Iterable[tuple[int, int]],
        length_ms: int = 0,
    ) -> int:
        """Store a reference track and its fingerprints.

        Replaces any previous track with the same file.

        Args:
            file: Track identifier (usually its path)
            content_class: Classification of the track
            fingerprints: (hash, time_code) pairs
            length_ms: Track duration in milliseconds

        Returns:
            Track ID
        """
        conn = self._conn
        content_class = ContentClass(content_class)
        fingerprints = list(fingerprints)

        old = conn.execute("SELECT id FROM tracks WHERE file = ?", (file,)).fetchone()
        if old is not None:
            conn.execute("DELETE FROM fingers WHERE track_id = ?", (old["id"],))
            conn.execute("DELETE FROM tracks WHERE id = ?", (old["id"],))

        cursor = conn.execute(
            "INSERT INTO tracks (file, class, fingersCount, length) VALUES (?, ?, ?, ?)",
            (file, int(content_class), len(fingerprints), int(length_ms)),
        )
        track_id = cursor.lastrowid
        assert track_id is not None

        # Batch insert fingerprints
        conn.executemany(
            "INSERT INTO fingers (track_id, dt, finger) VALUES (?, ?, ?)",
            [(track_id, int(dt), int(h)) for h, dt in fingerprints],
        )
        conn.commit()

        logger.info(
            "Stored %d fingerprints for %s (%s)", len(fingerprints), file, content_class.label
        )
        return track_id

    def get_stats(self) -> dict[str, Any]:
        """Get hotlist statistics.

        Returns:
            Dict with track and fingerprint counts, per class
        """
        conn = self._conn

        total_tracks = conn.execute("SELECT COUNT(*) FROM tracks").fetchone()[0]
        total_fingerprints = conn.execute("SELECT COUNT(*) FROM fingers").fetchone()[0]
        per_class = {c.label: 0 for c in ContentClass}
        for row in conn.execute("SELECT class, COUNT(*) AS n FROM tracks GROUP BY class"):
            per_class[ContentClass(row["class"]).label] = row["n"]

        return {
            "total_tracks": total_tracks,
            "total_fingerprints": total_fingerprints,
            "tracks_per_class": per_class,
            "avg_fingerprints_per_track": (
                total_fingerprints / total_tracks if total_tracks > 0 else 0
            ),
        }
