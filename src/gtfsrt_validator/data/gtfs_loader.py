"""GTFS data loader for ingesting the static schedule into SQLite."""

import csv
import io
import logging
import sqlite3
import zipfile
from collections.abc import Iterator
from pathlib import Path
from typing import Any, TextIO

import aiosqlite

from gtfsrt_validator.errors import DataError

logger = logging.getLogger(__name__)

# Schema definitions
SCHEMA_SQL = """
-- routes
CREATE TABLE routes (
    route_id TEXT PRIMARY KEY,
    agency_id TEXT,
    route_short_name TEXT,
    route_long_name TEXT,
    route_type INTEGER NOT NULL
);

-- stops
CREATE TABLE stops (
    stop_id TEXT PRIMARY KEY,
    stop_code TEXT,
    stop_name TEXT,
    stop_lat REAL,
    stop_lon REAL,
    location_type INTEGER,
    parent_station TEXT
);

-- trips
CREATE TABLE trips (
    trip_id TEXT PRIMARY KEY,
    route_id TEXT NOT NULL,
    service_id TEXT NOT NULL,
    trip_headsign TEXT,
    direction_id INTEGER,
    block_id TEXT,
    shape_id TEXT
);

-- stop_times
CREATE TABLE stop_times (
    trip_id TEXT NOT NULL,
    arrival_time TEXT,
    departure_time TEXT,
    stop_id TEXT NOT NULL,
    stop_sequence INTEGER NOT NULL,
    PRIMARY KEY (trip_id, stop_sequence)
);

-- frequencies
CREATE TABLE frequencies (
    trip_id TEXT NOT NULL,
    start_time TEXT NOT NULL,
    end_time TEXT NOT NULL,
    headway_secs INTEGER NOT NULL,
    exact_times INTEGER
);
"""

INDEX_SQL = """
CREATE INDEX idx_trips_route ON trips(route_id);
CREATE INDEX idx_stop_times_stop ON stop_times(stop_id);
CREATE INDEX idx_frequencies_trip ON frequencies(trip_id);
"""

# Table definitions: table_name -> (csv_filename, columns)
TABLE_DEFINITIONS: dict[str, tuple[str, list[str]]] = {
    "routes": (
        "routes.txt",
        ["route_id", "agency_id", "route_short_name", "route_long_name", "route_type"],
    ),
    "stops": (
        "stops.txt",
        [
            "stop_id",
            "stop_code",
            "stop_name",
            "stop_lat",
            "stop_lon",
            "location_type",
            "parent_station",
        ],
    ),
    "trips": (
        "trips.txt",
        [
            "trip_id",
            "route_id",
            "service_id",
            "trip_headsign",
            "direction_id",
            "block_id",
            "shape_id",
        ],
    ),
    "stop_times": (
        "stop_times.txt",
        ["trip_id", "arrival_time", "departure_time", "stop_id", "stop_sequence"],
    ),
    "frequencies": (
        "frequencies.txt",
        ["trip_id", "start_time", "end_time", "headway_secs", "exact_times"],
    ),
}

# Columns that must exist in the header and be non-empty in every row.
REQUIRED_COLUMNS: dict[str, list[str]] = {
    "routes": ["route_id", "route_type"],
    "stops": ["stop_id"],
    "trips": ["trip_id", "route_id", "service_id"],
    "stop_times": ["trip_id", "stop_id", "stop_sequence"],
    "frequencies": ["trip_id", "start_time", "end_time", "headway_secs"],
}

# Files without which the reference index cannot be built
REQUIRED_FILES = {"routes.txt", "stops.txt", "trips.txt", "stop_times.txt"}

# Chunk size for bulk inserts
CHUNK_SIZE = 10000


class GTFSLoader:
    """Loader for ingesting static GTFS data into SQLite."""

    def __init__(self, db_path: Path):
        """Initialize the loader.

        Args:
            db_path: Path where the SQLite database will be created.
        """
        self.db_path = Path(db_path)

    async def ingest(self, gtfs_path: Path) -> dict[str, int]:
        """Ingest GTFS data from a directory or ZIP file into SQLite.

        Uses atomic swap: loads into temp DB, then replaces the target DB.

        Args:
            gtfs_path: Path to GTFS directory or ZIP file.

        Returns:
            Dictionary with row counts per table.

        Raises:
            FileNotFoundError: If GTFS path doesn't exist.
            DataError: If required files, columns or values are missing, or a key repeats.
        """
        gtfs_path = Path(gtfs_path)
        if not gtfs_path.exists():
            raise FileNotFoundError(f"GTFS path not found: {gtfs_path}")

        self.db_path.parent.mkdir(parents=True, exist_ok=True)

        temp_db = self.db_path.with_suffix(".tmp.db")

        try:
            # Remove temp db if it exists from a previous failed run
            temp_db.unlink(missing_ok=True)

            async with aiosqlite.connect(temp_db) as db:
                # Performance optimizations for bulk loading
                await db.execute("PRAGMA journal_mode=OFF")
                await db.execute("PRAGMA synchronous=OFF")

                await db.executescript(SCHEMA_SQL)
                row_counts = await self._load_all_tables(db, gtfs_path)
                logger.info("Creating indexes...")
                await db.executescript(INDEX_SQL)
                await db.commit()
                await self._verify_integrity(db)

            # atomic swap
            if self.db_path.exists():
                self.db_path.unlink()
            temp_db.rename(self.db_path)

            logger.info(f"GTFS ingestion complete: {self.db_path}")
            return row_counts

        except Exception:
            temp_db.unlink(missing_ok=True)
            raise

    async def _load_all_tables(self, db: aiosqlite.Connection, gtfs_path: Path) -> dict[str, int]:
        """Load all GTFS tables from directory or ZIP."""
        row_counts: dict[str, int] = {}

        if gtfs_path.is_file() and gtfs_path.suffix == ".zip":
            with zipfile.ZipFile(gtfs_path, "r") as zf:
                names = set(zf.namelist())
                for table_name, (csv_filename, columns) in TABLE_DEFINITIONS.items():
                    if csv_filename not in names:
                        row_counts[table_name] = self._missing_file(csv_filename)
                        continue
                    with zf.open(csv_filename) as raw:
                        text_file = io.TextIOWrapper(raw, encoding="utf-8-sig")
                        row_counts[table_name] = await self._load_table(
                            db, table_name, columns, text_file, csv_filename
                        )
        else:
            for table_name, (csv_filename, columns) in TABLE_DEFINITIONS.items():
                csv_path = gtfs_path / csv_filename
                if not csv_path.exists():
                    row_counts[table_name] = self._missing_file(csv_filename)
                    continue
                with open(csv_path, encoding="utf-8-sig") as f:
                    row_counts[table_name] = await self._load_table(
                        db, table_name, columns, f, csv_filename
                    )

        return row_counts

    def _missing_file(self, csv_filename: str) -> int:
        if csv_filename in REQUIRED_FILES:
            raise DataError(f"Required file {csv_filename} not found", source=csv_filename)
        logger.warning(f"Optional file {csv_filename} not found")
        return 0

    async def _load_table(
        self,
        db: aiosqlite.Connection,
        table_name: str,
        columns: list[str],
        text_file: TextIO,
        filename: str,
    ) -> int:
        """Load a single CSV file into a table."""
        logger.info(f"Loading {table_name} from {filename}...")

        placeholders = ",".join(["?"] * len(columns))
        insert_sql = f"INSERT INTO {table_name} ({','.join(columns)}) VALUES ({placeholders})"

        total_rows = 0
        chunk: list[tuple[Any, ...]] = []
        required = REQUIRED_COLUMNS.get(table_name, [])

        reader = csv.reader(text_file)
        header_index = self._build_header_index(reader, columns, required, filename)
        for line_number, row_dict in self._rows(reader, header_index):
            missing = self._missing_values(row_dict, required)
            if missing:
                raise DataError(
                    f"{filename} line {line_number} has no value for {', '.join(missing)}",
                    source=filename,
                )
            chunk.append(tuple(self._convert_value(row_dict.get(col)) for col in columns))

            if len(chunk) >= CHUNK_SIZE:
                await self._insert_chunk(db, insert_sql, chunk, filename)
                total_rows += len(chunk)
                chunk = []

        if chunk:
            await self._insert_chunk(db, insert_sql, chunk, filename)
            total_rows += len(chunk)

        await db.commit()
        logger.info(f"  Loaded {total_rows:,} rows into {table_name}")
        return total_rows

    async def _insert_chunk(
        self,
        db: aiosqlite.Connection,
        insert_sql: str,
        chunk: list[tuple[Any, ...]],
        filename: str,
    ) -> None:
        try:
            await db.executemany(insert_sql, chunk)
        except sqlite3.IntegrityError as e:
            # duplicate primary key, e.g. a repeated (trip_id, stop_sequence)
            raise DataError(f"{filename} has a duplicate key: {e}", source=filename) from e

    def _convert_value(self, value: str | None) -> Any:
        """Convert CSV value to appropriate Python type."""
        if value is None or value.strip() == "":
            return None
        return value.strip()

    def _missing_values(self, row: dict[str, str], required: list[str]) -> list[str]:
        """Required columns that are empty in this row."""
        return [col for col in required if not (row.get(col) or "").strip()]

    def _build_header_index(
        self, reader: Iterator[list[str]], columns: list[str], required: list[str], filename: str
    ) -> dict[str, int]:
        """Map known column names to their position in the CSV header."""
        header = next(reader, None)
        if header is None:
            raise DataError(f"{filename} is empty", source=filename)
        header_index: dict[str, int] = {}
        for idx, name in enumerate(header):
            cleaned = name.strip()
            if cleaned in columns and cleaned not in header_index:
                header_index[cleaned] = idx
        missing = [col for col in required if col not in header_index]
        if missing:
            raise DataError(f"{filename} missing columns: {', '.join(missing)}", source=filename)
        return header_index

    def _rows(
        self, reader: Iterator[list[str]], header_index: dict[str, int]
    ) -> Iterator[tuple[int, dict[str, str]]]:
        """Map each non-blank CSV row to a dict by header index, with its line number."""
        # the header is line 1
        for line_number, row in enumerate(reader, start=2):
            if not any(value.strip() for value in row):
                continue
            yield line_number, {
                col: row[idx] if idx < len(row) else "" for col, idx in header_index.items()
            }

    async def _verify_integrity(self, db: aiosqlite.Connection) -> None:
        """Verify the required tables have data after loading."""
        logger.info("Verifying database integrity...")

        for table_name in ("routes", "stops", "trips", "stop_times"):
            async with db.execute(f"SELECT COUNT(*) FROM {table_name}") as cursor:
                row = await cursor.fetchone()
                if row is None or row[0] == 0:
                    raise DataError(
                        f"No {table_name} loaded - check GTFS data", source=f"{table_name}.txt"
                    )

        logger.info("Database integrity verified")


async def get_table_counts(db_path: Path) -> dict[str, int]:
    """Get row counts for all tables in the database.

    Args:
        db_path: Path to the SQLite database.

    Returns:
        Dictionary mapping table names to row counts.
    """
    counts: dict[str, int] = {}
    async with aiosqlite.connect(db_path) as db:
        for table_name in TABLE_DEFINITIONS:
            async with db.execute(f"SELECT COUNT(*) FROM {table_name}") as cursor:
                row = await cursor.fetchone()
                counts[table_name] = row[0] if row else 0
    return counts
