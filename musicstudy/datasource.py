import re
import sqlite3
from collections.abc import Generator
from contextlib import contextmanager
from enum import StrEnum
from pathlib import Path
from sqlite3 import Connection, Cursor
from types import TracebackType
from typing import Self

from loguru import logger

from musicstudy.config import get_config
from musicstudy.data import Artist, SongArtist
from musicstudy.errors import DatabaseConnectionError, QueryError

TABLE_ALBUMS = "albums"
COLUMN_ALBUM_ID = "_id"
COLUMN_ALBUM_NAME = "name"
COLUMN_ALBUM_ARTIST = "artist"

TABLE_ARTISTS = "artists"
COLUMN_ARTIST_ID = "_id"
COLUMN_ARTIST_NAME = "name"

TABLE_SONGS = "songs"
COLUMN_SONG_ID = "_id"
COLUMN_SONG_TRACK = "track"
COLUMN_SONG_TITLE = "title"
COLUMN_SONG_ALBUM = "album"

TABLE_ARTIST_SONG_VIEW = "artist_list"
COLUMN_VIEW_ARTIST = "artist"
COLUMN_VIEW_ALBUM = "album"

_IDENTIFIER = re.compile(r"[A-Za-z_][A-Za-z0-9_]*")

_JOIN_SONGS_TO_ARTISTS = (
    f"FROM {TABLE_SONGS} "
    f"INNER JOIN {TABLE_ALBUMS} "
    f"ON {TABLE_SONGS}.{COLUMN_SONG_ALBUM} = {TABLE_ALBUMS}.{COLUMN_ALBUM_ID} "
    f"INNER JOIN {TABLE_ARTISTS} "
    f"ON {TABLE_ALBUMS}.{COLUMN_ALBUM_ARTIST} = {TABLE_ARTISTS}.{COLUMN_ARTIST_ID}"
)

QUERY_ARTISTS = f"SELECT * FROM {TABLE_ARTISTS}"  # noqa: S608

QUERY_ALBUMS_BY_ARTIST = (
    f"SELECT {TABLE_ALBUMS}.{COLUMN_ALBUM_NAME} FROM {TABLE_ALBUMS} "  # noqa: S608
    f"INNER JOIN {TABLE_ARTISTS} "
    f"ON {TABLE_ALBUMS}.{COLUMN_ALBUM_ARTIST} = {TABLE_ARTISTS}.{COLUMN_ARTIST_ID} "
    f"WHERE {TABLE_ARTISTS}.{COLUMN_ARTIST_NAME} = ?"
)

QUERY_ARTIST_FOR_SONG = (
    f"SELECT {TABLE_ARTISTS}.{COLUMN_ARTIST_NAME}, "  # noqa: S608
    f"{TABLE_ALBUMS}.{COLUMN_ALBUM_NAME}, "
    f"{TABLE_SONGS}.{COLUMN_SONG_TRACK} "
    f"{_JOIN_SONGS_TO_ARTISTS} "
    f"WHERE {TABLE_SONGS}.{COLUMN_SONG_TITLE} = ?"
)

QUERY_SONGS = f"SELECT * FROM {TABLE_SONGS}"  # noqa: S608

CREATE_ARTIST_FOR_SONG_VIEW = (
    f"CREATE VIEW IF NOT EXISTS {TABLE_ARTIST_SONG_VIEW} AS "
    f"SELECT {TABLE_ARTISTS}.{COLUMN_ARTIST_NAME} AS {COLUMN_VIEW_ARTIST}, "
    f"{TABLE_ALBUMS}.{COLUMN_ALBUM_NAME} AS {COLUMN_VIEW_ALBUM}, "
    f"{TABLE_SONGS}.{COLUMN_SONG_TRACK}, "
    f"{TABLE_SONGS}.{COLUMN_SONG_TITLE} "
    f"{_JOIN_SONGS_TO_ARTISTS} "
    f"ORDER BY {TABLE_ARTISTS}.{COLUMN_ARTIST_NAME}, "
    f"{TABLE_ALBUMS}.{COLUMN_ALBUM_NAME}, "
    f"{TABLE_SONGS}.{COLUMN_SONG_TRACK}"
)

QUERY_VIEW_SONG_INFO = (
    f"SELECT {COLUMN_VIEW_ARTIST}, {COLUMN_VIEW_ALBUM}, "  # noqa: S608
    f"{COLUMN_SONG_TRACK} FROM {TABLE_ARTIST_SONG_VIEW} "
    f"WHERE {COLUMN_SONG_TITLE} = ?"
)


class SortOrder(StrEnum):
    NONE = "NONE"
    ASCENDING = "ASC"
    DESCENDING = "DESC"


def order_by_clause(sort_order: SortOrder, *columns: str) -> str:
    """Build the ORDER BY clause for textual columns, ignoring case.

    The direction is repeated on every column so DESCENDING reverses the whole
    ordering and not only its last key. SortOrder.NONE leaves row order to the
    engine.
    """
    sort_order = SortOrder(sort_order)
    if sort_order is SortOrder.NONE:
        return ""
    keys = ", ".join(f"{column} COLLATE NOCASE {sort_order}" for column in columns)
    return f" ORDER BY {keys}"


class Datasource:
    """One connection to the music database and the queries run against it.

    Every statement runs in auto-commit mode. Values are always bound as
    parameters; only the table name given to get_count() is interpolated, and
    only after it passes identifier validation.
    """

    def __init__(self, db_path: str | Path | None = None) -> None:
        if db_path is None:
            db_path = get_config().music_db_path
        self._db_path = Path(db_path)
        self._connection: Connection | None = None

    def __enter__(self) -> Self:
        self.open()
        return self

    def __exit__(
        self,
        exc_type: type[BaseException] | None,
        exc_value: BaseException | None,
        traceback: TracebackType | None,
    ) -> None:
        self.close()

    @property
    def is_open(self) -> bool:
        return self._connection is not None

    def open(self) -> None:
        if self._connection:
            return

        # mode=rw refuses to create a missing database file
        uri = f"{self._db_path.resolve().as_uri()}?mode=rw"
        logger.debug("Opening database: {}", uri)
        try:
            connection = sqlite3.connect(uri, uri=True, isolation_level=None)
        except sqlite3.Error as error:
            logger.error("Couldn't connect to database {}: {}", self._db_path, error)
            raise DatabaseConnectionError(str(error)) from error

        # connect() is lazy, reading the schema header rejects non-database files
        try:
            connection.execute("PRAGMA schema_version").fetchone()
        except sqlite3.Error as error:
            connection.close()
            logger.error("Couldn't read database {}: {}", self._db_path, error)
            raise DatabaseConnectionError(str(error)) from error

        connection.row_factory = sqlite3.Row
        self._connection = connection

    def close(self) -> None:
        if not self._connection:
            return

        try:
            self._connection.close()
        except sqlite3.Error as error:
            logger.warning("Couldn't close connection: {}", error)
        finally:
            self._connection = None

    @contextmanager
    def _cursor(self) -> Generator[Cursor, None, None]:
        if not self._connection:
            raise DatabaseConnectionError(f"Datasource is not open: {self._db_path}")

        cursor = self._connection.cursor()
        try:
            yield cursor
        except (sqlite3.Error, IndexError) as error:
            logger.error("Query failed: {}", error)
            raise QueryError(str(error)) from error
        finally:
            cursor.close()

    def query_artists(
        self, sort_order: SortOrder = SortOrder.ASCENDING
    ) -> list[Artist]:
        sql = QUERY_ARTISTS + order_by_clause(sort_order, COLUMN_ARTIST_NAME)
        logger.debug("SQL: {}", sql)
        with self._cursor() as cursor:
            rows = cursor.execute(sql).fetchall()
            return [
                Artist(id=row[COLUMN_ARTIST_ID], name=row[COLUMN_ARTIST_NAME])
                for row in rows
            ]

    def query_albums_for_artist(
        self, artist_name: str, sort_order: SortOrder = SortOrder.ASCENDING
    ) -> list[str]:
        sql = QUERY_ALBUMS_BY_ARTIST + order_by_clause(
            sort_order, f"{TABLE_ALBUMS}.{COLUMN_ALBUM_NAME}"
        )
        logger.debug("SQL: {} | {}", sql, artist_name)
        with self._cursor() as cursor:
            rows = cursor.execute(sql, (artist_name,)).fetchall()
            return [row[0] for row in rows]

    def query_artists_for_song(
        self, song_title: str, sort_order: SortOrder = SortOrder.ASCENDING
    ) -> list[SongArtist]:
        sql = QUERY_ARTIST_FOR_SONG + order_by_clause(
            sort_order,
            f"{TABLE_ARTISTS}.{COLUMN_ARTIST_NAME}",
            f"{TABLE_ALBUMS}.{COLUMN_ALBUM_NAME}",
        )
        logger.debug("SQL: {} | {}", sql, song_title)
        with self._cursor() as cursor:
            rows = cursor.execute(sql, (song_title,)).fetchall()
            # artists.name and albums.name share a column name, map by position
            return [
                SongArtist(artist_name=row[0], album_name=row[1], track=row[2])
                for row in rows
            ]

    def query_songs_metadata(self) -> list[str]:
        """Return the column names of the songs table, in table order."""
        logger.debug("SQL: {}", QUERY_SONGS)
        with self._cursor() as cursor:
            cursor.execute(QUERY_SONGS)
            return [column[0] for column in cursor.description]

    def get_count(self, table_name: str) -> int:
        if not _IDENTIFIER.fullmatch(table_name):
            logger.error("Refusing to count malformed table name: {!r}", table_name)
            raise QueryError(f"Malformed table name: {table_name!r}")

        sql = f'SELECT COUNT(*) AS count FROM "{table_name}"'  # noqa: S608
        logger.debug("SQL: {}", sql)
        with self._cursor() as cursor:
            row = cursor.execute(sql).fetchone()
            return row["count"]

    def create_view_for_song_artists(self) -> None:
        logger.debug("SQL: {}", CREATE_ARTIST_FOR_SONG_VIEW)
        with self._cursor() as cursor:
            cursor.execute(CREATE_ARTIST_FOR_SONG_VIEW)
        logger.info("View {} is available", TABLE_ARTIST_SONG_VIEW)

    def query_song_info_view(self, title: str) -> list[SongArtist]:
        logger.debug("SQL: {} | {}", QUERY_VIEW_SONG_INFO, title)
        with self._cursor() as cursor:
            rows = cursor.execute(QUERY_VIEW_SONG_INFO, (title,)).fetchall()
            return [
                SongArtist(
                    artist_name=row[COLUMN_VIEW_ARTIST],
                    album_name=row[COLUMN_VIEW_ALBUM],
                    track=row[COLUMN_SONG_TRACK],
                )
                for row in rows
            ]
