import sqlite3
from collections.abc import Generator
from contextlib import closing
from pathlib import Path

import pytest
from loguru import logger
from pytest_socket import disable_socket

from musicstudy import config
from musicstudy.datasource import Datasource

MUSIC_SCHEMA = """
CREATE TABLE artists (_id INTEGER PRIMARY KEY, name TEXT NOT NULL);
CREATE TABLE albums (
    _id INTEGER PRIMARY KEY,
    name TEXT NOT NULL,
    artist INTEGER REFERENCES artists(_id)
);
CREATE TABLE songs (
    _id INTEGER PRIMARY KEY,
    track INTEGER,
    title TEXT NOT NULL,
    album INTEGER REFERENCES albums(_id)
);
"""

FAKE_ARTISTS = [
    (1, "Iron Maiden"),
    (2, "deep purple"),
    (3, "AC/DC"),
    (4, "Fleetwood Mac"),
    (5, "Pink Floyd"),
    (6, "boyce avenue"),
]

FAKE_ALBUMS = [
    (1, "Powerslave", 1),
    (2, "Piece of Mind", 1),
    (3, "Machine Head", 2),
    (4, "Rumours", 4),
    (5, "the dark side of the moon", 5),
    (6, "Animals", 5),
    (7, "Greatest Hits", 4),
    (8, "Covers", 6),
]

FAKE_SONGS = [
    (1, 1, "Aces High", 1),
    (2, 5, "Smoke on the Water", 3),
    (3, 5, "Go Your Own Way", 4),
    (4, 9, "Go Your Own Way", 7),
    (5, 1, "Speak to Me", 5),
    (6, 3, "Dogs", 6),
    (7, 4, "Flight of Icarus", 2),
    (8, 2, "Go Your Own Way", 8),
]


def pytest_runtest_setup() -> None:
    disable_socket()


@pytest.fixture(autouse=True)
def set_env(monkeypatch: pytest.MonkeyPatch, tmp_path: Path) -> None:
    monkeypatch.setenv("MUSIC_DB_PATH", str(tmp_path / "music.db"))
    monkeypatch.setenv("CONTACTS_DB_PATH", str(tmp_path / "contacts.db"))
    monkeypatch.setenv("LOG_LEVEL", "DEBUG")
    monkeypatch.delenv("LOG_FILE", raising=False)
    monkeypatch.delenv("SENTRY_DSN", raising=False)
    # get_config() caches, start every test from the environment above
    monkeypatch.setattr(config, "_config", None)


@pytest.fixture(autouse=True)
def reset_logger() -> Generator[None, None, None]:
    yield
    # setup_logger() sinks point at this test's captured streams
    logger.remove()


@pytest.fixture
def music_db_path(tmp_path: Path) -> Path:
    db_path = tmp_path / "music.db"
    with closing(sqlite3.connect(db_path)) as connection:
        connection.executescript(MUSIC_SCHEMA)
        connection.executemany("INSERT INTO artists VALUES (?, ?)", FAKE_ARTISTS)
        connection.executemany("INSERT INTO albums VALUES (?, ?, ?)", FAKE_ALBUMS)
        connection.executemany("INSERT INTO songs VALUES (?, ?, ?, ?)", FAKE_SONGS)
        connection.commit()
    return db_path


@pytest.fixture
def datasource(music_db_path: Path) -> Generator[Datasource, None, None]:
    music_datasource = Datasource(music_db_path)
    music_datasource.open()
    yield music_datasource
    music_datasource.close()
