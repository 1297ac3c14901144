import sys

import sentry_sdk
from loguru import logger

from musicstudy.config import get_config
from musicstudy.datasource import TABLE_SONGS, Datasource, SortOrder
from musicstudy.errors import DatabaseConnectionError, DatasourceError
from musicstudy.logsetup import setup_logger

DEMO_ARTIST = "Pink Floyd"
DEMO_SONG = "Go Your Own Way"


def _print_song_artists(datasource: Datasource, song_title: str) -> None:
    song_artists = datasource.query_artists_for_song(song_title, SortOrder.ASCENDING)
    if not song_artists:
        print(f"Couldn't find the artist for the song: {song_title}")
    for song_artist in song_artists:
        print(
            f"Artist name = {song_artist.artist_name}, "
            f"Album name = {song_artist.album_name}, "
            f"Track = {song_artist.track}"
        )


def _print_song_info_view(datasource: Datasource, song_title: str) -> None:
    song_artists = datasource.query_song_info_view(song_title)
    if not song_artists:
        print(f"Couldn't find the artist for the song: {song_title}")
    for song_artist in song_artists:
        print(
            f"FROM VIEW - Artist name = {song_artist.artist_name}, "
            f"Album name = {song_artist.album_name}, "
            f"Track = {song_artist.track}"
        )


def run_queries(datasource: Datasource) -> None:
    artists = datasource.query_artists(SortOrder.ASCENDING)
    if not artists:
        print("No artists!")
    for artist in artists:
        print(f"ID = {artist.id}, Name = {artist.name}")

    albums = datasource.query_albums_for_artist(DEMO_ARTIST, SortOrder.ASCENDING)
    if not albums:
        print(f"No albums for {DEMO_ARTIST}")
    for album in albums:
        print(album)

    _print_song_artists(datasource, DEMO_SONG)

    for column_name in datasource.query_songs_metadata():
        print(f"Column in the songs table: {column_name}")

    print(f"Number of songs is: {datasource.get_count(TABLE_SONGS)}")

    datasource.create_view_for_song_artists()
    _print_song_info_view(datasource, DEMO_SONG)


def main() -> int:
    config = get_config()
    setup_logger(config)
    # Inert unless SENTRY_DSN is set
    sentry_sdk.init(sample_rate=1.0, traces_sample_rate=0.0)

    datasource = Datasource(config.music_db_path)
    try:
        datasource.open()
    except DatabaseConnectionError:
        print("Can't open datasource")
        return 1

    try:
        run_queries(datasource)
    except DatasourceError as error:
        sentry_sdk.capture_exception(error)
        print(f"Query failed: {error}")
        return 1
    finally:
        datasource.close()

    logger.info("Done")
    return 0


if __name__ == "__main__":
    sys.exit(main())
