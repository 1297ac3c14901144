import os

from loguru import logger

LOG_LEVELS = ("TRACE", "DEBUG", "INFO", "SUCCESS", "WARNING", "ERROR", "CRITICAL")


class InvalidEnvironmentVariableError(Exception):
    def __init__(self, variable_name: str, value: str) -> None:
        super().__init__(
            f"Invalid value for {variable_name} environment variable: {value!r}"
        )


class Config:
    def __init__(self) -> None:
        self._music_db_path: str = os.environ.get("MUSIC_DB_PATH", "music.db")
        logger.debug("music_db_path={}", self._music_db_path)

        self._contacts_db_path: str = os.environ.get(
            "CONTACTS_DB_PATH", "testjava.db"
        )
        logger.debug("contacts_db_path={}", self._contacts_db_path)

        self._log_file: str = os.environ.get("LOG_FILE", "")
        logger.debug("log_file={}", self._log_file or "(none)")

        self._log_level: str = os.environ.get("LOG_LEVEL", "INFO").upper()
        if self._log_level not in LOG_LEVELS:
            raise InvalidEnvironmentVariableError("LOG_LEVEL", self._log_level)
        logger.debug("log_level={}", self._log_level)

    @property
    def music_db_path(self) -> str:
        return self._music_db_path

    @property
    def contacts_db_path(self) -> str:
        return self._contacts_db_path

    @property
    def log_file(self) -> str:
        return self._log_file

    @property
    def log_level(self) -> str:
        return self._log_level


_config: Config | None = None


def get_config() -> Config:
    global _config  # noqa: PLW0603
    if not _config:
        _config = Config()
    return _config
