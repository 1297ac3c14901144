"""Scratch CRUD walkthrough on a throw-away contacts table.

Every statement commits on its own (auto-commit), so a failure halfway through
leaves the earlier statements applied. The table is dropped and recreated on
every run.
"""

import sqlite3
import sys
from contextlib import closing
from sqlite3 import Connection

from loguru import logger

from musicstudy.config import get_config
from musicstudy.data import Contact
from musicstudy.logsetup import setup_logger

TABLE_CONTACTS = "contacts"
COLUMN_NAME = "name"
COLUMN_PHONE = "phone"
COLUMN_EMAIL = "email"

DEMO_CONTACTS = (
    Contact(name="PB", phone=123456789, email="pb@provides.com"),
    Contact(name="Joe", phone=56564654, email="joe@regular.com"),
    Contact(name="Leon", phone=7897887, email="leon@hitman.com"),
)


def create_contacts_table(connection: Connection) -> None:
    with closing(connection.cursor()) as cursor:
        cursor.execute(f"DROP TABLE IF EXISTS {TABLE_CONTACTS}")
        cursor.execute(
            f"CREATE TABLE IF NOT EXISTS {TABLE_CONTACTS} ("
            f"{COLUMN_NAME} text, "
            f"{COLUMN_PHONE} integer, "
            f"{COLUMN_EMAIL} text"
            ")"
        )


def insert_contact(connection: Connection, name: str, phone: int, email: str) -> None:
    logger.debug("Inserting contact: {}", name)
    with closing(connection.cursor()) as cursor:
        cursor.execute(
            f"INSERT INTO {TABLE_CONTACTS} "  # noqa: S608
            f"({COLUMN_NAME}, {COLUMN_PHONE}, {COLUMN_EMAIL}) VALUES (?, ?, ?)",
            (name, phone, email),
        )


def update_contact_phone(connection: Connection, name: str, phone: int) -> int:
    with closing(connection.cursor()) as cursor:
        cursor.execute(
            f"UPDATE {TABLE_CONTACTS} SET {COLUMN_PHONE} = ? "  # noqa: S608
            f"WHERE {COLUMN_NAME} = ?",
            (phone, name),
        )
        logger.debug("Updated {} contact(s) named {}", cursor.rowcount, name)
        return cursor.rowcount


def delete_contact(connection: Connection, name: str) -> int:
    with closing(connection.cursor()) as cursor:
        cursor.execute(
            f"DELETE FROM {TABLE_CONTACTS} WHERE {COLUMN_NAME} = ?",  # noqa: S608
            (name,),
        )
        logger.debug("Deleted {} contact(s) named {}", cursor.rowcount, name)
        return cursor.rowcount


def query_contacts(connection: Connection) -> list[Contact]:
    with closing(connection.cursor()) as cursor:
        rows = cursor.execute(
            f"SELECT {COLUMN_NAME}, {COLUMN_PHONE}, {COLUMN_EMAIL} "  # noqa: S608
            f"FROM {TABLE_CONTACTS}"
        ).fetchall()
    return [Contact(name=row[0], phone=row[1], email=row[2]) for row in rows]


def main() -> int:
    config = get_config()
    setup_logger(config)

    try:
        # Creates the database file when it doesn't exist yet
        connection = sqlite3.connect(config.contacts_db_path, isolation_level=None)
    except sqlite3.Error as error:
        logger.error("Couldn't open {}: {}", config.contacts_db_path, error)
        print(f"Something went wrong: {error}")
        return 1

    try:
        create_contacts_table(connection)
        for contact in DEMO_CONTACTS:
            insert_contact(connection, contact.name, contact.phone, contact.email)
        update_contact_phone(connection, "John", 1234)
        delete_contact(connection, "John")

        for contact in query_contacts(connection):
            print(f"{contact.name} {contact.phone} {contact.email}")
    except sqlite3.Error as error:
        logger.exception("Contacts demo failed")
        print(f"Something went wrong: {error}")
        return 1
    finally:
        connection.close()

    return 0


if __name__ == "__main__":
    sys.exit(main())
