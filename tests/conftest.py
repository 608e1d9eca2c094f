import sqlite3
from pathlib import Path

import pytest

SIDELOADED_ID = "file:///mnt/onboard/Good Book - An Author.epub"
STORE_ID = "0a1b2c3d-store-book"


def create_kobo_database(path: Path, bookmarks, contents) -> Path:
    connection = sqlite3.connect(path)
    try:
        connection.execute(
            "CREATE TABLE content (ContentID TEXT, ContentType TEXT, VolumeIndex INTEGER,"
            " Title TEXT, Attribution TEXT)"
        )
        connection.execute(
            "CREATE TABLE Bookmark (BookmarkID TEXT, VolumeID TEXT, Text TEXT, Annotation TEXT,"
            " DateCreated TEXT, DateModified TEXT, ChapterProgress REAL)"
        )
        connection.executemany("INSERT INTO content VALUES (?, ?, ?, ?, ?)", contents)
        connection.executemany("INSERT INTO Bookmark VALUES (?, ?, ?, ?, ?, ?, ?)", bookmarks)
        connection.commit()
    finally:
        connection.close()
    return path


@pytest.fixture
def kobo_db(tmp_path: Path) -> Path:
    contents = [
        (SIDELOADED_ID, "6", -1, None, None),
        (SIDELOADED_ID + "#chapter1", "9", 0, "Chapter One", None),
        (STORE_ID, "6", -1, "Store Book", "Store Author"),
    ]
    bookmarks = [
        ("b2", SIDELOADED_ID, "Later passage", ".quotes", "2006-01-02T15:04:05.000", None, 0.5),
        ("b1", SIDELOADED_ID, "Early\npassage", None, None, "2006-01-02T15:04:05Z", 0.1),
        ("b3", STORE_ID, "Store passage", None, "2007-03-04T05:06:07.000", None, 0.2),
    ]
    return create_kobo_database(tmp_path / "KoboReader.sqlite", bookmarks, contents)
