from __future__ import annotations

from potd_crawler.infra import SQLiteManager


def test_sqlite_manager_initialises_schema(tmp_path) -> None:
    manager = SQLiteManager()
    path = tmp_path / "nested" / "potd.db"
    conn = manager.connect(path)
    columns = conn.execute("PRAGMA table_info(picture_of_the_day)").fetchall()
    column_names = [row["name"] for row in columns]
    assert {
        "date",
        "description",
        "short_description",
        "credit",
        "image_url",
        "original_image",
        "dithered_image",
        "created_at",
    }.issubset(column_names)
    assert manager.connect(path) is conn
    manager.close_all()


def test_sqlite_manager_reset(tmp_path) -> None:
    manager = SQLiteManager()
    path = tmp_path / "potd.db"
    conn = manager.connect(path)
    with conn:
        conn.execute(
            "INSERT INTO picture_of_the_day(date, image_url, original_image, dithered_image, created_at) "
            "VALUES ('2024-01-01', 'https://example.org/a.png', x'00', x'00', '2024-01-01T00:00:00')"
        )
    manager.reset(path)
    assert not path.exists()
    conn = manager.connect(path)
    rows = conn.execute("SELECT count(*) FROM picture_of_the_day").fetchone()
    assert rows[0] == 0
    manager.close_all()
