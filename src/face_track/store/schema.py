"""DuckDB schema definition."""

import duckdb


def ensure_schema(conn: duckdb.DuckDBPyConnection) -> None:
    """Create tables and indexes if they do not exist."""
    conn.execute("CREATE SEQUENCE IF NOT EXISTS tasks_id_seq START 1")
    conn.execute("""
        CREATE TABLE IF NOT EXISTS tasks (
            id              INTEGER PRIMARY KEY DEFAULT nextval('tasks_id_seq'),
            status          VARCHAR NOT NULL DEFAULT 'new',
            faces_total     INTEGER NOT NULL DEFAULT 0,
            faces_male      INTEGER NOT NULL DEFAULT 0,
            faces_female    INTEGER NOT NULL DEFAULT 0,
            age_male_avg    INTEGER NOT NULL DEFAULT 0,
            age_female_avg  INTEGER NOT NULL DEFAULT 0,
            created_at      TIMESTAMP DEFAULT current_timestamp
        )
    """)

    # images table (N:1 with tasks). Rows are removed together with their task.
    conn.execute("CREATE SEQUENCE IF NOT EXISTS images_id_seq START 1")
    conn.execute("""
        CREATE TABLE IF NOT EXISTS images (
            id          INTEGER PRIMARY KEY DEFAULT nextval('images_id_seq'),
            task_id     INTEGER NOT NULL,
            name        VARCHAR NOT NULL,
            file_name   VARCHAR NOT NULL,
            done        BOOLEAN NOT NULL DEFAULT false,
            created_at  TIMESTAMP DEFAULT current_timestamp
        )
    """)
    conn.execute("CREATE INDEX IF NOT EXISTS idx_images_task_id ON images(task_id)")
    conn.execute(
        "CREATE UNIQUE INDEX IF NOT EXISTS idx_images_task_name ON images(task_id, name)"
    )

    # faces table (N:1 with images)
    conn.execute("CREATE SEQUENCE IF NOT EXISTS faces_id_seq START 1")
    conn.execute("""
        CREATE TABLE IF NOT EXISTS faces (
            id           INTEGER PRIMARY KEY DEFAULT nextval('faces_id_seq'),
            image_id     INTEGER NOT NULL,
            gender       VARCHAR NOT NULL,
            age          INTEGER NOT NULL,
            bbox_height  INTEGER NOT NULL,
            bbox_width   INTEGER NOT NULL,
            bbox_x       INTEGER NOT NULL,
            bbox_y       INTEGER NOT NULL,
            created_at   TIMESTAMP DEFAULT current_timestamp
        )
    """)
    conn.execute("CREATE INDEX IF NOT EXISTS idx_faces_image_id ON faces(image_id)")
