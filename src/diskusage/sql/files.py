TABLE: str = "files"
PRIMARY_KEY: str = "file_id"
COLUMNS: tuple[str, ...] = ("file_id", "name", "size", "owner_id", "directory_id", "last_modified")

CREATE_TABLE: str = """
    CREATE TABLE IF NOT EXISTS files (
        file_id        TEXT PRIMARY KEY,
        name           TEXT NOT NULL,
        size           INTEGER NOT NULL,
        owner_id       INTEGER REFERENCES users(user_id),
        directory_id   TEXT NOT NULL REFERENCES directories(directory_id),
        last_modified  TEXT
    );
"""
CREATE_INDEXES: tuple[str, ...] = (
    "CREATE INDEX IF NOT EXISTS idx_files_directory_id ON files(directory_id);",
)

DROP_TABLE: str = "DROP TABLE IF EXISTS files;"

UPSERT: str = """
    INSERT INTO files (
        file_id,
        name,
        size,
        owner_id,
        directory_id,
        last_modified
    )
    VALUES (?, ?, ?, ?, ?, ?)
    ON CONFLICT(file_id) DO UPDATE SET
        name          = excluded.name,
        size          = excluded.size,
        owner_id      = excluded.owner_id,
        directory_id  = excluded.directory_id,
        last_modified = excluded.last_modified;
"""

UPDATE: str = """
    UPDATE files
    SET name = ?,
        size = ?,
        owner_id = ?,
        directory_id = ?,
        last_modified = ?
    WHERE file_id = ?;
"""

DELETE: str = "DELETE FROM files WHERE file_id = ?;"

SELECT: str = """
    SELECT file_id, name, size, owner_id, directory_id, last_modified
    FROM files
    WHERE file_id = ?;
"""

SELECT_ALL: str = """
    SELECT file_id, name, size, owner_id, directory_id, last_modified
    FROM files
    ORDER BY file_id;
"""

COUNT_ALL: str = "SELECT COUNT(*) AS total FROM files;"

# Directory closure of ? via parent links, then everything filed under it.
ESTIMATE_SIZE: str = """
    WITH RECURSIVE directory_tree(directory_id) AS (
        SELECT d.directory_id
        FROM directories d
        WHERE d.directory_id = ?

        UNION

        SELECT d.directory_id
        FROM directories d
        INNER JOIN directory_tree dt ON d.parent_id = dt.directory_id
    )
    SELECT COALESCE(SUM(f.size), 0) AS total_size
    FROM files f
    WHERE f.directory_id IN (SELECT directory_id FROM directory_tree);
"""

TOP_N_LARGEST: str = """
    WITH RECURSIVE directory_tree(directory_id) AS (
        SELECT d.directory_id
        FROM directories d
        WHERE d.directory_id = ?

        UNION

        SELECT d.directory_id
        FROM directories d
        INNER JOIN directory_tree dt ON d.parent_id = dt.directory_id
    )
    SELECT f.file_id, f.name, f.size, f.owner_id, f.directory_id, f.last_modified
    FROM files f
    WHERE f.directory_id IN (SELECT directory_id FROM directory_tree)
    ORDER BY f.size DESC, f.file_id
    LIMIT ?;
"""
