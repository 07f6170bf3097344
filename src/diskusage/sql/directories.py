TABLE: str = "directories"
PRIMARY_KEY: str = "directory_id"
COLUMNS: tuple[str, ...] = ("directory_id", "owner_id", "parent_id")

CREATE_TABLE: str = """
CREATE TABLE IF NOT EXISTS directories (
    directory_id  TEXT PRIMARY KEY,
    owner_id      INTEGER REFERENCES users(user_id),
    parent_id     TEXT REFERENCES directories(directory_id)
);
"""
CREATE_INDEXES: tuple[str, ...] = (
    "CREATE INDEX IF NOT EXISTS idx_directories_owner_id ON directories(owner_id);",
    "CREATE INDEX IF NOT EXISTS idx_directories_parent_id ON directories(parent_id);",
)

DROP_TABLE: str = "DROP TABLE IF EXISTS directories;"

# A walk root carries no parent; keep the one an enclosing walk stored.
UPSERT: str = """
    INSERT INTO directories (
        directory_id,
        owner_id,
        parent_id
    )
    VALUES (?, ?, ?)
    ON CONFLICT(directory_id) DO UPDATE SET
        owner_id  = excluded.owner_id,
        parent_id = COALESCE(excluded.parent_id, directories.parent_id);
"""

UPDATE: str = """
    UPDATE directories
    SET owner_id = ?,
        parent_id = ?
    WHERE directory_id = ?;
"""

DELETE: str = "DELETE FROM directories WHERE directory_id = ?;"

SELECT: str = """SELECT directory_id, owner_id, parent_id FROM directories WHERE directory_id = ?;"""

SELECT_ALL: str = """SELECT directory_id, owner_id, parent_id FROM directories ORDER BY directory_id;"""

COUNT_ALL: str = "SELECT COUNT(*) AS total FROM directories;"
