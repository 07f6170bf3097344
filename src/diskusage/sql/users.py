TABLE: str = "users"
PRIMARY_KEY: str = "user_id"
COLUMNS: tuple[str, ...] = ("user_id", "username")

CREATE_TABLE: str = """
    CREATE TABLE IF NOT EXISTS users (
        user_id   INTEGER PRIMARY KEY,
        username  TEXT
    );
"""
CREATE_INDEXES: tuple[str, ...] = ()

DROP_TABLE: str = "DROP TABLE IF EXISTS users;"

UPSERT: str = """
    INSERT INTO users (user_id, username)
    VALUES (?, ?)
    ON CONFLICT(user_id) DO UPDATE SET
        username = excluded.username;
"""

UPDATE: str = """
    UPDATE users
    SET username = ?
    WHERE user_id = ?;
"""

DELETE: str = "DELETE FROM users WHERE user_id = ?;"

SELECT: str = "SELECT user_id, username FROM users WHERE user_id = ?;"

SELECT_ALL: str = "SELECT user_id, username FROM users ORDER BY user_id;"

COUNT_ALL: str = "SELECT COUNT(*) AS total FROM users;"
