"""Conversation history storage for SMS senders."""

import os
import threading

import psycopg2

from chat.conversation import ConversationHistory, history_from_json, history_to_json


class PostgresSessionStore:
    """Key-value session store backed by the conversation_sessions table."""

    def __init__(self, db_url: str | None = None):
        self.db_url = db_url or os.getenv("DATABASE_URL")
        if not self.db_url:
            raise ValueError("DATABASE_URL not provided and not found in environment")

    def _get_connection(self):
        """Get a database connection."""
        return psycopg2.connect(self.db_url)

    def init_database(self):
        """Create the conversation_sessions table if it doesn't exist."""
        with self._get_connection() as conn:
            with conn.cursor() as cur:
                cur.execute(
                    """
                    CREATE TABLE IF NOT EXISTS conversation_sessions (
                        session_key TEXT PRIMARY KEY,
                        history TEXT NOT NULL,
                        updated_at TIMESTAMP DEFAULT CURRENT_TIMESTAMP
                    )
                    """
                )
            conn.commit()

    def get(self, key: str) -> str | None:
        with self._get_connection() as conn:
            with conn.cursor() as cur:
                cur.execute(
                    "SELECT history FROM conversation_sessions WHERE session_key = %s", (key,)
                )
                row = cur.fetchone()
        return row[0] if row else None

    def set(self, key: str, value: str):
        with self._get_connection() as conn:
            with conn.cursor() as cur:
                cur.execute(
                    """
                    INSERT INTO conversation_sessions (session_key, history)
                    VALUES (%s, %s)
                    ON CONFLICT (session_key) DO UPDATE SET
                        history = EXCLUDED.history,
                        updated_at = CURRENT_TIMESTAMP
                    """,
                    (key, value),
                )
            conn.commit()

    def remove(self, key: str):
        with self._get_connection() as conn:
            with conn.cursor() as cur:
                cur.execute("DELETE FROM conversation_sessions WHERE session_key = %s", (key,))
            conn.commit()

    def count(self) -> int:
        """Number of stored conversations."""
        with self._get_connection() as conn:
            with conn.cursor() as cur:
                cur.execute("SELECT COUNT(*) FROM conversation_sessions")
                return cur.fetchone()[0]


class MemorySessionStore:
    """Process-local session store, for tests and local runs."""

    def __init__(self):
        self._data: dict[str, str] = {}
        self._lock = threading.Lock()

    def get(self, key: str) -> str | None:
        with self._lock:
            return self._data.get(key)

    def set(self, key: str, value: str):
        with self._lock:
            self._data[key] = value

    def remove(self, key: str):
        with self._lock:
            self._data.pop(key, None)

    def count(self) -> int:
        with self._lock:
            return len(self._data)


class ConversationStore:
    """Loads, saves and clears a sender's conversation history."""

    def __init__(self, sessions):
        """
        Args:
            sessions: Session store with get/set/remove (PostgresSessionStore,
                MemorySessionStore, or anything shaped like them)
        """
        self.sessions = sessions

    def load(self, session_key: str) -> ConversationHistory:
        """Get the stored history, or an empty one if missing or unreadable."""
        raw = self.sessions.get(session_key)
        try:
            return history_from_json(raw)
        except ValueError as e:
            print(f"⚠️ Discarding unreadable conversation history: {e}")
            return []

    def save(self, session_key: str, history: ConversationHistory):
        """Overwrite the stored history with the full given history."""
        self.sessions.set(session_key, history_to_json(history))

    def clear(self, session_key: str):
        """Remove the stored history."""
        self.sessions.remove(session_key)
