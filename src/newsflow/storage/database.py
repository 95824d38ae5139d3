"""SQLite storage for users, interests and saved articles.

Every operation opens its own connection and touches rows scoped to a single
user id, so requests never share connection state.
"""

from __future__ import annotations

from contextlib import asynccontextmanager
from datetime import UTC, datetime
from pathlib import Path
from typing import AsyncIterator, List, Optional

import aiosqlite

from newsflow.models import Interest, SavedArticle, User

__all__ = ["Storage", "init_database"]


async def init_database(db: aiosqlite.Connection) -> None:
    """Create tables and indexes if they don't exist."""

    await db.execute("""
        CREATE TABLE IF NOT EXISTS users (
            id INTEGER PRIMARY KEY,
            username TEXT NOT NULL UNIQUE,
            password TEXT NOT NULL,
            news_api_key TEXT,
            gemini_api_key TEXT,
            created_at TIMESTAMP
        )
    """)

    await db.execute("""
        CREATE TABLE IF NOT EXISTS interests (
            id INTEGER PRIMARY KEY,
            user_id INTEGER NOT NULL,
            name TEXT NOT NULL,
            active BOOLEAN DEFAULT TRUE,
            created_at TIMESTAMP,
            FOREIGN KEY (user_id) REFERENCES users(id) ON DELETE CASCADE
        )
    """)

    await db.execute("""
        CREATE TABLE IF NOT EXISTS saved_articles (
            id INTEGER PRIMARY KEY,
            user_id INTEGER NOT NULL,
            title TEXT NOT NULL,
            description TEXT,
            url TEXT NOT NULL,
            image_url TEXT,
            source TEXT,
            category TEXT,
            published_at TIMESTAMP,
            saved_at TIMESTAMP,
            FOREIGN KEY (user_id) REFERENCES users(id) ON DELETE CASCADE
        )
    """)

    await db.execute("CREATE INDEX IF NOT EXISTS idx_interests_user_id ON interests(user_id)")
    await db.execute("CREATE INDEX IF NOT EXISTS idx_saved_articles_user_id ON saved_articles(user_id)")
    await db.commit()


def _now() -> str:
    return datetime.now(UTC).isoformat()


def _parse_timestamp(value: Optional[str]) -> Optional[datetime]:
    return datetime.fromisoformat(value) if value else None


def _row_to_user(row: aiosqlite.Row) -> User:
    return User(
        id=row["id"],
        username=row["username"],
        password_hash=row["password"],
        news_api_key=row["news_api_key"],
        gemini_api_key=row["gemini_api_key"],
        created_at=_parse_timestamp(row["created_at"]),
    )


def _row_to_interest(row: aiosqlite.Row) -> Interest:
    return Interest(
        id=row["id"],
        user_id=row["user_id"],
        name=row["name"],
        active=bool(row["active"]),
        created_at=_parse_timestamp(row["created_at"]),
    )


def _row_to_saved_article(row: aiosqlite.Row) -> SavedArticle:
    return SavedArticle(
        id=row["id"],
        user_id=row["user_id"],
        title=row["title"],
        description=row["description"],
        url=row["url"],
        image_url=row["image_url"],
        source=row["source"],
        category=row["category"],
        published_at=_parse_timestamp(row["published_at"]),
        saved_at=_parse_timestamp(row["saved_at"]),
    )


class Storage:
    """Async access to the NewsFlow database file at ``path``."""

    def __init__(self, path: Path | str) -> None:
        self.path = Path(path)
        self._initialised = False

    @asynccontextmanager
    async def connect(self) -> AsyncIterator[aiosqlite.Connection]:
        if not self._initialised:
            self.path.parent.mkdir(parents=True, exist_ok=True)

        async with aiosqlite.connect(self.path) as db:
            db.row_factory = aiosqlite.Row
            await db.execute("PRAGMA foreign_keys = ON")
            if not self._initialised:
                await init_database(db)
                self._initialised = True
            yield db

    # Users

    async def create_user(self, username: str, password_hash: str) -> User:
        """Insert a user.

        Raises:
            ValueError: If the username is already taken
        """
        created_at = _now()
        async with self.connect() as db:
            try:
                cursor = await db.execute(
                    "INSERT INTO users (username, password, created_at) VALUES (?, ?, ?)",
                    (username, password_hash, created_at),
                )
                await db.commit()
                row_id = cursor.lastrowid
            except aiosqlite.IntegrityError as exc:
                raise ValueError(f"Username '{username}' already exists") from exc

        return User(
            id=row_id,
            username=username,
            password_hash=password_hash,
            created_at=_parse_timestamp(created_at),
        )

    async def get_user(self, user_id: int) -> Optional[User]:
        async with self.connect() as db:
            cursor = await db.execute("SELECT * FROM users WHERE id = ?", (user_id,))
            row = await cursor.fetchone()
        return _row_to_user(row) if row is not None else None

    async def get_user_by_username(self, username: str) -> Optional[User]:
        async with self.connect() as db:
            cursor = await db.execute("SELECT * FROM users WHERE username = ?", (username,))
            row = await cursor.fetchone()
        return _row_to_user(row) if row is not None else None

    async def update_api_keys(
        self,
        user_id: int,
        *,
        news_api_key: Optional[str],
        gemini_api_key: Optional[str],
    ) -> Optional[User]:
        """Replace both stored provider keys; blank values clear a key."""
        async with self.connect() as db:
            await db.execute(
                "UPDATE users SET news_api_key = ?, gemini_api_key = ? WHERE id = ?",
                (news_api_key or None, gemini_api_key or None, user_id),
            )
            await db.commit()
        return await self.get_user(user_id)

    # Interests

    async def list_interests(self, user_id: int) -> List[Interest]:
        async with self.connect() as db:
            cursor = await db.execute(
                "SELECT * FROM interests WHERE user_id = ? ORDER BY id", (user_id,)
            )
            rows = await cursor.fetchall()
        return [_row_to_interest(row) for row in rows]

    async def create_interest(self, user_id: int, name: str) -> Interest:
        created_at = _now()
        async with self.connect() as db:
            cursor = await db.execute(
                "INSERT INTO interests (user_id, name, active, created_at) VALUES (?, ?, ?, ?)",
                (user_id, name, True, created_at),
            )
            await db.commit()
            row_id = cursor.lastrowid
        return Interest(
            id=row_id,
            user_id=user_id,
            name=name,
            active=True,
            created_at=_parse_timestamp(created_at),
        )

    async def delete_interest(self, interest_id: int, user_id: int) -> bool:
        """Delete one of the user's interests. Returns ``False`` if nothing matched."""
        async with self.connect() as db:
            cursor = await db.execute(
                "DELETE FROM interests WHERE id = ? AND user_id = ?", (interest_id, user_id)
            )
            await db.commit()
            deleted = cursor.rowcount
        return deleted > 0

    # Saved articles

    async def list_saved_articles(self, user_id: int) -> List[SavedArticle]:
        async with self.connect() as db:
            cursor = await db.execute(
                "SELECT * FROM saved_articles WHERE user_id = ? ORDER BY saved_at, id", (user_id,)
            )
            rows = await cursor.fetchall()
        return [_row_to_saved_article(row) for row in rows]

    async def save_article(
        self,
        user_id: int,
        *,
        title: str,
        url: str,
        description: Optional[str] = None,
        image_url: Optional[str] = None,
        source: Optional[str] = None,
        category: Optional[str] = None,
        published_at: Optional[datetime] = None,
    ) -> SavedArticle:
        saved_at = _now()
        published = published_at.isoformat() if published_at else None
        async with self.connect() as db:
            cursor = await db.execute(
                """
                INSERT INTO saved_articles
                    (user_id, title, description, url, image_url, source, category, published_at, saved_at)
                VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?)
                """,
                (user_id, title, description, url, image_url, source, category, published, saved_at),
            )
            await db.commit()
            row_id = cursor.lastrowid
        return SavedArticle(
            id=row_id,
            user_id=user_id,
            title=title,
            description=description,
            url=url,
            image_url=image_url,
            source=source,
            category=category,
            published_at=published_at,
            saved_at=_parse_timestamp(saved_at),
        )

    async def delete_saved_article(self, article_id: int, user_id: int) -> bool:
        async with self.connect() as db:
            cursor = await db.execute(
                "DELETE FROM saved_articles WHERE id = ? AND user_id = ?", (article_id, user_id)
            )
            await db.commit()
            deleted = cursor.rowcount
        return deleted > 0
