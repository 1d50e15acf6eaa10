import asyncio
import os
import sys
from datetime import UTC, datetime, timedelta
from pathlib import Path

# Add root to pythonpath
sys.path.append(os.getcwd())

from bloginno.adapters.sqlite_store import SQLiteBackingStore
from bloginno.components.content import SEED_ARTICLES, SEED_CATEGORIES
from bloginno.core.ports.store import ARTICLES, CATEGORIES, DuplicateKeyError


async def seed_store(store: SQLiteBackingStore) -> tuple[int, int]:
    """Insert the seed categories and articles; existing ids are left alone."""
    now = datetime.now(UTC)
    created_categories = 0
    created_articles = 0

    for i, category in enumerate(SEED_CATEGORIES):
        row = category.model_copy(update={"created_at": now + timedelta(seconds=i)})
        try:
            await store.insert(CATEGORIES, row.model_dump(mode="json"))
            created_categories += 1
            print(f"Created category: {category.id}")
        except DuplicateKeyError:
            print(f"Category {category.id} already exists")

    # Oldest first so that newest-first ordering matches the seed order
    for i, article in enumerate(reversed(SEED_ARTICLES)):
        stamp = now + timedelta(seconds=i)
        row = article.model_copy(update={"created_at": stamp, "updated_at": stamp})
        try:
            await store.insert(ARTICLES, row.model_dump(mode="json"))
            created_articles += 1
            print(f"Created article {article.id}: {article.title}")
        except DuplicateKeyError:
            print(f"Article {article.id} already exists")

    return created_categories, created_articles


def seed(db_path: str | None = None) -> tuple[int, int]:
    if db_path is None:
        data_dir = os.environ.get("BLOGINNO_DATA_DIR", "./data")
        db_path = str(Path(data_dir) / "bloginno.db")
    print(f"Seeding to {db_path}")

    store = SQLiteBackingStore(db_path)
    return asyncio.run(seed_store(store))


if __name__ == "__main__":
    seed(sys.argv[1] if len(sys.argv) > 1 else None)
