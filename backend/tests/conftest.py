"""Root conftest: shared test configuration."""

import os

# Tests never reach a real database unless a test builds one itself
os.environ.setdefault("STORAGE_BACKEND", "memory")
os.environ.setdefault("DATABASE_URL", "sqlite+aiosqlite:///:memory:")
os.environ.setdefault("LOG_FORMAT", "text")
