"""Root conftest - shared test configuration."""

import os

# Tests never reach a real database or start the rotation scheduler
os.environ.setdefault(
    "DATABASE_URL",
    "sqlite+aiosqlite:///test.db",
)
os.environ.setdefault("ROTATION_ENABLED", "false")
