"""Root conftest - shared test configuration."""

import os

# Ensure tests never reach a real database through get_settings()
os.environ.setdefault("DATABASE_URL", "sqlite+aiosqlite:///test.db")
os.environ.setdefault("DATABASE_ISOLATION_LEVEL", "")
os.environ.setdefault("SWEEP_ENABLED", "false")
os.environ.setdefault("SWEEP_ON_STARTUP", "false")
