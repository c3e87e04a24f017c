"""Root conftest — shared test configuration."""

import os

# Ensure tests never reach a real broker or database
os.environ.setdefault("DRAMATIQ_BROKER", "stub")
os.environ.setdefault(
    "DATABASE_URL",
    "sqlite+aiosqlite:///:memory:",
)
os.environ.setdefault("LOG_FORMAT", "text")
