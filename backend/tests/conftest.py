"""Root conftest — shared test configuration."""

import os

# Never point tests at a real database or relay
os.environ.setdefault("DATABASE_URL", "sqlite+aiosqlite:///:memory:")
os.environ.setdefault("NOTIFICATION_RELAY_URL", "http://relay.test")
