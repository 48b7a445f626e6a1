"""
Root pytest configuration.

Points the application at an in-memory SQLite database before any app
module (and therefore core.database) is imported.
"""
import os
import sys

os.environ.setdefault("DATABASE_URL", "sqlite://")
os.environ.setdefault("LOG_FORMAT", "text")
os.environ.setdefault("LOG_LEVEL", "WARNING")

sys.path.insert(0, os.path.dirname(os.path.abspath(__file__)))
