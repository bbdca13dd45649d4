import os
from pathlib import Path


BASE_DIR = Path(__file__).resolve().parent.parent


class Config:
    SQLALCHEMY_DATABASE_URI = os.environ.get(
        "DATABASE_URL", f"sqlite:///{BASE_DIR / 'linkshelf.db'}"
    )
    SQLALCHEMY_TRACK_MODIFICATIONS = False
    SCHEDULER_ENABLED = os.environ.get("SCHEDULER_ENABLED", "1") == "1"
    LINK_PURGE_INTERVAL_SECONDS = int(
        os.environ.get("LINK_PURGE_INTERVAL_SECONDS", "30")
    )
    LINK_PURGE_GRACE_SECONDS = int(os.environ.get("LINK_PURGE_GRACE_SECONDS", "5"))
    DEFAULT_PAGE_SIZE = int(os.environ.get("DEFAULT_PAGE_SIZE", "20"))
    MAX_PAGE_SIZE = int(os.environ.get("MAX_PAGE_SIZE", "200"))


class TestConfig(Config):
    TESTING = True
    SQLALCHEMY_DATABASE_URI = "sqlite:///:memory:"
    SCHEDULER_ENABLED = False
    LINK_PURGE_GRACE_SECONDS = 0


class PanelConfig:
    API_URL = os.environ.get("LINKSHELF_API_URL", "http://127.0.0.1:8072/api/v1")
    PAGE_SIZE = int(os.environ.get("LINKSHELF_PAGE_SIZE", "20"))
    HTTP_TIMEOUT = float(os.environ.get("LINKSHELF_HTTP_TIMEOUT", "10"))
    SEARCH_THRESHOLD = int(os.environ.get("LINKSHELF_SEARCH_THRESHOLD", "70"))
    REORDER_STRATEGY = os.environ.get("LINKSHELF_REORDER_STRATEGY", "visible")
