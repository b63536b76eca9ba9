"""
Configuration settings for the Meeting Scheduler
"""
import os
from pathlib import Path
from typing import Dict, Any, Optional

from dotenv import load_dotenv

TRUE_VALUES = ("true", "1", "yes", "on")


def _env_bool(name: str, default: bool) -> bool:
    value = os.getenv(name)
    if value is None or value.strip() == "":
        return default
    return value.strip().lower() in TRUE_VALUES


def _env_str(name: str, default: Optional[str] = None) -> Optional[str]:
    value = os.getenv(name)
    if value is None or value.strip() == "":
        return default
    return value.strip()


class Config:
    # Environment
    ENV = "development"

    # Calendar Configuration
    CALENDAR_ID = "primary"
    CALENDAR_SCOPES = ["https://www.googleapis.com/auth/calendar"]
    CALENDAR_TIMEZONE = "UTC"
    USE_MOCK_CALENDAR = True
    CREDENTIALS_PATH = None
    IMPERSONATION_EMAIL = None

    # Meeting Configuration
    MEETING_DURATION_MINUTES = 60  # fixed, not configurable from the environment
    EMAIL_REMINDER_MINUTES = 24 * 60
    POPUP_REMINDER_MINUTES = 15
    MEET_LINK_BASE = "https://meet.google.com"

    # Store Configuration
    PROJECT_ID = None
    SERVICE_ACCOUNT_PATH = None
    FIRESTORE_EMULATOR_HOST = None
    USE_MEMORY_STORE = False
    MEETINGS_COLLECTION = "meetings"

    # Client Configuration
    USE_REMOTE_BACKEND = False
    FUNCTIONS_URL = "http://localhost:5000"
    MOCK_MEET_LINK = "https://meet.google.com/mock-link"
    LOCAL_STORAGE_PATH = str(Path.home() / ".meeting_scheduler" / "local_storage.json")
    LOCAL_LATENCY_SCALE = 1.0

    # API Configuration
    API_HOST = "0.0.0.0"
    API_PORT = 5000
    API_TIMEOUT = 10  # seconds
    MAX_INSTANCES = 10

    # Logging
    LOG_LEVEL = "INFO"
    LOG_FILE = None

    def __init__(self, **overrides):
        for key, value in overrides.items():
            if not hasattr(type(self), key):
                raise AttributeError(f"Unknown configuration key: {key}")
            setattr(self, key, value)

    @property
    def is_production(self) -> bool:
        return self.ENV == "production"

    @property
    def is_development(self) -> bool:
        return self.ENV == "development"

    @classmethod
    def from_env(cls, env_file: Optional[str] = None, **overrides) -> "Config":
        """Build a configuration from the process environment (and .env file)"""
        load_dotenv(env_file)

        env = (_env_str("APP_ENV", cls.ENV) or cls.ENV).lower()
        is_development = env == "development"
        is_production = env == "production"

        values: Dict[str, Any] = {
            "ENV": env,
            "CALENDAR_ID": _env_str("APP_CALENDAR_ID", cls.CALENDAR_ID),
            # Development always runs against the mock calendar
            "USE_MOCK_CALENDAR": _env_bool("APP_USE_MOCK_CALENDAR", False) or is_development,
            "CREDENTIALS_PATH": _env_str("APP_CREDENTIALS_PATH"),
            "IMPERSONATION_EMAIL": _env_str("APP_IMPERSONATION_EMAIL"),
            "PROJECT_ID": _env_str("APP_PROJECT_ID"),
            "SERVICE_ACCOUNT_PATH": _env_str("APP_SERVICE_ACCOUNT"),
            "FIRESTORE_EMULATOR_HOST": _env_str("FIRESTORE_EMULATOR_HOST"),
            "USE_MEMORY_STORE": _env_bool("APP_USE_MEMORY_STORE", cls.USE_MEMORY_STORE),
            # Remote backend is the default in production unless explicitly disabled
            "USE_REMOTE_BACKEND": _env_bool("APP_USE_REMOTE_BACKEND", is_production),
            "FUNCTIONS_URL": _env_str("APP_FUNCTIONS_URL", cls.FUNCTIONS_URL),
            "MOCK_MEET_LINK": _env_str("APP_MOCK_MEET_LINK", cls.MOCK_MEET_LINK),
            "LOCAL_STORAGE_PATH": _env_str("APP_LOCAL_STORAGE_PATH", cls.LOCAL_STORAGE_PATH),
            "LOCAL_LATENCY_SCALE": float(_env_str("APP_LOCAL_LATENCY_SCALE", str(cls.LOCAL_LATENCY_SCALE))),
            "API_HOST": _env_str("API_HOST", cls.API_HOST),
            "API_PORT": int(_env_str("API_PORT", str(cls.API_PORT))),
            "API_TIMEOUT": float(_env_str("API_TIMEOUT", str(cls.API_TIMEOUT))),
            "MAX_INSTANCES": int(_env_str("APP_MAX_INSTANCES", str(cls.MAX_INSTANCES))),
            "LOG_LEVEL": _env_str("LOG_LEVEL", cls.LOG_LEVEL),
            "LOG_FILE": _env_str("LOG_FILE"),
        }
        values.update(overrides)
        return cls(**values)

    def get_credentials_path(self) -> str:
        """Get the calendar service account key path"""
        if not self.CREDENTIALS_PATH:
            raise ValueError("APP_CREDENTIALS_PATH environment variable is not set")

        credentials_path = os.path.abspath(os.path.expanduser(self.CREDENTIALS_PATH))
        if not os.path.exists(credentials_path):
            raise FileNotFoundError(f"Service account file not found at: {credentials_path}")

        return credentials_path

    def summary(self) -> Dict[str, Any]:
        """Non-secret view of the configuration for logs and health checks"""
        return {
            "env": self.ENV,
            "calendar_mode": "mock" if self.USE_MOCK_CALENDAR else "real",
            "calendar_id": self.CALENDAR_ID,
            "store_backend": "memory" if self.USE_MEMORY_STORE else "firestore",
            "project_id": self.PROJECT_ID,
            "emulator_host": self.FIRESTORE_EMULATOR_HOST or "none",
            "client_mode": "remote" if self.USE_REMOTE_BACKEND else "local",
            "max_instances": self.MAX_INSTANCES,
        }
