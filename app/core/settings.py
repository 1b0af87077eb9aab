"""Application settings with environment validation."""

import os
from typing import List


class Settings:
    """Application settings with environment validation."""

    def __init__(self) -> None:
        # Database
        self.database_url = os.getenv("DATABASE_URL", "sqlite:///./wichtelaktion.db")
        self.auto_create_schema = self._parse_bool(os.getenv("AUTO_CREATE_SCHEMA", "false"))

        # Authentication
        self.firebase_cert_path = os.getenv("FIREBASE_CERT_PATH", "firebase_key.json")

        self.environment = os.getenv("ENV", "development")
        self.log_level = os.getenv("LOG_LEVEL", "INFO")

        # Security
        self.cors_origins = self._parse_cors_origins(os.getenv("CORS_ORIGINS", "*"))

        # Pagination
        self.default_page_limit = int(os.getenv("DEFAULT_PAGE_LIMIT", "10"))
        self.max_page_limit = int(os.getenv("MAX_PAGE_LIMIT", "100"))

        # Event bootstrap (used when someone registers and no event is active)
        self.default_event_name = os.getenv("DEFAULT_EVENT_NAME", "Wichtelaktion")
        self.default_event_description = os.getenv(
            "DEFAULT_EVENT_DESCRIPTION", "Die jährliche Wichtelaktion der Schule"
        )

        # Dashboard
        self.statistics_days = int(os.getenv("STATISTICS_DAYS", "30"))

        # Performance / diagnostics
        self.sql_debug = self._parse_bool(os.getenv("SQL_DEBUG", "false"))

    def _parse_cors_origins(self, v: str) -> List[str]:
        if v == "*":
            return ["*"]
        return [origin.strip() for origin in v.split(",")]

    def _parse_bool(self, v: str) -> bool:
        return v.lower() in ("true", "1", "yes", "on")

    @property
    def is_production(self) -> bool:  # convenience flag
        return self.environment.lower() == "production"

    @property
    def is_development(self) -> bool:  # convenience flag
        return self.environment.lower() == "development"

    @property
    def allow_mock_tokens(self) -> bool:
        # mock-* bearer tokens are never honoured in production
        return not self.is_production


settings = Settings()
