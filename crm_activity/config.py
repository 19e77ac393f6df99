"""CRM configuration via pydantic-settings."""

from __future__ import annotations

from pydantic_settings import BaseSettings


class CRMSettings(BaseSettings):
    environment: str = "development"
    database_url: str = "sqlite+aiosqlite:///crm.db"
    echo_sql: bool = False
    app_title: str = "CRM Activity"

    # Logging
    log_level: str = "INFO"
    log_json: bool = False

    # Request context: the viewer is identified by this header
    user_header: str = "X-User-Id"

    # Recently viewed sidebar
    recently_viewed_limit: int = 10
    # Comma-separated subject types that never get "viewed" activities.
    recently_viewed_excluded_types: str = "task"

    # Activity feed
    activity_feed_limit: int = 50
    # Extra attempts after a failed activity write before giving up with a warning.
    activity_write_retries: int = 1

    model_config = {"env_prefix": "CRM_", "env_file": ".env", "extra": "ignore"}

    @property
    def recently_viewed_excluded(self) -> frozenset[str]:
        """Parse the comma-separated excluded subject types."""
        return frozenset(
            item.strip().lower()
            for item in self.recently_viewed_excluded_types.split(",")
            if item.strip()
        )


settings = CRMSettings()
