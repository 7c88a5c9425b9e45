"""Application configuration."""

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    model_config = SettingsConfigDict(env_file=".env", case_sensitive=False, extra="ignore")

    # Vault ("local" directory or "host" application over WebSocket)
    vault_source: str = "local"
    vault_path: str = "vault"
    host_url: str = "http://localhost:27124"
    host_token: str = ""

    # Goal tracking
    debounce_seconds: float = 1.0  # quiet period before recounting a file
    poll_interval: float = 2.0  # local vault modification scan
    watch_vault: bool = True

    # Persistence
    settings_db_path: str = "data/writing_tracker.db"
    plugin_id: str = "writing-tracker"

    # Dashboard
    dashboard_dir: str = "static/images"

    # Server
    server_host: str = "0.0.0.0"
    server_port: int = 8000

    # Logging
    log_level: str = "INFO"


settings = Settings()
