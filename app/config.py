from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    model_config = SettingsConfigDict(env_file=".env", extra="ignore")

    database_url: str = "sqlite+aiosqlite:///./battles.db"
    base_url: str = "http://localhost:8000"
    cors_origins: str = "http://localhost:5173,http://127.0.0.1:5173"
    log_level: str = "INFO"

    secret_key: str = "change-me-in-production"
    algorithm: str = "HS256"
    access_token_expire_minutes: int = 60 * 24

    # Only this address may register an admin account unless open registration is enabled.
    admin_email: str = ""
    allow_open_registration: bool = False

    smtp_host: str = ""
    smtp_port: int = 587
    smtp_starttls: bool = True
    smtp_user: str = ""
    smtp_password: str = ""
    smtp_from: str = "Battle Requests <noreply@localhost>"

    twitch_client_id: str = ""
    twitch_client_secret: str = ""
    twitch_channel: str = "pelletion"


settings = Settings()
