from pydantic_settings import BaseSettings, SettingsConfigDict
from pydantic import field_validator

class Settings(BaseSettings):
    model_config = SettingsConfigDict(env_prefix="PACK_", env_file=".env", env_file_encoding="utf-8")

    database_url: str = "sqlite:///./pack.db"
    auto_create_schema: bool = True
    cors_origins: str = "http://localhost:3000,http://127.0.0.1:3000"
    log_level: str = "INFO"
    session_cookie_name: str = "sessionCookie"
    session_ttl_seconds: int = 60 * 60 * 24 * 7
    cookie_secure: bool = False
    protected_prefixes: str = "/dashboard,/settings"
    login_path: str = "/login"
    password_hash_iterations: int = 310_000
    join_code_bytes: int = 4
    public_app_base_url: str = "http://127.0.0.1:3000"
    error_notification_email: str | None = None
    mail_enabled: bool = False
    mail_from: str | None = "Pack Support <support@packapp.co.uk>"
    mail_provider_order: str = "resend,smtp,ses"
    smtp_host: str | None = None
    smtp_port: int = 587
    smtp_username: str | None = None
    smtp_password: str | None = None
    smtp_use_tls: bool = True
    smtp_use_ssl: bool = False
    smtp_timeout_seconds: int = 20
    resend_api_key: str | None = None
    resend_api_base: str = "https://api.resend.com"
    ses_region: str | None = None
    ses_access_key_id: str | None = None
    ses_secret_access_key: str | None = None
    ses_session_token: str | None = None
    ses_configuration_set: str | None = None

    @field_validator("database_url", mode="before")
    @classmethod
    def normalize_database_url(cls, value: str) -> str:
        # Hosted Postgres providers often expose postgres:// URLs.
        if isinstance(value, str) and value.startswith("postgres://"):
            return "postgresql://" + value[len("postgres://"):]
        return value

    @property
    def protected_prefix_list(self) -> list[str]:
        return [prefix.strip() for prefix in self.protected_prefixes.split(",") if prefix.strip()]

settings = Settings()
