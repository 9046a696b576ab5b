from pydantic_settings import BaseSettings, SettingsConfigDict
from typing import Optional, List


class Settings(BaseSettings):
    # Supabase
    supabase_url: str = ""
    supabase_key: str = ""  # anon (publishable) key, not the service role key
    session_storage_dir: Optional[str] = None  # None keeps auth tokens in memory

    # Auth
    site_url: str = "http://localhost:5173"
    profile_fetch_timeout_seconds: float = 5.0
    auth_event_debounce_seconds: float = 0.1
    auth_listener_delay_seconds: float = 0.3

    # File hosting (CLOUDINARY_URL wins over the two explicit keys)
    cloudinary_url: Optional[str] = None
    cloudinary_cloud_name: str = "demo"
    cloudinary_upload_preset: str = "ml_default"
    upload_fallback_dir: Optional[str] = None
    max_job_file_bytes: int = 100 * 1024 * 1024
    http_timeout_seconds: float = 30.0

    # Checkout
    payment_receiving_address: str = "TMo91D2bi4EQUGBQDQyFF7rvvNGHmETAU"
    payment_network: str = "TRC20"
    checkout_redirect_seconds: int = 10
    checkout_redirect_path: str = "/dashboard"

    # Admin
    submissions_page_size: int = 100

    # App
    app_name: str = "taskmarket"
    debug: bool = False
    environment: str = "development"  # development | staging | production
    log_level: str = "INFO"
    cors_origins: str = "http://localhost:3000,http://localhost:5173,http://127.0.0.1:3000,http://127.0.0.1:5173"
    rate_limit: str = "100/minute"  # slowapi format, e.g. "100/minute"

    @property
    def is_production(self) -> bool:
        return self.environment == "production"

    def get_cors_origins_list(self) -> List[str]:
        return [o.strip() for o in self.cors_origins.split(",") if o.strip()]

    @property
    def email_redirect_url(self) -> str:
        return f"{self.site_url.rstrip('/')}/auth/callback"

    model_config = SettingsConfigDict(
        env_file=".env",
        case_sensitive=False,
        env_prefix="",  # No prefix needed
        extra="ignore"
    )


settings = Settings()
