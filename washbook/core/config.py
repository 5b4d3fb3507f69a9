from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    model_config = SettingsConfigDict(env_file=".env", extra="ignore")

    SUPABASE_URL: str | None = None
    SUPABASE_ANON_KEY: str | None = None
    SUPABASE_ACCESS_TOKEN: str | None = None

    ENV: str = "dev"
    LOG_LEVEL: str = "INFO"
    HTTP_TIMEOUT_SECONDS: float = 10.0

    CURRENCY: str = "MAD"
    PLATFORM_FEE_PERCENTAGE: float = 15.0
    DEFAULT_BASE_PRICE: int = 80
    DEFAULT_ESTIMATED_DURATION: int = 60
    SERVICES_CACHE_TTL_SECONDS: int = 6 * 60 * 60
    DRAFT_TTL_SECONDS: int = 24 * 60 * 60
    IDEMPOTENCY_TTL_SECONDS: int = 24 * 60 * 60

    NOMINATIM_BASE_URL: str = "https://nominatim.openstreetmap.org"
    GEOCODER_USER_AGENT: str = "car-wash-app/1.0 (reverse-geocode)"


settings = Settings()
