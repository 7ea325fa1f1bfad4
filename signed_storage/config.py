from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    # Storage settings
    STORAGE_BACKEND: str = "local"  # local | s3 (future) | oss (future)
    STORAGE_PUBLIC_ROOT: str = "storage/public"
    STORAGE_PRIVATE_ROOT: str = "storage/private"
    STORAGE_PUBLIC_BASE_URL: str = "http://localhost:8000/files/public"
    STORAGE_PUBLIC_ROUTE_PREFIX: str = "/files/public"
    MAX_UPLOAD_SIZE_MB: int = 1000

    # Signed URL settings
    SIGNED_URL_SECRET: str
    SIGNED_URL_BASE_URL: str = "http://localhost:8000"
    SIGNED_URL_ROUTE_PREFIX: str = "/files/private"
    SIGNED_URL_CLOCK_SKEW_SECONDS: int = 0
    DEFAULT_TEMPORARY_URL_TTL_SECONDS: int = 60
    MAX_TEMPORARY_URL_TTL_SECONDS: int = 7 * 24 * 3600

    # Bearer token guarding the object management API
    STORAGE_API_TOKEN: str | None = None

    # "extra": "ignore" keeps unrelated environment variables out of the way
    model_config = {"env_file": ".env", "extra": "ignore"}


settings = Settings()
