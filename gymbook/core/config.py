from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    PROJECT_NAME: str = "GymBook API"
    API_V1_STR: str = "/api/v1"
    SECRET_KEY: str = "changeme"
    ACCESS_TOKEN_EXPIRE_MINUTES: int = 60 * 24 * 8

    ADMIN_SECRET_KEY: str = "change-this-admin-secret"

    # Database
    POSTGRES_SERVER: str = "localhost"
    POSTGRES_USER: str = "postgres"
    POSTGRES_PASSWORD: str = "12345"
    POSTGRES_DB: str = "gymbook_db"
    POSTGRES_PORT: int = 5432
    DATABASE_URL: str = ""

    # Booking policy
    CANCELLATION_CUTOFF_MINUTES: int = 30
    MIN_SLOT_MINUTES: int = 60
    EXTENSION_EXPIRY_MINUTES: int = 60

    # Background sweeps
    SWEEPS_ENABLED: bool = True
    SWEEP_INTERVAL_SECONDS: int = 60 * 60
    SWEEP_BATCH_SIZE: int = 200
    # False restores the legacy filter that only completes `pending` bookings
    COMPLETION_SWEEP_INCLUDES_SCHEDULED: bool = True

    # Email
    RESEND_API_KEY: str = ""
    EMAIL_FROM_ADDRESS: str = "no-reply@gymbook.local"
    PLATFORM_NAME: str = "GymBook"

    # Object storage
    AWS_ACCESS_KEY_ID: str = ""
    AWS_SECRET_ACCESS_KEY: str = ""
    AWS_REGION: str = "ap-south-1"
    S3_BUCKET_NAME: str = "gymbook-images"
    MAX_IMAGE_BYTES: int = 12 * 1024 * 1024

    # Lookups
    PINCODE_API_URL: str = "https://api.postalpincode.in/pincode"
    HTTP_TIMEOUT_SECONDS: float = 10.0

    model_config = SettingsConfigDict(
        env_file=".env",
        case_sensitive=True,
        extra="ignore"
    )

    def assemble_db_url(self) -> str:
        if self.DATABASE_URL:
            return self.DATABASE_URL
        return f"postgresql://{self.POSTGRES_USER}:{self.POSTGRES_PASSWORD}@{self.POSTGRES_SERVER}:{self.POSTGRES_PORT}/{self.POSTGRES_DB}"

settings = Settings()
settings.DATABASE_URL = settings.assemble_db_url()
