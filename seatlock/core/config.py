from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    PROJECT_NAME: str = "Seatlock Reservation API"
    API_V1_STR: str = "/api/v1"
    LOG_LEVEL: str = "INFO"

    # Database
    POSTGRES_SERVER: str = "localhost"
    POSTGRES_USER: str = "postgres"
    POSTGRES_PASSWORD: str = "postgres"
    POSTGRES_DB: str = "seatlock_db"
    POSTGRES_PORT: int = 5432
    DATABASE_URL: str = ""
    # SQLite only: seconds to wait for the write lock. 0 keeps contention fail-fast.
    SQLITE_LOCK_TIMEOUT: float = 0.0

    # Leases
    SEAT_HOLD_SECONDS: int = 120
    PENDING_BOOKING_SECONDS: int = 120
    MAX_HOLD_SECONDS: int = 900

    # Inventory limits
    MAX_SEATS_PER_SHOW: int = 500
    MAX_SEATS_PER_BOOKING: int = 50

    # Lease reaper
    REAPER_ENABLED: bool = True
    REAPER_INTERVAL_SECONDS: float = 60.0

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
