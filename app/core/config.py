from pydantic.types import SecretStr
from functools import lru_cache
from pydantic_settings import BaseSettings, SettingsConfigDict
from pydantic import HttpUrl


def parse_comma_separated_origins(comma_list: str) -> list[HttpUrl]:
    """
    Parse a comma-separated string into a list of validated HttpUrl origins.

    Empty or falsy input returns an empty list. Each non-empty, comma-separated item is validated and converted to an HttpUrl.

    Parameters:
        comma_list (str): Comma-separated origins (may be empty or falsy).

    Returns:
        list[HttpUrl]: A list of parsed and validated HttpUrl objects.

    Raises:
        ValueError: If any origin cannot be parsed as an HttpUrl; the error message includes the invalid origin and the underlying reason.
    """
    if not comma_list:
        return []
    origins = []
    for origin in comma_list.split(","):
        origin = origin.strip()
        if origin:
            try:
                origins.append(HttpUrl(origin))
            except Exception as e:
                raise ValueError(f"Invalid CORS origin '{origin}': {e}") from e
    return origins


class Settings(BaseSettings):
    DATABASE_URL: str
    SECRET_KEY: SecretStr
    ALGORITHM: str = "HS256"
    ACCESS_TOKEN_EXPIRE_MINUTES: int = 30
    REFRESH_TOKEN_EXPIRE_DAYS: int = 7
    PASSWORD_RESET_TOKEN_EXPIRE_MINUTES: int = 60
    BACKEND_CORS_ORIGINS: str = ""
    FIRST_SUPERUSER_EMAIL: str = ""
    FIRST_SUPERUSER_PASSWORD: SecretStr = SecretStr("")
    FIRST_SUPERUSER_USERNAME: str = "superadmin"
    ENVIRONMENT: str = "development"
    FRONTEND_URL: str = "http://localhost:3000"
    LOG_LEVEL: str = "INFO"
    # Echo SQL statements through the log (noisy, local debugging only)
    LOG_SQL: bool = False

    # Media storage
    IMAGES_BUCKET: str = "taiwanstay-images"
    MINIO_ENDPOINT: str = "localhost:9000"
    MINIO_ACCESS_KEY: str = ""
    MINIO_SECRET_KEY: str = ""
    MINIO_SECURE: bool = False
    MAX_IMAGE_SIZE_BYTES: int = 10 * 1024 * 1024

    # Brevo SMTP relay (transactional and important mail)
    SMTP_HOST: str = "smtp-relay.brevo.com"
    SMTP_PORT: int = 587
    SMTP_USER: str | None = None
    SMTP_PASSWORD: SecretStr | None = None
    SMTP_FROM_EMAIL: str | None = "noreply@taiwanstay.com"
    SMTP_FROM_NAME: str = "TaiwanStay"
    BREVO_DAILY_LIMIT: int = 300

    # MailerLite (marketing mail)
    MAILERLITE_API_KEY: SecretStr | None = None
    MAILERLITE_API_URL: str = "https://connect.mailerlite.com/api"
    MAILERLITE_DAILY_LIMIT: int = 1000
    MAILERLITE_TIMEOUT_SECONDS: int = 10

    # Read the env file not present in the repo for security reasons,
    # overrides the attributes above based on the env file content
    model_config = SettingsConfigDict(
        env_file_encoding="utf-8", env_file=".env", extra="ignore"
    )


@lru_cache()
# get_settings.cache_clear() may be needed for tests that modify env vars
def get_settings():
    """
    Load application settings from environment variables and the configured .env file.

    This function is cached, so repeated calls return the same Settings instance until the cache is cleared.

    Returns:
        Settings: A Settings instance populated from environment variables and the `.env` file according to the model configuration.
    """
    return Settings()
