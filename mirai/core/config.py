from pydantic_settings import BaseSettings, SettingsConfigDict
from dotenv import load_dotenv

# Load environment variables from .env file
load_dotenv()


class Settings(BaseSettings):
    DATABASE_URL: str = "sqlite:///./mirai.db"
    LOG_LEVEL: str = "INFO"

    # Identity provider backend API
    CLERK_SECRET_KEY: str = ""
    CLERK_API_URL: str = "https://api.clerk.com/v1"
    CLERK_TIMEOUT_SECONDS: float = 10.0

    # Colours forced onto the preview while it is rasterized
    PDF_BACKGROUND_COLOR: str = "rgb(255, 255, 255)"
    PDF_TEXT_COLOR: str = "rgb(0, 0, 0)"
    # Upper bound on waiting for the preview page to finish rendering
    RENDER_TIMEOUT_SECONDS: float = 5.0

    # In-memory builder sessions: dropped after this much inactivity, oldest first past the cap
    BUILDER_IDLE_SECONDS: float = 1800.0
    BUILDER_MAX_SESSIONS: int = 500

    model_config = SettingsConfigDict(env_file=".env", extra="ignore")


settings = Settings()
