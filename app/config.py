"""
Configuration settings for CareConnect Content API
"""

from pydantic_settings import BaseSettings
from typing import List


class Settings(BaseSettings):
    """Application settings loaded from environment variables"""

    # Server Configuration
    APP_NAME: str = "CareConnect Content API"
    APP_VERSION: str = "1.0.0"
    DEBUG: bool = True
    HOST: str = "0.0.0.0"
    PORT: int = 8001

    # Firebase Configuration
    FIREBASE_CREDENTIALS_PATH: str = "./firebase-credentials.json"
    # Support for raw JSON credentials (env var)
    FIREBASE_CREDENTIALS_JSON: str = ""
    FIREBASE_PROJECT_ID: str = ""
    FIREBASE_EMULATOR_HOST: str = ""
    DEV_MODE: bool = False

    # Groq API (OpenAI-compatible chat completions)
    GROQ_API_KEY: str = ""
    GROQ_MODEL: str = "llama-3.1-8b-instant"
    GROQ_API_URL: str = "https://api.groq.com/openai/v1/chat/completions"
    GROQ_TEMPERATURE: float = 0.5
    GROQ_TIMEOUT_SECONDS: float = 30.0
    DEBUG_MOCK_GROQ: bool = False

    # Clerk session tokens (PEM public key from the Clerk dashboard)
    CLERK_JWT_KEY: str = ""
    CLERK_ISSUER: str = ""
    CLERK_JWT_ALGORITHM: str = "RS256"

    # Articles
    ARTICLE_MAX_KEY_POINTS: int = 12

    # CORS Configuration - Allow all localhost ports in development
    ALLOWED_ORIGINS: str = "http://localhost:3000,http://localhost:5173"

    @property
    def allowed_origins_list(self) -> List[str]:
        """Convert comma-separated origins to list"""
        origins = [origin.strip()
                   for origin in self.ALLOWED_ORIGINS.split(",") if origin.strip()]
        # In development, explicitly add common localhost ports
        if self.DEBUG:
            localhost_ports = [3000, 5173, 4173]
            for port in localhost_ports:
                for host in ("localhost", "127.0.0.1"):
                    origin = f"http://{host}:{port}"
                    if origin not in origins:
                        origins.append(origin)
        return origins

    model_config = {"env_file": ".env",
                    "case_sensitive": True, "extra": "allow"}


# Global settings instance
settings = Settings()
