# backend/config.py
from pydantic_settings import BaseSettings
from typing import ClassVar, List, Optional
from pathlib import Path

# Resolve absolute path to the .env file for reliable loading
env_path = Path(__file__).parent.parent / ".env"

class Settings(BaseSettings):
    DATABASE_URL: str = "sqlite:///./delivery.db"

    # Origins allowed to call the API (the storefront SPA)
    FRONTEND_URL: Optional[str] = None
    CORS_ORIGINS: List[str] = ["http://localhost:5173", "http://127.0.0.1:5173"]

    # Media host; local uploads are used unless all three are set
    CLOUDINARY_CLOUD_NAME: Optional[str] = None
    CLOUDINARY_API_KEY: Optional[str] = None
    CLOUDINARY_API_SECRET: Optional[str] = None
    UPLOAD_DIR: str = "static/uploads"
    UPLOAD_FOLDER_PREFIX: str = "delivery_app"

    LOG_LEVEL: str = "INFO"
    BCRYPT_ROUNDS: int = 10

    class Config:
        env_file: ClassVar[str] = str(env_path)
        extra: ClassVar[str] = "ignore"

    @property
    def cloudinary_enabled(self) -> bool:
        return bool(self.CLOUDINARY_CLOUD_NAME and self.CLOUDINARY_API_KEY and self.CLOUDINARY_API_SECRET)

    @property
    def allowed_origins(self) -> List[str]:
        origins = list(self.CORS_ORIGINS)
        if self.FRONTEND_URL:
            origins.append(self.FRONTEND_URL)
        return origins

settings = Settings()
