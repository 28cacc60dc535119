import os
from dotenv import load_dotenv

load_dotenv()


def _env_bool(name, default=False):
    value = os.getenv(name)
    if value is None:
        return default
    return value.strip().lower() in ("1", "true", "yes", "on")


class Settings:
    UPLOAD_DIR = os.getenv("UPLOAD_DIR", "./uploads")
    HOST = os.getenv("HOST", "0.0.0.0")
    PORT = int(os.getenv("PORT", "1080"))
    CORS_ORIGINS = [o.strip() for o in os.getenv("CORS_ORIGINS", "*").split(",") if o.strip()]

    STREAM_CHUNK_SIZE = int(os.getenv("STREAM_CHUNK_SIZE", str(1024 * 1024)))
    LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO").upper()

    AUTH_ENABLED = _env_bool("AUTH_ENABLED")
    JWT_SECRET_KEY = os.getenv("JWT_SECRET_KEY", "your_secret_key")
    JWT_ALGORITHM = os.getenv("JWT_ALGORITHM", "HS256")
    ACCESS_TOKEN_EXPIRE_MINUTES = int(os.getenv("ACCESS_TOKEN_EXPIRE_MINUTES", "60"))

    def __init__(self, **overrides):
        for key, value in overrides.items():
            attr = key.upper()
            if not hasattr(type(self), attr):
                raise AttributeError(f"Unknown setting: {key}")
            setattr(self, attr, value)

    @property
    def upload_root(self):
        return os.path.abspath(self.UPLOAD_DIR)
