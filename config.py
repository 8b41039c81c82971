import os
from dataclasses import dataclass
from pathlib import Path

from dotenv import load_dotenv

load_dotenv()

BASE_DIR = Path(__file__).resolve().parent


def _env_flag(name: str, default: str) -> bool:
    return os.getenv(name, default).strip().lower() in {"1", "true", "yes", "on"}


@dataclass(frozen=True)
class Settings:
    """Application settings read from the process environment."""

    mongodb_uri: str = "mongodb://localhost:27017"
    database_name: str = "after_school_db"
    host: str = "0.0.0.0"
    port: int = 3000
    images_dir: str = str(BASE_DIR / "images")
    log_level: str = "INFO"
    seed_sample_data: bool = True

    @classmethod
    def from_env(cls) -> "Settings":
        return cls(
            mongodb_uri=os.getenv("MONGODB_URI", cls.mongodb_uri),
            database_name=os.getenv("DATABASE_NAME", cls.database_name),
            host=os.getenv("HOST", cls.host),
            port=int(os.getenv("PORT", str(cls.port))),
            images_dir=os.getenv("IMAGES_DIR", cls.images_dir),
            log_level=os.getenv("LOG_LEVEL", cls.log_level).upper(),
            seed_sample_data=_env_flag("SEED_SAMPLE_DATA", "true"),
        )


settings = Settings.from_env()
