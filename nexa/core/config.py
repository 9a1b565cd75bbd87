from dataclasses import dataclass
from pathlib import Path
import os


def _env_flag(name: str, default: str) -> bool:
    return os.getenv(name, default).strip().lower() in {"1", "true", "yes", "on"}


@dataclass(frozen=True)
class Settings:
    app_name: str = "NEXA-Sys"
    environment: str = os.getenv("NEXA_ENV", "development")
    secret_key: str = os.getenv("NEXA_JWT_SECRET", "supersecret")
    algorithm: str = os.getenv("NEXA_JWT_ALGORITHM", "HS256")
    access_token_expire_minutes: int = int(os.getenv("ACCESS_TOKEN_EXPIRE_MINUTES", "480"))
    host: str = os.getenv("HOST", "0.0.0.0")
    port: int = int(os.getenv("PORT", "5000"))
    database_url: str = os.getenv("DATABASE_URL", "")
    seed_data: bool = _env_flag("NEXA_SEED_DATA", "true")
    data_dir: Path = Path(os.getenv("NEXA_DATA_DIR", str(Path(__file__).resolve().parents[2] / "data")))

    @property
    def is_production(self) -> bool:
        return self.environment.lower() == "production"


settings = Settings()
