"""
Runtime settings, read once from the environment.
"""
import os
from dataclasses import dataclass, field
from functools import lru_cache
from pathlib import Path

from dotenv import load_dotenv

DEFAULT_DATA_DIR = Path(__file__).resolve().parent.parent / "data"

FIREBASE_WEB_KEYS = {
    "apiKey": "FIREBASE_API_KEY",
    "authDomain": "FIREBASE_AUTH_DOMAIN",
    "projectId": "FIREBASE_PROJECT_ID",
    "storageBucket": "FIREBASE_STORAGE_BUCKET",
    "messagingSenderId": "FIREBASE_MESSAGING_SENDER_ID",
    "appId": "FIREBASE_APP_ID",
    "measurementId": "FIREBASE_MEASUREMENT_ID",
}


def _env_flag(name: str, default: bool = False) -> bool:
    raw = os.getenv(name)
    if raw is None:
        return default
    return raw.strip().lower() in ("1", "true", "yes", "on")


@dataclass(frozen=True)
class Settings:
    data_dir: Path = DEFAULT_DATA_DIR
    quest_backend: str = "file"         # 'file' | 'supabase'
    listen_rate_limit: str = "60/minute"
    allowed_origins: tuple[str, ...] = ("http://localhost:3000",)
    log_requests: bool = False
    firebase_project_id: str | None = None
    firebase_web_config: dict[str, str | None] = field(default_factory=dict)

    @property
    def quests_path(self) -> Path:
        return self.data_dir / "quests.json"

    @classmethod
    def from_env(cls) -> "Settings":
        origins = os.getenv("MUSICQUEST_ALLOWED_ORIGINS", "http://localhost:3000")
        return cls(
            data_dir=Path(os.getenv("MUSICQUEST_DATA_DIR") or DEFAULT_DATA_DIR),
            quest_backend=os.getenv("MUSICQUEST_QUEST_BACKEND", "file").lower(),
            listen_rate_limit=os.getenv("MUSICQUEST_LISTEN_RATE", "60/minute"),
            allowed_origins=tuple(o.strip() for o in origins.split(",") if o.strip()),
            log_requests=_env_flag("LOG_REQUESTS"),
            firebase_project_id=os.getenv("FIREBASE_PROJECT_ID") or None,
            firebase_web_config={k: os.getenv(env) for k, env in FIREBASE_WEB_KEYS.items()},
        )


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    load_dotenv()
    return Settings.from_env()
