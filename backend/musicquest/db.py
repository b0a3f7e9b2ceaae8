import json
import logging
import os
import tempfile
from functools import lru_cache
from pathlib import Path
from typing import Any, Protocol

from supabase import create_client, Client

from .config import Settings

logger = logging.getLogger(__name__)

QUESTS_TABLE = "quests"


class QuestBackend(Protocol):
    def load(self) -> list[dict[str, Any]]: ...
    def save(self, docs: list[dict[str, Any]]) -> None: ...


@lru_cache(maxsize=1)
def get_client() -> Client:
    url = os.environ["SUPABASE_URL"]
    key = os.environ["SUPABASE_SERVICE_KEY"]
    return create_client(url, key)


# ── Flat file ─────────────────────────────────────────────────────────────────

class JsonFileQuestBackend:
    def __init__(self, path: Path):
        self.path = Path(path)

    def load(self) -> list[dict[str, Any]]:
        try:
            data = json.loads(self.path.read_text(encoding="utf-8"))
        except FileNotFoundError:
            logger.error("Quest file not found: %s", self.path)
            return []
        if not isinstance(data, list):
            raise ValueError(f"{self.path} must hold a JSON array of quests")
        return data

    def save(self, docs: list[dict[str, Any]]) -> None:
        # write beside the target then swap, so readers never see half a file
        self.path.parent.mkdir(parents=True, exist_ok=True)
        fd, tmp = tempfile.mkstemp(dir=self.path.parent, prefix=".quests-", suffix=".json")
        try:
            with os.fdopen(fd, "w", encoding="utf-8") as fh:
                json.dump(docs, fh, indent=2, ensure_ascii=False)
            os.replace(tmp, self.path)
        except BaseException:
            Path(tmp).unlink(missing_ok=True)
            raise


# ── Supabase ──────────────────────────────────────────────────────────────────

def fetch_quest_rows(db: Client) -> list[dict]:
    res = db.table(QUESTS_TABLE).select("*").order("position").execute()
    return res.data or []


def upsert_quest_rows(db: Client, rows: list[dict]) -> None:
    if rows:
        db.table(QUESTS_TABLE).upsert(rows).execute()


class SupabaseQuestBackend:
    """Quests as rows of (id, position, data) where data is the quest document."""

    def __init__(self, db: Client):
        self.db = db

    def load(self) -> list[dict[str, Any]]:
        return [row["data"] for row in fetch_quest_rows(self.db)]

    def save(self, docs: list[dict[str, Any]]) -> None:
        rows = [{"id": doc["id"], "position": i, "data": doc} for i, doc in enumerate(docs)]
        upsert_quest_rows(self.db, rows)


def make_quest_backend(settings: Settings) -> QuestBackend:
    if settings.quest_backend == "supabase":
        return SupabaseQuestBackend(get_client())
    if settings.quest_backend != "file":
        raise ValueError(f"Unknown quest backend: {settings.quest_backend!r}")
    return JsonFileQuestBackend(settings.quests_path)
