"""
Resident quest store.

All quests live in one ordered list shared by every user. Mutations and
snapshots both take the store lock, so a listen event is visible to readers
as a whole or not at all. Writes to the backend are coalesced: any number of
events between two flushes produce a single write, and writes never overlap.
"""
import logging
import threading
from dataclasses import dataclass, field
from typing import Any

from pydantic import ValidationError

from .db import QuestBackend
from .engine.progress import ListenTransition, apply_listen_event
from .errors import DataIntegrityError
from .models import Quest, QuestState, Recording, Reward

logger = logging.getLogger(__name__)


@dataclass
class ListenOutcome:
    recording_id: str
    quests: list[Quest]
    advanced: list[str] = field(default_factory=list)
    completed: list[str] = field(default_factory=list)
    failed: list[str] = field(default_factory=list)
    unlocked: list[Reward] = field(default_factory=list)

    @property
    def changed(self) -> bool:
        return bool(self.advanced or self.completed)


def parse_quests(docs: list[dict[str, Any]]) -> list[Quest]:
    quests = []
    for i, doc in enumerate(docs):
        try:
            quests.append(Quest.model_validate(doc))
        except ValidationError as e:
            logger.error("Skipping unreadable quest #%d (%s): %s", i, doc.get("id", "?"), e)
    return quests


class QuestStore:
    scope = "global"

    def __init__(self, backend: QuestBackend):
        self._backend = backend
        self._lock = threading.RLock()
        self._write_lock = threading.Lock()
        self._quests: list[Quest] = []
        self._flush_pending = False
        self.reload()

    def reload(self) -> int:
        quests = parse_quests(self._backend.load())
        with self._lock:
            self._quests = quests
        logger.info("Loaded %d quests", len(quests))
        return len(quests)

    def __len__(self) -> int:
        with self._lock:
            return len(self._quests)

    def snapshot(self) -> list[Quest]:
        with self._lock:
            return [q.model_copy(deep=True) for q in self._quests]

    def get(self, quest_id: str) -> Quest | None:
        with self._lock:
            for quest in self._quests:
                if quest.id == quest_id:
                    return quest.model_copy(deep=True)
        return None

    def apply_listen_event(self, recording: Recording) -> ListenOutcome:
        """Run one listen event over every quest as a single locked unit."""
        outcome = ListenOutcome(recording_id=recording.song_id, quests=[])
        with self._lock:
            for quest in self._quests:
                try:
                    transition = apply_listen_event(quest, recording)
                except DataIntegrityError as e:
                    logger.error("Quest skipped for %s: %s", recording.song_id, e)
                    outcome.failed.append(quest.id)
                    continue
                if transition == ListenTransition.ADVANCED:
                    outcome.advanced.append(quest.id)
                elif transition == ListenTransition.COMPLETED:
                    outcome.completed.append(quest.id)
                    if quest.reward is not None:
                        outcome.unlocked.append(quest.reward.model_copy())
            outcome.quests = [q.model_copy(deep=True) for q in self._quests]
        return outcome

    def reset(self) -> int:
        """Put every quest back to active with no progress, and write it out now."""
        with self._write_lock:
            with self._lock:
                for quest in self._quests:
                    quest.state = QuestState()
                docs = [q.to_doc() for q in self._quests]
                self._flush_pending = False
            self._backend.save(docs)
        logger.info("Quest progress reset (%d quests)", len(docs))
        return len(docs)

    # ── Persistence ───────────────────────────────────────────────────────────

    def request_flush(self) -> bool:
        """
        Claim the pending-write slot. Returns True when the caller should
        schedule flush(); False when a write is already queued and will pick
        up the current state.
        """
        with self._lock:
            if self._flush_pending:
                return False
            self._flush_pending = True
            return True

    def flush(self) -> None:
        # Snapshot under the write lock: the last write carries the newest state.
        with self._write_lock:
            with self._lock:
                docs = [q.to_doc() for q in self._quests]
                self._flush_pending = False
            try:
                self._backend.save(docs)
            except Exception:
                logger.exception("Failed to persist %d quests", len(docs))
