"""
Quest progress: applies listen events to quests in place, no I/O.
"""
from dataclasses import dataclass
from enum import Enum

from ..errors import DataIntegrityError
from ..models import Quest, QuestStatus, Recording
from .matching import matches


class ListenTransition(str, Enum):
    UNCHANGED = "unchanged"
    ADVANCED = "advanced"
    COMPLETED = "completed"


@dataclass(frozen=True)
class QuestProgress:
    done: int
    total: int
    status: QuestStatus

    @property
    def fraction(self) -> float:
        return min(self.done / self.total, 1.0)


def _require_fields(quest: Quest) -> None:
    if quest.params is None:
        raise DataIntegrityError(quest.id, "params")
    if quest.state is None:
        raise DataIntegrityError(quest.id, "state")


def apply_listen_event(quest: Quest, recording: Recording) -> ListenTransition:
    """
    Advance one quest for one listen event.

    Completed quests are frozen and a song already matched never counts
    twice, so replaying an event is a no-op. Raises DataIntegrityError
    before touching anything when the quest has no params or state.
    """
    _require_fields(quest)
    state = quest.state

    if state.status != QuestStatus.ACTIVE:
        return ListenTransition.UNCHANGED

    if state.has_matched(recording.song_id):
        return ListenTransition.UNCHANGED

    if not matches(recording, quest.params):
        return ListenTransition.UNCHANGED

    required = quest.params.effective_required_count
    # an active quest already holding enough matches completes without growing
    if state.matched_count < required:
        state.record_match(recording.song_id)
    if state.matched_count >= required:
        state.status = QuestStatus.COMPLETED
        return ListenTransition.COMPLETED
    return ListenTransition.ADVANCED


def quest_progress(quest: Quest) -> QuestProgress:
    if quest.state is None:
        raise DataIntegrityError(quest.id, "state")
    total = quest.params.effective_required_count if quest.params else 1
    return QuestProgress(done=quest.state.matched_count, total=total, status=quest.state.status)


def render_quest_progress(quest: Quest) -> str:
    progress = quest_progress(quest)
    if progress.status == QuestStatus.COMPLETED:
        return "Completed"
    return f"{progress.done} / {progress.total} completed"
