"""
Read-only queries relating songs to quests, pure functions.
"""
from dataclasses import dataclass
from typing import Iterable

from ..models import Quest, QuestStatus, Recording
from .matching import matches


@dataclass(frozen=True)
class QuestImpact:
    completes: int = 0
    advances: int = 0


def quests_that_grant_recording(quests: Iterable[Quest], song_id: str) -> list[Quest]:
    return [
        q for q in quests
        if q.reward is not None and q.reward.type == "song" and q.reward.entity_id == song_id
    ]


def quests_related_to_recording(quests: Iterable[Quest], recording: Recording) -> list[Quest]:
    """Quests that already counted this song, or active quests it would advance."""
    related = []
    for quest in quests:
        if quest.state is None or quest.params is None:
            continue
        if quest.state.has_matched(recording.song_id):
            related.append(quest)
        elif quest.state.status == QuestStatus.ACTIVE and matches(recording, quest.params):
            related.append(quest)
    return related


def quest_impact_for_recording(quests: Iterable[Quest], recording: Recording) -> QuestImpact:
    """How many active quests a listen to this song would complete or advance."""
    completes = advances = 0
    for quest in quests:
        state = quest.state
        if state is None or quest.params is None or state.status != QuestStatus.ACTIVE:
            continue
        if state.has_matched(recording.song_id) or not matches(recording, quest.params):
            continue
        if state.matched_count + 1 >= quest.params.effective_required_count:
            completes += 1
        else:
            advances += 1
    return QuestImpact(completes=completes, advances=advances)


def recordings_without_quests(recordings: Iterable[Recording], quests: list[Quest]) -> list[Recording]:
    missing = []
    for recording in recordings:
        if quests_that_grant_recording(quests, recording.song_id):
            continue
        if quests_related_to_recording(quests, recording):
            continue
        missing.append(recording)
    return missing
