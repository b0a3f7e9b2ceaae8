from enum import Enum
from typing import Any, Optional

from pydantic import AliasChoices, BaseModel, Field, PrivateAttr, field_validator

ENTITY_ID_PREFIXES = {
    "recording": "rec_",
    "artist": "art_",
    "album": "alb_",
}


def has_prefix(entity_id: str, entity_type: str) -> bool:
    return entity_id.startswith(ENTITY_ID_PREFIXES[entity_type])


# ── Catalog ───────────────────────────────────────────────────────────────────

class Recording(BaseModel):
    song_id: str
    title: str = ""
    variant: Optional[str] = None
    year: Optional[int] = None
    artist_ids: list[str] = Field(
        default_factory=list, validation_alias=AliasChoices("artist_ids", "artistIds")
    )
    genre_ids: list[str] = Field(
        default_factory=list, validation_alias=AliasChoices("genre_ids", "genreIds")
    )
    album_ids: list[str] = Field(
        default_factory=list, validation_alias=AliasChoices("album_ids", "albumIds")
    )
    album_id: Optional[str] = Field(None, validation_alias=AliasChoices("album_id", "albumId"))
    model_config = {"extra": "allow"}

    @field_validator("artist_ids", "genre_ids", "album_ids", mode="before")
    @classmethod
    def none_as_empty(cls, v):
        return [] if v is None else v


class Artist(BaseModel):
    id: str
    name: str = ""
    model_config = {"extra": "allow"}


class Album(BaseModel):
    id: str
    title: str = ""
    recording_ids: list[str] = Field(
        default_factory=list, validation_alias=AliasChoices("recording_ids", "recordingIds")
    )
    model_config = {"extra": "allow"}


class Genre(BaseModel):
    id: str
    name: str = ""
    model_config = {"extra": "allow"}


class PlatformLink(BaseModel):
    entity_type: str = Field(alias="entityType")
    entity_id: str = Field(alias="entityId")
    platform: Optional[str] = None
    url: Optional[str] = None
    model_config = {"extra": "allow", "populate_by_name": True}


# ── Quests ────────────────────────────────────────────────────────────────────

class QuestType(str, Enum):
    LISTEN_COUNT = "listen_count"
    LISTEN_BY_YEAR = "listen_by_year"
    LISTEN_BY_GENRE = "listen_by_genre"
    LISTEN_BETWEEN_TIME = "listen_between_time"
    LISTEN_TO_ALBUM = "listen_to_album"
    TRAVEL_AMOUNT = "travel_amount"
    UNKNOWN = "unknown"

    @classmethod
    def _missing_(cls, value):
        return cls.UNKNOWN


class QuestStatus(str, Enum):
    ACTIVE = "active"
    COMPLETED = "completed"


class QuestTemplate(BaseModel):
    id: str
    type: QuestType = QuestType.UNKNOWN
    model_config = {"extra": "allow"}


class QuestParams(BaseModel):
    artist_id: Optional[str] = Field(None, alias="artistId")
    genre_id: Optional[str] = Field(None, alias="genreId")
    album_id: Optional[str] = Field(None, alias="albumId")
    start_year: Optional[int] = Field(None, alias="startYear")
    end_year: Optional[int] = Field(None, alias="endYear")
    start_time: Optional[str] = Field(None, alias="startTime")
    end_time: Optional[str] = Field(None, alias="endTime")
    required_count: Optional[int] = Field(None, alias="requiredCount")
    # display-only counts used by travel_amount / listen_to_album titles
    number: Optional[int] = None
    songs: Optional[int] = None
    model_config = {"extra": "allow", "populate_by_name": True}

    @property
    def effective_required_count(self) -> int:
        return self.required_count or 1


class QuestState(BaseModel):
    """
    Mutable quest progress.

    matched_recording_ids is an ordered, duplicate-free sequence backed by a
    private membership index. It is a tuple so the only way to grow it is
    record_match(), which keeps the index in step.
    """
    status: QuestStatus = QuestStatus.ACTIVE
    matched_recording_ids: tuple[str, ...] = Field(default=(), alias="matchedRecordingIds")
    _matched: set[str] = PrivateAttr(default_factory=set)
    # matchedRecordingIdsSet from older files is rebuilt, never read
    model_config = {"extra": "ignore", "populate_by_name": True}

    @field_validator("matched_recording_ids")
    @classmethod
    def drop_duplicates(cls, v):
        return tuple(dict.fromkeys(v))

    def model_post_init(self, __context: Any) -> None:
        self._matched = set(self.matched_recording_ids)

    @property
    def matched_count(self) -> int:
        return len(self.matched_recording_ids)

    def has_matched(self, recording_id: str) -> bool:
        return recording_id in self._matched

    def record_match(self, recording_id: str) -> bool:
        """Append recording_id; returns False when it was already present."""
        if recording_id in self._matched:
            return False
        self._matched.add(recording_id)
        self.matched_recording_ids = (*self.matched_recording_ids, recording_id)
        return True


class Reward(BaseModel):
    type: str
    entity_id: str = Field(alias="entityId")
    model_config = {"extra": "allow", "populate_by_name": True}


class Quest(BaseModel):
    id: str
    template_id: Optional[str] = Field(None, alias="templateId")
    params: Optional[QuestParams] = None
    state: Optional[QuestState] = None
    reward: Optional[Reward] = None
    model_config = {"extra": "allow", "populate_by_name": True}

    def to_doc(self) -> dict[str, Any]:
        """Serialise in the camelCase shape quests are stored and served in."""
        return self.model_dump(mode="json", by_alias=True, exclude_none=True)
