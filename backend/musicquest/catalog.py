"""
Catalog store: read-only music data held in id-keyed indexes.
"""
import json
import logging
from pathlib import Path
from typing import TypeVar

from pydantic import BaseModel, ValidationError

from .models import (
    Album, Artist, Genre, PlatformLink, QuestTemplate, Recording, has_prefix,
)

logger = logging.getLogger(__name__)

M = TypeVar("M", bound=BaseModel)

CATALOG_FILES = {
    "songs": "songs.json",
    "artists": "artists.json",
    "albums": "albums.json",
    "platforms": "platforms.json",
    "genres": "genres.json",
    "quest_templates": "questTemplates.json",
}


def load_records(path: Path, model: type[M], label: str) -> list[M]:
    """
    Parse a JSON array file into models. A missing or unreadable file yields
    an empty list; individual bad records are skipped.
    """
    try:
        raw = json.loads(path.read_text(encoding="utf-8"))
    except (OSError, json.JSONDecodeError) as e:
        logger.error("Failed to load %s from %s: %s", label, path, e)
        return []
    if not isinstance(raw, list):
        logger.error("Failed to load %s from %s: expected a JSON array", label, path)
        return []

    records: list[M] = []
    for i, item in enumerate(raw):
        try:
            records.append(model.model_validate(item))
        except ValidationError as e:
            logger.warning("Skipping %s[%d] in %s: %s", label, i, path.name, e.error_count())
    logger.info("Loaded %d %s", len(records), label)
    return records


def _substring_filter(items, attr: str, query: str) -> list:
    q = query.lower()
    return [i for i in items if q in (getattr(i, attr) or "").lower()]


class Catalog:
    def __init__(self, data_dir: Path):
        self.data_dir = Path(data_dir)
        self.songs: list[Recording] = []
        self.artists: list[Artist] = []
        self.albums: list[Album] = []
        self.platforms: list[PlatformLink] = []
        self.genres: list[Genre] = []
        self.quest_templates: list[QuestTemplate] = []
        self.reload()

    def reload(self) -> None:
        d = self.data_dir
        self.songs = load_records(d / CATALOG_FILES["songs"], Recording, "songs")
        self.artists = load_records(d / CATALOG_FILES["artists"], Artist, "artists")
        self.albums = load_records(d / CATALOG_FILES["albums"], Album, "albums")
        self.platforms = load_records(d / CATALOG_FILES["platforms"], PlatformLink, "platform links")
        self.genres = load_records(d / CATALOG_FILES["genres"], Genre, "genres")
        self.quest_templates = load_records(
            d / CATALOG_FILES["quest_templates"], QuestTemplate, "quest templates"
        )
        self._rebuild_indexes()

    def _rebuild_indexes(self) -> None:
        self._songs = {s.song_id: s for s in self.songs}
        self._artists = {a.id: a for a in self.artists}
        self._albums = {a.id: a for a in self.albums}
        self._genres = {g.id: g for g in self.genres}
        self._templates = {t.id: t for t in self.quest_templates}
        self._platforms: dict[tuple[str, str], list[PlatformLink]] = {}
        for link in self.platforms:
            self._platforms.setdefault((link.entity_type, link.entity_id), []).append(link)

    def counts(self) -> dict[str, int]:
        return {
            "songs": len(self.songs),
            "artists": len(self.artists),
            "albums": len(self.albums),
            "platforms": len(self.platforms),
            "genres": len(self.genres),
            "questTemplates": len(self.quest_templates),
        }

    # ── Lookups ───────────────────────────────────────────────────────────────

    def get_recording(self, recording_id: str) -> Recording | None:
        if not has_prefix(recording_id, "recording"):
            return None
        return self._songs.get(recording_id)

    def get_artist(self, artist_id: str) -> Artist | None:
        if not has_prefix(artist_id, "artist"):
            return None
        return self._artists.get(artist_id)

    def get_album(self, album_id: str) -> Album | None:
        if not has_prefix(album_id, "album"):
            return None
        return self._albums.get(album_id)

    def get_genre(self, genre_id: str) -> Genre | None:
        return self._genres.get(genre_id)

    def get_template(self, template_id: str | None) -> QuestTemplate | None:
        return self._templates.get(template_id) if template_id else None

    def platform_links_for(self, entity_type: str, entity_id: str) -> list[PlatformLink]:
        return list(self._platforms.get((entity_type, entity_id), []))

    def artists_for(self, recording: Recording) -> list[Artist]:
        return [self._artists[i] for i in recording.artist_ids if i in self._artists]

    def albums_for(self, recording: Recording) -> list[Album]:
        ids = list(recording.album_ids)
        if recording.album_id and recording.album_id not in ids:
            ids.append(recording.album_id)
        return [self._albums[i] for i in ids if i in self._albums]

    def album_recordings(self, album: Album) -> list[Recording]:
        return [self._songs[i] for i in album.recording_ids if i in self._songs]

    # ── Search (linear substring) ─────────────────────────────────────────────

    def search_songs(self, query: str) -> list[Recording]:
        return _substring_filter(self.songs, "title", query)

    def search_artists(self, query: str) -> list[Artist]:
        return _substring_filter(self.artists, "name", query)

    def search_albums(self, query: str) -> list[Album]:
        return _substring_filter(self.albums, "title", query)

    def search(self, query: str) -> dict[str, list]:
        if not query:
            return {"artists": list(self.artists), "albums": list(self.albums), "songs": []}
        return {
            "artists": self.search_artists(query),
            "albums": self.search_albums(query),
            "songs": self.search_songs(query),
        }
