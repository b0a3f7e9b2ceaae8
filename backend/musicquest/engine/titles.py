"""
Human-readable quest titles, one arm per template type.
"""
from typing import Protocol

from ..models import Album, Artist, Genre, Quest, QuestParams, QuestTemplate, QuestType

# params each template type reads when rendering its title
TEMPLATE_PARAM_FIELDS: dict[QuestType, tuple[str, ...]] = {
    QuestType.LISTEN_COUNT:        ("requiredCount", "artistId"),
    QuestType.LISTEN_BY_YEAR:      ("requiredCount", "artistId", "startYear", "endYear"),
    QuestType.LISTEN_BY_GENRE:     ("requiredCount", "genreId", "artistId"),
    QuestType.LISTEN_BETWEEN_TIME: ("requiredCount", "artistId", "startTime", "endTime"),
    QuestType.LISTEN_TO_ALBUM:     ("songs", "albumId", "artistId"),
    QuestType.TRAVEL_AMOUNT:       ("number",),
    QuestType.UNKNOWN:             ("requiredCount", "artistId"),
}


class NameLookup(Protocol):
    def get_artist(self, artist_id: str) -> Artist | None: ...
    def get_genre(self, genre_id: str) -> Genre | None: ...
    def get_album(self, album_id: str) -> Album | None: ...


def _plural(count: int, noun: str) -> str:
    return f"{count} {noun}{'s' if count > 1 else ''}"


def _by_artist(p: QuestParams, names: NameLookup) -> str:
    if not p.artist_id:
        return ""
    artist = names.get_artist(p.artist_id)
    return f" by {artist.name if artist else p.artist_id}"


def render_quest_title(quest: Quest, template: QuestTemplate | None, names: NameLookup) -> str:
    p = quest.params or QuestParams()
    count = p.effective_required_count

    if template is None:
        return f"Listen to {_plural(count, 'song')}" + _by_artist(p, names)

    kind = template.type
    if kind == QuestType.LISTEN_COUNT:
        return f"Listen to {_plural(count, 'song')}" + _by_artist(p, names)

    if kind == QuestType.LISTEN_BY_YEAR:
        title = f"Listen to {_plural(count, 'song')}" + _by_artist(p, names)
        if p.start_year is not None and p.end_year is not None:
            title += f" ({p.start_year}–{p.end_year})"
        return title

    if kind == QuestType.LISTEN_BY_GENRE:
        title = f"Listen to {_plural(count, 'song')}"
        genre = names.get_genre(p.genre_id) if p.genre_id else None
        if genre:
            title += f" in {genre.name}"
        return title + _by_artist(p, names)

    if kind == QuestType.LISTEN_BETWEEN_TIME:
        title = f"Listen to {_plural(count, 'song')}" + _by_artist(p, names)
        if p.start_time and p.end_time:
            title += f" ({p.start_time}–{p.end_time})"
        return title

    if kind == QuestType.LISTEN_TO_ALBUM:
        title = f"Listen to {_plural(p.songs or 1, 'song')}"
        album = names.get_album(p.album_id) if p.album_id else None
        if album:
            title += f" from {album.title}"
        return title + _by_artist(p, names)

    if kind == QuestType.TRAVEL_AMOUNT:
        return f"Travel to {_plural(p.number or 1, 'place')}"

    # unknown template type
    if p.required_count:
        title = f"Listen to {_plural(p.required_count, 'song')}"
    else:
        title = "Complete quest"
    return title + _by_artist(p, names)
