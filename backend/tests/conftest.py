import json

import pytest

ARTISTS = [
    {"id": "art_1", "name": "The Night Owls"},
    {"id": "art_2", "name": "Marta Velez"},
]

GENRES = [{"id": "gen_jazz", "name": "Jazz"}]

ALBUMS = [
    {"id": "alb_1", "title": "Midnight Roads", "recordingIds": ["rec_1", "rec_2", "rec_missing"]},
]

SONGS = [
    {"song_id": "rec_1", "title": "Headlights", "year": 2000, "artist_ids": ["art_1"], "album_ids": ["alb_1"]},
    {"song_id": "rec_2", "title": "Overpass", "year": 2001, "artistIds": ["art_1"], "albumIds": ["alb_1"]},
    {"song_id": "rec_3", "title": "Slow Smoke", "year": 1995, "artist_ids": ["art_2"]},
    {"song_id": "rec_9", "title": "Hidden Track", "year": 2010, "artist_ids": ["art_2"]},
]

PLATFORMS = [
    {"entityType": "recording", "entityId": "rec_1", "platform": "spotify", "url": "https://example.test/rec_1"},
    {"entityType": "artist", "entityId": "art_1", "platform": "spotify", "url": "https://example.test/art_1"},
]

TEMPLATES = [
    {"id": "tpl_count", "type": "listen_count"},
    {"id": "tpl_year", "type": "listen_by_year"},
]

QUESTS = [
    {
        "id": "q_art1",
        "templateId": "tpl_count",
        "params": {"requiredCount": 2, "artistId": "art_1"},
        "state": {"status": "active", "matchedRecordingIds": []},
        "reward": {"type": "song", "entityId": "rec_9"},
    },
    {
        "id": "q_nineties",
        "templateId": "tpl_year",
        "params": {"startYear": 1990, "endYear": 1999},
        "state": {"status": "active", "matchedRecordingIds": []},
    },
]


def write_data_dir(path, quests=None, **overrides):
    files = {
        "artists.json": ARTISTS,
        "genres.json": GENRES,
        "albums.json": ALBUMS,
        "songs.json": SONGS,
        "platforms.json": PLATFORMS,
        "questTemplates.json": TEMPLATES,
        "quests.json": QUESTS if quests is None else quests,
    }
    files.update(overrides)
    for name, data in files.items():
        (path / name).write_text(json.dumps(data), encoding="utf-8")
    return path


@pytest.fixture
def data_dir(tmp_path):
    return write_data_dir(tmp_path)


@pytest.fixture
def make_data_dir(tmp_path):
    def _make(quests=None, **overrides):
        return write_data_dir(tmp_path, quests, **overrides)
    return _make
