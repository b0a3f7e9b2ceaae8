import pytest

from musicquest.engine.titles import TEMPLATE_PARAM_FIELDS, render_quest_title
from musicquest.models import Album, Artist, Genre, Quest, QuestTemplate, QuestType


class FakeNames:
    artists = {"art_1": Artist(id="art_1", name="The Night Owls")}
    genres = {"gen_jazz": Genre(id="gen_jazz", name="Jazz")}
    albums = {"alb_1": Album(id="alb_1", title="Midnight Roads")}

    def get_artist(self, artist_id):
        return self.artists.get(artist_id)

    def get_genre(self, genre_id):
        return self.genres.get(genre_id)

    def get_album(self, album_id):
        return self.albums.get(album_id)


def title(template_type, **params):
    quest = Quest.model_validate({"id": "q", "params": params, "state": {}})
    template = QuestTemplate(id="tpl", type=template_type) if template_type else None
    return render_quest_title(quest, template, FakeNames())


class TestRenderQuestTitle:
    def test_listen_count(self):
        assert title("listen_count", requiredCount=3, artistId="art_1") == \
            "Listen to 3 songs by The Night Owls"

    def test_singular(self):
        assert title("listen_count") == "Listen to 1 song"

    def test_unknown_artist_falls_back_to_id(self):
        assert title("listen_count", artistId="art_404") == "Listen to 1 song by art_404"

    def test_listen_by_year(self):
        assert title("listen_by_year", requiredCount=2, startYear=1990, endYear=1999) == \
            "Listen to 2 songs (1990–1999)"

    def test_listen_by_year_needs_both_bounds(self):
        assert title("listen_by_year", startYear=1990) == "Listen to 1 song"

    def test_listen_by_genre(self):
        assert title("listen_by_genre", requiredCount=2, genreId="gen_jazz", artistId="art_1") == \
            "Listen to 2 songs in Jazz by The Night Owls"

    def test_listen_by_genre_unknown_genre_omitted(self):
        assert title("listen_by_genre", genreId="gen_none") == "Listen to 1 song"

    def test_listen_between_time(self):
        assert title("listen_between_time", requiredCount=3, startTime="22:00", endTime="02:00") == \
            "Listen to 3 songs (22:00–02:00)"

    def test_listen_to_album(self):
        assert title("listen_to_album", songs=4, albumId="alb_1", artistId="art_1") == \
            "Listen to 4 songs from Midnight Roads by The Night Owls"

    def test_travel_amount(self):
        assert title("travel_amount", number=3) == "Travel to 3 places"
        assert title("travel_amount") == "Travel to 1 place"

    def test_unknown_type_without_count(self):
        assert title("something_new") == "Complete quest"

    def test_unknown_type_with_count(self):
        assert title("something_new", requiredCount=2, artistId="art_1") == \
            "Listen to 2 songs by The Night Owls"

    def test_missing_template(self):
        assert title(None, artistId="art_1") == "Listen to 1 song by The Night Owls"


class TestTemplateTable:
    def test_unrecognised_type_parses_to_unknown(self):
        assert QuestTemplate(id="t", type="dance_off").type == QuestType.UNKNOWN

    @pytest.mark.parametrize("kind", list(QuestType))
    def test_every_type_documented(self, kind):
        assert kind in TEMPLATE_PARAM_FIELDS
