from musicquest.engine.matching import MATCHED_PARAM_FIELDS, matches
from musicquest.models import QuestParams, Recording


def make_recording(song_id="rec_1", artist_ids=("art_1",), year=2000) -> Recording:
    return Recording(song_id=song_id, artist_ids=list(artist_ids), year=year)


class TestMatches:
    def test_absent_params_match_everything(self):
        assert matches(make_recording(), None)

    def test_empty_params_match_everything(self):
        assert matches(make_recording(year=None, artist_ids=()), QuestParams())

    def test_artist_constraint(self):
        params = QuestParams(artistId="art_1")
        assert matches(make_recording(artist_ids=("art_2", "art_1")), params)
        assert not matches(make_recording(artist_ids=("art_2",)), params)

    def test_empty_artist_id_is_no_constraint(self):
        assert matches(make_recording(artist_ids=()), QuestParams(artistId=""))

    def test_year_window_inclusive(self):
        params = QuestParams(startYear=1990, endYear=1999)
        assert matches(make_recording(year=1990), params)
        assert matches(make_recording(year=1999), params)
        assert not matches(make_recording(year=1989), params)

    def test_year_outside_window_fails(self):
        params = QuestParams(startYear=1990, endYear=1999)
        assert not matches(make_recording(year=2005), params)

    def test_open_ended_bounds(self):
        assert matches(make_recording(year=2020), QuestParams(startYear=2000))
        assert not matches(make_recording(year=2020), QuestParams(endYear=2000))

    def test_missing_year_never_satisfies_a_bound(self):
        rec = make_recording(year=None)
        assert not matches(rec, QuestParams(startYear=1990))
        assert not matches(rec, QuestParams(endYear=1999))

    def test_all_constraints_must_hold(self):
        params = QuestParams(artistId="art_1", startYear=1990, endYear=1999)
        assert matches(make_recording(year=1995), params)
        assert not matches(make_recording(year=1995, artist_ids=("art_2",)), params)
        assert not matches(make_recording(year=2001), params)

    def test_genre_album_and_time_do_not_constrain(self):
        params = QuestParams(genreId="gen_x", albumId="alb_x", startTime="22:00", endTime="23:00")
        assert matches(make_recording(), params)
        assert "genreId" not in MATCHED_PARAM_FIELDS

    def test_camel_case_recording_fields_accepted(self):
        rec = Recording.model_validate({"song_id": "rec_1", "artistIds": ["art_1"], "year": 2000})
        assert matches(rec, QuestParams(artistId="art_1"))
