"""
Quest matching predicate: pure function, no store access.
"""
from ..models import QuestParams, Recording

# The only params the predicate reads. genreId, albumId and startTime/endTime
# are declared by some templates but do not constrain matching.
MATCHED_PARAM_FIELDS: tuple[str, ...] = ("artistId", "startYear", "endYear")


def matches(recording: Recording, params: QuestParams | None) -> bool:
    """
    True when the recording satisfies every constraint present in params.

    Absent params match everything. A recording without a year never
    satisfies a start or end year bound.
    """
    if params is None:
        return True

    if params.artist_id and params.artist_id not in recording.artist_ids:
        return False

    year = recording.year
    if params.start_year is not None and (year is None or year < params.start_year):
        return False
    if params.end_year is not None and (year is None or year > params.end_year):
        return False

    return True
