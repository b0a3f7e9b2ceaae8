"""
Typed rejections raised by the quest engine and the listen entry point.

Each error carries the HTTP status the API maps it to, so callers outside
HTTP can still tell the conditions apart by type.
"""


class MusicQuestError(Exception):
    """Base class for every expected rejection."""

    status_code = 500

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class BadRequestError(MusicQuestError):
    """Malformed input: wrong id prefix, oversized query."""

    status_code = 400


class NotFoundError(MusicQuestError):
    """A referenced catalog entity does not exist."""

    status_code = 404


class RateLimitedError(MusicQuestError):
    """The identity has used up its listen-event quota for the window."""

    status_code = 429


class AuthenticationError(MusicQuestError):
    """Identity verification failed."""

    status_code = 401


class DataIntegrityError(MusicQuestError):
    """A quest entity is missing fields the engine needs (params or state)."""

    status_code = 500

    def __init__(self, quest_id: str | None, missing: str):
        super().__init__(f"Quest {quest_id or '<no id>'} is missing '{missing}'")
        self.quest_id = quest_id
        self.missing = missing
