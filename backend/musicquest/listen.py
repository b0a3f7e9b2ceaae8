"""
Listen event entry point: rate limit, recording lookup, quest update.
"""
import logging

from limits import parse
from limits.storage import MemoryStorage
from limits.strategies import MovingWindowRateLimiter

from .catalog import Catalog
from .errors import NotFoundError, RateLimitedError
from .store import ListenOutcome, QuestStore

logger = logging.getLogger(__name__)


class ListenRateLimiter:
    """Fixed quota per identity over a moving window, e.g. '60/minute'."""

    def __init__(self, rate: str = "60/minute"):
        self.rate = rate
        self._item = parse(rate)
        self._limiter = MovingWindowRateLimiter(MemoryStorage())

    def check(self, identity: str) -> None:
        if not self._limiter.hit(self._item, "listen", identity):
            raise RateLimitedError("Rate limit exceeded")


class ListenService:
    def __init__(self, catalog: Catalog, store: QuestStore, limiter: ListenRateLimiter):
        self.catalog = catalog
        self.store = store
        self.limiter = limiter

    def handle_listen(self, identity: str, recording_id: str) -> ListenOutcome:
        """
        Apply one listen event to the whole quest board.

        Raises RateLimitedError before any lookup and NotFoundError when the
        recording is unknown; neither touches quest state. Persisting the
        result is left to the caller (see QuestStore.request_flush).
        """
        self.limiter.check(identity)

        recording = self.catalog.get_recording(recording_id)
        if recording is None:
            raise NotFoundError("Recording not found")

        outcome = self.store.apply_listen_event(recording)
        if outcome.changed or outcome.failed:
            logger.info("Listen %s by %s...: %d advanced, %d completed, %d failed",
                        recording_id, identity[:8], len(outcome.advanced),
                        len(outcome.completed), len(outcome.failed))
        return outcome
