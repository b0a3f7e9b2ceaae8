"""
Music Quest: FastAPI backend
"""
import logging
import time
from functools import lru_cache

from fastapi import BackgroundTasks, Depends, FastAPI, Request, Response
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from slowapi import Limiter, _rate_limit_exceeded_handler
from slowapi.errors import RateLimitExceeded
from slowapi.util import get_remote_address
from starlette.exceptions import HTTPException as StarletteHTTPException

from .auth import get_user_id
from .catalog import Catalog
from .config import get_settings
from .db import make_quest_backend
from .engine.progress import quest_progress, render_quest_progress
from .engine.rewards import (
    quest_impact_for_recording, quests_that_grant_recording, recordings_without_quests,
)
from .engine.titles import render_quest_title
from .errors import BadRequestError, MusicQuestError, NotFoundError
from .listen import ListenRateLimiter, ListenService
from .models import has_prefix
from .store import QuestStore

logging.basicConfig(level=logging.INFO, format="%(levelname)s %(name)s: %(message)s")
logger = logging.getLogger(__name__)

settings = get_settings()

limiter = Limiter(key_func=get_remote_address)
app = FastAPI(title="Music Quest API")
app.state.limiter = limiter
app.add_exception_handler(RateLimitExceeded, _rate_limit_exceeded_handler)

app.add_middleware(
    CORSMiddleware,
    allow_origins=list(settings.allowed_origins),
    allow_methods=["GET", "POST"],
    allow_headers=["Authorization", "Content-Type"],
)

MAX_QUERY_LENGTH = 100


@app.exception_handler(MusicQuestError)
async def musicquest_error_handler(request: Request, exc: MusicQuestError):
    return JSONResponse(status_code=exc.status_code, content={"error": exc.message})


@app.exception_handler(StarletteHTTPException)
async def http_error_handler(request: Request, exc: StarletteHTTPException):
    return JSONResponse(status_code=exc.status_code, content={"error": exc.detail},
                        headers=getattr(exc, "headers", None))


@app.middleware("http")
async def log_requests(request: Request, call_next):
    if not settings.log_requests:
        return await call_next(request)
    started = time.perf_counter()
    response = await call_next(request)
    logger.info("%s %s from %s -> %d (%.1f ms)", request.method, request.url.path,
                get_remote_address(request), response.status_code,
                (time.perf_counter() - started) * 1000)
    return response


# ── Dependencies ──────────────────────────────────────────────────────────────

@lru_cache(maxsize=1)
def get_catalog() -> Catalog:
    return Catalog(get_settings().data_dir)


@lru_cache(maxsize=1)
def get_quest_store() -> QuestStore:
    return QuestStore(make_quest_backend(get_settings()))


@lru_cache(maxsize=1)
def get_listen_limiter() -> ListenRateLimiter:
    return ListenRateLimiter(get_settings().listen_rate_limit)


def get_listen_service(
    catalog: Catalog = Depends(get_catalog),
    store: QuestStore = Depends(get_quest_store),
    listen_limiter: ListenRateLimiter = Depends(get_listen_limiter),
) -> ListenService:
    return ListenService(catalog, store, listen_limiter)


def _dump(model) -> dict:
    return model.model_dump(mode="json", by_alias=True, exclude_none=True)


def _dump_all(models) -> list[dict]:
    return [_dump(m) for m in models]


def _quest_summary(quest) -> dict:
    return {
        "id": quest.id,
        "status": quest.state.status.value if quest.state else None,
        "templateId": quest.template_id,
    }


@app.get("/health")
def health(catalog: Catalog = Depends(get_catalog), store: QuestStore = Depends(get_quest_store)):
    return {"status": "ok", "songs": len(catalog.songs), "quests": len(store), "scope": store.scope}


@app.get("/api/firebase-config")
def firebase_config(response: Response):
    web_config = settings.firebase_web_config
    if not web_config.get("apiKey"):
        return JSONResponse(
            status_code=500,
            content={"error": "Firebase configuration not set. Please configure environment variables."},
        )
    response.headers["Cache-Control"] = "public, max-age=3600"
    return web_config


# ── Listen ────────────────────────────────────────────────────────────────────

@app.post("/listen/{recording_id}")
def listen(
    recording_id: str,
    request: Request,
    background_tasks: BackgroundTasks,
    user_id: str = Depends(get_user_id),
    service: ListenService = Depends(get_listen_service),
):
    identity = user_id or get_remote_address(request)
    outcome = service.handle_listen(identity, recording_id)

    if outcome.changed and service.store.request_flush():
        background_tasks.add_task(service.store.flush)

    return {
        "success": True,
        "recordingId": outcome.recording_id,
        "advanced": outcome.advanced,
        "completed": outcome.completed,
        "failed": outcome.failed,
        "unlocked": _dump_all(outcome.unlocked),
        "quests": [q.to_doc() for q in outcome.quests],
    }


# ── Catalog ───────────────────────────────────────────────────────────────────

@app.get("/songs")
def list_songs(catalog: Catalog = Depends(get_catalog)):
    return _dump_all(catalog.songs)


@app.get("/songs/search")
@limiter.limit("120/minute")
def search_songs(request: Request, q: str = "", catalog: Catalog = Depends(get_catalog)):
    return _dump_all(catalog.search_songs(q))


@app.get("/songs/{song_id}")
def get_song(
    song_id: str,
    response: Response,
    catalog: Catalog = Depends(get_catalog),
    store: QuestStore = Depends(get_quest_store),
):
    if not has_prefix(song_id, "recording"):
        raise BadRequestError("Invalid recording ID format")
    song = catalog.get_recording(song_id)
    if song is None:
        raise NotFoundError("Recording not found")

    quests = store.snapshot()
    impact = quest_impact_for_recording(quests, song)

    response.headers["Cache-Control"] = "public, max-age=60"
    return {
        **_dump(song),
        "artists": _dump_all(catalog.artists_for(song)),
        "albums": _dump_all(catalog.albums_for(song)),
        "links": _dump_all(catalog.platform_links_for("recording", song.song_id)),
        "grantedByQuests": [_quest_summary(q) for q in quests_that_grant_recording(quests, song_id)],
        "questImpact": {"completes": impact.completes, "advances": impact.advances},
    }


@app.get("/artists")
def list_artists(response: Response, catalog: Catalog = Depends(get_catalog)):
    response.headers["Cache-Control"] = "public, max-age=60"
    return _dump_all(catalog.artists)


@app.get("/artists/search")
@limiter.limit("120/minute")
def search_artists(request: Request, q: str = "", catalog: Catalog = Depends(get_catalog)):
    return _dump_all(catalog.search_artists(q))


@app.get("/artists/{artist_id}")
def get_artist(artist_id: str, catalog: Catalog = Depends(get_catalog)):
    if not has_prefix(artist_id, "artist"):
        raise BadRequestError("Invalid artist ID format")
    artist = catalog.get_artist(artist_id)
    if artist is None:
        raise NotFoundError("Artist not found")
    return {**_dump(artist), "links": _dump_all(catalog.platform_links_for("artist", artist.id))}


@app.get("/albums")
def list_albums(response: Response, catalog: Catalog = Depends(get_catalog)):
    response.headers["Cache-Control"] = "public, max-age=60"
    return _dump_all(catalog.albums)


@app.get("/albums/{album_id}")
def get_album(album_id: str, catalog: Catalog = Depends(get_catalog)):
    if not has_prefix(album_id, "album"):
        raise BadRequestError("Invalid album ID format")
    album = catalog.get_album(album_id)
    if album is None:
        raise NotFoundError("Album not found")
    return {**_dump(album), "recordings": _dump_all(catalog.album_recordings(album))}


@app.get("/genres")
def list_genres(response: Response, catalog: Catalog = Depends(get_catalog)):
    response.headers["Cache-Control"] = "public, max-age=300"
    return _dump_all(catalog.genres)


@app.get("/platforms")
def list_platforms(response: Response, catalog: Catalog = Depends(get_catalog)):
    response.headers["Cache-Control"] = "public, max-age=60"
    return _dump_all(catalog.platforms)


@app.get("/search")
@limiter.limit("120/minute")
def search(request: Request, q: str = "", catalog: Catalog = Depends(get_catalog)):
    if len(q) > MAX_QUERY_LENGTH:
        raise BadRequestError("Query too long")
    return {kind: _dump_all(items) for kind, items in catalog.search(q).items()}


# ── Quests ────────────────────────────────────────────────────────────────────

@app.get("/quests")
def list_quests(response: Response, store: QuestStore = Depends(get_quest_store)):
    response.headers["Cache-Control"] = "no-store"
    return [q.to_doc() for q in store.snapshot()]


@app.get("/quest-templates")
def list_quest_templates(catalog: Catalog = Depends(get_catalog)):
    return _dump_all(catalog.quest_templates)


@app.get("/quests/{quest_id}")
def get_quest(
    quest_id: str,
    catalog: Catalog = Depends(get_catalog),
    store: QuestStore = Depends(get_quest_store),
):
    quest = store.get(quest_id)
    if quest is None:
        raise NotFoundError("Quest not found")

    template = catalog.get_template(quest.template_id)
    progress = quest_progress(quest)
    return {
        **quest.to_doc(),
        "template": _dump(template) if template else None,
        "title": render_quest_title(quest, template, catalog),
        "progress": {
            "done": progress.done,
            "total": progress.total,
            "status": progress.status.value,
            "label": render_quest_progress(quest),
        },
    }


# ── Developer ─────────────────────────────────────────────────────────────────

@app.post("/developer/cache/clear")
@limiter.limit("10/minute")
def clear_cache(
    request: Request,
    catalog: Catalog = Depends(get_catalog),
    store: QuestStore = Depends(get_quest_store),
):
    try:
        catalog.reload()
        quest_count = store.reload()
    except (OSError, ValueError) as e:
        logger.error("Cache clear failed: %s", e)
        raise MusicQuestError(str(e)) from e
    return {"success": True, "counts": {**catalog.counts(), "quests": quest_count}}


@app.post("/developer/quests/reset")
@limiter.limit("10/minute")
def reset_quests(request: Request, store: QuestStore = Depends(get_quest_store)):
    try:
        count = store.reset()
    except OSError as e:
        logger.error("Quest reset failed: %s", e)
        raise MusicQuestError(str(e)) from e
    return {"success": True, "message": "Quest progress reset", "questCount": count}


@app.get("/developer/songs-without-quests")
def songs_without_quests(
    catalog: Catalog = Depends(get_catalog),
    store: QuestStore = Depends(get_quest_store),
):
    missing = recordings_without_quests(catalog.songs, store.snapshot())
    return {"count": len(missing), "songs": _dump_all(missing)}
