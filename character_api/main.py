"""FastAPI app, lifespan bootstrap, and HTTP routes.

Defines the application instance, startup sequence (optional DB wait + schema
init), and the public REST endpoints:

- GET    /                  -> redirect to Swagger UI (/docs)
- GET    /healthz           -> liveness (no I/O)
- GET    /healthcheck       -> database reachability + row count
- GET    /characters        -> every stored character
- GET    /characters/{id}   -> one character, 404 if absent
- POST   /characters        -> create, 201 with the assigned id
- PUT    /characters/{id}   -> overwrite, 200 (no existence check)
- DELETE /characters/{id}   -> delete, 204 (no existence check)

OPTIONS on any path is answered by the CORS middleware.
"""

import json
import logging
import re
from contextlib import asynccontextmanager
from typing import Any, Dict

from fastapi import FastAPI, Depends, Request
from fastapi.responses import RedirectResponse, JSONResponse, Response
from starlette.exceptions import HTTPException as StarletteHTTPException
from pydantic import ValidationError
from sqlalchemy.ext.asyncio import AsyncSession

from . import cors, crud, metrics
from .db import get_session, init_db, wait_enabled, wait_for_db
from .schemas import Character, CharacterIn, HealthcheckOut, ProblemDetail
from .settings import settings
from .logging_config import configure_logging

configure_logging()
log = logging.getLogger(__name__)

# ---------------------------------------------------------------------
# App
# ---------------------------------------------------------------------

app = FastAPI(title=settings.APP_TITLE, version=settings.APP_VERSION)
metrics.install(app)
cors.install(app)


_STATUS_TITLES = {
    400: "Bad Request",
    404: "Not Found",
    405: "Method Not Allowed",
    500: "Internal Server Error",
}


def _problem(
    status: int,
    title: str | None = None,
    detail: str | None = None,
    instance: str | None = None,
) -> JSONResponse:
    """Return a problem-shaped JSON error body (served as application/json)."""
    body = {
        "type": "about:blank",
        "title": title or _STATUS_TITLES.get(status, "Error"),
        "status": status,
        "detail": detail,
        "instance": instance,
    }
    return JSONResponse(status_code=status, content=body)


@app.exception_handler(StarletteHTTPException)
async def http_exception_handler(req: Request, exc: StarletteHTTPException):
    detail = exc.detail if isinstance(exc.detail, str) else None
    return _problem(
        status=exc.status_code,
        title=_STATUS_TITLES.get(exc.status_code),
        detail=detail,
        instance=req.url.path,
    )


# ---------------------------------------------------------------------
# Lifespan
# ---------------------------------------------------------------------


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application lifespan: optionally wait for the DB, then create the schema."""
    if wait_enabled():
        try:
            await wait_for_db()
        except Exception as e:
            log.error("startup.db_wait_failed error=%r", e)
            raise

    await init_db()
    log.info("startup.db_init complete")
    yield


app.router.lifespan_context = lifespan

_error_resp = {"model": ProblemDetail}

# ---------------------------------------------------------------------
# Request helpers
# ---------------------------------------------------------------------

_ID_RE = re.compile(r"[+-]?[0-9]+")
_MAX_ID = 2**63 - 1


def parse_id(raw: str) -> int:
    """Parse a path id; anything that is not a plain integer becomes 0.

    Id 0 is never assigned, so a malformed id simply matches no row.
    """
    if not _ID_RE.fullmatch(raw):
        return 0
    value = int(raw)
    return value if -_MAX_ID <= value <= _MAX_ID else 0


class MalformedBody(ValueError):
    """Request body is not a JSON Character document."""


async def _read_document(request: Request) -> Dict[str, Any]:
    """Decode the request body into a Character document (without id).

    Raises:
        MalformedBody: body is not JSON, or cannot be coerced into the shape.
    """
    raw = await request.body()
    try:
        payload = json.loads(raw)
    except ValueError as exc:
        raise MalformedBody(str(exc)) from exc
    try:
        return CharacterIn.model_validate(payload).model_dump()
    except ValidationError as exc:
        err = exc.errors()[0]
        loc = ".".join(str(p) for p in err["loc"])
        raise MalformedBody(f"{loc}: {err['msg']}" if loc else err["msg"]) from exc


def _storage_error(op: str, exc: Exception) -> JSONResponse:
    log.error("route.characters.%s storage_error error=%r", op, exc)
    return _problem(status=500, detail=str(exc))


def _bad_request(op: str, exc: MalformedBody) -> JSONResponse:
    log.info("route.characters.%s bad_request error=%s", op, exc)
    return _problem(status=400, detail=str(exc))


# ---------------------------------------------------------------------
# Routes
# ---------------------------------------------------------------------


@app.get("/", include_in_schema=False)
async def root(_request: Request):
    """Redirect the root path to the interactive API docs (/docs)."""
    return RedirectResponse(url=app.docs_url or "/docs", status_code=307)


@app.get("/healthz", include_in_schema=False)
async def healthz():
    """Lightweight, in-process health endpoint.

    Always returns 200 if the app can serve requests.
    """
    return {"status": "ok"}


@app.get("/healthcheck", response_model=HealthcheckOut)
async def healthcheck(session: AsyncSession = Depends(get_session)):
    """Database health check: reachability and stored character count."""
    db_ok = True
    total = 0
    try:
        total = await crud.count_characters(session)
    except Exception as exc:
        db_ok = False
        log.warning("route.healthcheck.db_error error=%r", exc)
    metrics.observe_health(db_ok)
    status = "ok" if db_ok else "degraded"
    log.info(
        "route.healthcheck status=%s db_ok=%s character_count=%d",
        status,
        db_ok,
        total,
    )
    return {
        "status": status,
        "db_ok": db_ok,
        "character_count": total,
        "version": settings.APP_VERSION,
    }


@app.get(
    "/characters",
    response_model=list[Character],
    responses={500: _error_resp},
)
async def list_characters(session: AsyncSession = Depends(get_session)):
    """Return every stored character (an empty array when there are none)."""
    try:
        docs = await crud.list_characters(session)
    except Exception as exc:
        return _storage_error("list", exc)
    log.info("route.characters.list returned=%d", len(docs))
    return JSONResponse(content=docs)


@app.get(
    "/characters/{character_id}",
    response_model=Character,
    responses={404: {"description": "No character with this id"}, 500: _error_resp},
)
async def get_character(character_id: str, session: AsyncSession = Depends(get_session)):
    """Return one character by id; 404 with an empty body if it does not exist."""
    cid = parse_id(character_id)
    try:
        doc = await crud.get_character(session, cid)
    except Exception as exc:
        return _storage_error("get", exc)
    if doc is None:
        log.info("route.characters.get not_found id=%d", cid)
        return Response(status_code=404, media_type="application/json")
    return JSONResponse(content=doc)


@app.post(
    "/characters",
    status_code=201,
    response_model=Character,
    responses={400: _error_resp, 500: _error_resp},
)
async def create_character(request: Request, session: AsyncSession = Depends(get_session)):
    """Create a character from the JSON body and return it with its new id."""
    try:
        doc = await _read_document(request)
    except MalformedBody as exc:
        return _bad_request("create", exc)
    try:
        new_id = await crud.create_character(session, doc)
    except Exception as exc:
        return _storage_error("create", exc)
    log.info("route.characters.create id=%d", new_id)
    return JSONResponse(status_code=201, content={"id": new_id, **doc})


@app.put(
    "/characters/{character_id}",
    response_model=Character,
    responses={400: _error_resp, 500: _error_resp},
)
async def update_character(
    character_id: str, request: Request, session: AsyncSession = Depends(get_session)
):
    """Overwrite a character with the JSON body.

    The id always comes from the path. There is no existence check: a missing
    id still answers 200 with the supplied document.
    """
    cid = parse_id(character_id)
    try:
        doc = await _read_document(request)
    except MalformedBody as exc:
        return _bad_request("update", exc)
    try:
        affected = await crud.update_character(session, cid, doc)
    except Exception as exc:
        return _storage_error("update", exc)
    log.info("route.characters.update id=%d affected=%d", cid, affected)
    return JSONResponse(content={"id": cid, **doc})


@app.delete(
    "/characters/{character_id}",
    status_code=204,
    responses={500: _error_resp},
)
async def delete_character(character_id: str, session: AsyncSession = Depends(get_session)):
    """Delete a character; answers 204 whether or not the id existed."""
    cid = parse_id(character_id)
    try:
        affected = await crud.delete_character(session, cid)
    except Exception as exc:
        return _storage_error("delete", exc)
    log.info("route.characters.delete id=%d affected=%d", cid, affected)
    return Response(status_code=204, media_type="application/json")
