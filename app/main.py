"""Entry point for the FastAPI-powered movie-data proxy."""

from __future__ import annotations

import logging
from contextlib import AsyncExitStack, asynccontextmanager
from typing import Any, Awaitable, TypeVar

import httpx
from fastapi import FastAPI, HTTPException, Query, Request, Response
from fastapi.middleware.cors import CORSMiddleware

from .config import settings
from .database import Database
from .errors import AuthenticationError, NetworkError, NotFoundError, ValidationError
from .models import Credentials, Registration, TimeWindow
from .services.auth import AuthService, Session
from .services.tmdb import TMDBClient

logging.basicConfig(level=logging.INFO)
logger = logging.getLogger(__name__)

T = TypeVar("T")

app: FastAPI


@asynccontextmanager
async def lifespan(fastapi_app: FastAPI):
    exit_stack = AsyncExitStack()
    tmdb_http_client = await exit_stack.enter_async_context(
        httpx.AsyncClient(
            base_url=str(settings.tmdb_api_url),
            timeout=httpx.Timeout(15.0, connect=5.0),
        )
    )
    database = Database(settings.database_url)
    await database.create_all()

    fastapi_app.state.tmdb_client = TMDBClient(settings, tmdb_http_client)
    fastapi_app.state.auth_service = AuthService(settings, database.session_factory)
    fastapi_app.state.database = database

    try:
        yield
    finally:  # pragma: no cover - teardown path exercised at runtime
        await database.dispose()
        await exit_stack.aclose()


def create_app() -> FastAPI:
    fastapi_app = FastAPI(
        title=settings.app_name,
        description="Movie discovery proxy for The Movie Database",
        version="1.0.0",
        lifespan=lifespan,
    )

    fastapi_app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_methods=["GET", "POST"],
        allow_headers=["*"],
    )

    register_routes(fastapi_app)
    return fastapi_app


def get_tmdb_client(app: FastAPI) -> TMDBClient:
    client = getattr(app.state, "tmdb_client", None)
    if not isinstance(client, TMDBClient):
        raise RuntimeError("TMDB client not initialised")
    return client


def get_auth_service(app: FastAPI) -> AuthService:
    service = getattr(app.state, "auth_service", None)
    if not isinstance(service, AuthService):
        raise RuntimeError("Auth service not initialised")
    return service


async def _proxy(call: Awaitable[T], failure: str) -> T:
    """Await an upstream call and translate its failures into HTTP errors."""

    try:
        return await call
    except NotFoundError as exc:
        raise HTTPException(status_code=404, detail=exc.message) from exc
    except NetworkError as exc:
        logger.error("%s: %s", failure, exc)
        raise HTTPException(status_code=502, detail=failure) from exc


def register_routes(fastapi_app: FastAPI) -> None:
    def _set_session_cookie(response: Response, session: Session) -> None:
        response.set_cookie(
            settings.session_cookie_name,
            session.token,
            max_age=settings.session_ttl_seconds,
            httponly=True,
            samesite="lax",
            secure=settings.secure_cookies,
        )

    @fastapi_app.get("/healthz")
    async def healthcheck() -> dict[str, str]:
        return {"status": "ok"}

    @fastapi_app.post("/api/register", status_code=201)
    async def register(registration: Registration, response: Response) -> dict[str, Any]:
        service = get_auth_service(fastapi_app)
        try:
            session = await service.register(registration)
        except ValidationError as exc:
            raise HTTPException(status_code=400, detail=exc.message) from exc
        _set_session_cookie(response, session)
        return session.user.model_dump()

    @fastapi_app.post("/api/login")
    async def login(credentials: Credentials, response: Response) -> dict[str, Any]:
        service = get_auth_service(fastapi_app)
        try:
            session = await service.login(credentials)
        except AuthenticationError as exc:
            raise HTTPException(status_code=401, detail=str(exc)) from exc
        _set_session_cookie(response, session)
        return session.user.model_dump()

    @fastapi_app.post("/api/logout")
    async def logout(request: Request, response: Response) -> dict[str, bool]:
        service = get_auth_service(fastapi_app)
        await service.logout(request.cookies.get(settings.session_cookie_name))
        response.delete_cookie(settings.session_cookie_name)
        return {"ok": True}

    @fastapi_app.get("/api/user")
    async def current_user(request: Request) -> dict[str, Any]:
        service = get_auth_service(fastapi_app)
        user = await service.current_user(request.cookies.get(settings.session_cookie_name))
        if user is None:
            raise HTTPException(status_code=401, detail="Not authenticated")
        return user.model_dump()

    @fastapi_app.get("/api/movies/trending/{time_window}")
    async def trending(time_window: str, page: int = Query(1, ge=1)) -> dict[str, Any]:
        if time_window not in ("day", "week"):
            raise HTTPException(status_code=400, detail="time_window must be 'day' or 'week'")
        window: TimeWindow = "day" if time_window == "day" else "week"
        client = get_tmdb_client(fastapi_app)
        payload = await _proxy(
            client.trending(window, page), "Failed to fetch trending movies"
        )
        return payload.model_dump(mode="json")

    @fastapi_app.get("/api/movies/search")
    async def search(
        query: str | None = Query(None), page: int = Query(1, ge=1)
    ) -> dict[str, Any]:
        if not query or not query.strip():
            raise HTTPException(status_code=400, detail="Query parameter is required")
        client = get_tmdb_client(fastapi_app)
        payload = await _proxy(client.search(query, page), "Failed to search movies")
        return payload.model_dump(mode="json")

    @fastapi_app.get("/api/movies/discover")
    async def discover(
        genre: int | None = Query(None),
        year: int | None = Query(None),
        sort_by: str | None = Query(None),
        page: int = Query(1, ge=1),
    ) -> dict[str, Any]:
        client = get_tmdb_client(fastapi_app)
        payload = await _proxy(
            client.discover(genre=genre, year=year, sort_by=sort_by, page=page),
            "Failed to discover movies",
        )
        return payload.model_dump(mode="json")

    @fastapi_app.get("/api/genres")
    async def genres() -> dict[str, Any]:
        client = get_tmdb_client(fastapi_app)
        payload = await _proxy(client.genres(), "Failed to fetch genres")
        return payload.model_dump(mode="json")

    @fastapi_app.get("/api/movies/{movie_id}")
    async def movie_detail(movie_id: int) -> dict[str, Any]:
        client = get_tmdb_client(fastapi_app)
        payload = await _proxy(
            client.movie_detail(movie_id), "Failed to fetch movie details"
        )
        return payload.model_dump(mode="json")

    @fastapi_app.get("/api/movies/{movie_id}/credits")
    async def movie_credits(movie_id: int) -> dict[str, Any]:
        client = get_tmdb_client(fastapi_app)
        payload = await _proxy(client.credits(movie_id), "Failed to fetch movie credits")
        return payload.model_dump(mode="json")

    @fastapi_app.get("/api/movies/{movie_id}/videos")
    async def movie_videos(movie_id: int) -> dict[str, Any]:
        client = get_tmdb_client(fastapi_app)
        payload = await _proxy(client.videos(movie_id), "Failed to fetch movie videos")
        return payload.model_dump(mode="json")

    @fastapi_app.get("/api/movies/{movie_id}/similar")
    async def similar_movies(movie_id: int, page: int = Query(1, ge=1)) -> dict[str, Any]:
        client = get_tmdb_client(fastapi_app)
        payload = await _proxy(
            client.similar(movie_id, page), "Failed to fetch similar movies"
        )
        return payload.model_dump(mode="json")


app = create_app()


if __name__ == "__main__":  # pragma: no cover - manual execution
    import uvicorn

    uvicorn.run(
        "app.main:app",
        host=settings.server_host,
        port=settings.server_port,
        reload=settings.environment == "development",
    )
