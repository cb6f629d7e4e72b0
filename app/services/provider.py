"""Movie-data provider interface and the client that talks to the proxy."""

from __future__ import annotations

import logging
from typing import Any, Mapping, Protocol, TypeVar, runtime_checkable

import httpx
from pydantic import BaseModel
from pydantic import ValidationError as PydanticValidationError

from ..errors import AuthenticationError, NetworkError, NotFoundError, ValidationError
from ..models import (
    Credentials,
    Credits,
    GenreList,
    MovieDetail,
    MoviePage,
    Registration,
    TimeWindow,
    User,
    VideoList,
)

logger = logging.getLogger(__name__)

ModelT = TypeVar("ModelT", bound=BaseModel)


@runtime_checkable
class MovieDataProvider(Protocol):
    """Async movie-data operations consumed by the browsing core."""

    async def trending(self, time_window: TimeWindow, page: int = 1) -> MoviePage:
        ...

    async def search(self, query: str, page: int = 1) -> MoviePage:
        ...

    async def discover(
        self,
        *,
        genre: int | None = None,
        year: int | None = None,
        sort_by: str | None = None,
        page: int = 1,
    ) -> MoviePage:
        ...

    async def movie_detail(self, movie_id: int) -> MovieDetail:
        ...

    async def credits(self, movie_id: int) -> Credits:
        ...

    async def videos(self, movie_id: int) -> VideoList:
        ...

    async def similar(self, movie_id: int, page: int = 1) -> MoviePage:
        ...

    async def genres(self) -> GenreList:
        ...


class JSONAPIClient:
    """Shared request/decoding logic for the HTTP-backed providers."""

    _label = "Movie API"

    def __init__(self, http_client: httpx.AsyncClient) -> None:
        self._client = http_client

    def _default_params(self) -> dict[str, Any]:
        return {}

    async def _get(
        self,
        path: str,
        model: type[ModelT],
        *,
        params: Mapping[str, Any] | None = None,
        resource: tuple[str, object] | None = None,
    ) -> ModelT:
        """GET ``path`` and validate the JSON body into ``model``.

        ``resource`` names the entity being fetched so a 404 can be reported
        as :class:`NotFoundError` instead of a generic failure.
        """

        query = {**self._default_params(), **(params or {})}
        try:
            response = await self._client.get(path, params=query)
        except httpx.HTTPError as exc:
            logger.warning("%s request to %s failed: %s", self._label, path, exc)
            raise NetworkError(f"{self._label} request failed: {exc}") from exc

        if response.status_code == 404 and resource is not None:
            raise NotFoundError(*resource)
        if response.status_code >= 400:
            logger.warning(
                "%s request to %s returned %s: %s",
                self._label,
                path,
                response.status_code,
                response.text,
            )
            raise NetworkError(
                f"{self._label} error: {response.status_code}",
                status_code=response.status_code,
            )

        try:
            return model.model_validate(response.json())
        except (ValueError, PydanticValidationError) as exc:
            logger.warning("%s returned an unexpected payload for %s", self._label, path)
            raise NetworkError(f"{self._label} returned an invalid payload") from exc


class ProxyMovieClient(JSONAPIClient):
    """Provider implementation backed by the CineScope proxy routes."""

    _label = "CineScope proxy"

    async def trending(self, time_window: TimeWindow, page: int = 1) -> MoviePage:
        return await self._get(
            f"/api/movies/trending/{time_window}", MoviePage, params={"page": page}
        )

    async def search(self, query: str, page: int = 1) -> MoviePage:
        return await self._get(
            "/api/movies/search", MoviePage, params={"query": query, "page": page}
        )

    async def discover(
        self,
        *,
        genre: int | None = None,
        year: int | None = None,
        sort_by: str | None = None,
        page: int = 1,
    ) -> MoviePage:
        params: dict[str, Any] = {"page": page}
        if sort_by:
            params["sort_by"] = sort_by
        if genre:
            params["genre"] = genre
        if year:
            params["year"] = year
        return await self._get("/api/movies/discover", MoviePage, params=params)

    async def movie_detail(self, movie_id: int) -> MovieDetail:
        return await self._get(
            f"/api/movies/{movie_id}", MovieDetail, resource=("Movie", movie_id)
        )

    async def credits(self, movie_id: int) -> Credits:
        return await self._get(
            f"/api/movies/{movie_id}/credits", Credits, resource=("Movie", movie_id)
        )

    async def videos(self, movie_id: int) -> VideoList:
        return await self._get(
            f"/api/movies/{movie_id}/videos", VideoList, resource=("Movie", movie_id)
        )

    async def similar(self, movie_id: int, page: int = 1) -> MoviePage:
        return await self._get(
            f"/api/movies/{movie_id}/similar",
            MoviePage,
            params={"page": page},
            resource=("Movie", movie_id),
        )

    async def genres(self) -> GenreList:
        return await self._get("/api/genres", GenreList)


class ProxySessionClient:
    """Authentication capability backed by the proxy's session endpoints.

    The session cookie lives in the shared ``httpx.AsyncClient`` cookie jar,
    so the same client instance should be handed to :class:`ProxyMovieClient`.
    """

    def __init__(self, http_client: httpx.AsyncClient) -> None:
        self._client = http_client
        self._user: User | None = None

    @property
    def user(self) -> User | None:
        return self._user

    async def register(self, registration: Registration) -> User:
        if (
            registration.confirm_password is not None
            and registration.password != registration.confirm_password
        ):
            raise ValidationError("Passwords don't match", field="confirmPassword")
        response = await self._post("/api/register", registration.model_dump(by_alias=True))
        self._user = User.model_validate(response.json())
        return self._user

    async def login(self, credentials: Credentials) -> User:
        response = await self._post("/api/login", credentials.model_dump())
        self._user = User.model_validate(response.json())
        return self._user

    async def logout(self) -> None:
        await self._post("/api/logout", None)
        self._user = None

    async def current_user(self) -> User | None:
        try:
            response = await self._client.get("/api/user")
        except httpx.HTTPError as exc:
            raise NetworkError(f"Session lookup failed: {exc}") from exc
        if response.status_code == 401:
            self._user = None
            return None
        if response.status_code >= 400:
            raise NetworkError(
                f"Session lookup failed: {response.status_code}",
                status_code=response.status_code,
            )
        self._user = User.model_validate(response.json())
        return self._user

    async def _post(self, path: str, payload: dict[str, Any] | None) -> httpx.Response:
        try:
            response = await self._client.post(path, json=payload)
        except httpx.HTTPError as exc:
            raise NetworkError(f"Request to {path} failed: {exc}") from exc
        if response.status_code == 401:
            raise AuthenticationError(_error_message(response, "Invalid username or password"))
        if response.status_code == 400:
            raise ValidationError(_error_message(response, "Invalid request"))
        if response.status_code >= 400:
            raise NetworkError(
                f"Request to {path} failed: {response.status_code}",
                status_code=response.status_code,
            )
        return response


def _error_message(response: httpx.Response, fallback: str) -> str:
    try:
        payload = response.json()
    except ValueError:
        return fallback
    if isinstance(payload, dict):
        detail = payload.get("detail") or payload.get("message")
        if isinstance(detail, str) and detail:
            return detail
    return fallback
