from __future__ import annotations

from typing import Any, Callable

import httpx
from fastapi import FastAPI
from fastapi.testclient import TestClient

from app.config import Settings
from app.main import register_routes
from app.services.tmdb import TMDBClient


def build_app(handler: Callable[[httpx.Request], httpx.Response]) -> FastAPI:
    app = FastAPI()
    register_routes(app)
    http_client = httpx.AsyncClient(
        transport=httpx.MockTransport(handler), base_url="https://tmdb.example.com/3"
    )
    app.state.tmdb_client = TMDBClient(
        Settings(_env_file=None, TMDB_API_KEY="secret-key"), http_client
    )
    return app


def page_payload(ids: list[int], *, page: int = 1, total_pages: int = 1) -> dict[str, Any]:
    return {
        "page": page,
        "total_pages": total_pages,
        "total_results": len(ids),
        "results": [{"id": movie_id, "title": f"Movie {movie_id}"} for movie_id in ids],
    }


def test_trending_proxies_page_and_hides_key() -> None:
    requests: list[httpx.Request] = []

    def handler(request: httpx.Request) -> httpx.Response:
        requests.append(request)
        return httpx.Response(200, json=page_payload([1, 2], page=2, total_pages=10))

    with TestClient(build_app(handler)) as client:
        response = client.get("/api/movies/trending/week", params={"page": 2})

    assert response.status_code == 200
    payload = response.json()
    assert payload["page"] == 2
    assert payload["total_pages"] == 10
    assert [movie["id"] for movie in payload["results"]] == [1, 2]
    assert "secret-key" not in response.text
    assert requests[0].url.path == "/3/trending/movie/week"
    assert requests[0].url.params["api_key"] == "secret-key"


def test_trending_rejects_unknown_window() -> None:
    def handler(_: httpx.Request) -> httpx.Response:  # pragma: no cover - never called
        raise AssertionError("upstream should not be called")

    with TestClient(build_app(handler)) as client:
        response = client.get("/api/movies/trending/month")

    assert response.status_code == 400


def test_search_requires_query() -> None:
    def handler(_: httpx.Request) -> httpx.Response:  # pragma: no cover - never called
        raise AssertionError("upstream should not be called")

    with TestClient(build_app(handler)) as client:
        missing = client.get("/api/movies/search")
        blank = client.get("/api/movies/search", params={"query": "  "})

    assert missing.status_code == 400
    assert missing.json()["detail"] == "Query parameter is required"
    assert blank.status_code == 400


def test_discover_forwards_filters() -> None:
    requests: list[httpx.Request] = []

    def handler(request: httpx.Request) -> httpx.Response:
        requests.append(request)
        return httpx.Response(200, json=page_payload([5]))

    with TestClient(build_app(handler)) as client:
        response = client.get(
            "/api/movies/discover",
            params={"genre": 35, "year": 1999, "sort_by": "popularity.desc", "page": 4},
        )

    assert response.status_code == 200
    params = requests[0].url.params
    assert requests[0].url.path == "/3/discover/movie"
    assert params["with_genres"] == "35"
    assert params["primary_release_year"] == "1999"
    assert params["page"] == "4"


def test_movie_detail_and_sub_resources() -> None:
    def handler(request: httpx.Request) -> httpx.Response:
        path = request.url.path
        if path == "/3/movie/603":
            return httpx.Response(
                200,
                json={"id": 603, "title": "The Matrix", "runtime": 136, "genres": [{"id": 878, "name": "Science Fiction"}]},
            )
        if path == "/3/movie/603/credits":
            return httpx.Response(200, json={"id": 603, "cast": [{"id": 6384, "name": "Keanu Reeves", "character": "Neo"}], "crew": []})
        if path == "/3/movie/603/videos":
            return httpx.Response(200, json={"id": 603, "results": [{"id": "x", "key": "m8e-FF8MsqU", "site": "YouTube", "type": "Trailer"}]})
        if path == "/3/movie/603/similar":
            return httpx.Response(200, json=page_payload([604, 605]))
        if path == "/3/genre/movie/list":
            return httpx.Response(200, json={"genres": [{"id": 878, "name": "Science Fiction"}]})
        return httpx.Response(404, json={})

    with TestClient(build_app(handler)) as client:
        detail = client.get("/api/movies/603")
        credits = client.get("/api/movies/603/credits")
        videos = client.get("/api/movies/603/videos")
        similar = client.get("/api/movies/603/similar")
        genres = client.get("/api/genres")

    assert detail.status_code == 200
    assert detail.json()["genre_ids"] == [878]
    assert credits.json()["cast"][0]["character"] == "Neo"
    assert videos.json()["results"][0]["key"] == "m8e-FF8MsqU"
    assert [movie["id"] for movie in similar.json()["results"]] == [604, 605]
    assert genres.json() == {"genres": [{"id": 878, "name": "Science Fiction"}]}


def test_missing_movie_returns_404() -> None:
    def handler(_: httpx.Request) -> httpx.Response:
        return httpx.Response(404, json={"status_code": 34})

    with TestClient(build_app(handler)) as client:
        response = client.get("/api/movies/1")

    assert response.status_code == 404
    assert response.json()["detail"] == "Movie with ID 1 not found"


def test_upstream_failure_returns_502() -> None:
    def handler(_: httpx.Request) -> httpx.Response:
        return httpx.Response(500, text="boom")

    with TestClient(build_app(handler)) as client:
        response = client.get("/api/movies/trending/day")

    assert response.status_code == 502
    assert response.json()["detail"] == "Failed to fetch trending movies"


def test_healthcheck() -> None:
    def handler(_: httpx.Request) -> httpx.Response:  # pragma: no cover - never called
        raise AssertionError

    with TestClient(build_app(handler)) as client:
        assert client.get("/healthz").json() == {"status": "ok"}
