"""Pydantic models describing movie-data payloads."""

from __future__ import annotations

from datetime import datetime
from typing import Literal

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator

from .utils import build_image_url

TimeWindow = Literal["day", "week"]


class Genre(BaseModel):
    """A TMDB genre."""

    id: int
    name: str


class Movie(BaseModel):
    """Summary of a movie as returned by list endpoints.

    ``id`` is the only stable field. Everything else may be refreshed by a
    later fetch, for example when a detail payload enriches a search result.
    """

    model_config = ConfigDict(populate_by_name=True, extra="ignore")

    id: int
    title: str = ""
    poster_path: str | None = None
    backdrop_path: str | None = None
    overview: str = ""
    release_date: str = ""
    vote_average: float = 0.0
    genre_ids: list[int] = Field(default_factory=list)

    @field_validator("title", "overview", "release_date", mode="before")
    @classmethod
    def _blank_strings(cls, value: object) -> object:
        if value is None:
            return ""
        return value

    @field_validator("vote_average", mode="before")
    @classmethod
    def _missing_vote(cls, value: object) -> object:
        if value is None:
            return 0.0
        return value

    @field_validator("genre_ids", mode="before")
    @classmethod
    def _missing_genres(cls, value: object) -> object:
        if value is None:
            return []
        return value

    @property
    def release_year(self) -> str:
        """Return the four digit release year, or an empty string."""

        if len(self.release_date) < 4:
            return ""
        try:
            return str(datetime.fromisoformat(self.release_date[:10]).year)
        except ValueError:
            return ""

    def poster_url(self, size: str = "w342") -> str:
        return build_image_url(self.poster_path, size)

    def backdrop_url(self, size: str = "w780") -> str:
        return build_image_url(self.backdrop_path, size)


class MoviePage(BaseModel):
    """One page of a paginated movie listing."""

    model_config = ConfigDict(extra="ignore")

    results: list[Movie] = Field(default_factory=list)
    page: int = 1
    total_pages: int = 0
    total_results: int = 0


class ProductionCountry(BaseModel):
    model_config = ConfigDict(extra="ignore")

    iso_3166_1: str
    name: str


class SpokenLanguage(BaseModel):
    model_config = ConfigDict(extra="ignore")

    iso_639_1: str
    name: str = ""
    english_name: str = ""


class ProductionCompany(BaseModel):
    model_config = ConfigDict(extra="ignore")

    id: int
    name: str
    logo_path: str | None = None


class MovieDetail(Movie):
    """Full movie record returned by the detail endpoint."""

    runtime: int | None = None
    budget: int = 0
    revenue: int = 0
    genres: list[Genre] = Field(default_factory=list)
    production_countries: list[ProductionCountry] = Field(default_factory=list)
    spoken_languages: list[SpokenLanguage] = Field(default_factory=list)
    production_companies: list[ProductionCompany] = Field(default_factory=list)
    tagline: str | None = None
    status: str | None = None

    @model_validator(mode="after")
    def _derive_genre_ids(self) -> "MovieDetail":
        """Detail payloads list ``genres`` instead of ``genre_ids``."""

        if not self.genre_ids and self.genres:
            self.genre_ids = [genre.id for genre in self.genres]
        return self

    def to_movie(self) -> Movie:
        """Return the summary view used by favorites and listings."""

        return Movie.model_validate(self.model_dump(include=set(Movie.model_fields)))


class CastMember(BaseModel):
    model_config = ConfigDict(extra="ignore")

    id: int
    name: str
    character: str = ""
    profile_path: str | None = None


class CrewMember(BaseModel):
    model_config = ConfigDict(extra="ignore")

    id: int
    name: str
    job: str = ""
    department: str = ""
    profile_path: str | None = None


class Credits(BaseModel):
    model_config = ConfigDict(extra="ignore")

    id: int | None = None
    cast: list[CastMember] = Field(default_factory=list)
    crew: list[CrewMember] = Field(default_factory=list)

    def directors(self) -> list[CrewMember]:
        return [member for member in self.crew if member.job == "Director"]


class Video(BaseModel):
    model_config = ConfigDict(extra="ignore")

    id: str
    key: str
    name: str = ""
    site: str = ""
    size: int | None = None
    type: str = ""

    @property
    def embed_url(self) -> str:
        return f"https://www.youtube.com/embed/{self.key}"


class VideoList(BaseModel):
    model_config = ConfigDict(extra="ignore")

    id: int | None = None
    results: list[Video] = Field(default_factory=list)

    def trailer(self) -> Video | None:
        """Pick the best YouTube video to show as a trailer."""

        youtube = [video for video in self.results if video.site == "YouTube"]
        for video_type in ("Trailer", "Teaser"):
            for video in youtube:
                if video.type == video_type:
                    return video
        return youtube[0] if youtube else None


class GenreList(BaseModel):
    genres: list[Genre] = Field(default_factory=list)


class User(BaseModel):
    """Public view of an account. Never carries the password hash."""

    model_config = ConfigDict(from_attributes=True)

    id: int
    username: str


class Credentials(BaseModel):
    username: str
    password: str


class Registration(Credentials):
    confirm_password: str | None = Field(default=None, alias="confirmPassword")

    model_config = ConfigDict(populate_by_name=True)
