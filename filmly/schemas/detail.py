"""
Schemas for the movie detail page: credits, videos and the aggregated bundle
"""
from typing import List, Optional

from pydantic import BaseModel, Field, computed_field, field_validator

from filmly.schemas.movie import Movie, image_url


PROFILE_SIZE = "w185"
YOUTUBE = "YouTube"


# ============================================
# Credits
# ============================================

class CastMember(BaseModel):
    id: int
    name: str
    character: str = ""
    profile_path: Optional[str] = None

    @field_validator("character", mode="before")
    @classmethod
    def null_to_empty(cls, v):
        return "" if v is None else v

    @computed_field
    @property
    def profile_url(self) -> Optional[str]:
        return image_url(self.profile_path, PROFILE_SIZE)


class CrewMember(BaseModel):
    id: int
    name: str
    job: str = ""


class Credits(BaseModel):
    id: Optional[int] = None
    cast: List[CastMember] = Field(default_factory=list)
    crew: List[CrewMember] = Field(default_factory=list)

    def directors(self) -> List[CrewMember]:
        return [member for member in self.crew if member.job == "Director"]


# ============================================
# Videos
# ============================================

class Video(BaseModel):
    id: str
    key: str
    name: str
    site: str
    type: str
    official: Optional[bool] = None
    published_at: Optional[str] = None

    @computed_field
    @property
    def youtube_url(self) -> Optional[str]:
        if self.site != YOUTUBE:
            return None
        return f"https://www.youtube.com/watch?v={self.key}"

    @computed_field
    @property
    def youtube_thumbnail_url(self) -> Optional[str]:
        if self.site != YOUTUBE:
            return None
        return f"https://img.youtube.com/vi/{self.key}/hqdefault.jpg"


class VideoResponse(BaseModel):
    id: Optional[int] = None
    results: List[Video] = Field(default_factory=list)


def pick_trailer(videos: List[Video]) -> Optional[Video]:
    """
    Choose the video to feature on the detail page.

    Preference: official YouTube trailer, any YouTube trailer,
    then any YouTube video. Non-YouTube videos are never picked.
    """
    youtube = [v for v in videos if v.site == YOUTUBE]
    trailers = [v for v in youtube if v.type == "Trailer"]
    for video in trailers:
        if video.official:
            return video
    if trailers:
        return trailers[0]
    return youtube[0] if youtube else None


# ============================================
# Detail bundle
# ============================================

class DetailBundle(BaseModel):
    """Credits, videos, recommendations and similar movies for one movie"""
    movie_id: Optional[int] = None
    credits: Optional[Credits] = None
    videos: List[Video] = Field(default_factory=list)
    recommendations: List[Movie] = Field(default_factory=list)
    similar: List[Movie] = Field(default_factory=list)
    is_loading: bool = False
    errors: List[str] = Field(default_factory=list)

    @computed_field
    @property
    def trailer(self) -> Optional[Video]:
        return pick_trailer(self.videos)
