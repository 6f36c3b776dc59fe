# -*- coding: utf-8 -*-
# Descargarr

import copy
from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import List, Optional


class ReleaseType(Enum):
    TV = "tv"
    MOVIE = "movie"


@dataclass
class Release:
    release_type: ReleaseType
    title: str
    details_url: str
    series_name: str = ""
    season: Optional[int] = None
    episode: Optional[int] = None
    episode_to: Optional[int] = None
    quality: str = ""
    language: str = ""
    size: int = 0
    publish_date: Optional[datetime] = None
    categories: List[int] = field(default_factory=list)
    score: int = 0

    @property
    def guid(self) -> str:
        return self.details_url

    def identity(self):
        return self.title, self.details_url

    def copy(self) -> "Release":
        return copy.deepcopy(self)

    def to_details(self, hostname="newpct"):
        """Dictionary shape consumed by the Torznab layer."""
        details = {
            "title": self.title,
            "hostname": hostname,
            "link": self.details_url,
            "source": self.guid,
            "size": self.size,
            "category": self.categories[0] if self.categories else None,
            "categories": list(self.categories),
            "score": self.score,
        }
        if self.publish_date is not None:
            details["date"] = self.publish_date.strftime("%a, %d %b %Y %H:%M:%S +0000")
        if self.language:
            details["language"] = self.language
        if self.season is not None:
            details["season"] = self.season
        if self.episode is not None:
            details["episode"] = self.episode
        return details
