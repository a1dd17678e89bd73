from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum


@dataclass(frozen=True)
class RawPaper:
    paper_id: str
    title: str
    authors: list[str]
    published: str
    summary: str


@dataclass(frozen=True)
class Paper:
    paper_id: str
    title: str
    authors: list[str]
    year: str
    abstract_en: str
    abstract_zh: str
    tldr: str
    tags: list[str] = field(default_factory=list)


@dataclass
class RecommendationContext:
    liked_titles: list[str] = field(default_factory=list)
    disliked_titles: list[str] = field(default_factory=list)  # not used by the fetcher yet
    current_focus: str = "AI Agents"


class SwipeDirection(str, Enum):
    LEFT = "left"
    RIGHT = "right"
