"""Data types exchanged with the GitHub REST API."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from typing import Any


def parse_timestamp(value: str | None) -> datetime | None:
    """Parse an RFC 3339 timestamp as sent by GitHub; None when absent or empty."""
    if not value:
        return None
    text = value.strip()
    if text.endswith(("Z", "z")):
        text = text[:-1] + "+00:00"
    try:
        return datetime.fromisoformat(text)
    except ValueError as exc:
        raise ValueError(f"invalid timestamp {value!r}") from exc


def _text(data: dict[str, Any], key: str) -> str:
    value = data.get(key)
    return "" if value is None else str(value)


def _nested(data: dict[str, Any], key: str, inner: str) -> str:
    obj = data.get(key)
    if not isinstance(obj, dict):
        return ""
    return _text(obj, inner)


@dataclass
class Review:
    """A review left on a pull request."""

    state: str = ""
    user: str = ""

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> Review:
        return cls(state=_text(data, "state"), user=_nested(data, "user", "login"))


@dataclass
class Check:
    """A check run reported for a pull request's head commit."""

    name: str = ""
    status: str = ""

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> Check:
        return cls(name=_text(data, "name"), status=_text(data, "status"))


@dataclass
class TimelineEvent:
    """An event in a pull request's history, such as a commit."""

    event: str = ""
    created_at: datetime | None = None
    message: str = ""
    sha: str = ""
    actor: str = ""

    @classmethod
    def _from_dict(cls, data: dict[str, Any]) -> TimelineEvent:
        return cls(
            event=_text(data, "event"),
            created_at=parse_timestamp(data.get("created_at")),
            message=_text(data, "message"),
            sha=_text(data, "sha"),
            actor=_nested(data, "actor", "login"),
        )


@dataclass
class Comment:
    """A single review comment within a thread."""

    user: str = ""
    body: str = ""
    time: datetime | None = None


@dataclass
class UnresolvedThread:
    """Review comments attached to one line of one file."""

    path: str = ""
    line: int = 0
    comments: list[Comment] = field(default_factory=list)
    code_context: str = ""


@dataclass
class PullRequest:
    """A pull request with optional reviews, checks and timeline."""

    number: int = 0
    title: str = ""
    body: str = ""
    state: str = ""
    html_url: str = ""
    draft: bool = False
    merged: bool = False
    head_ref: str = ""
    base_ref: str = ""
    reviews: list[Review] = field(default_factory=list)
    checks: list[Check] = field(default_factory=list)
    timeline: list[TimelineEvent] = field(default_factory=list)

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> PullRequest:
        return cls(
            number=int(data.get("number") or 0),
            title=_text(data, "title"),
            body=_text(data, "body"),
            state=_text(data, "state"),
            html_url=_text(data, "html_url"),
            draft=bool(data.get("draft")),
            merged=bool(data.get("merged")),
            head_ref=_nested(data, "head", "ref"),
            base_ref=_nested(data, "base", "ref"),
            reviews=[Review.from_dict(r) for r in data.get("reviews") or []],
            checks=[Check.from_dict(c) for c in data.get("checks") or []],
            timeline=[TimelineEvent._from_dict(t) for t in data.get("timeline") or []],
        )

    def update_payload(self) -> dict[str, Any]:
        """Return the body of a PATCH request that updates this pull request."""
        return {"title": self.title, "body": self.body, "draft": self.draft}


@dataclass(frozen=True)
class TokenSource:
    """A GitHub token and a description of where it was found."""

    token: str = ""
    source: str = ""