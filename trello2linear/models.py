"""Data models for the normalized import result.

These models are what the normalizer hands to whichever uploader talks to the
target tracker. They are intentionally plain; ``ImportResult.to_dict()``
renders the camelCase JSON shape the target's importer expects.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from enum import IntEnum
from typing import Any


class Estimate(IntEnum):
    """Target estimate levels (t-shirt sizes)."""

    NO_ESTIMATE = 0
    EMPTY = 1  # For epics
    XS = 2
    S = 3
    M = 4
    L = 5
    XL = 6


@dataclass
class Comment:
    """A comment posted on a card."""

    body: str
    user_id: str
    created_at: datetime | None = None

    def to_dict(self) -> dict[str, Any]:
        return {
            "body": self.body,
            "userId": self.user_id,
            "createdAt": self.created_at.isoformat() if self.created_at else None,
        }


@dataclass
class LabelEntry:
    """A label as created in the target tracker.

    The target requires a non-empty name, so color-only Trello labels get a
    synthesized one before they land here.
    """

    name: str
    color: str | None = None

    def to_dict(self) -> dict[str, Any]:
        return {"name": self.name, "color": self.color}


@dataclass
class UserEntry:
    """A user that authored at least one comment."""

    name: str
    avatar_url: str | None = None

    def to_dict(self) -> dict[str, Any]:
        return {"name": self.name, "avatarUrl": self.avatar_url}


@dataclass
class Issue:
    """One normalized issue, derived from exactly one Trello card.

    ``status``, ``project_id`` and ``project_milestone_id`` are ``None`` when the
    card's list or custom fields have no mapping.
    """

    title: str
    description: str
    url: str
    original_id: str
    labels: list[str] = field(default_factory=list)
    comments: list[Comment] = field(default_factory=list)
    estimate: Estimate = Estimate.NO_ESTIMATE
    status: str | None = None
    project_id: str | None = None
    project_milestone_id: str | None = None

    def to_dict(self) -> dict[str, Any]:
        return {
            "title": self.title,
            "description": self.description,
            "url": self.url,
            "labels": list(self.labels),
            "comments": [comment.to_dict() for comment in self.comments],
            "originalId": self.original_id,
            "estimate": int(self.estimate),
            "projectId": self.project_id,
            "status": self.status,
            "projectMilestoneId": self.project_milestone_id,
        }


@dataclass
class ImportResult:
    """Everything the target importer needs, keyed the way it looks things up."""

    issues: list[Issue] = field(default_factory=list)
    labels: dict[str, LabelEntry] = field(default_factory=dict)
    users: dict[str, UserEntry] = field(default_factory=dict)
    sub_issues: dict[str, list[str]] = field(default_factory=dict)

    def to_dict(self) -> dict[str, Any]:
        return {
            "issues": [issue.to_dict() for issue in self.issues],
            "labels": {label_id: label.to_dict() for label_id, label in self.labels.items()},
            "users": {user_id: user.to_dict() for user_id, user in self.users.items()},
            "subIssues": {parent: list(children) for parent, children in self.sub_issues.items()},
        }
