"""Group comment actions from the activity log by the card they were posted on."""

from __future__ import annotations

import logging
from collections.abc import Iterable
from dataclasses import dataclass, field

from trello2linear.models import Comment, UserEntry
from trello2linear.phases import parse_timestamp

logger = logging.getLogger(__name__)

COMMENT_ACTION = "commentCard"


@dataclass
class CommentAggregate:
    """Comments per card id, plus every commenter seen along the way."""

    comments_by_card: dict[str, list[Comment]] = field(default_factory=dict)
    users: dict[str, UserEntry] = field(default_factory=dict)


def aggregate_comments(actions: Iterable[dict]) -> CommentAggregate:
    """Scan the activity log once and collect comments in log order.

    Comments whose author is no longer part of the export carry no
    ``memberCreator`` and are dropped.
    """
    aggregate = CommentAggregate()
    dropped = 0

    for action in actions:
        if action.get("type") != COMMENT_ACTION:
            continue

        author = action.get("memberCreator")
        if not author or not author.get("id"):
            dropped += 1
            continue

        data = action.get("data") or {}
        card_id = (data.get("card") or {}).get("id")
        if not card_id:
            dropped += 1
            continue

        aggregate.users[author["id"]] = UserEntry(
            name=author.get("fullName") or author.get("username") or author["id"],
            avatar_url=author.get("avatarUrl"),
        )
        aggregate.comments_by_card.setdefault(card_id, []).append(
            Comment(
                body=data.get("text", ""),
                user_id=author["id"],
                created_at=parse_timestamp(action.get("date")),
            )
        )

    if dropped:
        logger.debug("Dropped %d comment(s) without a known author or card", dropped)

    return aggregate
