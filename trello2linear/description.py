"""Markdown rendering for normalized issue descriptions."""

from __future__ import annotations

import logging
from collections.abc import Iterable, Mapping

logger = logging.getLogger(__name__)

BACKLINK_TEMPLATE = "[View original card in Trello]({url})"


def sort_by_position(records: Iterable[dict]) -> list[dict]:
    """Sort Trello records by ``pos``; ties keep their export order."""
    return sorted(records, key=lambda record: record.get("pos") or 0)


def render_checklist(name: str | None, items: Iterable[dict]) -> str:
    """Render one checklist as markdown task lines sorted by position.

    Returns an empty string when there is nothing left to show.
    """
    lines = []
    for item in sort_by_position(items):
        mark = "x" if item.get("state") == "complete" else " "
        lines.append(f"- [{mark}] {item.get('name') or ''}")
    if not lines:
        return ""
    if name:
        lines.insert(0, f"### {name}")
    return "\n".join(lines)


def render_attachments(attachments: Iterable[dict]) -> str:
    """Render attachments as a link list under an ``Attachments:`` header"""
    links = [
        f"[{attachment.get('name') or attachment.get('url', '')}]({attachment.get('url', '')})"
        for attachment in attachments
    ]
    if not links:
        return ""
    return "Attachments:\n" + "\n".join(links)


def render_members(member_ids: Iterable[str], members: Mapping[str, dict]) -> str:
    """Render card members as ``Full Name (username)`` under a ``Members:`` header"""
    lines = []
    for member_id in member_ids:
        member = members.get(member_id)
        if member is None:
            logger.debug("Skipping unknown member %s", member_id)
            continue
        lines.append(f"{member.get('fullName', '')} ({member.get('username', '')})")
    if not lines:
        return ""
    return "Members:\n" + "\n".join(lines)


def compose_description(
    body: str | None,
    checklists: Iterable[str] = (),
    attachments: str = "",
    members: str = "",
    url: str | None = None,
) -> str:
    """Join the description blocks with blank lines, skipping empty ones.

    Block order: card body, checklists, attachments, members, backlink.
    """
    blocks = [(body or "").rstrip(), *checklists, attachments, members]
    if url:
        blocks.append(BACKLINK_TEMPLATE.format(url=url))
    return "\n\n".join(block for block in blocks if block.strip())
