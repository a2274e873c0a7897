"""Lookup tables built from the raw export arrays.

All indexes are built over the complete export before any card is transformed,
so references resolve against every card, archived ones included.
"""

from __future__ import annotations

from collections.abc import Iterable
from dataclasses import dataclass, field
from urllib.parse import urlsplit, urlunsplit


@dataclass
class CustomFieldInfo:
    """A custom field definition with its option texts keyed by option id."""

    name: str
    type: str | None = None
    options: dict[str, str] = field(default_factory=dict)


def strip_url_suffix(url: str, keep_segments: int = 2) -> str:
    """Drop the last ``/``-delimited path segment of a card URL.

    Trello card URLs carry a slug that changes when the card is renamed
    (``https://trello.com/c/AbCd1234/42-old-title``), so both sides of a
    comparison are stripped the same way. The ``/c/<shortLink>`` address
    itself is never cut: URLs with ``keep_segments`` path segments or fewer
    are returned unchanged.
    """
    parts = urlsplit(url)
    segments = [segment for segment in parts.path.split("/") if segment]
    if len(segments) <= keep_segments:
        return url
    path = "/" + "/".join(segments[:-1])
    return urlunsplit((parts.scheme, parts.netloc, path, "", ""))


def build_url_index(cards: Iterable[dict]) -> dict[str, str]:
    """Map every known form of each card's address to the card id."""
    urls: dict[str, str] = {}
    for card in cards:
        for key in ("url", "shortUrl"):
            url = card.get(key)
            if not url:
                continue
            urls[url] = card["id"]
            urls.setdefault(strip_url_suffix(url), card["id"])
    return urls


def build_list_index(lists: Iterable[dict]) -> dict[str, str]:
    """List id -> list name"""
    return {lst["id"]: lst.get("name", "") for lst in lists}


def build_archived_list_ids(lists: Iterable[dict]) -> set[str]:
    """Ids of archived (closed) lists"""
    return {lst["id"] for lst in lists if lst.get("closed")}


def build_custom_field_index(custom_fields: Iterable[dict]) -> dict[str, CustomFieldInfo]:
    """Custom field id -> name, type and option texts"""
    index: dict[str, CustomFieldInfo] = {}
    for definition in custom_fields:
        info = CustomFieldInfo(name=definition.get("name", ""), type=definition.get("type"))
        for option in definition.get("options") or []:
            text = (option.get("value") or {}).get("text")
            if text is not None:
                info.options[option["id"]] = text
        index[definition["id"]] = info
    return index


def build_member_index(members: Iterable[dict]) -> dict[str, dict]:
    """Member id -> member record"""
    return {member["id"]: member for member in members}


def build_checklist_index(checklists: Iterable[dict]) -> dict[str, list[dict]]:
    """Card id -> checklists owned by that card, in export order"""
    by_card: dict[str, list[dict]] = {}
    for checklist in checklists:
        card_id = checklist.get("idCard")
        if card_id:
            by_card.setdefault(card_id, []).append(checklist)
    return by_card
