"""Resolve checklist items that are links to other cards in the same export."""

from __future__ import annotations

from collections.abc import Iterable, Mapping

from trello2linear.indexes import strip_url_suffix


def resolve_reference(text: str | None, url_index: Mapping[str, str]) -> str | None:
    """Return the id of the card whose address is exactly ``text``, if any.

    This is plain string equality against the url index, tried on the full
    text first and then on its suffix-stripped form. Text that merely contains
    a URL is not a reference.
    """
    if not text:
        return None
    candidate = text.strip()
    card_id = url_index.get(candidate)
    if card_id is None:
        card_id = url_index.get(strip_url_suffix(candidate))
    return card_id


def split_checklist_items(
    items: Iterable[dict], url_index: Mapping[str, str]
) -> tuple[list[dict], list[str]]:
    """Separate visible checklist items from card references.

    Returns:
        (visible items, referenced card ids), both in the order given
    """
    visible: list[dict] = []
    referenced: list[str] = []
    for item in items:
        card_id = resolve_reference(item.get("name"), url_index)
        if card_id is None:
            visible.append(item)
        else:
            referenced.append(card_id)
    return visible, referenced
