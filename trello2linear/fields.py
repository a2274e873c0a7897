"""Map a card's custom field values onto estimate, project and milestone."""

from __future__ import annotations

import logging
from collections.abc import Mapping
from dataclasses import dataclass

from trello2linear.config import NormalizerConfig
from trello2linear.indexes import CustomFieldInfo
from trello2linear.lookup import resolve_nested
from trello2linear.models import Estimate

logger = logging.getLogger(__name__)

# Order in which non-list custom field values are read
RAW_VALUE_KEYS = ("text", "number", "date", "checked")


@dataclass
class FieldMapping:
    """Target concepts resolved from custom fields. ``None`` means no value."""

    estimate: Estimate = Estimate.NO_ESTIMATE
    project_id: str | None = None
    milestone_id: str | None = None


def field_value_text(item: dict, info: CustomFieldInfo) -> str | None:
    """Display text of one custom field assignment.

    List fields store the chosen option id in ``idValue``; every other field
    type stores its raw value under ``value``.
    """
    if item.get("idValue"):
        return info.options.get(item["idValue"])

    value = item.get("value")
    if isinstance(value, dict):
        for key in RAW_VALUE_KEYS:
            if value.get(key) is not None:
                return str(value[key])
        return None
    return str(value) if value is not None else None


def map_custom_fields(
    card: dict,
    field_index: Mapping[str, CustomFieldInfo],
    phase: str,
    list_name: str | None,
    config: NormalizerConfig,
) -> FieldMapping:
    """Resolve estimate, project and milestone for one card.

    Only the estimate and category fields are read; if a field is assigned
    more than once, the last assignment wins.
    """
    mapping = FieldMapping(project_id=config.default_project_id)

    for item in card.get("customFieldItems") or []:
        info = field_index.get(item.get("idCustomField", ""))
        if info is None:
            logger.debug(
                "Card %s: unknown custom field %s", card.get("id"), item.get("idCustomField")
            )
            continue

        if info.name == config.estimate_field:
            text = field_value_text(item, info)
            mapping.estimate = config.estimates.get(text or "", Estimate.NO_ESTIMATE)
            if text and text not in config.estimates:
                logger.debug("Card %s: unmapped estimate '%s'", card.get("id"), text)

        elif info.name == config.category_field:
            category = field_value_text(item, info)
            mapping.project_id = resolve_nested(config.projects, phase, category)
            mapping.milestone_id = resolve_nested(config.milestones, phase, category, list_name)
            if mapping.project_id is None:
                logger.debug(
                    "Card %s: no project for category '%s' in %s", card.get("id"), category, phase
                )

    return mapping
