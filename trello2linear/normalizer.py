"""Trello export normalization: one pass from export document to ImportResult.

The normalizer first builds every lookup table from the export, then walks the
cards in export order. Each card is transformed on its own into a
``CardResult`` (issue, labels, sub-issues) that the orchestrator merges into
the shared result, so every step can be tested in isolation.
"""

from __future__ import annotations

import json
import logging
from dataclasses import dataclass, field

from trello2linear.comments import aggregate_comments
from trello2linear.config import NormalizerConfig
from trello2linear.description import (
    compose_description,
    render_attachments,
    render_checklist,
    render_members,
    sort_by_position,
)
from trello2linear.exceptions import ExportFormatError
from trello2linear.fields import map_custom_fields
from trello2linear.indexes import (
    CustomFieldInfo,
    build_archived_list_ids,
    build_checklist_index,
    build_custom_field_index,
    build_list_index,
    build_member_index,
    build_url_index,
)
from trello2linear.models import Comment, ImportResult, Issue, LabelEntry, UserEntry
from trello2linear.phases import classify_phase, group_list_moves
from trello2linear.references import split_checklist_items

logger = logging.getLogger(__name__)

REQUIRED_ARRAYS = ("cards", "lists", "checklists", "customFields", "members", "actions")


def validate_export(data: object) -> dict:
    """Check the parsed document has every top-level array the normalizer reads.

    Raises:
        ExportFormatError: If the document is not an object or arrays are missing
    """
    if not isinstance(data, dict):
        raise ExportFormatError("Trello export must be a JSON object")

    missing = [key for key in REQUIRED_ARRAYS if not isinstance(data.get(key), list)]
    if missing:
        raise ExportFormatError(
            f"Trello export is missing required arrays: {', '.join(missing)}",
            missing_keys=missing,
        )
    return data


def parse_export(raw: bytes | str) -> dict:
    """Decode export bytes (or text) and validate the result.

    Raises:
        ExportFormatError: If the input is not valid JSON or misses arrays
    """
    try:
        data = json.loads(raw)
    except (json.JSONDecodeError, UnicodeDecodeError) as e:
        raise ExportFormatError(f"Trello export is not valid JSON: {e}") from e
    return validate_export(data)


@dataclass
class ExportContext:
    """Indexes built from the whole export before any card is transformed."""

    url_index: dict[str, str] = field(default_factory=dict)
    list_names: dict[str, str] = field(default_factory=dict)
    archived_lists: set[str] = field(default_factory=set)
    custom_fields: dict[str, CustomFieldInfo] = field(default_factory=dict)
    members: dict[str, dict] = field(default_factory=dict)
    labels: dict[str, dict] = field(default_factory=dict)
    checklists_by_card: dict[str, list[dict]] = field(default_factory=dict)
    moves_by_card: dict[str, list[dict]] = field(default_factory=dict)
    comments_by_card: dict[str, list[Comment]] = field(default_factory=dict)
    users: dict[str, UserEntry] = field(default_factory=dict)


@dataclass
class CardResult:
    """Everything one card contributes to the import result."""

    issue: Issue
    labels: dict[str, LabelEntry] = field(default_factory=dict)
    sub_issues: list[str] = field(default_factory=list)


class TrelloExportNormalizer:
    """Convert a parsed Trello board export into an ImportResult

    Example:
        >>> normalizer = TrelloExportNormalizer(NormalizerConfig(discard_archived_cards=True))
        >>> result = normalizer.normalize(parse_export(raw_bytes))
        >>> len(result.issues)
        42
    """

    def __init__(self, config: NormalizerConfig | None = None):
        self.config = config if config is not None else NormalizerConfig()

    def build_context(self, export: dict) -> ExportContext:
        """Build every index the per-card transform needs"""
        comments = aggregate_comments(export["actions"])
        return ExportContext(
            url_index=build_url_index(export["cards"]),
            list_names=build_list_index(export["lists"]),
            archived_lists=build_archived_list_ids(export["lists"]),
            custom_fields=build_custom_field_index(export["customFields"]),
            members=build_member_index(export["members"]),
            labels={label["id"]: label for label in export.get("labels") or []},
            checklists_by_card=build_checklist_index(export["checklists"]),
            moves_by_card=group_list_moves(export["actions"]),
            comments_by_card=comments.comments_by_card,
            users=comments.users,
        )

    def is_discarded(self, card: dict, context: ExportContext) -> bool:
        """Archival filter for a single card"""
        if self.config.discard_archived_cards and card.get("closed"):
            return True
        return bool(
            self.config.discard_archived_lists and card.get("idList") in context.archived_lists
        )

    def map_label(self, label: dict) -> LabelEntry:
        """Translate a Trello label, synthesizing a name for color-only labels"""
        color = label.get("color")
        name = label.get("name") or f"{self.config.label_source}-{color or 'none'}"
        return LabelEntry(name=name, color=self.config.label_colors.get(color) if color else None)

    def card_labels(self, card: dict, context: ExportContext) -> dict[str, LabelEntry]:
        """Labels on ``card`` keyed by id, from embedded labels or ``idLabels``"""
        raw_labels = card.get("labels")
        if raw_labels is None:
            raw_labels = [
                context.labels[label_id]
                for label_id in card.get("idLabels") or []
                if label_id in context.labels
            ]
        return {label["id"]: self.map_label(label) for label in raw_labels if label.get("id")}

    def render_checklists(self, card: dict, context: ExportContext) -> tuple[list[str], list[str]]:
        """Render the card's checklists and collect the card references they hold

        Returns:
            (rendered checklist blocks, referenced card ids in checklist order)
        """
        checklists = context.checklists_by_card.get(card["id"])
        if checklists is None:
            checklists = card.get("checklists") or []

        blocks: list[str] = []
        sub_issues: list[str] = []
        for checklist in sort_by_position(checklists):
            items = sort_by_position(checklist.get("checkItems") or [])
            visible, referenced = split_checklist_items(items, context.url_index)
            sub_issues.extend(referenced)
            block = render_checklist(checklist.get("name"), visible)
            if block:
                blocks.append(block)
        return blocks, sub_issues

    def transform_card(self, card: dict, context: ExportContext) -> CardResult | None:
        """Transform one card; ``None`` when the archival filter drops it"""
        if self.is_discarded(card, context):
            logger.debug("Skipping archived card %s (%s)", card["id"], card.get("name"))
            return None

        url = card.get("shortUrl") or card.get("url") or ""
        checklist_blocks, sub_issues = self.render_checklists(card, context)
        description = compose_description(
            card.get("desc"),
            checklist_blocks,
            render_attachments(card.get("attachments") or []),
            render_members(card.get("idMembers") or [], context.members),
            url,
        )

        list_name = context.list_names.get(card.get("idList", ""))
        status = self.config.statuses.get(list_name) if list_name is not None else None
        if status is None:
            logger.debug("Card %s: no status for list '%s'", card["id"], list_name)

        phase = classify_phase(
            card["id"],
            context.moves_by_card.get(card["id"], []),
            self.config.phases,
            self.config.marker_list,
        )
        fields = map_custom_fields(card, context.custom_fields, phase, list_name, self.config)
        labels = self.card_labels(card, context)

        issue = Issue(
            title=card.get("name", ""),
            description=description,
            url=url,
            original_id=card["id"],
            labels=list(labels),
            comments=list(context.comments_by_card.get(card["id"], [])),
            estimate=fields.estimate,
            status=status,
            project_id=fields.project_id,
            project_milestone_id=fields.milestone_id,
        )
        return CardResult(issue=issue, labels=labels, sub_issues=sub_issues)

    def normalize(self, export: dict) -> ImportResult:
        """Run the full pass over a validated export document"""
        export = validate_export(export)
        context = self.build_context(export)
        result = ImportResult(users=dict(context.users))

        skipped = 0
        for card in export["cards"]:
            card_result = self.transform_card(card, context)
            if card_result is None:
                skipped += 1
                continue

            result.issues.append(card_result.issue)
            for label_id, label in card_result.labels.items():
                result.labels.setdefault(label_id, label)
            if card_result.sub_issues:
                result.sub_issues.setdefault(card_result.issue.original_id, []).extend(
                    card_result.sub_issues
                )

        logger.info(
            "Normalized %d/%d cards (%d archived skipped): %d labels, %d users, %d parents",
            len(result.issues),
            len(export["cards"]),
            skipped,
            len(result.labels),
            len(result.users),
            len(result.sub_issues),
        )
        return result
