"""Column mapping resolution: source headers -> business fields."""

import logging
import re
from dataclasses import dataclass
from typing import Callable, Optional

from budgetit.domain.entities import ColumnMapping
from budgetit.domain.errors import ValidationError
from budgetit.domain.template_store import TemplateStore

logger = logging.getLogger(__name__)

# Field catalogs. Order matters: auto-detection walks fields in this order
# and each field's aliases in order.
EXPENSE_FIELD_ALIASES: dict[str, tuple[str, ...]] = {
    "scenario_id": ("scenario_id", "scenario", "scenarioid"),
    "service_id": ("service_id", "service", "serviceid"),
    "contract_id": ("contract_id", "contract", "contractid"),
    "name": ("name", "expense", "expense_name", "line_item"),
    "expense_type": ("expense_type", "type"),
    "status": ("status",),
    "amount": ("amount", "amount_usd", "usd", "cost", "price"),
    "currency": ("currency", "curr"),
    "start_date": ("start_date", "start"),
    "end_date": ("end_date", "end"),
    "frequency": ("frequency", "recurrence"),
    "interval": ("interval", "every"),
    "day_of_month": ("day_of_month", "day", "dom"),
    "month_of_year": ("month_of_year", "month", "moy"),
    "anchor_date": ("anchor_date", "anchor"),
}

EXPENSE_REQUIRED_FIELDS = (
    "scenario_id",
    "service_id",
    "name",
    "expense_type",
    "status",
    "amount",
)

ACTUAL_FIELD_ALIASES: dict[str, tuple[str, ...]] = {
    "scenario_id": ("scenario_id", "scenario", "scenarioid"),
    "service_id": ("service_id", "service", "serviceid"),
    "contract_id": ("contract_id", "contract", "contractid"),
    "transaction_date": ("transaction_date", "date", "posted_date"),
    "amount": ("amount", "amount_usd", "usd", "cost"),
    "currency": ("currency", "curr"),
    "description": ("description", "memo", "notes"),
}

ACTUAL_REQUIRED_FIELDS = ("scenario_id", "service_id", "transaction_date", "amount")

_WHITESPACE = re.compile(r"\s+")


def normalize_header(header: str) -> str:
    """Normalize a header for alias matching: trim, lowercase, spaces -> "_"."""
    return _WHITESPACE.sub("_", header.strip().lower())


def header_signature(headers: list[str]) -> str:
    """Build the template-matching key for a header list (order preserved)."""
    return "|".join(normalize_header(h) for h in headers)


def normalize_mapping(
    headers: list[str], mapping: ColumnMapping, fields: Optional[dict] = None
) -> ColumnMapping:
    """Drop entries whose header is not present verbatim in headers.

    Args:
        headers: Source header list
        mapping: Candidate field -> header mapping
        fields: Optional field catalog; unknown field names are dropped too

    Returns:
        The surviving entries
    """
    available = set(headers)
    return {
        field: header
        for field, header in mapping.items()
        if header and header in available and (fields is None or field in fields)
    }


def build_auto_mapping(headers: list[str], field_aliases: dict[str, tuple[str, ...]]) -> ColumnMapping:
    """Map fields to headers by alias; the first alias hit per field wins."""
    by_normalized: dict[str, str] = {}
    for header in headers:
        by_normalized[normalize_header(header)] = header

    mapping: ColumnMapping = {}
    for field, aliases in field_aliases.items():
        for alias in aliases:
            header = by_normalized.get(alias)
            if header:
                mapping[field] = header
                break
    return mapping


@dataclass(frozen=True)
class MappingResolution:
    """Concrete mapping plus which template (if any) produced or stored it."""

    mapping: ColumnMapping
    template_applied: Optional[str] = None
    template_saved: Optional[str] = None


class MappingResolver:
    """Resolve a header list to a concrete field -> header mapping.

    Tiers are tried in order and the first non-empty mapping wins:
    explicit caller mapping, saved template by name, saved template by
    header signature, alias auto-detection. Template tiers only run when a
    template store is configured and saved templates are enabled.
    """

    def __init__(
        self,
        field_aliases: dict[str, tuple[str, ...]],
        template_store: Optional[TemplateStore] = None,
    ):
        """Initialize mapping resolver.

        Args:
            field_aliases: Field catalog with header aliases
            template_store: Optional store for saved templates
        """
        self.field_aliases = field_aliases
        self.template_store = template_store

    def resolve(
        self,
        headers: list[str],
        mapping: Optional[ColumnMapping] = None,
        template_name: Optional[str] = None,
        use_saved_template: bool = True,
        save_template: bool = False,
    ) -> MappingResolution:
        """Resolve the mapping for a header list.

        Args:
            headers: Source header list
            mapping: Optional explicit mapping override
            template_name: Optional template name to look up or save under
            use_saved_template: Whether saved templates may be applied
            save_template: Whether to store the resolved mapping as a template

        Returns:
            MappingResolution

        Raises:
            ValidationError: If save_template is requested without a template store
        """
        signature = header_signature(headers)

        tiers: list[tuple[str, Callable[[], tuple[ColumnMapping, Optional[str]]]]] = [
            ("explicit", lambda: (self._explicit(headers, mapping), None)),
        ]
        if self.template_store is not None and use_saved_template:
            tiers.append(("template name", lambda: self._saved(headers, template_name, None)))
            tiers.append(("header signature", lambda: self._saved(headers, None, signature)))
        tiers.append(("auto-detect", lambda: (build_auto_mapping(headers, self.field_aliases), None)))

        resolved: ColumnMapping = {}
        template_applied = None
        for tier, strategy in tiers:
            resolved, template_applied = strategy()
            if resolved:
                logger.info("Resolved %d mapped fields via %s", len(resolved), tier)
                break

        template_saved = None
        if save_template:
            if self.template_store is None:
                raise ValidationError("Saving a template requires a template store")
            name = (template_name or "").strip() or f"template:{signature}"
            self.template_store.save_template(name, signature, resolved)
            template_saved = name

        return MappingResolution(
            mapping=resolved,
            template_applied=template_applied,
            template_saved=template_saved,
        )

    def _explicit(self, headers: list[str], mapping: Optional[ColumnMapping]) -> ColumnMapping:
        if not mapping:
            return {}
        return normalize_mapping(headers, mapping, self.field_aliases)

    def _saved(
        self, headers: list[str], name: Optional[str], signature: Optional[str]
    ) -> tuple[ColumnMapping, Optional[str]]:
        if name:
            template = self.template_store.find_by_name(name)
        elif signature is not None:
            template = self.template_store.find_by_signature(signature)
        else:
            template = None

        if template is None:
            return {}, None
        return normalize_mapping(headers, template.mapping, self.field_aliases), template.name
