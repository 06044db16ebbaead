"""JSON-file persistence for saved column mapping templates."""

import json
import logging
import os
from datetime import datetime, UTC
from pathlib import Path
from typing import Any, Optional

from budgetit.domain.entities import ColumnMapping, MappingTemplate

logger = logging.getLogger(__name__)


def default_template_store_path() -> str:
    """Resolve the template store path.

    Checks the BUDGETIT_TEMPLATE_STORE environment variable, then defaults
    to ~/.budgetit/import-templates.json
    """
    store_path = os.environ.get("BUDGETIT_TEMPLATE_STORE")
    if store_path is None:
        store_path = str(Path.home() / ".budgetit" / "import-templates.json")
    return store_path


class TemplateStore:
    """Mapping templates saved in a JSON document.

    The document holds a "templates" list of
    {name, headerSignature, mapping, updatedAt} entries. A missing or
    malformed document reads as an empty store. There is no locking:
    concurrent writers from different processes race at the filesystem.
    """

    def __init__(self, store_path: str):
        """Initialize template store.

        Args:
            store_path: Path to the JSON document
        """
        self.store_path = Path(store_path)

    def list_templates(self) -> list[MappingTemplate]:
        """Load all well-formed templates, in stored order."""
        document = self._load_document()
        entries = document.get("templates") if isinstance(document, dict) else None
        if not isinstance(entries, list):
            return []

        templates = []
        for entry in entries:
            template = _entry_to_template(entry)
            if template is not None:
                templates.append(template)
        return templates

    def find_by_name(self, name: str) -> Optional[MappingTemplate]:
        """Get a template by exact name."""
        for template in self.list_templates():
            if template.name == name:
                return template
        return None

    def find_by_signature(self, header_signature: str) -> Optional[MappingTemplate]:
        """Get the first template saved for an exact header signature."""
        for template in self.list_templates():
            if template.header_signature == header_signature:
                return template
        return None

    def save_template(
        self, name: str, header_signature: str, mapping: ColumnMapping
    ) -> MappingTemplate:
        """Create or replace the template with this name.

        Returns:
            The saved template
        """
        template = MappingTemplate(
            name=name,
            header_signature=header_signature,
            mapping=dict(mapping),
            updated_at=datetime.now(UTC).isoformat(),
        )
        templates = [t for t in self.list_templates() if t.name != name]
        templates.append(template)

        document = {"templates": [_template_to_entry(t) for t in templates]}
        self.store_path.parent.mkdir(parents=True, exist_ok=True)
        self.store_path.write_text(json.dumps(document, indent=2) + "\n", encoding="utf-8")
        logger.info("Saved mapping template '%s' to %s", name, self.store_path)
        return template

    def _load_document(self) -> Any:
        if not self.store_path.exists():
            return {}
        try:
            return json.loads(self.store_path.read_text(encoding="utf-8"))
        except (OSError, UnicodeDecodeError, json.JSONDecodeError) as e:
            logger.warning("Ignoring unreadable template store %s: %s", self.store_path, e)
            return {}


def _entry_to_template(entry: Any) -> Optional[MappingTemplate]:
    if not isinstance(entry, dict):
        return None
    name = entry.get("name")
    signature = entry.get("headerSignature")
    mapping = entry.get("mapping")
    updated_at = entry.get("updatedAt")
    if not (
        isinstance(name, str)
        and isinstance(signature, str)
        and isinstance(mapping, dict)
        and isinstance(updated_at, str)
    ):
        return None
    return MappingTemplate(
        name=name,
        header_signature=signature,
        mapping={str(k): v for k, v in mapping.items() if isinstance(v, str)},
        updated_at=updated_at,
    )


def _template_to_entry(template: MappingTemplate) -> dict[str, Any]:
    return {
        "name": template.name,
        "headerSignature": template.header_signature,
        "mapping": template.mapping,
        "updatedAt": template.updated_at,
    }
