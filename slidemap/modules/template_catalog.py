"""
Template Catalog - the set of templates a user can pick from.

The catalog directory holds an `index.json` listing the templates:

    [
      {"id": "ocean", "name": "Ocean", "coverUrl": "covers/ocean.png",
       "file": "ocean.json"},
      ...
    ]

Each entry either points at a template JSON file (relative to the catalog
directory) or embeds `style`/`layouts` inline.
"""

import json
import logging
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Dict, List, Optional, Union

from .. import config
from .errors import InputFileError, TemplateNotFoundError
from .template_model import Template

logger = logging.getLogger(__name__)

INDEX_FILE = "index.json"


@dataclass
class CatalogEntry:
    """One selectable template."""
    id: str
    name: str
    cover_url: Optional[str] = None
    file: Optional[str] = None
    inline: Optional[Dict[str, Any]] = None

    def cover_path(self, directory: Path) -> Optional[Path]:
        """Local cover image path, if the cover is not a remote URL."""
        if not self.cover_url or self.cover_url.startswith(("http://", "https://")):
            return None
        return directory / self.cover_url.lstrip("/")


class TemplateCatalog:
    """
    Catalog of templates loaded from an index file.

    Entries that cannot be read are logged and skipped.
    """

    def __init__(self, directory: Union[str, Path] = None):
        """
        Initialize the catalog.

        Args:
            directory: Directory containing index.json (package templates by default)
        """
        self.directory = Path(directory) if directory else config.TEMPLATES_DIR
        self._entries: Dict[str, CatalogEntry] = {}
        self._cache: Dict[str, Template] = {}
        self._load_index()

    def _load_index(self) -> None:
        index_path = self.directory / INDEX_FILE
        try:
            with open(index_path, "r", encoding="utf-8") as f:
                raw = json.load(f)
        except (OSError, json.JSONDecodeError) as e:
            logger.warning(f"Could not load template index {index_path}: {e}")
            return

        if not isinstance(raw, list):
            logger.warning(f"Template index {index_path} is not a list")
            return

        for i, item in enumerate(raw):
            entry = self._parse_entry(item)
            if entry is None:
                logger.warning(f"Skipping template index entry {i}: missing id")
                continue
            self._entries[entry.id] = entry

        logger.info(f"Loaded catalog: {len(self._entries)} templates from {self.directory}")

    def _parse_entry(self, item: Any) -> Optional[CatalogEntry]:
        if not isinstance(item, dict) or not isinstance(item.get("id"), str):
            return None
        inline = None
        if "layouts" in item:
            inline = {k: v for k, v in item.items() if k in ("name", "style", "layouts")}
        return CatalogEntry(
            id=item["id"],
            name=item.get("name") if isinstance(item.get("name"), str) else item["id"],
            cover_url=item.get("coverUrl") if isinstance(item.get("coverUrl"), str) else None,
            file=item.get("file") if isinstance(item.get("file"), str) else None,
            inline=inline,
        )

    def list(self) -> List[CatalogEntry]:
        """Entries in index order."""
        return list(self._entries.values())

    def ids(self) -> List[str]:
        return list(self._entries)

    def entry(self, template_id: str) -> CatalogEntry:
        if template_id not in self._entries:
            raise TemplateNotFoundError(template_id)
        return self._entries[template_id]

    def get(self, template_id: str) -> Template:
        """
        Load a template by id.

        Raises:
            TemplateNotFoundError: if the id is unknown or its file is unreadable
        """
        if template_id in self._cache:
            return self._cache[template_id]

        entry = self.entry(template_id)
        if entry.inline is not None:
            raw = dict(entry.inline)
        elif entry.file:
            raw = self._read_template_file(entry)
        else:
            logger.error(f"Template '{template_id}' has neither a file nor inline layouts")
            raise TemplateNotFoundError(template_id)

        raw.setdefault("name", entry.name)
        template = Template.from_dict(raw)
        self._cache[template_id] = template
        return template

    def _read_template_file(self, entry: CatalogEntry) -> Dict[str, Any]:
        path = self.directory / entry.file
        try:
            with open(path, "r", encoding="utf-8") as f:
                raw = json.load(f)
        except (OSError, json.JSONDecodeError) as e:
            logger.error(f"Could not read template '{entry.id}' from {path}: {e}")
            raise TemplateNotFoundError(entry.id) from e
        if not isinstance(raw, dict):
            logger.error(f"Template file {path} is not an object")
            raise TemplateNotFoundError(entry.id)
        return raw

    def default(self) -> Template:
        """The first template in the index."""
        if not self._entries:
            raise TemplateNotFoundError("<default>")
        return self.get(next(iter(self._entries)))

    def __len__(self) -> int:
        return len(self._entries)

    def __contains__(self, template_id: str) -> bool:
        return template_id in self._entries

    def __repr__(self) -> str:
        return f"TemplateCatalog({self.directory}, {len(self._entries)} templates)"


def load_template_file(path: Union[str, Path]) -> Template:
    """
    Load a standalone template JSON file.

    Raises:
        InputFileError: if the file is missing or not valid JSON
    """
    try:
        with open(path, "r", encoding="utf-8") as f:
            raw = json.load(f)
    except (OSError, ValueError) as e:
        raise InputFileError(f"Cannot read template {path}: {e}") from e
    return Template.from_dict(raw)
