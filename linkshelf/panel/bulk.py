from __future__ import annotations

import logging
from dataclasses import dataclass
from pathlib import Path

import yaml

from linkshelf.panel.assigner import GroupAssigner
from linkshelf.panel.client import ResourceClient
from linkshelf.panel.collection import LinkCollection
from linkshelf.panel.common import settle
from linkshelf.panel.selection import SelectionSet

logger = logging.getLogger(__name__)

EXPORT_FILENAME = "links.yaml"
EXPORT_MEDIA_TYPE = "text/plain"
IMPORT_EXTENSIONS = (".yaml", ".yml")
IMPORTABLE_FIELDS = ("name", "display_name", "url", "description", "logo", "priority")
TEXT_FIELDS = ("name", "display_name", "url", "description", "logo")


@dataclass
class Download:
    filename: str
    media_type: str
    content: str


def save_download(download: Download, directory: str | Path) -> Path:
    target = Path(directory) / download.filename
    target.write_text(download.content, encoding="utf-8")
    return target


def parse_records(text: str) -> list[dict]:
    """Read every record out of a YAML document stream.

    A document may hold a single mapping or a list of mappings; exports hold
    one mapping per document.
    """
    records: list[dict] = []
    for document in yaml.safe_load_all(text):
        candidates = document if isinstance(document, list) else [document]
        for candidate in candidates:
            if candidate is None:
                continue
            if not isinstance(candidate, dict):
                logger.warning("Skipping non-mapping import record: %r", candidate)
                continue
            records.append(candidate)
    return records


def import_payload(record: dict) -> dict:
    payload = {key: record[key] for key in IMPORTABLE_FIELDS if key in record}
    # YAML turns bare dates and numbers into non-string scalars.
    for key in TEXT_FIELDS:
        value = payload.get(key)
        if value is not None and not isinstance(value, str):
            payload[key] = str(value)
    return payload


class BulkActions:
    def __init__(
        self,
        client: ResourceClient,
        collection: LinkCollection,
        selection: SelectionSet,
        assigner: GroupAssigner,
    ):
        self.client = client
        self.collection = collection
        self.selection = selection
        self.assigner = assigner

    async def delete_selected(self) -> int:
        names = sorted(self.selection.names)
        if not names:
            return 0
        succeeded, _ = await settle(
            "Delete link", names, [self.client.delete_link(name) for name in names]
        )
        self.selection.clear()
        await self.collection.fetch()
        return len(succeeded)

    def export_selected(self) -> Download | None:
        if not self.collection.view.items:
            return None
        records = [link.as_dict() for link in self.selection.selected_links()]
        if not records:
            return None
        content = yaml.safe_dump_all(records, sort_keys=False, allow_unicode=True)
        return Download(EXPORT_FILENAME, EXPORT_MEDIA_TYPE, content)

    async def import_document(self, text: str) -> int:
        try:
            records = parse_records(text)
        except yaml.YAMLError as exc:
            logger.error("Failed to parse import document: %s", exc)
            return 0
        if not records:
            logger.info("Import document holds no link records")
            return 0

        payloads = [import_payload(record) for record in records]
        succeeded, _ = await settle(
            "Import link",
            [payload.get("name") or payload.get("url") or "?" for payload in payloads],
            [self.client.create_link(payload) for payload in payloads],
        )
        created = [link for _, link in succeeded]
        await self.assigner.assign_many(created)
        logger.info("Imported %d of %d links", len(created), len(payloads))
        return len(created)

    async def import_file(self, path: str | Path) -> int:
        path = Path(path)
        if path.suffix.lower() not in IMPORT_EXTENSIONS:
            raise ValueError(
                f"{path.name} is not a YAML file ({', '.join(IMPORT_EXTENSIONS)})"
            )
        return await self.import_document(path.read_text(encoding="utf-8"))
