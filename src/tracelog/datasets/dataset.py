from __future__ import annotations

import json
import random
from typing import (
    TYPE_CHECKING,
    Any,
    Dict,
    Iterable,
    List,
    Optional,
    Sequence,
    Set,
    Tuple,
    Union,
)

from tracelog.constants import DATASET_ITEMS_BATCH_SIZE, DATASET_ITEMS_PAGE_SIZE
from tracelog.data.dataset_item import DatasetItem
from tracelog.logger import tracelog_logger
from tracelog.utils.serialize import safe_serialize

if TYPE_CHECKING:
    from tracelog.tracer.client import Tracelog

ItemLike = Union[DatasetItem, Dict[str, Any]]


class Dataset:
    """
    A named collection of input/expected-output items.

    Items are identified by content: inserting an item whose input, expected
    output and metadata match an item already in the dataset is a no-op.
    """

    __slots__ = ("name", "description", "dataset_id", "_client", "_hashes", "_id_to_hash")

    def __init__(
        self,
        name: str,
        description: Optional[str],
        dataset_id: str,
        client: Tracelog,
    ):
        self.name = name
        self.description = description
        self.dataset_id = dataset_id
        self._client = client
        self._hashes: Set[str] = set()
        self._id_to_hash: Dict[str, str] = {}

    def __str__(self) -> str:
        return f"Dataset(name={self.name}, id={self.dataset_id})"

    def __len__(self) -> int:
        return len(self._hashes)

    def sync_hashes(self) -> None:
        """Load content hashes of the items already stored on the backend."""
        self._hashes.clear()
        self._id_to_hash.clear()
        for item in self._fetch_all_items():
            content_hash = item.content_hash()
            self._hashes.add(content_hash)
            self._id_to_hash[item.id] = content_hash

    def insert(self, items: Sequence[ItemLike]) -> None:
        """
        Add items to the dataset. Duplicates, both of items already stored and
        within ``items`` itself, are skipped.
        """
        new_items: List[Tuple[DatasetItem, str]] = []
        seen: Set[str] = set()
        skipped = 0
        for raw in items:
            item = raw if isinstance(raw, DatasetItem) else DatasetItem.model_validate(raw)
            content_hash = item.content_hash()
            if content_hash in self._hashes or content_hash in seen:
                skipped += 1
                continue
            seen.add(content_hash)
            new_items.append((item, content_hash))

        if skipped:
            tracelog_logger.debug(
                f"Skipped {skipped} duplicate item(s) for dataset '{self.name}'"
            )

        for start in range(0, len(new_items), DATASET_ITEMS_BATCH_SIZE):
            batch = new_items[start : start + DATASET_ITEMS_BATCH_SIZE]
            tracelog_logger.debug(
                f"Inserting {len(batch)} item(s) into dataset '{self.name}'"
            )
            self._client.api_client.insert_dataset_items(
                self.name, [item.to_payload() for item, _ in batch]  # type: ignore[misc]
            )
            # only items the backend accepted count as present
            for item, content_hash in batch:
                self._hashes.add(content_hash)
                self._id_to_hash[item.id] = content_hash

    def delete(self, item_ids: Iterable[str]) -> None:
        ids = list(item_ids)
        for start in range(0, len(ids), DATASET_ITEMS_BATCH_SIZE):
            batch = ids[start : start + DATASET_ITEMS_BATCH_SIZE]
            self._client.api_client.delete_dataset_items(batch)
            for item_id in batch:
                content_hash = self._id_to_hash.pop(item_id, None)
                if content_hash is not None:
                    self._hashes.discard(content_hash)

    def clear(self) -> None:
        self.delete([item.id for item in self._fetch_all_items()])

    def get_items(self, nb_samples: Optional[int] = None) -> List[DatasetItem]:
        """
        Return the dataset items. With ``nb_samples``, a random sample of at
        most that many items is returned instead.
        """
        items = self._fetch_all_items()
        if nb_samples is not None and nb_samples < len(items):
            items = random.sample(items, nb_samples)
        return items

    def _fetch_all_items(self) -> List[DatasetItem]:
        items: List[DatasetItem] = []
        page = 1
        while True:
            response = self._client.api_client.get_dataset_items(
                self.dataset_id, page=page, size=DATASET_ITEMS_PAGE_SIZE
            )
            content = (response or {}).get("content", []) or []
            items.extend(DatasetItem.from_payload(raw) for raw in content)
            if len(content) < DATASET_ITEMS_PAGE_SIZE:
                break
            page += 1
        return items

    def insert_from_json(
        self,
        file_path: str,
        keys_mapping: Optional[Dict[str, str]] = None,
        ignore_keys: Optional[List[str]] = None,
    ) -> None:
        """
        Insert items read from a JSON file holding a list of objects.

        ``keys_mapping`` renames keys (e.g. ``{"question": "input"}``) and
        ``ignore_keys`` drops keys before the items are built.
        """
        with open(file_path, "r") as f:
            raw_items = json.load(f)

        if not isinstance(raw_items, list):
            raise ValueError(f"{file_path} must contain a JSON list of objects")

        keys_mapping = keys_mapping or {}
        ignore = set(ignore_keys or [])
        items = [
            {
                keys_mapping.get(key, key): value
                for key, value in raw.items()
                if key not in ignore
            }
            for raw in raw_items
        ]
        self.insert(items)

    def to_json(self) -> str:
        return safe_serialize([item.model_dump() for item in self._fetch_all_items()])
