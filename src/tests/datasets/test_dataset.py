import json
from typing import Any, Dict, List
from unittest.mock import MagicMock

import pytest

from tracelog.data.dataset_item import DatasetItem
from tracelog.datasets import Dataset
from tracelog.exceptions import TracelogAPIError
from tracelog.tracer.client import Tracelog

STORED_ITEM = {
    "id": "item-1",
    "input": {"question": "What is 2+2?"},
    "expected_output": {"answer": "4"},
    "created_at": "2024-01-01T00:00:00Z",
    "source": "sdk",
}


def _page(items: List[Dict[str, Any]]) -> Dict[str, Any]:
    return {"content": items, "page": 1, "size": len(items), "total": len(items)}


@pytest.fixture
def dataset(client: Tracelog, mock_api_client: MagicMock) -> Dataset:
    mock_api_client.get_dataset_by_name.return_value = {
        "id": "ds-1",
        "name": "qa",
        "description": "math questions",
    }
    mock_api_client.get_dataset_items.return_value = _page([STORED_ITEM])
    return client.get_dataset("qa")


def _inserted(api: MagicMock) -> List[Dict[str, Any]]:
    return [item for c in api.insert_dataset_items.call_args_list for item in c.args[1]]


def test_get_dataset_loads_existing_items(dataset: Dataset):
    assert dataset.name == "qa"
    assert dataset.dataset_id == "ds-1"
    assert dataset.description == "math questions"
    assert len(dataset) == 1


def test_insert_new_items(dataset: Dataset, mock_api_client: MagicMock):
    dataset.insert(
        [
            {"input": {"question": "What is 3+3?"}, "expected_output": {"answer": "6"}},
            DatasetItem(input={"question": "What is 1+1?"}, expected_output={"answer": "2"}),
        ]
    )

    mock_api_client.insert_dataset_items.assert_called_once()
    assert mock_api_client.insert_dataset_items.call_args.args[0] == "qa"
    inserted = _inserted(mock_api_client)
    assert [item["input"]["question"] for item in inserted] == [
        "What is 3+3?",
        "What is 1+1?",
    ]
    assert all("id" in item for item in inserted)
    assert len(dataset) == 3


def test_insert_skips_items_already_stored(dataset: Dataset, mock_api_client: MagicMock):
    dataset.insert(
        [{"input": {"question": "What is 2+2?"}, "expected_output": {"answer": "4"}}]
    )

    mock_api_client.insert_dataset_items.assert_not_called()
    assert len(dataset) == 1


def test_insert_skips_duplicates_within_call(dataset: Dataset, mock_api_client: MagicMock):
    item = {"input": "same", "expected_output": "same"}
    dataset.insert([item, dict(item), DatasetItem(**item)])

    assert len(_inserted(mock_api_client)) == 1


def test_insert_twice_is_idempotent(dataset: Dataset, mock_api_client: MagicMock):
    items = [{"input": "a"}, {"input": "b"}]
    dataset.insert(items)
    dataset.insert(items)

    assert len(_inserted(mock_api_client)) == 2


def test_metadata_is_part_of_identity(dataset: Dataset, mock_api_client: MagicMock):
    dataset.insert(
        [
            {"input": "a", "metadata": {"split": "train"}},
            {"input": "a", "metadata": {"split": "test"}},
        ]
    )

    assert len(_inserted(mock_api_client)) == 2


def test_insert_in_batches(dataset: Dataset, mock_api_client: MagicMock):
    dataset.insert([{"input": i} for i in range(2500)])

    sizes = [len(c.args[1]) for c in mock_api_client.insert_dataset_items.call_args_list]
    assert sizes == [1000, 1000, 500]


def test_delete_allows_reinsert(dataset: Dataset, mock_api_client: MagicMock):
    dataset.delete(["item-1"])

    mock_api_client.delete_dataset_items.assert_called_once_with(["item-1"])
    assert len(dataset) == 0

    dataset.insert(
        [{"input": {"question": "What is 2+2?"}, "expected_output": {"answer": "4"}}]
    )
    assert len(_inserted(mock_api_client)) == 1


def test_clear_deletes_every_item(dataset: Dataset, mock_api_client: MagicMock):
    dataset.clear()

    mock_api_client.delete_dataset_items.assert_called_once_with(["item-1"])
    assert len(dataset) == 0


def test_get_items_paginates(client: Tracelog, mock_api_client: MagicMock):
    pages = {
        1: _page([{"id": f"i{n}", "input": n} for n in range(100)]),
        2: _page([{"id": f"j{n}", "input": 100 + n} for n in range(5)]),
    }
    mock_api_client.get_dataset_items.side_effect = (
        lambda dataset_id, page=1, size=100: pages[page]
    )
    dataset = Dataset(name="big", description=None, dataset_id="ds-2", client=client)

    items = dataset.get_items()

    assert len(items) == 105
    assert [c.kwargs["page"] for c in mock_api_client.get_dataset_items.call_args_list] == [
        1,
        2,
    ]


def test_get_items_sample(client: Tracelog, mock_api_client: MagicMock):
    mock_api_client.get_dataset_items.return_value = _page(
        [{"id": f"i{n}", "input": n} for n in range(10)]
    )
    dataset = Dataset(name="d", description=None, dataset_id="ds-3", client=client)

    sample = dataset.get_items(nb_samples=3)

    assert len(sample) == 3
    assert len({item.id for item in sample}) == 3
    assert len(dataset.get_items(nb_samples=50)) == 10


def test_get_items_empty_dataset(client: Tracelog, mock_api_client: MagicMock):
    mock_api_client.get_dataset_items.return_value = None
    dataset = Dataset(name="empty", description=None, dataset_id="ds-4", client=client)

    assert dataset.get_items() == []


def test_insert_from_json(dataset: Dataset, mock_api_client: MagicMock, tmp_path):
    path = tmp_path / "items.json"
    path.write_text(
        json.dumps(
            [
                {"question": "Capital of France?", "answer": "Paris", "notes": "x"},
                {"question": "Capital of Spain?", "answer": "Madrid", "notes": "y"},
            ]
        )
    )

    dataset.insert_from_json(
        str(path),
        keys_mapping={"question": "input", "answer": "expected_output"},
        ignore_keys=["notes"],
    )

    inserted = _inserted(mock_api_client)
    assert [(item["input"], item["expected_output"]) for item in inserted] == [
        ("Capital of France?", "Paris"),
        ("Capital of Spain?", "Madrid"),
    ]
    assert all("notes" not in item for item in inserted)


def test_insert_from_json_requires_list(dataset: Dataset, tmp_path):
    path = tmp_path / "items.json"
    path.write_text(json.dumps({"input": "a"}))

    with pytest.raises(ValueError):
        dataset.insert_from_json(str(path))


def test_to_json(dataset: Dataset):
    (item,) = json.loads(dataset.to_json())

    assert item["id"] == "item-1"
    assert item["input"] == {"question": "What is 2+2?"}
    assert "created_at" not in item


def test_failed_insert_can_be_retried(dataset: Dataset, mock_api_client: MagicMock):
    mock_api_client.insert_dataset_items.side_effect = [
        TracelogAPIError(503, "unavailable", None),
        None,
    ]
    item = {"input": "retry me"}

    with pytest.raises(TracelogAPIError):
        dataset.insert([item])
    assert len(dataset) == 1

    dataset.insert([item])

    assert mock_api_client.insert_dataset_items.call_count == 2
    assert len(dataset) == 2


def test_failed_batch_keeps_earlier_batches(dataset: Dataset, mock_api_client: MagicMock):
    mock_api_client.insert_dataset_items.side_effect = [
        None,
        TracelogAPIError(503, "unavailable", None),
    ]

    with pytest.raises(TracelogAPIError):
        dataset.insert([{"input": i} for i in range(1500)])

    assert len(dataset) == 1 + 1000
