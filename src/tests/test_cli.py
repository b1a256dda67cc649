import json
from unittest.mock import MagicMock, patch

import httpx
from typer.testing import CliRunner

from tracelog.cli import app
from tracelog.version import get_version

runner = CliRunner()


def test_version():
    result = runner.invoke(app, ["version"])

    assert result.exit_code == 0
    assert f"tracelog v{get_version()}" in result.output


def test_healthcheck_ok():
    with patch("tracelog.cli.Tracelog") as tracelog_cls:
        result = runner.invoke(app, ["healthcheck", "--host", "http://backend/api"])

    assert result.exit_code == 0
    assert "ok" in result.output
    tracelog_cls.assert_called_once_with(host="http://backend/api")
    tracelog_cls.return_value.api_client.is_alive.assert_called_once()
    tracelog_cls.return_value.end.assert_called_once()


def test_healthcheck_unreachable():
    with patch("tracelog.cli.Tracelog") as tracelog_cls:
        tracelog_cls.return_value.api_client.is_alive.side_effect = httpx.ConnectError(
            "connection refused"
        )
        result = runner.invoke(app, ["healthcheck"])

    assert result.exit_code == 1
    assert "unhealthy" in result.output


def test_dataset_push(tmp_path):
    path = tmp_path / "items.json"
    path.write_text(json.dumps([{"question": "q", "answer": "a", "notes": "n"}]))
    dataset = MagicMock()
    dataset.__len__.side_effect = [0, 1]

    with patch("tracelog.cli.Tracelog") as tracelog_cls:
        tracelog_cls.return_value.get_or_create_dataset.return_value = dataset
        result = runner.invoke(
            app,
            [
                "dataset-push",
                "qa",
                str(path),
                "--description",
                "questions",
                "--map-key",
                "question=input",
                "--map-key",
                "answer=expected_output",
                "--ignore-key",
                "notes",
            ],
        )

    assert result.exit_code == 0, result.output
    tracelog_cls.return_value.get_or_create_dataset.assert_called_once_with(
        "qa", "questions"
    )
    dataset.insert_from_json.assert_called_once_with(
        str(path),
        keys_mapping={"question": "input", "answer": "expected_output"},
        ignore_keys=["notes"],
    )
    assert "Inserted 1 item(s) into 'qa'" in result.output


def test_dataset_push_missing_file(tmp_path):
    with patch("tracelog.cli.Tracelog") as tracelog_cls:
        result = runner.invoke(app, ["dataset-push", "qa", str(tmp_path / "nope.json")])

    assert result.exit_code == 1
    tracelog_cls.assert_not_called()


def test_dataset_push_invalid_mapping(tmp_path):
    path = tmp_path / "items.json"
    path.write_text("[]")

    with patch("tracelog.cli.Tracelog"):
        result = runner.invoke(
            app, ["dataset-push", "qa", str(path), "--map-key", "question"]
        )

    assert result.exit_code == 2
