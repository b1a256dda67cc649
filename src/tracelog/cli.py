#!/usr/bin/env python3

from pathlib import Path
from typing import List, Optional

import httpx
import typer
from dotenv import load_dotenv

from tracelog.logger import tracelog_logger
from tracelog.tracer.client import Tracelog
from tracelog.version import get_version

load_dotenv()

app = typer.Typer(no_args_is_help=True)


@app.command()
def version():
    """Show version info"""
    typer.echo(f"tracelog v{get_version()}")


@app.command()
def healthcheck(
    host: Optional[str] = typer.Option(None, help="Backend base URL"),
):
    """Check that the backend is reachable"""
    client = Tracelog(host=host)
    try:
        client.api_client.is_alive()
    except httpx.HTTPError as e:
        tracelog_logger.error(f"Backend unreachable: {e}")
        typer.echo("unhealthy")
        raise typer.Exit(code=1)
    finally:
        client.end()
    typer.echo("ok")


@app.command("dataset-push")
def dataset_push(
    dataset_name: str,
    file_path: str,
    description: Optional[str] = typer.Option(None, help="Dataset description"),
    map_key: List[str] = typer.Option(
        [], help="Rename a key before insertion, as old=new"
    ),
    ignore_key: List[str] = typer.Option([], help="Drop a key before insertion"),
    host: Optional[str] = typer.Option(None, help="Backend base URL"),
):
    """Insert the items of a JSON file into a dataset, creating it if needed"""
    if not Path(file_path).exists():
        tracelog_logger.error(f"Dataset file not found: {file_path}")
        raise typer.Exit(code=1)

    keys_mapping = {}
    for mapping in map_key:
        old, sep, new = mapping.partition("=")
        if not sep or not old or not new:
            tracelog_logger.error(f"Invalid key mapping: {mapping}")
            raise typer.Exit(code=2)
        keys_mapping[old] = new

    client = Tracelog(host=host)
    try:
        dataset = client.get_or_create_dataset(dataset_name, description)
        before = len(dataset)
        dataset.insert_from_json(
            file_path, keys_mapping=keys_mapping, ignore_keys=ignore_key
        )
    except (httpx.HTTPError, ValueError) as e:
        tracelog_logger.error(f"Failed to push dataset: {e}")
        raise typer.Exit(code=1)
    finally:
        client.end()
    typer.echo(f"Inserted {len(dataset) - before} item(s) into '{dataset_name}'")


if __name__ == "__main__":
    app()
