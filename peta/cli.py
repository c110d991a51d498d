from __future__ import annotations

import sys
from pathlib import Path
from typing import Optional

import click

from peta.errors import StorageWriteError
from peta.http_client import RequestsTransport, execute_request
from peta.logging_setup import setup_file_logging
from peta.storage.config import load_config
from peta.storage.paths import log_path, requests_path
from peta.storage.requests import load_requests, save_requests
from peta.views import render_detail, render_list, render_response


@click.group(invoke_without_command=True)
@click.option(
    "--data-dir",
    type=click.Path(file_okay=False, path_type=Path),
    default=None,
    help="Directory holding saved requests (default: ~/.local/share/peta).",
)
@click.option("--log-level", default=None, help="Log level for the log file.")
@click.pass_context
def main(ctx: click.Context, data_dir: Optional[Path], log_level: Optional[str]) -> None:
    """Manage and run saved HTTP requests. Without a command, start the TUI."""
    config = load_config()
    setup_file_logging(log_path(data_dir), log_level or config.log_level)
    ctx.obj = {"store_path": requests_path(data_dir), "config": config}

    if ctx.invoked_subcommand is None:
        from peta.app import PetaApp

        PetaApp(store_path=ctx.obj["store_path"], config=config).run()


@main.command("list")
@click.pass_obj
def list_command(obj: dict) -> None:
    """Print the saved requests."""
    for line in render_list(load_requests(obj["store_path"])):
        click.echo(line)


@main.command("show")
@click.argument("number", type=int)
@click.pass_obj
def show_command(obj: dict, number: int) -> None:
    """Print the request at NUMBER (as shown by `peta list`)."""
    requests = load_requests(obj["store_path"])
    request = _pick(requests, number)
    for line in render_detail(request):
        click.echo(line)


@main.command("run")
@click.argument("number", type=int)
@click.pass_obj
def run_command(obj: dict, number: int) -> None:
    """Execute the request at NUMBER and print the raw response."""
    store_path = obj["store_path"]
    requests = load_requests(store_path)
    request = _pick(requests, number)
    click.echo(f"Executing request: {request.name}", err=True)
    request.response = execute_request(
        request, RequestsTransport(timeout=obj["config"].timeout)
    )
    try:
        save_requests(requests, store_path)
    except StorageWriteError as exc:
        click.echo(f"warning: {exc}", err=True)
    for line in render_response(request.response):
        click.echo(line)
    if request.response.error:
        sys.exit(1)


def _pick(requests, number: int):
    if not 1 <= number <= len(requests):
        raise click.BadParameter(
            f"no request numbered {number} (have {len(requests)})",
            param_hint="NUMBER",
        )
    return requests[number - 1]


if __name__ == "__main__":
    main()
