import io
import os
import sys
from pathlib import Path
from typing import Optional

import typer
from rattler import Platform
from rich.console import Console
from rich.text import Text
from typing_extensions import Annotated

from lockview._src.constants import FROZEN_ENV_VAR, LOCKED_ENV_VAR, SortBy
from lockview._src.exceptions import LockviewError
from lockview._src.inventory import list_packages
from lockview._src.lock import lock_file_usage
from lockview._src.log import setup_logging
from lockview._src.present import TableStyle, json_packages, print_packages_as_table, sort_packages
from lockview._src.workspace import Workspace


app = typer.Typer(
    add_completion=False,
    no_args_is_help=True,
    rich_markup_mode="rich",
    context_settings={"help_option_names": ["-h", "--help"]},
)

err_console = Console(stderr=True)


def _platform_callback(value: Optional[str]):
    if value is None:
        return None
    try:
        return str(Platform(value))
    except Exception as err:
        raise typer.BadParameter(f"'{value}' is not a known platform: {err}") from err


@app.callback()
def main(
    verbose: Annotated[bool, typer.Option(
        "--verbose", "-v",
        help="show debug logging"
    )] = False,
):
    """Inspect the packages a pixi lock file pins"""
    setup_logging(verbose)


@app.command("list")
def list_command(
    regex: Annotated[Optional[str], typer.Argument(
        help="List only packages matching a regular expression"
    )] = None,
    platform: Annotated[Optional[str], typer.Option(
        callback=_platform_callback,
        help="The platform to list packages for. Defaults to the current platform."
    )] = None,
    json_output: Annotated[bool, typer.Option(
        "--json",
        help="Whether to output in json format"
    )] = False,
    json_pretty: Annotated[bool, typer.Option(
        help="Whether to output in pretty json format"
    )] = False,
    sort_by: Annotated[SortBy, typer.Option(
        help="Sorting strategy"
    )] = SortBy.NAME,
    environment: Annotated[Optional[str], typer.Option(
        "--environment", "-e",
        help="The environment to list packages for. Defaults to the default environment."
    )] = None,
    explicit: Annotated[bool, typer.Option(
        "--explicit", "-x",
        help="Only list packages that are explicitly defined in the workspace."
    )] = False,
    frozen: Annotated[bool, typer.Option(
        envvar=FROZEN_ENV_VAR,
        rich_help_panel="Update Options",
        help="Use the lock file as is, without checking it against the manifest"
    )] = False,
    locked: Annotated[bool, typer.Option(
        envvar=LOCKED_ENV_VAR,
        rich_help_panel="Update Options",
        help="Abort when the lock file isn't up-to-date with the manifest"
    )] = False,
    no_install: Annotated[bool, typer.Option(
        rich_help_panel="Update Options",
        help="Don't look at installed wheels to size pypi packages"
    )] = False,
    manifest_path: Annotated[Optional[Path], typer.Option(
        help="The path to pixi.toml, pyproject.toml, or the workspace directory"
    )] = None,
):
    """List the packages of the current workspace

    Highlighted packages are explicit dependencies.
    """
    try:
        usage = lock_file_usage(frozen=frozen, locked=locked)
        workspace = Workspace.locate(manifest_path)
        env = workspace.environment_from_name_or_env_var(environment)
        packages = list_packages(
            workspace,
            regex=regex,
            platform=platform,
            environment=env.name,
            explicit_only=explicit,
            no_install=no_install,
            lock_file_usage=usage,
        )
    except LockviewError as err:
        err_console.print(Text.assemble(("Error: ", "bold red"), err.msg))
        raise typer.Exit(code=1)

    packages = sort_packages(packages, sort_by)

    try:
        if json_output or json_pretty:
            print(json_packages(packages, json_pretty=json_pretty))
        else:
            if not env.is_default():
                err_console.print(Text.assemble("Environment: ", (env.name, "magenta")))
            print_packages_as_table(packages, Console(), TableStyle())
        sys.stdout.flush()
    except BrokenPipeError:
        # the reader went away, eg. `lockview list | head`
        _silence_stdout()
        raise typer.Exit(code=0)
    except OSError as err:
        err_console.print(Text.assemble(("Error: ", "bold red"), f"failed to write the package list: {err}"))
        raise typer.Exit(code=1)


def _silence_stdout():
    """Point stdout at devnull so the interpreter's last flush doesn't fail again"""
    try:
        fileno = sys.stdout.fileno()
    except io.UnsupportedOperation:
        # not backed by a file descriptor, nothing left to flush
        return
    devnull = os.open(os.devnull, os.O_WRONLY)
    os.dup2(devnull, fileno)
