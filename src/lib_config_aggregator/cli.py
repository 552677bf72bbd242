"""Command line front-end for ``lib_config_aggregator``.

Purpose
-------
Let operators check how configuration resolves across structured files and
the environment without writing Python.

Contents
--------
* :func:`cli` – root group; owns the ``--traceback`` switch.
* :func:`cli_info` – installed distribution metadata.
* :func:`cli_env_prefix` – canonical environment prefix for a slug.
* :func:`cli_read` – resolve configuration and print it as JSON.
* :func:`main` – console-script entry point returning an exit code.

System Role
-----------
Outermost layer. It talks only to the composition root
(:mod:`lib_config_aggregator.core`) and delegates exit codes and error
rendering to ``lib_cli_exit_tools``.
"""

from __future__ import annotations

import sys
from importlib import metadata
from pathlib import Path
from typing import Final, Optional, Sequence

import lib_cli_exit_tools
import rich_click as click

from .core import default_env_prefix as _default_env_prefix
from .core import read_config

PROG_NAME: Final[str] = "lib_config_aggregator"
CONTEXT: Final[dict[str, list[str]]] = {"help_option_names": ["-h", "--help"]}

# Characters of error output shown with and without --traceback.
_ERROR_LIMIT_SHORT: Final[int] = 500
_ERROR_LIMIT_FULL: Final[int] = 10_000

_INFO_FIELDS: Final[tuple[str, ...]] = ("Version", "Requires-Python", "Summary")


def _installed_version() -> str:
    try:
        return metadata.version(PROG_NAME)
    except metadata.PackageNotFoundError:
        return "0.0.0"


@click.group(help="Prioritised, cached configuration aggregator", context_settings=CONTEXT)
@click.version_option(
    version=_installed_version(),
    prog_name=PROG_NAME,
    message="lib_config_aggregator version %(version)s",
)
@click.option(
    "--traceback/--no-traceback",
    default=False,
    help="Print the full Python traceback when a command fails",
)
@click.pass_context
def cli(ctx: click.Context, traceback: bool) -> None:
    """Record the traceback preference on the context and on ``lib_cli_exit_tools.config``."""

    ctx.obj = {"traceback": traceback}
    _set_traceback(traceback, traceback)


@cli.command("info", context_settings=CONTEXT)
def cli_info() -> None:
    """Show name, version and Python requirement of the installed package."""

    try:
        meta = metadata.metadata(PROG_NAME)
    except metadata.PackageNotFoundError:
        click.echo(f"{PROG_NAME} (metadata unavailable)")
        return
    click.echo(meta.get("Name", PROG_NAME))
    for field in _INFO_FIELDS:
        value = meta.get(field)
        if value:
            click.echo(f"  {field:<16}: {value}")


@cli.command("env-prefix", context_settings=CONTEXT)
@click.argument("slug")
def cli_env_prefix(slug: str) -> None:
    """Print the environment variable prefix derived from SLUG.

    >>> from click.testing import CliRunner
    >>> CliRunner().invoke(cli, ["env-prefix", "config-kit"]).output.strip()
    'CONFIG_KIT'
    """

    click.echo(_default_env_prefix(slug))


@cli.command("read", context_settings=CONTEXT)
@click.option(
    "--file",
    "files",
    multiple=True,
    type=click.Path(path_type=Path, dir_okay=False),
    help="TOML, JSON or YAML file; later files win over earlier ones (repeatable)",
)
@click.option("--env-prefix", default=None, help="Also read environment variables with this prefix; they win over files")
@click.option("--uplevel", multiple=True, help="Table whose nested keys become top-level keys (repeatable)")
@click.option("--key", "keys", multiple=True, help="Only resolve this key (repeatable)")
@click.option("--indent", type=int, default=None, help="Indent JSON output by this many spaces")
@click.option("--provenance/--no-provenance", default=False, help="Add the winning source and priority per key")
def cli_read(
    files: tuple[Path, ...],
    env_prefix: Optional[str],
    uplevel: tuple[str, ...],
    keys: tuple[str, ...],
    indent: Optional[int],
    provenance: bool,
) -> None:
    """Resolve configuration from the given files and environment and print JSON."""

    snapshot = read_config(files=files, env_prefix=env_prefix, uplevel=uplevel, keys=keys or None)
    click.echo(snapshot.to_json(indent=indent, provenance=provenance))


def main(argv: Optional[Sequence[str]] = None, *, restore_traceback: bool = True) -> int:
    """Run the CLI and return its exit code.

    Errors are rendered by ``lib_cli_exit_tools``; with ``restore_traceback``
    the global traceback settings are reset afterwards so embedding callers
    (tests, notebooks) are not affected.
    """

    saved = (
        getattr(lib_cli_exit_tools.config, "traceback", False),
        getattr(lib_cli_exit_tools.config, "traceback_force_color", False),
    )
    try:
        return _run(argv)
    finally:
        if restore_traceback:
            _set_traceback(*saved)


def _run(argv: Optional[Sequence[str]]) -> int:
    try:
        return lib_cli_exit_tools.run_cli(cli, argv=None if argv is None else list(argv), prog_name=PROG_NAME)
    except BaseException as exc:  # noqa: BLE001 - rendered by lib_cli_exit_tools
        verbose = bool(lib_cli_exit_tools.config.traceback)
        lib_cli_exit_tools.print_exception_message(
            trace_back=verbose,
            length_limit=_ERROR_LIMIT_FULL if verbose else _ERROR_LIMIT_SHORT,
        )
        return lib_cli_exit_tools.get_system_exit_code(exc)


def _set_traceback(enabled: bool, force_color: bool) -> None:
    lib_cli_exit_tools.config.traceback = enabled
    lib_cli_exit_tools.config.traceback_force_color = force_color


if __name__ == "__main__":  # pragma: no cover - console entry point
    raise SystemExit(main(sys.argv[1:]))
