"""Typer application and CLI entry point for specmodel.

The CLI is thin wiring over :mod:`specmodel.library`: every sub-command
loads a document, runs one library operation, and prints the result.

Sub-commands:

* ``validate SOURCE`` -- run the validation rules and list the problems.
* ``convert SOURCE --to json|yaml`` -- read and re-serialise a document.
* ``resolve SOURCE PATH`` -- print the node at a node path.
* ``paths SOURCE`` -- list the path of every node in the document.
* ``config show|set|severity|reset`` -- view and change the global config file.

:func:`main` is the console-script entry point declared in
``pyproject.toml``. :class:`~specmodel.exceptions.SpecModelError` instances
end the process with the error's ``exit_code``.
"""

from __future__ import annotations

import asyncio
import logging
import signal
import sys
from typing import Any, NoReturn, Optional

import typer

from specmodel import __version__
from specmodel.exceptions import SpecModelError
from specmodel.exit_codes import EXIT_GENERIC_FAILURE, EXIT_INVALID_USAGE, EXIT_PROBLEMS_FOUND
from specmodel.models import ValidationProblemSeverity
from specmodel.output import OutputFormat, OutputManager, get_output, set_output

app = typer.Typer(
    name="specmodel",
    help="Read, validate and transform OpenAPI 2/3 and AsyncAPI 2 documents.",
    no_args_is_help=True,
    add_completion=False,
    rich_markup_mode="rich",
)


def _version_callback(value: bool) -> None:
    if value:
        typer.echo(f"specmodel {__version__}")
        raise typer.Exit()


@app.callback()
def main_callback(
    ctx: typer.Context,
    version: bool = typer.Option(
        False, "--version", callback=_version_callback, is_eager=True, help="Show version and exit."
    ),
    json_output: bool = typer.Option(False, "--json", help="JSON output format."),
    plain_output: bool = typer.Option(False, "--plain", help="Plain text output."),
    no_color: bool = typer.Option(False, "--no-color", help="Disable color output."),
    quiet: bool = typer.Option(False, "--quiet", "-q", help="Suppress non-essential output."),
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Enable debug output."),
) -> None:
    """Install the output manager and resolve configuration before any sub-command."""
    from specmodel.config import resolve_config

    cli_format = "json" if json_output else "plain" if plain_output else None
    try:
        config = resolve_config(cli_format=cli_format)
    except SpecModelError as exc:
        set_output(OutputManager(no_color=no_color))
        _fail(exc)
    try:
        fmt = OutputFormat(config.output.format)
    except ValueError:
        fmt = OutputFormat.AUTO

    set_output(OutputManager(format=fmt, no_color=no_color, quiet=quiet, verbose=verbose))
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(levelname)s %(name)s: %(message)s",
        stream=sys.stderr,
    )

    ctx.ensure_object(dict)
    ctx.obj["config"] = config


def _fail(exc: SpecModelError) -> NoReturn:
    get_output().error(str(exc))
    raise typer.Exit(code=exc.exit_code)


def _load(source: str) -> Any:
    from specmodel import library
    from specmodel.parser import load_spec

    try:
        return library.read_document(load_spec(source))
    except SpecModelError as exc:
        _fail(exc)


@app.command("validate")
def validate_command(
    ctx: typer.Context,
    source: str = typer.Argument(..., help="File path, URL, or '-' for stdin."),
    fail_on: ValidationProblemSeverity = typer.Option(
        ValidationProblemSeverity.LOW,
        "--fail-on",
        help="Exit non-zero when a problem at or above this severity is found.",
    ),
    disable: Optional[list[str]] = typer.Option(
        None, "--disable", "-d", help="Rule code to skip (repeatable)."
    ),
    remote: Optional[bool] = typer.Option(
        None, "--remote/--no-remote", help="Check that external $ref URLs can be fetched."
    ),
) -> None:
    """Validate a document and list the problems found.

    Example::

        specmodel validate openapi.yaml
        specmodel --json validate asyncapi.json --fail-on high
    """
    from specmodel import library
    from specmodel.validation.extensions import RemoteReferenceValidator

    config = ctx.obj["config"].validation
    if disable:
        config = config.model_copy(update={"disabled_rules": [*config.disabled_rules, *disable]})
    check_remote = config.resolve_remote_refs if remote is None else remote

    document = _load(source)
    extensions = [RemoteReferenceValidator(timeout=config.remote_timeout)] if check_remote else []
    problems = asyncio.run(library.validate_document(document, extensions=extensions, config=config))

    output = get_output()
    if not problems:
        output.success("No problems found.")
        if output.format == OutputFormat.JSON:
            output.print_problems(problems)
        return
    output.print_problems(problems)
    if any(p.severity.rank >= fail_on.rank for p in problems):
        raise typer.Exit(code=EXIT_PROBLEMS_FOUND)


@app.command("convert")
def convert_command(
    source: str = typer.Argument(..., help="File path, URL, or '-' for stdin."),
    to: str = typer.Option("json", "--to", "-t", help="Output format: json or yaml."),
) -> None:
    """Read a document and write it back out as JSON or YAML.

    Example::

        specmodel convert swagger.yaml --to json > swagger.json
    """
    from specmodel import library
    from specmodel.parser.loader import FORMATS, stringify

    if to not in FORMATS:
        get_output().error(f"Unknown format '{to}'. Choose one of: {', '.join(FORMATS)}")
        raise typer.Exit(code=EXIT_INVALID_USAGE)
    document = _load(source)
    get_output().print_document(stringify(library.write_node(document), to), to)


@app.command("resolve")
def resolve_command(
    source: str = typer.Argument(..., help="File path, URL, or '-' for stdin."),
    path: str = typer.Argument(..., help="Node path, e.g. \"/components/schemas['Pet']\"."),
) -> None:
    """Print the node at PATH.

    Example::

        specmodel resolve openapi.json "/paths['/pets']/get"
    """
    from specmodel import library
    from specmodel.parser.loader import stringify

    document = _load(source)
    try:
        node = library.resolve_node_path(path, document)
    except SpecModelError as exc:
        _fail(exc)
    get_output().debug(f"{path} is a '{node.kind}' node")
    get_output().print_document(stringify(library.write_node(node), "json"))


@app.command("paths")
def paths_command(
    source: str = typer.Argument(..., help="File path, URL, or '-' for stdin."),
) -> None:
    """List the node path and kind of every node in a document."""
    document = _load(source)
    rows = [[str(node.path()), node.kind] for node in document.all_nodes()]
    get_output().print_table(["path", "kind"], rows, title=f"Nodes ({len(rows)})")


config_app = typer.Typer(no_args_is_help=True)
app.add_typer(config_app, name="config", help="View and change the global configuration.")


@config_app.command("show")
def config_show() -> None:
    """Show the global configuration file's effective contents.

    Example::

        specmodel config show
    """
    from specmodel.config import get_config_dir, load_global_config
    from specmodel.parser.loader import stringify

    try:
        config = load_global_config()
    except SpecModelError as exc:
        _fail(exc)
    get_output().info(f"Config directory: {get_config_dir()}")
    get_output().print_document(stringify(config.model_dump(mode="json"), "json"))


@config_app.command("set")
def config_set(
    key: str = typer.Argument(..., help="Dotted key, e.g. 'validation.remote_timeout'."),
    value: str = typer.Argument(..., help="New value. Lists are comma separated."),
) -> None:
    """Set one global configuration value.

    The value is coerced to the type of the current setting and the result
    is validated before it is saved.

    Example::

        specmodel config set output.format plain
        specmodel config set validation.disabled_rules INF-003,ID-001
    """
    from pydantic import ValidationError

    from specmodel.config import load_global_config, save_global_config
    from specmodel.models import GlobalConfig

    try:
        data = load_global_config().model_dump(mode="json")
    except SpecModelError as exc:
        _fail(exc)

    *parents, final_key = key.split(".")
    target = data
    for part in parents:
        if not isinstance(target.get(part), dict):
            get_output().error(f"Invalid config key: {key}")
            raise typer.Exit(code=EXIT_INVALID_USAGE)
        target = target[part]
    if final_key not in target or isinstance(target[final_key], dict):
        get_output().error(f"Unknown config key: {key}")
        raise typer.Exit(code=EXIT_INVALID_USAGE)

    current = target[final_key]
    if isinstance(current, bool):
        coerced: Any = value.lower() in ("true", "1", "yes")
    elif isinstance(current, list):
        coerced = [item.strip() for item in value.split(",") if item.strip()]
    else:
        coerced = value
    target[final_key] = coerced

    try:
        config = GlobalConfig.model_validate(data)
    except ValidationError as exc:
        get_output().error(f"Invalid value for {key}: {exc.errors()[0]['msg']}")
        raise typer.Exit(code=EXIT_INVALID_USAGE) from None
    save_global_config(config)
    get_output().success(f"Set {key} = {coerced}")


@config_app.command("severity")
def config_severity(
    code: str = typer.Argument(..., help="Rule code, e.g. INF-003."),
    level: ValidationProblemSeverity = typer.Argument(
        ..., help="New severity; 'ignore' silences the rule."
    ),
) -> None:
    """Override the severity of one validation rule.

    Example::

        specmodel config severity INF-003 ignore
    """
    from specmodel.config import load_global_config, save_global_config

    try:
        config = load_global_config()
    except SpecModelError as exc:
        _fail(exc)
    config.validation.severity_overrides[code] = level
    save_global_config(config)
    get_output().success(f"{code} is now reported as {level.value}")


@config_app.command("reset")
def config_reset(
    yes: bool = typer.Option(False, "--yes", "-y", help="Do not ask for confirmation."),
) -> None:
    """Reset the global configuration to defaults."""
    from specmodel.config import save_global_config
    from specmodel.models import GlobalConfig

    if not yes and not typer.confirm("Reset all config to defaults?"):
        get_output().info("Cancelled.")
        raise typer.Exit()
    save_global_config(GlobalConfig())
    get_output().success("Configuration reset to defaults.")


def _setup_signal_handlers() -> None:
    def _handler(signum: int, frame: Any) -> None:  # noqa: ANN401
        sys.stderr.write("\nCancelled.\n")
        sys.exit(130)

    signal.signal(signal.SIGINT, _handler)


def main() -> None:
    """Entry point of the ``specmodel`` console script.

    Raises:
        SystemExit: Always raised (either by Typer or explicitly).
    """
    from specmodel.output import error

    _setup_signal_handlers()
    try:
        app()
    except SystemExit:
        raise
    except SpecModelError as exc:
        error(str(exc))
        sys.exit(exc.exit_code)
    except KeyboardInterrupt:
        sys.stderr.write("\nCancelled.\n")
        sys.exit(130)
    except Exception as exc:  # noqa: BLE001
        error(f"Unexpected error: {exc}")
        sys.exit(EXIT_GENERIC_FAILURE)
