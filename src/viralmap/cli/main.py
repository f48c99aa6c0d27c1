"""
Main CLI entry point for viralmap.

Reads YAML or JSON documents into UberDicts and exposes path reads and
writes, recursive merge, recursive fetch and prototype matching on them.
"""

import collections.abc as _abc
import logging as _logging
import os as _os
import pathlib as _pathlib
import sys as _sys
import typing as _typing

import click as _click
import rich.console as _rich_console
import rich.logging as _rich_logging
import rich.syntax as _rich_syntax
import yaml as _yaml

import viralmap
import viralmap.capabilities as capabilities
import viralmap.config as config
import viralmap.core.containers as containers
import viralmap.errors as errors
import viralmap.loaders as loaders

_logger = _logging.getLogger(__name__)

# Custom Click context settings for better help formatting
CONTEXT_SETTINGS: dict[str, _typing.Any] = {
    "help_option_names": ["-h", "--help"],
    "max_content_width": 100,
}

_MISSING = object()


def _configure_logging(level: str) -> None:
    """Send log records to stderr through rich."""
    handler = _rich_logging.RichHandler(
        console=_rich_console.Console(stderr=True),
        show_path=False,
    )
    _logging.basicConfig(level=level, format="%(message)s", handlers=[handler], force=True)


def _should_use_color(cli_flag: bool | None) -> tuple[bool, bool]:
    """Determine whether to use color output.

    Priority:
    1. CLI flag (--color / --no-color) if specified
    2. NO_COLOR env var (if set, disable color)
    3. Auto-detect: color if stdout is a TTY

    Returns:
        Tuple of (color_enabled, force_color).
        force_color is True when color was explicitly requested.
    """
    if cli_flag is not None:
        return (cli_flag, cli_flag)
    if _os.environ.get("NO_COLOR") is not None:
        return (False, False)
    return (_sys.stdout.isatty(), False)


def _print_yaml(yaml_text: str, *, color: bool = True, force_color: bool = False) -> None:
    """Print YAML text, optionally with syntax highlighting."""
    if not color:
        _click.echo(yaml_text, nl=False)
        return

    # force_terminal/no_color/color_system override the environment when
    # color was explicitly requested.
    console = _rich_console.Console(
        force_terminal=force_color,
        no_color=False if force_color else None,
        color_system="truecolor" if force_color else "auto",
    )
    syntax = _rich_syntax.Syntax(
        yaml_text.rstrip("\n"),
        "yaml",
        theme="monokai",
        background_color="default",
    )
    console.print(syntax)


def _print_value(ctx: _click.Context, value: _typing.Any, *, as_json: bool) -> None:
    """Print a scalar as text, or a container as YAML (or JSON)."""
    if as_json:
        _click.echo(loaders.dump_json(value))
        return
    if isinstance(value, (_abc.Mapping, list)):
        _print_yaml(loaders.dump_yaml(value), color=ctx.obj["color"], force_color=ctx.obj["force_color"])
        return
    _click.echo("null" if value is None else str(value))


def _load(
    ctx: _click.Context,
    path: str,
    *,
    env: bool = False,
    env_prefix: str | None = None,
) -> containers.Container:
    try:
        data = loaders.load_file(path, separator=ctx.obj["separator"])
    except errors.DocumentError as e:
        raise _click.ClickException(str(e)) from None
    if env:
        data.activate(capabilities.EnvironmentOverride(prefix=env_prefix))
    return data


def _parse_yaml_argument(text: str) -> _typing.Any:
    """Parse a command line value as YAML, so '5' is an int and '[1, 2]' a list."""
    try:
        return _yaml.safe_load(text)
    except _yaml.YAMLError:
        return text


@_click.group(context_settings=CONTEXT_SETTINGS)
@_click.version_option(viralmap.__version__, "-v", "--version", prog_name="viralmap")
@_click.option(
    "--verbose",
    is_flag=True,
    help="Enable debug logging",
)
@_click.option(
    "--separator",
    type=str,
    default=None,
    help="Path separator (default: VIRALMAP_SEPARATOR or '.')",
)
@_click.option(
    "--color/--no-color",
    "use_color",
    default=None,
    help="Enable/disable syntax highlighting (default: auto-detect TTY)",
)
@_click.pass_context
def cli(ctx: _click.Context, verbose: bool, separator: str | None, use_color: bool | None) -> None:
    """
    viralmap - query and combine nested YAML/JSON documents.

    \b
    Examples:
        viralmap get config.yaml server.port
        viralmap set config.yaml server.port 8081 -o new.yaml
        viralmap merge defaults.yaml local.yaml
        viralmap fetch config.yaml password --all
        viralmap match config.yaml '{server: {port: ~}}'
    """
    settings = config.get_settings()

    _configure_logging("DEBUG" if verbose else settings.log_level)

    color, force_color = _should_use_color(use_color)
    ctx.ensure_object(dict)
    ctx.obj["settings"] = settings
    ctx.obj["separator"] = separator
    ctx.obj["color"] = color
    ctx.obj["force_color"] = force_color


@cli.command()
@_click.argument("file", type=_click.Path(exists=True, dir_okay=False))
@_click.argument("path")
@_click.option("--json", "as_json", is_flag=True, help="Output as JSON")
@_click.option("--env", is_flag=True, help="Let environment variables override values")
@_click.option("--env-prefix", type=str, default=None, help="Prefix for override variable names")
@_click.pass_context
def get(ctx: _click.Context, file: str, path: str, as_json: bool, env: bool, env_prefix: str | None) -> None:
    """Print the value at PATH in FILE.

    \b
    Examples:
        viralmap get config.yaml server.port
        SERVER_PORT=9000 viralmap get config.yaml server.port --env
    """
    data = _load(ctx, file, env=env, env_prefix=env_prefix)
    value = data.get(path, _MISSING)
    if value is _MISSING:
        raise _click.ClickException(f"No value at {path}")
    _print_value(ctx, value, as_json=as_json)


@cli.command(name="set")
@_click.argument("file", type=_click.Path(exists=True, dir_okay=False))
@_click.argument("path")
@_click.argument("value")
@_click.option(
    "-o",
    "--output",
    type=_click.Path(dir_okay=False, writable=True),
    default=None,
    help="Write the document here instead of printing it",
)
@_click.pass_context
def set_cmd(ctx: _click.Context, file: str, path: str, value: str, output: str | None) -> None:
    """Set PATH in FILE to VALUE (parsed as YAML) and print the document.

    Missing intermediate mappings are created. FILE itself is not modified.
    """
    data = _load(ctx, file)
    try:
        data[path] = _parse_yaml_argument(value)
    except errors.PathConflictError as e:
        raise _click.ClickException(str(e)) from None

    if output is None:
        _print_value(ctx, data, as_json=False)
        return

    target = _pathlib.Path(output)
    text = loaders.dump_json(data) + "\n" if target.suffix.lower() == ".json" else loaders.dump_yaml(data)
    target.write_text(text, encoding="utf-8")
    _logger.info("Wrote %s", target)


@cli.command()
@_click.argument("files", nargs=-1, required=True, type=_click.Path(exists=True, dir_okay=False))
@_click.option("--no-overwrite", is_flag=True, help="Keep existing scalars instead of replacing them")
@_click.option("--sort", "sort_keys", is_flag=True, help="Sort keys recursively")
@_click.option("--json", "as_json", is_flag=True, help="Output as JSON")
@_click.pass_context
def merge(ctx: _click.Context, files: tuple[str, ...], no_overwrite: bool, sort_keys: bool, as_json: bool) -> None:
    """Recursively merge FILES, later ones on top of earlier ones.

    Mappings merge key by key and lists are concatenated.
    """
    result = _load(ctx, files[0])
    for file in files[1:]:
        _logger.debug("Merging %s", file)
        result.recursive_update(_load(ctx, file), overwrite=not no_overwrite)
    if sort_keys:
        result.recursive_sort()
    _print_value(ctx, result, as_json=as_json)


@cli.command()
@_click.argument("file", type=_click.Path(exists=True, dir_okay=False))
@_click.argument("key")
@_click.option("--all", "fetch_all", is_flag=True, help="Print every match, not just the first")
@_click.option("--json", "as_json", is_flag=True, help="Output as JSON")
@_click.pass_context
def fetch(ctx: _click.Context, file: str, key: str, fetch_all: bool, as_json: bool) -> None:
    """Find KEY anywhere in FILE."""
    data = _load(ctx, file)
    if fetch_all:
        found = data.recursive_fetch_all(key, _MISSING)
    else:
        found = data.recursive_fetch_one(key, _MISSING)
    if found is _MISSING:
        raise _click.ClickException(f"No value for {key}")
    _print_value(ctx, found, as_json=as_json)


@cli.command()
@_click.argument("file", type=_click.Path(exists=True, dir_okay=False))
@_click.argument("prototype")
@_click.option("--strict", is_flag=True, help="Also fail on keys the prototype doesn't list")
@_click.pass_context
def match(ctx: _click.Context, file: str, prototype: str, strict: bool) -> None:
    """Score FILE against PROTOTYPE (a YAML file or inline YAML mapping).

    Prints the score and exits with status 1 unless it is positive.
    """
    data = _load(ctx, file)
    if _pathlib.Path(prototype).is_file():
        template: _typing.Any = _load(ctx, prototype)
    else:
        template = _parse_yaml_argument(prototype)
    if not isinstance(template, _abc.Mapping):
        raise _click.BadParameter("must be a mapping", param_hint="PROTOTYPE")

    score = data.prototype_match_score(template, strict=strict)
    _click.echo(str(score))
    if score <= 0:
        ctx.exit(1)


def main() -> None:
    """Main entry point with correct program name."""
    cli(prog_name="viralmap")


if __name__ == "__main__":
    main()
