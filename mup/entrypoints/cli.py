"""mup CLI entrypoint.

Command-line front end for a mu server. Reads configuration files and the
environment, starts the server, runs one command and prints the result as
JSON.
"""

from __future__ import annotations

import functools
import json
import logging
import sys
from pathlib import Path
from typing import TYPE_CHECKING, Any

import click

if TYPE_CHECKING:
    from mup.domain.config import MupConfig

from mup.core.errors import MupCliError, invalid_argument_error
from mup.core.progress import progress_context
from mup.domain.exceptions import MupError
from mup.version import __version__

LOG_FORMAT = "%(asctime)s [%(levelname)s] %(name)s: %(message)s"


def handle_cli_errors(command_name: str):
    """Decorator to handle common CLI errors.

    MupError subclasses become MupCliError with their hint; config problems
    (ValueError, FileNotFoundError) get a config hint; anything else is
    reported as unexpected, with a traceback in verbose mode.

    Args:
        command_name: Name of the command for error messages.

    Returns:
        Decorated function with error handling.
    """

    def decorator(func):
        @functools.wraps(func)
        def wrapper(*args, **kwargs):
            try:
                return func(*args, **kwargs)
            except MupCliError:
                raise
            except MupError as e:
                raise MupCliError(e.message, hint=e.hint) from e
            except (ValueError, FileNotFoundError) as e:
                raise MupCliError(
                    str(e),
                    hint="Check the config file, or run 'mup config show'",
                ) from e
            except Exception as e:
                ctx = click.get_current_context()
                if ctx.obj.get("verbose", False):
                    import traceback

                    traceback.print_exc()
                raise MupCliError(
                    f"Unexpected error in {command_name}: {e}",
                    hint="Run with --verbose for more details",
                ) from e

        return wrapper

    return decorator


def _configure_logging(verbose: bool) -> None:
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format=LOG_FORMAT,
    )


def _load_config(ctx: click.Context) -> MupConfig:
    """Load configuration and apply command-line overrides.

    Args:
        ctx: Click context holding the global options.

    Returns:
        MupConfig with file, environment and option values merged.
    """
    from mup.adapters.factory import ConfigFactory
    from mup.domain.config import MupConfig

    provider = ConfigFactory().create_config_provider()
    config = provider.load(ctx.obj.get("config_path"))

    protocol: dict[str, Any] = {}
    if ctx.obj.get("timeout") is not None:
        protocol["timeout"] = ctx.obj["timeout"]
    if ctx.obj.get("max_tries") is not None:
        protocol["max_tries"] = ctx.obj["max_tries"]
    if protocol:
        config = MupConfig.from_partial(config, {"protocol": protocol})
    return config


def _run_command(ctx: click.Context, name: str, **kwargs: Any) -> None:
    """Start a client, run one command, print its result and shut down.

    Args:
        ctx: Click context holding the global options.
        name: Registered command name.
        **kwargs: Command arguments; None values are not sent.
    """
    from mup.adapters.factory import ClientFactory

    config = _load_config(ctx)
    quiet = ctx.obj.get("quiet", False)
    with progress_context(quiet_mode=quiet, description=name) as progress:
        client = ClientFactory(config).create_client(on_progress=progress)
        try:
            result = client.call(name, **kwargs)
        finally:
            client.finish()
    click.echo(json.dumps(result, indent=2, ensure_ascii=False))


def parse_key_values(arguments: tuple[str, ...]) -> dict[str, str]:
    """Parse `key=value` command-line arguments.

    Raises:
        MupCliError: If an argument has no '=' or an empty key.
    """
    parsed: dict[str, str] = {}
    for argument in arguments:
        key, sep, value = argument.partition("=")
        if not sep or not key:
            invalid_argument_error(argument)
        parsed[key] = value
    return parsed


@click.group()
@click.version_option(version=__version__, prog_name="mup")
@click.option(
    "--verbose",
    "-v",
    is_flag=True,
    help="Enable verbose output (logs protocol traffic).",
)
@click.option(
    "--quiet",
    "-q",
    is_flag=True,
    help="Suppress non-essential output.",
)
@click.option(
    "--config",
    "config_path",
    type=click.Path(path_type=Path, dir_okay=False),
    default=None,
    help="Config file applied over the global config.",
)
@click.option(
    "--timeout",
    type=float,
    default=None,
    help="Seconds to wait for mu server output per read.",
)
@click.option(
    "--max-tries",
    type=click.IntRange(min=0),
    default=None,
    help="Extra reads allowed to complete a response (0 = no limit).",
)
@click.pass_context
def cli(
    ctx: click.Context,
    verbose: bool,
    quiet: bool,
    config_path: Path | None,
    timeout: float | None,
    max_tries: int | None,
) -> None:
    """mup - talk to a mu server from the command line.

    Starts `mu server`, runs one command and prints the result as JSON.
    """
    ctx.ensure_object(dict)
    ctx.obj["verbose"] = verbose
    ctx.obj["quiet"] = quiet
    ctx.obj["config_path"] = config_path
    ctx.obj["timeout"] = timeout
    ctx.obj["max_tries"] = max_tries
    _configure_logging(verbose)


@cli.command()
@click.pass_context
@handle_cli_errors("ping")
def ping(ctx: click.Context) -> None:
    """Check that mu server starts and answers."""
    _run_command(ctx, "ping")


@cli.command()
@click.argument("query")
@click.option("--maxnum", type=int, default=None, help="Maximum number of results.")
@click.option("--threads", is_flag=True, help="Compute message threads.")
@click.option("--sortfield", default=None, help="Field to sort results by.")
@click.option("--reverse", is_flag=True, help="Reverse the sort order.")
@click.pass_context
@handle_cli_errors("find")
def find(
    ctx: click.Context,
    query: str,
    maxnum: int | None,
    threads: bool,
    sortfield: str | None,
    reverse: bool,
) -> None:
    """Search the message database.

    QUERY uses mu's query syntax, e.g. 'subject:invoice from:alice'.
    """
    _run_command(
        ctx,
        "find",
        query=query,
        threads=threads or None,
        sortfield=sortfield,
        reverse=reverse or None,
        maxnum=maxnum,
    )


@cli.command()
@click.option("--path", default=None, help="Message store to index.")
@click.option("--my-addresses", default=None, help="Comma-separated personal addresses.")
@click.pass_context
@handle_cli_errors("index")
def index(ctx: click.Context, path: str | None, my_addresses: str | None) -> None:
    """(Re)index the message store.

    Progress is reported on stderr unless --quiet is given.
    """
    _run_command(ctx, "index", path=path, my_addresses=my_addresses)


@cli.command()
@click.option("--personal", is_flag=True, help="Only contacts you corresponded with.")
@click.option("--after", type=int, default=None, help="Only contacts seen after this epoch time.")
@click.pass_context
@handle_cli_errors("contacts")
def contacts(ctx: click.Context, personal: bool, after: int | None) -> None:
    """Search contacts."""
    _run_command(ctx, "contacts", personal=personal or None, after=after)


@cli.command()
@click.option("--docid", type=int, default=None, help="Document id of the message.")
@click.option("--msgid", default=None, help="Message-Id of the message.")
@click.option("--path", default=None, help="Path to a message file.")
@click.pass_context
@handle_cli_errors("view")
def view(
    ctx: click.Context, docid: int | None, msgid: str | None, path: str | None
) -> None:
    """Show a message."""
    if docid is None and msgid is None and path is None:
        raise MupCliError(
            "No message given",
            hint="Pass one of --docid, --msgid or --path",
        )
    _run_command(ctx, "view", docid=docid, msgid=msgid, path=path)


@cli.command(name="call")
@click.argument("name")
@click.argument("arguments", nargs=-1)
@click.pass_context
@handle_cli_errors("call")
def call_command(ctx: click.Context, name: str, arguments: tuple[str, ...]) -> None:
    """Run any registered command with key=value ARGUMENTS.

    Example: mup call move docid=42 flags=+S-u
    """
    _run_command(ctx, name, **parse_key_values(arguments))


@cli.command(name="commands")
def list_commands() -> None:
    """List the commands mup knows about."""
    from mup.core.commands import ResponsePolicy, default_registry

    for spec in default_registry():
        suffix = " (streaming)" if spec.policy is ResponsePolicy.STREAMING else ""
        click.echo(f"{spec.name:<10} {spec.summary}{suffix}")


@cli.group()
def config() -> None:
    """Manage mup configuration."""
    pass


@config.command(name="init")
@click.option("--force", is_flag=True, help="Overwrite an existing config file.")
@click.pass_context
@handle_cli_errors("config init")
def config_init(ctx: click.Context, force: bool) -> None:
    """Write a commented default config file."""
    from mup.shared.config_io import create_default_config_file, get_global_config_path

    path = ctx.obj.get("config_path") or get_global_config_path()
    if path.exists() and not force:
        raise MupCliError(
            f"Config file already exists: {path}",
            hint="Use --force to overwrite it",
        )
    create_default_config_file(path)
    if not ctx.obj.get("quiet", False):
        click.echo(f"✓ Wrote {path}")


@config.command(name="show")
@click.pass_context
@handle_cli_errors("config show")
def config_show(ctx: click.Context) -> None:
    """Print the effective configuration as TOML."""
    from mup.shared.config_io import dump_config

    click.echo(dump_config(_load_config(ctx)), nl=False)


def main() -> int:
    """Main entrypoint for the CLI."""
    try:
        cli(obj={})
        return 0
    except Exception as e:
        click.echo(f"Error: {e}", err=True)
        return 1


if __name__ == "__main__":
    sys.exit(main())
