"""Command table and wire serialization for mu server commands.

Each command the client can issue is described by a CommandSpec: its name,
the name sent on the wire, and how many frames make up its response. New
commands are added by registering a spec, not by subclassing the client.
"""

import re
from collections.abc import Iterable, Iterator, Mapping
from dataclasses import dataclass
from enum import Enum
from typing import Any

from mup.adapters.sexp.canonical import lispify
from mup.domain.exceptions import UnknownCommandError

QUIT = "quit"
TIMEOUT_ARG = "timeout"

_WHITESPACE = re.compile(r"\s")


class ResponsePolicy(Enum):
    """How many frames answer a command."""

    SINGLE = "single"
    STREAMING = "streaming"


@dataclass(frozen=True)
class CommandSpec:
    """Description of one mu server command.

    Attributes:
        name: Name callers use (e.g., "find")
        policy: SINGLE for one frame, STREAMING for frames until status complete
        wire_name: Name sent after `cmd:` (defaults to name)
        summary: One-line description for help output
    """

    name: str
    policy: ResponsePolicy = ResponsePolicy.SINGLE
    wire_name: str = ""
    summary: str = ""

    @property
    def wire(self) -> str:
        """Name sent on the wire."""
        return self.wire_name or self.name


MU_COMMANDS: tuple[CommandSpec, ...] = (
    CommandSpec("add", summary="Add a message to the database"),
    CommandSpec("compose", summary="Compose a reply, forward, edit or new message"),
    CommandSpec("contacts", summary="Search contacts"),
    CommandSpec("extract", summary="Save or open a message part"),
    CommandSpec("find", summary="Search the message database"),
    CommandSpec(
        "index",
        policy=ResponsePolicy.STREAMING,
        summary="(Re)index the message store",
    ),
    CommandSpec("mkdir", summary="Make a new maildir"),
    CommandSpec("move", summary="Move a message or change its flags"),
    CommandSpec("ping", summary="Check that the server is alive"),
    CommandSpec("remove", summary="Remove a message by document id"),
    CommandSpec("view", summary="Return a message, optionally decrypted"),
)


class CommandRegistry:
    """Name -> CommandSpec table."""

    def __init__(self, specs: Iterable[CommandSpec] = ()):
        self._specs: dict[str, CommandSpec] = {}
        for spec in specs:
            self.register(spec)

    def register(self, spec: CommandSpec) -> CommandSpec:
        """Add a command.

        Raises:
            ValueError: If a command with the same name is registered
        """
        if spec.name in self._specs:
            raise ValueError(f"Command already registered: {spec.name}")
        self._specs[spec.name] = spec
        return spec

    def get(self, name: str) -> CommandSpec:
        """Look up a command.

        Raises:
            UnknownCommandError: If no command has that name
        """
        try:
            return self._specs[name]
        except KeyError:
            raise UnknownCommandError(
                f"Unknown command: {name}",
                hint=f"Known commands: {', '.join(sorted(self._specs))}",
            ) from None

    def names(self) -> list[str]:
        """Registered command names, sorted."""
        return sorted(self._specs)

    def __contains__(self, name: object) -> bool:
        return name in self._specs

    def __iter__(self) -> Iterator[CommandSpec]:
        return iter(self._specs.values())

    def __len__(self) -> int:
        return len(self._specs)


def default_registry() -> CommandRegistry:
    """Registry holding the standard mu server commands."""
    return CommandRegistry(MU_COMMANDS)


def format_value(value: Any) -> str:
    """Render one argument value for the wire.

    Booleans become true/false; anything containing whitespace is
    double-quoted with embedded quotes and backslashes escaped.
    """
    if isinstance(value, bool):
        return "true" if value else "false"
    text = str(value)
    if _WHITESPACE.search(text):
        escaped = text.replace("\\", "\\\\").replace('"', '\\"')
        return f'"{escaped}"'
    return text


def build_command_line(name: str, args: Mapping[str, Any] | None = None) -> str:
    """Serialize a command and its arguments.

    Argument names are converted from snake_case to dash-case; arguments
    whose value is None are left out.

    Args:
        name: Wire name of the command
        args: Keyword arguments

    Returns:
        Line of the form `cmd:<name> key:value ...` (no trailing newline)
    """
    parts = [f"cmd:{name}"]
    for key, value in (args or {}).items():
        if value is None:
            continue
        parts.append(f"{lispify(key)}:{format_value(value)}")
    return " ".join(parts)
