"""CLI error handling with actionable hints.

Provides consistent error formatting for all mup CLI commands.
"""

from typing import NoReturn

import click


class MupCliError(click.ClickException):
    """CLI error with actionable hint for users.

    Attributes:
        message: The primary error message.
        hint: Optional actionable suggestion for the user.

    Example:
        raise MupCliError(
            "mu server is not running",
            hint="Check that mu is installed and on PATH"
        )
    """

    def __init__(self, message: str, hint: str | None = None) -> None:
        super().__init__(message)
        self.hint = hint

    def format_message(self) -> str:
        """Format the error message with hint if present."""
        msg = self.message
        if self.hint:
            msg += f"\nHint: {self.hint}"
        return msg


def invalid_argument_error(argument: str) -> NoReturn:
    """Raise error for a `mup call` argument not written as key=value.

    Raises:
        MupCliError: Always.
    """
    raise MupCliError(
        f"Invalid argument: {argument!r}",
        hint="Pass command arguments as key=value, e.g. 'mup call find query=hello'",
    )
