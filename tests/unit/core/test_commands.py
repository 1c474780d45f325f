"""Unit tests for the command table and command-line serialization."""

import pytest

from mup.core.commands import (
    MU_COMMANDS,
    CommandRegistry,
    CommandSpec,
    ResponsePolicy,
    build_command_line,
    default_registry,
    format_value,
)
from mup.domain.exceptions import UnknownCommandError


class TestBuildCommandLine:
    """Tests for build_command_line()."""

    def test_no_arguments(self) -> None:
        assert build_command_line("ping") == "cmd:ping"

    def test_snake_case_keys_become_dashed(self) -> None:
        line = build_command_line("view", {"docid": 42, "extract_images": True})

        assert line == "cmd:view docid:42 extract-images:true"

    def test_values_with_whitespace_are_quoted(self) -> None:
        line = build_command_line("find", {"query": "subject:hello world"})

        assert line == 'cmd:find query:"subject:hello world"'

    def test_none_values_are_skipped(self) -> None:
        line = build_command_line("find", {"query": "x", "maxnum": None})

        assert line == "cmd:find query:x"

    def test_argument_order_is_preserved(self) -> None:
        line = build_command_line("move", {"docid": 1, "maildir": "/archive", "flags": "+S"})

        assert line == "cmd:move docid:1 maildir:/archive flags:+S"


class TestFormatValue:
    """Tests for format_value()."""

    def test_booleans(self) -> None:
        assert format_value(True) == "true"
        assert format_value(False) == "false"

    def test_numbers(self) -> None:
        assert format_value(7) == "7"

    def test_embedded_quotes_and_backslashes_are_escaped(self) -> None:
        assert format_value('say "hi" \\ now') == '"say \\"hi\\" \\\\ now"'

    def test_plain_string_is_not_quoted(self) -> None:
        assert format_value('a"b') == 'a"b'


class TestCommandSpec:
    """Tests for CommandSpec."""

    def test_wire_defaults_to_name(self) -> None:
        assert CommandSpec("find").wire == "find"

    def test_custom_wire_name(self) -> None:
        assert CommandSpec("index_crash", wire_name="index-crash").wire == "index-crash"

    def test_default_policy_is_single(self) -> None:
        assert CommandSpec("find").policy is ResponsePolicy.SINGLE


class TestCommandRegistry:
    """Tests for CommandRegistry."""

    def test_default_registry_has_mu_commands(self) -> None:
        registry = default_registry()

        assert len(registry) == len(MU_COMMANDS)
        assert registry.names() == sorted(spec.name for spec in MU_COMMANDS)

    def test_only_index_streams(self) -> None:
        streaming = [
            spec.name
            for spec in default_registry()
            if spec.policy is ResponsePolicy.STREAMING
        ]

        assert streaming == ["index"]

    def test_get_unknown_command_raises_with_hint(self) -> None:
        with pytest.raises(UnknownCommandError, match="Unknown command: frobnicate") as exc_info:
            default_registry().get("frobnicate")

        assert "ping" in exc_info.value.hint

    def test_register_new_command(self) -> None:
        registry = default_registry()
        spec = registry.register(CommandSpec("sent", summary="Mark as sent"))

        assert "sent" in registry
        assert registry.get("sent") is spec

    def test_duplicate_registration_raises(self) -> None:
        registry = CommandRegistry([CommandSpec("ping")])

        with pytest.raises(ValueError, match="already registered"):
            registry.register(CommandSpec("ping"))

    def test_registries_are_independent(self) -> None:
        first = default_registry()
        first.register(CommandSpec("extra"))

        assert "extra" not in default_registry()
