"""Canonicalization of decoded mu payloads.

Turns the raw structures produced by the decoder into plain Python values:
None, bool, numbers, str, lists and dicts with snake_case keys.
"""

from typing import Any

from sexpdata import Brackets, Quoted, Symbol

from mup.domain.exceptions import ProtocolError
from mup.domain.values import CanonicalValue

KEYWORD_PREFIX = ":"


def delispify(key: Any) -> str:
    """Normalize a lisp key: drop the leading colon, dashes to underscores."""
    key = str(key)
    if key.startswith(KEYWORD_PREFIX):
        key = key[len(KEYWORD_PREFIX) :]
    return key.replace("-", "_")


def lispify(key: str) -> str:
    """Inverse of delispify for argument names: underscores to dashes."""
    return key.replace("_", "-")


def is_keyword(value: Any) -> bool:
    """True for tagged-key symbols such as `:docid`."""
    return (
        isinstance(value, Symbol)
        and str(value).startswith(KEYWORD_PREFIX)
        and len(value) > len(KEYWORD_PREFIX)
    )


def hashify(raw: Any) -> CanonicalValue:
    """Map a decoded structure onto a canonical value.

    Rules, applied bottom-up:
    - symbol `nil` -> None, symbol `t` -> True, other symbols -> their name
    - a list starting with a keyword is a property list -> dict
    - a dict (folded alist) -> dict with normalized keys
    - any other list -> list of canonical values
    - quoted forms are unwrapped, bracketed vectors are lists
    - strings and numbers pass through

    Args:
        raw: Output of decode()

    Returns:
        Canonical value, built fresh (no structure is shared with `raw`)

    Raises:
        ProtocolError: If a property list has odd length or a non-keyword key
    """
    if isinstance(raw, Quoted):
        return hashify(raw.x)
    if isinstance(raw, Brackets):
        raw = list(raw.I)
    if isinstance(raw, Symbol):
        name = str(raw)
        if name == "nil":
            return None
        if name == "t":
            return True
        return name
    if isinstance(raw, dict):
        return {delispify(key): hashify(value) for key, value in raw.items()}
    if isinstance(raw, list):
        if raw and is_keyword(raw[0]):
            return _plist_to_dict(raw)
        return [hashify(item) for item in raw]
    return raw


def _plist_to_dict(items: list[Any]) -> dict[str, CanonicalValue]:
    if len(items) % 2:
        raise ProtocolError(
            f"Property list has odd length {len(items)}: {sexp_preview(items)}"
        )
    result: dict[str, CanonicalValue] = {}
    for position in range(0, len(items), 2):
        key = items[position]
        if not is_keyword(key):
            raise ProtocolError(
                f"Expected keyword at position {position} of property list, "
                f"got {key!r}"
            )
        value = hashify(items[position + 1])
        result[delispify(key)] = value
    return result


def sexp_preview(items: list[Any], limit: int = 80) -> str:
    """Short printable form of a raw list for error messages."""
    text = repr(items)
    if len(text) > limit:
        text = text[: limit - 3] + "..."
    return text
