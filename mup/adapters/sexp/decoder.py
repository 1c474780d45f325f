"""Symbolic-expression codec for mu server payloads.

Parsing is delegated to sexpdata. `nil` and `t` are kept as symbols so the
canonicalizer decides what they mean.

Bracketed vectors, [a b], become plain lists. A quoted form, 'x, is
replaced by the form itself. Association lists written as dotted pairs,
((a . 1) (b . 2)), are folded into dicts.
"""

import logging
from typing import Any

import sexpdata
from sexpdata import Brackets, Quoted, Symbol

from mup.domain.exceptions import ProtocolError
from mup.domain.values import CanonicalValue

logger = logging.getLogger(__name__)

DOT = "."


def decode(text: str) -> Any:
    """Parse one symbolic expression.

    Args:
        text: Payload text, exactly one expression

    Returns:
        Raw structure: lists, dicts (folded alists), Symbols, str, int, float

    Raises:
        ProtocolError: If the text is empty or not a well-formed expression
    """
    if not text.strip():
        raise ProtocolError("Empty payload")
    try:
        expressions = sexpdata.parse(text, nil=None, true=None)
    except Exception as e:
        raise ProtocolError(f"Unparseable payload: {e}") from e
    if len(expressions) != 1:
        raise ProtocolError(f"Expected one expression, got {len(expressions)}")
    raw = expressions[0]
    logger.debug(f"Parsed payload: {raw!r}")
    return _simplify(raw)


def _is_dotted_pair(value: Any) -> bool:
    return (
        isinstance(value, list)
        and len(value) == 3
        and isinstance(value[1], Symbol)
        and str(value[1]) == DOT
    )


def _simplify(value: Any) -> Any:
    if isinstance(value, Quoted):
        return _simplify(value.x)
    if isinstance(value, Brackets):
        value = list(value.I)
    if not isinstance(value, list):
        return value
    items = [_simplify(item) for item in value]
    if items and all(_is_dotted_pair(item) for item in items):
        return {str(item[0]): item[2] for item in items}
    return items


def encode(value: CanonicalValue) -> str:
    """Render a canonical value as symbolic-expression text.

    Mappings become property lists with dashed keyword keys. None, False
    and empty mappings all render as `nil`.

    Args:
        value: Canonical value to encode

    Returns:
        Expression text that decodes (and canonicalizes) back to `value`

    Raises:
        TypeError: If the value contains something that is not canonical
    """
    if value is None or value is False:
        return "nil"
    if value is True:
        return "t"
    if isinstance(value, (int, float)):
        return repr(value)
    if isinstance(value, str):
        return sexpdata.dumps(value)
    if isinstance(value, list):
        return "(" + " ".join(encode(item) for item in value) + ")"
    if isinstance(value, dict):
        if not value:
            return "nil"
        parts = []
        for key, item in value.items():
            parts.append(":" + str(key).replace("_", "-"))
            parts.append(encode(item))
        return "(" + " ".join(parts) + ")"
    raise TypeError(f"Cannot encode {type(value).__name__} as a symbolic expression")
