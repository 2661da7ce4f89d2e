"""Island property encoding for hydration wrappers.

Properties travel from the build to the browser as one ``data-*``
attribute per property on the ``<atoll-island>`` element. Keys are
kebab-cased; values are stringified, with structured values JSON-encoded.
Keys may only use ASCII letters, digits, ``_`` and ``-``.

The browser runtime casts the strings back by inspection and camelCases
the attribute names. Property names therefore differ between the two
sides: the server template sees ``initial_count`` as passed, while the
client mount receives ``initialCount``.

The decoding functions here mirror the browser logic exactly so the
round trip can be checked at build time and in tests.
"""

import html
import json
import math
import re
from collections.abc import Iterable, Mapping
from typing import Any

from atoll.errors import InvalidPropError

DATA_PREFIX = "data-"

_KEY_RE = re.compile(r"[A-Za-z0-9_-]+")
_UPPER_RE = re.compile(r"(?<!^)([A-Z])")
_KEBAB_RE = re.compile(r"-([a-z0-9])")
_NUMBER_RE = re.compile(
    r"^\s*(?:[+-]?(?:[0-9]+\.?[0-9]*(?:[eE][+-]?[0-9]+)?|\.[0-9]+(?:[eE][+-]?[0-9]+)?|Infinity)|0[xX][0-9a-fA-F]+)\s*$"
)


def to_kebab_case(name: str) -> str:
    """``initialCount`` -> ``initial-count``; ``snake_case`` keys become kebab too."""
    return _UPPER_RE.sub(r"-\1", name).replace("_", "-").lower()


def to_camel_case(name: str) -> str:
    """``my-prop-name`` -> ``myPropName``."""
    return _KEBAB_RE.sub(lambda m: m.group(1).upper(), name)


def encode_value(value: Any) -> str:
    """Stringify a property value for an attribute."""
    if value is True:
        return "true"
    if value is False:
        return "false"
    if isinstance(value, str):
        return value
    if isinstance(value, int | float):
        return json.dumps(value)
    return json.dumps(value, separators=(",", ":"), ensure_ascii=False, default=str)


def encode_props(props: Mapping[str, Any], island_id: str = "<island>") -> dict[str, str]:
    """Map properties to ``data-*`` attribute names and string values.

    Raises :class:`InvalidPropError` for a key that cannot be used as an
    attribute name.
    """
    encoded: dict[str, str] = {}
    for key, value in props.items():
        if not isinstance(key, str) or not _KEY_RE.fullmatch(key):
            raise InvalidPropError(island_id, key)
        encoded[f"{DATA_PREFIX}{to_kebab_case(key)}"] = encode_value(value)
    return encoded


def format_attrs(attrs: Mapping[str, str | bool | None]) -> str:
    """Render an attribute mapping as ``key="value"`` pairs.

    ``True`` renders a bare attribute; ``False`` and ``None`` are skipped.
    """
    parts: list[str] = []
    for key, value in attrs.items():
        if value is None or value is False:
            continue
        if value is True:
            parts.append(key)
            continue
        parts.append(f'{key}="{html.escape(str(value), quote=True)}"')
    return " ".join(parts)


def cast_value(value: str | None) -> Any:
    """Cast an attribute string back to a typed value.

    - empty, missing, or ``"true"`` -> ``True``
    - ``"false"`` -> ``False``
    - numeric -> ``int`` or ``float``
    - ``{``/``[`` prefixed and valid JSON -> parsed structure
    - anything else stays a string
    """
    if value is None or value == "" or value == "true":
        return True
    if value == "false":
        return False
    if value.strip() and _NUMBER_RE.match(value):
        return _parse_number(value.strip())
    if value.startswith(("{", "[")):
        try:
            return json.loads(value)
        except ValueError:
            pass
    return value


def _parse_number(text: str) -> int | float:
    if text.lower().startswith("0x"):
        return int(text, 16)
    if text.lstrip("+-") == "Infinity":
        return -math.inf if text.startswith("-") else math.inf
    number = float(text)
    if number.is_integer() and not any(c in text for c in ".eE"):
        return int(text)
    return number


def props_from_attributes(attributes: Mapping[str, str | None] | Iterable[tuple[str, str | None]]) -> dict[str, Any]:
    """Decode every ``data-*`` attribute into a camelCase property."""
    items = attributes.items() if isinstance(attributes, Mapping) else attributes
    props: dict[str, Any] = {}
    for name, value in items:
        if name.startswith(DATA_PREFIX):
            props[to_camel_case(name[len(DATA_PREFIX) :])] = cast_value(value)
    return props
