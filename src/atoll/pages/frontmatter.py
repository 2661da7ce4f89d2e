"""YAML frontmatter parsing for page sources."""

import re
from typing import Any

import yaml

from atoll.errors import FrontmatterError

# Opening ``---`` at the very start, lazily up to a closing ``---`` that
# ends its line or the file. Accepts LF, CRLF and CR line breaks.
_FRONTMATTER_RE = re.compile(r"\A---(?:\r?\n|\r)(?P<yaml>.*?)(?:\r?\n|\r)?---(?:\r?\n|\r|\Z)", re.DOTALL)


def parse_frontmatter(text: str, source: str = "<page>") -> tuple[dict[str, Any], str]:
    """Split *text* into ``(meta, body)``.

    A file without a frontmatter block yields empty meta and the text
    unchanged. A block that parses to something other than a mapping
    yields empty meta.
    """
    match = _FRONTMATTER_RE.match(text)
    if match is None:
        return {}, text

    block = match.group("yaml").strip()
    body = text[match.end() :]
    if not block:
        return {}, body

    try:
        parsed = yaml.safe_load(block)
    except yaml.YAMLError as exc:
        raise FrontmatterError(source, str(exc)) from exc

    return (parsed if isinstance(parsed, dict) else {}), body
