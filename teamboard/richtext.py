"""Human-readable titles from nested, optionally HTML-bearing content.

Task payloads describe their text in several competing places: short intro
fields, rich-text ``content`` trees, plain intro/question fields. Raw values
are first parsed into a small tree (``Leaf``, ``Wrapper``, ``Branch``) and the
title is a fold over that tree. Parsing is bounded in depth and in the
number of values visited, and skips self-containing containers, so cyclic or
pathological payloads terminate quickly.
"""

import warnings
from dataclasses import dataclass, field
from typing import Any, Union

from bs4 import BeautifulSoup, MarkupResemblesLocatorWarning

UNKNOWN_TASK = "Unknown task"
MAX_DEPTH = 12
MAX_NODES = 2000

SHORT_INTRO_FIELDS = ("shortIntro", "short_intro")
LONG_FORM_FIELDS = ("intro", "text", "question", "title")


@dataclass(frozen=True)
class Leaf:
    text: str


@dataclass(frozen=True)
class Wrapper:
    child: "Node"


@dataclass(frozen=True)
class Branch:
    children: tuple["Node", ...]


Node = Union[Leaf, Wrapper, Branch, None]


@dataclass
class _Walk:
    """Traversal state: containers on the current path and the node allowance."""

    remaining: int = MAX_NODES
    path: set[int] = field(default_factory=set)


def strip_markup(text: str) -> str:
    """Removes markup tags and entities and collapses whitespace."""
    if "<" in text or "&" in text:
        with warnings.catch_warnings():
            warnings.simplefilter("ignore", MarkupResemblesLocatorWarning)
            text = BeautifulSoup(text, "lxml").get_text(" ")
    return " ".join(text.split())


def parse_content(value: Any, depth: int = 0) -> Node:
    """Builds a content tree from a raw value.

    Strings become leaves. Mappings wrap their ``text`` (preferred), their
    ``content`` list, or their ``title``. Lists become branches. Anything else,
    anything nested deeper than MAX_DEPTH, a container that contains itself and
    everything past the first MAX_NODES values becomes None.
    """
    return _parse(value, depth, _Walk())


def _parse(value: Any, depth: int, walk: _Walk) -> Node:
    if depth > MAX_DEPTH or not value or walk.remaining <= 0:
        return None
    walk.remaining -= 1
    if isinstance(value, str):
        return Leaf(value)
    if not isinstance(value, (list, dict)) or id(value) in walk.path:
        return None

    walk.path.add(id(value))
    try:
        if isinstance(value, list):
            return Branch(tuple(_parse(v, depth + 1, walk) for v in value))
        if value.get("text"):
            return Wrapper(_parse(value["text"], depth + 1, walk))
        if isinstance(value.get("content"), list):
            return _parse(value["content"], depth + 1, walk)
        if value.get("title"):
            return Wrapper(_parse(value["title"], depth + 1, walk))
        return None
    finally:
        walk.path.discard(id(value))


def fold(node: Node) -> str | None:
    """Resolves a content tree to text; None when it carries no text."""
    if node is None:
        return None
    if isinstance(node, Leaf):
        return strip_markup(node.text) or None
    if isinstance(node, Wrapper):
        return fold(node.child)
    parts = [text for text in (fold(child) for child in node.children) if text]
    return " ".join(parts) or None


def extract_text(value: Any) -> str | None:
    return fold(parse_content(value))


def _short_intro(node: dict[str, Any]) -> Any:
    for key in SHORT_INTRO_FIELDS:
        if node.get(key):
            return node[key]
    comments = node.get("comments")
    if isinstance(comments, dict):
        return comments.get("shortIntro")
    return None


def resolve_title(node: Any) -> str:
    """Returns a display title for a task-like payload; never empty.

    Priority: short intro, rich ``content`` tree, long-form intro/text/
    question/title fields, the node's id, then ``"Unknown task"``.

    Example:
        >>> resolve_title({"id": "t1", "content": [{"text": "<b>Find</b> the oak"}]})
        'Find the oak'
    """
    if isinstance(node, str):
        return strip_markup(node) or UNKNOWN_TASK
    if not isinstance(node, dict):
        return UNKNOWN_TASK

    candidates = [_short_intro(node), node.get("content")]
    candidates.extend(node.get(key) for key in LONG_FORM_FIELDS)
    for candidate in candidates:
        text = extract_text(candidate)
        if text:
            return text

    node_id = node.get("id")
    if node_id not in (None, ""):
        return str(node_id)
    return UNKNOWN_TASK
