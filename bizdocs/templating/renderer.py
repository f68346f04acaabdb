# bizdocs/templating/renderer.py
"""
Logic-less HTML templating for quote/invoice documents.

Two tag forms only:

  {{path.to.value}}      escaped value of a dotted-path lookup ("" when missing)
  {{#path}} ... {{/path}}
      list         -> block once per element, element is the whole context
      empty / falsy -> nothing
      other truthy -> block once against the *outer* context

`{{.}}` is the current context itself (for lists of plain strings).
Everything else (`{{^x}}`, `{{{x}}}`, `{{&x}}`, partials, comments,
delimiter changes) is rejected, so template text can never run logic and
substituted data can never emit raw markup.
"""
from __future__ import annotations

import math
import re
from collections.abc import Mapping
from dataclasses import dataclass, field
from decimal import Decimal
from functools import lru_cache
from typing import Any, List, Union

from markupsafe import escape

from bizdocs.errors import RenderError

MAX_SECTION_DEPTH = 8
MAX_PATH_DEPTH = 16

_TAG_RE = re.compile(r"\{\{(.*?)\}\}", re.S)
# ascii only: \w would also admit "²" and other unicode digits
_PATH_RE = re.compile(r"^(?:\.|[A-Za-z0-9_-]+(?:\.[A-Za-z0-9_-]+)*)$")
_UNSUPPORTED_SIGILS = set("^&>!={<")


@dataclass(frozen=True)
class _Text:
    value: str


@dataclass(frozen=True)
class _Var:
    path: str


@dataclass
class _Section:
    path: str
    start: int
    children: List["_Node"] = field(default_factory=list)


_Node = Union[_Text, _Var, _Section]


# =========================
# Parsing
# =========================

def _tag_path(raw: str, position: int) -> str:
    path = raw.strip()
    if not path or not _PATH_RE.match(path):
        raise RenderError(f"Invalid tag name {path!r}", position=position)
    if path != "." and path.count(".") + 1 > MAX_PATH_DEPTH:
        raise RenderError(f"Path {path!r} is deeper than {MAX_PATH_DEPTH} segments", position=position)
    return path


@lru_cache(maxsize=64)
def _compile(template: str) -> tuple:
    root: List[_Node] = []
    stack: List[_Section] = []
    current = root
    pos = 0

    for m in _TAG_RE.finditer(template):
        if m.start() > pos:
            current.append(_Text(template[pos:m.start()]))
        pos = m.end()

        raw = m.group(1)
        if "{{" in raw:
            raise RenderError("Unterminated tag", position=m.start())
        tag = raw.strip()
        if not tag:
            raise RenderError("Empty tag", position=m.start())

        sigil = tag[0]
        if sigil == "#":
            if len(stack) >= MAX_SECTION_DEPTH:
                raise RenderError(f"Sections nested deeper than {MAX_SECTION_DEPTH}", position=m.start())
            section = _Section(path=_tag_path(tag[1:], m.start()), start=m.start())
            current.append(section)
            stack.append(section)
            current = section.children
        elif sigil == "/":
            name = _tag_path(tag[1:], m.start())
            if not stack:
                raise RenderError(f"Closing tag for {name!r} without an opening tag", position=m.start())
            opened = stack.pop()
            if opened.path != name:
                raise RenderError(f"Section {opened.path!r} closed by {name!r}", position=m.start())
            current = stack[-1].children if stack else root
        elif sigil in _UNSUPPORTED_SIGILS:
            raise RenderError(f"Unsupported tag {{{{{tag}}}}}", position=m.start())
        else:
            current.append(_Var(_tag_path(tag, m.start())))

    tail = template[pos:]
    if "{{" in tail:
        raise RenderError("Unterminated tag", position=pos + tail.index("{{"))
    if tail:
        current.append(_Text(tail))
    if stack:
        raise RenderError(f"Section {stack[-1].path!r} is never closed", position=stack[-1].start)

    return tuple(root)


# =========================
# Rendering
# =========================

def lookup(context: Any, path: str) -> Any:
    """Dotted-path lookup through mappings (and list indexes). Missing -> None."""
    if path == ".":
        return context
    cur = context
    for part in path.split("."):
        if isinstance(cur, Mapping):
            cur = cur.get(part)
        elif isinstance(cur, (list, tuple)) and part.isascii() and part.isdigit():
            i = int(part)
            cur = cur[i] if i < len(cur) else None
        else:
            return None
        if cur is None:
            return None
    return cur


def _stringify(value: Any) -> str:
    if value is None:
        return ""
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, float):
        if math.isfinite(value) and value.is_integer():
            return str(int(value))
        return str(value)
    if isinstance(value, (int, Decimal, str)):
        return str(value)
    if isinstance(value, (Mapping, list, tuple, set)):
        # containers have no sensible text form in a document
        return ""
    return str(value)


def _render_nodes(nodes, context: Any, out: List[str]) -> None:
    for node in nodes:
        if isinstance(node, _Text):
            out.append(node.value)
        elif isinstance(node, _Var):
            out.append(str(escape(_stringify(lookup(context, node.path)))))
        else:
            value = lookup(context, node.path)
            if isinstance(value, (list, tuple)):
                for element in value:
                    _render_nodes(node.children, element, out)
            elif value:
                _render_nodes(node.children, context, out)


def render(template: str, context: Mapping[str, Any] | None) -> str:
    nodes = _compile(template)
    out: List[str] = []
    _render_nodes(nodes, context if context is not None else {}, out)
    return "".join(out)


def validate(template: str) -> None:
    """Raise RenderError if the template does not parse."""
    _compile(template)


class TemplateRenderer:
    def render(self, template: str, context: Mapping[str, Any] | None) -> str:
        return render(template, context)
