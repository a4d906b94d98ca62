"""
Property extraction from structured secret values.

Property expressions are dotted paths:

    projects.project1      nested key
    servers.0.host         array index
    servers.#              array length
    db\\.primary.password  escaped dot inside a key
    proj*.name             first key (sorted) matching a wildcard
"""

import fnmatch
import json
from dataclasses import dataclass
from typing import Any, List

from okms_secrets.exceptions import PropertyNotFoundError

_MISSING = object()


def canonical_json(value: Any) -> bytes:
    """Serialize a value the same way on every read, compare and write."""
    return json.dumps(value, sort_keys=True, separators=(',', ':'), ensure_ascii=False).encode('utf-8')


@dataclass
class _Component:
    literal: str
    pattern: str
    wildcard: bool


def _fnmatch_escape(ch: str) -> str:
    if ch in '*?[]':
        return f'[{ch}]'
    return ch


def _parse_expression(expression: str) -> List[_Component]:
    components = []
    literal: List[str] = []
    pattern: List[str] = []
    wildcard = False
    escaped = False

    for ch in expression:
        if escaped:
            literal.append(ch)
            pattern.append(_fnmatch_escape(ch))
            escaped = False
        elif ch == '\\':
            escaped = True
        elif ch == '.':
            components.append(_Component(''.join(literal), ''.join(pattern), wildcard))
            literal, pattern, wildcard = [], [], False
        else:
            literal.append(ch)
            if ch in '*?':
                wildcard = True
                pattern.append(ch)
            else:
                pattern.append(_fnmatch_escape(ch))

    if escaped:
        literal.append('\\')
        pattern.append('\\')
    components.append(_Component(''.join(literal), ''.join(pattern), wildcard))
    return components


def _resolve(node: Any, components: List[_Component]) -> Any:
    for component in components:
        if isinstance(node, dict):
            if component.wildcard:
                match = next((k for k in sorted(node) if fnmatch.fnmatchcase(k, component.pattern)), None)
                if match is None:
                    return _MISSING
                node = node[match]
            elif component.literal in node:
                node = node[component.literal]
            else:
                return _MISSING
        elif isinstance(node, list):
            if component.literal == '#' and not component.wildcard:
                node = len(node)
            elif component.literal.isascii() and component.literal.isdigit() and int(component.literal) < len(node):
                node = node[int(component.literal)]
            else:
                return _MISSING
        else:
            return _MISSING
    return node


def render_property(node: Any) -> str:
    """Return the textual form of a resolved node.

    Strings are returned verbatim, objects and arrays as canonical JSON.
    """
    if isinstance(node, str):
        return node
    if node is None:
        return ''
    if isinstance(node, bool):
        return 'true' if node else 'false'
    if isinstance(node, (dict, list)):
        return canonical_json(node).decode('utf-8')
    if isinstance(node, float) and node.is_integer() and abs(node) < 1e21:
        # Whole floats print without a fraction or exponent
        return str(int(node))
    return json.dumps(node)


def get_property(value: Any, expression: str, secret_name: str = None) -> str:
    """Resolve `expression` against `value` and return the node's text.

    Raises:
        PropertyNotFoundError: If no node exists at `expression`
    """
    node = _resolve(value, _parse_expression(expression))
    if node is _MISSING:
        raise PropertyNotFoundError(expression, secret_name=secret_name)
    return render_property(node)
