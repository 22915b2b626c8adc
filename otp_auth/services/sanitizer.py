"""Markup neutralization for JSON-like request payloads.

Every string leaf is HTML-encoded so script and tag sequences lose their
meaning. Encoding first decodes any entities already present, which makes the
transform idempotent: sanitizing twice gives the same result as sanitizing
once. Keys, numbers, booleans and None are left alone.

Traversal uses an explicit stack with a nesting limit instead of recursion,
so hostile payloads fail with PayloadTooDeep rather than exhausting the
interpreter stack.
"""

import html
from typing import Any

from otp_auth.errors import PayloadTooDeep

MAX_DEPTH = 32


def sanitize_text(value: str) -> str:
    return html.escape(html.unescape(value), quote=False)


def sanitize(payload: Any, max_depth: int = MAX_DEPTH) -> Any:
    """Sanitize ``payload`` in place and return it.

    dicts and lists are mutated in place; a bare string is returned in its
    sanitized form; other scalars are returned unchanged.
    """
    if isinstance(payload, str):
        return sanitize_text(payload)
    if not isinstance(payload, (dict, list)):
        return payload

    stack: list[tuple[dict | list, int]] = [(payload, 1)]
    while stack:
        container, depth = stack.pop()
        slots = container.items() if isinstance(container, dict) else enumerate(container)
        for slot, value in slots:
            if isinstance(value, str):
                container[slot] = sanitize_text(value)
            elif isinstance(value, (dict, list)):
                if depth >= max_depth:
                    raise PayloadTooDeep(f"Payload nesting exceeds {max_depth} levels")
                stack.append((value, depth + 1))

    return payload


def sanitize_pairs(pairs: list[tuple[str, str]]) -> list[tuple[str, str]]:
    """Sanitize the values of a multi-valued mapping such as a query string."""
    return [(key, sanitize_text(value)) for key, value in pairs]
