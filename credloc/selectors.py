"""
Selector resolution: captures the seed value a Location starts from.

A seed comes from one of three places in the request:
- header: the first of the named headers present (case-insensitive)
- query_string: the first of the named query parameters present
- property: a path into the proxy's per-request property tree
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from dataclasses import field
from typing import Any

from credloc.models import Location
from credloc.models import SelectorKind

logger = logging.getLogger(__name__)


@dataclass
class RequestData:
    """Request metadata visible to selectors."""

    headers: dict[str, str] = field(default_factory=dict)
    query: dict[str, str] = field(default_factory=dict)
    properties: dict[str, Any] = field(default_factory=dict)

    @classmethod
    def from_flow(cls, flow: Any) -> RequestData:
        """Create request data from a mitmproxy flow."""
        headers = {}
        query: dict[str, str] = {}

        if flow.request:
            for key, value in flow.request.headers.items():
                headers[key.lower()] = value
            # repeated parameters: the first occurrence wins
            for key, value in flow.request.query.items(multi=True):
                query.setdefault(key, value)

        return cls(
            headers=headers,
            query=query,
            properties=dict(flow.metadata),
        )

    def get_header(self, name: str) -> str | None:
        """Get a header value (case-insensitive)."""
        return self.headers.get(name.lower())

    def get_query(self, name: str) -> str | None:
        return self.query.get(name)

    def get_property(self, path: tuple[str, ...] | list[str]) -> Any:
        """
        Walk a path into the property tree.

        Path segments index dicts by key and lists by decimal position.
        Returns None when any segment is missing.
        """
        current: Any = self.properties
        for segment in path:
            if isinstance(current, dict):
                if segment not in current:
                    return None
                current = current[segment]
            elif isinstance(current, (list, tuple)):
                if not segment.isdecimal() or int(segment) >= len(current):
                    return None
                current = current[int(segment)]
            else:
                return None
        return current


def resolve_seed(location: Location, request: RequestData) -> Any:
    """
    Capture the seed for a location.

    Returns:
        str or bytes for text seeds, a dict/list tree for structured
        properties, or None if the selector finds nothing
    """
    if location.selector == SelectorKind.HEADER:
        for name in location.args:
            value = request.get_header(name)
            if value is not None:
                return value
        return None

    elif location.selector == SelectorKind.QUERY_STRING:
        for name in location.args:
            value = request.get_query(name)
            if value is not None:
                return value
        return None

    elif location.selector == SelectorKind.PROPERTY:
        return request.get_property(location.args)

    logger.warning(f"Unknown selector: {location.selector}")
    return None
