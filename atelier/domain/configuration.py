"""Configuration identity.

A configuration is the ``{"materialId": ..., "colorId": ...}`` map a
customer picks for a line item. Two line items describe the same thing
when their maps are structurally equal, regardless of key order, so the
canonical serialized form below is what the cart uses as a lookup and
uniqueness key.
"""

import json
from typing import Any, Dict, Mapping, Optional

MATERIAL = "materialId"
COLOR = "colorId"
SIZE = "sizeId"
FABRIC = "fabricId"


def canonical_configuration(configuration: Optional[Mapping[str, Any]]) -> Dict[str, Any]:
    """Return a plain dict with keys in sorted order. ``None`` means empty."""
    if not configuration:
        return {}
    return {str(key): configuration[key] for key in sorted(configuration, key=str)}


def configuration_key(configuration: Optional[Mapping[str, Any]]) -> str:
    return json.dumps(
        canonical_configuration(configuration),
        sort_keys=True,
        separators=(",", ":"),
        default=str,
    )


def same_configuration(a: Optional[Mapping[str, Any]], b: Optional[Mapping[str, Any]]) -> bool:
    return configuration_key(a) == configuration_key(b)
