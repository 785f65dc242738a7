"""Structural masking of sensitive keys in JSON payload trees, with a serialized-size cap."""

import json
import logging
from typing import Iterable, Optional

from pydantic import JsonValue

from auditsink.domain.exceptions import RedactionConfigError

logger = logging.getLogger(__name__)

MASK_TOKEN = "***"
SERIALIZATION_ERROR_MARKER = '{"error":"redaction-serialization-failed"}'
# Room for the truncation marker with a 20-digit size.
MIN_MAX_BYTES = 64


def _canonical_json(value: JsonValue) -> str:
    """Compact, insertion-ordered, UTF-8 JSON. NaN/Infinity are rejected, not emitted."""
    return json.dumps(value, ensure_ascii=False, separators=(",", ":"), allow_nan=False)


def truncation_marker(size_bytes: int) -> str:
    return _canonical_json({"truncated": True, "sizeBytes": size_bytes})


class RedactionEngine:
    """
    Masks values under configured keys (case-insensitive) and caps the serialized result.

    The walk builds a new tree, so the caller's payload is never mutated. List elements are
    walked but list positions are never treated as keys. Output is a JSON string: the masked
    tree, a truncation marker when the masked form exceeds max_bytes, or a fixed error marker
    when the tree cannot be serialized. Redaction never raises into the ingestion path.
    """

    def __init__(self, redact_keys: Iterable[str], max_bytes: int) -> None:
        if max_bytes < MIN_MAX_BYTES:
            raise RedactionConfigError(
                f"max_bytes={max_bytes} is too small to hold the truncation marker"
            )
        self._keys = frozenset(k.casefold() for k in redact_keys)
        self._max_bytes = max_bytes

    def mask(self, node: JsonValue) -> JsonValue:
        """Return a masked copy of node."""
        if isinstance(node, dict):
            return {
                key: MASK_TOKEN if str(key).casefold() in self._keys else self.mask(value)
                for key, value in node.items()
            }
        if isinstance(node, list):
            return [self.mask(item) for item in node]
        return node

    def redact(self, tree: JsonValue) -> Optional[str]:
        """Mask, serialize and cap tree. None in, None out."""
        if tree is None:
            return None
        try:
            serialized = _canonical_json(self.mask(tree))
        except (TypeError, ValueError, RecursionError) as e:
            logger.warning("redaction_serialization_failed", extra={"error": str(e)})
            return SERIALIZATION_ERROR_MARKER
        size_bytes = len(serialized.encode("utf-8"))
        if size_bytes > self._max_bytes:
            return truncation_marker(size_bytes)
        return serialized
