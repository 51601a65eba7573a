"""Metadata lookup with defensive extraction of homepage and description."""

from __future__ import annotations

import json
import re
import time
from typing import Any, Sequence, Union

from brewtrack.core.errors import BrewError
from brewtrack.core.logging import get_logger
from brewtrack.core.models import (
    DEFAULT_DESCRIPTION,
    DEFAULT_HOMEPAGE,
    PackageKind,
    PackageRecord,
)
from brewtrack.providers.base import MetadataSource

log = get_logger(__name__)

_CONTROL_CHARS = re.compile(r"[\x00-\x1f]")

PathPart = Union[str, int]


def error_document(message: str) -> str:
    """Synthetic metadata document used when a query fails.

    It carries no package entries, so extraction falls back to defaults.
    """
    return json.dumps({"formulae": [], "casks": [], "error": message})


_UNPARSABLE = object()


def load_document(raw: Any) -> Any:
    """Parse a metadata document after stripping control characters.

    Returns:
        The parsed document, or a sentinel when it cannot be parsed.
    """
    if isinstance(raw, bytes):
        raw = raw.decode("utf-8", errors="replace")
    if not isinstance(raw, str):
        return raw
    try:
        return json.loads(_CONTROL_CHARS.sub("", raw))
    except ValueError:
        return _UNPARSABLE


def safe_extract(raw: Any, path: Sequence[PathPart], default: str) -> str:
    """Extract a scalar field from a JSON document without ever failing.

    Control characters are stripped from string input before parsing.

    Args:
        raw: JSON text, bytes, or an already parsed document.
        path: Keys and list indices leading to the field.
        default: Returned when the field is missing, null or empty.

    Returns:
        The field as a string, or ``default``.
    """
    node = load_document(raw)
    if node is _UNPARSABLE:
        return default

    for part in path:
        if isinstance(part, int):
            if not isinstance(node, list) or not -len(node) <= part < len(node):
                return default
        elif not isinstance(node, dict) or part not in node:
            return default
        node = node[part]

    if node is None or isinstance(node, (dict, list)):
        return default
    if isinstance(node, bool):
        node = str(node).lower()

    value = str(node).strip()
    return value or default


class MetadataLookup:
    """Turns a package name into a PackageRecord.

    Lookups never raise: failures produce a record holding the default
    strings and the failure text in ``error``.
    """

    def __init__(self, source: MetadataSource) -> None:
        self.source = source

    async def lookup(self, name: str, kind: PackageKind) -> PackageRecord:
        """Look up homepage and description for a package.

        Args:
            name: Package name.
            kind: Formula or cask.

        Returns:
            A PackageRecord with real values or defaults.
        """
        start = time.perf_counter()
        error = None

        try:
            document = await self.source.query_metadata(kind, name)
        except BrewError as e:
            log.debug("metadata_lookup_failed", package=name, kind=kind.value, error=str(e))
            error = e.message
            document = error_document(error)
        except Exception as e:
            log.error(
                "metadata_lookup_error",
                package=name,
                kind=kind.value,
                error=str(e),
                exc_info=True,
            )
            error = str(e) or type(e).__name__
            document = error_document(error)
        else:
            document = load_document(document)
            if document is _UNPARSABLE:
                log.debug("metadata_unparsable", package=name, kind=kind.value)
                error = "Unparsable metadata output"
                document = error_document(error)

        entry: list[PathPart] = [kind.plural, 0]
        record = PackageRecord(
            name=name,
            kind=kind,
            homepage=safe_extract(document, [*entry, "homepage"], DEFAULT_HOMEPAGE),
            description=safe_extract(document, [*entry, "desc"], DEFAULT_DESCRIPTION),
            error=error,
        )

        log.debug(
            "metadata_lookup_complete",
            package=name,
            kind=kind.value,
            failed=record.lookup_failed,
            duration_ms=int((time.perf_counter() - start) * 1000),
        )
        return record
