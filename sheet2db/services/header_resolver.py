from __future__ import annotations

import logging
from collections.abc import Iterable, Sequence

from ..errors import EmptySource, InvalidHeaders
from ..models.header import HeaderOrigin, ResolvedHeader

"""Header resolution.

Either the caller supplies the header list (no source row is consumed) or the
first row of the stream is popped and used verbatim. No trimming, case folding or
de-duplication is applied here; ``check_headers`` is the opt-in strict check.
"""

__all__ = [
    "resolve_headers",
    "check_headers",
]

logger = logging.getLogger(__name__)


def resolve_headers(
    rows: Iterable[Sequence[str]],
    supplied: Sequence[str] | None = None,
    *,
    source: str | None = None,
    sheet: str | None = None,
) -> ResolvedHeader:
    """Determine the header row and the remaining data row stream.

    Args:
        rows: row stream of the selected sheet/section
        supplied: caller-confirmed headers; when given the first row stays data
        source, sheet: context for error reporting

    Raises:
        EmptySource: headers must be detected but the stream has no first row
    """
    stream = iter(rows)
    if supplied is not None:
        logger.debug("using %d supplied headers source=%s", len(supplied), source)
        return ResolvedHeader(
            headers=[str(h) for h in supplied],
            origin=HeaderOrigin.SUPPLIED,
            rows=stream,
        )
    try:
        first = next(stream)
    except StopIteration:
        raise EmptySource("source is empty, no header row found", source=source, sheet=sheet) from None
    headers = [str(c) for c in first]
    logger.debug("detected headers=%s source=%s", headers, source)
    return ResolvedHeader(headers=headers, origin=HeaderOrigin.DETECTED, rows=stream)


def check_headers(
    headers: Sequence[str], *, source: str | None = None, sheet: str | None = None
) -> None:
    """Reject empty, blank or duplicate header names.

    Raises:
        InvalidHeaders: at least one header is unusable as a distinct column name
    """
    if not headers:
        raise InvalidHeaders("header row has no columns", source=source, sheet=sheet)
    blank = [i + 1 for i, h in enumerate(headers) if not h.strip()]
    if blank:
        raise InvalidHeaders(f"blank header at column(s) {blank}", source=source, sheet=sheet)
    seen: set[str] = set()
    duplicates: list[str] = []
    for h in headers:
        # SQLite の識別子は大文字小文字を区別しない
        key = h.lower()
        if key in seen and h not in duplicates:
            duplicates.append(h)
        seen.add(key)
    if duplicates:
        raise InvalidHeaders(f"duplicate header(s): {duplicates}", source=source, sheet=sheet)
