"""
Delimited-text parser for portal exports.

Turns a CSV payload into RawRow mappings keyed by the header line. Exports
are frequently malformed, so a row whose field count does not match the
header is dropped (and logged) instead of failing the whole payload.
"""

import csv
import logging
from typing import Iterator, List

from bidfinder.core.domain_models import RawRow

logger = logging.getLogger(__name__)


def parse_rows(text: str, delimiter: str = ",") -> Iterator[RawRow]:
    """
    Lazily parse a delimited payload into rows.

    The first non-blank line is the header. Quoted fields may contain the
    delimiter, and a doubled quote inside a quoted field is a literal quote.
    Blank lines are skipped. Each physical line is one record.

    This is a generator: it can be consumed once. Call again on the same
    text for another pass.

    Args:
        text: Raw payload
        delimiter: Field separator

    Yields:
        RawRow per well-formed data line
    """
    lines = (line for line in text.splitlines() if line.strip())

    header_line = next(lines, None)
    if header_line is None:
        return

    headers = [h.strip() for h in _split_line(header_line, delimiter)]
    if headers and headers[0].startswith("\ufeff"):
        headers[0] = headers[0].lstrip("\ufeff")

    dropped = 0
    for line_no, line in enumerate(lines, start=2):
        values = _split_line(line, delimiter)
        if len(values) != len(headers):
            dropped += 1
            logger.debug(
                f"Dropping line {line_no}: {len(values)} fields, header has {len(headers)}"
            )
            continue
        yield {header: value.strip() for header, value in zip(headers, values)}

    if dropped:
        logger.info(f"Dropped {dropped} malformed rows")


def _split_line(line: str, delimiter: str) -> List[str]:
    # strict=False: an unterminated quote ends the field at end of line
    reader = csv.reader([line], delimiter=delimiter, quotechar='"', doublequote=True, strict=False)
    return next(reader, [])
