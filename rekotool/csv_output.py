"""
CSV Output
Streams one result line per processed file, flushing as it goes.
"""

import sys
from typing import Optional, Sequence, TextIO


COLLECT_HEADER = ("FileName", "FaceID")
SEARCH_HEADER = ("FileName", "FileSize", "TimeTaken", "FaceID", "Similarity")


class CsvEmitter:
    """
    Writes a header line and then one line per file to a text stream.

    Fields are joined with commas and written as-is: file names containing a
    comma will shift the columns of their line.
    """

    def __init__(self, header: Sequence[str], stream: Optional[TextIO] = None):
        self.header = tuple(header)
        self.stream = stream if stream is not None else sys.stdout
        self.rows_written = 0
        self._header_written = False

    def write_header(self) -> None:
        if self._header_written:
            return
        self._write_line(self.header)
        self._header_written = True

    def write_row(self, *fields) -> None:
        """Write one record; the header goes out first if it has not yet."""
        if len(fields) != len(self.header):
            raise ValueError(f"Expected {len(self.header)} fields, got {len(fields)}")
        self.write_header()
        self._write_line(fields)
        self.rows_written += 1

    def _write_line(self, fields: Sequence) -> None:
        self.stream.write(",".join(str(field) for field in fields) + "\n")
        self.stream.flush()
