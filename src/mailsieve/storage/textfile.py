# =============================================================================
# Line-Oriented Text I/O
# =============================================================================
# Thin wrappers around text streams used by training, classification and
# the dump reports.
#
#   - LineSource: reads a mailbox or message one line at a time, from a file
#     or from standard input
#   - LineSink: writes report lines to a file or to standard output
#
# Both are context managers and only close streams they opened themselves.
# =============================================================================

import io
import logging
import sys
from collections.abc import Iterator
from pathlib import Path
from typing import TextIO


logger = logging.getLogger(__name__)


# Mail in the wild is not always valid UTF-8
ENCODING = "utf-8"
ENCODING_ERRORS = "replace"


class LineSource:
    """
    Reads lines from a text stream with line terminators removed.

    Usage:
        >>> with LineSource.open(Path("spam.mbox")) as source:
        ...     for line in source:
        ...         print(line)

    Attributes:
        name: Display name of the source (file path or "<stdin>").
    """

    def __init__(self, stream: TextIO, name: str = "<stream>", *, owns_stream: bool = False) -> None:
        """
        Wrap an already open text stream.

        Args:
            stream: Stream to read from.
            name: Display name used in log and error messages.
            owns_stream: Close the stream when this source is closed.
        """
        self.name = name
        self._stream = stream
        self._owns_stream = owns_stream

    @classmethod
    def open(cls, path: Path | None = None) -> "LineSource":
        """
        Open a file, or standard input when path is None.

        Raises:
            SourceIOError: If the file cannot be opened.
        """
        if path is None:
            return cls(sys.stdin, "<stdin>")

        try:
            stream = open(path, encoding=ENCODING, errors=ENCODING_ERRORS)
        except OSError as e:
            raise SourceIOError(f"Cannot open {path}: {e}") from e

        logger.debug(f"Opened {path} for reading")
        return cls(stream, str(path), owns_stream=True)

    @classmethod
    def from_text(cls, text: str, name: str = "<text>") -> "LineSource":
        """Read lines from an in-memory string, with universal newlines like a file."""
        return cls(io.StringIO(text, newline=None), name, owns_stream=True)

    def read_line(self) -> str | None:
        """
        Read the next line.

        Returns:
            The line without its terminator, or None at end of input.

        Raises:
            SourceIOError: If the underlying stream fails.
        """
        try:
            line = self._stream.readline()
        except (OSError, ValueError) as e:
            raise SourceIOError(f"Error reading {self.name}: {e}") from e

        if line == "":
            return None
        if line.endswith("\n"):
            line = line[:-1]
        return line

    def __iter__(self) -> Iterator[str]:
        while (line := self.read_line()) is not None:
            yield line

    def close(self) -> None:
        """Close the stream if this source opened it."""
        if self._owns_stream:
            self._stream.close()

    def __enter__(self) -> "LineSource":
        return self

    def __exit__(self, *exc_info) -> None:
        self.close()


class LineSink:
    """
    Writes lines to a text stream.

    Usage:
        >>> with LineSink.open(Path("dump.log")) as sink:
        ...     sink.write_line("Messages processed: 12")
    """

    def __init__(self, stream: TextIO, name: str = "<stream>", *, owns_stream: bool = False) -> None:
        self.name = name
        self._stream = stream
        self._owns_stream = owns_stream

    @classmethod
    def open(cls, path: Path | None = None) -> "LineSink":
        """
        Open a file for writing, or standard output when path is None.

        Creates missing parent directories.

        Raises:
            SinkIOError: If the file cannot be opened.
        """
        if path is None:
            return cls(sys.stdout, "<stdout>")

        try:
            path.parent.mkdir(parents=True, exist_ok=True)
            stream = open(path, "w", encoding=ENCODING)
        except OSError as e:
            raise SinkIOError(f"Cannot open {path} for writing: {e}") from e

        return cls(stream, str(path), owns_stream=True)

    def write_line(self, line: str = "") -> None:
        """Write one line followed by a newline."""
        try:
            self._stream.write(line + "\n")
        except OSError as e:
            raise SinkIOError(f"Error writing {self.name}: {e}") from e

    def write_lines(self, lines: list[str]) -> None:
        """Write several lines."""
        for line in lines:
            self.write_line(line)

    def close(self) -> None:
        """Flush, and close the stream if this sink opened it."""
        if self._owns_stream:
            self._stream.close()
        else:
            self._stream.flush()

    def __enter__(self) -> "LineSink":
        return self

    def __exit__(self, *exc_info) -> None:
        self.close()


# =============================================================================
# Exceptions
# =============================================================================

class SourceIOError(OSError):
    """Raised when an input source cannot be opened or read."""
    pass


class SinkIOError(OSError):
    """Raised when a report destination cannot be opened or written."""
    pass
