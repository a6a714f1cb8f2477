"""
File I/O service for loading the three panes.

Handles:
- Encoding detection
- Line ending normalization
- Atomic writes of the edited common pane
"""

from __future__ import annotations

import logging
import os
import shutil
import tempfile
from dataclasses import dataclass
from enum import Enum, auto
from pathlib import Path
from typing import Optional

import chardet


logger = logging.getLogger(__name__)


class LineEnding(Enum):
    """Line ending style."""
    LF = auto()      # Unix: \n
    CRLF = auto()    # Windows: \r\n
    CR = auto()      # Old Mac: \r
    MIXED = auto()   # Mixed endings
    NONE = auto()    # No line endings (single line)


@dataclass
class FileContent:
    """Container for file content with metadata."""
    content: str
    encoding: str
    line_ending: LineEnding
    size: int

    @property
    def line_count(self) -> int:
        return self.content.count('\n') + 1


@dataclass
class ReadResult:
    """Result of a file read operation."""
    success: bool
    content: Optional[FileContent] = None
    error: Optional[str] = None


@dataclass
class WriteResult:
    """Result of a file write operation."""
    success: bool
    bytes_written: int = 0
    error: Optional[str] = None


class FileIOService:
    """Service for safe file I/O operations."""

    def __init__(
        self,
        default_encoding: str = 'utf-8',
        max_text_size: int = 50 * 1024 * 1024  # 50MB default limit
    ):
        self.default_encoding = default_encoding
        self.max_text_size = max_text_size

    def read_text(
        self,
        path: Path | str,
        encoding: Optional[str] = None
    ) -> ReadResult:
        """
        Read a text file with automatic encoding detection.

        The returned content always uses LF line endings; the original style
        is reported in ``line_ending``.

        Args:
            path: Path to the file
            encoding: Force specific encoding (auto-detect if None)

        Returns:
            ReadResult with content or error information
        """
        path = Path(path)

        if not path.exists():
            return ReadResult(success=False, error=f"File not found: {path}")

        if not path.is_file():
            return ReadResult(success=False, error=f"Not a file: {path}")

        try:
            file_size = path.stat().st_size
            if file_size > self.max_text_size:
                return ReadResult(
                    success=False,
                    error=f"File too large for text comparison ({file_size / 1024 / 1024:.2f} MB). Max size is {self.max_text_size / 1024 / 1024:.2f} MB."
                )
            raw = path.read_bytes()
        except PermissionError:
            return ReadResult(success=False, error=f"Permission denied: {path}")
        except OSError as e:
            return ReadResult(success=False, error=f"Could not read file: {e}")

        encoding = encoding or self._detect_encoding(raw)
        try:
            text = raw.decode(encoding)
        except (UnicodeDecodeError, LookupError):
            logger.warning(f"FileIOService - {path} is not valid {encoding}, replacing bad bytes")
            text = raw.decode(self.default_encoding, errors='replace')
            encoding = self.default_encoding

        line_ending = self._detect_line_ending(text)
        return ReadResult(
            success=True,
            content=FileContent(
                content=self._normalize_line_endings(text),
                encoding=encoding,
                line_ending=line_ending,
                size=file_size,
            )
        )

    def write_text(
        self,
        path: Path | str,
        content: str,
        encoding: str = 'utf-8',
        line_ending: LineEnding = LineEnding.LF
    ) -> WriteResult:
        """
        Atomically write LF-normalized text, converting to ``line_ending``.

        Args:
            path: Path to write to
            content: Text with LF line endings
            encoding: Encoding to use
            line_ending: Line ending style for the file on disk

        Returns:
            WriteResult with success status
        """
        path = Path(path)
        separator = self._get_line_separator(line_ending)
        if separator != '\n':
            content = content.replace('\n', separator)

        try:
            encoded = content.encode(encoding)

            dir_path = path.parent
            dir_path.mkdir(parents=True, exist_ok=True)

            fd, temp_path = tempfile.mkstemp(dir=dir_path)
            try:
                os.write(fd, encoded)
                os.close(fd)
                shutil.move(temp_path, path)
            except OSError:
                if os.path.exists(temp_path):
                    os.unlink(temp_path)
                raise

            return WriteResult(success=True, bytes_written=len(encoded))

        except PermissionError:
            return WriteResult(success=False, error=f"Permission denied: {path}")
        except OSError as e:
            return WriteResult(success=False, error=f"OS error: {e}")

    def _detect_encoding(self, content: bytes) -> str:
        """Detect encoding of content."""
        if not content:
            return self.default_encoding

        if content.startswith(b'\xef\xbb\xbf'):
            return 'utf-8-sig'

        # Use chardet for detection
        result = chardet.detect(content)

        if result['confidence'] > 0.7 and result['encoding']:
            encoding = result['encoding'].lower()
            # Normalize encoding names
            if encoding == 'ascii':
                return 'utf-8'  # ASCII is subset of UTF-8
            return encoding

        return self.default_encoding

    def _detect_line_ending(self, content: str) -> LineEnding:
        """Detect line ending style in content."""
        crlf_count = content.count('\r\n')
        lf_count = content.count('\n') - crlf_count
        cr_count = content.count('\r') - crlf_count

        if crlf_count == 0 and lf_count == 0 and cr_count == 0:
            return LineEnding.NONE

        total = crlf_count + lf_count + cr_count

        if crlf_count == total:
            return LineEnding.CRLF
        elif lf_count == total:
            return LineEnding.LF
        elif cr_count == total:
            return LineEnding.CR
        else:
            return LineEnding.MIXED

    @staticmethod
    def _normalize_line_endings(content: str) -> str:
        return content.replace('\r\n', '\n').replace('\r', '\n')

    def _get_line_separator(self, line_ending: LineEnding) -> str:
        """Get the line separator string for a line ending type."""
        if line_ending == LineEnding.CRLF:
            return '\r\n'
        elif line_ending == LineEnding.CR:
            return '\r'
        else:
            return '\n'
