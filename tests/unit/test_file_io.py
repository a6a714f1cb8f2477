"""Tests for FileIOService."""

from __future__ import annotations

from pathlib import Path

import pytest

from tripane.services.file_io import FileIOService, LineEnding


@pytest.fixture
def service() -> FileIOService:
    return FileIOService()


class TestReadText:
    """Tests for reading input files."""

    def test_reads_lf_file(self, service: FileIOService, tmp_path: Path) -> None:
        """Test reading a plain LF text file."""
        path = tmp_path / "common.txt"
        path.write_bytes(b"a\nb\n")

        result = service.read_text(path)

        assert result.success
        assert result.content.content == "a\nb\n"
        assert result.content.line_ending == LineEnding.LF
        assert result.content.size == 4

    def test_crlf_is_normalized(self, service: FileIOService, tmp_path: Path) -> None:
        """Test that Windows line endings are converted to LF."""
        path = tmp_path / "left.txt"
        path.write_bytes(b"a\r\nb\r\n")

        result = service.read_text(path)

        assert result.content.content == "a\nb\n"
        assert result.content.line_ending == LineEnding.CRLF

    def test_mixed_line_endings(self, service: FileIOService, tmp_path: Path) -> None:
        """Test detection of mixed line endings."""
        path = tmp_path / "mixed.txt"
        path.write_bytes(b"a\r\nb\nc\rd")

        result = service.read_text(path)

        assert result.content.content == "a\nb\nc\nd"
        assert result.content.line_ending == LineEnding.MIXED

    def test_utf8_bom(self, service: FileIOService, tmp_path: Path) -> None:
        """Test that a UTF-8 byte order mark is stripped."""
        path = tmp_path / "bom.txt"
        path.write_bytes(b"\xef\xbb\xbfhello\n")

        result = service.read_text(path)

        assert result.content.encoding == "utf-8-sig"
        assert result.content.content == "hello\n"

    def test_empty_file(self, service: FileIOService, tmp_path: Path) -> None:
        """Test reading an empty file."""
        path = tmp_path / "empty.txt"
        path.write_bytes(b"")

        result = service.read_text(path)

        assert result.success
        assert result.content.content == ""
        assert result.content.line_ending == LineEnding.NONE
        assert result.content.line_count == 1

    def test_missing_file(self, service: FileIOService, tmp_path: Path) -> None:
        """Test that a missing file is reported, not raised."""
        result = service.read_text(tmp_path / "nope.txt")

        assert not result.success
        assert "File not found" in result.error

    def test_directory_is_rejected(self, service: FileIOService, tmp_path: Path) -> None:
        """Test that directories are not read."""
        result = service.read_text(tmp_path)

        assert not result.success
        assert "Not a file" in result.error

    def test_size_limit(self, tmp_path: Path) -> None:
        """Test that oversized files are refused."""
        path = tmp_path / "big.txt"
        path.write_bytes(b"x" * 100)

        result = FileIOService(max_text_size=10).read_text(path)

        assert not result.success
        assert "too large" in result.error


class TestWriteText:
    """Tests for saving the common pane."""

    def test_write_lf(self, service: FileIOService, tmp_path: Path) -> None:
        """Test writing LF text."""
        path = tmp_path / "out.txt"

        result = service.write_text(path, "a\nb\n")

        assert result.success
        assert result.bytes_written == 4
        assert path.read_bytes() == b"a\nb\n"

    def test_write_crlf(self, service: FileIOService, tmp_path: Path) -> None:
        """Test converting to CRLF on write."""
        path = tmp_path / "out.txt"

        service.write_text(path, "a\nb\n", line_ending=LineEnding.CRLF)

        assert path.read_bytes() == b"a\r\nb\r\n"

    def test_write_creates_parent_directories(self, service: FileIOService, tmp_path: Path) -> None:
        """Test writing into a directory that does not exist yet."""
        path = tmp_path / "nested" / "dir" / "out.txt"

        result = service.write_text(path, "x")

        assert result.success
        assert path.read_text(encoding="utf-8") == "x"

    def test_write_replaces_existing_file(self, service: FileIOService, tmp_path: Path) -> None:
        """Test that an existing file is overwritten."""
        path = tmp_path / "out.txt"
        path.write_text("old", encoding="utf-8")

        service.write_text(path, "new")

        assert path.read_text(encoding="utf-8") == "new"
        assert [p.name for p in tmp_path.iterdir()] == ["out.txt"]
