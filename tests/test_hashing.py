# tests/test_hashing.py
"""Tests for content signatures."""

import hashlib

import pytest

from filetoken import FileRegistry, SIGNATURE_LENGTH, bytes_signature, file_signature


def create_test_file(path, content: bytes = b"test content"):
    """Create a test file with content."""
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_bytes(content)
    return path


class TestFileSignature:
    """Tests for file_signature()."""

    def test_default_is_sha3_256(self, temp_dir):
        path = create_test_file(temp_dir / "report.txt", b"hello world")

        assert file_signature(path) == hashlib.sha3_256(b"hello world").hexdigest()

    @pytest.mark.parametrize("algorithm", ["sha3_256", "sha256", "blake2s"])
    def test_length_is_64(self, temp_dir, algorithm):
        """Every supported algorithm yields a registrable signature."""
        path = create_test_file(temp_dir / "report.txt")

        assert len(file_signature(path, algorithm)) == SIGNATURE_LENGTH

    def test_same_content_same_signature(self, temp_dir):
        file1 = create_test_file(temp_dir / "a.txt", b"identical content")
        file2 = create_test_file(temp_dir / "b.txt", b"identical content")

        assert file_signature(file1) == file_signature(file2)

    def test_different_content_different_signature(self, temp_dir):
        file1 = create_test_file(temp_dir / "a.txt", b"content A")
        file2 = create_test_file(temp_dir / "b.txt", b"content B")

        assert file_signature(file1) != file_signature(file2)

    def test_large_file_streams(self, temp_dir):
        """Files larger than one read chunk hash like the whole content."""
        content = b"x" * 200_000
        path = create_test_file(temp_dir / "big.bin", content)

        assert file_signature(path) == bytes_signature(content)

    def test_missing_file(self, temp_dir):
        with pytest.raises(FileNotFoundError):
            file_signature(temp_dir / "missing.txt")

    def test_unsupported_algorithm(self, temp_dir):
        """Algorithms with other digest sizes are refused."""
        path = create_test_file(temp_dir / "report.txt")

        with pytest.raises(ValueError):
            file_signature(path, "sha512")

    def test_registers(self, temp_dir):
        """A computed signature can be registered and found again."""
        path = create_test_file(temp_dir / "report.txt")
        registry = FileRegistry()

        file_id = registry.create("report", file_signature(path), "alice")

        assert registry.lookup_id_by_signature(file_signature(path)) == file_id
