"""
Tests for path classification: system paths, protection lookup, cloud folders, locks.
"""
import sys
from unittest import mock

import pytest

from studysweep.core.classifier import PathClassifier, ProtectionRegistry
from studysweep.core.models import ProtectionEntry, ProtectionLevel


class TestProtectionRegistry:
    """Longest-prefix lookup on whole path components."""

    def test_unprotected_path(self, tmp_path):
        registry = ProtectionRegistry()
        assert registry.is_protected(str(tmp_path / "a.pdf")) is None

    def test_most_specific_entry_wins(self, tmp_path):
        registry = ProtectionRegistry()
        registry.add(str(tmp_path), ProtectionLevel.SOFT)
        registry.add(str(tmp_path / "keep"), ProtectionLevel.HARD)

        assert registry.is_protected(str(tmp_path / "keep" / "a.pdf")).level == ProtectionLevel.HARD
        assert registry.is_protected(str(tmp_path / "other" / "a.pdf")).level == ProtectionLevel.SOFT

    def test_order_of_entries_does_not_matter(self, tmp_path):
        registry = ProtectionRegistry([
            ProtectionEntry(str(tmp_path / "keep"), ProtectionLevel.HARD),
            ProtectionEntry(str(tmp_path), ProtectionLevel.SOFT),
        ])
        assert registry.is_protected(str(tmp_path / "keep" / "x")).level == ProtectionLevel.HARD

    def test_prefix_must_match_whole_components(self, tmp_path):
        """/study/keep must not protect /study/keeper."""
        registry = ProtectionRegistry()
        registry.add(str(tmp_path / "keep"), ProtectionLevel.HARD)

        assert registry.is_protected(str(tmp_path / "keeper" / "a.pdf")) is None

    def test_entry_protects_itself(self, tmp_path):
        registry = ProtectionRegistry()
        registry.add(str(tmp_path), ProtectionLevel.SOFT)
        assert registry.is_protected(str(tmp_path)) is not None

    def test_entries_returns_copy(self, tmp_path):
        registry = ProtectionRegistry()
        registry.add(str(tmp_path), ProtectionLevel.SOFT)
        registry.entries.clear()
        assert len(registry.entries) == 1


class TestSystemPaths:
    @pytest.mark.parametrize("path", [
        "/usr/share/doc/readme.txt",
        "/etc/hosts",
        "/System/Library/file.pdf",
        "C:\\Windows\\System32\\notes.txt",
        "c:\\program files\\app\\manual.pdf",
    ])
    def test_system_locations(self, path):
        assert PathClassifier.is_system_path(path) is True

    @pytest.mark.parametrize("path", [
        "/home/student/usr_notes.txt",
        "/home/student/etc/notes.txt",
        "/private/var/folders/tmp/notes.txt",
    ])
    def test_component_match_only_at_root(self, path):
        assert PathClassifier.is_system_path(path) is False

    @pytest.mark.skipif(sys.platform in ("win32", "darwin"), reason="Linux trash layout")
    def test_linux_trash_is_system(self):
        assert PathClassifier.is_system_path("/home/u/.local/share/Trash/files/a.pdf") is True


class TestCloudAndLocks:
    @pytest.mark.parametrize("path, expected", [
        ("/home/u/Dropbox/notes.pdf", True),
        ("/home/u/OneDrive - University/notes.pdf", True),
        ("/home/u/Google Drive/notes.pdf", True),
        ("/home/u/sync/notes.pdf", True),
        ("/home/u/Documents/notes.pdf", False),
        ("/home/u/Dropboxed/notes.pdf", False),
        ("/home/u/Documents/dropbox_export.pdf", False),
    ])
    def test_cloud_detection(self, path, expected):
        assert PathClassifier.is_cloud_synced(path) is expected

    def test_regular_file_is_not_locked(self, tmp_path):
        file_path = tmp_path / "notes.pdf"
        file_path.write_bytes(b"content")
        assert PathClassifier.is_locked(str(file_path)) is False

    def test_open_failure_means_locked(self, tmp_path):
        file_path = tmp_path / "notes.pdf"
        file_path.write_bytes(b"content")
        with mock.patch("builtins.open", side_effect=PermissionError("in use")):
            assert PathClassifier.is_locked(str(file_path)) is True

    def test_classifier_delegates_protection(self, tmp_path):
        oracle = mock.Mock()
        oracle.is_protected.return_value = ProtectionEntry(str(tmp_path), ProtectionLevel.HARD)

        classifier = PathClassifier(oracle)

        assert classifier.is_hard_protected(str(tmp_path / "a.pdf")) is True
        oracle.is_protected.assert_called_once_with(str(tmp_path / "a.pdf"))
