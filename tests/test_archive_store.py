"""
Critical cleanup tests: files must end up in the trash or the dated archive,
never be lost, and every risky file must go through the guard chain.
"""
import json
import os
from datetime import timedelta
from unittest import mock

import pytest

from studysweep.archive.models import CleanupMode, FailureKind, SkipReason
from studysweep.archive.store import ArchiveStore, MAX_NAME_ATTEMPTS
from studysweep.core.models import Concern, LockedFileChoice, ProtectionLevel
from studysweep.errors import ManifestWriteError
from studysweep.services.file_service import FileService
from studysweep.utils.convert_utils import ConvertUtils
from conftest import FIXED_NOW, write_file

TODAY = FIXED_NOW.date().isoformat()


def _store(context):
    return ArchiveStore(context)


class TestPreview:
    """Preview reports, never mutates."""

    def test_preview_changes_nothing(self, context, temp_dir, study_tree):
        files = [study_tree["notes"], study_tree["essay"]]

        result = _store(context).clean(files, CleanupMode.PREVIEW)

        assert all(f.exists() for f in files)
        assert not context.archive_root.exists()
        assert [p.path for p in result.previews] == [str(f) for f in files]
        assert result.total_size_bytes == sum(f.stat().st_size for f in files)
        assert result.files_processed == 0

    def test_preview_reports_risks(self, context, protection, temp_dir):
        cloud = write_file(temp_dir / "Dropbox" / "notes.pdf")
        soft = write_file(temp_dir / "kept" / "essay.docx")
        protection.add(str(temp_dir / "kept"), ProtectionLevel.SOFT)

        result = _store(context).clean([cloud, soft], CleanupMode.PREVIEW)

        assert result.previews[0].is_cloud_synced is True
        assert result.previews[1].protection == ProtectionLevel.SOFT
        assert context.decisions.calls == [], "Preview must never ask questions"

    def test_preview_skips_missing(self, context, temp_dir):
        result = _store(context).clean([temp_dir / "missing.pdf"], CleanupMode.PREVIEW)
        assert result.skipped[0].reason == SkipReason.NOT_FOUND


class TestArchive:
    """Moves into <archive_root>/<date>/<course>/ with a manifest."""

    def test_archives_into_dated_course_folder(self, context, temp_dir):
        source = write_file(temp_dir / "calculus_notes.pdf", b"integrals", days_old=10)

        result = _store(context).clean([source], CleanupMode.ARCHIVE)

        destination = context.archive_root / TODAY / "math" / "calculus_notes.pdf"
        assert not source.exists()
        assert destination.read_bytes() == b"integrals"
        assert result.successful == [str(source)]
        assert result.files_processed == 1
        assert result.total_size_bytes == len(b"integrals")
        assert result.snapshot_dir == str(context.archive_root / TODAY)

    def test_unmatched_course_goes_to_general(self, context, temp_dir):
        source = write_file(temp_dir / "report.docx")

        _store(context).clean([source], CleanupMode.ARCHIVE)

        assert (context.archive_root / TODAY / "general" / "report.docx").exists()

    def test_name_collision_gets_suffix(self, context, temp_dir):
        first = write_file(temp_dir / "a" / "report.docx", b"first")
        second = write_file(temp_dir / "b" / "report.docx", b"second")

        _store(context).clean([first, second], CleanupMode.ARCHIVE)

        general = context.archive_root / TODAY / "general"
        assert (general / "report.docx").read_bytes() == b"first"
        assert (general / "report_1.docx").read_bytes() == b"second"

    def test_collision_exhaustion_fails_the_file(self, context, temp_dir):
        general = context.archive_root / TODAY / "general"
        general.mkdir(parents=True)
        (general / "report.docx").write_bytes(b"taken")
        for i in range(1, MAX_NAME_ATTEMPTS):
            (general / f"report_{i}.docx").write_bytes(b"taken")
        source = write_file(temp_dir / "report.docx", b"new")

        result = _store(context).clean([source], CleanupMode.ARCHIVE)

        assert source.exists(), "File must stay in place when no name is free"
        assert result.failed[0].kind == FailureKind.NAME_CONFLICT_EXHAUSTED
        assert result.successful == []

    def test_resolve_destination_sequence(self, tmp_path):
        assert ArchiveStore.resolve_destination(tmp_path, "notes.pdf") == tmp_path / "notes.pdf"
        (tmp_path / "notes.pdf").write_bytes(b"")
        (tmp_path / "notes_1.pdf").write_bytes(b"")
        assert ArchiveStore.resolve_destination(tmp_path, "notes.pdf") == tmp_path / "notes_2.pdf"

    def test_manifest_written(self, context, temp_dir):
        source = write_file(temp_dir / "lecture_cs101.pdf", b"slides", days_old=40)

        _store(context).clean([source], CleanupMode.ARCHIVE)

        manifest = json.loads((context.archive_root / TODAY / "archive_info.json").read_text(encoding="utf-8"))
        assert manifest["date"] == TODAY
        assert manifest["total_files"] == 1
        assert manifest["total_bytes"] == len(b"slides")
        entry = manifest["files"][0]
        assert entry["original_path"] == str(source)
        assert entry["course_tag"] == "cs"
        assert entry["file_type"] == "pdf"
        assert ConvertUtils.rfc3339_to_datetime(entry["archived_at"]) == FIXED_NOW
        assert ConvertUtils.rfc3339_to_datetime(entry["original_modified_at"]) == FIXED_NOW - timedelta(days=40)

    def test_same_day_runs_merge_manifest(self, context, temp_dir):
        store = _store(context)
        store.clean([write_file(temp_dir / "one.txt", b"1")], CleanupMode.ARCHIVE)
        store.clean([write_file(temp_dir / "two.txt", b"22")], CleanupMode.ARCHIVE)

        snapshot = store_manifest(context)
        assert snapshot["total_files"] == 2
        assert [os.path.basename(f["original_path"]) for f in snapshot["files"]] == ["one.txt", "two.txt"]

    def test_reminder_scheduled_thirty_days_out(self, context, temp_dir):
        _store(context).clean([write_file(temp_dir / "one.txt")], CleanupMode.ARCHIVE)

        text = (context.archive_root / TODAY / ".reminder_date").read_text(encoding="utf-8")
        assert ConvertUtils.rfc3339_to_datetime(text) == FIXED_NOW + timedelta(days=30)

    def test_nothing_archived_writes_nothing(self, context, temp_dir):
        result = _store(context).clean([temp_dir / "missing.pdf"], CleanupMode.ARCHIVE)

        assert result.skipped[0].reason == SkipReason.NOT_FOUND
        assert result.snapshot_dir is None
        assert not (context.archive_root / TODAY).exists()

    def test_move_failure_is_recorded_and_batch_continues(self, context, temp_dir):
        bad = write_file(temp_dir / "bad.txt", b"bad")
        good = write_file(temp_dir / "good.txt", b"good")
        real_rename = os.rename

        def flaky_rename(src, dest):
            if src == str(bad):
                raise OSError(18, "Invalid cross-device link")
            real_rename(src, dest)

        with mock.patch.object(FileService, "rename", side_effect=flaky_rename):
            result = _store(context).clean([bad, good], CleanupMode.ARCHIVE)

        assert bad.exists()
        assert result.failed[0].path == str(bad)
        assert result.failed[0].kind == FailureKind.MOVE_FAILED
        assert result.successful == [str(good)]

    def test_manifest_failure_raises_with_result(self, context, temp_dir):
        source = write_file(temp_dir / "one.txt")

        with mock.patch.object(FileService, "write_text_atomic", side_effect=OSError("disk full")):
            with pytest.raises(ManifestWriteError) as exc_info:
                _store(context).clean([source], CleanupMode.ARCHIVE)

        assert exc_info.value.result.successful == [str(source)]
        assert (context.archive_root / TODAY / "general" / "one.txt").exists(), "Completed moves are kept"

    def test_unparseable_same_day_manifest_is_kept(self, context, temp_dir):
        snapshot_dir = context.archive_root / TODAY
        snapshot_dir.mkdir(parents=True)
        (snapshot_dir / "archive_info.json").write_text("{not json", encoding="utf-8")
        source = write_file(temp_dir / "one.txt")

        with pytest.raises(ManifestWriteError) as exc_info:
            _store(context).clean([source], CleanupMode.ARCHIVE)

        assert exc_info.value.result.successful == [str(source)]
        assert (snapshot_dir / "archive_info.json").read_text(encoding="utf-8") == "{not json"
        assert not (snapshot_dir / ".reminder_date").exists()

    def test_each_record_stamped_when_moved(self, context, temp_dir):
        ticks = []

        def advancing_clock():
            ticks.append(None)
            return FIXED_NOW + timedelta(seconds=5 * len(ticks))

        context.clock = advancing_clock
        sources = [write_file(temp_dir / "one.txt", b"1"), write_file(temp_dir / "two.txt", b"22")]

        _store(context).clean(sources, CleanupMode.ARCHIVE)

        stamps = [ConvertUtils.rfc3339_to_datetime(f["archived_at"]) for f in store_manifest(context)["files"]]
        assert stamps[0] < stamps[1]
        assert all(stamp > FIXED_NOW + timedelta(seconds=5) for stamp in stamps)

    def test_accepts_file_records(self, context, temp_dir, study_tree):
        from studysweep.core.scanner import DirectoryScanner
        records = DirectoryScanner(context).scan(str(temp_dir)).files

        result = _store(context).clean(records, CleanupMode.ARCHIVE)

        assert sorted(result.successful) == sorted(r.path for r in records)
        assert not any(os.path.exists(r.path) for r in records)


def store_manifest(context):
    with open(context.archive_root / TODAY / "archive_info.json", encoding="utf-8") as f:
        return json.load(f)


class TestRecycle:
    """Trash mode goes through FileService.move_to_trash (send2trash)."""

    def test_moves_to_trash(self, context, temp_dir):
        source = write_file(temp_dir / "old_notes.pdf", b"abc")

        with mock.patch("studysweep.services.file_service.send2trash") as mock_trash:
            result = _store(context).clean([source], CleanupMode.RECYCLE)

        mock_trash.assert_called_once_with(str(source))
        assert result.successful == [str(source)]
        assert result.total_size_bytes == 3
        assert not context.archive_root.exists()

    def test_trash_failure_is_recorded(self, context, temp_dir):
        first = write_file(temp_dir / "a.txt")
        second = write_file(temp_dir / "b.txt")

        with mock.patch("studysweep.services.file_service.send2trash",
                        side_effect=[OSError("trash full"), None]):
            result = _store(context).clean([first, second], CleanupMode.RECYCLE)

        assert result.failed[0].kind == FailureKind.TRASH_FAILED
        assert "trash full" in result.failed[0].message
        assert result.successful == [str(second)]


class TestGuards:
    """missing -> Hard -> cloud -> locked -> Soft, in that order."""

    @pytest.mark.parametrize("mode", [CleanupMode.RECYCLE, CleanupMode.ARCHIVE])
    def test_hard_protected_skipped_without_asking(self, context, protection, temp_dir, mode):
        source = write_file(temp_dir / "keep" / "Dropbox" / "notes.pdf")
        protection.add(str(temp_dir / "keep"), ProtectionLevel.HARD)

        with mock.patch("studysweep.services.file_service.send2trash") as mock_trash:
            result = _store(context).clean([source], mode)

        mock_trash.assert_not_called()
        assert source.exists()
        assert result.skipped[0].reason == SkipReason.HARD_PROTECTED
        assert context.decisions.calls == []

    def test_cloud_file_declined(self, context, decisions, temp_dir):
        decisions.proceed = False
        source = write_file(temp_dir / "OneDrive - Uni" / "notes.pdf")

        result = _store(context).clean([source], CleanupMode.ARCHIVE)

        assert source.exists()
        assert result.skipped[0].reason == SkipReason.DECLINED
        assert decisions.concerns() == [Concern.CLOUD_SYNCED]

    def test_cloud_file_confirmed(self, context, decisions, temp_dir):
        source = write_file(temp_dir / "Dropbox" / "notes.pdf")

        result = _store(context).clean([source], CleanupMode.ARCHIVE)

        assert result.successful == [str(source)]
        assert decisions.concerns() == [Concern.CLOUD_SYNCED]

    def test_soft_protected_asks_last(self, context, decisions, protection, temp_dir):
        source = write_file(temp_dir / "kept" / "Dropbox" / "notes.pdf")
        protection.add(str(temp_dir / "kept"), ProtectionLevel.SOFT)

        _store(context).clean([source], CleanupMode.ARCHIVE)

        assert decisions.concerns() == [Concern.CLOUD_SYNCED, Concern.SOFT_PROTECTED]

    def test_soft_protected_declined(self, context, decisions, protection, temp_dir):
        decisions.proceed = False
        source = write_file(temp_dir / "kept" / "notes.pdf")
        protection.add(str(temp_dir / "kept"), ProtectionLevel.SOFT)

        result = _store(context).clean([source], CleanupMode.RECYCLE)

        assert source.exists()
        assert result.skipped[0].reason == SkipReason.DECLINED

    def test_locked_skip(self, context, decisions, temp_dir):
        source = write_file(temp_dir / "notes.pdf")

        with mock.patch("studysweep.core.classifier.PathClassifier.is_locked", return_value=True):
            result = _store(context).clean([source], CleanupMode.ARCHIVE)

        assert source.exists()
        assert result.skipped[0].reason == SkipReason.LOCKED
        context.sleep.assert_not_called()

    def test_locked_retry_succeeds(self, context, decisions, temp_dir):
        decisions.locked = LockedFileChoice.RETRY
        source = write_file(temp_dir / "notes.pdf")

        with mock.patch("studysweep.core.classifier.PathClassifier.is_locked", side_effect=[True, False]):
            result = _store(context).clean([source], CleanupMode.ARCHIVE)

        context.sleep.assert_called_once_with(10)
        assert result.successful == [str(source)]

    def test_locked_retry_still_locked(self, context, decisions, temp_dir):
        decisions.locked = LockedFileChoice.RETRY
        source = write_file(temp_dir / "notes.pdf")

        with mock.patch("studysweep.core.classifier.PathClassifier.is_locked", return_value=True):
            result = _store(context).clean([source], CleanupMode.ARCHIVE)

        context.sleep.assert_called_once_with(10)
        assert result.skipped[0].reason == SkipReason.LOCKED
        assert source.exists()

    def test_cancel_keeps_completed_work(self, context, decisions, temp_dir):
        """
        CRITICAL: Cancel stops the batch; files already archived stay archived
        and are still recorded in the manifest.
        """
        decisions.locked = LockedFileChoice.CANCEL
        first = write_file(temp_dir / "first.txt", b"1")
        locked = write_file(temp_dir / "locked.txt", b"22")
        last = write_file(temp_dir / "last.txt", b"333")

        def is_locked(path):
            return path == str(locked)

        with mock.patch("studysweep.core.classifier.PathClassifier.is_locked", side_effect=is_locked):
            result = _store(context).clean([first, locked, last], CleanupMode.ARCHIVE)

        assert result.cancelled is True
        assert result.successful == [str(first)]
        assert {s.path for s in result.skipped} == {str(locked), str(last)}
        assert all(s.reason == SkipReason.CANCELLED for s in result.skipped)
        assert locked.exists() and last.exists()
        assert store_manifest(context)["total_files"] == 1
