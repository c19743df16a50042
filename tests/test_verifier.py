"""
Tests for CandidateVerifier

Tests cover:
- Record decoding into a CandidateRecord
- Malformed records skipped without touching the filesystem
- Missing files treated as already resolved
- The retention comparison on the live mtime
- Deletion gated off by default, performed when enabled
- lstat semantics for symlinks
- Filenames that are not valid UTF-8
"""

import logging
import os
import sys

import pytest

from core.verifier import CandidateVerifier
from model.candidate import Verdict
from repository.candidate_record_repository import CandidateRecordRepository
from tests.helpers import (
    NOW,
    make_old_file,
    make_undecodable_file,
    seed_raw_record,
    seed_record,
)
from util.enums import MetadataFailure


@pytest.fixture(name="make_verifier")
def fixture_make_verifier(client, make_ctx):
    def _make(**policy):
        ctx = make_ctx(**policy)
        return CandidateVerifier(ctx, CandidateRecordRepository(client))

    return _make


class TestResolve:
    def test_decodes_quoted_fields(self, client, make_verifier):
        seed_record(client, "file:1", 1000000, "/tmp/old")
        record = make_verifier().resolve("file:1")
        assert record.stored_mtime == 1000000
        assert record.path == "/tmp/old"
        assert record.key == "file:1"


class TestMalformed:
    def test_non_numeric_mtime_skips_without_stat(
        self, client, make_verifier, monkeypatch, caplog
    ):
        seed_record(client, "file:1", "notanumber", "/tmp/old")

        def boom(*_a, **_kw):
            raise AssertionError("lstat must not be called")

        monkeypatch.setattr("core.verifier.os.lstat", boom)
        caplog.set_level(logging.INFO, logger="core.verifier")

        result = make_verifier().verify("file:1")

        assert result.verdict == Verdict.malformed
        assert result.failure == MetadataFailure.INVALID_FORMAT
        assert "verify.malformed" in caplog.text
        assert "invalid_format" in caplog.text

    def test_missing_record_is_null_input(self, make_verifier):
        result = make_verifier().verify("file:nothing-here")
        assert result.verdict == Verdict.malformed
        assert result.failure == MetadataFailure.NULL_INPUT

    def test_missing_path_field(self, client, make_verifier):
        client.hset("file:2", mapping={"mtime": '"5"'})
        result = make_verifier().verify("file:2")
        assert result.verdict == Verdict.malformed
        assert result.failure == MetadataFailure.NULL_INPUT

    def test_out_of_range_mtime(self, client, make_verifier):
        seed_record(client, "file:3", "9" * 25, "/tmp/x")
        result = make_verifier().verify("file:3")
        assert result.failure == MetadataFailure.OUT_OF_RANGE


class TestFreshness:
    def test_old_file_is_eligible_but_kept_by_default(self, client, tmp_path, make_verifier):
        path = make_old_file(tmp_path, "old", 1000000)
        seed_record(client, "file:1", 1000000, path)

        result = make_verifier(retention_seconds=86_400).verify("file:1")

        assert result.verdict == Verdict.eligible
        assert result.stored_mtime == 1000000
        assert result.fresh_mtime == 1000000
        assert result.now == NOW
        assert path.exists()

    def test_old_file_is_deleted_when_enabled(self, client, tmp_path, make_verifier):
        path = make_old_file(tmp_path, "old", 1000000)
        seed_record(client, "file:1", 1000000, path)

        result = make_verifier(retention_seconds=86_400, delete_enabled=True).verify(
            "file:1"
        )

        assert result.verdict == Verdict.deleted
        assert not path.exists()

    def test_recently_touched_file_is_retained(self, client, tmp_path, make_verifier):
        # indexed as old, but modified since
        path = make_old_file(tmp_path, "touched", NOW - 10)
        seed_record(client, "file:1", 1000000, path)

        result = make_verifier(retention_seconds=86_400, delete_enabled=True).verify(
            "file:1"
        )

        assert result.verdict == Verdict.retained
        assert result.fresh_mtime == NOW - 10
        assert path.exists()

    def test_boundary_is_not_eligible(self, client, tmp_path, make_verifier):
        path = make_old_file(tmp_path, "edge", NOW - 100)
        seed_record(client, "file:1", NOW - 100, path)
        result = make_verifier(retention_seconds=100, delete_enabled=True).verify("file:1")
        assert result.verdict == Verdict.retained

    def test_vanished_file_is_a_no_op(self, client, tmp_path, make_verifier):
        seed_record(client, "file:1", 1000000, tmp_path / "gone")
        result = make_verifier(delete_enabled=True).verify("file:1")
        assert result.verdict == Verdict.vanished
        assert result.path == str(tmp_path / "gone")

    def test_directory_is_never_unlinked(self, client, tmp_path, make_verifier):
        d = tmp_path / "dir"
        d.mkdir()
        os.utime(d, (1000, 1000))
        seed_record(client, "file:1", 1000, d)

        result = make_verifier(retention_seconds=0, delete_enabled=True).verify("file:1")

        assert result.verdict == Verdict.delete_failed
        assert d.is_dir()

    @pytest.mark.skipif(
        os.utime not in os.supports_follow_symlinks,
        reason="cannot set a symlink's own mtime here",
    )
    def test_symlink_is_judged_by_itself(self, client, tmp_path, make_verifier):
        target = make_old_file(tmp_path, "target", 1000)
        link = tmp_path / "link"
        link.symlink_to(target)
        os.utime(link, (NOW - 5, NOW - 5), follow_symlinks=False)
        seed_record(client, "file:1", 1000, link)

        result = make_verifier(retention_seconds=60, delete_enabled=True).verify("file:1")

        assert result.verdict == Verdict.retained
        assert result.fresh_mtime == NOW - 5
        assert target.exists()


posix_bytes_names = pytest.mark.skipif(
    sys.platform in ("win32", "darwin"),
    reason="needs a filesystem that accepts arbitrary byte filenames",
)


@posix_bytes_names
class TestUndecodablePaths:
    def test_non_utf8_filename_is_deleted(self, client, tmp_path, make_verifier):
        raw = make_undecodable_file(tmp_path, 1000)
        seed_raw_record(client, "file:1", 1000, raw)

        result = make_verifier(retention_seconds=0, delete_enabled=True).verify("file:1")

        assert result.verdict == Verdict.deleted
        assert os.fsencode(result.path) == raw
        assert not os.path.lexists(raw)

    def test_non_utf8_filename_is_retained_when_young(self, client, tmp_path, make_verifier):
        raw = make_undecodable_file(tmp_path, NOW - 5)
        seed_raw_record(client, "file:1", NOW - 5, raw)

        result = make_verifier(retention_seconds=60, delete_enabled=True).verify("file:1")

        assert result.verdict == Verdict.retained
        assert os.path.lexists(raw)
