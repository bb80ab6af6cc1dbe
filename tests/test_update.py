from datetime import datetime, timedelta, timezone
from pathlib import Path

import pytest

from epp_repo_ids.config import Settings
from epp_repo_ids.errors import DataDirectoryError, FetchError, HeaderMismatchError
from epp_repo_ids.update import run_update

NOW = datetime(2024, 3, 1, 12, 0, 0, tzinfo=timezone.utc)


@pytest.fixture
def settings(tmp_path):
    return Settings(data_home=tmp_path / "share")


def test_run_update_from_local_file(settings, registry_file):
    result = run_update(settings, source=registry_file, now=NOW)

    assert result.path == settings.data_home / "epp-repo-ids" / "epp-repo-ids.txt"
    lines = result.path.read_text(encoding="utf-8").splitlines()
    assert lines[:4] == [
        "# This file was automatically generated at 2024-03-01 12:00:00 UTC.",
        "#",
        "# Do not edit manually. Regenerate it using update-epp-repo-ids.",
        "#",
    ]
    assert lines[4] == "MX"
    assert lines[5].startswith("# Record 3: mismatch")
    assert "too long" in lines[6]
    assert lines[7] == '# Record 5: illegal code point U+1F600 in ID "Z?"'
    assert lines[8] == "ÉTÉ"
    assert lines[9] == "# END-OF-FILE"
    assert result.report.summary.accepted == 2


def test_run_update_is_idempotent_apart_from_timestamp(settings, registry_file):
    first = run_update(settings, source=registry_file, now=NOW).path.read_text(encoding="utf-8")
    second = run_update(
        settings, source=registry_file, now=NOW + timedelta(hours=1)
    ).path.read_text(encoding="utf-8")

    assert first != second
    assert first.splitlines()[1:] == second.splitlines()[1:]


def test_run_update_fetches_when_no_source_given(settings, registry_bytes):
    calls = []

    def fake_fetch(url, dest, timeout):
        calls.append((url, timeout))
        Path(dest).write_bytes(registry_bytes)
        return Path(dest)

    settings = settings.model_copy(update={"source_url": "https://example.test/ids.csv", "fetch_timeout": 5})
    result = run_update(settings, now=NOW, fetcher=fake_fetch)

    assert calls == [("https://example.test/ids.csv", 5)]
    assert result.report.summary.records == 5


def test_fetch_failure_leaves_database_untouched(settings, registry_file):
    run_update(settings, source=registry_file, now=NOW)
    before = settings.database_path.read_bytes()

    def failing_fetch(url, dest, timeout):
        raise FetchError(f"{url}: timed out after {timeout:g} seconds")

    with pytest.raises(FetchError):
        run_update(settings, now=NOW + timedelta(days=1), fetcher=failing_fetch)

    assert settings.database_path.read_bytes() == before


def test_bad_source_leaves_database_untouched(settings, registry_file, tmp_path):
    run_update(settings, source=registry_file, now=NOW)
    before = settings.database_path.read_bytes()

    bad = tmp_path / "bad.csv"
    bad.write_bytes(b"EPP Repository ID,Change Controller,Reference/Contact\n")
    with pytest.raises(HeaderMismatchError):
        run_update(settings, source=bad, now=NOW + timedelta(days=1))

    assert settings.database_path.read_bytes() == before


def test_uncreatable_data_directory_is_fatal(tmp_path, registry_file):
    blocker = tmp_path / "share"
    blocker.write_text("not a directory")
    with pytest.raises(DataDirectoryError):
        run_update(Settings(data_home=blocker), source=registry_file, now=NOW)
