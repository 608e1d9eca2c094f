from pathlib import Path
from typing import List

import pytest

import sync_notado
from kobo_notado.config import SyncConfig, load_config
from kobo_notado.kobo import KoboDatabase
from kobo_notado.models import Batch
from kobo_notado.sync import SyncError, run_sync

from conftest import SIDELOADED_ID, create_kobo_database


class RecordingClient:
    def __init__(self) -> None:
        self.calls: List[tuple[List[Batch], str]] = []

    def send_bookmarks(self, batches, token: str) -> int:
        self.calls.append((list(batches), token))
        return sum(len(batch) for batch in batches)


def test_run_sync_uploads_sideloaded_highlights(kobo_db: Path) -> None:
    client = RecordingClient()
    config = SyncConfig(notado_token="secret")

    with KoboDatabase(kobo_db) as database:
        result = run_sync(config, database, client)  # type: ignore[arg-type]

    assert result.uploaded == 2
    assert result.highlights == 2
    assert result.batches == 1
    batches, token = client.calls[0]
    assert token == "secret"
    first, second = batches[0].highlights
    assert first.content == "Early passage"
    assert first.title == "Good Book - An Author - "
    assert second.tags == ("quotes",)


def test_run_sync_includes_store_bought_when_enabled(kobo_db: Path) -> None:
    client = RecordingClient()
    config = SyncConfig(notado_token="secret", upload_store_highlights=True)

    with KoboDatabase(kobo_db) as database:
        result = run_sync(config, database, client)  # type: ignore[arg-type]

    assert result.uploaded == 3
    titles = [h.title for h in client.calls[0][0][0].highlights]
    assert "Store Book - Store Author" in titles


def test_run_sync_dry_run_skips_upload(kobo_db: Path) -> None:
    client = RecordingClient()
    config = SyncConfig(notado_token="secret", dry_run=True)

    with KoboDatabase(kobo_db) as database:
        result = run_sync(config, database, client)  # type: ignore[arg-type]

    assert result.dry_run
    assert result.uploaded == 0
    assert result.highlights == 2
    assert client.calls == []


def test_run_sync_requires_token(tmp_path: Path) -> None:
    # The database is never opened when the token is missing.
    database = KoboDatabase(tmp_path / "missing.sqlite")

    with pytest.raises(SyncError):
        run_sync(SyncConfig(), database, RecordingClient())  # type: ignore[arg-type]


def test_run_sync_rejects_device_without_highlights(tmp_path: Path) -> None:
    path = create_kobo_database(tmp_path / "empty.sqlite", [], [])

    with KoboDatabase(path) as database, pytest.raises(SyncError, match="nothing left to sync"):
        run_sync(SyncConfig(notado_token="secret"), database, RecordingClient())  # type: ignore[arg-type]


def test_run_sync_rejects_store_only_device_when_store_sync_disabled(tmp_path: Path) -> None:
    bookmarks = [("b1", "store-id", "Text", None, "2006-01-02T15:04:05.000", None, 0.1)]
    path = create_kobo_database(tmp_path / "store.sqlite", bookmarks, [])

    with KoboDatabase(path) as database, pytest.raises(SyncError, match="store-bought"):
        run_sync(SyncConfig(notado_token="secret"), database, RecordingClient())  # type: ignore[arg-type]


def test_sync_config_from_mapping_ignores_empty_values() -> None:
    config = SyncConfig.from_mapping(
        {
            "kobo_path": "/Volumes/KOBOeReader",
            "notado_token": "",
            "upload_store_highlights": True,
            "timeout": 5,
        }
    )

    assert config.kobo_path == Path("/Volumes/KOBOeReader")
    assert config.notado_token == ""
    assert config.upload_store_highlights is True
    assert config.timeout == 5.0


def test_load_config_without_path_returns_empty_mapping() -> None:
    assert load_config(None) == {}


def test_cli_dry_run(kobo_db: Path, monkeypatch: pytest.MonkeyPatch, capsys: pytest.CaptureFixture[str]) -> None:
    monkeypatch.delenv("NOTADO_TOKEN", raising=False)

    exit_code = sync_notado.main(["--kobo", str(kobo_db), "--token", "secret", "--dry-run"])

    assert exit_code == 0
    assert "Would upload 2 highlight(s) in 1 batch(es)" in capsys.readouterr().out


def test_cli_reads_token_from_config_and_environment(
    kobo_db: Path, tmp_path: Path, monkeypatch: pytest.MonkeyPatch, capsys: pytest.CaptureFixture[str]
) -> None:
    config_path = tmp_path / "config.json"
    config_path.write_text(
        '{"kobo_path": "%s", "dry_run": true}' % kobo_db.as_posix(), encoding="utf-8"
    )
    monkeypatch.setenv("NOTADO_TOKEN", "from-env")

    exit_code = sync_notado.main(["--config", str(config_path)])

    assert exit_code == 0
    assert "[DRY-RUN]" in capsys.readouterr().out


def test_cli_reports_missing_token(
    kobo_db: Path, monkeypatch: pytest.MonkeyPatch, capsys: pytest.CaptureFixture[str]
) -> None:
    monkeypatch.delenv("NOTADO_TOKEN", raising=False)

    exit_code = sync_notado.main(["--kobo", str(kobo_db)])

    assert exit_code == 1
    assert "No Notado token" in capsys.readouterr().err


def test_cli_requires_kobo_location(monkeypatch: pytest.MonkeyPatch, capsys: pytest.CaptureFixture[str]) -> None:
    monkeypatch.setenv("NOTADO_TOKEN", "secret")

    assert sync_notado.main([]) == 1
    assert "No Kobo location" in capsys.readouterr().err


def test_cli_reports_malformed_timestamp(
    tmp_path: Path, monkeypatch: pytest.MonkeyPatch, capsys: pytest.CaptureFixture[str]
) -> None:
    bookmarks = [("b1", SIDELOADED_ID, "Text", None, "garbage", None, 0.1)]
    path = create_kobo_database(tmp_path / "bad.sqlite", bookmarks, [])
    monkeypatch.setenv("NOTADO_TOKEN", "secret")

    assert sync_notado.main(["--kobo", str(path), "--dry-run"]) == 1
    assert "garbage" in capsys.readouterr().err
