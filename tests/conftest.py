from __future__ import annotations

from collections.abc import Iterator
from pathlib import Path

import pytest
from fastapi.testclient import TestClient

from backend.app import dependencies
from backend.app.dependencies import reset_cached_dependencies
from backend.app.main import create_app
from backend.app.services.youtube_extractor.backend import MediaInfo
from tests.fakes import STREAM_URL, ScriptedBackend


@pytest.fixture
def runtime_env(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> Iterator[Path]:
    data_dir = tmp_path / "runtime-data"
    data_dir.mkdir(parents=True, exist_ok=True)
    monkeypatch.setenv("HONGIT_DATA_DIR", str(data_dir))
    monkeypatch.setenv("HONGIT_TELEMETRY_SINK", "none")
    monkeypatch.setenv("HONGIT_YOUTUBE_EXTRACT_BACKOFF_STEP_MS", "0")
    reset_cached_dependencies()
    yield data_dir
    reset_cached_dependencies()


@pytest.fixture
def scripted_backend() -> ScriptedBackend:
    return ScriptedBackend([MediaInfo(url=STREAM_URL, http_headers={})])


@pytest.fixture
def wired_backend(
    runtime_env: Path,
    scripted_backend: ScriptedBackend,
    monkeypatch: pytest.MonkeyPatch,
) -> ScriptedBackend:
    """Route the cached dependency graph to the scripted backend instead of yt-dlp."""
    _ = runtime_env
    monkeypatch.setattr(dependencies, "YtDlpBackend", lambda: scripted_backend)
    return scripted_backend


@pytest.fixture
def client(wired_backend: ScriptedBackend) -> Iterator[TestClient]:
    _ = wired_backend
    app = create_app()
    with TestClient(app) as test_client:
        yield test_client
