"""Tests for saving and loading artifact bags."""

import json

import pytest

from pageaudit.errors import ArtifactError
from pageaudit.gather.asset_saver import ARTIFACTS_FILENAME, load_artifacts, save_artifacts


class TestAssetSaver:
    """Tests for artifacts.json persistence."""

    def test_save_creates_directory(self, tmp_path):
        target = tmp_path / "nested" / "run"
        path = save_artifacts({"UserAgent": "Fake"}, target)

        assert path == target / ARTIFACTS_FILENAME
        assert json.loads(path.read_text())["UserAgent"] == "Fake"

    def test_error_markers_survive_round_trip(self, tmp_path):
        artifacts = {
            "traces": {"defaultPass": {"traceEvents": [{"name": "navigationStart", "ts": 1}]}},
            "devtoolsLogs": {"defaultPass": []},
            "ViewportDimensions": ArtifactError("no window", artifact_name="ViewportDimensions"),
        }

        save_artifacts(artifacts, tmp_path)
        loaded = load_artifacts(tmp_path)

        marker = loaded["ViewportDimensions"]
        assert isinstance(marker, ArtifactError)
        assert str(marker) == "no window"
        assert marker.artifact_name == "ViewportDimensions"
        assert loaded["traces"] == artifacts["traces"]

    def test_load_missing_directory(self, tmp_path):
        with pytest.raises(FileNotFoundError, match="No saved artifacts"):
            load_artifacts(tmp_path / "nothing-here")
