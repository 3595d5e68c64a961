import os

import pytest
from fastapi.testclient import TestClient

from hand_proximity_backend.analysis.keypoints import Keypoint, build_keypoint_set
from hand_proximity_backend.config import Settings
from hand_proximity_backend.main import create_app


def make_keypoints(score=0.9, **points):
    """make_keypoints(nose=(0, 0), leftWrist=(3, 4)) -> list of Keypoint"""
    return [Keypoint(name=name, x=float(x), y=float(y), score=score) for name, (x, y) in points.items()]


def make_set(**points):
    return build_keypoint_set(make_keypoints(**points))


class StubEstimator:
    """Returns canned keypoints (or raises) and records what it was given."""

    def __init__(self, keypoints=None, error=None):
        self.keypoints = keypoints or []
        self.error = error
        self.calls = []

    def estimate(self, image_path):
        self.calls.append((image_path, os.path.exists(image_path)))
        if self.error is not None:
            raise self.error
        return list(self.keypoints)


@pytest.fixture
def upload_dir(tmp_path):
    return str(tmp_path / "uploads")


@pytest.fixture
def make_client(upload_dir):
    def _make(estimator, raise_server_exceptions=True, **overrides):
        settings = Settings(upload_dir=upload_dir, **overrides)
        return TestClient(
            create_app(settings, estimator=estimator),
            raise_server_exceptions=raise_server_exceptions,
        )

    return _make
