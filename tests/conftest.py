"""
Pytest configuration and shared fixtures.
"""
from datetime import datetime, timedelta, timezone

import pytest
from fastapi.testclient import TestClient

from hardhat.main import app
from hardhat.models.schemas.common import DetectorStatus
from hardhat.models.schemas.detection import Detection, DetectionCreate
from hardhat.models.schemas.inference import InferenceResponse
from hardhat.services.detector import get_detector, get_optional_detector
from hardhat.services.store import DetectionStore, get_store


NOW = datetime(2025, 5, 6, 12, 0, 0, tzinfo=timezone.utc)


def _detection(label, confidence=0.9):
    return Detection.model_validate({
        "class": label,
        "confidence": confidence,
        "x": 100,
        "y": 120,
        "width": 40,
        "height": 60,
    })


class FakeDetector:
    """
    In-process detector.

    ``predictions`` maps the filename passed to ``infer`` to class labels;
    ``failures`` maps a filename or image URL to the exception to raise.
    """

    def __init__(self, predictions=None, failures=None, status=None):
        self.predictions = predictions or {}
        self.failures = failures or {}
        self.status = status or DetectorStatus(connected=True, response_time_ms=120)
        self.calls = []

    async def infer(self, image, filename=None, content_type=None, confidence=None, overlap=None):
        self.calls.append({
            "filename": filename,
            "size": len(image),
            "content_type": content_type,
            "confidence": confidence,
        })
        if filename in self.failures:
            raise self.failures[filename]
        labels = self.predictions.get(filename, ["helmet", "vest"])
        return InferenceResponse(time=0.05, predictions=[_detection(label) for label in labels])

    async def fetch_image(self, url):
        if url in self.failures:
            raise self.failures[url]
        return url.encode()

    async def check_connectivity(self):
        return self.status


@pytest.fixture
def now():
    return NOW


@pytest.fixture
def make_detection():
    """Factory for a Detection with fixed geometry."""
    return _detection


@pytest.fixture
def store():
    """A fresh, empty history store."""
    return DetectionStore(max_records=1000)


@pytest.fixture
def add_record(store):
    """
    Factory inserting a record into ``store``.

    ``age`` is how long before NOW the record was created.
    """
    def _add(labels=(), filename="image.jpg", site=None, supervisor=None,
             age=timedelta(0), timestamp=None, record_id=None):
        record_in = DetectionCreate(
            filename=filename,
            site=site,
            supervisor=supervisor,
            detections=[_detection(label) for label in labels],
        )
        return store.insert(
            record_in,
            record_id=record_id,
            timestamp=timestamp if timestamp is not None else NOW - age,
        )
    return _add


@pytest.fixture
def fake_detector():
    return FakeDetector()


@pytest.fixture
def client(store, fake_detector):
    """TestClient wired to the per-test store and fake detector."""
    app.dependency_overrides[get_store] = lambda: store
    app.dependency_overrides[get_detector] = lambda: fake_detector
    app.dependency_overrides[get_optional_detector] = lambda: fake_detector
    with TestClient(app) as test_client:
        yield test_client
    app.dependency_overrides.clear()
