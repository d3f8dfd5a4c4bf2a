"""
Tests for Training Dataset Ingestion
=====================================
"""

import json
import logging
import pytest
import sys
from pathlib import Path

# Add project root to path
sys.path.insert(0, str(Path(__file__).parent.parent))

from core.errors import DatasetError
from core.events import EventBus, Events
from modules.data.dataset_loader import (
    IngestReport, TrainingRecord, ingest_records, load_dataset, load_records, parse_records,
)
from modules.recognition.knn_classifier import KNNClassifier


def sign(name, first=0.0, length=63):
    landmarks = [0.0] * length
    if length:
        landmarks[0] = first
    return {"name": name, "landmarks": landmarks}


@pytest.fixture
def signs_file(tmp_path):
    path = tmp_path / "signs.json"
    path.write_text(json.dumps([
        sign("duim omhoog", 0.1),
        sign("broken", 0.2, length=62),
        sign("vuist", 0.9),
    ]), encoding="utf-8")
    return path


class TestLoadRecords:
    """Test suite for reading signs.json files."""

    def test_reads_records_in_order(self, signs_file):
        records = load_records(signs_file)
        assert [r.name for r in records] == ["duim omhoog", "broken", "vuist"]
        assert len(records[0].landmarks) == 63

    def test_missing_file(self, tmp_path):
        with pytest.raises(DatasetError):
            load_records(tmp_path / "nope.json")

    def test_invalid_json(self, tmp_path):
        path = tmp_path / "signs.json"
        path.write_text("{not json", encoding="utf-8")
        with pytest.raises(DatasetError):
            load_records(path)

    def test_top_level_must_be_list(self):
        with pytest.raises(DatasetError):
            parse_records({"name": "hand", "landmarks": []})

    def test_non_dict_entry_becomes_unnamed_record(self):
        records = parse_records([[0.0] * 63])
        assert records == [TrainingRecord(None, [0.0] * 63)]


class TestIngestRecords:
    """Test suite for feeding records to the classifier."""

    @pytest.fixture
    def classifier(self):
        return KNNClassifier(k=1)

    def test_skips_malformed_and_keeps_loading(self, classifier, signs_file):
        report = load_dataset(classifier, signs_file)
        assert isinstance(report, IngestReport)
        assert report.loaded == 2
        assert report.skipped == 1
        assert report.total == 3
        assert report.errors[0][:2] == (1, "broken")
        assert classifier.size() == 2
        assert classifier.labels == ["duim omhoog", "vuist"]

    def test_skip_is_logged(self, classifier, caplog):
        records = [TrainingRecord("short", [0.0] * 10)]
        with caplog.at_level(logging.WARNING):
            ingest_records(classifier, records)
        assert "short" in caplog.text

    def test_missing_name_or_landmarks(self, classifier):
        records = parse_records([
            {"landmarks": [0.0] * 63},
            {"name": "hand"},
            {"name": "", "landmarks": [0.0] * 63},
            {"name": "nan", "landmarks": [float("nan")] * 63},
            sign("peace"),
        ])
        report = ingest_records(classifier, records)
        assert report.loaded == 1
        assert report.skipped == 4
        assert classifier.labels == ["peace"]

    def test_loaded_signs_classify(self, classifier, signs_file):
        load_dataset(classifier, signs_file)
        query = [0.0] * 63
        query[0] = 0.8
        assert classifier.classify(query) == "vuist"

    def test_emits_dataset_loaded(self, classifier, signs_file):
        bus = EventBus()
        bus.reset()
        received = []
        bus.subscribe(Events.DATASET_LOADED, lambda **kw: received.append(kw))

        load_dataset(classifier, signs_file, event_bus=bus)
        assert received == [{"loaded": 2, "skipped": 1}]
        bus.reset()


if __name__ == "__main__":
    pytest.main([__file__, "-v"])
