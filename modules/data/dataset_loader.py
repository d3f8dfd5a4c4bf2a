"""
Training dataset ingestion.

Reads the game's signs.json format, a JSON array of records:

    [{"name": "peace", "landmarks": [x0, y0, z0, x1, ...]}, ...]

and feeds each record to the classifier. A malformed record is logged and
skipped; the rest of the dataset still loads.
"""

import json
import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, List, Optional, Tuple, Union

from core.errors import DatasetError, InvalidFeatureVector, InvalidLabel
from core.events import EventBus, Events
from modules.recognition.knn_classifier import KNNClassifier
from modules.utils.logger import log_timing

logger = logging.getLogger(__name__)

PathLike = Union[str, Path]


@dataclass(frozen=True)
class TrainingRecord:
    """One entry of a training dataset, not yet validated."""
    name: Any
    landmarks: Any


@dataclass
class IngestReport:
    """Outcome of feeding a dataset to the classifier."""
    loaded: int = 0
    skipped: int = 0
    errors: List[Tuple[int, Any, str]] = field(default_factory=list)  # (index, name, reason)

    @property
    def total(self) -> int:
        return self.loaded + self.skipped


def parse_records(data) -> List[TrainingRecord]:
    """Turn decoded JSON into training records.

    Raises:
        DatasetError: top level is not a list
    """
    if not isinstance(data, list):
        raise DatasetError(f"dataset must be a JSON array, got {type(data).__name__}")

    records = []
    for item in data:
        if isinstance(item, dict):
            records.append(TrainingRecord(item.get("name"), item.get("landmarks")))
        else:
            records.append(TrainingRecord(None, item))
    return records


def load_records(path: PathLike) -> List[TrainingRecord]:
    """Read training records from a signs.json file.

    Raises:
        DatasetError: file missing, unreadable or not a JSON array
    """
    target = Path(path)
    try:
        content = target.read_text(encoding="utf-8")
    except FileNotFoundError as e:
        raise DatasetError(f"dataset file not found: {target}") from e
    except OSError as e:
        raise DatasetError(f"cannot read dataset file {target}: {e}") from e

    try:
        data = json.loads(content)
    except json.JSONDecodeError as e:
        raise DatasetError(f"dataset file {target} is not valid JSON: {e}") from e

    return parse_records(data)


def ingest_records(classifier: KNNClassifier, records, event_bus: Optional[EventBus] = None) -> IngestReport:
    """Learn every valid record in order, skipping the malformed ones."""
    report = IngestReport()
    for index, record in enumerate(records):
        landmarks = record.landmarks if record.landmarks is not None else []
        try:
            classifier.learn(record.name, landmarks)
        except (InvalidFeatureVector, InvalidLabel) as e:
            report.skipped += 1
            report.errors.append((index, record.name, str(e)))
            logger.warning("Skipping sign #%d (%s): %s", index, record.name, e)
            continue
        report.loaded += 1
        logger.debug("Sign loaded: %s", record.name)

    logger.info("Dataset ingested: %d loaded, %d skipped", report.loaded, report.skipped)
    if event_bus is not None:
        event_bus.emit(Events.DATASET_LOADED, loaded=report.loaded, skipped=report.skipped)
    return report


@log_timing
def load_dataset(classifier: KNNClassifier, path: PathLike,
                 event_bus: Optional[EventBus] = None) -> IngestReport:
    """Read a signs.json file and learn its records."""
    return ingest_records(classifier, load_records(path), event_bus=event_bus)
