"""Read-only trial content repository backed by the bundled JSON file."""

from __future__ import annotations

import json
import logging
import os
from pathlib import Path
from types import MappingProxyType
from typing import Iterator, List, Mapping, Optional, Union

from pydantic import ValidationError

from .models import TrialRecord

logger = logging.getLogger(__name__)

DEFAULT_TRIALS_PATH = Path(__file__).parent / "data" / "trials.json"
TRIALS_PATH_ENV = "NEUROCALC_TRIALS_PATH"


def resolve_trials_path(path: Optional[Union[str, Path]] = None) -> Path:
    """Explicit argument, then the environment override, then the bundled file."""
    if path is not None:
        return Path(path)
    env_path = os.environ.get(TRIALS_PATH_ENV)
    if env_path:
        return Path(env_path)
    return DEFAULT_TRIALS_PATH


class TrialCatalog(Mapping[str, TrialRecord]):
    """
    Trial records keyed by id.

    Lookups are case-insensitive on the id; a missing id raises KeyError like
    any mapping. The underlying dict is wrapped in a MappingProxyType so
    nothing downstream can mutate the loaded content.
    """

    def __init__(self, records: Mapping[str, TrialRecord]):
        self._records = MappingProxyType(dict(records))
        self._lower = {key.lower(): key for key in self._records}

    @classmethod
    def from_records(cls, records: List[TrialRecord]) -> "TrialCatalog":
        by_id = {}
        for record in records:
            if record.id in by_id:
                raise ValueError(f"Duplicate trial id: {record.id}")
            by_id[record.id] = record
        return cls(by_id)

    @classmethod
    def from_json(cls, path: Optional[Union[str, Path]] = None) -> "TrialCatalog":
        path = resolve_trials_path(path)
        try:
            raw = json.loads(path.read_text(encoding="utf-8"))
            records = [TrialRecord.model_validate(item) for item in raw.get("trials", [])]
        except (OSError, json.JSONDecodeError, ValidationError) as e:
            logger.error(f"Failed to load trial catalog from {path}: {e}")
            raise
        logger.info(f"Loaded {len(records)} trials from {path}")
        return cls.from_records(records)

    @property
    def records(self) -> Mapping[str, TrialRecord]:
        return self._records

    def __getitem__(self, trial_id: str) -> TrialRecord:
        key = self._lower.get(str(trial_id).strip().lower())
        if key is None:
            raise KeyError(trial_id)
        return self._records[key]

    def __iter__(self) -> Iterator[str]:
        return iter(self._records)

    def __len__(self) -> int:
        return len(self._records)

    def ids(self) -> List[str]:
        return sorted(self._records)


def load_default_catalog() -> TrialCatalog:
    return TrialCatalog.from_json()
