"""
Thread-safe in-memory store of trained models, keyed by model id.
"""

import copy
import threading
from typing import Dict, List

from loguru import logger

from errors import ModelNotFoundError
from .types import Model


class ModelRegistry:
    """
    Maps model ids to immutable Model records.

    All access to the map goes through one lock, so inserts and evictions
    from different threads never interleave. The registry stores its own
    deep copy of each model and hands out deep copies on reads, so refitting
    or otherwise mutating a returned estimator never reaches the stored one.
    """

    def __init__(self):
        self._models: Dict[str, Model] = {}
        self._lock = threading.Lock()

    def register(self, model: Model) -> None:
        record = copy.deepcopy(model)
        with self._lock:
            self._models[record.model_id] = record
        logger.debug(f"Registered model {record.model_id} ({record.family.value})")

    def get(self, model_id: str) -> Model:
        """
        Detached copy of a registered model.

        Raises:
            ModelNotFoundError: no model has this id
        """
        with self._lock:
            record = self._models.get(model_id)
        if record is None:
            raise ModelNotFoundError(f"Model not found: {model_id}")
        return copy.deepcopy(record)

    def evict(self, model_id: str) -> Model:
        """Remove a model and return it; the registry keeps no reference."""
        with self._lock:
            record = self._models.pop(model_id, None)
        if record is None:
            raise ModelNotFoundError(f"Model not found: {model_id}")
        logger.debug(f"Evicted model {model_id}")
        return record

    def list_models(self) -> List[Model]:
        """Copies of the registered models, oldest first."""
        with self._lock:
            records = list(self._models.values())
        return [copy.deepcopy(record) for record in records]

    def __contains__(self, model_id: str) -> bool:
        with self._lock:
            return model_id in self._models

    def __len__(self) -> int:
        with self._lock:
            return len(self._models)
