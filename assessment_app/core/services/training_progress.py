"""Service tracking progression through the training path modules."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime, timezone
from enum import Enum
import logging

logger = logging.getLogger(__name__)

DEFAULT_MODULE_IDS: tuple[str, ...] = (
    "career_path",
    "skill_test",
    "roadmap",
    "aptitude",
    "communication",
    "hr_round",
)


class ModuleStatus(str, Enum):
    LOCKED = "locked"
    ACTIVE = "active"
    COMPLETED = "completed"


@dataclass(slots=True)
class TrainingModule:
    """One step of the training path."""

    module_id: str
    status: ModuleStatus = ModuleStatus.LOCKED
    score: int | None = None
    completed_at: datetime | None = None


class TrainingProgressTracker:
    """Unlocks training modules one by one as each is completed."""

    def __init__(self, module_ids: tuple[str, ...] = DEFAULT_MODULE_IDS) -> None:
        if not module_ids:
            raise ValueError("Training path must contain at least one module.")
        if len(set(module_ids)) != len(module_ids):
            raise ValueError("Training module ids must be unique.")
        self._module_ids = module_ids
        self._modules: list[TrainingModule] = []
        self.reset()

    def reset(self) -> None:
        self._modules = [TrainingModule(module_id=module_id) for module_id in self._module_ids]
        self._modules[0].status = ModuleStatus.ACTIVE

    def get_modules(self) -> list[TrainingModule]:
        return list(self._modules)

    def get_module(self, module_id: str) -> TrainingModule:
        for module in self._modules:
            if module.module_id == module_id:
                return module
        raise KeyError(f"Unknown training module '{module_id}'.")

    def active_module(self) -> TrainingModule | None:
        return next((m for m in self._modules if m.status is ModuleStatus.ACTIVE), None)

    def complete_module(self, module_id: str, score: int | None = None) -> TrainingModule:
        """Mark the active module completed and unlock the next one."""
        module = self.get_module(module_id)
        if module.status is not ModuleStatus.ACTIVE:
            raise RuntimeError(f"Module '{module_id}' is {module.status.value}, not active.")
        if score is not None and not 0 <= score <= 100:
            raise ValueError("Module score must be between 0 and 100.")

        module.status = ModuleStatus.COMPLETED
        module.score = score
        module.completed_at = datetime.now(timezone.utc)

        index = self._modules.index(module)
        if index + 1 < len(self._modules):
            self._modules[index + 1].status = ModuleStatus.ACTIVE
        logger.info("Training module '%s' completed (score=%s)", module_id, score)
        return module

    def overall_completion(self) -> int:
        completed = sum(1 for m in self._modules if m.status is ModuleStatus.COMPLETED)
        return round((completed / len(self._modules)) * 100)

    def average_score(self) -> int:
        scores = [
            m.score
            for m in self._modules
            if m.status is ModuleStatus.COMPLETED and m.score is not None
        ]
        if not scores:
            return 0
        return round(sum(scores) / len(scores))
