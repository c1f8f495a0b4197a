"""
Cleanup pipeline: validate -> weld -> deduplicate -> simplify.

Each step is one editor call on the mesh produced by the previous step.
Steps are timed and their failures captured as StepResults; a failed
validation stops the run, any later failure leaves the last good mesh as
the result.
"""

import time
from dataclasses import dataclass, field
from typing import Any, Callable, Dict, List, Optional

from meshtopo.core.config import ConfigManager, EngineConfig
from meshtopo.core.logging import get_logger, mesh_context
from meshtopo.core.mesh import Mesh
from meshtopo.editing.dedupe import deduplicate
from meshtopo.editing.simplify import simplify_planar
from meshtopo.editing.weld import weld

logger = get_logger(__name__)


@dataclass
class StepResult:
    """Result of a single pipeline step."""

    name: str
    success: bool
    data: Any = None
    error: Optional[str] = None
    duration_s: float = 0.0


@dataclass
class CleanupResult:
    """Result of a complete cleanup run."""

    success: bool
    mesh: Optional[Mesh] = None
    steps: List[StepResult] = field(default_factory=list)
    errors: List[str] = field(default_factory=list)
    timings: Dict[str, float] = field(default_factory=dict)
    step_completed: str = ""  # Last step that completed successfully


# Type alias for progress callback: (step_name, fraction 0.0-1.0)
ProgressCallback = Callable[[str, float], None]


def _noop_callback(step: str, pct: float) -> None:
    pass


class CleanupPipeline:
    """Mesh cleanup orchestrator.

    Usage:
        pipeline = CleanupPipeline(ConfigManager(Path("meshtopo.yaml")).config)
        result = pipeline.execute(mesh)
        if result.success:
            MeshLoader.save(result.mesh, "clean.stl")
    """

    def __init__(
        self,
        config: Optional[EngineConfig] = None,
        progress_callback: Optional[ProgressCallback] = None,
    ):
        self._config = config or ConfigManager.default().config
        self._progress = progress_callback or _noop_callback

    @property
    def config(self) -> EngineConfig:
        return self._config

    def execute(self, mesh: Mesh) -> CleanupResult:
        """Run the enabled steps in order on a copy of ``mesh``."""
        result = CleanupResult(success=False, mesh=mesh.copy())
        tolerances = self._config.tolerances
        cleanup = self._config.cleanup

        with mesh_context(vertices=mesh.vertex_count, faces=mesh.face_count):
            if cleanup.validate_mesh:
                step = self._run_step("validate", lambda: result.mesh.validate())
                if not self._record(result, step):
                    result.errors.append(f"Validation failed: {step.error}")
                    return result

            if cleanup.weld:
                step = self._run_step("weld", lambda: weld(result.mesh, tolerances.weld).mesh)
                if self._record(result, step):
                    result.mesh = step.data

            if cleanup.deduplicate:
                step = self._run_step("deduplicate", lambda: deduplicate(result.mesh))
                if self._record(result, step):
                    result.mesh = step.data

            if cleanup.simplify:
                step = self._run_step(
                    "simplify",
                    lambda: simplify_planar(
                        result.mesh,
                        tolerances.coplanar_angle,
                        degenerate_area=tolerances.degenerate_area,
                    ),
                )
                if self._record(result, step):
                    result.mesh = step.data

        result.success = not result.errors
        return result

    @staticmethod
    def _record(result: CleanupResult, step: StepResult) -> bool:
        result.steps.append(step)
        result.timings[step.name] = step.duration_s
        if step.success:
            result.step_completed = step.name
        elif step.name != "validate":
            result.errors.append(f"{step.name} failed: {step.error}")
        return step.success

    def _run_step(self, name: str, fn: Callable) -> StepResult:
        """Execute a single pipeline step with timing and error handling."""
        self._progress(name, 0.0)
        t0 = time.perf_counter()
        try:
            data = fn()
            duration = time.perf_counter() - t0
            self._progress(name, 1.0)
            logger.info("cleanup_step_complete", step=name, duration_s=round(duration, 4))
            return StepResult(name=name, success=True, data=data, duration_s=duration)
        except Exception as e:
            duration = time.perf_counter() - t0
            logger.error("cleanup_step_failed", step=name, duration_s=round(duration, 4), error=str(e))
            return StepResult(name=name, success=False, error=str(e), duration_s=duration)
