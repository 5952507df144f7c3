"""OptimizationEngine: runs pipeline steps in order against a context."""

from __future__ import annotations

import time
from typing import Callable

from src.config import Defaults
from src.pipeline.context import OptimizationContext
from src.utils.logger import setup_logger

logger = setup_logger("pipeline", Defaults.LOG_LEVEL)

PipelineStep = Callable[[OptimizationContext], None]
ProgressCallback = Callable[[str, str, float], None]


class OptimizationEngine:
    """Executes an ordered list of pipeline steps against a context.

    Every step depends on the ones before it, so the first failure is
    recorded on the context and re-raised to the caller.

    Attributes:
        progress_callback: Optional callable invoked after each step with
            (step_name, status, elapsed_seconds).
    """

    def __init__(self, progress_callback: ProgressCallback | None = None) -> None:
        self.progress_callback = progress_callback

    @staticmethod
    def _step_name(step: PipelineStep) -> str:
        """Return a human-readable name for a pipeline step."""
        return getattr(step, "__name__", step.__class__.__name__)

    def run(self, ctx: OptimizationContext, steps: list[PipelineStep]) -> OptimizationContext:
        logger.info(
            "Optimization started: run=%s assets=%s steps=%d",
            ctx.run_id, ctx.symbols, len(steps),
        )
        pipeline_start = time.monotonic()

        for i, step in enumerate(steps, 1):
            step_name = self._step_name(step)
            logger.debug("[%d/%d] Running: %s", i, len(steps), step_name)
            start = time.monotonic()
            try:
                step(ctx)
            except Exception as exc:
                elapsed = time.monotonic() - start
                logger.error("Step %s failed in %.2fs: %s", step_name, elapsed, exc)
                ctx.errors.append({"step": step_name, "error": str(exc)})
                if self.progress_callback is not None:
                    self.progress_callback(step_name, "failed", elapsed)
                raise
            elapsed = time.monotonic() - start
            ctx.steps_completed.append(step_name)
            ctx.timings[step_name] = elapsed
            logger.debug("Step %s completed in %.2fs", step_name, elapsed)
            if self.progress_callback is not None:
                self.progress_callback(step_name, "completed", elapsed)

        logger.info(
            "Optimization finished in %.2fs (%d steps)",
            time.monotonic() - pipeline_start, len(ctx.steps_completed),
        )
        return ctx
