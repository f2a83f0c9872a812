"""Phase-based orchestrator for one artist ingestion run."""

from __future__ import annotations

import logging
import time
from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Protocol

from musicat.domain.errors import IngestError
from musicat.domain.logging_events import elapsed_ms, log_event

from .context import RunError

if TYPE_CHECKING:
    from collections.abc import Iterable, Sequence

    from .context import PipelineContext


class PipelinePhase(Protocol):
    """Contract implemented by each ingestion phase."""

    name: str

    async def run(self, context: PipelineContext) -> None: ...


@dataclass(slots=True)
class IngestionPipeline:
    """Run phases in order until one of them fails fatally.

    A phase raising :class:`IngestError` is recorded as the run's fatal error
    and the remaining phases are skipped. Any other exception propagates.
    """

    phases: Sequence[PipelinePhase] = field(default_factory=tuple)

    def with_phase(self, phase: PipelinePhase) -> IngestionPipeline:
        """Return a new pipeline appending ``phase`` at the end."""

        return IngestionPipeline(phases=(*self.phases, phase))

    def extend(self, phases: Iterable[PipelinePhase]) -> IngestionPipeline:
        return IngestionPipeline(phases=(*self.phases, *tuple(phases)))

    async def run(self, context: PipelineContext) -> PipelineContext:
        artist_key = context.request.requested_artist_key
        for phase in self.phases:
            started = time.perf_counter()
            log_event(context.logger, "phase_started", phase=phase.name, artist_key=artist_key)
            try:
                await phase.run(context)
            except IngestError as exc:
                context.fatal = RunError.from_exception(phase.name, exc)
                context.errors.append(context.fatal)
                log_event(
                    context.logger,
                    "phase_failed",
                    level=logging.ERROR,
                    phase=phase.name,
                    artist_key=artist_key,
                    duration_ms=elapsed_ms(started),
                    kind=context.fatal.kind,
                    error=context.fatal.message,
                )
                break
            log_event(
                context.logger,
                "phase_completed",
                phase=phase.name,
                artist_key=artist_key,
                duration_ms=elapsed_ms(started),
                **context.counts,
            )
        return context
