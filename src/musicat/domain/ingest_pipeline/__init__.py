"""Three-phase ingestion of one artist's catalog."""

from __future__ import annotations

from .context import (
    CoreOutput,
    IngestRequest,
    IngestResult,
    MetadataOutput,
    PipelineContext,
    RunError,
)
from .core import CorePhase
from .expansion import (
    CollectionIdMaps,
    ExpansionOutcome,
    ExpansionPhase,
    ExpansionReport,
    ExpansionScheduler,
    ExpansionStatus,
)
from .metadata import MetadataPhase
from .orchestrator import IngestionPipeline, PipelinePhase
from .runner import default_pipeline, ingest_one_artist

__all__ = [
    "CollectionIdMaps",
    "CoreOutput",
    "CorePhase",
    "ExpansionOutcome",
    "ExpansionPhase",
    "ExpansionReport",
    "ExpansionScheduler",
    "ExpansionStatus",
    "IngestRequest",
    "IngestResult",
    "IngestionPipeline",
    "MetadataOutput",
    "MetadataPhase",
    "PipelineContext",
    "PipelinePhase",
    "RunError",
    "default_pipeline",
    "ingest_one_artist",
]
