"""Common ingestion data structures."""

from __future__ import annotations

from dataclasses import dataclass


@dataclass(slots=True)
class IngestStats:
    """Aggregated ingest statistics."""

    inserted: int = 0
    embedded: int = 0
    skipped: int = 0
    batches: int = 0

    def to_dict(self) -> dict[str, int]:
        return {
            "inserted": self.inserted,
            "embedded": self.embedded,
            "skipped": self.skipped,
            "batches": self.batches,
        }


class IngestError(RuntimeError):
    """An ingestion job could not complete (e.g. the embedding provider failed)."""


__all__ = ["IngestStats", "IngestError"]
