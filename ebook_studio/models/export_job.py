"""Export job model.

Tracks the state of a book export. The state machine is monotonic:
``processing`` is the only initial state and ``complete``/``failed`` are
terminal.

Pydantic v2. Extra fields are forbidden to prevent drift.
"""

from __future__ import annotations

from datetime import datetime, timezone
from enum import Enum
from typing import Any, Optional

from pydantic import BaseModel, ConfigDict, Field


def _utcnow() -> datetime:
    """Return timezone-aware UTC now."""
    return datetime.now(timezone.utc)


class ExportFormat(str, Enum):
    """Supported export formats."""
    epub = "epub"
    pdf = "pdf"


class ExportJobStatus(str, Enum):
    """Export job status values."""
    processing = "processing"  # Renderer running
    complete = "complete"      # File available at file_url
    failed = "failed"          # Renderer reported an error


TERMINAL_STATUSES = frozenset({ExportJobStatus.complete, ExportJobStatus.failed})

# Allowed status transitions; terminal states have none.
ALLOWED_TRANSITIONS: dict[ExportJobStatus, frozenset[ExportJobStatus]] = {
    ExportJobStatus.processing: frozenset({ExportJobStatus.complete, ExportJobStatus.failed}),
    ExportJobStatus.complete: frozenset(),
    ExportJobStatus.failed: frozenset(),
}


class ExportJob(BaseModel):
    """State for one export request."""
    model_config = ConfigDict(extra="forbid")

    # Identity
    id: str = Field(description="UUID identifier for this job")
    book_id: str = Field(description="Exported book")

    # Configuration
    format: ExportFormat = Field(default=ExportFormat.epub, description="Export format")
    settings: dict[str, Any] = Field(
        default_factory=dict,
        description="Opaque renderer configuration"
    )

    # Status
    status: ExportJobStatus = Field(
        default=ExportJobStatus.processing,
        description="Current job status"
    )
    status_history: list[ExportJobStatus] = Field(
        default_factory=lambda: [ExportJobStatus.processing],
        description="Every status the job has held, in order"
    )

    # Timestamps
    created_at: datetime = Field(default_factory=_utcnow)
    completed_at: Optional[datetime] = Field(
        default=None,
        description="When the job reached a terminal state"
    )

    # Results
    file_url: Optional[str] = Field(
        default=None,
        description="Rendered file location (complete only)"
    )
    error_message: Optional[str] = Field(
        default=None,
        description="Renderer error (failed only)"
    )

    def is_terminal(self) -> bool:
        """Check if job is in a terminal state (no more transitions allowed)."""
        return self.status in TERMINAL_STATUSES

    def can_transition_to(self, status: ExportJobStatus) -> bool:
        return status in ALLOWED_TRANSITIONS[self.status]
