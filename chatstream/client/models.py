"""
Client-facing models for chat streams, health probes and code modification.
"""

from __future__ import annotations

from collections.abc import Callable
from dataclasses import dataclass
from enum import Enum

from pydantic import BaseModel, ConfigDict, Field

ChunkCallback = Callable[[str], object]
ErrorCallback = Callable[[Exception], object]
ClosedCallback = Callable[[], object]


class StreamState(Enum):
    """Lifecycle of a single chat stream."""
    CONNECTING = "connecting"
    OPEN = "open"
    ERRORED = "errored"
    CLOSED = "closed"


@dataclass(frozen=True)
class HealthStatus:
    """Result of one health probe."""
    healthy: bool
    status_code: int | None = None
    error: str | None = None
    error_category: str | None = None

    def __bool__(self) -> bool:
        return self.healthy


class CodeModificationRequest(BaseModel):
    """Body of ``POST /ai/modify-code``."""
    model_config = ConfigDict(populate_by_name=True)

    original_code: str = Field(alias="originalCode")
    instruction: str
    file_name: str | None = Field(default=None, alias="fileName")


class CodeModificationResult(BaseModel):
    """Successful answer of the modify-code endpoint."""
    model_config = ConfigDict(populate_by_name=True)

    modified_code: str = Field(alias="modifiedCode")
    original_code: str | None = Field(default=None, alias="originalCode")
    instruction: str | None = None
    file_name: str | None = Field(default=None, alias="fileName")
    status: str = "success"
