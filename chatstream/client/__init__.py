"""
Chat backend client.

This package provides:
- Callback-driven chat streams over server-sent events
- A pull-based async iterator over the same stream
- A boolean health probe
- Code modification requests
"""

from __future__ import annotations

from .client import (
    CHAT_ENDPOINT,
    DEFAULT_BASE_URL,
    HEALTH_ENDPOINT,
    MODIFY_CODE_ENDPOINT,
    StreamingChatClient,
)
from .models import (
    CodeModificationRequest,
    CodeModificationResult,
    HealthStatus,
    StreamState,
)
from .session import StreamSession

__all__ = [
    "CHAT_ENDPOINT",
    "DEFAULT_BASE_URL",
    "HEALTH_ENDPOINT",
    "MODIFY_CODE_ENDPOINT",
    "CodeModificationRequest",
    "CodeModificationResult",
    "HealthStatus",
    "StreamSession",
    "StreamState",
    "StreamingChatClient",
]
