"""
HTTP client for the chat backend.

Opens server-sent event streams for chat replies, probes backend health and
forwards code modification requests. Stream sessions are independent of each
other and share only the connection pool.
"""

from __future__ import annotations

import asyncio
import contextlib
from collections.abc import AsyncGenerator
from typing import Any

import httpx

from chatstream.exceptions import (
    ChunkParseError,
    CodeModificationError,
    StreamTransportError,
)
from chatstream.logging_utils import (
    ContextualLogger,
    ErrorClassifier,
    log_operation,
    logger,
    operation_context,
)

from .models import (
    ChunkCallback,
    ClosedCallback,
    CodeModificationRequest,
    CodeModificationResult,
    ErrorCallback,
    HealthStatus,
)
from .session import StreamSession
from .streaming import HTTP_OK, EventSourceConnection, ReadyState

DEFAULT_BASE_URL = "http://localhost:8081/api"
CHAT_ENDPOINT = "/ai/chat"
HEALTH_ENDPOINT = "/health"
MODIFY_CODE_ENDPOINT = "/ai/modify-code"


class StreamingChatClient:
    """
    Streaming chat client for a single backend deployment.

    Timeouts:
    - connect_timeout: bound on establishing any connection
    - read_timeout: per-read bound on chat streams (None: streams never idle out)
    - health_timeout: total bound on one health probe
    - modify_code_timeout: read bound on code modification requests
    """

    def __init__(
        self,
        base_url: str = DEFAULT_BASE_URL,
        *,
        session_param: str = "sessionId",
        connect_timeout: float = 5.0,
        read_timeout: float | None = None,
        write_timeout: float = 10.0,
        pool_timeout: float = 5.0,
        health_timeout: float = 5.0,
        modify_code_timeout: float = 60.0,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        if not base_url:
            raise ValueError("base_url must be a non-empty URL")
        if health_timeout <= 0:
            raise ValueError("health_timeout must be positive")

        self.base_url = base_url.rstrip("/")
        self.session_param = session_param
        self.connect_timeout = connect_timeout
        self.health_timeout = health_timeout
        self.modify_code_timeout = modify_code_timeout

        self._client: httpx.AsyncClient = httpx.AsyncClient(
            base_url=self.base_url,
            timeout=httpx.Timeout(
                write_timeout,
                connect=connect_timeout,
                read=read_timeout,
                pool=pool_timeout,
            ),
            transport=transport,
        )

    @classmethod
    def from_config(
        cls,
        client_config: dict[str, Any],
        http_config: dict[str, Any],
        *,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> StreamingChatClient:
        """Build a client from ``Configuration`` getters' output."""
        return cls(
            client_config["base_url"],
            session_param=client_config["session_param"],
            connect_timeout=http_config["connect_timeout"],
            read_timeout=http_config["read_timeout"],
            write_timeout=http_config["write_timeout"],
            pool_timeout=http_config["pool_timeout"],
            health_timeout=http_config["health_timeout"],
            modify_code_timeout=http_config["modify_code_timeout"],
            transport=transport,
        )

    def _chat_connection(
        self, session_id: int | str, message: str
    ) -> EventSourceConnection:
        return EventSourceConnection(
            self._client,
            CHAT_ENDPOINT,
            params={self.session_param: str(session_id), "message": message},
        )

    def open_chat_stream(
        self,
        session_id: int | str,
        message: str,
        on_chunk: ChunkCallback,
        on_error: ErrorCallback | None = None,
        on_closed: ClosedCallback | None = None,
    ) -> StreamSession:
        """
        Open a chat stream and deliver its chunks to ``on_chunk``.

        Must be called with an event loop running. Returns at once; chunks
        arrive on later loop iterations. Failures are reported through
        ``on_error`` and never raised here. The caller owns the returned
        session and must close it unless the stream ends by itself.
        """
        if on_chunk is None:
            raise ValueError("on_chunk callback is required")
        if session_id is None:
            raise ValueError("session_id is required")

        session = StreamSession(
            session_id,
            message,
            self._chat_connection(session_id, message),
            on_chunk,
            on_error=on_error,
            on_closed=on_closed,
        )
        return session.start()

    async def stream_chat(
        self, session_id: int | str, message: str
    ) -> AsyncGenerator[str]:
        """
        Pull-based form of ``open_chat_stream``.

        Yields the same chunks ``on_chunk`` would receive. Events without a
        data field are logged and skipped; transport failures raise
        ``StreamTransportError``. Closing the generator closes the connection.
        """
        if session_id is None:
            raise ValueError("session_id is required")

        connection = self._chat_connection(session_id, message)
        stream_logger = ContextualLogger({"session_id": session_id})
        try:
            async with operation_context(
                "connect_chat_stream", context={"session_id": session_id}
            ):
                await connection.connect()
            async with contextlib.aclosing(connection.events()) as events:
                async for event in events:
                    if not event.has_data:
                        error = ChunkParseError(
                            f"Event '{event.event}' carried no data field",
                            event_name=event.event,
                            session_id=session_id,
                        )
                        stream_logger.warning(
                            "Skipping event", **ErrorClassifier.describe(error)
                        )
                        continue
                    if not event.is_message or not event.data.strip():
                        continue
                    yield event.data
        except StreamTransportError as e:
            if e.session_id is None:
                e.session_id = session_id
            stream_logger.warning("Stream failed", **ErrorClassifier.describe(e))
            raise
        except httpx.HTTPError as e:
            if connection.ready_state is ReadyState.CLOSED:
                stream_logger.debug(
                    "Error signal after transport closed; treating as end of stream",
                    **ErrorClassifier.describe(e),
                )
                return
            stream_logger.warning("Stream failed", **ErrorClassifier.describe(e))
            raise StreamTransportError(
                f"Stream transport failed: {e}", session_id=session_id
            ) from e
        finally:
            await connection.aclose()

    async def probe_health(self) -> HealthStatus:
        """Probe ``/health`` once and describe the outcome. Never raises."""
        try:
            async with asyncio.timeout(self.health_timeout):
                response = await self._client.get(
                    HEALTH_ENDPOINT, timeout=self.health_timeout
                )
        except Exception as e:
            details = ErrorClassifier.describe(e)
            logger.warning(
                "Health check failed",
                url=f"{self.base_url}{HEALTH_ENDPOINT}",
                **details,
            )
            return HealthStatus(
                healthy=False,
                error=details["error_message"] or details["error_type"],
                error_category=details["error_category"],
            )

        if response.status_code != HTTP_OK:
            logger.warning(
                "Health check returned non-success status",
                url=f"{self.base_url}{HEALTH_ENDPOINT}",
                status_code=response.status_code,
            )
            return HealthStatus(
                healthy=False,
                status_code=response.status_code,
                error=f"HTTP Error: {response.status_code}",
                error_category="http_status_error",
            )

        return HealthStatus(healthy=True, status_code=response.status_code)

    async def check_health(self) -> bool:
        """True only if ``/health`` answered 200 within the health timeout."""
        status = await self.probe_health()
        return status.healthy

    @log_operation("request_code_modification")
    async def request_code_modification(
        self,
        original_code: str,
        instruction: str,
        file_name: str | None = None,
    ) -> CodeModificationResult:
        """
        Ask the backend to rewrite ``original_code`` following ``instruction``.

        Raises:
            CodeModificationError: On transport failure, non-200 status, or a
                response without ``modifiedCode``.
        """
        request = CodeModificationRequest(
            original_code=original_code,
            instruction=instruction,
            file_name=file_name or None,
        )

        try:
            response = await self._client.post(
                MODIFY_CODE_ENDPOINT,
                json=request.model_dump(by_alias=True, exclude_none=True),
                headers={"Accept": "application/json"},
                timeout=httpx.Timeout(
                    self.modify_code_timeout, connect=self.connect_timeout
                ),
            )
        except httpx.HTTPError as e:
            raise CodeModificationError(f"Connection failed: {e}") from e

        if response.status_code != HTTP_OK:
            message = f"HTTP Error: {response.status_code}"
            if response.text:
                message += f": {response.text}"
            raise CodeModificationError(message, status_code=response.status_code)

        try:
            payload = response.json()
        except ValueError as e:
            raise CodeModificationError(
                f"Invalid JSON in modify-code response: {e}",
                status_code=response.status_code,
            ) from e

        if not isinstance(payload, dict) or payload.get("modifiedCode") is None:
            response_data = payload if isinstance(payload, dict) else {}
            raise CodeModificationError(
                response_data.get("error") or "unknown error",
                response_data=response_data,
                status_code=response.status_code,
            )

        return CodeModificationResult.model_validate(payload)

    async def aclose(self) -> None:
        """Close the connection pool."""
        await self._client.aclose()

    async def __aenter__(self) -> StreamingChatClient:
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb) -> None:
        await self.aclose()
