"""
Stream session: one chat request and the callbacks fed by its event stream.
"""

from __future__ import annotations

import asyncio
import contextlib

from chatstream.exceptions import (
    CallbackError,
    ChunkParseError,
    StreamTransportError,
)
from chatstream.logging_utils import (
    ContextualLogger,
    ErrorClassifier,
    operation_context,
)

from .models import ChunkCallback, ClosedCallback, ErrorCallback, StreamState
from .streaming import EventSourceConnection, ReadyState, ServerSentEvent


class StreamSession:
    """
    Handle for one open chat stream.

    The session owns its connection exclusively. Every exit path (server end
    of stream, transport error, ``close()``, task cancellation) converges on
    ``StreamState.CLOSED`` exactly once, and no callback fires after that.
    """

    def __init__(
        self,
        session_id: int | str,
        message: str,
        connection: EventSourceConnection,
        on_chunk: ChunkCallback,
        on_error: ErrorCallback | None = None,
        on_closed: ClosedCallback | None = None,
    ):
        self.session_id = session_id
        self.message = message
        self.state = StreamState.CONNECTING
        self.last_event_id: str | None = None
        self.chunk_count = 0

        self._connection = connection
        self._on_chunk = on_chunk
        self._on_error = on_error
        self._on_closed = on_closed
        self._task: asyncio.Task[None] | None = None
        self._logger = ContextualLogger({"session_id": session_id})

    @property
    def connection(self) -> EventSourceConnection:
        return self._connection

    @property
    def is_closed(self) -> bool:
        return self.state is StreamState.CLOSED

    def start(self) -> StreamSession:
        """Schedule the pump task on the running loop."""
        if self._task is not None:
            raise RuntimeError("Stream session already started")
        loop = asyncio.get_running_loop()
        self._task = loop.create_task(
            self._run(), name=f"chat-stream-{self.session_id}"
        )
        return self

    async def _run(self) -> None:
        try:
            async with operation_context(
                "connect_chat_stream", context={"session_id": self.session_id}
            ):
                await self._connection.connect()
            async with contextlib.aclosing(self._connection.events()) as events:
                async for event in events:
                    self._handle_event(event)
                    # close() may have been called from a callback
                    if self.is_closed:
                        break
            self._finish()
        except asyncio.CancelledError:
            self.close()
            raise
        except Exception as e:
            self._handle_transport_error(e)
        finally:
            await self._connection.aclose()
            self._logger.debug(
                "Stream transport released",
                chunks=self.chunk_count,
                stats=self._connection.parser.get_stats(),
            )

    def _handle_event(self, event: ServerSentEvent) -> None:
        if self.state is StreamState.CONNECTING:
            self.state = StreamState.OPEN
            self._logger.debug("Stream opened")

        if event.id is not None:
            self.last_event_id = event.id

        if not event.has_data:
            self._emit_error(
                ChunkParseError(
                    f"Event '{event.event}' carried no data field",
                    event_name=event.event,
                    session_id=self.session_id,
                )
            )
            return

        if not event.is_message:
            self._logger.debug("Skipping named event", event_name=event.event)
            return

        if not event.data.strip():
            return

        self.chunk_count += 1
        try:
            self._on_chunk(event.data)
        except Exception as e:
            self._logger.error("Chunk callback raised", **ErrorClassifier.describe(e))
            error = CallbackError(
                f"on_chunk callback failed: {e}", session_id=self.session_id
            )
            error.__cause__ = e
            self._emit_error(error)

    def _handle_transport_error(self, exc: Exception) -> None:
        if self.is_closed:
            return

        # A closed transport at error time means the error is the
        # end-of-stream signal, not a failure.
        if self._connection.ready_state is ReadyState.CLOSED:
            self._logger.debug(
                "Error signal after transport closed; treating as end of stream",
                **ErrorClassifier.describe(exc),
            )
            self._finish()
            return

        if isinstance(exc, StreamTransportError):
            error = exc
            if error.session_id is None:
                error.session_id = self.session_id
        else:
            error = StreamTransportError(
                f"Stream transport failed: {exc}", session_id=self.session_id
            )
            error.__cause__ = exc

        self.state = StreamState.ERRORED
        self._logger.warning("Stream failed", **ErrorClassifier.describe(error))
        self._emit_error(error)
        self._connection.mark_closed()
        self._set_closed()

    def _finish(self) -> None:
        if self.is_closed:
            return
        self._set_closed()
        self._logger.debug("Stream ended", chunks=self.chunk_count)
        if self._on_closed is not None:
            try:
                self._on_closed()
            except Exception as e:
                self._logger.error(
                    "Closed callback raised", **ErrorClassifier.describe(e)
                )

    def _emit_error(self, error: Exception) -> None:
        if self.is_closed or self._on_error is None:
            return
        try:
            self._on_error(error)
        except Exception as e:
            self._logger.error("Error callback raised", **ErrorClassifier.describe(e))

    def _set_closed(self) -> None:
        self.state = StreamState.CLOSED

    def close(self) -> None:
        """
        Terminate the stream. Idempotent; no callback fires afterwards.

        The transport is released by the pump task as it unwinds; await
        ``aclose()`` or ``wait_closed()`` to wait for that.
        """
        if self.is_closed:
            return
        self._set_closed()
        self._connection.mark_closed()
        self._logger.debug("Stream closed by caller", chunks=self.chunk_count)

        if self._task is None or self._task.done():
            return
        try:
            current = asyncio.current_task()
        except RuntimeError:
            current = None
        if self._task is not current:
            self._task.cancel()

    async def wait_closed(self) -> None:
        """Wait until the pump task has finished and released the transport."""
        if self._task is not None:
            await asyncio.wait({self._task})

    async def aclose(self) -> None:
        self.close()
        await self.wait_closed()

    async def __aenter__(self) -> StreamSession:
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb) -> None:
        await self.aclose()
