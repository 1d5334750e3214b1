"""줄 단위 JSON-RPC를 stdin/stdout으로 주고받는 전송 계층이에요."""

from __future__ import annotations

import asyncio
import contextlib
import json
import sys
from collections.abc import Coroutine
from typing import Any, BinaryIO, Protocol

from greeting_server.app.mcp_protocol import ErrorCodes, JsonRpcError, error_response
from greeting_server.app.rpc import JsonRpcSession
from greeting_server.core.errors import TransportError
from libs.common.logging import get_logger

logger = get_logger("greeting_server.stdio")

_STREAM_LIMIT = 16 * 1024 * 1024


class LineWriter(Protocol):
    def write(self, data: bytes) -> None: ...

    async def drain(self) -> None: ...


class _BufferWriter:
    """파이프가 아닌 stdout(파일 리다이렉트 등)에 쓰는 동기 writer예요."""

    def __init__(self, buffer: BinaryIO) -> None:
        self._buffer = buffer

    def write(self, data: bytes) -> None:
        self._buffer.write(data)

    async def drain(self) -> None:
        self._buffer.flush()


class StdioTransport:
    """요청마다 태스크를 만들어 동시에 처리하고, 끝난 순서대로 응답해요.

    응답은 JSON-RPC id로 요청과 짝지어지므로 요청 순서와 달라도 돼요.
    ``notifications/cancelled``를 받거나 입력이 닫히면 진행 중인 요청의 결과는
    버리고 응답하지 않아요.
    """

    def __init__(
        self,
        session: JsonRpcSession,
        *,
        reader: asyncio.StreamReader | None = None,
        writer: LineWriter | None = None,
    ) -> None:
        self._session = session
        self._reader = reader
        self._writer = writer
        self._write_lock = asyncio.Lock()
        self._inflight: dict[str | int, asyncio.Task[None]] = {}
        self._cancelled: set[str | int] = set()
        self._background: set[asyncio.Task[None]] = set()

    @property
    def inflight_count(self) -> int:
        return len(self._inflight)

    async def attach(self) -> None:
        loop = asyncio.get_running_loop()
        if self._reader is None:
            reader = asyncio.StreamReader(limit=_STREAM_LIMIT)
            try:
                await loop.connect_read_pipe(lambda: asyncio.StreamReaderProtocol(reader), sys.stdin)
            except (OSError, ValueError) as exc:
                raise TransportError(f"stdin에 연결하지 못했어요: {exc}") from exc
            self._reader = reader
        if self._writer is None:
            try:
                transport, protocol = await loop.connect_write_pipe(asyncio.streams.FlowControlMixin, sys.stdout)
                self._writer = asyncio.StreamWriter(transport, protocol, None, loop)
            except ValueError:
                self._writer = _BufferWriter(sys.stdout.buffer)
            except OSError as exc:
                raise TransportError(f"stdout에 연결하지 못했어요: {exc}") from exc
        logger.info("stdio_transport_attached")

    async def serve(self) -> None:
        await self.attach()
        reader = self._reader
        if reader is None:
            raise TransportError("stdin reader가 준비되지 않았어요.")

        while True:
            try:
                line = await reader.readline()
            except ValueError as exc:
                # 한 줄이 버퍼 한도를 넘었어요. 스트림 위치를 잃었으니 종료해요.
                raise TransportError(f"입력 줄이 너무 길어요: {exc}") from exc
            if not line:
                break
            text = line.strip()
            if not text:
                continue
            self._accept(text)

        await self._abandon_inflight()
        logger.info("stdio_transport_closed")

    def _accept(self, raw: bytes) -> None:
        try:
            message = json.loads(raw)
        except (json.JSONDecodeError, UnicodeDecodeError) as exc:
            logger.warning("stdio_parse_error", error=str(exc))
            self._spawn_background(
                self._write(error_response(None, JsonRpcError(ErrorCodes.PARSE_ERROR, "JSON을 해석할 수 없어요.")))
            )
            return

        if isinstance(message, dict) and message.get("method") == "notifications/cancelled":
            self._cancel(message.get("params"))

        request_id = message.get("id") if isinstance(message, dict) else None
        if isinstance(request_id, (str, int)) and request_id in self._inflight:
            # 진행 중인 요청과 id가 겹치면 응답을 구분할 수 없어서 새 요청을 거절해요.
            logger.warning("stdio_duplicate_request_id", request_id=request_id)
            self._spawn_background(
                self._write(
                    error_response(
                        request_id,
                        JsonRpcError(ErrorCodes.INVALID_REQUEST, f"이미 처리 중인 요청 id예요: {request_id}"),
                    )
                )
            )
            return

        task = asyncio.create_task(self._handle(message, request_id))
        if isinstance(request_id, (str, int)):
            self._inflight[request_id] = task
            task.add_done_callback(lambda _task, key=request_id: self._forget(key, _task))
        else:
            self._background.add(task)
            task.add_done_callback(self._background.discard)

    def _spawn_background(self, coro: Coroutine[Any, Any, None]) -> None:
        task = asyncio.create_task(coro)
        self._background.add(task)
        task.add_done_callback(self._background.discard)

    def _cancel(self, params: object) -> None:
        if not isinstance(params, dict):
            return
        request_id = params.get("requestId")
        if isinstance(request_id, (str, int)) and request_id in self._inflight:
            self._cancelled.add(request_id)
            logger.info("request_cancelled", request_id=request_id, reason=params.get("reason"))

    def _forget(self, request_id: str | int, task: asyncio.Task[None]) -> None:
        if self._inflight.get(request_id) is task:
            del self._inflight[request_id]
            self._cancelled.discard(request_id)

    async def _handle(self, message: Any, request_id: Any) -> None:
        response = await self._session.handle(message)
        if response is None:
            return
        if isinstance(request_id, (str, int)) and request_id in self._cancelled:
            logger.info("response_discarded", request_id=request_id)
            return
        await self._write(response)

    async def _write(self, payload: dict[str, Any]) -> None:
        writer = self._writer
        if writer is None:
            raise TransportError("stdout writer가 준비되지 않았어요.")
        data = (json.dumps(payload, ensure_ascii=False) + "\n").encode("utf-8")
        async with self._write_lock:
            try:
                writer.write(data)
                await writer.drain()
            except (BrokenPipeError, ConnectionResetError) as exc:
                # 클라이언트가 출력 파이프를 닫았어요. 이 응답은 전달할 곳이 없어요.
                logger.warning("stdio_write_failed", request_id=payload.get("id"), error=str(exc))

    async def _abandon_inflight(self) -> None:
        tasks = list(self._inflight.values())
        if not tasks:
            return
        logger.info("stdio_abandon_inflight", pending=len(tasks))
        for task in tasks:
            task.cancel()
        for task in tasks:
            with contextlib.suppress(asyncio.CancelledError):
                await task
