from __future__ import annotations

import json

from fastapi import APIRouter, Request, Response, status
from fastapi.responses import JSONResponse

from greeting_server.app.deps import get_registry, get_session
from greeting_server.app.mcp_protocol import ErrorCodes, JsonRpcError, error_response
from libs.common.logging import get_logger

router = APIRouter()
logger = get_logger("greeting_server.routes")


@router.post("/mcp")
async def handle_mcp(request: Request) -> Response:
    session = get_session(request)
    body = await request.body()
    try:
        message = json.loads(body)
    except (json.JSONDecodeError, UnicodeDecodeError) as exc:
        logger.warning("http_parse_error", error=str(exc))
        return JSONResponse(
            status_code=status.HTTP_400_BAD_REQUEST,
            content=error_response(None, JsonRpcError(ErrorCodes.PARSE_ERROR, "JSON을 해석할 수 없어요.")),
        )

    response = await session.handle(message)
    if response is None:
        # 알림과 클라이언트 응답에는 본문 없이 접수만 알려요.
        return Response(status_code=status.HTTP_202_ACCEPTED)
    return JSONResponse(content=response)


@router.get("/healthz")
async def healthz(request: Request) -> dict[str, object]:
    registry = get_registry(request)
    return {"status": "ok", "frozen": registry.frozen, "capabilities": registry.snapshot()}
