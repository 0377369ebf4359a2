"""
API routes: register endpoints; no pipeline logic; only delegate to services.
"""

import logging

from fastapi import APIRouter
from fastapi.responses import JSONResponse, PlainTextResponse

from app.core.config import WELCOME_MESSAGE
from app.schemas.query import ErrorResponse, QueryRequest, QueryResponse
from app.services.agent_service import answer_query

logger = logging.getLogger(__name__)
router = APIRouter()

QUERY_NOT_PROVIDED = "Query not provided"
QUERY_FAILED = "An error occurred while processing the query."


def error_response(status_code: int, message: str) -> JSONResponse:
    return JSONResponse(status_code=status_code, content=ErrorResponse(error=message).model_dump())


# --- System ---

@router.get("/", tags=["system"], response_class=PlainTextResponse)
def root() -> str:
    return WELCOME_MESSAGE


@router.get("/health", tags=["system"])
def health():
    return {"ok": True}


# --- Query ---

@router.post(
    "/query",
    response_model=QueryResponse,
    responses={400: {"model": ErrorResponse}, 500: {"model": ErrorResponse}},
    tags=["query"],
    summary="Ask the documents a question",
    description="Re-indexes the documents, routes the query (optionally through the tool-calling agent) and returns the answer. 400 when query is missing, 500 on any internal failure.",
)
def post_query(body: QueryRequest | None = None):
    raw = body.query if body is not None else None
    logger.info("[api:post_query] IN  query=%r", raw)
    query = (raw or "").strip()
    if not query:
        return error_response(400, QUERY_NOT_PROVIDED)
    try:
        answer = answer_query(query)
    except Exception:
        logger.exception("[api:post_query] query failed")
        return error_response(500, QUERY_FAILED)
    logger.info("[api:post_query] OUT answer_len=%d", len(answer))
    return QueryResponse(response=answer)
