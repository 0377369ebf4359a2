"""Schemas for the query endpoint."""

from pydantic import BaseModel, Field


class QueryRequest(BaseModel):
    """Request body for POST /query. A missing or empty query is rejected by the handler with 400."""

    query: str | None = Field(None, description="Natural-language question about the indexed documents.")


class QueryResponse(BaseModel):
    """Response for POST /query."""

    response: str = Field(..., description="Answer from the agent (or query engine when the agent is off).")


class ErrorResponse(BaseModel):
    """Error body for 400 and 500 responses."""

    error: str = Field(..., description="Human-readable error message.")

    model_config = {
        "json_schema_extra": {"examples": [{"error": "Query not provided"}]}
    }
