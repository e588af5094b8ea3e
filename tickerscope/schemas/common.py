"""Tool result envelope shared by every MCP tool and debug route."""

from __future__ import annotations

from typing import Any

from pydantic import BaseModel, Field


class ErrorDetail(BaseModel):
    """Why a tool call produced no data.

    ``error_code`` is the ``SnapshotError.error_code`` of the failure (or
    ``SUPERSEDED`` / ``UNKNOWN_TOOL``), so clients can branch on it.
    """

    error_code: str
    message: str
    hint: str | None = None
    symbol: str | None = Field(None, description="Symbol or query the failure concerns")


class Meta(BaseModel):
    execution_ms: float = Field(..., description="Wall-clock milliseconds")
    row_count: int | None = Field(None, description="Series points (or rows) returned")
    upstream_calls: int | None = Field(None, description="Provider requests made for this call")
    used_fallback: bool | None = Field(
        None, description="True when the timeframe window was empty and the lookback was used"
    )


class ToolResponse(BaseModel):
    """Envelope: ``data`` on success, ``error`` on failure, ``meta`` always."""

    tool: str
    ok: bool
    data: Any | None = None
    error: ErrorDetail | None = None
    meta: Meta
