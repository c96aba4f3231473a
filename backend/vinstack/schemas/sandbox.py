"""Pydantic schemas for sandboxed code execution."""
from pydantic import BaseModel


class ExecuteRequest(BaseModel):
    code: str
    language: str


class ExecuteResponse(BaseModel):
    status: str  # success | error | timeout
    output: str = ""
    error: str = ""
    execution_time_ms: int = 0
