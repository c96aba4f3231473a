"""Code execution API route."""
import logging

from fastapi import APIRouter, Depends
from fastapi.concurrency import run_in_threadpool

from vinstack.deps import get_sandbox
from vinstack.schemas.sandbox import ExecuteRequest, ExecuteResponse
from vinstack.services.sandbox_service import CodeSandbox

logger = logging.getLogger(__name__)
router = APIRouter()


@router.post("/execute", response_model=ExecuteResponse)
async def execute(payload: ExecuteRequest, sandbox: CodeSandbox = Depends(get_sandbox)):
    """Run code in the sandbox. Failures, including a refused run, come back in the body."""
    result = await run_in_threadpool(sandbox.execute, payload.code, payload.language)
    return ExecuteResponse(**result.to_dict())
