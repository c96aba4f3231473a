"""Tools the mentor may call. Each module exposes ``TOOL_SCHEMA`` and ``execute(ctx, args)``."""
from dataclasses import dataclass
from typing import Optional

from sqlalchemy.orm import Session

from vinstack.services.sandbox_service import CodeSandbox


@dataclass
class ToolContext:
    db: Session
    sandbox: CodeSandbox
    user_id: Optional[str] = None
