"""FastAPI application entry point."""
import logging

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from vinstack.config import settings
from vinstack.database import Base, engine
from vinstack.integrations.base import ProviderError, ProviderNotConfigured
from vinstack.realtime.hub import ChannelHub
from vinstack.services.sandbox_service import CodeSandbox

from vinstack.routers import (
    ai, billing, collaborators, comments, game, integrations, media, notifications, profiles, realtime, sandbox,
    snippets, teams,
)

# Import all models so Base.metadata knows about them
from vinstack.models.user import Profile                        # noqa: F401
from vinstack.models.folder import Folder                       # noqa: F401
from vinstack.models.team import Team, TeamMember               # noqa: F401
from vinstack.models.snippet import Snippet                     # noqa: F401
from vinstack.models.collaborator import SnippetCollaborator    # noqa: F401
from vinstack.models.comment import SnippetComment              # noqa: F401
from vinstack.models.notification import Notification           # noqa: F401
from vinstack.models.activity import Activity                   # noqa: F401
from vinstack.models.subscription import Subscription           # noqa: F401
from vinstack.models.player import Player, QuestCompletion      # noqa: F401
from vinstack.models.integration import Integration             # noqa: F401

logging.basicConfig(
    level=settings.LOG_LEVEL.upper(),
    format="%(asctime)s %(levelname)s [%(name)s] %(message)s",
)
logger = logging.getLogger(__name__)

app = FastAPI(
    title="VinStack Code",
    description="Collaborative code snippets with live cursors, threaded review and a coding quest game",
    version="0.1.0",
)

app.state.hub = ChannelHub()
app.state.sandbox = CodeSandbox()

# CORS
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.CORS_ORIGINS.split(","),
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# Register routers
app.include_router(profiles.router, prefix="/api/profiles", tags=["Profiles"])
app.include_router(snippets.router, prefix="/api/snippets", tags=["Snippets"])
app.include_router(snippets.folders_router, prefix="/api/folders", tags=["Folders"])
app.include_router(collaborators.router, prefix="/api/snippets", tags=["Collaborators"])
app.include_router(comments.router, prefix="/api", tags=["Comments"])
app.include_router(notifications.router, prefix="/api/notifications", tags=["Notifications"])
app.include_router(teams.router, prefix="/api/teams", tags=["Teams"])
app.include_router(game.router, prefix="/api/game", tags=["Game"])
app.include_router(sandbox.router, prefix="/api/sandbox", tags=["Sandbox"])
app.include_router(ai.router, prefix="/api/ai", tags=["AI"])
app.include_router(media.router, prefix="/api/media", tags=["Media"])
app.include_router(billing.router, prefix="/api/billing", tags=["Billing"])
app.include_router(integrations.router, prefix="/api/integrations", tags=["Integrations"])
app.include_router(realtime.router, prefix="/api/realtime", tags=["Realtime"])


@app.exception_handler(ProviderError)
async def provider_error_handler(request: Request, exc: ProviderError):
    """Missing credentials are 503, anything else from a provider is 502."""
    status_code = 503 if isinstance(exc, ProviderNotConfigured) else 502
    logger.error("Provider failure on %s %s: %s", request.method, request.url.path, exc)
    return JSONResponse(status_code=status_code, content={"detail": str(exc), "provider": exc.provider})


@app.on_event("startup")
def on_startup():
    """Create database tables on startup (for SQLite dev mode)."""
    if settings.DATABASE_URL.startswith("sqlite"):
        Base.metadata.create_all(bind=engine)


@app.get("/api/health")
def health_check():
    return {"status": "ok"}
