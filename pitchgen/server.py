# server.py
import logging
from contextlib import asynccontextmanager

from fastapi import Depends, FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from pitchgen.auth import UserInfo, require_auth
from pitchgen.config import load_settings
from pitchgen.database import PitchStore, get_store
from pitchgen.errors import AuthError, ConfigurationError, NotFoundError, PersistenceError
from pitchgen.models import PitchRequest
from pitchgen.orchestrator import PitchOrchestrator

logger = logging.getLogger(__name__)

NO_GENERATION_STAGE_MESSAGE = "Neither N8N Webhook URL nor Google Gemini API key is configured."
SERVER_ERROR_MESSAGE = "Internal server error."


@asynccontextmanager
async def lifespan(app: FastAPI):
    load_settings().check_startup()
    yield


# --- Initialize and configure FastAPI ---
app = FastAPI(title="pitchgen", lifespan=lifespan)

# Add CORS middleware
app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_methods=["*"],
    allow_headers=["*"],
)


# --------------------------------------------------
# Error translation
# --------------------------------------------------

@app.exception_handler(AuthError)
async def auth_error_handler(request: Request, exc: AuthError):
    return JSONResponse({"error": str(exc)}, status_code=401)


@app.exception_handler(NotFoundError)
async def not_found_handler(request: Request, exc: NotFoundError):
    return JSONResponse({"error": str(exc)}, status_code=404)


@app.exception_handler(ConfigurationError)
async def configuration_error_handler(request: Request, exc: ConfigurationError):
    logger.error(f"Configuration error: {exc}")
    message = NO_GENERATION_STAGE_MESSAGE if str(exc) == NO_GENERATION_STAGE_MESSAGE else SERVER_ERROR_MESSAGE
    return JSONResponse({"error": message}, status_code=500)


@app.exception_handler(Exception)
async def unexpected_error_handler(request: Request, exc: Exception):
    logger.error("Unhandled error", exc_info=exc)
    return JSONResponse({"error": SERVER_ERROR_MESSAGE}, status_code=500)


# --------------------------------------------------
# Dependencies
# --------------------------------------------------

def get_orchestrator() -> PitchOrchestrator:
    """Build the generation pipeline from the current environment."""
    return PitchOrchestrator.from_settings(load_settings())


def require_generation_configured(
    orchestrator: PitchOrchestrator = Depends(get_orchestrator)
) -> PitchOrchestrator:
    """Reject generation requests when no remote stage is configured."""
    if not orchestrator.has_remote_strategy:
        raise ConfigurationError(NO_GENERATION_STAGE_MESSAGE)
    return orchestrator


def get_pitch_store() -> PitchStore:
    return get_store()


# --------------------------------------------------
# Routes
# --------------------------------------------------

@app.get("/api/health")
async def health():
    """Report which generation stages are configured (never the secrets)."""
    settings = load_settings()
    return {
        "status": "ok",
        "webhook_configured": settings.webhook_configured,
        "gemini_configured": settings.gemini_configured,
    }


@app.post("/api/generate-pitch")
@app.post("/generate")
async def generate_pitch(
    request: PitchRequest,
    orchestrator: PitchOrchestrator = Depends(require_generation_configured),
    user: UserInfo = Depends(require_auth),
    store: PitchStore = Depends(get_pitch_store),
):
    """Generate a pitch for the signed-in user and store it."""
    try:
        generated = await orchestrator.generate(
            request.problem, request.solution, request.target_audience
        )
        logger.info(f"Pitch for user {user.uid} produced by {generated.strategy} stage")

        await store.create(
            owner_id=user.uid,
            title=request.title,
            input_data=request.to_input(),
            generated_pitch=generated.text,
        )
        return JSONResponse({"success": True, "pitch": generated.text})
    except Exception:
        logger.exception("Failed to generate and save pitch")
        return JSONResponse({"error": "Failed to generate and save pitch."}, status_code=500)


@app.get("/api/pitches")
@app.get("/pitches")
async def list_pitches(
    user: UserInfo = Depends(require_auth),
    store: PitchStore = Depends(get_pitch_store),
):
    """List the signed-in user's pitches, newest first."""
    try:
        pitches = await store.list_by_owner(user.uid)
    except PersistenceError:
        logger.exception("Failed to fetch pitches")
        return JSONResponse({"error": "Failed to fetch pitches."}, status_code=500)

    return JSONResponse({
        "success": True,
        "pitches": [p.to_response() for p in pitches],
    })


@app.delete("/api/pitches/{pitch_id}")
@app.delete("/pitches/{pitch_id}")
async def delete_pitch(
    pitch_id: str,
    user: UserInfo = Depends(require_auth),
    store: PitchStore = Depends(get_pitch_store),
):
    """Delete one of the signed-in user's pitches."""
    try:
        deleted = await store.delete_if_owned(user.uid, pitch_id)
    except PersistenceError:
        logger.exception("Failed to delete pitch")
        return JSONResponse({"error": "Failed to delete pitch."}, status_code=500)

    if not deleted:
        raise NotFoundError("Pitch not found or unauthorized.")

    return JSONResponse({
        "success": True,
        "message": "Pitch deleted successfully",
    })
