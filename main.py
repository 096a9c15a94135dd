import logging
import os
from contextlib import asynccontextmanager
from pathlib import Path

from dotenv import load_dotenv
from fastapi import FastAPI, Request, HTTPException
from fastapi.responses import FileResponse
from fastapi.staticfiles import StaticFiles

from controllers.session_controller import SessionController
from routes.session_route import router as session_router
from services.openai.generation_client import GenerationClient, create_openai_client
from services.session_store import SessionStore

BASE_DIR = Path(__file__).resolve().parent
PUBLIC_DIR = BASE_DIR / "public"

load_dotenv()  # Load environment variables from .env file if present

logging.basicConfig(
    level=os.getenv("LOG_LEVEL", "INFO").upper(),
    format="%(asctime)s %(levelname)s %(name)s: %(message)s",
)
LOGGER = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """
    Lifespan manager to initialize:
      - the OpenAI async client (OPENAI_API_KEY is required)
      - the in-memory session store and the controller driving it
    and attach them to `app.state`.
    """
    # Missing credentials abort startup.
    openai_client = create_openai_client()
    app.state.openai_client = openai_client

    app.state.session_store = SessionStore()
    app.state.session_controller = SessionController(
        app.state.session_store, GenerationClient(openai_client)
    )
    LOGGER.info("Image studio started")

    try:
        yield
    finally:
        try:
            await openai_client.close()
        except Exception:
            LOGGER.warning("Failed to close OpenAI client", exc_info=True)


def create_app() -> FastAPI:
    """
    Create and configure the FastAPI application instance.
    """
    app = FastAPI(title="Image Studio", lifespan=lifespan)

    if PUBLIC_DIR.exists():
        app.mount("/public", StaticFiles(directory=PUBLIC_DIR), name="public")

    @app.get("/", include_in_schema=False)
    async def serve_index():
        """
        Serve the single page from the public directory.
        """
        index_path = PUBLIC_DIR / "index.html"
        if not index_path.exists():
            raise HTTPException(status_code=404, detail="Frontend not found")
        return FileResponse(index_path)

    @app.get("/health")
    async def health(request: Request):
        """
        Report whether the OpenAI client exists and how many sessions are open.
        """
        has_openai = getattr(request.app.state, "openai_client", None) is not None
        store = getattr(request.app.state, "session_store", None)
        return {
            "ok": True,
            "openai_available": has_openai,
            "sessions": len(store) if store is not None else 0,
        }

    app.include_router(session_router)

    return app


app = create_app()
