import inspect
import logging
from contextlib import asynccontextmanager

from utils.env import configure_logging, env_flag, env_float, load_dotenv_if_present

load_dotenv_if_present()  # Load environment variables from .env file if present

from fastapi import FastAPI, Request

from routes.generation_route import router as generation_router
from routes.session_route import router as session_router
from routes.tag_route import router as tag_router
from services.openai.generation_client import GenerationClient, build_openai_client
from services.workflow.generation_workflow import COPY_FEEDBACK_SECONDS
from services.workflow.session_store import SessionStore

LOGGER = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """
    Lifespan manager to initialize:
      - the OpenAI-compatible async client and the generation client around it
      - the in-memory session store
    and attach them to `app.state`.

    A generation client already present on `app.state` is kept as is.
    """
    openai_client = None
    if getattr(app.state, "generation_client", None) is None:
        try:
            openai_client = build_openai_client()
        except Exception as exc:
            raise RuntimeError("Failed to initialize OpenAI Async client") from exc
        app.state.generation_client = GenerationClient(openai_client)

    app.state.session_store = SessionStore(
        app.state.generation_client,
        copy_feedback_seconds=env_float("COPY_FEEDBACK_SECONDS", COPY_FEEDBACK_SECONDS),
        discard_stale=env_flag("DISCARD_STALE_GENERATIONS"),
    )
    LOGGER.info("Alt text service ready (discard_stale=%s)", app.state.session_store.discard_stale)

    try:
        yield
    finally:
        await app.state.session_store.aclose()
        # Only close the client this lifespan created.
        if openai_client is not None:
            aclose = getattr(openai_client, "close", None)
            if aclose is not None:
                try:
                    result = aclose()
                    if inspect.isawaitable(result):
                        await result
                except Exception as exc:
                    LOGGER.warning("Error while closing OpenAI client: %s", exc)


def create_app() -> FastAPI:
    """
    Create and configure the FastAPI application instance.
    """
    configure_logging()
    app = FastAPI(title="Alt Text Generator", lifespan=lifespan)

    @app.get("/health")
    async def health(request: Request):
        """
        Simple health check that reports whether the session store and generation client are ready.
        """
        store = getattr(request.app.state, "session_store", None)
        has_client = getattr(request.app.state, "generation_client", None) is not None
        return {
            "ok": True,
            "generation_available": has_client,
            "sessions": len(store) if store is not None else 0,
        }

    # Register application routers
    app.include_router(session_router)
    app.include_router(tag_router)
    app.include_router(generation_router)

    return app


app = create_app()
