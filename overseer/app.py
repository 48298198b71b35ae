import os
from contextlib import asynccontextmanager
from pathlib import Path

from dotenv import load_dotenv
from fastapi import FastAPI

from overseer import mcp_server
from overseer.controller import TurnController
from overseer.llm import LLM, create_llm
from overseer.portraits import create_portrait_generator
from overseer.routes import router
from overseer.settings import get_settings, init_settings
from overseer.state import SessionState

load_dotenv(Path(__file__).parent.parent / ".env")

DEFAULT_DATA_DIR = Path(__file__).parent.parent / "data"


def create_app(
    data_dir: Path | None = None,
    *,
    llm: LLM | None = None,
    state: SessionState | None = None,
    phase_delay: float = 0.8,
) -> FastAPI:
    """Build the app around one session.

    With no explicit llm the provider follows the persisted settings, and
    PATCH /api/settings swaps it live.
    """
    resolved = data_dir or Path(os.getenv("DATA_DIR", str(DEFAULT_DATA_DIR)))
    init_settings(resolved)
    settings = get_settings()

    state = state or SessionState()
    controller = TurnController(
        state,
        llm or create_llm(settings),
        portraits=None if llm else create_portrait_generator(settings),
        idle_delay=settings.autonomous_delay_seconds,
        phase_delay=phase_delay,
    )
    mcp_server.set_session(state.view())

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        yield
        await controller.shutdown()

    app = FastAPI(title="Ethereal Overseer", lifespan=lifespan)
    app.state.controller = controller
    app.state.llm_from_settings = llm is None
    app.include_router(router, prefix="/api")
    return app


# Default app instance for uvicorn (uses DATA_DIR env var or default)
app = create_app()
