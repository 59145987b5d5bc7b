from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from ragclient.application import get_session_service
from ragclient.core.settings import ClientSettings
from ragclient.routes import session


@asynccontextmanager
async def lifespan(_: FastAPI):
    service = get_session_service()
    await service.startup()
    try:
        yield
    finally:
        await service.aclose()


def create_app(settings: ClientSettings | None = None) -> FastAPI:
    settings = settings or ClientSettings.from_env()
    app = FastAPI(title="RAG Session Client", version="0.1.0", lifespan=lifespan)

    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    app.include_router(session.router, prefix="/api")

    @app.get("/", include_in_schema=False)
    async def root() -> JSONResponse:
        """Landing payload for container checks."""
        return JSONResponse(
            {
                "message": "RAG Session Client",
                "docs": "/docs",
                "session": "/api/session",
                "backend": settings.api_base,
            }
        )

    return app


app = create_app()
