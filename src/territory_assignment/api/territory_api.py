# ==========================================================
# 📦 src/territory_assignment/api/territory_api.py
# ==========================================================

from contextlib import asynccontextmanager
from typing import Callable, Optional

import uvicorn
from dotenv import load_dotenv
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from loguru import logger

from territory_assignment.api.routes import router as territory_router
from territory_assignment.bootstrap import build_services
from territory_assignment.config.settings import Settings
from territory_assignment.logs.logging_config import setup_logging


def create_app(
    settings: Optional[Settings] = None,
    services_factory: Callable = build_services,
) -> FastAPI:
    """
    Pool e sessão HTTP são criados no startup e fechados no shutdown.
    `services_factory` permite injetar serviços falsos nos testes.
    """
    if settings is None:
        load_dotenv()
        settings = Settings.from_env()

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        setup_logging(settings.log_level, settings.log_file)
        app.state.servicos = services_factory(settings)
        logger.info("🚀 Territory Assignment API online")
        try:
            yield
        finally:
            close = getattr(app.state.servicos, "close", None)
            if close is not None:
                close()
            logger.info("🛑 Territory Assignment API encerrada")

    app = FastAPI(
        title="Territory Assignment API",
        description="Atribuição geográfica de clientes a representantes de vendas",
        version="1.0.0",
        lifespan=lifespan,
    )
    app.state.settings = settings

    # ==========================================================
    # 🌍 CORS
    # ==========================================================
    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    app.include_router(territory_router, prefix="/territorios")

    @app.get("/", tags=["Status"])
    def root():
        return {"status": "Territory Assignment API online 🚀"}

    return app


# ==========================================================
# 🚀 Execução standalone (dev)
# ==========================================================
if __name__ == "__main__":
    uvicorn.run(create_app(), host="0.0.0.0", port=8000)
