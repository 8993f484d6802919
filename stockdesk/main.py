from contextlib import asynccontextmanager

import uvicorn
from fastapi import FastAPI, APIRouter
from fastapi.middleware.cors import CORSMiddleware

from stockdesk.core.config import settings
from stockdesk.core.logging_config import configure_logging
from stockdesk.db.session import create_tables, dispose_sync_engine, ping_sync
from stockdesk.system.error_codes import register_global_handlers


@asynccontextmanager
async def lifespan(app: FastAPI):
    configure_logging(settings.log_level)
    if settings.auto_create_tables:
        create_tables()
    yield
    dispose_sync_engine()


app = FastAPI(
    title="stockdesk",
    version="0.1.0",
    docs_url="/api/docs",
    redoc_url="/api/redoc",
    openapi_url="/api/openapi.json",
    lifespan=lifespan,
)

register_global_handlers(app)

# ─────────────────────────────────────────────
# CORS
#  - localhost 계열은 정규식으로 통째로 허용 (http/https + 포트 유무)
#  - 그 외 고정 도메인은 CORS_ORIGINS 환경변수
# ─────────────────────────────────────────────
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins,
    allow_origin_regex=r"^https?://localhost(:\d+)?$",
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


@app.get("/health", tags=["system"])
def health():
    return {"status": "ok"}


api = APIRouter(prefix="/api", tags=["system"])


@api.get("/health")
def api_health():
    return {"status": "ok"}


@api.get("/ready")
def api_ready():
    return {"ready": ping_sync()}


app.include_router(api)

from stockdesk.routers.products.products import products  # noqa: E402
app.include_router(products)

from stockdesk.routers.stock.stocks import stocks  # noqa: E402
app.include_router(stocks)


if __name__ == "__main__":
    uvicorn.run("stockdesk.main:app", host="0.0.0.0", port=8000, reload=True)
