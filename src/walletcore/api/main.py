import logging
import traceback
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from starlette.requests import Request
from starlette.responses import JSONResponse

from walletcore.api.price import router as price_router
from walletcore.api.wallet import router as wallet_router
from walletcore.container import Container

logger = logging.getLogger("walletcore.api")

VERSION = "0.1.0"


@asynccontextmanager
async def lifespan(app: FastAPI):
    container = Container()
    app.state.container = container
    container.utxo_scanner().start()
    yield
    await container.utxo_scanner().stop()
    await container.rpc_client().close()
    await container.price_http_client().close()
    engine = container.engine()
    await engine.dispose()


app = FastAPI(title="Scash Wallet Core", version=VERSION, lifespan=lifespan)


@app.exception_handler(Exception)
async def global_exception_handler(request: Request, exc: Exception):
    tb = traceback.format_exception(type(exc), exc, exc.__traceback__)
    logger.error("Unhandled error on %s %s:\n%s", request.method, request.url.path, "".join(tb))
    return JSONResponse(status_code=500, content={"detail": "internal error"})


app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

app.include_router(wallet_router)
app.include_router(price_router)


@app.get("/health")
async def health():
    return {"ok": True}


@app.get("/api/health")
async def api_health():
    return {"status": "ok", "version": VERSION}
