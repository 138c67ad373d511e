import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse

from evenly.api.v1.routes.balance import router as balance_router
from evenly.api.v1.routes.system import router as system_router
from evenly.core.config import settings
from evenly.core.db_check import wait_for_db
from evenly.core.errors import InconsistentBalancesError
from evenly.core.logger import configure_logging

configure_logging(settings.LOG_LEVEL)
logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    await wait_for_db(settings.DB_CONNECT_RETRIES)
    yield


app = FastAPI(title="Evenly Balances", lifespan=lifespan)


@app.exception_handler(InconsistentBalancesError)
async def inconsistent_balances_handler(request: Request, exc: InconsistentBalancesError):
    logger.error("Inconsistent ledger on %s: %s", request.url.path, exc)
    return JSONResponse(
        status_code=500,
        content={"detail": "Group balances are inconsistent"},
    )


@app.get("/")
async def root():
    return {"message": "Evenly backend is live"}

app.include_router(system_router, prefix="/api/v1/system")
app.include_router(balance_router, prefix="/api/v1/balances")
