# tradedesk/main.py

from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.encoders import jsonable_encoder
from fastapi.responses import JSONResponse
from tradedesk.database import init_db
from tradedesk.errors import TradingError
from tradedesk.routes import agents, orders, portfolio, prices
from logger import logger


@asynccontextmanager
async def lifespan(app: FastAPI):
    init_db()
    yield


# Initialize FastAPI app
app = FastAPI(
    title="Agent Trading API",
    description="API for placing and settling agent token orders, portfolio tracking and trend analysis.",
    version="1.0.0",
    lifespan=lifespan
)


@app.exception_handler(TradingError)
async def trading_error_handler(request: Request, exc: TradingError):
    logger.warning(f"{request.method} {request.url.path} failed with {exc.status_code}: {exc.message}")
    return JSONResponse(content=exc.to_dict(), status_code=exc.status_code)


@app.exception_handler(RequestValidationError)
async def request_validation_handler(request: Request, exc: RequestValidationError):
    logger.warning(f"Invalid request body for {request.url.path}: {exc.errors()}")
    return JSONResponse(
        content={"error": "Missing or invalid fields", "details": jsonable_encoder(exc.errors())},
        status_code=400
    )


@app.middleware("http")
async def log_exceptions_middleware(request: Request, call_next):
    try:
        return await call_next(request)
    except Exception as e:
        logger.error(f"Unhandled exception: {e}", exc_info=True)
        return JSONResponse(content={"error": "Internal Server Error"}, status_code=500)


# Include API routers
app.include_router(orders.router)
app.include_router(portfolio.router)
app.include_router(agents.router)
app.include_router(prices.router)


# Root endpoint
@app.get("/", response_model=dict)
async def root():
    return {"message": "Agent Trading API is running"}


# Health check endpoint
@app.get("/health", response_model=dict)
def health_check():
    return {"status": "healthy"}
