from fastapi import FastAPI, Request, Depends, status
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse, PlainTextResponse
from slowapi import Limiter, _rate_limit_exceeded_handler
from slowapi.util import get_remote_address
from slowapi.errors import RateLimitExceeded
from starlette.exceptions import HTTPException as StarletteHTTPException
import logging
import structlog
import sys
import time
from contextlib import asynccontextmanager

from models import Transaction, TransactionResponse, StatementResponse, ErrorResponse, HealthResponse
from services import AccountService, get_account_service, parse_account_id
from repositories import AccountTable, get_account_repository
from config import get_settings

settings = get_settings()

# Configure structured logging
logging.basicConfig(format="%(message)s", stream=sys.stdout, level=settings.log_level.upper())

structlog.configure(
    processors=[
        structlog.stdlib.filter_by_level,
        structlog.stdlib.add_logger_name,
        structlog.stdlib.add_log_level,
        structlog.stdlib.PositionalArgumentsFormatter(),
        structlog.processors.TimeStamper(fmt="iso"),
        structlog.processors.StackInfoRenderer(),
        structlog.processors.format_exc_info,
        structlog.processors.UnicodeDecoder(),
        structlog.processors.JSONRenderer()
        if settings.log_format == "json"
        else structlog.dev.ConsoleRenderer(colors=False)
    ],
    context_class=dict,
    logger_factory=structlog.stdlib.LoggerFactory(),
    wrapper_class=structlog.stdlib.BoundLogger,
    cache_logger_on_first_use=True,
)

logger = structlog.get_logger()

# Rate limiting
limiter = Limiter(key_func=get_remote_address, enabled=settings.rate_limit_enabled)

# Application lifespan
@asynccontextmanager
async def lifespan(app: FastAPI):
    # Startup
    account_table = get_account_repository()
    logger.info(
        "Starting Account Ledger API",
        accounts=len(account_table),
        port=settings.port
    )
    yield
    # Shutdown
    logger.info("Shutting down Account Ledger API")

# Create FastAPI app
app = FastAPI(
    title=settings.app_name,
    description="In-memory account ledger: credit/debit transactions under an overdraft limit and recent-history statements",
    version=settings.app_version,
    docs_url="/docs",
    redoc_url="/redoc",
    lifespan=lifespan
)

# Add rate limiting
app.state.limiter = limiter
app.add_exception_handler(RateLimitExceeded, _rate_limit_exceeded_handler)

# Add CORS middleware
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.allowed_origins,
    allow_credentials=True,
    allow_methods=settings.allowed_methods,
    allow_headers=settings.allowed_headers,
)

# Request logging middleware
@app.middleware("http")
async def log_requests(request: Request, call_next):
    start_time = time.time()

    logger.debug(
        "Request started",
        method=request.method,
        url=str(request.url),
        client_ip=request.client.host if request.client else None
    )

    response = await call_next(request)

    process_time = time.time() - start_time
    logger.info(
        "Request completed",
        method=request.method,
        url=str(request.url),
        status_code=response.status_code,
        process_time=round(process_time, 4)
    )

    return response

# Dependency injection
def get_service(account_table: AccountTable = Depends(get_account_repository)) -> AccountService:
    return get_account_service(account_table)


def get_account_id(id: str) -> int:
    return parse_account_id(id)

# Health probe
@app.get("/", response_class=PlainTextResponse, include_in_schema=False)
async def root():
    return settings.app_name

# Health check endpoint
@app.get(
    "/health",
    response_model=HealthResponse,
    summary="Health Check",
    description="Check API health and get system statistics"
)
async def health_check(account_table: AccountTable = Depends(get_account_repository)):
    return HealthResponse(
        status="healthy",
        accounts_count=len(account_table),
        transactions_processed=account_table.transactions_count()
    )

@app.post(
    "/clientes/{id}/transacoes",
    response_model=TransactionResponse,
    status_code=status.HTTP_200_OK,
    summary="Post Transaction",
    description="Credit or debit an account; debits may not take the balance below -limit",
    responses={
        200: {"description": "Transaction accepted"},
        404: {"description": "Account not found"},
        422: {"description": "Invalid transaction or insufficient limit"},
        429: {"description": "Rate limit exceeded"},
        500: {"description": "Internal server error"}
    }
)
@limiter.limit(settings.rate_limit)
async def create_transaction(
    request: Request,
    transaction: Transaction,
    account_id: int = Depends(get_account_id),
    service: AccountService = Depends(get_service)
):
    return await service.post_transaction(account_id, transaction)

@app.get(
    "/clientes/{id}/extrato",
    response_model=StatementResponse,
    summary="Account Statement",
    description="Current balance, limit and the most recent transactions, newest first",
    responses={
        200: {"description": "Statement"},
        404: {"description": "Account not found"},
        429: {"description": "Rate limit exceeded"}
    }
)
@limiter.limit(settings.rate_limit)
async def view_statement(
    request: Request,
    account_id: int = Depends(get_account_id),
    service: AccountService = Depends(get_service)
):
    return await service.get_statement(account_id)

# Global exception handlers
@app.exception_handler(StarletteHTTPException)
async def http_exception_handler(request: Request, exc: StarletteHTTPException):
    return JSONResponse(
        status_code=exc.status_code,
        content=ErrorResponse(
            detail=str(exc.detail),
            error_code=f"HTTP_{exc.status_code}"
        ).model_dump(mode="json"),
        headers=getattr(exc, "headers", None)
    )

@app.exception_handler(Exception)
async def general_exception_handler(request: Request, exc: Exception):
    logger.error(
        "Unhandled exception",
        error=str(exc),
        url=str(request.url),
        method=request.method,
        exc_info=True
    )

    return JSONResponse(
        status_code=500,
        content=ErrorResponse(
            detail="Internal server error",
            error_code="INTERNAL_ERROR"
        ).model_dump(mode="json")
    )

if __name__ == "__main__":
    import uvicorn
    # Accounts live in process memory: a single worker keeps one roster
    uvicorn.run(
        "main:app",
        host=settings.host,
        port=settings.port,
        reload=settings.debug,
        workers=1,
        log_level=settings.log_level.lower()
    )
