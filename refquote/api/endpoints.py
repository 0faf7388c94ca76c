"""API endpoints for swap quotes and pool selection."""

import asyncio
from collections.abc import Callable
from functools import lru_cache
from typing import TypeVar

import structlog
from fastapi import APIRouter, Depends
from fastapi.responses import JSONResponse

from refquote.api.settings import load_config
from refquote.errors import RefQuoteError
from refquote.models.requests import PoolPairRequest, SwapQuoteRequest
from refquote.models.responses import (
    ErrorResponse,
    PoolPairSelectionResponse,
    PoolViewModel,
    SwapQuoteResponse,
)
from refquote.service import RefQuoteService

logger = structlog.get_logger()

router = APIRouter()

T = TypeVar("T")

# Error code -> HTTP status
STATUS_BY_CODE: dict[str, int] = {
    "invalid_input": 400,
    "invalid_amount": 400,
    "unknown_symbol": 400,
    "pool_not_found": 404,
    "pool_pair_mismatch": 404,
    "no_route_found": 404,
    "no_pool_for_pair": 404,
    "rpc_error": 502,
    "invalid_rpc_response": 502,
    "rpc_transient": 503,
    "quote_timeout": 504,
}

# Headroom over the engine's own deadline before the request is abandoned
TIMEOUT_GRACE_SECONDS = 1.0


@lru_cache(maxsize=1)
def get_default_service() -> RefQuoteService:
    """Process-wide service built from environment configuration."""
    return RefQuoteService(load_config())


def get_service() -> RefQuoteService:
    """Dependency provider for the service instance.

    Override this in tests to inject a service backed by a fake client:
        app.dependency_overrides[get_service] = lambda: service
    """
    return get_default_service()


def error_response(error: RefQuoteError) -> JSONResponse:
    status = STATUS_BY_CODE.get(error.code, 500)
    body = ErrorResponse(code=error.code, message=str(error))
    return JSONResponse(status_code=status, content=body.model_dump())


async def _run(
    service: RefQuoteService,
    operation: str,
    fn: Callable[..., T],
    *args: object,
) -> T | JSONResponse:
    """Run a blocking service call off the event loop, mapping errors to responses."""
    timeout = service.config.quote_timeout_seconds
    try:
        loop = asyncio.get_running_loop()
        if timeout is not None:
            return await asyncio.wait_for(
                loop.run_in_executor(None, fn, *args),
                timeout=timeout + TIMEOUT_GRACE_SECONDS,
            )
        return await loop.run_in_executor(None, fn, *args)
    except TimeoutError:
        logger.warning("quote_request_failed", operation=operation, code="quote_timeout")
        limit = f"the {timeout:g}s quote deadline" if timeout is not None else "its time limit"
        body = ErrorResponse(code="quote_timeout", message=f"{operation} exceeded {limit}")
        return JSONResponse(status_code=504, content=body.model_dump())
    except RefQuoteError as e:
        logger.warning("quote_request_failed", operation=operation, code=e.code, error=str(e))
        return error_response(e)
    except Exception:
        logger.exception("quote_request_failed", operation=operation, code="unexpected")
        body = ErrorResponse(code="internal_error", message="Unexpected error")
        return JSONResponse(status_code=500, content=body.model_dump())


@router.post("/{network}/quote", response_model=SwapQuoteResponse, response_model_by_alias=True)
async def quote(
    network: str,
    request: SwapQuoteRequest,
    service: RefQuoteService = Depends(get_service),
) -> SwapQuoteResponse | JSONResponse:
    """Quote an exact-input swap on the network's exchange contract.

    Error Handling:
        - Invalid request schema: 422 (Pydantic)
        - Engine errors: status from STATUS_BY_CODE with {code, message}
        - Anything else: logged, 500
    """
    request = request.model_copy(update={"network": network})
    logger.info(
        "received_quote_request",
        network=network,
        token_in=request.token_in,
        token_out=request.token_out,
        pool_id=request.pool_id,
    )
    result = await _run(service, "quote_swap", service.quote_swap, request)
    if isinstance(result, JSONResponse):
        return result
    return SwapQuoteResponse.from_quote(result)


@router.post(
    "/{network}/pool-pair",
    response_model=PoolPairSelectionResponse,
    response_model_by_alias=True,
)
async def pool_pair(
    network: str,
    request: PoolPairRequest,
    service: RefQuoteService = Depends(get_service),
) -> PoolPairSelectionResponse | JSONResponse:
    """Select the deepest pool for a token pair."""
    request = request.model_copy(update={"network": network})
    result = await _run(service, "select_pool_for_pair", service.select_pool_for_pair, request)
    if isinstance(result, JSONResponse):
        return result
    return PoolPairSelectionResponse.from_selection(result)


@router.get("/{network}/pools", response_model=list[PoolViewModel])
async def pools(
    network: str,
    service: RefQuoteService = Depends(get_service),
) -> list[PoolViewModel] | JSONResponse:
    """Every pool on the network's exchange contract."""
    result = await _run(service, "fetch_pools", service.fetch_pools, network)
    if isinstance(result, JSONResponse):
        return result
    return [PoolViewModel.from_pool(p) for p in result]
