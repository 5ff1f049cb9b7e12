"""
FastAPI application exposing the benchmarking pipeline.

Routes:
    GET  /health             liveness probe
    POST /api/benchmarking   run one benchmark, returns a BenchmarkReport

Errors leave the API as ErrorResponse payloads. Only the fixed public
messages are returned; upstream detail stays in the logs.
"""

from typing import Any, Callable

from fastapi import Depends, FastAPI, Request
from fastapi.responses import JSONResponse
from pydantic import ValidationError

from product_optimizer import __version__
from product_optimizer.config.settings import Settings, get_settings
from product_optimizer.models.schemas import BenchmarkRequest, ErrorResponse
from product_optimizer.pipeline.orchestrator import BenchmarkPipeline
from product_optimizer.utils.errors import (
    GENERIC_FAILURE_MESSAGE,
    AppError,
    ErrorHandler,
    ErrorType,
)
from product_optimizer.utils.logger import get_logger

logger = get_logger(__name__)

PipelineFactory = Callable[[Settings], BenchmarkPipeline]


def get_pipeline_factory() -> PipelineFactory:
    """Dependency returning a constructor for one-request pipelines."""
    return lambda settings: BenchmarkPipeline(settings=settings)


def _error_response(error_type: ErrorType) -> JSONResponse:
    body = ErrorResponse(
        error=ErrorHandler.public_message(error_type),
        error_type=error_type,
    )
    return JSONResponse(
        status_code=ErrorHandler.status_code_for(error_type),
        content=body.to_dict(),
    )


async def _parse_request(request: Request) -> BenchmarkRequest:
    """Read the JSON body; anything unusable is treated as a missing identifier."""
    try:
        payload: Any = await request.json()
    except ValueError:
        payload = {}
    if not isinstance(payload, dict):
        payload = {}
    try:
        return BenchmarkRequest.model_validate(payload)
    except ValidationError:
        # Non-string identifier or marketplace
        identifier = payload.get("identifier", payload.get("asin"))
        marketplace = payload.get("marketplace")
        return BenchmarkRequest(
            identifier=str(identifier) if identifier is not None else None,
            marketplace=str(marketplace) if marketplace is not None else None,
        )


def create_app() -> FastAPI:
    """Build the FastAPI application."""
    app = FastAPI(
        title="Product Optimizer",
        description="Competitive benchmarking for Amazon listings",
        version=__version__,
    )

    @app.get("/health")
    async def health() -> dict[str, str]:
        return {"status": "healthy"}

    @app.post("/api/benchmarking")
    async def benchmarking(
        request: Request,
        settings: Settings = Depends(get_settings),
        pipeline_factory: PipelineFactory = Depends(get_pipeline_factory),
    ):
        body = await _parse_request(request)

        try:
            async with pipeline_factory(settings) as pipeline:
                report = await pipeline.run(body.identifier, body.marketplace)
        except AppError as e:
            error_type = ErrorHandler.categorize_error(e)
            log = logger.warning if ErrorHandler.status_code_for(error_type) == 400 else logger.error
            log("Benchmark request rejected", error_type=error_type.value, error=e.message)
            return _error_response(error_type)
        except Exception:
            logger.exception("Benchmark request failed")
            return JSONResponse(
                status_code=500,
                content=ErrorResponse(error=GENERIC_FAILURE_MESSAGE).to_dict(),
            )

        return report.to_dict()

    return app


app = create_app()
