"""FastAPI front end exposing the simulator under one of three scheduling strategies."""

from __future__ import annotations

import threading
import time
from collections.abc import AsyncGenerator  # noqa: TC003
from contextlib import asynccontextmanager
from typing import Annotated, Any

import anyio.to_thread
from anyio import CapacityLimiter
from fastapi import APIRouter, FastAPI, Path, Query, Request, status
from fastapi.responses import JSONResponse
from pydantic import BaseModel, Field

from .config import Settings, Strategy, get_settings
from .exceptions import QueryCancelledError
from .logging import configure_logging, get_logger
from .results import BatchResult, CpuResult, QueryResult, StressResult
from .simulator import AsyncWorkloadSimulator, InterruptibleSleep, WorkloadSimulator

MAX_DELAY_MS = 60_000
MAX_BATCH = 1_000
MAX_CPU_MS = 60_000

_DESCRIPTIONS = {
    Strategy.THREADS: "Blocking handlers, one worker thread per in-flight request",
    Strategy.TASKS: "Async handlers, one event loop task per request",
    Strategy.OFFLOAD: "Event loop handlers offloading blocking work to a bounded worker pool",
}


class ApiResponse(BaseModel):
    """Envelope for every API response."""

    message: str
    strategy: Strategy
    thread_name: str = Field(default_factory=lambda: threading.current_thread().name)
    timestamp: float = Field(default_factory=time.time)
    data: Any = None


class OffloadedSimulator:
    """Runs a blocking simulator on worker threads behind a capacity limiter."""

    def __init__(self, simulator: WorkloadSimulator, workers: int) -> None:
        self.simulator = simulator
        self.workers = workers
        self._limiter: CapacityLimiter | None = None

    @property
    def limiter(self) -> CapacityLimiter:
        # created on first use so it binds to the running event loop
        if self._limiter is None:
            self._limiter = CapacityLimiter(self.workers)
        return self._limiter

    async def run_query(self, label: str = "query") -> QueryResult:
        return await anyio.to_thread.run_sync(self.simulator.run_query, label, limiter=self.limiter)

    async def run_query_with_delay(self, label: str, delay_ms: float) -> QueryResult:
        return await anyio.to_thread.run_sync(
            self.simulator.run_query_with_delay, label, delay_ms, limiter=self.limiter
        )

    async def run_batch(self, count: int) -> BatchResult:
        return await anyio.to_thread.run_sync(self.simulator.run_batch, count, limiter=self.limiter)

    async def run_cpu_burst(self, duration_ms: float) -> CpuResult:
        return await anyio.to_thread.run_sync(self.simulator.run_cpu_burst, duration_ms, limiter=self.limiter)

    async def run_stress(self, queries: int, cpu_ms: float) -> StressResult:
        return await anyio.to_thread.run_sync(self.simulator.run_stress, queries, cpu_ms, limiter=self.limiter)


def _blocking_router(simulator: WorkloadSimulator, strategy: Strategy) -> APIRouter:
    """Plain ``def`` handlers; the server runs each one on a pool thread."""
    router = APIRouter(prefix="/api")

    @router.get("/query", response_model=ApiResponse)
    def simple_query() -> ApiResponse:
        result = simulator.run_query("simple-query")
        return ApiResponse(message="Query executed", strategy=strategy, data=result)

    @router.get("/query/{delay}", response_model=ApiResponse)
    def query_with_delay(delay: Annotated[int, Path(ge=0, le=MAX_DELAY_MS)]) -> ApiResponse:
        result = simulator.run_query_with_delay("custom-delay-query", delay)
        return ApiResponse(message="Query with custom delay executed", strategy=strategy, data=result)

    @router.get("/multiple/{count}", response_model=ApiResponse)
    def multiple_queries(count: Annotated[int, Path(ge=0, le=MAX_BATCH)]) -> ApiResponse:
        result = simulator.run_batch(count)
        return ApiResponse(message="Multiple queries executed", strategy=strategy, data=result)

    @router.get("/cpu/{duration_ms}", response_model=ApiResponse)
    def cpu_intensive(duration_ms: Annotated[int, Path(ge=0, le=MAX_CPU_MS)]) -> ApiResponse:
        result = simulator.run_cpu_burst(duration_ms)
        return ApiResponse(message="CPU-intensive work completed", strategy=strategy, data=result)

    @router.get("/stress", response_model=ApiResponse)
    def stress_test(
        queries: Annotated[int, Query(ge=0, le=MAX_BATCH)] = 5,
        cpu_ms: Annotated[int, Query(ge=0, le=MAX_CPU_MS)] = 100,
    ) -> ApiResponse:
        result = simulator.run_stress(queries, cpu_ms)
        return ApiResponse(message="Stress test executed", strategy=strategy, data=result)

    return router


def _async_router(simulator: AsyncWorkloadSimulator | OffloadedSimulator, strategy: Strategy) -> APIRouter:
    """``async def`` handlers awaiting either the async or the offloaded simulator."""
    router = APIRouter(prefix="/api")

    @router.get("/query", response_model=ApiResponse)
    async def simple_query() -> ApiResponse:
        result = await simulator.run_query("simple-query")
        return ApiResponse(message="Query executed", strategy=strategy, data=result)

    @router.get("/query/{delay}", response_model=ApiResponse)
    async def query_with_delay(delay: Annotated[int, Path(ge=0, le=MAX_DELAY_MS)]) -> ApiResponse:
        result = await simulator.run_query_with_delay("custom-delay-query", delay)
        return ApiResponse(message="Query with custom delay executed", strategy=strategy, data=result)

    @router.get("/multiple/{count}", response_model=ApiResponse)
    async def multiple_queries(count: Annotated[int, Path(ge=0, le=MAX_BATCH)]) -> ApiResponse:
        result = await simulator.run_batch(count)
        return ApiResponse(message="Multiple queries executed", strategy=strategy, data=result)

    @router.get("/cpu/{duration_ms}", response_model=ApiResponse)
    async def cpu_intensive(duration_ms: Annotated[int, Path(ge=0, le=MAX_CPU_MS)]) -> ApiResponse:
        result = await simulator.run_cpu_burst(duration_ms)
        return ApiResponse(message="CPU-intensive work completed", strategy=strategy, data=result)

    @router.get("/stress", response_model=ApiResponse)
    async def stress_test(
        queries: Annotated[int, Query(ge=0, le=MAX_BATCH)] = 5,
        cpu_ms: Annotated[int, Query(ge=0, le=MAX_CPU_MS)] = 100,
    ) -> ApiResponse:
        result = await simulator.run_stress(queries, cpu_ms)
        return ApiResponse(message="Stress test executed", strategy=strategy, data=result)

    return router


def create_app(settings: Settings | None = None) -> FastAPI:
    """Build the API for the configured profile and scheduling strategy.

    Args:
        settings: Application settings; defaults to the cached environment settings.

    Returns:
        The FastAPI application.

    """
    settings = settings or get_settings()
    strategy = settings.strategy
    profile = settings.resolve_profile()
    # shared by every blocking query so shutdown can wake parked worker threads
    suspender = InterruptibleSleep()

    @asynccontextmanager
    async def lifespan(app: FastAPI) -> AsyncGenerator[None]:  # noqa: ARG001
        """Configure logging and size the request thread pool before serving."""
        configure_logging(settings.log_level_value)
        logger = get_logger(__name__)
        suspender.reset()
        if strategy is Strategy.THREADS:
            anyio.to_thread.current_default_thread_limiter().total_tokens = settings.thread_pool_size
        logger.info(
            "api.startup",
            strategy=strategy.value,
            profile=profile.name,
            thread_pool_size=settings.thread_pool_size,
            offload_workers=settings.offload_workers,
        )
        try:
            yield
        finally:
            suspender.cancel()
            logger.info("api.shutdown", strategy=strategy.value)

    app = FastAPI(
        title="Workload Simulator API",
        version="0.1.0",
        lifespan=lifespan,
    )
    app.state.suspender = suspender

    if strategy is Strategy.TASKS:
        router = _async_router(
            AsyncWorkloadSimulator(profile, seed=settings.seed, cpu_check_interval=settings.cpu_check_interval),
            strategy,
        )
    else:
        blocking = WorkloadSimulator(
            profile,
            seed=settings.seed,
            sleep=suspender,
            cpu_check_interval=settings.cpu_check_interval,
        )
        if strategy is Strategy.OFFLOAD:
            router = _async_router(OffloadedSimulator(blocking, settings.offload_workers), strategy)
        else:
            router = _blocking_router(blocking, strategy)

    @router.get("/hello", response_model=ApiResponse)
    async def hello() -> ApiResponse:
        return ApiResponse(message=f"Hello from the {strategy.value} strategy", strategy=strategy, data="No simulated query")

    @router.get("/info", response_model=ApiResponse)
    async def info() -> ApiResponse:
        return ApiResponse(
            message=_DESCRIPTIONS[strategy],
            strategy=strategy,
            data={"profile": profile.describe(), "offload_workers": settings.offload_workers},
        )

    app.include_router(router)

    @app.get("/health")
    async def health() -> dict[str, str]:
        """Provide a simple health endpoint for container orchestration."""
        return {"status": "ok", "strategy": strategy.value, "profile": profile.name}

    @app.exception_handler(QueryCancelledError)
    async def cancelled_handler(request: Request, exc: QueryCancelledError) -> JSONResponse:
        get_logger(__name__).warning("api.cancelled", path=request.url.path, error=str(exc))
        return JSONResponse(status_code=status.HTTP_503_SERVICE_UNAVAILABLE, content={"detail": str(exc)})

    return app
