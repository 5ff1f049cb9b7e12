"""
Benchmarking pipeline orchestrator using LangGraph.

Wires the four stages into a linear StateGraph:

    resolve_product -> resolve_competitors -> aggregate -> generate_insights

Each resolver or generator degrades to its fallback internally and reports
Live/Fallback; only an invalid identifier or an empty competitor set stops
a run. One pipeline instance serves one request and owns its HTTP and
Claude clients.
"""

import time
from functools import wraps
from typing import Any, Callable, Optional, TypedDict
from uuid import uuid4

import httpx
from langgraph.graph import StateGraph, END

from product_optimizer.analyzers.insight_generator import InsightGenerator
from product_optimizer.analyzers.market_aggregator import aggregate
from product_optimizer.config.resolver import build_resolver_config
from product_optimizer.config.settings import Settings, get_settings
from product_optimizer.data.fallback_tables import COMPETITOR_TABLE, PRODUCT_TABLE
from product_optimizer.models.resolution import Resolution
from product_optimizer.models.schemas import (
    BenchmarkReport,
    CompetitorRecord,
    MarketSummary,
    PipelineStage,
    ProductRecord,
    validate_identifier,
    validate_marketplace,
)
from product_optimizer.services.competitor_resolver import CompetitorResolver
from product_optimizer.services.llm_service import ClaudeService
from product_optimizer.services.product_resolver import ProductResolver
from product_optimizer.services.sp_api_client import SellingPartnerClient
from product_optimizer.utils.errors import AppError, ErrorType
from product_optimizer.utils.logger import LogContext, get_logger

logger = get_logger(__name__)


# =============================================================================
# Pipeline State Definition (TypedDict for LangGraph)
# =============================================================================

class BenchmarkState(TypedDict, total=False):
    """State passed between graph nodes for a single run."""
    run_id: str
    identifier: str
    marketplace: str

    product_result: Resolution[ProductRecord]
    competitors_result: Resolution[list[CompetitorRecord]]
    summary: MarketSummary
    insights_result: Resolution[str]

    step_timings: dict  # Node name -> duration_ms


# =============================================================================
# Error Classes
# =============================================================================

class PipelineError(AppError):
    """Unexpected failure inside a pipeline run."""
    error_type = ErrorType.INTERNAL_ERROR


# =============================================================================
# Decorators for Node Execution
# =============================================================================

def track_timing(func: Callable):
    """Decorator to track node execution timing."""
    @wraps(func)
    async def wrapper(self, state: BenchmarkState) -> dict[str, Any]:
        start_time = time.perf_counter()
        node_name = func.__name__.strip("_").replace("_node", "")

        try:
            result = await func(self, state)
        except Exception as e:
            logger.error(
                "Node failed",
                node=node_name,
                run_id=state.get("run_id"),
                duration_ms=int((time.perf_counter() - start_time) * 1000),
                error=str(e),
            )
            raise

        duration_ms = int((time.perf_counter() - start_time) * 1000)
        step_timings = dict(state.get("step_timings", {}))
        step_timings[node_name] = duration_ms
        result["step_timings"] = step_timings

        if self.progress_callback:
            self.progress_callback(node_name)

        logger.debug("Completed node", node=node_name, run_id=state.get("run_id"), duration_ms=duration_ms)
        return result

    return wrapper


# =============================================================================
# Main Pipeline Class
# =============================================================================

class BenchmarkPipeline:
    """
    LangGraph-based competitive benchmarking pipeline.

    Example:
        >>> async with BenchmarkPipeline() as pipeline:
        ...     report = await pipeline.run("B01DFKC2SO")
        ...     print(report.market_insights.average_price)
    """

    def __init__(
        self,
        settings: Optional[Settings] = None,
        http_client: Optional[httpx.AsyncClient] = None,
        llm_service: Optional[ClaudeService] = None,
        product_table=PRODUCT_TABLE,
        competitor_table=COMPETITOR_TABLE,
        progress_callback: Optional[Callable[[str], None]] = None,
    ):
        """
        Initialize the pipeline.

        Args:
            settings: Application settings (uses defaults if not provided)
            http_client: Shared HTTP client for Selling Partner calls
            llm_service: Pre-configured Claude service (created when a key is set)
            product_table: Static product fallback table
            competitor_table: Static competitor fallback table
            progress_callback: Called with each node name as it completes
        """
        self.settings = settings or get_settings()
        self.product_table = product_table
        self.competitor_table = competitor_table
        self.progress_callback = progress_callback

        self._owns_http_client = http_client is None
        self._http_client = http_client
        self._llm_service = llm_service
        self._owns_llm_service = llm_service is None

        self._insight_generator: Optional[InsightGenerator] = None
        self._product_resolver: Optional[ProductResolver] = None
        self._competitor_resolver: Optional[CompetitorResolver] = None

        self._graph = self._build_graph()

    async def __aenter__(self):
        """Async context manager entry."""
        self._initialize_services()
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb):
        """Async context manager exit."""
        await self.close()

    def _initialize_services(self) -> None:
        """Create clients that were not injected."""
        if self._http_client is None:
            self._http_client = httpx.AsyncClient(
                timeout=httpx.Timeout(self.settings.request_timeout_seconds),
            )
        if self._llm_service is None and self.settings.has_llm_credentials:
            self._llm_service = ClaudeService(self.settings)
        if self._insight_generator is None:
            self._insight_generator = InsightGenerator(self._llm_service)

    def _configure_resolvers(self, marketplace: str) -> None:
        product_config = build_resolver_config(self.settings, self.product_table, marketplace)
        competitor_config = build_resolver_config(self.settings, self.competitor_table, marketplace)
        self._product_resolver = ProductResolver(
            product_config, SellingPartnerClient(product_config, self._http_client)
        )
        self._competitor_resolver = CompetitorResolver(
            competitor_config, SellingPartnerClient(competitor_config, self._http_client)
        )

    def _build_graph(self):
        """
        Build the linear LangGraph state machine.

        Graph structure:
            resolve_product -> resolve_competitors -> aggregate -> generate_insights -> END
        """
        graph = StateGraph(BenchmarkState)

        graph.add_node("resolve_product", self._resolve_product_node)
        graph.add_node("resolve_competitors", self._resolve_competitors_node)
        graph.add_node("aggregate", self._aggregate_node)
        graph.add_node("generate_insights", self._generate_insights_node)

        graph.set_entry_point("resolve_product")
        graph.add_edge("resolve_product", "resolve_competitors")
        graph.add_edge("resolve_competitors", "aggregate")
        graph.add_edge("aggregate", "generate_insights")
        graph.add_edge("generate_insights", END)

        return graph.compile()

    # =========================================================================
    # Node Implementations
    # =========================================================================

    @track_timing
    async def _resolve_product_node(self, state: BenchmarkState) -> dict[str, Any]:
        result = await self._product_resolver.resolve(state["identifier"])
        return {"product_result": result}

    @track_timing
    async def _resolve_competitors_node(self, state: BenchmarkState) -> dict[str, Any]:
        product = state["product_result"].data
        result = await self._competitor_resolver.resolve_competitors(
            product.category_id, product.identifier
        )
        return {"competitors_result": result}

    @track_timing
    async def _aggregate_node(self, state: BenchmarkState) -> dict[str, Any]:
        summary = aggregate(state["product_result"].data, state["competitors_result"].data)
        return {"summary": summary}

    @track_timing
    async def _generate_insights_node(self, state: BenchmarkState) -> dict[str, Any]:
        result = await self._insight_generator.generate_insights(state["summary"])
        return {"insights_result": result}

    # =========================================================================
    # Execution
    # =========================================================================

    async def run(self, identifier: Optional[str], marketplace: Optional[str] = None) -> BenchmarkReport:
        """
        Execute the complete pipeline for one product.

        Args:
            identifier: Product ASIN (any case, whitespace trimmed)
            marketplace: Storefront domain, defaults to settings.default_marketplace

        Returns:
            BenchmarkReport with summary, narrative, timestamp and data sources

        Raises:
            InvalidIdentifierError: If the identifier is missing or malformed
            UnsupportedMarketplaceError: If the marketplace is unknown
            EmptyCompetitorSetError: If no competitors could be resolved
            PipelineError: On any other unexpected failure
        """
        identifier = validate_identifier(identifier)
        marketplace = validate_marketplace(marketplace or self.settings.default_marketplace)

        self._initialize_services()
        self._configure_resolvers(marketplace)

        run_id = str(uuid4())
        initial_state: BenchmarkState = {
            "run_id": run_id,
            "identifier": identifier,
            "marketplace": marketplace,
            "step_timings": {},
        }

        with LogContext(run_id=run_id, identifier=identifier, marketplace=marketplace):
            logger.info("Starting benchmark run")
            try:
                final_state = await self._graph.ainvoke(initial_state)
            except AppError as e:
                logger.error("Benchmark run failed", error_type=e.error_type.value, error=e.message)
                raise
            except Exception as e:
                logger.error("Benchmark run failed with unexpected error", error=str(e))
                raise PipelineError(
                    f"Unexpected pipeline error: {e}",
                    details={"run_id": run_id},
                ) from e

            report = self._build_report(final_state)
            logger.info(
                "Benchmark run completed",
                degraded=report.degraded,
                duration_ms=sum(final_state.get("step_timings", {}).values()),
            )
            return report

    @staticmethod
    def _build_report(state: BenchmarkState) -> BenchmarkReport:
        summary: MarketSummary = state["summary"]
        insights = state["insights_result"]
        return BenchmarkReport(
            category=summary.category,
            target_product=summary.target_product,
            competitors=summary.competitors,
            market_insights=summary.market_insights,
            marketplace=state["marketplace"],
            ai_insights=insights.data,
            data_sources={
                PipelineStage.PRODUCT.value: state["product_result"].outcome(),
                PipelineStage.COMPETITORS.value: state["competitors_result"].outcome(),
                PipelineStage.INSIGHTS.value: insights.outcome(),
            },
        )

    # =========================================================================
    # Cleanup
    # =========================================================================

    async def close(self) -> None:
        """Close clients created by this pipeline."""
        if self._owns_http_client and self._http_client is not None:
            await self._http_client.aclose()
            self._http_client = None
        if self._owns_llm_service and self._llm_service is not None:
            await self._llm_service.close()
            self._llm_service = None
            self._insight_generator = None


# =============================================================================
# Convenience Functions
# =============================================================================

async def benchmark_product(
    identifier: str,
    marketplace: Optional[str] = None,
    settings: Optional[Settings] = None,
) -> BenchmarkReport:
    """
    Convenience function to benchmark one product.

    Example:
        >>> report = await benchmark_product("B01DFKC2SO")
        >>> report.target_product.title
        'Premium Wireless Headphones'
    """
    async with BenchmarkPipeline(settings=settings) as pipeline:
        return await pipeline.run(identifier, marketplace)
