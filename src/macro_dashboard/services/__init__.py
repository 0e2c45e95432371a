"""Service layer - business logic and orchestration."""

from macro_dashboard.services.staleness import StalenessPolicy
from macro_dashboard.services.merge import merge_observed
from macro_dashboard.services.quarterly_aggregator import (
    upsert_quarterly,
    upsert_monthly,
    compute_ttm_dividend,
    latest_actual_eps,
    forward_eps_sum,
)
from macro_dashboard.services.annual_backfill import AnnualBackfillEngine
from macro_dashboard.services.metrics_engine import calculate_cagr, compute_metrics
from macro_dashboard.services.refresh_orchestrator import RefreshOrchestrator
from macro_dashboard.services.history_service import HistoryService
from macro_dashboard.services.rates_service import RatesService
from macro_dashboard.services.scheduler import RefreshScheduler, get_scheduler, set_scheduler

__all__ = [
    "StalenessPolicy",
    "merge_observed",
    "upsert_quarterly",
    "upsert_monthly",
    "compute_ttm_dividend",
    "latest_actual_eps",
    "forward_eps_sum",
    "AnnualBackfillEngine",
    "calculate_cagr",
    "compute_metrics",
    "RefreshOrchestrator",
    "HistoryService",
    "RatesService",
    "RefreshScheduler",
    "get_scheduler",
    "set_scheduler",
]
