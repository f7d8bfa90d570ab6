"""
Analysis orchestrator. Runs the deterministic pipeline over one result set.

profile → (chart selection + chart data) | statistics | table page

The three consumers only read the result set, so they may run on the thread
pool; the output is the same either way.
"""

from __future__ import annotations

import asyncio
import functools
from concurrent.futures import ThreadPoolExecutor
from typing import Any, Dict, List, Optional, Tuple

from core.config import AnalysisSettings, configure_logging, get_settings
from core.models import (
    AnalysisReport,
    ChartConfig,
    ColumnProfile,
    ResultSet,
    SortState,
)
from pipeline.cache import ReportCache, fingerprint
from skills.build_view import build_chart_data
from skills.profile import build_profiles
from skills.recommend import select_chart
from skills.summary import summarize_result_set
from skills.table import build_table_page

logger = configure_logging()

_executor = ThreadPoolExecutor(max_workers=3, thread_name_prefix="insights")
_cache: Optional[ReportCache] = None


def get_cache() -> ReportCache:
    global _cache
    if _cache is None:
        _cache = ReportCache(get_settings().cache_size)
    return _cache


def _chart_view(
    result_set: ResultSet,
    profiles: List[ColumnProfile],
    settings: AnalysisSettings,
) -> Tuple[ChartConfig, List[Dict[str, Any]]]:
    chart = select_chart(result_set, profiles, settings=settings)
    return chart, build_chart_data(chart, result_set)


# ---------------------------------------------------------------------------
# Synchronous pipeline
# ---------------------------------------------------------------------------

def analyze_result_set(
    result_set: ResultSet,
    *,
    sort: Optional[SortState] = None,
    page: int = 1,
    parallel: Optional[bool] = None,
    use_cache: bool = True,
    settings: Optional[AnalysisSettings] = None,
) -> AnalysisReport:
    """
    Run the full analysis.

    1. Profile the columns (shared by every consumer)
    2. Select a chart and reshape its data
    3. Compute statistics + insights
    4. Sort and page the table view
    Reports are cached per (content fingerprint, sort, page, settings).
    """
    settings = settings or get_settings()
    parallel = settings.parallel if parallel is None else parallel
    sort = sort or SortState()

    fp = fingerprint(result_set)
    key = (fp, sort, page, settings)
    if use_cache:
        cached = get_cache().get(key)
        if cached is not None:
            logger.debug("Report cache hit for %s", fp[:12])
            return cached

    profiles = build_profiles(result_set, sample_size=settings.sample_size)

    if parallel:
        chart_future = _executor.submit(_chart_view, result_set, profiles, settings)
        stats_future = _executor.submit(
            summarize_result_set, result_set, profiles, settings=settings,
        )
        table_future = _executor.submit(
            build_table_page, result_set, sort, page, profiles=profiles, settings=settings,
        )
        chart, chart_data = chart_future.result()
        insights = stats_future.result()
        table = table_future.result()
    else:
        chart, chart_data = _chart_view(result_set, profiles, settings)
        insights = summarize_result_set(result_set, profiles, settings=settings)
        table = build_table_page(result_set, sort, page, profiles=profiles, settings=settings)

    report = AnalysisReport(
        fingerprint=fp,
        profiles=profiles,
        chart=chart,
        chart_data=chart_data,
        insights=insights,
        table=table,
    )
    logger.info(
        "Analysed %d rows x %d columns: chart=%s, %d insights",
        result_set.row_count, len(result_set.columns),
        chart.chart_type.value, len(insights.insights),
    )

    if use_cache:
        get_cache().set(key, report)
    return report


# ---------------------------------------------------------------------------
# Async wrapper, keeps an event loop free while the analysis runs
# ---------------------------------------------------------------------------

async def analyze_result_set_async(
    result_set: ResultSet,
    *,
    sort: Optional[SortState] = None,
    page: int = 1,
    use_cache: bool = True,
    settings: Optional[AnalysisSettings] = None,
) -> AnalysisReport:
    """Same as analyze_result_set, run on the worker pool (consumers sequential)."""
    loop = asyncio.get_running_loop()
    call = functools.partial(
        analyze_result_set,
        result_set,
        sort=sort,
        page=page,
        parallel=False,
        use_cache=use_cache,
        settings=settings,
    )
    return await loop.run_in_executor(_executor, call)
