"""
Series Pipeline - Orchestrates the processing of raw series for charting.

The pipeline runs, in order:
1. Validate the input (problems are reported, never raised)
2. Sanitize and sort every series
3. Detect gaps on the sanitized series
4. Aggregate into intervals (optional)
5. Interpolate gaps (optional)
6. Resample to the point budget (optional)
7. Compute outliers and statistics on the processed series
"""

import logging
from collections.abc import Mapping, Sequence
from typing import Any

from openchart.common.hashing import content_hash
from openchart.core.domain.config import ProcessingConfig, StackConfig
from openchart.core.domain.result import ProcessingResult
from openchart.core.domain.series import Gap, Series, StackedSeries
from openchart.core.ports.layout_cache import LayoutCache
from openchart.core.services.gaps import detect_gaps, interpolate_missing_data
from openchart.core.services.outliers import find_outliers
from openchart.core.services.resampling import aggregate_by_interval, resample_to_target_count
from openchart.core.services.stacking import compute_stack
from openchart.core.services.statistics import compute_statistics
from openchart.core.services.time_range import calculate_time_range
from openchart.core.services.validation import sanitize_series, validate_series

logger = logging.getLogger(__name__)


def _as_config(config: ProcessingConfig | Mapping[str, Any] | None) -> ProcessingConfig:
    if config is None:
        return ProcessingConfig()
    if isinstance(config, ProcessingConfig):
        return config
    return ProcessingConfig.model_validate(config)


class SeriesPipeline:
    """
    Stateless processing service with an optional caller-owned cache.
    """

    def __init__(self, cache: LayoutCache | None = None):
        """
        Initialize the pipeline.

        Args:
            cache: Optional cache keyed by the content hash of inputs + config
        """
        self.cache = cache

    def process(
        self,
        series_list: Sequence[Series],
        config: ProcessingConfig | Mapping[str, Any] | None = None,
    ) -> ProcessingResult:
        """
        Process raw series into render-ready series plus diagnostics.

        Args:
            series_list: Raw input series (may be unsorted or contain invalid points)
            config: Processing options; mappings are validated into ProcessingConfig

        Returns:
            ProcessingResult. Validation problems are listed in
            `validation_errors` alongside best-effort output.
        """
        config = _as_config(config)

        key = None
        if self.cache is not None:
            key = content_hash(series_list, "process", config)
            cached = self.cache.get(key)
            if cached is not None:
                logger.debug(f"Layout cache hit for {key[:12]}")
                return cached

        result = self._run(series_list, config)

        if self.cache is not None:
            self.cache.set(key, result)
        return result

    def stack(
        self,
        series_list: Sequence[Series],
        config: StackConfig | Mapping[str, Any] | None = None,
    ) -> list[StackedSeries]:
        """
        Stack sanitized series for composite (stacked / stream) layouts.
        """
        if config is None:
            config = StackConfig()
        elif not isinstance(config, StackConfig):
            config = StackConfig.model_validate(config)

        key = None
        if self.cache is not None:
            key = content_hash(series_list, "stack", config)
            cached = self.cache.get(key)
            if cached is not None:
                return list(cached)

        stacked = compute_stack(sanitize_series(series_list), order=config.order, offset=config.offset)

        if self.cache is not None:
            self.cache.set(key, tuple(stacked))
        return stacked

    def _run(self, series_list: Sequence[Series], config: ProcessingConfig) -> ProcessingResult:
        point_count_before = sum(len(s.points) for s in series_list)
        logger.info(f"Processing {len(series_list)} series ({point_count_before} points)")

        # 1. Validate & sanitize
        errors = validate_series(series_list)
        cleaned = sanitize_series(series_list)

        # 2. Gaps (on the sanitized, un-aggregated data)
        gaps: list[Gap] = []
        if config.enable_gap_detection:
            for series in cleaned:
                gaps.extend(detect_gaps(series, config.gap_threshold_ms))

        # 3. Reduce and fill
        processed = cleaned
        if config.aggregation_interval:
            processed = [
                aggregate_by_interval(s, config.aggregation_interval, config.aggregation)
                for s in processed
            ]

        if config.interpolation_method != "none":
            processed = [
                interpolate_missing_data(
                    s,
                    config.interpolation_method,
                    config.gap_threshold_ms,
                    config.max_fill_points,
                )
                for s in processed
            ]

        if config.enable_data_resampling:
            processed = [resample_to_target_count(s, config.max_points) for s in processed]

        # 4. Diagnostics on the processed data
        outliers = find_outliers(processed)
        statistics = compute_statistics(processed)

        has_points = any(s.points for s in cleaned)
        point_count_after = sum(len(s.points) for s in processed)

        logger.info(
            f"Processed {len(processed)} series: {point_count_before} -> {point_count_after} points, "
            f"{len(gaps)} gap(s), {len(outliers)} outlier(s)"
        )
        return ProcessingResult(
            processed_series=tuple(processed),
            gaps=tuple(gaps),
            outliers=tuple(outliers),
            statistics=tuple(statistics),
            point_count_before=point_count_before,
            point_count_after=point_count_after,
            validation_errors=tuple(errors),
            time_range=calculate_time_range(cleaned) if has_points else None,
            resampled=any(len(a.points) != len(b.points) for a, b in zip(cleaned, processed)),
            aggregation_applied=config.aggregation_interval is not None,
        )


def process_series(
    series_list: Sequence[Series],
    config: ProcessingConfig | Mapping[str, Any] | None = None,
) -> ProcessingResult:
    """Process series without caching. Pure function of its inputs."""
    return SeriesPipeline().process(series_list, config)
