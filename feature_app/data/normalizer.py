"""
Main normalization pipeline for converting raw feed payloads to canonical series.

This module provides the SeriesNormalizer class that runs the ordered shape
matchers over a payload. It is the boundary for malformed input: whatever the
payload looks like, callers receive a canonical value and never an exception.
"""

from typing import Any, Optional

import structlog

from ..config.defaults import BarParams
from ..errors import DataQualityError, MalformedDataError, MissingDataError
from .articles import is_article_payload, project_articles
from .models import NormalizationResult, SeriesKind
from .parsers import (
    RESERVED_KEYS,
    ShapeMatcher,
    build_shape_matchers,
    explicit_series_key,
    series_key_candidates,
)

logger = structlog.get_logger(__name__)


class SeriesNormalizer:
    """
    Tagged-union decoder for heterogeneous feed payloads.

    Matchers are tried in order; the first accepting matcher projects the
    payload and no later matcher is consulted. Exhaustion yields the explicit
    empty value for the requested kind.
    """

    def __init__(self, bar_params: Optional[BarParams] = None,
                 matchers: Optional[tuple[ShapeMatcher, ...]] = None):
        """
        Initialize the normalizer.

        Args:
            bar_params: Bar metric limits and default unit
            matchers: Custom ordered matchers (defaults to the built-in shapes)
        """
        self.bar_params = bar_params or BarParams()
        self.matchers = matchers or build_shape_matchers(
            max_bars=self.bar_params.max_bars,
            default_unit=self.bar_params.default_unit,
            article_projector=project_articles,
            article_predicate=is_article_payload,
        )

    def normalize(self, raw: Any, shape_hint: Optional[SeriesKind] = None):
        """
        Normalize a raw payload into its canonical value.

        Args:
            raw: Decoded JSON value of unknown shape (never mutated)
            shape_hint: Canonical kind expected by the caller

        Returns:
            Series, BandSeries, tuple[MetricBar, ...] or tuple[Article, ...]
        """
        return self.normalize_with_result(raw, shape_hint).value

    def normalize_with_result(self, raw: Any,
                              shape_hint: Optional[SeriesKind] = None) -> NormalizationResult:
        """Normalize and report which shape matched."""
        try:
            return self._match(raw, shape_hint)
        except DataQualityError as e:
            logger.warning(
                "Unrecognized payload, using empty value",
                error=str(e),
                shape_hint=shape_hint.value if shape_hint else None,
                **e.context,
            )
            return NormalizationResult.unrecognized(shape_hint, str(e))

    def _match(self, raw: Any, shape_hint: Optional[SeriesKind]) -> NormalizationResult:
        """
        Run the matchers in order.

        Raises:
            MissingDataError: If the payload is null
            MalformedDataError: If no matcher accepts the payload
        """
        if raw is None:
            raise MissingDataError("Feed payload is null")

        for matcher in self.matchers:
            try:
                if not matcher.accepts(raw, shape_hint):
                    continue
                self._warn_ambiguous_series_key(raw, matcher)
                value = matcher.projector(raw)
            except Exception as e:
                logger.error(
                    "Shape matcher raised, treating payload as unrecognized",
                    matcher=matcher.name,
                    error=str(e),
                )
                return NormalizationResult.unrecognized(shape_hint, f"{matcher.name}: {e}")

            logger.debug(
                "Normalized payload",
                matcher=matcher.name,
                kind=matcher.kind.value,
                size=len(value),
            )
            return NormalizationResult.matched(value, matcher.kind, matcher.name)

        raise MalformedDataError(
            "No matching payload shape",
            shape_hint=shape_hint.value if shape_hint else None,
            payload_type=type(raw).__name__,
        )

    def normalize_articles(self, raw: Any):
        """Normalize an article feed for the carousel."""
        return self.normalize(raw, SeriesKind.ARTICLES)

    def _warn_ambiguous_series_key(self, raw: Any, matcher: ShapeMatcher) -> None:
        """Sniffed keyed-by-date payloads with several candidate series are order-dependent."""
        if matcher.name != "keyed_by_date" or explicit_series_key(raw) is not None:
            return
        candidates = series_key_candidates(raw, RESERVED_KEYS)
        if len(candidates) > 1:
            logger.warning(
                "Several candidate series keys, using the first",
                chosen=candidates[0],
                candidates=candidates,
            )
