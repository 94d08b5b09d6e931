"""
Shape matchers for converting raw feed payloads to canonical series.

Each accepted payload shape is described by a ShapeMatcher: a total,
side-effect-free predicate plus a pure projector to the canonical type.
Neither may raise on arbitrary JSON input; non-matches simply fall through
to the next matcher.
"""

import math
import re
from collections.abc import Callable
from dataclasses import dataclass
from typing import Any, Optional

import orjson

from .models import BandSeries, MetricBar, Series, SeriesKind, SeriesPoint

RESERVED_KEYS = frozenset({"date", "labels", "meta", "source"})
CI_UPPER_KEY = "ci95%_upper"
CI_LOWER_KEY = "ci95%_lower"
DEFAULT_GROWTH_KEY = "gdp_yoy"
BAR_PREFERENCE_KEYS = ("accuracy", "recall", "uptime", "bar1", "bar2", "bar3")
DECIMAL_LITERAL = re.compile(r"[+-]?(?:[0-9]+\.?[0-9]*|\.[0-9]+)(?:[eE][+-]?[0-9]+)?")


class ParseError(Exception):
    """Raised when a feed body cannot be decoded as JSON."""
    pass


def parse_json_payload(raw_data: Any) -> Any:
    """
    Decode a JSON feed body.

    Args:
        raw_data: bytes or str body

    Returns:
        Decoded JSON value

    Raises:
        ParseError: If the body is not valid JSON
    """
    if isinstance(raw_data, str):
        raw_data = raw_data.encode("utf-8")
    try:
        return orjson.loads(raw_data)
    except (orjson.JSONDecodeError, TypeError) as e:
        raise ParseError(f"Invalid JSON payload: {e}") from e


def is_number(value: Any) -> bool:
    """True for JSON numbers (bool excluded)."""
    return isinstance(value, (int, float)) and not isinstance(value, bool)


def to_number_or_none(value: Any) -> Optional[float]:
    """
    Coerce a JSON value to a finite float, None when not numeric.

    Strings must be plain ASCII decimal literals with an optional exponent;
    underscores, hex, non-ASCII digits and inf/nan spellings are rejected.
    """
    if is_number(value):
        number = float(value)
    elif isinstance(value, str):
        text = value.strip()
        if not DECIMAL_LITERAL.fullmatch(text):
            return None
        number = float(text)
    else:
        return None

    return number if math.isfinite(number) else None


def to_number_or_zero(value: Any) -> float:
    """Coerce a JSON value to a finite float, 0.0 when not numeric."""
    number = to_number_or_none(value)
    return 0.0 if number is None else number


def label_text(value: Any) -> str:
    """Label projection; missing labels become empty strings."""
    if value is None:
        return ""
    return str(value)


def numeric_key_order(mapping: Any) -> Optional[list[str]]:
    """
    Keys of a mapping sorted by their numeric value.

    Returns None when the mapping is not a dict or any key is not numeric.
    """
    if not isinstance(mapping, dict):
        return None

    keyed = []
    for key in mapping:
        number = to_number_or_none(key)
        if number is None:
            return None
        keyed.append((number, key))

    keyed.sort(key=lambda item: item[0])
    return [key for _, key in keyed]


def lookup_indexed(container: Any, key: str) -> Any:
    """Read a value by index key from an object (by key) or array (by position)."""
    if isinstance(container, dict):
        return container.get(key)
    if isinstance(container, list):
        number = to_number_or_none(key)
        if number is None or not number.is_integer():
            return None
        index = int(number)
        if 0 <= index < len(container):
            return container[index]
    return None


def series_key_candidates(raw: dict[str, Any], exclude=RESERVED_KEYS) -> list[str]:
    """Sibling keys whose value is an array or object, in enumeration order."""
    return [
        key for key, value in raw.items()
        if key not in exclude and isinstance(value, (list, dict))
    ]


def explicit_series_key(raw: dict[str, Any]) -> Optional[str]:
    """Series key named by meta.series_key, when it points at an existing field."""
    meta = raw.get("meta")
    if not isinstance(meta, dict):
        return None
    key = meta.get("series_key")
    if isinstance(key, str) and key in raw and key not in RESERVED_KEYS:
        return key
    return None


def resolve_series_key(raw: dict[str, Any], exclude=RESERVED_KEYS) -> Optional[str]:
    """Explicit series key, else the first sniffed candidate."""
    key = explicit_series_key(raw)
    if key is not None:
        return key
    candidates = series_key_candidates(raw, exclude)
    return candidates[0] if candidates else None


def resolve_growth_key(raw: dict[str, Any]) -> Optional[str]:
    """Center line key of a band payload."""
    key = explicit_series_key(raw)
    if key is not None and key not in (CI_UPPER_KEY, CI_LOWER_KEY):
        return key
    if isinstance(raw.get(DEFAULT_GROWTH_KEY), (list, dict)):
        return DEFAULT_GROWTH_KEY
    candidates = series_key_candidates(raw, RESERVED_KEYS | {CI_UPPER_KEY, CI_LOWER_KEY})
    return candidates[0] if candidates else None


# ---------------------------------------------------------------------------
# Predicates
# ---------------------------------------------------------------------------

def is_keyed_by_date(raw: Any) -> bool:
    """Object whose `date` field is an object keyed by numeric strings."""
    return isinstance(raw, dict) and numeric_key_order(raw.get("date")) is not None


def is_parallel_arrays(raw: Any) -> bool:
    """Object exposing both `labels` and `values` arrays."""
    return (
        isinstance(raw, dict)
        and isinstance(raw.get("labels"), list)
        and isinstance(raw.get("values"), list)
    )


def is_band_payload(raw: Any) -> bool:
    """Keyed-by-date object with a growth field and both 95% interval bounds."""
    return (
        is_keyed_by_date(raw)
        and CI_UPPER_KEY in raw
        and CI_LOWER_KEY in raw
        and resolve_growth_key(raw) is not None
    )


def is_bar_payload(raw: Any) -> bool:
    """Object carrying any of the accepted bar metric layouts."""
    if not isinstance(raw, dict):
        return False
    if any(isinstance(raw.get(key), list) for key in ("accuracy", "bars", "values")):
        return True
    return any(is_number(value) for value in raw.values())


# ---------------------------------------------------------------------------
# Projectors
# ---------------------------------------------------------------------------

def project_keyed_by_date(raw: dict[str, Any]) -> Series:
    """Project a keyed-by-date object, sorted by numeric key."""
    order = numeric_key_order(raw["date"]) or []
    series_key = resolve_series_key(raw) or "value"
    companion = raw.get(series_key)

    return Series.from_points(
        (SeriesPoint(label_text(raw["date"][key]),
                     to_number_or_none(lookup_indexed(companion, key)))
         for key in order),
        series_key=series_key,
    )


def project_parallel_arrays(raw: dict[str, Any]) -> Series:
    """Use parallel label/value arrays as-is, padding the shorter one."""
    labels = [label_text(label) for label in raw["labels"]]
    values = [to_number_or_none(value) for value in raw["values"]]

    length = max(len(labels), len(values))
    labels.extend([""] * (length - len(labels)))
    values.extend([None] * (length - len(values)))

    return Series(labels=tuple(labels), values=tuple(values), series_key="value")


def project_band(raw: dict[str, Any]) -> BandSeries:
    """Project a confidence band payload; blank or non-numeric bounds become None."""
    order = numeric_key_order(raw["date"]) or []
    labels = tuple(label_text(raw["date"][key]) for key in order)
    growth_key = resolve_growth_key(raw) or DEFAULT_GROWTH_KEY

    def column(field: str) -> tuple[Optional[float], ...]:
        container = raw.get(field)
        return tuple(to_number_or_none(lookup_indexed(container, key)) for key in order)

    return BandSeries(
        center=Series(labels=labels, values=column(growth_key), series_key=growth_key),
        upper=Series(labels=labels, values=column(CI_UPPER_KEY), series_key=CI_UPPER_KEY),
        lower=Series(labels=labels, values=column(CI_LOWER_KEY), series_key=CI_LOWER_KEY),
    )


def project_bars(raw: dict[str, Any], max_bars: int = 3,
                 default_unit: str = "%") -> tuple[MetricBar, ...]:
    """
    Project a bar metric payload. Values keep their raw magnitude.

    Accepted layouts, first match wins:
    an `accuracy` array of {label, value}; a `bars` array of the same shape;
    a `values` array paired with `labels`; the preferred flat numeric fields
    (only when at least `max_bars` are present); the first numeric fields.
    """
    unit_value = raw.get("unit")
    unit = unit_value.strip() if isinstance(unit_value, str) and unit_value.strip() else default_unit

    def item_bar(item: Any, allow_unit: bool) -> MetricBar:
        if not isinstance(item, dict):
            return MetricBar(label="", value=0.0, unit=unit)
        item_unit = item.get("unit") if allow_unit else None
        return MetricBar(
            label=label_text(item.get("label")),
            value=to_number_or_zero(item.get("value")),
            unit=item_unit.strip() if isinstance(item_unit, str) and item_unit.strip() else unit,
        )

    if isinstance(raw.get("accuracy"), list):
        return tuple(item_bar(item, False) for item in raw["accuracy"][:max_bars])

    if isinstance(raw.get("bars"), list):
        return tuple(item_bar(item, True) for item in raw["bars"][:max_bars])

    if isinstance(raw.get("values"), list):
        labels = raw.get("labels") if isinstance(raw.get("labels"), list) else []
        return tuple(
            MetricBar(
                label=label_text(labels[i]) if i < len(labels) else "",
                value=to_number_or_zero(value),
                unit=unit,
            )
            for i, value in enumerate(raw["values"][:max_bars])
        )

    preferred = [
        MetricBar(label=key, value=float(raw[key]), unit=unit)
        for key in BAR_PREFERENCE_KEYS
        if key in raw and is_number(raw[key])
    ]
    if len(preferred) >= max_bars:
        return tuple(preferred[:max_bars])

    numeric = [(key, value) for key, value in raw.items() if is_number(value)]
    return tuple(
        MetricBar(label=key, value=to_number_or_zero(value), unit=unit)
        for key, value in numeric[:max_bars]
    )


@dataclass(frozen=True)
class ShapeMatcher:
    """Predicate plus projector for one accepted payload shape."""
    name: str
    kind: SeriesKind
    predicate: Callable[[Any], bool]
    projector: Callable[[Any], Any]
    hinted_only: bool = False

    def accepts(self, raw: Any, hint: Optional[SeriesKind]) -> bool:
        """Whether this matcher takes part for the hint and accepts the payload."""
        if hint is None:
            if self.hinted_only:
                return False
        elif hint != self.kind:
            return False
        return self.predicate(raw)


def build_shape_matchers(max_bars: int = 3, default_unit: str = "%",
                         article_projector: Optional[Callable[[Any], Any]] = None,
                         article_predicate: Optional[Callable[[Any], bool]] = None
                         ) -> tuple[ShapeMatcher, ...]:
    """Ordered shape matchers; first accepting matcher wins."""
    matchers = [
        ShapeMatcher("keyed_by_date", SeriesKind.LINE, is_keyed_by_date, project_keyed_by_date),
        ShapeMatcher("parallel_arrays", SeriesKind.LINE, is_parallel_arrays, project_parallel_arrays),
        ShapeMatcher("band", SeriesKind.BAND, is_band_payload, project_band),
        ShapeMatcher(
            "bar_metrics",
            SeriesKind.BARS,
            is_bar_payload,
            lambda raw: project_bars(raw, max_bars=max_bars, default_unit=default_unit),
        ),
    ]
    if article_projector is not None and article_predicate is not None:
        matchers.append(ShapeMatcher(
            "articles", SeriesKind.ARTICLES, article_predicate, article_projector, hinted_only=True
        ))
    return tuple(matchers)
