"""
Feature page engine.

Orchestrates every feature card on a page:
Feed → Normalization → Chart config → Chart session, plus the bar metric,
article carousel, pane switcher and stat counter features. Each card runs its
own pipeline; a failure in one card is recorded in that card's outcome and
never reaches another card.
"""

from concurrent.futures import Future, ThreadPoolExecutor, as_completed
from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path
from typing import Any, Callable, Optional, Union

import structlog

from .charts.builder import ChartConfigBuilder
from .charts.session import ChartSession, RenderingCapability
from .charts.tokens import StyleTokenSource
from .config.defaults import (
    AnimationParams,
    BarParams,
    CarouselParams,
    ChartParams,
    FeedParams,
    ThemeParams,
    ThemeTokenDefaults,
    params_from_dict,
)
from .config.loader import ConfigLoader
from .config.validation import FEED_CARD_KINDS, ConfigValidator
from .data.feeds import FeedLoader
from .data.models import SeriesKind
from .data.normalizer import SeriesNormalizer
from .data.parsers import to_number_or_zero
from .errors import (
    ConfigurationError,
    DataQualityError,
    FeedLoadError,
    GracefulDegradationError,
    MountPointMissingError,
)
from .logging.config import get_card_logger, log_card_outcome
from .state.animator import ThresholdAnimator
from .state.carousel import CarouselController
from .state.models import AnimationKind
from .state.panes import PaneSwitcher
from .ui.elements import Document, Element
from .ui.i18n import apply_translations

logger = structlog.get_logger(__name__)
card_logger = get_card_logger(__name__)

CHART_HINTS = {"line": SeriesKind.LINE, "band": SeriesKind.BAND}


class CardStatus(str, Enum):
    """Terminal outcome of one card pipeline."""
    READY = "ready"
    EMPTY = "empty"
    FAILED = "failed"
    SKIPPED = "skipped"


@dataclass(frozen=True)
class CardSpec:
    """One card declaration from the site file or a caller."""
    card_id: str
    kind: str
    selector: str
    canvas: Optional[str] = None
    sources: tuple[str, ...] = ()
    label: str = ""
    default: Optional[str] = None
    overrides: dict = field(default_factory=dict)

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "CardSpec":
        return cls(
            card_id=data["id"],
            kind=data["kind"],
            selector=data["selector"],
            canvas=data.get("canvas"),
            sources=tuple(data.get("sources") or ()),
            label=data.get("label") or "",
            default=data.get("default"),
            overrides=dict(data.get("overrides") or {}),
        )

    @property
    def needs_feed(self) -> bool:
        return self.kind in FEED_CARD_KINDS


@dataclass(frozen=True)
class CardOutcome:
    """Result of initializing one card."""
    card_id: str
    kind: str
    status: CardStatus
    reason: str = ""
    source: Optional[str] = None
    matched_shape: Optional[str] = None


class FeaturePageEngine:
    """
    Main coordinator for the feature cards of one page.

    Feeds are fetched on a worker pool; everything that touches the element
    tree, the sessions or the state machines runs on the caller's thread, one
    card at a time, in fetch completion order.
    """

    def __init__(self, document: Document,
                 config_dir: Optional[Union[str, Path]] = None,
                 site_root: Union[str, Path, None] = None,
                 capability: Optional[RenderingCapability] = None,
                 token_source: Optional[StyleTokenSource] = None,
                 feed_loader: Optional[FeedLoader] = None,
                 clock: Optional[Callable[[], float]] = None) -> None:
        """
        Initialize the page engine.

        Args:
            document: Page element tree holding every mount point
            config_dir: Directory containing site.yaml
            site_root: Directory or base URL relative feed sources resolve against
            capability: Chart drawing engine; None leaves chart cards inert
            token_source: Shared theme token source (built from config when omitted)
            feed_loader: Custom feed transport
            clock: Millisecond clock for animations

        Raises:
            ConfigurationError: When the site configuration is invalid
        """
        self.document = document
        self.capability = capability
        self.config_loader = ConfigLoader.create(Path(config_dir) if config_dir else None)

        self.site_config = self.config_loader.merge_config()
        errors = ConfigValidator.validate_config(self.site_config)
        if errors:
            error_msgs = [f"{err.field}: {err.message} (got: {err.value})" for err in errors]
            logger.error("Site configuration validation failed", errors=error_msgs)
            raise ConfigurationError("Invalid site configuration", errors=errors)

        theme = params_from_dict(ThemeParams, self.site_config.get("theme"))
        self.token_source = token_source or StyleTokenSource(
            palettes=theme.palettes,
            theme=theme.default_theme,
            defaults=params_from_dict(ThemeTokenDefaults, self.site_config.get("tokens")),
        )
        self.feed_params = params_from_dict(FeedParams, self.site_config.get("feed"))
        self.feed_loader = feed_loader or FeedLoader(site_root, self.feed_params)
        self.animator = ThresholdAnimator(
            params_from_dict(AnimationParams, self.site_config.get("animation")),
            clock=clock,
        )

        self.cards: list[CardSpec] = []
        self.sessions: dict[str, ChartSession] = {}
        self.carousels: dict[str, CarouselController] = {}
        self.pane_switchers: dict[str, PaneSwitcher] = {}
        self.outcomes: dict[str, CardOutcome] = {}

        logger.info("Feature page engine initialized",
                    config_dir=str(self.config_loader.config_dir),
                    theme=self.token_source.theme)

    # Card registration ------------------------------------------------------

    def add_card(self, card_data: dict[str, Any]) -> bool:
        """Register a card declaration; invalid declarations are logged and skipped."""
        errors = ConfigValidator.validate_card_spec(card_data)
        if errors:
            error_msgs = [f"{err.field}: {err.message} (got: {err.value})" for err in errors]
            logger.error("Card declaration validation failed",
                         card_id=card_data.get("id"), errors=error_msgs)
            return False

        card = CardSpec.from_dict(card_data)
        if any(existing.card_id == card.card_id for existing in self.cards):
            logger.warning("Duplicate card id, skipping", card_id=card.card_id)
            return False

        if card.overrides:
            merged = self.config_loader.merge_config(card.card_id, card.overrides)
            override_errors = ConfigValidator.validate_config(merged)
            if override_errors:
                error_msgs = [f"{err.field}: {err.message} (got: {err.value})"
                              for err in override_errors]
                logger.error("Card parameter overrides invalid",
                             card_id=card.card_id, errors=error_msgs)
                return False

        self.cards.append(card)
        logger.debug("Registered card", card_id=card.card_id, kind=card.kind)
        return True

    def add_site_cards(self) -> int:
        """Register every card declared in site.yaml; returns how many were accepted."""
        return sum(1 for card_data in self.config_loader.load_card_specs()
                   if self.add_card(card_data))

    def card(self, card_id: str) -> Optional[CardSpec]:
        for card in self.cards:
            if card.card_id == card_id:
                return card
        return None

    # Loading ----------------------------------------------------------------

    def load_all(self) -> list[CardOutcome]:
        """
        Initialize every registered card.

        Returns:
            One outcome per card, in registration order
        """
        local_cards = [c for c in self.cards if not c.needs_feed]
        feed_cards = [c for c in self.cards if c.needs_feed]

        for card in local_cards:
            self._record(card, self._run_isolated(card, None, None))

        if feed_cards:
            workers = max(1, min(self.feed_params.max_workers, len(feed_cards)))
            with ThreadPoolExecutor(max_workers=workers,
                                    thread_name_prefix="feature-feed") as pool:
                futures = {pool.submit(self._fetch, card): card for card in feed_cards}
                for future in as_completed(futures):
                    card = futures[future]
                    self._record(card, self._complete(card, future))

        return [self.outcomes[c.card_id] for c in self.cards if c.card_id in self.outcomes]

    def reload_card(self, card_id: str) -> CardOutcome:
        """Fetch and rebuild one card; chart configs are replaced wholesale."""
        card = self.card(card_id)
        if card is None:
            raise KeyError(card_id)

        if not card.needs_feed:
            outcome = self._run_isolated(card, None, None)
        else:
            try:
                payload, source = self._fetch(card)
            except FeedLoadError as e:
                outcome = self._fail(card, e)
            else:
                outcome = self._run_isolated(card, payload, source)

        self._record(card, outcome)
        return outcome

    def _fetch(self, card: CardSpec) -> tuple[Any, str]:
        """Runs on a worker thread: transport only, no page state."""
        return self.feed_loader.fetch_first_available(card.sources)

    def _complete(self, card: CardSpec, future: Future) -> CardOutcome:
        try:
            payload, source = future.result()
        except FeedLoadError as e:
            return self._fail(card, e)
        except Exception as e:
            card_logger.error("Unexpected feed failure", card_id=card.card_id, error=str(e))
            return self._fail(card, e)
        return self._run_isolated(card, payload, source)

    def _run_isolated(self, card: CardSpec, payload: Any, source: Optional[str]) -> CardOutcome:
        """Run one card's initializer; nothing it raises leaves this card."""
        initializers = {
            "line": self._init_chart,
            "band": self._init_chart,
            "bars": self._init_bars,
            "articles": self._init_articles,
            "panes": self._init_panes,
            "counters": self._init_counters,
        }
        try:
            return initializers[card.kind](card, payload, source)
        except MountPointMissingError as e:
            return self._outcome(card, CardStatus.SKIPPED, str(e), source)
        except (GracefulDegradationError, DataQualityError) as e:
            return self._fail(card, e, source)
        except Exception as e:
            card_logger.error("Card initializer raised", card_id=card.card_id,
                              kind=card.kind, error=str(e), error_type=type(e).__name__)
            return self._fail(card, e, source)

    def _record(self, card: CardSpec, outcome: CardOutcome) -> None:
        self.outcomes[card.card_id] = outcome
        context = {"kind": card.kind}
        if outcome.source:
            context["source"] = outcome.source
        if outcome.matched_shape:
            context["shape"] = outcome.matched_shape
        log_card_outcome(card_logger, card.card_id, outcome.status.value,
                         outcome.reason, context)

    def _outcome(self, card: CardSpec, status: CardStatus, reason: str = "",
                 source: Optional[str] = None,
                 matched_shape: Optional[str] = None) -> CardOutcome:
        return CardOutcome(card_id=card.card_id, kind=card.kind, status=status,
                           reason=reason, source=source, matched_shape=matched_shape)

    def _fail(self, card: CardSpec, error: Exception,
              source: Optional[str] = None) -> CardOutcome:
        """Render the card's error state and record the failure."""
        reason = str(error)
        try:
            if card.kind == "articles":
                carousel = self._carousel_for(card)
                if carousel.mounted:
                    carousel.load_failed(reason)
            else:
                self._release_session(card)
                root = self.document.query(card.selector)
                if root is not None:
                    params = self._chart_params(card)
                    mark_card_state(root, "error", params.error_message,
                                    placeholder=card.kind in CHART_HINTS)
        except Exception as e:
            card_logger.error("Failed to render error state", card_id=card.card_id, error=str(e))
        return self._outcome(card, CardStatus.FAILED, reason, source)

    # Card initializers ------------------------------------------------------

    def _init_chart(self, card: CardSpec, payload: Any, source: Optional[str]) -> CardOutcome:
        root = self._require_mount(card)
        apply_card_meta(root, payload)

        params = self._chart_params(card)
        result = self.normalizer_for(card).normalize_with_result(payload, CHART_HINTS[card.kind])
        data = result.value
        if data.is_empty:
            self._release_session(card)
            mark_card_state(root, "empty", params.empty_message)
            return self._outcome(card, CardStatus.EMPTY,
                                 result.error_msg or "feed has no points", source)

        builder = ChartConfigBuilder(params)
        if card.kind == "band":
            config = builder.build(data, self.token_source.current(),
                                   center_label=card.label or None)
        else:
            config = builder.build(data, self.token_source.current(), label=card.label)

        session = self.sessions.get(card.card_id)
        if session is None or session.is_disposed:
            session = ChartSession(card.card_id, card.canvas, self.capability,
                                   self.token_source, self.document, builder)
            self.sessions[card.card_id] = session
            session.create(config)
        else:
            session.replace_config(config)

        clear_card_state(root)
        if not session.is_live:
            return self._outcome(card, CardStatus.SKIPPED, "chart not created",
                                 source, result.matched_shape)
        return self._outcome(card, CardStatus.READY, "", source, result.matched_shape)

    def _init_bars(self, card: CardSpec, payload: Any, source: Optional[str]) -> CardOutcome:
        root = self._require_mount(card)
        bars = self.normalizer_for(card).normalize(payload, SeriesKind.BARS)
        if not bars:
            mark_card_state(root, "empty", "", placeholder=False)
            return self._outcome(card, CardStatus.EMPTY, "feed has no bar metrics", source)

        bar_cards = root.query_all(".bar-card")
        for bar_card, bar in zip(bar_cards, bars):
            label_el = bar_card.query(".bar-label span")
            if label_el is not None and bar.label:
                label_el.set_text_unless_bound(bar.label)

            unit_el = bar_card.query(".bar-num .unit")
            if unit_el is not None:
                unit_el.text = bar.unit.strip() or "%"

            self.animator.retarget(
                bar_card,
                bar.display_value,
                AnimationKind.BAR,
                text_element=bar_card.query(".bar-num .value"),
                width_element=bar_card.query(".bar-fill"),
            )

        for unused in bar_cards[len(bars):]:
            reset_bar_card(unused)
            self.animator.forget(unused)

        clear_card_state(root)
        populated = min(len(bar_cards), len(bars))
        card_logger.debug("Bar metrics bound", card_id=card.card_id,
                          populated=populated, available=len(bars))
        return self._outcome(card, CardStatus.READY, "", source, "bar_metrics")

    def _init_articles(self, card: CardSpec, payload: Any, source: Optional[str]) -> CardOutcome:
        carousel = self._carousel_for(card)
        if not carousel.mounted:
            return self._outcome(card, CardStatus.SKIPPED, "carousel mount point missing", source)

        articles = self.normalizer_for(card).normalize_articles(payload)
        carousel.load_succeeded(articles)
        if not articles:
            return self._outcome(card, CardStatus.EMPTY, "feed has no articles", source)
        return self._outcome(card, CardStatus.READY, "", source, "articles")

    def _init_panes(self, card: CardSpec, payload: Any, source: Optional[str]) -> CardOutcome:
        switcher = PaneSwitcher(self.document, card.selector, default=card.default)
        if not switcher.mounted:
            return self._outcome(card, CardStatus.SKIPPED, "pane switcher has no controls")
        self.pane_switchers[card.card_id] = switcher
        return self._outcome(card, CardStatus.READY)

    def _init_counters(self, card: CardSpec, payload: Any, source: Optional[str]) -> CardOutcome:
        root = self._require_mount(card)
        counters = root.query_all(".stat .num[data-count]")
        for number in counters:
            target = int(to_number_or_zero(number.get_attribute("data-count")))
            trigger = number.closest(".stat") or number
            self.animator.observe(trigger, target, AnimationKind.COUNT, text_element=number)

        if not counters:
            return self._outcome(card, CardStatus.EMPTY, "no stat counters")
        return self._outcome(card, CardStatus.READY)

    def _release_session(self, card: CardSpec) -> None:
        """Take down a previously drawn chart so no stale data stays on screen."""
        session = self.sessions.get(card.card_id)
        if session is not None and not session.is_disposed:
            session.dispose()
            card_logger.debug("Released chart session", card_id=card.card_id)

    # Per-card parameters ----------------------------------------------------

    def card_config(self, card: CardSpec) -> dict[str, Any]:
        return self.config_loader.merge_config(card.card_id, card.overrides)

    def _chart_params(self, card: CardSpec) -> ChartParams:
        return params_from_dict(ChartParams, self.card_config(card).get("chart"))

    def normalizer_for(self, card: CardSpec) -> SeriesNormalizer:
        return SeriesNormalizer(params_from_dict(BarParams, self.card_config(card).get("bars")))

    def _carousel_for(self, card: CardSpec) -> CarouselController:
        carousel = self.carousels.get(card.card_id)
        if carousel is None:
            params = params_from_dict(CarouselParams, self.card_config(card).get("carousel"))
            carousel = CarouselController(self.document, card.selector, params)
            self.carousels[card.card_id] = carousel
        return carousel

    def _require_mount(self, card: CardSpec) -> Element:
        root = self.document.query(card.selector)
        if root is None:
            raise MountPointMissingError(
                f"Card mount point not found: {card.selector}",
                selector=card.selector,
                degraded_functionality=card.card_id,
            )
        return root

    # Page-level events ------------------------------------------------------

    def on_visibility(self, element: Element, ratio: float,
                      now_ms: Optional[float] = None) -> bool:
        """Forward a visibility report to the animator."""
        return self.animator.on_visibility(element, ratio, now_ms)

    def tick(self, now_ms: Optional[float] = None) -> int:
        """Advance running animations; returns how many are still running."""
        return self.animator.tick(now_ms)

    def set_theme(self, theme: str) -> None:
        self.token_source.set_theme(theme)

    def toggle_theme(self) -> str:
        return self.token_source.toggle()

    def apply_translations(self, mapping: dict[str, str]) -> int:
        return apply_translations(self.document, mapping)

    def dispose(self) -> None:
        """Dispose every chart session; safe to call more than once."""
        for session in self.sessions.values():
            session.dispose()
        logger.info("Feature page engine disposed", sessions=len(self.sessions))


def apply_card_meta(card_root: Element, payload: Any) -> None:
    """Fill title, subtitle and source from the payload unless translation-bound."""
    if not isinstance(payload, dict):
        return
    meta = payload.get("meta")
    meta = meta if isinstance(meta, dict) else {}

    title_el = card_root.query(".chart-title")
    subtitle_el = card_root.query(".chart-sub")
    source_el = card_root.query(".chart-src")

    title = meta.get("title")
    if isinstance(title, str) and title and title_el is not None:
        title_el.set_text_unless_bound(title)

    subtitle = meta.get("subtitle")
    if isinstance(subtitle, str) and subtitle and subtitle_el is not None:
        subtitle_el.set_text_unless_bound(subtitle)

    source = payload.get("source") or meta.get("source")
    if isinstance(source, str) and source and source_el is not None:
        source_el.set_text_unless_bound(f"Source: {source}")


def mark_card_state(card_root: Element, state: str, message: str,
                    placeholder: bool = True) -> None:
    """Flag a card as empty/error and show its placeholder message."""
    card_root.set_attribute("data-state", state)
    if not placeholder:
        return
    notice = card_root.query(".chart-empty")
    if notice is None:
        notice = card_root.append(Element(tag="p", classes=["chart-empty"]))
    notice.text = message
    notice.hidden = False


def clear_card_state(card_root: Element) -> None:
    """Drop a previous empty/error flag after a successful (re)load."""
    card_root.attributes.pop("data-state", None)
    notice = card_root.query(".chart-empty")
    if notice is not None:
        notice.hidden = True


def reset_bar_card(bar_card: Element) -> None:
    """Blank a bar card that the current feed no longer fills."""
    value_el = bar_card.query(".bar-num .value")
    if value_el is not None:
        value_el.text = ""
    fill_el = bar_card.query(".bar-fill")
    if fill_el is not None:
        fill_el.style.pop("width", None)
