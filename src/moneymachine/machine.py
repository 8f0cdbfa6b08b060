"""
MoneyMachine: the top-level controller.

Owns the capital-flow graph, the live news wire and the signal feed. A timer
thread rolls for a synthetic market event every tick; each event nudges the
sentiment of one company and fires BUY/SHORT when sentiment breaks out of the
25-75 band.
"""

import time
import random
import logging
import threading
from typing import Any, Callable, Dict, List, Optional

from moneymachine.ai_service import AIService
from moneymachine.config import MachineConfig
from moneymachine.constants import (
    NEWS_TEMPLATES, PRIVATE_TICKER, NewsTemplate, initial_graph,
    BUY_TARGET, LONG_HARDWARE, SHORT_HARDWARE, SHORT_SOURCE,
)
from moneymachine.exceptions import UnknownNodeError, UnknownSignalError
from moneymachine.layout import GalaxyLayout, LayoutResult
from moneymachine.models import (
    GraphData, Node, Link, NewsItem, Signal, ModelProvider, FlowType, FlowDirection,
    NodeGroup, ImpactLevel, NewsType, SignalAction, SignalStrength,
)
from moneymachine.store import LocalStore
from moneymachine.strategy_config import SENTIMENT, IMPACT_SCORES, CAPS, LINKS

logger = logging.getLogger("MoneyMachine.Core")

HARDWARE_TICKER = "NVDA"


class MoneyMachine:
    def __init__(self, config: Optional[MachineConfig] = None, store: Optional[LocalStore] = None,
                 ai: Optional[AIService] = None, layout: Optional[GalaxyLayout] = None,
                 rng: Optional[random.Random] = None, clock: Callable[[], float] = time.time,
                 graph: Optional[GraphData] = None):
        self.config = config or MachineConfig()
        self.store = store or LocalStore(self.config.db_path)
        self.ai = ai or AIService(self.config)
        self.layout = layout or GalaxyLayout()
        self.rng = rng or random.Random()
        self._clock = clock

        self.graph = graph or initial_graph()
        self.news: List[NewsItem] = []
        self.signals: List[Signal] = []
        self.selected_node: Optional[Node] = None
        self.current_model = self.config.provider

        # Signal panel state
        self.selected_signal_id: Optional[str] = None
        self.analysis = ""
        self.analysis_loading = False

        self._lock = threading.RLock()
        self._last_id = 0
        self._stop_event = threading.Event()
        self._thread: Optional[threading.Thread] = None

        self._restore()

    # ------------------------------------------------------------------
    # Startup
    # ------------------------------------------------------------------

    def _restore(self):
        saved_model = self.store.get_setting("model")
        if saved_model:
            try:
                self.current_model = ModelProvider.parse(saved_model)
            except ValueError:
                logger.warning(f"Ignoring saved model setting {saved_model!r}")

        self.ai.initialize(self.current_model)
        self.store.init()

        saved_signals = self.store.get_signals()
        saved_news = self.store.get_news()
        if saved_signals:
            self.signals = saved_signals[:CAPS["SIGNAL_FEED"]]
        if saved_news:
            self.news = saved_news[:CAPS["NEWS_FEED"]]
        logger.info(f"Restored {len(saved_signals)} signals and {len(saved_news)} news items")

    def _now_ms(self) -> int:
        return int(self._clock() * 1000)

    def _next_id(self) -> str:
        # Millisecond ids, bumped so two records in the same tick stay distinct
        candidate = self._now_ms()
        if candidate <= self._last_id:
            candidate = self._last_id + 1
        self._last_id = candidate
        return str(candidate)

    def set_model(self, provider) -> ModelProvider:
        provider = ModelProvider.parse(provider)
        with self._lock:
            self.current_model = provider
            self.ai.set_provider(provider)
            self.store.set_setting("model", provider.value)
        return provider

    # ------------------------------------------------------------------
    # Simulation clock
    # ------------------------------------------------------------------

    def tick(self) -> Optional[NewsItem]:
        """One timer callback: 30% chance of a market event."""
        if self.rng.random() > 1 - self.config.event_probability:
            return self.generate_market_event()
        return None

    def start(self):
        if self._thread is not None and self._thread.is_alive():
            return
        self._stop_event.clear()
        self._thread = threading.Thread(target=self._run, name="aimm-ticker", daemon=True)
        self._thread.start()
        logger.info(f"Simulation started (tick every {self.config.tick_seconds}s)")

    def stop(self):
        self._stop_event.set()
        if self._thread is not None:
            self._thread.join(timeout=self.config.tick_seconds + 1)
            self._thread = None
        logger.info("Simulation stopped")

    @property
    def running(self) -> bool:
        return self._thread is not None and self._thread.is_alive()

    def _run(self):
        while not self._stop_event.wait(self.config.tick_seconds):
            try:
                self.tick()
            except Exception as e:
                logger.error(f"Tick failed: {e}", exc_info=True)

    # ------------------------------------------------------------------
    # Market events
    # ------------------------------------------------------------------

    def generate_market_event(self, template: Optional[NewsTemplate] = None) -> Optional[NewsItem]:
        with self._lock:
            template = template or self.rng.choice(NEWS_TEMPLATES)

            source_nodes = [n for n in self.graph.nodes if n.group in (NodeGroup.CENTRAL, NodeGroup.SATELLITE)]
            if not source_nodes:
                return None
            source = self.rng.choice(source_nodes)
            target_nodes = [n for n in self.graph.nodes if n.id != source.id]
            if not target_nodes:
                return None
            target = self.rng.choice(target_nodes)

            headline = template.headline.replace("{source}", source.id).replace("{target}", target.id)
            news_item = NewsItem(
                id=self._next_id(),
                timestamp=self._now_ms(),
                headline=headline,
                impact_level=template.impact,
                related_tickers=[t for t in (source.ticker, target.ticker) if t != PRIVATE_TICKER],
                type=template.type,
            )
            self.news = [news_item] + self.news[:CAPS["NEWS_FEED"] - 1]
            self.store.insert_news(news_item)
            logger.info(f"Market event: {headline}")

            impact_score = IMPACT_SCORES[template.impact.value]
            nvda = self.graph.find_by_ticker(HARDWARE_TICKER)
            strategy_target = target
            sentiment_delta = 0

            if template.signal == BUY_TARGET:
                sentiment_delta = impact_score
                self.update_graph_link(source.id, target.id, FlowType.INVESTMENT)
            elif template.signal == LONG_HARDWARE:
                if nvda is not None:
                    strategy_target = nvda
                    if nvda.id != source.id:
                        self.update_graph_link(source.id, nvda.id, FlowType.HARDWARE)
                sentiment_delta = impact_score
            elif template.signal == SHORT_HARDWARE:
                if nvda is not None:
                    strategy_target = nvda
                sentiment_delta = -impact_score
            elif template.signal == SHORT_SOURCE:
                strategy_target = source
                sentiment_delta = -impact_score

            if strategy_target.ticker != PRIVATE_TICKER:
                self._apply_sentiment(strategy_target, sentiment_delta, source, news_item)

            return news_item

    def _apply_sentiment(self, node: Node, delta: float, source: Node, news_item: NewsItem) -> Optional[Signal]:
        old_score = node.sentiment_score
        new_score = min(SENTIMENT["MAX"], max(SENTIMENT["MIN"], old_score + delta))
        node.sentiment_score = new_score

        signal = None
        if new_score > SENTIMENT["BUY_ABOVE"] and old_score <= SENTIMENT["BUY_ABOVE"]:
            signal = self._make_signal(
                node.ticker, SignalAction.BUY, SignalStrength.STRONG,
                f"Momentum Breakout. Sentiment Score: {new_score:g}/100 triggered by {source.id} news.",
                related_news_id=news_item.id,
            )
        elif new_score < SENTIMENT["SHORT_BELOW"] and old_score >= SENTIMENT["SHORT_BELOW"]:
            signal = self._make_signal(
                node.ticker, SignalAction.SHORT, SignalStrength.STRONG,
                f"Trend Collapse. Sentiment Score: {new_score:g}/100 triggered by {source.id} news.",
                related_news_id=news_item.id,
            )

        if signal is not None:
            self._push_signal(signal, persist=True)
            logger.info(f"Signal fired: {signal.action.value} {signal.ticker} ({signal.reason})")
        return signal

    def _make_signal(self, ticker: str, action: SignalAction, strength: SignalStrength, reason: str,
                     related_news_id: Optional[str] = None) -> Signal:
        return Signal(
            id=self._next_id(),
            ticker=ticker,
            action=action,
            strength=strength,
            reason=reason,
            timestamp=self._now_ms(),
            related_news_id=related_news_id,
            model_used=self.current_model,
        )

    def _push_signal(self, signal: Signal, persist: bool):
        with self._lock:
            self.signals = [signal] + self.signals[:CAPS["SIGNAL_FEED"] - 1]
            if persist:
                self.store.insert_signal(signal)

    def update_graph_link(self, source_id: str, target_id: str, flow_type: FlowType) -> Link:
        with self._lock:
            link = self.graph.find_link(source_id, target_id)
            if link is not None:
                link.value += LINKS["EVENT_INCREMENT"]
                return link
            link = Link(source=source_id, target=target_id, type=flow_type, value=LINKS["EVENT_NEW_VALUE"])
            self.graph.links.append(link)
            return link

    # ------------------------------------------------------------------
    # Trader actions
    # ------------------------------------------------------------------

    def add_stock(self, ticker: str) -> Optional[Node]:
        """Expand the graph with a company found through the LLM."""
        ticker = (ticker or "").strip().upper()
        if not ticker:
            return None
        with self._lock:
            if self.graph.find_by_ticker(ticker) is not None:
                return None
            model = self.current_model
            self._push_signal(self._make_signal(
                ticker, SignalAction.HOLD, SignalStrength.WEAK,
                f"Analyzing supply chain via {model.value}...",
            ), persist=False)
            existing_ids = self.graph.node_ids()

        profile = self.ai.find_stock_connections(ticker, existing_ids)

        with self._lock:
            if self.graph.find_by_ticker(ticker) is not None:
                logger.info(f"{ticker} was added while its connections were resolving")
                return None
            node_id = profile.company_name
            if self.graph.find_node(node_id) is not None:
                node_id = f"{profile.company_name} ({ticker})"
            new_node = Node(
                id=node_id,
                group=NodeGroup.OUTER,
                ticker=ticker,
                val=LINKS["NEW_NODE_VAL"],
                sentiment_score=SENTIMENT["NEW_NODE"],
                desc=profile.description,
            )

            new_links = []
            for c in profile.connections:
                if self.graph.find_node(c.target_id) is None:
                    continue
                if c.direction == FlowDirection.OUTFLOW:
                    source, target = new_node.id, c.target_id
                else:
                    source, target = c.target_id, new_node.id
                new_links.append(Link(source=source, target=target, type=c.type, value=LINKS["INTEGRATED_VALUE"]))

            self.graph.nodes.append(new_node)
            self.graph.links.extend(new_links)

            self._push_signal(self._make_signal(
                ticker, SignalAction.HOLD, SignalStrength.MODERATE,
                f"Integrated. Found {len(new_links)} connections.",
            ), persist=True)
            logger.info(f"Integrated {ticker} as {new_node.id} with {len(new_links)} connections")
            return new_node

    def analyze_signal(self, signal_id: str) -> str:
        """Deep analysis of a signal with the active provider."""
        with self._lock:
            signal = next((s for s in self.signals if s.id == signal_id), None)
            if signal is None:
                raise UnknownSignalError(signal_id)
            related = next((n for n in self.news if n.id == signal.related_news_id), None)
            if related is None:
                related = NewsItem(id="", timestamp=0, headline="Unknown Source",
                                   impact_level=ImpactLevel.LOW, related_tickers=[], type=NewsType.INSIDER)
            self.selected_signal_id = signal_id
            self.analysis_loading = True
            self.analysis = ""

        result = ""
        try:
            result = self.ai.analyze_signal(signal, related)
        finally:
            with self._lock:
                if self.selected_signal_id == signal_id:
                    self.analysis = result
                    self.analysis_loading = False
        return result

    def select_node(self, node_id: str) -> Node:
        with self._lock:
            node = self.graph.find_node(node_id)
            if node is None:
                raise UnknownNodeError(node_id)
            self.selected_node = node
            return node

    def clear_db(self):
        with self._lock:
            self.store.clear_db()
            self.store.init()

    # ------------------------------------------------------------------
    # Views
    # ------------------------------------------------------------------

    def pin_node(self, node_id: str, x: float, y: float):
        with self._lock:
            if self.graph.find_node(node_id) is None:
                raise UnknownNodeError(node_id)
            self.layout.update(self.graph)
            self.layout.pin(node_id, x, y)

    def release_node(self, node_id: str):
        with self._lock:
            if self.graph.find_node(node_id) is None:
                raise UnknownNodeError(node_id)
            self.layout.update(self.graph)
            self.layout.release(node_id)

    def layout_snapshot(self) -> LayoutResult:
        with self._lock:
            return self.layout.update(self.graph)

    def snapshot(self) -> Dict[str, Any]:
        with self._lock:
            return {
                "graph": self.graph.to_dict(),
                "news": [n.to_dict() for n in self.news],
                "signals": [s.to_dict() for s in self.signals],
                "selectedNode": self.selected_node.to_dict() if self.selected_node else None,
                "currentModel": self.current_model.value,
                "analysis": {
                    "signalId": self.selected_signal_id,
                    "text": self.analysis,
                    "loading": self.analysis_loading,
                },
                "running": self.running,
            }
