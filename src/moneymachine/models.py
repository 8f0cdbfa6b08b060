"""
Core records for the AI Money Machine

Graph (nodes and capital-flow links), synthetic news, and mock trade signals.
Records serialize to plain dicts using the camelCase field names the
dashboard and the key-value store exchange.
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import Optional, Dict, List, Any


class ModelProvider(Enum):
    """LLM providers behind the analysis switch"""
    GEMINI = "GEMINI"
    OPENAI = "OPENAI"
    ANTHROPIC = "ANTHROPIC"
    XAI = "XAI"

    @classmethod
    def parse(cls, value) -> "ModelProvider":
        if isinstance(value, cls):
            return value
        try:
            return cls(str(value).strip().upper())
        except ValueError:
            raise ValueError(f"Unknown model provider: {value!r}")


class NodeGroup(Enum):
    CENTRAL = "Central"
    SATELLITE = "Satellite"
    OUTER = "Outer"


class FlowType(Enum):
    """Capital flow between two companies"""
    INVESTMENT = "Investment"  # Green
    SERVICES = "Services"      # Blue
    HARDWARE = "Hardware"      # Pink


class FlowDirection(Enum):
    INFLOW = "INFLOW"
    OUTFLOW = "OUTFLOW"


class ImpactLevel(Enum):
    HIGH = "HIGH"
    MEDIUM = "MEDIUM"
    LOW = "LOW"


class NewsType(Enum):
    CAPEX = "CAPEX"
    INVESTMENT = "INVESTMENT"
    PARTNERSHIP = "PARTNERSHIP"
    INSIDER = "INSIDER"


class SignalAction(Enum):
    BUY = "BUY"
    SHORT = "SHORT"
    HOLD = "HOLD"


class SignalStrength(Enum):
    STRONG = "STRONG"
    MODERATE = "MODERATE"
    WEAK = "WEAK"


@dataclass
class Node:
    """
    A company in the capital-flow graph.

    val drives the rendered radius; sentiment_score runs 0-100 with 50 neutral.
    x/y/vx/vy/fx/fy hold the force simulation state and survive data updates.
    """
    id: str
    group: NodeGroup
    ticker: str
    val: float
    sentiment_score: float = 50
    market_cap: Optional[str] = None
    desc: Optional[str] = None
    x: Optional[float] = None
    y: Optional[float] = None
    vx: Optional[float] = None
    vy: Optional[float] = None
    fx: Optional[float] = None
    fy: Optional[float] = None

    def to_dict(self) -> Dict[str, Any]:
        data = {
            "id": self.id,
            "group": self.group.value,
            "ticker": self.ticker,
            "val": self.val,
            "sentimentScore": self.sentiment_score,
        }
        if self.market_cap is not None:
            data["marketCap"] = self.market_cap
        if self.desc is not None:
            data["desc"] = self.desc
        for key in ("x", "y", "vx", "vy", "fx", "fy"):
            value = getattr(self, key)
            if value is not None:
                data[key] = value
        return data

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "Node":
        return cls(
            id=data["id"],
            group=NodeGroup(data["group"]),
            ticker=data["ticker"],
            val=data["val"],
            sentiment_score=data.get("sentimentScore", 50),
            market_cap=data.get("marketCap"),
            desc=data.get("desc"),
            x=data.get("x"),
            y=data.get("y"),
            vx=data.get("vx"),
            vy=data.get("vy"),
            fx=data.get("fx"),
            fy=data.get("fy"),
        )


@dataclass
class Link:
    """Directed capital flow; value drives the rendered thickness"""
    source: str
    target: str
    type: FlowType
    value: float

    def to_dict(self) -> Dict[str, Any]:
        return {
            "source": self.source,
            "target": self.target,
            "type": self.type.value,
            "value": self.value,
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "Link":
        source = data["source"]
        target = data["target"]
        # Renderer payloads may carry resolved node objects instead of ids
        if isinstance(source, dict):
            source = source["id"]
        if isinstance(target, dict):
            target = target["id"]
        return cls(source=source, target=target, type=FlowType(data["type"]), value=data["value"])


@dataclass
class GraphData:
    nodes: List[Node] = field(default_factory=list)
    links: List[Link] = field(default_factory=list)

    def find_node(self, node_id: str) -> Optional[Node]:
        for node in self.nodes:
            if node.id == node_id:
                return node
        return None

    def find_by_ticker(self, ticker: str) -> Optional[Node]:
        for node in self.nodes:
            if node.ticker == ticker:
                return node
        return None

    def find_link(self, source_id: str, target_id: str) -> Optional[Link]:
        for link in self.links:
            if link.source == source_id and link.target == target_id:
                return link
        return None

    def node_ids(self) -> List[str]:
        return [n.id for n in self.nodes]

    def to_dict(self) -> Dict[str, Any]:
        return {
            "nodes": [n.to_dict() for n in self.nodes],
            "links": [l.to_dict() for l in self.links],
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "GraphData":
        return cls(
            nodes=[Node.from_dict(n) for n in data.get("nodes", [])],
            links=[Link.from_dict(l) for l in data.get("links", [])],
        )


@dataclass
class NewsItem:
    id: str
    timestamp: int  # epoch milliseconds
    headline: str
    impact_level: ImpactLevel
    related_tickers: List[str]
    type: NewsType

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "timestamp": self.timestamp,
            "headline": self.headline,
            "impactLevel": self.impact_level.value,
            "relatedTickers": list(self.related_tickers),
            "type": self.type.value,
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "NewsItem":
        return cls(
            id=str(data["id"]),
            timestamp=int(data["timestamp"]),
            headline=data["headline"],
            impact_level=ImpactLevel(data["impactLevel"]),
            related_tickers=list(data.get("relatedTickers", [])),
            type=NewsType(data["type"]),
        )


@dataclass
class Signal:
    id: str
    ticker: str
    action: SignalAction
    strength: SignalStrength
    reason: str
    timestamp: int  # epoch milliseconds
    related_news_id: Optional[str] = None
    model_used: Optional[ModelProvider] = None

    def to_dict(self) -> Dict[str, Any]:
        data = {
            "id": self.id,
            "ticker": self.ticker,
            "action": self.action.value,
            "strength": self.strength.value,
            "reason": self.reason,
            "timestamp": self.timestamp,
        }
        if self.related_news_id is not None:
            data["relatedNewsId"] = self.related_news_id
        if self.model_used is not None:
            data["modelUsed"] = self.model_used.value
        return data

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "Signal":
        model = data.get("modelUsed")
        return cls(
            id=str(data["id"]),
            ticker=data["ticker"],
            action=SignalAction(data["action"]),
            strength=SignalStrength(data["strength"]),
            reason=data["reason"],
            timestamp=int(data["timestamp"]),
            related_news_id=data.get("relatedNewsId"),
            model_used=ModelProvider(model) if model else None,
        )


@dataclass
class StockConnection:
    """Supply-chain relationship proposed by the LLM for a new ticker"""
    target_id: str
    type: FlowType
    direction: FlowDirection
    reason: str = ""

    def to_dict(self) -> Dict[str, Any]:
        return {
            "targetId": self.target_id,
            "type": self.type.value,
            "direction": self.direction.value,
            "reason": self.reason,
        }


@dataclass
class StockProfile:
    company_name: str
    description: str
    connections: List[StockConnection] = field(default_factory=list)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "companyName": self.company_name,
            "description": self.description,
            "connections": [c.to_dict() for c in self.connections],
        }
