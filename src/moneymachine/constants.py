"""
Seed data: the AI supply-chain capital-flow graph and news templates.
"""

import copy
from dataclasses import dataclass
from typing import List

from moneymachine.models import (
    Node, Link, GraphData, NodeGroup, FlowType, ImpactLevel, NewsType,
)

C, S, O = NodeGroup.CENTRAL, NodeGroup.SATELLITE, NodeGroup.OUTER

# Ticker used for private companies
PRIVATE_TICKER = "PVT"

INITIAL_NODES: List[Node] = [
    # The Source (Buyers/Cloud)
    Node("Microsoft", C, "MSFT", 40, 65, desc="Mega-Cap Cloud Provider"),
    Node("Google", C, "GOOGL", 35, 60, desc="Hyperscaler"),
    Node("Oracle", S, "ORCL", 25, 55, desc="Enterprise Cloud"),
    Node("Meta", C, "META", 30, 58, desc="Social/AI Giant"),
    Node("IBM", S, "IBM", 20, 50, desc="Enterprise AI"),
    Node("Salesforce", S, "CRM", 26, 58, desc="Enterprise SaaS"),

    # The Hardware (The First Flow)
    Node("Nvidia", C, "NVDA", 45, 80, desc="The King of Hardware"),
    Node("AMD", S, "AMD", 25, 55, desc="GPU Competitor"),
    Node("Intel", S, "INTC", 15, 30, desc="Legacy Chipmaker"),
    Node("TSMC", C, "TSM", 38, 70, desc="The Foundry"),
    Node("SuperMicro", S, "SMCI", 22, 45, desc="AI Servers"),
    Node("Arista", S, "ANET", 20, 60, desc="AI Networking"),
    Node("ARM", S, "ARM", 24, 62, desc="Chip Architecture"),
    Node("Broadcom", S, "AVGO", 28, 65, desc="Custom AI Silicon"),
    Node("Dell", S, "DELL", 20, 55, desc="AI Servers"),

    # The Unicorns (The Second Flow)
    Node("OpenAI", C, PRIVATE_TICKER, 35, 85, desc="LLM Leader"),
    Node("Palantir", S, "PLTR", 28, 75, desc="AI Operating System"),
    Node("CoreWeave", S, PRIVATE_TICKER, 20, 65, desc="GPU Cloud"),
    Node("Mistral", O, PRIVATE_TICKER, 15, 60, desc="European AI"),
    Node("xAI", S, PRIVATE_TICKER, 20, 70, desc="Musk AI"),
    Node("Figure AI", O, PRIVATE_TICKER, 12, 55, desc="Robotics"),
    Node("Nebius", O, "NBIS", 15, 50, desc="AI Infrastructure"),
    Node("SoundHound", O, "SOUN", 10, 48, desc="Voice AI"),
    Node("Recursion", O, "RXRX", 12, 52, desc="BioTech AI"),
    Node("Snowflake", S, "SNOW", 22, 50, desc="Data Cloud"),
    Node("Databricks", S, PRIVATE_TICKER, 20, 60, desc="Data AI"),
]

H, I, SV = FlowType.HARDWARE, FlowType.INVESTMENT, FlowType.SERVICES

INITIAL_LINKS: List[Link] = [
    # CapEx flows (hardware buying)
    Link("Microsoft", "Nvidia", H, 5),
    Link("Google", "Nvidia", H, 5),
    Link("Meta", "Nvidia", H, 5),
    Link("Oracle", "Nvidia", H, 3),
    Link("Oracle", "AMD", H, 2),
    Link("Microsoft", "AMD", H, 2),
    Link("Nvidia", "TSMC", H, 8),
    Link("AMD", "TSMC", H, 6),
    Link("SuperMicro", "Nvidia", H, 6),
    Link("Meta", "Arista", H, 4),
    Link("Microsoft", "Arista", H, 4),
    Link("Google", "Broadcom", H, 6),
    Link("Meta", "Broadcom", H, 5),
    Link("Dell", "Nvidia", H, 5),

    # Investment flows (funding)
    Link("Microsoft", "OpenAI", I, 8),
    Link("Nvidia", "CoreWeave", I, 4),
    Link("Nvidia", "SoundHound", I, 2),
    Link("Nvidia", "Recursion", I, 2),
    Link("Nvidia", "ARM", I, 3),
    Link("Microsoft", "Mistral", I, 3),
    Link("Oracle", "xAI", I, 4),
    Link("Salesforce", "Snowflake", I, 3),

    # Services flows (cloud compute)
    Link("OpenAI", "Microsoft", SV, 6),
    Link("xAI", "Oracle", SV, 4),
    Link("Mistral", "Microsoft", SV, 2),
    Link("Palantir", "Microsoft", SV, 3),
    Link("Palantir", "Google", SV, 2),
    Link("ARM", "Nvidia", SV, 5),
    Link("Snowflake", "Microsoft", SV, 3),
    Link("Databricks", "Google", SV, 3),
    Link("IBM", "Meta", SV, 2),
]


def initial_graph() -> GraphData:
    """Fresh copy of the seed graph; callers are free to mutate it."""
    return GraphData(nodes=copy.deepcopy(INITIAL_NODES), links=copy.deepcopy(INITIAL_LINKS))


@dataclass(frozen=True)
class NewsTemplate:
    headline: str
    type: NewsType
    impact: ImpactLevel
    signal: str


# Strategy keys understood by the controller
BUY_TARGET = "BUY_TARGET"
LONG_HARDWARE = "LONG_HARDWARE"
SHORT_HARDWARE = "SHORT_HARDWARE"
LONG_BOTH = "LONG_BOTH"
SHORT_SOURCE = "SHORT_SOURCE"

NEWS_TEMPLATES: List[NewsTemplate] = [
    NewsTemplate("{source} announces $2B additional investment in {target}.",
                 NewsType.INVESTMENT, ImpactLevel.HIGH, BUY_TARGET),
    NewsTemplate("{source} reports massive CapEx increase for {target} H100 chips.",
                 NewsType.CAPEX, ImpactLevel.HIGH, LONG_HARDWARE),
    NewsTemplate("{source} cuts server spending forecast by 15%.",
                 NewsType.CAPEX, ImpactLevel.MEDIUM, SHORT_HARDWARE),
    NewsTemplate("{source} signs multi-year cloud compute deal with {target}.",
                 NewsType.PARTNERSHIP, ImpactLevel.MEDIUM, LONG_BOTH),
    NewsTemplate("Insider selling detected at {source} amidst valuation concerns.",
                 NewsType.INSIDER, ImpactLevel.LOW, SHORT_SOURCE),
]
