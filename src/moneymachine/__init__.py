from moneymachine.models import (
    GraphData, Node, Link, NewsItem, Signal, ModelProvider, FlowType, NodeGroup,
)
from moneymachine.machine import MoneyMachine

__all__ = [
    "GraphData", "Node", "Link", "NewsItem", "Signal", "ModelProvider", "FlowType", "NodeGroup",
    "MoneyMachine",
]
