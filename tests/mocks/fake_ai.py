from moneymachine.models import ModelProvider, StockProfile


class FakeAI:
    """Stands in for AIService; records calls instead of reaching an LLM."""

    def __init__(self, analysis="Flow confirmed.", profile=None):
        self.provider = None
        self.analysis = analysis
        self.profile = profile or StockProfile(company_name="Test Co", description="Test", connections=[])
        self.analyze_calls = []
        self.connection_calls = []

    def initialize(self, provider=ModelProvider.GEMINI):
        self.provider = ModelProvider.parse(provider)

    def set_provider(self, provider):
        self.provider = ModelProvider.parse(provider)

    def analyze_signal(self, signal, news):
        self.analyze_calls.append((signal, news))
        return self.analysis

    def find_stock_connections(self, ticker, existing_node_ids):
        self.connection_calls.append((ticker, list(existing_node_ids)))
        return self.profile
