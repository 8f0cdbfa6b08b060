"""
Unit Tests for the AI analyst provider switch

Gemini is replaced with a mock module; HTTP providers with a mocked session.
"""

import json
import pytest
import sys
import os
from types import SimpleNamespace
from unittest import mock

import requests

sys.path.insert(0, os.path.join(os.path.dirname(__file__), '..', 'src'))

from moneymachine.ai_service import AIService, parse_stock_profile, CHAT_ENDPOINTS
from moneymachine.config import MachineConfig
from moneymachine.models import (
    ModelProvider, Signal, NewsItem, SignalAction, SignalStrength, ImpactLevel, NewsType,
    FlowType, FlowDirection,
)

SIGNAL = Signal(
    id="1", ticker="NVDA", action=SignalAction.BUY, strength=SignalStrength.STRONG,
    reason="Momentum Breakout. Sentiment Score: 89/100 triggered by Microsoft news.", timestamp=0,
)
NEWS = NewsItem(
    id="2", timestamp=0, headline="Microsoft announces $2B additional investment in Nvidia.",
    impact_level=ImpactLevel.HIGH, related_tickers=["MSFT", "NVDA"], type=NewsType.INVESTMENT,
)


def config_with(**keys):
    return MachineConfig(api_keys={ModelProvider[k]: v for k, v in keys.items()})


def http_response(payload):
    response = mock.Mock()
    response.json.return_value = payload
    response.raise_for_status.return_value = None
    return response


@pytest.fixture
def genai_mock():
    with mock.patch("moneymachine.ai_service.genai") as genai:
        yield genai


class TestGemini:
    def test_missing_key(self, genai_mock):
        service = AIService(config_with())
        service.initialize(ModelProvider.GEMINI)
        assert service.gemini_client is None
        assert service.analyze_signal(SIGNAL, NEWS) == "Gemini API Key missing."
        genai_mock.configure.assert_not_called()

    def test_analysis_text(self, genai_mock):
        model = genai_mock.GenerativeModel.return_value
        model.generate_content.return_value = SimpleNamespace(text="CapEx rotation into NVDA.")

        service = AIService(config_with(GEMINI="g-key"))
        service.initialize()

        assert service.analyze_signal(SIGNAL, NEWS) == "CapEx rotation into NVDA."
        genai_mock.configure.assert_called_once_with(api_key="g-key")
        genai_mock.GenerativeModel.assert_called_once_with("gemini-2.5-flash")
        prompt = model.generate_content.call_args[0][0]
        assert "The AI Money Machine" in prompt
        assert 'News: "Microsoft announces $2B additional investment in Nvidia."' in prompt
        assert "Signal: BUY NVDA (STRONG)" in prompt

    def test_empty_text(self, genai_mock):
        genai_mock.GenerativeModel.return_value.generate_content.return_value = SimpleNamespace(text="")
        service = AIService(config_with(GEMINI="g-key"))
        service.initialize()
        assert service.analyze_signal(SIGNAL, NEWS) == "No analysis generated."

    def test_error_string(self, genai_mock):
        genai_mock.GenerativeModel.return_value.generate_content.side_effect = RuntimeError("quota")
        service = AIService(config_with(GEMINI="g-key"))
        service.initialize()
        assert service.analyze_signal(SIGNAL, NEWS) == "Error connecting to GEMINI. Check console/keys."

    def test_switching_back_builds_client(self, genai_mock):
        service = AIService(config_with(GEMINI="g-key"))
        service.initialize(ModelProvider.OPENAI)
        assert service.gemini_client is None
        service.set_provider("GEMINI")
        assert service.gemini_client is genai_mock.GenerativeModel.return_value


class TestHttpProviders:
    @pytest.mark.parametrize("provider, message", [
        (ModelProvider.OPENAI, "OpenAI API Key missing in environment."),
        (ModelProvider.ANTHROPIC, "Anthropic API Key missing in environment."),
        (ModelProvider.XAI, "xAI API Key missing in environment."),
    ])
    def test_missing_keys(self, genai_mock, provider, message):
        service = AIService(config_with())
        service.initialize(provider)
        assert service.analyze_signal(SIGNAL, NEWS) == message

    def test_openai_chat_completion(self, genai_mock):
        service = AIService(config_with(OPENAI="o-key"))
        service.initialize(ModelProvider.OPENAI)
        with mock.patch.object(service._session, "post") as post:
            post.return_value = http_response({"choices": [{"message": {"content": "Institutional accumulation."}}]})
            assert service.analyze_signal(SIGNAL, NEWS) == "Institutional accumulation."

        url = post.call_args[0][0]
        kwargs = post.call_args[1]
        assert url == CHAT_ENDPOINTS[ModelProvider.OPENAI]
        assert kwargs["headers"]["Authorization"] == "Bearer o-key"
        assert kwargs["json"]["model"] == "gpt-4"
        assert kwargs["json"]["messages"][0]["role"] == "system"

    def test_anthropic_message(self, genai_mock):
        service = AIService(config_with(ANTHROPIC="a-key"))
        service.initialize(ModelProvider.ANTHROPIC)
        with mock.patch.object(service._session, "post") as post:
            post.return_value = http_response({"content": [{"type": "text", "text": "TAM expands."}]})
            assert service.analyze_signal(SIGNAL, NEWS) == "TAM expands."

        kwargs = post.call_args[1]
        assert kwargs["headers"]["x-api-key"] == "a-key"
        assert kwargs["json"]["system"]

    def test_xai_http_error(self, genai_mock):
        service = AIService(config_with(XAI="x-key"))
        service.initialize(ModelProvider.XAI)
        with mock.patch.object(service._session, "post") as post:
            response = http_response({})
            response.raise_for_status.side_effect = requests.HTTPError("401")
            post.return_value = response
            assert service.analyze_signal(SIGNAL, NEWS) == "Error connecting to XAI. Check console/keys."
        assert post.call_args[0][0] == "https://api.x.ai/v1/chat/completions"


class TestStockConnections:
    def test_mock_profile_without_gemini(self, genai_mock):
        service = AIService(config_with(OPENAI="o-key"))
        service.initialize(ModelProvider.OPENAI)
        profile = service.find_stock_connections("ASML", ["Nvidia", "TSMC"])

        assert profile.company_name == "ASML"
        assert profile.description == "Market Data Unavailable (Gemini Key Required)"
        assert len(profile.connections) == 1
        c = profile.connections[0]
        assert (c.target_id, c.type, c.direction) == ("Nvidia", FlowType.HARDWARE, FlowDirection.OUTFLOW)

    def test_structured_completion(self, genai_mock):
        payload = {
            "companyName": "ASML Holding",
            "description": "Lithography for AI chips",
            "connections": [
                {"targetId": "TSMC", "type": "Hardware", "direction": "INFLOW", "reason": "EUV tools"},
                {"targetId": "Intel", "type": "Gossip", "direction": "INFLOW", "reason": "bad enum"},
            ],
        }
        model = genai_mock.GenerativeModel.return_value
        model.generate_content.return_value = SimpleNamespace(text="```json\n" + json.dumps(payload) + "\n```")

        service = AIService(config_with(GEMINI="g-key"))
        service.initialize(ModelProvider.ANTHROPIC)
        profile = service.find_stock_connections("ASML", ["TSMC", "Intel"])

        assert profile.company_name == "ASML Holding"
        assert [c.target_id for c in profile.connections] == ["TSMC"]
        assert profile.connections[0].direction == FlowDirection.INFLOW
        prompt = model.generate_content.call_args[0][0]
        assert "TSMC, Intel" in prompt
        genai_mock.GenerationConfig.assert_called_once()
        assert genai_mock.GenerationConfig.call_args[1]["response_mime_type"] == "application/json"

    def test_unparseable_response(self, genai_mock):
        genai_mock.GenerativeModel.return_value.generate_content.return_value = SimpleNamespace(text="not json")
        service = AIService(config_with(GEMINI="g-key"))
        service.initialize()
        profile = service.find_stock_connections("ASML", [])
        assert profile.company_name == "ASML"
        assert profile.description == "Analysis Failed"
        assert profile.connections == []

    def test_parse_defaults(self):
        profile = parse_stock_profile('{"connections": null}', "SMCI")
        assert profile.company_name == "SMCI"
        assert profile.connections == []
