"""
AI Analyst Service for the AI Money Machine
Provider switch over Gemini, OpenAI, Anthropic and xAI

Implements:
- Free-text "deep analysis" of a trade signal (any provider)
- Structured JSON supply-chain discovery for a new ticker (Gemini only)

Failures never raise to the caller: they are logged and turned into the
strings the dashboard shows in place of the analysis.
"""

import json
import logging
from typing import List, Optional

import requests
import google.generativeai as genai

from moneymachine.config import MachineConfig
from moneymachine.models import (
    ModelProvider, Signal, NewsItem, StockProfile, StockConnection, FlowType, FlowDirection,
)

logger = logging.getLogger(__name__)

CHAT_ENDPOINTS = {
    ModelProvider.OPENAI: "https://api.openai.com/v1/chat/completions",
    ModelProvider.XAI: "https://api.x.ai/v1/chat/completions",
    ModelProvider.ANTHROPIC: "https://api.anthropic.com/v1/messages",
}
ANTHROPIC_VERSION = "2023-06-01"

MISSING_KEY_MESSAGES = {
    ModelProvider.GEMINI: "Gemini API Key missing.",
    ModelProvider.OPENAI: "OpenAI API Key missing in environment.",
    ModelProvider.ANTHROPIC: "Anthropic API Key missing in environment.",
    ModelProvider.XAI: "xAI API Key missing in environment.",
}

SYSTEM_PROMPT = """
  You are an expert Wall Street Quantitative Analyst for "The AI Money Machine".
  Your job is to analyze capital flows in the AI supply chain.
  Keep responses punchy, professional, and focused on "Second Order Effects" (e.g., if MSFT spends CapEx, NVDA benefits).
"""

CONNECTIONS_SCHEMA = {
    "type": "OBJECT",
    "properties": {
        "companyName": {"type": "STRING"},
        "description": {"type": "STRING"},
        "connections": {
            "type": "ARRAY",
            "items": {
                "type": "OBJECT",
                "properties": {
                    "targetId": {"type": "STRING"},
                    "type": {"type": "STRING", "format": "enum", "enum": [f.value for f in FlowType]},
                    "direction": {"type": "STRING", "format": "enum", "enum": [d.value for d in FlowDirection]},
                    "reason": {"type": "STRING"},
                },
            },
        },
    },
}


def build_signal_prompt(signal: Signal, news: NewsItem) -> str:
    return f"""
    News: "{news.headline}"
    Signal: {signal.action.value} {signal.ticker} ({signal.strength.value})
    Reasoning: {signal.reason}

    Provide a concise, 3-sentence deep-dive analysis explaining the financial mechanics of this flow.
    Why does this specific flow matter for the ticker?
  """


def build_connections_prompt(ticker: str, existing_node_ids: List[str]) -> str:
    return f"""
          Analyze the company with ticker symbol "{ticker}".
          1. Provide its full Company Name.
          2. Provide a very short description (max 5 words) relative to AI.
          3. Identify supply chain relationships with these specific companies: {', '.join(existing_node_ids)}.

          For each connection, determine the capital flow direction:
          - OUTFLOW: Money flows FROM {ticker} TO the existing company (e.g., paying for Cloud or Hardware).
          - INFLOW: Money flows FROM the existing company TO {ticker} (e.g., Investment or paying for IP/Services).

          Return the data in JSON format conforming to the schema.
          Only include strong, well-known relationships (Customer, Supplier, Investor).
      """


def strip_code_fences(text: str) -> str:
    return text.replace("```json", "").replace("```", "").strip()


def parse_stock_profile(text: str, ticker: str) -> StockProfile:
    """Parse the JSON completion; connections with unknown enums are dropped."""
    data = json.loads(strip_code_fences(text))
    connections = []
    for raw in data.get("connections") or []:
        try:
            connections.append(StockConnection(
                target_id=raw["targetId"],
                type=FlowType(raw["type"]),
                direction=FlowDirection(str(raw["direction"]).upper()),
                reason=raw.get("reason", ""),
            ))
        except (KeyError, ValueError, TypeError):
            logger.warning(f"Dropping malformed connection for {ticker}: {raw}")
    return StockProfile(
        company_name=data.get("companyName") or ticker,
        description=data.get("description") or "",
        connections=connections,
    )


class AIService:
    """
    LLM provider switch.

    Only the Gemini client is held as an object; the other providers are plain
    HTTPS chat endpoints called through a shared requests session.
    """

    def __init__(self, config: Optional[MachineConfig] = None):
        self.config = config or MachineConfig()
        self.active_provider = ModelProvider.GEMINI
        self.gemini_client = None
        self._session = requests.Session()
        self._session.headers.update({
            "Content-Type": "application/json",
            "Accept": "application/json",
        })

    def _build_gemini(self):
        api_key = self.config.api_key(ModelProvider.GEMINI)
        if not api_key:
            return None
        genai.configure(api_key=api_key)
        return genai.GenerativeModel(self.config.model_name(ModelProvider.GEMINI))

    def initialize(self, provider: ModelProvider = ModelProvider.GEMINI):
        self.active_provider = ModelProvider.parse(provider)
        if self.active_provider == ModelProvider.GEMINI:
            self.gemini_client = self._build_gemini()

    def set_provider(self, provider: ModelProvider):
        self.active_provider = ModelProvider.parse(provider)
        # Re-init if switching back to Gemini
        if self.active_provider == ModelProvider.GEMINI and self.gemini_client is None:
            self.gemini_client = self._build_gemini()
        logger.info(f"Analysis provider set to {self.active_provider.value}")

    # ------------------------------------------------------------------
    # Free-text analysis
    # ------------------------------------------------------------------

    def analyze_signal(self, signal: Signal, news: NewsItem) -> str:
        provider = self.active_provider
        prompt = build_signal_prompt(signal, news)
        try:
            if provider == ModelProvider.GEMINI:
                if self.gemini_client is None:
                    return MISSING_KEY_MESSAGES[provider]
                response = self.gemini_client.generate_content(SYSTEM_PROMPT + "\n" + prompt)
                return response.text or "No analysis generated."

            api_key = self.config.api_key(provider)
            if not api_key:
                return MISSING_KEY_MESSAGES[provider]
            if provider == ModelProvider.ANTHROPIC:
                text = self._anthropic_message(api_key, prompt)
            else:
                text = self._chat_completion(provider, api_key, prompt)
            return text or "No analysis generated."
        except Exception as e:
            logger.error(f"{provider.value} analysis error: {e}")
            return f"Error connecting to {provider.value}. Check console/keys."

    def _chat_completion(self, provider: ModelProvider, api_key: str, prompt: str) -> str:
        """OpenAI-compatible chat endpoint (OpenAI, xAI)"""
        payload = {
            "model": self.config.model_name(provider),
            "messages": [
                {"role": "system", "content": SYSTEM_PROMPT},
                {"role": "user", "content": prompt},
            ],
        }
        response = self._session.post(
            CHAT_ENDPOINTS[provider],
            json=payload,
            headers={"Authorization": f"Bearer {api_key}"},
            timeout=self.config.request_timeout,
        )
        response.raise_for_status()
        choices = response.json().get("choices") or []
        if not choices:
            return ""
        return (choices[0].get("message") or {}).get("content", "")

    def _anthropic_message(self, api_key: str, prompt: str) -> str:
        payload = {
            "model": self.config.model_name(ModelProvider.ANTHROPIC),
            "max_tokens": 512,
            "system": SYSTEM_PROMPT,
            "messages": [{"role": "user", "content": prompt}],
        }
        response = self._session.post(
            CHAT_ENDPOINTS[ModelProvider.ANTHROPIC],
            json=payload,
            headers={"x-api-key": api_key, "anthropic-version": ANTHROPIC_VERSION},
            timeout=self.config.request_timeout,
        )
        response.raise_for_status()
        blocks = response.json().get("content") or []
        return "".join(b.get("text", "") for b in blocks if b.get("type") == "text")

    # ------------------------------------------------------------------
    # Structured supply-chain discovery
    # ------------------------------------------------------------------

    def find_stock_connections(self, ticker: str, existing_node_ids: List[str]) -> StockProfile:
        # Structured output only goes through Gemini, whatever the active provider
        if self.gemini_client is None:
            self.gemini_client = self._build_gemini()
        if self.gemini_client is None:
            return StockProfile(
                company_name=ticker,
                description="Market Data Unavailable (Gemini Key Required)",
                connections=[StockConnection(
                    target_id="Nvidia",
                    type=FlowType.HARDWARE,
                    direction=FlowDirection.OUTFLOW,
                    reason="Default Sector Correlation",
                )],
            )

        try:
            response = self.gemini_client.generate_content(
                build_connections_prompt(ticker, existing_node_ids),
                generation_config=genai.GenerationConfig(
                    response_mime_type="application/json",
                    response_schema=CONNECTIONS_SCHEMA,
                ),
            )
            text = response.text
            if not text:
                raise ValueError("No response text")
            return parse_stock_profile(text, ticker)
        except Exception as e:
            logger.error(f"Connection analysis failed for {ticker}: {e}")
            return StockProfile(company_name=ticker, description="Analysis Failed", connections=[])
