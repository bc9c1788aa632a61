"""Candidate generation with an LLM. Supports Ollama (local) and OpenAI API."""

import logging
import os
from typing import Optional

import httpx
from openai import AsyncOpenAI, OpenAIError

from meadowlark.connectors.base import BaseGenerator, GenerationRequest
from meadowlark.errors import TransportError
from meadowlark.models.preferences import InvestmentPreferences

logger = logging.getLogger(__name__)

# The model is asked for 3-5; the validator accepts 2-6.
PROMPT_MIN_OPPORTUNITIES = 3
PROMPT_MAX_OPPORTUNITIES = 5

REFERENCE_REGISTRIES = (
    ("Verra Registry", "https://registry.verra.org/"),
    ("Gold Standard", "https://www.goldstandard.org/"),
    ("Conservation International", "https://www.conservation.org/"),
    ("The Nature Conservancy", "https://www.nature.org/"),
    ("World Wildlife Fund", "https://www.worldwildlife.org/"),
)


def build_generation_prompt(preferences: InvestmentPreferences) -> str:
    """Serialize preferences into the instruction and schema requirements sent to the model."""
    sdgs = ", ".join(str(s) for s in preferences.sdgs) if preferences.sdgs else "Any"
    registries = "\n".join(f"- {name}: {url}" for name, url in REFERENCE_REGISTRIES)
    count = f"{PROMPT_MIN_OPPORTUNITIES}-{PROMPT_MAX_OPPORTUNITIES}"
    return f"""You are an expert in conservation finance and sustainable investment opportunities.
Based on the following investment preferences, provide between {PROMPT_MIN_OPPORTUNITIES} to {PROMPT_MAX_OPPORTUNITIES} verified investment opportunities in valid JSON format.

Investment Preferences:
- Region: {preferences.region_name}
- SDG Goals: {sdgs}
- Risk Tolerance: {preferences.risk_tolerance}
- Investment Horizon: {preferences.investment_horizon}
- Minimum Return: {preferences.minimum_return:g}%
- Investment Amount: ${preferences.investment_amount:,.0f}

CRITICAL REQUIREMENTS - Each opportunity MUST include ALL of these fields:
1. "title": A specific, descriptive project name (REQUIRED)
2. "url": A valid, working URL to a real conservation project or registry (REQUIRED)
3. "location": Specific location name for the project (REQUIRED - e.g., "Amazon Rainforest, Brazil")
4. "description": Detailed explanation of the opportunity (REQUIRED)
5. "sdg_alignment": Which SDG goals this project aligns with (REQUIRED - e.g., "13, 15")
6. "estimated_return": Expected annual return percentage (REQUIRED - e.g., "8-12%")
7. "region": Geographic region (REQUIRED - e.g., "South America")
8. "verification_source": Source of verification or certification (REQUIRED - e.g., "Verra Registry")

Use actual websites like:
{registries}
- Or other legitimate conservation finance platforms

Return ONLY a JSON object with this exact structure (no markdown, no explanations, no extra text):
{{
  "opportunities": [
    {{
      "title": "Specific Project Name",
      "url": "https://actual-website.com/project-page",
      "location": "Specific geographic location",
      "description": "Detailed description of the investment opportunity",
      "sdg_alignment": "13, 15",
      "estimated_return": "8-12%",
      "region": "Geographic region",
      "verification_source": "Verra Registry"
    }}
  ]
}}

IMPORTANT:
- Provide {count} opportunities
- URLs must be real and working (no placeholders like example.com)
- Location should be specific enough for biodiversity and climate data lookup
- Return ONLY the JSON object, no other text"""


def build_generation_request(preferences: InvestmentPreferences) -> GenerationRequest:
    return GenerationRequest(prompt=build_generation_prompt(preferences))


class OllamaGenerator(BaseGenerator):
    """Generate with a local Ollama model. Returns the raw /api/generate body ({"response": "..."})."""

    provider_id = "ollama"

    DEFAULT_BASE_URL = "http://localhost:11434"
    DEFAULT_MODEL = "llama3.2"

    def __init__(
        self,
        model: Optional[str] = None,
        base_url: Optional[str] = None,
        client: Optional[httpx.AsyncClient] = None,
        timeout: float = 120.0,
    ):
        self.model = model or os.environ.get("MEADOWLARK_LLM_MODEL") or self.DEFAULT_MODEL
        base_url = base_url or os.environ.get("MEADOWLARK_OLLAMA_URL") or self.DEFAULT_BASE_URL
        self._base_url = base_url.rstrip("/")
        self._client = client
        self._timeout = timeout

    async def generate(self, request: GenerationRequest) -> str:
        payload = {
            "model": self.model,
            "prompt": request.prompt,
            "stream": False,
            "options": {"temperature": request.temperature, "num_predict": request.max_tokens},
        }
        url = f"{self._base_url}/api/generate"
        try:
            if self._client is not None:
                resp = await self._client.post(url, json=payload)
            else:
                async with httpx.AsyncClient(timeout=self._timeout) as client:
                    resp = await client.post(url, json=payload)
            resp.raise_for_status()
        except httpx.HTTPStatusError as e:
            raise TransportError(f"Ollama: HTTP {e.response.status_code}") from e
        except httpx.HTTPError as e:
            raise TransportError(f"Ollama query failed: {e}") from e
        logger.info("Ollama response received, length %d", len(resp.text))
        return resp.text


class OpenAIGenerator(BaseGenerator):
    """Generate with the OpenAI chat completions API. Returns the serialized completion envelope."""

    provider_id = "openai"

    DEFAULT_MODEL = "gpt-4o-mini"

    def __init__(
        self,
        model: Optional[str] = None,
        api_key: Optional[str] = None,
        client: Optional[AsyncOpenAI] = None,
    ):
        self.model = model or os.environ.get("MEADOWLARK_LLM_MODEL") or self.DEFAULT_MODEL
        if client is None:
            api_key = api_key or os.environ.get("OPENAI_API_KEY")
            if not api_key:
                raise ValueError("OPENAI_API_KEY is required for the openai provider")
            client = AsyncOpenAI(api_key=api_key)
        self._client = client

    async def generate(self, request: GenerationRequest) -> str:
        try:
            response = await self._client.chat.completions.create(
                model=self.model,
                messages=[{"role": "user", "content": request.prompt}],
                temperature=request.temperature,
                max_tokens=request.max_tokens,
            )
        except OpenAIError as e:
            raise TransportError(f"OpenAI query failed: {e}") from e
        text = response.model_dump_json()
        logger.info("OpenAI response received, length %d", len(text))
        return text
