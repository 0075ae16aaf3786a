"""
LLM Provider Module

Provides a unified text-generation interface for the outline and
content-map generators:
- Cohere (chat REST API, default)
- Anthropic (Claude)
- LiteLLM (unified interface for 100+ providers)

API keys are read from the environment; `config.load_env_file()` fills it
from the project's .env file.
"""

import os
import logging
from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from typing import Optional, Dict, Any

import requests

logger = logging.getLogger(__name__)


@dataclass
class LLMResponse:
    """Standardized response from any LLM provider."""
    content: str
    model: str
    provider: str
    usage: Dict[str, int] = field(default_factory=dict)
    raw_response: Any = None


class BaseLLMProvider(ABC):
    """Abstract base class for LLM providers."""

    name = "base"

    @abstractmethod
    def generate(
        self,
        prompt: str,
        system_prompt: Optional[str] = None,
        max_tokens: int = 1500,
        temperature: float = 0.7,
        json_mode: bool = False
    ) -> LLMResponse:
        """Generate a response from the LLM."""
        pass

    @abstractmethod
    def is_available(self) -> bool:
        """Check if the provider is properly configured."""
        pass


class CohereProvider(BaseLLMProvider):
    """Cohere chat API over plain HTTP."""

    name = "cohere"
    API_URL = "https://api.cohere.ai/v1/chat"

    def __init__(
        self,
        model_id: str = "command-r",
        timeout: float = 60.0,
        session: Optional[requests.Session] = None
    ):
        self.model_id = model_id
        self.timeout = timeout
        self.api_key = os.environ.get("COHERE_API_KEY")
        self.session = session or requests.Session()

    def is_available(self) -> bool:
        """Check if Cohere API key is configured."""
        return bool(self.api_key)

    def generate(
        self,
        prompt: str,
        system_prompt: Optional[str] = None,
        max_tokens: int = 1500,
        temperature: float = 0.7,
        json_mode: bool = False
    ) -> LLMResponse:
        """Generate a response using Cohere chat."""
        if not self.is_available():
            raise ValueError("COHERE_API_KEY not set in .env file")

        payload: Dict[str, Any] = {
            "model": self.model_id,
            "message": prompt,
            "max_tokens": max_tokens,
            "temperature": temperature,
        }
        if system_prompt:
            payload["preamble"] = system_prompt
        if json_mode:
            payload["response_format"] = {"type": "json_object"}

        response = self.session.post(
            self.API_URL,
            headers={
                "Authorization": f"Bearer {self.api_key}",
                "Content-Type": "application/json",
            },
            json=payload,
            timeout=self.timeout,
        )
        response.raise_for_status()
        data = response.json()

        text = data.get("text")
        if not isinstance(text, str):
            text = data.get("message") if isinstance(data.get("message"), str) else ""

        billed = (data.get("meta") or {}).get("billed_units") or {}
        return LLMResponse(
            content=text,
            model=self.model_id,
            provider=self.name,
            usage={
                "input_tokens": int(billed.get("input_tokens", 0)),
                "output_tokens": int(billed.get("output_tokens", 0)),
            },
            raw_response=data
        )


class AnthropicProvider(BaseLLMProvider):
    """Anthropic Claude provider."""

    name = "anthropic"

    def __init__(self, model_id: str = "claude-sonnet-4-5"):
        self.model_id = model_id
        self.api_key = os.environ.get("ANTHROPIC_API_KEY")
        self._client = None

    def _get_client(self):
        """Lazy initialization of Anthropic client."""
        if self._client is None:
            try:
                import anthropic
                self._client = anthropic.Anthropic(api_key=self.api_key)
            except ImportError:
                raise ImportError("anthropic package not installed. Run: pip install anthropic")
        return self._client

    def is_available(self) -> bool:
        """Check if Anthropic API key is configured."""
        return bool(self.api_key)

    def generate(
        self,
        prompt: str,
        system_prompt: Optional[str] = None,
        max_tokens: int = 1500,
        temperature: float = 0.7,
        json_mode: bool = False
    ) -> LLMResponse:
        """Generate a response using Claude."""
        if not self.is_available():
            raise ValueError("ANTHROPIC_API_KEY not set in .env file")

        client = self._get_client()

        if json_mode:
            prompt = f"{prompt}\n\nRespond with a single JSON object and nothing else."

        kwargs = {
            "model": self.model_id,
            "max_tokens": max_tokens,
            "messages": [{"role": "user", "content": prompt}]
        }

        if system_prompt:
            kwargs["system"] = system_prompt

        if temperature is not None:
            kwargs["temperature"] = temperature

        response = client.messages.create(**kwargs)

        return LLMResponse(
            content=response.content[0].text,
            model=self.model_id,
            provider=self.name,
            usage={
                "input_tokens": response.usage.input_tokens,
                "output_tokens": response.usage.output_tokens
            },
            raw_response=response
        )


class LiteLLMProvider(BaseLLMProvider):
    """LiteLLM unified provider: any model string LiteLLM understands."""

    name = "litellm"

    def __init__(self, model: str = "claude-3-5-sonnet-20241022"):
        self.model = model
        self._initialized = False

    def _ensure_initialized(self):
        """Lazy initialization of LiteLLM."""
        if not self._initialized:
            try:
                import litellm
                litellm.set_verbose = False
                self._initialized = True
            except ImportError:
                raise ImportError(
                    "litellm package not installed. Run: pip install litellm"
                )

    def is_available(self) -> bool:
        """Check if the model's provider is configured."""
        try:
            self._ensure_initialized()
        except ImportError:
            return False
        model_lower = self.model.lower()
        if "claude" in model_lower or "anthropic" in model_lower:
            return bool(os.environ.get("ANTHROPIC_API_KEY"))
        elif "gpt" in model_lower:
            return bool(os.environ.get("OPENAI_API_KEY"))
        elif "command" in model_lower or "cohere" in model_lower:
            return bool(os.environ.get("COHERE_API_KEY"))
        return True

    def generate(
        self,
        prompt: str,
        system_prompt: Optional[str] = None,
        max_tokens: int = 1500,
        temperature: float = 0.7,
        json_mode: bool = False
    ) -> LLMResponse:
        """Generate a response using LiteLLM."""
        self._ensure_initialized()
        import litellm

        messages = []
        if system_prompt:
            messages.append({"role": "system", "content": system_prompt})
        messages.append({"role": "user", "content": prompt})

        kwargs: Dict[str, Any] = {}
        if json_mode:
            kwargs["response_format"] = {"type": "json_object"}

        response = litellm.completion(
            model=self.model,
            messages=messages,
            max_tokens=max_tokens,
            temperature=temperature,
            **kwargs
        )

        return LLMResponse(
            content=response.choices[0].message.content,
            model=self.model,
            provider=self.name,
            usage={
                "input_tokens": response.usage.prompt_tokens,
                "output_tokens": response.usage.completion_tokens
            },
            raw_response=response
        )


PROVIDERS = {
    CohereProvider.name: CohereProvider,
    AnthropicProvider.name: AnthropicProvider,
    LiteLLMProvider.name: LiteLLMProvider,
}


def get_provider(name: str = "cohere", model: Optional[str] = None) -> BaseLLMProvider:
    """
    Build a provider by name.

    Args:
        name: One of PROVIDERS
        model: Optional model id passed to the provider

    Raises:
        ValueError: for an unknown provider name
    """
    try:
        provider_cls = PROVIDERS[name.lower()]
    except KeyError:
        raise ValueError(f"Unknown LLM provider '{name}'. Available: {', '.join(PROVIDERS)}")

    provider = provider_cls(model) if model else provider_cls()
    if not provider.is_available():
        logger.warning(f"LLM provider '{name}' is not configured (missing API key or package)")
    return provider
