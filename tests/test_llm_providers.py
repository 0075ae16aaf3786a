from __future__ import annotations

import sys
import types
from typing import Any, Dict, List

import pytest

from slidemap.modules.llm_provider import AnthropicProvider, LiteLLMProvider, get_provider


def _ns(**kwargs: Any) -> types.SimpleNamespace:
    return types.SimpleNamespace(**kwargs)


@pytest.fixture
def fake_anthropic(monkeypatch) -> List[Dict[str, Any]]:
    """Install a stand-in `anthropic` module that records messages.create calls."""
    calls: List[Dict[str, Any]] = []

    class Messages:
        def create(self, **kwargs: Any):
            calls.append(kwargs)
            return _ns(
                content=[_ns(text='{"slides": []}')],
                usage=_ns(input_tokens=11, output_tokens=7),
            )

    class Anthropic:
        def __init__(self, api_key: str) -> None:
            calls.append({"api_key": api_key})
            self.messages = Messages()

    module = types.ModuleType("anthropic")
    module.Anthropic = Anthropic
    monkeypatch.setitem(sys.modules, "anthropic", module)
    monkeypatch.setenv("ANTHROPIC_API_KEY", "sk-test")
    return calls


@pytest.fixture
def fake_litellm(monkeypatch) -> List[Dict[str, Any]]:
    """Install a stand-in `litellm` module that records completion calls."""
    calls: List[Dict[str, Any]] = []

    def completion(**kwargs: Any):
        calls.append(kwargs)
        return _ns(
            choices=[_ns(message=_ns(content="[]"))],
            usage=_ns(prompt_tokens=5, completion_tokens=2),
        )

    module = types.ModuleType("litellm")
    module.completion = completion
    monkeypatch.setitem(sys.modules, "litellm", module)
    return calls


def test_anthropic_json_mode_adds_instruction_and_system(fake_anthropic) -> None:
    provider = AnthropicProvider(model_id="claude-test")

    response = provider.generate("Outline please", system_prompt="You plan decks", json_mode=True)

    assert fake_anthropic[0] == {"api_key": "sk-test"}
    request = fake_anthropic[1]
    assert request["model"] == "claude-test"
    assert request["system"] == "You plan decks"
    assert request["messages"][0]["content"].startswith("Outline please")
    assert request["messages"][0]["content"].endswith("Respond with a single JSON object and nothing else.")
    assert response.content == '{"slides": []}'
    assert response.usage == {"input_tokens": 11, "output_tokens": 7}


def test_anthropic_plain_mode_leaves_prompt_alone(fake_anthropic) -> None:
    AnthropicProvider().generate("Hello", max_tokens=50)
    request = fake_anthropic[1]
    assert request["messages"] == [{"role": "user", "content": "Hello"}]
    assert request["max_tokens"] == 50
    assert "system" not in request


def test_anthropic_requires_key(monkeypatch) -> None:
    monkeypatch.delenv("ANTHROPIC_API_KEY", raising=False)
    with pytest.raises(ValueError):
        AnthropicProvider().generate("Hello")


def test_anthropic_missing_package_names_it(monkeypatch) -> None:
    monkeypatch.setenv("ANTHROPIC_API_KEY", "sk-test")
    monkeypatch.setitem(sys.modules, "anthropic", None)
    with pytest.raises(ImportError, match="anthropic"):
        AnthropicProvider().generate("Hello")


def test_litellm_json_mode_sets_response_format(fake_litellm) -> None:
    provider = LiteLLMProvider(model="command-r")

    response = provider.generate("Outline", system_prompt="Be brief", json_mode=True)

    request = fake_litellm[0]
    assert request["model"] == "command-r"
    assert request["messages"] == [
        {"role": "system", "content": "Be brief"},
        {"role": "user", "content": "Outline"},
    ]
    assert request["response_format"] == {"type": "json_object"}
    assert response.content == "[]"
    assert response.usage == {"input_tokens": 5, "output_tokens": 2}


def test_litellm_plain_mode_has_no_response_format(fake_litellm) -> None:
    LiteLLMProvider().generate("Hi")
    assert "response_format" not in fake_litellm[0]


def test_litellm_availability_follows_model_keys(fake_litellm, monkeypatch) -> None:
    monkeypatch.delenv("COHERE_API_KEY", raising=False)
    assert LiteLLMProvider(model="command-r").is_available() is False
    monkeypatch.setenv("COHERE_API_KEY", "co-test")
    assert LiteLLMProvider(model="command-r").is_available() is True


def test_get_provider_passes_model(fake_litellm) -> None:
    provider = get_provider("LiteLLM", "gpt-test")
    assert isinstance(provider, LiteLLMProvider)
    assert provider.model == "gpt-test"
