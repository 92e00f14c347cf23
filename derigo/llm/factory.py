"""
LLM Provider factory.
"""

from __future__ import annotations

from typing import Optional

from derigo.llm import LLMProvider


def get_provider(provider_name: str = "none") -> Optional[LLMProvider]:
    """Factory — returns the configured LLM provider, or None when disabled."""
    name = (provider_name or "none").strip().lower()
    if name == "none":
        return None
    if name == "gemini":
        from derigo.llm.gemini import GeminiProvider
        return GeminiProvider()
    raise ValueError(f"Unknown LLM provider: {provider_name}")
