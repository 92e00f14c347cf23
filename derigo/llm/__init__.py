"""
LLM Provider — Abstract Interface

Enhanced analysis talks to a model only through LLMProvider. Concrete
providers implement `generate`; JSON decoding is shared here. Choose a
provider with DERIGO_LLM_PROVIDER ("none" keeps the engine fully local).
"""

from __future__ import annotations

import json
import re
from abc import ABC, abstractmethod
from typing import Optional

# ```json ... ``` wrappers some models put around structured output
_FENCED = re.compile(r"^```[\w-]*\s*\n?(.*?)\n?```$", re.DOTALL)


def strip_code_fence(text: str) -> str:
    cleaned = text.strip()
    match = _FENCED.match(cleaned)
    return match.group(1).strip() if match else cleaned


class LLMProvider(ABC):
    """A text-in, text-out model backend."""

    name: str = "abstract"

    @abstractmethod
    async def generate(
        self,
        prompt: str,
        system_instruction: Optional[str] = None,
        temperature: float = 0.7,
        json_mode: bool = False,
    ) -> str:
        """Raw model output for prompt. Transport errors propagate."""
        ...

    async def generate_json(
        self,
        prompt: str,
        system_instruction: Optional[str] = None,
        temperature: float = 0.2,
    ) -> dict:
        """
        Generate in JSON mode and decode the reply.

        Raises ValueError when the reply is not a JSON object, so callers
        can tell unusable output apart from a failed call.
        """
        raw = await self.generate(
            prompt,
            system_instruction=system_instruction,
            temperature=temperature,
            json_mode=True,
        )
        try:
            decoded = json.loads(strip_code_fence(raw))
        except json.JSONDecodeError as e:
            raise ValueError(f"LLM returned invalid JSON ({e}): {raw[:200]!r}") from e
        if not isinstance(decoded, dict):
            raise ValueError(f"LLM returned JSON that is not an object: {type(decoded).__name__}")
        return decoded
