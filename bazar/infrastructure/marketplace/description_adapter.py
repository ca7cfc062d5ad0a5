"""
Adapter: Gemini product descriptions through LiteLLM.

Implements DescriptionGeneratorPort. Provider errors never reach the
caller: every failure path returns one of the fallback texts from
prompts.yaml so the seller form always gets something to show.
"""

import logging
from typing import Optional

import litellm

from bazar.domain.marketplace.ports import DescriptionGeneratorPort
from bazar.infrastructure.marketplace.prompt_loader import PromptLoader, get_prompt_loader

logger = logging.getLogger(__name__)


class GeminiDescriptionAdapter(DescriptionGeneratorPort):
    """Generate product descriptions with a LiteLLM-routed model.

    Args:
        api_key: Gemini API key. Empty means not configured.
        model: LiteLLM model identifier.
        temperature: Sampling temperature.
        max_tokens: Completion token cap.
        prompt_loader: Prompt source; defaults to the shared loader.
    """

    def __init__(
        self,
        api_key: str,
        model: str = "gemini/gemini-2.5-flash",
        temperature: float = 0.7,
        max_tokens: int = 200,
        prompt_loader: Optional[PromptLoader] = None,
    ) -> None:
        self._api_key = api_key
        self._model = model
        self._temperature = temperature
        self._max_tokens = max_tokens
        self._prompts = prompt_loader or get_prompt_loader()

    async def generate(self, title: str, category: str) -> str:
        if not self._api_key:
            logger.warning("Description requested but no Gemini API key is configured")
            return self._prompts.get_fallback("missing_api_key")

        try:
            response = await litellm.acompletion(
                model=self._model,
                messages=[
                    {"role": "system", "content": self._prompts.get_system_prompt()},
                    {
                        "role": "user",
                        "content": self._prompts.get_user_prompt(title, category),
                    },
                ],
                api_key=self._api_key,
                temperature=self._temperature,
                max_tokens=self._max_tokens,
            )
            text = response.choices[0].message.content or ""
        except Exception as e:
            logger.error("Description generation failed: %s", e)
            return self._prompts.get_fallback("provider_error")

        text = text.strip()
        if not text:
            return self._prompts.get_fallback("empty_response")
        return text
