"""
Prompt loader for the description generator.

Loads the product description prompts from YAML configuration.
"""

import logging
from pathlib import Path
from typing import Any, Dict, Optional

import yaml

logger = logging.getLogger(__name__)

DEFAULT_MAX_WORDS = 50


class PromptLoader:
    """Load and format description prompts from YAML."""

    def __init__(self, config_path: Optional[Path] = None):
        """
        Initialize prompt loader.

        Args:
            config_path: Path to a prompts.yaml file. Defaults to the
                file shipped next to this module.
        """
        if config_path is None:
            config_path = Path(__file__).parent / "prompts.yaml"

        self.config_path = config_path
        self.prompts = self._load_prompts()

    def _load_prompts(self) -> Dict[str, Any]:
        """Load prompts from YAML file."""
        try:
            with open(self.config_path, "r", encoding="utf-8") as f:
                prompts = yaml.safe_load(f) or {}
            logger.info("Loaded prompts from %s", self.config_path)
            return prompts
        except (OSError, yaml.YAMLError) as e:
            logger.error("Failed to load prompts: %s", e)
            return self._get_fallback_prompts()

    def _get_fallback_prompts(self) -> Dict[str, Any]:
        """Fallback prompts if YAML fails to load."""
        return {
            "product_description": {
                "system": "Eres un redactor publicitario. Responde solo con la descripción.",
                "user_template": (
                    'Escribe una descripción de venta corta, atractiva y profesional '
                    'para un producto llamado "{title}" que está en la categoría '
                    '"{category}". Usa máximo {max_words} palabras.'
                ),
                "max_words": DEFAULT_MAX_WORDS,
            },
            "fallbacks": {
                "missing_api_key": "Error: API Key de Gemini no configurada.",
                "provider_error": "Error generando descripción con IA.",
                "empty_response": "No se pudo generar la descripción.",
            },
        }

    def get_system_prompt(self) -> str:
        return self.prompts.get("product_description", {}).get("system", "")

    def get_user_prompt(self, title: str, category: str) -> str:
        """
        Generate the user prompt for one product.

        Args:
            title: Product title typed by the seller.
            category: Catalog category.

        Returns:
            Formatted user prompt
        """
        section = self.prompts.get("product_description", {})
        template = section.get("user_template", "")
        max_words = section.get("max_words", DEFAULT_MAX_WORDS)

        if not template:
            return f'Describe "{title}" ({category}) en máximo {max_words} palabras.'

        try:
            return template.format(title=title, category=category, max_words=max_words)
        except (KeyError, IndexError, ValueError) as e:
            logger.error("Failed to format prompt: %s", e)
            return f'Describe "{title}" ({category}) en máximo {max_words} palabras.'

    def get_fallback(self, key: str) -> str:
        defaults = self._get_fallback_prompts()["fallbacks"]
        return self.prompts.get("fallbacks", {}).get(key) or defaults[key]


# Global prompt loader instance
_prompt_loader = None


def get_prompt_loader() -> PromptLoader:
    """Get global prompt loader instance."""
    global _prompt_loader
    if _prompt_loader is None:
        _prompt_loader = PromptLoader()
    return _prompt_loader
