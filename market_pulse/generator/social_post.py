"""Turn a trend into a platform-specific social media draft."""

from __future__ import annotations

from market_pulse.config import Config
from market_pulse.generator.llm_client import LLMClient, client_from_config
from market_pulse.generator.prompts import SOCIAL_SYSTEM_PROMPT, build_social_prompt
from market_pulse.trends.models import SocialPlatform, TrendItem
from market_pulse.utils.logger import get_logger

logger = get_logger()

EMPTY_RESULT_MESSAGE = "Could not generate content. Please try again."
ERROR_MESSAGE = "Error generating content. Please check your connection."


class SocialPostGenerator:
    """Stateless, single-shot post drafting."""

    def __init__(self, config: Config, llm: LLMClient | None = None):
        self.config = config
        self._llm = llm

    @property
    def llm(self) -> LLMClient:
        if self._llm is None:
            self._llm = client_from_config(self.config)
        return self._llm

    def generate(self, trend: TrendItem, platform: SocialPlatform) -> str:
        try:
            result = self.llm.generate(
                SOCIAL_SYSTEM_PROMPT,
                build_social_prompt(trend, platform, domain=self.config.domain),
            )
        except Exception as e:
            logger.error("Error generating %s post for %s: %s", platform.value, trend.id, e)
            return ERROR_MESSAGE

        text = (result.text or "").strip()
        if not text:
            logger.warning("Empty %s post for %s", platform.value, trend.id)
            return EMPTY_RESULT_MESSAGE
        logger.info("Generated %s post (%d chars) for '%s'", platform.value, len(text), trend.title)
        return text
