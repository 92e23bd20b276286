"""Trend discovery through a web-grounded LLM call."""

from __future__ import annotations

import asyncio
from typing import Protocol

from market_pulse.config import Config
from market_pulse.generator.llm_client import LLMClient, client_from_config
from market_pulse.generator.prompts import build_trend_system_prompt, build_trend_user_prompt
from market_pulse.trends.models import Persona, TrendItem, dedupe_sources
from market_pulse.trends.parser import parse_trends
from market_pulse.utils.logger import get_logger

logger = get_logger()


class TrendSource(Protocol):
    """Anything that can turn a query into trends. Failures surface as ``[]``."""

    async def fetch(self, query: str, persona: Persona) -> list[TrendItem]: ...


class TrendFetcher:
    """Fetch trends from the configured LLM with search grounding.

    One best-effort attempt per call; any error is logged and reported as
    an empty result.
    """

    def __init__(self, config: Config, llm: LLMClient | None = None):
        self.config = config
        self._llm = llm
        self.domain = config.domain
        self.trend_count = config.generation.get("trend_count", 6)

    @property
    def llm(self) -> LLMClient:
        if self._llm is None:
            self._llm = client_from_config(self.config)
        return self._llm

    def fetch_sync(self, query: str, persona: Persona) -> list[TrendItem]:
        try:
            result = self.llm.generate(
                build_trend_system_prompt(persona),
                build_trend_user_prompt(query, persona, count=self.trend_count, domain=self.domain),
                web_search=True,
            )
            trends = parse_trends(result.text, dedupe_sources(result.sources))
        except Exception as e:
            logger.error("Error fetching trends for '%s' (%s): %s", query, persona.value, e)
            return []

        logger.info("Parsed %d trends for '%s' (%s)", len(trends), query, persona.value)
        return trends

    async def fetch(self, query: str, persona: Persona) -> list[TrendItem]:
        # SDK calls block; keep the event loop free while they run
        return await asyncio.to_thread(self.fetch_sync, query, persona)
