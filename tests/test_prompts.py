"""Tests for prompt templates."""

from conftest import make_trend

from market_pulse.generator.prompts import (
    PERSONA_FOCUS,
    STYLE_GUIDES,
    build_social_prompt,
    build_trend_query,
    build_trend_system_prompt,
    build_trend_user_prompt,
)
from market_pulse.trends.models import Persona, SocialPlatform, TrendCategory


def test_trend_query_for_all():
    """The All query is the domain alone."""
    assert build_trend_query(TrendCategory.ALL) == "Digital Marketing Trends"


def test_trend_query_for_topic():
    """Topic queries name the category."""
    assert build_trend_query(TrendCategory.CONTENT) == "Digital Marketing Trends for Content Strategy"
    assert build_trend_query(TrendCategory.SEO, domain="Growth") == "Growth Trends for SEO"


def test_every_persona_has_focus():
    """Every persona has a focus line."""
    assert set(PERSONA_FOCUS) == set(Persona)


def test_trend_system_prompt_persona():
    """The system prompt targets the persona."""
    prompt = build_trend_system_prompt(Persona.CREATOR)
    assert "Content Creator" in prompt
    assert "virality" in prompt


def test_trend_user_prompt_format_instructions():
    """The user prompt spells out the entry format."""
    prompt = build_trend_user_prompt("Digital Marketing Trends", Persona.CMO, count=4)
    assert "Identify 4 distinct trends" in prompt
    assert "Actionable Tip:" in prompt
    assert "Enterprise CMO" in prompt
    assert prompt.rstrip().endswith("---")


def test_every_platform_has_style_guide():
    """Every platform has a style guide."""
    assert set(STYLE_GUIDES) == set(SocialPlatform)


def test_social_prompt_includes_trend():
    """The social prompt carries the trend details."""
    trend = make_trend("Retail media", summary="Retailers sell ads", advice="Test one network")
    prompt = build_social_prompt(trend, SocialPlatform.LINKEDIN)
    assert "Write a post for LinkedIn" in prompt
    assert "Retail media" in prompt
    assert "Retailers sell ads" in prompt
    assert "Test one network" in prompt
    assert "hashtags" in prompt
    assert "digital marketing trend" in prompt
