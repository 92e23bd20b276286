"""Prompt templates for trend discovery and social post drafting."""

from __future__ import annotations

from market_pulse.trends.models import Persona, SocialPlatform, TrendCategory, TrendItem


TREND_SYSTEM_PROMPT = """\
You are an expert marketing consultant advising a {persona}.
Your explanation (Summary) and advice (Actionable Tip) MUST be highly relevant to their specific goals.

{persona_focus}"""


PERSONA_FOCUS = {
    Persona.SMALL_BUSINESS: "Focus on budget-friendly, high-ROI, do-it-yourself tactics.",
    Persona.AGENCY: "Focus on how to sell this as a service or upsell clients.",
    Persona.CREATOR: "Focus on engagement, virality, and community building.",
    Persona.CMO: "Focus on scalability, brand safety, and market leadership.",
    Persona.GENERAL: "Keep it simple and educational.",
}


TREND_USER_PROMPT = """\
Search for the latest {domain} trends related to "{topic}".
Identify {count} distinct trends.

Format each trend EXACTLY like this:
Title: [Catchy, simple title]
Category: [Simple Topic Name]
Impact: [Number 1-100 representing how big this deal is]
Sentiment: [Positive/Neutral/Mixed]
Summary: [Concise explanation tailored specifically for a {persona}]
Actionable Tip: [One strategic move a {persona} should make regarding this]
---"""


SOCIAL_SYSTEM_PROMPT = "Act as an expert social media manager."


SOCIAL_USER_PROMPT = """\
Write a post for {platform} based on this {domain} trend:

Title: {title}
Summary: {summary}
Actionable Tip: {advice}

Style Guide: {style_guide}

Only return the content of the post/script. Do not include introductory text like "Here is the post"."""


STYLE_GUIDES = {
    SocialPlatform.LINKEDIN: (
        "Professional, insightful, structured with bullet points. Focus on business impact. "
        "Add 3-5 relevant hashtags at the end."
    ),
    SocialPlatform.TWITTER: (
        "Short, punchy, engaging. Under 280 characters if possible, or a short thread hook. "
        "Use emojis and 2 hashtags."
    ),
    SocialPlatform.NEWSLETTER: (
        "Conversational, 'Hey there' tone, educational, value-first. Explain why this matters to the reader."
    ),
    SocialPlatform.TIKTOK: (
        "Video Script format. HOOK: (Visual + Audio), BODY: (Explanation), CTA: (What to comment). "
        "energetic tone."
    ),
}


def build_trend_query(category: TrendCategory, domain: str = "Digital Marketing") -> str:
    """Search query for a network category."""
    if category == TrendCategory.ALL:
        return f"{domain} Trends"
    return f"{domain} Trends for {category.value}"


def build_trend_system_prompt(persona: Persona) -> str:
    return TREND_SYSTEM_PROMPT.format(
        persona=persona.value,
        persona_focus=PERSONA_FOCUS[persona],
    )


def build_trend_user_prompt(
    topic: str,
    persona: Persona,
    count: int = 6,
    domain: str = "Digital Marketing",
) -> str:
    return TREND_USER_PROMPT.format(domain=domain, topic=topic, count=count, persona=persona.value)


def build_social_prompt(trend: TrendItem, platform: SocialPlatform, domain: str = "digital marketing") -> str:
    return SOCIAL_USER_PROMPT.format(
        platform=platform.value,
        domain=domain.lower(),
        title=trend.title,
        summary=trend.summary,
        advice=trend.advice,
        style_guide=STYLE_GUIDES[platform],
    )
