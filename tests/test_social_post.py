"""Tests for social post drafting."""

from unittest.mock import MagicMock

from conftest import make_trend

from market_pulse.config import Config
from market_pulse.generator.llm_client import GenerationResult
from market_pulse.generator.social_post import EMPTY_RESULT_MESSAGE, ERROR_MESSAGE, SocialPostGenerator
from market_pulse.trends.models import SocialPlatform


def _result(text: str) -> GenerationResult:
    return GenerationResult(text=text, model="m", input_tokens=1, output_tokens=1, total_tokens=2, estimated_cost=0.0)


def _generator(llm) -> SocialPostGenerator:
    return SocialPostGenerator(Config.load("/nonexistent/config.yaml"), llm=llm)


def test_generate_returns_model_text():
    """The drafted post is the stripped model text."""
    llm = MagicMock()
    llm.generate.return_value = _result("  Big news for marketers! #SEO  ")
    trend = make_trend("AI Overviews", advice="Answer questions")

    post = _generator(llm).generate(trend, SocialPlatform.TWITTER)

    assert post == "Big news for marketers! #SEO"
    user_prompt = llm.generate.call_args[0][1]
    assert "Twitter" in user_prompt
    assert "AI Overviews" in user_prompt
    assert "Answer questions" in user_prompt
    assert "280 characters" in user_prompt


def test_each_platform_has_its_style_guide():
    """Each platform's prompt uses its own style guide."""
    llm = MagicMock()
    llm.generate.return_value = _result("ok")
    gen = _generator(llm)
    gen.generate(make_trend(), SocialPlatform.TIKTOK)
    assert "HOOK" in llm.generate.call_args[0][1]
    gen.generate(make_trend(), SocialPlatform.NEWSLETTER)
    assert "Hey there" in llm.generate.call_args[0][1]


def test_empty_text_message():
    """Empty model output gives the fallback message."""
    llm = MagicMock()
    llm.generate.return_value = _result("")
    assert _generator(llm).generate(make_trend(), SocialPlatform.LINKEDIN) == EMPTY_RESULT_MESSAGE


def test_error_message_and_single_attempt():
    """Errors give the error message after one attempt."""
    llm = MagicMock()
    llm.generate.side_effect = ConnectionError("offline")
    assert _generator(llm).generate(make_trend(), SocialPlatform.LINKEDIN) == ERROR_MESSAGE
    assert llm.generate.call_count == 1
