# File: tests/test_block_detector.py
import pytest

from listing_scout.config import DEFAULT_BLOCK_INDICATORS
from listing_scout.crawler.models import BlockVerdict, RawPage
from listing_scout.parser.block_detector import classify, detect_block_reason


def page(content: str) -> RawPage:
    return RawPage(content=content, status_code=200, source_url="https://cars.example.com/listings/")


@pytest.mark.parametrize(
    "content",
    [
        "<html><head><title>Access Denied</title></head><body></body></html>",
        "<html><body><div class='g-recaptcha'>Please solve the CAPTCHA</div></body></html>",
        "<html><head><title>Just a moment...</title></head><body>Checking your browser</body></html>",
        "<html><body>Pardon   Our\nInterruption</body></html>",
    ],
)
def test_block_pages_are_blocked(content):
    assert classify(page(content), DEFAULT_BLOCK_INDICATORS) is BlockVerdict.BLOCKED


def test_regular_results_page_is_clean(next_data_html):
    html = next_data_html(["1G1ZD5ST0JF000001"])
    assert classify(page(html), DEFAULT_BLOCK_INDICATORS) is BlockVerdict.CLEAN


def test_title_match_reported_first():
    reason = detect_block_reason(page("<title>Robot Check</title><p>robot check</p>"), ["robot check"])
    assert reason == "Title contains: robot check"


def test_custom_indicators_only():
    content = "<html><body>captcha</body></html>"
    assert classify(page(content), ["forbidden"]) is BlockVerdict.CLEAN
    assert classify(page(content), []) is BlockVerdict.CLEAN


def test_empty_content_is_clean():
    assert classify(page(""), DEFAULT_BLOCK_INDICATORS) is BlockVerdict.CLEAN
