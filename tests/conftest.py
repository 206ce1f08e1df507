"""
Shared pytest fixtures for Article Analyzer tests.
"""

import pytest
import sys
import json
import re
import importlib.util
from pathlib import Path

from article_analysis import Settings
from article_analysis.content_fetcher import ExtractedContent

# Project root for finding the Cloud Function module
PROJECT_ROOT = Path(__file__).parent.parent

ARTICLE_URL = 'https://example.com/a'
READER_BASE_URL = 'https://r.jina.ai/'
READER_URL = READER_BASE_URL + ARTICLE_URL
# Any reader-service request
READER_PATTERN = re.compile(r'https://r\.jina\.ai/.*')
GATEWAY_URL = 'https://gateway.example.test/v1/chat/completions'


def _load_module_from_path(module_name: str, file_path: Path):
    """Load a module from a specific file path."""
    spec = importlib.util.spec_from_file_location(module_name, file_path)
    module = importlib.util.module_from_spec(spec)
    sys.modules[module_name] = module
    spec.loader.exec_module(module)
    return module


# Load the Cloud Function module under a unique name at module load time
_article_analyzer_module = _load_module_from_path(
    'article_analyzer_main',
    PROJECT_ROOT / 'article-analyzer' / 'main.py'
)


# ============================================================================
# Settings Fixtures
# ============================================================================

@pytest.fixture
def make_settings():
    """Factory for Settings wired to the gateway backend and test URLs."""
    def _make(**overrides):
        values = dict(
            gemini_api_key='test-gemini-key',
            gateway_api_key='test-gateway-key',
            model_backend='gateway',
            gateway_url=GATEWAY_URL,
            reader_base_url=READER_BASE_URL,
            log_format='text',
        )
        values.update(overrides)
        return Settings(**values)

    return _make


@pytest.fixture
def settings(make_settings):
    return make_settings()


@pytest.fixture
def gateway_env(monkeypatch):
    """Environment for the Cloud Function entry point (gateway backend)."""
    monkeypatch.setenv('MODEL_BACKEND', 'gateway')
    monkeypatch.setenv('MODEL_GATEWAY_URL', GATEWAY_URL)
    monkeypatch.setenv('MODEL_GATEWAY_API_KEY', 'test-gateway-key')
    monkeypatch.setenv('READER_BASE_URL', READER_BASE_URL)
    monkeypatch.setenv('LOG_FORMAT', 'text')
    monkeypatch.delenv('CLASSIFY_ARTICLES', raising=False)
    monkeypatch.delenv('EXTRACTION_BACKEND', raising=False)
    monkeypatch.delenv('READER_FALLBACK', raising=False)


# ============================================================================
# Content Fixtures
# ============================================================================

@pytest.fixture
def article_text():
    """Reader-service markdown for a short business article."""
    return (
        "# Company X raises $5M\n\n"
        "Company X raised $5M in a seed round led by Example Ventures. "
        "The CEO claims the product will double revenue for customers within a year. "
        "Analysts were not asked for comment. "
    ) * 3


@pytest.fixture
def extracted_content(article_text):
    return ExtractedContent(text=article_text, length=len(article_text), truncated=False, source='reader')


@pytest.fixture
def sample_article_html():
    """Raw HTML of an article page with boilerplate around the body."""
    return """
    <!DOCTYPE html>
    <html>
    <head>
        <title>Company X raises $5M | Example News</title>
        <style>body { color: red; }</style>
        <script>var tracking = "do not include";</script>
    </head>
    <body>
        <nav>Home | Business | Politics</nav>
        <article>
            <h1>Company X raises $5M</h1>
            <p>Company X raised   $5M in a seed round.</p>
            <script>console.log("inline");</script>
            <p>The CEO claims revenue will double.</p>
        </article>
        <footer>Copyright Example News</footer>
    </body>
    </html>
    """


# ============================================================================
# Model Output Fixtures
# ============================================================================

@pytest.fixture
def decision_result_json():
    """A complete decision-intelligence result as the model should return it."""
    return {
        "article_summary": "Company X raised $5M. The CEO makes strong revenue claims.",
        "risk_level": "medium",
        "credibility_check": "Single-source funding announcement with no independent analysts.",
        "decision_impact_analysis": [
            {
                "claim": "The product will double revenue within a year",
                "domain": "Finance",
                "implied_action": "Buy the product to grow revenue",
                "predicted_consequence": "Budget spent on unproven returns",
                "recommendation": "Ask for audited customer case studies",
            }
        ],
        "integrity_analysis": {
            "promotional_score": 72,
            "intent": "Commercial",
            "logical_fallacies": ["Appeal to authority"],
            "conflict_of_interest_warning": "Quotes come only from the company",
        },
        "entities_and_funding": [
            {"name": "Company X", "role": "Subject", "background_check": "Seed-stage startup"},
            {"name": "Example Ventures", "role": "Investor", "background_check": "Lead investor"},
        ],
        "missing_perspectives": ["Customers", "Independent analysts"],
    }


@pytest.fixture
def political_result_json():
    """A complete political result as the model should return it."""
    return {
        "article_type": "political",
        "article_summary": "The senator announced a new tax bill.",
        "risk_level": "high",
        "political_bias_score": 35,
        "writing_style_score": 40,
        "claims": ["The bill cuts taxes for 90% of households"],
        "tone": "Persuasive",
        "bias": "Favors the bill's sponsors",
        "political_slant": "Center-left framing",
        "source_influence": "Relies on the sponsor's press office",
        "possible_negative_consequences": ["Readers may overestimate the savings"],
        "suggested_actions": ["Check the CBO score"],
    }


@pytest.fixture
def gateway_completion():
    """Factory for an OpenAI-compatible chat/completions response body."""
    def _make(content):
        return {
            "id": "chatcmpl-test",
            "object": "chat.completion",
            "choices": [
                {"index": 0, "message": {"role": "assistant", "content": content}, "finish_reason": "stop"}
            ],
        }

    return _make


@pytest.fixture
def fenced(decision_result_json):
    """Decision result wrapped in a ```json fence, the way models often reply."""
    return "```json\n" + json.dumps(decision_result_json, indent=2) + "\n```"


# ============================================================================
# HTTP Entry Point Fixtures
# ============================================================================

@pytest.fixture
def mock_flask_request():
    """Factory for creating mock Flask request objects."""
    class MockRequest:
        def __init__(self, json_data=None, method='POST'):
            self._json = json_data
            self.method = method
            self.data = b''

        def get_json(self, force=False, silent=False):
            return self._json

    return MockRequest


@pytest.fixture
def analyze_article():
    """Returns main entry point from article-analyzer."""
    return _article_analyzer_module.analyze_article
