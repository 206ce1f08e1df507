"""
Configuration for the article analysis function.

All settings are read from environment variables (Cloud Function runtime
variables / secrets) with sensible defaults.

Environment Variables:
    Credentials:
        GEMINI_API_KEY: Google Gemini API key (GOOGLE_API_KEY is accepted too)
        MODEL_GATEWAY_API_KEY: Bearer key for the OpenAI-compatible gateway

    Model:
        MODEL_BACKEND: 'gemini' (direct provider) or 'gateway'
        MODEL_NAME: Model identifier sent to the backend
        MODEL_TEMPERATURE: Sampling temperature (kept low for structured output)
        MODEL_JSON_MODE: Ask the provider for application/json output
        MODEL_ENABLE_SEARCH: Enable search/retrieval augmentation (gemini-1.5 models only)
        MODEL_GATEWAY_URL: Full chat/completions URL for the gateway backend

    Extraction:
        EXTRACTION_BACKEND: 'reader' (reader service) or 'raw' (direct fetch)
        READER_FALLBACK: With the reader backend, fall back to a direct fetch
            when the reader service fails (off: a reader failure is a 502)
        READER_BASE_URL: Reader service prefix; the article URL is appended
        MAX_CONTENT_CHARS: Truncation limit for extracted text
        MIN_CONTENT_CHARS: Below this a warning is logged
        FETCH_TIMEOUT_SECONDS: Per-request timeout for content fetches

    Pipeline:
        REQUEST_DEADLINE_SECONDS: Wall-clock budget for one analysis
        CLASSIFY_ARTICLES: Run the classification step before prompting

    Logging:
        LOG_LEVEL: DEBUG, INFO, WARNING, ERROR, CRITICAL
        LOG_FORMAT: 'json' (Cloud Logging) or 'text'
"""

import os
from dataclasses import dataclass
from typing import Optional

from .errors import ConfigError

DEFAULT_READER_BASE_URL = 'https://r.jina.ai/'
DEFAULT_MODEL_NAME = 'gemini-2.0-flash'

MODEL_BACKENDS = ('gemini', 'gateway')
EXTRACTION_BACKENDS = ('reader', 'raw')

# google_search_retrieval is only served for these model families
SEARCH_MODEL_PREFIXES = ('gemini-1.5',)


def _env(key: str, default: str = '') -> str:
    return os.environ.get(key, default)


def _env_int(key: str, default: int) -> int:
    """Integer env var. Raises ConfigError if set but not an integer."""
    val = os.environ.get(key)
    if not val:
        return default
    try:
        return int(val)
    except ValueError:
        raise ConfigError(f"Invalid integer value for {key}: '{val}'")


def _env_float(key: str, default: float) -> float:
    """Float env var. Raises ConfigError if set but not a number."""
    val = os.environ.get(key)
    if not val:
        return default
    try:
        return float(val)
    except ValueError:
        raise ConfigError(f"Invalid float value for {key}: '{val}'")


def _env_bool(key: str, default: bool = False) -> bool:
    """Boolean env var. Unrecognized values fall back to default."""
    val = os.environ.get(key, '').lower()
    if val in ('1', 'true', 'yes', 'on'):
        return True
    if val in ('0', 'false', 'no', 'off'):
        return False
    return default


@dataclass(frozen=True)
class Settings:
    """Settings for one function instance.

    Use Settings.load() to build from the environment. Tests construct it
    directly with keyword overrides.
    """

    # Credentials
    gemini_api_key: str = ''
    gateway_api_key: str = ''

    # Model
    model_backend: str = 'gemini'
    model_name: str = DEFAULT_MODEL_NAME
    temperature: float = 0.3
    json_mode: bool = True
    enable_search: bool = False
    gateway_url: str = ''

    # Extraction
    extraction_backend: str = 'reader'
    reader_base_url: str = DEFAULT_READER_BASE_URL
    reader_fallback: bool = False
    max_content_chars: int = 30000
    min_content_chars: int = 200
    fetch_timeout_seconds: float = 30.0

    # Pipeline
    request_deadline_seconds: float = 60.0
    classify_articles: bool = False

    # Logging
    log_level: str = 'INFO'
    log_format: str = 'json'

    @classmethod
    def load(cls) -> 'Settings':
        """Load settings from environment variables."""
        return cls(
            gemini_api_key=_env('GEMINI_API_KEY') or _env('GOOGLE_API_KEY'),
            gateway_api_key=_env('MODEL_GATEWAY_API_KEY'),
            model_backend=_env('MODEL_BACKEND', 'gemini').lower(),
            model_name=_env('MODEL_NAME', DEFAULT_MODEL_NAME),
            temperature=_env_float('MODEL_TEMPERATURE', 0.3),
            json_mode=_env_bool('MODEL_JSON_MODE', True),
            enable_search=_env_bool('MODEL_ENABLE_SEARCH', False),
            gateway_url=_env('MODEL_GATEWAY_URL'),
            extraction_backend=_env('EXTRACTION_BACKEND', 'reader').lower(),
            reader_base_url=_env('READER_BASE_URL', DEFAULT_READER_BASE_URL),
            reader_fallback=_env_bool('READER_FALLBACK', False),
            max_content_chars=_env_int('MAX_CONTENT_CHARS', 30000),
            min_content_chars=_env_int('MIN_CONTENT_CHARS', 200),
            fetch_timeout_seconds=_env_float('FETCH_TIMEOUT_SECONDS', 30.0),
            request_deadline_seconds=_env_float('REQUEST_DEADLINE_SECONDS', 60.0),
            classify_articles=_env_bool('CLASSIFY_ARTICLES', False),
            log_level=_env('LOG_LEVEL', 'INFO').upper(),
            log_format=_env('LOG_FORMAT', 'json').lower(),
        )

    @property
    def model_api_key(self) -> str:
        """Credential for the selected model backend."""
        if self.model_backend == 'gateway':
            return self.gateway_api_key
        return self.gemini_api_key

    def validate(self) -> Optional[str]:
        """
        Check settings for invalid values.

        Credentials are not checked here; a missing key is reported when the
        model client is built so that input errors still come first.

        Returns:
            Error message string if invalid, None if valid.
        """
        if self.model_backend not in MODEL_BACKENDS:
            return f"Invalid MODEL_BACKEND '{self.model_backend}' - must be one of {', '.join(MODEL_BACKENDS)}"
        if self.extraction_backend not in EXTRACTION_BACKENDS:
            return f"Invalid EXTRACTION_BACKEND '{self.extraction_backend}' - must be one of {', '.join(EXTRACTION_BACKENDS)}"
        if self.model_backend == 'gateway' and not self.gateway_url:
            return 'MODEL_GATEWAY_URL is required when MODEL_BACKEND is gateway'
        if (self.enable_search and self.model_backend == 'gemini'
                and not self.model_name.startswith(SEARCH_MODEL_PREFIXES)):
            return (
                f"MODEL_ENABLE_SEARCH is not supported for model '{self.model_name}' - "
                f"use one of: {', '.join(p + '*' for p in SEARCH_MODEL_PREFIXES)}"
            )
        if not 0 <= self.temperature <= 2:
            return 'MODEL_TEMPERATURE must be between 0 and 2'
        if self.max_content_chars <= 0:
            return 'MAX_CONTENT_CHARS must be positive'
        if self.min_content_chars < 0:
            return 'MIN_CONTENT_CHARS must be non-negative'
        if self.fetch_timeout_seconds <= 0:
            return 'FETCH_TIMEOUT_SECONDS must be positive'
        if self.request_deadline_seconds <= 0:
            return 'REQUEST_DEADLINE_SECONDS must be positive'
        if self.log_level not in ('DEBUG', 'INFO', 'WARNING', 'ERROR', 'CRITICAL'):
            return f"Invalid LOG_LEVEL '{self.log_level}'"
        if self.log_format not in ('text', 'json'):
            return f"Invalid LOG_FORMAT '{self.log_format}' - must be 'text' or 'json'"
        return None
