"""
LLM clients.

Backends:
- gemini:  Google Gemini through google-generativeai (direct provider)
- gateway: any OpenAI-compatible chat/completions endpoint over HTTP

Both return the raw text of the first candidate/choice. The text is
*supposed* to be JSON; repairing it is the caller's job. No retries here:
rate limits and quota errors are surfaced as distinct ModelError kinds so
the caller can show a specific message.
"""

import logging
from typing import Optional

import google.generativeai as genai
import requests
from google.api_core import exceptions as google_exceptions

from .config import Settings
from .errors import ConfigError, DeadlineError, ModelError

logger = logging.getLogger(__name__)

JSON_MIME_TYPE = 'application/json'


def kind_for_status(status_code: Optional[int]) -> str:
    """Map an upstream HTTP status to a ModelError kind."""
    if status_code == 429:
        return 'rate_limited'
    if status_code == 402:
        return 'quota_exhausted'
    if status_code in (401, 403):
        return 'auth_missing'
    return 'http_error'


class ModelClient:
    """Interface for completion backends."""

    def __init__(self, settings: Settings):
        self.settings = settings

    def complete(self, prompt: str, timeout: Optional[float] = None) -> str:
        raise NotImplementedError

    def close(self) -> None:
        """Release any connections held by the client."""


class GeminiModelClient(ModelClient):
    """Direct Gemini API client."""

    def __init__(self, settings: Settings):
        super().__init__(settings)
        if not settings.gemini_api_key:
            raise ConfigError('GEMINI_API_KEY is not configured')

        genai.configure(api_key=settings.gemini_api_key)

        generation_config = {'temperature': settings.temperature}
        tools = None
        if settings.enable_search:
            # Search grounding and a forced JSON mime type cannot be combined;
            # Settings.validate() limits search to the models that serve this tool
            tools = 'google_search_retrieval'
        elif settings.json_mode:
            generation_config['response_mime_type'] = JSON_MIME_TYPE

        self.model = genai.GenerativeModel(
            settings.model_name,
            generation_config=generation_config,
            tools=tools,
        )

    def complete(self, prompt: str, timeout: Optional[float] = None) -> str:
        request_options = {'timeout': timeout} if timeout else None

        try:
            response = self.model.generate_content(prompt, request_options=request_options)
        except google_exceptions.DeadlineExceeded:
            raise DeadlineError('Gemini call exceeded the request deadline', stage='model')
        except google_exceptions.GoogleAPICallError as e:
            status = getattr(e, 'code', None)
            logger.error(
                'Gemini API error: %s', e,
                extra={'stage': 'model', 'upstream_status': status},
            )
            raise ModelError(kind_for_status(status), f'Gemini API error: {e.message}', upstream_status=status)
        except google_exceptions.GoogleAPIError as e:
            logger.error('Gemini transport error: %s', e, extra={'stage': 'model'})
            raise ModelError('http_error', f'Gemini transport error: {e}')

        try:
            text = response.text
        except ValueError:
            # No parts: blocked by safety filters or empty candidate list
            text = ''

        if not text or not text.strip():
            raise ModelError('empty_response', 'Gemini returned no text')
        return text


class GatewayModelClient(ModelClient):
    """OpenAI-compatible chat/completions client."""

    def __init__(self, settings: Settings, session: requests.Session = None):
        super().__init__(settings)
        if not settings.gateway_api_key:
            raise ConfigError('MODEL_GATEWAY_API_KEY is not configured')
        if not settings.gateway_url:
            raise ConfigError('MODEL_GATEWAY_URL is not configured')
        self.session = session or requests.Session()

    def close(self) -> None:
        self.session.close()

    def build_payload(self, prompt: str) -> dict:
        payload = {
            'model': self.settings.model_name,
            'messages': [{'role': 'user', 'content': prompt}],
            'temperature': self.settings.temperature,
        }
        if self.settings.json_mode:
            payload['response_format'] = {'type': 'json_object'}
        if self.settings.enable_search:
            logger.debug('Search augmentation is not supported by the gateway backend; ignoring')
        return payload

    def complete(self, prompt: str, timeout: Optional[float] = None) -> str:
        try:
            response = self.session.post(
                self.settings.gateway_url,
                headers={
                    'Authorization': f'Bearer {self.settings.gateway_api_key}',
                    'Content-Type': 'application/json',
                },
                json=self.build_payload(prompt),
                timeout=timeout,
            )
        except requests.exceptions.Timeout:
            raise DeadlineError('Gateway call exceeded the request deadline', stage='model')
        except requests.exceptions.RequestException as e:
            logger.error('Gateway transport error: %s', e, extra={'stage': 'model'})
            raise ModelError('http_error', f'Gateway request failed: {e}')

        if not response.ok:
            logger.error(
                'Gateway API error: %s %s', response.status_code, response.text[:500],
                extra={'stage': 'model', 'upstream_status': response.status_code},
            )
            raise ModelError(
                kind_for_status(response.status_code),
                f'Gateway API error: {response.status_code}',
                upstream_status=response.status_code,
            )

        try:
            data = response.json()
            text = data['choices'][0]['message']['content']
        except (ValueError, KeyError, IndexError, TypeError):
            text = None

        if not text or not str(text).strip():
            raise ModelError('empty_response', 'Gateway returned no message content')
        return text


def create_model_client(settings: Settings) -> ModelClient:
    """Build the client for settings.model_backend."""
    if settings.model_backend == 'gateway':
        return GatewayModelClient(settings)
    if settings.model_backend == 'gemini':
        return GeminiModelClient(settings)
    raise ConfigError(f"Unknown MODEL_BACKEND '{settings.model_backend}'")
