"""
Integration tests for the model clients.

The gateway backend is exercised over mocked HTTP with `responses`; the
Gemini backend with the google.generativeai module patched out.
"""

import json

import pytest
import requests
import responses
from google.api_core import exceptions as google_exceptions
from unittest.mock import MagicMock, patch

from article_analysis import ConfigError, DeadlineError, ModelError
from article_analysis.model_client import (
    GatewayModelClient,
    GeminiModelClient,
    create_model_client,
    kind_for_status,
)

from conftest import GATEWAY_URL


class TestKindForStatus:
    """Tests for kind_for_status()"""

    @pytest.mark.parametrize('status, kind', [
        (429, 'rate_limited'),
        (402, 'quota_exhausted'),
        (401, 'auth_missing'),
        (403, 'auth_missing'),
        (500, 'http_error'),
        (None, 'http_error'),
    ])
    def test_mapping(self, status, kind):
        assert kind_for_status(status) == kind


class TestGatewayModelClient:
    """Tests for GatewayModelClient with mocked HTTP."""

    @responses.activate
    def test_returns_message_content(self, settings, gateway_completion):
        responses.add(responses.POST, GATEWAY_URL, json=gateway_completion('{"risk_level": "low"}'), status=200)

        text = GatewayModelClient(settings).complete('prompt', timeout=10)

        assert text == '{"risk_level": "low"}'

    @responses.activate
    def test_request_shape(self, settings, gateway_completion):
        responses.add(responses.POST, GATEWAY_URL, json=gateway_completion('{}'), status=200)

        GatewayModelClient(settings).complete('Analyze this')

        request = responses.calls[0].request
        assert request.headers['Authorization'] == 'Bearer test-gateway-key'
        body = json.loads(request.body)
        assert body['model'] == settings.model_name
        assert body['messages'] == [{'role': 'user', 'content': 'Analyze this'}]
        assert body['temperature'] == settings.temperature
        assert body['response_format'] == {'type': 'json_object'}

    def test_json_mode_off_omits_response_format(self, make_settings):
        payload = GatewayModelClient(make_settings(json_mode=False)).build_payload('p')
        assert 'response_format' not in payload

    @pytest.mark.parametrize('status, kind, client_status', [
        (429, 'rate_limited', 429),
        (402, 'quota_exhausted', 402),
        (401, 'auth_missing', 500),
        (500, 'http_error', 500),
    ])
    @responses.activate
    def test_error_statuses(self, settings, status, kind, client_status):
        responses.add(responses.POST, GATEWAY_URL, json={'error': 'upstream'}, status=status)

        with pytest.raises(ModelError) as exc_info:
            GatewayModelClient(settings).complete('prompt')

        assert exc_info.value.kind == kind
        assert exc_info.value.upstream_status == status
        assert exc_info.value.status_code == client_status

    @responses.activate
    def test_empty_content(self, settings, gateway_completion):
        responses.add(responses.POST, GATEWAY_URL, json=gateway_completion(''), status=200)

        with pytest.raises(ModelError) as exc_info:
            GatewayModelClient(settings).complete('prompt')
        assert exc_info.value.kind == 'empty_response'

    @responses.activate
    def test_missing_choices(self, settings):
        responses.add(responses.POST, GATEWAY_URL, json={'choices': []}, status=200)

        with pytest.raises(ModelError) as exc_info:
            GatewayModelClient(settings).complete('prompt')
        assert exc_info.value.kind == 'empty_response'

    @responses.activate
    def test_timeout_is_deadline_error(self, settings):
        responses.add(responses.POST, GATEWAY_URL, body=requests.exceptions.ReadTimeout('slow'))

        with pytest.raises(DeadlineError) as exc_info:
            GatewayModelClient(settings).complete('prompt', timeout=1)
        assert exc_info.value.status_code == 504

    @responses.activate
    def test_connection_error(self, settings):
        responses.add(responses.POST, GATEWAY_URL, body=requests.exceptions.ConnectionError('refused'))

        with pytest.raises(ModelError) as exc_info:
            GatewayModelClient(settings).complete('prompt')
        assert exc_info.value.kind == 'http_error'

    def test_missing_key(self, make_settings):
        with pytest.raises(ConfigError):
            GatewayModelClient(make_settings(gateway_api_key=''))

    def test_missing_url(self, make_settings):
        with pytest.raises(ConfigError):
            GatewayModelClient(make_settings(gateway_url=''))


class BlockedResponse:
    """Gemini response whose .text accessor fails, as for a safety block."""

    @property
    def text(self):
        raise ValueError('No candidates')


@pytest.fixture
def mock_genai():
    with patch('article_analysis.model_client.genai') as genai:
        yield genai


class TestGeminiModelClient:
    """Tests for GeminiModelClient with google.generativeai patched."""

    def test_configures_json_mode(self, make_settings, mock_genai):
        settings = make_settings(model_backend='gemini')
        GeminiModelClient(settings)

        mock_genai.configure.assert_called_once_with(api_key='test-gemini-key')
        _, kwargs = mock_genai.GenerativeModel.call_args
        assert kwargs['generation_config'] == {'temperature': 0.3, 'response_mime_type': 'application/json'}
        assert kwargs['tools'] is None

    def test_search_disables_json_mime_type(self, make_settings, mock_genai):
        GeminiModelClient(make_settings(model_backend='gemini', model_name='gemini-1.5-flash', enable_search=True))

        _, kwargs = mock_genai.GenerativeModel.call_args
        assert 'response_mime_type' not in kwargs['generation_config']
        assert kwargs['tools'] == 'google_search_retrieval'

    def test_returns_text(self, make_settings, mock_genai):
        mock_genai.GenerativeModel.return_value.generate_content.return_value = MagicMock(text='{"a": 1}')

        text = GeminiModelClient(make_settings(model_backend='gemini')).complete('prompt', timeout=20)

        assert text == '{"a": 1}'
        mock_genai.GenerativeModel.return_value.generate_content.assert_called_once_with(
            'prompt', request_options={'timeout': 20}
        )

    def test_rate_limited(self, make_settings, mock_genai):
        model = mock_genai.GenerativeModel.return_value
        model.generate_content.side_effect = google_exceptions.ResourceExhausted('Quota exceeded')

        with pytest.raises(ModelError) as exc_info:
            GeminiModelClient(make_settings(model_backend='gemini')).complete('prompt')

        assert exc_info.value.kind == 'rate_limited'
        assert exc_info.value.status_code == 429

    def test_permission_denied(self, make_settings, mock_genai):
        model = mock_genai.GenerativeModel.return_value
        model.generate_content.side_effect = google_exceptions.PermissionDenied('API key invalid')

        with pytest.raises(ModelError) as exc_info:
            GeminiModelClient(make_settings(model_backend='gemini')).complete('prompt')
        assert exc_info.value.kind == 'auth_missing'

    def test_deadline_exceeded(self, make_settings, mock_genai):
        model = mock_genai.GenerativeModel.return_value
        model.generate_content.side_effect = google_exceptions.DeadlineExceeded('slow')

        with pytest.raises(DeadlineError):
            GeminiModelClient(make_settings(model_backend='gemini')).complete('prompt')

    def test_blocked_response_is_empty(self, make_settings, mock_genai):
        mock_genai.GenerativeModel.return_value.generate_content.return_value = BlockedResponse()

        with pytest.raises(ModelError) as exc_info:
            GeminiModelClient(make_settings(model_backend='gemini')).complete('prompt')
        assert exc_info.value.kind == 'empty_response'

    def test_missing_key(self, make_settings, mock_genai):
        with pytest.raises(ConfigError):
            GeminiModelClient(make_settings(model_backend='gemini', gemini_api_key=''))
        mock_genai.configure.assert_not_called()


class TestCreateModelClient:
    """Tests for create_model_client()"""

    def test_gateway(self, settings):
        assert isinstance(create_model_client(settings), GatewayModelClient)

    def test_gemini(self, make_settings, mock_genai):
        assert isinstance(create_model_client(make_settings(model_backend='gemini')), GeminiModelClient)

    def test_unknown(self, make_settings):
        with pytest.raises(ConfigError):
            create_model_client(make_settings(model_backend='openai'))
