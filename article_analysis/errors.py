"""
Error taxonomy for the article analysis pipeline.

Every stage raises one of these. The pipeline boundary converts them into a
single client-facing envelope: {"error": "<user_message>"} with status_code.

Error Classification:
====================

InputError    (400) - missing/invalid url, user-correctable
FetchError    (502) - reader service or source site unreachable/blocking
ConfigError   (500) - missing credential or invalid setting, generic message
ModelError    (429/402/500) - LLM auth, rate limit, quota, transport
ParseError    (500) - model output not recoverable as a JSON object
DeadlineError (504) - request budget exhausted between or during stages
"""

from typing import Optional


class AnalysisError(Exception):
    """Base class for all pipeline failures."""

    stage = 'processing'
    status_code = 500
    user_message = 'Internal Server Error'

    def __init__(self, message: str = None, *, stage: str = None):
        super().__init__(message or self.user_message)
        if stage:
            self.stage = stage

    def to_response(self) -> dict:
        """Client-facing error envelope. Never includes internal detail."""
        return {'error': self.user_message}


class InputError(AnalysisError):
    stage = 'input'
    status_code = 400
    user_message = "Valid 'url' is required"

    def __init__(self, message: str = None):
        super().__init__(message)
        if message:
            # Input problems are safe to echo back
            self.user_message = message


class ConfigError(AnalysisError):
    stage = 'config'
    status_code = 500
    user_message = 'Server configuration error'


class FetchError(AnalysisError):
    """Article content could not be retrieved.

    reason is one of: blocked, timeout, non_ok_status, network
    """

    stage = 'fetch'
    status_code = 502
    user_message = 'Failed to fetch article content. The site may be blocking automated access.'

    REASONS = ('blocked', 'timeout', 'non_ok_status', 'network')

    def __init__(self, reason: str, message: str = None, upstream_status: Optional[int] = None):
        if reason not in self.REASONS:
            raise ValueError(f'Unknown fetch failure reason: {reason}')
        super().__init__(message or f'Fetch failed: {reason}')
        self.reason = reason
        self.upstream_status = upstream_status


class ModelError(AnalysisError):
    """The LLM call failed.

    kind is one of: auth_missing, rate_limited, quota_exhausted,
    http_error, empty_response
    """

    stage = 'model'
    KINDS = ('auth_missing', 'rate_limited', 'quota_exhausted', 'http_error', 'empty_response')

    _STATUS_BY_KIND = {
        'rate_limited': 429,
        'quota_exhausted': 402,
    }
    _MESSAGE_BY_KIND = {
        'rate_limited': 'Rate limit exceeded. Please try again in a moment.',
        'quota_exhausted': 'AI usage quota exhausted. Please add credits or try again later.',
    }

    def __init__(self, kind: str, message: str = None, upstream_status: Optional[int] = None):
        if kind not in self.KINDS:
            raise ValueError(f'Unknown model failure kind: {kind}')
        super().__init__(message or f'Model call failed: {kind}')
        self.kind = kind
        self.upstream_status = upstream_status
        self.status_code = self._STATUS_BY_KIND.get(kind, 500)
        self.user_message = self._MESSAGE_BY_KIND.get(kind, 'AI analysis service failed')


class ParseError(AnalysisError):
    """Model output could not be parsed, even after repair.

    raw_preview is for logs only and is never sent to the client.
    """

    stage = 'parse'
    status_code = 500
    user_message = 'Failed to parse AI response as JSON'

    PREVIEW_LENGTH = 500

    def __init__(self, message: str = None, raw_text: str = ''):
        super().__init__(message)
        self.raw_preview = (raw_text or '')[:self.PREVIEW_LENGTH]


class DeadlineError(AnalysisError):
    stage = 'deadline'
    status_code = 504
    user_message = 'Analysis timed out. Please try again.'
