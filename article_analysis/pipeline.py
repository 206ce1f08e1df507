"""
Article analysis pipeline.

    Idle -> Fetching -> Extracting -> [Classifying ->] Prompting -> Calling
         -> Repairing -> Validating -> Done

Any state can move to Failed. Nothing is retried and nothing is cached: each
run is independent and either returns a full result or exactly one error
envelope. A Deadline is checked between stages and bounds every network call.
"""

import logging
import uuid
from enum import Enum
from typing import Any, Callable, Dict, Optional, Tuple
from urllib.parse import urlparse

from . import prompt_builder, response_repair, result_validator
from .classifier import ArticleClassifier
from .config import Settings
from .content_fetcher import ContentFetcher
from .deadline import Deadline
from .errors import AnalysisError, ConfigError, InputError, ParseError
from .logging_setup import clear_request_context, set_request_context
from .model_client import ModelClient, create_model_client

logger = logging.getLogger(__name__)


class PipelineState(str, Enum):
    IDLE = 'idle'
    FETCHING = 'fetching'
    EXTRACTING = 'extracting'
    CLASSIFYING = 'classifying'
    PROMPTING = 'prompting'
    CALLING = 'calling'
    REPAIRING = 'repairing'
    VALIDATING = 'validating'
    DONE = 'done'
    FAILED = 'failed'


def validate_request(payload: Any) -> str:
    """
    Return the url from a request body.

    Raises:
        InputError: if url is missing, not a string, empty, or not an
            absolute http(s) URL
    """
    if not isinstance(payload, dict) or 'url' not in payload:
        raise InputError("Missing required field: url")

    url = payload['url']
    if not isinstance(url, str) or not url.strip():
        raise InputError("Valid 'url' is required")

    url = url.strip()
    parsed = urlparse(url)
    if parsed.scheme not in ('http', 'https') or not parsed.netloc:
        raise InputError("Valid 'url' is required: must be an absolute http(s) URL")
    return url


class AnalysisPipeline:
    """
    Runs one analysis per call to run().

    Collaborators can be injected for tests; by default they are built from
    settings on each run, so no state is shared between requests.
    """

    def __init__(
        self,
        settings: Settings,
        fetcher: ContentFetcher = None,
        model_client_factory: Callable[[Settings], ModelClient] = create_model_client,
    ):
        self.settings = settings
        # Only a fetcher built here is closed by handle()
        self._owns_fetcher = fetcher is None
        self.fetcher = fetcher or ContentFetcher(settings)
        self.model_client_factory = model_client_factory
        self.state = PipelineState.IDLE

    def _enter(self, state: PipelineState) -> None:
        logger.debug('Pipeline state %s -> %s', self.state.value, state.value)
        self.state = state

    def run(self, payload: Any):
        """
        Analyze the article named in payload.

        Returns:
            DecisionIntelligenceResult or PoliticalResult

        Raises:
            AnalysisError: subclass describing the failed stage
        """
        url = validate_request(payload)

        config_error = self.settings.validate()
        if config_error:
            raise ConfigError(config_error)

        deadline = Deadline(self.settings.request_deadline_seconds)
        model_client = self.model_client_factory(self.settings)
        try:
            return self._analyze(url, deadline, model_client)
        finally:
            model_client.close()

    def _analyze(self, url: str, deadline: Deadline, model_client: ModelClient):
        logger.info('Analyzing URL: %s', url, extra={'url': url})

        self._enter(PipelineState.FETCHING)
        content = self.fetcher.fetch(url, deadline)

        self._enter(PipelineState.EXTRACTING)
        if not content.text.strip():
            logger.warning('No article text extracted from %s', url)

        classification = None
        if self.settings.classify_articles:
            self._enter(PipelineState.CLASSIFYING)
            classifier = ArticleClassifier(model_client)
            classification = classifier.classify(content, timeout=deadline.timeout_for('classify'))

        self._enter(PipelineState.PROMPTING)
        deadline.check('prompt')
        schema = prompt_builder.schema_for(classification)
        prompt = prompt_builder.build(content, classification)

        self._enter(PipelineState.CALLING)
        raw_text = model_client.complete(prompt, timeout=deadline.timeout_for('model'))

        self._enter(PipelineState.REPAIRING)
        candidate = response_repair.repair(raw_text)

        self._enter(PipelineState.VALIDATING)
        try:
            result = result_validator.validate(candidate, schema)
        except ParseError:
            # Raw text goes to logs only
            logger.warning('Unparseable model output: %r', raw_text[:2000], extra={'stage': 'parse', 'url': url})
            raise

        self._enter(PipelineState.DONE)
        logger.info(
            'Analysis complete: %s, risk_level=%s',
            result.analysis_type, result.risk_level,
            extra={'url': url},
        )
        return result

    def handle(self, payload: Any) -> Tuple[Dict[str, Any], int]:
        """
        Run the pipeline and map the outcome to (body, status).

        Success is (result dict, 200). Any failure is ({'error': message}, status).
        """
        token = set_request_context(uuid.uuid4().hex[:12])
        try:
            result = self.run(payload)
            return result_validator.to_response(result), 200
        except AnalysisError as e:
            failed_stage = self.state.value
            self.state = PipelineState.FAILED
            log = logger.warning if e.status_code < 500 else logger.error
            log(
                'Analysis failed at %s: %s', e.stage, e,
                extra={
                    'stage': e.stage,
                    'pipeline_state': failed_stage,
                    'error_type': type(e).__name__,
                    'status_code': e.status_code,
                    'upstream_status': getattr(e, 'upstream_status', None),
                    'url': payload.get('url') if isinstance(payload, dict) else None,
                },
            )
            return e.to_response(), e.status_code
        except Exception:
            self.state = PipelineState.FAILED
            logger.exception('Unhandled error during analysis')
            return {'error': 'Internal Server Error'}, 500
        finally:
            if self._owns_fetcher:
                self.fetcher.close()
            clear_request_context(token)


def analyze(payload: Any, settings: Optional[Settings] = None) -> Tuple[Dict[str, Any], int]:
    """Convenience wrapper: fresh pipeline per call."""
    return AnalysisPipeline(settings or Settings.load()).handle(payload)
