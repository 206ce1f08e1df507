"""Article analysis library: fetch, prompt, call model, repair, validate."""

from .config import Settings

from .errors import (
    AnalysisError,
    InputError,
    ConfigError,
    FetchError,
    ModelError,
    ParseError,
    DeadlineError,
)

from .models import (
    AnalysisType,
    Classification,
    DecisionIntelligenceResult,
    PoliticalResult,
    ImpactItem,
    IntegrityAnalysis,
    EntityInfo,
)

from .content_fetcher import ContentFetcher, ExtractedContent
from .model_client import GatewayModelClient, GeminiModelClient, create_model_client
from .pipeline import AnalysisPipeline, PipelineState, analyze, validate_request

__all__ = [
    # Configuration
    'Settings',
    # Errors
    'AnalysisError',
    'InputError',
    'ConfigError',
    'FetchError',
    'ModelError',
    'ParseError',
    'DeadlineError',
    # Result contract
    'AnalysisType',
    'Classification',
    'DecisionIntelligenceResult',
    'PoliticalResult',
    'ImpactItem',
    'IntegrityAnalysis',
    'EntityInfo',
    # Stages
    'ContentFetcher',
    'ExtractedContent',
    'GatewayModelClient',
    'GeminiModelClient',
    'create_model_client',
    # Orchestration
    'AnalysisPipeline',
    'PipelineState',
    'analyze',
    'validate_request',
]
