"""
Validation of repaired model output into the AnalysisResult contract.

Parsing is strict (json.loads: no trailing commas, no NaN/Infinity). Shape
problems never fail the request: missing fields get neutral defaults and
wrong-typed fields get defaults plus a warning (see models._LenientModel).
"""

import json
import logging
from typing import Any, Dict, List, Optional, Union

from .errors import ParseError
from .models import (
    POLITICAL_FIELDS,
    RESULT_MODELS,
    AnalysisType,
    DecisionIntelligenceResult,
    PoliticalResult,
)

logger = logging.getLogger(__name__)

REQUIRED_FIELDS = ('article_summary', 'risk_level')


def _reject_constant(name: str):
    raise ValueError(f'Non-standard JSON constant: {name}')


def parse_json_object(candidate: str) -> Dict[str, Any]:
    """
    Parse candidate as a JSON object.

    Raises:
        ParseError: if the text is not valid JSON or not an object
    """
    try:
        data = json.loads(candidate, parse_constant=_reject_constant)
    except (ValueError, TypeError) as e:
        raise ParseError(f'Invalid JSON from model: {e}', raw_text=candidate)

    if not isinstance(data, dict):
        raise ParseError(
            f'Expected a JSON object from model, got {type(data).__name__}',
            raw_text=candidate,
        )
    return data


def detect_analysis_type(data: Dict[str, Any], requested: Optional[AnalysisType] = None) -> AnalysisType:
    """
    Decide which result shape the data is.

    decision_impact_analysis wins; then any political-only field; then the
    schema that was requested; then decision-intelligence.
    """
    if 'decision_impact_analysis' in data:
        return AnalysisType.DECISION_INTELLIGENCE
    if POLITICAL_FIELDS.intersection(data):
        return AnalysisType.POLITICAL
    if requested is not None:
        return AnalysisType(requested)
    return AnalysisType.DECISION_INTELLIGENCE


def validate(
    candidate: str,
    schema: Optional[AnalysisType] = None,
) -> Union[DecisionIntelligenceResult, PoliticalResult]:
    """
    Parse and validate a repaired JSON candidate.

    Args:
        candidate: Output of response_repair.repair()
        schema: The schema the prompt asked for, used when the shape is ambiguous

    Returns:
        DecisionIntelligenceResult or PoliticalResult with defaults applied

    Raises:
        ParseError: if candidate is not a parseable JSON object
    """
    data = parse_json_object(candidate)
    analysis_type = detect_analysis_type(data, schema)

    # Discriminant and warnings are ours, not the model's
    data.pop('validation_warnings', None)
    data['analysis_type'] = analysis_type.value

    warnings: List[str] = []
    for field in REQUIRED_FIELDS:
        if field not in data:
            warnings.append(f'Missing required field: {field}')

    context = {'warnings': warnings}
    result = RESULT_MODELS[analysis_type].model_validate(data, context=context)

    if warnings:
        logger.warning(
            'Model output validated with %d warning(s)', len(warnings),
            extra={'stage': 'validate', 'warnings': warnings},
        )

    return result.model_copy(update={'validation_warnings': warnings})


def to_response(result: Union[DecisionIntelligenceResult, PoliticalResult]) -> Dict[str, Any]:
    """JSON-ready dict for the HTTP response."""
    return result.model_dump(mode='json')
