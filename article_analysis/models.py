"""
Result contract for article analysis.

AnalysisResult is a tagged union on `analysis_type`:

    DecisionIntelligenceResult  analysis_type='decision_intelligence'
        decision_impact_analysis, integrity_analysis, entities_and_funding,
        missing_perspectives, credibility_check

    PoliticalResult             analysis_type='political'
        political_bias_score, writing_style_score, claims, tone, bias,
        political_slant, source_influence, possible_negative_consequences,
        suggested_actions

Every field has a neutral default. A field that is present but has the wrong
type or an out-of-range value is NOT coerced: it is replaced by its default
and a warning is recorded in the validation context, which ends up in
`validation_warnings`. Validation of model output therefore never fails on
shape, only on unparseable JSON (see result_validator).
"""

import logging
from enum import Enum
from typing import List, Literal, Optional, Union

from pydantic import (
    BaseModel,
    Field,
    StrictStr,
    ValidationError,
    ValidationInfo,
    conint,
    field_validator,
)

logger = logging.getLogger(__name__)

RISK_LEVELS = ('low', 'medium', 'high')
UNKNOWN_RISK = 'unknown'

RiskLevel = Literal['low', 'medium', 'high', 'unknown']
Score = conint(strict=True, ge=0, le=100)


class Classification(str, Enum):
    """Article category from the optional classification step."""

    POLITICAL = 'political'
    BUSINESS = 'business'
    GENERAL = 'general'
    OTHER = 'other'


class AnalysisType(str, Enum):
    """Output schema requested from the model."""

    DECISION_INTELLIGENCE = 'decision_intelligence'
    POLITICAL = 'political'


class _LenientModel(BaseModel):
    """Base model that falls back to field defaults on invalid values."""

    @field_validator('*', mode='wrap')
    @classmethod
    def _default_on_invalid(cls, value, handler, info: ValidationInfo):
        try:
            return handler(value)
        except ValidationError as e:
            field = cls.model_fields[info.field_name]
            default = field.get_default(call_default_factory=True)
            reason = e.errors()[0]['msg'] if e.errors() else 'invalid value'
            warning = f'{cls.__name__}.{info.field_name}: {reason}; using default {default!r}'
            logger.warning('Invalid field in model output: %s', warning)
            if info.context is not None:
                info.context.setdefault('warnings', []).append(warning)
            return default


class ImpactItem(_LenientModel):
    claim: StrictStr = ''
    domain: StrictStr = ''
    implied_action: StrictStr = ''
    predicted_consequence: StrictStr = ''
    recommendation: StrictStr = ''


class IntegrityAnalysis(_LenientModel):
    promotional_score: Optional[Score] = None
    intent: StrictStr = ''
    logical_fallacies: List[StrictStr] = Field(default_factory=list)
    conflict_of_interest_warning: Optional[StrictStr] = None


class EntityInfo(_LenientModel):
    name: StrictStr = ''
    role: StrictStr = ''
    background_check: StrictStr = ''


class _BaseResult(_LenientModel):
    article_summary: StrictStr = ''
    risk_level: RiskLevel = UNKNOWN_RISK
    validation_warnings: List[StrictStr] = Field(default_factory=list)


class DecisionIntelligenceResult(_BaseResult):
    analysis_type: Literal['decision_intelligence'] = 'decision_intelligence'
    credibility_check: StrictStr = ''
    decision_impact_analysis: List[ImpactItem] = Field(default_factory=list)
    integrity_analysis: IntegrityAnalysis = Field(default_factory=IntegrityAnalysis)
    entities_and_funding: List[EntityInfo] = Field(default_factory=list)
    missing_perspectives: List[StrictStr] = Field(default_factory=list)


class PoliticalResult(_BaseResult):
    analysis_type: Literal['political'] = 'political'
    article_type: StrictStr = ''
    political_bias_score: Optional[Score] = None
    writing_style_score: Optional[Score] = None
    claims: List[StrictStr] = Field(default_factory=list)
    tone: StrictStr = ''
    bias: StrictStr = ''
    political_slant: StrictStr = ''
    source_influence: StrictStr = ''
    possible_negative_consequences: List[StrictStr] = Field(default_factory=list)
    suggested_actions: List[StrictStr] = Field(default_factory=list)


AnalysisResult = Union[DecisionIntelligenceResult, PoliticalResult]

RESULT_MODELS = {
    AnalysisType.DECISION_INTELLIGENCE: DecisionIntelligenceResult,
    AnalysisType.POLITICAL: PoliticalResult,
}

# Keys that only appear in the political/legacy shape
POLITICAL_FIELDS = frozenset(
    name for name in PoliticalResult.model_fields
    if name not in _BaseResult.model_fields and name != 'analysis_type'
)
