"""
Prompt construction for article analysis.

Two output schemas:
- decision_intelligence: business decision impact, integrity, entities,
  missing perspectives. Used unless the article is classified political.
- political: bias and writing-style scores, tone, claims, consequences,
  suggested actions.

The instructions are fixed text; only the article text varies, and it was
already truncated by the content fetcher.
"""

from typing import Optional, Union

from .content_fetcher import ExtractedContent
from .models import AnalysisType, Classification

# Classification prompt only needs the opening of the article
CLASSIFICATION_SAMPLE_CHARS = 4000

NO_FENCES_RULE = 'Do not include markdown formatting (like ```json) in your response.'

DECISION_INTELLIGENCE_SCHEMA = """{
  "article_summary": "Executive summary (max 2 sentences)",
  "risk_level": "low" or "medium" or "high",
  "credibility_check": "1 sentence on source reliability",
  "decision_impact_analysis": [
    {
      "claim": "Specific claim from the text",
      "domain": "Strategy" or "Finance" or "Tech",
      "implied_action": "What a reader might do",
      "predicted_consequence": "Risk if this is wrong",
      "recommendation": "Verification step"
    }
  ],
  "integrity_analysis": {
    "promotional_score": integer 0-100,
    "intent": "Informational" or "Commercial",
    "logical_fallacies": ["List fallacies, or an empty list"],
    "conflict_of_interest_warning": "Any potential bias detected, or null"
  },
  "entities_and_funding": [
    {
      "name": "Company/Person",
      "role": "Subject",
      "background_check": "Brief context"
    }
  ],
  "missing_perspectives": ["List 2-3 missing viewpoints"]
}"""

POLITICAL_SCHEMA = """{
  "article_type": "political",
  "article_summary": "Neutral summary (max 3 sentences)",
  "risk_level": "low" or "medium" or "high",
  "political_bias_score": integer 0-100 (0 = far left, 50 = center, 100 = far right),
  "writing_style_score": integer 0-100 (0 = pure opinion, 100 = strictly factual),
  "claims": ["Key factual claims made in the article"],
  "tone": "One or two words describing the tone",
  "bias": "1 sentence on detected bias",
  "political_slant": "1 sentence on which side the framing favors",
  "source_influence": "1 sentence on how the outlet or sources shape the story",
  "possible_negative_consequences": ["Harm that could follow if a reader acts on this uncritically"],
  "suggested_actions": ["Concrete verification or follow-up steps for the reader"]
}"""

_ROLE_BY_TYPE = {
    AnalysisType.DECISION_INTELLIGENCE: 'You are a Decision Intelligence AI for Business.',
    AnalysisType.POLITICAL: 'You are a nonpartisan media analyst specializing in political news.',
}

_SCHEMA_BY_TYPE = {
    AnalysisType.DECISION_INTELLIGENCE: DECISION_INTELLIGENCE_SCHEMA,
    AnalysisType.POLITICAL: POLITICAL_SCHEMA,
}


def schema_for(classification: Optional[Union[Classification, str]] = None) -> AnalysisType:
    """Political classifications get the political schema; everything else decision-intelligence."""
    if classification is None:
        return AnalysisType.DECISION_INTELLIGENCE
    label = getattr(classification, 'value', classification)
    if 'political' in str(label).lower():
        return AnalysisType.POLITICAL
    return AnalysisType.DECISION_INTELLIGENCE


def build(content: ExtractedContent, classification: Optional[Union[Classification, str]] = None) -> str:
    """
    Build the analysis prompt.

    Args:
        content: Extracted article text
        classification: Optional article category; selects the schema

    Returns:
        Prompt with the schema instructions first and the article text last
    """
    analysis_type = schema_for(classification)

    return f"""{_ROLE_BY_TYPE[analysis_type]}
Analyze the following article (provided as Markdown or plain text) and return a **valid JSON object**.
{NO_FENCES_RULE}
Use exactly the field names below. Use the literal lowercase values "low", "medium" or "high" for risk_level.
Use integers (not strings) for scores, and JSON arrays for lists (empty arrays if nothing applies).

Required JSON Structure:
{_SCHEMA_BY_TYPE[analysis_type]}

Article:
{content.text}
"""


def build_classification_prompt(content: ExtractedContent) -> str:
    """Prompt asking the model for a single category label."""
    labels = ', '.join(c.value for c in Classification)
    sample = content.text[:CLASSIFICATION_SAMPLE_CHARS]

    return f"""Classify the following article into exactly one category: {labels}.
- political: elections, government, legislation, political figures or parties
- business: companies, markets, funding, products, industry
- general: news that fits neither of the above
- other: not a news article

Respond with the category name only, in lowercase, with no punctuation or explanation.

Article:
{sample}
"""
