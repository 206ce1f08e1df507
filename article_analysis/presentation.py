"""
Display helpers for rendering an AnalysisResult.

These map result values to labels and badge variants so that any renderer
shows unexpected values with neutral styling instead of failing.
"""

from typing import Dict, Optional

# Badge variant and icon per risk level - must match the UI theme names
RISK_DISPLAY = {
    'low': {'label': 'LOW RISK', 'variant': 'success', 'icon': 'check-circle'},
    'medium': {'label': 'MEDIUM RISK', 'variant': 'warning', 'icon': 'alert-circle'},
    'high': {'label': 'HIGH RISK', 'variant': 'destructive', 'icon': 'alert-circle'},
}

UNKNOWN_RISK_DISPLAY = {'label': 'UNKNOWN RISK', 'variant': 'default', 'icon': 'info'}

UNKNOWN_LABEL = 'Unknown'


def risk_display(level: Optional[str]) -> Dict[str, str]:
    """Badge label/variant/icon for a risk level. Anything unexpected is neutral."""
    return dict(RISK_DISPLAY.get(level, UNKNOWN_RISK_DISPLAY))


def bias_label(score: Optional[int]) -> str:
    """Label for political_bias_score (0 = left, 100 = right)."""
    if score is None:
        return UNKNOWN_LABEL
    if score < 30:
        return 'Left-Leaning'
    if score < 45:
        return 'Center-Left'
    if score < 55:
        return 'Center'
    if score < 70:
        return 'Center-Right'
    return 'Right-Leaning'


def style_label(score: Optional[int]) -> str:
    """Label for writing_style_score (0 = opinion, 100 = factual)."""
    if score is None:
        return UNKNOWN_LABEL
    if score < 30:
        return 'Opinion-Heavy'
    if score < 50:
        return 'Mixed'
    if score < 70:
        return 'Mostly Factual'
    return 'Highly Factual'


def promotional_label(score: Optional[int]) -> str:
    """Label for integrity_analysis.promotional_score."""
    if score is None:
        return UNKNOWN_LABEL
    if score < 30:
        return 'Low Promotional Content'
    if score < 70:
        return 'Moderately Promotional'
    return 'Highly Promotional'
