"""
Article Analyzer Cloud Function

Fetches a news article and returns an AI risk analysis as structured JSON.

Responsibilities:
- Validate the request body ({"url": "..."})
- Fetch article text (reader service, raw HTML fallback)
- Prompt the model and repair/validate its JSON
- Return the AnalysisResult, or one {"error": "..."} envelope

Does NOT:
- Retry (the caller may resubmit the whole request)
- Cache or store analyses
- Render the result (the UI's job)
"""

import json

import functions_framework

from article_analysis import AnalysisPipeline, AnalysisError, Settings
from article_analysis.logging_setup import setup_logging

CORS_HEADERS = {
    'Access-Control-Allow-Origin': '*',
    'Access-Control-Allow-Methods': 'POST, OPTIONS',
    'Access-Control-Allow-Headers': 'authorization, x-client-info, apikey, content-type',
    'Access-Control-Max-Age': '3600',
}

RESPONSE_HEADERS = {
    'Access-Control-Allow-Origin': '*',
    'Content-Type': 'application/json',
}


def load_settings() -> Settings:
    """Read settings from the environment and configure logging."""
    settings = Settings.load()
    setup_logging(settings)
    return settings


@functions_framework.http
def analyze_article(request):
    """
    Main Cloud Function entry point.

    Expected JSON input:
    {
        "url": "https://example.com/article"
    }
    """
    # Handle CORS
    if request.method == 'OPTIONS':
        return ('', 204, CORS_HEADERS)

    headers = dict(RESPONSE_HEADERS)

    if request.method != 'POST':
        return (json.dumps({'error': 'Method not allowed'}), 405, headers)

    try:
        settings = load_settings()
    except AnalysisError as e:
        return (json.dumps(e.to_response()), e.status_code, headers)

    request_json = request.get_json(silent=True)
    body, status_code = AnalysisPipeline(settings).handle(request_json)

    return (json.dumps(body), status_code, headers)
