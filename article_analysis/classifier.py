"""Optional article classification step."""

import logging
import re
from typing import Optional

from .content_fetcher import ExtractedContent
from .errors import ParseError
from .model_client import ModelClient
from .models import Classification
from .prompt_builder import build_classification_prompt

logger = logging.getLogger(__name__)


def parse_classification(text: str) -> Classification:
    """
    Normalize a model answer to a Classification.

    Takes the first known label appearing as a word in the answer, so
    "Political." and "Category: business" both work.

    Raises:
        ParseError: if no label is present
    """
    words = re.findall(r'[a-z]+', (text or '').lower())
    labels = {c.value: c for c in Classification}
    for word in words:
        if word in labels:
            return labels[word]
    raise ParseError('Classification answer contained no known category', raw_text=text)


class ArticleClassifier:
    """Asks the model which category an article belongs to.

    Failures propagate: a failed classification fails the whole analysis
    rather than quietly picking a schema.
    """

    def __init__(self, model_client: ModelClient):
        self.model_client = model_client

    def classify(self, content: ExtractedContent, timeout: Optional[float] = None) -> Classification:
        prompt = build_classification_prompt(content)
        answer = self.model_client.complete(prompt, timeout=timeout)
        classification = parse_classification(answer)
        logger.info('Article classified as %s', classification.value)
        return classification
