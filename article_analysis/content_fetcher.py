"""
Article content fetching.

Two strategies:
- reader: GET {reader_base_url}{url}. The reader service renders JavaScript
  server-side and returns cleaned markdown, which gets past most basic bot
  blocking.
- raw: GET the article directly and strip the HTML down to its main text.

With extraction_backend='reader' a reader failure is a FetchError, unless
reader_fallback is on, in which case the raw strategy is tried next. With
extraction_backend='raw' it is the only strategy.

Output is always truncated to max_content_chars before it reaches the prompt.
"""

import logging
import re
from dataclasses import dataclass
from typing import Optional

import requests
from bs4 import BeautifulSoup

from .config import Settings
from .deadline import Deadline
from .errors import FetchError

logger = logging.getLogger(__name__)

USER_AGENT = 'Mozilla/5.0 (Macintosh; Intel Mac OS X 10_15_7) AppleWebKit/537.36 (KHTML, like Gecko) Chrome/120.0.0.0 Safari/537.36'

# Statuses that mean the site refuses automated access
BLOCKED_STATUSES = (401, 403, 429, 451)

# Elements that never contain article text
NON_CONTENT_TAGS = ['script', 'style', 'nav', 'footer', 'header', 'aside', 'noscript', 'iframe', 'svg']


@dataclass
class ExtractedContent:
    """Article text ready for prompting."""

    text: str
    length: int
    truncated: bool
    source: str  # 'reader' or 'raw'


def truncate_text(text: str, max_chars: int) -> ExtractedContent:
    """Cut text to max_chars. `source` is filled in by the caller."""
    truncated = len(text) > max_chars
    if truncated:
        text = text[:max_chars]
    return ExtractedContent(text=text, length=len(text), truncated=truncated, source='')


def extract_main_content(html: str) -> str:
    """Extract readable text from an HTML page."""
    if not html:
        return ''

    soup = BeautifulSoup(html, 'html.parser')

    for element in soup.find_all(NON_CONTENT_TAGS):
        element.decompose()

    # Prefer the article body when the page marks one up
    main_content = (
        soup.find('article') or
        soup.find('main') or
        soup.find('body') or
        soup
    )

    text = main_content.get_text(separator=' ', strip=True)
    return re.sub(r'\s+', ' ', text).strip()


class ContentFetcher:
    """Fetches article text using the configured extraction backend."""

    def __init__(self, settings: Settings, session: requests.Session = None):
        self.settings = settings
        self.session = session or requests.Session()

    def fetch(self, url: str, deadline: Optional[Deadline] = None) -> ExtractedContent:
        """
        Fetch and extract article text.

        Args:
            url: Absolute article URL
            deadline: Optional request budget bounding each HTTP call

        Returns:
            ExtractedContent, truncated to max_content_chars

        Raises:
            FetchError: if every strategy failed
            DeadlineError: if the budget ran out before a request could start
        """
        if self.settings.extraction_backend == 'reader':
            try:
                text = self.fetch_with_reader(url, deadline)
                source = 'reader'
            except FetchError as e:
                if not self.settings.reader_fallback:
                    raise
                logger.warning(
                    'Reader service failed for %s (%s), falling back to raw fetch',
                    url, e, extra={'stage': 'fetch', 'upstream_status': e.upstream_status},
                )
                text = self.fetch_raw(url, deadline)
                source = 'raw'
        else:
            text = self.fetch_raw(url, deadline)
            source = 'raw'

        logger.info('Fetched %d characters from %s via %s', len(text), url, source)

        if len(text) < self.settings.min_content_chars:
            logger.warning(
                'Extracted text is surprisingly short (%d chars) for %s',
                len(text), url,
            )

        content = truncate_text(text, self.settings.max_content_chars)
        content.source = source
        if content.truncated:
            logger.info('Truncated article text to %d characters', content.length)
        return content

    def close(self) -> None:
        self.session.close()

    def fetch_with_reader(self, url: str, deadline: Optional[Deadline] = None) -> str:
        """Fetch cleaned markdown from the reader service."""
        reader_url = f'{self.settings.reader_base_url}{url}'
        response = self._get(reader_url, deadline, headers={'Accept': 'text/plain, text/markdown'})

        if not response.ok:
            raise FetchError(
                'non_ok_status',
                f'Reader service returned status {response.status_code}',
                upstream_status=response.status_code,
            )
        return response.text

    def fetch_raw(self, url: str, deadline: Optional[Deadline] = None) -> str:
        """Fetch the page directly and strip it to text."""
        headers = {
            'User-Agent': USER_AGENT,
            'Accept': 'text/html,application/xhtml+xml,application/xml;q=0.9,*/*;q=0.8',
            'Accept-Language': 'en-US,en;q=0.5',
        }
        response = self._get(url, deadline, headers=headers)

        if response.status_code in BLOCKED_STATUSES:
            raise FetchError(
                'blocked',
                f'Source refused automated access: HTTP {response.status_code}',
                upstream_status=response.status_code,
            )
        if not response.ok:
            raise FetchError(
                'non_ok_status',
                f'HTTP error: {response.status_code}',
                upstream_status=response.status_code,
            )
        return extract_main_content(response.text)

    def _get(self, url: str, deadline: Optional[Deadline], headers: dict) -> requests.Response:
        timeout = self.settings.fetch_timeout_seconds
        if deadline is not None:
            timeout = deadline.timeout_for('fetch', timeout)

        try:
            return self.session.get(url, headers=headers, timeout=timeout, allow_redirects=True)
        except requests.exceptions.Timeout:
            raise FetchError('timeout', f'Request timed out: {url}')
        except requests.exceptions.RequestException as e:
            raise FetchError('network', f'Request failed: {e}')
