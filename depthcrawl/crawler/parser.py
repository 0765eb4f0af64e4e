"""
HTML parser for extracting page titles and outbound links.
"""

import re
import logging
from typing import List, Optional
from urllib.parse import urljoin, urlparse, urlunparse
from dataclasses import dataclass, field
from bs4 import BeautifulSoup


SKIP_EXTENSIONS = (
    '.jpg', '.jpeg', '.png', '.gif', '.bmp', '.svg', '.webp',
    '.pdf', '.doc', '.docx', '.xls', '.xlsx', '.ppt', '.pptx',
    '.zip', '.rar', '.tar', '.gz', '.exe', '.dmg', '.iso',
    '.mp3', '.mp4', '.avi', '.mov', '.wmv', '.flv',
    '.css', '.js', '.ico', '.woff', '.woff2', '.ttf', '.eot'
)


@dataclass
class ParsedPage:
    """Title, text and links extracted from one page."""
    url: str
    title: Optional[str] = None
    text: Optional[str] = None
    links: List[str] = field(default_factory=list)


class ContentParser:
    """
    Parses HTML content to extract the title and crawlable links.
    """

    def __init__(self, allowed_domains: Optional[List[str]] = None,
                 blocked_domains: Optional[List[str]] = None):
        self.allowed_domains = set(allowed_domains) if allowed_domains else set()
        self.blocked_domains = set(blocked_domains) if blocked_domains else set()
        self.logger = logging.getLogger(__name__)

        self.whitespace_pattern = re.compile(r'\s+')

    def parse(self, url: str, html_content: str) -> ParsedPage:
        """
        Parse HTML content.

        Args:
            url: The URL of the page, used to resolve relative links
            html_content: Raw HTML content

        Returns:
            ParsedPage with the title, visible text and links in document order
        """
        soup = BeautifulSoup(html_content, 'lxml')

        for script in soup(["script", "style", "noscript"]):
            script.decompose()

        page = ParsedPage(url=url)

        title_tag = soup.find('title')
        if title_tag:
            page.title = self._clean_text(title_tag.get_text()) or None

        body = soup.find('body') or soup
        page.text = self._clean_text(body.get_text(separator=' ', strip=True))
        page.links = self.extract_links(soup, url)

        self.logger.debug(f"Parsed {url}: title={page.title!r}, {len(page.links)} links")
        return page

    def extract_links(self, soup: BeautifulSoup, base_url: str) -> List[str]:
        """Extract and normalize links, keeping first-seen order."""
        links = {}

        for link in soup.find_all('a', href=True):
            href = link['href'].strip()
            if not href or href.startswith('#'):
                continue

            try:
                normalized_url = self.normalize_url(urljoin(base_url, href))
            except ValueError:
                self.logger.debug(f"Skipping malformed link on {base_url}: {href!r}")
                continue

            if self.is_valid_url(normalized_url):
                links.setdefault(normalized_url, None)

        return list(links)

    def normalize_url(self, url: str) -> str:
        """Normalize URL by lowercasing the host and removing the fragment."""
        parsed = urlparse(url)
        return urlunparse((
            parsed.scheme.lower(),
            parsed.netloc.lower(),
            parsed.path or '/',
            parsed.params,
            parsed.query,
            ''
        ))

    def is_valid_url(self, url: str) -> bool:
        """Check if URL is valid for crawling."""
        try:
            parsed = urlparse(url)
        except ValueError:
            return False

        if not parsed.scheme or not parsed.netloc:
            return False

        if parsed.scheme not in ('http', 'https'):
            return False

        domain = parsed.netloc

        if any(blocked in domain for blocked in self.blocked_domains):
            return False

        if self.allowed_domains and not any(allowed in domain for allowed in self.allowed_domains):
            return False

        # Avoid common non-content file extensions
        if parsed.path.lower().endswith(SKIP_EXTENSIONS):
            return False

        return True

    def _clean_text(self, text: str) -> str:
        """Collapse whitespace."""
        if not text:
            return ""
        return self.whitespace_pattern.sub(' ', text.strip())
