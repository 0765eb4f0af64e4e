"""
Output sinks for crawl results.
"""

import json
import sys
from typing import Optional, TextIO


def quote_content(content: str) -> str:
    """Render content as a double-quoted, escaped string literal."""
    return json.dumps(content, ensure_ascii=False)


class CrawlObserver:
    """Receives one call per consumed crawl outcome. The base class ignores everything."""

    def found(self, url: str, content: str) -> None:
        pass

    def failed(self, url: str, message: str) -> None:
        pass


class ConsoleObserver(CrawlObserver):
    """Writes ``found: <url> "<content>"`` lines and bare failure messages."""

    def __init__(self, stream: Optional[TextIO] = None):
        self.stream = stream

    def _write(self, line: str) -> None:
        stream = self.stream if self.stream is not None else sys.stdout
        stream.write(line + "\n")
        stream.flush()

    def found(self, url: str, content: str) -> None:
        self._write(f"found: {url} {quote_content(content)}")

    def failed(self, url: str, message: str) -> None:
        self._write(message)
