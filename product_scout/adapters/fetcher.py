"""
HTML fetch adapter.

Downloads a page with browser-like headers and wraps it in a ProductDocument.
The extraction engine itself never does I/O; this is the only network edge.
"""
from typing import Optional

import httpx

from product_scout.adapters.document import ProductDocument
from product_scout.config import config
from product_scout.utils.logger import LayerLogger


class FetchError(Exception):
    """The page could not be downloaded."""
    pass


class HtmlFetcher:
    """
    HTML fetcher for live product pages.
    Follows redirects; the final URL becomes the document location.
    """

    def __init__(self, timeout: Optional[int] = None, transport: Optional[httpx.AsyncBaseTransport] = None):
        self.timeout = timeout if timeout is not None else config.REQUEST_TIMEOUT
        self.transport = transport
        self.logger = LayerLogger("html_fetcher")

    async def fetch(self, url: str) -> ProductDocument:
        """
        Fetch a URL and parse it into a document.

        Args:
            url: The product page URL

        Returns:
            ProductDocument located at the final (post-redirect) URL
        """
        self.logger.log_action("fetch_html", "started", url=url)

        try:
            async with httpx.AsyncClient(
                timeout=self.timeout,
                follow_redirects=True,
                transport=self.transport,
            ) as client:
                response = await client.get(url, headers=self._get_headers())
                response.raise_for_status()
                html = response.text
        except httpx.HTTPError as e:
            self.logger.log_error(
                f"Failed to fetch URL: {str(e)}",
                error_type="http_error",
                url=url,
            )
            raise FetchError(str(e) or type(e).__name__) from e

        content_type = response.headers.get("content-type", "")
        if content_type and "html" not in content_type.lower():
            self.logger.log_error(
                f"Unsupported content type: {content_type}",
                error_type="content_type",
                url=url,
            )
            raise FetchError(f"Unsupported content type: {content_type}")

        self.logger.log_action(
            "fetch_html",
            "completed",
            url=url,
            final_url=str(response.url),
            status_code=response.status_code,
            content_length=len(html),
        )
        return ProductDocument(html, url=str(response.url))

    def _get_headers(self) -> dict:
        """Get request headers mimicking a browser."""
        return {
            "User-Agent": "Mozilla/5.0 (Macintosh; Intel Mac OS X 10_15_7) AppleWebKit/537.36 (KHTML, like Gecko) Chrome/120.0.0.0 Safari/537.36",
            "Accept": "text/html,application/xhtml+xml,application/xml;q=0.9,image/webp,*/*;q=0.8",
            "Accept-Language": "en-US,en;q=0.5",
        }
