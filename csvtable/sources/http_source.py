"""
HTTP acquisition of CSV data.

**Conceptual**: A thin wrapper around requests that fetches one URL and hands
back the body as a ByteSource. It handles proxy selection, timeouts, status
codes, the declared content type and the declared charset. It does NOT decode
or parse the body; that is CsvReader's job.

**Proxy handling**:
  - proxy=None uses the session's normal behaviour, which honours the
    HTTP_PROXY / HTTPS_PROXY / NO_PROXY environment variables.
  - proxy="http://host:port" routes both http and https through that proxy.
  - proxy_url(host, port) builds such a URL from its parts.

Example:
    >>> from csvtable.config.settings import HttpSettings
    >>> with HttpSource(HttpSettings()) as http:
    ...     source = http.open("https://example.com/table.csv", timeout=5)
"""

import codecs
import io
import logging
from typing import Optional

import requests

from csvtable.config.settings import HttpSettings
from csvtable.data.errors import CsvError, CsvIOError
from csvtable.sources.base import ByteSource

logger = logging.getLogger(__name__)


class HttpSourceError(CsvIOError):
    """
    Raised when an HTTP fetch fails: timeout, connection failure or a
    non-2xx status.
    """
    pass


class UnexpectedContentTypeError(CsvError, ValueError):
    """
    Raised when the response declares a media type other than the expected
    one (text/csv by default).

    **Recovery**: Check the URL, or relax HttpSettings.expected_content_type.
    """
    pass


def proxy_url(host: str, port: int, scheme: str = "http") -> str:
    """
    Build a proxy URL from host and port.

    Example:
        >>> proxy_url("10.3.135.203", 808)
        'http://10.3.135.203:808'
    """
    if not host:
        raise ValueError("Proxy host cannot be empty")
    return f"{scheme}://{host}:{port}"


def parse_content_type(header: Optional[str]) -> tuple[str, Optional[str]]:
    """
    Split a Content-Type header into (media type, charset).

    Example:
        >>> parse_content_type('text/csv; charset="GB2312"')
        ('text/csv', 'GB2312')
    """
    if not header:
        return "", None
    parts = header.split(";")
    media_type = parts[0].strip().lower()
    charset = None
    for param in parts[1:]:
        name, _, value = param.partition("=")
        if name.strip().lower() == "charset":
            charset = value.strip().strip('"').strip("'") or None
    return media_type, charset


class HttpSource:
    """
    Fetches CSV resources over HTTP(S) with requests.

    **Responsibilities**:
      - Make GET requests with a timeout and optional proxy
      - Reject non-2xx responses and unexpected content types
      - Report the response charset so the reader can decode correctly

    Attributes:
        settings: HttpSettings with defaults for timeout, proxy and content type.
        session: Underlying requests.Session.
    """

    def __init__(self, settings: Optional[HttpSettings] = None):
        self.settings = settings or HttpSettings()
        self.session = requests.Session()
        self.session.headers.update({
            "Accept": "text/csv, */*;q=0.5",
            "User-Agent": self.settings.user_agent,
        })

    def open(
        self,
        url: str,
        proxy: Optional[str] = None,
        timeout: Optional[float] = None,
    ) -> ByteSource:
        """
        Fetch a URL and return its body as a readable byte source.

        Args:
            url: http(s) URL of the CSV resource.
            proxy: Proxy URL for this request. Defaults to settings.proxy.
            timeout: Timeout in seconds. Defaults to settings.timeout_seconds.

        Returns:
            ByteSource over the response body. Its encoding is the charset
            declared in Content-Type, or None when absent or unknown.

        Raises:
            ValueError: If url is empty.
            UnexpectedContentTypeError: If the media type does not match
                                       settings.expected_content_type.
            HttpSourceError: On timeout, connection error or non-2xx status.
        """
        if not url or not url.strip():
            raise ValueError("URL cannot be empty")

        if proxy is None:
            proxy = self.settings.proxy
        if timeout is None:
            timeout = self.settings.timeout_seconds
        proxies = {"http": proxy, "https": proxy} if proxy else None

        logger.debug("Fetching %s (proxy=%s, timeout=%ss)", url, proxy, timeout)
        try:
            response = self.session.get(url, proxies=proxies, timeout=timeout)
        except requests.Timeout as e:
            raise HttpSourceError(
                f"Request to {url} timed out after {timeout}s."
            ) from e
        except requests.ConnectionError as e:
            raise HttpSourceError(
                f"Failed to connect to {url}. Check network connection and proxy settings."
            ) from e
        except requests.RequestException as e:
            raise HttpSourceError(f"HTTP request to {url} failed: {e}") from e

        if not 200 <= response.status_code < 300:
            raise HttpSourceError(
                f"Request to {url} failed with status {response.status_code}."
            )

        media_type, charset = parse_content_type(response.headers.get("Content-Type"))
        expected = self.settings.expected_content_type
        if expected and media_type != expected.lower():
            raise UnexpectedContentTypeError(
                f'Illegal content type: the response content type is "{media_type}", '
                f'not "{expected}" as expected.'
            )

        if charset is not None:
            try:
                codecs.lookup(charset)
            except LookupError:
                logger.warning(
                    "Ignoring unknown charset %r declared by %s", charset, url
                )
                charset = None

        body = response.content
        logger.debug("Fetched %d bytes from %s", len(body), url)
        return ByteSource(stream=io.BytesIO(body), encoding=charset, origin=url)

    def close(self):
        """Close the HTTP session and release pooled connections."""
        self.session.close()

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        self.close()
        return False
