import logging
import ssl
import urllib.error
import urllib.request
from typing import Optional

from lsfbot.errors import FetchError

logger = logging.getLogger(__name__)


def _decode_html(data: bytes, content_type: Optional[str]) -> str:
    charset = None
    if content_type and "charset=" in content_type:
        charset = content_type.split("charset=")[-1].split(";")[0].strip()

    candidates = []
    if charset:
        candidates.append(charset)
    # The portal has historically served latin-1 pages without a charset.
    candidates.extend(["utf-8", "cp1252", "latin-1"])

    for enc in candidates:
        try:
            return data.decode(enc)
        except (LookupError, UnicodeDecodeError):
            continue

    return data.decode("utf-8", errors="replace")


def _ssl_context(verify_tls: bool) -> Optional[ssl.SSLContext]:
    if verify_tls:
        return None
    context = ssl.create_default_context()
    context.check_hostname = False
    context.verify_mode = ssl.CERT_NONE
    return context


def fetch_page(url: str, timeout: float = 15.0, verify_tls: bool = True) -> str:
    if not url or not isinstance(url, str):
        raise FetchError("URL is required for page fetch.")

    request = urllib.request.Request(
        url,
        headers={
            "User-Agent": "lsfbot/1.0",
            "Accept": "text/html, application/xhtml+xml, */*",
        },
        method="GET",
    )

    try:
        with urllib.request.urlopen(request, timeout=timeout, context=_ssl_context(verify_tls)) as response:
            status = getattr(response, "status", None)
            if status and status != 200:
                logger.error("Page fetch failed with status=%s for url=%s", status, url)
                raise FetchError(f"Unexpected HTTP status: {status}")
            data = response.read()
            if not data:
                logger.error("Page fetch returned empty body for url=%s", url)
                raise FetchError("Empty response body")
            content_type = response.headers.get("Content-Type")
            return _decode_html(data, content_type)
    except FetchError:
        raise
    except urllib.error.HTTPError as exc:
        logger.error("HTTP error for url=%s status=%s reason=%s", url, exc.code, exc.reason)
        raise FetchError(f"HTTP error: {exc.code}") from exc
    except urllib.error.URLError as exc:
        logger.error("URL error for url=%s reason=%s", url, exc.reason)
        raise FetchError("Network error while fetching page.") from exc
    except OSError as exc:
        logger.error("Connection error for url=%s: %s", url, exc)
        raise FetchError("Connection error while fetching page.") from exc
