"""Turn uploaded documents and web pages into plain text for date scanning."""
import io
import logging

import docx
import httpx
from bs4 import BeautifulSoup
from pypdf import PdfReader

from . import config
from .errors import DocumentDecodeError, FetchFailed
from .utils import collapse_whitespace

logger = logging.getLogger(__name__)


def _docx_text(data: bytes) -> str:
    document = docx.Document(io.BytesIO(data))
    return '\n'.join(p.text for p in document.paragraphs)


def _pdf_text(data: bytes) -> str:
    reader = PdfReader(io.BytesIO(data))
    return '\n'.join((page.extract_text() or '') for page in reader.pages)


def decode_document(data: bytes, filename: str) -> str:
    """Extract raw text from a .docx, .pdf or plain text upload."""
    name = (filename or '').lower()
    try:
        if name.endswith('.docx'):
            return _docx_text(data)
        if name.endswith('.pdf'):
            return _pdf_text(data)
    except Exception as e:
        logger.warning('failed to decode %s: %s', filename, e)
        raise DocumentDecodeError(f'could not read {filename}') from e
    return data.decode('utf-8', errors='replace')


def html_to_text(html: str) -> str:
    """Strip script/style blocks and all markup, collapse whitespace."""
    soup = BeautifulSoup(html or '', 'html.parser')
    for tag in soup(['script', 'style']):
        tag.decompose()
    return collapse_whitespace(soup.get_text(' '))


async def fetch_page_text(url: str, timeout: float | None = None, transport: httpx.AsyncBaseTransport | None = None) -> str:
    """GET a web page and return its visible text.

    A single attempt bounded by FETCH_TIMEOUT_SECONDS; any timeout or
    transport/HTTP error becomes FetchFailed so the user can retry.
    """
    if timeout is None:
        timeout = config.FETCH_TIMEOUT_SECONDS
    headers = {'User-Agent': config.FETCH_USER_AGENT}
    try:
        async with httpx.AsyncClient(timeout=timeout, headers=headers, follow_redirects=True, transport=transport) as client:
            resp = await client.get(url)
            resp.raise_for_status()
    except httpx.TimeoutException as e:
        logger.warning('fetch timed out after %ss: %s', timeout, url)
        raise FetchFailed(f'timed out fetching {url}') from e
    except httpx.HTTPError as e:
        logger.warning('fetch failed for %s: %s', url, e)
        raise FetchFailed(f'could not fetch {url}') from e
    return html_to_text(resp.text)


def preview(text: str) -> str:
    return (text or '')[:config.IMPORT_PREVIEW_CHARS]
