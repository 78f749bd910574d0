"""scrape_webpage and crawl_webpages."""
import asyncio
import base64
import binascii
import logging
from typing import Any, Dict, List, Optional

import aiohttp
from mcp.types import CallToolResult, ContentBlock, ImageContent

from ..client import ClientFactory
from ..context import Invocation
from ..errors import NoApiKeyError
from .common import build_request, error_result, link_block, text_block, tool_result
from .params import CrawlWebpagesParams, ScrapeWebpageParams

logger = logging.getLogger(__name__)

CRAWL_SCREENSHOT_MIME_TYPE = "image/webp"
SCREENSHOT_FAILED_MESSAGE = "Failed to get screenshot"
IMAGE_DOWNLOAD_TIMEOUT = 30

_IMAGE_SIGNATURES = (
    (b"\x89PNG\r\n\x1a\n", "image/png"),
    (b"\xff\xd8\xff", "image/jpeg"),
    (b"GIF87a", "image/gif"),
    (b"GIF89a", "image/gif"),
)


def sniff_image_type(data: bytes) -> Optional[str]:
    """Guess the media type from the leading bytes of an image, ``None`` if unknown."""
    if data[:4] == b"RIFF" and data[8:12] == b"WEBP":
        return "image/webp"
    for signature, mime_type in _IMAGE_SIGNATURES:
        if data.startswith(signature):
            return mime_type
    return None


async def _fetch_image(url: str) -> Optional[Dict[str, Any]]:
    async with aiohttp.ClientSession() as session:
        async with session.get(url, timeout=aiohttp.ClientTimeout(total=IMAGE_DOWNLOAD_TIMEOUT)) as resp:
            resp.raise_for_status()
            raw = await resp.read()
            content_type = (resp.headers.get("content-type") or "").split(";")[0].strip()
    if not raw:
        return None
    if not content_type.startswith("image/"):
        content_type = sniff_image_type(raw)
        if content_type is None:
            logger.warning(f"Screenshot at {url} is not an image")
            return None
    return {"bytes": raw, "mime_type": content_type}


def _decode_inline_image(value: str) -> Dict[str, Any]:
    mime_type = None
    if value.startswith("data:"):
        header, _, value = value.partition(",")
        mime_type = header[len("data:"):].split(";")[0] or None
    raw = base64.b64decode(value, validate=True)
    return {"bytes": raw, "mime_type": mime_type or sniff_image_type(raw)}


async def download_image_as_base64(source: str) -> Optional[Dict[str, str]]:
    """Load a screenshot (URL, data URI or bare base64) and re-encode it.

    Returns ``{"data": <base64>, "mimeType": <type>}`` or ``None`` when the
    image can not be retrieved or decoded.
    """
    try:
        if source.startswith(("http://", "https://")):
            image = await _fetch_image(source)
        else:
            image = _decode_inline_image(source)
    except (aiohttp.ClientError, asyncio.TimeoutError, binascii.Error, ValueError) as e:
        logger.warning(f"Failed to load screenshot: {e}")
        return None

    if not image or not image["bytes"] or not image["mime_type"]:
        return None
    return {
        "data": base64.b64encode(image["bytes"]).decode("ascii"),
        "mimeType": image["mime_type"],
    }


def page_text_blocks(page: Dict[str, Any]) -> List[ContentBlock]:
    """markdown, html, then one resource block per link, in that order."""
    blocks: List[ContentBlock] = []
    if page.get("markdown"):
        blocks.append(text_block(page["markdown"]))
    if page.get("html"):
        blocks.append(text_block(page["html"]))
    for link in page.get("links") or []:
        blocks.append(link_block(link))
    return blocks


async def scrape_webpage(
        params: ScrapeWebpageParams,
        invocation: Invocation,
        clients: ClientFactory
) -> CallToolResult:
    try:
        client = clients.create(params.api_key, invocation)
    except NoApiKeyError as e:
        return error_result(str(e))

    try:
        result = await client.scrape.start_and_wait(build_request(
            params.session_options,
            url=params.url,
            scrapeOptions={"formats": list(params.output_format)},
        ))
        if result.get("error"):
            return error_result(result["error"])

        data = result.get("data") or {}
        content = page_text_blocks(data)
        is_error = False

        if data.get("screenshot"):
            image = await download_image_as_base64(data["screenshot"])
            if image is None:
                content.append(text_block(SCREENSHOT_FAILED_MESSAGE))
                is_error = True
            else:
                content.append(ImageContent(type="image", data=image["data"], mimeType=image["mimeType"]))

        return tool_result(content, is_error=is_error)
    except Exception as e:
        logger.exception(f"scrape_webpage failed for {params.url}")
        return error_result(str(e))


async def crawl_webpages(
        params: CrawlWebpagesParams,
        invocation: Invocation,
        clients: ClientFactory
) -> CallToolResult:
    try:
        client = clients.create(params.api_key, invocation)
    except NoApiKeyError as e:
        return error_result(str(e))

    try:
        result = await client.crawl.start_and_wait(build_request(
            params.session_options,
            url=params.url,
            scrapeOptions={"formats": list(params.output_format)},
            maxPages=params.max_pages,
            ignoreSitemap=params.ignore_sitemap,
            followLinks=params.follow_links,
        ))
        if result.get("error"):
            return error_result(result["error"])

        content: List[ContentBlock] = []
        for page in result.get("data") or []:
            if not page:
                continue
            content.extend(page_text_blocks(page))
            # Crawl screenshots are already base64 webp
            if page.get("screenshot"):
                content.append(ImageContent(
                    type="image", data=page["screenshot"], mimeType=CRAWL_SCREENSHOT_MIME_TYPE
                ))

        return tool_result(content)
    except Exception as e:
        logger.exception(f"crawl_webpages failed for {params.url}")
        return error_result(str(e))
