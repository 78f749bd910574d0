"""Result helpers shared by the tool handlers."""
import logging
from typing import Any, Dict, List, Optional

from mcp.types import CallToolResult, ContentBlock, EmbeddedResource, TextContent, TextResourceContents
from pydantic import ValidationError

from .params import SessionOptions

logger = logging.getLogger(__name__)

NO_DATA_MESSAGE = "Task result data is empty/missing"


def text_block(text: str) -> TextContent:
    return TextContent(type="text", text=text)


def link_block(link: str) -> ContentBlock:
    """Links become resource blocks; anything that is not a URI stays text."""
    try:
        return EmbeddedResource(type="resource", resource=TextResourceContents(uri=link, text=link))
    except ValidationError:
        logger.debug(f"Link is not a valid URI, returning as text: {link!r}")
        return text_block(link)


def tool_result(content: List[ContentBlock], is_error: bool = False) -> CallToolResult:
    return CallToolResult(content=content, isError=is_error)


def error_result(message: str) -> CallToolResult:
    return tool_result([text_block(message)], is_error=True)


def build_request(session_options: Optional[SessionOptions] = None, **fields: Any) -> Dict[str, Any]:
    """Backend request body; unset optionals are left out."""
    body = {k: v for k, v in fields.items() if v is not None}
    if session_options is not None:
        body["sessionOptions"] = session_options.to_request()
    return body
