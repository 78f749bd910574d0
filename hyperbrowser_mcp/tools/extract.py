"""extract_structured_data"""
import json
import logging

from mcp.types import CallToolResult

from ..client import ClientFactory
from ..context import Invocation
from ..errors import NoApiKeyError
from .common import build_request, error_result, text_block, tool_result
from .params import ExtractStructuredDataParams, resolve_extraction_schema

logger = logging.getLogger(__name__)


async def extract_structured_data(
        params: ExtractStructuredDataParams,
        invocation: Invocation,
        clients: ClientFactory
) -> CallToolResult:
    try:
        client = clients.create(params.api_key, invocation)
    except NoApiKeyError as e:
        return error_result(str(e))

    schema = resolve_extraction_schema(params.json_schema)

    try:
        result = await client.extract.start_and_wait(build_request(
            params.session_options,
            urls=list(params.urls),
            prompt=params.prompt,
            schema=schema,
        ))
        if result.get("error"):
            return error_result(result["error"])

        return tool_result([text_block(json.dumps(result.get("data"), indent=2))])
    except Exception as e:
        logger.exception("extract_structured_data failed")
        return error_result(str(e))
