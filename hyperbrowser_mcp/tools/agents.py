"""Autonomous browser tasks: browser_use and the OpenAI computer-use agent.

Both run a whole task remotely and return its transcript. Step traces can be
large, so they are dropped unless ``returnStepInfo`` is set.
"""
import json
import logging
from typing import Any, Callable, Dict

from mcp.types import CallToolResult

from ..client import ClientFactory
from ..context import Invocation
from ..errors import NoApiKeyError
from .common import NO_DATA_MESSAGE, build_request, error_result, text_block, tool_result
from .params import BrowserTaskParams

logger = logging.getLogger(__name__)


def format_browser_use(task_data: Dict[str, Any]) -> str:
    return json.dumps(task_data)


def format_final_result(task_data: Dict[str, Any]) -> str:
    steps = json.dumps(task_data.get("steps", []), indent=2)
    return f"Final Result: {task_data.get('finalResult')}\n\nSteps: {steps}"


async def _run_task(
        service_name: str,
        params: BrowserTaskParams,
        invocation: Invocation,
        clients: ClientFactory,
        formatter: Callable[[Dict[str, Any]], str]
) -> CallToolResult:
    try:
        client = clients.create(params.api_key, invocation)
    except NoApiKeyError as e:
        return error_result(str(e))

    try:
        service = getattr(client, service_name)
        result = await service.start_and_wait(build_request(
            params.session_options,
            task=params.task,
            maxSteps=params.max_steps,
        ))
        if result.get("error"):
            return error_result(result["error"])

        task_data = result.get("data")
        if not task_data:
            return error_result(NO_DATA_MESSAGE)

        task_data = dict(task_data)
        if not params.return_step_info:
            task_data["steps"] = []
        return tool_result([text_block(formatter(task_data))])
    except Exception as e:
        logger.exception(f"{service_name} task failed")
        return error_result(str(e))


async def browser_use(params: BrowserTaskParams, invocation: Invocation, clients: ClientFactory) -> CallToolResult:
    return await _run_task("browser_use", params, invocation, clients, format_browser_use)


async def openai_computer_use_agent(
        params: BrowserTaskParams,
        invocation: Invocation,
        clients: ClientFactory
) -> CallToolResult:
    return await _run_task("cua", params, invocation, clients, format_final_result)
