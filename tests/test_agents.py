"""
Tests for browser_use and openai_computer_use_agent.
"""
import json

import pytest

from hyperbrowser_mcp.tools.agents import browser_use, openai_computer_use_agent
from hyperbrowser_mcp.tools.params import BrowserTaskParams


def task_data(step_count=7):
    return {
        "steps": [{"action": f"step-{i}"} for i in range(step_count)],
        "finalResult": "The price is $10",
    }


class TestBrowserUse:

    @pytest.mark.asyncio
    async def test_steps_cleared_by_default(self, clients, fake_client, stdio):
        fake_client.browser_use.start_and_wait.return_value = {"data": task_data(7)}

        result = await browser_use(BrowserTaskParams(task="find the price"), stdio, clients)

        assert result.isError is False
        payload = json.loads(result.content[0].text)
        assert payload["steps"] == []
        assert payload["finalResult"] == "The price is $10"

    @pytest.mark.asyncio
    async def test_steps_kept_when_requested(self, clients, fake_client, stdio):
        fake_client.browser_use.start_and_wait.return_value = {"data": task_data(7)}
        params = BrowserTaskParams.model_validate({"task": "t", "returnStepInfo": True})

        result = await browser_use(params, stdio, clients)

        assert len(json.loads(result.content[0].text)["steps"]) == 7

    @pytest.mark.asyncio
    async def test_request_shape(self, clients, fake_client, stdio):
        fake_client.browser_use.start_and_wait.return_value = {"data": task_data(0)}
        params = BrowserTaskParams.model_validate({"task": "t", "maxSteps": 25})

        await browser_use(params, stdio, clients)

        fake_client.browser_use.start_and_wait.assert_awaited_once_with({"task": "t", "maxSteps": 25})

    @pytest.mark.asyncio
    async def test_missing_data(self, clients, fake_client, stdio):
        fake_client.browser_use.start_and_wait.return_value = {"status": "completed", "data": None}

        result = await browser_use(BrowserTaskParams(task="t"), stdio, clients)

        assert result.isError is True
        assert result.content[0].text == "Task result data is empty/missing"

    @pytest.mark.asyncio
    async def test_backend_error(self, clients, fake_client, stdio):
        fake_client.browser_use.start_and_wait.return_value = {"error": "Agent crashed"}

        result = await browser_use(BrowserTaskParams(task="t"), stdio, clients)

        assert result.isError is True
        assert result.content[0].text == "Agent crashed"


class TestComputerUseAgent:

    @pytest.mark.asyncio
    async def test_final_result_format(self, clients, fake_client, stdio):
        fake_client.cua.start_and_wait.return_value = {"data": task_data(3)}

        result = await openai_computer_use_agent(BrowserTaskParams(task="t"), stdio, clients)

        assert result.content[0].text == "Final Result: The price is $10\n\nSteps: []"

    @pytest.mark.asyncio
    async def test_final_result_with_steps(self, clients, fake_client, stdio):
        fake_client.cua.start_and_wait.return_value = {"data": task_data(1)}
        params = BrowserTaskParams(task="t", return_step_info=True)

        result = await openai_computer_use_agent(params, stdio, clients)

        expected_steps = json.dumps([{"action": "step-0"}], indent=2)
        assert result.content[0].text == f"Final Result: The price is $10\n\nSteps: {expected_steps}"
