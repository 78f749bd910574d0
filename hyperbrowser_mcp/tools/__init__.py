"""Hyperbrowser tool configurations for the MCP server."""
from typing import Any, Awaitable, Callable, Dict, List

from mcp.types import CallToolResult

from ..client import ClientFactory
from ..context import Invocation
from .agents import browser_use, openai_computer_use_agent
from .extract import extract_structured_data
from .params import (
    BrowserTaskParams,
    CrawlWebpagesParams,
    CreateProfileParams,
    DeleteProfileParams,
    ExtractStructuredDataParams,
    ListProfilesParams,
    ScrapeWebpageParams,
    input_schema,
)
from .profiles import create_profile, delete_profile, list_profiles
from .scrape import crawl_webpages, scrape_webpage

OPENAI_CUA_DESCRIPTION = """
This tool uses OpenAI's Computer Use Agent (CUA) to autonomously perform complex browser-based tasks using a cloud browser.
It can navigate websites, fill forms, extract information, and interact with web applications with human-like behavior.

This tool is ideal for tasks that require multi-step browser interactions that cannot be accomplished with simpler tools \
like scraping, screenshots, or web extraction. For optimal results:
1. Provide a detailed, step-by-step description of the task
2. Include all relevant context (credentials, form data, specific instructions)
3. Specify the expected outcome or information to retrieve

The tool will return the final result upon completion or an error message if it encounters issues.""".strip()

# (name, description, params model, handler)
TOOL_DEFINITIONS = [
    (
        "scrape_webpage",
        "Scrape a webpage and extract its content in various formats. This tool allows fetching content from a "
        "single URL with configurable browser behavior options. Use this for extracting text content, HTML "
        "structure, collecting links, or capturing screenshots of webpages.",
        ScrapeWebpageParams,
        scrape_webpage,
    ),
    (
        "crawl_webpages",
        "Crawl a website starting from a URL and explore linked pages. This tool allows systematic collection of "
        "content from multiple pages within a domain. Use this for larger data collection tasks, content "
        "indexing, or site mapping.",
        CrawlWebpagesParams,
        crawl_webpages,
    ),
    (
        "extract_structured_data",
        "Extract structured data from one or more webpages according to a specified schema. This tool parses "
        "webpage content and returns JSON-formatted data based on your prompt instructions.",
        ExtractStructuredDataParams,
        extract_structured_data,
    ),
    (
        "browser_use",
        "Perform a certain task inside a browser session. Will perform the entirety of the task inside the "
        "browser, and return the results.",
        BrowserTaskParams,
        browser_use,
    ),
    (
        "openai_computer_use_agent",
        OPENAI_CUA_DESCRIPTION,
        BrowserTaskParams,
        openai_computer_use_agent,
    ),
    (
        "create_profile",
        "Creates a new persistent Hyperbrowser profile.",
        CreateProfileParams,
        create_profile,
    ),
    (
        "delete_profile",
        "Deletes an existing persistent Hyperbrowser profile.",
        DeleteProfileParams,
        delete_profile,
    ),
    (
        "list_profiles",
        "Lists existing persistent Hyperbrowser profiles, with optional pagination.",
        ListProfilesParams,
        list_profiles,
    ),
]

ToolHandler = Callable[[Invocation, Dict[str, Any]], Awaitable[CallToolResult]]


def create_hyperbrowser_tools(clients: ClientFactory) -> List[Dict[str, Any]]:
    """Build tool configs; ``clients`` is bound into every handler via closure.

    Handlers take ``(invocation, arguments)`` and raise ``pydantic.ValidationError``
    for arguments that do not fit the tool's params model.
    """

    def make_handler(model, func) -> ToolHandler:
        async def handler(invocation: Invocation, arguments: Dict[str, Any]) -> CallToolResult:
            params = model.model_validate(arguments or {})
            return await func(params, invocation, clients)

        return handler

    return [
        {
            "name": name,
            "description": description,
            "schema": input_schema(model),
            "handler": make_handler(model, func),
        }
        for name, description, model, func in TOOL_DEFINITIONS
    ]
