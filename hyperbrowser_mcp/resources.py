"""Static, read-only documentation resources."""
from typing import Dict, List

from mcp.types import Resource

from .errors import ResourceNotFoundError

STATIC_RESOURCES: List[Dict[str, str]] = [
    {
        "uri": "hyperbrowser://docs/overview",
        "name": "Hyperbrowser overview",
        "description": "What the Hyperbrowser tools do and how API keys are resolved",
        "mimeType": "text/markdown",
        "text": (
            "# Hyperbrowser\n\n"
            "Hyperbrowser runs headless browsers in the cloud. The tools on this server scrape, crawl and "
            "extract data from webpages, run autonomous browser agents and manage persistent profiles.\n\n"
            "Every tool needs an API key. It is taken from the `apiKey` argument when given, otherwise from "
            "the bearer token of an authenticated SSE connection, otherwise from the `HB_API_KEY` or "
            "`HYPERBROWSER_API_KEY` environment variable.\n"
        ),
    },
    {
        "uri": "hyperbrowser://docs/session-options",
        "name": "Session options",
        "description": "Browser session toggles accepted by the scrape, crawl, extract and agent tools",
        "mimeType": "text/markdown",
        "text": (
            "# Session options\n\n"
            "- `useProxy`: route the session through a proxy.\n"
            "- `useStealth`: enable stealth fingerprinting.\n"
            "- `solveCaptchas`: solve captchas automatically.\n"
            "- `acceptCookies`: close cookie consent popups.\n\n"
            "All default to `false` when `sessionOptions` is given. Leave the block out to use the "
            "service defaults.\n"
        ),
    },
    {
        "uri": "hyperbrowser://docs/output-formats",
        "name": "Output formats",
        "description": "Formats available to scrape_webpage and crawl_webpages",
        "mimeType": "text/markdown",
        "text": (
            "# Output formats\n\n"
            "- `markdown`: page content as markdown text.\n"
            "- `html`: raw HTML.\n"
            "- `links`: every link on the page, one resource per link.\n"
            "- `screenshot`: an image of the page.\n"
        ),
    },
]


def list_resources() -> List[Resource]:
    return [
        Resource(
            uri=r["uri"],
            name=r["name"],
            description=r["description"],
            mimeType=r["mimeType"],
        )
        for r in STATIC_RESOURCES
    ]


def get_resource(uri: str) -> Dict[str, str]:
    resource = next((r for r in STATIC_RESOURCES if r["uri"] == uri), None)
    if resource is None:
        raise ResourceNotFoundError(f"Resource not found: {uri}")
    return resource
