"""Persistent browser profile management."""
import json
import logging

from mcp.types import CallToolResult

from ..client import ClientFactory
from ..context import Invocation
from ..errors import HyperbrowserError, NoApiKeyError
from .common import error_result, text_block, tool_result
from .params import CreateProfileParams, DeleteProfileParams, ListProfilesParams

logger = logging.getLogger(__name__)


def _failure(action: str, e: Exception) -> str:
    if isinstance(e, HyperbrowserError):
        return f"Failed to {action}: {e.message} (Status: {e.status_code or 'N/A'})"
    return f"Failed to {action}: {e}"


async def create_profile(
        params: CreateProfileParams,
        invocation: Invocation,
        clients: ClientFactory
) -> CallToolResult:
    try:
        client = clients.create(None, invocation)
    except NoApiKeyError as e:
        return error_result(str(e))

    try:
        profile = await client.profiles.create()
    except Exception as e:
        logger.warning(f"Profile creation failed: {e}")
        return error_result(_failure("create profile", e))

    logger.info(f"Created profile {profile.get('id')}")
    return tool_result([text_block(json.dumps(profile, indent=2))])


async def delete_profile(
        params: DeleteProfileParams,
        invocation: Invocation,
        clients: ClientFactory
) -> CallToolResult:
    profile_id = params.profile_id
    try:
        client = clients.create(None, invocation)
    except NoApiKeyError as e:
        return error_result(str(e))

    try:
        await client.profiles.delete(profile_id)
    except HyperbrowserError as e:
        if e.status_code == 404:
            return error_result(f"Profile with ID {profile_id} not found.")
        return error_result(_failure(f"delete profile {profile_id}", e))
    except Exception as e:
        logger.warning(f"Deleting profile {profile_id} failed: {e}")
        return error_result(_failure(f"delete profile {profile_id}", e))

    return tool_result([text_block(f"Successfully deleted profile with ID: {profile_id}")])


async def list_profiles(
        params: ListProfilesParams,
        invocation: Invocation,
        clients: ClientFactory
) -> CallToolResult:
    try:
        client = clients.create(None, invocation)
    except NoApiKeyError as e:
        return error_result(str(e))

    try:
        # {profiles, totalCount, page, perPage}
        response = await client.profiles.list(page=params.page, limit=params.limit)
    except Exception as e:
        logger.warning(f"Listing profiles failed: {e}")
        return error_result(_failure("list profiles", e))

    return tool_result([text_block(json.dumps(response, indent=2))])
