"""Input models for every tool.

Models accept the camelCase field names used on the wire (``outputFormat``,
``sessionOptions`` ...) and expose snake_case attributes. Coercion is lax
(``"10"`` becomes ``10``) but bounds, enums and URL shape are enforced.
"""
import json
import logging
from typing import Annotated, Any, Dict, List, Literal, Optional

from jsonschema import Draft7Validator
from jsonschema.exceptions import SchemaError
from jsonschema.validators import validator_for
from pydantic import AfterValidator, AnyUrl, BaseModel, ConfigDict, Field, TypeAdapter, WithJsonSchema

from ..errors import SchemaParseError

logger = logging.getLogger(__name__)

OutputFormat = Literal["markdown", "html", "links", "screenshot"]

_url_adapter = TypeAdapter(AnyUrl)


def _check_url(value: str) -> str:
    # Validate only; the caller's spelling is what gets sent upstream
    _url_adapter.validate_python(value)
    return value


Url = Annotated[str, AfterValidator(_check_url), WithJsonSchema({"type": "string", "format": "uri"})]


class ParamsModel(BaseModel):
    model_config = ConfigDict(populate_by_name=True)


class SessionOptions(ParamsModel):
    use_proxy: bool = Field(False, alias="useProxy", description="Whether to use a proxy. Recommended true.")
    use_stealth: bool = Field(False, alias="useStealth", description="Whether to use stealth mode. Recommended false.")
    solve_captchas: bool = Field(
        False, alias="solveCaptchas", description="Whether to solve captchas. Recommended false."
    )
    accept_cookies: bool = Field(
        False,
        alias="acceptCookies",
        description="Whether to automatically close the accept cookies popup. Recommended false.",
    )

    def to_request(self) -> Dict[str, bool]:
        return self.model_dump(by_alias=True)


_API_KEY_DESCRIPTION = "The API key to use for the request"
_SESSION_OPTIONS_DESCRIPTION = "Options for the browser session. Avoid setting these if not mentioned explicitly"


class ScrapeWebpageParams(ParamsModel):
    url: Url = Field(description="The URL of the webpage to scrape")
    api_key: Optional[str] = Field(None, alias="apiKey", description=_API_KEY_DESCRIPTION)
    session_options: Optional[SessionOptions] = Field(
        None, alias="sessionOptions", description=_SESSION_OPTIONS_DESCRIPTION
    )
    output_format: List[OutputFormat] = Field(
        alias="outputFormat", min_length=1, description="The format of the output"
    )


class CrawlWebpagesParams(ParamsModel):
    url: Url = Field(description="The URL of the webpage to crawl.")
    api_key: Optional[str] = Field(None, alias="apiKey", description=_API_KEY_DESCRIPTION)
    session_options: Optional[SessionOptions] = Field(
        None, alias="sessionOptions", description=_SESSION_OPTIONS_DESCRIPTION
    )
    output_format: List[OutputFormat] = Field(
        alias="outputFormat", min_length=1, description="The format of the output"
    )
    follow_links: bool = Field(alias="followLinks", description="Whether to follow links on the crawled webpages")
    max_pages: int = Field(10, alias="maxPages", ge=1, le=1000)
    ignore_sitemap: bool = Field(False, alias="ignoreSitemap")


class ExtractStructuredDataParams(ParamsModel):
    urls: List[Url] = Field(
        description=(
            "The list of URLs of the webpages to extract structured information from. "
            "Can include wildcards (e.g. https://example.com/*)"
        )
    )
    api_key: Optional[str] = Field(None, alias="apiKey", description=_API_KEY_DESCRIPTION)
    prompt: str = Field(description="The prompt to use for the extraction")
    # Kept raw here; see resolve_extraction_schema
    json_schema: Any = Field(
        None,
        alias="schema",
        description=(
            "The json schema to use for the extraction. Must provide an object describing "
            "a spec compliant json schema, any other types are invalid."
        ),
    )
    session_options: Optional[SessionOptions] = Field(
        None, alias="sessionOptions", description=_SESSION_OPTIONS_DESCRIPTION
    )


class BrowserTaskParams(ParamsModel):
    task: str = Field(description="The task to perform inside the browser")
    api_key: Optional[str] = Field(None, alias="apiKey", description=_API_KEY_DESCRIPTION)
    session_options: Optional[SessionOptions] = Field(
        None, alias="sessionOptions", description=_SESSION_OPTIONS_DESCRIPTION
    )
    return_step_info: bool = Field(
        False,
        alias="returnStepInfo",
        description=(
            "Whether to return step-by-step information about the task. "
            "Should be false by default. May contain excessive information."
        ),
    )
    max_steps: int = Field(10, alias="maxSteps", ge=1, le=1000)


class CreateProfileParams(ParamsModel):
    pass


class DeleteProfileParams(ParamsModel):
    profile_id: str = Field(alias="profileId", min_length=1, description="ID of the profile to delete")


class ListProfilesParams(ParamsModel):
    page: Optional[int] = Field(None, ge=1, description="Page number for pagination")
    limit: Optional[int] = Field(None, ge=1, description="Number of profiles per page")


def input_schema(model: type) -> Dict[str, Any]:
    """JSON schema advertised in ``tools/list`` for a params model."""
    return model.model_json_schema(by_alias=True)


# ========== Extraction schema ==========

def parse_schema(raw: Any) -> Any:
    """Turn a JSON string into a value; non-strings are returned unchanged."""
    if isinstance(raw, str):
        try:
            return json.loads(raw)
        except json.JSONDecodeError as e:
            raise SchemaParseError(f"schema is not valid JSON: {e}") from e
    return raw


def is_valid_json_schema(value: Any) -> bool:
    """Check that ``value`` is itself a well-formed JSON Schema.

    A declared ``$schema`` picks the meta-schema; anything else is Draft 7.
    """
    validator_cls = Draft7Validator
    if isinstance(value, dict) and isinstance(value.get("$schema"), str):
        validator_cls = validator_for(value, default=Draft7Validator)
    try:
        validator_cls.check_schema(value)
    except SchemaError:
        return False
    return True


def resolve_extraction_schema(raw: Any) -> Optional[Any]:
    """Best-effort: an unusable schema is dropped instead of failing the call."""
    if not raw:
        return None
    try:
        value = parse_schema(raw)
    except SchemaParseError as e:
        logger.warning(f"Ignoring extraction schema: {e}")
        return None
    if not value:
        return None
    if not is_valid_json_schema(value):
        logger.warning("Ignoring extraction schema: not a valid JSON Schema")
        return None
    return value
