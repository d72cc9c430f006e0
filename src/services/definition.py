"""
Fetches the digest definition (selectors and prompt templates) from a remote YAML file.
"""
import logging
from typing import Optional

import httpx
import yaml

from core.schemas import DigestDefinition

logger = logging.getLogger(__name__)


async def fetch_digest_definition(
    url: Optional[str],
    client: Optional[httpx.AsyncClient] = None,
) -> DigestDefinition:
    """
    Download and parse the digest definition.

    Raises:
        ValueError: if no URL is configured
        httpx.HTTPError: if the download fails
        yaml.YAMLError / pydantic.ValidationError: if the document is invalid
    """
    if not url:
        msg = "PROMPT_FILE_URL not set"
        logger.error(msg)
        raise ValueError(msg)

    if client is None:
        async with httpx.AsyncClient(timeout=30) as own_client:
            resp = await own_client.get(url)
    else:
        resp = await client.get(url)
    resp.raise_for_status()

    data = yaml.safe_load(resp.text)
    definition = DigestDefinition.model_validate(data)

    logger.info(
        f"Loaded digest definition '{definition.name}' "
        f"({len(definition.preference_selectors)} preference selectors, "
        f"{len(definition.candidate_selectors)} candidate selectors)"
    )
    return definition
