import aiohttp
import asyncio
import logging
from typing import Any, Dict

from coprctl.domain.exceptions import DescriptorFetchException, DescriptorParseException

logger = logging.getLogger(__name__)

REQUEST_TIMEOUT = aiohttp.ClientTimeout(total=60, connect=10)

class CoprClient:
    """
    Client for the Copr frontend API.
    Fetches the repository descriptor of a project; a failed request is final,
    nothing is retried.
    """

    def __init__(self, hub_url: str):
        self.hub_url = hub_url.rstrip("/")
        self.headers = {
            "Accept": "application/json",
            "User-Agent": "coprctl",
        }

    def descriptor_url(self, owner: str, dirname: str, name_version: str) -> str:
        return f"{self.hub_url}/api_3/rpmrepo/{owner}/{dirname}/{name_version}/"

    async def fetch_descriptor(
        self,
        session: aiohttp.ClientSession,
        owner: str,
        dirname: str,
        name_version: str,
    ) -> Dict[str, Any]:
        """
        Downloads the raw repository descriptor.

        Returns:
            The decoded JSON object.
        """
        url = self.descriptor_url(owner, dirname, name_version)
        logger.debug(f"Fetching repository descriptor {url}")

        try:
            async with session.get(url, headers=self.headers, timeout=REQUEST_TIMEOUT) as response:
                if response.status >= 300:
                    raise DescriptorFetchException(url, f"HTTP {response.status}")
                data = await response.json(content_type=None)
        except (aiohttp.ClientError, asyncio.TimeoutError) as e:
            raise DescriptorFetchException(url, str(e) or type(e).__name__) from e
        except ValueError as e:
            # JSONDecodeError and UnicodeDecodeError
            raise DescriptorParseException(f"Repository descriptor from {url} is not valid JSON: {e}") from e

        if not isinstance(data, dict):
            raise DescriptorParseException(f"Repository descriptor from {url} is not a JSON object.")

        return data
