"""
Channel Registration Client
Reads and updates the tag set of a device channel over the registration API.

Endpoints:
    GET /channels/{channel_id}  → {"channel": {"tags": [...], ...}}
    PUT /channels/{channel_id}  ← {"channel": {"device_type", "opt_in", "set_tags", "tags"}}
"""

import httpx
from typing import List, Dict, Any, Optional, Sequence

from channel_tags.config import get_config, Config
from channel_tags.utils.logging_config import get_logger
from channel_tags.utils.exceptions import (
    RegistrationAPIError,
    RateLimitExceededError,
    AuthenticationError,
    NetworkTimeoutError,
)
from channel_tags.utils.retry import retry

logger = get_logger("registration_client")


class ChannelRegistrationClient:
    """
    Blocking registration client for one device channel.
    Used behind RegistrationSyncWorker, never called from the registry directly.
    """

    def __init__(
        self,
        config: Optional[Config] = None,
        timeout: Optional[float] = None,
        transport: Optional[httpx.BaseTransport] = None,
    ):
        """
        Initialize the registration client.

        Args:
            config: Config object
            timeout: Request timeout in seconds
            transport: Optional httpx transport (tests use httpx.MockTransport)
        """
        self._config = config or get_config()
        channel = self._config.channel

        if timeout is None:
            timeout = self._config.api.timeout
        self._timeout = timeout

        self.client = httpx.Client(
            base_url=self._config.api.base_url,
            timeout=httpx.Timeout(timeout, connect=self._config.api.connect_timeout),
            auth=(channel.app_key, channel.app_secret),
            headers={
                "User-Agent": "ChannelTags/1.0",
                "Accept": "application/vnd.urbanairship+json; version=3",
                "Content-Type": "application/json",
            },
            transport=transport,
        )

        self._endpoint = f"/channels/{channel.channel_id}"

        retry_config = self._config.retry
        with_retry = retry(
            max_attempts=retry_config.max_attempts,
            base_delay=retry_config.base_delay,
            max_delay=retry_config.max_delay,
            exponential_base=retry_config.exponential_base,
        )
        self._get_channel = with_retry(self._request_channel)
        self._put_channel = with_retry(self._send_registration)

    def close(self):
        """Close HTTP client."""
        self.client.close()

    def __enter__(self):
        return self

    def __exit__(self, *args):
        self.close()

    # =========================================================================
    # RegistrationService interface
    # =========================================================================

    def current_tags(self) -> List[str]:
        """
        Fetch the tags currently registered for the channel.

        Returns:
            List of tags, in the order the API returns them
        """
        data = self._get_channel()
        channel = data.get("channel") if isinstance(data, dict) else None
        if not isinstance(channel, dict):
            raise RegistrationAPIError(
                "Channel lookup returned no channel object",
                endpoint=self._endpoint,
                response_body=str(data),
            )

        tags = channel.get("tags") or []
        if not isinstance(tags, list):
            raise RegistrationAPIError(
                f"Channel tags must be a list, got {type(tags).__name__}",
                endpoint=self._endpoint,
                response_body=str(data),
            )

        logger.info(f"Fetched {len(tags)} registered tags")
        return list(tags)

    def update_registration(self, tags: Sequence[str]) -> None:
        """
        Replace the channel's device tags with the given set.

        Args:
            tags: Full ordered tag set
        """
        self._put_channel(self.build_payload(tags))

    def build_payload(self, tags: Sequence[str]) -> Dict[str, Any]:
        """Build the channel registration body for a tag snapshot."""
        channel = self._config.channel
        return {
            "channel": {
                "device_type": channel.device_type,
                "opt_in": channel.opt_in,
                "set_tags": True,
                "tags": list(tags),
            }
        }

    # =========================================================================
    # HTTP
    # =========================================================================

    def _request_channel(self) -> Dict[str, Any]:
        response = self._execute("GET", None)
        try:
            return response.json()
        except ValueError as e:
            logger.error(f"Invalid JSON from GET {self._endpoint}: {e}")
            raise RegistrationAPIError(
                "Channel lookup returned invalid JSON",
                status_code=response.status_code,
                endpoint=self._endpoint,
                response_body=response.text,
            )

    def _send_registration(self, payload: Dict[str, Any]) -> None:
        self._execute("PUT", payload)

    def _execute(self, method: str, payload: Optional[Dict[str, Any]]) -> httpx.Response:
        try:
            response = self.client.request(method, self._endpoint, json=payload)
            response.raise_for_status()
            return response

        except httpx.HTTPStatusError as e:
            status = e.response.status_code
            if status == 429:
                logger.warning(f"Rate limit exceeded on {method} {self._endpoint}")
                raise RateLimitExceededError(
                    endpoint=self._endpoint,
                    response_body=e.response.text
                )
            if status in (401, 403):
                logger.error(f"Registration credentials rejected: {status}")
                raise AuthenticationError(status_code=status, endpoint=self._endpoint)
            logger.error(f"HTTP error on {method} {self._endpoint}: {status}")
            raise RegistrationAPIError(
                f"Channel registration failed: {status}",
                status_code=status,
                endpoint=self._endpoint,
                response_body=e.response.text
            )

        except httpx.TimeoutException as e:
            logger.error(f"Timeout on {method} {self._endpoint}: {e}")
            raise NetworkTimeoutError(endpoint=self._endpoint, timeout=self._timeout)

        except httpx.TransportError as e:
            logger.error(f"Transport error on {method} {self._endpoint}: {e}")
            raise RegistrationAPIError(
                f"Channel registration transport error: {e}",
                endpoint=self._endpoint
            )
