"""HTTP client for the upstream chat-completions API."""
import httpx
import logging
from typing import List, Dict, Optional, AsyncGenerator
from pydantic import ValidationError
from app.config import settings
from app.schemas.upstream import (
    UpstreamChatRequest,
    UpstreamChatResponse,
    UpstreamStreamFrame,
)
from app.services.exceptions import UpstreamError, UpstreamConnectionError

logger = logging.getLogger(__name__)

DATA_PREFIX = "data: "
DONE_SENTINEL = "[DONE]"
ERROR_PREFIX = "Error calling AI API: "
NO_RESPONSE = "No response from AI"


class StreamDone(Exception):
    """Raised by parse_stream_line when the end-of-stream sentinel is seen."""


def parse_stream_line(line: str) -> Optional[str]:
    """
    Decode one line of an SSE response body.

    Args:
        line: Raw line without its trailing newline

    Returns:
        The non-empty text fragment the line carries, or None when the line
        is not a data frame, carries no content, or fails to decode.

    Raises:
        StreamDone: If the line is the end-of-stream sentinel
    """
    if not line.startswith(DATA_PREFIX):
        return None
    data_str = line[len(DATA_PREFIX):]
    if data_str.strip() == DONE_SENTINEL:
        raise StreamDone()
    try:
        frame = UpstreamStreamFrame.model_validate_json(data_str)
    except ValidationError:
        # Keep-alive and control lines are not fatal
        logger.debug(f"Skipping undecodable SSE frame: {data_str!r}")
        return None
    content = frame.fragment()
    return content or None


class LLMClient:
    """Client for the provider's chat-completions endpoint."""

    def __init__(self, transport: Optional[httpx.AsyncBaseTransport] = None):
        """
        Initialize the upstream client from settings.

        Args:
            transport: Optional httpx transport (used to stub the provider)
        """
        self.api_url = settings.llm_api_url
        self.api_key = settings.llm_api_key
        self.model = settings.llm_model
        self.timeout = settings.llm_timeout
        self.stream_timeout = settings.llm_stream_timeout
        self.transport = transport

    def build_request(self, messages: List[Dict[str, str]], stream: bool) -> UpstreamChatRequest:
        """Build the provider request from ordered role/content pairs."""
        return UpstreamChatRequest(
            model=self.model,
            stream=stream,
            messages=messages,
        )

    def _headers(self, stream: bool) -> Dict[str, str]:
        headers = {
            "Authorization": f"Bearer {self.api_key}",
            "Content-Type": "application/json",
        }
        if stream:
            headers["Accept"] = "text/event-stream"
        return headers

    def _client(self, timeout: float) -> httpx.AsyncClient:
        return httpx.AsyncClient(timeout=timeout, transport=self.transport)

    async def complete(self, messages: List[Dict[str, str]]) -> str:
        """
        Generate a buffered completion.

        Never raises: failures are folded into a human-readable message.

        Args:
            messages: List of message dicts with 'role' and 'content'

        Returns:
            First choice's content, or a message starting with ERROR_PREFIX
            (or NO_RESPONSE when the provider returns no choices)
        """
        payload = self.build_request(messages, stream=False).model_dump()

        async with self._client(self.timeout) as client:
            try:
                response = await client.post(self.api_url, json=payload, headers=self._headers(False))
                response.raise_for_status()
                body = UpstreamChatResponse.model_validate(response.json())
            except Exception as e:
                logger.error(f"Upstream chat request failed: {e}")
                return f"{ERROR_PREFIX}{e}"

        if body.choices and body.choices[0].message is not None:
            return body.choices[0].message.content or ""
        return NO_RESPONSE

    async def complete_stream(self, messages: List[Dict[str, str]]) -> AsyncGenerator[str, None]:
        """
        Generate a streaming completion (SSE).

        Args:
            messages: List of message dicts with 'role' and 'content'

        Yields:
            Non-empty text fragments in arrival order

        Raises:
            UpstreamError: If the provider answers with a non-2xx status
            UpstreamConnectionError: If the connection fails
        """
        payload = self.build_request(messages, stream=True).model_dump()

        async with self._client(self.stream_timeout) as client:
            try:
                async with client.stream(
                    "POST", self.api_url, json=payload, headers=self._headers(True)
                ) as response:
                    if not response.is_success:
                        # Drain the error body for diagnostics
                        body = (await response.aread()).decode("utf-8", errors="replace")
                        logger.error(f"Upstream API error {response.status_code}: {body}")
                        raise UpstreamError(response.status_code, body)
                    async for line in response.aiter_lines():
                        try:
                            fragment = parse_stream_line(line)
                        except StreamDone:
                            break
                        if fragment:
                            yield fragment
            except httpx.HTTPError as e:
                logger.error(f"Upstream streaming request failed: {e}")
                raise UpstreamConnectionError(str(e)) from e
