"""Gateway: OpenAI-compatible completion client -- implements CompletionClient port.

Targets local servers that speak ``/chat/completions`` (LM Studio, llama.cpp
server, Ollama's ``/v1``, vLLM), and hosted OpenAI-compatible APIs.
"""

from __future__ import annotations

import json
import logging

import openai

from lazy_voice_memo.l1_entities.chat_message import ChatMessage
from lazy_voice_memo.l1_entities.errors import MalformedResponseError, NetworkError, RemoteTimeoutError

log = logging.getLogger('lvm.llm')

DEFAULT_BASE_URL = 'http://localhost:1234/v1'
DEFAULT_MODEL = 'local-model'
DEFAULT_TEMPERATURE = 0.7
DEFAULT_TIMEOUT = 60.0
LOCAL_API_KEY = 'lm-studio'  # local servers ignore it, the SDK requires one


def extract_content(payload: object) -> str:
    """Navigate ``choices[0].message.content``; raise MalformedResponseError on any other shape."""
    if not isinstance(payload, dict):
        raise MalformedResponseError('Failed to parse response: body is not a JSON object')
    choices = payload.get('choices')
    if not isinstance(choices, list) or not choices:
        raise MalformedResponseError('Failed to parse response: missing "choices"')
    first = choices[0]
    message = first.get('message') if isinstance(first, dict) else None
    if not isinstance(message, dict):
        raise MalformedResponseError('Failed to parse response: missing "message" in first choice')
    content = message.get('content')
    if not isinstance(content, str):
        raise MalformedResponseError('Failed to parse response: "content" is not a string')
    return content


class OpenAICompatCompletionClient:
    """Wraps openai.AsyncOpenAI; one POST per call, no SDK retries."""

    def __init__(
        self,
        base_url: str = DEFAULT_BASE_URL,
        api_key: str | None = LOCAL_API_KEY,
        model: str = DEFAULT_MODEL,
        temperature: float = DEFAULT_TEMPERATURE,
        timeout: float = DEFAULT_TIMEOUT,
    ) -> None:
        self._base_url = base_url
        self._api_key = api_key
        self._model = model
        self._temperature = temperature
        self._timeout = timeout

    @property
    def base_url(self) -> str:
        return self._base_url

    def build_request(self, prompt: str) -> dict:
        """Request body sent to ``{base_url}/chat/completions``."""
        return {
            'model': self._model,
            'messages': [ChatMessage(role='user', content=prompt).model_dump()],
            'temperature': self._temperature,
        }

    async def complete(self, prompt: str) -> str:
        client = openai.AsyncOpenAI(
            api_key=self._api_key,
            base_url=self._base_url,
            timeout=self._timeout,
            max_retries=0,
        )
        body = self.build_request(prompt)
        log.debug('Completion request: %d prompt chars -> %s', len(prompt), self._base_url)
        try:
            raw = await client.chat.completions.with_raw_response.create(**body)  # ty: ignore[invalid-argument-type] -- dict satisfies ChatCompletionMessageParam at runtime
        except openai.APITimeoutError as exc:
            raise RemoteTimeoutError(f'Completion request timed out after {self._timeout:.0f}s') from exc
        except openai.APIConnectionError as exc:
            raise NetworkError(f'Cannot reach completion endpoint {self._base_url}: {exc}') from exc
        except openai.APIStatusError as exc:
            raise NetworkError(f'Completion endpoint returned HTTP {exc.status_code}: {exc.message}') from exc

        try:
            payload = raw.http_response.json()
        except (json.JSONDecodeError, UnicodeDecodeError) as exc:
            raise MalformedResponseError(f'Failed to parse response: {exc}') from exc

        content = extract_content(payload)
        log.debug('Completion response (%d chars): %s', len(content), content[:500])
        return content

    def check_connectivity(self) -> tuple[bool, str]:
        try:
            client = openai.OpenAI(api_key=self._api_key, base_url=self._base_url, timeout=5.0, max_retries=0)
            client.models.list()
            return True, ''
        except openai.AuthenticationError as e:
            return False, f'Authentication failed: {e}'
        except Exception as e:
            return False, f'Cannot connect to completion endpoint: {e}'
