"""Use case: LLM-driven transforms of a transcript -- enhance, title, questions, post."""

from __future__ import annotations

import enum
import logging
from collections.abc import Sequence

from lazy_voice_memo.l2_use_cases.ports.completion_client import CompletionClient
from lazy_voice_memo.l2_use_cases.utils.prompt_builder import (
    build_enhance_prompt,
    build_follow_up_prompt,
    build_post_prompt,
    build_title_prompt,
)
from lazy_voice_memo.l2_use_cases.utils.response_parser import clean_title, parse_lines

log = logging.getLogger('lvm.llm')

FOLLOW_UP_COUNT = 3


class PostPlatform(enum.Enum):
    TWITTER = 'Twitter'
    SUBSTACK = 'Substack'
    LINKEDIN = 'LinkedIn'


class EnhanceTranscriptUseCase:
    """Four prompts over one completion primitive. Each call is one-shot and stateless."""

    def __init__(self, client: CompletionClient) -> None:
        self._client = client

    async def enhance(self, transcript: str) -> str:
        """Remove filler words and improve flow, keeping the original wording and meaning."""
        log.info('Enhance request: %d chars', len(transcript))
        result = await self._client.complete(build_enhance_prompt(transcript))
        return result.strip()

    async def title(self, text: str) -> str:
        result = await self._client.complete(build_title_prompt(text))
        title = clean_title(result)
        log.info('Generated title: %r', title)
        return title

    async def follow_up_questions(self, text: str) -> list[str]:
        """Ask for three questions. The returned count follows the model's output, not the request."""
        result = await self._client.complete(build_follow_up_prompt(text, FOLLOW_UP_COUNT))
        questions = parse_lines(result)
        if len(questions) != FOLLOW_UP_COUNT:
            log.warning('Expected %d follow-up questions, parsed %d', FOLLOW_UP_COUNT, len(questions))
        return questions

    async def convert_to_post(
        self,
        text: str,
        platform: str | PostPlatform,
        style_examples: Sequence[str] | None = None,
    ) -> str:
        platform_name = platform.value if isinstance(platform, PostPlatform) else platform
        log.info('Post request: platform=%s, %d style examples', platform_name, len(style_examples or []))
        result = await self._client.complete(build_post_prompt(text, platform_name, style_examples))
        return result.strip()
