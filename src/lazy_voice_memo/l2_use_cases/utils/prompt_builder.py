"""Pure functions for building completion prompts."""

from __future__ import annotations

from collections.abc import Sequence


def build_enhance_prompt(transcript: str) -> str:
    """Build the prompt that cleans up a raw transcript without changing its meaning."""
    return (
        'Enhance the following transcription by removing filler words,\n'
        'rephrasing sentences for clarity while using the same words, and improving coherence and flow.\n'
        'Keep the original meaning intact:\n'
        '\n'
        f'{transcript}'
    )


def build_title_prompt(text: str) -> str:
    """Build the prompt for a short descriptive title."""
    return (
        'Generate a concise, descriptive title for the following text.\n'
        'The title should capture the main topic or theme:\n'
        '\n'
        f'{text}'
    )


def build_follow_up_prompt(text: str, count: int = 3) -> str:
    """Build the prompt for follow-up questions. *count* is a hint to the model only."""
    return (
        f'Based on the following text, generate {count} follow-up questions that would help\n'
        'expand on the ideas or explore related topics:\n'
        '\n'
        f'{text}'
    )


def build_post_prompt(text: str, platform: str, style_examples: Sequence[str] | None = None) -> str:
    """Build the prompt that reformats *text* as a post for *platform*.

    Each style example is appended verbatim after a style reference header.
    """
    prompt = (
        f'Convert the following text into a {platform} post.\n'
        'Maintain the original ideas but format it appropriately for the platform:\n'
        '\n'
        f'{text}'
    )
    if style_examples:
        prompt += '\n\nHere are some examples of my style:\n'
        for example in style_examples:
            prompt += f'\n{example}\n'
    return prompt
