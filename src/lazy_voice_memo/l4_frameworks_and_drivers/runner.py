"""Headless runner -- process one recording, or acquire the model, from the terminal."""

from __future__ import annotations

import asyncio
import logging
import sys
from concurrent.futures import ThreadPoolExecutor
from pathlib import Path

from lazy_voice_memo.l1_entities.errors import RemoteError
from lazy_voice_memo.l1_entities.model_status import ModelDescriptor
from lazy_voice_memo.l1_entities.pipeline_event import PipelineEvent, StageStatus
from lazy_voice_memo.l1_entities.pipeline_result import PipelineOutcome, PipelineResult
from lazy_voice_memo.l2_use_cases.enhance_transcript_use_case import EnhanceTranscriptUseCase
from lazy_voice_memo.l2_use_cases.ports.acquisition_chooser import AcquisitionChooser
from lazy_voice_memo.l2_use_cases.process_recording_use_case import ProcessRecordingUseCase
from lazy_voice_memo.l2_use_cases.provision_model_use_case import ProvisionModelUseCase

log = logging.getLogger('lvm.cli')


def _err(msg: str) -> None:
    print(msg, file=sys.stderr, flush=True)


class DownloadProgressPrinter:
    """Prints whole-percent steps; says 'size unknown' once instead of a fake 0%."""

    def __init__(self) -> None:
        self._last_percent: int | None = None
        self._unknown_reported = False

    def __call__(self, fraction: float | None) -> None:
        if fraction is None:
            if not self._unknown_reported:
                _err('  Downloading model (size unknown)...')
                self._unknown_reported = True
            return
        percent = int(fraction * 100)
        if percent != self._last_percent:
            self._last_percent = percent
            _err(f'  Downloading model: {percent}%')


def _print_event(event: PipelineEvent) -> None:
    label = event.stage.value.replace('_', ' ')
    match event.status:
        case StageStatus.STARTED:
            _err(f'{label.capitalize()}...')
        case StageStatus.SUCCEEDED:
            _err(f'  {label} ok')
        case StageStatus.FAILED:
            _err(f'  {label} failed: {event.detail}')
        case StageStatus.SKIPPED:
            log.debug('Stage %s skipped: %s', label, event.detail)


def render_result(result: PipelineResult) -> str:
    """Human-readable summary for stdout."""
    parts: list[str] = []
    if result.title:
        parts.append(f'# {result.title}')
    parts.append('## Original transcript\n\n' + (result.original_transcript or '(none)'))
    if result.enhanced_transcript:
        parts.append('## Enhanced transcript\n\n' + result.enhanced_transcript)
    if result.follow_up_questions:
        parts.append('## Follow-up questions\n\n' + '\n'.join(f'- {q}' for q in result.follow_up_questions))
    return '\n\n'.join(parts)


def run_pipeline(
    pipeline: ProcessRecordingUseCase,
    enhancer: EnhanceTranscriptUseCase,
    audio_path: Path,
    chooser: AcquisitionChooser,
    *,
    with_follow_up: bool = False,
    post_platforms: list[str] | None = None,
    style_examples: list[str] | None = None,
    json_out: Path | None = None,
) -> int:
    """Run the pipeline for *audio_path*, print results, return a process exit code."""
    _err(f'Processing: {audio_path}')
    result = asyncio.run(
        pipeline.execute(audio_path, chooser, with_follow_up=with_follow_up, on_event=_print_event)
    )

    if result.outcome is PipelineOutcome.FAILED:
        _err(f'Error: {result.error}')
        _write_json(result, json_out)
        return 1

    print(render_result(result))

    for platform in post_platforms or []:
        source = result.enhanced_transcript or result.original_transcript
        if not source:
            break
        try:
            post = asyncio.run(enhancer.convert_to_post(source, platform, style_examples))
        except RemoteError as exc:
            log.error('Post conversion for %s failed: %s', platform, exc, exc_info=True)
            _err(f'Warning: {platform} post failed: {exc}')
            continue
        print(f'\n## {platform} post\n\n{post}')

    if result.outcome is PipelineOutcome.PARTIAL:
        _err(f'Warning: finished with partial results ({result.failed_stage.value} failed: {result.error})')

    _write_json(result, json_out)
    return 0


def _write_json(result: PipelineResult, json_out: Path | None) -> None:
    if json_out is None:
        return
    json_out.parent.mkdir(parents=True, exist_ok=True)
    json_out.write_text(result.model_dump_json(indent=2), encoding='utf-8')
    _err(f'Saved result: {json_out}')


def download_model(provisioner: ProvisionModelUseCase) -> ModelDescriptor:
    """Download in a worker thread so Ctrl-C can cancel the transfer cleanly."""
    with ThreadPoolExecutor(max_workers=1, thread_name_prefix='lvm-download') as pool:
        future = pool.submit(provisioner.download)
        try:
            return future.result()
        except KeyboardInterrupt:
            _err('\nCancelling download...')
            provisioner.cancel()
            return future.result()
