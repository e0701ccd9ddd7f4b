"""Use case: end-to-end recording pipeline -- acquire, normalize, transcribe, enhance, title."""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Callable
from pathlib import Path

from lazy_voice_memo.l1_entities.errors import AcquisitionError, AudioError, InferenceError, RemoteError
from lazy_voice_memo.l1_entities.pipeline_event import PipelineEvent, StageStatus
from lazy_voice_memo.l1_entities.pipeline_result import PipelineResult, PipelineStage
from lazy_voice_memo.l2_use_cases.enhance_transcript_use_case import EnhanceTranscriptUseCase
from lazy_voice_memo.l2_use_cases.ports.acquisition_chooser import AcquisitionChooser
from lazy_voice_memo.l2_use_cases.ports.audio_normalizer import AudioNormalizer
from lazy_voice_memo.l2_use_cases.provision_model_use_case import ProvisionModelUseCase
from lazy_voice_memo.l2_use_cases.transcribe_audio_use_case import TranscribeAudioUseCase

log = logging.getLogger('lvm.pipeline')

EventCallback = Callable[[PipelineEvent], None]


class ProcessRecordingUseCase:
    """Sequences the stages of one run and accumulates partial results.

    Stages run strictly one after another. Blocking stages (acquisition,
    decoding, inference) run in worker threads via ``asyncio.to_thread`` so
    several runs can share an event loop. Acquisition, normalization and
    transcription failures end the run; enhancement, title and follow-up
    failures leave their fields empty and keep everything produced before.
    Stage errors are recorded, never translated or retried.
    """

    def __init__(
        self,
        provisioner: ProvisionModelUseCase,
        normalizer: AudioNormalizer,
        transcribe: TranscribeAudioUseCase,
        enhancer: EnhanceTranscriptUseCase,
    ) -> None:
        self._provisioner = provisioner
        self._normalizer = normalizer
        self._transcribe = transcribe
        self._enhancer = enhancer

    async def execute(
        self,
        audio_path: Path,
        chooser: AcquisitionChooser,
        *,
        with_follow_up: bool = False,
        on_event: EventCallback | None = None,
    ) -> PipelineResult:
        result = PipelineResult(audio_path=str(audio_path))

        def emit(stage: PipelineStage, status: StageStatus, detail: str = '') -> None:
            if on_event is not None:
                on_event(PipelineEvent(stage=stage, status=status, detail=detail))

        def fail(stage: PipelineStage, exc: Exception) -> PipelineResult:
            log.error('Stage %s failed: %s: %s', stage.value, type(exc).__name__, exc, exc_info=exc)
            result.record_failure(stage, exc)
            emit(stage, StageStatus.FAILED, str(exc))
            return result

        log.info('Pipeline start: %s', audio_path)

        # 1. Model gate
        self._provisioner.check()
        descriptor = self._provisioner.descriptor
        if descriptor.status.is_ready:
            emit(PipelineStage.ACQUIRE, StageStatus.SKIPPED, descriptor.path)
        else:
            emit(PipelineStage.ACQUIRE, StageStatus.STARTED, descriptor.status.describe())
            try:
                descriptor = await asyncio.to_thread(self._provisioner.acquire, chooser)
            except AcquisitionError as exc:
                return fail(PipelineStage.ACQUIRE, exc)
            emit(PipelineStage.ACQUIRE, StageStatus.SUCCEEDED, descriptor.path)

        # 2. Normalize
        emit(PipelineStage.NORMALIZE, StageStatus.STARTED, str(audio_path))
        try:
            audio = await asyncio.to_thread(self._normalizer.normalize, audio_path)
        except AudioError as exc:
            return fail(PipelineStage.NORMALIZE, exc)
        emit(PipelineStage.NORMALIZE, StageStatus.SUCCEEDED, f'{audio.duration:.1f}s')

        # 3. Transcribe
        emit(PipelineStage.TRANSCRIBE, StageStatus.STARTED)
        try:
            transcript = await asyncio.to_thread(self._transcribe.execute, audio, descriptor)
        except InferenceError as exc:
            return fail(PipelineStage.TRANSCRIBE, exc)
        result.original_transcript = transcript
        emit(PipelineStage.TRANSCRIBE, StageStatus.SUCCEEDED, transcript)

        if not transcript:
            log.info('No speech recognized in %s; skipping LLM stages', audio_path)
            emit(PipelineStage.ENHANCE, StageStatus.SKIPPED, 'empty transcript')
            return result

        # 4. Enhance
        emit(PipelineStage.ENHANCE, StageStatus.STARTED)
        try:
            enhanced = await self._enhancer.enhance(transcript)
        except RemoteError as exc:
            return fail(PipelineStage.ENHANCE, exc)
        result.enhanced_transcript = enhanced
        emit(PipelineStage.ENHANCE, StageStatus.SUCCEEDED, enhanced)

        # 5. Title
        emit(PipelineStage.TITLE, StageStatus.STARTED)
        try:
            result.title = await self._enhancer.title(enhanced)
        except RemoteError as exc:
            fail(PipelineStage.TITLE, exc)
        else:
            emit(PipelineStage.TITLE, StageStatus.SUCCEEDED, result.title)

        # 6. Follow-up questions, on request
        if with_follow_up:
            emit(PipelineStage.FOLLOW_UP, StageStatus.STARTED)
            try:
                result.follow_up_questions = await self._enhancer.follow_up_questions(enhanced)
            except RemoteError as exc:
                fail(PipelineStage.FOLLOW_UP, exc)
            else:
                emit(PipelineStage.FOLLOW_UP, StageStatus.SUCCEEDED, f'{len(result.follow_up_questions)} questions')

        log.info('Pipeline done: %s (outcome=%s)', audio_path, result.outcome.value)
        return result
