"""Tests for ProcessRecordingUseCase -- every port is a fake; the provisioner is real."""

from __future__ import annotations

from pathlib import Path

import pytest

from lazy_voice_memo.l1_entities.errors import (
    InvalidAudioFileError,
    MalformedResponseError,
    NetworkError,
    TranscriptionFailedError,
)
from lazy_voice_memo.l1_entities.pipeline_event import PipelineEvent, StageStatus
from lazy_voice_memo.l1_entities.pipeline_result import PipelineOutcome, PipelineStage
from lazy_voice_memo.l1_entities.transcript import TranscriptSegment
from lazy_voice_memo.l2_use_cases.enhance_transcript_use_case import EnhanceTranscriptUseCase
from lazy_voice_memo.l2_use_cases.ports.acquisition_chooser import AcquisitionChoice
from lazy_voice_memo.l2_use_cases.process_recording_use_case import ProcessRecordingUseCase
from lazy_voice_memo.l2_use_cases.provision_model_use_case import ProvisionModelUseCase
from lazy_voice_memo.l2_use_cases.transcribe_audio_use_case import TranscribeAudioUseCase
from tests.conftest import (
    FakeCompletionClient,
    FakeDownloader,
    FakeNormalizer,
    FakeSettingsStore,
    FakeTranscriber,
    ScriptedChooser,
)

AUDIO = Path('/recordings/memo.m4a')
ENHANCE_NEEDLE = 'removing filler words'
TITLE_NEEDLE = 'descriptive title'
FOLLOW_UP_NEEDLE = 'follow-up questions'


class _Harness:
    def __init__(self, tmp_path: Path, *, model_present: bool = True):
        default_path = tmp_path / 'models' / 'ggml-large-v3.bin'
        if model_present:
            default_path.parent.mkdir(parents=True)
            default_path.write_bytes(b'ggml')
        self.downloader = FakeDownloader()
        self.provisioner = ProvisionModelUseCase(
            model_name='large-v3',
            default_path=default_path,
            download_url='https://example.invalid/ggml-large-v3.bin',
            downloader=self.downloader,
            settings=FakeSettingsStore(),
        )
        self.normalizer = FakeNormalizer()
        self.transcriber = FakeTranscriber(
            segments=[TranscriptSegment(text='um so we shipped'), TranscriptSegment(text='the release')]
        )
        self.completion = FakeCompletionClient()
        self.completion.respond_to(ENHANCE_NEEDLE, 'We shipped the release.')
        self.completion.respond_to(TITLE_NEEDLE, '"Shipping Day"')
        self.completion.respond_to(FOLLOW_UP_NEEDLE, 'What broke?\nWho helped?\nWhat next?')
        self.events: list[PipelineEvent] = []

    def pipeline(self) -> ProcessRecordingUseCase:
        return ProcessRecordingUseCase(
            provisioner=self.provisioner,
            normalizer=self.normalizer,
            transcribe=TranscribeAudioUseCase(self.transcriber, cpu_count=4),
            enhancer=EnhanceTranscriptUseCase(self.completion),
        )

    async def run(self, chooser=None, **kwargs):
        return await self.pipeline().execute(
            AUDIO,
            chooser or ScriptedChooser(),
            on_event=self.events.append,
            **kwargs,
        )

    def statuses(self, stage: PipelineStage) -> list[StageStatus]:
        return [e.status for e in self.events if e.stage is stage]


class TestHappyPath:
    @pytest.mark.asyncio
    async def test_full_result(self, tmp_path: Path):
        h = _Harness(tmp_path)
        result = await h.run()

        assert result.outcome is PipelineOutcome.SUCCESS
        assert result.audio_path == str(AUDIO)
        assert result.original_transcript == 'um so we shipped the release'
        assert result.enhanced_transcript == 'We shipped the release.'
        assert result.title == 'Shipping Day'
        assert result.follow_up_questions is None
        assert result.failed_stage is None

    @pytest.mark.asyncio
    async def test_title_generated_from_enhanced_text(self, tmp_path: Path):
        h = _Harness(tmp_path)
        await h.run()

        title_prompt = next(p for p in h.completion.prompts if TITLE_NEEDLE in p)
        assert title_prompt.endswith('We shipped the release.')

    @pytest.mark.asyncio
    async def test_event_order(self, tmp_path: Path):
        h = _Harness(tmp_path)
        await h.run()

        assert h.statuses(PipelineStage.ACQUIRE) == [StageStatus.SKIPPED]
        stages = [e.stage for e in h.events if e.status is StageStatus.SUCCEEDED]
        assert stages == [
            PipelineStage.NORMALIZE,
            PipelineStage.TRANSCRIBE,
            PipelineStage.ENHANCE,
            PipelineStage.TITLE,
        ]

    @pytest.mark.asyncio
    async def test_follow_up_on_request(self, tmp_path: Path):
        h = _Harness(tmp_path)
        result = await h.run(with_follow_up=True)

        assert result.follow_up_questions == ['What broke?', 'Who helped?', 'What next?']
        assert h.statuses(PipelineStage.FOLLOW_UP) == [StageStatus.STARTED, StageStatus.SUCCEEDED]

    @pytest.mark.asyncio
    async def test_no_follow_up_prompt_by_default(self, tmp_path: Path):
        h = _Harness(tmp_path)
        await h.run()
        assert not any(FOLLOW_UP_NEEDLE in p for p in h.completion.prompts)


class TestModelGate:
    @pytest.mark.asyncio
    async def test_missing_model_downloaded_first(self, tmp_path: Path):
        h = _Harness(tmp_path, model_present=False)
        result = await h.run(ScriptedChooser(AcquisitionChoice.download()))

        assert result.outcome is PipelineOutcome.SUCCESS
        assert len(h.downloader.calls) == 1
        assert h.statuses(PipelineStage.ACQUIRE) == [StageStatus.STARTED, StageStatus.SUCCEEDED]
        (_, model_path, _), = h.transcriber.transcribe_calls
        assert model_path == str((tmp_path / 'models' / 'ggml-large-v3.bin').absolute())

    @pytest.mark.asyncio
    async def test_cancelled_acquisition_fails_before_decoding(self, tmp_path: Path):
        h = _Harness(tmp_path, model_present=False)
        result = await h.run(ScriptedChooser(AcquisitionChoice.cancel()))

        assert result.outcome is PipelineOutcome.FAILED
        assert result.failed_stage is PipelineStage.ACQUIRE
        assert h.normalizer.calls == []
        assert h.completion.prompts == []


class TestFatalStages:
    @pytest.mark.asyncio
    async def test_invalid_audio(self, tmp_path: Path):
        h = _Harness(tmp_path)
        h.normalizer = FakeNormalizer(error=InvalidAudioFileError('No audio track in: memo.m4a'))
        result = await h.run()

        assert result.outcome is PipelineOutcome.FAILED
        assert result.failed_stage is PipelineStage.NORMALIZE
        assert 'No audio track' in result.error
        assert result.original_transcript == ''
        assert h.transcriber.transcribe_calls == []

    @pytest.mark.asyncio
    async def test_transcription_failure(self, tmp_path: Path):
        h = _Harness(tmp_path)
        h.transcriber = FakeTranscriber(error=TranscriptionFailedError('engine crashed'))
        result = await h.run()

        assert result.outcome is PipelineOutcome.FAILED
        assert result.failed_stage is PipelineStage.TRANSCRIBE
        assert h.statuses(PipelineStage.TRANSCRIBE) == [StageStatus.STARTED, StageStatus.FAILED]
        assert h.completion.prompts == []


class TestPartialResults:
    @pytest.mark.asyncio
    async def test_empty_transcript_skips_llm(self, tmp_path: Path):
        h = _Harness(tmp_path)
        h.transcriber.set_segments([])
        result = await h.run(with_follow_up=True)

        assert result.outcome is PipelineOutcome.SUCCESS
        assert result.original_transcript == ''
        assert result.enhanced_transcript == ''
        assert h.completion.prompts == []
        assert h.statuses(PipelineStage.ENHANCE) == [StageStatus.SKIPPED]

    @pytest.mark.asyncio
    async def test_enhance_failure_keeps_transcript(self, tmp_path: Path):
        h = _Harness(tmp_path)
        h.completion.respond_to(ENHANCE_NEEDLE, NetworkError('connection refused'))
        result = await h.run(with_follow_up=True)

        assert result.outcome is PipelineOutcome.PARTIAL
        assert result.failed_stage is PipelineStage.ENHANCE
        assert result.original_transcript == 'um so we shipped the release'
        assert result.enhanced_transcript == ''
        assert result.title is None
        assert result.follow_up_questions is None
        assert len(h.completion.prompts) == 1

    @pytest.mark.asyncio
    @pytest.mark.parametrize(
        'error',
        [NetworkError('connection reset'), MalformedResponseError('missing "choices"')],
        ids=['network', 'malformed'],
    )
    async def test_title_failure_keeps_enhanced(self, tmp_path: Path, error: Exception):
        h = _Harness(tmp_path)
        h.completion.respond_to(TITLE_NEEDLE, error)
        result = await h.run(with_follow_up=True)

        assert result.outcome is PipelineOutcome.PARTIAL
        assert result.failed_stage is PipelineStage.TITLE
        assert result.error == str(error)
        assert result.enhanced_transcript == 'We shipped the release.'
        assert result.title is None
        assert result.follow_up_questions == ['What broke?', 'Who helped?', 'What next?']

    @pytest.mark.asyncio
    async def test_follow_up_failure(self, tmp_path: Path):
        h = _Harness(tmp_path)
        h.completion.respond_to(FOLLOW_UP_NEEDLE, NetworkError('timeout'))
        result = await h.run(with_follow_up=True)

        assert result.outcome is PipelineOutcome.PARTIAL
        assert result.failed_stage is PipelineStage.FOLLOW_UP
        assert result.title == 'Shipping Day'
        assert result.follow_up_questions is None
