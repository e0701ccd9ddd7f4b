"""Dependency container -- composition root for wiring all layers together."""

from __future__ import annotations

from collections.abc import Callable

from lazy_voice_memo.l1_entities.config import AppConfig
from lazy_voice_memo.l1_entities.model_status import ModelStatus
from lazy_voice_memo.l2_use_cases.enhance_transcript_use_case import EnhanceTranscriptUseCase
from lazy_voice_memo.l2_use_cases.ports.audio_normalizer import AudioNormalizer
from lazy_voice_memo.l2_use_cases.ports.completion_client import CompletionClient
from lazy_voice_memo.l2_use_cases.ports.model_downloader import ModelDownloader
from lazy_voice_memo.l2_use_cases.ports.settings_store import SettingsStore
from lazy_voice_memo.l2_use_cases.ports.transcriber import Transcriber
from lazy_voice_memo.l2_use_cases.process_recording_use_case import ProcessRecordingUseCase
from lazy_voice_memo.l2_use_cases.provision_model_use_case import ProvisionModelUseCase
from lazy_voice_memo.l2_use_cases.transcribe_audio_use_case import TranscribeAudioUseCase
from lazy_voice_memo.l3_interface_adapters.gateways.ffmpeg_audio_normalizer import FfmpegAudioNormalizer
from lazy_voice_memo.l3_interface_adapters.gateways.hf_model_downloader import (
    HttpModelDownloader,
    default_model_path,
    whisper_model_url,
)
from lazy_voice_memo.l3_interface_adapters.gateways.openai_completion_client import OpenAICompatCompletionClient
from lazy_voice_memo.l3_interface_adapters.gateways.whisper_transcriber import WhisperTranscriber
from lazy_voice_memo.l3_interface_adapters.gateways.yaml_settings_store import YamlSettingsStore
from lazy_voice_memo.l4_frameworks_and_drivers.infra_config import InfraConfig, models_dir


class DependencyContainer:
    """Creates and wires all concrete instances. Easy to override for testing."""

    def __init__(
        self,
        config: AppConfig,
        infra: InfraConfig | None = None,
        *,
        on_model_status: Callable[[ModelStatus], None] | None = None,
        on_download_progress: Callable[[float | None], None] | None = None,
    ) -> None:
        self.config = config
        _infra = infra or InfraConfig()

        self.settings: SettingsStore = YamlSettingsStore(_infra.settings_path)
        self.downloader: ModelDownloader = HttpModelDownloader()
        self.normalizer: AudioNormalizer = FfmpegAudioNormalizer()
        self.transcriber: Transcriber = WhisperTranscriber()
        self.completion_client: CompletionClient = OpenAICompatCompletionClient(
            base_url=_infra.llm.base_url,
            api_key=_infra.llm.api_key,
            model=config.enhancement.model,
            temperature=config.enhancement.temperature,
            timeout=config.enhancement.timeout,
        )

        model_name = config.model.name
        self.provisioner = ProvisionModelUseCase(
            model_name=model_name,
            default_path=default_model_path(models_dir(config), model_name),
            download_url=whisper_model_url(model_name),
            downloader=self.downloader,
            settings=self.settings,
            on_status=on_model_status,
            on_progress=on_download_progress,
        )
        self.transcribe = TranscribeAudioUseCase(self.transcriber, max_threads=config.transcription.max_threads)
        self.enhancer = EnhanceTranscriptUseCase(self.completion_client)
        self.pipeline = ProcessRecordingUseCase(
            provisioner=self.provisioner,
            normalizer=self.normalizer,
            transcribe=self.transcribe,
            enhancer=self.enhancer,
        )
