"""Use case: make the whisper model available locally -- download or locate."""

from __future__ import annotations

import logging
import threading
from collections.abc import Callable
from concurrent.futures import Future
from pathlib import Path

from lazy_voice_memo.l1_entities.errors import AcquisitionError, AcquisitionFailure, ConfigError
from lazy_voice_memo.l1_entities.model_status import ModelDescriptor, ModelState, ModelStatus
from lazy_voice_memo.l2_use_cases.ports.acquisition_chooser import AcquisitionAction, AcquisitionChooser
from lazy_voice_memo.l2_use_cases.ports.model_downloader import ModelDownloader
from lazy_voice_memo.l2_use_cases.ports.settings_store import RESOLVED_MODEL_PATH_KEY, SettingsStore

log = logging.getLogger('lvm.provisioner')


class ProvisionModelUseCase:
    """Owns the process-wide ModelDescriptor and every transition of its status.

    State machine::

        UNKNOWN --check--> NOT_FOUND | READY
        NOT_FOUND --download--> DOWNLOADING --> READY | ERROR
        DOWNLOADING --cancel--> NOT_FOUND --unwound--> READY if a model is still on disk
        NOT_FOUND --locate--> READY | ERROR
        ERROR --acquire--> (re-checked, then explored again)

    At most one acquisition runs at a time. A second ``acquire()``,
    ``download()`` or ``locate()`` while one is in flight waits for and returns
    the in-flight outcome instead of starting its own.
    """

    def __init__(
        self,
        model_name: str,
        default_path: Path,
        download_url: str,
        downloader: ModelDownloader,
        settings: SettingsStore,
        *,
        on_status: Callable[[ModelStatus], None] | None = None,
        on_progress: Callable[[float | None], None] | None = None,
    ) -> None:
        self._default_path = default_path
        self._download_url = download_url
        self._downloader = downloader
        self._settings = settings
        self._on_status = on_status
        self._on_progress = on_progress

        self._lock = threading.Lock()
        self._inflight: Future | None = None
        self._cancelled = threading.Event()

        saved = settings.get(RESOLVED_MODEL_PATH_KEY)
        path = saved or str(default_path)
        self._descriptor = ModelDescriptor(name=model_name, path=path)
        log.debug('Model %s: initial path %s (persisted=%s)', model_name, path, saved is not None)
        self.check()

    @property
    def descriptor(self) -> ModelDescriptor:
        with self._lock:
            return self._descriptor

    def status(self) -> ModelStatus:
        return self.descriptor.status

    def check(self) -> ModelStatus:
        """Re-derive NOT_FOUND / READY from file existence. No-op while acquiring."""
        with self._lock:
            if self._inflight is not None:
                return self._descriptor.status
            current = self._descriptor.status
        return self._settle(current)

    def acquire(self, chooser: AcquisitionChooser) -> ModelDescriptor:
        """Return a READY descriptor, asking *chooser* how to get the model if needed.

        Blocks on the user's choice and on any transfer. Raises AcquisitionError.
        """
        self.check()
        return self._single_flight(lambda: self._explore(chooser), skip_if_ready=True)

    def download(self) -> ModelDescriptor:
        """Download the model to the default path, replacing any stale artifact."""
        return self._single_flight(self._download)

    def locate(self, path: str) -> ModelDescriptor:
        """Use a model file the user already has. The file is not validated here."""
        return self._single_flight(lambda: self._locate(path))

    def cancel(self) -> None:
        """Abort an in-flight download.

        Status returns to NOT_FOUND immediately. Once the transfer has unwound
        it is re-derived from disk, so a model that was already present before
        a re-download reports READY again.
        """
        with self._lock:
            downloading = self._descriptor.status.state is ModelState.DOWNLOADING
        if not downloading:
            log.debug('cancel() ignored: no download in flight')
            return
        log.info('Cancelling model download')
        self._cancelled.set()
        self._set_status(ModelStatus.not_found())

    def reset(self) -> ModelStatus:
        """Forget the persisted path and fall back to the default location."""
        with self._lock:
            if self._inflight is not None:
                raise RuntimeError('Cannot reset while an acquisition is in flight')
            self._descriptor = self._descriptor.model_copy(update={'path': str(self._default_path)})
        self._settings.delete(RESOLVED_MODEL_PATH_KEY)
        log.info('Model path reset to default %s', self._default_path)
        return self.check()

    # -- internals --

    def _single_flight(self, fn: Callable[[], ModelDescriptor], *, skip_if_ready: bool = False) -> ModelDescriptor:
        with self._lock:
            future = self._inflight
            owner = future is None
            if owner:
                if skip_if_ready and self._descriptor.status.is_ready:
                    return self._descriptor
                future = Future()
                self._inflight = future

        if not owner:
            log.info('Acquisition already in flight; waiting for its outcome')
            return future.result()

        try:
            descriptor = fn()
        except BaseException as exc:
            future.set_exception(exc)
            raise
        else:
            future.set_result(descriptor)
            return descriptor
        finally:
            with self._lock:
                self._inflight = None

    def _explore(self, chooser: AcquisitionChooser) -> ModelDescriptor:
        choice = chooser.choose(self.descriptor)
        log.info('Acquisition choice: %s', choice.action.value)
        match choice.action:
            case AcquisitionAction.DOWNLOAD:
                return self._download()
            case AcquisitionAction.LOCATE:
                return self._locate(choice.path)
            case AcquisitionAction.CANCEL:
                raise AcquisitionError(AcquisitionFailure.USER_CANCELLED, 'Model acquisition cancelled by user')

    def _download(self) -> ModelDescriptor:
        target = self._default_path
        self._cancelled.clear()
        self._set_status(ModelStatus.downloading())
        log.info('Downloading model %s from %s to %s', self._descriptor.name, self._download_url, target)

        try:
            self._downloader.download(
                self._download_url,
                target,
                on_progress=self._report_progress,
                is_cancelled=self._cancelled.is_set,
            )
        except AcquisitionError as exc:
            if exc.reason is AcquisitionFailure.USER_CANCELLED:
                log.info('Model download cancelled')
                self._settle(self.status())
            else:
                log.error('Model download failed: %s', exc, exc_info=True)
                self._set_status(ModelStatus.error(f'Download failed: {exc}'))
            raise

        if self._cancelled.is_set():
            # Cancel landed after the last chunk; drop the promoted artifact.
            target.unlink(missing_ok=True)
            self._settle(self.status())
            raise AcquisitionError(AcquisitionFailure.USER_CANCELLED, 'Model download cancelled')

        return self._persist(target.absolute())

    def _locate(self, path: str) -> ModelDescriptor:
        if not path:
            raise AcquisitionError(AcquisitionFailure.USER_CANCELLED, 'No model file selected')
        located = Path(path).expanduser().absolute()
        log.info('Using user-located model file %s', located)
        return self._persist(located)

    def _persist(self, path: Path) -> ModelDescriptor:
        try:
            self._settings.set(RESOLVED_MODEL_PATH_KEY, str(path))
        except (OSError, ConfigError) as exc:
            log.error('Failed to persist model path %s: %s', path, exc, exc_info=True)
            self._set_status(ModelStatus.error(f'Failed to save model path: {exc}'))
            raise AcquisitionError(AcquisitionFailure.PERMISSION_DENIED, f'Cannot save model path: {exc}') from exc
        return self._set_status(ModelStatus.ready(), path=str(path))

    def _settle(self, current: ModelStatus) -> ModelStatus:
        """NOT_FOUND or READY from file existence; notifies only on change."""
        status = ModelStatus.ready() if Path(self.descriptor.path).is_file() else ModelStatus.not_found()
        if status != current:
            self._set_status(status)
        return status

    def _report_progress(self, fraction: float | None) -> None:
        if self._cancelled.is_set():
            return
        self._set_status(ModelStatus.downloading(fraction))
        if self._on_progress is not None:
            self._on_progress(fraction)

    def _set_status(self, status: ModelStatus, *, path: str | None = None) -> ModelDescriptor:
        update: dict = {'status': status}
        if path is not None:
            update['path'] = path
        with self._lock:
            previous = self._descriptor.status.state
            self._descriptor = self._descriptor.model_copy(update=update)
            descriptor = self._descriptor
        if previous is not status.state:
            log.info('Model status: %s -> %s', previous.value, status.state.value)
        if self._on_status is not None:
            self._on_status(status)
        return descriptor
