"""Gateway: streamed HTTP download of whisper.cpp models -- implements ModelDownloader port."""

from __future__ import annotations

import logging
import os
import tempfile
from collections.abc import Callable
from pathlib import Path

import httpx
from huggingface_hub import hf_hub_url

from lazy_voice_memo.l1_entities.errors import AcquisitionError, AcquisitionFailure

log = logging.getLogger('lvm.provisioner')

WHISPER_CPP_REPO = 'ggerganov/whisper.cpp'
CHUNK_SIZE = 1024 * 1024
_CONNECT_TIMEOUT = 30.0
_READ_TIMEOUT = 120.0


def model_filename(model_name: str) -> str:
    return f'ggml-{model_name}.bin'


def whisper_model_url(model_name: str) -> str:
    """Fixed remote location of a whisper.cpp GGML model, keyed by model name."""
    return hf_hub_url(WHISPER_CPP_REPO, model_filename(model_name))


def default_model_path(models_dir: Path, model_name: str) -> Path:
    return models_dir / model_filename(model_name)


def _expected_size(response: httpx.Response) -> int | None:
    header = response.headers.get('content-length')
    if header and header.isdigit() and int(header) > 0:
        return int(header)
    return None


class HttpModelDownloader:
    """Streams a model into a ``.part`` file next to the target, then swaps it in.

    The partial file is removed on every failure path, including cancellation,
    so the target is either the complete artifact or untouched.
    """

    def __init__(self, client: httpx.Client | None = None) -> None:
        self._client = client

    def download(
        self,
        url: str,
        destination: Path,
        *,
        on_progress: Callable[[float | None], None] | None = None,
        is_cancelled: Callable[[], bool] | None = None,
    ) -> Path:
        try:
            destination.parent.mkdir(parents=True, exist_ok=True)
            fd, tmp_name = tempfile.mkstemp(prefix=f'.{destination.name}.', suffix='.part', dir=destination.parent)
        except PermissionError as exc:
            raise AcquisitionError(AcquisitionFailure.PERMISSION_DENIED, f'Cannot write to {destination.parent}') from exc
        except OSError as exc:
            raise AcquisitionError(AcquisitionFailure.TRANSFER_FAILED, f'Cannot prepare download: {exc}') from exc

        tmp_path = Path(tmp_name)
        try:
            with os.fdopen(fd, 'wb') as out:
                self._stream(url, out, on_progress, is_cancelled)
            if destination.exists():
                log.info('Removing stale model artifact %s', destination)
                destination.unlink()
            os.replace(tmp_path, destination)
        except AcquisitionError:
            tmp_path.unlink(missing_ok=True)
            raise
        except httpx.HTTPStatusError as exc:
            tmp_path.unlink(missing_ok=True)
            reason = (
                AcquisitionFailure.NOT_FOUND
                if exc.response.status_code == 404
                else AcquisitionFailure.TRANSFER_FAILED
            )
            raise AcquisitionError(reason, f'HTTP {exc.response.status_code} from {url}') from exc
        except httpx.HTTPError as exc:
            tmp_path.unlink(missing_ok=True)
            raise AcquisitionError(AcquisitionFailure.TRANSFER_FAILED, f'Transfer failed: {exc}') from exc
        except PermissionError as exc:
            tmp_path.unlink(missing_ok=True)
            raise AcquisitionError(AcquisitionFailure.PERMISSION_DENIED, f'Cannot write model: {exc}') from exc
        except OSError as exc:
            tmp_path.unlink(missing_ok=True)
            raise AcquisitionError(AcquisitionFailure.TRANSFER_FAILED, f'Cannot save model: {exc}') from exc

        log.info('Model saved to %s', destination)
        return destination

    def _stream(
        self,
        url: str,
        out,
        on_progress: Callable[[float | None], None] | None,
        is_cancelled: Callable[[], bool] | None,
    ) -> None:
        client = self._client or httpx.Client(
            timeout=httpx.Timeout(_READ_TIMEOUT, connect=_CONNECT_TIMEOUT),
            follow_redirects=True,
        )
        try:
            with client.stream('GET', url, follow_redirects=True) as resp:
                resp.raise_for_status()
                expected = _expected_size(resp)
                if expected is None:
                    log.warning('Server sent no Content-Length for %s; progress unknown', url)
                received = 0
                if on_progress is not None:
                    on_progress(0.0 if expected else None)
                for chunk in resp.iter_bytes(CHUNK_SIZE):
                    if is_cancelled is not None and is_cancelled():
                        raise AcquisitionError(AcquisitionFailure.USER_CANCELLED, 'Model download cancelled')
                    out.write(chunk)
                    received += len(chunk)
                    if on_progress is not None:
                        on_progress(min(received / expected, 1.0) if expected else None)
        finally:
            if self._client is None:
                client.close()
