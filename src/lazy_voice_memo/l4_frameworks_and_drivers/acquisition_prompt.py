"""Terminal prompts for the model acquisition choice -- implements AcquisitionChooser port."""

from __future__ import annotations

import click

from lazy_voice_memo.l1_entities.model_status import ModelDescriptor
from lazy_voice_memo.l2_use_cases.ports.acquisition_chooser import AcquisitionAction, AcquisitionChoice

_APPROX_SIZES = {
    'large-v3': '3 GB',
    'large-v3-turbo': '1.6 GB',
    'medium': '1.5 GB',
    'small': '466 MB',
    'base': '142 MB',
}


class ClickAcquisitionChooser:
    """Asks on stderr whether to download, locate, or cancel."""

    def choose(self, descriptor: ModelDescriptor) -> AcquisitionChoice:
        size = _APPROX_SIZES.get(descriptor.name, 'several GB')
        click.echo(
            f'The whisper {descriptor.name} model is required for transcription '
            f'and was not found at {descriptor.path}.',
            err=True,
        )
        action = click.prompt(
            f'Download it (approx. {size}), locate it on this machine, or cancel?',
            type=click.Choice([a.value for a in AcquisitionAction]),
            default=AcquisitionAction.DOWNLOAD.value,
            err=True,
        )
        match AcquisitionAction(action):
            case AcquisitionAction.DOWNLOAD:
                return AcquisitionChoice.download()
            case AcquisitionAction.LOCATE:
                path = click.prompt(
                    'Path to the model file',
                    type=click.Path(exists=True, dir_okay=False),
                    err=True,
                )
                return AcquisitionChoice.locate(path)
            case AcquisitionAction.CANCEL:
                return AcquisitionChoice.cancel()


class FixedAcquisitionChooser:
    """Answers with a choice decided up front (``--yes`` / ``--model-path``)."""

    def __init__(self, choice: AcquisitionChoice) -> None:
        self._choice = choice

    def choose(self, descriptor: ModelDescriptor) -> AcquisitionChoice:
        return self._choice
