"""CLI entry point for lazy-voice-memo."""

from __future__ import annotations

import asyncio
import sys
from dataclasses import dataclass
from pathlib import Path

import click

from lazy_voice_memo import __version__
from lazy_voice_memo.l2_use_cases.enhance_transcript_use_case import PostPlatform

_PLATFORMS = [p.value for p in PostPlatform]


@dataclass
class _CliState:
    config_path: str | None
    debug: bool

    def build(self, **container_kwargs):
        """Load config and wire the container. Deferred so --help stays fast."""
        from pydantic import ValidationError  # noqa: PLC0415 -- deferred: not needed for --help

        from lazy_voice_memo.l1_entities.errors import ConfigError  # noqa: PLC0415
        from lazy_voice_memo.l3_interface_adapters.gateways.yaml_config_loader import (  # noqa: PLC0415 -- deferred: yaml stack not loaded on --help
            YamlConfigLoader,
        )
        from lazy_voice_memo.l4_frameworks_and_drivers.container import (  # noqa: PLC0415 -- deferred: whisper/openai not loaded on --help
            DependencyContainer,
        )
        from lazy_voice_memo.l4_frameworks_and_drivers.infra_config import (  # noqa: PLC0415 -- deferred: not needed for --help
            InfraConfig,
            build_app_config,
        )

        try:
            raw = YamlConfigLoader().load_raw(self.config_path)
            config = build_app_config(raw)
            infra = InfraConfig.model_validate(raw).with_env()
        except (FileNotFoundError, ConfigError, ValidationError) as e:
            click.echo(f'Error: {e}', err=True)
            sys.exit(1)

        if self.debug:
            from lazy_voice_memo.l3_interface_adapters.gateways.paths import LOG_DIR  # noqa: PLC0415
            from lazy_voice_memo.l4_frameworks_and_drivers.logging_setup import (  # noqa: PLC0415
                setup_file_logging,
            )

            log_path = setup_file_logging(LOG_DIR)
            click.echo(f'Debug log: {log_path}', err=True)

        try:
            return DependencyContainer(config, infra, **container_kwargs)
        except ConfigError as e:
            click.echo(f'Error: {e}', err=True)
            sys.exit(1)


@click.group()
@click.option(
    '-c',
    '--config',
    'config_path',
    default=None,
    type=click.Path(exists=True, dir_okay=False),
    help='Path to YAML config file.',
)
@click.option('--debug', is_flag=True, default=False, help='Write a debug log to the user log directory.')
@click.version_option(version=__version__)
@click.pass_context
def cli(ctx: click.Context, config_path, debug):
    """lazy-voice-memo -- transcribe voice memos offline and polish them with a local LLM."""
    ctx.obj = _CliState(config_path=config_path, debug=debug)


@cli.command()
@click.argument('audio_file', type=click.Path(exists=True, dir_okay=False))
@click.option('-q', '--questions', is_flag=True, default=False, help='Also generate follow-up questions.')
@click.option(
    '-p',
    '--post',
    'posts',
    multiple=True,
    type=click.Choice(_PLATFORMS, case_sensitive=False),
    help='Also convert the enhanced transcript into a post for this platform (repeatable).',
)
@click.option(
    '--style-example',
    'style_files',
    multiple=True,
    type=click.Path(exists=True, dir_okay=False),
    help='Text file with an example post in your style (repeatable).',
)
@click.option(
    '-j',
    '--json-out',
    default=None,
    type=click.Path(dir_okay=False),
    help='Write the full result as JSON to this path.',
)
@click.option('-y', '--yes', 'auto_download', is_flag=True, default=False, help='Download the model without asking.')
@click.option(
    '--model-path',
    default=None,
    type=click.Path(exists=True, dir_okay=False),
    help='Use this model file if the configured model is missing.',
)
@click.pass_obj
def process(state: _CliState, audio_file, questions, posts, style_files, json_out, auto_download, model_path):
    """Transcribe AUDIO_FILE, enhance the transcript, and title it."""
    from lazy_voice_memo.l2_use_cases.ports.acquisition_chooser import (  # noqa: PLC0415 -- deferred: not loaded on --help
        AcquisitionChoice,
    )
    from lazy_voice_memo.l4_frameworks_and_drivers.acquisition_prompt import (  # noqa: PLC0415 -- deferred: not loaded on --help
        ClickAcquisitionChooser,
        FixedAcquisitionChooser,
    )
    from lazy_voice_memo.l4_frameworks_and_drivers.runner import (  # noqa: PLC0415 -- deferred: not loaded on --help
        DownloadProgressPrinter,
        run_pipeline,
    )

    container = state.build(on_download_progress=DownloadProgressPrinter())

    if model_path:
        chooser = FixedAcquisitionChooser(AcquisitionChoice.locate(model_path))
    elif auto_download:
        chooser = FixedAcquisitionChooser(AcquisitionChoice.download())
    else:
        chooser = ClickAcquisitionChooser()

    style_examples = [Path(p).read_text(encoding='utf-8') for p in style_files]
    exit_code = run_pipeline(
        container.pipeline,
        container.enhancer,
        Path(audio_file),
        chooser,
        with_follow_up=questions,
        post_platforms=list(posts),
        style_examples=style_examples or None,
        json_out=Path(json_out) if json_out else None,
    )
    sys.exit(exit_code)


@cli.group()
def model():
    """Inspect or acquire the whisper model."""


@model.command('status')
@click.pass_obj
def model_status(state: _CliState):
    """Show where the model is expected and whether it is present."""
    container = state.build()
    descriptor = container.provisioner.descriptor
    click.echo(f'Model:  {descriptor.name}')
    click.echo(f'Path:   {descriptor.path}')
    click.echo(f'Status: {descriptor.status.describe()}')


@model.command('download')
@click.pass_obj
def model_download(state: _CliState):
    """Download the model (Ctrl-C cancels and discards the partial file)."""
    from lazy_voice_memo.l1_entities.errors import AcquisitionError  # noqa: PLC0415 -- deferred: not loaded on --help
    from lazy_voice_memo.l4_frameworks_and_drivers.runner import (  # noqa: PLC0415 -- deferred: not loaded on --help
        DownloadProgressPrinter,
        download_model,
    )

    container = state.build(on_download_progress=DownloadProgressPrinter())
    try:
        descriptor = download_model(container.provisioner)
    except AcquisitionError as e:
        click.echo(f'Error: {e}', err=True)
        sys.exit(1)
    click.echo(f'Model ready: {descriptor.path}')


@model.command('locate')
@click.argument('path', type=click.Path(dir_okay=False))
@click.pass_obj
def model_locate(state: _CliState, path):
    """Use an existing model file at PATH."""
    from lazy_voice_memo.l1_entities.errors import AcquisitionError  # noqa: PLC0415 -- deferred: not loaded on --help

    container = state.build()
    if not Path(path).exists():
        click.echo(f'Warning: {path} does not exist yet; transcription will fail until it does.', err=True)
    try:
        descriptor = container.provisioner.locate(path)
    except AcquisitionError as e:
        click.echo(f'Error: {e}', err=True)
        sys.exit(1)
    click.echo(f'Model ready: {descriptor.path}')


@model.command('reset')
@click.pass_obj
def model_reset(state: _CliState):
    """Forget a located model path and go back to the default location."""
    container = state.build()
    status = container.provisioner.reset()
    click.echo(f'{container.provisioner.descriptor.path}: {status.describe()}')


@cli.command()
@click.argument('action', type=click.Choice(['enhance', 'title', 'questions', 'post']))
@click.argument('text_file', type=click.Path(exists=True, dir_okay=False))
@click.option(
    '--platform',
    default='Twitter',
    type=click.Choice(_PLATFORMS, case_sensitive=False),
    help='Target platform for the post action.',
)
@click.pass_obj
def ask(state: _CliState, action, text_file, platform):
    """Run a single LLM transform over an existing transcript in TEXT_FILE."""
    from lazy_voice_memo.l1_entities.errors import RemoteError  # noqa: PLC0415 -- deferred: not loaded on --help

    container = state.build()
    text = Path(text_file).read_text(encoding='utf-8')
    enhancer = container.enhancer

    try:
        if action == 'enhance':
            click.echo(asyncio.run(enhancer.enhance(text)))
        elif action == 'title':
            click.echo(asyncio.run(enhancer.title(text)))
        elif action == 'questions':
            for question in asyncio.run(enhancer.follow_up_questions(text)):
                click.echo(question)
        else:
            click.echo(asyncio.run(enhancer.convert_to_post(text, platform)))
    except RemoteError as e:
        click.echo(f'Error: {e}', err=True)
        sys.exit(1)


@cli.command()
@click.pass_obj
def check(state: _CliState):
    """Check that the completion endpoint is reachable."""
    container = state.build()
    ok, msg = container.completion_client.check_connectivity()
    if not ok:
        click.echo(f'Error: {msg}', err=True)
        sys.exit(1)
    click.echo(f'Completion endpoint OK: {container.completion_client.base_url}')
