"""
dockersave CLI - Export a built image to an archive file.

Commands:
    dockersave save     Save an image artifact to a tar archive
    dockersave schema   Print the JSON schema of the configuration

Usage::

    dockersave save sha256:abc123 \\
        --builder-id packer.post-processor.docker-import \\
        --path /tmp/out.tar

    dockersave save my/app:1.0 --builder-id packer.post-processor.docker-tag \\
        --config save.yaml --log-format json
"""

from __future__ import annotations

import json
import logging
from pathlib import Path
from typing import Optional

import click

from dockersave import __version__
from dockersave.artifact import ACCEPTED_BUILDER_IDS, ImageArtifact
from dockersave.config import load_config_file
from dockersave.errors import DockerSaveError
from dockersave.logger import configure_logging
from dockersave.post_processor import DockerSavePostProcessor
from dockersave.ui import ClickUi

logger = logging.getLogger(__name__)


@click.group()
@click.version_option(version=__version__, prog_name="dockersave")
def main():
    """dockersave - Export built container images to archive files."""
    pass


@main.command()
@click.argument("image_id")
@click.option(
    "--builder-id",
    required=True,
    help=f"Stage that produced the image (one of: {', '.join(sorted(ACCEPTED_BUILDER_IDS))})",
)
@click.option("--path", "-o", "path", default=None, help="Destination archive file")
@click.option("--docker-path", default=None, help="Image runtime executable (default: docker)")
@click.option(
    "--config",
    "config_file",
    type=click.Path(dir_okay=False, path_type=Path),
    default=None,
    help="YAML file with options; flags override its values",
)
@click.option(
    "--log-level",
    type=click.Choice(["debug", "info", "warning", "error"]),
    default=None,
)
@click.option("--log-format", type=click.Choice(["json", "text"]), default=None)
def save(
    image_id: str,
    builder_id: str,
    path: Optional[str],
    docker_path: Optional[str],
    config_file: Optional[Path],
    log_level: Optional[str],
    log_format: Optional[str],
):
    """Save IMAGE_ID to an archive file."""
    flags = {
        "path": path,
        "docker_path": docker_path,
        "log_level": log_level,
        "log_format": log_format,
    }
    flags = {k: v for k, v in flags.items() if v is not None}

    try:
        raw_file = load_config_file(config_file) if config_file else None
        post_processor = DockerSavePostProcessor.configure(raw_file, flags)
    except DockerSaveError as e:
        raise click.ClickException(str(e)) from e

    configure_logging(
        level=post_processor.config.log_level,
        fmt=post_processor.config.log_format,
        stream=click.get_text_stream("stderr"),
    )

    ui = ClickUi()
    artifact = ImageArtifact(id=image_id, builder_id=builder_id)
    try:
        post_processor.post_process(ui, artifact)
    except DockerSaveError as e:
        raise click.ClickException(str(e)) from e

    logger.info(f"Exported {artifact}")


@main.command()
def schema():
    """Print the JSON schema of the accepted options."""
    click.echo(json.dumps(DockerSavePostProcessor.config_spec(), indent=2))


if __name__ == "__main__":
    main()
