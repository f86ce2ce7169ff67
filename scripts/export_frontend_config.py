#!/usr/bin/python3

from pathlib import Path

import click

from opn_contracts.errors import exit_on_error
from opn_contracts.frontend import write_build_config, write_frontend_env
from opn_contracts.manifest import read_manifest


@click.command()
@click.option(
    "--manifest",
    "-m",
    "manifest_path",
    help="Deployment manifest to take contract addresses from.",
    type=click.Path(dir_okay=False, exists=True, path_type=Path),
    required=True,
)
@click.option(
    "--output-dir",
    "-o",
    help="Frontend project directory.",
    type=click.Path(file_okay=False, path_type=Path),
    default=Path("."),
    show_default=True,
)
@exit_on_error
def cli(manifest_path, output_dir):
    """Writes the frontend .env and bundler settings for a deployment."""
    manifest = read_manifest(manifest_path)
    env_filepath = write_frontend_env(manifest, output_dir / ".env")
    build_filepath = write_build_config(output_dir / "build-config.json")
    click.secho(f"(i) Frontend environment written to {env_filepath}", fg="green")
    click.secho(f"(i) Build settings written to {build_filepath}", fg="green")


if __name__ == "__main__":
    cli()
