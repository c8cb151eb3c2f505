"""
Main CLI module for codeforge.
"""

import json
import sys
from importlib.metadata import PackageNotFoundError
from importlib.metadata import version as distribution_version
from pathlib import Path
from typing import Optional

import click

from codeforge import __version__
from codeforge.application.services.cancellation import CancellationToken
from codeforge.application.services.exceptions import PipelineError
from codeforge.application.services.result_presenter import ResultPresenter
from codeforge.cli.config_cmd import config
from codeforge.config import get_settings
from codeforge.config.validation import SUPPORTED_LANGUAGES, SUPPORTED_PROVIDERS
from codeforge.domain.models import GenerationRequest, PipelineResult
from codeforge.infrastructure.logging_config import configure_logging
from codeforge.infrastructure.services.setup import setup_services


@click.group()
def cli():
    """codeforge: turn a natural-language request into source files."""
    pass


cli.add_command(config, name="config")


@cli.command()
def version():
    """Show codeforge version information."""
    try:
        installed = distribution_version("codeforge")
    except PackageNotFoundError:
        installed = __version__
    click.echo(f"codeforge version {installed}")


@cli.command()
@click.argument("prompt")
@click.option("--framework", default=None, help="Target framework, e.g. react or vue")
@click.option(
    "--language",
    type=click.Choice(SUPPORTED_LANGUAGES, case_sensitive=False),
    default=None,
    help="Target language",
)
@click.option(
    "--provider",
    type=click.Choice(SUPPORTED_PROVIDERS, case_sensitive=False),
    default=None,
    help="Override the configured provider",
)
@click.option(
    "--output-dir",
    type=click.Path(file_okay=False),
    default=None,
    help="Write the generated files under this directory",
)
@click.option(
    "--format",
    "output_format",
    type=click.Choice(["text", "json"]),
    default="text",
)
def generate(
    prompt: str,
    framework: Optional[str],
    language: Optional[str],
    provider: Optional[str],
    output_dir: Optional[str],
    output_format: str,
):
    """Generate source files for PROMPT."""
    settings = get_settings()
    if provider:
        settings = settings.model_copy(update={"provider": provider.lower()})
    # stdout carries the result; logs go to stderr
    configure_logging(settings.log_level, settings.log_file, stream=sys.stderr)

    try:
        services = setup_services(settings)
    except ValueError as e:
        raise click.ClickException(str(e))

    request = GenerationRequest(
        prompt=prompt,
        framework=framework,
        language=language.lower() if language else None,
    )
    token = CancellationToken()
    try:
        result = services.orchestrator.execute(request, token)
    except KeyboardInterrupt:
        token.cancel("interrupted")
        raise click.Abort()
    except PipelineError as e:
        raise click.ClickException(str(e))
    finally:
        services.close()

    if output_dir:
        written = write_result(result, Path(output_dir), services.presenter)
        if output_format == "text":
            click.echo(f"✅ Wrote {len(written)} file(s) to {output_dir}")

    if output_format == "json":
        document = services.presenter.to_dict(result, include_content=not output_dir)
        click.echo(json.dumps(document, indent=2))
    else:
        click.echo(result.summary)


def write_result(
    result: PipelineResult, output_dir: Path, presenter: ResultPresenter
) -> list:
    """Write artifacts, summary and manifest under ``output_dir``.

    Raises:
        click.ClickException: If an artifact path escapes the output directory
    """
    root = output_dir.resolve()
    written = []
    for artifact in result.artifacts:
        target = (root / artifact.path).resolve()
        if root != target and root not in target.parents:
            raise click.ClickException(
                f"Artifact path escapes the output directory: {artifact.path}"
            )
        target.parent.mkdir(parents=True, exist_ok=True)
        target.write_text(artifact.content, encoding="utf-8")
        written.append(target)

    summary_path = root / "SUMMARY.md"
    summary_path.write_text(result.summary, encoding="utf-8")
    written.append(summary_path)

    if result.metadata.language in ("typescript", "javascript"):
        manifest_path = root / "package.json"
        manifest_path.write_text(
            presenter.package_json(root.name.lower() or "generated-project", result.artifacts),
            encoding="utf-8",
        )
        written.append(manifest_path)
    return written


if __name__ == "__main__":
    cli()
