"""
Click command definitions for the genmedia CLI.

This module contains the Click command group and all CLI commands
(image, video, analyze, classify).
"""

import time
from collections.abc import Callable
from pathlib import Path
from typing import Any

import click

from genmedia import (
    Config,
    GenerationRequest,
    OutputEncoding,
    TextAsDataURI,
    UnifiedResult,
    __version__,
    analyze_image_result,
    analyze_video_result,
    classify_image_model,
    classify_video_model,
    generate_image_result,
    generate_video_result,
    load_reference_image,
)
from genmedia.cli import progress
from genmedia.cli.handlers import run_with_error_handling
from genmedia.cli.utils import save_result
from genmedia.logging_config import configure_logging, get_verbosity_from_env


@click.group(
    help=f"""Unified image and video generation across Zhipu, ModelScope and
OpenAI-compatible endpoints.

\b
Version: {__version__}
"""
)
@click.version_option(version=__version__, package_name="genmedia")
@click.pass_context
def cli(ctx: click.Context) -> None:
    ctx.color = True


def _provider_options(fn: Callable[..., Any]) -> Callable[..., Any]:
    """Options shared by every command that calls a provider."""
    options = [
        click.option("--model", "-m", help="Model ID (overrides GENMEDIA_MODEL)."),
        click.option(
            "--api-key",
            envvar="GENMEDIA_API_KEY",
            help="Provider API key (overrides GENMEDIA_API_KEY environment variable).",
        ),
        click.option(
            "--base-url",
            help="Provider base URL (overrides GENMEDIA_BASE_URL; required for OpenAI-compatible models).",
        ),
        click.option(
            "--quiet",
            "-q",
            is_flag=True,
            help="Minimize progress messages; only print the result or errors.",
        ),
        click.option(
            "--verbose",
            "-v",
            "verbose_count",
            count=True,
            help="Increase verbosity: -v also show prompts, -vv show API detail.",
        ),
        click.option(
            "--debug-api",
            is_flag=True,
            help=(
                "Log raw API request payload and response (image data truncated); "
                "unexpected errors show a full traceback."
            ),
        ),
    ]
    for option in reversed(options):
        fn = option(fn)
    return fn


def _build_config(
    model: str | None, api_key: str | None, base_url: str | None, debug_api: bool
) -> Config:
    """Load config from the environment and apply CLI overrides."""
    config = Config.from_env()
    if model:
        config.set_model(model)
    if api_key:
        config.set_api_key(api_key)
    if base_url:
        config.base_url = base_url
    if debug_api:
        config.debug_api = True
    return config


def _apply_verbosity(verbose_count: int, quiet: bool) -> None:
    # CLI flags override GENMEDIA_VERBOSITY
    verbose_level = min(verbose_count, 2) if verbose_count > 0 else get_verbosity_from_env()
    configure_logging(verbose_level=verbose_level, quiet=quiet)


def _run_and_report(
    call: Callable[[GenerationRequest, Config], UnifiedResult],
    request: GenerationRequest,
    config: Config,
    *,
    action: str,
    title: str,
    provider: str,
    out: Path | None,
    quiet: bool,
    print_text: bool = False,
) -> None:
    """Run one library call under a spinner, then save and/or print its result."""
    start_time = time.time()
    if not quiet:
        with progress.task_progress(
            action,
            model=config.model_id,
            provider=provider,
            reference_used=request.has_reference(),
        ):
            result = call(request, config)
    else:
        result = call(request, config)
    elapsed = time.time() - start_time

    saved_to = save_result(result, out, timeout=config.generation_timeout) if out else None
    output = result.to_output()

    if not quiet:
        if print_text and isinstance(result, TextAsDataURI):
            progress.print_text_result(title, result.text)
        else:
            progress.print_success_result(
                title,
                output,
                elapsed,
                model_used=config.model_id,
                provider=provider,
                saved_to=saved_to,
                prompt_used=request.prompt or None,
            )

    # stdout carries the machine-readable result
    if saved_to is not None:
        click.echo(str(saved_to))
    elif print_text and isinstance(result, TextAsDataURI):
        click.echo(result.text)
    else:
        click.echo(output)


def _references(paths: tuple[Path, ...]) -> list[str]:
    return [load_reference_image(path) for path in paths]


@cli.command()
@click.option("--prompt", "-p", required=True, help="Text description of the image to generate.")
@click.option(
    "--reference",
    "-r",
    "references",
    multiple=True,
    type=click.Path(exists=True, path_type=Path),
    help="Path to a reference image (repeatable).",
)
@click.option("--image-url", help="Reference image given as a URL.")
@click.option("--size", help="Image size, e.g. 1024x1024 or 2K.")
@click.option("--aspect-ratio", help="Aspect ratio, e.g. 16:9.")
@click.option("--seed", type=int, help="Random seed.")
@click.option("--quality", help="Quality hint passed to the provider.")
@click.option("--system-prompt", help="Instruction prepended to the prompt.")
@click.option("--b64", is_flag=True, help="Return a base64 data URI instead of a URL.")
@click.option("--out", "-o", type=click.Path(path_type=Path), help="Save the image to this path.")
@_provider_options
def image(
    prompt: str,
    references: tuple[Path, ...],
    image_url: str | None,
    size: str | None,
    aspect_ratio: str | None,
    seed: int | None,
    quality: str | None,
    system_prompt: str | None,
    b64: bool,
    out: Path | None,
    model: str | None,
    api_key: str | None,
    base_url: str | None,
    quiet: bool,
    verbose_count: int,
    debug_api: bool,
) -> None:
    """Generate an image from a text prompt (optionally with reference images)."""
    _apply_verbosity(verbose_count, quiet)

    def do_image() -> None:
        config = _build_config(model, api_key, base_url, debug_api)
        request = GenerationRequest(
            prompt=prompt,
            reference_images=_references(references),
            image_url=image_url,
            size=size,
            aspect_ratio=aspect_ratio,
            seed=seed,
            quality=quality,
            system_prompt=system_prompt,
            output_encoding=OutputEncoding.BASE64 if b64 else OutputEncoding.URL,
        )
        _run_and_report(
            generate_image_result,
            request,
            config,
            action="Generating image",
            title="Image Generated",
            provider=classify_image_model(config.model_id).value,
            out=out,
            quiet=quiet,
        )

    run_with_error_handling(do_image, quiet=quiet, debug=debug_api)


@cli.command()
@click.option("--prompt", "-p", required=True, help="Text description of the video to generate.")
@click.option(
    "--reference",
    "-r",
    "references",
    multiple=True,
    type=click.Path(exists=True, path_type=Path),
    help="Path to a first-frame reference image (repeatable; the first is used).",
)
@click.option("--image-url", help="Reference image given as a URL.")
@click.option("--size", help="Video size, e.g. 1920x1080 (overrides --aspect-ratio).")
@click.option("--aspect-ratio", help="Aspect ratio, e.g. 16:9 or 9:16.")
@click.option("--seed", type=int, help="Random seed (ignored by Zhipu CogVideoX).")
@click.option("--duration", type=int, help="Duration in seconds.")
@click.option("--out", "-o", type=click.Path(path_type=Path), help="Download the video to this path.")
@_provider_options
def video(
    prompt: str,
    references: tuple[Path, ...],
    image_url: str | None,
    size: str | None,
    aspect_ratio: str | None,
    seed: int | None,
    duration: int | None,
    out: Path | None,
    model: str | None,
    api_key: str | None,
    base_url: str | None,
    quiet: bool,
    verbose_count: int,
    debug_api: bool,
) -> None:
    """Generate a video, waiting for the provider task to finish."""
    _apply_verbosity(verbose_count, quiet)

    def do_video() -> None:
        config = _build_config(model, api_key, base_url, debug_api)
        request = GenerationRequest(
            prompt=prompt,
            reference_images=_references(references),
            image_url=image_url,
            size=size,
            aspect_ratio=aspect_ratio,
            seed=seed,
            duration=duration,
        )
        _run_and_report(
            generate_video_result,
            request,
            config,
            action="Generating video",
            title="Video Generated",
            provider=classify_video_model(config.model_id, config.base_url).value,
            out=out,
            quiet=quiet,
        )

    run_with_error_handling(do_video, quiet=quiet, debug=debug_api)


@cli.command()
@click.option("--prompt", "-p", default="", help="Question or instruction for the model.")
@click.option(
    "--reference",
    "-r",
    "references",
    multiple=True,
    type=click.Path(exists=True, path_type=Path),
    help="Path to the image to analyse.",
)
@click.option("--image-url", help="Image to analyse given as a URL.")
@click.option(
    "--video-file",
    type=click.Path(exists=True, path_type=Path),
    help="Video file to analyse (switches to video analysis).",
)
@click.option("--video-url", help="Video URL to analyse (switches to video analysis).")
@click.option("--frame-count", type=int, default=5, show_default=True, help="Frames to extract.")
@click.option("--temperature", type=float, default=0.7, show_default=True)
@click.option("--max-tokens", type=int, default=1024, show_default=True)
@click.option("--raw", is_flag=True, help="Print the data URI instead of decoded text.")
@click.option("--out", "-o", type=click.Path(path_type=Path), help="Save the result to this path.")
@_provider_options
def analyze(
    prompt: str,
    references: tuple[Path, ...],
    image_url: str | None,
    video_file: Path | None,
    video_url: str | None,
    frame_count: int,
    temperature: float,
    max_tokens: int,
    raw: bool,
    out: Path | None,
    model: str | None,
    api_key: str | None,
    base_url: str | None,
    quiet: bool,
    verbose_count: int,
    debug_api: bool,
) -> None:
    """Describe an image, or a video when --video-file/--video-url is given."""
    _apply_verbosity(verbose_count, quiet)
    is_video = video_file is not None or video_url is not None

    def do_analyze() -> None:
        config = _build_config(model, api_key, base_url, debug_api)
        request = GenerationRequest(
            prompt=prompt,
            reference_images=_references(references),
            image_url=image_url,
            video_file=str(video_file) if video_file is not None else None,
            video_url=video_url,
            frame_count=frame_count,
            temperature=temperature,
            max_tokens=max_tokens,
        )
        if is_video:
            call, kind = analyze_video_result, classify_video_model(config.model_id, config.base_url)
        else:
            call, kind = analyze_image_result, classify_image_model(config.model_id)
        _run_and_report(
            call,
            request,
            config,
            action="Analysing video" if is_video else "Analysing image",
            title="Analysis",
            provider=kind.value,
            out=out,
            quiet=quiet,
            print_text=not raw,
        )

    run_with_error_handling(do_analyze, quiet=quiet, debug=debug_api)


@cli.command()
@click.argument("model")
@click.option("--video", is_flag=True, help="Classify as a video model.")
@click.option("--base-url", help="Base URL considered for video routing.")
def classify(model: str, video: bool, base_url: str | None) -> None:
    """Print the provider family MODEL routes to."""
    kind = classify_video_model(model, base_url) if video else classify_image_model(model)
    click.echo(kind.value)


def main() -> None:
    """Entry point for the genmedia console script."""
    cli()


__all__ = ["cli", "main", "image", "video", "analyze", "classify"]
