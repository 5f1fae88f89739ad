"""Command-line entry point for sending one prompt through an invoker.

Usage:
    llm-invoke claude-api "Summarize this sentence."
    echo "Explain asyncio" | llm-invoke claude-cli
    llm-invoke gemini "Hello" --model gemini-2.5-pro --temperature 0.3
"""

import argparse
import asyncio
import sys

import structlog

from llm_invokers.config import Settings, get_settings
from llm_invokers.infrastructure.llm import (
    PROVIDERS,
    ClaudeApiInvoker,
    ClaudeCliInvoker,
    GeminiApiInvoker,
    LLMProviderError,
    build_invoker,
    console_countdown,
)
from llm_invokers.infrastructure.observability import (
    configure_logging,
    init_observability,
    shutdown_observability,
)

logger = structlog.get_logger()


def build_parser() -> argparse.ArgumentParser:
    """Create the argument parser."""
    parser = argparse.ArgumentParser(
        prog="llm-invoke",
        description="Send a single prompt to Claude (API or CLI) or Gemini",
    )
    parser.add_argument("provider", choices=PROVIDERS, help="Which surface to call")
    parser.add_argument(
        "prompt",
        nargs="?",
        help="Prompt text (read from stdin when omitted)",
    )
    parser.add_argument("--model", help="Model override")
    parser.add_argument("--max-tokens", type=int, help="Output token limit override")
    parser.add_argument("--temperature", type=float, help="Temperature override")
    parser.add_argument(
        "--verbose",
        action="store_true",
        help="Enable verbose invoker logging",
    )
    return parser


async def run(args: argparse.Namespace, settings: Settings, prompt: str) -> str | None:
    """Build the requested invoker and send the prompt.

    Args:
        args: Parsed command-line arguments.
        settings: Settings used to configure the invoker.
        prompt: Prompt text.

    Returns:
        The invoker's result, or None if the call failed.
    """
    invoker = build_invoker(
        args.provider, settings, progress_callback=console_countdown
    )

    if isinstance(invoker, ClaudeApiInvoker):
        return await invoker.invoke(
            prompt,
            model=args.model,
            max_tokens=args.max_tokens,
            temperature=args.temperature,
        )
    if isinstance(invoker, GeminiApiInvoker):
        return await invoker.invoke(
            prompt,
            model=args.model,
            temperature=args.temperature,
            max_output_tokens=args.max_tokens,
        )
    if isinstance(invoker, ClaudeCliInvoker) and (
        args.model or args.max_tokens is not None or args.temperature is not None
    ):
        # The CLI pins its model in settings and takes no sampling options
        logger.warning("cli_overrides_ignored", provider=args.provider)
    return await invoker.invoke(prompt)


def main(argv: list[str] | None = None) -> int:
    """Parse arguments, invoke the provider and print the result.

    Returns:
        Exit code (0 when a result was printed, 1 otherwise).
    """
    args = build_parser().parse_args(argv)

    settings = get_settings()
    if args.verbose:
        settings = settings.model_copy(
            update={"verbose_logging": True, "detailed_logging": True}
        )

    configure_logging(settings.log_level, json_output=settings.log_json)
    if settings.otel_enabled:
        init_observability(
            settings.app_name,
            settings.app_version,
            otlp_endpoint=settings.otel_endpoint,
            console_export=settings.otel_console_export,
            sample_rate=settings.otel_sample_rate,
        )

    prompt = args.prompt if args.prompt is not None else sys.stdin.read()

    try:
        result = asyncio.run(run(args, settings, prompt))
    except LLMProviderError as e:
        print(f"✗ Error: {e}", file=sys.stderr)
        return 1
    finally:
        shutdown_observability()

    if result is None:
        print("✗ No result returned; see log output for details", file=sys.stderr)
        return 1

    sys.stdout.write(result)
    if not result.endswith("\n"):
        sys.stdout.write("\n")
    return 0


if __name__ == "__main__":
    sys.exit(main())
