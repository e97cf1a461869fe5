# Command-line entry point
import argparse
import asyncio
import json
import sys

from .io import load_raster, save_raster
from .processing.params import EffectParams
from .services import EffectsOrchestrator, PipelineWorkerClient
from .utils.errors import AppError, format_user_error
from .utils.logger import get_logger, set_log_level

logger = get_logger(__name__)


def parse_param(text):
    """
    Parse one 'key=value' option.

    Dotted keys nest (tone.highlights=20 -> {"tone": {"highlights": 20}}).
    Values are read as JSON when possible, so objects and lists work too.
    """
    key, sep, raw = text.partition("=")
    if not sep or not key:
        raise argparse.ArgumentTypeError(f"Expected key=value, got '{text}'")
    try:
        value = json.loads(raw)
    except json.JSONDecodeError:
        value = raw
    return key.strip(), value


def build_options(pairs):
    """Merge parsed (key, value) pairs into one nested option dict."""
    options = {}
    for key, value in pairs:
        parts = key.split(".")
        target = options
        for part in parts[:-1]:
            target = target.setdefault(part, {})
            if not isinstance(target, dict):
                raise ValueError(f"Option '{key}' conflicts with a non-object value")
        target[parts[-1]] = value
    return options


def build_parser():
    parser = argparse.ArgumentParser(
        prog="pixel-adjust",
        description="Apply non-destructive pixel adjustments to an image.",
    )
    parser.add_argument("input", help="Source image")
    parser.add_argument("output", help="Destination image (format from extension)")
    parser.add_argument(
        "-p", "--param", dest="params", action="append", type=parse_param, default=[],
        metavar="KEY=VALUE",
        help="Effect option, e.g. blur=3, tone.highlights=20, hsl='{\"red\": {\"h\": 10}}'",
    )
    parser.add_argument("--params-json", help="JSON file with an effect option object")
    parser.add_argument("--log-level", default=None, help="DEBUG, INFO, WARNING or ERROR")
    return parser


async def _process(raster, params):
    async with PipelineWorkerClient() as client:
        orchestrator = EffectsOrchestrator(client=client)
        orchestrator.load_image(raster)
        result = await orchestrator.apply_effects(params)
        return orchestrator, result


def main(argv=None):
    """Main function to run the command-line tool."""
    args = build_parser().parse_args(argv)
    if args.log_level:
        set_log_level(args.log_level)

    options = {}
    if args.params_json:
        with open(args.params_json, "r", encoding="utf-8") as f:
            options.update(json.load(f))
    options.update(build_options(args.params))

    try:
        params = EffectParams.from_dict(options)
    except (TypeError, ValueError) as e:
        logger.error("Invalid effect options: %s", e)
        return 2

    raster = load_raster(args.input)
    if raster is None:
        return 1

    try:
        orchestrator, result = asyncio.run(_process(raster, params))
    except AppError as e:
        logger.error("%s", format_user_error(e))
        return 1

    if result is None:
        logger.error("Processing was cancelled")
        return 1
    if result.changes:
        logger.info("Applied: %s", orchestrator.history.get_undo_description())

    return 0 if save_raster(result.raster, args.output) else 1


if __name__ == "__main__":
    sys.exit(main())
