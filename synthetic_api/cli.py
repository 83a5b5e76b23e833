"""CLI entrypoint for the synthetic-api dataset builders."""

from __future__ import annotations

import argparse
import sys
from pathlib import Path

from synthetic_api.common.config_loader import load_dataset_config
from synthetic_api.common.constants import DATASETS, EXIT_FAILURE, EXIT_SUCCESS
from synthetic_api.common.errors import ConfigError, PipelineError
from synthetic_api.common.ids import generate_run_id
from synthetic_api.common.logging import build_logger, log_event
from synthetic_api.common.models import RunContext
from synthetic_api.common.time_utils import utc_now
from synthetic_api.pipeline.geocode import resolve_api_key
from synthetic_api.pipeline.run import RunOptions, run_dataset


def _flag(parser: argparse.ArgumentParser, *names: str, **kwargs) -> None:
    # A flag given without a value evaluates to True.
    parser.add_argument(*names, nargs="?", const=True, default=None, **kwargs)


def _extra_flags(tokens: list[str]) -> dict[str, object]:
    extra: dict[str, object] = {}
    idx = 0
    while idx < len(tokens):
        token = tokens[idx]
        idx += 1
        if not token.startswith("--"):
            continue
        key, sep, value = token[2:].partition("=")
        if sep:
            extra[key.lower()] = value
        elif idx < len(tokens) and not tokens[idx].startswith("--"):
            extra[key.lower()] = tokens[idx]
            idx += 1
        else:
            extra[key.lower()] = True
    return extra


def parse_args(argv: list[str]) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description=__doc__)
    parser.add_argument("dataset", choices=DATASETS)
    _flag(parser, "--path", "--destination", dest="path")
    _flag(parser, "--source")
    _flag(parser, "--existing")
    _flag(parser, "--here-api-key", "--hereapikey", dest="here_api_key")
    parser.add_argument("--geocode-limit", type=int, default=None)
    parser.add_argument("--config-dir", default="./config")
    parser.add_argument("--overlay-config-dir", default=None)
    parser.add_argument("--log-dir", default=None)
    parser.add_argument("--log-level", default="INFO", choices=["DEBUG", "INFO", "WARNING", "ERROR"])
    parser.add_argument("--run-id", default=None)
    args, unknown = parser.parse_known_args(argv)
    args.extra = _extra_flags(unknown)
    return args


def _path_arg(value: object, flag: str, *, required: bool) -> Path | None:
    if value is None or value is True:
        if required:
            raise ConfigError(f"{flag} requires a directory path")
        return None
    return Path(str(value))


def build_options(args: argparse.Namespace, dataset_config: dict) -> RunOptions:
    source_required = dataset_config["source"]["kind"] == "csv"
    return RunOptions(
        destination=_path_arg(args.path, "--path", required=True),
        source_dir=_path_arg(args.source, "--source", required=source_required),
        existing_dir=_path_arg(args.existing, "--existing", required=False),
        api_key=resolve_api_key(args.here_api_key, dataset_config.get("geocoding") or {}),
        geocode_limit=args.geocode_limit,
    )


def run_command(args: argparse.Namespace) -> int:
    now = utc_now()
    ctx = RunContext(run_id=args.run_id or generate_run_id(now), now=now)
    logger = build_logger(
        ctx.run_id,
        log_dir=Path(args.log_dir) if args.log_dir else None,
        level=args.log_level,
    )

    try:
        overlay_config_dir = Path(args.overlay_config_dir) if args.overlay_config_dir else None
        dataset_config = load_dataset_config(
            args.dataset,
            Path(args.config_dir),
            overlay_config_dir=overlay_config_dir,
        )
        options = build_options(args, dataset_config)
        summary = run_dataset(dataset_config, options, ctx, logger)
    except PipelineError as exc:
        logger.exception(
            f"run failed: {exc}",
            extra={"run_id": ctx.run_id, "dataset": args.dataset, "status": "error", "error_code": exc.error_code},
        )
        return EXIT_FAILURE
    except Exception as exc:
        logger.exception(
            f"unexpected failure: {exc}",
            extra={"run_id": ctx.run_id, "dataset": args.dataset, "status": "error", "error_code": "UNEXPECTED_ERROR"},
        )
        return EXIT_FAILURE

    log_event(
        logger,
        f"built {summary['dataset']}",
        run_id=ctx.run_id,
        dataset=summary["dataset"],
        event="RUN_END",
        status="partial" if summary["rate_limited"] else "ok",
        rows_out=summary["total"],
    )
    return EXIT_SUCCESS


def main(argv: list[str] | None = None) -> int:
    try:
        args = parse_args(sys.argv[1:] if argv is None else argv)
    except SystemExit as exc:
        return EXIT_SUCCESS if exc.code in (0, None) else EXIT_FAILURE
    return run_command(args)


if __name__ == "__main__":
    raise SystemExit(main())
