"""hearth CLI: catalog listing, one-off analysis, and the hub server."""

import argparse
import json
import logging
import sys
from datetime import date, timedelta

logger = logging.getLogger("hearth.cli")


def main(argv=None):
    parser = argparse.ArgumentParser(
        prog="hearth",
        description="hearth: household behavioral anomaly analysis",
    )
    parser.add_argument("--verbose", action="store_true", help="Enable DEBUG logging")
    parser.add_argument("--quiet", action="store_true", help="Only show WARNING and above")
    subparsers = parser.add_subparsers(dest="command", help="Available commands")

    subparsers.add_parser("features", help="List the feature catalog")

    analyze_parser = subparsers.add_parser("analyze", help="Analyze one household day")
    analyze_parser.add_argument("config_id", help="Household config id")
    analyze_parser.add_argument("--date", default=None, help="Day to analyze, YYYY-MM-DD (default: yesterday)")
    analyze_parser.add_argument("--export", default=None, help="Activity export JSON (default: HEARTH_EXPORT_PATH)")
    analyze_parser.add_argument("--lookback", type=int, default=None, help="Baseline window in days")
    analyze_parser.add_argument("--json", action="store_true", dest="json_output", help="Output as JSON")

    serve_parser = subparsers.add_parser("serve", help="Start the hub API")
    serve_parser.add_argument("--port", type=int, default=None, help="Port (default: 8002)")
    serve_parser.add_argument("--host", default=None, help="Host (default: 127.0.0.1)")
    serve_parser.add_argument("--export", default=None, help="Activity export JSON (default: HEARTH_EXPORT_PATH)")

    args = parser.parse_args(argv)

    if not args.command:
        parser.print_help()
        sys.exit(1)

    _configure_logging(args)
    _dispatch(args)


def _configure_logging(args):
    log_level = "INFO"
    if args.verbose:
        log_level = "DEBUG"
    elif args.quiet:
        log_level = "WARNING"
    logging.basicConfig(
        level=getattr(logging, log_level),
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S",
    )


def _dispatch(args):
    if args.command == "features":
        _features()
    elif args.command == "analyze":
        _analyze(args)
    elif args.command == "serve":
        _serve(args)
    else:
        print(f"Unknown command: {args.command}")
        sys.exit(1)


def _features():
    from hearth.engine.features.catalog import GROUP_LABELS, feature_groups

    for group, features in feature_groups().items():
        print(GROUP_LABELS[group])
        for f in features:
            flags = [
                name
                for name, on in (("time", f.is_time), ("derived", f.is_derived), ("room", f.is_room_feature))
                if on
            ]
            suffix = f" [{', '.join(flags)}]" if flags else ""
            print(f"  {f.key.value:<22} {f.unit:<12} w={f.weight:<5}{suffix}")


def _load_source(export, config):
    from pathlib import Path

    from hearth.engine.collectors.source import JsonActivitySource

    path = Path(export).expanduser() if export else config.paths.export_path
    try:
        return JsonActivitySource(path)
    except (OSError, ValueError) as e:
        print(f"Cannot load activity export {path}: {e}", file=sys.stderr)
        sys.exit(1)


def _parse_day(raw):
    if raw is None:
        return date.today() - timedelta(days=1)
    try:
        return date.fromisoformat(raw)
    except ValueError:
        print(f"Invalid --date {raw!r}, expected YYYY-MM-DD", file=sys.stderr)
        sys.exit(1)


def _analyze(args):
    from hearth.engine.analysis.day_analysis import analyze_day
    from hearth.engine.collectors.source import load_analysis_inputs
    from hearth.engine.config import AppConfig

    config = AppConfig.from_env()
    lookback = args.lookback or config.analysis.lookback_days
    day = _parse_day(args.date)
    source = _load_source(args.export, config)

    inputs = load_analysis_inputs(source, args.config_id, day, lookback)
    if inputs.today is None:
        logger.warning("No activity record for %s on %s", args.config_id, day)
    result = analyze_day(inputs.today, inputs.history, inputs.room_rows, day, lookback, args.config_id)

    if args.json_output:
        print(json.dumps(result.to_dict(), indent=2))
        return result

    _print_analysis(result, config.analysis.minimum_days_required)
    return result


def _print_analysis(result, minimum_days):
    report = result.to_dict()
    baseline = report["baseline"]
    print(f"Household {report['config_id']} on {report['date']}")
    print(f"  Baseline days: {baseline['sample_day_count']}")
    if baseline["sample_day_count"] < minimum_days:
        print(f"  ! fewer than {minimum_days} baseline days; treat the score as indicative only")
    print(f"  Anomaly score: {report['score']['aggregate']:.2f} ({report['score']['label']})")
    for row in report["score"]["rows"]:
        marker = "!" if row["severity"] == "high" else ("~" if row["severity"] == "medium" else " ")
        print(f"  {marker} {row['description']}")


def _serve(args):
    import uvicorn

    from hearth.engine.config import AppConfig
    from hearth.hub.api import create_api

    config = AppConfig.from_env()
    host = args.host or config.hub.host
    port = args.port or config.hub.port
    source = _load_source(args.export, config)

    logger.info("hearth hub on http://%s:%d (export: %s)", host, port, source.path)
    uvicorn.run(create_api(source, config), host=host, port=port, log_level="info")


if __name__ == "__main__":
    main()
