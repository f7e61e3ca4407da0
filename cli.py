#!/usr/bin/env python3
"""CLI for Fedora Test Analyzer."""

import argparse
import dataclasses
import json
import logging
import sys
from pathlib import Path

import core
from fedora_testresults.config import get_storage_config
from fedora_testresults.data_collector import ARCHITECTURES, DataCollector, ResultsRootNotFoundError
from fedora_testresults.formatters import format_duration, format_percent


def setup_logging(verbose: bool = False):
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.INFO,
        format='%(levelname)s: %(message)s'
    )


def _collector(args) -> DataCollector:
    config = get_storage_config()
    if getattr(args, 'root', None):
        config = dataclasses.replace(config, results_root=Path(args.root).expanduser())
    return DataCollector(config=config)


def cmd_composes(args):
    """List available compose IDs."""
    strategy = "probe" if args.discover else "listing" if args.listing else "known"
    result = core.get_composes(strategy)

    if args.format == 'json':
        print(json.dumps(result, indent=2))
    else:
        print(f"Composes ({result['count']}):")
        for compose_id in result["composes"]:
            print(f"  - {compose_id}")
    return 0


def cmd_fetch(args):
    """Fetch and parse results for a compose."""
    collector = core.get_collector()
    architectures = [args.arch] if args.arch else ARCHITECTURES
    results = collector.get_compose_results(args.compose, architectures)

    if not results:
        print(f"Error: no results found for {args.compose}", file=sys.stderr)
        return 1

    if args.format == 'json':
        print(json.dumps([r.to_dict() for r in results], indent=2))
    else:
        for result in results:
            _print_result(result)

    return 0 if all(r.summary.failed == 0 and r.summary.errors == 0 for r in results) else 1


def _print_result(result):
    """Print human-readable summary of one TestResult."""
    summary = result.summary
    print(f"\n{'='*60}")
    print(f"Compose: {result.compose_id}")
    print(f"Architecture: {result.architecture}")
    print(f"\nTest Results:")
    print(f"  Total:   {summary.total}")
    print(f"  Passed:  {summary.passed}")
    print(f"  Failed:  {summary.failed}")
    print(f"  Errors:  {summary.errors}")
    print(f"  Skipped: {summary.skipped}")
    print(f"  Pass Rate: {format_percent(summary.passed, summary.failed + summary.errors)}")
    print(f"  Duration:  {format_duration(summary.duration)}")

    failed = result.failed_cases()
    if failed:
        print(f"\nFailed Tests ({len(failed)}):")
        for tc in failed[:10]:
            print(f"  - {tc.name[:70]} ({tc.status.value})")
        if len(failed) > 10:
            print(f"  ... and {len(failed) - 10} more")
    print(f"{'='*60}\n")


def cmd_versions(args):
    """Show latest and weekly results for every version directory."""
    collector = _collector(args)
    try:
        data = collector.collect_distro()
    except ResultsRootNotFoundError as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1

    if args.format == 'json':
        print(json.dumps([v.to_dict() for v in data.versions], indent=2))
        return 0

    for series in data.versions:
        latest = series.latest
        print(f"\n{series.version}")
        print(f"  Latest ({latest.timestamp}): {latest.passed}/{latest.total} passed, "
              f"{latest.failed} failed, {latest.skipped} skipped ({latest.success_rate}%)")
        for day, run in series.slots():
            if run is None:
                print(f"    {day.isoformat()}: No Data")
            else:
                print(f"    {day.isoformat()}: {run.passed}/{run.total} ({run.success_rate}%)")
    return 0


def cmd_summary(args):
    """Get distro summary."""
    collector = _collector(args)
    try:
        data = collector.collect_distro()
    except ResultsRootNotFoundError as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1

    summary = data.summary()
    if args.format == 'json':
        print(json.dumps(data.to_dict(), indent=2))
    else:
        print(f"Distro: {data.distro}")
        print(f"Versions: {summary['totalVersions']}")
        print(f"Average success rate: {summary['averageSuccessRate']}%")
        print(f"Tests: {summary['totalPassed']}/{summary['totalTests']} passed")
    return 0


def cmd_serve(args):
    """Run the HTTP API."""
    import web_server

    web_server.run(port=args.port)
    return 0


def main():
    parser = argparse.ArgumentParser(description='Fedora Image Test Analyzer')
    parser.add_argument('-v', '--verbose', action='store_true')

    sub = parser.add_subparsers(dest='command')

    p = sub.add_parser('composes', help='List available compose IDs')
    group = p.add_mutually_exclusive_group()
    group.add_argument('--discover', action='store_true', help='Probe storage for recent composes')
    group.add_argument('--listing', action='store_true', help='Use the container listing')
    p.add_argument('--format', '-f', choices=['text', 'json'], default='text')

    p = sub.add_parser('fetch', help='Fetch test results for a compose')
    p.add_argument('--compose', '-c', required=True, help='Compose ID')
    p.add_argument('--arch', '-a', help='Architecture (default: all)')
    p.add_argument('--format', '-f', choices=['text', 'json'], default='text')

    p = sub.add_parser('versions', help='Show per-version latest and weekly results')
    p.add_argument('--root', help='LISA results root (overrides LISA_RESULTS_ROOT)')
    p.add_argument('--format', '-f', choices=['text', 'json'], default='text')

    p = sub.add_parser('summary', help='Get distro summary')
    p.add_argument('--root', help='LISA results root (overrides LISA_RESULTS_ROOT)')
    p.add_argument('--format', '-f', choices=['text', 'json'], default='text')

    p = sub.add_parser('serve', help='Run the JSON API')
    p.add_argument('--port', type=int, help='Port (default: API_PORT or 8000)')

    args = parser.parse_args()

    if not args.command:
        parser.print_help()
        return 1

    setup_logging(args.verbose)

    cmds = {
        'composes': cmd_composes,
        'fetch': cmd_fetch,
        'versions': cmd_versions,
        'summary': cmd_summary,
        'serve': cmd_serve,
    }
    return cmds[args.command](args)


if __name__ == '__main__':
    sys.exit(main())
