"""
pURLs Command-Line Interface

Commands:
    decompose   - Split a URL into base, parameters and fragment
    compose     - Build a URL from a base and key=value pairs
    trace       - Show the redirect chain of a URL
    check       - Edit a URL's parameters, trace it and diff the parameters
    serve       - Start the JSON API server

Examples:
    purls decompose "http://e.com/p#sec?a=1"
    purls compose http://e.com/p a=1 b=2 --fragment top
    purls check "http://site.test/x?id=7" --utm --set utm_source=news
    purls serve --port 8080
"""

import argparse
import json
import logging
import sys
from typing import List, Optional

from .editor import (
    DecomposedUrl,
    QueryParam,
    Fragment,
    UTM_FIELDS,
    add_utm_fields,
    compose,
    compose_decomposed,
    decompose,
    remove_key,
    separator_for,
    set_fragment,
    set_param
)
from .trace import RedirectChecker, RedirectReport, TraceConfig

EXIT_OK = 0
EXIT_USAGE = 1
EXIT_LOST_PARAMS = 2


def _parse_pairs(pairs: Optional[List[str]], parser: argparse.ArgumentParser) -> List[tuple]:
    """Split key=value arguments, rejecting anything without '='."""
    result = []
    for pair in pairs or []:
        if '=' not in pair:
            parser.error(f"expected key=value, got {pair!r}")
        key, value = pair.split('=', 1)
        result.append((key, value))
    return result


def _load_config(args) -> TraceConfig:
    config = TraceConfig.load(args.config)
    if args.timeout is not None:
        config.timeout = args.timeout
    if args.no_verify_ssl:
        config.verify_ssl = False
    if getattr(args, 'max_redirects', None) is not None:
        config.max_redirects = args.max_redirects
    config.validate()
    return config


def _print_decomposed(decomposed: DecomposedUrl):
    print(f"🔗 Base URL: {decomposed.base or '-'}")

    ordered = decomposed.display_order()
    if not ordered:
        print("   No parameters found.")
        return

    print("   Parameters:")
    for index, param in enumerate(ordered):
        badge = separator_for(ordered, index)
        if isinstance(param, Fragment):
            print(f"   [{badge}] Fragment = {param.value}")
        else:
            print(f"   [{badge}] {param.key} = {param.value}")


def _print_report(report: RedirectReport):
    chain = report.redirect_chain
    print(f"🔀 Redirect Chain ({len(chain)} steps)")
    for index, url in enumerate(chain):
        if index == 0:
            label = "Start"
        elif index == len(chain) - 1:
            label = "Final"
        else:
            label = f"Step {index}"
        print(f"   {label:>7}: {url}")

    if report.chain.error:
        print(f"   ⚠️  Trace stopped early: {report.chain.error}")

    diff = report.diff
    print()
    print(f"✅ Preserved ({len(diff.preserved)})")
    for entry in diff.preserved:
        marker = "⚠️ " if entry.changed else "  "
        print(f"   {marker}{entry.label}")

    print(f"❌ Lost ({len(diff.lost)})")
    for entry in diff.lost:
        print(f"     {entry.label}")

    print(f"➕ Added ({len(diff.added)})")
    for entry in diff.added:
        print(f"     {entry.label}")

    print()
    if diff.lost:
        print(f"⚠️  Warning: {len(diff.lost)} parameter(s) were lost during redirects.")
    elif diff.preserved:
        print("✅ All your parameters were preserved through the redirect chain.")
    if report.redirect_count == 0:
        print("ℹ️  No redirects detected. The URL goes directly to its destination.")


def cmd_decompose(args):
    """
    Decompose a URL and print its parts.

    Args:
        args: Parsed command-line arguments
    """
    decomposed = decompose(args.url)

    if args.json:
        data = decomposed.to_dict()
        data['url'] = compose_decomposed(decomposed)
        print(json.dumps(data, indent=2))
        return EXIT_OK

    _print_decomposed(decomposed)
    url = compose_decomposed(decomposed)
    if url:
        print(f"\n📝 Final URL: {url}")
    return EXIT_OK


def cmd_compose(args):
    """
    Compose a URL from a base and key=value pairs.

    Args:
        args: Parsed command-line arguments
    """
    params = [QueryParam(key, value) for key, value in _parse_pairs(args.params, args.parser)]
    if args.fragment is not None:
        params.append(Fragment(args.fragment))

    url = compose(args.base, params)
    if not url:
        print("❌ Base URL is empty", file=sys.stderr)
        return EXIT_USAGE

    print(json.dumps({'url': url}) if args.json else url)
    return EXIT_OK


def cmd_trace(args):
    """
    Trace the redirect chain of a URL.

    Args:
        args: Parsed command-line arguments
    """
    config = _load_config(args)
    checker = RedirectChecker(config=config)

    chain = checker.trace(args.url)

    if args.json:
        print(json.dumps(chain.to_dict(detailed=True), indent=2))
        return EXIT_OK

    print(f"🔀 {args.url}")
    for hop in chain.hops:
        target = f" -> {hop.location}" if hop.location else ""
        print(f"   {hop.status_code} {hop.url}{target} ({hop.duration_ms:.0f}ms)")
    if chain.error:
        print(f"   ⚠️  {chain.error}")
    print(f"\n📍 Final URL: {chain.final_url} ({chain.redirect_count} redirects)")
    return EXIT_OK


def cmd_check(args):
    """
    Edit a URL's parameters, then trace it and report parameter changes.

    Args:
        args: Parsed command-line arguments
    """
    config = _load_config(args)

    decomposed = decompose(args.url)
    params = decomposed.parameters

    for key in args.remove or []:
        params = remove_key(params, key)
    if args.utm:
        params = add_utm_fields(params)
    for key, value in _parse_pairs(args.set, args.parser):
        params = set_param(params, key, value)
    if args.fragment is not None:
        params = set_fragment(params, args.fragment)

    decomposed = decomposed.with_parameters(params)

    checker = RedirectChecker(config=config)
    report = checker.check(decomposed)

    if report is None:
        print("❌ Nothing to check: the URL has no base", file=sys.stderr)
        return EXIT_USAGE

    if args.json:
        print(json.dumps(report.to_dict(detailed=True), indent=2))
    else:
        print(f"📝 Checking: {report.origin_url}\n")
        _print_report(report)

    if args.strict and report.diff.has_losses:
        return EXIT_LOST_PARAMS
    return EXIT_OK


def cmd_serve(args):
    """
    Start the JSON API server.

    Args:
        args: Parsed command-line arguments
    """
    # Imported lazily so the other commands work without the server stack loaded
    from .server import RedirectServer

    config = _load_config(args)
    if args.host:
        config.host = args.host
    if args.port:
        config.port = args.port

    server = RedirectServer(config=config)
    try:
        server.start()
    except KeyboardInterrupt:
        print("\n\n👋 pURLs server stopped")
    return EXIT_OK


def build_parser() -> argparse.ArgumentParser:
    """Build the argument parser with all subcommands."""
    utm_help = ', '.join(UTM_FIELDS)

    parser = argparse.ArgumentParser(
        prog="purls",
        description="pURLs - URL parameter editor and redirect parameter tracer",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  # Fix a fragment placed before the query string
  %(prog)s decompose "http://e.com/p#sec?a=1"

  # Add UTM codes and see whether they survive redirects
  %(prog)s check "http://site.test/x" --utm --set utm_source=news

  # Start the API
  %(prog)s serve --port 8080
        """
    )

    common = argparse.ArgumentParser(add_help=False)
    common.add_argument('--json', action='store_true', help='Print JSON output')
    common.add_argument('--config', help='YAML config file')
    common.add_argument('--timeout', type=float, help='Per-hop request timeout in seconds')
    common.add_argument('--no-verify-ssl', action='store_true', help='Disable SSL verification')
    common.add_argument('-v', '--verbose', action='store_true', help='Enable verbose logging')

    subparsers = parser.add_subparsers(dest='command', help='Command to run')

    # --- DECOMPOSE command ---
    decompose_parser = subparsers.add_parser('decompose', parents=[common], help='Split a URL into parts')
    decompose_parser.add_argument('url', help='URL to decompose')

    # --- COMPOSE command ---
    compose_parser = subparsers.add_parser('compose', parents=[common], help='Build a URL')
    compose_parser.add_argument('base', help='Base URL (scheme, host, path)')
    compose_parser.add_argument('params', nargs='*', help='Parameters (key=value)')
    compose_parser.add_argument('--fragment', help='Fragment text (without #)')

    # --- TRACE command ---
    trace_parser = subparsers.add_parser('trace', parents=[common], help='Trace redirects of a URL')
    trace_parser.add_argument('url', help='URL to trace')
    trace_parser.add_argument('--max-redirects', type=int, help='Maximum redirects to follow (default: 10)')

    # --- CHECK command ---
    check_parser = subparsers.add_parser('check', parents=[common], help='Edit, trace and diff a URL')
    check_parser.add_argument('url', help='URL to check')
    check_parser.add_argument('--set', nargs='+', metavar='KEY=VALUE', help='Set or add parameters')
    check_parser.add_argument('--remove', nargs='+', metavar='KEY', help='Remove parameters by key')
    check_parser.add_argument('--utm', action='store_true', help=f'Add empty UTM fields ({utm_help})')
    check_parser.add_argument('--fragment', help='Set the fragment text (without #)')
    check_parser.add_argument('--max-redirects', type=int, help='Maximum redirects to follow (default: 10)')
    check_parser.add_argument('--strict', action='store_true', help='Exit with code 2 if parameters are lost')

    # --- SERVE command ---
    serve_parser = subparsers.add_parser('serve', parents=[common], help='Start the JSON API server')
    serve_parser.add_argument('--host', help='Host to bind (default: 127.0.0.1)')
    serve_parser.add_argument('-p', '--port', type=int, help='Port to bind (default: 8080)')

    return parser


def main(argv: Optional[List[str]] = None) -> int:
    """Main CLI entry point."""
    parser = build_parser()
    args = parser.parse_args(argv)
    args.parser = parser

    if args.command is None:
        parser.print_help()
        return EXIT_USAGE

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.WARNING,
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
    )

    commands = {
        'decompose': cmd_decompose,
        'compose': cmd_compose,
        'trace': cmd_trace,
        'check': cmd_check,
        'serve': cmd_serve,
    }

    try:
        return commands[args.command](args)
    except (ValueError, FileNotFoundError) as e:
        print(f"❌ {e}", file=sys.stderr)
        return EXIT_USAGE
    except Exception as e:
        logging.getLogger("purls").exception("Unexpected failure")
        print(f"❌ Unexpected error: {e}", file=sys.stderr)
        return EXIT_USAGE


if __name__ == '__main__':
    sys.exit(main())
