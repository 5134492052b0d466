"""
Command-line interface for EdgeGrid Python SDK
Signs requests, sends signed requests and inspects credentials
"""

import argparse
import json
import logging
import sys
from typing import Dict, List, Optional

from . import initialize_sdk, __version__
from .config.edgerc import EdgeGridConfig, DEFAULT_EDGERC_PATH, DEFAULT_SECTION
from .exceptions import EdgeGridSDKError, HttpStatusError, ValidationError
from .http_client import EdgeGridHttpClient, ClientSettings
from .signing import EdgeGridSigner, SignableRequest


def create_parser() -> argparse.ArgumentParser:
    """Create the main argument parser with subcommands."""
    parser = argparse.ArgumentParser(
        prog='edgegrid-cli',
        description='EdgeGrid SDK command-line interface for request signing'
    )

    parser.add_argument(
        '--version',
        action='version',
        version=f'EdgeGrid Python SDK {__version__}'
    )

    parser.add_argument(
        '--check-compatibility',
        action='store_true',
        help='Check platform compatibility and exit'
    )

    parser.add_argument(
        '--edgerc',
        default=DEFAULT_EDGERC_PATH,
        help=f'Path to credentials file (default: {DEFAULT_EDGERC_PATH})'
    )

    parser.add_argument(
        '--section',
        default=DEFAULT_SECTION,
        help=f'Credentials section (default: {DEFAULT_SECTION})'
    )

    parser.add_argument(
        '--verbose', '-v',
        action='store_true',
        help='Enable debug logging'
    )

    subparsers = parser.add_subparsers(dest='command', help='Available commands')

    setup_sign_parser(subparsers)
    setup_request_parser(subparsers)
    setup_config_parser(subparsers)

    return parser


def setup_sign_parser(subparsers):
    """Setup sign subcommand."""
    sign_parser = subparsers.add_parser('sign', help='Print the Authorization header for a request')
    sign_parser.add_argument('method', help='HTTP method')
    sign_parser.add_argument('url', help='Request URL or path relative to the credential host')
    sign_parser.add_argument('--data', help='Request body')
    sign_parser.add_argument(
        '--header',
        action='append',
        default=[],
        help='Request header as NAME:VALUE (repeatable)'
    )
    sign_parser.add_argument(
        '--sign-header',
        action='append',
        default=[],
        help='Header name to include in the signature (repeatable)'
    )
    sign_parser.add_argument(
        '--show-data-to-sign',
        action='store_true',
        help='Also print the string that was signed'
    )


def setup_request_parser(subparsers):
    """Setup request subcommand."""
    request_parser = subparsers.add_parser('request', help='Send a signed request')
    request_parser.add_argument('method', help='HTTP method')
    request_parser.add_argument('path', help='Path relative to the credential host')
    request_parser.add_argument('--data', help='Request body')
    request_parser.add_argument('--json', dest='json_body', help='JSON request body')
    request_parser.add_argument(
        '--param',
        action='append',
        default=[],
        help='Query parameter as KEY=VALUE (repeatable)'
    )
    request_parser.add_argument(
        '--header',
        action='append',
        default=[],
        help='Request header as NAME:VALUE (repeatable)'
    )
    request_parser.add_argument(
        '--sign-header',
        action='append',
        default=[],
        help='Header name to include in the signature (repeatable)'
    )
    request_parser.add_argument('--timeout', type=float, default=30.0, help='Timeout in seconds')
    request_parser.add_argument('--retries', type=int, default=0, help='Retries for transient failures')


def setup_config_parser(subparsers):
    """Setup config subcommands."""
    config_parser = subparsers.add_parser('config', help='Credential configuration')
    config_subparsers = config_parser.add_subparsers(dest='config_command', help='Config operations')

    show_parser = config_subparsers.add_parser('show', help='Show resolved credentials (secret masked)')
    show_parser.add_argument('--edgerc-format', action='store_true', help='Print as an .edgerc section')


def parse_pairs(values: List[str], separator: str, what: str) -> Dict[str, str]:
    """
    Parse NAME<sep>VALUE command-line pairs.

    Raises:
        ValidationError: If a value has no separator
    """
    pairs = {}
    for item in values:
        name, sep, value = item.partition(separator)
        if not sep or not name.strip():
            raise ValidationError(f"Invalid {what} '{item}', expected NAME{separator}VALUE")
        pairs[name.strip()] = value.strip()
    return pairs


def load_config(args) -> EdgeGridConfig:
    """Load credentials for the selected section."""
    return EdgeGridConfig.from_edgerc(args.edgerc, args.section)


def handle_sign_command(args) -> int:
    """Handle sign command."""
    config = load_config(args)
    signer = EdgeGridSigner(config, args.sign_header)

    url = args.url
    if not url.startswith(('http://', 'https://')):
        url = f"{config.host}/{url.lstrip('/')}"

    request = SignableRequest(
        method=args.method.upper(),
        url=url,
        headers=parse_pairs(args.header, ':', 'header'),
        body=args.data,
    )
    result = signer.sign_request(request)

    if args.show_data_to_sign:
        print(f"Data to sign: {result.data_to_sign!r}")
    print(f"Authorization: {result.authorization}")
    return 0


def handle_request_command(args) -> int:
    """Handle request command."""
    if args.data is not None and args.json_body is not None:
        print("Error: Cannot specify both --data and --json", file=sys.stderr)
        return 1

    json_body = None
    if args.json_body is not None:
        try:
            json_body = json.loads(args.json_body)
        except json.JSONDecodeError as e:
            print(f"Error: Invalid JSON body: {e}", file=sys.stderr)
            return 1

    config = load_config(args)
    settings = ClientSettings(timeout=args.timeout, retry_attempts=args.retries)

    with EdgeGridHttpClient(config, settings=settings, headers_to_sign=args.sign_header) as client:
        response = client.request(
            args.method,
            args.path,
            params=parse_pairs(args.param, '=', 'parameter'),
            headers=parse_pairs(args.header, ':', 'header'),
            json=json_body,
            data=args.data,
        )

    print(f"HTTP {response.status_code} {response.reason}")
    print(response.text)

    if not response.ok:
        raise HttpStatusError(response.status_code, response.reason or "", response.text)
    return 0


def handle_config_command(args) -> int:
    """Handle config commands."""
    if args.config_command == 'show':
        config = load_config(args)
        if args.edgerc_format:
            print(config.to_edgerc(args.section), end='')
        else:
            print(json.dumps(config.masked(), indent=2))
        return 0

    print("Error: No config subcommand specified", file=sys.stderr)
    return 1


def main(argv: Optional[list] = None) -> int:
    """
    Main entry point for the CLI

    Args:
        argv: Command line arguments (None to use sys.argv)

    Returns:
        int: Exit code (0 for success, non-zero for failure)
    """
    if argv is None:
        argv = sys.argv[1:]

    parser = create_parser()
    args = parser.parse_args(argv)

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.WARNING,
        format='%(levelname)s %(name)s: %(message)s'
    )

    try:
        if args.check_compatibility:
            result = initialize_sdk()
            if result['compatible']:
                print("✓ Platform is compatible with EdgeGrid SDK")
                return 0
            print("✗ Platform is not compatible with EdgeGrid SDK")
            for warning in result['warnings']:
                print(f"  Error: {warning}")
            return 1

        if args.command == 'sign':
            return handle_sign_command(args)
        elif args.command == 'request':
            return handle_request_command(args)
        elif args.command == 'config':
            return handle_config_command(args)
        else:
            parser.print_help()
            return 1

    except KeyboardInterrupt:
        print("\nOperation cancelled by user", file=sys.stderr)
        return 130
    except EdgeGridSDKError as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1


if __name__ == '__main__':
    sys.exit(main())
