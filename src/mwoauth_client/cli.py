"""
Command-line interface for the MediaWiki OAuth client
Runs the interactive handshake, identity lookups and JWT inspection
"""

import argparse
import json
import logging
import sys
from typing import Optional

from . import __version__
from .config import ClientSettings, load_settings_from_env, load_settings_from_file
from .exceptions import MWOAuthError
from .handshaker import Handshaker
from .tokens import AccessToken
from .verification import decode_jwt


def create_parser() -> argparse.ArgumentParser:
    """Create the main argument parser with subcommands."""
    parser = argparse.ArgumentParser(
        prog='mwoauth-client',
        description='OAuth 1.0a handshake and identity verification against a MediaWiki OAuth provider'
    )

    parser.add_argument(
        '--version',
        action='version',
        version=f'mwoauth-client {__version__}'
    )

    parser.add_argument(
        '--config',
        help='JSON configuration file (defaults to MWOAUTH_* environment variables)'
    )

    parser.add_argument(
        '-v', '--verbose',
        action='store_true',
        help='Enable debug logging'
    )

    subparsers = parser.add_subparsers(dest='command', help='Available commands')

    handshake_parser = subparsers.add_parser('handshake', help='Run the interactive three-legged handshake')
    handshake_parser.add_argument(
        '--no-identify',
        action='store_true',
        help='Skip the identify step after obtaining the access token'
    )

    identify_parser = subparsers.add_parser('identify', help='Identify the user behind an access token')
    identify_parser.add_argument('--access-key', required=True, help='Access token key')
    identify_parser.add_argument('--access-secret', required=True, help='Access token secret')

    decode_parser = subparsers.add_parser('decode-jwt', help='Decode an identity JWT and check its signature')
    decode_parser.add_argument(
        'token',
        nargs='?',
        default='-',
        help="Compact JWT, or '-' to read it from stdin (default)"
    )

    return parser


def load_settings(args) -> ClientSettings:
    """Load settings from --config or the environment."""
    if args.config:
        return load_settings_from_file(args.config)
    return load_settings_from_env()


def print_json(data) -> None:
    print(json.dumps(data, indent=2, sort_keys=True))


def handle_handshake_command(args, settings: ClientSettings) -> int:
    """Handle the interactive handshake."""
    with Handshaker.from_settings(settings) as handshaker:
        redirect, request_token = handshaker.initiate()
        print(f"Point your browser to: {redirect}")
        verify_code = input("Verification code: ").strip()

        access_token = handshaker.complete(request_token, verify_code)
        result = {
            'access_token': {'key': access_token.key, 'secret': access_token.secret},
        }

        if not args.no_identify:
            result['identity'] = handshaker.identify(access_token).to_dict()

    print_json(result)
    return 0


def handle_identify_command(args, settings: ClientSettings) -> int:
    """Handle identifying the owner of an access token."""
    access_token = AccessToken(args.access_key, args.access_secret)
    with Handshaker.from_settings(settings) as handshaker:
        identity = handshaker.identify(access_token)

    print_json(identity.to_dict())
    return 0


def handle_decode_jwt_command(args, settings: ClientSettings) -> int:
    """Handle decoding a JWT with the consumer secret."""
    token = sys.stdin.read() if args.token == '-' else args.token
    claims = decode_jwt(token, settings.consumer.secret)
    print_json(claims.to_dict())
    return 0


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
        format='%(asctime)s %(levelname)s %(name)s: %(message)s'
    )

    handlers = {
        'handshake': handle_handshake_command,
        'identify': handle_identify_command,
        'decode-jwt': handle_decode_jwt_command,
    }
    handler = handlers.get(args.command)
    if handler is None:
        parser.print_help()
        return 1

    try:
        settings = load_settings(args)
        return handler(args, settings)
    except KeyboardInterrupt:
        print("\nOperation cancelled by user", file=sys.stderr)
        return 130
    except MWOAuthError as e:
        print(f"Error [{e.error_code}]: {e}", file=sys.stderr)
        return 1


if __name__ == '__main__':
    sys.exit(main())
