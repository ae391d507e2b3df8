"""Stream cipher chat with Diffie-Hellman key generation."""
import argparse
import logging
import sys

from clientcli import Client, parse_address, parse_port
from config import LISTEN_HOST
from logging_util import setup_logger
from protocol import TransportError
from server import Server


def parse_args(argv=None):
    parser = argparse.ArgumentParser(prog="streamchat", description=__doc__)
    parser.add_argument("-v", "--verbose", action="store_true", help="Show per-message cipher traces")
    commands = parser.add_subparsers(dest="command", required=True)

    server = commands.add_parser("server", help="Start server")
    server.add_argument("port", help="Port to listen on (0 picks a free port)")
    server.add_argument("--host", default=LISTEN_HOST, help="Host to bind")

    client = commands.add_parser("client", help="Connect to server")
    client.add_argument("address", help="Server address (host:port)")

    args = parser.parse_args(argv)
    if args.command == "server":
        try:
            args.port = parse_port(args.port, allow_zero=True)
        except ValueError as e:
            parser.error(str(e))
    elif args.command == "client":
        try:
            args.host, args.port = parse_address(args.address)
        except ValueError as e:
            parser.error(str(e))
    return args


def main(argv=None) -> int:
    args = parse_args(argv)
    logger = setup_logger("streamchat", logging.DEBUG if args.verbose else logging.INFO)

    try:
        if args.command == "server":
            Server(host=args.host, port=args.port).start()
        else:
            Client(host=args.host, port=args.port).start()
    except TransportError as e:
        logger.error(f"Session aborted: {e}")
        return 1
    except KeyboardInterrupt:
        return 130
    return 0


if __name__ == '__main__':
    sys.exit(main())
