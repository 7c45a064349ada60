import argparse
import os
import sys
import json

from .api_request import DEFAULT_TIMEOUT, RESPONSE_TYPES
from .client import Client
from .config import CONFIG_DIR, CONFIG_FILENAME, ConfigRetrievalStrategy
from .logging_config import LOG_LEVELS, get_logger, setup_logging

logger = get_logger(__name__)


def cmd_send_sms(args: argparse.Namespace) -> int:
    """Send an SMS message"""
    try:
        client = Client(args.config_method, timeout=args.timeout)
        response = client.send_sms(args.message, args.to, args.originator)

        if args.verbose:
            print(json.dumps(response, indent=2))
        else:
            message_id = response.get('message_id', 'N/A') if isinstance(response, dict) else 'N/A'
            print(f"SMS sent successfully! Message ID: {message_id}")

        return 0
    except Exception as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1


def cmd_show_config(args: argparse.Namespace) -> int:
    """Show which config source is used and what it contains"""
    try:
        strategy = ConfigRetrievalStrategy(args.config_method)
        config = strategy()
    except Exception as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1

    method = strategy.method.value if strategy.method else 'explicit'
    print(f"Config method: {method}")
    for key, value in config.items():
        if key == 'password' and value:
            value = '*' * 8
        print(f"  {key}: {value}")
    return 0


def cmd_init(args: argparse.Namespace) -> int:
    """Write a config file under the working directory"""
    config_dir = os.path.join(args.dir or os.getcwd(), CONFIG_DIR)
    config_path = os.path.join(config_dir, CONFIG_FILENAME)

    if os.path.exists(config_path) and not args.force:
        print(f"Config file already exists: {config_path}")
        print("Use --force to overwrite it")
        return 1

    try:
        os.makedirs(config_dir, exist_ok=True)

        config_data = {
            "username": args.username,
            "password": args.password,
            "response_type": args.response_type,
        }

        with open(config_path, 'w') as f:
            json.dump(config_data, f, indent=2)
        os.chmod(config_path, 0o600)
    except OSError as e:
        print(f"Failed to create config file: {e}", file=sys.stderr)
        return 1

    print(f"Created config file: {config_path}")
    return 0


def build_parser() -> argparse.ArgumentParser:
    p = argparse.ArgumentParser(prog="textmarketer", description="Textmarketer SMS client utilities")
    p.add_argument("--log-level", default=None, type=str.upper, choices=LOG_LEVELS, help="Logging level (default: LOG_LEVEL env or WARNING)")
    sub = p.add_subparsers(dest="cmd", required=True)

    config_help = "Config source, 'file' or 'env' (default: auto-detect)"

    p_send = sub.add_parser("send", help="Send an SMS message", description="Send an SMS message through the Textmarketer API.")
    p_send.add_argument("message", help="Message to send")
    p_send.add_argument("--to", required=True, help="Recipient phone number")
    p_send.add_argument("--originator", default=None, help="Sender name shown on the handset")
    p_send.add_argument("--config-method", default=None, choices=["file", "env"], help=config_help)
    p_send.add_argument("--timeout", type=float, default=DEFAULT_TIMEOUT, help=f"Request timeout in seconds (default: {DEFAULT_TIMEOUT})")
    p_send.add_argument("--verbose", "-v", action="store_true", help="Print the full API response")
    p_send.set_defaults(func=cmd_send_sms)

    p_config = sub.add_parser("config", help="Show the resolved config", description="Show which config source is used and the values it provides.")
    p_config.add_argument("--config-method", default=None, choices=["file", "env"], help=config_help)
    p_config.set_defaults(func=cmd_show_config)

    p_init = sub.add_parser("init", help="Create a config file", description=f"Write {CONFIG_DIR}/{CONFIG_FILENAME} with your API credentials.")
    p_init.add_argument("--username", required=True, help="Textmarketer API username")
    p_init.add_argument("--password", required=True, help="Textmarketer API password")
    p_init.add_argument("--response-type", default="json", choices=list(RESPONSE_TYPES), help="Response format (default: json)")
    p_init.add_argument("--dir", default=None, help="Project directory (default: current directory)")
    p_init.add_argument("--force", action="store_true", help="Overwrite an existing config file")
    p_init.set_defaults(func=cmd_init)

    return p


def main(argv=None) -> int:
    argv = argv if argv is not None else sys.argv[1:]
    parser = build_parser()
    args = parser.parse_args(argv)
    setup_logging(args.log_level)
    logger.debug(f"Running '{args.cmd}' command")
    return args.func(args)


if __name__ == "__main__":
    raise SystemExit(main())
