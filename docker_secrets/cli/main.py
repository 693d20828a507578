"""CLI entrypoint for docker-secrets."""
import sys
import argparse
import logging

from .validators import parse_override, validate_property_key

VERSION = "0.1.0"

# Configure logging to stderr
logging.basicConfig(
    level=logging.WARNING,
    format="%(message)s",
    stream=sys.stderr
)
logger = logging.getLogger(__name__)


def _printable(text):
    """Escape characters stdout can't encode, e.g. undecodable filename bytes."""
    return text.encode("utf-8", errors="backslashreplace").decode("utf-8")


def _create_environment(args):
    """Build the property source chain from global CLI options."""
    from docker_secrets.secrets.domains.config_loader import create_environment

    overrides = dict(parse_override(value) for value in getattr(args, "overrides", None) or [])
    return create_environment(config_path=getattr(args, "config", None), overrides=overrides)


def cmd_version(args):
    """Show version information."""
    print(f"docker-secrets {VERSION}")


def cmd_config_show(args):
    """Show config file location and effective secrets settings."""
    from docker_secrets.secrets.domains.config_loader import (
        default_config_path,
        locate_config,
        resolve_settings,
    )

    config_path, source = locate_config(getattr(args, "config", None))
    if config_path:
        print(f"Config path: {config_path}")
        print(f"Source: {source}")
    else:
        print(f"Config path: {default_config_path()}")
        print("Source: default (file not found)")

    settings = resolve_settings(_create_environment(args))
    print(f"Base directory: {settings.base_dir}")
    print(f"Separator: '{settings.separator}'")


def cmd_secrets_list(args):
    """List the property keys found in the secrets directory."""
    from docker_secrets.secrets.domains.config_loader import resolve_settings
    from docker_secrets.secrets.domains.index_builder import build_property_index

    settings = resolve_settings(_create_environment(args))
    index = build_property_index(settings)

    if not index:
        print(f"No secrets found in {settings.base_dir}")
        return

    for key in sorted(index):
        print(f"{_printable(key)} -> {index[key]}")


def cmd_secrets_get(args):
    """Get the value of a secret property."""
    from docker_secrets.secrets.workflows.secret_operations import get_secret, load_secret_properties

    validate_property_key(args.key)
    sources = _create_environment(args)
    load_secret_properties(sources)
    secret_value = get_secret(args.key, sources)

    if secret_value is not None:
        if args.quiet:
            # Quiet mode: output only value, no formatting
            print(secret_value)
        else:
            print(f"Secret '{args.key}': {secret_value}")
        sys.exit(0)
    else:
        print(f"Error: Secret '{args.key}' not found", file=sys.stderr)
        sys.exit(1)


def main(argv=None):
    """Main CLI entrypoint.

    Exit codes:
        0 - Success
        1 - Runtime errors (unreadable directory or file, bad config, secret not found, etc.)
        2 - Usage errors (invalid arguments, invalid property key, etc.)
    """
    parser = argparse.ArgumentParser(
        prog="docker-secrets",
        description="docker-secrets CLI - expose file-mounted Docker/Kubernetes secrets as configuration properties",
        epilog="""
Exit codes:
  0 - Success
  1 - Runtime error (unreadable directory or file, bad config, secret not found, etc.)
  2 - Usage error (invalid arguments, invalid property key, etc.)

Environment variables:
  DOCKER_SECRETS_CONFIG  - Config file path (overrides default location)
  SECRETS_FILE_BASE_DIR  - Secrets directory (default: /run/secrets)
  SECRETS_FILE_SEPARATOR - Separator used in secret filenames (default: '.')

Configuration:
  Default location: ~/.config/docker-secrets/config.yml
  View current: Run 'docker-secrets config show'
        """
    )
    parser.add_argument(
        "--config",
        help="Path to config file (overrides DOCKER_SECRETS_CONFIG and the default location)"
    )
    parser.add_argument(
        "--set",
        dest="overrides",
        action="append",
        metavar="KEY=VALUE",
        help="Set a property, taking precedence over environment and config file (repeatable)"
    )
    parser.add_argument(
        "-v", "--verbose",
        action="store_true",
        help="Enable debug logging"
    )

    subparsers = parser.add_subparsers(dest="command", help="Available commands")

    # version command
    _version_parser = subparsers.add_parser(
        "version",
        help="Show version information",
        description="Display the current version of docker-secrets"
    )

    # config command
    config_parser = subparsers.add_parser(
        "config",
        help="Configuration management",
        description="Inspect docker-secrets configuration"
    )
    config_subparsers = config_parser.add_subparsers(dest="config_command")

    # config show command
    _config_show_parser = config_subparsers.add_parser(
        "show",
        help="Show current configuration",
        description="""
Display the configuration file path, its source and the effective
secrets directory settings.

Sources:
  - argument: Path given with --config
  - env: Path from DOCKER_SECRETS_CONFIG
  - default: Default XDG location (~/.config/docker-secrets/config.yml)
        """
    )

    # secrets command
    secrets_parser = subparsers.add_parser(
        "secrets",
        help="Secret property operations",
        description="Inspect secrets mounted as files"
    )
    secrets_subparsers = secrets_parser.add_subparsers(dest="secrets_command")

    # secrets list command
    _list_parser = secrets_subparsers.add_parser(
        "list",
        help="List secret property keys",
        description="""
List the property keys derived from the files in the secrets directory,
together with the file each key is read from.

Ambiguous and duplicate files are reported as warnings on stderr.
        """
    )

    # secrets get command
    get_parser = secrets_subparsers.add_parser(
        "get",
        help="Get a secret property value",
        description="""
Load all secret files and print the value of one secret property.

Exit codes:
  0 - Secret found and printed
  1 - Secret not found
  2 - Invalid property key format
        """
    )
    get_parser.add_argument(
        "key",
        help="Normalized property key (e.g. spring.datasource.password)"
    )
    get_parser.add_argument(
        "-q", "--quiet",
        action="store_true",
        help="Output only the secret value (useful for scripts)"
    )

    args = parser.parse_args(argv)

    if args.verbose:
        logging.getLogger().setLevel(logging.DEBUG)

    # If no command provided, show help and exit with usage error code
    if not args.command:
        parser.print_help()
        sys.exit(2)

    # Route to command handlers
    try:
        if args.command == "version":
            cmd_version(args)
        elif args.command == "config":
            if args.config_command == "show":
                cmd_config_show(args)
            else:
                config_parser.print_help()
                sys.exit(2)
        elif args.command == "secrets":
            if args.secrets_command == "list":
                cmd_secrets_list(args)
            elif args.secrets_command == "get":
                cmd_secrets_get(args)
            else:
                secrets_parser.print_help()
                sys.exit(2)
        else:
            parser.print_help()
            sys.exit(2)
    except KeyboardInterrupt:
        print("\nInterrupted", file=sys.stderr)
        sys.exit(1)
    except Exception as e:
        print(f"Error: {e}", file=sys.stderr)
        sys.exit(1)


if __name__ == "__main__":
    main()
