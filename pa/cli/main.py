"""CLI entrypoint for pa."""
import sys
import argparse
import logging

from .validators import validate_identifier

VERSION = "0.1.0"

# Configure logging to stderr
logging.basicConfig(
    level=logging.WARNING,
    format="%(message)s",
    stream=sys.stderr
)
logger = logging.getLogger(__name__)


def _build_operations():
    """
    Load configuration and wire the workflows to the real collaborators.

    Imports are deferred so that commands like --help and version
    run without a config file, an age binary or a clipboard.
    """
    from pa.store.domains.config_loader import load_config
    from pa.store.domains.store import Store
    from pa.store.domains.age_client import AgeClient
    from pa.store.workflows.password_operations import PasswordOperations
    from .terminal import TerminalHost

    config = load_config()
    return PasswordOperations(
        store=Store(config["store"]["dir"]),
        crypto=AgeClient(config["age"]["binary"], config["age"]["timeout"]),
        host=TerminalHost(),
        length=config["passwords"]["length"],
        alphabet=config["passwords"]["alphabet"],
        alignment=config["selector"]["alignment"],
    )


def _validate_target(args):
    validate_identifier(getattr(args, "site", None), "site")
    validate_identifier(getattr(args, "account", None), "account")


def cmd_version(args):
    """Show version information."""
    print(f"pa {VERSION}")


def cmd_config_show(args):
    """Show the effective configuration."""
    from pa.store.domains.config_loader import get_config_path, load_config

    config_path = get_config_path()
    config = load_config()

    if config_path.exists():
        print(f"Config path: {config_path}")
    else:
        print(f"Config path: {config_path} (file not found, using defaults)")
    print(f"Store directory: {config['store']['dir']}")
    print(f"age binary: {config['age']['binary']} (timeout {config['age']['timeout']:g}s)")
    print(f"Password length: {config['passwords']['length']}")
    print(f"Password pattern: {config['passwords']['pattern']}")
    print(f"Selector alignment: {config['selector']['alignment']}")


def cmd_list(args):
    """List stored entries."""
    rows = _build_operations().list_entries()
    if not rows:
        print("No passwords stored", file=sys.stderr)
        return
    for row in rows:
        print(row.display)


def cmd_add(args):
    """Add a new password."""
    _validate_target(args)
    entry = _build_operations().add(args.site, args.account, generate=args.generate)
    print(f"Saved '{entry}'")


def cmd_show(args):
    """Copy a password to the clipboard."""
    _validate_target(args)
    _build_operations().show(args.site, args.account)
    print("Password copied to clipboard")


def cmd_edit(args):
    """Replace an existing password."""
    _validate_target(args)
    entry = _build_operations().edit(args.site, args.account, generate=args.generate, assume_yes=args.yes)
    print(f"Updated '{entry}'")


def cmd_delete(args):
    """Delete a password."""
    _validate_target(args)
    entry = _build_operations().delete(args.site, args.account, assume_yes=args.yes)
    print(f"Deleted '{entry}'")


def cmd_rename(args):
    """Rename a password entry."""
    _validate_target(args)
    validate_identifier(args.new_site, "site")
    validate_identifier(args.new_account, "account")

    old, new = _build_operations().rename(
        args.site, args.account, args.new_site, args.new_account, assume_yes=args.yes
    )
    if old == new:
        print(f"'{old}' unchanged")
    else:
        print(f"Renamed '{old}' to '{new}'")


def _add_target_arguments(parser, required=False):
    nargs = None if required else "?"
    parser.add_argument("site", nargs=nargs, help="Site name (no ':' or whitespace)")
    parser.add_argument("account", nargs=nargs, help="Account name (no ':' or whitespace)")


def _add_generate_arguments(parser):
    group = parser.add_mutually_exclusive_group()
    group.add_argument(
        "-g", "--generate",
        dest="generate",
        action="store_true",
        help="Generate a random password without asking"
    )
    group.add_argument(
        "-n", "--no-generate",
        dest="generate",
        action="store_false",
        help="Type the password in without asking"
    )
    parser.set_defaults(generate=None)


def _add_yes_argument(parser):
    parser.add_argument(
        "-y", "--yes",
        action="store_true",
        help="Do not ask for confirmation"
    )


def build_parser():
    parser = argparse.ArgumentParser(
        prog="pa",
        description="pa - a simple password store encrypted with age",
        epilog="""
Exit codes:
  0 - Success (or aborted by the user)
  1 - Runtime error (entry not found, age failure, config error, etc.)
  2 - Usage error (invalid arguments, invalid site/account, etc.)

Environment variables:
  PA_DIR     - Store directory (default: $XDG_DATA_HOME/pa)
  PA_LENGTH  - Generated password length (default: 50)
  PA_PATTERN - Generated password characters (default: _A-Z-a-z-0-9)
  PA_CONFIG  - Config file (default: $XDG_CONFIG_HOME/pa/config.yml)

Store layout:
  <dir>/passwords/<site>:<account>.age
  <dir>/identities  (age identities, used to decrypt)
  <dir>/recipients  (age recipients, used to encrypt)
        """,
        formatter_class=argparse.RawDescriptionHelpFormatter
    )
    parser.add_argument(
        "-v", "--verbose",
        action="store_true",
        help="Show debug logging on stderr"
    )

    subparsers = parser.add_subparsers(dest="command", help="Available commands")

    # version command
    _version_parser = subparsers.add_parser(
        "version",
        help="Show version information",
        description="Display the current version of pa"
    )

    # config command
    config_parser = subparsers.add_parser(
        "config",
        help="Configuration",
        description="Inspect pa configuration"
    )
    config_subparsers = config_parser.add_subparsers(dest="config_command")
    _config_show_parser = config_subparsers.add_parser(
        "show",
        help="Show the effective configuration",
        description="Display the config file path and the values in effect after environment overrides"
    )

    # list command
    _list_parser = subparsers.add_parser(
        "list",
        aliases=["ls"],
        help="List passwords",
        description="List every stored site and account, with the accounts aligned in one column"
    )

    # add command
    add_parser = subparsers.add_parser(
        "add",
        help="Add a password",
        description="""
Add a password for SITE and ACCOUNT.

Unless -g or -n is given you are asked whether to generate one.
Typed passwords are read twice without echo and must match.
An existing entry is never overwritten; use 'pa edit' for that.
        """,
        formatter_class=argparse.RawDescriptionHelpFormatter
    )
    _add_target_arguments(add_parser, required=True)
    _add_generate_arguments(add_parser)

    # show command
    show_parser = subparsers.add_parser(
        "show",
        help="Copy a password to the clipboard",
        description="Decrypt a password and copy it to the clipboard. Missing SITE/ACCOUNT are selected interactively."
    )
    _add_target_arguments(show_parser)

    # edit command
    edit_parser = subparsers.add_parser(
        "edit",
        help="Change a password",
        description="Replace the password of an existing entry. Missing SITE/ACCOUNT are selected interactively."
    )
    _add_target_arguments(edit_parser)
    _add_generate_arguments(edit_parser)
    _add_yes_argument(edit_parser)

    # del command
    del_parser = subparsers.add_parser(
        "del",
        aliases=["delete"],
        help="Delete a password",
        description="Delete an entry. Missing SITE/ACCOUNT are selected interactively."
    )
    _add_target_arguments(del_parser)
    _add_yes_argument(del_parser)

    # rename command
    rename_parser = subparsers.add_parser(
        "rename",
        aliases=["mv"],
        help="Rename a password",
        description="""
Move an entry to a new site and/or account.

Missing SITE/ACCOUNT are selected interactively; missing new values are
asked for, defaulting to the current ones. An existing target is never
overwritten.
        """,
        formatter_class=argparse.RawDescriptionHelpFormatter
    )
    _add_target_arguments(rename_parser)
    rename_parser.add_argument("--new-site", help="New site name")
    rename_parser.add_argument("--new-account", help="New account name")
    _add_yes_argument(rename_parser)

    return parser, config_parser


def main(argv=None):
    """Main CLI entrypoint.

    Exit codes:
        0 - Success, or aborted by the user
        1 - Runtime errors (entry not found, age failure, config error, etc.)
        2 - Usage errors (invalid arguments, invalid site/account, etc.)
    """
    from pa.store.domains.models import Aborted, PaError
    from pa.store.domains.config_loader import ConfigError

    parser, config_parser = build_parser()
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
        elif args.command in ("list", "ls"):
            cmd_list(args)
        elif args.command == "add":
            cmd_add(args)
        elif args.command == "show":
            cmd_show(args)
        elif args.command == "edit":
            cmd_edit(args)
        elif args.command in ("del", "delete"):
            cmd_delete(args)
        elif args.command in ("rename", "mv"):
            cmd_rename(args)
        else:
            parser.print_help()
            sys.exit(2)
    except Aborted:
        print("Aborted", file=sys.stderr)
        sys.exit(0)
    except (PaError, ConfigError) as e:
        print(f"Error: {e}", file=sys.stderr)
        sys.exit(1)
    except KeyboardInterrupt:
        print("\nInterrupted", file=sys.stderr)
        sys.exit(1)
    except Exception as e:
        logger.debug("Unexpected error", exc_info=True)
        print(f"Error: {e}", file=sys.stderr)
        sys.exit(1)


if __name__ == "__main__":
    main()
