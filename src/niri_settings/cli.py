"""
Command-line interface for niri-settings.

Usage:
    niri-settings [options] command [args]

Commands:
    status        Show config file and compositor status
    init          Write a default settings file
    outputs       List or arrange outputs
    binds         List, add or delete keybindings
    appearance    Show or change layout appearance
"""

import argparse
import logging
import sys
from pathlib import Path

from .compositor import NiriClient
from .config import Settings
from .document import default_config_path
from .exceptions import (
    NiriSettingsError,
    DocumentParseError,
    DocumentIOError,
    MissingBlockError,
    EditValidationError,
    CompositorError,
    CompositorNotFoundError,
    SettingsError,
)
from .commands import (
    show_status,
    init_settings,
    list_outputs,
    arrange_outputs,
    list_binds,
    add_bind,
    delete_bind,
    show_appearance,
    set_appearance,
)


def setup_logging(level: str = "INFO") -> None:
    """Configure logging."""
    logging.basicConfig(
        level=getattr(logging, level.upper()),
        format="%(asctime)s %(levelname)-8s %(name)s: %(message)s",
        datefmt="%H:%M:%S",
        stream=sys.stderr,
    )


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="niri-settings",
        description="Edit niri's config.kdl without losing comments or formatting"
    )
    
    parser.add_argument(
        "-v", "--verbose",
        action="store_true",
        help="Enable debug logging"
    )
    parser.add_argument(
        "-s", "--settings",
        type=Path,
        help="Path to niri-settings' own settings file"
    )
    parser.add_argument(
        "-c", "--config",
        type=Path,
        help="Path to niri config.kdl (overrides settings)"
    )
    
    subparsers = parser.add_subparsers(dest="command", help="Commands")
    
    status_parser = subparsers.add_parser("status", help="Show status")
    status_parser.add_argument("--json", action="store_true", help="Output as JSON")
    
    init_parser = subparsers.add_parser("init", help="Write default settings")
    init_parser.add_argument("--force", action="store_true", help="Overwrite existing settings")
    
    # Outputs
    outputs_parser = subparsers.add_parser("outputs", help="List or arrange outputs")
    outputs_subparsers = outputs_parser.add_subparsers(dest="outputs_command", help="Output commands")
    
    outputs_subparsers.add_parser("list", help="List connected outputs")
    
    set_parser = outputs_subparsers.add_parser("set", help="Set an output's position")
    set_parser.add_argument("name", help="Output name, e.g. DP-1")
    set_parser.add_argument("x", type=int, help="X position in logical pixels")
    set_parser.add_argument("y", type=int, help="Y position in logical pixels")
    
    snap_parser = outputs_subparsers.add_parser("snap", help="Place an output next to another")
    snap_parser.add_argument("name", help="Output to move")
    snap_parser.add_argument(
        "direction",
        choices=["left", "right", "above", "below"],
        help="Side of the reference output to snap to"
    )
    
    normalize_parser = outputs_subparsers.add_parser(
        "normalize", help="Shift outputs so the arrangement starts at 0,0"
    )
    
    for sub in (set_parser, snap_parser, normalize_parser):
        sub.add_argument("--preview", action="store_true", help="Apply live without saving")
        sub.add_argument("--save", action="store_true", help="Write positions to config.kdl")
    
    # Keybindings
    binds_parser = subparsers.add_parser("binds", help="Manage keybindings")
    binds_subparsers = binds_parser.add_subparsers(dest="binds_command", help="Keybinding commands")
    
    binds_list_parser = binds_subparsers.add_parser("list", help="List keybindings")
    binds_list_parser.add_argument("--search", help="Filter by key combo or action")
    
    add_parser = binds_subparsers.add_parser("add", help="Add a keybinding")
    add_parser.add_argument("combo", help="Key combo, e.g. Mod+T")
    add_parser.add_argument("action", help="Command or action, e.g. alacritty or close-window")
    add_parser.add_argument(
        "--type",
        dest="action_type",
        choices=["spawn", "spawn-sh", "action"],
        default="action",
        help="How to interpret ACTION (default: action)"
    )
    add_parser.add_argument("--no-repeat", action="store_true", help="Do not repeat while held")
    add_parser.add_argument("--allow-when-locked", action="store_true", help="Work on the lock screen")
    
    delete_parser = binds_subparsers.add_parser("delete", help="Delete a keybinding")
    delete_parser.add_argument("combo", help="Key combo to unbind")
    
    # Appearance
    appearance_parser = subparsers.add_parser("appearance", help="Layout appearance")
    appearance_subparsers = appearance_parser.add_subparsers(dest="appearance_command", help="Appearance commands")
    
    appearance_subparsers.add_parser("show", help="Show all appearance values")
    
    appearance_set_parser = appearance_subparsers.add_parser("set", help="Change one value")
    appearance_set_parser.add_argument("field", help="Field name, e.g. gaps or border.active-color")
    appearance_set_parser.add_argument("value", help="New value")
    
    return parser


def main(argv=None) -> int:
    """Main entry point."""
    parser = build_parser()
    args = parser.parse_args(argv)
    
    logger = logging.getLogger(__name__)
    
    try:
        # init must work even when the existing settings file is broken
        if args.command == "init":
            setup_logging("DEBUG" if args.verbose else "INFO")
            init_settings(args.settings, force=args.force)
            return 0
        
        settings = Settings.load(args.settings)
        
        level = "DEBUG" if args.verbose else settings.logging.level
        setup_logging(level)
        
        config_path = args.config or settings.niri.get_config_path() or default_config_path()
        client = NiriClient(command=settings.niri.command, timeout=settings.niri.timeout)
        
        command = args.command or "status"
        
        if command == "status":
            show_status(settings, config_path, client, json_output=getattr(args, "json", False))
        elif command == "outputs":
            outputs_cmd = args.outputs_command or "list"
            if outputs_cmd == "list":
                list_outputs(settings, config_path, client)
            elif outputs_cmd == "set":
                arrange_outputs(settings, config_path, client, "set", name=args.name,
                                x=args.x, y=args.y, preview=args.preview, save=args.save)
            elif outputs_cmd == "snap":
                arrange_outputs(settings, config_path, client, "snap", name=args.name,
                                direction=args.direction, preview=args.preview, save=args.save)
            elif outputs_cmd == "normalize":
                arrange_outputs(settings, config_path, client, "normalize",
                                preview=args.preview, save=args.save)
        elif command == "binds":
            binds_cmd = args.binds_command or "list"
            if binds_cmd == "list":
                list_binds(settings, config_path, search=getattr(args, "search", None))
            elif binds_cmd == "add":
                add_bind(
                    settings, config_path, client, args.combo, args.action,
                    action_type=args.action_type,
                    repeat=False if args.no_repeat else None,
                    allow_when_locked=True if args.allow_when_locked else None,
                )
            elif binds_cmd == "delete":
                delete_bind(settings, config_path, client, args.combo)
        elif command == "appearance":
            appearance_cmd = args.appearance_command or "show"
            if appearance_cmd == "show":
                show_appearance(settings, config_path)
            elif appearance_cmd == "set":
                set_appearance(settings, config_path, client, args.field, args.value)
        else:
            parser.print_help()
            return 1
        
        return 0
    
    # Handle specific error types with appropriate exit codes and messages
    except KeyboardInterrupt:
        print("\nCancelled by user", file=sys.stderr)
        return 130
    
    except SettingsError as e:
        print(f"\n❌ Settings Error: {e}", file=sys.stderr)
        return 78  # EX_CONFIG
    
    except (DocumentParseError, MissingBlockError) as e:
        print(f"\n❌ Config Error\n", file=sys.stderr)
        print(str(e), file=sys.stderr)
        return 65  # EX_DATAERR
    
    except DocumentIOError as e:
        print(f"\n❌ Cannot Access Config: {e}", file=sys.stderr)
        return 74  # EX_IOERR
    
    except EditValidationError as e:
        print(f"\n❌ Invalid Input: {e}", file=sys.stderr)
        return 64  # EX_USAGE
    
    except CompositorNotFoundError as e:
        print(f"\n❌ Compositor Not Found\n", file=sys.stderr)
        print(str(e), file=sys.stderr)
        print("\nMake sure niri is running and on your PATH.", file=sys.stderr)
        return 69  # EX_UNAVAILABLE
    
    except CompositorError as e:
        print(f"\n❌ niri Error: {e}", file=sys.stderr)
        return 69  # EX_UNAVAILABLE
    
    except NiriSettingsError as e:
        print(f"\n❌ Error: {e}", file=sys.stderr)
        logger.error(str(e))
        if args.verbose:
            raise
        return 1
    
    except Exception as e:
        # Unexpected errors - show full traceback in verbose mode
        print(f"\n❌ Unexpected Error: {type(e).__name__}: {e}", file=sys.stderr)
        logger.error(f"Unexpected error: {type(e).__name__}: {e}")
        if args.verbose:
            raise
        print("\nRun with -v/--verbose for full traceback.", file=sys.stderr)
        return 1


if __name__ == "__main__":
    sys.exit(main())
