"""
Main entry point for channel tag management

Edits the device channel's tags and syncs them to the registration API.
Without network access (or with --offline) edits are kept in the local
store and re-sent on the next online run.

Usage:
    # Show tags
    python -m channel_tags.main list

    # Add / remove tags
    python -m channel_tags.main add vip beta
    python -m channel_tags.main remove beta
    python -m channel_tags.main remove-at 0

    # Replace all tags
    python -m channel_tags.main set vip news

    # Local edits only
    python -m channel_tags.main add vip --offline
"""

import argparse
import sys
from pathlib import Path
from typing import List, Optional

from channel_tags.config import get_config, load_config, set_config, Config
from channel_tags.coordination import TagSyncCoordinator
from channel_tags.persistence import TagStore
from channel_tags.utils.exceptions import (
    ChannelTagsError,
    ConfigurationError,
    InvalidTagError,
    TagNotFoundError,
    TagIndexError,
)
from channel_tags.utils.logging_config import get_logger, setup_file_logging

logger = get_logger("main")


ACTIONS = ["list", "add", "remove", "remove-at", "set", "status"]


def run_command(
    action: str,
    values: Optional[List[str]] = None,
    offline: bool = False,
    config: Optional[Config] = None,
) -> dict:
    """
    Run one tag command against a freshly seeded registry.

    Args:
        action: One of ACTIONS (except status)
        values: Tags (or a single index for remove-at)
        offline: If True, only the local store is used
        config: Configuration object. If None, uses global config.

    Returns:
        Dict with the resulting tags and session statistics
    """
    values = values or []
    config = config or get_config()

    with TagSyncCoordinator(config=config, offline=offline) as coordinator:
        registry = coordinator.registry

        if action == "add":
            if len(values) == 1:
                registry.add_tag(values[0])
            else:
                registry.add_tags(values)
        elif action == "remove":
            if len(values) == 1:
                registry.remove_tag(values[0])
            else:
                registry.remove_tags(values)
        elif action == "remove-at":
            if len(values) != 1:
                raise ValueError("remove-at takes exactly one index")
            registry.remove_at(int(values[0]))
        elif action == "set":
            registry.set_tags(values)
        elif action != "list":
            raise ValueError(f"Unknown action: {action}")

    stats = coordinator.get_stats()
    stats["tag_list"] = list(registry.tags())
    return stats


def print_status(config: Config) -> None:
    """Print the local store contents."""
    store = TagStore(path=config.store.path, enabled=config.store.enabled)
    stored = store.load()

    print("\n=== Channel Tag Status ===")
    print(f"Store: {store.path}")
    print(f"Last Updated: {stored.last_updated or 'Never'}")
    print(f"Channel: {config.channel.channel_id or '(not configured)'}")
    print(f"Tag Registration Enabled: {config.channel.tag_registration_enabled}")
    print()

    print(f"Tags ({len(stored.tags)}):")
    for index, tag in enumerate(stored.tags):
        print(f"  [{index}] {tag}")
    print()

    print(f"In Sync: {stored.in_sync}")
    if not stored.in_sync:
        print(f"  Last Synced: {stored.last_synced}")
    print()


def main(argv: Optional[List[str]] = None) -> None:
    """Main entry point with CLI argument parsing."""
    parser = argparse.ArgumentParser(
        description="Channel Tags - Manage and sync device tags",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
    # Show tags registered for the channel
    python -m channel_tags.main list

    # Add tags
    python -m channel_tags.main add vip beta

    # Remove the first tag, local store only
    python -m channel_tags.main remove-at 0 --offline

    # Show local store status
    python -m channel_tags.main status
        """
    )

    parser.add_argument(
        "action",
        choices=ACTIONS,
        help="Tag command to run"
    )

    parser.add_argument(
        "values",
        nargs="*",
        help="Tags, or an index for remove-at"
    )

    parser.add_argument(
        "--offline",
        action="store_true",
        help="Only use the local tag store"
    )

    parser.add_argument(
        "--config",
        type=Path,
        default=None,
        help="Path to config.json (default: ./config.json)"
    )

    parser.add_argument(
        "--log-file",
        action="store_true",
        help="Enable file logging to logs/channel_tags.log"
    )

    args = parser.parse_args(argv)

    if args.log_file:
        setup_file_logging()

    if args.config is not None:
        set_config(load_config(args.config))
    config = get_config()

    if args.action == "status":
        print_status(config)
        return

    try:
        logger.info(f"Running tag command: action={args.action}, offline={args.offline}")

        stats = run_command(
            action=args.action,
            values=args.values,
            offline=args.offline,
            config=config,
        )

        print("\n=== Tags ===")
        for index, tag in enumerate(stats.pop("tag_list")):
            print(f"  [{index}] {tag}")
        print()
        for key, value in stats.items():
            print(f"  {key}: {value}")

    except ConfigurationError as e:
        print(f"\n{e}")
        print("Set channel_id, app_key and app_secret in config.json, or use --offline.")
        sys.exit(1)
    except (InvalidTagError, TagNotFoundError, TagIndexError, ValueError) as e:
        print(f"\nError: {e}")
        sys.exit(1)
    except KeyboardInterrupt:
        print("\n\nInterrupted by user. Local tags saved.")
        sys.exit(130)
    except ChannelTagsError as e:
        logger.exception(f"Tag command failed: {e}")
        sys.exit(1)


if __name__ == "__main__":
    main()
