#!/usr/bin/env python3
"""
Example: Assigning abbrlinks to a folder of notes

This script shows how to drive the abbrlink processor from Python
on a sample collection, first as a dry run and then for real.
"""

from pathlib import Path

from config import Config
from core.inventory import VaultInventory
from core.notices import ConsoleNotifier
from core.processor import AbbrlinkProcessor


def main():
    """Run example generation."""

    root_dir = Path("./sample_notes")  # Replace with your directory

    if not root_dir.exists():
        print(f"Error: Sample directory not found: {root_dir}")
        print("\nPlease either:")
        print(f"  1. Create {root_dir} and add some .md files")
        print("  2. Update this script with your actual notes directory")
        return

    config = Config(hash_length=8, check_collisions=True, root_dir=root_dir, dry_run=True)
    inventory = VaultInventory(
        root_dir,
        extensions=config.processing.extensions,
        ignore_patterns=config.processing.ignore_patterns,
    )

    print("=" * 80)
    print("Abbrlink - Example Run")
    print("=" * 80)
    print(f"\nRoot Directory: {root_dir}")
    print(f"Length: {config.hash_length} ({config.encoding.value})")

    report = AbbrlinkProcessor(inventory, config, ConsoleNotifier()).process_files()
    for record in report.records:
        print(f"  {record['path']}: {record.get('abbrlink')} ({record['status']})")

    proceed = input(f"\nWrite {report.planned} abbrlink(s)? (yes/no): ")
    if proceed.lower() not in ["yes", "y"]:
        print("Cancelled.")
        return

    config = config.with_overrides(dry_run=False)
    report = AbbrlinkProcessor(inventory, config, ConsoleNotifier()).process_files()
    print(f"\nWritten: {report.written}, unchanged: {report.unchanged}")


if __name__ == "__main__":
    main()
