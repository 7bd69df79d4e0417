#!/usr/bin/env python3
"""
Mirror Filename Cleaner

Renames files in the image mirror folder that were saved under older naming
rules:
- Removes leading and trailing underscores
- Collapses repeated underscores
- Forces the canonical image extension

The scraper runs the same cleanup after every pass; this script lets you
preview it (default) or apply it (`--apply`) by hand.
"""

import argparse
from pathlib import Path

from downloader_lib.store import MirrorStore
from utils.config import load_config
from utils.logs import setup_logging


def main(argv=None):
    """Main function to run the filename cleaner."""
    parser = argparse.ArgumentParser(description='Preview or apply canonical renames in the image mirror folder')
    parser.add_argument('--folder', '-f', help='Mirror folder to clean (default: paths.output_dir from config)')
    parser.add_argument('--config', '-c', help='Path to mirror_config.json')
    parser.add_argument('--apply', action='store_true', help='Rename files instead of only listing the changes')
    args = parser.parse_args(argv)

    config = load_config(args.config)
    target_dir = Path(args.folder).expanduser().resolve() if args.folder else config.output_dir

    print("=" * 70)
    print("Mirror Filename Cleaner")
    print("=" * 70)
    print(f"\nScanning directory: {target_dir}\n")

    if not target_dir.is_dir():
        print(f"Directory does not exist: {target_dir}")
        return 1

    store = MirrorStore(target_dir, config.canonical_ext)
    changes = store.preview_cleanup()

    if not changes:
        print("No files need cleaning. All filenames are already clean!")
        return 0

    print(f"Found {len(changes)} file(s) to clean:\n")
    for old_name, new_name in changes:
        print(f"  '{old_name}'")
        print(f"    → '{new_name}'")

    if not args.apply:
        print("\nDry run. Re-run with --apply to rename.")
        return 0

    setup_logging(None)
    renamed = store.cleanup()

    skipped = len(changes) - len(renamed)
    print(f"\n{'=' * 70}")
    print(f"Complete! Successfully renamed {len(renamed)} file(s).")
    if skipped > 0:
        print(f"⚠️  {skipped} file(s) could not be renamed (see log above).")
    print(f"{'=' * 70}")
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
