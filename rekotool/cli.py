"""
Command Line Interface
Parses options and runs the collect or search batch.
"""

import argparse
import os
import sys
from pathlib import Path
from typing import List, Optional

from .batch import CollectRunner, SearchRunner
from .rekognition_service import RekognitionService, validate_region
from .settings import load_config, resolve_credentials, show_progress


def _add_batch_options(parser: argparse.ArgumentParser) -> None:
    parser.add_argument(
        '--directory',
        type=Path,
        default=Path(os.getcwd()),
        help='Directory containing the images (default: current directory)'
    )
    parser.add_argument(
        '--pattern',
        default='*.jpg',
        help='Wildcard pattern for image file names, case-insensitive (default: *.jpg)'
    )
    parser.add_argument(
        '--collectionID', '--collection-id',
        dest='collection_id',
        required=True,
        help='Rekognition collection ID'
    )


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog='rekotool',
        description='Amazon Rekognition testing tool: enroll or search the faces of a folder of images',
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  # Enroll every *.jpg of a folder into a collection
  rekotool --access-key AKIA... --secret-key ... --region eu-west-1 collect --directory photos --collectionID staff

  # Search the collection for every image, including sub-folders
  rekotool --access-key AKIA... --secret-key ... --region eu-west-1 search --directory probes --recurse --collectionID staff > results.csv
        """
    )

    parser.add_argument('--access-key', help='Amazon Rekognition access key')
    parser.add_argument('--secret-key', help='Amazon Rekognition secret key')
    parser.add_argument('--region', help='System name of an AWS region, e.g. eu-west-1')
    parser.add_argument(
        '--config',
        default=None,
        help='Path to configuration file (default: config/config.yaml if present)'
    )
    parser.add_argument(
        '--no-progress',
        action='store_true',
        help='Do not show the progress bar'
    )

    subparsers = parser.add_subparsers(dest='command', metavar='{collect,search}')
    subparsers.required = True

    collect = subparsers.add_parser('collect', help='Enroll one face per image into a collection')
    _add_batch_options(collect)

    search = subparsers.add_parser('search', help='Search a collection for the face of each image')
    _add_batch_options(search)
    search.add_argument(
        '--recurse',
        action='store_true',
        help='Also search images in sub-directories'
    )

    return parser


def main(argv: Optional[List[str]] = None) -> int:
    """Main execution function."""
    parser = build_parser()
    args = parser.parse_args(argv)

    # Configuration errors stop here, before any CSV output.
    try:
        config = load_config(args.config)
        credentials = resolve_credentials(config, args.access_key, args.secret_key, args.region)
        validate_region(credentials['region'])
    except ValueError as e:
        parser.error(str(e))

    if not args.directory.is_dir():
        parser.error(f"Directory not found: {args.directory}")

    progress = False if args.no_progress else show_progress(config)

    try:
        service = RekognitionService(
            credentials['access_key'],
            credentials['secret_key'],
            credentials['region'],
            config=config.get('rekognition') or {},
        )

        if args.command == 'collect':
            runner = CollectRunner(service, args.collection_id, show_progress=progress)
            runner.run(args.directory, args.pattern)
        else:
            runner = SearchRunner(service, args.collection_id, show_progress=progress)
            runner.run(args.directory, args.pattern, recurse=args.recurse)
    except KeyboardInterrupt:
        print("\n✗ Interrupted", file=sys.stderr)
        return 130
    except Exception as e:
        print(f"✗ Batch failed: {e}", file=sys.stderr)
        return 1

    return 0
