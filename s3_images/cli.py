"""
Command line entry point for s3-images.

The environment (and .env file) is read here, once, and handed to the
library as a StorageConfig.
"""

import argparse
import asyncio
import dataclasses
import logging
import sys
from pathlib import Path
from typing import List, Optional

import uvloop

# Required: Use uvloop for better performance
asyncio.set_event_loop_policy(uvloop.EventLoopPolicy())

from s3_images.algorithms.background import change_background
from s3_images.algorithms.uploader import image_url, upload_image_in_base64
from s3_images.common.codec import decode_base64, encode_file_to_base64
from s3_images.common.storage_factory import create_connection
from s3_images.configuration import StorageConfig, object_url_from_env
from s3_images.errors import ConfigurationError, S3ImagesError

logger = logging.getLogger(__name__)

EXIT_OK = 0
EXIT_FAILURE = 1
EXIT_CONFIGURATION = 2


class S3ImagesCLI:
    """CLI interface for uploading base64 images."""

    def __init__(self):
        self.parser = self._create_parser()

    def _create_parser(self):
        """Create the main argument parser."""
        parser = argparse.ArgumentParser(
            prog='s3-images',
            description='Upload base64-encoded images to an S3-compatible bucket',
            formatter_class=argparse.RawDescriptionHelpFormatter,
            epilog="""
Examples:
  # Upload a local image under a random name
  s3-images upload --file logo.png

  # Upload a base64 payload read from stdin under a fixed key
  base64 logo.png | s3-images upload --name brand/logo.png

  # Put a logo on a yellow banner, upload it and print its public URL
  s3-images upload --file logo.png --background "#ff0" --url

  # Check that the configured bucket is reachable
  s3-images verify
            """
        )
        parser.add_argument('-v', '--verbose', action='store_true', help='Enable debug logging')

        subparsers = parser.add_subparsers(dest='command', help='Available commands')

        # Upload command
        upload_parser = subparsers.add_parser('upload', help='Upload a base64 image')
        source = upload_parser.add_mutually_exclusive_group()
        source.add_argument('--file', type=str, help='Local image file to encode and upload')
        source.add_argument('--base64', type=str, help='Base64 payload (default: read from stdin)')
        upload_parser.add_argument('--name', type=str, default=None,
                                   help='Object key (default: random name with inferred extension)')
        upload_parser.add_argument('--background', type=str, default=None, metavar='COLOR',
                                   help='Centre the image on a banner of this colour before uploading')
        upload_parser.add_argument('--url', action='store_true', help='Also print the public URL')
        self._add_storage_arguments(upload_parser)

        # Background command
        background_parser = subparsers.add_parser('background', help='Put a logo on a coloured banner')
        background_parser.add_argument('--file', type=str, required=True, help='Logo image file')
        background_parser.add_argument('--color', type=str, required=True, help='Background colour, e.g. "#fff"')
        background_parser.add_argument('--output', type=str, required=True, help='Output JPEG path')

        # Verify command
        verify_parser = subparsers.add_parser('verify', help='Check bucket access')
        self._add_storage_arguments(verify_parser)

        # URL command
        url_parser = subparsers.add_parser('url', help='Print the public URL of a key')
        url_parser.add_argument('key', type=str, help='Object key')
        self._add_storage_arguments(url_parser)

        return parser

    @staticmethod
    def _add_storage_arguments(parser):
        parser.add_argument('--bucket', type=str, default=None,
                            help='Bucket name (default: $S3_BUCKET_NAME or "images")')
        parser.add_argument('--endpoint-url', type=str, default=None,
                            help='S3-compatible endpoint (default: $S3_ENDPOINT or AWS)')
        parser.add_argument('--public-read', action='store_true', default=None,
                            help='Grant public read access on uploaded objects')

    @staticmethod
    def load_config(args) -> StorageConfig:
        """Environment settings with command line overrides applied."""
        config = StorageConfig.from_env()
        overrides = {}
        if args.bucket:
            overrides['bucket_name'] = args.bucket
        if args.endpoint_url:
            overrides['endpoint_url'] = args.endpoint_url
        if args.public_read:
            overrides['public_read'] = True
        return dataclasses.replace(config, **overrides) if overrides else config

    @staticmethod
    def read_payload(args) -> str:
        if args.file:
            return encode_file_to_base64(args.file)
        if args.base64 is not None:
            return args.base64
        return sys.stdin.read().strip()

    async def upload(self, args) -> int:
        payload = self.read_payload(args)
        if not payload.strip():
            logger.error("No payload given. Pass --file, --base64 or pipe base64 on stdin.")
            return EXIT_CONFIGURATION

        config = self.load_config(args)
        if args.background:
            payload = await asyncio.to_thread(change_background, payload, args.background)

        client = await create_connection(config)
        try:
            key = await upload_image_in_base64(client, payload, args.name)
        finally:
            await client.close()

        print(key)
        if args.url:
            print(image_url(config, key))
        return EXIT_OK

    async def verify(self, args) -> int:
        config = self.load_config(args)
        async with await create_connection(config) as client:
            ok = await client.verify_connection()
        if not ok:
            logger.error(f"✗ Connection verification failed for bucket {config.bucket_name}")
            return EXIT_FAILURE
        return EXIT_OK

    def background(self, args) -> int:
        payload = encode_file_to_base64(args.file)
        banner = change_background(payload, args.color)
        Path(args.output).write_bytes(decode_base64(banner).data)
        logger.info(f"Banner written to {args.output}")
        return EXIT_OK

    def url(self, args) -> int:
        print(object_url_from_env(args.key, bucket_name=args.bucket, endpoint_url=args.endpoint_url))
        return EXIT_OK

    async def dispatch(self, args) -> int:
        if args.command == 'upload':
            return await self.upload(args)
        if args.command == 'verify':
            return await self.verify(args)
        if args.command == 'background':
            return self.background(args)
        return self.url(args)

    def run(self, argv: Optional[List[str]] = None) -> int:
        """Parse arguments and run the command, returning the exit status."""
        args = self.parser.parse_args(argv)
        if not args.command:
            self.parser.print_help()
            return EXIT_CONFIGURATION

        if args.verbose:
            logging.getLogger('s3_images').setLevel(logging.DEBUG)

        try:
            return asyncio.run(self.dispatch(args))
        except ConfigurationError as e:
            logger.error(str(e))
            return EXIT_CONFIGURATION
        except (S3ImagesError, OSError) as e:
            logger.error(f"{args.command} failed: {e}")
            return EXIT_FAILURE


def main(argv: Optional[List[str]] = None):
    """Main entry point."""
    # Set up logging (only if not already configured)
    if not logging.root.handlers:
        logging.basicConfig(level=logging.INFO, format='%(asctime)s - %(levelname)s - %(message)s')
    sys.exit(S3ImagesCLI().run(argv))


if __name__ == '__main__':
    main()
