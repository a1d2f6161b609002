# Copyright 2025 Accelerated Cloud Storage Corporation. All Rights Reserved.
"""
Command-line entry point.

Usage:
    export AWS_ACCESS_KEY_ID=... AWS_SECRET_ACCESS_KEY=...

    # Stage a bucket location
    python -m csi_s3 stage my-bucket /var/lib/csi-s3/staging/vol1 \\
        --endpoint https://s3.example.com --region us-east-1 --prefix vol1

    # Publish it to a consumer path
    python -m csi_s3 mount /var/lib/csi-s3/staging/vol1 /mnt/vol1

    # Tear down
    python -m csi_s3 unmount /mnt/vol1
    python -m csi_s3 unstage /var/lib/csi-s3/staging/vol1
"""

import argparse
import os
import sys
import time

from .config import BackendConfig, Settings, VolumeLocation
from .exceptions import MounterError
from .mounter import new_mounter
from .utils import logger, time_function

def build_parser():
    parser = argparse.ArgumentParser(prog="csi_s3", description="Mount S3 bucket locations as local directories")
    sub = parser.add_subparsers(dest="command", required=True)

    stage = sub.add_parser("stage", help="Mount a bucket location at a staging path")
    stage.add_argument("bucket", help="Bucket name")
    stage.add_argument("path", help="Staging path")
    stage.add_argument("--endpoint", required=True, help="S3 endpoint URL")
    stage.add_argument("--region", default="", help="S3 region")
    stage.add_argument("--prefix", default="", help="Prefix inside the bucket")
    stage.add_argument("--fs-path", default="", help="Path below the prefix")
    stage.add_argument("--options", default="", help="Extra s3fs options, may use ${cacheDir}")
    stage.add_argument("--volume-id", default=None, help="Volume id, scopes the credential file")

    unstage = sub.add_parser("unstage", help="Unmount a staging path and remove it")
    unstage.add_argument("path", help="Staging path")
    unstage.add_argument("--volume-id", default=None, help="Volume id used at stage time")

    mount = sub.add_parser("mount", help="Bind mount a staged path at a target")
    mount.add_argument("source", help="Staging path")
    mount.add_argument("target", help="Consumer path")

    unmount = sub.add_parser("unmount", help="Release a consumer path")
    unmount.add_argument("target", help="Consumer path")
    return parser

def run(args, settings=None):
    """Execute one parsed command."""
    cfg = BackendConfig(
        endpoint=getattr(args, "endpoint", ""),
        region=getattr(args, "region", ""),
        access_key_id=os.environ.get("AWS_ACCESS_KEY_ID", ""),
        secret_access_key=os.environ.get("AWS_SECRET_ACCESS_KEY", ""),
    )
    meta = VolumeLocation(
        bucket_name=getattr(args, "bucket", ""),
        prefix=getattr(args, "prefix", ""),
        fs_path=getattr(args, "fs_path", ""),
        extra_options=getattr(args, "options", ""),
    )
    mounter = new_mounter(meta, cfg, settings, volume_id=getattr(args, "volume_id", None))

    if args.command == "stage":
        mounter.stage(args.path)
    elif args.command == "unstage":
        mounter.unstage(args.path)
    elif args.command == "mount":
        mounter.mount(args.source, args.target)
    elif args.command == "unmount":
        mounter.unmount(args.target)

def main(argv=None):
    """
    CLI entry point.

    Returns:
        int: Process exit code
    """
    logger.info(f"Starting CSI S3 CLI with arguments: {sys.argv if argv is None else argv}")
    start_time = time.time()
    args = build_parser().parse_args(argv)
    try:
        settings = Settings.from_env()
        run(args, settings)
    except MounterError as e:
        logger.error(f"{args.command} failed: {e}")
        print(f"Error: {e}", file=sys.stderr)
        return 1
    time_function(args.command, start_time)
    return 0

if __name__ == '__main__':
    sys.exit(main())
