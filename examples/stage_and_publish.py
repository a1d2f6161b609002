# Copyright 2025 Accelerated Cloud Storage Corporation. All Rights Reserved
'''
This example stages a bucket location with s3fs, publishes it at a second
path with a bind mount, reads a file through both paths and tears it all
down again.

Setup:
    # Install s3fs-fuse
    # On Ubuntu/Debian:
    sudo apt-get install s3fs

    # Credentials are taken from the environment
    export AWS_ACCESS_KEY_ID=your_access_key_id
    export AWS_SECRET_ACCESS_KEY=your_secret_access_key

Usage:
    sudo -E python examples/stage_and_publish.py <endpoint> <bucket> <prefix>
'''
import os
import sys
import tempfile

from csi_s3 import BackendConfig, MounterError, Settings, VolumeLifecycle, VolumeLocation, new_mounter

def main():
    if len(sys.argv) != 4:
        print("Usage: python stage_and_publish.py <endpoint> <bucket> <prefix>")
        sys.exit(1)

    endpoint, bucket, prefix = sys.argv[1:]
    cfg = BackendConfig(
        endpoint=endpoint,
        access_key_id=os.environ["AWS_ACCESS_KEY_ID"],
        secret_access_key=os.environ["AWS_SECRET_ACCESS_KEY"],
    )
    meta = VolumeLocation(bucket_name=bucket, prefix=prefix, extra_options="-o use_cache=${cacheDir}")
    volume = VolumeLifecycle(new_mounter(meta, cfg, Settings.from_env(), volume_id=prefix))

    workdir = tempfile.mkdtemp(prefix="csi-s3-example-")
    staging = os.path.join(workdir, "staging")
    published = os.path.join(workdir, "published")
    os.makedirs(staging)
    os.makedirs(published)

    try:
        volume.stage(staging)
        volume.mount(staging, published)
        print(f"Staged at {staging}: {os.listdir(staging)}")
        print(f"Published at {published}: {os.listdir(published)}")
    except MounterError as e:
        print(f"Mount failed: {e}")
    finally:
        volume.unmount(published)
        volume.unstage(staging)
        os.rmdir(workdir)

if __name__ == '__main__':
    main()
