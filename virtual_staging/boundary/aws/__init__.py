"""AWS boundary: S3 object store for room images."""

from virtual_staging.boundary.aws.s3_client import S3ImageStore

__all__ = ["S3ImageStore"]
