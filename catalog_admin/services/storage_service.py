"""File store for uploaded catalog images.

Two backends, selected by STORAGE_BACKEND:

- ``local``: files under UPLOAD_FOLDER, reference ``/uploads/<folder>/<name>``
- ``s3``: objects in S3_BUCKET_NAME, reference is the object key

Files are not covered by database transactions. Writers stage uploads
through ``staged_uploads()`` so that a rolled-back request removes the files
it wrote, and replaced files are only removed once the request succeeded.
"""
import logging
import os
import secrets
import time
from contextlib import contextmanager

import boto3
from botocore.config import Config as BotoConfig
from botocore.exceptions import BotoCoreError, ClientError
from flask import current_app

from catalog_admin.services import image_service

logger = logging.getLogger(__name__)

LOCAL_PREFIX = "/uploads/"


def _get_client():
    return boto3.client(
        "s3",
        endpoint_url=current_app.config["S3_ENDPOINT_URL"] or None,
        aws_access_key_id=current_app.config["S3_ACCESS_KEY"],
        aws_secret_access_key=current_app.config["S3_SECRET_KEY"],
        region_name=current_app.config["S3_REGION"],
        config=BotoConfig(signature_version="s3v4"),
    )


def _backend():
    return current_app.config.get("STORAGE_BACKEND", "local")


def _new_name(ext=".jpg"):
    return f"{int(time.time() * 1000)}-{secrets.token_hex(6)}{ext}"


def _local_path(reference):
    """Absolute path for a local reference, or None if it escapes the root."""
    root = os.path.realpath(current_app.config["UPLOAD_FOLDER"])
    relative = reference
    idx = relative.find(LOCAL_PREFIX)
    if idx != -1:
        relative = relative[idx + len(LOCAL_PREFIX):]
    path = os.path.realpath(os.path.join(root, relative.lstrip("/")))
    if not path.startswith(root + os.sep):
        return None
    return path


def store(data, content_type="image/jpeg", folder="uploads"):
    """Store bytes and return a reference usable with delete() and url_for()."""
    name = _new_name()
    if _backend() == "s3":
        key = f"{folder}/{name}"
        _get_client().put_object(
            Bucket=current_app.config["S3_BUCKET_NAME"],
            Key=key,
            Body=data,
            ContentType=content_type,
            ACL="public-read",
        )
        return key

    directory = os.path.join(current_app.config["UPLOAD_FOLDER"], folder)
    os.makedirs(directory, exist_ok=True)
    with open(os.path.join(directory, name), "wb") as fh:
        fh.write(data)
    return f"{LOCAL_PREFIX}{folder}/{name}"


def store_image(upload, folder):
    """Validate an UploadedImage with Pillow and store the sanitized JPEG."""
    data = image_service.validate_image(
        upload.data,
        content_type=upload.content_type,
        max_size=current_app.config.get("MAX_IMAGE_SIZE", image_service.MAX_FILE_SIZE),
    )
    return store(data, content_type="image/jpeg", folder=folder)


def delete(reference):
    """Delete a stored file. Missing files are ignored."""
    if not reference:
        return
    if _backend() == "s3":
        _get_client().delete_object(
            Bucket=current_app.config["S3_BUCKET_NAME"], Key=reference
        )
        return
    path = _local_path(reference)
    if path and os.path.exists(path):
        os.remove(path)


def delete_many(references):
    """Delete multiple files."""
    references = [r for r in references if r]
    if not references:
        return
    if _backend() == "s3":
        _get_client().delete_objects(
            Bucket=current_app.config["S3_BUCKET_NAME"],
            Delete={"Objects": [{"Key": r} for r in references]},
        )
        return
    for reference in references:
        delete(reference)


def discard(references):
    """Best-effort delete: failures are logged, never raised."""
    try:
        delete_many(list(references))
    except (OSError, BotoCoreError, ClientError):
        logger.warning("Failed to delete stored files %s", references, exc_info=True)


def url_for(reference):
    """Public URL for a reference; local references are already served paths."""
    if not reference:
        return None
    base = current_app.config["S3_PUBLIC_URL"].rstrip("/")
    if _backend() == "s3" and base:
        return f"{base}/{reference}"
    return reference


def urls_for(references):
    return [url_for(r) for r in references or []]


def reference_for(url):
    """Inverse of url_for, so clients may echo back the URLs they were given."""
    base = current_app.config["S3_PUBLIC_URL"].rstrip("/")
    if _backend() == "s3" and base and isinstance(url, str) and url.startswith(base + "/"):
        return url[len(base) + 1:]
    return url


class UploadBatch:
    """Files written (and files made obsolete) during one request."""

    def __init__(self):
        self.staged = []
        self.obsolete = []

    def add(self, upload, folder):
        reference = store_image(upload, folder)
        self.staged.append(reference)
        return reference

    def add_many(self, uploads, folder):
        return [self.add(u, folder) for u in uploads]

    def replace(self, old_reference, upload, folder):
        """Store `upload` and schedule `old_reference` for removal."""
        reference = self.add(upload, folder)
        self.remove_later(old_reference)
        return reference

    def remove_later(self, *references):
        self.obsolete.extend(r for r in references if r)


@contextmanager
def staged_uploads():
    batch = UploadBatch()
    try:
        yield batch
    except BaseException:
        if batch.staged:
            logger.info("Request failed, removing %d staged file(s)", len(batch.staged))
            discard(batch.staged)
        raise
    if batch.obsolete:
        discard(batch.obsolete)
