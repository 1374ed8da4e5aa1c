"""Uploaded image handling: request files in, sanitized JPEG bytes out."""
import io
from collections import namedtuple

from PIL import Image as PILImage, ImageOps, UnidentifiedImageError

from catalog_admin.errors import ValidationError

ALLOWED_CONTENT_TYPES = {"image/jpeg", "image/png", "image/webp", "image/gif"}
MAX_FILE_SIZE = 6 * 1024 * 1024
JPEG_QUALITY = 90


class UploadedImage(namedtuple("UploadedImage", ["data", "content_type", "filename"])):
    """An uploaded file read into memory, detached from the request."""

    __slots__ = ()

    @classmethod
    def from_storage(cls, storage):
        """Wrap a werkzeug FileStorage; None when no file was sent."""
        if storage is None or not storage.filename:
            return None
        return cls(data=storage.read(), content_type=storage.mimetype, filename=storage.filename)


def _decode(image_bytes):
    """Fully decode the upload; anything Pillow cannot read is a ValidationError."""
    try:
        PILImage.open(io.BytesIO(image_bytes)).verify()
        # verify() leaves the image unusable; decode again for real
        img = ImageOps.exif_transpose(PILImage.open(io.BytesIO(image_bytes)))
        if img.mode not in ("RGB", "L"):
            img = img.convert("RGB")
        img.load()
    except (UnidentifiedImageError, PILImage.DecompressionBombError, OSError, SyntaxError):
        raise ValidationError("Invalid image file")
    return img


def validate_image(image_bytes, content_type=None, max_size=MAX_FILE_SIZE):
    """Check an upload and re-encode it as JPEG.

    Re-encoding drops EXIF and any trailing payload. Orientation from EXIF is
    applied to the pixels first so rotated phone photos stay upright.
    """
    if content_type and content_type not in ALLOWED_CONTENT_TYPES:
        raise ValidationError("Invalid file type. Only images allowed.")
    if not image_bytes:
        raise ValidationError("Empty image file")
    if len(image_bytes) > max_size:
        raise ValidationError(f"Image too large: {len(image_bytes)} bytes (max {max_size})")

    img = _decode(image_bytes)
    out = io.BytesIO()
    img.save(out, format="JPEG", quality=JPEG_QUALITY)
    return out.getvalue()
