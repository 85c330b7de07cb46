"""Profile image validation.

Avatars uploaded from the settings page are stored inline as base64 data URLs.
"""

import math
import re

PROFILE_IMAGE_DATA_URL_REGEX = re.compile(
    r"^data:image/(png|jpe?g|webp|gif);base64,[a-z0-9+/=]+$", re.IGNORECASE
)

MAX_PROFILE_IMAGE_STORAGE_BYTES = 400_000
MAX_PROFILE_IMAGE_DATA_URL_LENGTH = (
    math.ceil(MAX_PROFILE_IMAGE_STORAGE_BYTES * 4 / 3) + 256
)

INVALID_FORMAT_MESSAGE = "Invalid image format. Use PNG, JPG, WEBP, or GIF."
TOO_LARGE_MESSAGE = "Profile image is too large. Please use an image under 400KB."


def _estimate_base64_size(data: str) -> int:
    trimmed = data.strip()
    if trimmed.endswith("=="):
        padding = 2
    elif trimmed.endswith("="):
        padding = 1
    else:
        padding = 0
    return max(0, (len(trimmed) * 3) // 4 - padding)


def validate_profile_image_data_url(data_url: str) -> str | None:
    """Validate an avatar data URL.

    Args:
        data_url: ``data:image/<type>;base64,<payload>``

    Returns:
        None if the image is acceptable, otherwise a user-facing error message
    """
    if not PROFILE_IMAGE_DATA_URL_REGEX.match(data_url):
        return INVALID_FORMAT_MESSAGE

    if len(data_url) > MAX_PROFILE_IMAGE_DATA_URL_LENGTH:
        return TOO_LARGE_MESSAGE

    payload = data_url.split(",", 1)[1]
    if _estimate_base64_size(payload) > MAX_PROFILE_IMAGE_STORAGE_BYTES:
        return TOO_LARGE_MESSAGE

    return None
