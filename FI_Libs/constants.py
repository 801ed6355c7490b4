"""
Constants and configuration values for FlexImage.

This module centralizes all constant values and default settings
used throughout the library.
"""

# Master image storage
MASTER_IMAGE_FORMAT = "PNG"
MASTER_IMAGE_EXTENSION = ".png"
DEFAULT_USE_DATE_SHARDING = True

# Pillow modes that can be written to PNG without conversion
PNG_WRITABLE_MODES = {"1", "L", "LA", "I", "I;16", "P", "RGB", "RGBA"}

# Delivery output
DEFAULT_OUTPUT_FORMAT = "JPEG"
DEFAULT_OUTPUT_QUALITY = 85
JPEG_WRITABLE_MODES = {"L", "RGB"}

# Remote uploads
URL_SCHEMES = ("http://", "https://")
HTTP_FETCH_TIMEOUT = 30

# Host record field names
FIELD_ID = "id"
FIELD_CREATED_AT = "created_at"
FIELD_CREATED_ON = "created_on"

# Operator naming
OPERATOR_NAME_PATTERN = r"^[a-z][a-z0-9_]*$"
