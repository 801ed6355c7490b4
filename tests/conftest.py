"""
Pytest configuration and shared fixtures for FlexImage tests.

This module provides shared test fixtures and configuration
used across multiple test modules.
"""

import io
from datetime import datetime

import pytest
from PIL import Image

from FI_Libs.ModelLib.image_attachment import ImageAttachment, acts_as_fleximage
from FI_Libs.OperatorsLib.operator_registry import OperatorRegistry, register_default_operators


def make_image_bytes(size=(10, 10), color=(255, 0, 0), mode="RGB", fmt="PNG"):
    """Encode a solid-color image and return the bytes."""
    buffer = io.BytesIO()
    Image.new(mode, size, color).save(buffer, format=fmt)
    return buffer.getvalue()


class Photo:
    """Minimal host record used by the attachment tests."""

    def __init__(self, config, id=None, created_at=None, registry=None):
        self.id = id
        self.created_at = created_at
        self.image = ImageAttachment(self, config, registry=registry)


@pytest.fixture
def storage_root(tmp_path):
    """
    Provide a temporary directory for master images.

    Returns:
        Path object pointing to a temporary directory
    """
    root = tmp_path / "uploaded_images"
    return root


@pytest.fixture
def red_png_bytes():
    """A 10x10 solid red PNG."""
    return make_image_bytes()


@pytest.fixture
def registry():
    """A fresh registry holding the built-in operators."""
    fresh = OperatorRegistry()
    register_default_operators(fresh)
    return fresh


@pytest.fixture
def photo_config(storage_root):
    return acts_as_fleximage(image_directory=str(storage_root))


@pytest.fixture
def saved_photo(photo_config, registry, red_png_bytes):
    """A photo whose red master image has been written to disk."""
    photo = Photo(photo_config, registry=registry)
    photo.image.image_file = red_png_bytes
    photo.id = 42
    photo.created_at = datetime(2024, 3, 7, 12, 30)
    photo.image.after_save()
    return photo
