"""
Integration tests for ImageAttachment.

Covers the whole flow a host record goes through: assigning an upload,
saving, operating on the master image, rendering output, and destroying.
"""

import io
from datetime import date, datetime
from pathlib import Path

import numpy as np
import pytest
from PIL import Image

from conftest import Photo, make_image_bytes
from FI_Libs.errors import (
    DecodeError,
    InvalidUploadError,
    MasterImageNotFoundError,
    NotFoundError,
    OperatorError,
    PipelineStateError,
    RenderError,
    UnknownOperatorError,
)
from FI_Libs.ModelLib.image_attachment import ImageAttachmentConfig, acts_as_fleximage
from FI_Libs.PipelineLib.pipeline_context import OperatorInvocation


def decode(data):
    image = Image.open(io.BytesIO(data))
    image.load()
    return image


class TestActsAsFleximage:

    def test_requires_image_directory(self):
        """Test that a record type needs somewhere to put images."""
        with pytest.raises(ValueError, match="No place to put images"):
            acts_as_fleximage()

    def test_defaults(self):
        """Test the default settings."""
        config = acts_as_fleximage(image_directory="/data/img")

        assert config.use_creation_date_based_directories is True
        assert config.output_format == "JPEG"
        assert config.storage_config().root_directory == "/data/img"

    def test_relative_directory_joined_to_base(self):
        """Test that a relative image directory is joined to the base."""
        config = acts_as_fleximage(image_directory="uploaded_images", base_directory="/var/www/app")
        assert config.root_directory == str(Path("/var/www/app") / "uploaded_images")

    def test_unknown_option_rejected(self):
        """Test that unknown options raise TypeError."""
        with pytest.raises(TypeError):
            acts_as_fleximage(image_directory="/data/img", colour="red")

    def test_dict_round_trip(self):
        """Test config serialization to and from a dict."""
        config = acts_as_fleximage(image_directory="/data/img", use_creation_date_based_directories=False)
        assert ImageAttachmentConfig.from_dict(config.to_dict()) == config


class TestPaths:

    def test_sharded_file_path(self):
        """Test the date-sharded master path."""
        config = acts_as_fleximage(image_directory="/data/img")
        photo = Photo(config, id=42, created_at=date(2024, 3, 7))

        assert photo.image.file_path == "/data/img/2024/3/7/42.png"
        assert photo.image.directory_path == "/data/img/2024/3/7"

    def test_created_on_fallback(self):
        """Test that created_on is used when created_at is missing."""
        config = acts_as_fleximage(image_directory="/data/img")
        photo = Photo(config, id=1)
        photo.created_on = date(2010, 10, 1)

        assert photo.image.file_path == "/data/img/2010/10/1/1.png"

    def test_sharding_disabled(self):
        """Test the flat layout when sharding is off."""
        config = acts_as_fleximage(image_directory="/data/img", use_creation_date_based_directories=False)
        photo = Photo(config, id=42, created_at=date(2024, 3, 7))

        assert photo.image.file_path == "/data/img/42.png"

    def test_path_follows_record_changes(self):
        """Test that the path is recomputed from the current record."""
        config = acts_as_fleximage(image_directory="/data/img")
        photo = Photo(config)
        assert photo.image.is_new_record

        photo.id = 5
        assert photo.image.file_path == "/data/img/5.png"


class TestUploadLifecycle:

    def test_save_writes_png_master(self, saved_photo, storage_root):
        """Test that saving writes the PNG master at the resolved path."""
        master = storage_root / "2024" / "3" / "7" / "42.png"

        assert master.is_file()
        assert saved_photo.image.image_file == master
        assert not saved_photo.image.has_pending_upload
        with Image.open(master) as written:
            assert written.format == "PNG"

    def test_jpeg_upload_stored_as_png(self, photo_config, registry):
        """Test that a JPEG upload is stored as PNG."""
        photo = Photo(photo_config, id=3, registry=registry)
        photo.image.image_file = make_image_bytes(fmt="JPEG")
        photo.image.after_save()

        with Image.open(photo.image.file_path) as written:
            assert written.format == "PNG"

    def test_new_record_has_no_image_file(self, photo_config, red_png_bytes):
        """Test that an unsaved record has no stored master."""
        photo = Photo(photo_config)
        photo.image.image_file = red_png_bytes

        assert photo.image.image_file is None
        assert photo.image.open_image_file() is None

    def test_open_image_file(self, saved_photo):
        """Test reading the stored master through an open handle."""
        handle = saved_photo.image.open_image_file()
        try:
            assert handle.read(8) == b"\x89PNG\r\n\x1a\n"
        finally:
            handle.close()

    def test_save_without_upload_keeps_master(self, saved_photo):
        """Test that saving with nothing pending leaves the master alone."""
        before = Path(saved_photo.image.file_path).read_bytes()

        saved_photo.image.after_save()

        assert Path(saved_photo.image.file_path).read_bytes() == before

    def test_new_upload_replaces_master(self, saved_photo):
        """Test that a new upload overwrites the master on save."""
        saved_photo.image.image_file = make_image_bytes(size=(3, 3), color=(0, 0, 255))
        saved_photo.image.after_save()

        with Image.open(saved_photo.image.file_path) as written:
            assert written.size == (3, 3)

    def test_save_without_id_raises(self, photo_config, red_png_bytes):
        """Test that a pending upload cannot be saved without an id."""
        photo = Photo(photo_config)
        photo.image.image_file = red_png_bytes

        with pytest.raises(ValueError):
            photo.image.after_save()

    def test_failed_save_keeps_upload_for_retry(self, photo_config, registry, red_png_bytes, storage_root):
        """Test that a failed write keeps the upload and a later save stores it."""
        storage_root.parent.mkdir(parents=True, exist_ok=True)
        storage_root.write_bytes(b"a file where the directory should be")
        photo = Photo(photo_config, id=12, created_at=datetime(2024, 3, 7), registry=registry)
        photo.image.image_file = red_png_bytes

        with pytest.raises(OSError):
            photo.image.after_save()

        assert photo.image.has_pending_upload

        storage_root.unlink()
        photo.image.after_save()

        assert not photo.image.has_pending_upload
        assert photo.image.image_file == storage_root / "2024" / "3" / "7" / "12.png"
        with Image.open(photo.image.file_path) as written:
            assert written.getpixel((0, 0)) == (255, 0, 0)

    def test_invalid_upload(self, photo_config):
        """Test that a rejected upload leaves nothing pending."""
        photo = Photo(photo_config)

        with pytest.raises(InvalidUploadError):
            photo.image.image_file = b""
        assert not photo.image.has_pending_upload

    def test_discard_pending_upload(self, photo_config, red_png_bytes):
        """Test that a discarded upload is released and never written."""
        photo = Photo(photo_config, id=8)
        pending = photo.image.assign(red_png_bytes)

        photo.image.discard_pending_upload()
        photo.image.after_save()

        assert pending.image is None
        assert not Path(photo.image.file_path).exists()

    def test_destroy_deletes_master(self, saved_photo):
        """Test that destroying the record removes the master."""
        saved_photo.image.after_destroy()

        assert not Path(saved_photo.image.file_path).exists()
        with pytest.raises(MasterImageNotFoundError):
            saved_photo.image.load_image()

    def test_destroy_without_master_raises(self, photo_config):
        """Test that destroying without a master raises NotFoundError."""
        photo = Photo(photo_config, id=77)

        with pytest.raises(NotFoundError):
            photo.image.after_destroy()

    def test_round_trip_is_lossless(self, photo_config, registry):
        """Test that the decoded master matches the uploaded pixels."""
        pixels = np.arange(4 * 5 * 3, dtype=np.uint8).reshape(5, 4, 3)
        buffer = io.BytesIO()
        Image.fromarray(pixels).save(buffer, format="PNG")

        photo = Photo(photo_config, id=11, registry=registry)
        photo.image.image_file = io.BytesIO(buffer.getvalue())
        photo.image.after_save()
        loaded = photo.image.load_image()

        assert np.array_equal(np.asarray(loaded), pixels)
        loaded.close()


class TestOperate:

    def test_grayscale_scenario(self, saved_photo):
        """10x10 red master, grayscale, render: every output pixel has R=G=B."""
        with saved_photo.image.operate() as image:
            image.grayscale()
        data = saved_photo.image.output_image()

        output = decode(data)
        assert output.format == "JPEG"
        assert output.size == (10, 10)
        pixels = np.asarray(output.convert("RGB")).astype(int)
        assert (pixels[..., 0] == pixels[..., 1]).all()
        assert (pixels[..., 1] == pixels[..., 2]).all()

    def test_chained_operators(self, saved_photo):
        """Test chaining operator calls on the proxy."""
        with saved_photo.image.operate() as image:
            image.resize("20x20").border(2, "white")

        assert decode(saved_photo.image.output_image()).size == (24, 24)

    def test_unknown_operator_raises_attribute_error(self, saved_photo):
        """Test that an unknown operator behaves like a missing attribute."""
        with pytest.raises(AttributeError):
            with saved_photo.image.operate() as image:
                image.sepia()

        assert not saved_photo.image.pipeline.is_active

    def test_unknown_operator_lists_available_operators(self, saved_photo):
        """Test that the error lists operators with their descriptions."""
        with pytest.raises(UnknownOperatorError) as exc_info:
            with saved_photo.image.operate() as image:
                image.sepia()

        message = str(exc_info.value)
        assert "sepia" in message
        assert "grayscale: Convert the image to grayscale" in message

    def test_private_attributes_not_dispatched(self, saved_photo):
        """Test that underscore names are not treated as operators."""
        with saved_photo.image.operate() as image:
            assert not hasattr(image, "__deepcopy__")

    def test_operator_error_ends_session(self, saved_photo):
        """Test that an operator error ends the session with no output."""
        with pytest.raises(OperatorError):
            with saved_photo.image.operate() as image:
                image.resize("not a size")

        assert not saved_photo.image.pipeline.is_active
        with pytest.raises(RenderError):
            saved_photo.image.output_image()

    def test_non_finite_argument_ends_session(self, saved_photo):
        """Test that an infinite box blur size is an operator error."""
        with pytest.raises(OperatorError):
            with saved_photo.image.operate() as image:
                image.blur(float("inf"), "box")

        assert not saved_photo.image.pipeline.is_active

    def test_error_in_block_ends_session(self, saved_photo):
        """Test that caller errors inside the block still end the session."""
        with pytest.raises(KeyError):
            with saved_photo.image.operate() as image:
                image.grayscale()
                raise KeyError("caller bug")

        assert not saved_photo.image.pipeline.is_active

    def test_nested_operate_is_an_error(self, saved_photo):
        """Test that operate cannot be nested."""
        with saved_photo.image.operate():
            with pytest.raises(PipelineStateError):
                with saved_photo.image.operate():
                    pass

        assert not saved_photo.image.pipeline.is_active

    def test_missing_master(self, photo_config, registry, storage_root):
        """Test that a missing master names the expected path."""
        photo = Photo(photo_config, id=99, registry=registry)

        with pytest.raises(MasterImageNotFoundError) as exc_info:
            with photo.image.operate() as image:
                image.grayscale()

        assert exc_info.value.path == str(storage_root / "99.png")
        assert not photo.image.pipeline.is_active

    def test_corrupt_master_is_fatal(self, saved_photo):
        """Test that a corrupt master raises DecodeError, not not-found."""
        Path(saved_photo.image.file_path).write_bytes(b"corrupt")

        with pytest.raises(DecodeError) as exc_info:
            with saved_photo.image.operate() as image:
                image.grayscale()

        assert not isinstance(exc_info.value, MasterImageNotFoundError)
        assert not saved_photo.image.pipeline.is_active

    def test_operate_without_operators_renders_nothing(self, saved_photo):
        """Test that an empty block leaves nothing to render."""
        with saved_photo.image.operate():
            pass

        with pytest.raises(RenderError):
            saved_photo.image.output_image()

    def test_output_rendered_once(self, saved_photo):
        """Test that the operate result is released after rendering."""
        with saved_photo.image.operate() as image:
            image.rotate(90)
        saved_photo.image.output_image()

        with pytest.raises(RenderError):
            saved_photo.image.output_image()

    def test_apply_and_render(self, saved_photo):
        """Test running a list of invocations and rendering the result."""
        data = saved_photo.image.render([
            OperatorInvocation("crop", ("4x4", (2, 2))),
            OperatorInvocation("grayscale"),
        ])

        assert decode(data).size == (4, 4)

    def test_apply_unknown_invocation(self, saved_photo):
        """Test that apply reports unknown operators."""
        with pytest.raises(UnknownOperatorError):
            saved_photo.image.apply([OperatorInvocation("sepia")])


def test_render_quality_configurable(storage_root, registry, red_png_bytes):
    """Test that the delivery format comes from the record type config."""
    config = acts_as_fleximage(image_directory=str(storage_root), output_format="PNG")
    photo = Photo(config, id=1, created_at=datetime(2024, 1, 1), registry=registry)
    photo.image.image_file = red_png_bytes
    photo.image.after_save()

    with photo.image.operate() as image:
        image.blur(1)

    assert decode(photo.image.output_image()).format == "PNG"
