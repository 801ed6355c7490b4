"""
Image attachment for host records.

A host record (any object exposing ``id`` and optionally ``created_at`` or
``created_on``) holds an ImageAttachment and forwards its persistence
lifecycle to it:

    >>> PHOTO_IMAGES = acts_as_fleximage(image_directory="/var/www/uploaded_images")
    >>>
    >>> class Photo:
    ...     def __init__(self, id=None, created_at=None):
    ...         self.id = id
    ...         self.created_at = created_at
    ...         self.image = ImageAttachment(self, PHOTO_IMAGES)
    >>>
    >>> photo = Photo()
    >>> photo.image.image_file = request_file      # or "http://foo.com/bar.jpg"
    >>> photo.id = 123; photo.created_at = datetime.now()
    >>> photo.image.after_save()                   # writes the PNG master
    >>>
    >>> with photo.image.operate() as image:
    ...     image.resize("320x240")
    ...     image.grayscale()
    >>> jpeg_bytes = photo.image.output_image()

Classes:
    ImageAttachmentConfig: Per record type settings
    OperatorProxy: Object handed to operate() blocks
    ImageAttachment: The attachment itself

Functions:
    acts_as_fleximage: Build an ImageAttachmentConfig
"""

import logging
from contextlib import contextmanager
from dataclasses import dataclass, asdict
from pathlib import Path
from typing import Any, BinaryIO, Dict, Iterable, Iterator, Optional

from FI_Libs.constants import (
    DEFAULT_OUTPUT_FORMAT,
    DEFAULT_OUTPUT_QUALITY,
    DEFAULT_USE_DATE_SHARDING,
    FIELD_CREATED_AT,
    FIELD_CREATED_ON,
    FIELD_ID,
)
from FI_Libs.errors import UnknownOperatorError
from FI_Libs.ImageEditingLib.image_decoder import ImageDecoder
from FI_Libs.ImageEditingLib.output_renderer import OutputRenderConfig, OutputRenderer
from FI_Libs.OperatorsLib.operator_registry import OperatorRegistry
from FI_Libs.PipelineLib.pipeline_context import (
    NOT_HANDLED,
    OperatorInvocation,
    PipelineContext,
    PipelineSession,
)
from FI_Libs.StorageLib.master_image_store import MasterImageStore, PendingUpload
from FI_Libs.StorageLib.path_resolver import (
    MasterImagePath,
    RecordIdentity,
    StorageConfig,
    resolve_master_image_path,
)

logger = logging.getLogger(__name__)


@dataclass
class ImageAttachmentConfig:
    """Settings shared by every record of one type.

    Attributes:
        image_directory: Where master images are stored
        use_creation_date_based_directories: Shard masters by creation date
        base_directory: Optional directory a relative image_directory is joined to
        output_format: Delivery format for output_image()
        output_quality: JPEG quality for output_image()
    """
    image_directory: str
    use_creation_date_based_directories: bool = DEFAULT_USE_DATE_SHARDING
    base_directory: Optional[str] = None
    output_format: str = DEFAULT_OUTPUT_FORMAT
    output_quality: int = DEFAULT_OUTPUT_QUALITY

    @property
    def root_directory(self) -> str:
        directory = Path(self.image_directory)
        if self.base_directory and not directory.is_absolute():
            directory = Path(self.base_directory) / directory
        return str(directory)

    def storage_config(self) -> StorageConfig:
        return StorageConfig(
            root_directory=self.root_directory,
            use_date_sharding=self.use_creation_date_based_directories,
        )

    def render_config(self) -> OutputRenderConfig:
        return OutputRenderConfig(output_format=self.output_format, quality=self.output_quality)

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary."""
        return asdict(self)

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "ImageAttachmentConfig":
        """Create from dictionary."""
        return acts_as_fleximage(**{k: v for k, v in data.items() if k in cls.__dataclass_fields__})


def acts_as_fleximage(image_directory: Optional[str] = None, **options: Any) -> ImageAttachmentConfig:
    """
    Declare image handling for a record type.

    Args:
        image_directory: Directory where master images are stored (required)
        **options: Any other ImageAttachmentConfig field

    Raises:
        ValueError: If image_directory is missing
        TypeError: If an unknown option is given
    """
    if not image_directory:
        raise ValueError(
            "No place to put images! Declare this via the image_directory='path/to/directory' option"
        )
    return ImageAttachmentConfig(image_directory=str(image_directory), **options)


class OperatorProxy:
    """
    Stand-in for the image inside an operate() block.

    Any public attribute is treated as an operator call. Calls return the
    proxy, so they can be chained. Calls that no operator handles raise
    UnknownOperatorError.
    """

    def __init__(self, pipeline: PipelineContext, session: PipelineSession):
        self._pipeline = pipeline
        self._session = session

    def __getattr__(self, name: str) -> Any:
        if name.startswith("_"):
            raise AttributeError(name)

        def invoke_operator(*args: Any) -> "OperatorProxy":
            outcome = self._pipeline.invoke(self._session, name, *args)
            if outcome is NOT_HANDLED:
                available = "\n  ".join(self._pipeline.registry.describe_operators())
                raise UnknownOperatorError(f"No operator named '{name}'. Available operators:\n  {available}")
            return self

        invoke_operator.__name__ = name
        return invoke_operator


class ImageAttachment:
    """Master image storage, operators and rendering for one host record."""

    def __init__(
        self,
        record: Any,
        config: ImageAttachmentConfig,
        registry: Optional[OperatorRegistry] = None,
        store: Optional[MasterImageStore] = None,
        decoder: Optional[ImageDecoder] = None,
        renderer: Optional[OutputRenderer] = None,
    ):
        self.record = record
        self.config = config
        self.storage_config = config.storage_config()
        self.store = store or MasterImageStore()
        self.decoder = decoder or ImageDecoder()
        self.renderer = renderer or OutputRenderer(config.render_config())
        self.pipeline = PipelineContext(registry)
        self._pending: Optional[PendingUpload] = None
        self._output_image: Any = None

    # ------------------------------------------------------------------
    # Identity and paths
    # ------------------------------------------------------------------

    @property
    def identity(self) -> RecordIdentity:
        created = getattr(self.record, FIELD_CREATED_AT, None) or getattr(self.record, FIELD_CREATED_ON, None)
        return RecordIdentity(id=getattr(self.record, FIELD_ID, None), created_timestamp=created)

    @property
    def is_new_record(self) -> bool:
        return self.identity.id is None

    @property
    def master_image_path(self) -> MasterImagePath:
        return resolve_master_image_path(self.storage_config, self.identity)

    @property
    def directory_path(self) -> str:
        """Directory holding this record's master image."""
        return self.master_image_path.directory

    @property
    def file_path(self) -> str:
        """Path of this record's master image file."""
        return self.master_image_path.file

    # ------------------------------------------------------------------
    # Uploads and lifecycle hooks
    # ------------------------------------------------------------------

    @property
    def image_file(self) -> Optional[Path]:
        """Path of the stored master, or None for new records or no master."""
        if self.is_new_record:
            return None
        path = Path(self.file_path)
        return path if path.is_file() else None

    @image_file.setter
    def image_file(self, source: Any) -> None:
        self.assign(source)

    @property
    def has_pending_upload(self) -> bool:
        return self._pending is not None

    def assign(self, source: Any) -> PendingUpload:
        """Stage an upload (bytes, stream, path or http(s) URL) for the next save."""
        pending = self.store.assign(source)
        self.discard_pending_upload()
        self._pending = pending
        return pending

    def discard_pending_upload(self) -> None:
        if self._pending is not None:
            self._pending.release()
            self._pending = None

    def open_image_file(self) -> Optional[BinaryIO]:
        """Open the stored master for reading, or return None if there is none."""
        path = self.image_file
        if path is None:
            return None
        return open(path, "rb")

    def after_save(self) -> None:
        """
        Write the pending upload, if any. Call after the host record saved.

        The upload stays pending if the write fails, so a later call can
        retry it.

        Raises:
            ValueError: If there is a pending upload but the record has no id
            OSError: If the master image cannot be written
        """
        if self._pending is None:
            return
        if self.is_new_record:
            raise ValueError("Cannot store a master image for a record without an id")

        self.store.persist(self.master_image_path, self._pending)
        self._pending = None

    def after_destroy(self) -> None:
        """
        Delete the master image. Call after the host record was destroyed.

        Raises:
            NotFoundError: If the record had no master image file
        """
        self.discard_pending_upload()
        self.release_output_image()
        self.store.delete(self.master_image_path)

    # ------------------------------------------------------------------
    # Operators and output
    # ------------------------------------------------------------------

    def load_image(self) -> Any:
        """Decode the master image. The caller owns the returned image."""
        return self.decoder.load(self.master_image_path)

    @contextmanager
    def operate(self) -> Iterator[OperatorProxy]:
        """
        Apply operators to this record's image.

        The master is decoded on the first operator call. When the block
        completes, the result is kept for output_image(); if the block
        raises, the image is released and nothing is kept.

        Raises:
            PipelineStateError: If called while another operate() is running
        """
        session = self.pipeline.enter(loader=self.load_image)
        completed = False
        try:
            yield OperatorProxy(self.pipeline, session)
            completed = True
        finally:
            final_image = self.pipeline.exit(session)
            if completed:
                self._keep_output_image(final_image)
            elif final_image is not None:
                final_image.close()

    def apply(self, invocations: Iterable[OperatorInvocation]) -> "ImageAttachment":
        """Run a sequence of operator invocations in one operate() session."""
        with self.operate() as image:
            for invocation in invocations:
                getattr(image, invocation.name)(*invocation.arguments)
        return self

    def output_image(self) -> bytes:
        """
        Render the result of the last operate() block.

        The rendered image is released afterwards, so each operate() result
        can be rendered once.

        Raises:
            RenderError: If no operate() block produced an image
        """
        image, self._output_image = self._output_image, None
        try:
            return self.renderer.render(image)
        finally:
            if image is not None:
                image.close()

    def render(self, invocations: Iterable[OperatorInvocation]) -> bytes:
        """apply() followed by output_image()."""
        return self.apply(invocations).output_image()

    def release_output_image(self) -> None:
        self._keep_output_image(None)

    def _keep_output_image(self, image: Any) -> None:
        previous, self._output_image = self._output_image, image
        if previous is not None and previous is not image:
            previous.close()
