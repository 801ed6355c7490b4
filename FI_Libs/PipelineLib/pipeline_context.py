"""
Pipeline sessions for FlexImage.

A pipeline session is the interval during which one image is exclusively
owned and transformed by a sequence of named operator invocations. A
PipelineContext allows at most one active session at a time:

    Idle --enter()--> Active --exit()--> Idle

The session's image is decoded lazily: the loader passed to enter() runs
on the first operator invocation and its result is reused until the
session ends. Each operator result replaces the session's image and the
previous image is released immediately.

Names that no operator is registered under are reported back as
NOT_HANDLED instead of raising, so an outer dispatch layer can decide what
the call means.

Classes:
    OperatorInvocation: A named operator call with positional arguments
    PipelineSession: State of one active session
    PipelineContext: Enters, drives and exits sessions
"""

import logging
from contextlib import contextmanager
from dataclasses import dataclass
from typing import Any, Callable, Iterator, Optional, Tuple

from FI_Libs.errors import OperatorError, PipelineStateError
from FI_Libs.OperatorsLib.operator_registry import (
    UNRESOLVED,
    OperatorRegistry,
    get_default_registry,
)

logger = logging.getLogger(__name__)

ImageLoader = Callable[[], Any]

STATE_ACTIVE = "active"
STATE_CLOSED = "closed"


class _NotHandled:
    """Sentinel returned by invoke() when no operator matches a name."""

    __slots__ = ()

    def __repr__(self) -> str:
        return "NOT_HANDLED"

    def __bool__(self) -> bool:
        return False


NOT_HANDLED = _NotHandled()


@dataclass(frozen=True)
class OperatorInvocation:
    name: str
    arguments: Tuple[Any, ...] = ()


class PipelineSession:
    """One active pipeline session.

    Sessions are created by PipelineContext.enter() and should not be
    built directly.
    """

    def __init__(self, image: Any = None, loader: Optional[ImageLoader] = None):
        self._image = image
        self._loader = loader
        self.state = STATE_ACTIVE
        self.invocation_count = 0

    @property
    def is_active(self) -> bool:
        return self.state == STATE_ACTIVE

    @property
    def is_loaded(self) -> bool:
        return self._image is not None

    @property
    def image(self) -> Any:
        """The current image, decoded on first access."""
        if self._image is None and self._loader is not None:
            self._image = self._loader()
        return self._image

    def replace_image(self, new_image: Any) -> None:
        old_image = self._image
        self._image = new_image
        if old_image is not None and old_image is not new_image:
            old_image.close()

    def detach_image(self) -> Any:
        """Hand the current image over to the caller."""
        image = self._image
        self._image = None
        self._loader = None
        return image


class PipelineContext:
    """Drives pipeline sessions for a single owner (e.g. one record)."""

    def __init__(self, registry: Optional[OperatorRegistry] = None):
        self.registry = registry if registry is not None else get_default_registry()
        self._session: Optional[PipelineSession] = None

    @property
    def is_active(self) -> bool:
        return self._session is not None

    def enter(self, image: Any = None, loader: Optional[ImageLoader] = None) -> PipelineSession:
        """
        Start a session.

        Args:
            image: An image the session takes ownership of
            loader: Callable returning the image, called on first use

        Returns:
            The new active session

        Raises:
            PipelineStateError: If a session is already active
            ValueError: If both or neither of image and loader are given
        """
        if self._session is not None:
            raise PipelineStateError("A pipeline session is already active; exit it before entering another")

        if (image is None) == (loader is None):
            raise ValueError("enter() requires exactly one of image or loader")

        self._session = PipelineSession(image=image, loader=loader)
        return self._session

    def invoke(self, session: PipelineSession, name: str, *args: Any) -> Any:
        """
        Apply the operator registered under ``name`` to the session image.

        Returns:
            The session, or NOT_HANDLED if no operator is registered
            under ``name``

        Raises:
            PipelineStateError: If the session is not the active session
            ValueError: If ``name`` is malformed
            OperatorError: If the operator rejects its arguments or fails.
                The session is ended and its image released.
            FlexImageError: If the lazy decode fails. The session is ended.
        """
        self._require_active(session)

        operator = self.registry.resolve(name)
        if operator is UNRESOLVED:
            return NOT_HANDLED

        try:
            result = operator.execute(session.image, *args)
        except (ValueError, TypeError) as e:
            self._abort(session)
            raise OperatorError(f"{name}: {str(e)}", operator=name) from e
        except BaseException:
            self._abort(session)
            raise

        if result is None:
            self._abort(session)
            raise OperatorError(f"{name}: operator returned no image", operator=name)

        session.replace_image(result)
        session.invocation_count += 1
        logger.debug(f"Applied operator {name} ({session.invocation_count} in session)")
        return session

    def exit(self, session: PipelineSession) -> Any:
        """
        End a session and hand its final image to the caller.

        Returns:
            The final image, or None if the session never decoded an image
            or already ended because of an error
        """
        if session.state == STATE_CLOSED:
            return None

        image = session.detach_image()
        self._close(session)
        return image

    @contextmanager
    def session(self, image: Any = None, loader: Optional[ImageLoader] = None) -> Iterator[PipelineSession]:
        """
        Context-manager form of enter()/exit().

        The session always ends when the block exits. If the block raises,
        the session image is released; otherwise the caller must take the
        final image with exit() inside the block or it is released too.
        """
        active = self.enter(image=image, loader=loader)
        try:
            yield active
        finally:
            leftover = self.exit(active)
            if leftover is not None:
                leftover.close()

    def _require_active(self, session: PipelineSession) -> None:
        if session.state != STATE_ACTIVE or session is not self._session:
            raise PipelineStateError("Pipeline session is not active")

    def _abort(self, session: PipelineSession) -> None:
        image = session.detach_image()
        if image is not None:
            image.close()
        self._close(session)

    def _close(self, session: PipelineSession) -> None:
        session.state = STATE_CLOSED
        if self._session is session:
            self._session = None
