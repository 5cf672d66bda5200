"""
Render pipeline.

Redraws the canvas (base image, committed annotations, live rectangle)
whenever one of the owners of drawable state reports a change.
"""

import logging
from typing import Callable, Optional

import numpy as np
from easydict import EasyDict as edict

from .drawing import DrawingStateMachine
from .errors import ImageLoadError
from .events import DIRTY_EVENTS, AnnotationEvent, EventEmitter, EventType
from .store import AnnotationStore
from .utils import (
    draw_annotations_on_image,
    draw_rectangle_in_place,
    load_image_from_source,
    validate_image,
)

logger = logging.getLogger(__name__)

DEFAULT_RENDER_CFG = edict(
    annotation_color=[255, 0, 0],
    drawing_color=[0, 0, 255],
    line_width=2,
    font_scale=0.5,
    label_thickness=1,
    label_offset=5,
)


class RenderPipeline:
    """
    Produces RGB frames for one annotation session.

    Image loads are identified by a token. Only the completion of the most
    recent load is applied; completions of earlier loads are dropped, so a
    slow image can never paint over the one that replaced it.
    """

    def __init__(
        self,
        store: AnnotationStore,
        drawing: DrawingStateMachine,
        events: Optional[EventEmitter] = None,
        cfg: Optional[edict] = None,
        image_loader: Optional[Callable[[str], np.ndarray]] = None,
        on_frame: Optional[Callable[[np.ndarray], None]] = None,
        auto_flush: bool = True,
    ):
        """
        Args:
            store: Committed annotations to draw
            drawing: Drawing state machine providing the live rectangle
            events: Emitter delivering dirty notifications
            cfg: Render configuration (colors, line width, font)
            image_loader: Turns an image source into an RGB array
            on_frame: Called with every rendered frame
            auto_flush: Redraw on every change instead of waiting for flush()
        """
        self.store = store
        self.drawing = drawing
        self.events = events if events is not None else store.events
        self.cfg = edict(DEFAULT_RENDER_CFG)
        if cfg is not None:
            self.cfg.update(cfg)
        self.image_loader = image_loader or load_image_from_source
        self.on_frame = on_frame
        self.auto_flush = auto_flush

        self.source: Optional[str] = None
        self.image: Optional[np.ndarray] = None
        self.error: Optional[ImageLoadError] = None
        self.frame: Optional[np.ndarray] = None
        self.dirty = False
        self._load_token = 0

        self.events.on_many(DIRTY_EVENTS, self._on_dirty)

    @property
    def canvas_size(self):
        """(width, height) of the canvas, matching the image's natural size."""
        if self.image is None:
            return None
        h, w = self.image.shape[:2]
        return (w, h)

    def begin_image_load(self, source: str) -> int:
        """
        Start loading a new image.

        Returns:
            Token to pass to complete_image_load
        """
        self._load_token += 1
        self.source = source
        self.image = None
        self.error = None
        self.frame = None
        self.dirty = False

        logger.debug("Loading image %s (token %d)", source, self._load_token)
        self.events.emit(
            AnnotationEvent(
                EventType.IMAGE_LOAD_STARTED,
                {"source": source, "token": self._load_token},
            )
        )
        return self._load_token

    def complete_image_load(
        self,
        token: int,
        image: Optional[np.ndarray] = None,
        error: Optional[Exception] = None,
    ) -> bool:
        """
        Apply the result of a load started with begin_image_load.

        Returns:
            True if the image was applied, False if the load failed or was
            superseded by a newer one
        """
        if token != self._load_token:
            logger.debug(
                "Dropping stale image load (token %d, current %d)",
                token,
                self._load_token,
            )
            return False

        if error is None:
            try:
                validate_image(image)
            except ValueError as e:
                error = e

        if error is not None:
            if not isinstance(error, ImageLoadError):
                error = ImageLoadError(str(error), source=self.source)
            self.error = error
            logger.error("Failed to load image %s: %s", self.source, error)
            self.events.emit(
                AnnotationEvent(
                    EventType.IMAGE_LOAD_FAILED,
                    {"source": self.source, "error": str(error)},
                )
            )
            return False

        self.image = image
        h, w = image.shape[:2]
        self.events.emit(
            AnnotationEvent(
                EventType.IMAGE_LOADED,
                {"source": self.source, "width": w, "height": h},
            )
        )
        return True

    def load_image(self, source: str, token: Optional[int] = None) -> bool:
        """
        Load an image synchronously with the configured loader.

        Pass the token of an already started load to finish that one.
        """
        if token is None:
            token = self.begin_image_load(source)
        try:
            image = self.image_loader(source)
        except ImageLoadError as e:
            return self.complete_image_load(token, error=e)
        return self.complete_image_load(token, image=image)

    def mark_dirty(self):
        self.dirty = True
        if self.auto_flush:
            self.flush()

    def flush(self) -> Optional[np.ndarray]:
        """Redraw if anything changed since the last frame."""
        if not self.dirty:
            return None
        frame = self.render()
        if frame is None:
            return None

        self.dirty = False
        self.frame = frame
        self.events.emit(
            AnnotationEvent(EventType.FRAME_RENDERED, {"shape": frame.shape})
        )
        if self.on_frame is not None:
            self.on_frame(frame)
        return frame

    def render(self) -> Optional[np.ndarray]:
        """
        Draw a frame: image, committed annotations, then the live rectangle.

        Returns:
            RGB frame, or None while no image is available
        """
        if self.image is None:
            return None

        cfg = self.cfg
        canvas = draw_annotations_on_image(
            self.image,
            self.store,
            color=cfg.annotation_color,
            line_width=cfg.line_width,
            font_scale=cfg.font_scale,
            label_thickness=cfg.label_thickness,
            label_offset=cfg.label_offset,
        )

        current = self.drawing.current
        if current is not None:
            draw_rectangle_in_place(canvas, current, cfg.drawing_color, cfg.line_width)

        return canvas

    def close(self):
        for event_type in DIRTY_EVENTS:
            self.events.off(event_type, self._on_dirty)

    def _on_dirty(self, event: AnnotationEvent):
        self.mark_dirty()
