"""
Pure utility functions for annotation logic.

Image decoding and the individual drawing primitives used by the render
pipeline. Apart from the `*_in_place` helpers these functions have no side
effects and can be tested in isolation.
"""

from collections import Counter
from pathlib import Path
from typing import Iterable, Optional, Tuple

import cv2
import numpy as np
import requests

from ..geometry import Rectangle, normalize
from .errors import ImageLoadError

Color = Tuple[int, int, int]

DEFAULT_FONT = cv2.FONT_HERSHEY_SIMPLEX


def validate_image(image: np.ndarray) -> None:
    """
    Validate that image has correct format.

    Raises:
        ValueError: If image is invalid
    """
    if image is None:
        raise ValueError("Image is None")

    if not isinstance(image, np.ndarray):
        raise ValueError(f"Image must be numpy array, got {type(image)}")

    if image.ndim != 3:
        raise ValueError(f"Image must be 3D (H, W, C), got shape {image.shape}")

    if image.shape[2] != 3:
        raise ValueError(f"Image must have 3 channels, got {image.shape[2]}")

    if image.dtype != np.uint8:
        raise ValueError(f"Invalid image dtype: {image.dtype}")


def decode_image(data: bytes, source: Optional[str] = None) -> np.ndarray:
    """
    Decode an encoded raster image (JPEG, PNG, ...) into an RGB array.

    Raises:
        ImageLoadError: If the bytes cannot be decoded
    """
    buffer = np.frombuffer(data, np.uint8)
    image = cv2.imdecode(buffer, cv2.IMREAD_COLOR) if buffer.size else None
    if image is None:
        raise ImageLoadError(f"Could not decode image from {source}", source=source)
    return cv2.cvtColor(image, cv2.COLOR_BGR2RGB)


def load_image_from_source(source: str, timeout: float = 30.0) -> np.ndarray:
    """
    Fetch and decode an image from a file path or an http(s) URL.

    Returns:
        RGB image at its natural resolution

    Raises:
        ImageLoadError: If the image cannot be fetched or decoded
    """
    source = str(source)
    if source.startswith(("http://", "https://")):
        try:
            response = requests.get(source, timeout=timeout)
            response.raise_for_status()
        except requests.RequestException as e:
            raise ImageLoadError(
                f"Could not fetch image from {source}: {e}", source=source
            ) from e
        data = response.content
    else:
        path = Path(source[len("file://"):] if source.startswith("file://") else source)
        try:
            data = path.read_bytes()
        except OSError as e:
            raise ImageLoadError(
                f"Could not read image {path}: {e}", source=source
            ) from e
    return decode_image(data, source)


def to_pixel_corners(rect: Rectangle) -> Tuple[Tuple[int, int], Tuple[int, int]]:
    """
    Integer corner points for cv2 drawing calls.

    The rectangle is drawn as given: an unnormalized rectangle yields
    corners in drag order, which cv2.rectangle accepts as well.
    """
    x0, y0 = int(round(rect.x)), int(round(rect.y))
    x1 = int(round(rect.x + rect.width))
    y1 = int(round(rect.y + rect.height))
    return (x0, y0), (x1, y1)


def draw_rectangle_in_place(
    canvas: np.ndarray, rect: Rectangle, color: Color, thickness: int = 2
) -> np.ndarray:
    """Stroke the outline of `rect` directly onto `canvas`."""
    pt1, pt2 = to_pixel_corners(rect)
    cv2.rectangle(canvas, pt1, pt2, tuple(int(c) for c in color), thickness)
    return canvas


def draw_label_in_place(
    canvas: np.ndarray,
    text: str,
    rect: Rectangle,
    color: Color,
    font_scale: float = 0.5,
    thickness: int = 1,
    offset: int = 5,
) -> np.ndarray:
    """
    Draw `text` anchored just above the top-left corner of `rect`.

    The baseline sits `offset` pixels above the corner. Near the top edge
    the text would leave the canvas, so it is pushed down to stay visible.
    """
    rect = normalize(rect)
    (_, text_height), _ = cv2.getTextSize(text, DEFAULT_FONT, font_scale, thickness)
    x = int(round(rect.x))
    y = int(round(rect.y)) - offset
    if y - text_height < 0:
        y = text_height
    cv2.putText(
        canvas,
        text,
        (x, y),
        DEFAULT_FONT,
        font_scale,
        tuple(int(c) for c in color),
        thickness,
        cv2.LINE_AA,
    )
    return canvas


def draw_annotations_on_image(
    image: np.ndarray,
    annotations: Iterable,
    color: Color = (255, 0, 0),
    line_width: int = 2,
    font_scale: float = 0.5,
    label_thickness: int = 1,
    label_offset: int = 5,
) -> np.ndarray:
    """
    Draw committed annotations over a copy of the image.

    Args:
        image: RGB image
        annotations: Annotation objects, drawn in iteration order
        color: Outline and label color (RGB)
        line_width: Outline thickness in pixels

    Returns:
        Image with annotations drawn
    """
    result = image.copy()
    for ann in annotations:
        draw_rectangle_in_place(result, ann.rectangle, color, line_width)
        draw_label_in_place(
            result,
            ann.annotation,
            ann.rectangle,
            color,
            font_scale=font_scale,
            thickness=label_thickness,
            offset=label_offset,
        )
    return result


def compute_annotation_statistics(annotations: Iterable) -> dict:
    """
    Compute statistics about annotations.

    Returns:
        Dictionary with counts per label and area figures
    """
    annotations = list(annotations)
    if not annotations:
        return {
            "num_total": 0,
            "labels": {},
            "total_area": 0.0,
            "mean_area": 0.0,
        }

    areas = [a.rectangle.area for a in annotations]
    labels = Counter(a.annotation for a in annotations)

    return {
        "num_total": len(annotations),
        "labels": dict(labels),
        "total_area": float(sum(areas)),
        "mean_area": float(sum(areas) / len(areas)),
    }
