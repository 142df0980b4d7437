"""
Data models for burstcull.

Contains dataclasses for image records, detected faces, groups, grouping
options, project statistics and decoded rasters.
"""

from __future__ import annotations

import os
import uuid
from dataclasses import dataclass, field
from datetime import datetime
from typing import Callable, Optional

import numpy as np

from .config import (
    DEFAULT_MAX_GROUP_SIZE,
    DEFAULT_SIMILARITY_THRESHOLD,
    DEFAULT_SSIM_THRESHOLD,
)


EYE_STATES = ('open', 'closed', 'unknown')

# callback(processed, total, status)
ProgressCallback = Callable[[int, int, str], None]


def new_id() -> str:
    """Return a fresh opaque identifier."""
    return uuid.uuid4().hex


def _parse_datetime(value) -> datetime:
    if isinstance(value, datetime):
        return value
    if value:
        return datetime.fromisoformat(value)
    return datetime.now()


@dataclass
class BoundingBox:
    """Face bounding box in percent of the frame (0-100 on each axis)."""
    x: float = 0.0
    y: float = 0.0
    width: float = 0.0
    height: float = 0.0

    @property
    def area_fraction(self) -> float:
        """Fraction of the frame covered by the box."""
        return (self.width * self.height) / 10000

    def to_dict(self) -> dict:
        return {'x': self.x, 'y': self.y, 'width': self.width, 'height': self.height}

    @classmethod
    def from_dict(cls, data: dict) -> 'BoundingBox':
        return cls(
            x=float(data.get('x', 0.0)),
            y=float(data.get('y', 0.0)),
            width=float(data.get('width', 0.0)),
            height=float(data.get('height', 0.0)),
        )


@dataclass
class EyeState:
    """Open/closed state of both eyes as reported by the eye detector."""
    left: str = 'unknown'
    right: str = 'unknown'
    confidence: float = 0.0

    def __post_init__(self):
        if self.left not in EYE_STATES or self.right not in EYE_STATES:
            raise ValueError(f"Eye state must be one of {EYE_STATES}")

    @property
    def both_open(self) -> bool:
        return self.left == 'open' and self.right == 'open'

    def to_dict(self) -> dict:
        return {'left': self.left, 'right': self.right, 'confidence': self.confidence}

    @classmethod
    def from_dict(cls, data: dict) -> 'EyeState':
        return cls(
            left=data.get('left', 'unknown'),
            right=data.get('right', 'unknown'),
            confidence=float(data.get('confidence', 0.0)),
        )


@dataclass
class FaceDetection:
    """
    A face found by the external face detector.

    Attributes:
        bbox: Bounding box in percentage coordinates
        confidence: Detector confidence
        eye_state: Eye open/closed state, if the eye model ran
    """
    bbox: BoundingBox = field(default_factory=BoundingBox)
    confidence: float = 0.0
    eye_state: Optional[EyeState] = None

    def to_dict(self) -> dict:
        return {
            'bbox': self.bbox.to_dict(),
            'confidence': self.confidence,
            'eye_state': self.eye_state.to_dict() if self.eye_state else None,
        }

    @classmethod
    def from_dict(cls, data: dict) -> 'FaceDetection':
        eye_state = data.get('eye_state') or data.get('eyeState')
        return cls(
            bbox=BoundingBox.from_dict(data.get('bbox', {})),
            confidence=float(data.get('confidence', 0.0)),
            eye_state=EyeState.from_dict(eye_state) if eye_state else None,
        )


@dataclass
class ImageRecord:
    """
    An imported image as stored in the library.

    Attributes:
        id: Opaque unique identifier
        file_name: Base name of the file
        file_path: Full path to the original file
        preview_ref: Displayable reference handed to the raster decoder
        phash: 16-character hex perceptual hash, None until hashed
        focus_score: Sharpness score from the focus detector
        exposure_score: Exposure score from the exposure analyser
        faces: Detected faces, None when detection has not run
        rating: User rating 0-5
        flag: 'pick', 'reject' or None
        group_id: Group this image belongs to, None when ungrouped
        is_auto_pick: True only for the representative of its group
    """
    id: str = field(default_factory=new_id)
    file_name: str = ""
    file_path: str = ""
    preview_ref: Optional[str] = None
    phash: Optional[str] = None
    focus_score: Optional[float] = None
    exposure_score: Optional[float] = None
    faces: Optional[list] = None
    rating: int = 0
    flag: Optional[str] = None
    group_id: Optional[str] = None
    is_auto_pick: bool = False
    created_at: datetime = field(default_factory=datetime.now)
    modified_at: datetime = field(default_factory=datetime.now)

    def __post_init__(self):
        if not self.file_name and self.file_path:
            self.file_name = os.path.basename(self.file_path)

    @property
    def is_grouped(self) -> bool:
        return self.group_id is not None

    def to_dict(self) -> dict:
        """Convert to dictionary for JSON serialization."""
        return {
            'id': self.id,
            'file_name': self.file_name,
            'file_path': self.file_path,
            'preview_ref': self.preview_ref,
            'phash': self.phash,
            'focus_score': self.focus_score,
            'exposure_score': self.exposure_score,
            'faces': [f.to_dict() for f in self.faces] if self.faces is not None else None,
            'rating': self.rating,
            'flag': self.flag,
            'group_id': self.group_id,
            'is_auto_pick': self.is_auto_pick,
            'created_at': self.created_at.isoformat(),
            'modified_at': self.modified_at.isoformat(),
        }

    @classmethod
    def from_dict(cls, data: dict) -> 'ImageRecord':
        """Create ImageRecord from dictionary."""
        faces = data.get('faces')
        return cls(
            id=data.get('id') or new_id(),
            file_name=data.get('file_name', ''),
            file_path=data.get('file_path', ''),
            preview_ref=data.get('preview_ref'),
            phash=data.get('phash'),
            focus_score=data.get('focus_score'),
            exposure_score=data.get('exposure_score'),
            faces=[FaceDetection.from_dict(f) for f in faces] if faces is not None else None,
            rating=int(data.get('rating', 0)),
            flag=data.get('flag'),
            group_id=data.get('group_id'),
            is_auto_pick=bool(data.get('is_auto_pick', False)),
            created_at=_parse_datetime(data.get('created_at')),
            modified_at=_parse_datetime(data.get('modified_at')),
        )


@dataclass
class Group:
    """
    A persisted cluster of near-duplicate images.

    Attributes:
        id: Unique identifier for this group
        member_ids: Ordered member image ids (always two or more)
        auto_pick_id: Id of the representative member
    """
    id: str = field(default_factory=new_id)
    member_ids: list = field(default_factory=list)
    auto_pick_id: Optional[str] = None
    created_at: datetime = field(default_factory=datetime.now)
    modified_at: datetime = field(default_factory=datetime.now)

    @property
    def size(self) -> int:
        """Number of images in this group."""
        return len(self.member_ids)

    def to_dict(self) -> dict:
        return {
            'id': self.id,
            'member_ids': list(self.member_ids),
            'auto_pick_id': self.auto_pick_id,
            'size': self.size,
            'created_at': self.created_at.isoformat(),
            'modified_at': self.modified_at.isoformat(),
        }

    @classmethod
    def from_dict(cls, data: dict) -> 'Group':
        return cls(
            id=data['id'],
            member_ids=list(data.get('member_ids', [])),
            auto_pick_id=data.get('auto_pick_id'),
            created_at=_parse_datetime(data.get('created_at')),
            modified_at=_parse_datetime(data.get('modified_at')),
        )


@dataclass
class GroupingOptions:
    """Caller-supplied settings for one grouping run."""
    similarity_threshold: int = DEFAULT_SIMILARITY_THRESHOLD
    ssim_threshold: float = DEFAULT_SSIM_THRESHOLD
    use_ssim_refinement: bool = True
    max_group_size: Optional[int] = DEFAULT_MAX_GROUP_SIZE
    on_progress: Optional[ProgressCallback] = None

    def report(self, processed: int, total: int, status: str) -> None:
        if self.on_progress is not None:
            self.on_progress(processed, total, status)


@dataclass
class ProjectStats:
    """Aggregate counters for the library."""
    total_images: int = 0
    rated_images: int = 0
    picks: int = 0
    rejects: int = 0
    groups: int = 0
    updated_at: Optional[datetime] = None

    def to_dict(self) -> dict:
        return {
            'total_images': self.total_images,
            'rated_images': self.rated_images,
            'picks': self.picks,
            'rejects': self.rejects,
            'groups': self.groups,
            'updated_at': self.updated_at.isoformat() if self.updated_at else None,
        }


@dataclass
class RasterImage:
    """
    Decoded pixel data.

    Attributes:
        width: Width in pixels
        height: Height in pixels
        pixels: RGBA uint8 array of shape (height, width, 4)
    """
    width: int
    height: int
    pixels: np.ndarray

    def __post_init__(self):
        if self.pixels.shape != (self.height, self.width, 4):
            raise ValueError(
                f"Pixel array shape {self.pixels.shape} does not match "
                f"{self.width}x{self.height} RGBA"
            )

    @classmethod
    def from_rgba_bytes(cls, width: int, height: int, data: bytes) -> 'RasterImage':
        """Build a raster from packed RGBA bytes (4 bytes per pixel, row-major)."""
        if len(data) != width * height * 4:
            raise ValueError(
                f"Expected {width * height * 4} bytes for {width}x{height} RGBA, got {len(data)}"
            )
        pixels = np.frombuffer(data, dtype=np.uint8).reshape(height, width, 4).copy()
        return cls(width=width, height=height, pixels=pixels)

    @classmethod
    def from_pil(cls, img) -> 'RasterImage':
        """Build a raster from a Pillow image of any mode."""
        if img.mode != 'RGBA':
            img = img.convert('RGBA')
        pixels = np.asarray(img, dtype=np.uint8).copy()
        return cls(width=img.width, height=img.height, pixels=pixels)
