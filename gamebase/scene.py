"""Hierarchical scene of transforms with attached drawables, cameras and lights."""

from __future__ import annotations

import dataclasses
import enum
import math
import warnings
from dataclasses import dataclass, field
from typing import BinaryIO, Callable, Dict, List, Optional, Sequence

import numpy as np

from gamebase.chunk import read_chunk

GL_TRIANGLES = 0x0004
GL_TEXTURE_2D = 0x0DE1
NO_LOCATION = 0xFFFFFFFF
TEXTURE_COUNT = 4

_PI = 3.1415926
_NO_PARENT = 0xFFFFFFFF

_HIERARCHY_FORMAT = "3I3f4f3f"
_MESH_FORMAT = "3I"
_CAMERA_FORMAT = "I4s3f"
_LIGHT_FORMAT = "Ic3B3f"


class SceneError(ValueError):
    """Raised when a scene file or scene structure is inconsistent."""


# ----- quaternion helpers (w, x, y, z order) -----

def angle_axis(angle: float, axis) -> tuple:
    """Quaternion rotating by ``angle`` radians about ``axis`` (not normalized)."""
    ax, ay, az = (float(c) for c in axis)
    s = math.sin(0.5 * angle)
    return (math.cos(0.5 * angle), ax * s, ay * s, az * s)


def quat_multiply(a, b) -> tuple:
    """Hamilton product ``a * b``: rotating by ``b`` first, then ``a``."""
    aw, ax, ay, az = (float(c) for c in a)
    bw, bx, by, bz = (float(c) for c in b)
    return (
        aw * bw - ax * bx - ay * by - az * bz,
        aw * bx + ax * bw + ay * bz - az * by,
        aw * by - ax * bz + ay * bw + az * bx,
        aw * bz + ax * by - ay * bx + az * bw,
    )


def quat_to_mat3(q) -> np.ndarray:
    """3x3 rotation matrix of quaternion ``q``; its columns are the rotated axes."""
    w, x, y, z = (float(c) for c in q)
    return np.array([
        [1.0 - 2.0 * (y * y + z * z), 2.0 * (x * y - w * z), 2.0 * (x * z + w * y)],
        [2.0 * (x * y + w * z), 1.0 - 2.0 * (x * x + z * z), 2.0 * (y * z - w * x)],
        [2.0 * (x * z - w * y), 2.0 * (y * z + w * x), 1.0 - 2.0 * (x * x + y * y)],
    ])


def quat_rotate(q, v) -> np.ndarray:
    """Rotate vector ``v`` by quaternion ``q``."""
    return quat_to_mat3(q) @ np.asarray(v, dtype=float)


def _quat_inverse(q) -> tuple:
    w, x, y, z = (float(c) for c in q)
    norm2 = w * w + x * x + y * y + z * z
    return (w / norm2, -x / norm2, -y / norm2, -z / norm2)


def _pad(m: np.ndarray) -> np.ndarray:
    """Extend a 3x4 affine matrix to 4x4 with a (0, 0, 0, 1) row."""
    return np.vstack([m, [0.0, 0.0, 0.0, 1.0]])


# ----- scene objects -----

@dataclass(eq=False)
class Transform:
    """A position, rotation and scale, optionally relative to a parent."""

    name: str = ""
    position: np.ndarray = field(default_factory=lambda: np.zeros(3))
    rotation: tuple = (1.0, 0.0, 0.0, 0.0)
    scale: np.ndarray = field(default_factory=lambda: np.ones(3))
    parent: Optional["Transform"] = None

    def __post_init__(self) -> None:
        self.position = np.array(self.position, dtype=float)
        self.scale = np.array(self.scale, dtype=float)
        self.rotation = tuple(float(c) for c in self.rotation)

    def make_local_to_parent(self) -> np.ndarray:
        """3x4 matrix: scale, then rotate, then translate."""
        scale = np.asarray(self.scale, dtype=float)
        rot = quat_to_mat3(self.rotation) * scale[None, :]
        return np.column_stack([rot, np.asarray(self.position, dtype=float)])

    def make_parent_to_local(self) -> np.ndarray:
        """3x4 inverse of ``make_local_to_parent``; zero scale gives a degenerate matrix."""
        scale = np.asarray(self.scale, dtype=float)
        inv_scale = np.array([0.0 if s == 0.0 else 1.0 / s for s in scale])
        inv_rot = inv_scale[:, None] * quat_to_mat3(_quat_inverse(self.rotation))
        translation = inv_rot @ -np.asarray(self.position, dtype=float)
        return np.column_stack([inv_rot, translation])

    def make_local_to_world(self) -> np.ndarray:
        """3x4 matrix from this transform's space to world space."""
        if self.parent is None:
            return self.make_local_to_parent()
        return self.parent.make_local_to_world() @ _pad(self.make_local_to_parent())

    def make_world_to_local(self) -> np.ndarray:
        """3x4 matrix from world space to this transform's space."""
        if self.parent is None:
            return self.make_parent_to_local()
        return self.make_parent_to_local() @ _pad(self.parent.make_world_to_local())


@dataclass
class TextureInfo:
    """A texture object and the target it binds to."""

    texture: int = 0
    target: int = GL_TEXTURE_2D


@dataclass
class Pipeline:
    """Everything needed to draw one object through the graphics pipeline."""

    program: int = 0
    vao: int = 0
    type: int = GL_TRIANGLES
    start: int = 0
    count: int = 0
    OBJECT_TO_CLIP_mat4: int = NO_LOCATION
    OBJECT_TO_LIGHT_mat4x3: int = NO_LOCATION
    NORMAL_TO_LIGHT_mat3: int = NO_LOCATION
    set_uniforms: Optional[Callable[[], None]] = None
    textures: List[TextureInfo] = field(
        default_factory=lambda: [TextureInfo() for _ in range(TEXTURE_COUNT)]
    )


def _require_transform(transform, kind: str) -> None:
    if transform is None:
        raise ValueError(f"{kind} requires a transform")


@dataclass(eq=False)
class Drawable:
    """Attaches drawing data to a transform."""

    transform: Transform
    pipeline: Pipeline = field(default_factory=Pipeline)

    def __post_init__(self) -> None:
        _require_transform(self.transform, "Drawable")


@dataclass(eq=False)
class Camera:
    """A perspective camera looking along its transform's -z axis."""

    transform: Transform
    fovy: float = math.radians(60.0)
    aspect: float = 1.0
    near: float = 0.01

    def __post_init__(self) -> None:
        _require_transform(self.transform, "Camera")

    def make_projection(self) -> np.ndarray:
        """4x4 infinite perspective projection matrix."""
        rng = math.tan(0.5 * self.fovy) * self.near
        left, right = -rng * self.aspect, rng * self.aspect
        bottom, top = -rng, rng
        proj = np.zeros((4, 4))
        proj[0, 0] = 2.0 * self.near / (right - left)
        proj[1, 1] = 2.0 * self.near / (top - bottom)
        proj[2, 2] = -1.0
        proj[3, 2] = -1.0
        proj[2, 3] = -2.0 * self.near
        return proj


class LightType(enum.Enum):
    """Kinds of light, keyed by the character used in scene files."""

    POINT = "p"
    HEMISPHERE = "h"
    SPOT = "s"
    DIRECTIONAL = "d"


@dataclass(eq=False)
class Light:
    """Light data attached to a transform; directed lights point along -z."""

    transform: Transform
    type: LightType = LightType.POINT
    energy: np.ndarray = field(default_factory=lambda: np.ones(3))
    spot_fov: float = math.radians(45.0)

    def __post_init__(self) -> None:
        _require_transform(self.transform, "Light")
        self.energy = np.array(self.energy, dtype=float)


OnDrawable = Callable[["Scene", Transform, str], None]


def _decode(raw: bytes) -> str:
    return raw.decode("utf-8", errors="surrogateescape")


class Scene:
    """A collection of transforms and the drawables, cameras and lights on them."""

    def __init__(self) -> None:
        self.transforms: List[Transform] = []
        self.drawables: List[Drawable] = []
        self.cameras: List[Camera] = []
        self.lights: List[Light] = []

    @classmethod
    def from_file(cls, filename, on_drawable: Optional[OnDrawable] = None) -> "Scene":
        """Create a scene and load ``filename`` into it."""
        scene = cls()
        scene.load(filename, on_drawable)
        return scene

    def load(self, filename, on_drawable: Optional[OnDrawable] = None) -> None:
        """Add the transforms, cameras and lights from a scene file.

        ``on_drawable(scene, transform, mesh_name)`` is called for each mesh
        entry. Raises SceneError (or ChunkError) on format errors.
        """
        with open(filename, "rb") as stream:
            names = read_chunk(stream, "str0", None)
            hierarchy = read_chunk(stream, "xfh0", _HIERARCHY_FORMAT)
            meshes = read_chunk(stream, "msh0", _MESH_FORMAT)
            loaded_cameras = read_chunk(stream, "cam0", _CAMERA_FORMAT)
            loaded_lights = read_chunk(stream, "lmp0", _LIGHT_FORMAT)

            def valid_name(begin: int, end: int) -> bool:
                return begin <= end <= len(names)

            def lookup(index: int, kind: str) -> Transform:
                if index >= len(hierarchy_transforms):
                    raise SceneError(
                        f"scene file '{filename}' contains {kind} entry with "
                        f"invalid transform index ({index})"
                    )
                return hierarchy_transforms[index]

            hierarchy_transforms: List[Transform] = []
            for entry in hierarchy:
                parent, name_begin, name_end = entry[0:3]
                transform = Transform()
                self.transforms.append(transform)
                if parent != _NO_PARENT:
                    if parent >= len(hierarchy_transforms):
                        raise SceneError(
                            f"scene file '{filename}' did not contain transforms "
                            "in topological-sort order."
                        )
                    transform.parent = hierarchy_transforms[parent]
                if not valid_name(name_begin, name_end):
                    raise SceneError(
                        f"scene file '{filename}' contains hierarchy entry with "
                        "invalid name indices"
                    )
                transform.name = _decode(names[name_begin:name_end])
                transform.position = np.array(entry[3:6], dtype=float)
                qx, qy, qz, qw = entry[6:10]
                transform.rotation = (qw, qx, qy, qz)
                transform.scale = np.array(entry[10:13], dtype=float)
                hierarchy_transforms.append(transform)

            for index, name_begin, name_end in meshes:
                transform = lookup(index, "mesh")
                if not valid_name(name_begin, name_end):
                    raise SceneError(
                        f"scene file '{filename}' contains mesh entry with "
                        "invalid name indices"
                    )
                if on_drawable is not None:
                    on_drawable(self, transform, _decode(names[name_begin:name_end]))

            for index, kind, data, clip_near, _clip_far in loaded_cameras:
                transform = lookup(index, "camera")
                if kind != b"pers":
                    warnings.warn(
                        f"Ignoring non-perspective camera ({kind.decode('latin-1')}) "
                        "stored in file.",
                        stacklevel=2,
                    )
                    continue
                # The far plane is ignored: projections are infinite.
                self.cameras.append(
                    Camera(transform, fovy=data / 180.0 * _PI, near=clip_near)
                )

            for index, kind, red, green, blue, energy, _distance, fov in loaded_lights:
                transform = lookup(index, "lamp")
                try:
                    light_type = LightType(kind.decode("latin-1"))
                except ValueError:
                    warnings.warn(
                        f"Ignoring unrecognized lamp type ({kind.decode('latin-1')}) "
                        "stored in file.",
                        stacklevel=2,
                    )
                    continue
                color = np.array([red, green, blue], dtype=float)
                self.lights.append(Light(
                    transform,
                    type=light_type,
                    energy=color / 255.0 * energy,
                    spot_fov=fov / 180.0 * _PI,
                ))

            self.load_extra(stream, names, hierarchy_transforms)

            if stream.read(1):
                warnings.warn(f"trailing data in scene file '{filename}'", stacklevel=2)

    def load_extra(self, stream: BinaryIO, names: bytes,
                   transforms: Sequence[Transform]) -> int:
        """Read extra chunks after the standard ones; subclasses override this.

        The default reads nothing and returns the stream offset at which any
        extra data begins.
        """
        return stream.tell()

    def set(self, other: "Scene") -> Dict[Transform, Transform]:
        """Make this scene a copy of ``other``, with references fixed up.

        Returns the mapping from ``other``'s transforms to their copies.
        """
        src_transforms = list(other.transforms)
        src_drawables = list(other.drawables)
        src_cameras = list(other.cameras)
        src_lights = list(other.lights)

        mapping: Dict[Transform, Transform] = {}
        copies: List[Transform] = []
        for t in src_transforms:
            duplicate = Transform(
                name=t.name,
                position=np.array(t.position, dtype=float),
                rotation=tuple(t.rotation),
                scale=np.array(t.scale, dtype=float),
            )
            duplicate.parent = t.parent
            mapping[t] = duplicate
            copies.append(duplicate)

        def remap(t: Optional[Transform]) -> Optional[Transform]:
            if t is None:
                return None
            try:
                return mapping[t]
            except KeyError:
                raise SceneError("scene refers to a transform it does not contain") from None

        for duplicate in copies:
            duplicate.parent = remap(duplicate.parent)

        def copy_pipeline(p: Pipeline) -> Pipeline:
            return dataclasses.replace(
                p, textures=[dataclasses.replace(t) for t in p.textures]
            )

        drawables = [
            Drawable(remap(d.transform), copy_pipeline(d.pipeline)) for d in src_drawables
        ]
        cameras = [dataclasses.replace(c, transform=remap(c.transform)) for c in src_cameras]
        lights = [
            dataclasses.replace(l, transform=remap(l.transform), energy=np.array(l.energy))
            for l in src_lights
        ]

        self.transforms = copies
        self.drawables = drawables
        self.cameras = cameras
        self.lights = lights
        return mapping

    def copy(self) -> "Scene":
        """Return an independent copy of this scene."""
        duplicate = type(self)()
        duplicate.set(self)
        return duplicate