"""Z-up trackball-style camera controls for viewing scenes and meshes."""

from __future__ import annotations

import math
from dataclasses import dataclass, field

import numpy as np

from gamebase.scene import Camera, angle_axis, quat_multiply, quat_rotate, quat_to_mat3

_PI = 3.1415926
MIN_RADIUS = 1e-1
MAX_RADIUS = 1e6


def _round_half_away(x: float) -> float:
    return math.copysign(math.floor(abs(x) + 0.5), x)


def _wrap_angle(angle: float) -> float:
    """Wrap ``angle`` into [-pi, pi]."""
    turns = angle / (2.0 * _PI)
    turns -= _round_half_away(turns)
    return turns * 2.0 * _PI


@dataclass
class OrbitCamera:
    """A camera orbiting ``target`` at ``radius``.

    ``azimuth`` is the angle counter-clockwise of the -y axis and
    ``elevation`` the angle above the ground, both in radians in [-pi, pi].
    """

    radius: float = 2.0
    azimuth: float = 0.3
    elevation: float = 0.2
    target: np.ndarray = field(default_factory=lambda: np.zeros(3))
    flip_x: bool = False

    def __post_init__(self) -> None:
        self.target = np.array(self.target, dtype=float)

    def press(self) -> None:
        """Start a drag; azimuth motion is reversed while upside-down."""
        self.flip_x = abs(self.elevation) > 0.5 * _PI

    def motion(self, xrel: float, yrel: float, window_size, shift: bool = False) -> None:
        """Handle a drag of ``(xrel, yrel)`` pixels: pan with shift, else tumble."""
        width, height = (float(v) for v in window_size)
        dx = xrel / width * 2.0
        dx *= height / width
        dy = yrel / height * -2.0

        if shift:
            frame = quat_to_mat3(self.rotation())
            self.target = self.target - (
                frame[:, 0] * (dx * self.radius) + frame[:, 1] * (dy * self.radius)
            )
        else:
            self.azimuth -= 3.0 * dx * (-1.0 if self.flip_x else 1.0)
            self.elevation -= 3.0 * dy
            self.azimuth = _wrap_angle(self.azimuth)
            self.elevation = _wrap_angle(self.elevation)

    def wheel(self, y: float) -> None:
        """Dolly in or out by a mouse-wheel amount."""
        self.radius *= 0.5 ** (0.1 * y)
        self.radius = min(MAX_RADIUS, max(MIN_RADIUS, self.radius))

    def rotation(self) -> tuple:
        """Quaternion (w, x, y, z) orienting the camera for the current angles."""
        return quat_multiply(
            angle_axis(self.azimuth, (0.0, 0.0, 1.0)),
            angle_axis(0.5 * _PI - self.elevation, (1.0, 0.0, 0.0)),
        )

    def apply(self, camera: Camera, drawable_size) -> None:
        """Place ``camera``'s transform and set its aspect for ``drawable_size``."""
        rotation = self.rotation()
        transform = camera.transform
        transform.rotation = rotation
        transform.position = self.target + self.radius * quat_rotate(rotation, (0.0, 0.0, 1.0))
        transform.scale = np.ones(3)
        width, height = drawable_size
        camera.aspect = float(width) / float(height)