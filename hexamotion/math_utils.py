"""Geometry helpers: angles, rotations, quaternions, DH transforms and Bezier curves.

All angles taken or returned by these helpers are in degrees unless a name
says otherwise. Quaternions are numpy arrays ordered ``[w, x, y, z]`` and
Euler angles are ordered ``(roll, pitch, yaw)``. Rotations use the Z-Y-X
(yaw, pitch, roll) convention.
"""

from __future__ import annotations

import math
from dataclasses import dataclass
from typing import Iterator, Sequence, TypeVar, Union

import numpy as np

__all__ = [
    "Point3D",
    "degrees_to_radians",
    "radians_to_degrees",
    "normalize_angle",
    "rotate_point",
    "distance_3d",
    "is_point_reachable",
    "magnitude",
    "distance",
    "rotation_matrix_x",
    "rotation_matrix_y",
    "rotation_matrix_z",
    "quaternion_to_euler",
    "euler_to_quaternion",
    "quaternion_multiply",
    "quaternion_inverse",
    "point_to_vector",
    "vector_to_point",
    "euler_point_to_quaternion",
    "quaternion_to_euler_point",
    "dh_transform",
    "quadratic_bezier",
    "cubic_bezier",
    "cubic_bezier_dot",
    "quartic_bezier",
    "quartic_bezier_dot",
]


@dataclass
class Point3D:
    """A point or vector in 3D space."""

    x: float = 0.0
    y: float = 0.0
    z: float = 0.0

    def __iter__(self) -> Iterator[float]:
        yield self.x
        yield self.y
        yield self.z

    def __add__(self, other: "Point3D") -> "Point3D":
        if not isinstance(other, Point3D):
            return NotImplemented
        return Point3D(self.x + other.x, self.y + other.y, self.z + other.z)

    def __sub__(self, other: "Point3D") -> "Point3D":
        if not isinstance(other, Point3D):
            return NotImplemented
        return Point3D(self.x - other.x, self.y - other.y, self.z - other.z)

    def __neg__(self) -> "Point3D":
        return Point3D(-self.x, -self.y, -self.z)

    def __mul__(self, scalar: float) -> "Point3D":
        if not isinstance(scalar, (int, float)):
            return NotImplemented
        return Point3D(self.x * scalar, self.y * scalar, self.z * scalar)

    __rmul__ = __mul__

    def __truediv__(self, scalar: float) -> "Point3D":
        if not isinstance(scalar, (int, float)):
            return NotImplemented
        return Point3D(self.x / scalar, self.y / scalar, self.z / scalar)


Vec3 = Union[Point3D, Sequence[float], np.ndarray]
T = TypeVar("T")


def degrees_to_radians(degrees: float) -> float:
    """Convert degrees to radians."""
    return degrees * math.pi / 180.0


def radians_to_degrees(radians: float) -> float:
    """Convert radians to degrees."""
    return radians * 180.0 / math.pi


def normalize_angle(angle: float) -> float:
    """Wrap an angle in degrees into the range [-180, 180)."""
    wrapped = math.fmod(angle + 180.0, 360.0)
    if wrapped < 0.0:
        wrapped += 360.0
    return wrapped - 180.0


def _as_array(vec: Vec3) -> np.ndarray:
    arr = np.asarray(list(vec) if isinstance(vec, Point3D) else vec, dtype=float)
    if arr.shape != (3,):
        raise ValueError(f"expected a 3-component vector, got shape {arr.shape}")
    return arr


def rotation_matrix_x(angle: float) -> np.ndarray:
    """Rotation matrix about the X axis; angle in degrees."""
    c, s = math.cos(degrees_to_radians(angle)), math.sin(degrees_to_radians(angle))
    return np.array([[1.0, 0.0, 0.0], [0.0, c, -s], [0.0, s, c]])


def rotation_matrix_y(angle: float) -> np.ndarray:
    """Rotation matrix about the Y axis; angle in degrees."""
    c, s = math.cos(degrees_to_radians(angle)), math.sin(degrees_to_radians(angle))
    return np.array([[c, 0.0, s], [0.0, 1.0, 0.0], [-s, 0.0, c]])


def rotation_matrix_z(angle: float) -> np.ndarray:
    """Rotation matrix about the Z axis; angle in degrees."""
    c, s = math.cos(degrees_to_radians(angle)), math.sin(degrees_to_radians(angle))
    return np.array([[c, -s, 0.0], [s, c, 0.0], [0.0, 0.0, 1.0]])


def rotate_point(point: Vec3, rotation: Vec3) -> Point3D:
    """Rotate a point by (roll, pitch, yaw) degrees, applied as Rz @ Ry @ Rx."""
    roll, pitch, yaw = _as_array(rotation)
    matrix = rotation_matrix_z(yaw) @ rotation_matrix_y(pitch) @ rotation_matrix_x(roll)
    return vector_to_point(matrix @ _as_array(point))


def distance_3d(p1: Vec3, p2: Vec3) -> float:
    """Euclidean distance between two points."""
    return float(np.linalg.norm(_as_array(p1) - _as_array(p2)))


def distance(p1: Vec3, p2: Vec3) -> float:
    """Distance between two points; same as :func:`distance_3d`."""
    return distance_3d(p1, p2)


def magnitude(point: Vec3) -> float:
    """Length of a 3D vector."""
    return float(np.linalg.norm(_as_array(point)))


def is_point_reachable(point: Vec3, max_reach: float, min_reach: float = 0.0) -> bool:
    """Whether the point's distance from the origin lies within [min_reach, max_reach]."""
    length = magnitude(point)
    return min_reach <= length <= max_reach


def quaternion_to_euler(quaternion: Sequence[float]) -> np.ndarray:
    """Convert a ``[w, x, y, z]`` quaternion to (roll, pitch, yaw) degrees."""
    w, x, y, z = np.asarray(quaternion, dtype=float)
    roll = math.atan2(2.0 * (w * x + y * z), 1.0 - 2.0 * (x * x + y * y))
    sin_pitch = max(-1.0, min(1.0, 2.0 * (w * y - z * x)))
    pitch = math.asin(sin_pitch)
    yaw = math.atan2(2.0 * (w * z + x * y), 1.0 - 2.0 * (y * y + z * z))
    return np.array([radians_to_degrees(roll), radians_to_degrees(pitch), radians_to_degrees(yaw)])


def euler_to_quaternion(euler: Vec3) -> np.ndarray:
    """Convert (roll, pitch, yaw) degrees to a ``[w, x, y, z]`` quaternion."""
    roll, pitch, yaw = (degrees_to_radians(a) * 0.5 for a in _as_array(euler))
    cr, sr = math.cos(roll), math.sin(roll)
    cp, sp = math.cos(pitch), math.sin(pitch)
    cy, sy = math.cos(yaw), math.sin(yaw)
    return np.array(
        [
            cr * cp * cy + sr * sp * sy,
            sr * cp * cy - cr * sp * sy,
            cr * sp * cy + sr * cp * sy,
            cr * cp * sy - sr * sp * cy,
        ]
    )


def quaternion_multiply(q1: Sequence[float], q2: Sequence[float]) -> np.ndarray:
    """Hamilton product ``q1 * q2`` of two ``[w, x, y, z]`` quaternions."""
    w1, x1, y1, z1 = np.asarray(q1, dtype=float)
    w2, x2, y2, z2 = np.asarray(q2, dtype=float)
    return np.array(
        [
            w1 * w2 - x1 * x2 - y1 * y2 - z1 * z2,
            w1 * x2 + x1 * w2 + y1 * z2 - z1 * y2,
            w1 * y2 - x1 * z2 + y1 * w2 + z1 * x2,
            w1 * z2 + x1 * y2 - y1 * x2 + z1 * w2,
        ]
    )


def quaternion_inverse(q: Sequence[float]) -> np.ndarray:
    """Inverse of a quaternion; raises ValueError for the zero quaternion."""
    arr = np.asarray(q, dtype=float)
    norm_sq = float(arr @ arr)
    if norm_sq == 0.0:
        raise ValueError("cannot invert a zero quaternion")
    return np.array([arr[0], -arr[1], -arr[2], -arr[3]]) / norm_sq


def point_to_vector(point: Point3D) -> np.ndarray:
    """Convert a Point3D to a numpy vector."""
    return np.array([point.x, point.y, point.z], dtype=float)


def vector_to_point(vec: Sequence[float]) -> Point3D:
    """Convert a 3-component vector to a Point3D."""
    x, y, z = (float(v) for v in vec)
    return Point3D(x, y, z)


def euler_point_to_quaternion(euler_degrees: Point3D) -> np.ndarray:
    """Convert Euler angles held in a Point3D (degrees) to a quaternion."""
    return euler_to_quaternion(point_to_vector(euler_degrees))


def quaternion_to_euler_point(quaternion: Sequence[float]) -> Point3D:
    """Convert a quaternion to Euler angles (degrees) held in a Point3D."""
    return vector_to_point(quaternion_to_euler(quaternion))


def dh_transform(a: float, alpha: float, d: float, theta: float) -> np.ndarray:
    """Denavit-Hartenberg homogeneous transform; alpha and theta in degrees."""
    ct, st = math.cos(degrees_to_radians(theta)), math.sin(degrees_to_radians(theta))
    ca, sa = math.cos(degrees_to_radians(alpha)), math.sin(degrees_to_radians(alpha))
    return np.array(
        [
            [ct, -st * ca, st * sa, a * ct],
            [st, ct * ca, -ct * sa, a * st],
            [0.0, sa, ca, d],
            [0.0, 0.0, 0.0, 1.0],
        ]
    )


def _control_points(points: Sequence[T], count: int) -> Sequence[T]:
    if len(points) != count:
        raise ValueError(f"expected {count} control points, got {len(points)}")
    return points


def quadratic_bezier(points: Sequence[T], t: float) -> T:
    """Evaluate a quadratic Bezier curve from 3 control points."""
    p = _control_points(points, 3)
    s = 1.0 - t
    return p[0] * (s * s) + p[1] * (2.0 * t * s) + p[2] * (t * t)


def cubic_bezier(points: Sequence[T], t: float) -> T:
    """Evaluate a cubic Bezier curve from 4 control points."""
    p = _control_points(points, 4)
    s = 1.0 - t
    return p[0] * (s * s * s) + p[1] * (3.0 * t * s * s) + p[2] * (3.0 * t * t * s) + p[3] * (t * t * t)


def cubic_bezier_dot(points: Sequence[T], t: float) -> T:
    """Derivative of a cubic Bezier curve with respect to t."""
    p = _control_points(points, 4)
    s = 1.0 - t
    return (
        (p[1] - p[0]) * (3.0 * s * s)
        + (p[2] - p[1]) * (6.0 * s * t)
        + (p[3] - p[2]) * (3.0 * t * t)
    )


def quartic_bezier(points: Sequence[T], t: float) -> T:
    """Evaluate a quartic Bezier curve from 5 control points."""
    p = _control_points(points, 5)
    s = 1.0 - t
    return (
        p[0] * (s * s * s * s)
        + p[1] * (4.0 * t * s * s * s)
        + p[2] * (6.0 * t * t * s * s)
        + p[3] * (4.0 * t * t * t * s)
        + p[4] * (t * t * t * t)
    )


def quartic_bezier_dot(points: Sequence[T], t: float) -> T:
    """Derivative of a quartic Bezier curve with respect to t."""
    p = _control_points(points, 5)
    s = 1.0 - t
    return (
        (p[1] - p[0]) * (4.0 * s * s * s)
        + (p[2] - p[1]) * (12.0 * s * s * t)
        + (p[3] - p[2]) * (12.0 * s * t * t)
        + (p[4] - p[3]) * (4.0 * t * t * t)
    )