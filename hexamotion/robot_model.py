"""Kinematic model of a six-legged robot with three joints per leg.

Angles are in degrees and lengths in millimetres. Legs are spaced 60 degrees
apart around a hexagonal body; leg ``i`` sits at angle ``i * 60``.
"""

from __future__ import annotations

import itertools
import math
from dataclasses import dataclass, field
from typing import Iterator

import numpy as np

from .math_utils import (
    Point3D,
    degrees_to_radians,
    dh_transform,
    distance_3d,
    is_point_reachable,
    magnitude,
    point_to_vector,
    rotation_matrix_z,
)

__all__ = [
    "NUM_LEGS",
    "DOF_PER_LEG",
    "JointAngles",
    "IKSettings",
    "Parameters",
    "RobotModel",
]

NUM_LEGS = 6
DOF_PER_LEG = 3

_DLS_COEFFICIENT = 0.02
_HIGH_DAMPING = 0.1
_IK_TOLERANCE = 0.005
_MAX_ITERATIONS = 75
_STAGNATION_THRESHOLD = 0.001
_STAGNATION_LIMIT = 5
_SINGULARITY_THRESHOLD = 1e-6
_HEIGHT_RESOLUTION = 10


@dataclass
class JointAngles:
    """Coxa, femur and tibia angles of one leg, in degrees."""

    coxa: float = 0.0
    femur: float = 0.0
    tibia: float = 0.0

    def __iter__(self) -> Iterator[float]:
        yield self.coxa
        yield self.femur
        yield self.tibia


@dataclass
class IKSettings:
    """Options for the iterative inverse kinematics solver."""

    use_multiple_starts: bool = True
    clamp_joints: bool = True


def _zero_dh() -> np.ndarray:
    return np.zeros((NUM_LEGS, DOF_PER_LEG, 4))


@dataclass
class Parameters:
    """Physical and control parameters of the robot."""

    hexagon_radius: float = 0.0
    coxa_length: float = 0.0
    femur_length: float = 0.0
    tibia_length: float = 0.0
    robot_height: float = 0.0
    height_offset: float = 0.0
    robot_weight: float = 0.0
    center_of_mass: np.ndarray = field(default_factory=lambda: np.zeros(3))
    control_frequency: float = 0.0
    coxa_angle_limits: tuple[float, float] = (-65.0, 65.0)
    femur_angle_limits: tuple[float, float] = (-75.0, 75.0)
    tibia_angle_limits: tuple[float, float] = (-45.0, 45.0)
    max_velocity: float = 0.0
    max_angular_velocity: float = 0.0
    stability_margin: float = 0.0
    fsr_threshold: float = 0.0
    fsr_max_pressure: float = 0.0
    dh_parameters: np.ndarray = field(default_factory=_zero_dh)
    ik: IKSettings = field(default_factory=IKSettings)


class RobotModel:
    """Forward and inverse kinematics built on Denavit-Hartenberg transforms."""

    def __init__(self, params: Parameters) -> None:
        self.params = params
        self.dh = self._initial_dh()

    def _initial_dh(self) -> np.ndarray:
        custom = np.array(self.params.dh_parameters, dtype=float)
        if custom.shape != (NUM_LEGS, DOF_PER_LEG, 4):
            raise ValueError(
                f"dh_parameters must have shape {(NUM_LEGS, DOF_PER_LEG, 4)}, got {custom.shape}"
            )
        if np.any(custom != 0.0):
            return custom
        p = self.params
        default_leg = np.array(
            [
                [0.0, -90.0, 0.0, 0.0],
                [p.coxa_length, 0.0, 0.0, 0.0],
                [p.femur_length, 0.0, 0.0, 0.0],
            ]
        )
        return np.tile(default_leg, (NUM_LEGS, 1, 1))

    # -- geometry helpers -------------------------------------------------

    def _base_position(self, leg: int) -> tuple[float, float]:
        angle = degrees_to_radians(leg * 60.0)
        r = self.params.hexagon_radius
        return r * math.cos(angle), r * math.sin(angle)

    def _base_transform(self, leg: int) -> np.ndarray:
        transform = np.eye(4)
        transform[:3, :3] = rotation_matrix_z(leg * 60.0)
        transform[0, 3], transform[1, 3] = self._base_position(leg)
        return transform

    def _joint_frames(self, leg: int, angles: JointAngles) -> list[np.ndarray]:
        """Base frame followed by the frame after each joint."""
        frames = [self._base_transform(leg)]
        for (a, alpha, d, theta0), joint in zip(self.dh[leg], angles):
            frames.append(frames[-1] @ dh_transform(a, alpha, d, theta0 + joint))
        return frames

    def _tip(self, frames: list[np.ndarray]) -> np.ndarray:
        return frames[-1] @ dh_transform(self.params.tibia_length, 0.0, 0.0, 0.0)

    def _clamp(self, angles: JointAngles) -> JointAngles:
        p = self.params
        return JointAngles(
            self.constrain_angle(angles.coxa, *p.coxa_angle_limits),
            self.constrain_angle(angles.femur, *p.femur_angle_limits),
            self.constrain_angle(angles.tibia, *p.tibia_angle_limits),
        )

    # -- kinematics -------------------------------------------------------

    def leg_transform(self, leg_index: int, angles: JointAngles) -> np.ndarray:
        """Homogeneous transform from the body frame to the leg tip."""
        return self._tip(self._joint_frames(leg_index, angles))

    def forward_kinematics(self, leg_index: int, angles: JointAngles) -> Point3D:
        """Tip position of a leg in the body frame."""
        transform = self.leg_transform(leg_index, angles)
        return Point3D(float(transform[0, 3]), float(transform[1, 3]), float(transform[2, 3]))

    def calculate_jacobian(self, leg: int, angles: JointAngles, target: Point3D) -> np.ndarray:
        """Positional Jacobian of the tip with respect to joint angles in radians."""
        frames = self._joint_frames(leg, angles)
        tip = self._tip(frames)[:3, 3]
        jacobian = np.empty((3, DOF_PER_LEG))
        jacobian[:, 0] = np.cross(np.array([0.0, 0.0, 1.0]), tip - frames[0][:3, 3])
        for j in range(1, DOF_PER_LEG):
            jacobian[:, j] = np.cross(frames[j][:3, 2], tip - frames[j][:3, 3])
        return jacobian

    def analytic_jacobian(self, leg: int, angles: JointAngles) -> np.ndarray:
        """Jacobian at the given angles, without a target."""
        return self.calculate_jacobian(leg, angles, self.forward_kinematics(leg, angles))

    def inverse_kinematics(self, leg: int, target: Point3D) -> JointAngles:
        """Joint angles placing the leg tip at ``target`` (damped least squares)."""
        p = self.params
        base_x, base_y = self._base_position(leg)
        local = Point3D(target.x - base_x, target.y - base_y, target.z)

        max_reach = p.coxa_length + p.femur_length + p.tibia_length
        min_reach = abs(p.femur_length - p.tibia_length)
        coxa_start = self.constrain_angle(
            math.degrees(math.atan2(local.y, local.x)), *p.coxa_angle_limits
        )

        if not is_point_reachable(local, max_reach * 1.02, min_reach * 0.9):
            if magnitude(local) > max_reach * 1.02:
                return JointAngles(coxa_start, -45.0, 60.0)
            return JointAngles(coxa_start, 30.0, -60.0)

        starts = [JointAngles(coxa_start, -45.0, 60.0)]
        if p.ik.use_multiple_starts:
            starts += [
                JointAngles(coxa_start, 30.0, -60.0),
                JointAngles(coxa_start, -30.0, 45.0),
                JointAngles(coxa_start, 0.0, 0.0),
                JointAngles(coxa_start, -60.0, 80.0),
            ]

        target_vec = point_to_vector(target)
        best = JointAngles()
        best_error = math.inf

        for start in starts:
            current = self._clamp(start)
            previous_error = math.inf
            stagnation = 0

            for _ in range(_MAX_ITERATIONS):
                delta = target_vec - point_to_vector(self.forward_kinematics(leg, current))
                error = float(np.linalg.norm(delta))
                if error < _IK_TOLERANCE:
                    return current

                if previous_error - error < _STAGNATION_THRESHOLD:
                    stagnation += 1
                    if stagnation > _STAGNATION_LIMIT:
                        break
                else:
                    stagnation = 0
                previous_error = error

                jacobian = self.calculate_jacobian(leg, current, target)
                if abs(np.linalg.det(jacobian)) < _SINGULARITY_THRESHOLD:
                    damping, gain = _HIGH_DAMPING, 0.5
                else:
                    damping, gain = _DLS_COEFFICIENT, 1.0
                damped = np.linalg.inv(jacobian @ jacobian.T + damping * damping * np.eye(3))
                step = np.degrees(jacobian.T @ damped @ delta * gain)

                current = JointAngles(
                    *(self.normalize_angle(angle + change) for angle, change in zip(current, step))
                )
                if p.ik.clamp_joints:
                    current = self._clamp(current)

            final_error = distance_3d(target, self.forward_kinematics(leg, current))
            current_ok = self.check_joint_limits(leg, current)
            best_ok = self.check_joint_limits(leg, best)
            if (current_ok and not best_ok) or (current_ok == best_ok and final_error < best_error):
                best = current
                best_error = final_error

        return best

    # -- limits and checks ------------------------------------------------

    def check_joint_limits(self, leg_index: int, angles: JointAngles) -> bool:
        """Whether every joint angle lies within its configured limits."""
        p = self.params
        return (
            p.coxa_angle_limits[0] <= angles.coxa <= p.coxa_angle_limits[1]
            and p.femur_angle_limits[0] <= angles.femur <= p.femur_angle_limits[1]
            and p.tibia_angle_limits[0] <= angles.tibia <= p.tibia_angle_limits[1]
        )

    def constrain_angle(self, angle: float, min_angle: float, max_angle: float) -> float:
        """Wrap an angle to (-180, 180] and clamp it into [min_angle, max_angle]."""
        return max(min_angle, min(max_angle, self.normalize_angle(angle)))

    def normalize_angle(self, angle_deg: float) -> float:
        """Wrap an angle in degrees into (-180, 180]."""
        rad = math.radians(angle_deg)
        return math.degrees(math.atan2(math.sin(rad), math.cos(rad)))

    def validate(self) -> bool:
        """Whether the key dimensions and control frequency are positive."""
        p = self.params
        return all(
            value > 0
            for value in (
                p.hexagon_radius,
                p.coxa_length,
                p.femur_length,
                p.tibia_length,
                p.robot_height,
                p.control_frequency,
            )
        )

    def calculate_height_range(self) -> tuple[float, float]:
        """Minimum and maximum body heights reachable within joint limits.

        Raises ValueError when no joint configuration yields a positive height.
        """
        p = self.params
        steps = range(_HEIGHT_RESOLUTION + 1)

        def samples(limits: tuple[float, float]) -> list[float]:
            step = (limits[1] - limits[0]) / _HEIGHT_RESOLUTION
            return [limits[0] + i * step for i in steps]

        heights = []
        for coxa, femur, tibia in itertools.product(
            samples(p.coxa_angle_limits), samples(p.femur_angle_limits), samples(p.tibia_angle_limits)
        ):
            angles = JointAngles(coxa, femur, tibia)
            if not self.check_joint_limits(0, angles):
                continue
            height = -self.forward_kinematics(0, angles).z + p.height_offset
            if height > 0:
                heights.append(height)

        if not heights:
            raise ValueError("no joint configuration gives a positive body height")
        return min(heights), max(heights)

    def leg_origin(self, leg: int) -> Point3D:
        """Mounting point of a leg on the body; the origin for an unknown leg."""
        if not 0 <= leg < NUM_LEGS:
            return Point3D(0.0, 0.0, 0.0)
        x, y = self._base_position(leg)
        return Point3D(x, y, 0.0)