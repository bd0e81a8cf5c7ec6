"""Body posing: turns body translations and rotations into leg joint angles."""

from __future__ import annotations

import math
from dataclasses import dataclass
from typing import Optional, Protocol, Sequence

import numpy as np

from .math_utils import Point3D, degrees_to_radians, quaternion_to_euler, rotate_point, vector_to_point
from .robot_model import NUM_LEGS, JointAngles, RobotModel

__all__ = [
    "ServoInterface",
    "JointLimitError",
    "LegPose",
    "PoseController",
    "quaternion_slerp",
]

_SLERP_LINEAR_THRESHOLD = 0.9995
_DEFAULT_POSE_X_OFFSET = 50.0
_CROUCH_FACTOR = 0.6


class ServoInterface(Protocol):
    """Anything that can drive a joint servo to an angle in degrees."""

    def set_joint_angle(self, leg: int, joint: int, angle: float) -> bool:
        """Command one joint of one leg."""


class JointLimitError(ValueError):
    """Raised when a requested pose needs a joint angle outside its limits."""

    def __init__(self, leg: int, angles: JointAngles) -> None:
        super().__init__(f"leg {leg} cannot reach the pose within joint limits: {angles}")
        self.leg = leg
        self.angles = angles


@dataclass
class LegPose:
    """Tip position and joint angles of one leg."""

    position: Point3D
    angles: JointAngles


def quaternion_slerp(q1: Sequence[float], q2: Sequence[float], t: float) -> np.ndarray:
    """Spherical linear interpolation between two ``[w, x, y, z]`` quaternions."""
    a = np.asarray(q1, dtype=float)
    b = np.asarray(q2, dtype=float)
    dot = float(a @ b)
    if dot < 0.0:
        b = -b
        dot = -dot

    if dot > _SLERP_LINEAR_THRESHOLD:
        result = a + t * (b - a)
        norm = float(np.linalg.norm(result))
        return result / norm if norm > 0.0 else result

    theta_0 = math.acos(abs(dot))
    sin_theta_0 = math.sin(theta_0)
    theta = theta_0 * t
    sin_theta = math.sin(theta)
    s0 = math.cos(theta) - dot * sin_theta / sin_theta_0
    s1 = sin_theta / sin_theta_0
    return s0 * a + s1 * b


def _vec3(values: Sequence[float]) -> np.ndarray:
    arr = np.asarray(values, dtype=float)
    if arr.shape != (3,):
        raise ValueError(f"expected a 3-component vector, got shape {arr.shape}")
    return arr


class PoseController:
    """Computes leg poses for body positions and orientations."""

    def __init__(self, model: RobotModel, servos: Optional[ServoInterface] = None) -> None:
        self.model = model
        self.servos = servos

    def _write_servos(self, leg: int, angles: JointAngles) -> None:
        if self.servos is None:
            return
        for joint, angle in enumerate(angles):
            self.servos.set_joint_angle(leg, joint, angle)

    def set_body_pose(
        self,
        position: Sequence[float],
        orientation: Sequence[float],
        leg_positions: Sequence[Point3D],
    ) -> list[LegPose]:
        """Move the body to ``position`` with (roll, pitch, yaw) ``orientation`` in degrees.

        Returns the new pose of every leg. Raises JointLimitError, without
        commanding any servo, if a leg cannot hold the pose.
        """
        if len(leg_positions) != NUM_LEGS:
            raise ValueError(f"expected {NUM_LEGS} leg positions, got {len(leg_positions)}")
        body_position = vector_to_point(_vec3(position))
        rotation = _vec3(orientation)

        poses = []
        for leg, leg_pos in enumerate(leg_positions):
            rotated = rotate_point(leg_pos - body_position, rotation)
            angles = self.model.inverse_kinematics(leg, rotated)
            if not self.model.check_joint_limits(leg, angles):
                raise JointLimitError(leg, angles)
            poses.append(LegPose(body_position + rotated, angles))

        for leg, pose in enumerate(poses):
            self._write_servos(leg, pose.angles)
        return poses

    def set_leg_position(self, leg_index: int, position: Point3D) -> LegPose:
        """Place one leg tip as close to ``position`` as its joint limits allow."""
        if not 0 <= leg_index < NUM_LEGS:
            raise IndexError(f"leg index {leg_index} out of range")
        model = self.model
        p = model.params
        raw = model.inverse_kinematics(leg_index, position)
        angles = JointAngles(
            model.constrain_angle(raw.coxa, *p.coxa_angle_limits),
            model.constrain_angle(raw.femur, *p.femur_angle_limits),
            model.constrain_angle(raw.tibia, *p.tibia_angle_limits),
        )
        self._write_servos(leg_index, angles)
        return LegPose(model.forward_kinematics(leg_index, angles), angles)

    def default_pose(self, hex_radius: float, robot_height: float) -> list[LegPose]:
        """Initial leg layout around a hexagon of the given radius."""
        poses = []
        for leg in range(NUM_LEGS):
            angle = degrees_to_radians(leg * 60.0)
            position = Point3D(
                hex_radius * math.cos(angle) + _DEFAULT_POSE_X_OFFSET,
                hex_radius * math.sin(angle),
                -robot_height,
            )
            poses.append(LegPose(position, JointAngles(0.0, 45.0, -90.0)))
        return poses

    def standing_pose(self, leg_positions: Sequence[Point3D], robot_height: float) -> list[LegPose]:
        """Level body raised to ``robot_height``."""
        return self.set_body_pose((0.0, 0.0, robot_height), (0.0, 0.0, 0.0), leg_positions)

    def crouch_pose(self, leg_positions: Sequence[Point3D], robot_height: float) -> list[LegPose]:
        """Level body lowered to 60% of ``robot_height``."""
        return self.set_body_pose(
            (0.0, 0.0, robot_height * _CROUCH_FACTOR), (0.0, 0.0, 0.0), leg_positions
        )

    def set_body_pose_quaternion(
        self,
        position: Sequence[float],
        quaternion: Sequence[float],
        leg_positions: Sequence[Point3D],
    ) -> list[LegPose]:
        """Like :meth:`set_body_pose`, with the orientation as a ``[w, x, y, z]`` quaternion."""
        return self.set_body_pose(position, quaternion_to_euler(quaternion), leg_positions)

    def interpolate_pose(
        self,
        start_pos: Sequence[float],
        start_quat: Sequence[float],
        end_pos: Sequence[float],
        end_quat: Sequence[float],
        t: float,
        leg_positions: Sequence[Point3D],
    ) -> list[LegPose]:
        """Pose the body part way between two poses; ``t`` is clamped to [0, 1]."""
        t = max(0.0, min(1.0, t))
        start = _vec3(start_pos)
        position = start + t * (_vec3(end_pos) - start)
        quaternion = quaternion_slerp(start_quat, end_quat, t)
        return self.set_body_pose_quaternion(position, quaternion, leg_positions)