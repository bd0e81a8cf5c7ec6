"""Kinematics and body posing for six-legged walking robots."""

__version__ = "0.1.0"

__all__ = [
    "math_utils",
    "robot_model",
    "pose_controller",
]