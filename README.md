# hexamotion

Kinematics and body posing for six-legged robots with three joints (coxa,
femur, tibia) per leg. Angles are in degrees and lengths in millimetres; leg
`i` is mounted at `i * 60` degrees around a hexagonal body.

## Install

```
pip install hexamotion
```

To run the test suite:

```
pip install "hexamotion[test]"
pytest
```

## Modules

### `hexamotion.math_utils`

- `Point3D`: a dataclass with `x`, `y`, `z` that supports `+`, `-`, unary
  `-`, multiplication and division by a scalar, and iteration.
- Angle helpers: `degrees_to_radians`, `radians_to_degrees`,
  `normalize_angle` (wraps into [-180, 180)).
- Geometry: `rotate_point` (roll, pitch, yaw applied as Rz · Ry · Rx),
  `distance_3d`, `distance`, `magnitude`, `is_point_reachable(point,
  max_reach, min_reach=0.0)`, and `rotation_matrix_x`, `rotation_matrix_y`,
  `rotation_matrix_z`.
- Quaternions, ordered `[w, x, y, z]`: `euler_to_quaternion`,
  `quaternion_to_euler`, `quaternion_multiply`, `quaternion_inverse` (raises
  `ValueError` for the zero quaternion), and the `Point3D` variants
  `euler_point_to_quaternion` and `quaternion_to_euler_point`;
  `point_to_vector` and `vector_to_point` convert between `Point3D` and numpy
  arrays.
- `dh_transform(a, alpha, d, theta)`: a Denavit–Hartenberg homogeneous
  transform.
- Bézier curves over any values that add and scale (numpy arrays, `Point3D`):
  `quadratic_bezier`, `cubic_bezier`, `cubic_bezier_dot`, `quartic_bezier`,
  `quartic_bezier_dot`. A wrong number of control points raises `ValueError`.

### `hexamotion.robot_model`

- `Parameters`: body and leg dimensions, joint limits, optional custom DH
  parameters (shape `(6, 3, 4)`; all zeros selects the default chain) and an
  `IKSettings` with `use_multiple_starts` and `clamp_joints`.
- `JointAngles`: `coxa`, `femur`, `tibia`.
- `RobotModel`:
  - `forward_kinematics`, `leg_transform`
  - `inverse_kinematics`: damped least squares, tried from one or five
    starting configurations, preferring solutions within joint limits. Targets
    far outside the leg's reach return a fixed extended or retracted pose.
  - `calculate_jacobian`, `analytic_jacobian`
  - `check_joint_limits`, `constrain_angle`, `normalize_angle`
  - `validate`: whether the key dimensions and control frequency are positive
  - `calculate_height_range`: the lowest and highest body heights found over a
    grid of joint angles; raises `ValueError` if none is positive
  - `leg_origin`: the mounting point of a leg

### `hexamotion.pose_controller`

- `PoseController(model, servos=None)`:
  - `set_body_pose(position, orientation, leg_positions)` returns a
    `LegPose` (tip `position` and `angles`) for every leg. If a leg would
    break a joint limit it raises `JointLimitError` and no servo is commanded.
  - `set_body_pose_quaternion`, `interpolate_pose` (position interpolated
    linearly, orientation by `quaternion_slerp`, `t` clamped to [0, 1]).
  - `standing_pose`, `crouch_pose` (60 % of the given height),
    `default_pose`, and `set_leg_position`, which clamps the joint angles and
    returns the position actually reached.
- `servos` may be any object with `set_joint_angle(leg, joint, angle)`, as
  described by the `ServoInterface` protocol.

## Example

```python
from hexamotion.math_utils import Point3D, quartic_bezier
from hexamotion.robot_model import JointAngles, Parameters, RobotModel

params = Parameters(
    hexagon_radius=400.0,
    coxa_length=50.0,
    femur_length=101.0,
    tibia_length=208.0,
    robot_height=90.0,
    control_frequency=50.0,
)
model = RobotModel(params)

tip = model.forward_kinematics(0, JointAngles(0.0, -30.0, 30.0))
angles = model.inverse_kinematics(0, tip)
print(angles, model.check_joint_limits(0, angles))

curve = [Point3D(80, 0, -80), Point3D(85, 0, -70), Point3D(90, 0, -60),
         Point3D(95, 0, -70), Point3D(100, 0, -80)]
print(quartic_bezier(curve, 0.5))
```

## What it does not do

The package computes leg geometry and body poses only. It has no gait
generation or walking loop, no robot state machine, no sensor handling and
no command-line program; driving real servos is left to whatever object is
passed as `servos`.