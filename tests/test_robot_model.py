import math

import numpy as np
import pytest

from hexamotion.math_utils import Point3D, distance_3d, point_to_vector
from hexamotion.robot_model import (
    DOF_PER_LEG,
    NUM_LEGS,
    IKSettings,
    JointAngles,
    Parameters,
    RobotModel,
)


def default_parameters() -> Parameters:
    return Parameters(
        hexagon_radius=400.0,
        coxa_length=50.0,
        femur_length=101.0,
        tibia_length=208.0,
        robot_height=90.0,
        robot_weight=2.0,
        coxa_angle_limits=(-65.0, 65.0),
        femur_angle_limits=(-75.0, 75.0),
        tibia_angle_limits=(-45.0, 45.0),
        max_velocity=100.0,
        max_angular_velocity=45.0,
        stability_margin=0.02,
        control_frequency=50.0,
        fsr_threshold=0.1,
        fsr_max_pressure=10.0,
    )


def wide_parameters(femur: float, tibia: float) -> Parameters:
    return Parameters(
        hexagon_radius=400.0,
        coxa_length=50.0,
        femur_length=femur,
        tibia_length=tibia,
        coxa_angle_limits=(-180.0, 180.0),
        femur_angle_limits=(-90.0, 90.0),
        tibia_angle_limits=(-180.0, 180.0),
    )


@pytest.fixture
def model() -> RobotModel:
    return RobotModel(default_parameters())


def test_forward_kinematics_straight_leg(model):
    tip = model.forward_kinematics(0, JointAngles(0.0, 0.0, 0.0))
    assert tip.x == pytest.approx(759.0)
    assert tip.y == pytest.approx(0.0, abs=1e-9)
    assert tip.z == pytest.approx(0.0, abs=1e-9)


def test_forward_kinematics_workspace_configuration():
    model = RobotModel(wide_parameters(100.0, 159.0))
    tip = model.forward_kinematics(0, JointAngles(0.0, 0.0, 0.0))
    assert (tip.x, tip.y, tip.z) == pytest.approx((709.0, 0.0, 0.0), abs=1e-9)


def test_forward_kinematics_other_leg_is_rotated(model):
    tip = model.forward_kinematics(1, JointAngles(0.0, 0.0, 0.0))
    assert tip.x == pytest.approx(759.0 * math.cos(math.radians(60)))
    assert tip.y == pytest.approx(759.0 * math.sin(math.radians(60)))


def test_positive_femur_lowers_tip(model):
    tip = model.forward_kinematics(0, JointAngles(0.0, 30.0, 0.0))
    assert tip.z < 0.0


def test_leg_transform_matches_forward_kinematics(model):
    angles = JointAngles(10.0, 20.0, -30.0)
    transform = model.leg_transform(2, angles)
    tip = model.forward_kinematics(2, angles)
    assert transform[:3, 3] == pytest.approx(list(point_to_vector(tip)))
    assert transform[3] == pytest.approx([0.0, 0.0, 0.0, 1.0])


def test_custom_dh_parameters_are_used():
    params = default_parameters()
    leg = [[0.0, -90.0, 0.0, 0.0], [50.0, 0.0, 0.0, 0.0], [101.0, 0.0, 0.0, 0.0]]
    params.dh_parameters = np.array([leg] * NUM_LEGS)
    custom = RobotModel(params)
    reference = RobotModel(default_parameters())
    angles = JointAngles(12.0, -20.0, 33.0)
    assert distance_3d(
        custom.forward_kinematics(3, angles), reference.forward_kinematics(3, angles)
    ) == pytest.approx(0.0, abs=1e-9)


def test_custom_dh_shape_is_checked():
    params = default_parameters()
    params.dh_parameters = np.ones((NUM_LEGS, DOF_PER_LEG))
    with pytest.raises(ValueError):
        RobotModel(params)


@pytest.mark.parametrize("leg", [0, 2])
def test_jacobian_matches_finite_differences(model, leg):
    angles = JointAngles(10.0, 20.0, -30.0)
    jacobian = model.calculate_jacobian(leg, angles, Point3D())
    h = 1e-3
    for j in range(DOF_PER_LEG):
        plus = list(angles)
        minus = list(angles)
        plus[j] += h
        minus[j] -= h
        fk_plus = point_to_vector(model.forward_kinematics(leg, JointAngles(*plus)))
        fk_minus = point_to_vector(model.forward_kinematics(leg, JointAngles(*minus)))
        numeric = (fk_plus - fk_minus) / (2.0 * math.radians(h))
        assert jacobian[:, j] == pytest.approx(list(numeric), rel=1e-3, abs=1e-3)


def test_analytic_jacobian_ignores_target(model):
    angles = JointAngles(5.0, 15.0, -25.0)
    a = model.analytic_jacobian(1, angles)
    b = model.calculate_jacobian(1, angles, Point3D(1.0, 2.0, 3.0))
    assert np.allclose(a, b)


@pytest.mark.parametrize(
    "leg, angles",
    [(0, JointAngles(0.0, 20.0, -20.0)), (0, JointAngles(15.0, -10.0, 30.0)), (1, JointAngles(-10.0, 25.0, 10.0))],
)
def test_inverse_kinematics_round_trip(model, leg, angles):
    target = model.forward_kinematics(leg, angles)
    result = model.inverse_kinematics(leg, target)
    assert distance_3d(model.forward_kinematics(leg, result), target) < 5.0
    assert model.check_joint_limits(leg, result)


def test_inverse_kinematics_single_start():
    params = default_parameters()
    params.ik = IKSettings(use_multiple_starts=False, clamp_joints=True)
    model = RobotModel(params)
    target = model.forward_kinematics(0, JointAngles(0.0, 20.0, -20.0))
    result = model.inverse_kinematics(0, target)
    assert distance_3d(model.forward_kinematics(0, result), target) < 5.0


def test_inverse_kinematics_alternative_solution_test3():
    model = RobotModel(wide_parameters(101.0, 208.0))
    config = JointAngles(-45.0, 45.0, -90.0)
    assert model.check_joint_limits(0, config)
    target = model.forward_kinematics(0, config)
    result = model.inverse_kinematics(0, target)
    assert model.check_joint_limits(0, result)
    assert distance_3d(model.forward_kinematics(0, result), target) < 5.0


@pytest.mark.parametrize("dist", [100.0, 200.0])
def test_workspace_boundary_reachable(dist):
    model = RobotModel(wide_parameters(100.0, 159.0))
    target = Point3D(400.0 + dist, 0.0, -100.0)
    result = model.inverse_kinematics(0, target)
    assert distance_3d(model.forward_kinematics(0, result), target) < 10.0


@pytest.mark.parametrize("dist", [300.0, 309.0, 350.0])
def test_workspace_boundary_unreachable_returns_extended_pose(dist):
    model = RobotModel(wide_parameters(100.0, 159.0))
    result = model.inverse_kinematics(0, Point3D(400.0 + dist, 0.0, -100.0))
    assert (result.coxa, result.femur, result.tibia) == pytest.approx((0.0, -45.0, 60.0))


def test_inverse_kinematics_too_close_returns_retracted_pose(model):
    result = model.inverse_kinematics(0, Point3D(400.0, 0.0, 0.0))
    assert (result.coxa, result.femur, result.tibia) == pytest.approx((0.0, 30.0, -60.0))


def test_unreachable_coxa_is_constrained(model):
    result = model.inverse_kinematics(0, Point3D(400.0, 2000.0, 0.0))
    assert result.coxa == pytest.approx(65.0)
    assert (result.femur, result.tibia) == pytest.approx((-45.0, 60.0))


def test_check_joint_limits(model):
    assert model.check_joint_limits(0, JointAngles(0.0, 0.0, 0.0))
    assert model.check_joint_limits(0, JointAngles(65.0, -75.0, 45.0))
    assert not model.check_joint_limits(0, JointAngles(66.0, 0.0, 0.0))
    assert not model.check_joint_limits(0, JointAngles(0.0, 0.0, -46.0))


@pytest.mark.parametrize(
    "angle, expected", [(190.0, -170.0), (-190.0, 170.0), (45.0, 45.0), (720.0 + 30.0, 30.0)]
)
def test_normalize_angle(model, angle, expected):
    assert model.normalize_angle(angle) == pytest.approx(expected)


@pytest.mark.parametrize(
    "angle, expected", [(100.0, 65.0), (-100.0, -65.0), (370.0, 10.0), (20.0, 20.0)]
)
def test_constrain_angle(model, angle, expected):
    assert model.constrain_angle(angle, -65.0, 65.0) == pytest.approx(expected)


def test_validate(model):
    assert model.validate()
    assert not RobotModel(Parameters()).validate()
    params = default_parameters()
    params.control_frequency = 0.0
    assert not RobotModel(params).validate()


def test_height_range(model):
    low, high = model.calculate_height_range()
    assert 0.0 < low < high
    assert high <= 50.0 + 101.0 + 208.0


def test_height_offset_shifts_range(model):
    low, high = model.calculate_height_range()
    params = default_parameters()
    params.height_offset = 1000.0
    shifted_low, shifted_high = RobotModel(params).calculate_height_range()
    assert shifted_high == pytest.approx(high + 1000.0)
    assert shifted_low <= low + 1000.0


def test_height_range_without_valid_configuration():
    params = default_parameters()
    params.height_offset = -10000.0
    with pytest.raises(ValueError):
        RobotModel(params).calculate_height_range()


def test_leg_origin(model):
    origin = model.leg_origin(1)
    assert (origin.x, origin.y, origin.z) == pytest.approx((200.0, 400.0 * math.sin(math.radians(60)), 0.0))
    first = model.leg_origin(0)
    assert (first.x, first.y, first.z) == pytest.approx((400.0, 0.0, 0.0))


@pytest.mark.parametrize("leg", [-1, NUM_LEGS])
def test_leg_origin_unknown_leg(model, leg):
    assert model.leg_origin(leg) == Point3D(0.0, 0.0, 0.0)


def test_joint_angles_iterate_in_order():
    assert list(JointAngles(1.0, 2.0, 3.0)) == [1.0, 2.0, 3.0]