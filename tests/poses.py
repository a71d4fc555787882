"""Reference poses and a skeleton builder shared by the tests."""
from typing import Dict, Optional, Tuple, Union

from posecheck.skeleton.types import (
	Joint,
	JointTrackingState,
	JointType as J,
	Skeleton,
	SkeletonPoint,
	SkeletonTrackingState,
)


# Upright, both feet down, facing the sensor 2.5 m away.
STANDING: Dict[J, Tuple[float, float, float]] = {
	J.HIP_CENTER: (0.0, 0.0, 2.5),
	J.SPINE: (0.0, 0.2, 2.5),
	J.SHOULDER_CENTER: (0.0, 0.5, 2.5),
	J.HEAD: (0.0, 0.7, 2.5),
	J.SHOULDER_LEFT: (0.2, 0.45, 2.5),
	J.ELBOW_LEFT: (0.25, 0.2, 2.5),
	J.WRIST_LEFT: (0.27, 0.0, 2.5),
	J.HAND_LEFT: (0.28, -0.05, 2.5),
	J.SHOULDER_RIGHT: (-0.2, 0.45, 2.5),
	J.ELBOW_RIGHT: (-0.25, 0.2, 2.5),
	J.WRIST_RIGHT: (-0.27, 0.0, 2.5),
	J.HAND_RIGHT: (-0.28, -0.05, 2.5),
	J.HIP_LEFT: (0.1, -0.05, 2.5),
	J.KNEE_LEFT: (0.1, -0.45, 2.5),
	J.ANKLE_LEFT: (0.1, -0.85, 2.5),
	J.FOOT_LEFT: (0.1, -0.9, 2.45),
	J.HIP_RIGHT: (-0.1, -0.05, 2.5),
	J.KNEE_RIGHT: (-0.1, -0.45, 2.5),
	J.ANKLE_RIGHT: (-0.1, -0.85, 2.5),
	J.FOOT_RIGHT: (-0.1, -0.9, 2.45),
}

# Left ankle raised sideways to ~40 degrees from vertical (atan(0.671 / 0.8)).
LEFT_RAISED_40: Dict[J, Tuple[float, float, float]] = {
	J.KNEE_LEFT: (0.34, -0.4, 2.5),
	J.ANKLE_LEFT: (0.671, -0.8, 2.5),
	J.FOOT_LEFT: (0.75, -0.85, 2.45),
}

# Same angle in x/y, but the ankle swung 0.2 m towards the sensor.
LEFT_RAISED_AHEAD: Dict[J, Tuple[float, float, float]] = {
	J.KNEE_LEFT: (0.34, -0.4, 2.4),
	J.ANKLE_LEFT: (0.671, -0.8, 2.3),
	J.FOOT_LEFT: (0.75, -0.85, 2.25),
}

JointSpec = Union[Tuple[float, float, float], Tuple[Tuple[float, float, float], JointTrackingState], None]


def build_skeleton(
	overrides: Optional[Dict[J, JointSpec]] = None,
	base: Optional[Dict[J, Tuple[float, float, float]]] = None,
	tracking_state: SkeletonTrackingState = SkeletonTrackingState.TRACKED,
	**kwargs,
) -> Skeleton:
	"""
	Skeleton from `base` (STANDING by default) with per-joint overrides:
	a position tuple, a (position, state) pair, or None to drop the joint.
	"""
	specs: Dict[J, JointSpec] = dict(STANDING if base is None else base)
	specs.update(overrides or {})
	joints: Dict[J, Joint] = {}
	for jt, spec in specs.items():
		if spec is None:
			continue
		if len(spec) == 2:
			pos, state = spec
		else:
			pos, state = spec, JointTrackingState.TRACKED
		joints[jt] = Joint(jt, SkeletonPoint(*pos), state)
	return Skeleton(joints=joints, tracking_state=tracking_state, **kwargs)
