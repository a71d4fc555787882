from __future__ import annotations

from typing import Dict, List, Tuple

from posecheck.skeleton.types import JointType as J


Bone = Tuple[J, J]


# Draw order: torso, arms, left leg, right leg.
TORSO_BONES: List[Bone] = [
	(J.HEAD, J.SHOULDER_CENTER),
	(J.SHOULDER_CENTER, J.SHOULDER_LEFT),
	(J.SHOULDER_CENTER, J.SHOULDER_RIGHT),
	(J.SHOULDER_CENTER, J.SPINE),
	(J.SPINE, J.HIP_CENTER),
	(J.HIP_CENTER, J.HIP_LEFT),
	(J.HIP_CENTER, J.HIP_RIGHT),
]

ARM_BONES: List[Bone] = [
	(J.SHOULDER_LEFT, J.ELBOW_LEFT),
	(J.ELBOW_LEFT, J.WRIST_LEFT),
	(J.WRIST_LEFT, J.HAND_LEFT),
	(J.SHOULDER_RIGHT, J.ELBOW_RIGHT),
	(J.ELBOW_RIGHT, J.WRIST_RIGHT),
	(J.WRIST_RIGHT, J.HAND_RIGHT),
]

LEG_SEGMENTS: Dict[str, List[Bone]] = {
	"left": [
		(J.HIP_LEFT, J.KNEE_LEFT),
		(J.KNEE_LEFT, J.ANKLE_LEFT),
		(J.ANKLE_LEFT, J.FOOT_LEFT),
	],
	"right": [
		(J.HIP_RIGHT, J.KNEE_RIGHT),
		(J.KNEE_RIGHT, J.ANKLE_RIGHT),
		(J.ANKLE_RIGHT, J.FOOT_RIGHT),
	],
}

ANKLES: Dict[str, J] = {"left": J.ANKLE_LEFT, "right": J.ANKLE_RIGHT}

BONES: List[Bone] = TORSO_BONES + ARM_BONES + LEG_SEGMENTS["left"] + LEG_SEGMENTS["right"]


def normalize_leg(leg: str) -> str:
	v = str(leg or "").strip().lower()
	if v in ("l", "left"):
		return "left"
	if v in ("r", "right"):
		return "right"
	raise ValueError(f"leg must be 'left' or 'right', got {leg!r}")


def other_leg(leg: str) -> str:
	return "right" if normalize_leg(leg) == "left" else "left"
