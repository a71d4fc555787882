from __future__ import annotations

import time
from typing import Any, Callable, Dict, Optional

from posecheck.skeleton.evaluator import AngleStatus, LegRaiseEvaluator
from posecheck.skeleton.render_plan import FramePlan, RenderPalette, plan_frame
from posecheck.skeleton.source import SkeletonSource
from posecheck.skeleton.types import SkeletonFrame


class PoseSession:
	"""
	Single-threaded frame loop: source -> evaluator -> render plan.

	The session owns its source: start()/stop() (or the context manager)
	bring the sensor up and down. Every frame is evaluated once per tracked
	skeleton and turned into one FramePlan; nothing is carried from one frame
	to the next except the counters reported by stats().

	`logger` is an optional callable taking one string, as used elsewhere for
	pushing diagnostics to clients.
	"""

	def __init__(
		self,
		source: Optional[SkeletonSource],
		evaluator: Optional[LegRaiseEvaluator] = None,
		palette: Optional[RenderPalette] = None,
		logger: Optional[Callable[[str], None]] = None,
	) -> None:
		self.source = source
		self.evaluator = evaluator or LegRaiseEvaluator()
		self.palette = palette or RenderPalette.from_config()
		self.logger: Callable[[str], None] = logger or (lambda _msg: None)
		self.reset_stats()

	def reset_stats(self) -> None:
		self.frames = 0
		self.skeletons_evaluated = 0
		self.satisfied = 0
		self.status_counts: Dict[str, int] = {s.value: 0 for s in AngleStatus}
		self.started_at: Optional[float] = None
		self._last_status: Optional[AngleStatus] = None

	@property
	def is_running(self) -> bool:
		return bool(self.source is not None and self.source.is_running)

	def start(self) -> None:
		if self.source is None:
			raise RuntimeError("session has no skeleton source")
		self.source.start()
		self.started_at = time.time()
		self.logger(f"[Session] started ({self.source.name()})")

	def stop(self) -> None:
		if self.source is None or not self.source.is_running:
			return
		self.source.stop()
		self.logger(f"[Session] stopped after {self.frames} frame(s)")

	def __enter__(self) -> "PoseSession":
		self.start()
		return self

	def __exit__(self, *exc) -> None:
		self.stop()

	def set_evaluator(self, evaluator: LegRaiseEvaluator) -> None:
		self.evaluator = evaluator
		self.logger(f"[Session] exercise updated: {evaluator.settings()}")

	def process(self, frame: SkeletonFrame) -> FramePlan:
		plan = plan_frame(frame, self.evaluator, self.palette)
		self.frames += 1
		for check in plan.checks:
			self.skeletons_evaluated += 1
			self.status_counts[check.status.value] += 1
			if check.satisfied:
				self.satisfied += 1
			if check.status is not self._last_status:
				# Transitions only.
				angle = f"{check.angle_deg:.1f}°" if check.angle_deg is not None else "n/a"
				self.logger(f"[Session] frame {frame.frame_number}: {check.status.value} (angle {angle})")
				self._last_status = check.status
		return plan

	def step(self) -> Optional[FramePlan]:
		if self.source is None:
			raise RuntimeError("session has no skeleton source")
		frame = self.source.read()
		if frame is None:
			return None
		return self.process(frame)

	def run(self, on_plan: Callable[[FramePlan], Any], max_frames: Optional[int] = None) -> int:
		"""Process frames until the source runs dry (or max_frames). Returns frames processed."""
		n = 0
		while max_frames is None or n < max_frames:
			plan = self.step()
			if plan is None:
				break
			on_plan(plan)
			n += 1
		return n

	def stats(self) -> Dict[str, Any]:
		return {
			"running": self.is_running,
			"source": self.source.name() if self.source is not None else None,
			"frames": self.frames,
			"skeletons_evaluated": self.skeletons_evaluated,
			"satisfied": self.satisfied,
			"status_counts": dict(self.status_counts),
			"started_at": self.started_at,
		}
