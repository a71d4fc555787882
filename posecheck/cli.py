from __future__ import annotations

import argparse
import json
import logging
import sys
from dataclasses import replace
from typing import List, Optional

from posecheck.config import ExerciseConfig, get_config, set_config_path
from posecheck.session import PoseSession
from posecheck.skeleton.evaluator import LegRaiseEvaluator
from posecheck.skeleton.render_plan import FramePlan, RenderPalette
from posecheck.skeleton.source import ReplaySkeletonSource


def _build_parser() -> argparse.ArgumentParser:
	p = argparse.ArgumentParser("posecheck", description="Check a leg-raise exercise over a recorded skeleton stream.")
	p.add_argument("input", help="Recording: JSON lines, one skeleton frame per line.")
	p.add_argument("--config", help="Path to config.json (defaults to the repo config).")
	p.add_argument("--angle", type=float, help="Target leg angle from vertical, degrees (0-90).")
	p.add_argument("--tolerance", type=float, help="Allowed error in degrees (default: 5%% of the angle).")
	p.add_argument("--leg", choices=["left", "right"], help="Raised leg.")
	p.add_argument("--max-depth-offset", type=float, help="Max z offset between ankles in metres; negative disables.")
	p.add_argument("--json", action="store_true", help="Print full frame plans as JSON lines.")
	p.add_argument("--debug", action="store_true", help="Enable debug logging.")
	return p


def _exercise_from_args(base: ExerciseConfig, args: argparse.Namespace) -> ExerciseConfig:
	cfg = base
	if args.angle is not None:
		# A new angle without a tolerance gets the default 5% again.
		cfg = replace(cfg, target_angle_deg=args.angle, tolerance_deg=None)
	if args.tolerance is not None:
		cfg = replace(cfg, tolerance_deg=args.tolerance)
	if args.leg:
		cfg = replace(cfg, leg=args.leg)
	if args.max_depth_offset is not None:
		cfg = replace(cfg, max_depth_offset_m=args.max_depth_offset if args.max_depth_offset >= 0 else None)
	return cfg


def _summary_line(plan: FramePlan) -> str:
	parts = []
	for sp in plan.skeletons:
		if sp.check is None:
			parts.append(f"#{sp.tracking_id}:{sp.tracking_state.value}")
			continue
		angle = f"{sp.check.angle_deg:.1f}" if sp.check.angle_deg is not None else "-"
		parts.append(f"#{sp.tracking_id}:{sp.check.status.value}@{angle}")
	return f"frame {plan.frame_number}: " + (" ".join(parts) if parts else "no skeletons")


def main(argv: Optional[List[str]] = None) -> int:
	args = _build_parser().parse_args(argv)

	if args.debug:
		logging.basicConfig(level=logging.DEBUG, format="%(levelname)s:%(name)s:%(message)s")
	else:
		logging.basicConfig(level=logging.INFO, format="%(levelname)s:%(name)s:%(message)s")

	if args.config:
		set_config_path(args.config)
	cfg = get_config()

	try:
		evaluator = LegRaiseEvaluator.from_config(_exercise_from_args(cfg.exercise, args))
	except ValueError as e:
		print(f"posecheck: {e}", file=sys.stderr)
		return 2

	source = ReplaySkeletonSource(args.input)
	session = PoseSession(source, evaluator, RenderPalette.from_config(cfg.render), logger=logging.debug)

	def _emit(plan: FramePlan) -> None:
		if args.json:
			print(json.dumps(plan.to_dict(), separators=(",", ":")))
		else:
			print(_summary_line(plan))

	try:
		with session:
			session.run(_emit)
	except FileNotFoundError as e:
		print(f"posecheck: {e}", file=sys.stderr)
		return 2
	except KeyboardInterrupt:
		print("\nInterrupted by user.", file=sys.stderr)
		return 130

	st = session.stats()
	if source.skipped:
		logging.warning("[Replay] %d malformed line(s) skipped", source.skipped)
	print(
		f"{st['frames']} frame(s), {st['skeletons_evaluated']} evaluation(s), "
		f"{st['satisfied']} satisfied ({json.dumps(evaluator.settings())})",
		file=sys.stderr,
	)
	return 0


if __name__ == "__main__":
	sys.exit(main())
