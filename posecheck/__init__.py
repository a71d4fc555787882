"""
posecheck application package.

Skeleton model, leg-raise evaluator, render planning and the frame session
used by both the CLI and the FastAPI server.
"""

from pathlib import Path


class PoseCheckError(Exception):
	"""Base class for errors raised by posecheck."""


def _read_version() -> str:
	try:
		vf = Path(__file__).resolve().parents[1] / "VERSION"
		if vf.exists():
			val = vf.read_text(encoding="utf-8").strip()
			if val:
				return val
	except OSError:
		pass
	return "0.1.0"


__version__ = _read_version()
