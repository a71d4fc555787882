from __future__ import annotations

import json
import logging
from abc import ABC, abstractmethod
from pathlib import Path
from typing import IO, Iterable, Iterator, List, Optional

from posecheck import PoseCheckError
from posecheck.config import AppConfig, SourceConfig, get_config
from posecheck.skeleton.types import SkeletonFrame


class SourceNotRunningError(PoseCheckError):
	"""read() was called on a source that has not been started."""


class SkeletonSource(ABC):
	"""
	Skeleton frame source interface.

	A source is an owned resource: whoever creates it starts it, reads from
	it on one thread, and stops it. read() returns None once the source is
	exhausted.
	"""

	def __init__(self) -> None:
		self._running = False

	@abstractmethod
	def name(self) -> str: ...

	@abstractmethod
	def _open(self) -> None: ...

	@abstractmethod
	def _close(self) -> None: ...

	@abstractmethod
	def _next_frame(self) -> Optional[SkeletonFrame]: ...

	@property
	def is_running(self) -> bool:
		return self._running

	def start(self) -> None:
		if self._running:
			return
		self._open()
		self._running = True
		logging.info("[Source] %s started", self.name())

	def stop(self) -> None:
		if not self._running:
			return
		self._running = False
		self._close()
		logging.info("[Source] %s stopped", self.name())

	def read(self) -> Optional[SkeletonFrame]:
		if not self._running:
			raise SourceNotRunningError(f"{self.name()} is not running")
		return self._next_frame()

	def frames(self) -> Iterator[SkeletonFrame]:
		while True:
			fr = self.read()
			if fr is None:
				return
			yield fr

	def __enter__(self) -> "SkeletonSource":
		self.start()
		return self

	def __exit__(self, *exc) -> None:
		self.stop()


class MemorySkeletonSource(SkeletonSource):
	def __init__(self, frames: Iterable[SkeletonFrame], loop: bool = False) -> None:
		super().__init__()
		self._frames: List[SkeletonFrame] = list(frames)
		self._loop = bool(loop)
		self._idx = 0

	def name(self) -> str:
		return "memory"

	def _open(self) -> None:
		self._idx = 0

	def _close(self) -> None:
		pass

	def _next_frame(self) -> Optional[SkeletonFrame]:
		if self._idx >= len(self._frames):
			if not self._loop or not self._frames:
				return None
			self._idx = 0
		fr = self._frames[self._idx]
		self._idx += 1
		return fr


class ReplaySkeletonSource(SkeletonSource):
	"""
	Replays a recording: a JSON-lines file with one SkeletonFrame per line.

	Blank lines are ignored. Lines that do not parse are logged and skipped so
	one bad frame does not end the replay.
	"""

	def __init__(self, path: str | Path, loop: bool = False) -> None:
		super().__init__()
		self.path = Path(path).expanduser()
		self._loop = bool(loop)
		self._fh: Optional[IO[str]] = None
		self._line_no = 0
		self.skipped = 0

	def name(self) -> str:
		return "replay"

	def _open(self) -> None:
		if not self.path.exists():
			raise FileNotFoundError(f"recording not found: {self.path}")
		self._fh = open(self.path, "r", encoding="utf-8", errors="replace")
		self._line_no = 0
		self.skipped = 0

	def _close(self) -> None:
		if self._fh is not None:
			self._fh.close()
			self._fh = None

	def _next_frame(self) -> Optional[SkeletonFrame]:
		assert self._fh is not None
		rewound = False
		while True:
			line = self._fh.readline()
			if not line:
				# Rewind at most once per call so an all-bad file can't spin forever.
				if not self._loop or rewound:
					return None
				self._fh.seek(0)
				self._line_no = 0
				rewound = True
				continue
			self._line_no += 1
			line = line.strip()
			if not line:
				continue
			try:
				return SkeletonFrame.from_dict(json.loads(line))
			except (ValueError, TypeError, OverflowError) as e:
				self.skipped += 1
				logging.warning("[Replay] %s:%d skipped: %s", self.path.name, self._line_no, e)


def write_recording(frames: Iterable[SkeletonFrame], path: str | Path) -> int:
	"""Write frames in the replay format. Returns the number of frames written."""
	n = 0
	with open(Path(path).expanduser(), "w", encoding="utf-8") as f:
		for fr in frames:
			f.write(json.dumps(fr.to_dict(), separators=(",", ":")))
			f.write("\n")
			n += 1
	return n


def get_skeleton_source(cfg: Optional[AppConfig] = None, *, backend_override: Optional[str] = None) -> Optional[SkeletonSource]:
	cfg = cfg or get_config()
	src: SourceConfig = cfg.source
	backend = (backend_override or src.backend or "none").strip().lower()
	if backend in ("none", "off", ""):
		return None
	if backend == "replay":
		if not src.replay_path:
			raise ValueError("source.replay_path is required for the replay backend")
		return ReplaySkeletonSource(src.replay_path, loop=src.loop)
	raise ValueError(f"unknown skeleton source backend: {backend!r}")
