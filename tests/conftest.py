from typing import Callable

import pytest

from poses import LEFT_RAISED_40, build_skeleton
from posecheck.config import reset_config
from posecheck.skeleton.types import Skeleton


@pytest.fixture
def make_skeleton() -> Callable[..., Skeleton]:
	return build_skeleton


@pytest.fixture
def raised_skeleton() -> Skeleton:
	return build_skeleton(LEFT_RAISED_40)


@pytest.fixture(autouse=True)
def _isolated_config(monkeypatch, tmp_path):
	# Never pick up a developer's config.json.
	monkeypatch.setenv("POSECHECK_CONFIG", str(tmp_path / "missing-config.json"))
	reset_config()
	yield
	reset_config()
