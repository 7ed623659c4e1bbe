from __future__ import annotations

import pytest

from render_frame import RenderConfig


@pytest.fixture(scope="session")
def config480() -> RenderConfig:
    return RenderConfig.for_height(480)


@pytest.fixture(scope="session")
def config720() -> RenderConfig:
    return RenderConfig.for_height(720)
