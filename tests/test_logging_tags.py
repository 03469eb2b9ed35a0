"""Tests for the tick's console output and its QUIET/VERBOSE modes."""

from __future__ import annotations

import contextlib
import io
import random

import pytest

from conftest import PinnedRules, build_world

from lifesim.config import Config
from lifesim.logging_utils import LOG_TAG_DETERMINISTIC, LOG_TAG_EVENT, LOG_TAG_SUCCESS, colored, Color
from lifesim.orchestrator import Orchestrator
from lifesim.persistence import InMemoryPersistence


async def _tick_output(monkeypatch, level: str) -> str:
    monkeypatch.setattr(Config, "LOG_LEVEL", level)
    monkeypatch.delenv("LIFESIM_VERBOSE", raising=False)
    monkeypatch.setenv("LIFESIM_NO_COLOR", "1")

    persistence = InMemoryPersistence()
    await persistence.save_world(build_world())
    orchestrator = Orchestrator(persistence=persistence, rules=PinnedRules(), rng=random.Random(1))

    buf = io.StringIO()
    with contextlib.redirect_stdout(buf):
        await orchestrator.run_yearly_tick(1)
    return buf.getvalue()


@pytest.mark.asyncio
async def test_one_line_per_pass(monkeypatch):
    out = await _tick_output(monkeypatch, "INFO")

    for label in ("Aging", "Development", "Births", "Schooling", "Employment", "Hierarchy", "Elections", "Relationships", "Performance"):
        assert f"{LOG_TAG_DETERMINISTIC} [{label}]" in out
    assert f"{LOG_TAG_SUCCESS} [Commit] world 1 now in 2026" in out
    assert LOG_TAG_EVENT not in out


@pytest.mark.asyncio
async def test_verbose_prints_events(monkeypatch):
    out = await _tick_output(monkeypatch, "VERBOSE")
    assert f"{LOG_TAG_EVENT} [Acme] Ada fills CEO" in out
    assert f"{LOG_TAG_EVENT} Election:" in out


@pytest.mark.asyncio
async def test_quiet_prints_no_pass_lines(monkeypatch):
    out = await _tick_output(monkeypatch, "QUIET")
    assert LOG_TAG_DETERMINISTIC not in out
    assert LOG_TAG_SUCCESS not in out


def test_no_color_env_disables_ansi(monkeypatch):
    monkeypatch.setenv("LIFESIM_NO_COLOR", "1")
    assert colored("plain", Color.RED) == "plain"
    monkeypatch.delenv("LIFESIM_NO_COLOR")
    assert colored("red", Color.RED).startswith("\033[91m")
