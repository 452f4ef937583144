"""Shared fixtures for the svgedit test suite."""
from __future__ import annotations

import os
import sys

import pytest

sys.path.insert(0, os.path.join(os.path.dirname(__file__), ".."))

import settings as settings_module
from document import SvgDocument
from settings import SettingsManager


SAMPLE_SVG = """\
<svg xmlns="http://www.w3.org/2000/svg" xmlns:xlink="http://www.w3.org/1999/xlink" width="400" height="300">
  <defs>
    <linearGradient id="grad"><stop offset="0" stop-color="red"/></linearGradient>
  </defs>
  <rect id="r1" x="10" y="20" width="100" height="50" fill="url(#grad)"/>
  <circle id="c1" cx="200" cy="100" r="25"/>
  <ellipse id="e1" cx="50" cy="200" rx="30" ry="15"/>
  <line id="l1" x1="0" y1="0" x2="40" y2="30" stroke="black"/>
  <text id="t1" x="5" y="280">Hello <tspan>world</tspan></text>
  <g id="g1" transform="translate(300, 200)">
    <path d="M0 0 L10 10"/>
  </g>
</svg>
"""


@pytest.fixture(autouse=True)
def isolated_settings(tmp_path, monkeypatch):
    """Point the global settings at an empty temporary directory."""
    manager = SettingsManager(settings_dir=tmp_path / "config")
    monkeypatch.setattr(settings_module, "_settings_manager", manager)
    yield manager


@pytest.fixture()
def doc():
    return SvgDocument.from_string(SAMPLE_SVG)


@pytest.fixture()
def rect(doc):
    return doc.find_by_id("r1")
