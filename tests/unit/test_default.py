"""Tests for the optional process-wide engine."""

from __future__ import annotations

import io
from typing import Iterator

import pytest
from jinja2 import DictLoader

from templayer import default
from templayer.exceptions import EngineNotLoadedError, TemplateNotFoundError


@pytest.fixture(autouse=True)
def clean_default() -> Iterator[None]:
    default.reset()
    yield
    default.reset()


def test_nothing_is_loaded_at_import() -> None:
    with pytest.raises(EngineNotLoadedError):
        default.get_engine()
    with pytest.raises(EngineNotLoadedError):
        default.render("a.html")


def test_load_then_render() -> None:
    engine = default.load(loader=DictLoader({"a.html": "Hi {{ name }}"}))

    assert default.get_engine() is engine
    assert default.render("a.html", {"name": "Ann"}) == "Hi Ann"
    assert default.lookup("a.html").name == "a.html"

    sink = io.StringIO()
    default.render_to(sink, "a.html", name="Bo")
    assert sink.getvalue() == "Hi Bo"


def test_load_replaces_previous_engine() -> None:
    default.load(loader=DictLoader({"a.html": "a"}))
    default.load(loader=DictLoader({"b.html": "b"}))

    assert default.render("b.html") == "b"
    with pytest.raises(TemplateNotFoundError):
        default.render("a.html")


def test_failed_load_keeps_previous_engine() -> None:
    engine = default.load(loader=DictLoader({"a.html": "a"}))
    with pytest.raises(TemplateNotFoundError):
        default.load(loader=DictLoader({"b.html": '{{ extend("x.html") }}'}))
    assert default.get_engine() is engine
