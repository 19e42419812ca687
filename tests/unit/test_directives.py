"""Tests for extend/include directive scanning."""

from __future__ import annotations

import logging

import pytest

from templayer.directives import DirectiveScanner, replace_spans
from templayer.exceptions import ConfigurationError, TemplateSyntaxError
from templayer.runtime import TemplateRuntime
from templayer.types import DirectiveKind


@pytest.fixture
def scanner() -> DirectiveScanner:
    return DirectiveScanner(TemplateRuntime())


class TestScan:
    def test_plain_template_has_no_parent(self, scanner: DirectiveScanner) -> None:
        tree = scanner.scan("a.html", "<p>{{ title }}</p>")
        assert tree.extends is None
        assert tree.includes == ()
        assert tree.content == "<p>{{ title }}</p>"

    def test_extend_is_recorded_and_stripped(self, scanner: DirectiveScanner) -> None:
        source = '{{ extend("layouts/base.html") }}{% block body %}hi{% endblock %}'
        tree = scanner.scan("page.html", source)
        assert tree.extends == "layouts/base.html"
        assert "extend" not in tree.content
        assert tree.content == "{% block body %}hi{% endblock %}"

    def test_first_extend_wins_and_others_are_stripped(
        self, scanner: DirectiveScanner, caplog: pytest.LogCaptureFixture
    ) -> None:
        source = '{{ extend("a.html") }}\n{{ extend("b.html") }}\nbody'
        with caplog.at_level(logging.WARNING, logger="templayer.directives"):
            tree = scanner.scan("page.html", source)
        assert tree.extends == "a.html"
        assert "extend" not in tree.content
        assert any("b.html" in r.getMessage() for r in caplog.records)

    def test_includes_listed_in_order(self, scanner: DirectiveScanner) -> None:
        source = '{{ include("b.html") }} and {{ include("a.html", context) }}'
        tree = scanner.scan("page.html", source)
        assert tree.includes == ("b.html", "a.html")
        # Includes stay in the text; expansion replaces them later.
        assert tree.content == source

    def test_names_are_normalized(self, scanner: DirectiveScanner) -> None:
        tree = scanner.scan("page.html", '{{ extend("/layouts/./base.html") }}')
        assert tree.extends == "layouts/base.html"


class TestDirectives:
    def test_spans_cover_the_whole_tag(self, scanner: DirectiveScanner) -> None:
        source = 'x{{- include("n.html") -}}y'
        (directive,) = scanner.directives("p.html", source)
        assert directive.kind is DirectiveKind.INCLUDE
        assert source[directive.start:directive.end] == '{{- include("n.html") -}}'
        assert directive.has_context is False

    def test_context_argument_is_flagged(self, scanner: DirectiveScanner) -> None:
        (directive,) = scanner.directives("p.html", '{{ include("n.html", context) }}')
        assert directive.has_context is True

    def test_directives_in_comments_and_raw_are_ignored(self, scanner: DirectiveScanner) -> None:
        source = '{# {{ include("a.html") }} #}{% raw %}{{ extend("b.html") }}{% endraw %}'
        assert scanner.directives("p.html", source) == []

    def test_line_numbers(self, scanner: DirectiveScanner) -> None:
        source = 'one\ntwo\n{{ include("n.html") }}'
        (directive,) = scanner.directives("p.html", source)
        assert directive.lineno == 3

    @pytest.mark.parametrize(
        "source",
        [
            '{{ extend(name) }}',
            '{{ include(name) }}',
            '{{ extend("a.html", "b.html") }}',
            '{{ include() }}',
            '{{ include("a.html", context, 1) }}',
            '{{ include(name="a.html") }}',
        ],
    )
    def test_malformed_arguments(self, scanner: DirectiveScanner, source: str) -> None:
        with pytest.raises(ConfigurationError):
            scanner.directives("p.html", source)

    def test_extend_must_be_top_level(self, scanner: DirectiveScanner) -> None:
        with pytest.raises(ConfigurationError, match="top-level"):
            scanner.directives("p.html", '{% if x %}{{ extend("a.html") }}{% endif %}')

    def test_directive_inside_expression_is_rejected(self, scanner: DirectiveScanner) -> None:
        with pytest.raises(ConfigurationError, match="standalone"):
            scanner.directives("p.html", '{{ include("a.html") | upper }}')

    def test_directive_in_statement_tag_is_rejected(self, scanner: DirectiveScanner) -> None:
        source = '{% for i in items if include("a.html") %}{% endfor %}{{ include("b.html") }}'
        with pytest.raises(ConfigurationError, match="standalone"):
            scanner.directives("p.html", source)

    def test_spans_pair_with_their_own_calls(self, scanner: DirectiveScanner) -> None:
        source = (
            '{% for i in items %}\n{{ include("a.html") }}\n'
            '{% else %}\n{{ include("b.html") }}\n{% endfor %}\n'
            '{% if x %}{{ include("c.html") }}{% endif %}{{ include("d.html") }}'
        )
        found = scanner.directives("p.html", source)

        assert [d.target for d in found] == ["a.html", "b.html", "c.html", "d.html"]
        for directive in found:
            assert directive.target in source[directive.start:directive.end]

    def test_unparseable_source(self, scanner: DirectiveScanner) -> None:
        with pytest.raises(TemplateSyntaxError) as exc_info:
            scanner.directives("broken.html", "{% if %}")
        assert exc_info.value.name == "broken.html"


def test_replace_spans_applies_in_order() -> None:
    assert replace_spans("abcdef", [(4, 5, "E"), (0, 1, "A")]) == "AbcdEf"
    assert replace_spans("abc", []) == "abc"
