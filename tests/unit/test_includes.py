"""Tests for include expansion."""

from __future__ import annotations

from typing import Dict

import pytest
from jinja2 import nodes

from templayer.exceptions import ConfigurationError, CycleError, TemplateNotFoundError
from templayer.includes import IncludeProcessor
from templayer.loaders import TemplateSourceReader
from templayer.runtime import TemplateRuntime


def make_processor(loader) -> IncludeProcessor:
    runtime = TemplateRuntime()
    reader = TemplateSourceReader(runtime.environment, loader=loader)
    return IncludeProcessor(runtime, reader)


class TestExpand:
    def test_include_is_replaced_by_fragment_text(self, counting_loader) -> None:
        loader = counting_loader({"nav.html": "<nav>{{ title }}</nav>"})
        processor = make_processor(loader)

        result = processor.expand('<body>{{ include("nav.html") }}</body>', "page.html")

        assert result.content == "<body><nav>{{ title }}</nav></body>"
        assert result.blocks == {}

    def test_nested_includes_are_expanded(self, counting_loader) -> None:
        loader = counting_loader(
            {
                "partial.html": '<header>{{ include("nav.html") }}</header>',
                "nav.html": "<nav>{% block nav_extra %}{% endblock %}</nav>",
            }
        )
        processor = make_processor(loader)

        result = processor.expand('{{ include("partial.html") }}', "layout.html")

        assert result.content == "<header><nav>{% block nav_extra %}{% endblock %}</nav></header>"
        assert set(result.blocks) == {"nav_extra"}

    def test_blocks_declared_at_current_level_are_collected(self, counting_loader) -> None:
        processor = make_processor(counting_loader({"f.html": "{% block a %}A{% endblock %}"}))

        result = processor.expand('{{ include("f.html") }}{% block b %}B{% endblock %}', "page.html")

        assert set(result.blocks) == {"a", "b"}

    def test_current_level_block_beats_included_block(self, counting_loader) -> None:
        processor = make_processor(counting_loader({"f.html": "{% block a %}included{% endblock %}"}))

        result = processor.expand('{% block a %}direct{% endblock %}{{ include("f.html") }}', "page.html")

        texts = [n.data for n in result.blocks["a"].find_all(nodes.TemplateData)]
        assert texts == ["direct"]

    def test_fragment_is_spliced_into_enclosing_block(self, counting_loader) -> None:
        processor = make_processor(counting_loader({"f.html": "<b>{% block inner %}I{% endblock %}</b>"}))

        result = processor.expand('{% block outer %}[{{ include("f.html") }}]{% endblock %}', "page.html")

        assert set(result.blocks) == {"outer", "inner"}
        outer = result.blocks["outer"]
        assert [b.name for b in outer.find_all(nodes.Block)] == ["inner"]
        assert [n.data for n in outer.find_all(nodes.TemplateData)] == ["[", "<b>", "I", "</b>", "]"]

    def test_repeated_include_is_read_once(self, counting_loader) -> None:
        loader = counting_loader({"item.html": "<li></li>"})
        processor = make_processor(loader)

        result = processor.expand('{{ include("item.html") }}{{ include("item.html") }}', "list.html")

        assert result.content == "<li></li><li></li>"
        assert loader.reads == {"item.html": 1}

    def test_cached_result_is_reused_across_includers(self, counting_loader) -> None:
        loader = counting_loader({"nav.html": "<nav/>"})
        processor = make_processor(loader)

        processor.expand('{{ include("nav.html") }}', "a.html")
        processor.expand('{{ include("nav.html") }}', "b.html")

        assert loader.reads == {"nav.html": 1}
        assert "nav.html" in processor.cache

    def test_clear_drops_cache(self, counting_loader) -> None:
        loader = counting_loader({"nav.html": "<nav/>"})
        processor = make_processor(loader)
        processor.expand('{{ include("nav.html") }}', "a.html")

        processor.clear()
        processor.expand('{{ include("nav.html") }}', "a.html")

        assert loader.reads == {"nav.html": 2}


class TestErrors:
    def test_missing_target_names_includer(self, counting_loader) -> None:
        processor = make_processor(counting_loader({}))

        with pytest.raises(TemplateNotFoundError) as exc_info:
            processor.expand('{{ include("missing.html") }}', "page.html")

        assert exc_info.value.name == "missing.html"
        assert exc_info.value.referenced_by == "page.html"
        assert "page.html" in str(exc_info.value)

    def test_self_include_is_a_cycle(self, counting_loader) -> None:
        templates: Dict[str, str] = {"x.html": '{{ include("x.html") }}'}
        processor = make_processor(counting_loader(templates))

        with pytest.raises(CycleError) as exc_info:
            processor.expand(templates["x.html"], "x.html")

        assert exc_info.value.chain == ("x.html", "x.html")

    def test_indirect_include_cycle(self, counting_loader) -> None:
        templates = {
            "a.html": '{{ include("b.html") }}',
            "b.html": '{{ include("a.html") }}',
        }
        processor = make_processor(counting_loader(templates))

        with pytest.raises(CycleError) as exc_info:
            processor.expand(templates["a.html"], "a.html")

        assert exc_info.value.chain == ("a.html", "b.html", "a.html")
        assert exc_info.value.relation == "include"

    def test_including_an_extending_template_is_rejected(self, counting_loader) -> None:
        processor = make_processor(counting_loader({"child.html": '{{ extend("base.html") }}'}))

        with pytest.raises(ConfigurationError, match="declares extend"):
            processor.expand('{{ include("child.html") }}', "page.html")

    def test_known_child_cannot_be_included_from_cache(self, counting_loader) -> None:
        processor = make_processor(counting_loader({}))
        processor.expand("{% block body %}{% endblock %}", "child.html", extends="base.html")

        with pytest.raises(ConfigurationError, match="declares extend"):
            processor.expand('{{ include("child.html") }}', "page.html")
