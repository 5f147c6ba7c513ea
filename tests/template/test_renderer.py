"""
Тесты рендерера.

Покрывают семантику всех вариантов узлов: текст, теги с экранированием
и без, секции (условие, повторение, запись), инвертированные секции,
включения, политики отсутствующих значений, отмену и параллельный рендер.
"""

import dataclasses
import logging
from concurrent.futures import ThreadPoolExecutor

import pytest

from amustache.config import MissingPolicy, RenderOptions
from amustache.errors import RenderCancelled, RenderError, TemplateSyntaxError
from amustache.template.context import RenderContext
from amustache.template.nodes import GlobalNode, SectionNode, TagNode, TemplateNode, TextNode
from amustache.template.parser import parse_template
from amustache.template.partials import MappingPartialResolver
from amustache.template.renderer import Renderer, render_tree
from amustache.text import AttributedText, Run


def render(source, data=None, partials=None, **options):
    resolver = MappingPartialResolver(partials) if partials is not None else None
    return Renderer(resolver, RenderOptions(**options)).render(parse_template(source), data)


def text(source, data=None, partials=None, **options):
    return render(source, data, partials, **options).plain


class TestTextAndTags:
    """Текст и подстановка переменных."""

    def test_identity_without_tags(self):
        """Шаблон без тегов выводится без изменений, вместе с атрибутами."""
        source = AttributedText.from_runs([("Hello ", {"b": True}), ("world", {"i": True})])

        assert render(source) == source

    def test_hi_ana(self):
        """Подставленный текст получает атрибуты места тега."""
        tree = GlobalNode(children=(
            TextNode(text=AttributedText("Hi ", {"font": "serif"})),
            TagNode(run=AttributedText("name", {"bold": True})),
            TextNode(text="!"),
        ))

        result = Renderer().render(tree, {"name": "Ana"})

        assert result.plain == "Hi Ana!"
        assert result.runs == (
            Run("Hi ", {"font": "serif"}),
            Run("Ana", {"bold": True}),
            Run("!", {}),
        )

    def test_html_escaping(self):
        value = "<a href=\"x\">&'"

        assert text("{{v}}", {"v": value}) == "&lt;a href=&quot;x&quot;&gt;&amp;&#39;"

    @pytest.mark.parametrize("source", ["{{{v}}}", "{{&v}}"])
    def test_unescaped(self, source):
        assert text(source, {"v": "<b>&</b>"}) == "<b>&</b>"

    def test_escape_none_and_xml(self):
        assert text("{{v}}", {"v": "<'>"}, escape="none") == "<'>"
        assert text("{{v}}", {"v": "<'>"}, escape="xml") == "&lt;&apos;&gt;"

    @pytest.mark.parametrize("value,expected", [
        (True, "true"),
        (False, "false"),
        (0, "0"),
        (3.5, "3.5"),
        (None, ""),
    ])
    def test_value_to_text(self, value, expected):
        assert text("{{v}}", {"v": value}) == expected

    def test_missing_name_lenient(self):
        """По умолчанию неизвестное имя дает пустую строку."""
        assert text("[{{nope}}]") == "[]"

    def test_missing_name_strict(self):
        with pytest.raises(RenderError) as exc:
            render("ok {{nope}}", missing_name=MissingPolicy.ERROR)

        assert exc.value.name == "nope"
        assert "Unresolved name 'nope'" in str(exc.value)

    def test_none_is_not_missing_in_strict_mode(self):
        assert text("[{{v}}]", {"v": None}, missing_name="error") == "[]"

    def test_comment_renders_nothing(self):
        assert text("a{{! hidden }}b") == "ab"

    def test_context_argument(self):
        ctx = RenderContext.root({"a": "outer"}).push({"b": "inner"})

        assert Renderer().render(parse_template("{{a}}/{{b}}"), ctx).plain == "outer/inner"


class TestAttributedValues:
    """Значения типа AttributedText."""

    def test_value_runs_layered_over_site(self):
        value = AttributedText.from_runs([("a<", {"i": True}), ("b", None)])
        tree = GlobalNode(children=(TagNode(run=AttributedText("v", {"bold": True})),))

        result = Renderer().render(tree, {"v": value})

        assert result.runs == (
            Run("a&lt;", {"bold": True, "i": True}),
            Run("b", {"bold": True}),
        )

    def test_value_attributes_win(self):
        value = AttributedText("x", {"bold": False})
        tree = GlobalNode(children=(TagNode(run=AttributedText("v", {"bold": True, "size": 12})),))

        result = Renderer().render(tree, {"v": value})

        assert result.runs == (Run("x", {"bold": False, "size": 12}),)

    def test_fragments_do_not_merge(self):
        """Соседние фрагменты с одинаковыми атрибутами остаются отдельными прогонами."""
        result = render("{{a}}{{b}}", {"a": "1", "b": "2"})

        assert [r.text for r in result.runs] == ["1", "2"]


class TestSections:
    """Секции и инвертированные секции."""

    @pytest.mark.parametrize("data", [{"v": []}, {"v": False}, {}, {"v": None}, {"v": ""}])
    def test_falsy_section_renders_nothing(self, data):
        assert text("{{#v}}X{{/v}}", data) == ""

    @pytest.mark.parametrize("n", [1, 2, 5])
    def test_n_fold_repetition(self, n):
        items = list(range(n))

        assert text("{{#items}}[{{.}}]{{/items}}", {"items": items}) == "".join(f"[{i}]" for i in items)

    @pytest.mark.parametrize("value", [[], [1], False, True, 0, "s", "", None, {}, {"k": 1}])
    def test_inverted_mutually_exclusive(self, value):
        """Выводится ровно одна из секций {{#v}} и {{^v}}."""
        out = text("{{#v}}A{{/v}}{{^v}}B{{/v}}", {"v": value})

        assert out in ("A", "B")

    def test_inverted_never_repeats(self):
        assert text("{{^v}}B{{/v}}", {"v": [1, 2, 3]}) == ""
        assert text("{{^v}}B{{/v}}", {}) == "B"

    def test_truthy_scalar_keeps_context(self):
        """Истинный скаляр не становится фреймом контекста."""
        assert text("{{#v}}({{v}}|{{w}}){{/v}}", {"v": "s", "w": "ww"}) == "(s|ww)"

    def test_zero_is_truthy(self):
        assert text("{{#n}}zero{{/n}}", {"n": 0}) == "zero"

    def test_record_is_pushed(self):
        assert text("{{#user}}{{name}}{{/user}}", {"user": {"name": "N"}, "name": "root"}) == "N"

    def test_parent_fallback(self):
        data = {
            "title": "T",
            "items": [{"name": "a"}, {"name": "b", "title": "own"}],
        }

        assert text("{{#items}}{{name}}-{{title}};{{/items}}", data) == "a-T;b-own;"

    def test_none_stops_fallback(self):
        data = {"a": "outer", "inner": {"a": None}}

        assert text("{{#inner}}[{{a}}]{{/inner}}", data) == "[]"

    def test_dotted_names(self):
        data = {"user": {"address": {"city": "Oslo"}}}

        assert text("{{user.address.city}}{{#user.address}}/{{city}}{{/user.address}}", data) == "Oslo/Oslo"

    def test_nested_iteration(self):
        data = {"rows": [{"cells": [1, 2]}, {"cells": [3]}]}

        out = text("{{#rows}}<{{#cells}}{{.}}{{/cells}}>{{/rows}}", data)

        assert out == "<12><3>"

    def test_missing_section_not_strict_error(self):
        """Строгий режим имен касается только тегов подстановки."""
        assert text("{{#nope}}x{{/nope}}{{^nope}}y{{/nope}}", missing_name="error") == "y"


class TestPartials:
    """Включения {{>name}}."""

    def test_partial_uses_current_context(self):
        partials = {"item": "- {{title}}\n"}

        out = text("{{#items}}{{> item}}{{/items}}", {"items": [{"title": "a"}, {"title": "b"}]}, partials)

        assert out == "- a\n- b\n"

    def test_recursive_partial_terminates(self):
        partials = {"node": "{{name}}({{#kids}}{{> node}}{{/kids}})"}
        data = {"name": "a", "kids": [{"name": "b", "kids": []}, {"name": "c", "kids": []}]}

        assert text("{{> node}}", data, partials) == "a(b()c())"

    def test_unbounded_recursion_hits_limit(self):
        """Без пустого kids поиск поднимается к родителю и рекурсия не кончается."""
        partials = {"node": "{{name}}({{#kids}}{{> node}}{{/kids}})"}
        data = {"name": "a", "kids": [{"name": "b"}]}

        with pytest.raises(RenderError) as exc:
            render("{{> node}}", data, partials, max_partial_depth=8)

        assert "exceeds maximum nesting depth 8" in str(exc.value)

    def test_depth_limit_boundary(self):
        partials = {"a": "A{{>b}}", "b": "B"}

        assert text("{{>a}}", None, partials, max_partial_depth=2) == "AB"
        with pytest.raises(RenderError):
            render("{{>a}}", None, partials, max_partial_depth=1)

    def test_missing_partial_lenient_logs_warning(self, caplog):
        with caplog.at_level(logging.WARNING, logger="amustache"):
            out = text("a{{> nope}}b", partials={})

        assert out == "ab"
        assert any("Unknown partial 'nope'" in r.getMessage() for r in caplog.records)
        # сообщение форматируется лениво
        assert any(r.args == ("nope",) for r in caplog.records)

    def test_missing_partial_without_resolver(self):
        assert text("a{{>x}}b") == "ab"

    def test_missing_partial_strict(self):
        with pytest.raises(RenderError) as exc:
            render("{{> nope}}", partials={}, missing_partial="error")

        assert exc.value.name == "nope"

    def test_resolver_failure_wrapped(self):
        class Exploding:
            def resolve(self, name):
                raise OSError("disk gone")

        with pytest.raises(RenderError) as exc:
            Renderer(Exploding()).render(parse_template("{{>p}}"))

        assert isinstance(exc.value.__cause__, OSError)
        assert "Partial resolver failed for 'p'" in str(exc.value)

    def test_partial_syntax_error_is_render_error(self):
        """Ошибка разбора включения во время рендера приходит как RenderError."""
        with pytest.raises(RenderError) as exc:
            render("{{>bad}}", partials={"bad": "{{#open}}"})

        assert exc.value.name == "bad"
        assert "failed to parse" in str(exc.value)
        assert isinstance(exc.value.__cause__, TemplateSyntaxError)
        assert exc.value.__cause__.template_name == "bad"

    def test_partial_keeps_own_attributes(self):
        partials = {"sig": AttributedText("--", {"dim": True})}

        result = render("x{{>sig}}", partials=partials)

        assert result.runs == (Run("x", {}), Run("--", {"dim": True}))


class TestRendererMachinery:
    """Диспетчеризация, отмена и потокобезопасность."""

    def test_unknown_node_type(self):
        @dataclasses.dataclass(frozen=True)
        class Alien(TemplateNode):
            pass

        with pytest.raises(TypeError):
            Renderer().render(GlobalNode(children=(Alien(),)))

    def test_cancel_before_first_node(self):
        with pytest.raises(RenderCancelled):
            Renderer().render(parse_template("a{{x}}"), {"x": 1}, cancel=lambda: True)

    def test_cancel_between_siblings(self):
        calls = []

        def cancel():
            calls.append(1)
            return len(calls) > 3

        tree = parse_template("{{#items}}{{.}}{{/items}}")

        with pytest.raises(RenderCancelled):
            Renderer().render(tree, {"items": list(range(10))}, cancel=cancel)

        assert len(calls) == 4

    def test_cancelled_is_render_error(self):
        assert issubclass(RenderCancelled, RenderError)

    def test_cancel_never_true(self):
        out = Renderer().render(parse_template("{{a}}{{b}}"), {"a": 1, "b": 2}, cancel=lambda: False)

        assert out.plain == "12"

    def test_failure_returns_nothing(self):
        """При ошибке частичный результат не возвращается."""
        renderer = Renderer(options=RenderOptions.strict())

        with pytest.raises(RenderError):
            renderer.render(parse_template("prefix {{missing}} suffix"))

    def test_deep_nesting_reports_depth(self):
        """Слишком глубокое дерево дает понятную RenderError, а не ошибку поиска имени."""
        depth = 5000
        node = TextNode(text="x")
        for i in range(depth):
            node = SectionNode(name=f"s{i}", children=(node,))
        tree = GlobalNode(children=(node,))

        with pytest.raises(RenderError) as exc:
            Renderer().render(tree, {f"s{i}": True for i in range(depth)})

        assert "nesting is too deep" in str(exc.value)
        assert isinstance(exc.value.__cause__, RecursionError)

    def test_moderate_nesting_renders(self):
        depth = 100
        source = "".join(f"{{{{#s{i}}}}}" for i in range(depth)) + "x" + "".join(
            f"{{{{/s{i}}}}}" for i in reversed(range(depth))
        )

        out = Renderer().render(parse_template(source), {f"s{i}": True for i in range(depth)})

        assert out.plain == "x"

    def test_concurrent_renders_share_tree(self):
        tree = parse_template("{{#items}}{{name}}:{{n}};{{/items}}")
        renderer = Renderer()

        def job(i):
            data = {"n": i, "items": [{"name": f"x{i}"}, {"name": f"y{i}"}]}
            return renderer.render(tree, data).plain

        with ThreadPoolExecutor(max_workers=8) as pool:
            results = list(pool.map(job, range(50)))

        assert results == [f"x{i}:{i};y{i}:{i};" for i in range(50)]

    def test_render_tree_helper(self):
        assert render_tree(parse_template("{{v}}"), {"v": "<"}, options=RenderOptions(escape="none")).plain == "<"
