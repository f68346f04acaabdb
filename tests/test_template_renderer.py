import pytest

from bizdocs.errors import DocumentError, RenderError
from bizdocs.templating.renderer import (
    MAX_PATH_DEPTH,
    MAX_SECTION_DEPTH,
    TemplateRenderer,
    lookup,
    render,
    validate,
)


def test_plain_variable_and_dotted_path():
    ctx = {"number": "Q-1", "company": {"name": "Acme", "address": {"city": "Springfield"}}}
    out = render("<h1>{{number}}</h1><p>{{company.name}}, {{ company.address.city }}</p>", ctx)
    assert out == "<h1>Q-1</h1><p>Acme, Springfield</p>"


@pytest.mark.parametrize(
    "template",
    [
        "{{missing}}",
        "{{company.missing}}",
        "{{company.name.first}}",
        "{{items.5.description}}",
    ],
)
def test_missing_paths_render_empty(template):
    ctx = {"company": {"name": "Acme"}, "items": [{"description": "a"}]}
    out = render("[" + template + "]", ctx)
    assert out == "[]"
    assert "undefined" not in out
    assert "null" not in out
    assert "None" not in out


def test_none_context_is_allowed():
    assert render("a{{x}}b{{#y}}c{{/y}}", None) == "ab"


def test_values_are_html_escaped():
    out = render("<td>{{name}}</td>", {"name": '<script>alert("x")</script> & co'})
    assert "<script>" not in out
    assert out == "<td>&lt;script&gt;alert(&#34;x&#34;)&lt;/script&gt; &amp; co</td>"


def test_scalar_stringification():
    ctx = {"i": 2, "f": 19.0, "g": 9.5, "t": True, "n": None, "obj": {"a": 1}, "lst": [1, 2]}
    assert render("{{i}}|{{f}}|{{g}}|{{t}}|{{n}}|{{obj}}|{{lst}}", ctx) == "2|19|9.5|true|||"


def test_array_section_repeats_once_per_element():
    ctx = {"items": [{"d": "a"}, {"d": "b"}, {"d": "c"}]}
    out = render("{{#items}}<tr>{{d}}</tr>{{/items}}", ctx)
    assert out == "<tr>a</tr><tr>b</tr><tr>c</tr>"
    assert out.count("<tr>") == len(ctx["items"])


def test_empty_array_section_is_omitted():
    out = render("before{{#items}}<tr>{{d}}</tr>{{/items}}after", {"items": []})
    assert out == "beforeafter"


def test_list_of_strings_uses_dot():
    out = render("{{#lines}}<p>{{.}}</p>{{/lines}}", {"lines": ["one", "two & three"]})
    assert out == "<p>one</p><p>two &amp; three</p>"


def test_truthy_scalar_section_renders_once_against_outer_context():
    ctx = {"has_tax": True, "tax": "$1.00", "company": {"phone": "555"}}
    assert render("{{#has_tax}}<b>{{tax}}</b>{{/has_tax}}", ctx) == "<b>$1.00</b>"
    # a string section still sees the outer context, not the string
    assert render("{{#company.phone}}[{{company.phone}}]{{/company.phone}}", ctx) == "[555]"


def test_truthy_mapping_section_renders_against_outer_context():
    ctx = {"project": {"name": "Extension"}, "name": "outer"}
    assert render("{{#project}}{{name}}/{{project.name}}{{/project}}", ctx) == "outer/Extension"


@pytest.mark.parametrize("value", [False, None, "", 0, {}, []])
def test_falsy_section_renders_nothing(value):
    assert render("x{{#flag}}shown{{/flag}}y", {"flag": value}) == "xy"


def test_missing_section_renders_nothing():
    assert render("x{{#nope}}shown{{/nope}}y", {}) == "xy"


def test_nested_sections_each_item_keeps_its_own_data():
    ctx = {
        "groups": [
            {"name": "g1", "rows": [{"v": 1}, {"v": 2}]},
            {"name": "g2", "rows": [{"v": 3}]},
        ]
    }
    out = render("{{#groups}}[{{name}}:{{#rows}}{{v}}{{/rows}}]{{/groups}}", ctx)
    assert out == "[g1:12][g2:3]"


def test_rendering_is_deterministic():
    template = "{{#items}}<li>{{d}} {{q}}</li>{{/items}}{{total}}"
    ctx = {"items": [{"d": "a", "q": 1}, {"d": "b", "q": 2}], "total": "$3.00"}
    assert render(template, ctx) == render(template, ctx)


def test_template_renderer_class_delegates():
    assert TemplateRenderer().render("{{a}}", {"a": "x"}) == "x"


@pytest.mark.parametrize(
    "template",
    [
        "{{#a}}never closed",
        "{{/a}}",
        "{{#a}}{{/b}}",
        "{{#a}}{{#b}}{{/a}}{{/b}}",
        "{{unterminated",
        "{{ }}",
        "{{^inverted}}x{{/inverted}}",
        "{{{raw}}}",
        "{{&raw}}",
        "{{>partial}}",
        "{{! comment }}",
        "{{=<% %>=}}",
        "{{bad name}}",
        "{{a..b}}",
    ],
)
def test_malformed_templates_raise_render_error(template):
    with pytest.raises(RenderError) as exc:
        render(template, {"a": True, "b": True, "raw": "<b>"})
    assert exc.value.stage == "rendering"
    assert isinstance(exc.value, DocumentError)


def test_render_error_reports_position():
    with pytest.raises(RenderError) as exc:
        validate("abc{{/x}}")
    assert exc.value.position == 3


def test_section_depth_limit():
    ok = "".join(f"{{{{#s{i}}}}}" for i in range(MAX_SECTION_DEPTH))
    ok += "".join(f"{{{{/s{i}}}}}" for i in reversed(range(MAX_SECTION_DEPTH)))
    validate(ok)

    too_deep = "".join(f"{{{{#s{i}}}}}" for i in range(MAX_SECTION_DEPTH + 1))
    too_deep += "".join(f"{{{{/s{i}}}}}" for i in reversed(range(MAX_SECTION_DEPTH + 1)))
    with pytest.raises(RenderError):
        validate(too_deep)


def test_path_depth_limit():
    validate("{{" + ".".join(["a"] * MAX_PATH_DEPTH) + "}}")
    with pytest.raises(RenderError):
        validate("{{" + ".".join(["a"] * (MAX_PATH_DEPTH + 1)) + "}}")


def test_lookup_walks_mappings_and_list_indexes():
    ctx = {"items": [{"d": "first"}, {"d": "second"}]}
    assert lookup(ctx, "items.1.d") == "second"
    assert lookup(ctx, "items.x") is None
    assert lookup(ctx, ".") is ctx


@pytest.mark.parametrize("template", ["{{items.²}}", "{{items.١}}", "{{nämé}}"])
def test_non_ascii_tag_names_are_rejected(template):
    with pytest.raises(RenderError):
        render(template, {"items": ["a", "b", "c"]})


def test_lookup_ignores_non_ascii_digit_indexes():
    ctx = {"items": ["a", "b", "c"]}
    assert lookup(ctx, "items.2") == "c"
    assert lookup(ctx, "items.²") is None
    assert lookup(ctx, "items.١") is None
