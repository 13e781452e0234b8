"""Tests for the template renderer."""

import pytest

from notification_engine.exceptions import TemplateRenderError
from notification_engine.template import TemplateRenderer, normalise_markers, render


def test_dotted_marker_is_substituted():
    """Test dotted markers resolve against the bindings."""
    result = render("Hi {{.Name}}", bindings={"Name": "Ada"})

    assert result.body == "Hi Ada"
    assert result.subject == ""


def test_jinja_marker_and_subject():
    """Test plain Jinja2 markers in both body and subject."""
    renderer = TemplateRenderer()

    result = renderer.render(
        "Order {{ order_id }} shipped",
        subject="Order {{ order_id }}",
        bindings={"order_id": 42},
    )

    assert result.body == "Order 42 shipped"
    assert result.subject == "Order 42"


def test_unbound_marker_fails_closed():
    """Test a marker with no binding raises instead of rendering empty."""
    with pytest.raises(TemplateRenderError):
        render("Hello {{.Name}}, your code is {{.Code}}", bindings={"Name": "Ada"})


def test_unbound_marker_in_subject_fails():
    """Test the subject is held to the same rule as the body."""
    with pytest.raises(TemplateRenderError):
        render("body", subject="Hi {{ who }}", bindings={})


def test_malformed_template_raises():
    """Test broken syntax is reported as a render error."""
    with pytest.raises(TemplateRenderError):
        render("Hello {{ name ", bindings={"name": "x"})


def test_values_are_not_html_escaped():
    """Test values are inserted by their string form without escaping."""
    result = render("{{.Html}}", bindings={"Html": "<b>&</b>"})

    assert result.body == "<b>&</b>"


def test_render_is_idempotent():
    """Test rendering twice with the same inputs gives the same output."""
    renderer = TemplateRenderer()
    args = ("Hello {{.Name}}\n", "Hi {{.Name}}", {"Name": "Ada"})

    assert renderer.render(*args) == renderer.render(*args)
    assert renderer.render(*args).body == "Hello Ada\n"


def test_normalise_markers_handles_nested_names():
    """Test dotted paths and inner whitespace are rewritten."""
    assert normalise_markers("{{ .User.Name }}") == "{{ User.Name }}"
    assert normalise_markers("{{ plain }}") == "{{ plain }}"


def test_check_syntax():
    """Test syntax is checked without needing bindings."""
    renderer = TemplateRenderer()

    renderer.check_syntax("Hello {{.Name}}")
    with pytest.raises(TemplateRenderError):
        renderer.check_syntax("{% if %}")


@pytest.mark.parametrize(
    "name", ["range", "dict", "lipsum", "cycler", "joiner", "namespace"]
)
def test_jinja_globals_are_not_bindings(name):
    """Test names Jinja2 ships as globals still fail closed when unbound."""
    with pytest.raises(TemplateRenderError):
        render("Hi {{.%s}}" % name, bindings={})


def test_template_cannot_reach_python_internals():
    """Test attribute walks into Python internals are refused."""
    with pytest.raises(TemplateRenderError):
        render("{{ ''.__class__.__mro__[1].__subclasses__() | length }}")


def test_subject_is_folded_onto_one_line():
    """Test trailing and embedded newlines never reach the rendered subject."""
    result = render(
        "body", subject="Hello {{.Name}}\n", bindings={"Name": "Ada\nLovelace"}
    )

    assert result.subject == "Hello Ada Lovelace"
    assert "\n" not in result.subject
