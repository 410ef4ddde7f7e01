"""
Unit tests for scoped theme application
"""
import pytest

from sitefront.exceptions import ThemeScopeError
from sitefront.models import DEFAULT_TEMPLATE_SETTINGS, TemplateSettings
from sitefront.theme import THEME_PROPERTIES, StyleNamespace, ThemeApplier, dependency_key, derive_palette

LIGHT = TemplateSettings(primary_color="#3b82f6", background_color="#ffffff", text_color="#1f2937")
DARK = TemplateSettings(primary_color="#22c55e", background_color="#09090b", text_color="#fafafa",
                        heading_font="tech", font_scale="spacious")


def test_palette_covers_every_property():
    assert set(derive_palette(LIGHT)) == set(THEME_PROPERTIES)
    assert set(derive_palette(None)) == set(THEME_PROPERTIES)


def test_palette_values_for_light_background():
    palette = derive_palette(LIGHT)
    assert palette["--background"] == "0 0% 100%"
    assert palette["--card"] == "0 0% 96%"
    assert palette["--border"] == "0 0% 88%"
    assert palette["--primary"] == "217 91% 60%"
    assert palette["--accent"] == "217 91% 50%"


def test_palette_surfaces_lighten_on_dark_background():
    palette = derive_palette(DARK)
    assert palette["--card"] == "240 10% 8%"
    assert palette["--public-font-hero"] == "3.5rem"
    assert palette["--public-heading-font"].startswith("JetBrains Mono")


def test_malformed_color_falls_back_to_default():
    palette = derive_palette(TemplateSettings(primary_color="not-a-color"))
    assert palette["--primary"] == derive_palette(DEFAULT_TEMPLATE_SETTINGS)["--primary"]
    assert "NaN" not in "".join(palette.values())


def test_mount_writes_and_unmount_removes_everything():
    namespace = StyleNamespace()
    with ThemeApplier(namespace, LIGHT, owner="s1"):
        assert namespace.get("--primary") == "217 91% 60%"
        assert namespace.active_owner == "s1"
    assert namespace.snapshot() == {}
    assert namespace.active_owner is None


def test_preexisting_values_are_restored():
    namespace = StyleNamespace({"--primary": "1 2% 3%", "--unrelated": "x"})
    with ThemeApplier(namespace, LIGHT, owner="s1"):
        assert namespace.get("--primary") != "1 2% 3%"
    assert namespace.snapshot() == {"--primary": "1 2% 3%", "--unrelated": "x"}


def test_sequential_tenants_do_not_leak():
    namespace = StyleNamespace()
    with ThemeApplier(namespace, DARK, owner="a"):
        pass
    with ThemeApplier(namespace, LIGHT, owner="b"):
        assert namespace.snapshot() == derive_palette(LIGHT)
    assert namespace.snapshot() == {}


def test_restores_when_scope_raises():
    namespace = StyleNamespace({"--primary": "keep"})
    with pytest.raises(RuntimeError):
        with ThemeApplier(namespace, DARK, owner="s1"):
            raise RuntimeError("render failed")
    assert namespace.snapshot() == {"--primary": "keep"}
    assert namespace.active_owner is None


def test_second_tenant_cannot_mount_concurrently():
    namespace = StyleNamespace()
    with ThemeApplier(namespace, LIGHT, owner="a"):
        with pytest.raises(ThemeScopeError):
            ThemeApplier(namespace, DARK, owner="b").mount()
        assert namespace.get("--primary") == "217 91% 60%"


def test_update_is_a_no_op_for_irrelevant_changes():
    namespace = StyleNamespace()
    applier = ThemeApplier(namespace, LIGHT, owner="s1").mount()
    writes = namespace.writes

    unrelated = LIGHT.model_copy(update={"footer_text": "changed", "show_search": False})
    assert dependency_key(unrelated) == dependency_key(LIGHT)
    assert applier.update(unrelated) is False
    assert namespace.writes == writes

    assert applier.update(DARK) is True
    assert namespace.get("--background") == derive_palette(DARK)["--background"]
    applier.unmount()
    assert namespace.snapshot() == {}


def test_css_serialization():
    namespace = StyleNamespace()
    assert namespace.css() == ""
    with ThemeApplier(namespace, LIGHT):
        css = namespace.css()
    assert css.startswith(":root {")
    assert "--primary: 217 91% 60%;" in css
