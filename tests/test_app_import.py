import importlib

from app.layout import DEFAULT_PAGE, NAV_LINKS
from prompts import available_prompts, get_prompt_text


def test_app_package_exports_main():
    module = importlib.import_module("app")

    assert hasattr(module, "main"), "app package should expose main entrypoint"


def test_every_page_has_a_prompt():
    assert available_prompts() == ["budget", "forecast", "goals"]
    assert [link.slug for link in NAV_LINKS] == available_prompts()
    assert DEFAULT_PAGE in available_prompts()
    assert all(get_prompt_text(name) for name in available_prompts())


def test_pages_expose_the_page_protocol():
    pages = importlib.import_module("app.pages")

    for name in ("budget", "forecast", "goals"):
        page = getattr(pages, name)
        assert callable(page.build_context)
        assert callable(page.fallback_insights)
        assert callable(page.render_page)
