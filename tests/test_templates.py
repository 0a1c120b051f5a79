from pathlib import Path

import pytest

from webmaster_cli.templates import builtin_template_dir, list_templates, render_body, resolve_template, validate_template


def test_bundled_templates_are_listed():
    names = {t.name for t in list_templates(builtin_template_dir())}
    assert names == {"add_website", "verify_website", "update_website", "add_sitemap"}


def test_bundled_templates_are_valid():
    for tmpl in list_templates(builtin_template_dir()):
        validate_template(tmpl.path)


def test_override_directory_takes_precedence(tmp_path: Path):
    override = tmp_path / "add_website.xml"
    override.write_text("<entry>{{ website }}</entry>", encoding="utf-8")

    assert resolve_template(tmp_path, "add_website") == override
    assert render_body("add_website", template_dir=tmp_path, website="http://example.com/") == (
        "<entry>http://example.com/</entry>"
    )


def test_missing_override_falls_back_to_bundled(tmp_path: Path):
    assert resolve_template(tmp_path, "add_sitemap") == builtin_template_dir() / "add_sitemap.xml"


def test_unknown_template_raises():
    with pytest.raises(FileNotFoundError):
        resolve_template(None, "remove_everything")


def test_render_body_escapes_and_trims():
    body = render_body("add_website", website="http://example.com/?a=1&b=2")

    assert body.startswith("<atom:entry")
    assert body.endswith("</atom:entry>")
    assert 'src="http://example.com/?a=1&amp;b=2"' in body


def test_render_body_requires_all_variables():
    with pytest.raises(Exception):
        render_body("add_sitemap", sitemap="http://example.com/s.xml")


def test_validate_template_fails_on_syntax_error(tmp_path: Path):
    broken = tmp_path / "broken.xml"
    broken.write_text("<entry>{% for item in items %}</entry>", encoding="utf-8")

    with pytest.raises(ValueError):
        validate_template(broken)
