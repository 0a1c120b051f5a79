"""Discovery, validation and rendering of the Atom request body templates."""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path
from typing import List, Optional

from jinja2 import Environment, FileSystemLoader, StrictUndefined, TemplateSyntaxError

TEMPLATE_SUFFIX = ".xml"


def builtin_template_dir() -> Path:
    return Path(__file__).resolve().parent / "xml_templates"


@dataclass(frozen=True)
class TemplateInfo:
    name: str
    path: Path


def list_templates(template_dir: Path) -> List[TemplateInfo]:
    if not template_dir.exists():
        return []
    return [
        TemplateInfo(name=candidate.stem, path=candidate)
        for candidate in sorted(template_dir.glob(f"*{TEMPLATE_SUFFIX}"))
    ]


def resolve_template(template_dir: Optional[Path], template_name: str) -> Path:
    """Find ``template_name`` in ``template_dir``, falling back to the bundled templates."""
    search = [template_dir] if template_dir else []
    search.append(builtin_template_dir())

    for directory in search:
        candidate = directory / f"{template_name}{TEMPLATE_SUFFIX}"
        if candidate.exists():
            return candidate
    raise FileNotFoundError(
        f"Template not found: {template_name}{TEMPLATE_SUFFIX} (searched {', '.join(str(d) for d in search)})"
    )


def _environment(directory: Path) -> Environment:
    return Environment(
        loader=FileSystemLoader(str(directory)),
        autoescape=True,
        undefined=StrictUndefined,
    )


def validate_template(template_path: Path) -> None:
    if not template_path.exists():
        raise FileNotFoundError(f"Template file not found: {template_path}")

    env = _environment(template_path.parent)
    try:
        env.get_template(template_path.name)
    except TemplateSyntaxError as exc:
        raise ValueError(f"Invalid template syntax in {template_path}: {exc}") from exc


def render_body(template_name: str, template_dir: Optional[Path] = None, **context: object) -> str:
    template_path = resolve_template(template_dir, template_name)
    template = _environment(template_path.parent).get_template(template_path.name)
    return template.render(context).strip()
