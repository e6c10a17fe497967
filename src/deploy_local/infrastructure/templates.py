"""Jinja2 template rendering with per-project override support."""

from __future__ import annotations

from pathlib import Path
from typing import Any

import jinja2
from jinja2 import BaseLoader, ChoiceLoader, Environment, FileSystemLoader, PackageLoader

from deploy_local.errors import TemplateError

TEMPLATE_SUFFIX = ".j2"


def build_template_environment(override_dir: Path | None = None) -> Environment:
    """Build a Jinja2 environment with user overrides before packaged defaults.

    Overrides live in ``templates/deploy_local/`` of the project by default;
    a file there shadows the packaged template of the same name. Undefined
    variables are errors.
    """
    loaders: list[BaseLoader] = []
    if override_dir is not None:
        loaders.append(FileSystemLoader(str(override_dir)))
    loaders.append(PackageLoader("deploy_local", "templates"))
    return Environment(
        loader=ChoiceLoader(loaders),
        keep_trailing_newline=True,
        trim_blocks=True,
        lstrip_blocks=True,
        undefined=jinja2.StrictUndefined,
        autoescape=False,
    )


def render_template(
    name: str,
    variables: dict[str, Any],
    *,
    override_dir: Path | None = None,
) -> str:
    """Render template *name* (without the ``.j2`` suffix).

    Raises:
        TemplateError: the template is missing, malformed, or references
            an undefined variable.
    """
    env = build_template_environment(override_dir)
    template_file = f"{name}{TEMPLATE_SUFFIX}"
    try:
        return env.get_template(template_file).render(**variables)
    except jinja2.TemplateNotFound as exc:
        msg = f"Template not found: {template_file}"
        raise TemplateError(msg, template=name) from exc
    except jinja2.TemplateSyntaxError as exc:
        msg = f"Syntax error in template {template_file} line {exc.lineno}: {exc.message}"
        raise TemplateError(msg, template=name) from exc
    except jinja2.UndefinedError as exc:
        msg = f"Cannot render template {template_file}: {exc.message}"
        raise TemplateError(msg, template=name) from exc
