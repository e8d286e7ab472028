from __future__ import annotations
import os
from typing import Any, Dict
from jinja2 import Environment, FileSystemLoader, select_autoescape


def render_markdown(payload: Dict[str, Any]) -> str:
    tmpl_dir = os.path.join(os.path.dirname(__file__), "templates")
    env = Environment(
        loader=FileSystemLoader(tmpl_dir),
        autoescape=select_autoescape(),
        trim_blocks=True,
        lstrip_blocks=True,
    )
    tmpl = env.get_template("tasks.md.j2")
    return tmpl.render(**payload)


def write_markdown(payload: Dict[str, Any], out_dir: str) -> str:
    path = os.path.join(out_dir, "TECH_DEBT_TASKS.md")
    with open(path, "w", encoding="utf-8") as f:
        f.write(render_markdown(payload))
    return path
