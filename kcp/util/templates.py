"""
Rendering of the Jinja2 templates and static assets written into generated projects.
"""

import base64
import shutil
from pathlib import Path

from jinja2 import Environment, FileSystemLoader, Template

from kcp.util.files import write_text

PACKAGE_ROOT = Path(__file__).parent.parent
TEMPLATES_DIR = PACKAGE_ROOT / "templates"
ASSETS_DIR = PACKAGE_ROOT / "assets"


def _b64encode(value: str) -> str:
    return base64.b64encode(value.encode()).decode()


class TemplateLoader:
    """
    Loads and renders the Jinja2 templates packaged with kcp.
    """

    def __init__(self, templates_dir: Path = TEMPLATES_DIR):
        self.templates_dir = templates_dir
        self._env: Environment | None = None
        self._template_cache: dict[str, Template] = {}

    @property
    def env(self) -> Environment:
        """Jinja2 environment with the HCL and base64 filters registered."""
        if self._env is None:
            if not self.templates_dir.exists():
                raise FileNotFoundError(f"Template directory not found: {self.templates_dir}")

            self._env = Environment(
                loader=FileSystemLoader(str(self.templates_dir)),
                trim_blocks=True,
                lstrip_blocks=True,
                keep_trailing_newline=True,
            )
            self._env.filters["b64encode"] = _b64encode
            self._env.filters["hcl_string"] = lambda x: (
                str(x).replace("\\", "\\\\").replace('"', '\\"').replace("${", "$${")
            )

        return self._env

    def load_template(self, template_name: str) -> Template:
        """Compiled template, cached per name."""
        if template_name not in self._template_cache:
            self._template_cache[template_name] = self.env.get_template(template_name)
        return self._template_cache[template_name]

    def render(self, template_name: str, context: dict) -> str:
        """Render a template to a string."""
        return self.load_template(template_name).render(**context)

    def render_template(
        self, template_name: str, context: dict, output_file: Path, mode: int | None = None
    ) -> Path:
        """
        Render a template and write to file.

        Args:
            template_name: Template name (e.g., "migrate_topics/README.md.j2")
            context: Dictionary of template variables
            output_file: Path to write rendered output
            mode: Optional file permissions (e.g. 0o755 for scripts)

        Returns:
            Path of the written file
        """
        rendered = self.render(template_name, context)
        return write_text(output_file, rendered, mode=mode)


def read_asset(name: str) -> str:
    """Read a static asset shipped with kcp."""
    path = ASSETS_DIR / name
    if not path.exists():
        raise FileNotFoundError(f"Asset '{name}' not found in {ASSETS_DIR}")
    return path.read_text()


def copy_asset(name: str, destination: Path, mode: int | None = None) -> Path:
    """Copy a static asset into an output directory."""
    source = ASSETS_DIR / name
    if not source.exists():
        raise FileNotFoundError(f"Asset '{name}' not found in {ASSETS_DIR}")
    destination.parent.mkdir(parents=True, exist_ok=True)
    shutil.copyfile(source, destination)
    if mode is not None:
        destination.chmod(mode)
    return destination
