"""
Schema exporter assets for a scanned Schema Registry.
"""

import logging
from pathlib import Path

from kcp.hcl import schema_exporters
from kcp.models.requests import SchemaExporterRequest
from kcp.state import State
from kcp.util.naming import url_to_folder_name
from kcp.util.templates import TemplateLoader

logger = logging.getLogger(__name__)

DEFAULT_OUTPUT_DIR = "migrate_schemas"


def build_request(state: State, url: str, cc_sr_rest_endpoint: str) -> SchemaExporterRequest:
    """Exporter request from the registry recorded by ``scan schema-registry``."""
    registry = state.get_schema_registry(url)

    # context qualified subjects (":.ctx:subject") are exported by their context's exporter
    subjects = [
        s["name"] for s in registry.get("subjects") or [] if not s["name"].startswith(":.")
    ]
    contexts = list(registry.get("contexts") or [])
    if schema_exporters.DEFAULT_CONTEXT not in contexts:
        contexts.insert(0, schema_exporters.DEFAULT_CONTEXT)

    return SchemaExporterRequest(
        source_url=url,
        target_url=cc_sr_rest_endpoint,
        contexts=contexts,
        subjects=subjects,
    )


def generate_migrate_schemas(
    request: SchemaExporterRequest,
    output_dir: str | Path = DEFAULT_OUTPUT_DIR,
    loader: TemplateLoader | None = None,
) -> list[Path]:
    """Write the exporter project into ``<output_dir>/<registry host>/``."""
    project_dir = Path(output_dir) / url_to_folder_name(request.source_url)
    logger.info(
        f"Generating {len(request.contexts)} schema exporters for {request.source_url} "
        f"in {project_dir}"
    )

    written = schema_exporters.generate_terraform_project(request).write(project_dir)

    loader = loader or TemplateLoader()
    written.append(
        loader.render_template(
            "migrate_schemas/README.md.j2",
            {
                "source_url": request.source_url,
                "target_url": request.target_url,
                "exporters": [schema_exporters.exporter_name(c) for c in request.contexts],
            },
            project_dir / "README.md",
        )
    )
    return written
