"""
Terraform for exporting schemas from a source Schema Registry into Confluent
Cloud, one ``confluent_schema_exporter`` per source context.
"""

from kcp.hcl import confluent, other
from kcp.hcl.variables import render_variables, root_variable_definitions, root_variable_values
from kcp.hcl.writer import render, render_attributes
from kcp.models.requests import SchemaExporterRequest
from kcp.models.terraform import ModuleVariable, TerraformProject, TerraformVariable
from kcp.util.naming import url_to_folder_name

DEFAULT_CONTEXT = "."
EXPORTER_PREFIX = "kcp-schema-exporter"


def schema_exporter_variables() -> list[ModuleVariable]:
    # credentials are left out of the tfvars and supplied through TF_VAR_*
    return [
        ModuleVariable(
            TerraformVariable(confluent.VAR_SOURCE_SR_ID, "ID of the source schema registry"),
            value_extractor=lambda r: url_to_folder_name(r.source_url),
        ),
        ModuleVariable(
            TerraformVariable(confluent.VAR_SOURCE_SR_URL, "URL of the source schema registry"),
            value_extractor=lambda r: r.source_url,
        ),
        ModuleVariable(
            TerraformVariable(
                confluent.VAR_SOURCE_SR_USERNAME,
                "Username for source schema registry authentication",
            ),
            value_extractor=lambda r: "",
        ),
        ModuleVariable(
            TerraformVariable(
                confluent.VAR_SOURCE_SR_PASSWORD,
                "Password for source schema registry authentication",
                sensitive=True,
            ),
            value_extractor=lambda r: "",
        ),
        ModuleVariable(
            TerraformVariable(
                confluent.VAR_CC_SR_URL, "URL of the target schema registry (Confluent Cloud)"
            ),
            value_extractor=lambda r: r.target_url,
        ),
        ModuleVariable(
            TerraformVariable(
                confluent.VAR_CC_SR_API_KEY,
                "API key for the target schema registry (Confluent Cloud)",
            ),
            value_extractor=lambda r: "",
        ),
        ModuleVariable(
            TerraformVariable(
                confluent.VAR_CC_SR_API_SECRET,
                "API secret for the target schema registry (Confluent Cloud)",
                sensitive=True,
            ),
            value_extractor=lambda r: "",
        ),
    ]


def exporter_name(context: str) -> str:
    if context == DEFAULT_CONTEXT:
        return f"{EXPORTER_PREFIX}-default"
    return f"{EXPORTER_PREFIX}-{context.strip('.:')}"


def exporter_subjects(context: str, subjects: list[str]) -> list[str]:
    """Subjects exported for a context.

    The default context exports the scanned subjects (or everything when the
    registry reported none); a named context exports all of its subjects.
    """
    if context == DEFAULT_CONTEXT:
        return sorted(subjects) if subjects else ["*"]
    return [f":{context}:*"]


def generate_terraform_project(request: SchemaExporterRequest) -> TerraformProject:
    contexts = request.contexts or [DEFAULT_CONTEXT]

    exporters = []
    for context in contexts:
        if context == DEFAULT_CONTEXT:
            context_type, context_name = "NONE", ""
        else:
            # keep the source context name in Confluent Cloud
            context_type, context_name = "CUSTOM", context.strip(".:")
        exporters.append(
            confluent.schema_exporter(
                exporter_name(context),
                exporter_subjects(context, request.subjects),
                context_type,
                context_name,
            )
        )

    variables = schema_exporter_variables()
    return TerraformProject(
        main_tf=render(exporters),
        providers_tf=render(
            [
                other.terraform_block(confluent.required_provider()),
                confluent.provider_block(with_credentials=False),
            ]
        ),
        variables_tf=render_variables(root_variable_definitions(request, variables)),
        inputs_auto_tfvars=render_attributes(root_variable_values(request, variables)),
    )
