"""Terraform project descriptors.

Generators build these plain objects from a request; writing them to disk is a
separate step so that the generation itself stays a pure text transform.
"""

import logging
from collections.abc import Callable
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Generic, TypeVar

from kcp.util.files import ensure_dir, write_text

logger = logging.getLogger(__name__)

R = TypeVar("R")


@dataclass(frozen=True)
class TerraformVariable:
    """A `variable` block."""

    name: str
    description: str
    type: str = "string"
    sensitive: bool = False


@dataclass(frozen=True)
class TerraformOutput:
    """An `output` block; ``value`` is a raw HCL expression."""

    name: str
    value: str
    description: str = ""
    sensitive: bool = False


@dataclass(frozen=True)
class ModuleVariable(Generic[R]):
    """A module input and where its value comes from.

    Root level variables carry a ``value_extractor``. Inputs wired from another
    module's output name that module in ``from_module_output`` and never reach
    the root variables.tf or tfvars.
    """

    definition: TerraformVariable
    value_extractor: Callable[[R], Any] | None = None
    condition: Callable[[R], bool] | None = None
    from_module_output: str = ""
    output_name: str = ""

    @property
    def name(self) -> str:
        return self.definition.name

    def applies(self, request: R) -> bool:
        return self.condition is None or self.condition(request)

    @property
    def is_root_level(self) -> bool:
        return not self.from_module_output and self.value_extractor is not None


@dataclass
class TerraformModule:
    """A child module written to ``<project>/<path>/``."""

    name: str
    path: str
    main_tf: str = ""
    variables_tf: str = ""
    outputs_tf: str = ""
    versions_tf: str = ""
    additional_files: dict[str, str] = field(default_factory=dict)


@dataclass
class TerraformProject:
    """A root Terraform configuration plus its child modules."""

    main_tf: str = ""
    providers_tf: str = ""
    variables_tf: str = ""
    outputs_tf: str = ""
    inputs_auto_tfvars: str = ""
    modules: list[TerraformModule] = field(default_factory=list)
    additional_files: dict[str, str] = field(default_factory=dict)

    ROOT_FILES = (
        ("main_tf", "main.tf"),
        ("providers_tf", "providers.tf"),
        ("variables_tf", "variables.tf"),
        ("outputs_tf", "outputs.tf"),
        ("inputs_auto_tfvars", "inputs.auto.tfvars"),
    )
    MODULE_FILES = (
        ("main_tf", "main.tf"),
        ("variables_tf", "variables.tf"),
        ("outputs_tf", "outputs.tf"),
        ("versions_tf", "versions.tf"),
    )

    def write(self, output_dir: Path) -> list[Path]:
        """
        Write every non-empty file of the project.

        Args:
            output_dir: Root directory of the Terraform project

        Returns:
            Paths of all written files
        """
        output_dir = ensure_dir(output_dir)
        written = []

        for attr, filename in self.ROOT_FILES:
            content = getattr(self, attr)
            if content:
                written.append(write_text(output_dir / filename, content))
                logger.info(f"Wrote {filename}")

        for filename, content in self.additional_files.items():
            written.append(write_text(output_dir / filename, content))

        for module in self.modules:
            module_dir = ensure_dir(output_dir / module.path)
            for attr, filename in self.MODULE_FILES:
                content = getattr(module, attr)
                if content:
                    written.append(write_text(module_dir / filename, content))
            for filename, content in module.additional_files.items():
                written.append(write_text(module_dir / filename, content))
            logger.info(f"Wrote module {module.name}")

        return written
