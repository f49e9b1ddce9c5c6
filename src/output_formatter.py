#!/usr/bin/env python3
"""
Output formatter for formatted recipes.
Serializes a FormattedRecipe into JSON, YAML, CSV or plain-text documents.
"""

import io
import csv
import json
import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, Optional

import yaml

from error_handling import UnsupportedOutputFormatError
from recipe_types import FormattedRecipe


SUPPORTED_FORMATS = ("json", "yaml", "csv", "txt")


@dataclass
class FormattedOutput:
    """Formatted output result."""
    format_type: str
    content: str
    file_path: Optional[str] = None
    metadata: Dict[str, Any] = field(default_factory=dict)


class OutputFormatter:
    """Serializer for formatted recipes."""

    def __init__(self, config: Optional[Dict[str, Any]] = None):
        """
        Initialize output formatter.

        Args:
            config: Formatter configuration
        """
        self.config = self._get_default_config()
        self.config.update(config or {})
        self.logger = logging.getLogger(__name__)

    def _get_default_config(self) -> Dict[str, Any]:
        return {
            "json_indent": 2,
            "text_rule_width": 40,
        }

    def format_recipe(self, recipe: FormattedRecipe, output_format: str = "json") -> FormattedOutput:
        """
        Format a recipe into the requested format.

        Args:
            recipe: Formatted recipe
            output_format: One of 'json', 'yaml', 'csv', 'txt'

        Returns:
            Formatted output

        Raises:
            UnsupportedOutputFormatError: for any other format name
        """
        formatters = {
            "json": self._format_json,
            "yaml": self._format_yaml,
            "csv": self._format_csv,
            "txt": self._format_text,
        }
        key = (output_format or "").lower()
        if key == "yml":
            key = "yaml"
        if key not in formatters:
            raise UnsupportedOutputFormatError(output_format, SUPPORTED_FORMATS)

        return formatters[key](recipe.to_dict())

    def _format_json(self, data: Dict[str, Any]) -> FormattedOutput:
        json_str = json.dumps(data, indent=self.config["json_indent"], ensure_ascii=False)

        return FormattedOutput(
            format_type="json",
            content=json_str,
            metadata={"size_bytes": len(json_str.encode("utf-8"))}
        )

    def _format_yaml(self, data: Dict[str, Any]) -> FormattedOutput:
        yaml_str = yaml.safe_dump(data, default_flow_style=False, allow_unicode=True, sort_keys=False)

        return FormattedOutput(
            format_type="yaml",
            content=yaml_str,
            metadata={"size_bytes": len(yaml_str.encode("utf-8"))}
        )

    def _format_csv(self, data: Dict[str, Any]) -> FormattedOutput:
        """Ingredient table only; the other fields have no tabular shape."""
        output = io.StringIO()
        writer = csv.DictWriter(output, fieldnames=["name", "quantity"])
        writer.writeheader()
        for ingredient in data["ingredients"]:
            writer.writerow(ingredient)

        csv_content = output.getvalue()
        output.close()

        return FormattedOutput(
            format_type="csv",
            content=csv_content,
            metadata={"rows": len(data["ingredients"]) + 1}  # +1 for header
        )

    def _format_text(self, data: Dict[str, Any]) -> FormattedOutput:
        """Format as human-readable text."""
        lines = []
        width = self.config["text_rule_width"]

        lines.append(data["title"] or "Untitled recipe")
        lines.append("=" * width)

        if data["description"]:
            lines.append("")
            lines.append(data["description"])

        lines.append("")
        lines.append("INGREDIENTS:")
        lines.append("-" * 20)
        if data["ingredients"]:
            for ingredient in data["ingredients"]:
                parts = [ingredient["quantity"], ingredient["name"]]
                lines.append("  - " + " ".join(part for part in parts if part))
        else:
            lines.append("  (none found)")

        lines.append("")
        lines.append("STEPS:")
        lines.append("-" * 20)
        if data["steps"]:
            for i, step in enumerate(data["steps"], 1):
                lines.append(f"{i:2d}. {step}")
        else:
            lines.append("  (none found)")

        text_content = "\n".join(lines) + "\n"

        return FormattedOutput(
            format_type="txt",
            content=text_content,
            metadata={"lines": len(lines), "characters": len(text_content)}
        )

    def save_formatted_output(self, formatted_output: FormattedOutput, output_path: str) -> str:
        """
        Save formatted output to file.

        Args:
            formatted_output: Formatted output object
            output_path: Output file path; the format's extension is added when missing

        Returns:
            Actual saved file path
        """
        output_file = Path(output_path)
        output_file.parent.mkdir(parents=True, exist_ok=True)

        if not output_file.suffix:
            output_file = output_file.with_suffix(f".{formatted_output.format_type}")

        with open(output_file, "w", encoding="utf-8") as f:
            f.write(formatted_output.content)

        formatted_output.file_path = str(output_file)
        self.logger.info("Saved %s output to %s", formatted_output.format_type, output_file)
        return str(output_file)
