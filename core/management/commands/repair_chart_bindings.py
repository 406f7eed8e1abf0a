"""Drop column references that no longer exist in a dataset."""

from __future__ import annotations

import json
from pathlib import Path

from django.core.management.base import BaseCommand, CommandError

from core.charting.bindings import cleanup_chart_config
from core.charting.errors import ConfigKindError
from core.charting.snapshot_codec import decode_chart_config, decode_data_headers, encode_chart_config
from core.charting.validator import validate_chart_config
from core.management.commands._documents import load_document, load_mapping


class Command(BaseCommand):
    """Repair a persisted chart configuration against the dataset headers."""

    help = "Clear dangling column bindings in a chart configuration file (idempotent)."

    def add_arguments(self, parser) -> None:
        """Add command arguments."""

        parser.add_argument("config", help="Persisted chart configuration (JSON or YAML).")
        parser.add_argument(
            "headers",
            help="Dataset header list, or a mapping with a `headers` key (JSON or YAML).",
        )
        parser.add_argument(
            "--output",
            default=None,
            help="Write the repaired configuration to this path instead of stdout.",
        )

    def handle(self, *args, **options) -> str | None:
        """Run the command."""

        try:
            config = decode_chart_config(load_mapping(options["config"]))
        except ConfigKindError as exc:
            raise CommandError(str(exc)) from exc

        raw_headers = load_document(options["headers"])
        if isinstance(raw_headers, dict):
            raw_headers = raw_headers.get("headers")
        headers = decode_data_headers(raw_headers)
        if not headers:
            raise CommandError(f"{options['headers']} does not contain any dataset headers.")

        repaired = cleanup_chart_config(config, headers)
        if repaired is None:
            raise CommandError(f"{options['config']} did not decode to a chart configuration.")
        if repaired is config:
            self.stdout.write("No dangling column references.")
        else:
            self.stdout.write(self.style.SUCCESS("Cleared dangling column references."))

        result = validate_chart_config(repaired, headers=headers)
        for error in result.errors:
            self.stderr.write(f"error: {error}")

        rendered = json.dumps(encode_chart_config(repaired), indent=2, ensure_ascii=False)
        output: str | None = options["output"]
        if output is None:
            self.stdout.write(rendered)
            return None
        try:
            Path(output).write_text(rendered + "\n", encoding="utf-8")
        except OSError as exc:
            raise CommandError(f"Cannot write {output}: {exc}") from exc
        self.stdout.write(f"Wrote {output}.")
        return None
