"""Compare a live chart with a stored version and print the differences."""

from __future__ import annotations

import json

import yaml
from django.core.management.base import BaseCommand

from core.charting.diff import compare_chart_versions, diff_to_payload
from core.charting.snapshot_codec import decode_version_snapshot
from core.management.commands._documents import load_mapping


class Command(BaseCommand):
    """Print the structural diff between two chart snapshots."""

    help = "Compare two chart snapshot files (JSON or YAML) and print the differing fields."

    def add_arguments(self, parser) -> None:
        """Add command arguments."""

        parser.add_argument("current", help="Snapshot of the live chart (carries updatedAt).")
        parser.add_argument("historical", help="Snapshot of the stored version (carries createdAt).")
        parser.add_argument(
            "--format",
            choices=("json", "yaml"),
            default="json",
            help="Output format for the differences.",
        )

    def handle(self, *args, **options) -> str | None:
        """Run the command."""

        current = decode_version_snapshot(load_mapping(options["current"]))
        historical = decode_version_snapshot(load_mapping(options["historical"]))

        comparison = compare_chart_versions(current, historical)
        if not comparison.has_differences:
            self.stdout.write("No differences.")
            return None

        payload = diff_to_payload(comparison.differences)
        if options["format"] == "yaml":
            self.stdout.write(yaml.safe_dump(payload, sort_keys=False, allow_unicode=True).rstrip())
        else:
            self.stdout.write(json.dumps(payload, indent=2, ensure_ascii=False, default=str))
        return None
