"""
Result aggregation and report rendering.
"""

import json
from collections import Counter
from typing import Any, Dict, List, Tuple

from ..models.core import EndpointStatus, ResultKey
from ..utils.config import ReportFormat


HEADERS = ("RPC Method", "SUT", "Reference")


class ResultAggregator:
    """Counts executed tests per ``(method, sut status, reference status)``.

    ``(Valid, Valid)`` and ``(Timeout, Timeout)`` go to the success bucket,
    every other combination to the failure bucket.
    """

    def __init__(self):
        self.success: Counter = Counter()
        self.failure: Counter = Counter()
        # Completions that arrived after fail-fast stopped consumption
        self.discarded = 0

    def record(self, method: str, sut: EndpointStatus, reference: EndpointStatus) -> ResultKey:
        key = ResultKey(method, sut, reference)
        if key.is_success():
            self.success[key] += 1
        else:
            self.failure[key] += 1
        return key

    @property
    def has_failures(self) -> bool:
        return bool(self.failure)

    @property
    def passed(self) -> int:
        return sum(self.success.values())

    @property
    def failed(self) -> int:
        return sum(self.failure.values())

    def rows(self) -> List[Tuple[ResultKey, int]]:
        """Both buckets merged and sorted by method, then by status."""
        merged = list(self.success.items()) + list(self.failure.items())
        return sorted(merged, key=lambda item: item[0].sort_key())

    def render(self, report_format: ReportFormat = ReportFormat.MARKDOWN) -> str:
        if report_format == ReportFormat.JSON:
            return self.render_json()
        return self.render_markdown()

    def render_markdown(self) -> str:
        lines = [
            (
                key.method if count == 1 else f"{key.method} ({count})",
                str(key.sut),
                str(key.reference),
            )
            for key, count in self.rows()
        ]

        widths = [len(header) for header in HEADERS]
        for line in lines:
            widths = [max(width, len(cell)) for width, cell in zip(widths, line)]

        def format_row(cells) -> str:
            return "| " + " | ".join(cell.ljust(width) for cell, width in zip(cells, widths)) + " |"

        table = [
            format_row(HEADERS),
            "|" + "|".join("-" * (width + 2) for width in widths) + "|",
        ]
        table.extend(format_row(line) for line in lines)
        return "\n".join(table)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "success": not self.has_failures,
            "passed": self.passed,
            "failed": self.failed,
            "discarded": self.discarded,
            "results": [
                {
                    "method": key.method,
                    "sut": str(key.sut),
                    "reference": str(key.reference),
                    "count": count,
                    "success": key.is_success(),
                }
                for key, count in self.rows()
            ],
        }

    def render_json(self) -> str:
        return json.dumps(self.to_dict(), indent=2)
