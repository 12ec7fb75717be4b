"""
Findings produced by the trimming check and their textual/JSON rendering.
"""
from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Dict, List, Optional

from .symbols import Location


@dataclass(frozen=True)
class DiagnosticDescriptor:
    id: str
    title: str
    message_format: str
    category: str
    severity: str = "warning"
    enabled_by_default: bool = True


IL2026 = DiagnosticDescriptor(
    id="IL2026",
    title=(
        "Members annotated with 'RequiresUnreferencedCodeAttribute' require dynamic access "
        "otherwise can break functionality when trimming application code"
    ),
    message_format=(
        "Calling '{0}' which has 'RequiresUnreferencedCodeAttribute' can break "
        "functionality when trimming application code. {1}.{2}"
    ),
    category="Trimming",
)


@dataclass(frozen=True)
class Finding:
    """One hazardous call site: who was called, why it is unsafe, and where."""
    member: str
    message: Optional[str]
    url: Optional[str]
    location: Location
    # Caller display name, kept for summaries and graphs only.
    caller: str = ""
    descriptor: DiagnosticDescriptor = IL2026

    def render_message(self) -> str:
        url = f" {self.url}" if self.url else ""
        return self.descriptor.message_format.format(self.member, self.message or "", url)


def format_diagnostic(finding: Finding) -> str:
    d = finding.descriptor
    return f"{finding.location}: {d.severity} {d.id}: {finding.render_message()}"


def finding_to_dict(finding: Finding) -> Dict[str, Any]:
    loc = finding.location
    return {
        "id": finding.descriptor.id,
        "severity": finding.descriptor.severity,
        "member": finding.member,
        "message": finding.message,
        "url": finding.url,
        "caller": finding.caller,
        "location": {"file": loc.file, "line": loc.line, "column": loc.column},
        "text": finding.render_message(),
    }


def generate_findings_summary(findings: List[Finding]) -> Dict[str, Any]:
    """
    Aggregate findings for reporting.

    Returns:
        Dict: totals, counts per called member and per file, plus details
    """
    summary: Dict[str, Any] = {
        "total_findings": len(findings),
        "by_member": {},
        "by_file": {},
        "finding_details": [],
    }

    for finding in findings:
        summary["by_member"][finding.member] = summary["by_member"].get(finding.member, 0) + 1
        f = finding.location.file
        summary["by_file"][f] = summary["by_file"].get(f, 0) + 1
        summary["finding_details"].append(finding_to_dict(finding))

    return summary
