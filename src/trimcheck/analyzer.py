"""
Trimming hazard check - flags calls into members marked with
``RequiresUnreferencedCodeAttribute`` from callers that are not marked
themselves.
"""

from __future__ import annotations
from dataclasses import dataclass
from typing import Any, List, Optional
import fnmatch

from .config_loader import TrimCheckConfig
from .diagnostics import Finding
from .markers import find_marker, marker_of
from .operations import (
    Invocation,
    ObjectCreation,
    Operation,
    PropertyReference,
    ValueUsage,
    value_usage_of,
    walk,
)
from .symbols import Compilation, Location, MethodSymbol, Symbol, is_method_like

PUBLISH_TRIMMED = "PublishTrimmed"


@dataclass(frozen=True)
class CallSite:
    target: MethodSymbol
    location: Location
    enclosing: Optional[Symbol]
    is_virtual: bool = False


def call_sites(operation: Operation, enclosing: Optional[Symbol]) -> List[CallSite]:
    """
    Resolve a call-like operation to the members whose marker must be checked.

    Virtual calls that bind to an override are dropped: the override is a
    declaration of its own and gets checked wherever it is called directly.
    A property reference produces one site per accessor actually used.
    """
    if isinstance(operation, Invocation):
        method = operation.target_method
        if method is None:
            return []
        if operation.is_virtual and method.overridden_method is not None:
            return []
        return [CallSite(method, operation.location, enclosing, operation.is_virtual)]

    if isinstance(operation, ObjectCreation):
        if operation.constructor is None:
            return []
        return [CallSite(operation.constructor, operation.location, enclosing)]

    if isinstance(operation, PropertyReference):
        prop = operation.target_property
        if prop is None:
            return []
        usage = value_usage_of(operation)
        sites: List[CallSite] = []
        if ValueUsage.READ in usage and prop.get_method is not None:
            sites.append(CallSite(prop.get_method, operation.location, enclosing))
        if ValueUsage.WRITE in usage and prop.set_method is not None:
            sites.append(CallSite(prop.set_method, operation.location, enclosing))
        return sites

    return []


def is_suppressed(enclosing: Optional[Symbol]) -> bool:
    """A marked caller takes over the warning for everything it calls."""
    return is_method_like(enclosing) and find_marker(enclosing.attributes) is not None


def evaluate(call_site: CallSite) -> Optional[Finding]:
    if is_suppressed(call_site.enclosing):
        return None
    marker = marker_of(call_site.target)
    if marker is None:
        return None
    caller = call_site.enclosing.to_display_string() if call_site.enclosing is not None else ""
    return Finding(
        member=call_site.target.original_definition.to_display_string(),
        message=marker.message,
        url=marker.url,
        location=call_site.location,
        caller=caller,
    )


def is_trimming_enabled(value: Any) -> bool:
    if value is None:
        return False
    return str(value).strip().lower() == "true"


class TrimmingHazardChecker:
    """Runs the hazard check over every body in a compilation."""

    def __init__(self, config: Optional[TrimCheckConfig] = None):
        self.config = config or TrimCheckConfig()

    def is_enabled(self, compilation: Compilation) -> bool:
        value = self.config.publish_trimmed
        if value is None:
            value = compilation.properties.get(PUBLISH_TRIMMED)
        return is_trimming_enabled(value)

    def check(self, compilation: Compilation) -> List[Finding]:
        findings: List[Finding] = []
        for body in compilation.bodies:
            for operation, enclosing in walk(body.operations, body.owner):
                for site in call_sites(operation, enclosing):
                    finding = evaluate(site)
                    if finding is not None and not self._is_excluded(finding):
                        findings.append(finding)
        return findings

    def _is_excluded(self, finding: Finding) -> bool:
        path = finding.location.file
        return any(fnmatch.fnmatch(path, pat) for pat in self.config.exclude)


def check_trimming_hazards(
    compilation: Compilation, config: Optional[TrimCheckConfig] = None
) -> List[Finding]:
    """
    Check a compilation for calls into trimming-unsafe members.

    Args:
        compilation: the loaded semantic model
        config: check options; ``publish_trimmed`` overrides the model property

    Returns:
        List[Finding]: findings in source order, empty when trimming is off
    """
    checker = TrimmingHazardChecker(config)
    if not checker.is_enabled(compilation):
        return []
    return checker.check(compilation)
