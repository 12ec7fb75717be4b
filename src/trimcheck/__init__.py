"""
trimcheck - flag calls into members marked RequiresUnreferencedCode (IL2026)

    from trimcheck import check_model

    findings = check_model("app.model.yaml")
    for f in findings:
        print(f.location, f.member, f.message)
"""


def check_model(model_path, config_path=None):
    """Load a model dump plus config and return the findings."""
    from pathlib import Path

    from .analyzer import check_trimming_hazards
    from .config_loader import load_config
    from .model_loader import load_model

    config = load_config(Path(config_path) if config_path else None)
    return check_trimming_hazards(load_model(Path(model_path)), config)


from .analyzer import CallSite, call_sites, check_trimming_hazards, evaluate, is_suppressed
from .diagnostics import IL2026, Finding
from .markers import REQUIRES_UNREFERENCED_CODE_ATTRIBUTE, find_marker
from .naming import is_named_type

from importlib.metadata import PackageNotFoundError, version

try:
    __version__ = version("trimcheck")
except PackageNotFoundError:
    # Fallback for development/uninstalled package
    __version__ = "unknown"

__all__ = [
    "CallSite",
    "Finding",
    "IL2026",
    "REQUIRES_UNREFERENCED_CODE_ATTRIBUTE",
    "call_sites",
    "check_model",
    "check_trimming_hazards",
    "evaluate",
    "find_marker",
    "is_named_type",
    "is_suppressed",
    "__version__",
]
