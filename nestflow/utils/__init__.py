"""Utility modules."""

from nestflow.utils.normalization import normalize_email, normalize_optional_text
from nestflow.utils.presentation import child_status_label, display_name

__all__ = [
    # Normalization
    "normalize_email",
    "normalize_optional_text",
    # Presentation
    "child_status_label",
    "display_name",
]
