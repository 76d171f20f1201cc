"""
Link verifier that checks every internal link found on a local site's homepage.
Reports broken links, soft "not found" pages and connection errors.
"""
from link_verifier.core import (
    Broken,
    ClassifiedLink,
    FetchResult,
    Good,
    LinkKind,
    RunReport,
    TransportError,
    VerifierConfig,
    classify_link,
    extract_links,
    fetch_page,
    verify_links,
)

__version__ = "1.0.0"
__all__ = [
    "Broken",
    "ClassifiedLink",
    "FetchResult",
    "Good",
    "LinkKind",
    "RunReport",
    "TransportError",
    "VerifierConfig",
    "classify_link",
    "extract_links",
    "fetch_page",
    "verify_links",
]
