"""Documentation URL discovery — best-effort enrichment of dependency records."""

from docpls.engines.docs.finder import DocumentationFinder
from docpls.engines.docs.urls import PackageMetadata, candidate_urls, normalize_url

__all__ = ["DocumentationFinder", "PackageMetadata", "candidate_urls", "normalize_url"]
