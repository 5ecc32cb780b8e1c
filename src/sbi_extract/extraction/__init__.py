"""
Candidate discovery and normalization.

Provides the per-node extractor, the spatial tree walker, the scheme
normalization passes and remote URL resolution used by the pipeline.
"""

from .node_extractor import CSS_IMAGE_PROPERTIES, NodeExtractor, css_urls
from .normalizer import SchemeNormalizer, apply_pass
from .remote import RemoteImageFetcher, RemoteResolver
from .walker import SpatialTreeWalker, iter_descendants

__all__ = [
    "CSS_IMAGE_PROPERTIES",
    "NodeExtractor",
    "RemoteImageFetcher",
    "RemoteResolver",
    "SchemeNormalizer",
    "SpatialTreeWalker",
    "apply_pass",
    "css_urls",
    "iter_descendants",
]
