"""
Discovery, fallback resolution and catalog assembly stages.
"""

from airing_catalog.ingestion.classifier import ContentClassifier, default_rules
from airing_catalog.ingestion.registry import ShowEntry, ShowRegistry

__all__ = [
    "ContentClassifier",
    "ShowEntry",
    "ShowRegistry",
    "default_rules",
]
