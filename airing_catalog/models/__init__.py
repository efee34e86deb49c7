"""
Output projections written by the pipeline.
"""

from airing_catalog.models.catalog import CatalogEntry, CatalogIndex, MetaRecord, Video

__all__ = [
    "CatalogEntry",
    "CatalogIndex",
    "MetaRecord",
    "Video",
]
