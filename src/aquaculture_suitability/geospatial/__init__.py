"""
Geospatial operations for the suitability overlay.

This module contains:
- Raster operations (reprojection, alignment, reclassification, rasterization)
- Vector operations (region validation, label coding, GeoJSON export)
"""
