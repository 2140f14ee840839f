"""
Spatial analysis over a generated grid.

Distance fields, tile classification, region/passage/chokepoint detection and
floor island discovery used by the post-process passes.
"""
