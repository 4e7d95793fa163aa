"""Grid-based particle-filter SLAM building blocks: poses, motion model,
trajectory tree, scan preparation, occupancy grids and GFS log tools."""

__version__ = "0.1.0"