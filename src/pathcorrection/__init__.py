"""Path orientation correction tool: CSV point paths, orientation solver and 3D preview."""

__version__ = "0.1.0"
