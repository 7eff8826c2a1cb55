"""Depression filling for digital elevation models: grids, TIFF I/O, statistics and several filling methods."""

__version__ = "0.1.0"
__all__ = ["cli", "grid", "priority_flood", "raster_io", "stats", "wei", "zhou", "zhou_twopass"]