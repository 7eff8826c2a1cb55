"""Reading and writing single-band float32 GeoTIFF and raw DEM files."""

from __future__ import annotations

import xml.etree.ElementTree as ET
from pathlib import Path
from typing import Optional, Sequence

import numpy as np
from PIL import Image, TiffImagePlugin, TiffTags

from demfill.grid import NO_DATA_VALUE, Dem
from demfill.stats import Statistics

DEFAULT_GEOTRANSFORM = (0.0, 1.0, 0.0, 0.0, 0.0, 1.0)

_MODEL_PIXEL_SCALE = 33550
_MODEL_TIEPOINT = 33922
_MODEL_TRANSFORMATION = 34264
_GEO_KEY_DIRECTORY = 34735
_GDAL_METADATA = 42112
_GDAL_NODATA = 42113

# Key directory header (version 1.1.0, one key) and GTRasterTypeGeoKey = PixelIsArea.
_GEO_KEYS = (1, 1, 0, 1, 1025, 0, 1, 1)


class RasterError(Exception):
    """A raster file could not be read or written."""


def _geotransform_from_tags(tags) -> tuple[float, ...]:
    transform = tags.get(_MODEL_TRANSFORMATION)
    if transform is not None and len(transform) >= 8:
        a, b, _, d, e, f, _, h = transform[:8]
        return tuple(float(v) for v in (d, a, b, h, e, f))
    scale = tags.get(_MODEL_PIXEL_SCALE)
    tiepoint = tags.get(_MODEL_TIEPOINT)
    if scale is not None and tiepoint is not None and len(scale) >= 2 and len(tiepoint) >= 6:
        i, j, _, x, y, _ = tiepoint[:6]
        sx, sy = scale[:2]
        return tuple(float(v) for v in (x - i * sx, sx, 0.0, y + j * sy, 0.0, -sy))
    return DEFAULT_GEOTRANSFORM


def read_tiff(path) -> tuple[Dem, tuple[float, ...]]:
    """Read the first band of a float32 GeoTIFF as a DEM with its geotransform."""
    try:
        image = Image.open(path)
    except OSError as exc:
        raise RasterError(f"failed to read the GeoTIFF file {path}") from exc
    with image:
        if image.mode != "F":
            raise RasterError(f"{path} does not hold 32-bit float data (mode {image.mode})")
        try:
            data = np.asarray(image, dtype=np.float32)
        except OSError as exc:
            raise RasterError(f"failed to read raster data from {path}") from exc
        geotransform = _geotransform_from_tags(getattr(image, "tag_v2", {}))
    return Dem(data), geotransform


def _set_tag(ifd, tag: int, tag_type: int, value) -> None:
    ifd.tagtype[tag] = tag_type
    ifd[tag] = value


def _format_nodata(nodata: float) -> str:
    value = float(nodata)
    return str(int(value)) if value.is_integer() else repr(value)


def _statistics_xml(statistics: Statistics) -> str:
    root = ET.Element("GDALMetadata")
    for name, value in (
        ("STATISTICS_MAXIMUM", statistics.maximum),
        ("STATISTICS_MEAN", statistics.mean),
        ("STATISTICS_MINIMUM", statistics.minimum),
        ("STATISTICS_STDDEV", statistics.std_dev),
    ):
        item = ET.SubElement(root, "Item", name=name, sample="0")
        item.text = repr(float(value))
    return ET.tostring(root, encoding="unicode")


def _set_geotransform(ifd, geotransform: Sequence[float]) -> None:
    if len(geotransform) != 6:
        raise ValueError("a geotransform has exactly six values")
    x0, sx, rx, y0, ry, sy = (float(v) for v in geotransform)
    if rx == 0.0 and ry == 0.0:
        _set_tag(ifd, _MODEL_PIXEL_SCALE, TiffTags.DOUBLE, (sx, -sy, 0.0))
        _set_tag(ifd, _MODEL_TIEPOINT, TiffTags.DOUBLE, (0.0, 0.0, 0.0, x0, y0, 0.0))
    else:
        matrix = (
            sx, rx, 0.0, x0,
            ry, sy, 0.0, y0,
            0.0, 0.0, 0.0, 0.0,
            0.0, 0.0, 0.0, 1.0,
        )
        _set_tag(ifd, _MODEL_TRANSFORMATION, TiffTags.DOUBLE, matrix)
    _set_tag(ifd, _GEO_KEY_DIRECTORY, TiffTags.SHORT, _GEO_KEYS)


def write_tiff(
    path,
    dem: Dem,
    geotransform: Optional[Sequence[float]] = None,
    statistics: Optional[Statistics] = None,
    nodata: float = NO_DATA_VALUE,
) -> None:
    """Write a DEM as a single-band float32 GeoTIFF."""
    image = Image.fromarray(np.ascontiguousarray(dem.data, dtype=np.float32))
    ifd = TiffImagePlugin.ImageFileDirectory_v2()
    if geotransform is not None:
        _set_geotransform(ifd, geotransform)
    _set_tag(ifd, _GDAL_NODATA, TiffTags.ASCII, _format_nodata(nodata))
    if statistics is not None:
        _set_tag(ifd, _GDAL_METADATA, TiffTags.ASCII, _statistics_xml(statistics))
    try:
        image.save(path, format="TIFF", tiffinfo=ifd)
    except OSError as exc:
        raise RasterError(f"failed to write the GeoTIFF file {path}") from exc


def read_raw(path, width: int, height: int) -> Dem:
    """Read native-order float32 cells from a headerless binary file.

    Cells the file is too short to cover are left as no-data.
    """
    if width < 0 or height < 0:
        raise ValueError("grid dimensions must not be negative")
    count = width * height
    try:
        raw = Path(path).read_bytes()
    except OSError as exc:
        raise RasterError(f"failed to read the raw DEM file {path}") from exc
    item = np.dtype(np.float32).itemsize
    available = min(len(raw) // item, count)
    values = np.frombuffer(raw[: available * item], dtype=np.float32)
    data = np.full(count, NO_DATA_VALUE, dtype=np.float32)
    data[:available] = values
    return Dem(data.reshape(height, width))