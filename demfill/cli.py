"""Command line front end: fill the depressions of a GeoTIFF DEM."""

from __future__ import annotations

import argparse
import sys
import time
from enum import Enum
from typing import Callable, Optional, Sequence

from demfill.grid import NO_DATA_VALUE, Dem
from demfill.priority_flood import fill_barnes, fill_planchon_darboux, fill_wang
from demfill.raster_io import RasterError, read_tiff, write_tiff
from demfill.stats import calculate_statistics
from demfill.wei import fill_wei
from demfill.zhou import fill_zhou_direct, fill_zhou_onepass
from demfill.zhou_twopass import fill_zhou_twopass


class Method(Enum):
    """The available depression-filling methods."""

    ZHOU_ONEPASS = "zhou-onepass"
    WANG = "wang"
    BARNES = "barnes"
    ZHOU_TWOPASS = "zhou-twopass"
    WEI = "wei"
    PLANCHON_DARBOUX = "planchon-darboux"
    ZHOU_DIRECT = "zhou-direct"

    @property
    def description(self) -> str:
        return _DESCRIPTIONS[self]


_DESCRIPTIONS = {
    Method.ZHOU_ONEPASS: "the one-pass implementation of the proposed variant",
    Method.WANG: "Wang & Liu (2006) method",
    Method.BARNES: "Barnes et al. (2014) method",
    Method.ZHOU_TWOPASS: "the two-pass implementation of the proposed variant",
    Method.WEI: "our proposed variant",
    Method.PLANCHON_DARBOUX: "the Planchon & Darboux (2001) method",
    Method.ZHOU_DIRECT: "the direct implementation of the proposed variant",
}

_FILLERS: dict[Method, Callable[[Dem], Dem]] = {
    Method.ZHOU_ONEPASS: fill_zhou_onepass,
    Method.WANG: fill_wang,
    Method.BARNES: fill_barnes,
    Method.ZHOU_TWOPASS: fill_zhou_twopass,
    Method.WEI: fill_wei,
    Method.PLANCHON_DARBOUX: fill_planchon_darboux,
    Method.ZHOU_DIRECT: fill_zhou_direct,
}


def fill(dem: Dem, method: Method = Method.BARNES) -> Dem:
    """Fill the depressions of a DEM with the chosen method."""
    return _FILLERS[Method(method)](dem)


def fill_file(input_path, output_path, method: Method = Method.BARNES) -> Dem:
    """Read a float32 GeoTIFF, fill its depressions and write the result.

    Returns the filled DEM. Raises RasterError if a file cannot be read or written.
    """
    method = Method(method)
    print("Reading tiff file...")
    dem, geotransform = read_tiff(input_path)
    print(f"DEM Width:{dem.width}  Height:{dem.height}")
    print(f"Using {method.description} to fill DEM")

    start = time.perf_counter()
    filled = fill(dem, method)
    elapsed = time.perf_counter() - start
    print(f"Time used:{elapsed:.3f} seconds")

    try:
        statistics = calculate_statistics(filled)
    except ValueError:
        statistics = None
    write_tiff(output_path, filled, geotransform, statistics, NO_DATA_VALUE)
    return filled


def main(argv: Optional[Sequence[str]] = None) -> int:
    parser = argparse.ArgumentParser(
        prog="demfill", description="Fill the depressions of a float32 GeoTIFF DEM."
    )
    parser.add_argument("input", help="input GeoTIFF file")
    parser.add_argument("output", help="output GeoTIFF file")
    parser.add_argument(
        "-m",
        "--method",
        choices=[method.value for method in Method],
        default=Method.BARNES.value,
        help="filling method (default: %(default)s)",
    )
    args = parser.parse_args(argv)
    try:
        fill_file(args.input, args.output, Method(args.method))
    except RasterError as exc:
        print(f"Error: {exc}", file=sys.stderr)
        return 1
    return 0


if __name__ == "__main__":
    sys.exit(main())