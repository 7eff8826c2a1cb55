# demfill

`demfill` fills the depressions in a digital elevation model (DEM). A depression, or pit, is a cell or group of cells that no flow path leaves. After filling, water can run from every valid cell to the edge of the grid or to a no-data area. The methods raise cells to reach this state. They never lower a cell below its original elevation.

The package offers several filling methods:

| Method | Function | `--method` value |
| --- | --- | --- |
| Barnes et al. (2014) priority-flood with a pit queue | `demfill.priority_flood.fill_barnes` | `barnes` (default) |
| Wang & Liu (2006) priority-flood | `demfill.priority_flood.fill_wang` | `wang` |
| Planchon & Darboux iterative removal of excess water | `demfill.priority_flood.fill_planchon_darboux` | `planchon-darboux` |
| Zhou et al. one-pass variant | `demfill.zhou.fill_zhou_onepass` | `zhou-onepass` |
| Zhou et al. direct variant | `demfill.zhou.fill_zhou_direct` | `zhou-direct` |
| Zhou et al. two-pass variant | `demfill.zhou_twopass.fill_zhou_twopass` | `zhou-twopass` |
| Wei et al. variant | `demfill.wei.fill_wei` | `wei` |

Each function takes a `Dem` and returns a new filled `Dem`. The input grid is left unchanged.

Cells that hold `-9999` are no-data cells. A valid cell that touches the edge of the grid or a no-data cell is a border cell, and water can drain out of it. The Wei variant seeds its queue a little differently: it starts from the cells on the grid edge and from the valid neighbours of no-data cells.

## Installation

```
pip install .
```

To install with the test dependencies:

```
pip install ".[test]"
```

## Command line

`demfill` reads a single-band 32-bit float GeoTIFF and fills its depressions. It writes the result as a float32 TIFF that carries:

- the input's geotransform,
- `-9999` as the no-data value,
- the band statistics (minimum, maximum, mean and standard deviation) as GDAL metadata tags.

```
demfill input.tif filled.tif
demfill -m zhou-onepass input.tif filled.tif
```

`-m` / `--method` selects the filling method from the values in the table above. While it runs, the command prints the grid size, the method and the time it used. If a file cannot be read or written, it prints an error to standard error and exits with status 1.

## Library use

```python
from demfill.cli import Method, fill, fill_file
from demfill.grid import Dem
from demfill.raster_io import read_tiff, write_tiff
from demfill.stats import calculate_statistics

# Fill a file with a chosen method; returns the filled grid.
fill_file("input.tif", "filled.tif", Method.BARNES)

# Or work on a grid in memory.
dem = Dem.empty(3, 3)
for row in range(3):
    for col in range(3):
        dem[row, col] = 5.0
dem[1, 1] = 1.0                 # a one-cell pit

filled = fill(dem, Method.WANG)
print(filled[1, 1])             # 5.0

stats = calculate_statistics(filled)
print(stats.minimum, stats.maximum, stats.mean, stats.std_dev)
```

You can also build a grid straight from a two-dimensional array or nested list with `Dem(data)`, and call any filling function directly, for example `fill_zhou_onepass(dem)` or `fill_wei(dem)`.

### Reading and writing

`demfill.raster_io` provides these functions:

- `read_tiff(path)` returns a `(Dem, geotransform)` pair. The geotransform has six values. It comes from the file's model transformation tag or from its tiepoint and pixel-scale tags. If the file has neither, it defaults to `(0, 1, 0, 0, 0, 1)`.
- `write_tiff(path, dem, geotransform=None, statistics=None, nodata=-9999)` writes a float32 TIFF with the given georeferencing, statistics and no-data tags.
- `read_raw(path, width, height)` reads a headerless grid of native-order 32-bit floats. Any cells the file is too short to cover stay no-data.

`read_tiff` and `read_raw` raise `RasterError` when a file cannot be read. `read_tiff` also raises it when the data is not 32-bit float. `write_tiff` raises it when the file cannot be written.

`calculate_statistics(dem)` returns a `Statistics` value computed over the valid cells. It raises `ValueError` if the grid has no valid cells.

### Grid helpers

`demfill.grid` provides the building blocks that the filling methods share:

- `Dem` is the float32 elevation grid. It supports `dem[row, col]` indexing, and an index outside the grid raises `IndexError`. It also has `width`, `height`, `is_nodata`, `in_grid`, `copy`, `Dem.empty(height, width)` and `flow_direction(row, col, spill)`. `flow_direction` returns the D8 code (1, 2, 4, … 128) of the steepest descent from a cell.
- `Flag` keeps one processed/unprocessed mark per cell. `is_processed` treats any cell outside the grid as processed.
- `Node` is a cell position together with its spill elevation. Nodes compare equal by position and are ordered by spill.
- `neighbour(direction, row, col)` gives the cell that lies in one of the eight directions. `step_length(direction)` gives the length of that step: 1 for straight steps and about 1.414 for diagonal ones.

## Limitations

- The package reads and writes TIFF files through Pillow. It handles only single-band 32-bit float data and does not use GDAL.
- Only the geotransform is carried over from the input. The coordinate reference system and any other GeoTIFF keys are not copied to the output.
- The package has no command that writes flow-direction grids. `Dem.flow_direction` is available only as a library call.