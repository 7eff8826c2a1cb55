import xml.etree.ElementTree as ET

import numpy as np
import pytest
from PIL import Image

from demfill.grid import NO_DATA_VALUE, Dem
from demfill.raster_io import (
    DEFAULT_GEOTRANSFORM,
    RasterError,
    read_raw,
    read_tiff,
    write_tiff,
)
from demfill.stats import calculate_statistics


@pytest.fixture
def sample_dem():
    data = np.arange(12, dtype=np.float32).reshape(3, 4) * 1.5
    data[1, 2] = NO_DATA_VALUE
    return Dem(data)


def test_tiff_round_trip_keeps_data_and_geotransform(tmp_path, sample_dem):
    path = tmp_path / "dem.tif"
    geotransform = (500000.0, 30.0, 0.0, 4200000.0, 0.0, -30.0)
    write_tiff(path, sample_dem, geotransform)
    dem, read_back = read_tiff(path)
    assert np.array_equal(dem.data, sample_dem.data)
    assert read_back == pytest.approx(geotransform)
    assert dem.is_nodata(1, 2)


def test_rotated_geotransform_round_trip(tmp_path, sample_dem):
    path = tmp_path / "rotated.tif"
    geotransform = (10.0, 2.0, 0.5, 20.0, 0.25, -2.0)
    write_tiff(path, sample_dem, geotransform)
    _, read_back = read_tiff(path)
    assert read_back == pytest.approx(geotransform)


def test_missing_geotransform_reads_as_default(tmp_path, sample_dem):
    path = tmp_path / "plain.tif"
    write_tiff(path, sample_dem)
    _, geotransform = read_tiff(path)
    assert geotransform == DEFAULT_GEOTRANSFORM


def test_nodata_and_statistics_tags(tmp_path, sample_dem):
    path = tmp_path / "tagged.tif"
    stats = calculate_statistics(sample_dem)
    write_tiff(path, sample_dem, None, stats, -9999)
    with Image.open(path) as image:
        nodata = image.tag_v2[42113]
        metadata = image.tag_v2[42112]
    assert nodata == "-9999"
    items = {item.get("name"): float(item.text) for item in ET.fromstring(metadata)}
    assert items["STATISTICS_MINIMUM"] == stats.minimum
    assert items["STATISTICS_MAXIMUM"] == stats.maximum
    assert items["STATISTICS_MEAN"] == stats.mean
    assert items["STATISTICS_STDDEV"] == stats.std_dev


def test_non_float_tiff_is_rejected(tmp_path):
    path = tmp_path / "bytes.tif"
    Image.new("L", (3, 2)).save(path, format="TIFF")
    with pytest.raises(RasterError):
        read_tiff(path)


def test_missing_file_is_rejected(tmp_path):
    with pytest.raises(RasterError):
        read_tiff(tmp_path / "absent.tif")


def test_invalid_geotransform_length(tmp_path, sample_dem):
    with pytest.raises(ValueError):
        write_tiff(tmp_path / "bad.tif", sample_dem, (1.0, 2.0))


def test_raw_round_trip(tmp_path, sample_dem):
    path = tmp_path / "dem.raw"
    sample_dem.data.astype(np.float32).tofile(path)
    dem = read_raw(path, sample_dem.width, sample_dem.height)
    assert np.array_equal(dem.data, sample_dem.data)


def test_short_raw_file_leaves_nodata(tmp_path):
    path = tmp_path / "short.raw"
    np.array([1.0, 2.0, 3.0], dtype=np.float32).tofile(path)
    dem = read_raw(path, 2, 2)
    assert [dem[0, 0], dem[0, 1], dem[1, 0]] == [1.0, 2.0, 3.0]
    assert dem.is_nodata(1, 1)


def test_missing_raw_file_is_rejected(tmp_path):
    with pytest.raises(RasterError):
        read_raw(tmp_path / "absent.raw", 2, 2)