import numpy as np
import pytest

from volcrate.errors import FormatError, UnsupportedEncodingError
from volcrate.io import load_raw_volume, resolve_encoding
from volcrate.models import GridShape, VoxelEncoding


def test_resolve_encoding_widths():
    assert resolve_encoding("uint8").byte_width == 1
    assert resolve_encoding("uint16").byte_width == 2
    assert resolve_encoding("float32").byte_width == 4
    with pytest.raises(UnsupportedEncodingError):
        resolve_encoding("int16")


def test_promote_uint8_by_value():
    out = VoxelEncoding.UINT8.promote(bytes([0, 1, 127, 128, 255]))
    assert out.dtype == np.float32
    np.testing.assert_array_equal(out, [0.0, 1.0, 127.0, 128.0, 255.0])


def test_promote_uint16_unsigned_native():
    values = np.array([0, 1, 256, 32768, 65535], dtype="=u2")
    out = VoxelEncoding.UINT16.promote(values.tobytes())
    np.testing.assert_array_equal(out, [0.0, 1.0, 256.0, 32768.0, 65535.0])


def test_promote_float32_reinterprets_bits():
    values = np.array([-1.5, 0.0, 3.25e-8, 1.0e30], dtype="=f4")
    out = VoxelEncoding.FLOAT32.promote(values.tobytes())
    assert out.tobytes() == values.tobytes()


def test_promote_rejects_partial_element():
    with pytest.raises(ValueError):
        VoxelEncoding.UINT16.promote(b"\x01\x02\x03")


def test_load_uint8_volume(tmp_path):
    raw = np.arange(0, 256, 32, dtype=np.uint8)
    raw[-1] = 0xFF
    path = tmp_path / "ramp_2x2x2_uint8.raw"
    raw.tofile(path)

    volume = load_raw_volume(path)
    assert volume.shape == GridShape(2, 2, 2)
    assert volume.data.dtype == np.float32
    np.testing.assert_array_equal(volume.data.ravel(), raw.astype(np.float32))
    assert volume.voxel(1, 1, 1) == 255.0


def test_load_uint16_volume_layout(tmp_path):
    shape = GridShape(3, 2, 2)
    raw = np.arange(shape.voxel_count, dtype="=u2") * 5000
    path = tmp_path / f"ramp_{shape}_uint16.raw"
    raw.tofile(path)

    volume = load_raw_volume(str(path))
    flat = volume.data.ravel()
    for vz in range(shape.z):
        for vy in range(shape.y):
            for vx in range(shape.x):
                idx = vx + shape.x * (vy + shape.y * vz)
                assert volume.voxel(vx, vy, vz) == float(raw[idx]) == flat[idx]


def test_load_float32_volume(tmp_path):
    raw = np.linspace(-2.0, 2.0, 24, dtype="=f4")
    path = tmp_path / "lin_2x3x4_float32.raw"
    raw.tofile(path)

    volume = load_raw_volume(path)
    assert volume.data.shape == (4, 3, 2)
    np.testing.assert_array_equal(volume.data.ravel(), raw)


def test_short_file_leaves_tail_zero(tmp_path):
    path = tmp_path / "short_2x2x2_uint8.raw"
    path.write_bytes(bytes([9, 8, 7, 6, 5]))

    volume = load_raw_volume(path)
    np.testing.assert_array_equal(volume.data.ravel(), [9, 8, 7, 6, 5, 0, 0, 0])


def test_short_file_partial_element(tmp_path):
    path = tmp_path / "short_2x1x1_uint16.raw"
    path.write_bytes(bytes([1, 2, 3]))

    volume = load_raw_volume(path)
    expected = np.frombuffer(bytes([1, 2, 3, 0]), dtype="=u2").astype(np.float32)
    np.testing.assert_array_equal(volume.data.ravel(), expected)


def test_longer_file_reads_only_the_grid(tmp_path):
    path = tmp_path / "long_2x1x1_uint8.raw"
    path.write_bytes(bytes([4, 5, 6, 7]))
    np.testing.assert_array_equal(load_raw_volume(path).data.ravel(), [4.0, 5.0])


def test_unsupported_encoding_fails_before_reading(tmp_path):
    with pytest.raises(UnsupportedEncodingError) as info:
        load_raw_volume(tmp_path / "missing_2x2x2_int32.raw")
    assert info.value.dtype == "int32"


def test_bad_name_fails_before_reading(tmp_path):
    path = tmp_path / "volume.raw"
    path.write_bytes(b"\x00" * 8)
    with pytest.raises(FormatError):
        load_raw_volume(path)


def test_missing_file(tmp_path):
    with pytest.raises(FileNotFoundError):
        load_raw_volume(tmp_path / "missing_2x2x2_uint8.raw")


def test_loaded_volume_is_read_only(tmp_path):
    path = tmp_path / "ro_2x2x2_uint8.raw"
    path.write_bytes(bytes(range(8)))
    volume = load_raw_volume(path)
    with pytest.raises(ValueError):
        volume.data[0, 0, 0] = 1.0
