import logging

import numpy as np
import pytest

from volcrate.cli.main import build_parser, main


@pytest.fixture(autouse=True)
def _reset_volcrate_logger():
    yield
    logger = logging.getLogger("volcrate")
    for handler in list(logger.handlers):
        handler.close()
    logger.handlers.clear()


def _gen_args(tmp_path, *extra):
    return ["-gen", "plane_x", "-dims", "8", "8", "8", "-crate", "8", "-outdir", str(tmp_path), *extra]


def test_help_exits_zero(capsys):
    assert main(["-h"]) == 0
    out = capsys.readouterr().out
    assert "-crate" in out and "-raw" in out and "-gen" in out


@pytest.mark.parametrize(
    "argv",
    [
        ["-crate", "99", "-h"],
        ["-gen", "plane_x", "-raw", "x.raw", "--help"],
        ["-bogus", "-h"],
    ],
)
def test_help_wins_over_other_errors(capsys, argv):
    assert main(argv) == 0
    assert "usage:" in capsys.readouterr().out


def test_parser_accepts_generator_mode():
    args = build_parser().parse_args(["-gen", "sphere", "-dims", "4", "5", "6", "-crate", "16"])
    assert args.gen == "sphere"
    assert args.dims == [4, 5, 6]
    assert args.crate == 16
    assert args.raw is None


@pytest.mark.parametrize(
    "argv, fragment",
    [
        (["-crate", "8"], "-raw"),
        (["-raw", "a_1x1x1_uint8.raw", "-gen", "plane_x", "-dims", "1", "1", "1", "-crate", "8"], "not allowed"),
        (["-gen", "plane_x", "-crate", "8"], "dims"),
        (["-gen", "plane_x", "-dims", "8", "8", "8"], "-crate"),
        (["-gen", "plane_x", "-dims", "8", "8", "8", "-crate", "33"], "[1, 32]"),
        (["-gen", "plane_x", "-dims", "8", "8", "8", "-crate", "0"], "[1, 32]"),
        (["-gen", "plane_x", "-dims", "8", "8", "8", "-crate", "eight"], "integer"),
        (["-gen", "plane_x", "-dims", "8", "0", "8", "-crate", "8"], "positive"),
        (["-gen", "plane_x", "-dims", "8", "8", "8", "-crate", "8", "-bogus"], "-bogus"),
        (["-ge", "plane_x", "-dims", "8", "8", "8", "-crate", "8"], "unrecognized arguments: -ge"),
        (["-gen", "plane_x", "-dims", "8", "8", "8", "-crate=8"], "unrecognized arguments: -crate=8"),
        (["-gen", "plane_x", "-dims", "8", "-1", "8", "-crate", "8"], "positive"),
        (["-gen", "plane_x", "-dims", "8", "8", "8", "-crate", "8", "-cr", "8"], "unrecognized arguments: -cr"),
    ],
)
def test_usage_errors_exit_one(capsys, argv, fragment):
    assert main(argv) == 1
    err = capsys.readouterr().err
    assert "[error]" in err
    assert fragment in err
    assert "usage:" in err


def test_unknown_generator_exits_one(tmp_path, capsys):
    argv = ["-gen", "torus", "-dims", "4", "4", "4", "-crate", "8", "-outdir", str(tmp_path)]
    assert main(argv) == 1
    assert "torus" in capsys.readouterr().err
    assert list(tmp_path.iterdir()) == []


def test_bad_raw_name_exits_one(tmp_path, capsys):
    src = tmp_path / "volume.raw"
    src.write_bytes(b"\x00" * 8)
    assert main(["-raw", str(src), "-crate", "8", "-outdir", str(tmp_path / "out")]) == 1
    assert "did not match" in capsys.readouterr().err
    assert not (tmp_path / "out").exists()


def test_unsupported_encoding_exits_one(tmp_path, capsys):
    src = tmp_path / "vol_2x2x2_int32.raw"
    src.write_bytes(b"\x00" * 32)
    assert main(["-raw", str(src), "-crate", "8", "-outdir", str(tmp_path / "out")]) == 1
    assert "int32" in capsys.readouterr().err


def test_missing_raw_file_exits_one(tmp_path, capsys):
    assert main(["-raw", str(tmp_path / "gone_2x2x2_uint8.raw"), "-crate", "8"]) == 1
    assert "[error]" in capsys.readouterr().err


def test_generate_end_to_end(tmp_path, capsys):
    pytest.importorskip("zfpy")
    from volcrate.encoding.codec import ZfpField, open_codec
    from volcrate.encoding.zfp import ZfpCodec
    from volcrate.fields import generate_volume
    from volcrate.models import GridShape

    assert main(_gen_args(tmp_path)) == 0

    files = sorted(p.name for p in tmp_path.iterdir())
    assert files == ["plane_x_8x8x8_float32.gen.crate8.zfp"]

    field = ZfpField.from_volume(generate_volume("plane_x", GridShape(8, 8, 8)))
    with open_codec(ZfpCodec()) as codec:
        codec.configure_fixed_rate(8)
        max_bytes = codec.max_output_size(field)
    assert 0 < (tmp_path / files[0]).stat().st_size <= max_bytes

    out = capsys.readouterr().out
    assert "[compress] used compression rate: 8" in out
    assert "[compress] uncompressed size: 2048b" in out


def test_generate_twice_is_byte_identical(tmp_path):
    pytest.importorskip("zfpy")
    assert main(_gen_args(tmp_path / "a")) == 0
    assert main(_gen_args(tmp_path / "b")) == 0
    name = "plane_x_8x8x8_float32.gen.crate8.zfp"
    assert (tmp_path / "a" / name).read_bytes() == (tmp_path / "b" / name).read_bytes()


def test_raw_end_to_end_with_log_file(tmp_path, capsys):
    pytest.importorskip("zfpy")
    src = tmp_path / "ramp_8x4x4_uint16.raw"
    np.arange(128, dtype="=u2").tofile(src)
    log_file = tmp_path / "run.log"
    out_dir = tmp_path / "out"

    argv = ["-raw", str(src), "-crate", "32", "-outdir", str(out_dir), "-dims", "1", "1", "1", "-v", "-log", str(log_file)]
    assert main(argv) == 0

    assert [p.name for p in out_dir.iterdir()] == ["ramp_8x4x4_uint16.raw.crate32.zfp"]
    log_text = log_file.read_text(encoding="utf-8")
    assert "Loaded ramp volume, size: 8x4x4" in log_text
    assert "-dims is ignored" in log_text
