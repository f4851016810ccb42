from pathlib import Path

import pytest

from simulate import build_parser, main, simulate


def test_simulate_returns_matching_pixels() -> None:
    gateware, reference, expected = simulate(2, 1, frames=2)
    assert gateware == reference == expected
    assert len(expected) == 8


def test_main_succeeds() -> None:
    assert main(["--width", "3", "--height", "1", "--log-level", "debug"]) == 0


def test_main_writes_verilog(tmp_path: Path) -> None:
    target = tmp_path / "capture.v"
    assert main(["--verilog", str(target)]) == 0
    assert "module capture" in target.read_text()


def test_main_writes_vcd(tmp_path: Path) -> None:
    target = tmp_path / "capture.vcd"
    assert main(["--width", "1", "--height", "1", "--vcd", str(target)]) == 0
    assert target.exists()


@pytest.mark.parametrize("argv", [
    ["--vblank", "1"],
    ["--bits", "0"],
    ["--width", "4096"],
    ["--height", "-1"],
])
def test_main_rejects_bad_arguments(argv) -> None:
    with pytest.raises(SystemExit) as exc:
        main(argv)
    assert exc.value.code == 2


def test_parser_defaults() -> None:
    args = build_parser().parse_args([])
    assert (args.width, args.height, args.bits) == (4, 2, 12)
    assert args.verilog is None
