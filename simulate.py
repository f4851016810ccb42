"""Simulate the capture core against a ramp pattern or export it as Verilog."""
import argparse
import logging

from migen import run_simulation
from migen.fhdl.verilog import convert

from capture import Capture
from model import Inputs, pixels, run
from pattern import CaptureBench
from sensor import Frame

logger = logging.getLogger(__name__)


def build_parser():
    parser = argparse.ArgumentParser(description=__doc__)
    parser.add_argument("--width", type=int, default=4,
                        help="configured width, half the captured columns")
    parser.add_argument("--height", type=int, default=2,
                        help="configured height, half the captured rows")
    parser.add_argument("--bits", type=int, default=12,
                        help="sample and coordinate width")
    parser.add_argument("--frames", type=int, default=2,
                        help="pattern frames to simulate")
    parser.add_argument("--hblank", type=int, default=Frame.hblank)
    parser.add_argument("--vblank", type=int, default=Frame.vblank)
    parser.add_argument("--vcd", default=None, help="write a VCD trace")
    parser.add_argument("--verilog", default=None,
                        help="write the converted core and exit")
    parser.add_argument("--log-level", default="info",
                        choices=("debug", "info", "warning", "error"))
    return parser


def export(filename, bits):
    core = Capture(bits)
    convert(core, ios=core.ios(), name="capture").write(filename)
    logger.info("Wrote %s", filename)


def simulate(width, height, bits=12, frames=2, hblank=Frame.hblank,
             vblank=Frame.vblank, vcd_name=None):
    """Returns (gateware pixels, model pixels, expected pixels)."""
    f = Frame.ramp(2*width, 2*height, bits=bits, hblank=hblank,
                   vblank=vblank)
    words = list(f.gen_frame())
    bench = CaptureBench(words, bits)
    ret = []
    run_simulation(bench, bench.test(frames*len(words), ret, width=width,
                                     height=height),
                   vcd_name=vcd_name)
    reset = Inputs(rst_n=0, width=width, height=height)
    outputs, _ = run([reset] + [i for i, o in ret], bits=bits)
    gateware = pixels([o for i, o in ret])
    logger.debug("Simulated %d cycles", len(ret))
    return gateware, pixels(outputs[1:]), f.pixels()


def main(argv=None):
    parser = build_parser()
    args = parser.parse_args(argv)
    # the session opens two cycles after reset, the first frame must not
    # have started by then
    if args.bits < 1:
        parser.error("--bits must be positive")
    if args.vblank < 2:
        parser.error("--vblank must be at least 2")
    for name in ("width", "height"):
        if not 0 <= getattr(args, name) < 1 << args.bits:
            parser.error("--{} must fit in {} bits".format(name, args.bits))
    logging.basicConfig(level=getattr(logging, args.log_level.upper()))

    if args.verilog:
        export(args.verilog, args.bits)
        return 0

    gateware, reference, expected = simulate(
        args.width, args.height, args.bits, args.frames,
        args.hblank, args.vblank, args.vcd)
    logger.info("Captured %d pixels, %d expected", len(gateware),
                len(expected))
    if gateware != reference:
        logger.error("Gateware and model disagree: %s != %s",
                     gateware, reference)
        return 1
    if gateware != expected:
        logger.error("Captured frame does not match the pattern")
        return 1
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
