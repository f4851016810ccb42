import pytest
from migen import run_simulation

from model import Inputs, pixels, run
from pattern import CaptureBench, Pattern
from sensor import Frame, decode


def _bench(f, cycles, width, height):
    words = list(f.gen_frame())
    d = CaptureBench(words)
    ret = []
    run_simulation(d, d.test(cycles, ret, width=width, height=height))
    return words, ret


def test_pattern_loops_over_words() -> None:
    words = list(Frame.ramp(2, 1, vblank=1, hblank=1).gen_frame())
    d = Pattern(words)
    seen = []

    def gen():
        for i in range(3*len(words)):
            yield
            seen.append((yield d.sensor.data) | (yield d.sensor.lval) << 12 |
                        (yield d.sensor.fval) << 13)

    run_simulation(d, gen())
    start = seen.index(words[1])
    assert seen[start:start + len(words)] == words[1:] + words[:1]


def test_pattern_needs_words() -> None:
    with pytest.raises(ValueError):
        Pattern([])


def test_bench_captures_one_frame() -> None:
    f = Frame.ramp(6, 4)
    words, ret = _bench(f, 3*len(list(f.gen_frame())), width=3, height=2)
    assert pixels([o for i, o in ret]) == f.pixels()
    assert ret[-1][1].captured
    # the sensor keeps streaming frames after completion
    assert sum(1 for i, o in ret if i.lval) > 2*len(f.pixels())


def test_bench_matches_model() -> None:
    f = Frame.ramp(4, 2, hblank=3, vblank=4)
    words, ret = _bench(f, 2*len(list(f.gen_frame())), width=2, height=1)
    reset = Inputs(rst_n=0, width=2, height=1)
    outputs, _ = run([reset] + [i for i, o in ret])
    assert outputs[1:] == [o for i, o in ret]
    assert [decode(w)[0] for w in words if decode(w)[2]] == \
        [v for x, y, v in pixels(outputs)]
