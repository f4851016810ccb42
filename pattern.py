from migen import *

import sensor
from capture import Capture
from model import Inputs, Outputs


class Pattern(Module):
    """Replays encoded sensor words from a memory, looping forever."""
    def __init__(self, words, bits=12):
        if not words:
            raise ValueError("pattern needs at least one word")
        self.sensor = sen = Record(sensor.layout(bits))

        ###

        mem = Memory(width=bits + 2, depth=len(words), init=words)
        memp = mem.get_port()
        self.sync += [
            memp.adr.eq(memp.adr + 1),
            If(memp.adr == len(words) - 1,
                memp.adr.eq(0)
            )
        ]
        self.comb += Cat(sen.data, sen.lval, sen.fval).eq(memp.dat_r)
        self.specials += mem, memp


class CaptureBench(Module):
    """Capture core fed from a looping test pattern."""
    def __init__(self, words, bits=12):
        self.submodules.pattern = pattern = Pattern(words, bits)
        self.submodules.capture = capture = Capture(bits)
        self.comb += capture.sensor.raw_bits().eq(pattern.sensor.raw_bits())

    def test(self, cycles, ret, start=1, width=0, height=0):
        """Records (Inputs, Outputs) per cycle, including the sensor
        samples the pattern presented."""
        c = self.capture
        yield c.rst_n.eq(0)
        yield c.width.eq(width)
        yield c.height.eq(height)
        yield
        yield c.rst_n.eq(1)
        yield c.start.eq(start)
        for i in range(cycles):
            yield
            inputs = Inputs(rst_n=1, width=width, height=height,
                            start=start,
                            lval=(yield c.sensor.lval),
                            fval=(yield c.sensor.fval),
                            data=(yield c.sensor.data))
            outputs = Outputs(
                valid=(yield c.pix.stb),
                data=(yield c.pix.data),
                x=(yield c.pix.x),
                y=(yield c.pix.y),
                captured=(yield c.captured))
            ret.append((inputs, outputs))


if __name__ == "__main__":
    from model import pixels, run

    width, height = 3, 2
    f = sensor.Frame.ramp(2*width, 2*height)
    words = list(f.gen_frame())
    d = CaptureBench(words)
    ret = []
    run_simulation(d, d.test(3*len(words), ret, width=width, height=height),
                   vcd_name="pattern.vcd")
    # the bench resets the core first, so the model starts from the latch
    outputs, _ = run([Inputs(rst_n=0, width=width, height=height)] +
                     [i for i, o in ret])
    assert outputs[1:] == [o for i, o in ret]
    assert pixels(outputs) == f.pixels(), pixels(outputs)
