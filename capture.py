from migen import *
from migen.genlib.fsm import FSM, NextState

import sensor
from model import Outputs


class Geometry(Module):
    """Latches the frame geometry while reset is asserted.

    The sensor delivers two samples per configured unit in both axes, so
    the index space is twice the configured width and height."""
    def __init__(self, rst_n, width, height):
        self.columns = columns = Signal(len(width) + 1)
        self.rows = rows = Signal(len(height) + 1)

        ###

        self.sync += [
                If(~rst_n,
                    columns.eq(width << 1),
                    rows.eq(height << 1)
                )
        ]


class Session(Module):
    """Start/stop hysteresis: one capture session per start request."""
    def __init__(self, start, done):
        self.active = Signal()
        self.complete = Signal()

        ###

        done_d = Signal()
        self.sync += done_d.eq(done)

        self.submodules.fsm = fsm = FSM(reset_state="IDLE")
        fsm.act("IDLE",
            If(start,
                NextState("CAPTURING")
            )
        )
        fsm.act("CAPTURING",
            If(~start,
                NextState("IDLE")
            ).Elif(done & ~done_d,
                NextState("COMPLETE")
            )
        )
        fsm.act("COMPLETE",
            If(~start,
                NextState("IDLE")
            )
        )
        self.comb += [
                self.active.eq(fsm.ongoing("CAPTURING") & start),
                self.complete.eq(fsm.ongoing("COMPLETE"))
        ]


class EdgeDetector(Module):
    """Tracks fval edges to open and close the sample window and qualifies
    samples with lval & fval. Everything is registered: the window, the
    qualifier and the latched sample lag the sensor by one cycle."""
    def __init__(self, sen, active):
        self.window = window = Signal()  # capture_valid
        self.qual = qual = Signal()  # frame_valid
        self.data = data = Signal(len(sen.data))

        ###

        # last_fval follows the sensor outside sessions too, so a session
        # opened mid-frame waits for the next frame-active rising edge
        last_fval = Signal()
        self.sync += [
                last_fval.eq(sen.fval),
                If(active,
                    qual.eq(sen.lval & sen.fval),
                    data.eq(sen.data),
                    If(~last_fval & sen.fval,
                        window.eq(1)
                    ),
                    If(last_fval & ~sen.fval,
                        window.eq(0)
                    )
                ).Else(
                    qual.eq(0),
                    data.eq(0),
                    window.eq(0)
                )
        ]


class PixelCounter(Module):
    """Emits qualified samples tagged with their position and flags the
    last pixel of the frame."""
    def __init__(self, edge, geometry, active, bits):
        self.pix = pix = Record([
            ("x", bits),
            ("y", bits),
            ("data", bits),
            ("stb", 1),  # valid
        ])
        self.done = done = Signal()

        ###

        # the counters span the doubled geometry, the ports carry the low bits
        x = Signal(bits + 1)
        y = Signal(bits + 1)
        last_x = Signal()
        last_y = Signal()
        last = Signal()
        self.comb += [
                last_x.eq(x + 1 >= geometry.columns),
                last_y.eq(y + 1 >= geometry.rows),
                last.eq(last_x & last_y),
                pix.x.eq(x),
                pix.y.eq(y)
        ]
        # sent: the last coordinate has been emitted
        sent = Signal()
        self.sync += [
                If(active,
                    pix.stb.eq(edge.window & edge.qual & ~sent &
                               ~(pix.stb & last)),
                    pix.data.eq(edge.data),
                    done.eq(last),
                    If(pix.stb & last,
                        sent.eq(1)
                    ),
                    If(pix.stb,
                        If(~last_x,
                            x.eq(x + 1)
                        ).Elif(~last_y,
                            x.eq(0),
                            y.eq(y + 1)
                        )
                    )
                ).Else(
                    pix.stb.eq(0),
                    pix.data.eq(0),
                    done.eq(0),
                    sent.eq(0),
                    x.eq(0),
                    y.eq(0)
                )
        ]


class Capture(Module):
    """Captures exactly one frame per start request.

    `captured` is high while no session is requested (`start` low) and
    once the requested frame has been emitted, until `start` is released.
    """
    def __init__(self, bits=12):
        if bits < 1:
            raise ValueError("bits must be positive")
        self.rst_n = Signal(reset=1)
        self.width = Signal(bits)
        self.height = Signal(bits)
        self.start = Signal()
        self.sensor = sen = Record(sensor.layout(bits))
        self.captured = Signal()

        ###

        self.submodules.geometry = geometry = Geometry(
                self.rst_n, self.width, self.height)
        # session, edge and counter state clears with rst_n, the geometry
        # latch loads during it
        done = Signal()
        self.submodules.session = session = ResetInserter()(
                Session(self.start, done))
        self.submodules.edge = edge = ResetInserter()(
                EdgeDetector(sen, session.active))
        self.submodules.counter = counter = ResetInserter()(
                PixelCounter(edge, geometry, session.active, bits))
        self.pix = counter.pix
        self.comb += [
                done.eq(counter.done),
                session.reset.eq(~self.rst_n),
                edge.reset.eq(~self.rst_n),
                counter.reset.eq(~self.rst_n),
                self.captured.eq(~self.start | session.complete | done)
        ]

    def ios(self):
        return {self.rst_n, self.width, self.height, self.start,
                self.sensor.data, self.sensor.lval, self.sensor.fval,
                self.pix.x, self.pix.y, self.pix.data, self.pix.stb,
                self.captured}

    def test(self, inputs, ret):
        for i in inputs:
            yield self.rst_n.eq(i.rst_n)
            yield self.width.eq(i.width)
            yield self.height.eq(i.height)
            yield self.start.eq(i.start)
            yield self.sensor.lval.eq(i.lval)
            yield self.sensor.fval.eq(i.fval)
            yield self.sensor.data.eq(i.data)
            yield
            ret.append(Outputs(
                valid=(yield self.pix.stb),
                data=(yield self.pix.data),
                x=(yield self.pix.x),
                y=(yield self.pix.y),
                captured=(yield self.captured)))


if __name__ == "__main__":
    from model import Inputs, pixels
    from sensor import Frame, samples

    width, height = 4, 2
    f = Frame.ramp(2*width, 2*height, hblank=0)
    inputs = [Inputs(rst_n=0, width=width, height=height)]
    inputs += samples(f.gen_frame(), width=width, height=height)
    d = Capture()
    ret = []
    run_simulation(d, d.test(inputs, ret), vcd_name="capture.vcd")
    assert pixels(ret) == f.pixels(), pixels(ret)
    assert ret[-1].captured
