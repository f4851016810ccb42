"""Cycle-exact software model of the capture controller.

One call to `tick` corresponds to one rising edge of the pixel clock: it
returns the outputs visible during the cycle in which `inputs` are applied
and the register state after the edge.
"""
from dataclasses import dataclass, field, replace
from enum import Enum


class Session(Enum):
    IDLE = 0
    CAPTURING = 1
    COMPLETE = 2


@dataclass(frozen=True)
class Inputs:
    rst_n: int = 1
    width: int = 0
    height: int = 0
    start: int = 0
    lval: int = 0
    fval: int = 0
    data: int = 0


@dataclass(frozen=True)
class Outputs:
    valid: int = 0
    data: int = 0
    x: int = 0
    y: int = 0
    captured: int = 0


@dataclass(frozen=True)
class Edge:
    # one bit delay of fval, sample window, line and frame qualifier and the
    # sample latched for the output stage
    last_fval: int = 0
    window: int = 0
    qual: int = 0
    data: int = 0


@dataclass(frozen=True)
class State:
    columns: int = 0
    rows: int = 0
    session: Session = Session.IDLE
    done_d: int = 0
    edge: Edge = field(default_factory=Edge)
    valid: int = 0
    data: int = 0
    x: int = 0
    y: int = 0
    done: int = 0
    # the last coordinate has been emitted
    sent: int = 0


def outputs(state, inputs, bits=12):
    mask = (1 << bits) - 1
    captured = (not inputs.start or state.done or
                state.session is Session.COMPLETE)
    return Outputs(valid=state.valid, data=state.data,
                   x=state.x & mask, y=state.y & mask,
                   captured=int(captured))


def next_session(state, inputs):
    session = state.session
    if session is Session.IDLE:
        if inputs.start:
            return Session.CAPTURING
    elif session is Session.CAPTURING:
        if not inputs.start:
            return Session.IDLE
        if state.done and not state.done_d:
            return Session.COMPLETE
    elif not inputs.start:
        return Session.IDLE
    return session


def next_edge(edge, inputs, bits=12):
    mask = (1 << bits) - 1
    window = edge.window
    if not edge.last_fval and inputs.fval:
        window = 1
    elif edge.last_fval and not inputs.fval:
        window = 0
    return Edge(last_fval=int(bool(inputs.fval)), window=window,
                qual=int(bool(inputs.lval and inputs.fval)),
                data=inputs.data & mask)


def tick(state, inputs, bits=12):
    out = outputs(state, inputs, bits)
    mask = (1 << bits) - 1

    if not inputs.rst_n:
        return State(columns=(inputs.width & mask) << 1,
                     rows=(inputs.height & mask) << 1), out

    session = next_session(state, inputs)
    active = state.session is Session.CAPTURING and inputs.start
    if not active:
        # last_fval keeps following the sensor between sessions
        return State(columns=state.columns, rows=state.rows,
                     session=session, done_d=state.done,
                     edge=Edge(last_fval=int(bool(inputs.fval)))), out

    last_x = state.x + 1 >= state.columns
    last_y = state.y + 1 >= state.rows
    last = last_x and last_y
    emitted_last = state.valid and last
    x, y = state.x, state.y
    if state.valid:
        if not last_x:
            x += 1
        elif not last_y:
            x, y = 0, y + 1
    valid = (state.edge.window and state.edge.qual and not state.sent and
             not emitted_last)
    return replace(
        state,
        session=session,
        done_d=state.done,
        edge=next_edge(state.edge, inputs, bits),
        valid=int(bool(valid)),
        data=state.edge.data,
        x=x, y=y,
        done=int(last),
        sent=int(bool(state.sent or emitted_last))), out


def run(inputs, state=None, bits=12):
    """Clock `inputs` through the model, returning (outputs, final state)."""
    if state is None:
        state = State()
    ret = []
    for i in inputs:
        state, out = tick(state, i, bits)
        ret.append(out)
    return ret, state


def pixels(outputs):
    return [(o.x, o.y, o.data) for o in outputs if o.valid]
