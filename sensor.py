from model import Inputs


def layout(bits=12):
    return [
        ("data", bits),
        ("lval", 1),  # line active
        ("fval", 1),  # frame active
    ]


def encode(data, fval=1, lval=1, bits=12):
    if not 0 <= data < 1 << bits:
        raise ValueError("sample {} does not fit in {} bits".format(data, bits))
    return data | (lval << bits) | (fval << bits + 1)


def decode(word, bits=12):
    data = word & ((1 << bits) - 1)
    lval, fval = ((word >> i) & 1 for i in (bits, bits + 1))
    return data, fval, lval


def samples(words, start=1, width=0, height=0, bits=12):
    """Turn encoded sensor words into per-cycle controller inputs."""
    for word in words:
        data, fval, lval = decode(word, bits)
        yield Inputs(start=start, width=width, height=height,
                     lval=lval, fval=fval, data=data)


class Frame:
    vblank = 3
    hblank = 2

    def __init__(self, data, vblank=None, hblank=None, bits=12):
        self.data = data
        self.bits = bits
        if vblank is not None:
            self.vblank = vblank
        if hblank is not None:
            self.hblank = hblank

    @classmethod
    def ramp(cls, columns, rows, bits=12, **kwargs):
        mask = (1 << bits) - 1
        return cls([[(i*columns + j) & mask for j in range(columns)]
                    for i in range(rows)], bits=bits, **kwargs)

    def gen_line(self, line, fval=1):
        for i in range(self.hblank):
            yield encode(0, fval=fval, lval=0, bits=self.bits)
        for i in line:
            yield encode(i, fval=fval, lval=fval, bits=self.bits)

    def gen_frame(self):
        for i in range(self.vblank):
            yield encode(0, fval=0, lval=0, bits=self.bits)
        for i in self.data:
            yield from self.gen_line(i)
        for i in range(self.vblank):
            yield encode(0, fval=0, lval=0, bits=self.bits)

    def pixels(self):
        return [(x, y, v) for y, line in enumerate(self.data)
                for x, v in enumerate(line)]


if __name__ == "__main__":
    f = Frame.ramp(4, 3)

    for i in f.gen_frame():
        print(decode(i))
