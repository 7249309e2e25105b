"""Bit-level reading and writing on top of bitstring."""

from bitstring import Bits, BitArray, ConstBitStream, ReadError


INT_BITS = 32


class UnderflowError(EOFError):
    """Raised when a read runs past the end of the bitstream."""


class BitWriter:
    def __init__(self):
        self.bits = BitArray()

    def __len__(self):
        return len(self.bits)

    def write_bit(self, bit):
        self.bits.append(Bits(bool=bool(bit)))

    def write_bits(self, bits):
        self.bits.append(bits)

    def write_byte(self, value):
        self.bits.append(Bits(uint=value, length=8))

    def write_int(self, value):
        self.bits.append(Bits(uint=value, length=INT_BITS))

    def flush(self):
        # tobytes() zero-pads the final partial byte
        return self.bits.tobytes()


class BitReader:
    def __init__(self, data):
        self.bits = ConstBitStream(data)

    @property
    def bits_remaining(self):
        return len(self.bits) - self.bits.pos

    def _read(self, fmt, length):
        # bitstring 4.2+ raises ValueError, not ReadError, for a 'bool' read at the end
        if self.bits_remaining < length:
            raise UnderflowError(
                f'need {length} bits at bit {self.bits.pos} of {len(self.bits)}')
        try:
            return self.bits.read(fmt)
        except ReadError as e:
            raise UnderflowError(
                f'bitstream exhausted at bit {self.bits.pos} of {len(self.bits)}') from e

    def read_bit(self):
        return self._read('bool', 1)

    def read_byte(self):
        return self._read('uint:8', 8)

    def read_int(self):
        return self._read(f'uint:{INT_BITS}', INT_BITS)
