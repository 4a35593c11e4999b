"""MD5 (RFC 1321) and SHA-1 (FIPS 180-1) message digests."""

from __future__ import annotations

import struct

_MASK = 0xFFFFFFFF


def _rotl(value, count):
    return ((value << count) | (value >> (32 - count))) & _MASK


def _as_bytes(data):
    if isinstance(data, str):
        raise TypeError("strings must be encoded before hashing")
    return memoryview(data).cast("B")


class _BlockHash:
    """Shared buffering and padding for 64-byte block hashes."""

    block_size = 64
    digest_size = 0
    _length_format = ""
    _state_format = ""
    _initial_state: tuple = ()

    def __init__(self, data=b""):
        self._state = list(self._initial_state)
        self._buffer = bytearray()
        self._length = 0
        self.update(data)

    def update(self, data):
        """Feed more bytes into the digest."""
        view = _as_bytes(data)
        if not view.nbytes:
            return
        self._length += view.nbytes
        self._buffer += view
        whole = len(self._buffer) - len(self._buffer) % self.block_size
        for offset in range(0, whole, self.block_size):
            self._process(self._state, self._buffer[offset:offset + self.block_size])
        del self._buffer[:whole]

    def digest(self):
        """Return the digest of everything fed so far; the object stays usable."""
        state = list(self._state)
        tail = bytes(self._buffer)
        used = len(tail)
        pad_len = (56 - used) if used < 56 else (120 - used)
        bit_length = (self._length * 8) & 0xFFFFFFFFFFFFFFFF
        tail += b"\x80" + b"\x00" * (pad_len - 1)
        tail += struct.pack(self._length_format, bit_length)
        for offset in range(0, len(tail), self.block_size):
            self._process(state, tail[offset:offset + self.block_size])
        return struct.pack(self._state_format, *state)

    def hexdigest(self):
        """Return the digest as lower-case hexadecimal text."""
        return self.digest().hex()

    @staticmethod
    def _process(state, block):
        raise NotImplementedError


_MD5_K = (
    0xD76AA478, 0xE8C7B756, 0x242070DB, 0xC1BDCEEE,
    0xF57C0FAF, 0x4787C62A, 0xA8304613, 0xFD469501,
    0x698098D8, 0x8B44F7AF, 0xFFFF5BB1, 0x895CD7BE,
    0x6B901122, 0xFD987193, 0xA679438E, 0x49B40821,
    0xF61E2562, 0xC040B340, 0x265E5A51, 0xE9B6C7AA,
    0xD62F105D, 0x02441453, 0xD8A1E681, 0xE7D3FBC8,
    0x21E1CDE6, 0xC33707D6, 0xF4D50D87, 0x455A14ED,
    0xA9E3E905, 0xFCEFA3F8, 0x676F02D9, 0x8D2A4C8A,
    0xFFFA3942, 0x8771F681, 0x6D9D6122, 0xFDE5380C,
    0xA4BEEA44, 0x4BDECFA9, 0xF6BB4B60, 0xBEBFBC70,
    0x289B7EC6, 0xEAA127FA, 0xD4EF3085, 0x04881D05,
    0xD9D4D039, 0xE6DB99E5, 0x1FA27CF8, 0xC4AC5665,
    0xF4292244, 0x432AFF97, 0xAB9423A7, 0xFC93A039,
    0x655B59C3, 0x8F0CCC92, 0xFFEFF47D, 0x85845DD1,
    0x6FA87E4F, 0xFE2CE6E0, 0xA3014314, 0x4E0811A1,
    0xF7537E82, 0xBD3AF235, 0x2AD7D2BB, 0xEB86D391,
)

_MD5_SHIFTS = (7, 12, 17, 22) * 4 + (5, 9, 14, 20) * 4 + (4, 11, 16, 23) * 4 + (6, 10, 15, 21) * 4

_MD5_INDEX = (
    tuple(range(16))
    + tuple((5 * i + 1) % 16 for i in range(16))
    + tuple((3 * i + 5) % 16 for i in range(16))
    + tuple((7 * i) % 16 for i in range(16))
)


class Md5(_BlockHash):
    """Incremental MD5 digest."""

    digest_size = 16
    _length_format = "<Q"
    _state_format = "<4I"
    _initial_state = (0x67452301, 0xEFCDAB89, 0x98BADCFE, 0x10325476)

    def __init__(self, data=b""):
        super().__init__(data)

    def update(self, data):
        """Feed more bytes into the digest."""
        super().update(data)

    def digest(self):
        """Return the 16-byte digest of everything fed so far."""
        return super().digest()

    def hexdigest(self):
        """Return the digest as 32 lower-case hexadecimal characters."""
        return super().hexdigest()

    @staticmethod
    def _process(state, block):
        words = struct.unpack("<16I", block)
        a, b, c, d = state
        for step, (k, shift, index) in enumerate(zip(_MD5_K, _MD5_SHIFTS, _MD5_INDEX)):
            if step < 16:
                f = d ^ (b & (c ^ d))
            elif step < 32:
                f = c ^ (d & (b ^ c))
            elif step < 48:
                f = b ^ c ^ d
            else:
                f = c ^ (b | (~d & _MASK))
            f = (a + f + k + words[index]) & _MASK
            a, d, c = d, c, b
            b = (b + _rotl(f, shift)) & _MASK
        state[0] = (state[0] + a) & _MASK
        state[1] = (state[1] + b) & _MASK
        state[2] = (state[2] + c) & _MASK
        state[3] = (state[3] + d) & _MASK


class Sha1(_BlockHash):
    """Incremental SHA-1 digest."""

    digest_size = 20
    _length_format = ">Q"
    _state_format = ">5I"
    _initial_state = (0x67452301, 0xEFCDAB89, 0x98BADCFE, 0x10325476, 0xC3D2E1F0)

    def __init__(self, data=b""):
        super().__init__(data)

    def update(self, data):
        """Feed more bytes into the digest."""
        super().update(data)

    def digest(self):
        """Return the 20-byte digest of everything fed so far."""
        return super().digest()

    def hexdigest(self):
        """Return the digest as 40 lower-case hexadecimal characters."""
        return super().hexdigest()

    @staticmethod
    def _process(state, block):
        w = list(struct.unpack(">16I", block))
        for t in range(16, 80):
            w.append(_rotl(w[t - 3] ^ w[t - 8] ^ w[t - 14] ^ w[t - 16], 1))
        a, b, c, d, e = state
        for t, word in enumerate(w):
            if t < 20:
                f = d ^ (b & (c ^ d))
                k = 0x5A827999
            elif t < 40:
                f = b ^ c ^ d
                k = 0x6ED9EBA1
            elif t < 60:
                f = (b & c) | (d & (b | c))
                k = 0x8F1BBCDC
            else:
                f = b ^ c ^ d
                k = 0xCA62C1D6
            temp = (_rotl(a, 5) + f + e + k + word) & _MASK
            a, b, c, d, e = temp, a, _rotl(b, 30), c, d
        state[0] = (state[0] + a) & _MASK
        state[1] = (state[1] + b) & _MASK
        state[2] = (state[2] + c) & _MASK
        state[3] = (state[3] + d) & _MASK
        state[4] = (state[4] + e) & _MASK


def md5(data):
    """Return the 16-byte MD5 digest of *data*."""
    return Md5(data).digest()


def sha1(data):
    """Return the 20-byte SHA-1 digest of *data*."""
    return Sha1(data).digest()