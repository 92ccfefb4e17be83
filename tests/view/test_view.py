"""
BufferView tests.

Covers wrapping, bounds-checked access, typed reads, sub-views, hex
rendering, copy/move semantics and optional NumPy export.
"""

import copy
import ctypes
import sys

import pytest

from flexbuf import Buffer, BufferView, FlexBuffer, config
from flexbuf.exceptions import InteropError, OutOfRangeError, ValidationError


class Pair(ctypes.Structure):
    _fields_ = [("a", ctypes.c_uint8), ("b", ctypes.c_uint8)]


class TestConstruction:
    """Creating views."""

    def test_default_view_is_empty(self):
        """BufferView() has size 0."""
        view = BufferView()

        assert view.size == 0
        assert len(view) == 0
        assert view.tobytes() == b""

    def test_wrap_bytes(self, hello):
        """wrap() covers the whole source by default."""
        view = BufferView.wrap(hello)

        assert view.size == 12
        assert view.offset == 0
        assert view.tobytes() == hello

    def test_wrap_window(self, hello):
        """wrap() with offset/size covers only the window."""
        view = BufferView.wrap(hello, 6, 5)

        assert view.tobytes() == b"world"

    def test_wrap_shares_source(self):
        """Changes to the source are visible through the view."""
        src = bytearray(b"abc")
        view = BufferView.wrap(src)

        src[0] = ord("z")

        assert view.tobytes() == b"zbc"

    def test_wrap_str_encodes(self):
        """Text is encoded with the configured encoding."""
        assert BufferView.wrap("héllo").tobytes() == "héllo".encode("utf-8")

        config.text_encoding = "latin-1"
        assert BufferView.wrap("héllo").tobytes() == "héllo".encode("latin-1")

    def test_wrap_address(self):
        """wrap_address() reads raw memory at address + offset."""
        src = ctypes.create_string_buffer(b"hello world!", 12)
        view = BufferView.wrap_address(ctypes.addressof(src), 6, 6)

        assert view.tobytes() == b"world!"


class TestAccess:
    """Byte access and bounds."""

    def test_byte_at(self, hello):
        """byte_at() returns the byte value."""
        view = BufferView.wrap(hello)

        assert view.byte_at(0) == ord("h")
        assert view.byte_at(11) == ord("!")

    def test_byte_at_out_of_range(self, hello):
        """Reading past the end raises OutOfRangeError."""
        view = BufferView.wrap(hello)

        with pytest.raises(OutOfRangeError) as exc_info:
            view.byte_at(12)

        assert exc_info.value.details == {"index": 12, "size": 1, "limit": 12}

    def test_out_of_range_is_index_error(self, hello):
        """OutOfRangeError is also an IndexError."""
        with pytest.raises(IndexError):
            BufferView.wrap(hello)[12]

    def test_negative_index(self, hello):
        """Negative indexes count from the end."""
        view = BufferView.wrap(hello)

        assert view[-1] == ord("!")
        with pytest.raises(OutOfRangeError):
            view[-13]

    def test_iteration(self):
        """Iterating yields ints."""
        assert list(BufferView.wrap(b"\x01\x02\x03")) == [1, 2, 3]

    def test_data_is_readonly(self, hello):
        """data() is a read-only memoryview even over writable memory."""
        data = BufferView.wrap(bytearray(hello)).data()

        assert data.readonly
        assert data.tobytes() == hello

    def test_decode(self, hello):
        """decode() returns text."""
        assert BufferView.wrap(hello).decode() == "hello world!"


class TestTypedRead:
    """read() of fixed-layout ctypes values."""

    def test_read_unaligned_uint16(self):
        """Typed reads need not be aligned."""
        view = BufferView.wrap(bytes([255, 1, 1]))

        assert view.read(ctypes.c_uint16, 1) == 257

    def test_read_past_end(self):
        """A read that does not fit raises OutOfRangeError."""
        view = BufferView.wrap(bytes([255, 1, 1]))

        with pytest.raises(OutOfRangeError):
            view.read(ctypes.c_uint16, 2)

    def test_read_structure(self):
        """Structures come back as detached ctypes instances."""
        view = BufferView.wrap(bytes([1, 2, 3]))

        pair = view.read(Pair, 1)

        assert (pair.a, pair.b) == (2, 3)

    def test_read_array(self):
        """Array types come back as ctypes arrays."""
        view = BufferView.wrap(bytes([1, 2, 3]))

        assert list(view.read(ctypes.c_uint8 * 3)) == [1, 2, 3]

    def test_pointer_types_rejected(self):
        """Pointer-like types carry addresses, not values."""
        view = BufferView.wrap(bytes(16))

        for ctype in (ctypes.c_char_p, ctypes.c_void_p, ctypes.POINTER(ctypes.c_int)):
            with pytest.raises(ValidationError) as exc_info:
                view.read(ctype)
            assert exc_info.value.code == "INVALID_CTYPE"

    def test_non_ctype_rejected(self):
        """Python types are not layouts."""
        with pytest.raises(ValidationError):
            BufferView.wrap(bytes(8)).read(int)


class TestSubview:
    """Zero-copy sub-views and slices."""

    def test_subview_rest(self, hello):
        """subview(index) runs to the end."""
        assert BufferView.wrap(hello).subview(6).tobytes() == b"world!"

    def test_subview_window(self, hello):
        """subview(index, size) takes size bytes."""
        assert BufferView.wrap(hello).subview(6, 3).tobytes() == b"wor"

    def test_subview_out_of_range(self, hello):
        """Windows past the end raise OutOfRangeError."""
        view = BufferView.wrap(hello)

        with pytest.raises(OutOfRangeError):
            view.subview(6, 7)
        with pytest.raises(OutOfRangeError):
            view.subview(13)

    def test_nested_subviews(self):
        """A sub-view of a sub-view addresses the right bytes."""
        view = BufferView.wrap(bytes([1, 7, 10, 33]))
        inner = view.subview(1, 2)
        innermost = inner.subview(1, 1)

        assert (inner[0], inner[1]) == (7, 10)
        assert innermost[0] == 10
        assert innermost.offset == 2

    def test_subview_matches_bytes_slice(self, hello):
        """Every in-range window equals the same slice of bytes."""
        view = BufferView.wrap(hello)

        for index in range(len(hello) + 1):
            for size in range(len(hello) - index + 1):
                assert view.subview(index, size).tobytes() == hello[index : index + size]

    def test_slice(self, hello):
        """Slicing returns a view and clamps like a sequence."""
        view = BufferView.wrap(hello)

        assert isinstance(view[0:5], BufferView)
        assert view[0:5].tobytes() == b"hello"
        assert view[-6:].tobytes() == b"world!"
        assert view[10:100].tobytes() == b"d!"

    def test_stepped_slice_rejected(self, hello):
        """Slices must be contiguous."""
        with pytest.raises(ValidationError):
            BufferView.wrap(hello)[::2]

    def test_subview_does_not_dangle(self, hello):
        """A view outlives the buffer it was taken from."""
        buf = Buffer.copy_of(hello)
        view = buf.subview(6)

        del buf

        assert view.tobytes() == b"world!"


class TestShrunkBlock:
    """Views over a block that shrank after they were taken."""

    def test_every_access_fails(self):
        """A block shrunk below the view's offset fails every access."""
        flex = FlexBuffer(0)
        flex.append(b"x" * 32)
        tail = flex.subview(20, 4)

        flex.resize(2)

        assert flex.capacity == 2
        assert tail.size == 4
        with pytest.raises(OutOfRangeError):
            tail.data()
        with pytest.raises(OutOfRangeError):
            tail.byte_at(0)
        with pytest.raises(OutOfRangeError):
            tail.subview(0, 0)

    def test_partially_shrunk_block(self):
        """A view straddling the new capacity fails past it."""
        flex = FlexBuffer(0)
        flex.append(b"abcdefghijklmnopq")
        middle = flex.subview(6, 4)

        flex.resize(8)

        assert middle.byte_at(1) == ord("h")
        with pytest.raises(OutOfRangeError):
            middle.byte_at(2)

    def test_repr_out_of_range(self):
        """repr() of an unreadable view does not raise."""
        flex = FlexBuffer(0)
        flex.append(b"x" * 32)
        tail = flex.subview(20, 4)
        flex.resize(0)

        assert repr(tail) == "BufferView(<out of range>, size=4)"


class TestRendering:
    """hex(), str() and repr()."""

    def test_hex(self):
        """hex() is 0x followed by lowercase pairs."""
        view = BufferView.wrap(bytes([1, 7, 10, 33]))

        assert view.hex() == "0x01070a21"
        assert str(view) == "0x01070a21"

    def test_hex_empty(self):
        """An empty view renders as 0x."""
        assert BufferView().hex() == "0x"

    def test_repr_short(self):
        """repr() shows every byte of short views."""
        assert repr(BufferView.wrap(b"\x01\x02")) == "BufferView(0x0102, size=2)"

    def test_repr_elided(self):
        """repr() elides long views."""
        text = repr(BufferView.wrap(bytes(32)))

        assert text == f"BufferView(0x{'00' * 16}..., size=32)"


class TestCopyMove:
    """Copy and move semantics."""

    def test_copy_is_shallow(self):
        """copy.copy() shares the block."""
        src = bytearray(b"abc")
        view = BufferView.wrap(src)

        dup = copy.copy(view)
        src[0] = ord("z")

        assert dup.block is view.block
        assert dup.tobytes() == b"zbc"

    def test_deepcopy_detaches(self):
        """copy.deepcopy() copies the bytes into a new block."""
        src = bytearray(b"abc")
        view = BufferView.wrap(src)

        dup = copy.deepcopy(view)
        src[0] = ord("z")

        assert dup.block is not view.block
        assert dup.tobytes() == b"abc"

    def test_move(self, hello):
        """move() transfers the block and empties the source."""
        view = BufferView.wrap(hello)
        block = view.block

        moved = view.move()

        assert type(moved) is BufferView
        assert moved.block is block
        assert moved.tobytes() == hello
        assert view.size == 0
        assert view.tobytes() == b""

    def test_no_value_equality(self):
        """Views compare by identity; contents compare via tobytes()."""
        a = BufferView.wrap(b"abc")
        b = BufferView.wrap(b"abc")

        assert a != b
        assert a.tobytes() == b.tobytes()


class TestNumpy:
    """Optional NumPy export."""

    def test_to_numpy(self):
        """to_numpy() views the bytes without copying."""
        np = pytest.importorskip("numpy")
        src = bytearray(b"\x01\x02\x03\x04")
        array = Buffer.wrap(src).to_numpy()

        assert array.dtype == np.uint8
        assert array.tolist() == [1, 2, 3, 4]

        src[0] = 9
        assert array[0] == 9

    def test_to_numpy_is_readonly_for_views(self):
        """Arrays exported from a view are read-only."""
        pytest.importorskip("numpy")

        array = BufferView.wrap(bytearray(4)).to_numpy()

        assert not array.flags.writeable

    def test_asarray(self):
        """np.asarray() goes through __array__."""
        np = pytest.importorskip("numpy")

        assert np.asarray(BufferView.wrap(b"\x05\x06")).tolist() == [5, 6]

    def test_dtype_size_mismatch(self):
        """A size that is not a multiple of the itemsize raises ValidationError."""
        pytest.importorskip("numpy")

        with pytest.raises(ValidationError):
            BufferView.wrap(bytes(3)).to_numpy("<u2")

    def test_numpy_missing(self, monkeypatch):
        """Without NumPy, export raises InteropError."""
        monkeypatch.setitem(sys.modules, "numpy", None)

        with pytest.raises(InteropError) as exc_info:
            BufferView.wrap(b"abc").to_numpy()

        assert exc_info.value.code == "NUMPY_UNAVAILABLE"
