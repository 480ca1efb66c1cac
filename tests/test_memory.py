import pytest

from redcore.memory import Memory


def test_write32_reads_back_little_endian():
    memory = Memory()
    memory.write32(0x100, 0x11223344)
    assert memory.read32(0x100) == 0x11223344
    assert memory.read_bytes(0x100, 4) == (0x11223344).to_bytes(4, "little")


def test_untouched_memory_reads_zero():
    memory = Memory()
    assert memory.read64(0x5000) == 0
    assert memory.read_bytes(0x7000, 3) == bytes(3)


@pytest.mark.parametrize(
    "width, value",
    [(8, 0xAB), (16, 0xBEEF), (32, 0xDEADBEEF), (64, 0x0123456789ABCDEF)],
)
def test_fixed_width_round_trip(width, value):
    memory = Memory()
    getattr(memory, f"write{width}")(0x40, value)
    assert getattr(memory, f"read{width}")(0x40) == value


def test_write_truncates_to_width():
    memory = Memory()
    memory.write8(0, 0x1FF)
    assert memory.read8(0) == 0xFF
    assert memory.read8(1) == 0


def test_bytes_cross_chunk_boundary():
    memory = Memory()
    memory.write_bytes(0xFFE, b"abcd")
    assert memory.read_bytes(0xFFE, 4) == b"abcd"


def test_fill_sets_every_byte():
    memory = Memory()
    memory.fill(10, 0xAB, 5)
    assert memory.read_bytes(10, 5) == bytes([0xAB]) * 5
    assert memory.read8(15) == 0


def test_bounded_memory_rejects_overrun():
    memory = Memory(16)
    with pytest.raises(IndexError):
        memory.write32(14, 1)


def test_negative_address_rejected():
    memory = Memory()
    with pytest.raises(IndexError):
        memory.read8(-1)


def test_fill_negative_size_rejected():
    memory = Memory()
    with pytest.raises(ValueError):
        memory.fill(0, 1, -1)