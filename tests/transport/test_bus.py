# tests/transport/test_bus.py
"""
メモリバスとRAMデバイスのテスト。
"""
import unittest

import pytest

from retro_chip8.core.errors import AddressOutOfBoundsError
from retro_chip8.transport.bus import Bus, RAM, BusAccessType

# @intent:test_suite 4KBメモリのマッピング、境界検査、アクセスログを検証します。

@pytest.fixture
def memory():
    bus = Bus()
    ram = RAM(0x1000)
    bus.register_device(0x0000, 0x0FFF, ram)
    return bus, ram

def test_ram_starts_zeroed():
    ram = RAM(0x1000)
    assert ram.get_size() == 0x1000
    assert not any(ram._memory)

@pytest.mark.parametrize("size", [0, -4, 2.0])
def test_ram_rejects_bad_size(size):
    with pytest.raises(ValueError, match="RAM size must be a positive integer."):
        RAM(size)

# @intent:test_case_oob 境界外アクセスは AddressOutOfBoundsError（IndexErrorでもある）になることを検証します。
@pytest.mark.parametrize("address", [0x1000, 0x2000, -1])
def test_out_of_bounds_access(memory, address):
    bus, _ = memory
    with pytest.raises(AddressOutOfBoundsError) as excinfo:
        bus.read(address)
    assert excinfo.value.address == address
    with pytest.raises(IndexError):
        bus.write(address, 0x01)

def test_last_byte_is_addressable(memory):
    bus, ram = memory
    bus.write(0x0FFF, 0xA5)
    assert ram.read(0x0FFF) == 0xA5

def test_write_rejects_non_byte(memory):
    bus, _ = memory
    with pytest.raises(ValueError, match="Data 256 is not an 8-bit value."):
        bus.write(0x0200, 0x100)

def test_write_block_is_all_or_nothing():
    ram = RAM(4)
    ram.write_block(1, b"\x01\x02")
    assert bytes(ram._memory) == b"\x00\x01\x02\x00"
    with pytest.raises(AddressOutOfBoundsError):
        ram.write_block(2, b"\xAA\xBB\xCC")
    assert bytes(ram._memory) == b"\x00\x01\x02\x00"

def test_offset_translation_between_devices():
    bus = Bus()
    low, high = RAM(0x200), RAM(0x200)
    bus.register_device(0x000, 0x1FF, low)
    bus.register_device(0x200, 0x3FF, high)
    bus.write(0x2A0, 0x7E)
    assert high.read(0xA0) == 0x7E
    assert low.read(0xA0) == 0x00
    assert bus.get_size() == 0x400

def test_unmapped_address_message():
    bus = Bus()
    bus.register_device(0x200, 0x2FF, RAM(0x100))
    with pytest.raises(AddressOutOfBoundsError, match="Address 0x0100 not mapped to any device."):
        bus.peek(0x100)

# @intent:test_case_log read/write は記録され、peek と load は記録されないことを検証します。
def test_activity_log(memory):
    bus, _ = memory
    bus.load(0x200, b"\x60\x2A")
    bus.write(0x300, 0x42)
    assert bus.read(0x300) == 0x42
    assert bus.peek(0x201) == 0x2A

    log = bus.get_and_clear_activity_log()
    assert [(a.address, a.data, a.access_type) for a in log] == [
        (0x300, 0x42, BusAccessType.WRITE),
        (0x300, 0x42, BusAccessType.READ),
    ]
    assert bus.get_and_clear_activity_log() == []

def test_load_past_end_writes_nothing(memory):
    bus, ram = memory
    with pytest.raises(AddressOutOfBoundsError):
        bus.load(0xFF8, bytes([0xFF] * 9))
    assert not any(ram._memory)

class TestBusRegistration(unittest.TestCase):
    def test_reversed_range(self):
        with self.assertRaises(ValueError):
            Bus().register_device(0x2000, 0x1000, RAM(0x100))

    def test_negative_start(self):
        with self.assertRaises(ValueError):
            Bus().register_device(-1, 0xFF, RAM(0x100))

    def test_ram_size_must_match_range(self):
        with self.assertRaisesRegex(ValueError, r"Registered RAM device size \(10 bytes\)"):
            Bus().register_device(0x0000, 0x000F, RAM(10))

    def test_non_device_rejected(self):
        with self.assertRaises(TypeError):
            Bus().register_device(0x0000, 0x000F, bytearray(16))

    def test_empty_bus_has_no_size(self):
        self.assertEqual(Bus().get_size(), 0)

if __name__ == '__main__':
    unittest.main()
