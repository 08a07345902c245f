# retro_chip8/transport/bus.py
"""
Transport Layer (メモリバス)

アドレス空間をデバイスに割り当て、読み書きを該当デバイスへ転送します。
CPUからの read/write はアクセスログに残り、Snapshot.bus_activity として観測できます。
マップ外や範囲外のアドレスは全て AddressOutOfBoundsError になります。
"""
from abc import ABC, abstractmethod
from typing import List, Tuple
from dataclasses import dataclass
from enum import Enum

from retro_chip8.core.errors import AddressOutOfBoundsError

class BusAccessType(Enum):
    READ = "READ"
    WRITE = "WRITE"

# @intent:data_structure 1回のバスアクセス（アドレス、8bit値、種別）。
@dataclass(frozen=True)
class BusAccess:
    address: int
    data: int
    access_type: BusAccessType

# @intent:responsibility バスに接続できるデバイスのインターフェース。アドレスはデバイス先頭からのオフセット。
class Device(ABC):
    @abstractmethod
    def read(self, address: int) -> int:
        pass

    @abstractmethod
    def write(self, address: int, data: int) -> None:
        pass

class RAM(Device):
    """
    固定長のバイト列メモリ。全て0で初期化されます。
    """
    def __init__(self, size: int):
        if not isinstance(size, int) or size <= 0:
            raise ValueError("RAM size must be a positive integer.")
        self._memory = bytearray(size)
        self._size = size

    def _check(self, address: int) -> None:
        if not 0 <= address < self._size:
            raise AddressOutOfBoundsError(address, f"Address {address:#06x} out of bounds for RAM of size {self._size}.")

    def read(self, address: int) -> int:
        self._check(address)
        return self._memory[address]

    def write(self, address: int, data: int) -> None:
        self._check(address)
        if not 0 <= data <= 0xFF:
            raise ValueError(f"Data {data} is not an 8-bit value.")
        self._memory[address] = data

    # @intent:post-condition 範囲外を含む場合は1バイトも書き込まない。
    def write_block(self, address: int, data: bytes) -> None:
        end = address + len(data)
        if address < 0 or end > self._size:
            raise AddressOutOfBoundsError(
                address, f"Block {address:#06x}-{end:#06x} out of bounds for RAM of size {self._size}."
            )
        self._memory[address:end] = data

    def get_size(self) -> int:
        return self._size

# @intent:responsibility アドレス範囲ごとにデバイスを割り当て、アクセスを転送・記録します。
class Bus:
    def __init__(self):
        # (先頭アドレス, 末尾アドレス, デバイス)
        self._mappings: List[Tuple[int, int, Device]] = []
        self._activity: List[BusAccess] = []

    def get_and_clear_activity_log(self) -> List[BusAccess]:
        """前回の呼び出し以降に記録されたアクセスを返し、記録を空にします。"""
        log, self._activity = self._activity, []
        return log

    # @intent:pre-condition 0 <= start_address <= end_address。RAMは範囲と同じサイズであること。
    # @intent:rationale 範囲の重複は検査しない。構成は SystemBuilder が一箇所で組み立てる。
    def register_device(self, start_address: int, end_address: int, device: Device) -> None:
        if not (0 <= start_address <= end_address):
            raise ValueError("Invalid address range: start_address must be <= end_address and non-negative.")
        if not isinstance(device, Device):
            raise TypeError("Device must be an instance of a class derived from Device.")
        span = end_address - start_address + 1
        if isinstance(device, RAM) and device.get_size() != span:
            raise ValueError(
                f"Registered RAM device size ({device.get_size()} bytes) does not match "
                f"the address range size ({span} bytes)."
            )
        self._mappings.append((start_address, end_address, device))

    def _resolve(self, address: int) -> Tuple[Device, int, int]:
        for start, end, device in self._mappings:
            if start <= address <= end:
                return device, address - start, end
        raise AddressOutOfBoundsError(address, f"Address {address:#06x} not mapped to any device.")

    # @intent:responsibility マップされた最も高いアドレスの次を返します（ローダーの容量計算用）。
    def get_size(self) -> int:
        return max((end for _, end, _ in self._mappings), default=-1) + 1

    def read(self, address: int) -> int:
        device, offset, _ = self._resolve(address)
        data = device.read(offset)
        self._activity.append(BusAccess(address, data, BusAccessType.READ))
        return data

    # 記録を残さない読み出し。レンダラやテストからの参照用
    def peek(self, address: int) -> int:
        device, offset, _ = self._resolve(address)
        return device.read(offset)

    def write(self, address: int, data: int) -> None:
        device, offset, _ = self._resolve(address)
        device.write(offset, data)
        self._activity.append(BusAccess(address, data, BusAccessType.WRITE))

    # @intent:responsibility プログラムイメージを記録なしで一括転送します。
    # @intent:pre-condition データ全体が1つのデバイスの範囲に収まること。収まらなければ何も書かない。
    def load(self, address: int, data: bytes) -> None:
        if not data:
            return
        device, offset, end = self._resolve(address)
        last = address + len(data) - 1
        if last > end:
            raise AddressOutOfBoundsError(
                last, f"Data of {len(data)} bytes at {address:#06x} exceeds mapped range ending at {end:#06x}."
            )
        if isinstance(device, RAM):
            device.write_block(offset, bytes(data))
        else:
            for i, byte in enumerate(data):
                device.write(offset + i, byte)
