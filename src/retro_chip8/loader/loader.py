# retro_chip8/loader/loader.py
"""
プログラムローダーモジュール。
生のバイナリイメージ（.ch8 など）をそのままメモリへコピーします。
"""
import logging
from pathlib import Path
from typing import Union

from retro_chip8.transport.bus import Bus
from retro_chip8.arch.chip8.constants import PROGRAM_START

logger = logging.getLogger(__name__)

class ProgramTooLargeError(ValueError):
    """イメージがロード先オフセット以降の残り容量に収まらない。"""

class ProgramLoader:
    """
    バイト列または生バイナリファイルをバスにロードするローダー。
    """
    # @intent:responsibility バイト列を offset から逐語的にコピーし、ロードしたバイト数を返します。
    # @intent:pre-condition 容量を超える場合は何も書き込まずに ProgramTooLargeError を送出します。
    def load_bytes(self, bus: Bus, data: bytes, offset: int = PROGRAM_START) -> int:
        capacity = bus.get_size() - offset
        if offset < 0 or capacity < 0:
            raise ValueError(f"Load offset {offset:#06x} outside memory of {bus.get_size()} bytes.")
        if len(data) > capacity:
            raise ProgramTooLargeError(
                f"Program of {len(data)} bytes does not fit at {offset:#06x} ({capacity} bytes available)."
            )
        bus.load(offset, bytes(data))
        logger.info("Loaded %d bytes at %#06x", len(data), offset)
        return len(data)

    def load_file(self, file_path: Union[str, Path], bus: Bus, offset: int = PROGRAM_START) -> int:
        with open(file_path, 'rb') as f:
            data = f.read()
        logger.debug("Read program image %s", file_path)
        return self.load_bytes(bus, data, offset)
