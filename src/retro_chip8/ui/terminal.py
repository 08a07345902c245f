# retro_chip8/ui/terminal.py
"""
端末向けのテキストレンダラ。
フレームバッファを1画素1文字で描画します。画面が変化したサイクルでのみ再描画します。
"""
import sys
from typing import Callable, Dict, Optional, TextIO

from retro_chip8.core.snapshot import Snapshot
from retro_chip8.arch.chip8.constants import DISPLAY_WIDTH, DISPLAY_HEIGHT

# カーソルを左上に戻してから画面を消去する
CLEAR_SCREEN = "\x1b[H\x1b[2J"

# @intent:utility_function フレームバッファを DISPLAY_HEIGHT 行 x DISPLAY_WIDTH 文字のテキストに変換します。
def format_framebuffer(framebuffer: bytes, on_char: str = "*", off_char: str = " ") -> str:
    if len(framebuffer) != DISPLAY_WIDTH * DISPLAY_HEIGHT:
        raise ValueError(f"Framebuffer must be {DISPLAY_WIDTH * DISPLAY_HEIGHT} bytes, got {len(framebuffer)}.")
    lines = []
    for y in range(DISPLAY_HEIGHT):
        row = framebuffer[y * DISPLAY_WIDTH:(y + 1) * DISPLAY_WIDTH]
        lines.append("".join(on_char if pixel else off_char for pixel in row))
    return "\n".join(lines)

def format_registers(registers: Dict[str, int]) -> str:
    general = " ".join(f"{name}={value:02X}" for name, value in registers.items() if len(name) == 2 and name.startswith("V"))
    pointers = " ".join(
        f"{name}={registers[name]:04X}" for name in ("PC", "I") if name in registers
    )
    timers = " ".join(f"{name}={registers[name]:02X}" for name in ("SP", "DT", "ST") if name in registers)
    return "\n".join(part for part in (general, f"{pointers} {timers}".strip()) if part)

# @intent:responsibility Snapshot を受け取り、テキストストリームへ画面を描画します。
class TerminalRenderer:
    def __init__(self, stream: Optional[TextIO] = None, on_char: str = "*", off_char: str = " ",
                 register_source: Optional[Callable[[], Dict[str, int]]] = None, clear: bool = True):
        self._stream = stream or sys.stdout
        self._on_char = on_char
        self._off_char = off_char
        self._register_source = register_source
        self._clear = clear
        self._last_frame: Optional[bytes] = None

    def render(self, snapshot: Snapshot) -> None:
        frame = snapshot.framebuffer
        if frame == self._last_frame and self._register_source is None:
            return
        self._last_frame = frame

        text = format_framebuffer(frame, self._on_char, self._off_char)
        if self._register_source is not None:
            text += "\n" + format_registers(self._register_source())
        if self._clear:
            self._stream.write(CLEAR_SCREEN)
        self._stream.write(text + "\n")
        self._stream.flush()

