"""Canvas abstraction for the dashboard - allows swapping terminal output with test and image backends."""
import unicodedata
from abc import ABC, abstractmethod
from typing import List, Optional, Tuple

from PIL import Image, ImageDraw, ImageFont

EMOJI_PRESENTATION = "\ufe0f"


def _is_zero_width(char: str) -> bool:
    return (unicodedata.combining(char) != 0 or char == "\u200d"
            or "\ufe00" <= char <= "\ufe0f")


def _is_wide(char: str) -> bool:
    """Terminals give East Asian wide and fullwidth characters two columns."""
    return unicodedata.east_asian_width(char) in ("W", "F")


class DashboardCanvas(ABC):
    """Abstract canvas interface: a grid of character cells."""

    @property
    @abstractmethod
    def width(self) -> int:
        """Get canvas width in columns."""
        pass

    @property
    @abstractmethod
    def height(self) -> int:
        """Get canvas height in rows."""
        pass

    @abstractmethod
    def clear(self) -> None:
        """Clear the entire canvas."""
        pass

    @abstractmethod
    def draw_text(self, x: int, y: int, text: str, r: int, g: int, b: int) -> None:
        """
        Draw text starting at a cell.

        Args:
            x: Column (0-based)
            y: Row (0-based)
            text: Text to draw; anything past the right edge is dropped
            r: Red component (0-255)
            g: Green component (0-255)
            b: Blue component (0-255)
        """
        pass


class TextCanvas(DashboardCanvas):
    """Canvas that renders to a string for the terminal, optionally with ANSI colors."""

    RESET = "\x1b[0m"

    def __init__(self, width: int = 64, height: int = 24, color: bool = True):
        self._width = width
        self._height = height
        self.color = color
        self._cells: List[List[Tuple[str, Optional[Tuple[int, int, int]]]]] = []
        self.clear()

    @property
    def width(self) -> int:
        return self._width

    @property
    def height(self) -> int:
        return self._height

    def clear(self) -> None:
        self._cells = [[(" ", None) for _ in range(self._width)]
                       for _ in range(self._height)]

    def draw_text(self, x: int, y: int, text: str, r: int, g: int, b: int) -> None:
        if not 0 <= y < self._height:
            return
        col = x
        last = None  # column of the previous glyph and whether it is already two cells wide
        for char in text:
            if _is_zero_width(char):
                # Variation selectors and joiners attach to the previous glyph
                if last is None:
                    continue
                glyph_col, wide = last
                if 0 <= glyph_col < self._width:
                    glyph, rgb = self._cells[y][glyph_col]
                    self._cells[y][glyph_col] = (glyph + char, rgb)
                if char == EMOJI_PRESENTATION and not wide:
                    self._fill(y, col, (r, g, b))
                    col += 1
                    last = (glyph_col, True)
                continue
            wide = _is_wide(char)
            if 0 <= col < self._width:
                self._cells[y][col] = (char, (r, g, b))
            last = (col, wide)
            col += 1
            if wide:
                self._fill(y, col, (r, g, b))
                col += 1

    def _fill(self, y: int, col: int, rgb: Tuple[int, int, int]) -> None:
        """Mark the right half of a double-width glyph."""
        if 0 <= col < self._width:
            self._cells[y][col] = ("", rgb)

    def render(self) -> str:
        """
        Convert the canvas to a multi-line string.

        Trailing blank space is trimmed from each line.
        """
        lines = []
        for row in self._cells:
            line = ""
            active = None
            for char, rgb in row:
                if char == "":
                    continue
                if self.color and char != " " and rgb != active:
                    line += f"\x1b[38;2;{rgb[0]};{rgb[1]};{rgb[2]}m"
                    active = rgb
                line += char
            line = line.rstrip()
            if self.color and active is not None:
                line += self.RESET
            lines.append(line)
        return "\n".join(lines).rstrip("\n")


class FakeCanvas(DashboardCanvas):
    """
    Fake canvas implementation for testing - records text in memory.
    """

    def __init__(self, width: int = 64, height: int = 24):
        self._width = width
        self._height = height
        self.texts: List[Tuple[int, int, str, Tuple[int, int, int]]] = []
        self.clear_count = 0

    @property
    def width(self) -> int:
        return self._width

    @property
    def height(self) -> int:
        return self._height

    def clear(self) -> None:
        self.texts = []
        self.clear_count += 1

    def draw_text(self, x: int, y: int, text: str, r: int, g: int, b: int) -> None:
        self.texts.append((x, y, text, (r, g, b)))

    def find(self, text: str) -> Optional[Tuple[int, int, str, Tuple[int, int, int]]]:
        """Get the first recorded draw whose text contains ``text`` (for testing)."""
        for entry in self.texts:
            if text in entry[2]:
                return entry
        return None

    def row_text(self, y: int) -> List[str]:
        """All texts drawn on a row, left to right."""
        return [t for x, row, t, _ in sorted(self.texts) if row == y]


class PILCanvas(DashboardCanvas):
    """
    PIL-based canvas for rendering the dashboard to PNG images.

    Each character cell is ``cell_width`` x ``cell_height`` pixels.
    """

    BACKGROUND = (15, 23, 42)

    def __init__(self, width: int = 64, height: int = 24, cell_width: int = 8, cell_height: int = 14,
                 scale: int = 1):
        """
        Initialize PIL canvas.

        Args:
            width: Canvas width in columns
            height: Canvas height in rows
            cell_width: Pixel width of one column
            cell_height: Pixel height of one row
            scale: Scale factor for output image (makes it bigger for viewing)
        """
        self._width = width
        self._height = height
        self._cell_width = cell_width
        self._cell_height = cell_height
        self._scale = scale
        self._font = ImageFont.load_default()
        self.clear()

    @property
    def width(self) -> int:
        return self._width

    @property
    def height(self) -> int:
        return self._height

    @property
    def pixel_size(self) -> Tuple[int, int]:
        return (self._width * self._cell_width, self._height * self._cell_height)

    def clear(self) -> None:
        self._image = Image.new("RGB", self.pixel_size, self.BACKGROUND)
        self._draw = ImageDraw.Draw(self._image)

    def draw_text(self, x: int, y: int, text: str, r: int, g: int, b: int) -> None:
        if not 0 <= y < self._height or x >= self._width:
            return
        text = text[:max(0, self._width - x)]
        self._draw.text((x * self._cell_width, y * self._cell_height), text, fill=(r, g, b), font=self._font)

    def save(self, filename: str) -> None:
        """
        Save canvas to PNG file (scaled up for visibility).

        Args:
            filename: Output filename (e.g., "dashboard.png")
        """
        if self._scale > 1:
            w, h = self.pixel_size
            scaled = self._image.resize((w * self._scale, h * self._scale), Image.NEAREST)
            scaled.save(filename)
        else:
            self._image.save(filename)

    def get_image(self):
        """Get the PIL Image object (for advanced usage)."""
        return self._image
