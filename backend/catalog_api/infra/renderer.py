"""Pillow rasteriser for leaderboard layouts."""

from __future__ import annotations

import io
import logging
from typing import Sequence

from PIL import Image, ImageColor, ImageDraw, ImageFont

from catalog_api.domain.collections.layout import LeaderboardLayout

LOGGER = logging.getLogger(__name__)

_PADDING = 32
_GAP = 16
_CELL_PAD_X = 14
_HEADER_ROW_HEIGHT = 44
_ROW_HEIGHT = 40
_TITLE_SIZE = 36
_LABEL_SIZE = 18
_HEADER_SIZE = 18
_CELL_SIZE = 16
_FOOTER_SIZE = 14


def _font(paths: Sequence[str], size: int) -> ImageFont.ImageFont | ImageFont.FreeTypeFont:
	for path in paths:
		try:
			return ImageFont.truetype(path, size)
		except OSError:
			LOGGER.warning("artifact_font_unavailable", extra={"font_path": path})
	return ImageFont.load_default(size)


def _fit(draw: ImageDraw.ImageDraw, text: str, font, max_width: float) -> str:
	"""Truncate ``text`` with an ellipsis so it fits ``max_width`` pixels."""
	if draw.textlength(text, font=font) <= max_width:
		return text
	while text and draw.textlength(f"{text}…", font=font) > max_width:
		text = text[:-1]
	return f"{text}…" if text else ""


def _gradient(size: tuple[int, int], start: str, end: str) -> Image.Image:
	width, height = size
	top = ImageColor.getrgb(start)
	bottom = ImageColor.getrgb(end)
	image = Image.new("RGB", size, top)
	draw = ImageDraw.Draw(image)
	span = max(width + height - 2, 1)
	# 45 degree gradient drawn as anti-diagonal lines
	for offset in range(width + height - 1):
		ratio = offset / span
		colour = tuple(round(a + (b - a) * ratio) for a, b in zip(top, bottom))
		draw.line([(offset, 0), (offset - height, height)], fill=colour)
	return image


class PillowRenderer:
	"""Draws a ``LeaderboardLayout`` as a PNG."""

	def render(self, layout: LeaderboardLayout, dimensions: tuple[int, int], fonts: Sequence[str]) -> bytes:
		width, height = dimensions
		image = _gradient((width, height), layout.background, layout.background_to)
		draw = ImageDraw.Draw(image)

		title_font = _font(fonts, _TITLE_SIZE)
		label_font = _font(fonts, _LABEL_SIZE)
		header_font = _font(fonts, _HEADER_SIZE)
		cell_font = _font(fonts, _CELL_SIZE)
		footer_font = _font(fonts, _FOOTER_SIZE)

		inner_width = width - 2 * _PADDING
		y = _PADDING

		label_width = draw.textlength(layout.label, font=label_font)
		title = _fit(draw, layout.title, title_font, inner_width - label_width - _GAP)
		draw.text((_PADDING, y), title, font=title_font, fill="white")
		draw.text((width - _PADDING - label_width, y + 12), layout.label, font=label_font, fill="#aaaaaa")
		y += _TITLE_SIZE + _GAP + 8

		total_flex = sum(column.flex for column in layout.columns)
		column_x: list[tuple[float, float]] = []
		cursor = float(_PADDING)
		for column in layout.columns:
			column_width = inner_width * column.flex / total_flex
			column_x.append((cursor, column_width))
			cursor += column_width

		table_top = y
		table_bottom = table_top + _HEADER_ROW_HEIGHT + _ROW_HEIGHT * len(layout.rows)
		draw.rounded_rectangle(
			[(_PADDING, table_top), (width - _PADDING, table_bottom)],
			radius=10,
			fill=layout.row_backgrounds[1],
			outline=layout.border,
			width=2,
		)
		draw.rectangle(
			[(_PADDING + 2, table_top + 2), (width - _PADDING - 2, table_top + _HEADER_ROW_HEIGHT)],
			fill=layout.header_background,
		)
		for (x, column_width), column in zip(column_x, layout.columns):
			text = _fit(draw, column.label, header_font, column_width - 2 * _CELL_PAD_X)
			draw.text((x + _CELL_PAD_X, table_top + 12), text, font=header_font, fill="white")

		y = table_top + _HEADER_ROW_HEIGHT
		for index, cells in enumerate(layout.rows):
			draw.rectangle(
				[(_PADDING + 2, y), (width - _PADDING - 2, y + _ROW_HEIGHT - 1)],
				fill=layout.row_backgrounds[index % 2],
			)
			draw.line([(_PADDING + 2, y), (width - _PADDING - 2, y)], fill=layout.border, width=1)
			for (x, column_width), value in zip(column_x, cells):
				text = _fit(draw, value, cell_font, column_width - 2 * _CELL_PAD_X)
				draw.text((x + _CELL_PAD_X, y + 11), text, font=cell_font, fill="#dddddd")
			y += _ROW_HEIGHT

		footer_y = min(table_bottom + _GAP, height - _PADDING - _FOOTER_SIZE)
		draw.text((_PADDING, footer_y), layout.footer, font=footer_font, fill="#999999")

		buffer = io.BytesIO()
		image.save(buffer, format="PNG")
		return buffer.getvalue()
