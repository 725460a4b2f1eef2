"""
Render a generated world into a paginated, branded PDF document.
"""

from __future__ import annotations

import base64
from dataclasses import dataclass
from io import BytesIO
from pathlib import Path
from typing import Any, Callable, Sequence

from reportlab.lib import colors
from reportlab.lib.pagesizes import A4, LETTER
from reportlab.lib.units import mm
from reportlab.lib.utils import ImageReader, simpleSplit
from reportlab.pdfbase import pdfmetrics
from reportlab.pdfbase.ttfonts import TTFont
from reportlab.pdfgen import canvas

from lumina_worlds.image_generation import GeneratedImage, ImageDescription, ImageResult
from lumina_worlds.pipeline import WorldAggregate
from lumina_worlds.text_generation import (
    SCENARIO_ARCHETYPES,
    CharacterConcept,
    CustomizationOption,
    IdeaRecord,
    ScenarioArchetype,
)

BRAND_TITLE = "LUMINA OZ"
BRAND_SUBTITLE = "Game Dev - World Building Tool"
FOOTER_ATTRIBUTION = "Generated by Lumina Oz Game Dev - World Building Tool"

CHARACTER_DESCRIPTION_LINES = 2
CONCEPT_ART_MAX_HEIGHT = 100 * mm


@dataclass(frozen=True)
class PageLayoutConfig:
    brand_color: colors.Color
    text_color: colors.Color
    muted_color: colors.Color
    rule_color: colors.Color
    character_card_background: colors.Color
    character_badge_color: colors.Color
    scenario_card_background: colors.Color
    scenario_badge_color: colors.Color
    idea_color: colors.Color
    customization_color: colors.Color


DEFAULT_LAYOUT = PageLayoutConfig(
    brand_color=colors.HexColor("#3F4D64"),
    text_color=colors.black,
    muted_color=colors.HexColor("#646464"),
    rule_color=colors.HexColor("#C8C8C8"),
    character_card_background=colors.HexColor("#F8FAFC"),
    character_badge_color=colors.HexColor("#8B5CF6"),
    scenario_card_background=colors.HexColor("#EFF6FF"),
    scenario_badge_color=colors.HexColor("#3B82F6"),
    idea_color=colors.HexColor("#22C55E"),
    customization_color=colors.HexColor("#F59E0B"),
)


PAGE_SIZES = {
    "a4": A4,
    "letter": LETTER,
}


@dataclass(frozen=True)
class RenderSummary:
    """What :meth:`WorldPDFBuilder.build` actually put on paper."""

    output_path: Path
    page_count: int
    character_cards: int
    scenario_cards: int


FooterPainter = Callable[[canvas.Canvas, int, int], None]


class _FooterCanvas(canvas.Canvas):
    """
    Canvas that holds pages back until ``save`` so footers can print the page count.
    """

    def __init__(self, *args: Any, footer_painter: FooterPainter, **kwargs: Any) -> None:
        super().__init__(*args, **kwargs)
        self._footer_painter = footer_painter
        self._deferred_pages: list[dict[str, Any]] = []
        self.total_pages = 0

    def showPage(self) -> None:  # noqa: N802 - reportlab API
        self._deferred_pages.append(dict(self.__dict__))
        self._startPage()

    def save(self) -> None:
        total = len(self._deferred_pages)
        for page_state in self._deferred_pages:
            self.__dict__.update(page_state)
            self._footer_painter(self, self._pageNumber, total)
            super().showPage()
        super().save()
        self.total_pages = total


class WorldPDFBuilder:
    """
    Paint a :class:`WorldAggregate` onto A4 pages, top to bottom.

    The layout keeps a vertical cursor measured from the top edge and starts a
    new page whenever the next block would cross the bottom margin. Sections:
      * Branded header band with the world type.
      * Original idea, concept art, narrative.
      * Exactly 6 character cards and exactly 3 scenario cards.
      * Game & book ideas, customization options, region descriptions.
    """

    def __init__(
        self,
        *,
        page_size: tuple[float, float] = PAGE_SIZES["a4"],
        margin_mm: float = 20.0,
        line_height_mm: float = 7.0,
        layout: PageLayoutConfig = DEFAULT_LAYOUT,
    ) -> None:
        self.page_size = page_size
        self.width, self.height = page_size
        self.margin = margin_mm * mm
        self.line_height = line_height_mm * mm
        self.layout = layout
        self.content_width = self.width - 2 * self.margin

        self.body_font, self.bold_font, self.italic_font = self._configure_fonts()

        self._pdf: canvas.Canvas | None = None
        self._y = self.margin

    def build(self, aggregate: WorldAggregate, output_path: Path | str) -> RenderSummary:
        output_file = Path(output_path)
        output_file.parent.mkdir(parents=True, exist_ok=True)

        pdf = _FooterCanvas(str(output_file), pagesize=self.page_size, footer_painter=self._draw_footer)
        pdf.setTitle(f"{aggregate.world_type} World")
        pdf.setAuthor(BRAND_TITLE)
        self._pdf = pdf
        self._y = self.margin

        try:
            self._draw_header(aggregate.world_type)

            self._draw_section_header("Original World Idea")
            self._draw_text_block(f'"{aggregate.user_idea}"', font=self.italic_font, size=12)

            if aggregate.concept_visual is not None:
                self._draw_concept_art(aggregate.concept_visual)

            if aggregate.narrative:
                self._draw_section_header("World Narrative")
                for paragraph in aggregate.narrative_paragraphs():
                    self._draw_text_block(paragraph)

            self._draw_section_header("Character Concepts")
            characters = aggregate.display_characters()
            for index, character in enumerate(characters):
                self._draw_character_card(character, index)

            self._draw_section_header("World Scenarios")
            for index, archetype in enumerate(SCENARIO_ARCHETYPES):
                self._draw_scenario_card(archetype, index)

            if aggregate.ideas:
                self._draw_section_header("Game & Book Ideas")
                for index, idea in enumerate(aggregate.ideas):
                    self._draw_idea(idea, index)

            if aggregate.customizations:
                self._draw_section_header("Customization Options")
                for index, option in enumerate(aggregate.customizations):
                    self._draw_customization(option, index)

            if aggregate.region_text:
                self._draw_section_header("Conceptual Maps & Regions")
                self._draw_regions(aggregate)

            pdf.showPage()
            pdf.save()
        finally:
            self._pdf = None

        return RenderSummary(
            output_path=output_file,
            page_count=pdf.total_pages,
            character_cards=len(characters),
            scenario_cards=len(SCENARIO_ARCHETYPES),
        )

    # ------------------------------------------------------------------ header & footer

    def _draw_header(self, world_type: str) -> None:
        pdf = self._canvas()
        band_height = 40 * mm
        pdf.setFillColor(self.layout.brand_color)
        pdf.rect(0, self.height - band_height, self.width, band_height, stroke=0, fill=1)

        self._draw_string(BRAND_TITLE, self.margin, 20 * mm, self.bold_font, 24, colors.white)
        self._draw_string(BRAND_SUBTITLE, self.margin, 28 * mm, self.body_font, 14, colors.white)
        self._draw_string(f"World Type: {world_type}", self.margin, 35 * mm, self.body_font, 12, colors.white)

        self._y = 50 * mm

    def _draw_footer(self, pdf: canvas.Canvas, page_number: int, total_pages: int) -> None:
        pdf.saveState()
        pdf.setStrokeColor(self.layout.rule_color)
        pdf.setLineWidth(0.3 * mm)
        pdf.line(self.margin, 15 * mm, self.width - self.margin, 15 * mm)

        pdf.setFillColor(self.layout.muted_color)
        pdf.setFont(self.body_font, 9)
        pdf.drawString(self.margin, 8 * mm, FOOTER_ATTRIBUTION)
        pdf.drawRightString(self.width - self.margin, 8 * mm, f"Page {page_number} of {total_pages}")
        pdf.restoreState()

    # ------------------------------------------------------------------ sections

    def _draw_section_header(self, title: str) -> None:
        self._check_page_break(15 * mm)
        pdf = self._canvas()

        self._draw_string(title, self.margin, self._y, self.bold_font, 16, self.layout.brand_color)

        underline_y = self.height - (self._y + 2 * mm)
        pdf.setStrokeColor(self.layout.brand_color)
        pdf.setLineWidth(0.5 * mm)
        pdf.line(self.margin, underline_y, self.margin + 60 * mm, underline_y)

        self._y += 12 * mm

    def _draw_text_block(self, text: str, *, font: str | None = None, size: float = 11) -> None:
        if not text:
            return

        font = font or self.body_font
        for line in self._wrap(text, font, size, self.content_width):
            self._check_page_break(self.line_height)
            self._draw_string(line, self.margin, self._y, font, size, self.layout.text_color)
            self._y += self.line_height

        self._y += 3 * mm

    def _draw_concept_art(self, visual: ImageResult) -> None:
        if isinstance(visual, GeneratedImage):
            reader = ImageReader(BytesIO(base64.b64decode(visual.image_base64, validate=True)))
            image_width, image_height = reader.getSize()
            scale = min(self.content_width / image_width, CONCEPT_ART_MAX_HEIGHT / image_height)
            draw_width = image_width * scale
            draw_height = image_height * scale

            self._draw_section_header("Concept Art")
            self._check_page_break(draw_height + 5 * mm)
            x = self.margin + (self.content_width - draw_width) / 2
            self._canvas().drawImage(
                reader,
                x,
                self.height - (self._y + draw_height),
                draw_width,
                draw_height,
                preserveAspectRatio=True,
                mask="auto",
            )
            self._y += draw_height + 8 * mm
        elif isinstance(visual, ImageDescription):
            self._draw_section_header("Concept Art Direction")
            self._draw_text_block(visual.text)

    def _draw_character_card(self, character: CharacterConcept, index: int) -> None:
        self._check_page_break(25 * mm)
        top = self._y
        text_x = self.margin + 20 * mm

        self._fill_card(top - 5 * mm, 22 * mm, self.layout.character_card_background)
        self._draw_badge(index + 1, top, self.layout.character_badge_color)

        name = character.name or f"Character {index + 1}"
        role = character.role or "Role not specified"
        description = character.description or "Character description available for expansion"

        self._draw_string(name, text_x, top + 2 * mm, self.bold_font, 12, self.layout.text_color)
        self._draw_string(role, text_x, top + 8 * mm, self.body_font, 10, self.layout.muted_color)

        lines = self._wrap(description, self.body_font, 10, self.content_width - 20 * mm)
        for offset, line in enumerate(lines[:CHARACTER_DESCRIPTION_LINES]):
            self._draw_string(line, text_x, top + 12 * mm + offset * 5 * mm, self.body_font, 10, self.layout.text_color)

        self._y += 25 * mm

    def _draw_scenario_card(self, archetype: ScenarioArchetype, index: int) -> None:
        lines = self._wrap(archetype.description, self.body_font, 10, self.content_width - 20 * mm)
        card_height = 13 * mm + 5 * mm * len(lines)
        self._check_page_break(card_height + 5 * mm)
        top = self._y
        text_x = self.margin + 20 * mm

        self._fill_card(top - 5 * mm, card_height, self.layout.scenario_card_background)
        self._draw_badge(index + 1, top, self.layout.scenario_badge_color)

        self._draw_string(archetype.title, text_x, top + 2 * mm, self.bold_font, 12, self.layout.text_color)
        self._draw_string(archetype.tag, text_x, top + 8 * mm, self.body_font, 10, self.layout.muted_color)
        for offset, line in enumerate(lines):
            self._draw_string(line, text_x, top + 12 * mm + offset * 5 * mm, self.body_font, 10, self.layout.text_color)

        self._y += card_height + 5 * mm

    def _draw_idea(self, idea: IdeaRecord, index: int) -> None:
        self._check_page_break(15 * mm)
        self._draw_string(f"{index + 1}. {idea.title}", self.margin, self._y, self.bold_font, 12, self.layout.idea_color)
        self._y += 7 * mm
        self._draw_text_block(idea.synopsis, size=10)

    def _draw_customization(self, option: CustomizationOption, index: int) -> None:
        self._check_page_break(12 * mm)
        self._draw_string(
            f"{index + 1}. {option.title}",
            self.margin,
            self._y,
            self.bold_font,
            11,
            self.layout.customization_color,
        )
        self._y += 6 * mm
        self._draw_text_block(option.description, size=10)

    def _draw_regions(self, aggregate: WorldAggregate) -> None:
        for section in aggregate.region_sections():
            self._check_page_break(12 * mm)
            self._draw_string(section.heading, self.margin, self._y, self.bold_font, 12, self.layout.brand_color)
            self._y += 7 * mm
            self._draw_text_block(section.body)

    # ------------------------------------------------------------------ helpers

    def _canvas(self) -> canvas.Canvas:
        if self._pdf is None:
            raise RuntimeError("No PDF is being built.")
        return self._pdf

    def _check_page_break(self, space_needed: float) -> None:
        if self._y + space_needed > self.height - self.margin:
            self._canvas().showPage()
            self._y = self.margin

    def _draw_string(
        self,
        text: str,
        x: float,
        y_from_top: float,
        font: str,
        size: float,
        color: colors.Color,
    ) -> None:
        pdf = self._canvas()
        pdf.setFillColor(color)
        pdf.setFont(font, size)
        pdf.drawString(x, self.height - y_from_top, text)

    def _fill_card(self, top: float, card_height: float, color: colors.Color) -> None:
        pdf = self._canvas()
        pdf.setFillColor(color)
        pdf.rect(self.margin, self.height - (top + card_height), self.content_width, card_height, stroke=0, fill=1)

    def _draw_badge(self, number: int, top: float, color: colors.Color) -> None:
        pdf = self._canvas()
        center_x = self.margin + 8 * mm
        center_y = self.height - (top + 1 * mm)
        pdf.setFillColor(color)
        pdf.circle(center_x, center_y, 4 * mm, stroke=0, fill=1)
        pdf.setFillColor(colors.white)
        pdf.setFont(self.bold_font, 10)
        pdf.drawCentredString(center_x, center_y - 3.5, str(number))

    @staticmethod
    def _wrap(text: str, font: str, size: float, width: float) -> list[str]:
        if not text:
            return []
        return list(simpleSplit(text, font, size, width))

    def _configure_fonts(self) -> tuple[str, str, str]:
        unicode_options = [
            (
                ("DejaVuSans", ["DejaVuSans.ttf"]),
                ("DejaVuSans-Bold", ["DejaVuSans-Bold.ttf"]),
                ("DejaVuSans-Oblique", ["DejaVuSans-Oblique.ttf"]),
            ),
        ]

        search_roots = [
            Path("/usr/share/fonts/truetype/dejavu"),
            Path("/usr/share/fonts/dejavu"),
            Path("/usr/share/fonts"),
            Path("/usr/local/share/fonts"),
            Path("/Library/Fonts"),
            Path.home() / "Library" / "Fonts",
            Path("C:/Windows/Fonts"),
        ]

        for option in unicode_options:
            if all(
                self._register_font_if_available(name, candidates, search_roots)
                for name, candidates in option
            ):
                regular, bold, italic = (name for name, _ in option)
                return regular, bold, italic

        return "Helvetica", "Helvetica-Bold", "Helvetica-Oblique"

    @staticmethod
    def _register_font_if_available(
        font_name: str,
        candidate_filenames: Sequence[str],
        search_roots: Sequence[Path],
    ) -> bool:
        if font_name in pdfmetrics.getRegisteredFontNames():
            return True

        for root in search_roots:
            for candidate in candidate_filenames:
                font_path = root / candidate
                if font_path.exists():
                    try:
                        pdfmetrics.registerFont(TTFont(font_name, str(font_path)))
                        return True
                    except Exception:
                        continue
        return False
