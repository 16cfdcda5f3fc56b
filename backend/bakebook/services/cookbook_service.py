"""
Cookbook Service
Renders a collection of recipes as a printable PDF cookbook.

Layout:
    - Cover page: title, recipe count, date
    - Table of contents with dot leaders and page numbers
    - One section per recipe: title, cook time, memory box, ingredients,
      directions, categories, page number footer

Page numbers in the table of contents are exact: the document is laid out
twice, the first pass only measures where each recipe starts.

Recipes may be ORM objects or plain dicts (the offline client renders its
cached recipes with the same code).
"""

import re
from datetime import date
from io import BytesIO
from typing import Any, Iterable, List, Optional

from reportlab.lib.pagesizes import A4
from reportlab.lib.utils import simpleSplit
from reportlab.pdfbase.pdfmetrics import stringWidth
from reportlab.pdfgen.canvas import Canvas

from bakebook.core.constants import DEFAULT_COOKBOOK_TITLE


# Floral colour scheme (RGB 0-1)
PRIMARY = (174 / 255, 90 / 255, 174 / 255)  # Purple
ACCENT = (224 / 255, 102 / 255, 160 / 255)  # Pink
TEXT = (64 / 255, 64 / 255, 64 / 255)  # Dark gray
LIGHT_TEXT = (128 / 255, 128 / 255, 128 / 255)  # Light gray
BACKGROUND = (252 / 255, 249 / 255, 252 / 255)  # Very light pink

FONT = "Helvetica"
FONT_BOLD = "Helvetica-Bold"
FONT_ITALIC = "Helvetica-Oblique"

MARGIN = 70  # ~25mm
FOOTER_SPACE = 60


def cookbook_filename(title: str) -> str:
    """
    Download filename for a cookbook title.

    Example:
        >>> cookbook_filename("Nonna's Kitchen")
        'nonna_s_kitchen.pdf'
    """
    return re.sub(r"[^a-z0-9]", "_", title, flags=re.IGNORECASE).lower() + ".pdf"


def _field(recipe: Any, name: str, default: Any = None) -> Any:
    if isinstance(recipe, dict):
        return recipe.get(name, default)
    return getattr(recipe, name, default)


class _CookbookRenderer:
    """Draws one full cookbook on a canvas, tracking the cursor and page."""

    def __init__(self, canvas: Canvas, title: str):
        self.c = canvas
        self.title = title
        self.width, self.height = A4
        self.y = self.height - MARGIN
        self.page = 1

    # -- page helpers -------------------------------------------------------

    def decorate_page(self):
        c = self.c
        c.setLineWidth(0.5)
        c.setStrokeColorRGB(*ACCENT)
        c.rect(40, 40, self.width - 80, self.height - 80)
        c.setFillColorRGB(*ACCENT)
        for x, y in ((55, 55), (self.width - 55, 55),
                     (55, self.height - 55), (self.width - 55, self.height - 55)):
            c.circle(x, y, 3, stroke=0, fill=1)

    def new_page(self):
        self.c.showPage()
        self.page += 1
        self.y = self.height - MARGIN
        self.decorate_page()

    def ensure_space(self, needed: float):
        if self.y - needed < MARGIN + FOOTER_SPACE:
            self.new_page()

    def centered(self, text: str, font: str, size: float, color, y: float) -> float:
        self.c.setFont(font, size)
        self.c.setFillColorRGB(*color)
        text_width = stringWidth(text, font, size)
        self.c.drawString((self.width - text_width) / 2, y, text)
        return text_width

    def footer(self):
        label = str(self.page)
        label_width = self.centered(label, FONT, 10, LIGHT_TEXT, 45)
        self.c.setFillColorRGB(*ACCENT)
        self.c.circle((self.width - label_width) / 2 - 8, 48, 1, stroke=0, fill=1)
        self.c.circle((self.width + label_width) / 2 + 8, 48, 1, stroke=0, fill=1)

    # -- sections -----------------------------------------------------------

    def cover(self, recipe_count: int):
        self.decorate_page()
        title_y = self.height - 230
        title_width = self.centered(self.title, FONT_BOLD, 32, PRIMARY, title_y)

        self.c.setLineWidth(1)
        self.c.setStrokeColorRGB(*ACCENT)
        self.c.line((self.width - title_width) / 2, title_y - 14,
                    (self.width + title_width) / 2, title_y - 14)

        subtitle = f"A Collection of {recipe_count} Cherished Family Recipes"
        self.centered(subtitle, FONT, 14, TEXT, title_y - 60)

        today = date.today()
        self.centered(f"{today:%B} {today.day}, {today.year}", FONT, 12, LIGHT_TEXT, title_y - 90)

        # Book icon
        c = self.c
        cx, top = self.width / 2, title_y - 130
        c.setFillColorRGB(*ACCENT)
        c.rect(cx - 42, top - 100, 84, 100, stroke=0, fill=1)
        c.setFillColorRGB(1, 1, 1)
        for offset in (-34, -8, 18):
            c.rect(cx + offset, top - 92, 16, 84, stroke=0, fill=1)

    def table_of_contents(self, recipes: List[Any], start_pages: List[Optional[int]]):
        self.new_page()
        c = self.c
        c.setFont(FONT_BOLD, 24)
        c.setFillColorRGB(*PRIMARY)
        c.drawString(MARGIN, self.y, "Table of Contents")
        self.y -= 15

        c.setLineWidth(0.5)
        c.setStrokeColorRGB(*ACCENT)
        c.line(MARGIN, self.y, self.width - MARGIN, self.y)
        self.y -= 30

        max_title_width = self.width - 2 * MARGIN - 60
        for recipe, page in zip(recipes, start_pages):
            self.ensure_space(20)
            entry = _field(recipe, "title", "") or "Untitled"
            if stringWidth(entry, FONT, 12) > max_title_width:
                while entry and stringWidth(entry + "...", FONT, 12) > max_title_width:
                    entry = entry[:-1]
                entry += "..."

            page_label = str(page) if page is not None else "?"
            page_width = stringWidth(page_label, FONT, 12)

            c.setFont(FONT, 12)
            c.setFillColorRGB(*TEXT)
            c.drawString(MARGIN, self.y, entry)
            c.drawString(self.width - MARGIN - page_width, self.y, page_label)

            # Dot leaders
            start_x = MARGIN + stringWidth(entry, FONT, 12) + 6
            end_x = self.width - MARGIN - page_width - 6
            c.setFillColorRGB(*LIGHT_TEXT)
            x = start_x
            while x < end_x:
                c.drawString(x, self.y, ".")
                x += 5
            self.y -= 22

    def section_heading(self, text: str):
        self.ensure_space(60)
        c = self.c
        c.setFont(FONT_BOLD, 16)
        c.setFillColorRGB(*PRIMARY)
        c.drawString(MARGIN, self.y, text)
        self.y -= 6
        c.setLineWidth(0.3)
        c.setStrokeColorRGB(*ACCENT)
        c.line(MARGIN, self.y, MARGIN + 100, self.y)
        self.y -= 20

    def wrapped(self, text: str, indent: float, hanging: float = 0, size: float = 11):
        lines = simpleSplit(text, FONT, size, self.width - 2 * MARGIN - indent - hanging)
        for index, line in enumerate(lines):
            self.ensure_space(16)
            self.c.setFont(FONT, size)
            self.c.setFillColorRGB(*TEXT)
            self.c.drawString(MARGIN + indent + (hanging if index else 0), self.y, line)
            self.y -= 15

    def recipe(self, recipe: Any) -> int:
        self.new_page()
        start_page = self.page
        c = self.c

        title = _field(recipe, "title", "") or "Untitled"
        title_width = self.centered(title, FONT_BOLD, 22, PRIMARY, self.y)
        self.y -= 10
        c.setLineWidth(0.5)
        c.setStrokeColorRGB(*ACCENT)
        c.line((self.width - title_width) / 2, self.y, (self.width + title_width) / 2, self.y)
        self.y -= 30

        cook_time = _field(recipe, "cook_time")
        if cook_time:
            self.centered(f"Cooking Time: {cook_time}", FONT, 12, LIGHT_TEXT, self.y)
            self.y -= 35

        memory = _field(recipe, "memory")
        if memory:
            lines = simpleSplit(f'"{memory}"', FONT_ITALIC, 11, self.width - 2 * MARGIN - 30)
            box_height = 40 + 15 * len(lines)
            self.ensure_space(box_height + 20)
            c.setFillColorRGB(*BACKGROUND)
            c.setStrokeColorRGB(*ACCENT)
            c.setLineWidth(0.5)
            c.rect(MARGIN, self.y - box_height + 15, self.width - 2 * MARGIN, box_height,
                   stroke=1, fill=1)
            c.setFont(FONT_BOLD, 14)
            c.setFillColorRGB(*PRIMARY)
            c.drawString(MARGIN + 15, self.y - 5, "A Special Memory")
            c.setFont(FONT_ITALIC, 11)
            c.setFillColorRGB(*TEXT)
            line_y = self.y - 27
            for line in lines:
                c.drawString(MARGIN + 15, line_y, line)
                line_y -= 15
            self.y -= box_height + 25

        self.section_heading("Ingredients")
        for ingredient in _field(recipe, "ingredients", []) or []:
            self.wrapped(f"• {ingredient}", indent=12, hanging=10)
        self.y -= 20

        self.section_heading("Directions")
        directions = _field(recipe, "directions", "") or ""
        steps = [step.strip() for step in directions.split("\n") if step.strip()]
        if len(steps) > 1:
            for number, step in enumerate(steps, start=1):
                self.wrapped(f"{number}. {step}", indent=12, hanging=18)
                self.y -= 4
        else:
            self.wrapped(directions.strip(), indent=12)

        tags = _field(recipe, "tags", []) or []
        if tags:
            self.y -= 20
            self.ensure_space(20)
            c.setFont(FONT, 10)
            c.setFillColorRGB(*LIGHT_TEXT)
            c.drawString(MARGIN, self.y, "Categories: " + " • ".join(tags))

        return start_page

    def render(self, recipes: List[Any], start_pages: List[Optional[int]]) -> List[int]:
        self.cover(len(recipes))
        self.table_of_contents(recipes, start_pages)
        actual = []
        for recipe in recipes:
            actual.append(self.recipe(recipe))
            self.footer()
        return actual


def build_cookbook_pdf(recipes: Iterable[Any], title: str = DEFAULT_COOKBOOK_TITLE) -> bytes:
    """
    Render recipes into a PDF cookbook.

    Args:
        recipes: Recipe ORM objects or dicts with the recipe fields
        title: Cookbook title shown on the cover

    Returns:
        PDF document bytes

    Example:
        pdf = build_cookbook_pdf(get_recipes(db, user.id), "Nonna's Kitchen")
    """
    recipes = list(recipes)
    title = title or DEFAULT_COOKBOOK_TITLE

    # Pass 1: measure where each recipe starts
    measure = _CookbookRenderer(Canvas(BytesIO(), pagesize=A4), title)
    start_pages = measure.render(recipes, [None] * len(recipes))

    # Pass 2: the real document
    buffer = BytesIO()
    canvas = Canvas(buffer, pagesize=A4)
    canvas.setTitle(title)
    _CookbookRenderer(canvas, title).render(recipes, start_pages)
    canvas.save()
    return buffer.getvalue()
