"""Enquiry list export as a printable PDF.

Pages are drawn with Pillow on an A4 canvas and written out with Pillow's
PDF encoder. Layout coordinates are in millimetres.
"""
import io
import re
import secrets
import time
from dataclasses import dataclass
from datetime import date

from PIL import Image, ImageDraw, ImageFont

from storefront.errors import EmptyEnquiry
from storefront.settings import PdfTemplate

DPI = 150
PAGE_MM = (210, 297)
MARGIN_MM = 14
MAX_FIELD_LENGTH = 500
COLUMN_WIDTHS_MM = (10, 40, 25, 25, 25, 20, 35)
ROW_FILL = (245, 242, 236)
CELL_PADDING_MM = 1.5

_CONTROL_CHARS = re.compile(r'[\x00-\x1f\x7f]')


@dataclass
class EnquiryDocument:
    content: bytes
    filename: str
    reference_id: str
    mimetype: str = 'application/pdf'


def mm(value):
    return int(round(value * DPI / 25.4))


def parse_color(value):
    parts = []
    for part in value.split(','):
        try:
            parts.append(int(part.strip()))
        except ValueError:
            parts.append(0)
    parts = (parts + [0, 0, 0])[:3]
    return tuple(parts)


def sanitize_text(text):
    if not text:
        return ''
    return _CONTROL_CHARS.sub('', str(text))[:MAX_FIELD_LENGTH]


def make_reference_id(prefix):
    millis = str(int(time.time() * 1000))
    return f'{prefix}{millis[-6:]}-{secrets.randbelow(1000)}'


def _font(points):
    return ImageFont.load_default(size=points * DPI / 72)


def _fit(draw, text, font, width):
    if draw.textlength(text, font=font) <= width:
        return text
    while text and draw.textlength(text + '...', font=font) > width:
        text = text[:-1]
    return text + '...' if text else ''


class _Canvas:
    def __init__(self):
        self.pages = []
        self.new_page()

    def new_page(self):
        page = Image.new('RGB', (mm(PAGE_MM[0]), mm(PAGE_MM[1])), 'white')
        self.pages.append(page)
        self.draw = ImageDraw.Draw(page)

    def text(self, x_mm, y_mm, text, size, color, centered=False):
        font = _font(size)
        x = mm(x_mm)
        if centered:
            x -= int(self.draw.textlength(text, font=font) / 2)
        self.draw.text((x, mm(y_mm)), text, font=font, fill=parse_color(color))

    def row(self, y_mm, cells, size, text_color, fill=None, height_mm=7):
        font = _font(size)
        x_mm = MARGIN_MM
        if fill is not None:
            width = sum(COLUMN_WIDTHS_MM)
            self.draw.rectangle(
                [mm(x_mm), mm(y_mm), mm(x_mm + width), mm(y_mm + height_mm)], fill=fill)
        for cell, width_mm in zip(cells, COLUMN_WIDTHS_MM):
            text = _fit(self.draw, str(cell), font, mm(width_mm - 2 * CELL_PADDING_MM))
            self.draw.text((mm(x_mm + CELL_PADDING_MM), mm(y_mm + CELL_PADDING_MM)), text, font=font,
                           fill=parse_color(text_color))
            x_mm += width_mm

    def to_bytes(self):
        buffer = io.BytesIO()
        self.pages[0].save(buffer, 'PDF', resolution=float(DPI), save_all=True,
                           append_images=self.pages[1:])
        return buffer.getvalue()


def render_enquiry_pdf(items, user_details=None, template: PdfTemplate | None = None,
                       today: date | None = None) -> EnquiryDocument:
    """Render ``items`` (anything with the enquiry item attributes) to a PDF."""
    if not items:
        raise EmptyEnquiry('Cannot export an empty enquiry list')

    template = template or PdfTemplate()
    colors = template.colors
    headers = template.table_headers
    today = today or date.today()
    reference_id = make_reference_id(template.reference_prefix)
    centre = PAGE_MM[0] / 2

    canvas = _Canvas()
    canvas.text(centre, 14, template.company_name, template.header_font_size, colors.deep_brown, centered=True)
    canvas.text(centre, 23, template.title, template.subtitle_font_size, colors.gray, centered=True)
    canvas.text(MARGIN_MM, 36, f'{template.date_label} {today.strftime("%d %b %Y")}',
                template.body_font_size, colors.black)
    canvas.text(MARGIN_MM, 41, f'{template.reference_label} {reference_id}',
                template.body_font_size, colors.black)

    y = 52
    if user_details is not None:
        details = [
            (template.name_label, user_details.name),
            (template.company_label, user_details.company),
            (template.email_label, user_details.email),
            (template.phone_label, user_details.phone),
        ]
        lines = [f'{label} {sanitize_text(value)}' for label, value in details if value]
        canvas.text(MARGIN_MM, y, template.contact_details_label, template.body_font_size, colors.black)
        for index, line in enumerate(lines):
            canvas.text(MARGIN_MM, y + 5 + index * 5, line, template.body_font_size, colors.dark_gray)
        y += 10 + len(lines) * 5

    head = [template.index_label, headers.product, headers.grade, headers.pack_format,
            headers.quantity, headers.moq, headers.notes]
    canvas.row(y, head, template.table_font_size, colors.white, fill=parse_color(colors.gold))
    y += 7

    empty = template.empty_field_text
    for index, item in enumerate(items, start=1):
        if y + 7 > PAGE_MM[1] - MARGIN_MM:
            canvas.new_page()
            y = MARGIN_MM
        cells = [
            index,
            sanitize_text(item.product_title) or template.na_text,
            sanitize_text(item.grade) or empty,
            sanitize_text(item.pack_format) or empty,
            sanitize_text(item.quantity) or empty,
            sanitize_text(item.moq) or empty,
            sanitize_text(item.notes) or empty,
        ]
        canvas.row(y, cells, template.table_font_size, colors.black,
                   fill=ROW_FILL if index % 2 == 0 else None)
        y += 7

    if y + 20 > PAGE_MM[1] - MARGIN_MM:
        canvas.new_page()
        y = MARGIN_MM
    canvas.text(centre, y + 10, template.footer_text1, template.footer_font_size, colors.light_gray, centered=True)
    canvas.text(centre, y + 15, template.footer_text2, template.footer_font_size, colors.light_gray, centered=True)

    return EnquiryDocument(
        content=canvas.to_bytes(),
        filename=f'{template.filename_prefix}{reference_id}.pdf',
        reference_id=reference_id,
    )
