from io import BytesIO

from PIL import Image, ImageDraw


def image_to_pdf_bytes(images):
    if not images:
        return b''
    rgb_images = [img.convert('RGB') for img in images]
    output = BytesIO()
    rgb_images[0].save(output, format='PDF', save_all=True, append_images=rgb_images[1:])
    return output.getvalue()


def build_document_page(title, header_lines, table_header=None, table_rows=None, footer_lines=None):
    """Render a plain A4 page: title band, key/value header, optional table and footer."""
    width = 1240
    height = 1754
    page = Image.new('RGB', (width, height), color='white')
    draw = ImageDraw.Draw(page)

    draw.rectangle((30, 30, width - 30, height - 30), outline='black', width=3)
    draw.rectangle([(30, 30), (width - 30, 120)], fill=(37, 99, 235))
    draw.text((60, 65), title, fill='white')

    y = 160
    for line in header_lines:
        draw.text((60, y), line, fill='black')
        y += 40

    if table_header:
        y += 30
        columns = [60 + index * 280 for index in range(len(table_header))]
        for x, label in zip(columns, table_header):
            draw.text((x, y), str(label), fill='black')
        draw.line((60, y + 26, width - 60, y + 26), fill='black')
        y += 50
        for row in table_rows or []:
            for x, value in zip(columns, row):
                draw.text((x, y), str(value), fill='black')
            y += 36

    if footer_lines:
        y += 40
        draw.line((60, y, width - 60, y), fill='black')
        y += 30
        for line in footer_lines:
            draw.text((60, y), line, fill='black')
            y += 36

    return page
