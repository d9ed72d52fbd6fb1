"""
PDF (reportlab) and Excel (openpyxl) documents for receipts and listings.

Builders take the enriched dictionaries produced by the routes and return the
document as bytes.
"""

from __future__ import annotations

from datetime import datetime
from io import BytesIO
from typing import Iterable, Sequence

from openpyxl import Workbook
from openpyxl.styles import Font
from reportlab.lib.pagesizes import landscape, letter
from reportlab.lib.utils import simpleSplit
from reportlab.pdfgen import canvas

from gestion.utils import format_cop, full_name, parse_date

PDF_MEDIA_TYPE = "application/pdf"
XLSX_MEDIA_TYPE = "application/vnd.openxmlformats-officedocument.spreadsheetml.sheet"

LINE_HEIGHT = 16
MARGIN = 48
TITLE_COLOR = (30 / 255, 64 / 255, 175 / 255)

# A line is a sequence of (x, text, bold) cells.
Line = Sequence[tuple[float, str, bool]]


def _fecha(value) -> str:
    parsed = parse_date(value)
    return parsed.strftime("%d/%m/%Y") if parsed else (value or "")


def _tipo_label(tipo) -> str:
    return "Ingreso" if tipo == "ingreso" else "Egreso"


def _estado_label(estado) -> str:
    return "Anulada" if estado == "anulada" else "Activa"


def _build_pdf(title: str, lines: list[Line], pagesize=letter) -> bytes:
    width, height = pagesize
    top = height - 56
    first_line_y = top - 40
    per_page = max(1, int((first_line_y - 60) // LINE_HEIGHT))
    chunks = [lines[i : i + per_page] for i in range(0, len(lines), per_page)] or [[]]
    generated = datetime.now().strftime("%d/%m/%Y %H:%M")

    buffer = BytesIO()
    pdf = canvas.Canvas(buffer, pagesize=pagesize)
    pdf.setTitle(title)
    for number, chunk in enumerate(chunks, start=1):
        pdf.setFillColorRGB(*TITLE_COLOR)
        pdf.setFont("Helvetica-Bold", 18)
        pdf.drawCentredString(width / 2, top, title)
        pdf.setStrokeColorRGB(*TITLE_COLOR)
        pdf.setLineWidth(0.5)
        pdf.line(MARGIN, top - 8, width - MARGIN, top - 8)
        pdf.setFillColorRGB(0, 0, 0)

        y = first_line_y
        for cells in chunk:
            for x, text, bold in cells:
                pdf.setFont("Helvetica-Bold" if bold else "Helvetica", 10)
                pdf.drawString(x, y, text)
            y -= LINE_HEIGHT

        pdf.setFont("Helvetica", 9)
        pdf.setFillColorRGB(0.4, 0.4, 0.4)
        pdf.drawString(MARGIN, 30, generated)
        pdf.drawRightString(width - MARGIN, 30, f"Página {number} de {len(chunks)}")
        pdf.showPage()
    pdf.save()
    content = buffer.getvalue()
    buffer.close()
    return content


def _workbook_bytes(wb: Workbook) -> bytes:
    output = BytesIO()
    wb.save(output)
    content = output.getvalue()
    output.close()
    return content


def _receipt_rows(transaccion: dict) -> list[tuple[str, str]]:
    rows = [
        (
            "Número de Transacción",
            f"#{transaccion.get('numero_transaccion') or transaccion.get('id')}",
        ),
        ("Fecha", _fecha(transaccion.get("fecha"))),
        ("Tipo", _tipo_label(transaccion.get("tipo"))),
        ("Monto", format_cop(transaccion.get("monto") or 0)),
        ("Categoría", transaccion.get("categoria_nombre") or "N/A"),
        ("Actividad", transaccion.get("actividad_nombre") or "N/A"),
        ("Persona", transaccion.get("persona_nombre") or "N/A"),
        ("Estado", _estado_label(transaccion.get("estado"))),
    ]
    return rows


def receipt_filename(transaccion: dict, extension: str) -> str:
    numero = transaccion.get("numero_transaccion") or transaccion.get("id")
    return f"transaccion_{numero}.{extension}"


def transaccion_pdf(transaccion: dict) -> bytes:
    lines: list[Line] = []
    for label, value in _receipt_rows(transaccion):
        bold_value = label in ("Número de Transacción", "Monto")
        lines.append([(MARGIN, f"{label}:", True), (MARGIN + 160, value, bold_value)])
    descripcion = transaccion.get("descripcion")
    if descripcion:
        lines.append([])
        lines.append([(MARGIN, "Descripción:", True)])
        width = letter[0] - 2 * MARGIN
        for chunk in simpleSplit(str(descripcion), "Helvetica", 10, width):
            lines.append([(MARGIN, chunk, False)])
    return _build_pdf("COMPROBANTE DE TRANSACCIÓN", lines)


def transaccion_xlsx(transaccion: dict) -> bytes:
    wb = Workbook()
    ws = wb.active
    ws.title = "Transacción"
    ws.append(["Campo", "Valor"])
    for label, value in _receipt_rows(transaccion):
        if label == "Monto":
            value = transaccion.get("monto") or 0
        elif label == "Número de Transacción":
            value = value.lstrip("#")
        ws.append([label, value])
    ws.append(["Descripción", transaccion.get("descripcion") or ""])
    ws["A1"].font = Font(bold=True)
    ws["B1"].font = Font(bold=True)
    ws.column_dimensions["A"].width = 24
    ws.column_dimensions["B"].width = 36
    return _workbook_bytes(wb)


TRANSACCIONES_COLUMNS = (
    ("Número", "numero_transaccion"),
    ("Fecha", "fecha"),
    ("Tipo", "tipo"),
    ("Monto", "monto"),
    ("Categoría", "categoria_nombre"),
    ("Actividad", "actividad_nombre"),
    ("Persona", "persona_nombre"),
    ("Estado", "estado"),
)


def transacciones_pdf(transacciones: Iterable[dict], resumen: dict) -> bytes:
    positions = (MARGIN, 110, 180, 240, 330, 450, 560, 680)
    header: Line = [(x, label, True) for x, (label, _) in zip(positions, TRANSACCIONES_COLUMNS)]
    lines: list[Line] = [header]
    for t in transacciones:
        values = (
            t.get("numero_transaccion") or "",
            _fecha(t.get("fecha")),
            _tipo_label(t.get("tipo")),
            format_cop(t.get("monto") or 0),
            (t.get("categoria_nombre") or "")[:22],
            (t.get("actividad_nombre") or "N/A")[:20],
            (t.get("persona_nombre") or "N/A")[:22],
            _estado_label(t.get("estado")),
        )
        lines.append([(x, value, False) for x, value in zip(positions, values)])
    lines.append([])
    lines.append([(MARGIN, "Ingresos:", True), (MARGIN + 100, format_cop(resumen["ingresos"]), False)])
    lines.append([(MARGIN, "Egresos:", True), (MARGIN + 100, format_cop(resumen["egresos"]), False)])
    lines.append([(MARGIN, "Neto:", True), (MARGIN + 100, format_cop(resumen["neto"]), True)])
    return _build_pdf("REPORTE DE TRANSACCIONES", lines, pagesize=landscape(letter))


def transacciones_xlsx(transacciones: Iterable[dict], resumen: dict) -> bytes:
    wb = Workbook()
    ws = wb.active
    ws.title = "Transacciones"
    ws.append([label for label, _ in TRANSACCIONES_COLUMNS] + ["Descripción"])
    for cell in ws[1]:
        cell.font = Font(bold=True)
    for t in transacciones:
        ws.append(
            [
                t.get("numero_transaccion"),
                _fecha(t.get("fecha")),
                _tipo_label(t.get("tipo")),
                t.get("monto"),
                t.get("categoria_nombre"),
                t.get("actividad_nombre"),
                t.get("persona_nombre"),
                _estado_label(t.get("estado")),
                t.get("descripcion") or "",
            ]
        )
    ws.append([])
    ws.append(["Ingresos", None, None, resumen["ingresos"]])
    ws.append(["Egresos", None, None, resumen["egresos"]])
    ws.append(["Neto", None, None, resumen["neto"]])
    for column, width in zip("ABCDEFGHI", (12, 12, 10, 14, 22, 22, 28, 10, 36)):
        ws.column_dimensions[column].width = width
    return _workbook_bytes(wb)


def _persona_row(persona: dict) -> list:
    sede = persona.get("sede") or {}
    escalas = ", ".join(e["nombre_escala"] for e in persona.get("escalas") or [])
    return [
        full_name(
            persona.get("nombres"),
            persona.get("primer_apellido"),
            persona.get("segundo_apellido"),
        ),
        f"{persona.get('tipo_id') or ''} {persona.get('numero_id') or ''}".strip(),
        persona.get("telefono") or "",
        persona.get("email") or "",
        sede.get("nombre_sede") or "Sin Sede",
        escalas or "Sin Escala",
        "Sí" if persona.get("bautizado") else "No",
    ]


PERSONAS_HEADERS = (
    "Nombre", "Documento", "Teléfono", "Email", "Sede", "Escalas", "Bautizado",
)


def personas_pdf(personas: Iterable[dict]) -> bytes:
    positions = (MARGIN, 220, 320, 410, 560, 640, 730)
    limits = (30, 16, 14, 26, 14, 16, 4)
    lines: list[Line] = [[(x, label, True) for x, label in zip(positions, PERSONAS_HEADERS)]]
    for persona in personas:
        row = _persona_row(persona)
        lines.append(
            [(x, str(value)[:limit], False) for x, value, limit in zip(positions, row, limits)]
        )
    return _build_pdf("LISTADO DE PERSONAS", lines, pagesize=landscape(letter))


def personas_xlsx(personas: Iterable[dict]) -> bytes:
    wb = Workbook()
    ws = wb.active
    ws.title = "Personas"
    ws.append(list(PERSONAS_HEADERS))
    for cell in ws[1]:
        cell.font = Font(bold=True)
    for persona in personas:
        ws.append(_persona_row(persona))
    for column, width in zip("ABCDEFG", (34, 18, 16, 30, 18, 24, 10)):
        ws.column_dimensions[column].width = width
    return _workbook_bytes(wb)
