import unittest
from io import BytesIO

from openpyxl import load_workbook

from gestion import exports

TRANSACCION = {
    "id": "abc",
    "numero_transaccion": "EGR004",
    "fecha": "2024-05-02",
    "monto": 80000.0,
    "tipo": "egreso",
    "categoria_nombre": "Servicios",
    "actividad_nombre": None,
    "persona_nombre": "Ana López",
    "estado": "anulada",
    "descripcion": "Pago de energía " * 20,
}


class ExportTests(unittest.TestCase):
    def test_receipt_filename_falls_back_to_id(self):
        self.assertEqual(exports.receipt_filename(TRANSACCION, "pdf"), "transaccion_EGR004.pdf")
        self.assertEqual(
            exports.receipt_filename({"id": "abc"}, "xlsx"), "transaccion_abc.xlsx"
        )

    def test_transaccion_pdf(self):
        content = exports.transaccion_pdf(TRANSACCION)
        self.assertTrue(content.startswith(b"%PDF"))

    def test_transaccion_xlsx(self):
        sheet = load_workbook(BytesIO(exports.transaccion_xlsx(TRANSACCION))).active
        self.assertEqual(sheet.title, "Transacción")
        values = {row[0]: row[1] for row in sheet.iter_rows(min_row=2, values_only=True)}
        self.assertEqual(values["Tipo"], "Egreso")
        self.assertEqual(values["Estado"], "Anulada")
        self.assertEqual(values["Actividad"], "N/A")
        self.assertEqual(values["Fecha"], "02/05/2024")

    def test_long_listing_pdf_paginates(self):
        transacciones = [dict(TRANSACCION, numero_transaccion=f"EGR{i:03d}") for i in range(120)]
        totals = {"ingresos": 0.0, "egresos": 120 * 80000.0, "neto": -120 * 80000.0}
        content = exports.transacciones_pdf(transacciones, totals)
        self.assertTrue(content.startswith(b"%PDF"))
        pages = content.count(b"/Type /Page") - content.count(b"/Type /Pages")
        self.assertGreater(pages, 1)

    def test_personas_xlsx(self):
        personas = [
            {
                "nombres": "Ana",
                "primer_apellido": "López",
                "segundo_apellido": None,
                "tipo_id": "CC",
                "numero_id": "123456",
                "telefono": "300",
                "email": "ana@example.com",
                "sede": None,
                "escalas": [],
                "bautizado": False,
            }
        ]
        rows = list(load_workbook(BytesIO(exports.personas_xlsx(personas))).active.iter_rows(values_only=True))
        self.assertEqual(rows[0][0], "Nombre")
        self.assertEqual(
            rows[1], ("Ana López", "CC 123456", "300", "ana@example.com", "Sin Sede", "Sin Escala", "No")
        )
        self.assertTrue(exports.personas_pdf(personas).startswith(b"%PDF"))


if __name__ == "__main__":
    unittest.main()
