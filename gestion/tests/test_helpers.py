import unittest
from datetime import date

from gestion.filters import filter_personas, filter_transacciones, paginate, resumen
from gestion.numbering import next_numero_transaccion, prefix_for
from gestion.records import PersonaRecord, TransaccionRecord, new_id
from gestion.utils import (
    calcular_edad,
    clean,
    format_cop,
    full_name,
    is_uuid,
    is_valid_email,
    parse_amount,
    parse_bool,
    parse_date,
    to_title_case_es,
    validate_id_number,
)


class TextHelperTests(unittest.TestCase):
    def test_title_case_keeps_connectors_lowercase(self):
        self.assertEqual(to_title_case_es("JUAN  DE LA  torre"), "Juan de la Torre")
        self.assertEqual(to_title_case_es("del valle"), "Del Valle")
        self.assertIsNone(to_title_case_es(None))

    def test_full_name_skips_blanks(self):
        self.assertEqual(full_name("Ana", None, " Díaz "), "Ana Díaz")

    def test_calcular_edad(self):
        today = date(2024, 6, 15)
        self.assertEqual(calcular_edad("2000-06-15", today=today), 24)
        self.assertEqual(calcular_edad("2000-06-16", today=today), 23)
        self.assertIsNone(calcular_edad("", today=today))
        self.assertIsNone(calcular_edad("no-date", today=today))

    def test_parse_date_accepts_timestamps(self):
        self.assertEqual(parse_date("2024-03-01T10:00:00Z"), date(2024, 3, 1))

    def test_validators(self):
        self.assertTrue(is_valid_email("a@b.co"))
        self.assertFalse(is_valid_email("a@b"))
        self.assertTrue(is_uuid(new_id()))
        self.assertFalse(is_uuid("123"))
        self.assertTrue(validate_id_number("1.020.304", "CC"))
        self.assertFalse(validate_id_number("12345", "CC"))
        self.assertTrue(validate_id_number("12345678", "TI"))
        self.assertTrue(validate_id_number("AB12345", "RC"))
        self.assertFalse(validate_id_number("1234567", "PASAPORTE"))

    def test_form_value_helpers(self):
        self.assertEqual(parse_amount(" 1500.5 "), 1500.5)
        self.assertEqual(parse_amount("x"), 0.0)
        self.assertEqual(parse_amount("nan"), 0.0)
        self.assertEqual(parse_amount("-inf"), 0.0)
        self.assertTrue(parse_bool("Sí"))
        self.assertFalse(parse_bool(None))
        self.assertIsNone(clean("   "))
        self.assertEqual(format_cop(1234567.4), "$ 1.234.567")
        self.assertEqual(format_cop(-5000), "-$ 5.000")


class NumberingTests(unittest.TestCase):
    def test_first_number(self):
        self.assertEqual(next_numero_transaccion("ingreso", None), "ING001")
        self.assertEqual(next_numero_transaccion("egreso", ""), "EGR001")

    def test_increments_last_number(self):
        self.assertEqual(next_numero_transaccion("ingreso", "ING009"), "ING010")
        self.assertEqual(next_numero_transaccion("egreso", "EGR999"), "EGR1000")

    def test_unparsable_last_restarts(self):
        with self.assertLogs("gestion.numbering", level="WARNING"):
            self.assertEqual(next_numero_transaccion("ingreso", "INGabc"), "ING001")

    def test_unknown_tipo(self):
        with self.assertRaises(ValueError):
            prefix_for("donacion")


def _transaccion(fecha, monto, tipo="ingreso", **extra):
    return TransaccionRecord(
        id=new_id(),
        numero_transaccion="ING001",
        fecha=fecha,
        monto=monto,
        tipo=tipo,
        categoria_id="c",
        **extra,
    )


class FilterTests(unittest.TestCase):
    def test_filter_personas(self):
        personas = [
            PersonaRecord(id="1", nombres="Ana", primer_apellido="Ruiz", numero_id="111", sede_id="s1"),
            PersonaRecord(id="2", nombres="Luis", primer_apellido="Mora", numero_id="222", sede_id="s2"),
        ]
        self.assertEqual([p.id for p in filter_personas(personas, "RUI")], ["1"])
        self.assertEqual([p.id for p in filter_personas(personas, "22")], ["2"])
        self.assertEqual([p.id for p in filter_personas(personas, "", "s2")], ["2"])
        self.assertEqual(filter_personas(personas, "ana", "s2"), [])

    def test_filter_transacciones_date_range_is_inclusive(self):
        items = [
            _transaccion("2024-01-31", 1),
            _transaccion("2024-02-01", 2),
            _transaccion("2024-02-29", 3),
            _transaccion("2024-03-01", 4),
        ]
        result = filter_transacciones(items, "2024-02-01", "2024-02-29")
        self.assertEqual([t.monto for t in result], [2, 3])
        self.assertEqual(len(filter_transacciones(items, fecha_fin="2024-01-31")), 1)

    def test_paginate_clamps_page(self):
        page = paginate(list(range(31)), page=9, per_page=15)
        self.assertEqual(page.page, 3)
        self.assertEqual(page.pages, 3)
        self.assertEqual(page.items, [30])
        self.assertEqual((page.start, page.end), (31, 31))

        empty = paginate([], page=1)
        self.assertEqual((empty.pages, empty.start, empty.end), (1, 0, 0))

    def test_resumen_skips_annulled(self):
        items = [
            _transaccion("2024-01-01", 100),
            _transaccion("2024-01-02", 30, tipo="egreso"),
            _transaccion("2024-01-03", 50, estado="anulada"),
        ]
        self.assertEqual(resumen(items), {"ingresos": 100, "egresos": 30, "neto": 70})


if __name__ == "__main__":
    unittest.main()
