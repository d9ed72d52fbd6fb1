import unittest

from sqlalchemy.exc import IntegrityError

from gestion.db import SqlDbClient
from gestion.records import (
    ActividadRecord,
    CategoriaRecord,
    PersonaRecord,
    TransaccionRecord,
    UserRecord,
    new_id,
)


class SqlDbClientTests(unittest.TestCase):
    """
    Uses SQLite via SQLAlchemy URL for fast/local testing of the Postgres client logic.
    """

    def setUp(self):
        self.db = SqlDbClient("sqlite+pysqlite:///:memory:")
        self.categoria = self.db.insert_categoria(
            CategoriaRecord(id=new_id(), nombre="Diezmos", tipo="ingreso")
        )

    def _persona(self, numero_id, nombres="Ana", primer_apellido="López", **extra):
        return self.db.insert_persona(
            PersonaRecord(
                id=new_id(),
                nombres=nombres,
                primer_apellido=primer_apellido,
                numero_id=numero_id,
                **extra,
            )
        )

    def _transaccion(self, numero, tipo="ingreso", created_at=0.0, **extra):
        return self.db.insert_transaccion(
            TransaccionRecord(
                id=new_id(),
                numero_transaccion=numero,
                fecha="2024-01-01",
                monto=100.0,
                tipo=tipo,
                categoria_id=self.categoria.id,
                created_at=created_at,
                updated_at=created_at,
                **extra,
            )
        )

    def test_persona_roundtrip_and_update(self):
        sede = self.db.create_sede("Central")
        persona = self._persona("1234567", sede_id=sede.id, bautizado=True)
        fetched = self.db.get_persona(persona.id)
        self.assertEqual(fetched.numero_id, "1234567")
        self.assertTrue(fetched.bautizado)
        self.assertEqual(fetched.sede_id, sede.id)

        updated = self.db.update_persona(persona.id, {"nombres": "Ana María"})
        self.assertEqual(updated.nombres, "Ana María")
        self.assertGreaterEqual(updated.updated_at, persona.updated_at)
        self.assertIsNone(self.db.update_persona(new_id(), {"nombres": "X"}))

    def test_numero_id_is_unique(self):
        self._persona("1234567")
        with self.assertRaises(IntegrityError):
            self._persona("1234567")

    def test_find_and_search_personas(self):
        first = self._persona("1234567")
        self._persona("7654321", nombres="Beatriz", primer_apellido="Suárez")
        self.assertEqual(self.db.find_persona_by_numero_id("1234567").id, first.id)
        self.assertIsNone(self.db.find_persona_by_numero_id("1234567", exclude_id=first.id))

        self.assertEqual(
            [p.numero_id for p in self.db.search_personas("beatriz")], ["7654321"]
        )
        self.assertEqual(len(self.db.search_personas("4", limit=1)), 1)

    def test_persona_escalas(self):
        persona = self._persona("1234567")
        consolidacion = self.db.create_escala("Consolidación")
        discipulado = self.db.create_escala("Discipulado")
        self.db.link_persona_escalas(persona.id, [discipulado.id, consolidacion.id])
        self.assertEqual(
            [e.nombre_escala for e in self.db.list_persona_escalas(persona.id)],
            ["Discipulado", "Consolidación"],
        )
        with self.assertRaises(KeyError):
            self.db.link_persona_escalas(persona.id, ["missing"])

        self.assertEqual(self.db.unlink_persona_escalas(persona.id), 2)
        self.assertEqual(self.db.list_persona_escalas(persona.id), [])
        self.assertTrue(self.db.delete_persona(persona.id))
        self.assertFalse(self.db.delete_persona(persona.id))

    def test_categorias_filter_by_tipo(self):
        self.db.insert_categoria(
            CategoriaRecord(id=new_id(), nombre="arriendo", tipo="egreso")
        )
        self.assertEqual(
            [c.nombre for c in self.db.list_categorias()], ["arriendo", "Diezmos"]
        )
        self.assertEqual(
            [c.nombre for c in self.db.list_categorias(tipo="ingreso")], ["Diezmos"]
        )

    def test_actividad_nombre_scoped_to_owner(self):
        actividad = self.db.insert_actividad(
            ActividadRecord(
                id=new_id(),
                nombre="Bazar",
                fecha_inicio="2024-01-01",
                meta=100.0,
                user_id="u1",
            )
        )
        self.assertEqual(self.db.find_actividad_by_nombre("Bazar", "u1").id, actividad.id)
        self.assertIsNone(self.db.find_actividad_by_nombre("Bazar", "u2"))
        self.assertIsNone(
            self.db.find_actividad_by_nombre("Bazar", "u1", exclude_id=actividad.id)
        )

    def test_transacciones_order_count_and_last_numero(self):
        actividad = self.db.insert_actividad(
            ActividadRecord(id=new_id(), nombre="Bazar", fecha_inicio="2024-01-01", meta=1.0)
        )
        self._transaccion("ING001", created_at=1.0)
        self._transaccion("EGR001", tipo="egreso", created_at=2.0)
        self._transaccion("ING002", created_at=3.0, actividad_id=actividad.id)

        self.assertEqual(
            [t.numero_transaccion for t in self.db.list_transacciones()],
            ["ING002", "EGR001", "ING001"],
        )
        self.assertEqual(
            [t.numero_transaccion for t in self.db.list_transacciones(actividad.id)],
            ["ING002"],
        )
        self.assertEqual(self.db.last_numero_transaccion("ingreso"), "ING002")
        self.assertEqual(self.db.last_numero_transaccion("egreso"), "EGR001")
        self.assertEqual(self.db.count_transacciones(categoria_id=self.categoria.id), 3)
        self.assertEqual(self.db.count_transacciones(actividad_id=actividad.id), 1)

    def test_last_numero_transaccion_empty(self):
        self.assertIsNone(self.db.last_numero_transaccion("egreso"))

    def test_update_transaccion_estado(self):
        transaccion = self._transaccion("ING001")
        updated = self.db.update_transaccion(transaccion.id, {"estado": "anulada"})
        self.assertEqual(updated.estado, "anulada")
        self.assertEqual(self.db.get_transaccion(transaccion.id).estado, "anulada")

    def test_users(self):
        user = self.db.insert_user(
            UserRecord(id=new_id(), email="Admin@Example.com", role="admin")
        )
        self.assertEqual(self.db.get_user_by_email("admin@example.com").id, user.id)
        updated = self.db.update_user(user.id, {"full_name": "Admin", "sede_id": None})
        self.assertEqual(updated.full_name, "Admin")
        self.assertTrue(updated.is_admin)


if __name__ == "__main__":
    unittest.main()
