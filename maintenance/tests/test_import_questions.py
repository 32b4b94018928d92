import os
import shutil
import tempfile
from io import StringIO

from django.core.management import call_command
from django.core.management.base import CommandError
from django.test import SimpleTestCase

from maintenance.catalog import load_catalog
from maintenance.models import ChecklistQuestion
from maintenance.text import normalize_text

from .utils import MaintenanceTestCase

CSV_CONTENT = """Número,Sección,Pregunta,Frecuencia,Solo Hidráulico
1,Sala de Máquinas,Estado del motor,M,
2,Cabina,Iluminación de cabina,Mensual,No
3,Pozo,Limpieza del foso,Trimestral,
4,Central Hidráulica,Nivel de aceite,S,Sí
,Sin número,Fila sin número,M,
5,Pozo,Frecuencia inválida,Anual,
"""


class ImportChecklistQuestionsTests(MaintenanceTestCase):
    def setUp(self):
        super().setUp()
        self.tmpdir = tempfile.mkdtemp()
        self.addCleanup(shutil.rmtree, self.tmpdir, ignore_errors=True)
        self.path = os.path.join(self.tmpdir, 'preguntas.csv')
        with open(self.path, 'w', encoding='utf-8') as f:
            f.write(CSV_CONTENT)

    def run_import(self):
        out = StringIO()
        call_command('import_checklist_questions', self.path, stdout=out)
        return out.getvalue()

    def test_imports_catalog(self):
        output = self.run_import()

        self.assertIn('4 created, 0 updated, 2 skipped', output)
        self.assertEqual(list(ChecklistQuestion.objects.values_list('number', flat=True)), [1, 2, 3, 4])
        self.assertEqual(ChecklistQuestion.objects.get(number=2).frequency, 'M')
        self.assertEqual(ChecklistQuestion.objects.get(number=3).frequency, 'T')
        hydraulic = ChecklistQuestion.objects.get(number=4)
        self.assertEqual(hydraulic.frequency, 'S')
        self.assertTrue(hydraulic.is_hydraulic_only)
        self.assertFalse(ChecklistQuestion.objects.get(number=2).is_hydraulic_only)

    def test_reimport_updates_by_number(self):
        self.run_import()
        load_catalog()
        ChecklistQuestion.objects.filter(number=1).update(text='Texto viejo')

        output = self.run_import()

        self.assertIn('0 created, 4 updated', output)
        self.assertEqual(ChecklistQuestion.objects.get(number=1).text, 'Estado del motor')
        self.assertEqual(load_catalog()[0].text, 'Estado del motor')

    def test_missing_file(self):
        with self.assertRaises(CommandError):
            call_command('import_checklist_questions', os.path.join(self.tmpdir, 'nada.xlsx'), stdout=StringIO())


class NormalizeTextTests(SimpleTestCase):
    def test_headers_lose_case_accents_and_padding(self):
        self.assertEqual(normalize_text(' Solo Hidráulico '), 'solo hidraulico')
        self.assertEqual(normalize_text('NÚMERO'), 'numero')
        self.assertEqual(normalize_text(None), '')
