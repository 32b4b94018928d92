import shutil
import tempfile

from django.contrib.auth.models import User
from django.core.cache import cache
from django.test import TestCase, override_settings

from maintenance.models import ChecklistQuestion, Client, Elevator, UserProfile

# 1x1 RGB PNG
PNG_DATA_URL = (
    'data:image/png;base64,'
    'iVBORw0KGgoAAAANSUhEUgAAAAEAAAABCAIAAACQd1PeAAAADElEQVR4nGOQlZUGAACwAFYALYUZAAAAAElFTkSuQmCC'
)


class MaintenanceTestCase(TestCase):
    """TestCase with a throwaway MEDIA_ROOT and an empty cache per test."""

    @classmethod
    def setUpClass(cls):
        cls._media_root = tempfile.mkdtemp()
        cls._media_override = override_settings(MEDIA_ROOT=cls._media_root)
        cls._media_override.enable()
        super().setUpClass()

    @classmethod
    def tearDownClass(cls):
        super().tearDownClass()
        cls._media_override.disable()
        shutil.rmtree(cls._media_root, ignore_errors=True)

    def setUp(self):
        cache.clear()
        self.addCleanup(cache.clear)

    def create_technician(self, username='tecnico', role='technician'):
        user = User.objects.create_user(username=username, password='password', first_name='Juan', last_name='Pérez')
        UserProfile.objects.create(user=user, role=role)
        return user

    def create_building(self, elevator_type='electromechanical', company_name='Inmobiliaria Andes'):
        client = Client.objects.create(company_name=company_name, building_name='Edificio Central', address='Av. Providencia 123')
        elevator = Elevator.objects.create(client=client, elevator_number=1, location_name='Torre A', elevator_type=elevator_type)
        return client, elevator

    def create_catalog(self):
        """
        Three monthly questions, one quarterly, one semestral and one
        monthly hydraulic-only question.
        """
        return [
            ChecklistQuestion.objects.create(number=1, section='Sala de Máquinas', text='Estado del motor', frequency='M'),
            ChecklistQuestion.objects.create(number=2, section='Cabina', text='Iluminación de cabina', frequency='M'),
            ChecklistQuestion.objects.create(number=3, section='Cabina', text='Botonera', frequency='M'),
            ChecklistQuestion.objects.create(number=4, section='Pozo', text='Limpieza del foso', frequency='T'),
            ChecklistQuestion.objects.create(number=5, section='Pozo', text='Amortiguadores', frequency='S'),
            ChecklistQuestion.objects.create(number=6, section='Central Hidráulica', text='Nivel de aceite', frequency='M', is_hydraulic_only=True),
        ]
