import json
import logging

from django.http import JsonResponse
from django.utils.decorators import method_decorator
from django.views import View
from django.views.decorators.csrf import csrf_exempt

from .exceptions import ChecklistValidationError, PersistenceError, VisitSessionMissing
from .forms import CertificationForm, SignatureForm
from .models import Client, Elevator, UserProfile
from .workflow import (
    discard_visit_session, forget_visit_session, get_visit_session, save_visit_session, start_visit_session,
)

logger = logging.getLogger(__name__)


class TokenAuthMixin:
    def dispatch(self, request, *args, **kwargs):
        # Token from the Authorization header or the query string
        token = request.GET.get('token') or request.headers.get('Authorization')

        if not token:
            return JsonResponse({'error': 'Token no proporcionado. Usa ?token=TU_TOKEN o el header Authorization: Bearer TU_TOKEN'}, status=401)

        if token.startswith('Bearer '):
            token = token.split(' ')[1]

        try:
            self.user_profile = UserProfile.objects.select_related('user').get(token=token)
        except UserProfile.DoesNotExist:
            return JsonResponse({'error': 'Token inválido o expirado.'}, status=401)

        if self.user_profile.role not in ('technician', 'admin'):
            return JsonResponse({'error': 'Solo los técnicos pueden registrar mantenciones.'}, status=403)

        return super().dispatch(request, *args, **kwargs)


@method_decorator(csrf_exempt, name='dispatch')
class VisitAPIView(TokenAuthMixin, View):
    """
    Base for the visit endpoints. Loads the technician's visit session,
    maps engine errors to HTTP statuses and stores the session back after
    the handler ran.
    """

    def dispatch(self, request, *args, **kwargs):
        self.visit = None
        try:
            return super().dispatch(request, *args, **kwargs)
        except ChecklistValidationError as exc:
            return JsonResponse({'error': exc.message, 'blocking': exc.blocking}, status=400)
        except PersistenceError as exc:
            logger.warning("Visit request %s failed: %s", request.path, exc)
            return JsonResponse({'error': str(exc), 'retry': True}, status=503)
        except VisitSessionMissing as exc:
            return JsonResponse({'error': str(exc)}, status=409)
        finally:
            if self.visit is not None:
                save_visit_session(self.visit)

    @property
    def user(self):
        return self.user_profile.user

    def load_visit(self):
        self.visit = get_visit_session(self.user)
        if self.visit is None:
            raise VisitSessionMissing("No hay una visita abierta. Selecciona un cliente primero.")
        return self.visit

    def payload(self, request):
        if request.content_type == 'application/json':
            try:
                return json.loads(request.body or b'{}')
            except ValueError:
                raise ChecklistValidationError("JSON inválido.")
        return request.POST


class VisitSessionAPIView(VisitAPIView):
    def get(self, request):
        visit = self.load_visit()
        data = {
            'client_id': visit.client.pk,
            'checklists': [{'id': pk, 'status': status} for pk, status in visit.progress.items()],
            'active_checklist': visit.editor.checklist.pk if visit.editor else None,
        }
        if visit.editor is not None:
            data['progress'] = visit.progress_summary()
        return JsonResponse(data)

    def post(self, request):
        data = self.payload(request)
        try:
            client = Client.objects.get(pk=data.get('client_id'))
        except (Client.DoesNotExist, ValueError, TypeError):
            return JsonResponse({'error': 'Cliente no encontrado.'}, status=404)
        self.visit = start_visit_session(self.user, client)
        return JsonResponse({
            'client_id': client.pk,
            'checklists': [{'id': pk, 'status': status} for pk, status in self.visit.progress.items()],
        }, status=201)

    def delete(self, request):
        result = discard_visit_session(self.user)
        return JsonResponse({'closed': True, 'flush': result.as_dict() if result else None})


class ChecklistStartAPIView(VisitAPIView):
    def post(self, request):
        visit = self.load_visit()
        data = self.payload(request)
        try:
            elevator = Elevator.objects.get(pk=data.get('elevator_id'))
            month, year = int(data.get('month')), int(data.get('year'))
        except (Elevator.DoesNotExist, ValueError, TypeError):
            return JsonResponse({'error': 'Ascensor o periodo inválido.'}, status=404)

        checklist = visit.start_or_resume_checklist(elevator, month, year)
        editor = visit.editor
        answers = {a.question_id: a for a in editor.store.snapshot()}
        questions = []
        for question in editor.questions:
            answer = answers.get(question.pk)
            questions.append({
                'id': question.pk,
                'number': question.number,
                'section': question.section,
                'text': question.text,
                'frequency': question.frequency,
                'status': answer.status if answer else 'pending',
                'observations': answer.observations if answer else '',
                'photo_1_url': answer.photo_1_url if answer else None,
                'photo_2_url': answer.photo_2_url if answer else None,
            })
        return JsonResponse({
            'checklist_id': checklist.pk,
            'status': checklist.status,
            'period': checklist.period_label,
            'certification_status': checklist.certification_status,
            'questions': questions,
            'progress': visit.progress_summary(),
        })


class CertificationAPIView(VisitAPIView):
    def post(self, request, checklist_id):
        visit = self.load_visit()
        form = CertificationForm(self.payload(request))
        if not form.is_valid():
            return JsonResponse({'error': 'Datos de certificación inválidos.', 'fields': form.errors}, status=400)
        status = visit.record_certification(
            last_date=form.cleaned_data.get('last_certification_date'),
            next_month=form.cleaned_data.get('next_month'),
            next_year=form.cleaned_data.get('next_year'),
            unreadable=form.cleaned_data.get('certification_dates_unreadable'),
            checklist_id=checklist_id,
        )
        return JsonResponse({'checklist_id': checklist_id, 'certification_status': status})


class AnswerAPIView(VisitAPIView):
    def post(self, request, checklist_id):
        visit = self.load_visit()
        data = self.payload(request)
        try:
            question_id = int(data.get('question_id'))
        except (ValueError, TypeError):
            raise ChecklistValidationError("Pregunta inválida.", blocking=['question_id'])
        photos = data.get('photos')
        if photos is not None and not isinstance(photos, (list, tuple)):
            photos = [photos]
        result = visit.mutate_answer(
            question_id,
            status=data.get('status'),
            observations=data.get('observations'),
            photos=photos,
            checklist_id=checklist_id,
        )
        return JsonResponse(result.as_dict())


class PhotoUploadAPIView(VisitAPIView):
    def post(self, request, checklist_id):
        visit = self.load_visit()
        upload = request.FILES.get('photo')
        if upload is None:
            raise ChecklistValidationError("Debes adjuntar una foto.", blocking=['photo'])
        try:
            question_id = int(request.POST.get('question_id'))
            slot = int(request.POST.get('slot', 1))
        except (ValueError, TypeError):
            raise ChecklistValidationError("Pregunta o posición de foto inválida.", blocking=['question_id'])
        result = visit.upload_photo(question_id, slot, upload, checklist_id=checklist_id)
        return JsonResponse(result.as_dict(), status=201)


class SaveAPIView(VisitAPIView):
    def post(self, request, checklist_id):
        visit = self.load_visit()
        result = visit.save(checklist_id=checklist_id)
        status = 200 if result.ok else 503
        return JsonResponse(dict(result.as_dict(), progress=visit.progress_summary()), status=status)


class CompleteAPIView(VisitAPIView):
    def post(self, request, checklist_id):
        visit = self.load_visit()
        report = visit.request_completion(checklist_id=checklist_id)
        if not report.may_complete:
            return JsonResponse(report.as_dict(), status=400)
        return JsonResponse(dict(report.as_dict(), checklist_id=checklist_id, status='completed'))


class SignAPIView(VisitAPIView):
    def post(self, request):
        visit = self.load_visit()
        form = SignatureForm(self.payload(request), request.FILES)
        if not form.is_valid():
            return JsonResponse({'error': 'Firma inválida.', 'fields': form.errors}, status=400)
        outcome = visit.sign(form.cleaned_data['signer_name'], form.cleaned_data['signature_image'])
        self.visit = None
        forget_visit_session(self.user)
        return JsonResponse(outcome.as_dict())
