from django.urls import path

from . import api
from .views import ChecklistPDFView

urlpatterns = [
    path('checklists/<int:pk>/pdf/', ChecklistPDFView.as_view(), name='checklist_pdf'),

    # Visit API (token auth)
    path('api/visits/', api.VisitSessionAPIView.as_view(), name='api_visit'),
    path('api/visits/checklists/', api.ChecklistStartAPIView.as_view(), name='api_checklist_start'),
    path('api/visits/checklists/<int:checklist_id>/certification/', api.CertificationAPIView.as_view(), name='api_checklist_certification'),
    path('api/visits/checklists/<int:checklist_id>/answers/', api.AnswerAPIView.as_view(), name='api_checklist_answer'),
    path('api/visits/checklists/<int:checklist_id>/photos/', api.PhotoUploadAPIView.as_view(), name='api_checklist_photo'),
    path('api/visits/checklists/<int:checklist_id>/save/', api.SaveAPIView.as_view(), name='api_checklist_save'),
    path('api/visits/checklists/<int:checklist_id>/complete/', api.CompleteAPIView.as_view(), name='api_checklist_complete'),
    path('api/visits/sign/', api.SignAPIView.as_view(), name='api_visit_sign'),
]
