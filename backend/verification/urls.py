from django.urls import path

from . import views

app_name = 'verification'

urlpatterns = [
    path('biodata/', views.submit_biodata, name='submit-biodata'),
    path('guarantor/', views.submit_guarantor, name='submit-guarantor'),
    path('commitment/', views.submit_commitment, name='submit-commitment'),
    path('form-status/', views.form_status, name='form-status'),
    path('status/', views.verification_status, name='verification-status'),
    path('submissions/', views.submission_list, name='submission-list'),
    path('submissions/<int:pk>/history/', views.submission_history, name='submission-history'),
    path('submissions/<int:pk>/upload-admin-verification/', views.upload_admin_verification, name='upload-admin-verification'),
    path('submissions/<int:pk>/admin-review/', views.admin_review, name='admin-review'),
    path('submissions/<int:pk>/verify-and-send/', views.verify_and_send, name='verify-and-send'),
    path('submissions/<int:pk>/superadmin-verify/', views.superadmin_verify, name='superadmin-verify'),
    path('submissions/<int:pk>/masteradmin-decision/', views.masteradmin_decision, name='masteradmin-decision'),
    path('submissions/<int:pk>/cancel/', views.cancel_submission, name='cancel-submission'),
    path('allow-refill/', views.allow_refill, name='allow-refill'),
]
