from django.urls import path

from . import views

app_name = 'orders'

urlpatterns = [
    path('<int:pk>/confirm-release/', views.confirm_release, name='confirm-release'),
]
