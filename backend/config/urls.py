"""
URL configuration for config project.
"""
from django.urls import path, include

urlpatterns = [
    # Interview pipeline APIs
    path('api/', include('ai_interviewer.urls')),
]
