from django.urls import path

from . import views

urlpatterns = [
    path('questions/', views.generate_question_view, name='generate-question'),
    path('analyze/', views.analyze_answer_view, name='analyze-answer'),
    path('report/', views.report_view, name='interview-report'),
]
