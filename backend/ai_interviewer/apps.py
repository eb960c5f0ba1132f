from django.apps import AppConfig


class AiInterviewerConfig(AppConfig):
    default_auto_field = 'django.db.models.BigAutoField'
    name = 'ai_interviewer'
    verbose_name = 'AI Interviewer'
