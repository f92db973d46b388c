# Celery instance is defined in billing_project/celery.py
# Importing it here makes sure the app is loaded when Django starts,
# so @shared_task in ledger_core.tasks binds to it
from .celery import celery_app

__all__ = ("celery_app",)

""" Workers and beat are started with:
    celery -A billing_project worker -l info
    celery -A billing_project beat -l info """
