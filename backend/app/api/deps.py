"""
Dependencies for services created in the application lifespan.
"""
from fastapi import Request

from app.services.entitlements import EntitlementService
from app.services.reminders import ReminderScheduler
from app.services.sample_data import DemoDataService


def get_demo_data(request: Request) -> DemoDataService:
    return request.app.state.demo_data


def get_reminders(request: Request) -> ReminderScheduler:
    return request.app.state.reminders


def get_entitlements(request: Request) -> EntitlementService:
    return request.app.state.entitlements
