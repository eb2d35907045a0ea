"""
FastAPI dependencies resolving the components built at startup.
"""
from fastapi import Request

from booking_notifier.core.message_service import MessageService


def get_message_service(request: Request) -> MessageService:
    return request.app.state.message_service
