"""Reservation creation entry point."""

from .create_reservation_handler import HandlerResponse, handle_create_reservation

__all__ = ["HandlerResponse", "handle_create_reservation"]
