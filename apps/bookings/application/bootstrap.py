"""Wires booking command handlers onto a message bus."""

from shared.application.message_bus import MessageBus

from .command_handlers import (
    AcceptBookingCommand,
    AcceptBookingHandler,
    CancelBookingCommand,
    CancelBookingHandler,
    CompleteBookingCommand,
    CompleteBookingHandler,
    CreateBookingCommand,
    CreateBookingHandler,
    RejectBookingCommand,
    RejectBookingHandler,
    RescheduleBookingCommand,
    RescheduleBookingHandler,
)

HANDLERS = {
    CreateBookingCommand: CreateBookingHandler,
    AcceptBookingCommand: AcceptBookingHandler,
    RejectBookingCommand: RejectBookingHandler,
    RescheduleBookingCommand: RescheduleBookingHandler,
    CancelBookingCommand: CancelBookingHandler,
    CompleteBookingCommand: CompleteBookingHandler,
}


def register_booking_handlers(bus: MessageBus, replace: bool = False, **handler_kwargs) -> None:
    """
    Register one handler instance per booking command

    ``handler_kwargs`` (config, clock, repositories) are passed to every
    handler, which lets tests pin a configuration snapshot or a clock.
    """
    for command_type, handler_class in HANDLERS.items():
        bus.register_command_handler(command_type, handler_class(**handler_kwargs), replace=replace)
