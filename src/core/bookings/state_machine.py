# src/core/bookings/state_machine.py
from src.common.constants import BookingStatus
from src.common.exceptions import InvalidStateTransitionError


class BookingStateMachine:
    ALLOWED_TRANSITIONS = {
        BookingStatus.REQUESTED: [BookingStatus.ACCEPTED, BookingStatus.REJECTED],
        BookingStatus.OFFERED: [BookingStatus.REJECTED],
        BookingStatus.ACCEPTED: [BookingStatus.BOARDED],
        BookingStatus.BOARDED: [BookingStatus.DROPPED],
        BookingStatus.DROPPED: [],
        BookingStatus.REJECTED: [],
    }

    @staticmethod
    def can_transition(current_status: str, new_status: str) -> bool:
        try:
            curr = BookingStatus(current_status)
            new = BookingStatus(new_status)
            return new in BookingStateMachine.ALLOWED_TRANSITIONS.get(curr, [])
        except ValueError:
            return False

    @staticmethod
    def ensure_transition(current_status: str, new_status: str) -> None:
        if not BookingStateMachine.can_transition(current_status, new_status):
            raise InvalidStateTransitionError(
                f"Переход {current_status} -> {new_status} запрещён",
                current_status=str(current_status),
                requested_status=str(new_status),
            )
