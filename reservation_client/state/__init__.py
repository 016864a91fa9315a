from .business_reservation_state import BusinessReservationState
from .reservation_state import Prompter, ReservationState, always_confirm
from .transitions import InvalidTransition, apply_transition, can_transition

__all__ = [
    "BusinessReservationState",
    "Prompter",
    "ReservationState",
    "always_confirm",
    "InvalidTransition",
    "apply_transition",
    "can_transition",
]
