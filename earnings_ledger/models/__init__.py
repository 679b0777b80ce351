from .event import Event
from .ticket import Ticket
from .organizer_payout import OrganizerPayout
from .event_earnings import EventEarnings

__all__ = ["Event", "Ticket", "OrganizerPayout", "EventEarnings"]
