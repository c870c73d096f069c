from slotsync.schemas.booking import BookingCreate, CancelSlotsRequest
from slotsync.schemas.customer import CustomerCreate, CustomerUpdate
from slotsync.schemas.command import BootstrapResult, CommandResult, DataSource
from slotsync.schemas.event import ChangeEvent, ChangeType, ChannelStatus, EntityType
from slotsync.schemas.state import CustomerBookings, CustomerDetails, DayRoster, RosterEntry, StoreStatus

__all__ = [
    "BookingCreate", "CancelSlotsRequest",
    "CustomerCreate", "CustomerUpdate",
    "BootstrapResult", "CommandResult", "DataSource",
    "ChangeEvent", "ChangeType", "ChannelStatus", "EntityType",
    "CustomerBookings", "CustomerDetails", "DayRoster", "RosterEntry", "StoreStatus",
]
