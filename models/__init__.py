from .person_record import PersonRecord
from .external_profile import ExternalAddress, ExternalProfile
from .outbound_payload import OutboundPayload

__all__ = [
    "PersonRecord",
    "ExternalAddress",
    "ExternalProfile",
    "OutboundPayload",
]
