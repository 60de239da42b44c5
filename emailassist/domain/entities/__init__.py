from .donor import Donor, DonationEvent, find_donor
from .donation_email import DonationEmail, mask_soulmark
from .inbound_message import InboundMessage

__all__ = [
    "Donor",
    "DonationEvent",
    "find_donor",
    "DonationEmail",
    "mask_soulmark",
    "InboundMessage",
]
