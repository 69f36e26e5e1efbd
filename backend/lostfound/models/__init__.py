from .user import User
from .item import Item
from .claim import Claim
from .notification import Notification
from .message import Message
from .appointment import Appointment
from .otp_code import OtpCode
from .activity import Activity

__all__ = [
    "User",
    "Item",
    "Claim",
    "Notification",
    "Message",
    "Appointment",
    "OtpCode",
    "Activity",
]
