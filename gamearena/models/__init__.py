# Models Package
from .user import Profile
from .game import Game
from .tournament import Tournament
from .participant import Participant
from .transaction import Transaction
from .wallet import Wallet
from .notification import Notification

__all__ = [
    "Profile",
    "Game",
    "Tournament",
    "Participant",
    "Transaction",
    "Wallet",
    "Notification"
]
