from .contact_exchange import ContactExchangeDialog
from .donations import DonationsList
from .navigation import NavigationBar

__all__ = [
    'ContactExchangeDialog',
    'DonationsList',
    'NavigationBar'
]
