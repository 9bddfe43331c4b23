from .auth_routes import router as auth_routes
from .contact_exchange_routes import router as contact_exchange_routes
from .donation_routes import router as donation_routes
from .navigation_routes import router as navigation_routes
from .notification_routes import router as notification_routes

__all__ = [
    'auth_routes',
    'contact_exchange_routes',
    'donation_routes',
    'navigation_routes',
    'notification_routes'
]
