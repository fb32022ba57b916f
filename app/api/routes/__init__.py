"""
API Routes Package
"""
from . import (
    health,
    auth,
    content,
    billing,
    media,
    catalog,
    partner,
    shopify,
)
