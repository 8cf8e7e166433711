"""CRUD 操作模块"""
from .gig import create as create_gig
from .gig import get_or_404 as get_gig_or_404
from .gig import get_owned_or_403 as get_owned_gig_or_403
from .offer import get_by_gig_and_tier as get_offer_by_gig_and_tier
from .offer import list_by_gig as list_offers_by_gig
from .order import get_by_stripe_session_id as get_order_by_stripe_session_id
from .order import list_by_buyer as list_orders_by_buyer
from .order import list_by_gig as list_orders_by_gig
from .order import list_by_seller as list_orders_by_seller
from .user import (
    get_or_create_by_token_identifier as get_or_create_user_by_token_identifier,
)
from .user import get_stripe_account_id
from .user import update_stripe_setup as update_user_stripe_setup

__all__ = [
    "create_gig",
    "get_gig_or_404",
    "get_owned_gig_or_403",
    "get_offer_by_gig_and_tier",
    "list_offers_by_gig",
    "get_order_by_stripe_session_id",
    "list_orders_by_buyer",
    "list_orders_by_gig",
    "list_orders_by_seller",
    "get_or_create_user_by_token_identifier",
    "get_stripe_account_id",
    "update_user_stripe_setup",
]
