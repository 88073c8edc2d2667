"""Bakery storefront core: tiered pricing, cart line items and kit builder."""
