"""Modules of the Chocolate Corner shop.

The purchase logic lives in :mod:`shop`, built on :mod:`catalog`,
:mod:`pricing`, :mod:`inventory`, :mod:`order_log` and a mock payment
gateway in :mod:`payment_service`.  :mod:`cli` is the interactive front end.
"""
