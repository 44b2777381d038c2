"""
Recurring billing cart totalization.

Calculates the initial payment of a cart that contains subscriptions and
one recurring cart per billing schedule.
"""

__version__ = "1.0.0"
