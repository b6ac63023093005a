"""Application settings for the storefront, read from the environment.

Infrastructure (databases, brokers) is configured through ``domain.toml``;
the values here only shape business behaviour.
"""

import os

# Prefix of generated order numbers, e.g. ORD-20250101-120000-1A2B3C
ORDER_NUMBER_PREFIX = os.getenv("ORDER_NUMBER_PREFIX", "ORD")

# ISO 4217 code used when charging and refunding through the payment gateway
CURRENCY = os.getenv("CURRENCY", "USD")

# Decimal places kept on every monetary amount
MONEY_PRECISION = int(os.getenv("MONEY_PRECISION", "2"))
