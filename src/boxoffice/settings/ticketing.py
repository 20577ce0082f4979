"""Order lifecycle, pricing and rewards configuration."""

from decouple import config

DEFAULT_CURRENCY = config("DEFAULT_CURRENCY", default="IDR")

# Time a buyer has to upload the payment proof before the transaction expires.
TRANSACTION_PAYMENT_WINDOW_MINUTES = config("TRANSACTION_PAYMENT_WINDOW_MINUTES", cast=int, default=120)
# Days an organizer has to decide on a submitted proof before it is rejected automatically. 0 disables.
TRANSACTION_CONFIRMATION_WINDOW_DAYS = config("TRANSACTION_CONFIRMATION_WINDOW_DAYS", cast=int, default=3)
TRANSACTION_SWEEP_INTERVAL_SECONDS = config("TRANSACTION_SWEEP_INTERVAL_SECONDS", cast=int, default=60)
MAX_TICKETS_PER_TRANSACTION = config("MAX_TICKETS_PER_TRANSACTION", cast=int, default=10)

POINTS_VALIDITY_DAYS = config("POINTS_VALIDITY_DAYS", cast=int, default=90)
COUPON_EXPIRING_SOON_DAYS = config("COUPON_EXPIRING_SOON_DAYS", cast=int, default=7)

# Entropy of the check-in credential printed on the ticket.
QR_TOKEN_BYTES = config("QR_TOKEN_BYTES", cast=int, default=32)
