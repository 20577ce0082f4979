from uuid import UUID

from ninja_extra import api_controller, route

from common.authentication import BaseJWTAuth
from common.controllers import UserAwareController
from common.schema import ErrorResponse
from common.throttling import WriteThrottle
from events import schema
from events.models import Ticket, Transaction
from events.service.transaction_service import TransactionLifecycle

TRANSITION_ERRORS = {403: ErrorResponse, 404: ErrorResponse, 409: ErrorResponse}


@api_controller("/transactions", auth=BaseJWTAuth(), tags=["Transactions"])
class TransactionController(UserAwareController):
    """Polling and state transitions of a single transaction.

    The buyer submits the proof or cancels; the event's organizer confirms or
    rejects. A transition attempted from the wrong state answers 409 with
    ``INVALID_STATE`` and the caller should re-fetch.
    """

    def lifecycle(self) -> TransactionLifecycle:
        return TransactionLifecycle()

    @route.get(
        "/{transaction_id}",
        url_name="get_transaction",
        response={200: schema.TransactionSchema, 404: ErrorResponse},
    )
    def get_transaction(self, transaction_id: UUID) -> Transaction:
        """Current persisted state, including the payment countdown."""
        return self.lifecycle().get(transaction_id, self.user())

    @route.get(
        "/{transaction_id}/tickets",
        url_name="get_transaction_tickets",
        response={200: list[schema.TicketSchema], 404: ErrorResponse, 409: ErrorResponse},
    )
    def get_tickets(self, transaction_id: UUID) -> list[Ticket]:
        """Tickets minted for a confirmed transaction; NOT_READY before that."""
        return self.lifecycle().tickets(transaction_id, self.user())

    @route.put(
        "/{transaction_id}/payment-proof",
        url_name="submit_payment_proof",
        response={200: schema.TransactionSchema, 410: ErrorResponse, **TRANSITION_ERRORS},
        throttle=WriteThrottle(),
    )
    def submit_payment_proof(self, transaction_id: UUID, payload: schema.PaymentProofSchema) -> Transaction:
        """Attach the bank-transfer proof; only before the payment deadline."""
        return self.lifecycle().submit_proof(transaction_id, self.user(), payload.payment_proof)

    @route.put(
        "/{transaction_id}/confirm",
        url_name="confirm_transaction",
        response={200: schema.TransactionSchema, 400: ErrorResponse, **TRANSITION_ERRORS},
        throttle=WriteThrottle(),
    )
    def confirm(self, transaction_id: UUID) -> Transaction:
        """Organizer accepts the payment; tickets are minted."""
        return self.lifecycle().confirm(transaction_id, self.user())

    @route.put(
        "/{transaction_id}/reject",
        url_name="reject_transaction",
        response={200: schema.TransactionSchema, **TRANSITION_ERRORS},
        throttle=WriteThrottle(),
    )
    def reject(self, transaction_id: UUID, payload: schema.RejectSchema) -> Transaction:
        """Organizer refuses the payment; the seats go back on sale."""
        return self.lifecycle().reject(transaction_id, self.user(), payload.reason)

    @route.delete(
        "/{transaction_id}",
        url_name="cancel_transaction",
        response={200: schema.TransactionSchema, **TRANSITION_ERRORS},
        throttle=WriteThrottle(),
    )
    def cancel(self, transaction_id: UUID) -> Transaction:
        """Buyer withdraws an unpaid transaction."""
        return self.lifecycle().cancel(transaction_id, self.user())

    @route.put(
        "/{transaction_id}/cancel",
        url_name="cancel_transaction_put",
        response={200: schema.TransactionSchema, **TRANSITION_ERRORS},
        throttle=WriteThrottle(),
    )
    def cancel_put(self, transaction_id: UUID) -> Transaction:
        """Same as ``DELETE /transactions/{id}``."""
        return self.lifecycle().cancel(transaction_id, self.user())
