"""
Payment gateway collaborator.

The ledger only needs two things from a gateway: an opaque checkout token
for a pending transaction, and a way to decide whether an inbound callback
is authentic. `MockGateway` is the development stand-in; a real integration
subclasses `PaymentGateway` and is selected with PAYMENT_GATEWAY_CLASS.
"""
import hashlib
import hmac
import logging
import uuid

from django.conf import settings
from django.utils.module_loading import import_string

logger = logging.getLogger(__name__)

# Gateway `payment_type` values grouped into the ledger's payment-method labels
PAYMENT_TYPE_MAP = {
    'credit_card': 'credit_card',
    'bank_transfer': 'bank_transfer',
    'echannel': 'bank_transfer',
    'permata': 'bank_transfer',
    'bca_klikpay': 'bank_transfer',
    'gopay': 'e_wallet',
    'shopeepay': 'e_wallet',
    'qris': 'e_wallet',
}


class PaymentGateway:
    """Contract between the transaction ledger and an external gateway."""
    name = 'base'

    def create_checkout_token(self, *, package, user, transaction=None) -> str:
        raise NotImplementedError

    def verify_callback(self, data: dict) -> bool:
        raise NotImplementedError

    def payment_method_for(self, payment_type):
        if not payment_type:
            return None
        return PAYMENT_TYPE_MAP.get(str(payment_type).lower(), 'other')


class MockGateway(PaymentGateway):
    """
    Issues placeholder tokens. Callback signatures follow the hosted
    gateway's scheme: sha512(order_id + status_code + gross_amount + secret).
    """
    name = 'mock'

    def create_checkout_token(self, *, package, user, transaction=None) -> str:
        prefix = getattr(settings, 'PAYMENT_TOKEN_PREFIX', 'snap-token-')
        return f"{prefix}{uuid.uuid4().hex[:13]}"

    def verify_callback(self, data: dict) -> bool:
        secret = getattr(settings, 'PAYMENT_CALLBACK_SECRET', None)
        if not secret:
            logger.warning(
                f"Accepting unsigned callback for order {data.get('order_id')}: PAYMENT_CALLBACK_SECRET is not set"
            )
            return True
        signature = data.get('signature_key') or ''
        expected = self.sign(data, secret)
        return hmac.compare_digest(expected, str(signature))

    @staticmethod
    def sign(data: dict, secret: str) -> str:
        raw = f"{data.get('order_id', '')}{data.get('status_code', '')}{data.get('gross_amount', '')}{secret}"
        return hashlib.sha512(raw.encode('utf-8')).hexdigest()


def get_gateway() -> PaymentGateway:
    """Instantiate the configured gateway."""
    path = getattr(settings, 'PAYMENT_GATEWAY_CLASS', 'backend.apps.payments.gateway.MockGateway')
    return import_string(path)()
