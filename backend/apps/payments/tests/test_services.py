import re
from decimal import Decimal
from unittest import mock

from django.db import DataError
from django.test import TestCase, override_settings
from django.utils import timezone

from backend.apps.memberships.models import Membership
from backend.core.dates import add_months
from backend.core.exceptions import InvalidPackage, TransactionNotFound
from tests.factories import SubscriptionPackageFactory, TransactionFactory, UserFactory

from ..gateway import MockGateway, PaymentGateway, get_gateway
from ..models import GatewayEventLog, Transaction
from ..services import (
    apply_callback,
    generate_order_id,
    generate_transaction_id,
    initiate_transaction,
    log_gateway_event,
    map_gateway_status,
    mask_sensitive_data,
)


class IdentifierTests(TestCase):

    def test_formats(self):
        self.assertRegex(generate_transaction_id(), r'^TXN-[0-9A-F]{13}$')
        self.assertRegex(generate_order_id(), r'^ORDER-\d+-[0-9A-F]{8}$')

    def test_order_ids_differ_within_same_second(self):
        with mock.patch('backend.apps.payments.services.time.time', return_value=1700000000):
            ids = {generate_order_id() for _ in range(20)}
        self.assertEqual(len(ids), 20)


class InitiateTransactionTests(TestCase):

    def setUp(self):
        self.user = UserFactory()
        self.package = SubscriptionPackageFactory(price=Decimal('249000'), duration_months=3)

    def test_creates_pending_transaction_with_price_snapshot(self):
        result = initiate_transaction(self.user, self.package.pk)
        txn = result.transaction
        self.assertEqual(txn.status, Transaction.Status.PENDING)
        self.assertEqual(txn.amount, Decimal('249000'))
        self.assertEqual(txn.user, self.user)
        self.assertIsNone(txn.membership_id)
        self.assertIsNone(txn.paid_at)
        self.assertTrue(result.token.startswith('snap-token-'))

        # Later price edits leave the snapshot alone
        self.package.price = Decimal('1')
        self.package.save()
        txn.refresh_from_db()
        self.assertEqual(txn.amount, Decimal('249000'))

    def test_unknown_package(self):
        with self.assertRaises(InvalidPackage):
            initiate_transaction(self.user, '00000000-0000-0000-0000-000000000000')
        self.assertEqual(Transaction.objects.count(), 0)

    def test_inactive_package(self):
        self.package.is_active = False
        self.package.save()
        with self.assertRaises(InvalidPackage):
            initiate_transaction(self.user, self.package.pk)
        self.assertEqual(Transaction.objects.count(), 0)

    def test_uses_supplied_gateway(self):
        gateway = mock.Mock(spec=PaymentGateway)
        gateway.create_checkout_token.return_value = 'tok-123'
        result = initiate_transaction(self.user, self.package.pk, gateway=gateway)
        self.assertEqual(result.token, 'tok-123')
        gateway.create_checkout_token.assert_called_once_with(
            package=self.package, user=self.user, transaction=result.transaction
        )


class CallbackMappingTests(TestCase):

    def test_status_mapping(self):
        self.assertEqual(map_gateway_status('capture'), Transaction.Status.PAID)
        self.assertEqual(map_gateway_status('settlement'), Transaction.Status.PAID)
        self.assertEqual(map_gateway_status('pending'), Transaction.Status.PENDING)
        for other in ('deny', 'expire', 'cancel', 'refund', '', None, 'paid'):
            with self.subTest(status=other):
                self.assertEqual(map_gateway_status(other), Transaction.Status.FAILED)


class ApplyCallbackTests(TestCase):

    def setUp(self):
        self.package = SubscriptionPackageFactory(duration_months=3)
        self.txn = TransactionFactory(package=self.package)

    def test_settlement_marks_paid_and_grants_membership(self):
        now = timezone.now()
        payload = {'order_id': self.txn.order_id, 'transaction_status': 'settlement'}
        outcome = apply_callback(self.txn.order_id, 'settlement', payload, payment_type='gopay', now=now)

        self.assertTrue(outcome.applied)
        self.txn.refresh_from_db()
        self.assertEqual(self.txn.status, Transaction.Status.PAID)
        self.assertEqual(self.txn.paid_at, now)
        self.assertEqual(self.txn.gateway_response, payload)
        self.assertEqual(self.txn.payment_method, Transaction.PaymentMethod.E_WALLET)

        membership = Membership.objects.get()
        self.assertEqual(self.txn.membership, membership)
        self.assertEqual(outcome.membership, membership)
        self.assertEqual(membership.user_id, self.txn.user_id)
        self.assertEqual(membership.status, Membership.Status.ACTIVE)
        self.assertEqual(membership.started_at, now)
        self.assertEqual(membership.expires_at, add_months(now, 3))

    def test_capture_also_pays(self):
        apply_callback(self.txn.order_id, 'capture', {})
        self.txn.refresh_from_db()
        self.assertEqual(self.txn.status, Transaction.Status.PAID)
        self.assertIsNotNone(self.txn.paid_at)
        self.assertEqual(Membership.objects.count(), 1)

    def test_pending_keeps_paid_at_and_grants_nothing(self):
        payload = {'transaction_status': 'pending'}
        outcome = apply_callback(self.txn.order_id, 'pending', payload)
        self.assertTrue(outcome.applied)
        self.txn.refresh_from_db()
        self.assertEqual(self.txn.status, Transaction.Status.PENDING)
        self.assertIsNone(self.txn.paid_at)
        self.assertEqual(self.txn.gateway_response, payload)
        self.assertEqual(Membership.objects.count(), 0)

    def test_pending_then_settlement(self):
        apply_callback(self.txn.order_id, 'pending', {})
        apply_callback(self.txn.order_id, 'settlement', {})
        self.txn.refresh_from_db()
        self.assertEqual(self.txn.status, Transaction.Status.PAID)
        self.assertEqual(Membership.objects.count(), 1)

    def test_other_status_fails(self):
        for gateway_status in ('deny', 'expire', 'something-new'):
            with self.subTest(status=gateway_status):
                txn = TransactionFactory()
                apply_callback(txn.order_id, gateway_status, {'transaction_status': gateway_status})
                txn.refresh_from_db()
                self.assertEqual(txn.status, Transaction.Status.FAILED)
                self.assertIsNone(txn.paid_at)
        self.assertEqual(Membership.objects.count(), 0)

    def test_replayed_settlement_grants_once(self):
        first = apply_callback(self.txn.order_id, 'settlement', {'n': 1})
        second = apply_callback(self.txn.order_id, 'settlement', {'n': 2})

        self.assertTrue(first.applied)
        self.assertFalse(second.applied)
        self.assertEqual(second.membership, first.membership)
        self.assertEqual(Membership.objects.count(), 1)
        self.txn.refresh_from_db()
        self.assertEqual(self.txn.gateway_response, {'n': 1})

    def test_finalised_transaction_is_not_resurrected(self):
        apply_callback(self.txn.order_id, 'deny', {})
        outcome = apply_callback(self.txn.order_id, 'settlement', {})
        self.assertFalse(outcome.applied)
        self.txn.refresh_from_db()
        self.assertEqual(self.txn.status, Transaction.Status.FAILED)
        self.assertEqual(Membership.objects.count(), 0)

    def test_conditional_update_loses_to_a_concurrent_writer(self):
        # The locked read still sees PENDING, but another callback already finalised the row
        stale = Transaction.objects.get(pk=self.txn.pk)
        Transaction.objects.filter(pk=self.txn.pk).update(status=Transaction.Status.FAILED)
        locked = mock.Mock(get=mock.Mock(return_value=stale))

        with mock.patch.object(Transaction.objects, 'select_for_update', return_value=locked):
            outcome = apply_callback(self.txn.order_id, 'settlement', {'late': True})

        self.assertFalse(outcome.applied)
        self.assertIsNone(outcome.membership)
        self.assertEqual(outcome.transaction.status, Transaction.Status.FAILED)
        self.txn.refresh_from_db()
        self.assertEqual(self.txn.status, Transaction.Status.FAILED)
        self.assertIsNone(self.txn.paid_at)
        self.assertIsNone(self.txn.membership_id)
        self.assertEqual(Membership.objects.count(), 0)

    def test_unknown_order_id_mutates_nothing(self):

        before = list(Transaction.objects.values_list('pk', 'status', 'updated_at'))
        with self.assertRaises(TransactionNotFound):
            apply_callback('ORDER-0-DEADBEEF', 'settlement', {})
        self.assertEqual(list(Transaction.objects.values_list('pk', 'status', 'updated_at')), before)
        self.assertEqual(Membership.objects.count(), 0)


class GatewayTests(TestCase):

    def test_payment_method_mapping(self):
        gateway = MockGateway()
        self.assertEqual(gateway.payment_method_for('credit_card'), 'credit_card')
        self.assertEqual(gateway.payment_method_for('bank_transfer'), 'bank_transfer')
        self.assertEqual(gateway.payment_method_for('echannel'), 'bank_transfer')
        self.assertEqual(gateway.payment_method_for('QRIS'), 'e_wallet')
        self.assertEqual(gateway.payment_method_for('cstore'), 'other')
        self.assertIsNone(gateway.payment_method_for(None))

    @override_settings(PAYMENT_TOKEN_PREFIX='tok-')
    def test_token_prefix(self):
        token = MockGateway().create_checkout_token(package=None, user=None)
        self.assertTrue(re.match(r'^tok-[0-9a-f]{13}$', token))

    @override_settings(PAYMENT_CALLBACK_SECRET=None)
    def test_unsigned_callbacks_accepted_without_secret(self):
        with self.assertLogs('backend.apps.payments.gateway', level='WARNING'):
            self.assertTrue(MockGateway().verify_callback({'order_id': 'ORDER-1'}))

    @override_settings(PAYMENT_CALLBACK_SECRET='s3cret')
    def test_signature_checked_with_secret(self):
        data = {'order_id': 'ORDER-1', 'status_code': '200', 'gross_amount': '99000.00'}
        gateway = MockGateway()
        self.assertFalse(gateway.verify_callback(data))
        self.assertFalse(gateway.verify_callback({**data, 'signature_key': 'bogus'}))
        signed = {**data, 'signature_key': MockGateway.sign(data, 's3cret')}
        self.assertTrue(gateway.verify_callback(signed))
        self.assertFalse(gateway.verify_callback({**signed, 'gross_amount': '1.00'}))

    @override_settings(PAYMENT_GATEWAY_CLASS='backend.apps.payments.gateway.MockGateway')
    def test_get_gateway_loads_configured_class(self):
        self.assertIsInstance(get_gateway(), MockGateway)


class GatewayEventLogTests(TestCase):

    def test_sensitive_fields_are_masked(self):
        payload = {
            'order_id': 'ORDER-1',
            'signature_key': 'abc',
            'customer_details': {'email': 'a@b.c'},
            'va_numbers': {'bank': 'bca', 'email': 'x@y.z'},
        }
        masked = mask_sensitive_data(payload)
        self.assertEqual(masked['order_id'], 'ORDER-1')
        self.assertEqual(masked['signature_key'], '***REDACTED***')
        self.assertEqual(masked['customer_details'], '***REDACTED***')
        self.assertEqual(masked['va_numbers']['email'], '***REDACTED***')
        self.assertEqual(payload['signature_key'], 'abc')

    def test_duplicate_payloads_logged_once(self):
        payload = {'order_id': 'ORDER-1', 'transaction_status': 'settlement'}
        for _ in range(2):
            log_gateway_event(
                gateway_name='mock', event_type='settlement', reference='ORDER-1',
                payload=payload, status_code=200,
            )
        self.assertEqual(GatewayEventLog.objects.count(), 1)
        entry = GatewayEventLog.objects.get()
        self.assertEqual(entry.reference, 'ORDER-1')
        self.assertIsNotNone(entry.payload_hash)

    def test_same_payload_with_new_outcome_is_logged_again(self):
        payload = {'order_id': 'ORDER-1', 'transaction_status': 'settlement'}
        for status_code in (500, 200, 200):
            log_gateway_event(
                gateway_name='mock', event_type='settlement', reference='ORDER-1',
                payload=payload, status_code=status_code,
            )
        self.assertEqual(
            sorted(GatewayEventLog.objects.values_list('status_code', flat=True)),
            [200, 500],
        )

    def test_overlong_values_are_clipped_to_their_columns(self):
        log_gateway_event(
            gateway_name='mock', event_type='x' * 60, reference='O' * 300,
            payload={'order_id': 'O' * 300}, status_code=400, correlation_id='c' * 100,
        )
        entry = GatewayEventLog.objects.get()
        self.assertEqual(entry.event_type, 'x' * 50)
        self.assertEqual(entry.reference, 'O' * 255)
        self.assertEqual(entry.correlation_id, 'c' * 64)

    def test_database_errors_are_logged_not_raised(self):
        with mock.patch.object(GatewayEventLog.objects, 'create', side_effect=DataError('value too long')):
            with self.assertLogs('backend.apps.payments.services', level='ERROR'):
                log_gateway_event(
                    gateway_name='mock', event_type='settlement', reference='ORDER-1',
                    payload={'order_id': 'ORDER-1'}, status_code=200,
                )
        self.assertEqual(GatewayEventLog.objects.count(), 0)
