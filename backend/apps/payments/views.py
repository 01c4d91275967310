"""
Payments views: checkout, gateway callback and transaction pages.
"""
import logging
import uuid

from django.conf import settings
from django.shortcuts import get_object_or_404
from drf_spectacular.utils import extend_schema
from rest_framework import generics, status
from rest_framework.permissions import AllowAny, IsAuthenticated
from rest_framework.response import Response
from rest_framework.throttling import AnonRateThrottle
from rest_framework.views import APIView

from backend.apps.accounts.policy import Action, authorize, scope_to_actor
from backend.apps.catalog.serializers import PackageSummarySerializer
from backend.core.exceptions import TransactionNotFound

from .gateway import get_gateway
from .models import Transaction
from .serializers import (
    CallbackSerializer,
    CheckoutRequestSerializer,
    TransactionDetailSerializer,
    TransactionSerializer,
)
from .services import apply_callback, get_checkout_package, initiate_transaction, log_gateway_event

logger = logging.getLogger(__name__)


class CheckoutView(APIView):
    """Checkout payload for a package: the package and a fresh gateway token."""
    permission_classes = [IsAuthenticated]

    def get(self, request, package_id):
        authorize(request.user, Action.CHECKOUT)
        package = get_checkout_package(package_id)
        token = get_gateway().create_checkout_token(package=package, user=request.user)
        return Response({
            'package': PackageSummarySerializer(package).data,
            'snap_token': token,
        })


class InitiatePaymentView(APIView):
    """Create a pending transaction for the selected package."""
    permission_classes = [IsAuthenticated]

    @extend_schema(request=CheckoutRequestSerializer)
    def post(self, request):
        authorize(request.user, Action.CHECKOUT)
        serializer = CheckoutRequestSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)

        result = initiate_transaction(request.user, serializer.validated_data['subscription_package_id'])
        return Response({
            'transaction': TransactionSerializer(result.transaction).data,
            'package': PackageSummarySerializer(result.transaction.package).data,
            'snap_token': result.token,
        }, status=status.HTTP_201_CREATED)


class PaymentCallbackThrottle(AnonRateThrottle):
    """Per-IP rate limit for the unauthenticated callback endpoint."""
    scope = 'payment_callback'

    def get_rate(self):
        return getattr(settings, 'PAYMENT_CALLBACK_THROTTLE_RATE', '1000/minute')


@extend_schema(request=CallbackSerializer)
class PaymentCallbackView(APIView):
    """
    Gateway notification endpoint.
    - Signature checked by the gateway collaborator before anything is read.
    - Unknown order ids answer 404 with an error body instead of raising.
    - Replays on a finalised transaction answer success and change nothing.
    - Every notification is written to the gateway event log with its outcome.
    """
    authentication_classes = []
    permission_classes = [AllowAny]
    throttle_classes = [PaymentCallbackThrottle]

    def post(self, request):
        return self._handle(request, self._callback_data(request))

    def get(self, request):
        return self._handle(request, request.query_params.dict())

    def throttled(self, request, wait):
        # Rejected before the handler runs, so record it here
        data = self._callback_data(request) if request.method == 'POST' else request.query_params.dict()
        log_gateway_event(
            gateway_name=get_gateway().name,
            event_type=data.get('transaction_status'),
            reference=data.get('order_id'),
            payload=data,
            status_code=status.HTTP_429_TOO_MANY_REQUESTS,
            error='Throttled',
            correlation_id=getattr(request, 'correlation_id', None),
        )
        super().throttled(request, wait)

    @staticmethod
    def _callback_data(request):
        data = request.query_params.dict()
        body = request.data
        data.update(body.dict() if hasattr(body, 'dict') else dict(body))
        return data

    def _handle(self, request, data):
        correlation_id = getattr(request, 'correlation_id', None) or str(uuid.uuid4())
        order_id = data.get('order_id')
        gateway_status = data.get('transaction_status')
        gateway = get_gateway()
        logger.info(f"[{correlation_id}] Payment callback received for order {order_id} ({gateway_status})")

        status_code = status.HTTP_200_OK
        error = None
        try:
            if not gateway.verify_callback(data):
                logger.warning(f"[{correlation_id}] Invalid callback signature for order {order_id}")
                status_code, error = status.HTTP_401_UNAUTHORIZED, 'Invalid signature'
                return Response({'status': 'error', 'message': error}, status=status_code)

            serializer = CallbackSerializer(data=data)
            if not serializer.is_valid():
                status_code, error = status.HTTP_400_BAD_REQUEST, 'Invalid callback'
                return Response(
                    {'status': 'error', 'message': error, 'details': serializer.errors},
                    status=status_code,
                )

            try:
                outcome = apply_callback(
                    serializer.validated_data['order_id'],
                    serializer.validated_data['transaction_status'],
                    data,
                    payment_type=serializer.validated_data.get('payment_type'),
                    gateway=gateway,
                    correlation_id=correlation_id,
                )
            except TransactionNotFound as exc:
                status_code, error = status.HTTP_404_NOT_FOUND, str(exc.detail)
                return Response({'status': 'error', 'message': error}, status=status_code)

            return Response({
                'status': 'success',
                'transaction_status': outcome.transaction.status,
                'applied': outcome.applied,
            }, status=status_code)
        except Exception as e:
            status_code, error = status.HTTP_500_INTERNAL_SERVER_ERROR, str(e)
            logger.exception(f"[{correlation_id}] Payment callback error: {e}")
            raise
        finally:
            log_gateway_event(
                gateway_name=gateway.name,
                event_type=gateway_status,
                reference=order_id,
                payload=data,
                status_code=status_code,
                error=error,
                correlation_id=correlation_id,
            )


class PaymentSuccessView(APIView):
    """Confirmation page data: transaction with its package and membership."""
    permission_classes = [IsAuthenticated]

    def get(self, request, transaction_id):
        txn = get_object_or_404(
            Transaction.objects.select_related('user', 'package', 'membership__package', 'membership__user'),
            pk=transaction_id,
        )
        authorize(request.user, Action.VIEW_TRANSACTION, owner=txn.user_id,
                  message='You can only view your own transactions.')
        return Response(TransactionDetailSerializer(txn, context={'request': request}).data)


class PaymentCancelView(APIView):
    """Cancel flow. The pending transaction is left as it is."""
    permission_classes = [IsAuthenticated]

    def delete(self, request):
        logger.info(f"Payment cancelled by {request.user.email}")
        return Response({'status': 'cancelled', 'message': 'Payment cancelled.'})


class UserTransactionsView(generics.ListAPIView):
    """
    Transactions visible to the caller, newest first.
    Admins see everything; members only their own.
    """
    serializer_class = TransactionSerializer
    permission_classes = [IsAuthenticated]

    def get_queryset(self):
        # Avoid accessing request.user during schema generation
        if getattr(self, "swagger_fake_view", False):
            return Transaction.objects.none()
        queryset = Transaction.objects.select_related('user', 'package').order_by('-created_at')
        return scope_to_actor(self.request.user, queryset)
