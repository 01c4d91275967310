"""
Payments URLs.

The callback path is registered with the payment gateway; do not change it
without updating the gateway configuration.
"""
from django.urls import path

from . import views

urlpatterns = [
    path('', views.InitiatePaymentView.as_view(), name='payment-initiate'),
    path('callback/', views.PaymentCallbackView.as_view(), name='payment-callback'),
    path('cancel/', views.PaymentCancelView.as_view(), name='payment-cancel'),
    path('transactions/', views.UserTransactionsView.as_view(), name='payment-transactions'),
    path('success/<uuid:transaction_id>/', views.PaymentSuccessView.as_view(), name='payment-success'),
    path('<uuid:package_id>/', views.CheckoutView.as_view(), name='payment-checkout'),
]
