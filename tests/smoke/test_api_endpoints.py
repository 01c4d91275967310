# FILE: tests/smoke/test_api_endpoints.py
from django.urls import reverse
from django.contrib.auth import get_user_model
from rest_framework import status
from rest_framework.test import APITestCase
from tests.factories import AdminFactory, SubscriptionPackageFactory, UserFactory

User = get_user_model()


class SmokeTests(APITestCase):
    def setUp(self):
        self.user = UserFactory()
        self.admin = AdminFactory()
        self.package = SubscriptionPackageFactory()
        self.client.force_authenticate(user=self.user)

    def test_jwt_login_and_profile(self):
        """Token endpoint should issue a token usable on authenticated endpoints."""
        self.client.force_authenticate(user=None)
        response = self.client.post(
            reverse('token_obtain_pair'),
            {'email': self.user.email, 'password': 'password'},
            format='json'
        )
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.client.credentials(HTTP_AUTHORIZATION=f"Bearer {response.data['access']}")

        response = self.client.get(reverse('current-user'))
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data['email'], self.user.email)
        self.assertEqual(response.data['role'], User.Role.MEMBER)

    def test_member_endpoints(self):
        """Every page a member can reach should answer 200."""
        for url in (
            '/dashboard/',
            '/memberships/',
            '/payment/transactions/',
            f'/payment/{self.package.pk}/',
        ):
            with self.subTest(url=url):
                self.assertEqual(self.client.get(url).status_code, status.HTTP_200_OK)

    def test_admin_endpoints(self):
        self.client.force_authenticate(user=self.admin)
        for url in ('/dashboard/', '/memberships/', '/subscription-packages/', '/payment/transactions/'):
            with self.subTest(url=url):
                self.assertEqual(self.client.get(url).status_code, status.HTTP_200_OK)

    def test_security_headers(self):
        response = self.client.get('/dashboard/')
        self.assertEqual(response['X-Content-Type-Options'], 'nosniff')
        self.assertEqual(response['X-Frame-Options'], 'DENY')
        self.assertIn('X-Request-ID', response)

    def test_schema(self):
        response = self.client.get(reverse('schema'))
        self.assertEqual(response.status_code, status.HTTP_200_OK)
