from django.core.cache import cache
from django.urls import reverse
from rest_framework import status
from rest_framework.authtoken.models import Token
from rest_framework.test import APITestCase

from .models import User
from .permissions import is_in_hierarchy, users_in_hierarchy


class AuthTests(APITestCase):
    """
    Test suite for the authentication app.
    """
    def setUp(self):
        cache.clear()
        self.user = User.objects.create_user(
            email='testuser@example.com',
            password='testpassword',
            role=User.ROLE_MARKETER,
        )
        self.login_url = reverse('authentication:login')
        self.logout_url = reverse('authentication:logout')
        self.me_url = reverse('authentication:me')
        self.valid_payload = {
            'email': 'testuser@example.com',
            'password': 'testpassword'
        }

    def test_successful_login(self):
        """
        Ensure a user can log in with valid credentials.
        """
        response = self.client.post(self.login_url, self.valid_payload, format='json')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertIn('token', response.data)
        self.assertEqual(response.data['user']['unique_id'], self.user.unique_id)

    def test_failed_login(self):
        """
        Ensure login fails with invalid credentials.
        """
        invalid_payload = {
            'email': 'testuser@example.com',
            'password': 'wrongpassword'
        }
        response = self.client.post(self.login_url, invalid_payload, format='json')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertFalse(response.data['success'])

    def test_login_attempts_are_throttled(self):
        """
        Ensure the sixth login attempt within a minute is refused.
        """
        invalid_payload = {'email': 'testuser@example.com', 'password': 'wrongpassword'}
        for _ in range(5):
            response = self.client.post(self.login_url, invalid_payload, format='json')
            self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)

        response = self.client.post(self.login_url, self.valid_payload, format='json')
        self.assertEqual(response.status_code, status.HTTP_429_TOO_MANY_REQUESTS)
        self.assertEqual(response.data['error']['code'], 'RATE_LIMITED')

    def test_successful_logout(self):
        """
        Ensure a logged-in user can successfully log out.
        """
        response = self.client.post(self.login_url, self.valid_payload, format='json')
        token = response.data['token']

        self.client.credentials(HTTP_AUTHORIZATION='Token ' + token)
        response = self.client.post(self.logout_url)
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertFalse(Token.objects.filter(key=token).exists())

    def test_me_requires_authentication(self):
        response = self.client.get(self.me_url)
        self.assertEqual(response.status_code, status.HTTP_401_UNAUTHORIZED)
        self.assertEqual(response.data['error']['code'], 'NOT_AUTHENTICATED')

    def test_me_returns_verification_flags(self):
        self.client.force_authenticate(user=self.user)
        response = self.client.get(self.me_url)
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data['overall_verification_status'], User.VERIFICATION_PENDING)
        self.assertFalse(response.data['bio_submitted'])


class UniqueIdTests(APITestCase):
    def test_ids_are_prefixed_by_role_and_sequential(self):
        first = User.objects.create_user(email='m1@example.com', password='x', role=User.ROLE_MARKETER)
        second = User.objects.create_user(email='m2@example.com', password='x', role=User.ROLE_MARKETER)
        admin = User.objects.create_user(email='a1@example.com', password='x', role=User.ROLE_ADMIN)

        self.assertEqual(first.unique_id, 'DSR00001')
        self.assertEqual(second.unique_id, 'DSR00002')
        self.assertEqual(admin.unique_id, 'ADM00001')

    def test_superuser_defaults_to_master_admin(self):
        root = User.objects.create_superuser(email='root@example.com', password='x')
        self.assertEqual(root.role, User.ROLE_MASTER_ADMIN)
        self.assertTrue(root.unique_id.startswith('MAS'))


class HierarchyTests(APITestCase):
    def setUp(self):
        self.super_admin = User.objects.create_user(email='sa@example.com', password='x', role=User.ROLE_SUPER_ADMIN)
        self.admin = User.objects.create_user(
            email='ad@example.com', password='x', role=User.ROLE_ADMIN, super_admin=self.super_admin
        )
        self.marketer = User.objects.create_user(
            email='mk@example.com', password='x', role=User.ROLE_MARKETER, admin=self.admin
        )
        self.other_admin = User.objects.create_user(email='oa@example.com', password='x', role=User.ROLE_ADMIN)
        self.master = User.objects.create_user(email='ma@example.com', password='x', role=User.ROLE_MASTER_ADMIN)

    def test_chain_membership(self):
        self.assertTrue(is_in_hierarchy(self.admin, self.marketer))
        self.assertTrue(is_in_hierarchy(self.super_admin, self.marketer))
        self.assertTrue(is_in_hierarchy(self.super_admin, self.admin))
        self.assertTrue(is_in_hierarchy(self.master, self.marketer))
        self.assertFalse(is_in_hierarchy(self.other_admin, self.marketer))
        self.assertFalse(is_in_hierarchy(self.marketer, self.admin))

    def test_users_in_hierarchy(self):
        self.assertEqual(list(users_in_hierarchy(self.admin)), [self.marketer])
        self.assertEqual(set(users_in_hierarchy(self.super_admin)), {self.admin, self.marketer})
        self.assertFalse(users_in_hierarchy(self.marketer).exists())
