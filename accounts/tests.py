from datetime import timedelta
from smtplib import SMTPException
from unittest import mock

from django.conf import settings
from django.contrib.auth import get_user_model
from django.core import mail
from django.test import TestCase
from django.utils.timezone import now
from rest_framework import status
from rest_framework.test import APITestCase
from rest_framework_simplejwt.tokens import AccessToken

from accounts import services
from accounts.authentication import issue_session_token

# Get the custom user model
User = get_user_model()


class CustomUserModelTest(TestCase):
    def test_create_user(self):
        # Test creating a user with required fields
        user = User.objects.create_user(
            email='test@example.com',
            name='John',
            password='testpass123'
        )
        self.assertEqual(user.email, 'test@example.com')
        self.assertEqual(user.name, 'John')
        self.assertTrue(user.check_password('testpass123'))
        self.assertFalse(user.is_account_verified)  # Unverified until OTP is consumed
        self.assertEqual(user.verify_otp, '')
        self.assertEqual(user.reset_otp, '')

    def test_email_uniqueness(self):
        User.objects.create_user(email='test@example.com', name='John', password='testpass123')
        with self.assertRaises(Exception):  # Should raise an error if email is not unique
            User.objects.create_user(email='test@example.com', name='Jane', password='testpass123')

    def test_name_uniqueness(self):
        User.objects.create_user(email='john@example.com', name='John', password='testpass123')
        with self.assertRaises(Exception):
            User.objects.create_user(email='other@example.com', name='John', password='testpass123')

    def test_domain_is_normalized(self):
        user = User.objects.create_user(
            email='test@example.com', name='John', password='testpass123', domain='  Machine Learning '
        )
        self.assertEqual(user.domain, 'machine learning')
        self.assertEqual(user.token_domain, 'machine learning')

    def test_token_domain_falls_back_to_email(self):
        user = User.objects.create_user(email='test@Uni.EDU', name='John', password='testpass123')
        self.assertEqual(user.token_domain, 'uni.edu')


class SessionTokenTest(TestCase):
    def test_token_carries_id_and_domain(self):
        user = User.objects.create_user(email='test@example.com', name='John', password='testpass123')
        token = AccessToken(issue_session_token(user))
        self.assertEqual(int(token['id']), user.pk)
        self.assertEqual(token['domain'], 'example.com')


class OTPServiceTest(TestCase):
    def setUp(self):
        self.user = User.objects.create_user(email='test@example.com', name='John', password='testpass123')

    def test_issue_otp_sets_code_and_expiry(self):
        otp = services.issue_otp(self.user, 'verify')
        self.user.refresh_from_db()
        self.assertEqual(len(otp), 6)
        self.assertTrue(otp.isdigit())
        self.assertEqual(self.user.verify_otp, otp)
        self.assertGreater(self.user.verify_otp_expire_at, now())
        self.assertEqual(self.user.reset_otp, '')  # Independent fields

    def test_verify_otp_is_single_use(self):
        otp = services.issue_otp(self.user, 'verify')
        services.verify_account(self.user, otp)
        self.user.refresh_from_db()
        self.assertTrue(self.user.is_account_verified)
        self.assertEqual(self.user.verify_otp, '')
        self.assertIsNone(self.user.verify_otp_expire_at)

        with self.assertRaisesMessage(services.AccountError, 'Invalid OTP'):
            services.verify_account(self.user, otp)

    def test_wrong_otp(self):
        otp = services.issue_otp(self.user, 'verify')
        wrong = '000000' if otp != '000000' else '111111'
        with self.assertRaisesMessage(services.AccountError, 'Invalid OTP'):
            services.verify_account(self.user, wrong)

    def test_expired_otp(self):
        self.user.verify_otp = '123456'
        self.user.verify_otp_expire_at = now() - timedelta(minutes=1)
        self.user.save()
        with self.assertRaisesMessage(services.AccountError, 'OTP expired'):
            services.verify_account(self.user, '123456')
        self.user.refresh_from_db()
        self.assertFalse(self.user.is_account_verified)

    def test_reset_otp_does_not_verify_account(self):
        otp = services.issue_otp(self.user, 'reset')
        with self.assertRaisesMessage(services.AccountError, 'Invalid OTP'):
            services.verify_account(self.user, otp)

    def test_reset_password(self):
        otp = services.send_reset_otp('test@example.com')
        services.reset_password('test@example.com', otp, 'newpass456')
        self.user.refresh_from_db()
        self.assertTrue(self.user.check_password('newpass456'))
        self.assertEqual(self.user.reset_otp, '')

        with self.assertRaisesMessage(services.AccountError, 'Invalid or expired OTP'):
            services.reset_password('test@example.com', otp, 'another789')

    def test_send_verify_otp_for_verified_account(self):
        self.user.is_account_verified = True
        self.user.save()
        with self.assertRaisesMessage(services.AccountError, 'Account already verified'):
            services.send_verify_otp(self.user)


class AuthViewTest(APITestCase):
    def setUp(self):
        self.user = User.objects.create_user(email='test@example.com', name='John', password='testpass123')

    def test_register_success(self):
        data = {'name': 'Jane', 'email': 'jane@example.com', 'password': 'testpass123'}
        response = self.client.post('/api/auth/register', data, format='json')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data, {'success': True, 'message': 'User created successfully'})

        cookie = response.cookies[settings.AUTH_COOKIE['NAME']]
        self.assertTrue(cookie.value)
        self.assertTrue(cookie['httponly'])
        self.assertEqual(cookie['samesite'], 'Lax')

        # Welcome email
        self.assertEqual(len(mail.outbox), 1)
        self.assertEqual(mail.outbox[0].to, ['jane@example.com'])

        # Registered user is logged in straight away
        response = self.client.get('/api/user/profile')
        self.assertEqual(response.data['userdata']['email'], 'jane@example.com')

    def test_register_missing_fields(self):
        response = self.client.post('/api/auth/register', {'email': 'jane@example.com'}, format='json')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data, {'success': False, 'message': 'Please fill all the fields'})

    def test_register_existing_user(self):
        data = {'name': 'Jane', 'email': 'test@example.com', 'password': 'testpass123'}
        response = self.client.post('/api/auth/register', data, format='json')
        self.assertEqual(response.data, {'success': False, 'message': 'User already exists'})

    def test_register_survives_welcome_email_failure(self):
        data = {'name': 'Jane', 'email': 'jane@example.com', 'password': 'testpass123'}
        with mock.patch('teamup.tasks.send_mail', side_effect=SMTPException('down')):
            response = self.client.post('/api/auth/register', data, format='json')
        self.assertTrue(response.data['success'])
        self.assertTrue(User.objects.filter(email='jane@example.com').exists())

    def test_login(self):
        data = {'email': 'test@example.com', 'password': 'testpass123'}
        response = self.client.post('/api/auth/login', data, format='json')
        self.assertEqual(response.data, {'success': True, 'message': 'Login successful'})
        self.assertIn(settings.AUTH_COOKIE['NAME'], response.cookies)

    def test_login_failures(self):
        response = self.client.post('/api/auth/login', {'email': 'nobody@example.com', 'password': 'x'}, format='json')
        self.assertEqual(response.data, {'success': False, 'message': 'User not found'})

        response = self.client.post('/api/auth/login', {'email': 'test@example.com', 'password': 'wrong'}, format='json')
        self.assertEqual(response.data, {'success': False, 'message': 'Invalid credentials'})

    def test_logout_clears_cookie(self):
        self.client.post('/api/auth/login', {'email': 'test@example.com', 'password': 'testpass123'}, format='json')
        response = self.client.post('/api/auth/logout')
        self.assertEqual(response.data, {'success': True, 'message': 'Logout successful'})
        self.assertEqual(response.cookies[settings.AUTH_COOKIE['NAME']].value, '')

        response = self.client.get('/api/user/profile')
        self.assertEqual(response.status_code, status.HTTP_401_UNAUTHORIZED)

    def test_is_authenticated(self):
        response = self.client.post('/api/auth/isAuthenticated')
        self.assertEqual(response.status_code, status.HTTP_401_UNAUTHORIZED)

        self.client.cookies[settings.AUTH_COOKIE['NAME']] = issue_session_token(self.user)
        response = self.client.post('/api/auth/isAuthenticated')
        self.assertEqual(response.data, {'success': True})

    def test_profile(self):
        self.client.cookies[settings.AUTH_COOKIE['NAME']] = issue_session_token(self.user)
        response = self.client.get('/api/user/profile')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data, {
            'success': True,
            'userdata': {'name': 'John', 'email': 'test@example.com', 'isAccountVerified': False},
        })

    def test_expired_token_is_forbidden(self):
        token = AccessToken.for_user(self.user)
        token.set_exp(lifetime=-timedelta(minutes=1))
        self.client.cookies[settings.AUTH_COOKIE['NAME']] = str(token)
        response = self.client.get('/api/user/profile')
        self.assertEqual(response.status_code, status.HTTP_403_FORBIDDEN)
        self.assertFalse(response.data['success'])


class VerificationFlowTest(APITestCase):
    def setUp(self):
        self.user = User.objects.create_user(email='test@example.com', name='John', password='testpass123')
        self.client.cookies[settings.AUTH_COOKIE['NAME']] = issue_session_token(self.user)

    def test_send_and_verify(self):
        response = self.client.post('/api/auth/sendVerifyOtp')
        self.assertEqual(response.data, {'success': True, 'message': 'OTP sent successfully'})

        self.user.refresh_from_db()
        otp = self.user.verify_otp
        self.assertEqual(len(mail.outbox), 1)
        self.assertIn(otp, mail.outbox[0].body)

        response = self.client.post('/api/auth/verifyAccount', {'otp': otp}, format='json')
        self.assertEqual(response.data, {'success': True, 'message': 'Email verified successfully'})
        self.user.refresh_from_db()
        self.assertTrue(self.user.is_account_verified)

        response = self.client.post('/api/auth/sendVerifyOtp')
        self.assertEqual(response.data, {'success': False, 'message': 'Account already verified'})

    def test_verify_with_wrong_otp(self):
        self.client.post('/api/auth/sendVerifyOtp')
        response = self.client.post('/api/auth/verifyAccount', {'otp': 'abcdef'}, format='json')
        self.assertEqual(response.data, {'success': False, 'message': 'Invalid OTP'})

    def test_send_verify_otp_requires_login(self):
        self.client.cookies.pop(settings.AUTH_COOKIE['NAME'])
        response = self.client.post('/api/auth/sendVerifyOtp')
        self.assertEqual(response.status_code, status.HTTP_401_UNAUTHORIZED)
        self.assertEqual(response.data, {'success': False, 'message': 'Unauthorized access'})

    def test_otp_email_failure_is_an_internal_error(self):
        with mock.patch('teamup.notifications.send_mail', side_effect=SMTPException('down')):
            response = self.client.post('/api/auth/sendVerifyOtp')
        self.assertEqual(response.status_code, status.HTTP_500_INTERNAL_SERVER_ERROR)
        self.assertEqual(response.data, {'success': False, 'message': 'Internal server error'})


class PasswordResetFlowTest(APITestCase):
    def setUp(self):
        self.user = User.objects.create_user(email='test@example.com', name='John', password='testpass123')

    def test_reset_flow(self):
        response = self.client.post('/api/auth/sendResetOtp', {'email': 'test@example.com'}, format='json')
        self.assertEqual(response.data, {'success': True, 'message': 'OTP sent successfully'})

        self.user.refresh_from_db()
        data = {'email': 'test@example.com', 'otp': self.user.reset_otp, 'newPassword': 'newpass456'}
        response = self.client.post('/api/auth/resetPassword', data, format='json')
        self.assertEqual(response.data, {'success': True, 'message': 'Password reset successfully'})

        response = self.client.post(
            '/api/auth/login', {'email': 'test@example.com', 'password': 'newpass456'}, format='json'
        )
        self.assertTrue(response.data['success'])

    def test_reset_unknown_email(self):
        response = self.client.post('/api/auth/sendResetOtp', {'email': 'nobody@example.com'}, format='json')
        self.assertEqual(response.data, {'success': False, 'message': 'User not found'})

    def test_reset_missing_fields(self):
        response = self.client.post('/api/auth/resetPassword', {'email': 'test@example.com'}, format='json')
        self.assertEqual(response.data, {'success': False, 'message': 'Please fill all the fields'})

    def test_reset_with_expired_otp(self):
        self.user.reset_otp = '654321'
        self.user.reset_otp_expire_at = now() - timedelta(seconds=5)
        self.user.save()
        data = {'email': 'test@example.com', 'otp': '654321', 'newPassword': 'newpass456'}
        response = self.client.post('/api/auth/resetPassword', data, format='json')
        self.assertEqual(response.data, {'success': False, 'message': 'OTP expired'})
        self.user.refresh_from_db()
        self.assertTrue(self.user.check_password('testpass123'))
