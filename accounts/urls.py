from django.urls import path
from .views import (
    IsAuthenticatedView,
    LogoutView,
    ProfileDetailView,
    ResetPasswordView,
    SendResetOtpView,
    SendVerifyOtpView,
    UserLoginView,
    UserRegistrationView,
    VerifyAccountView,
)


urlpatterns = [
    path('register', UserRegistrationView.as_view(), name='user_register'),
    path('login', UserLoginView.as_view(), name='login'),
    path('logout', LogoutView.as_view(), name='logout'),
    path('sendVerifyOtp', SendVerifyOtpView.as_view(), name='send-verify-otp'),
    path('verifyAccount', VerifyAccountView.as_view(), name='verify-account'),
    path('isAuthenticated', IsAuthenticatedView.as_view(), name='is-authenticated'),
    path('sendResetOtp', SendResetOtpView.as_view(), name='send-reset-otp'),
    path('resetPassword', ResetPasswordView.as_view(), name='reset-password'),
]

# Mounted under /api/user/
profile_urlpatterns = [
    path('profile', ProfileDetailView.as_view(), name='profile-detail'),
]
