from rest_framework import permissions, status
from rest_framework.response import Response
from rest_framework.views import APIView
from drf_yasg.utils import swagger_auto_schema
from drf_yasg import openapi

from teamup.exceptions import flatten_detail
from .authentication import clear_session_cookie, issue_session_token, set_session_cookie
from .serializers import (
    PasswordResetRequestSerializer,
    ProfileSerializer,
    ResetPasswordSerializer,
    UserLoginSerializer,
    UserRegistrationSerializer,
    VerifyAccountSerializer,
)
from . import services


envelope_response = openapi.Response(
    description="Outcome envelope; `success` carries the real result",
    schema=openapi.Schema(
        type=openapi.TYPE_OBJECT,
        properties={
            "success": openapi.Schema(type=openapi.TYPE_BOOLEAN),
            "message": openapi.Schema(type=openapi.TYPE_STRING),
        },
    ),
)


def failure(message, status_code=status.HTTP_200_OK):
    return Response({"success": False, "message": message}, status=status_code)


def invalid_input(serializer):
    return failure(flatten_detail(serializer.errors))


class UserRegistrationView(APIView):
    permission_classes = [permissions.AllowAny]

    @swagger_auto_schema(
        operation_summary="Register a new user",
        operation_description="Creates the user, logs them in via the token cookie and sends a welcome email.",
        request_body=UserRegistrationSerializer,
        responses={200: envelope_response},
    )
    def post(self, request):
        serializer = UserRegistrationSerializer(data=request.data)
        if not serializer.is_valid():
            return invalid_input(serializer)

        try:
            user = services.register_user(**serializer.validated_data)
        except services.AccountError as exc:
            return failure(str(exc))

        response = Response({"success": True, "message": "User created successfully"})
        return set_session_cookie(response, issue_session_token(user))


class UserLoginView(APIView):
    permission_classes = [permissions.AllowAny]

    @swagger_auto_schema(
        operation_summary="Log in",
        operation_description="Checks credentials and sets the session token cookie.",
        request_body=UserLoginSerializer,
        responses={200: envelope_response},
    )
    def post(self, request):
        serializer = UserLoginSerializer(data=request.data)
        if not serializer.is_valid():
            return invalid_input(serializer)

        try:
            user = services.authenticate_user(**serializer.validated_data)
        except services.AccountError as exc:
            return failure(str(exc))

        response = Response({"success": True, "message": "Login successful"})
        return set_session_cookie(response, issue_session_token(user))


class LogoutView(APIView):
    permission_classes = [permissions.AllowAny]

    @swagger_auto_schema(operation_summary="Log out", responses={200: envelope_response})
    def post(self, request):
        response = Response({"success": True, "message": "Logout successful"})
        return clear_session_cookie(response)


class SendVerifyOtpView(APIView):
    @swagger_auto_schema(
        operation_summary="Send account verification OTP",
        operation_description="Emails a 6-digit OTP to the logged-in user.",
        responses={200: envelope_response, 401: "Unauthorized"},
    )
    def post(self, request):
        try:
            services.send_verify_otp(request.user)
        except services.AccountError as exc:
            return failure(str(exc))
        return Response({"success": True, "message": "OTP sent successfully"})


class VerifyAccountView(APIView):
    @swagger_auto_schema(
        operation_summary="Verify account",
        operation_description="Consumes the verification OTP and marks the account verified.",
        request_body=VerifyAccountSerializer,
        responses={200: envelope_response, 401: "Unauthorized"},
    )
    def post(self, request):
        serializer = VerifyAccountSerializer(data=request.data)
        if not serializer.is_valid():
            return invalid_input(serializer)

        try:
            services.verify_account(request.user, serializer.validated_data["otp"])
        except services.AccountError as exc:
            return failure(str(exc))
        return Response({"success": True, "message": "Email verified successfully"})


class IsAuthenticatedView(APIView):
    @swagger_auto_schema(operation_summary="Check the session", responses={200: envelope_response})
    def post(self, request):
        return Response({"success": True})


class SendResetOtpView(APIView):
    permission_classes = [permissions.AllowAny]

    @swagger_auto_schema(
        operation_summary="Request password reset",
        operation_description="Emails a 6-digit password reset OTP if the email belongs to an account.",
        request_body=PasswordResetRequestSerializer,
        responses={200: envelope_response},
    )
    def post(self, request):
        serializer = PasswordResetRequestSerializer(data=request.data)
        if not serializer.is_valid():
            return invalid_input(serializer)

        try:
            services.send_reset_otp(serializer.validated_data["email"])
        except services.AccountError as exc:
            return failure(str(exc))
        return Response({"success": True, "message": "OTP sent successfully"})


class ResetPasswordView(APIView):
    permission_classes = [permissions.AllowAny]

    @swagger_auto_schema(
        operation_summary="Reset password",
        operation_description="Consumes the reset OTP and sets the new password.",
        request_body=ResetPasswordSerializer,
        responses={200: envelope_response},
    )
    def post(self, request):
        serializer = ResetPasswordSerializer(data=request.data)
        if not serializer.is_valid():
            return invalid_input(serializer)

        try:
            services.reset_password(**serializer.validated_data)
        except services.AccountError as exc:
            return failure(str(exc))
        return Response({"success": True, "message": "Password reset successfully"})


class ProfileDetailView(APIView):
    @swagger_auto_schema(
        operation_summary="Current user profile",
        responses={200: ProfileSerializer, 401: "Unauthorized"},
    )
    def get(self, request):
        return Response({"success": True, "userdata": ProfileSerializer(request.user).data})
