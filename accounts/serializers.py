from django.contrib.auth import get_user_model
from rest_framework import serializers

User = get_user_model()


class RequiredFieldsSerializer(serializers.Serializer):
    """Blank or missing fields all collapse into one 'fill all the fields' error."""
    missing_message = 'Please fill all the fields'

    def validate(self, attrs):
        if any(not attrs.get(field) for field in self.fields):
            raise serializers.ValidationError(self.missing_message)
        return attrs


class UserRegistrationSerializer(RequiredFieldsSerializer):
    name = serializers.CharField(max_length=150, required=False, allow_blank=True)
    email = serializers.EmailField(required=False, allow_blank=True)
    password = serializers.CharField(write_only=True, required=False, allow_blank=True, trim_whitespace=False)


class UserLoginSerializer(RequiredFieldsSerializer):
    email = serializers.EmailField(required=False, allow_blank=True)
    password = serializers.CharField(write_only=True, required=False, allow_blank=True, trim_whitespace=False)


class VerifyAccountSerializer(RequiredFieldsSerializer):
    missing_message = 'Please provide the OTP'
    otp = serializers.CharField(max_length=6, required=False, allow_blank=True)


class PasswordResetRequestSerializer(RequiredFieldsSerializer):
    missing_message = 'Please provide an email'
    email = serializers.EmailField(required=False, allow_blank=True)


class ResetPasswordSerializer(RequiredFieldsSerializer):
    email = serializers.EmailField(required=False, allow_blank=True)
    otp = serializers.CharField(max_length=6, required=False, allow_blank=True)
    newPassword = serializers.CharField(
        source='new_password', write_only=True, required=False, allow_blank=True, trim_whitespace=False
    )

    def validate(self, attrs):
        if not all(attrs.get(field) for field in ('email', 'otp', 'new_password')):
            raise serializers.ValidationError(self.missing_message)
        return attrs


class ProfileSerializer(serializers.ModelSerializer):
    isAccountVerified = serializers.BooleanField(source='is_account_verified', read_only=True)

    class Meta:
        model = User
        fields = ['name', 'email', 'isAccountVerified']
        read_only_fields = ['name', 'email']
