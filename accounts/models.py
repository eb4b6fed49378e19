from django.contrib.auth.models import AbstractUser, BaseUserManager
from django.db import models
from django.utils.timezone import now


class CustomUserManager(BaseUserManager):
    def create_user(self, email, password=None, **extra_fields):
        if not email:
            raise ValueError('The Email field must be set')
        email = self.normalize_email(email)
        user = self.model(email=email, **extra_fields)
        user.set_password(password)
        user.save(using=self._db)
        return user

    def create_superuser(self, email, password=None, **extra_fields):
        extra_fields.setdefault('is_staff', True)
        extra_fields.setdefault('is_superuser', True)
        return self.create_user(email, password, **extra_fields)


class CustomUser(AbstractUser):
    username = None
    first_name = None
    last_name = None
    name = models.CharField(max_length=150, unique=True)
    email = models.EmailField(unique=True)  # Login field
    domain = models.CharField(max_length=100, blank=True, default='')
    is_account_verified = models.BooleanField(default=False)

    # Verification and password reset use independent one-time passwords
    verify_otp = models.CharField(max_length=6, blank=True, default='')
    verify_otp_expire_at = models.DateTimeField(blank=True, null=True)
    reset_otp = models.CharField(max_length=6, blank=True, default='')
    reset_otp_expire_at = models.DateTimeField(blank=True, null=True)

    USERNAME_FIELD = 'email'
    REQUIRED_FIELDS = ['name']

    objects = CustomUserManager()

    def save(self, *args, **kwargs):
        self.domain = (self.domain or '').strip().lower()
        super().save(*args, **kwargs)

    @property
    def token_domain(self):
        """Domain carried in the session token, falling back to the email's domain."""
        if self.domain:
            return self.domain
        return self.email.rpartition('@')[2].strip().lower()

    def otp_expired(self, expiry_field):
        expires_at = getattr(self, expiry_field)
        return expires_at is None or expires_at < now()

    def get_full_name(self):
        return self.name

    def get_short_name(self):
        return self.name

    def __str__(self):
        return self.email
