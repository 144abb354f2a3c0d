from django.contrib.auth.models import AbstractUser
from django.db import models


class User(AbstractUser):
    class Role(models.TextChoices):
        CLERK = 'clerk', 'Clerk'
        SUPERINTENDENT = 'superintendent', 'Superintendent'
        XEROX_OPERATOR = 'xerox_operator', 'Xerox Operator'
        ADMIN = 'admin', 'Admin'

    full_name = models.CharField(max_length=255, blank=True)
    role = models.CharField(max_length=50, choices=Role.choices, default=Role.CLERK)
    # Initials are stamped on register entries the user opens.
    initials = models.CharField(max_length=10, blank=True)
    # is_active comes from AbstractUser (default=True).

    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    def __str__(self):
        return self.username

    def get_initials(self):
        if self.initials:
            return self.initials
        source = self.full_name or self.get_full_name() or self.username
        return ''.join(part[0] for part in source.split() if part).upper()[:10]
