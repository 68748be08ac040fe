from django.db import models


class Counter(models.Model):
    """Monotonic counter per identifier prefix, e.g. ``staff_ADM24AD``."""

    key = models.CharField(max_length=64, unique=True)
    current = models.PositiveIntegerField(default=0)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        ordering = ['key']

    def __str__(self):
        return f"{self.key}={self.current}"
