"""Property domain models for the glamping site.

``Property`` is the catalogue entry guests book (domes, treehouses, cabins).
``PropertyAvailability`` is the per-property calendar document: a map of
day keys to availability entries plus the list of owner/maintenance holds.
Both JSON fields keep exactly the shape the admin console and the guest
pages read.
"""

from __future__ import annotations

from decimal import Decimal

from django.core.validators import MaxValueValidator, MinValueValidator  # type: ignore
from django.db import models  # type: ignore
from django.utils import timezone  # type: ignore
from django.utils.text import slugify  # type: ignore
from django.utils.translation import gettext_lazy as _  # type: ignore

from shared.domain.value_objects import SUPPORTED_CURRENCIES

CURRENCY_CHOICES = [(code, code) for code in SUPPORTED_CURRENCIES]


class Property(models.Model):
    """A bookable glamping unit."""

    class Status(models.TextChoices):
        DRAFT = "draft", _("Draft")
        ACTIVE = "active", _("Active")
        INACTIVE = "inactive", _("Inactive")

    class PropertyType(models.TextChoices):
        DOME = "dome", _("Dome")
        TREEHOUSE = "treehouse", _("Treehouse")
        CABIN = "cabin", _("Cabin")
        TENT = "tent", _("Safari tent")
        YURT = "yurt", _("Yurt")

    name = models.CharField(max_length=255)
    slug = models.SlugField(max_length=255, unique=True, blank=True)
    description = models.TextField(blank=True)
    short_description = models.CharField(max_length=255, blank=True)
    property_type = models.CharField(
        max_length=20,
        choices=PropertyType.choices,
        default=PropertyType.DOME,
    )
    status = models.CharField(max_length=20, choices=Status.choices, default=Status.DRAFT)
    max_guests = models.PositiveSmallIntegerField(default=2, validators=[MinValueValidator(1)])
    bedrooms = models.PositiveSmallIntegerField(default=1)
    beds = models.PositiveSmallIntegerField(default=1)
    bathrooms = models.PositiveSmallIntegerField(default=1)
    min_nights = models.PositiveSmallIntegerField(default=1, validators=[MinValueValidator(1)])
    base_price = models.DecimalField(max_digits=10, decimal_places=2)
    cleaning_fee = models.DecimalField(max_digits=10, decimal_places=2, default=Decimal("0.00"))
    service_fee = models.DecimalField(
        max_digits=5,
        decimal_places=2,
        default=Decimal("0.00"),
        validators=[MinValueValidator(Decimal("0")), MaxValueValidator(Decimal("100"))],
        help_text=_("Service fee, percent of the nightly subtotal."),
    )
    tax_rate = models.DecimalField(
        max_digits=5,
        decimal_places=2,
        default=Decimal("0.00"),
        validators=[MinValueValidator(Decimal("0")), MaxValueValidator(Decimal("100"))],
        help_text=_("Tax, percent of subtotal plus fees."),
    )
    currency = models.CharField(max_length=3, choices=CURRENCY_CHOICES, default="USD")
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        verbose_name = _("Property")
        verbose_name_plural = _("Properties")
        ordering = ["name"]
        indexes = [
            models.Index(fields=["status"], name="property_status_idx"),
        ]

    def __str__(self) -> str:
        return self.name

    @property
    def is_bookable(self) -> bool:
        return self.status == self.Status.ACTIVE

    def save(self, *args, **kwargs):  # type: ignore
        if not self.slug:
            base_slug = slugify(self.name)[:200] or "property"
            candidate = base_slug
            counter = 1
            while self.__class__.objects.filter(slug=candidate).exclude(pk=self.pk).exists():
                counter += 1
                candidate = f"{base_slug}-{counter}"
            self.slug = candidate
        super().save(*args, **kwargs)


class PropertyAvailability(models.Model):
    """Availability calendar document, one per property.

    ``dates`` maps ``YYYY-MM-DD`` to ``{isAvailable, price?, minimumStay?,
    notes?, bookingId?}``. ``blocked_ranges`` holds ``{startDate, endDate,
    reason}`` half-open holds with ISO-8601 UTC timestamps. ``version`` is
    the optimistic concurrency token checked on every save.
    """

    property = models.OneToOneField(
        Property,
        on_delete=models.CASCADE,
        related_name="availability",
    )
    dates = models.JSONField(default=dict, blank=True)
    blocked_ranges = models.JSONField(default=list, blank=True)
    version = models.PositiveIntegerField(default=0)
    last_updated = models.DateTimeField(default=timezone.now)

    class Meta:
        verbose_name = _("Property availability")
        verbose_name_plural = _("Property availability")

    def __str__(self) -> str:
        return f"Availability for {self.property_id} (v{self.version})"
