from django.db import models


class PaymentFrequency(models.TextChoices):
    DAILY = 'daily', 'Daily'
    WEEKLY = 'weekly', 'Weekly'
    BI_WEEKLY = 'bi_weekly', 'Bi-Weekly'
    MONTHLY = 'monthly', 'Monthly'
    QUARTERLY = 'quarterly', 'Quarterly'
    HALF_YEARLY = 'half_yearly', 'Half-Yearly'
    YEARLY = 'yearly', 'Yearly'

    @classmethod
    def days(cls, value):
        """Nominal length of one period in days."""
        return FREQUENCY_DAYS[cls(value)]


FREQUENCY_DAYS = {
    PaymentFrequency.DAILY: 1,
    PaymentFrequency.WEEKLY: 7,
    PaymentFrequency.BI_WEEKLY: 14,
    PaymentFrequency.MONTHLY: 30,
    PaymentFrequency.QUARTERLY: 90,
    PaymentFrequency.HALF_YEARLY: 180,
    PaymentFrequency.YEARLY: 365,
}


class PaymentMethod(models.TextChoices):
    CASH = 'cash', 'Cash'
    BANK_TRANSFER = 'bank_transfer', 'Bank Transfer'
    MOBILE_MONEY = 'mobile_money', 'Mobile Money'
    ASSIST_CENTER = 'assist_center', 'Assist Center'


class PaymentStatus(models.TextChoices):
    PENDING = 'pending', 'Pending'
    PAID = 'paid', 'Paid'
    FAILED = 'failed', 'Failed'
    UNPAID = 'unpaid', 'Unpaid'


# Statuses that still represent money owed by the trader
OUTSTANDING_STATUSES = (
    PaymentStatus.PENDING,
    PaymentStatus.UNPAID,
    PaymentStatus.FAILED,
)
