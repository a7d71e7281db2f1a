"""Built-in message texts used when no active template exists for a type."""

import os

from tailoring.messaging.template import TemplateType

DEFAULT_SHOP_NAME = "The Darji"


def shop_name() -> str:
    return os.getenv("SHOP_NAME", DEFAULT_SHOP_NAME)


DEFAULT_TEMPLATES: dict[str, str] = {
    TemplateType.ORDER_CONFIRMATION.value: (
        "Thank you for choosing {{shopName}}!\n\n"
        "We have received your order #{{orderNumber}} and will soon start working on it with care.\n\n"
        "Total Amount: Rs {{totalAmount}}\n"
        "Advance Paid: Rs {{advance}}\n"
        "Balance Due: Rs {{balance}}\n\n"
        "We look forward to creating something special for you!"
    ),
    TemplateType.ORDER_READY.value: (
        "Dear {{clientName}},\n\n"
        "Your order #{{orderNumber}} is ready for pickup.\n"
        "Balance Due: Rs {{balance}}\n\n"
        "- Team {{shopName}}"
    ),
    TemplateType.POST_DELIVERY.value: (
        "Thank you for trusting {{shopName}}!\n\n"
        "We hope you love your custom-stitched outfit from order #{{orderNumber}}.\n\n"
        "Your satisfaction is our priority. We look forward to serving you again!\n\n"
        "- Team {{shopName}}"
    ),
    TemplateType.TRIAL_REMINDER.value: (
        "Dear {{clientName}},\n\n"
        "This is a reminder that the trial fitting for order #{{orderNumber}} is on {{trialDate}}.\n\n"
        "- Team {{shopName}}"
    ),
    TemplateType.DELIVERY_REMINDER.value: (
        "Dear {{clientName}},\n\n"
        "Your order #{{orderNumber}} is scheduled for delivery on {{deliveryDate}}.\n\n"
        "- Team {{shopName}}"
    ),
    TemplateType.PAYMENT_REMINDER.value: (
        "Dear {{clientName}},\n\n"
        "A balance of Rs {{balance}} is pending on order #{{orderNumber}}.\n\n"
        "- Team {{shopName}}"
    ),
    TemplateType.INACTIVE_CLIENT.value: (
        "Hello from {{shopName}}!\n\n"
        "It's been a while since we crafted something special for you. "
        "Time to refresh your wardrobe with new custom outfits?\n\n"
        "- Team {{shopName}}"
    ),
}
