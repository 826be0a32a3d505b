from decimal import Decimal

from django import template

from invoicing.exceptions import ValidationError
from invoicing.utils.finance import to_decimal

register = template.Library()


@register.filter
def currency(value):
    """1234.5 -> $1,234.50"""
    try:
        amount = to_decimal(value)
    except ValidationError:
        return value
    sign = "-" if amount < 0 else ""
    return f"{sign}${abs(amount):,.2f}"


@register.filter
def trend(value):
    """Absolute percentage with one decimal, e.g. 12.5%"""
    amount = to_decimal(value)
    return f"{abs(amount):.1f}%"


@register.filter
def is_negative(value):
    return to_decimal(value) < Decimal("0")


@register.simple_tag
def query_transform(query, **kwargs):
    """
    Returns the URL-encoded querystring with updated parameters.
    Usage: {% query_transform request.GET page=2 %}
    """
    query = query.copy()
    for key, value in kwargs.items():
        query[key] = value
    return query.urlencode()


@register.filter
def payment_badge(status):
    return {
        "Paid": "bg-success",
        "Partial": "bg-info",
        "Pending": "bg-warning text-dark",
    }.get(status, "bg-secondary")
