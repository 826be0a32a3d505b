from django.conf import settings


def brand_context(request):
    """
    Inject branding into all templates.
    """
    return {
        "BRAND_NAME": getattr(settings, "BRAND_NAME", "Invoicing"),
        "BRAND_TAGLINE": getattr(settings, "BRAND_TAGLINE", ""),
    }
