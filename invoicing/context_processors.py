from .models import CompanyProfile


def company_profile(request):
    """
    Expose the signed-in user's default issuing company to every template.
    """
    user = getattr(request, "user", None)
    profile = None
    if user is not None and user.is_authenticated:
        profile = CompanyProfile.get_default(user)

    return {
        "COMPANY_PROFILE": profile,
    }
